"""Tests for role configuration service."""

import pytest

from core.exceptions import (
    InsufficientCardsError,
    LeaderCountError,
    MissingLeaderError,
    PlayerBoundsError,
    PresetNotFoundError,
    RoleConfigurationError,
    TooManyRolesError,
)
from core.role_config import RoleConfiguration
from core.roles import RoleType
from core.settings import ServerSettings
from services.role_config_service import RoleConfigService

L, G, A, T = RoleType.LEADER, RoleType.GUARDIAN, RoleType.ASSASSIN, RoleType.TRAITOR


@pytest.fixture
def sparse_service(card_pool):
    """Service whose presets only cover a few player counts."""
    settings = ServerSettings(
        presets={
            "standard": {
                "name": "Standard",
                "distributions": {
                    4: {"leader": 1, "guardian": 2, "traitor": 1},
                    6: {"leader": 1, "guardian": 2, "assassin": 2, "traitor": 1},
                },
            },
            "crowded": {
                "name": "Crowded",
                "distributions": {8: {"leader": 1, "guardian": 3, "assassin": 2, "traitor": 2}},
            },
            "headless": {"name": "Headless", "distributions": {3: {"guardian": 2, "traitor": 1}}},
            "empty": {"name": "Empty"},
        }
    )
    return RoleConfigService(settings, card_pool)


def preset(name: str, **kwargs) -> RoleConfiguration:
    return RoleConfiguration(preset_name=name, **kwargs)


class TestDistribution:
    """Tests for get_distribution_for_player_count."""

    @pytest.mark.parametrize("player_count", range(1, 9))
    def test_standard_preset_matches_player_count(self, role_service, player_count):
        distribution = role_service.get_distribution_for_player_count(preset("standard"), player_count)
        assert sum(distribution.values()) == player_count
        assert distribution[L] == 1

    def test_beyond_table_adds_guardians(self, role_service):
        distribution = role_service.get_distribution_for_player_count(preset("standard"), 10)
        assert distribution == {L: 1, G: 5, A: 2, T: 2}

    def test_tie_uses_smaller_entry(self, sparse_service):
        distribution = sparse_service.get_distribution_for_player_count(preset("standard"), 5)
        assert distribution == {L: 1, G: 3, A: 0, T: 1}

    def test_shrinks_guardians_to_one(self, sparse_service):
        distribution = sparse_service.get_distribution_for_player_count(preset("crowded"), 5)
        assert distribution == {L: 1, G: 1, A: 2, T: 2}

    def test_leader_injected(self, sparse_service):
        distribution = sparse_service.get_distribution_for_player_count(preset("headless"), 3)
        assert distribution == {L: 1, G: 1, A: 0, T: 1}

    def test_leaderless_preset_kept(self, sparse_service):
        config = preset("headless", allow_leaderless_game=True)
        distribution = sparse_service.get_distribution_for_player_count(config, 3)
        assert distribution == {L: 0, G: 2, A: 0, T: 1}

    def test_custom_counts_used_as_is(self, role_service, custom_config):
        distribution = role_service.get_distribution_for_player_count(custom_config, 7)
        assert distribution == {L: 1, G: 2, A: 1, T: 1}

    def test_leaderless_custom_has_no_leader(self, role_service):
        config = RoleConfiguration(
            allow_leaderless_game=True,
            role_types={"guardian": {"count": 2}, "traitor": {"count": 1}},
        )
        distribution = role_service.get_distribution_for_player_count(config, 3)
        assert distribution == {L: 0, G: 2, A: 0, T: 1}

    def test_custom_too_many_roles(self, role_service, custom_config):
        with pytest.raises(TooManyRolesError) as exc_info:
            role_service.get_distribution_for_player_count(custom_config, 3)
        assert exc_info.value.total_roles == 5
        assert exc_info.value.player_count == 3

    def test_unknown_preset(self, role_service):
        with pytest.raises(PresetNotFoundError):
            role_service.get_distribution_for_player_count(preset("missing"), 4)

    def test_preset_without_distributions(self, sparse_service):
        with pytest.raises(RoleConfigurationError):
            sparse_service.get_distribution_for_player_count(preset("empty"), 4)


class TestCanAutoScale:
    """Tests for can_auto_scale."""

    def test_custom(self, role_service, custom_config):
        assert role_service.can_auto_scale(custom_config, 6) == (
            False,
            "Custom configurations do not support auto-scaling",
        )

    def test_missing_preset(self, role_service):
        assert role_service.can_auto_scale(preset("missing"), 6) == (False, "Preset 'missing' not found")

    def test_no_distributions(self, sparse_service):
        assert sparse_service.can_auto_scale(preset("empty"), 6) == (False, "Preset 'empty' has no distributions")

    def test_exact_entry(self, sparse_service):
        can_scale, details = sparse_service.can_auto_scale(preset("standard"), 6)
        assert can_scale
        assert details == "Preset 'standard' has a distribution for 6 players"

    def test_scale_up(self, sparse_service):
        can_scale, details = sparse_service.can_auto_scale(preset("standard"), 9)
        assert can_scale
        assert "adding 3 guardian role(s)" in details
        assert "6-player standard preset" in details

    def test_scale_down(self, sparse_service):
        can_scale, details = sparse_service.can_auto_scale(preset("crowded"), 6)
        assert can_scale
        assert "removing 2 guardian role(s)" in details

    def test_cannot_scale_down_past_one_guardian(self, sparse_service):
        assert sparse_service.can_auto_scale(preset("crowded"), 5) == (
            False,
            "Cannot scale crowded preset from 8 to 5 players",
        )


class TestValidateConfiguration:
    """Tests for validate_configuration."""

    def test_valid(self, role_service, custom_config):
        role_service.validate_configuration(custom_config)

    def test_too_few_cards(self, role_service):
        config = RoleConfiguration(role_types={"leader": {"count": 1}, "assassin": {"count": 4}})
        with pytest.raises(InsufficientCardsError) as exc_info:
            role_service.validate_configuration(config)
        assert exc_info.value.requested == 4
        assert exc_info.value.enabled == 3

    def test_only_enabled_cards_count(self, role_service):
        config = RoleConfiguration(
            role_types={"leader": {"count": 1}, "traitor": {"count": 2, "enabled_cards": {"Traitor 1", "Unknown"}}}
        )
        with pytest.raises(InsufficientCardsError) as exc_info:
            role_service.validate_configuration(config)
        assert exc_info.value.enabled == 1

    def test_two_leaders(self, role_service):
        config = RoleConfiguration(role_types={"leader": {"count": 2}})
        with pytest.raises(LeaderCountError):
            role_service.validate_configuration(config)

    def test_missing_leader(self, role_service):
        with pytest.raises(MissingLeaderError):
            role_service.validate_configuration(RoleConfiguration(role_types={"guardian": {"count": 2}}))

    def test_leaderless_allowed(self, role_service):
        config = RoleConfiguration(allow_leaderless_game=True, role_types={"guardian": {"count": 2}})
        role_service.validate_configuration(config)

    def test_max_players_above_server_limit(self, role_service, custom_config):
        custom_config.max_players = 25
        with pytest.raises(PlayerBoundsError) as exc_info:
            role_service.validate_configuration(custom_config)
        assert exc_info.value.field == "max_players"

    def test_min_players_below_server_limit(self, role_service, custom_config):
        custom_config.min_players = 0
        with pytest.raises(PlayerBoundsError) as exc_info:
            role_service.validate_configuration(custom_config)
        assert exc_info.value.field == "min_players"

    def test_without_card_pool_cards_are_not_checked(self, settings):
        service = RoleConfigService(settings)
        config = RoleConfiguration(role_types={"leader": {"count": 1}, "guardian": {"count": 15}})
        service.validate_configuration(config)


class TestConstruction:
    """Tests for building configurations."""

    def test_create_from_preset(self, role_service, card_pool):
        config = role_service.create_from_preset("standard", 5)

        assert config.preset_name == "standard"
        assert config.counts() == {L: 1, G: 2, A: 1, T: 1}
        assert config.min_players == 1
        assert config.max_players == 20
        assert config.role_types[G].enabled_cards == card_pool.card_names(G)

    def test_create_from_preset_min_players(self, sparse_service):
        assert sparse_service.create_from_preset("crowded", 10).min_players == 8
        assert sparse_service.create_from_preset("crowded", 5).min_players == 5

    def test_create_from_unknown_preset(self, role_service):
        with pytest.raises(PresetNotFoundError):
            role_service.create_from_preset("missing", 5)

    def test_create_default_configuration(self, role_service):
        config = role_service.create_default_configuration()
        assert config.is_custom
        assert config.counts() == {L: 1}


class TestEditing:
    """Tests for editing operations."""

    def test_adjust_makes_config_custom(self, role_service):
        config = role_service.create_from_preset("standard", 5)

        assert role_service.adjust_role_count(config, "guardian", 1) == 3
        assert config.is_custom
        assert config.min_players == 6
        assert config.max_players == 6

    def test_adjust_never_goes_negative(self, role_service, custom_config):
        assert role_service.adjust_role_count(custom_config, T, -5) == 0

    def test_set_same_count_keeps_preset(self, role_service):
        config = role_service.create_from_preset("standard", 5)
        role_service.set_role_count(config, L, 1)
        assert config.preset_name == "standard"

    def test_set_negative_count(self, role_service, custom_config):
        with pytest.raises(RoleConfigurationError):
            role_service.set_role_count(custom_config, G, -1)

    def test_second_leader_rejected(self, role_service, custom_config):
        with pytest.raises(LeaderCountError) as exc_info:
            role_service.adjust_role_count(custom_config, "leader", 1)
        assert exc_info.value.count == 2
        assert custom_config.role_types[L].count == 1

    def test_set_leader_count_above_one(self, role_service, custom_config):
        with pytest.raises(LeaderCountError):
            role_service.set_role_count(custom_config, L, 3)

    def test_unknown_role_type(self, role_service, custom_config):
        with pytest.raises(RoleConfigurationError):
            role_service.adjust_role_count(custom_config, "wizard", 1)

    def test_toggle_card(self, role_service, custom_config):
        role_service.toggle_card(custom_config, "assassin", "Assassin 1", False)
        assert custom_config.role_types[A].enabled_cards == {"Assassin 2", "Assassin 3"}

        role_service.toggle_card(custom_config, "assassin", "Assassin 1", True)
        assert "Assassin 1" in custom_config.role_types[A].enabled_cards

    def test_cannot_disable_every_card(self, role_service, custom_config):
        role_service.toggle_card(custom_config, "traitor", "Traitor 1", False)
        role_service.toggle_card(custom_config, "traitor", "Traitor 2", False)

        with pytest.raises(RoleConfigurationError, match="cannot disable every Traitor card"):
            role_service.toggle_card(custom_config, "traitor", "Traitor 3", False)
        assert custom_config.role_types[T].enabled_cards == {"Traitor 3"}
        role_service.validate_configuration(custom_config)

    def test_disabling_leaderless_restores_leader(self, role_service):
        config = RoleConfiguration(allow_leaderless_game=True, role_types={"guardian": {"count": 2}})
        role_service.set_leaderless(config, False)
        assert config.role_types[L].count == 1
        assert not config.allow_leaderless_game

    def test_preset_limits_reach_server_max(self, role_service):
        config = role_service.create_from_preset("standard", 5)
        role_service.update_player_limits(config)
        assert config.min_players == 5
        assert config.max_players == 20


class TestListing:
    """Tests for role and preset listings."""

    def test_sorted_roles(self, role_service):
        names = [name for name, _ in role_service.get_sorted_roles()]
        assert names == ["leader", "guardian", "traitor", "assassin"]

    def test_preset_names(self, sparse_service):
        assert sparse_service.preset_names() == ["crowded", "empty", "headless", "standard"]
