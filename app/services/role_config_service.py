"""Role configuration service: presets, auto-scaling and validation."""

from __future__ import annotations

from typing import TYPE_CHECKING

import structlog

from core.constants import CUSTOM_PRESET
from core.exceptions import (
    InsufficientCardsError,
    LeaderCountError,
    MissingLeaderError,
    PlayerBoundsError,
    PresetNotFoundError,
    RoleConfigurationError,
    TooManyRolesError,
)
from core.role_config import RoleConfiguration, RoleTypeConfig
from core.roles import ROLE_ORDER, RoleType

if TYPE_CHECKING:
    from core.cards import CardPool
    from core.settings import Preset, RoleDefinition, ServerSettings

logger = structlog.get_logger()

# Setup screen order for role definitions after always-revealed roles
_CATEGORY_ORDER = {
    RoleType.LEADER: 1,
    RoleType.GUARDIAN: 2,
    RoleType.TRAITOR: 3,
    RoleType.ASSASSIN: 4,
}


class RoleConfigService:
    """Turns role configurations into per-role-type counts.

    Guardian is the flex role: preset distributions grow or shrink to the
    requested player count by changing the Guardian count only.
    """

    def __init__(self, settings: ServerSettings, card_pool: CardPool | None = None):
        self.settings = settings
        self.card_pool = card_pool

    # Distribution

    def get_distribution_for_player_count(self, config: RoleConfiguration, player_count: int) -> dict[RoleType, int]:
        """Resolve how many players get each role type.

        Custom configurations use their counts as-is. Presets use the entry
        for the player count, or the nearest entry adapted through Guardians.

        Args:
            config: The room's role configuration
            player_count: Number of players receiving roles

        Returns:
            Counts for all four role types

        Raises:
            TooManyRolesError: If a custom configuration has more roles than players
            PresetNotFoundError: If the preset doesn't exist
            RoleConfigurationError: If the preset has no distributions
        """
        if config.is_custom:
            result = {role_type: config.role_types[role_type].count for role_type in ROLE_ORDER}
            total = sum(result.values())
            if total > player_count:
                raise TooManyRolesError(total, player_count)
            return result

        preset = self._get_preset(config.preset_name)
        source_count = self._nearest_player_count(preset, player_count)
        result = self._preset_counts(preset.distributions[source_count])

        if result[RoleType.LEADER] == 0 and not config.allow_leaderless_game:
            result[RoleType.LEADER] = 1

        total = sum(result.values())
        if total < player_count:
            result[RoleType.GUARDIAN] += player_count - total
        while total > player_count and result[RoleType.GUARDIAN] > 1:
            result[RoleType.GUARDIAN] -= 1
            total -= 1

        if source_count != player_count:
            logger.debug(
                "adapted preset distribution",
                preset=config.preset_name,
                source_count=source_count,
                player_count=player_count,
                distribution=result,
            )
        return result

    def can_auto_scale(self, config: RoleConfiguration, target_players: int) -> tuple[bool, str]:
        """Check whether a preset can produce roles for target_players.

        Args:
            config: The room's role configuration
            target_players: Number of players needing roles

        Returns:
            Tuple of (can_scale, details)
        """
        if config.is_custom:
            return False, "Custom configurations do not support auto-scaling"

        name = config.preset_name
        preset = self.settings.get_preset(name)
        if preset is None:
            return False, f"Preset '{name}' not found"
        if not preset.distributions:
            return False, f"Preset '{name}' has no distributions"
        if target_players in preset.distributions:
            return True, f"Preset '{name}' has a distribution for {target_players} players"

        source_count = self._nearest_player_count(preset, target_players)
        base = self._preset_counts(preset.distributions[source_count])
        difference = target_players - sum(base.values())

        if difference > 0:
            return True, (
                f"Can scale to {target_players} players by adding {difference} guardian role(s) "
                f"to {source_count}-player {name} preset"
            )
        if difference < 0:
            removable = max(0, base[RoleType.GUARDIAN] - 1)
            if removable < -difference:
                return False, f"Cannot scale {name} preset from {source_count} to {target_players} players"
            return True, (
                f"Can scale to {target_players} players by removing {-difference} guardian role(s) "
                f"from {source_count}-player {name} preset"
            )
        return True, f"Can scale to {target_players} players using the {source_count}-player {name} preset"

    # Validation

    def validate_configuration(self, config: RoleConfiguration) -> None:
        """Check a configuration against the card pool and server limits.

        Raises:
            InsufficientCardsError: If a role type wants more cards than are enabled
            LeaderCountError: If more than one Leader is configured
            MissingLeaderError: If there is no Leader and leaderless games are off
            PlayerBoundsError: If min/max players fall outside the server limits
        """
        for role_type in ROLE_ORDER:
            type_config = config.role_types[role_type]
            if type_config.count == 0:
                continue
            enabled = self._enabled_card_count(role_type, type_config)
            if enabled is not None and type_config.count > enabled:
                raise InsufficientCardsError(role_type.value, type_config.count, enabled)

        leader_count = config.role_types[RoleType.LEADER].count
        if leader_count > 1:
            raise LeaderCountError(leader_count)
        if leader_count == 0 and not config.allow_leaderless_game:
            raise MissingLeaderError()

        server = self.settings
        if config.min_players < server.min_players_per_room:
            raise PlayerBoundsError(
                f"minimum players {config.min_players} is less than server minimum {server.min_players_per_room}",
                field="min_players",
                value=config.min_players,
                limit=server.min_players_per_room,
            )
        if config.max_players > server.max_players_per_room:
            raise PlayerBoundsError(
                f"maximum players {config.max_players} exceeds server maximum {server.max_players_per_room}",
                field="max_players",
                value=config.max_players,
                limit=server.max_players_per_room,
            )

    # Construction

    def create_from_preset(self, preset_name: str, player_count: int) -> RoleConfiguration:
        """Build a configuration from a preset with every card enabled.

        Args:
            preset_name: Name of the preset
            player_count: Player count the initial counts are resolved for

        Returns:
            A new RoleConfiguration

        Raises:
            PresetNotFoundError: If the preset doesn't exist
        """
        preset = self._get_preset(preset_name)
        smallest = min(preset.distributions, default=player_count)

        config = RoleConfiguration(
            preset_name=preset_name,
            min_players=max(min(smallest, player_count), self.settings.min_players_per_room),
            max_players=self.settings.max_players_per_room,
            role_types=self._all_cards_enabled(),
        )
        if preset.distributions:
            for role_type, count in self.get_distribution_for_player_count(config, player_count).items():
                config.role_types[role_type].count = count
        return config

    def create_default_configuration(self) -> RoleConfiguration:
        """Build a custom configuration with one Leader and every card enabled."""
        config = RoleConfiguration(
            preset_name=CUSTOM_PRESET,
            min_players=self.settings.min_players_per_room,
            max_players=self.settings.max_players_per_room,
            role_types=self._all_cards_enabled(),
        )
        config.role_types[RoleType.LEADER].count = 1
        return config

    # Editing. Every edit turns the configuration into a custom one.

    def set_role_count(self, config: RoleConfiguration, role_type: RoleType | str, count: int) -> None:
        """Set how many copies of a role type to deal.

        Raises:
            RoleConfigurationError: If count is negative
            LeaderCountError: If more than one Leader is requested
        """
        role_type = RoleType.parse(role_type)
        if count < 0:
            raise RoleConfigurationError(f"count for {role_type.value} cannot be negative")
        if role_type == RoleType.LEADER and count > 1:
            raise LeaderCountError(count)
        type_config = config.get(role_type)
        if type_config.count == count:
            return
        type_config.count = count
        self._mark_custom(config)

    def adjust_role_count(self, config: RoleConfiguration, role_type: RoleType | str, delta: int) -> int:
        """Change a role count by delta, never going below zero.

        Returns:
            The new count
        """
        type_config = config.get(role_type)
        self.set_role_count(config, role_type, max(0, type_config.count + delta))
        return type_config.count

    def toggle_card(self, config: RoleConfiguration, role_type: RoleType | str, card_name: str, enabled: bool) -> None:
        """Enable or disable one card of a role type.

        Raises:
            RoleConfigurationError: If the last enabled card of the type would be disabled
        """
        role_type = RoleType.parse(role_type)
        type_config = config.role_types[role_type]
        names = set(type_config.enabled_cards) if type_config.enabled_cards else set(self._all_card_names(role_type) or ())
        if enabled:
            names.add(card_name)
        else:
            names.discard(card_name)
            # An empty set would make every card eligible again
            if not names:
                raise RoleConfigurationError(f"cannot disable every {role_type.value} card")
        type_config.enabled_cards = names
        self._mark_custom(config)

    def set_leaderless(self, config: RoleConfiguration, allowed: bool) -> None:
        """Toggle leaderless games; turning them off restores a missing Leader."""
        config.allow_leaderless_game = allowed
        leader = config.role_types[RoleType.LEADER]
        if not allowed and leader.count == 0:
            leader.count = 1
            self._mark_custom(config)

    def update_player_limits(self, config: RoleConfiguration) -> None:
        """Derive min/max players from the configured role total."""
        server = self.settings
        total = config.total_roles

        min_players = max(total, server.min_players_per_room)
        max_players = min(max(total, min_players), server.max_players_per_room)
        if not config.is_custom:
            # Presets scale up to the server limit
            max_players = server.max_players_per_room

        config.min_players = min_players
        config.max_players = max_players

    def get_sorted_roles(self) -> list[tuple[str, RoleDefinition]]:
        """Return role definitions for display: always-revealed first, then by category and name."""
        return sorted(
            self.settings.roles.items(),
            key=lambda item: (
                not item[1].always_revealed,
                _CATEGORY_ORDER.get(item[1].category, len(_CATEGORY_ORDER) + 1),
                item[1].display_name,
            ),
        )

    def preset_names(self) -> list[str]:
        return sorted(self.settings.presets)

    # Helpers

    def _mark_custom(self, config: RoleConfiguration) -> None:
        config.preset_name = CUSTOM_PRESET
        self.update_player_limits(config)

    def _get_preset(self, name: str) -> Preset:
        preset = self.settings.get_preset(name)
        if preset is None:
            raise PresetNotFoundError(name)
        return preset

    @staticmethod
    def _nearest_player_count(preset: Preset, player_count: int) -> int:
        """Pick the preset entry closest to player_count, preferring the smaller on ties."""
        if player_count in preset.distributions:
            return player_count
        if not preset.distributions:
            raise RoleConfigurationError(f"preset '{preset.name}' has no distributions")
        return min(preset.distributions, key=lambda count: (abs(count - player_count), count))

    def _preset_counts(self, distribution: dict[str, int]) -> dict[RoleType, int]:
        result = dict.fromkeys(ROLE_ORDER, 0)
        for role_name, count in distribution.items():
            definition = self.settings.get_role_definition(role_name)
            role_type = definition.category if definition else RoleType.parse(role_name)
            result[role_type] += count
        return result

    def _all_card_names(self, role_type: RoleType) -> set[str] | None:
        if self.card_pool is None:
            return None
        return self.card_pool.card_names(role_type)

    def _enabled_card_count(self, role_type: RoleType, type_config: RoleTypeConfig) -> int | None:
        if type_config.enabled_cards:
            if self.card_pool is None:
                return len(type_config.enabled_cards)
            return len(type_config.enabled_cards & self.card_pool.card_names(role_type))
        if self.card_pool is None:
            return None
        return len(self.card_pool.cards_for(role_type))

    def _all_cards_enabled(self) -> dict[RoleType, RoleTypeConfig]:
        return {role_type: RoleTypeConfig(enabled_cards=self._all_card_names(role_type)) for role_type in ROLE_ORDER}
