"""Tests for cards, the card pool and card loading."""

import json
import random
from pathlib import Path

import pytest

from core.cards import Card, CardPool, load_card_pool
from core.roles import RoleType
from core.settings import load_settings
from services.role_config_service import RoleConfigService


class TestCardPool:
    """Tests for CardPool."""

    def test_from_cards_sorts_by_role_type(self, card_pool):
        assert len(card_pool.leaders) == 2
        assert len(card_pool.guardians) == 4
        assert len(card_pool.assassins) == 3
        assert len(card_pool.traitors) == 3
        assert len(card_pool) == 12

    def test_misplaced_card_raises(self):
        traitor = Card(id=1, name="Sly", role_type=RoleType.TRAITOR)
        with pytest.raises(ValueError):
            CardPool(leaders=(traitor,))

    def test_card_names(self, card_pool):
        assert card_pool.card_names(RoleType.LEADER) == {"Leader 1", "Leader 2"}

    def test_all_cards_in_dealing_order(self, card_pool):
        role_types = [card.role_type for card in card_pool.all_cards()]
        assert role_types[0] == RoleType.LEADER
        assert role_types[-1] == RoleType.TRAITOR

    def test_random_cards_are_distinct(self, card_pool, rng):
        cards = card_pool.get_random_cards(RoleType.GUARDIAN, 3, rng)
        assert len(cards) == 3
        assert len({card.name for card in cards}) == 3
        assert all(card.role_type == RoleType.GUARDIAN for card in cards)

    def test_random_cards_clamped_to_pool(self, card_pool):
        cards = card_pool.get_random_cards(RoleType.ASSASSIN, 10, random.Random(0))
        assert len(cards) == 3

    def test_random_cards_negative_count(self, card_pool):
        assert card_pool.get_random_cards(RoleType.TRAITOR, -1) == []

    def test_empty_pool(self):
        pool = CardPool()
        assert len(pool) == 0
        assert pool.cards_for(RoleType.LEADER) == ()

    def test_win_condition_comes_from_role_type(self):
        card = Card(id=1, name="The King", role_type=RoleType.LEADER)
        assert card.win_condition == RoleType.LEADER.win_condition


class TestLoadCardPool:
    """Tests for load_card_pool."""

    def test_loads_role_cards_and_skips_others(self, tmp_path):
        path = tmp_path / "cards.json"
        path.write_text(
            json.dumps(
                {
                    "set_name": "Test Set",
                    "cards": [
                        {"id": 1, "name": "The King", "types": {"supertype": "Identity", "subtype": "Leader"}},
                        {"id": 2, "name": "The Oracle", "types": {"supertype": "Identity", "subtype": "guardian"}},
                        {"id": 3, "name": "The Hitman", "types": {"supertype": "Identity", "subtype": "Assassin"}},
                        {
                            "id": 4,
                            "name": "The Puppet Master",
                            "types": {"supertype": "Identity", "subtype": "Traitor"},
                            "text": "Swap two identities.",
                            "rarity": "mythic",
                        },
                        {"id": 5, "name": "Rules Card", "types": {"supertype": "Reference", "subtype": "Rules"}},
                    ],
                }
            )
        )

        pool = load_card_pool(path)

        assert len(pool) == 4
        assert pool.leaders[0].name == "The King"
        assert pool.guardians[0].role_type == RoleType.GUARDIAN
        assert pool.traitors[0].text == "Swap two identities."
        assert pool.traitors[0].rarity == "mythic"

    def test_missing_file_raises(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_card_pool(tmp_path / "missing.json")

    def test_shipped_collection_covers_presets(self):
        root = Path(__file__).parents[2]
        settings = load_settings(root / "config" / "server.yaml")
        pool = load_card_pool(root / settings.cards_path)

        assert len(pool) == 24
        service = RoleConfigService(settings, pool)
        for name in service.preset_names():
            service.validate_configuration(service.create_from_preset(name, 8))
