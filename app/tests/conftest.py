"""Pytest configuration and fixtures."""

import os
import random

import pytest

from core.cards import Card, CardPool
from core.player import Player
from core.role_config import RoleConfiguration
from core.roles import RoleType
from core.room import Room
from core.room_manager import RoomManager
from core.settings import ServerSettings
from services.role_config_service import RoleConfigService


def make_cards(role_type: RoleType, count: int, start_id: int) -> list[Card]:
    return [Card(id=start_id + i, name=f"{role_type.value} {i + 1}", role_type=role_type) for i in range(count)]


@pytest.fixture(autouse=True)
def clear_settings_env(monkeypatch):
    """Keep TREACHERY_* variables from the shell out of the tests."""
    for key in list(os.environ):
        if key.startswith("TREACHERY_"):
            monkeypatch.delenv(key)


@pytest.fixture
def card_pool():
    """A pool with 2 Leaders, 4 Guardians, 3 Assassins and 3 Traitors."""
    return CardPool.from_cards(
        make_cards(RoleType.LEADER, 2, 100)
        + make_cards(RoleType.GUARDIAN, 4, 200)
        + make_cards(RoleType.ASSASSIN, 3, 300)
        + make_cards(RoleType.TRAITOR, 3, 400)
    )


@pytest.fixture
def settings():
    return ServerSettings()


@pytest.fixture
def role_service(settings, card_pool):
    return RoleConfigService(settings, card_pool)


@pytest.fixture
def rng():
    """Seeded random source so dealing is repeatable."""
    return random.Random(1234)


@pytest.fixture
def room():
    """An empty lobby room with no role configuration."""
    return Room(code="ABCDE", max_players=20)


@pytest.fixture
def room_with_players():
    """A lobby room with a host and 5 players."""
    room = Room(code="FGHIJ", max_players=20)
    room.add_player(Player("Host", is_host=True))
    for i in range(5):
        room.add_player(Player(f"Player{i + 1}"))
    return room


@pytest.fixture
def custom_config():
    """Custom configuration dealing 1 Leader, 2 Guardians, 1 Assassin and 1 Traitor."""
    return RoleConfiguration(
        preset_name="custom",
        role_types={"leader": {"count": 1}, "guardian": {"count": 2}, "assassin": {"count": 1}, "traitor": {"count": 1}},
    )


@pytest.fixture
def room_manager(settings, role_service):
    return RoomManager(settings, role_service)


@pytest.fixture
def sample_player():
    """Create a single player for testing."""
    return Player(name="TestPlayer")
