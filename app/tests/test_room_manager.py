"""Tests for RoomManager."""

from datetime import datetime, timedelta

from core.constants import ROOM_CODE_ALPHABET
from core.player import Player
from core.room import GameState
from core.room_manager import RoomManager
from core.settings import ServerSettings
from services.role_config_service import RoleConfigService


class TestRoomManager:
    """Tests for room creation, lookup and cleanup."""

    def test_create_room(self, room_manager):
        room = room_manager.create_room()

        assert len(room.code) == 5
        assert all(c in ROOM_CODE_ALPHABET for c in room.code)
        assert room.state == GameState.LOBBY
        assert room.max_players == 20
        assert room_manager.get_room(room.code) is room

    def test_new_rooms_use_default_preset(self, room_manager):
        config = room_manager.create_room().role_config

        assert config.preset_name == "standard"
        assert config.total_roles == 5
        assert config.has_leader

    def test_default_without_preset_is_custom_leader(self, card_pool):
        settings = ServerSettings(presets={})
        manager = RoomManager(settings, RoleConfigService(settings, card_pool))

        config = manager.create_room().role_config

        assert config.is_custom
        assert config.total_roles == 1
        assert config.has_leader

    def test_codes_are_unique(self, room_manager):
        codes = {room_manager.create_room().code for _ in range(50)}
        assert len(codes) == 50

    def test_lookup_is_case_insensitive(self, room_manager):
        room = room_manager.create_room()
        assert room_manager.get_room(room.code.lower()) is room

    def test_unknown_room(self, room_manager):
        assert room_manager.get_room("ZZZZZ") is None

    def test_remove_room(self, room_manager):
        room = room_manager.create_room()
        room_manager.remove_room(room.code)
        assert room_manager.get_room(room.code) is None
        room_manager.remove_room(room.code)

    def test_cleanup_stale_rooms(self, room_manager):
        old = room_manager.create_room()
        fresh = room_manager.create_room()
        old.created_at = datetime.now() - timedelta(days=2)

        assert room_manager.cleanup_stale_rooms() == 1
        assert room_manager.get_room(old.code) is None
        assert room_manager.get_room(fresh.code) is fresh

    def test_stats(self, room_manager):
        first = room_manager.create_room()
        second = room_manager.create_room()
        first.add_player(Player("A"))
        first.add_player(Player("Host", is_host=True))
        second.add_player(Player("B"))
        for state in (GameState.COUNTDOWN, GameState.PLAYING, GameState.ENDED):
            second.transition_to(state)

        assert room_manager.get_stats() == {"total_rooms": 2, "active_rooms": 1, "total_players": 2}
