"""Room manager for coordinating multiple rooms."""

from __future__ import annotations

import secrets
from datetime import datetime, timedelta
from threading import RLock
from typing import TYPE_CHECKING

import structlog

from .constants import DEFAULT_PRESET, ROOM_CODE_ALPHABET
from .exceptions import PresetNotFoundError
from .room import GameState, Room

if TYPE_CHECKING:
    from services.role_config_service import RoleConfigService

    from .role_config import RoleConfiguration
    from .settings import ServerSettings

logger = structlog.get_logger()


class RoomManager:
    """In-memory registry of all active rooms, keyed by join code."""

    def __init__(self, settings: ServerSettings, role_service: RoleConfigService):
        """Initialize the room manager.

        Args:
            settings: Server limits used for new rooms
            role_service: Builds the default role configuration
        """
        self.settings = settings
        self.role_service = role_service
        self.rooms: dict[str, Room] = {}
        self._lock = RLock()

    def create_room(self) -> Room:
        """Create a new lobby room with a unique code.

        Returns:
            The newly created Room
        """
        with self._lock:
            code = self._generate_code()
            while code in self.rooms:
                code = self._generate_code()

            room = Room(
                code=code,
                max_players=self.settings.max_players_per_room,
                role_config=self._default_role_config(),
                countdown_seconds=self.settings.countdown_seconds,
            )
            self.rooms[code] = room

        logger.info("room created", room=code, preset=room.role_config.preset_name)
        return room

    def get_room(self, code: str) -> Room | None:
        """Retrieve a room by code.

        Args:
            code: The room's join code, in any case

        Returns:
            The Room if found, None otherwise
        """
        with self._lock:
            return self.rooms.get(code.upper())

    def remove_room(self, code: str) -> None:
        with self._lock:
            removed = self.rooms.pop(code.upper(), None)
        if removed is not None:
            logger.info("room removed", room=removed.code)

    def cleanup_stale_rooms(self) -> int:
        """Remove rooms that are too old.

        Returns:
            Number of rooms cleaned up
        """
        cutoff_time = datetime.now() - timedelta(seconds=self.settings.room_timeout_seconds)

        with self._lock:
            stale_codes = [code for code, room in self.rooms.items() if room.created_at < cutoff_time]
            for code in stale_codes:
                del self.rooms[code]

        if stale_codes:
            logger.info("stale rooms cleaned up", count=len(stale_codes), rooms=stale_codes)
        return len(stale_codes)

    def get_stats(self) -> dict:
        """Get statistics about active rooms.

        Returns:
            Dictionary with room statistics
        """
        with self._lock:
            rooms = list(self.rooms.values())

        return {
            "total_rooms": len(rooms),
            "active_rooms": sum(1 for room in rooms if room.get_state() != GameState.ENDED),
            "total_players": sum(room.get_active_player_count() for room in rooms),
        }

    def _generate_code(self) -> str:
        return "".join(secrets.choice(ROOM_CODE_ALPHABET) for _ in range(self.settings.room_code_length))

    def _default_role_config(self) -> RoleConfiguration:
        try:
            return self.role_service.create_from_preset(DEFAULT_PRESET, self.settings.default_game_size)
        except PresetNotFoundError:
            logger.warning("default preset missing, using custom configuration", preset=DEFAULT_PRESET)
            return self.role_service.create_default_configuration()
