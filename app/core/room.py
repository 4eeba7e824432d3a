"""Room aggregate: membership, lifecycle state and start validation."""

from __future__ import annotations

from collections.abc import Callable
from datetime import datetime
from enum import Enum
from typing import TYPE_CHECKING

import structlog
from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from .constants import COUNTDOWN_SECONDS
from .exceptions import MissingRoleConfigError, PlayerBoundsError, RoomFullError
from .locks import ReadWriteLock
from .roles import RoleType

if TYPE_CHECKING:
    from services.role_config_service import RoleConfigService

    from .player import Player
    from .role_config import RoleConfiguration

logger = structlog.get_logger()


class GameState(str, Enum):
    """Room lifecycle states, in order."""

    LOBBY = "lobby"
    COUNTDOWN = "countdown"
    PLAYING = "playing"
    ENDED = "ended"


_NEXT_STATE = {
    GameState.LOBBY: GameState.COUNTDOWN,
    GameState.COUNTDOWN: GameState.PLAYING,
    GameState.PLAYING: GameState.ENDED,
}


class ValidationState(BaseModel):
    """Snapshot of whether a room can start, polled by the host UI.

    Versions increase with every snapshot taken for a room, so clients can
    drop responses that arrive out of order.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    version: int
    timestamp: datetime
    can_start: bool = True
    validation_message: str = ""
    can_auto_scale: bool = False
    auto_scale_details: str = ""
    required_roles: int = 0
    configured_roles: int = 0


class Room:
    """A game room.

    All public methods are thread-safe. Reads take the shared lock and
    mutations the exclusive lock.
    """

    def __init__(
        self,
        code: str,
        max_players: int,
        role_config: RoleConfiguration | None = None,
        countdown_seconds: int = COUNTDOWN_SECONDS,
    ):
        """Initialize an empty room in the lobby.

        Args:
            code: The room's unique join code
            max_players: Maximum number of non-host players
            role_config: Role settings, None for rooms without configuration
            countdown_seconds: Length of the countdown before play
        """
        self.code: str = code
        self.state: GameState = GameState.LOBBY
        self.players: dict[str, Player] = {}
        self.max_players: int = max_players
        self.role_config: RoleConfiguration | None = role_config
        self.countdown_seconds: int = countdown_seconds
        self.countdown_remaining: int = 0
        self.created_at: datetime = datetime.now()
        self.started_at: datetime | None = None

        self._validation_version: int = 0
        self._last_validated_at: datetime | None = None
        self._lock = ReadWriteLock()

    # Membership

    def add_player(self, player: Player) -> None:
        """Add a player, replacing any player with the same ID.

        Raises:
            RoomFullError: If a non-host joins while max_players non-hosts are present
        """
        with self._lock.write():
            if not player.is_host and self._active_count() >= self.max_players:
                raise RoomFullError(self.max_players)
            self.players[player.id] = player
        logger.info("player joined", room=self.code, player=player.name, is_host=player.is_host)

    def remove_player(self, player_id: str) -> None:
        with self._lock.write():
            player = self.players.pop(player_id, None)
        if player is not None:
            logger.info("player left", room=self.code, player=player.name)

    def get_player(self, player_id: str) -> Player | None:
        with self._lock.read():
            return self.players.get(player_id)

    def get_players(self) -> list[Player]:
        """Return every player, hosts included.

        The list is new but the players are the room's own objects.
        """
        with self._lock.read():
            return list(self.players.values())

    def get_active_players(self) -> list[Player]:
        """Return the non-host players (the room's own objects)."""
        with self._lock.read():
            return [p for p in self.players.values() if not p.is_host]

    def get_active_player_count(self) -> int:
        with self._lock.read():
            return self._active_count()

    def get_host(self) -> Player | None:
        with self._lock.read():
            return next((p for p in self.players.values() if p.is_host), None)

    def get_leader(self) -> Player | None:
        """Return the player holding a Leader card, if any."""
        with self._lock.read():
            return next(
                (p for p in self.players.values() if p.role is not None and p.role.role_type == RoleType.LEADER),
                None,
            )

    def _active_count(self) -> int:
        return sum(1 for p in self.players.values() if not p.is_host)

    # Lifecycle

    def get_state(self) -> GameState:
        with self._lock.read():
            return self.state

    def can_start(self) -> bool:
        """Check the lobby state and player presence only.

        Use get_validation_state for the full check including roles.
        """
        with self._lock.read():
            return self.state == GameState.LOBBY and self._active_count() >= 1

    def can_transition_to(self, state: GameState) -> bool:
        with self._lock.read():
            return _NEXT_STATE.get(self.state) == state

    def transition_to(self, state: GameState) -> bool:
        """Move to the next lifecycle state.

        Returns:
            False, leaving the room unchanged, if state is not the next state
        """
        with self._lock.write():
            return self._transition_locked(state)

    def _transition_locked(self, state: GameState) -> bool:
        previous = self.state
        if _NEXT_STATE.get(previous) != state:
            logger.warning("rejected state transition", room=self.code, current=previous, requested=state)
            return False

        self.state = state
        if state == GameState.COUNTDOWN:
            self.started_at = datetime.now()
            self.countdown_remaining = self.countdown_seconds
        elif state == GameState.PLAYING:
            self.countdown_remaining = 0
        logger.info("room state changed", room=self.code, previous=previous, state=state)
        return True

    def begin_countdown(
        self,
        deal: Callable[[list[Player]], None],
        role_service: RoleConfigService | None = None,
    ) -> bool:
        """Validate, deal roles and enter the countdown as one locked step.

        Args:
            deal: Called with every player while the exclusive lock is held
            role_service: Used to check whether preset roles can auto-scale

        Returns:
            False, without dealing, if the room cannot start with its current players
        """
        with self._lock.write():
            fields = self._validation_fields(role_service)
            if not fields.get("can_start", True):
                logger.warning(
                    "room cannot start",
                    room=self.code,
                    state=self.state,
                    reason=fields.get("validation_message"),
                )
                return False
            deal(list(self.players.values()))
            return self._transition_locked(GameState.COUNTDOWN)

    def tick_countdown(self) -> int:
        """Count down one second; enters play when the countdown reaches zero.

        Returns:
            Seconds remaining, 0 outside the countdown state
        """
        with self._lock.write():
            if self.state != GameState.COUNTDOWN:
                return 0
            self.countdown_remaining = max(0, self.countdown_remaining - 1)
            if self.countdown_remaining == 0:
                self._transition_locked(GameState.PLAYING)
            return self.countdown_remaining

    # Role configuration

    def set_role_config(self, role_config: RoleConfiguration | None) -> None:
        with self._lock.write():
            self.role_config = role_config

    def validate_role_config(self, role_service: RoleConfigService | None = None) -> None:
        """Check the role configuration against the current players.

        Raises:
            MissingRoleConfigError: If the room has no configuration
            PlayerBoundsError: If the active player count is outside the configured limits
            RoleConfigurationError: From the role service's own validation
        """
        with self._lock.read():
            config = self.role_config
            active_count = self._active_count()

        if config is None:
            raise MissingRoleConfigError()
        if active_count < config.min_players:
            raise PlayerBoundsError(
                f"need at least {config.min_players} players, have {active_count}",
                field="players",
                value=active_count,
                limit=config.min_players,
            )
        if active_count > config.max_players:
            raise PlayerBoundsError(
                f"maximum {config.max_players} players allowed, have {active_count}",
                field="players",
                value=active_count,
                limit=config.max_players,
            )
        if role_service is not None:
            role_service.validate_configuration(config)

    def get_validation_state(self, role_service: RoleConfigService | None = None) -> ValidationState:
        """Compute whether the game can start right now.

        Every call bumps the room's validation version.

        Args:
            role_service: Used to check whether preset roles can auto-scale

        Returns:
            A fresh ValidationState
        """
        with self._lock.write():
            self._validation_version += 1
            now = datetime.now()
            if self._last_validated_at is not None and now < self._last_validated_at:
                now = self._last_validated_at
            self._last_validated_at = now

            fields = self._validation_fields(role_service)
            return ValidationState(version=self._validation_version, timestamp=now, **fields)

    def _validation_fields(self, role_service: RoleConfigService | None) -> dict:
        if self.state != GameState.LOBBY:
            return {"can_start": False, "validation_message": "Game is not in lobby state"}

        active_count = self._active_count()
        if active_count < 1:
            return {"can_start": False, "validation_message": "Need at least 1 player to start"}

        config = self.role_config
        if config is None:
            return {}

        total_roles = config.total_roles
        fields: dict = {"required_roles": active_count, "configured_roles": total_roles}

        if not config.has_leader and not config.allow_leaderless_game:
            fields.update(can_start=False, validation_message="Leader role is required (or enable leaderless games)")
            return fields

        leader_count = config.role_types[RoleType.LEADER].count
        if leader_count > 1:
            fields.update(
                can_start=False,
                validation_message=f"Only one Leader role is allowed ({leader_count} configured)",
            )
            return fields

        if total_roles == active_count:
            return fields

        if total_roles > active_count:
            fields.update(
                can_start=False,
                validation_message=f"Too many roles configured ({total_roles}) for {active_count} players",
            )
            return fields

        not_enough = f"Not enough roles configured ({total_roles}) for {active_count} players"
        if config.is_custom:
            fields.update(
                can_start=False,
                validation_message=not_enough,
                auto_scale_details="Custom configurations do not support auto-scaling",
            )
            return fields
        if role_service is None:
            fields.update(can_start=False, validation_message=not_enough)
            return fields

        # Presets grow through their Guardian count
        can_scale, details = role_service.can_auto_scale(config, active_count)
        fields["auto_scale_details"] = details
        if can_scale:
            fields.update(
                can_start=True,
                can_auto_scale=True,
                validation_message=f"Will auto-scale roles from {total_roles} to {active_count} players",
            )
        else:
            fields.update(can_start=False, validation_message=f"{not_enough}. {details}")
        return fields

    def to_dict(self) -> dict:
        """Convert room to dictionary for API responses. Concealed roles are hidden."""
        with self._lock.read():
            players = [p.to_dict() for p in self.players.values()]
            return {
                "code": self.code,
                "state": self.state.value,
                "players": players,
                "player_count": self._active_count(),
                "max_players": self.max_players,
                "countdown_remaining": self.countdown_remaining,
                "role_config": self.role_config.model_dump(mode="json", by_alias=True) if self.role_config else None,
            }

    def __repr__(self) -> str:
        return f"Room(code={self.code}, state={self.state.value}, players={len(self.players)})"
