"""Typed domain exceptions for rooms and role configuration.

Configuration failures subclass ValueError as well as GameError so that
pydantic validators report them as ordinary validation errors.
"""


class GameError(Exception):
    """Base exception for room and role configuration failures."""


class RoomFullError(GameError):
    """Room already holds its maximum number of non-host players."""

    def __init__(self, max_players: int) -> None:
        self.max_players = max_players
        super().__init__("room is full")


class RoleConfigurationError(GameError, ValueError):
    """A role configuration cannot be used as requested."""


class MissingRoleConfigError(RoleConfigurationError):
    """Room has no role configuration set."""

    def __init__(self) -> None:
        super().__init__("no role configuration set")


class UnknownRoleTypeError(RoleConfigurationError):
    """Role type name is not one of the known role types."""

    def __init__(self, role_type: str) -> None:
        self.role_type = role_type
        super().__init__(f"unknown role type '{role_type}'")


class PresetNotFoundError(RoleConfigurationError):
    def __init__(self, preset_name: str) -> None:
        self.preset_name = preset_name
        super().__init__(f"preset '{preset_name}' not found")


class TooManyRolesError(RoleConfigurationError):
    """More roles are configured than there are players to hold them."""

    def __init__(self, total_roles: int, player_count: int) -> None:
        self.total_roles = total_roles
        self.player_count = player_count
        super().__init__(f"too many roles ({total_roles}) for player count ({player_count})")


class InsufficientCardsError(RoleConfigurationError):
    """A role type asks for more copies than it has enabled cards."""

    def __init__(self, role_type: str, requested: int, enabled: int) -> None:
        self.role_type = role_type
        self.requested = requested
        self.enabled = enabled
        super().__init__(f"{role_type}: need {requested} cards but only {enabled} are enabled")


class LeaderCountError(RoleConfigurationError):
    def __init__(self, count: int) -> None:
        self.count = count
        super().__init__(f"cannot have more than 1 leader, got {count}")


class MissingLeaderError(RoleConfigurationError):
    def __init__(self) -> None:
        super().__init__("must have a leader role")


class PlayerBoundsError(RoleConfigurationError):
    """Player limits fall outside the allowed range.

    Attributes:
        field: Name of the offending limit ("min_players", "max_players" or "players").
        value: The configured or observed value.
        limit: The bound it violates.

    """

    def __init__(self, message: str, *, field: str, value: int, limit: int) -> None:
        self.field = field
        self.value = value
        self.limit = limit
        super().__init__(message)
