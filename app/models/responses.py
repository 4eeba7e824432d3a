"""Response models for API endpoints."""

from pydantic import BaseModel


class RoleResponse(BaseModel):
    """A dealt role card."""

    name: str
    role_type: str
    win_condition: str


class PlayerResponse(BaseModel):
    """Player information for API responses."""

    id: str
    name: str
    is_host: bool
    role_revealed: bool
    role: RoleResponse | None = None  # Only revealed roles, or the player's own


class JoinRoomResponse(BaseModel):
    player: PlayerResponse
    session_id: str


class RoomStateResponse(BaseModel):
    """Room state response."""

    code: str
    state: str
    players: list[PlayerResponse]
    player_count: int
    max_players: int
    countdown_remaining: int
    role_config: dict | None = None


class StartGameResponse(BaseModel):
    """Result of a start request, with the validation it was based on."""

    started: bool
    state: str
    validation: dict


class RoleDefinitionResponse(BaseModel):
    name: str
    display_name: str
    category: str
    always_revealed: bool
