"""Request models for API endpoints."""

from pydantic import BaseModel, Field, field_validator


class JoinRoomRequest(BaseModel):
    """Request to join a room."""

    name: str = Field(..., min_length=1, max_length=20, description="Player's display name")
    is_host: bool = Field(False, description="Join as a host who observes without a role")

    @field_validator("name")
    @classmethod
    def name_must_be_clean(cls, v: str) -> str:
        """Validate and clean name."""
        v = v.strip()
        if not v:
            raise ValueError("Name cannot be empty")
        # Allow alphanumeric and spaces
        if not all(c.isalnum() or c.isspace() for c in v):
            raise ValueError("Name must contain only letters, numbers, and spaces")
        return v


class PresetRequest(BaseModel):
    """Switch a room to a named preset, or mark its roles as custom."""

    preset: str = Field(..., min_length=1, description="Preset name, or 'custom'")
    player_count: int | None = Field(None, ge=1, description="Player count to size the preset for")


class RoleCountRequest(BaseModel):
    """Change the number of players dealt one role type."""

    role_type: str = Field(..., description="Role type name, e.g. 'Guardian'")
    delta: int = Field(..., description="Amount to add; negative to remove")


class LeaderlessRequest(BaseModel):
    allow_leaderless: bool
