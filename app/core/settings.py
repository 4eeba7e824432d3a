"""Server configuration via YAML file and environment variables."""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

import structlog
import yaml
from pydantic import BaseModel, Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .constants import (
    COUNTDOWN_SECONDS,
    DEFAULT_GAME_SIZE,
    DEFAULT_PRESET,
    MAX_PLAYERS,
    MIN_PLAYERS,
    ROOM_CODE_LENGTH,
    ROOM_TTL_SECONDS,
    STANDARD_DISTRIBUTIONS,
)
from .roles import RoleType

if TYPE_CHECKING:
    from pydantic_settings.sources.base import PydanticBaseSettingsSource

logger = structlog.get_logger()

DEFAULT_CONFIG_PATH = "config/server.yaml"


class RoleDefinition(BaseModel):
    """A role players can be dealt, as shown in the room setup screen."""

    display_name: str
    category: RoleType
    min_count: int = 0
    max_count: int = 10
    always_revealed: bool = False

    @field_validator("category", mode="before")
    @classmethod
    def parse_category(cls, v: str) -> RoleType:
        return RoleType.parse(v)


class Preset(BaseModel):
    """Named role distribution table keyed by player count."""

    name: str
    description: str = ""
    distributions: dict[int, dict[str, int]] = Field(default_factory=dict)


def default_role_definitions() -> dict[str, RoleDefinition]:
    return {
        "leader": RoleDefinition(
            display_name="Leader", category=RoleType.LEADER, min_count=1, max_count=1, always_revealed=True
        ),
        "guardian": RoleDefinition(display_name="Guardian", category=RoleType.GUARDIAN),
        "assassin": RoleDefinition(display_name="Assassin", category=RoleType.ASSASSIN),
        "traitor": RoleDefinition(display_name="Traitor", category=RoleType.TRAITOR),
    }


def default_presets() -> dict[str, Preset]:
    return {
        DEFAULT_PRESET: Preset(
            name="Standard",
            description="Balanced gameplay",
            distributions={count: dict(dist) for count, dist in STANDARD_DISTRIBUTIONS.items()},
        ),
    }


class ServerSettings(BaseSettings):
    """Server-wide room limits, role definitions and presets.

    Values come from constructor arguments (usually a YAML file) and are
    overridden by TREACHERY_* environment variables.
    """

    model_config = SettingsConfigDict(env_prefix="TREACHERY_")

    min_players_per_room: int = MIN_PLAYERS
    max_players_per_room: int = MAX_PLAYERS
    default_game_size: int = DEFAULT_GAME_SIZE
    room_code_length: int = ROOM_CODE_LENGTH
    room_timeout_seconds: int = ROOM_TTL_SECONDS
    countdown_seconds: int = COUNTDOWN_SECONDS
    cards_path: str | None = None
    roles: dict[str, RoleDefinition] = Field(default_factory=default_role_definitions)
    presets: dict[str, Preset] = Field(default_factory=default_presets)

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],  # noqa: ARG003
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        return env_settings, init_settings, dotenv_settings, file_secret_settings

    @model_validator(mode="after")
    def validate_limits(self) -> ServerSettings:
        if self.max_players_per_room < 1:
            raise ValueError("max_players_per_room must be at least 1")
        if self.min_players_per_room < 1:
            raise ValueError("min_players_per_room must be at least 1")
        if self.min_players_per_room > self.max_players_per_room:
            raise ValueError("min_players_per_room cannot be greater than max_players_per_room")
        if self.room_code_length < 3:
            raise ValueError("room_code_length must be at least 3")

        self.default_game_size = min(
            max(self.default_game_size, self.min_players_per_room), self.max_players_per_room
        )

        for name, role in self.roles.items():
            if role.min_count > role.max_count:
                raise ValueError(f"role {name}: min_count cannot be greater than max_count")
        if not any(role.category == RoleType.LEADER for role in self.roles.values()):
            raise ValueError("at least one Leader role must be defined")

        for preset_name, preset in self.presets.items():
            for player_count, distribution in preset.distributions.items():
                if player_count < 1 or player_count > self.max_players_per_room:
                    raise ValueError(f"preset {preset_name}: invalid player count {player_count}")
                for role_name in distribution:
                    if role_name not in self.roles:
                        raise ValueError(f"preset {preset_name}: unknown role {role_name}")
        return self

    def get_preset(self, name: str) -> Preset | None:
        return self.presets.get(name)

    def get_role_definition(self, name: str) -> RoleDefinition | None:
        return self.roles.get(name)


def load_settings(config_path: str | Path | None = None) -> ServerSettings:
    """Load server settings from a YAML file, falling back to defaults.

    Args:
        config_path: Path to the YAML file. Defaults to config/server.yaml.

    Returns:
        Validated ServerSettings with environment overrides applied

    Raises:
        yaml.YAMLError: If the file is not valid YAML
        pydantic.ValidationError: If the resulting settings are invalid
    """
    config_file = Path(config_path or DEFAULT_CONFIG_PATH)

    data: dict = {}
    if config_file.exists():
        with open(config_file) as f:
            data = yaml.safe_load(f) or {}
        logger.info("loaded server config", path=str(config_file))
    else:
        logger.info("server config not found, using defaults", path=str(config_file))

    return ServerSettings(**data)
