"""Per-room role configuration."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel

from .constants import CUSTOM_PRESET, MAX_PLAYERS, MIN_PLAYERS
from .roles import ROLE_ORDER, RoleType


class RoleTypeConfig(BaseModel):
    """How many copies of a role type to deal and which cards may be used."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    count: int = Field(default=0, ge=0)
    # None or empty means every card of the type is eligible
    enabled_cards: set[str] | None = None

    def is_enabled(self, card_name: str) -> bool:
        return not self.enabled_cards or card_name in self.enabled_cards


class RoleConfiguration(BaseModel):
    """Role settings for one room.

    role_types always holds an entry for each of the four role types.
    Keys may be given as role type names in any case; unknown names are
    rejected.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    preset_name: str = CUSTOM_PRESET
    min_players: int = MIN_PLAYERS
    max_players: int = MAX_PLAYERS
    allow_leaderless_game: bool = False
    hide_role_distribution: bool = False
    fully_random_roles: bool = False
    role_types: dict[RoleType, RoleTypeConfig] = Field(default_factory=dict)

    @field_validator("role_types", mode="before")
    @classmethod
    def parse_role_type_keys(cls, v: dict | None) -> dict:
        if v is None:
            return {}
        return {RoleType.parse(key): value for key, value in v.items()}

    @model_validator(mode="after")
    def fill_missing_role_types(self) -> RoleConfiguration:
        for role_type in ROLE_ORDER:
            self.role_types.setdefault(role_type, RoleTypeConfig())
        return self

    def get(self, role_type: RoleType | str) -> RoleTypeConfig:
        """Return the settings for a role type.

        Raises:
            UnknownRoleTypeError: If role_type is a string naming no role type
        """
        return self.role_types[RoleType.parse(role_type)]

    def counts(self) -> dict[RoleType, int]:
        """Return configured counts above zero, in dealing order."""
        return {
            role_type: self.role_types[role_type].count
            for role_type in ROLE_ORDER
            if self.role_types[role_type].count > 0
        }

    @property
    def total_roles(self) -> int:
        return sum(config.count for config in self.role_types.values())

    @property
    def has_leader(self) -> bool:
        return self.role_types[RoleType.LEADER].count > 0

    @property
    def is_custom(self) -> bool:
        return self.preset_name == CUSTOM_PRESET
