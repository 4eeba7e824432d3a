"""Role cards and the shared card pool."""

from __future__ import annotations

import json
import random
from dataclasses import dataclass, field
from pathlib import Path

import structlog
from pydantic import BaseModel, Field

from .exceptions import UnknownRoleTypeError
from .roles import ROLE_ORDER, RoleType

logger = structlog.get_logger()


@dataclass(frozen=True)
class Card:
    """One role card. Names are unique across the pool."""

    id: int
    name: str
    role_type: RoleType
    text: str = ""
    flavor: str = ""
    artist: str = ""
    rarity: str = ""
    cost: str = ""

    @property
    def win_condition(self) -> str:
        return self.role_type.win_condition


@dataclass(frozen=True)
class CardPool:
    """Read-only cards partitioned by role type, shared by every room."""

    leaders: tuple[Card, ...] = ()
    guardians: tuple[Card, ...] = ()
    assassins: tuple[Card, ...] = ()
    traitors: tuple[Card, ...] = ()
    _by_type: dict[RoleType, tuple[Card, ...]] = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        by_type = {
            RoleType.LEADER: self.leaders,
            RoleType.GUARDIAN: self.guardians,
            RoleType.ASSASSIN: self.assassins,
            RoleType.TRAITOR: self.traitors,
        }
        for role_type, cards in by_type.items():
            misplaced = [c.name for c in cards if c.role_type != role_type]
            if misplaced:
                raise ValueError(f"cards {misplaced} are not {role_type.value} cards")
        object.__setattr__(self, "_by_type", by_type)

    @classmethod
    def from_cards(cls, cards: list[Card]) -> CardPool:
        """Build a pool by sorting cards into their role type."""
        buckets: dict[RoleType, list[Card]] = {role_type: [] for role_type in ROLE_ORDER}
        for card in cards:
            buckets[card.role_type].append(card)
        return cls(
            leaders=tuple(buckets[RoleType.LEADER]),
            guardians=tuple(buckets[RoleType.GUARDIAN]),
            assassins=tuple(buckets[RoleType.ASSASSIN]),
            traitors=tuple(buckets[RoleType.TRAITOR]),
        )

    def cards_for(self, role_type: RoleType) -> tuple[Card, ...]:
        return self._by_type[role_type]

    def card_names(self, role_type: RoleType) -> set[str]:
        return {card.name for card in self._by_type[role_type]}

    def all_cards(self) -> list[Card]:
        return [card for role_type in ROLE_ORDER for card in self._by_type[role_type]]

    def get_random_cards(self, role_type: RoleType, count: int, rng: random.Random | None = None) -> list[Card]:
        """Draw up to count distinct cards of one role type.

        Args:
            role_type: Role type to draw from
            count: Number of cards wanted; clamped to the pool size
            rng: Random source, defaults to the module-level generator

        Returns:
            Distinct cards in random order
        """
        pool = list(self._by_type[role_type])
        (rng or random).shuffle(pool)
        return pool[: max(0, min(count, len(pool)))]

    def __len__(self) -> int:
        return sum(len(cards) for cards in self._by_type.values())


class CardTypes(BaseModel):
    supertype: str = ""
    subtype: str = ""


class CardRecord(BaseModel):
    """A card entry as published in the card collection JSON."""

    id: int
    name: str
    types: CardTypes
    text: str = ""
    flavor: str = ""
    artist: str = ""
    rarity: str = ""
    cost: str = ""


class CardCollection(BaseModel):
    set_name: str = ""
    set_code: str = ""
    cards: list[CardRecord] = Field(default_factory=list)


def load_card_pool(path: str | Path) -> CardPool:
    """Load the card collection JSON into a CardPool.

    Cards whose subtype is not a role type are skipped.

    Args:
        path: Path to the card collection JSON file

    Returns:
        The populated CardPool

    Raises:
        FileNotFoundError: If the file doesn't exist
        pydantic.ValidationError: If the JSON doesn't match the collection format
    """
    with open(path) as f:
        collection = CardCollection.model_validate(json.load(f))

    cards = []
    for record in collection.cards:
        try:
            role_type = RoleType.parse(record.types.subtype)
        except UnknownRoleTypeError:
            logger.debug("skipping card without role type", card=record.name, subtype=record.types.subtype)
            continue
        cards.append(
            Card(
                id=record.id,
                name=record.name,
                role_type=role_type,
                text=record.text,
                flavor=record.flavor,
                artist=record.artist,
                rarity=record.rarity,
                cost=record.cost,
            )
        )

    pool = CardPool.from_cards(cards)
    logger.info(
        "loaded card pool",
        path=str(path),
        leaders=len(pool.leaders),
        guardians=len(pool.guardians),
        assassins=len(pool.assassins),
        traitors=len(pool.traitors),
    )
    return pool
