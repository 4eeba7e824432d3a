"""Role assignment: dealing role cards to players.

Both strategies share one dealer. They differ only in how many cards of
each role type to deal and which cards are eligible:

- BuiltinDistribution uses the fixed table in core.roles.
- ConfiguredDistribution follows a room's RoleConfiguration, including
  hidden and fully random distributions.

The dealer mutates the players it is given and takes no locks. Callers
dealing for a live room must hold the room's exclusive lock.
"""

from __future__ import annotations

import random
from typing import TYPE_CHECKING, Protocol

import structlog

from core.constants import HIDDEN_PRESET_CANDIDATES, RANDOM_ROLE_WEIGHTS
from core.exceptions import RoleConfigurationError
from core.roles import ROLE_ORDER, RoleType, calculate_role_distribution

if TYPE_CHECKING:
    from core.cards import Card, CardPool
    from core.player import Player
    from core.role_config import RoleConfiguration

    from .role_config_service import RoleConfigService

logger = structlog.get_logger()

# Process-wide random source; tests pass their own seeded generator
_rng = random.Random()


class DistributionStrategy(Protocol):
    def resolve(self, player_count: int, rng: random.Random) -> dict[RoleType, int]:
        """Return how many players get each role type."""
        ...

    def eligible_cards(self, role_type: RoleType, card_pool: CardPool) -> list[Card]:
        """Return the cards of a role type that may be dealt."""
        ...


class BuiltinDistribution:
    """Fixed distribution table, every card eligible."""

    def resolve(self, player_count: int, rng: random.Random) -> dict[RoleType, int]:
        return calculate_role_distribution(player_count)

    def eligible_cards(self, role_type: RoleType, card_pool: CardPool) -> list[Card]:
        return list(card_pool.cards_for(role_type))


class ConfiguredDistribution:
    """Distribution driven by a room's role configuration."""

    def __init__(self, config: RoleConfiguration, role_service: RoleConfigService | None = None):
        self.config = config
        self.role_service = role_service

    def resolve(self, player_count: int, rng: random.Random) -> dict[RoleType, int]:
        if self.config.hide_role_distribution:
            return self._hidden_distribution(player_count, rng)
        if self.config.fully_random_roles:
            return self._random_distribution(player_count, rng)
        if self.role_service is None:
            return self.config.counts()
        try:
            return self.role_service.get_distribution_for_player_count(self.config, player_count)
        except RoleConfigurationError as e:
            logger.warning("falling back to configured role counts", error=str(e))
            return self.config.counts()

    def eligible_cards(self, role_type: RoleType, card_pool: CardPool) -> list[Card]:
        type_config = self.config.role_types[role_type]
        return [card for card in card_pool.cards_for(role_type) if type_config.is_enabled(card.name)]

    def _hidden_distribution(self, player_count: int, rng: random.Random) -> dict[RoleType, int]:
        """Resolve a randomly chosen preset, kept from the players."""
        preset_name = rng.choice(HIDDEN_PRESET_CANDIDATES)
        logger.info("hidden distribution preset selected", preset=preset_name, player_count=player_count)

        if self.role_service is not None:
            preset_config = self.config.model_copy(
                update={"preset_name": preset_name, "hide_role_distribution": False}
            )
            try:
                return self.role_service.get_distribution_for_player_count(preset_config, player_count)
            except RoleConfigurationError as e:
                logger.warning("hidden preset unavailable, using fallback", preset=preset_name, error=str(e))

        return {RoleType.LEADER: 1, RoleType.GUARDIAN: max(0, player_count - 1)}

    def _random_distribution(self, player_count: int, rng: random.Random) -> dict[RoleType, int]:
        """Draw role types by weight, ignoring configured counts.

        One Leader is guaranteed unless leaderless games are allowed, and
        a second Leader is never drawn.
        """
        counts = dict.fromkeys(ROLE_ORDER, 0)
        if not self.config.allow_leaderless_game and player_count > 0:
            counts[RoleType.LEADER] = 1

        weighted = [role for role in ROLE_ORDER for _ in range(RANDOM_ROLE_WEIGHTS[role.value])]
        without_leader = [role for role in weighted if role != RoleType.LEADER]

        for _ in range(player_count - counts[RoleType.LEADER]):
            pool = without_leader if counts[RoleType.LEADER] else weighted
            counts[rng.choice(pool)] += 1

        logger.info("random distribution generated", player_count=player_count, distribution=counts)
        return counts


def deal_roles(
    players: list[Player],
    card_pool: CardPool,
    strategy: DistributionStrategy,
    rng: random.Random | None = None,
) -> None:
    """Deal role cards to the non-host players in place.

    Cards are dealt one role type at a time in ROLE_ORDER, so the Leader is
    dealt before any other role runs out of players. Players left over when
    the distribution or the eligible cards run out stay without a role.

    Args:
        players: Players to deal to; hosts are skipped
        card_pool: Cards to deal from
        strategy: Decides the counts and eligible cards
        rng: Random source, defaults to the process-wide generator
    """
    rng = rng or _rng

    for player in players:
        player.role = None
        player.role_revealed = False

    active = [p for p in players if not p.is_host]
    if not active:
        return

    rng.shuffle(active)
    distribution = strategy.resolve(len(active), rng)

    used: set[str] = set()
    index = 0
    for role_type in ROLE_ORDER:
        needed = distribution.get(role_type, 0)
        if needed <= 0:
            continue
        if index >= len(active):
            break

        cards = strategy.eligible_cards(role_type, card_pool)
        rng.shuffle(cards)

        dealt = 0
        for card in cards:
            if index >= len(active) or dealt >= needed:
                break
            if card.name in used:
                continue

            player = active[index]
            player.role = card
            used.add(card.name)
            # Leader is always revealed
            if card.role_type == RoleType.LEADER:
                player.role_revealed = True
            logger.debug("role dealt", player=player.name, card=card.name, role_type=role_type)

            index += 1
            dealt += 1

    if index < len(active):
        logger.warning(
            "players left without a role",
            roleless=[p.name for p in active[index:]],
            distribution=distribution,
        )


def assign_roles(players: list[Player], card_pool: CardPool, rng: random.Random | None = None) -> None:
    """Deal roles from the built-in distribution table.

    Args:
        players: List of Player objects to assign roles to
        card_pool: Cards to deal from
        rng: Random source, defaults to the process-wide generator
    """
    deal_roles(players, card_pool, BuiltinDistribution(), rng)


def assign_roles_with_config(
    players: list[Player],
    card_pool: CardPool,
    config: RoleConfiguration | None,
    role_service: RoleConfigService | None,
    rng: random.Random | None = None,
) -> None:
    """Deal roles following a room's role configuration.

    Rooms without a configuration use the built-in table. Never raises for
    infeasible configurations; validate before dealing.

    Args:
        players: List of Player objects to assign roles to
        card_pool: Cards to deal from
        config: The room's role configuration
        role_service: Resolves preset distributions
        rng: Random source, defaults to the process-wide generator
    """
    if config is None:
        assign_roles(players, card_pool, rng)
        return
    deal_roles(players, card_pool, ConfiguredDistribution(config, role_service), rng)
