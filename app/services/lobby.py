"""Lobby service helpers: joining, starting and the countdown."""

from __future__ import annotations

import asyncio
import random
from typing import TYPE_CHECKING

from core.room import GameState, Room, ValidationState

from .role_assignment import assign_roles_with_config

if TYPE_CHECKING:
    from core.cards import CardPool

    from .role_config_service import RoleConfigService


def can_join(room: Room, name: str, is_host: bool = False) -> tuple[bool, str | None]:
    """Check if a player can join a room.

    Args:
        room: The room
        name: Display name of the joining player
        is_host: Whether the player joins as a host

    Returns:
        Tuple of (can_join, error_message)
    """
    if room.get_state() != GameState.LOBBY:
        return False, "Game has already started"

    players = room.get_players()
    if any(p.name.lower() == name.lower() for p in players):
        return False, "Name already taken"

    if not is_host and sum(1 for p in players if not p.is_host) >= room.max_players:
        return False, "Room is full"

    return True, None


def start_game(
    room: Room,
    card_pool: CardPool,
    role_service: RoleConfigService,
    rng: random.Random | None = None,
) -> tuple[bool, ValidationState]:
    """Deal roles and start the countdown if the room is ready.

    Args:
        room: The room
        card_pool: Cards to deal from
        role_service: Resolves the room's distribution
        rng: Random source for dealing

    Returns:
        Tuple of (started, validation_state)
    """
    validation = room.get_validation_state(role_service)
    if not validation.can_start:
        return False, validation

    def deal(players: list) -> None:
        assign_roles_with_config(players, card_pool, room.role_config, role_service, rng)

    if not room.begin_countdown(deal, role_service):
        # The room changed between the check and the deal
        return False, room.get_validation_state(role_service)
    return True, validation


async def run_countdown(room: Room, interval: float = 1.0) -> None:
    """Tick the room's countdown until play begins.

    Args:
        room: The room, already in the countdown state
        interval: Seconds between ticks
    """
    while room.get_state() == GameState.COUNTDOWN:
        await asyncio.sleep(interval)
        room.tick_countdown()
