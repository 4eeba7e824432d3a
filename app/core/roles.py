"""Role definitions and the built-in role distribution table."""

from enum import Enum

from .exceptions import UnknownRoleTypeError


class RoleType(str, Enum):
    """Role types a card can grant."""

    LEADER = "Leader"
    GUARDIAN = "Guardian"
    ASSASSIN = "Assassin"
    TRAITOR = "Traitor"

    @classmethod
    def parse(cls, name: "str | RoleType") -> "RoleType":
        """Resolve a role type from a case-insensitive name.

        Args:
            name: A role type or its name ("leader", "Leader", ...)

        Returns:
            The matching RoleType

        Raises:
            UnknownRoleTypeError: If the name is not a known role type
        """
        if isinstance(name, RoleType):
            return name
        lowered = str(name).strip().lower()
        for role_type in cls:
            if role_type.value.lower() == lowered:
                return role_type
        raise UnknownRoleTypeError(str(name))

    @property
    def win_condition(self) -> str:
        return _WIN_CONDITIONS[self]


_WIN_CONDITIONS = {
    RoleType.LEADER: "Survive and be the last player standing",
    RoleType.GUARDIAN: "Win or lose with the Leader",
    RoleType.ASSASSIN: "Win if the Leader is eliminated",
    RoleType.TRAITOR: "Be the last player standing",
}

# Cards are dealt in this order so the Leader slot is always filled first
ROLE_ORDER = (RoleType.LEADER, RoleType.GUARDIAN, RoleType.ASSASSIN, RoleType.TRAITOR)


def calculate_role_distribution(player_count: int) -> dict[RoleType, int]:
    """Calculate the built-in role distribution for a player count.

    Distribution:
    - 1 player: 1 Leader
    - 2 players: 1 Leader, 1 Traitor
    - 3 players: 1 Leader, 1 Guardian, 1 Traitor
    - 4 players: 1 Leader, 2 Guardians, 1 Traitor
    - 5 players: 1 Leader, 2 Guardians, 1 Assassin, 1 Traitor
    - 6 players: 1 Leader, 2 Guardians, 2 Assassins, 1 Traitor
    - 7 players: 1 Leader, 3 Guardians, 2 Assassins, 1 Traitor
    - 8 players: 1 Leader, 3 Guardians, 2 Assassins, 2 Traitors
    - more: 1 Leader, everyone else a Guardian

    Args:
        player_count: Number of players receiving a role

    Returns:
        Dictionary mapping RoleType to count

    Raises:
        ValueError: If player count is below 1
    """
    if player_count < 1:
        raise ValueError("Minimum 1 player required")

    table = {
        1: (1, 0, 0, 0),
        2: (1, 0, 0, 1),
        3: (1, 1, 0, 1),
        4: (1, 2, 0, 1),
        5: (1, 2, 1, 1),
        6: (1, 2, 2, 1),
        7: (1, 3, 2, 1),
        8: (1, 3, 2, 2),
    }
    counts = table.get(player_count, (1, player_count - 1, 0, 0))

    return {role: count for role, count in zip(ROLE_ORDER, counts, strict=True) if count > 0}
