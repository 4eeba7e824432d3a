"""Player model for the game."""
from datetime import datetime
from typing import Optional
import uuid

from .cards import Card


class Player:
    """Represents a player in a room.

    Rooms hand out these objects directly, so changes made by a caller are
    visible to every other holder of the same player.
    """

    def __init__(
        self,
        name: str,
        is_host: bool = False,
        player_id: Optional[str] = None,
        session_id: Optional[str] = None,
    ):
        """Initialize a new player.

        Args:
            name: The player's display name
            is_host: Whether this player hosts the room without taking a role
            player_id: Stable ID, generated when omitted
            session_id: Session used to reconnect the player
        """
        self.id: str = player_id or str(uuid.uuid4())
        self.name: str = name
        self.session_id: str = session_id or str(uuid.uuid4())
        self.is_host: bool = is_host
        self.role: Optional[Card] = None  # Will be set when the game starts
        self.role_revealed: bool = False  # Leaders are revealed to everyone
        self.joined_at: datetime = datetime.now()

    def to_dict(self, include_role: bool = False) -> dict:
        """Convert player to dictionary for API responses.

        Args:
            include_role: Whether to include a concealed role

        Returns:
            Dictionary representation of the player
        """
        data = {
            "id": self.id,
            "name": self.name,
            "is_host": self.is_host,
            "role_revealed": self.role_revealed,
            "role": None,
        }
        if self.role is not None and (include_role or self.role_revealed):
            data["role"] = {
                "name": self.role.name,
                "role_type": self.role.role_type.value,
                "win_condition": self.role.win_condition,
            }
        return data

    def __repr__(self) -> str:
        role = self.role.name if self.role else None
        return f"Player(id={self.id}, name={self.name}, role={role})"
