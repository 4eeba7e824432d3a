"""Game constants and configuration."""

# Room settings
MIN_PLAYERS = 1
MAX_PLAYERS = 20
DEFAULT_GAME_SIZE = 5
ROOM_CODE_LENGTH = 5
ROOM_CODE_ALPHABET = "ABCDEFGHIJKLMNOPQRSTUVWXYZ0123456789"

# Game state cleanup
ROOM_TTL_SECONDS = 24 * 3600  # Rooms are cleaned up after 24 hours

# Seconds between role reveal and play
COUNTDOWN_SECONDS = 5

# Preset name for hand-edited role configurations
CUSTOM_PRESET = "custom"
DEFAULT_PRESET = "standard"

# Presets drawn from when a room hides its role distribution
HIDDEN_PRESET_CANDIDATES = ("standard", "assassination", "guardian")

# Relative odds of each role type when roles are fully random.
# Keys are role type values so this module stays import-free.
RANDOM_ROLE_WEIGHTS = {
    "Leader": 1,
    "Guardian": 3,
    "Assassin": 2,
    "Traitor": 1,
}

# Baseline distributions for 1-8 players.
# Format: player_count -> {role name: count}
STANDARD_DISTRIBUTIONS = {
    1: {"leader": 1},
    2: {"leader": 1, "traitor": 1},
    3: {"leader": 1, "guardian": 1, "traitor": 1},
    4: {"leader": 1, "guardian": 2, "traitor": 1},
    5: {"leader": 1, "guardian": 2, "assassin": 1, "traitor": 1},
    6: {"leader": 1, "guardian": 2, "assassin": 2, "traitor": 1},
    7: {"leader": 1, "guardian": 3, "assassin": 2, "traitor": 1},
    8: {"leader": 1, "guardian": 3, "assassin": 2, "traitor": 2},
}

# Seconds between sweeps for stale rooms
CLEANUP_INTERVAL_SECONDS = 3600
