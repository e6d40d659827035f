"""
Empire Kernel — Tunable Constants

All magic numbers live here as module-level defaults.
"""

# --- Scheduling ---
TICK_INTERVAL_MS: int = 4000

# --- Activity log ---
RAID_LOG_CAP: int = 8
RPG_LOG_CAP: int = 12

# --- Win-chance clamp (combat never certain either way) ---
MIN_WIN_CHANCE: float = 0.1
MAX_WIN_CHANCE: float = 0.9

# --- Raid ---
RAID_VICTORY_RESPECT: int = 4
RAID_DEFEAT_RESPECT: int = -2
VILLAIN_COUNT: int = 4

# --- Crime ---
CRIME_FAILURE_RESPECT: int = -1
CRIME_FAILURE_XP_DIVISOR: int = 3

# --- Members ---
XP_PER_LEVEL: int = 50

# --- Territory income per dominated neighborhood ---
DOMINATED_BASE_CASH: int = 15
DOMINATED_CASH_PER_POWER: int = 2
DOMINATED_INFLUENCE: int = 1
DOMINATED_RESPECT: int = 1

# --- Takeover absorption ---
ABSORB_CHANCE: float = 0.2
ABSORB_MIN: int = 1
ABSORB_MAX: int = 2
ABSORBED_RANK: str = "Elite"
ABSORBED_XP: int = 400
ABSORBED_LEVEL: int = 8
