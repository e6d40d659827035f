"""
Empire Kernel
Deterministic, in-memory reducer core for the Neon Empire game:
a raid variant and a geopolitical RPG variant sharing one data model.
All randomness flows through an injected DeterministicRNG.
"""

from .domain_types import (
    Resources, Business, Troop, Territory, Villain, VillainBuff, Rank,
    Member, Crime, BlackMarketItem, RecruitCandidate, DominantOrg,
    Neighborhood, Region, WorldMap, SelectedLocation, RaidSelection,
    RaidState, RpgState, TransitionResult, RejectionReason,
    PRESENCE_ORDER, VARIANT_RAID, VARIANT_RPG,
)
from .actions import (
    BaseAction,
    TickAction,
    RaidAction,
    SetRaidTargetAction,
    AdvanceDayAction,
    SetLocationAction,
    CommitCrimeAction,
    BuyItemAction,
    RecruitAction,
    PromoteAction,
    TakeoverAction,
    ToggleInfoAction,
    reconstruct_action,
)
from .calculators import (
    calculate_passive_income,
    calculate_territory_income,
    calculate_raid_outcome,
    compute_raid_win_chance,
    can_commit_crime,
)
from .engine import GameEngine
from .hashing import canonical_serialize, canonical_hash
from .invariants import InvariantViolationError
from .rng import DeterministicRNG, ScriptedRNG
from .state import create_initial_state, create_initial_rpg_state
from .transitions import apply_action

__all__ = [
    "Resources",
    "Business",
    "Troop",
    "Territory",
    "Villain",
    "VillainBuff",
    "Rank",
    "Member",
    "Crime",
    "BlackMarketItem",
    "RecruitCandidate",
    "DominantOrg",
    "Neighborhood",
    "Region",
    "WorldMap",
    "SelectedLocation",
    "RaidSelection",
    "RaidState",
    "RpgState",
    "TransitionResult",
    "RejectionReason",
    "PRESENCE_ORDER",
    "VARIANT_RAID",
    "VARIANT_RPG",
    "BaseAction",
    "TickAction",
    "RaidAction",
    "SetRaidTargetAction",
    "AdvanceDayAction",
    "SetLocationAction",
    "CommitCrimeAction",
    "BuyItemAction",
    "RecruitAction",
    "PromoteAction",
    "TakeoverAction",
    "ToggleInfoAction",
    "reconstruct_action",
    "calculate_passive_income",
    "calculate_territory_income",
    "calculate_raid_outcome",
    "compute_raid_win_chance",
    "can_commit_crime",
    "GameEngine",
    "canonical_serialize",
    "canonical_hash",
    "InvariantViolationError",
    "DeterministicRNG",
    "ScriptedRNG",
    "create_initial_state",
    "create_initial_rpg_state",
    "apply_action",
]
