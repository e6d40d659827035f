"""
Empire Kernel — Derived-Value Calculators

Pure functions over catalogs and state. The only randomness is the
single draw in ``calculate_raid_outcome``, taken from the injected RNG.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Iterable, List, Optional, Sequence

from .catalog import get_business, get_territory, get_troop
from .constants import (
    DOMINATED_BASE_CASH, DOMINATED_CASH_PER_POWER, DOMINATED_INFLUENCE,
    DOMINATED_RESPECT, MAX_WIN_CHANCE, MIN_WIN_CHANCE, XP_PER_LEVEL,
)
from .domain_types import (
    PRESENCE_DOMINATED, PRESENCE_NONE, PRESENCE_ORDER, Crime, DominantOrg,
    Member, RaidState, Resources, RpgState, Territory, Troop, Villain,
    WorldMap, ZERO_RESOURCES,
)
from .rng import DeterministicRNG
from .rpg_catalog import CRIMES, rank_power


@dataclass(frozen=True)
class RaidOutcome:
    win_chance: float
    victory: bool
    roll: float


def clamp(value, low, high):
    return max(low, min(high, value))


def clamp_win_chance(ratio: float) -> float:
    return clamp(ratio, MIN_WIN_CHANCE, MAX_WIN_CHANCE)


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def level_for_xp(xp: int) -> int:
    return 1 + xp // XP_PER_LEVEL


# ---------------------------------------------------------------------------
# Income
# ---------------------------------------------------------------------------

def _sum_business_income(business_ids: Iterable[str]) -> Resources:
    total = ZERO_RESOURCES
    for business_id in business_ids:
        business = get_business(business_id)
        if business is None:
            continue
        total = total.plus(business.income)
    return total


def calculate_passive_income(territories: Sequence[Territory]) -> Resources:
    """Sum of every linked business's income across *territories*."""
    total = ZERO_RESOURCES
    for territory in territories:
        total = total.plus(_sum_business_income(territory.business_ids))
    return total


def calculate_territory_income(world_map: WorldMap) -> Resources:
    """
    Daily income from dominated neighborhoods:
      cash += 15 + 2 * power_level, influence += 1, respect += 1
    """
    total = ZERO_RESOURCES
    for hood in world_map.neighborhoods.values():
        if hood.presence != PRESENCE_DOMINATED:
            continue
        total = total.plus(Resources(
            cash=DOMINATED_BASE_CASH
            + DOMINATED_CASH_PER_POWER * hood.dominant_org.power_level,
            influence=DOMINATED_INFLUENCE,
            respect=DOMINATED_RESPECT,
        ))
    return total


# ---------------------------------------------------------------------------
# Raid combat
# ---------------------------------------------------------------------------

def compute_raid_win_chance(
    troop: Troop, villain: Optional[Villain], territory: Territory,
) -> float:
    """
    effective_attack  = attack  * (1 + attack buff)
    effective_defense = defense * (1 - defense debuff)
    win_chance = clamp(effective_attack / (effective_defense + 1), 0.1, 0.9)
    """
    buff = villain.buff if villain is not None else None
    attack_buff = buff.value if buff is not None and buff.type == "attack" else 0
    defense_debuff = (
        buff.value if buff is not None and buff.type == "defense" else 0
    )
    effective_attack = troop.attack * (1 + attack_buff)
    effective_defense = territory.defense * (1 - defense_debuff)
    return clamp_win_chance(effective_attack / (effective_defense + 1))


def calculate_raid_outcome(
    troop: Troop,
    villain: Optional[Villain],
    territory: Territory,
    rng: DeterministicRNG,
) -> RaidOutcome:
    """Resolve a raid with one draw: ``victory = roll <= win_chance``."""
    win_chance = compute_raid_win_chance(troop, villain, territory)
    roll = rng.roll()
    return RaidOutcome(win_chance=win_chance, victory=roll <= win_chance,
                       roll=roll)


def find_villain(state: RaidState, villain_id: str) -> Optional[Villain]:
    for villain in state.villains:
        if villain.id == villain_id:
            return villain
    return None


def project_active_raid(state: RaidState) -> Optional[dict]:
    """
    Preview of the selected raid without rolling.
    None when no selection exists or its troop / territory is unknown.
    """
    selection = state.active_raid
    if selection is None:
        return None
    troop = get_troop(selection.troop_id)
    territory = get_territory(selection.territory_id)
    if troop is None or territory is None:
        return None
    villain = find_villain(state, selection.villain_id)
    chance = compute_raid_win_chance(troop, villain, territory)
    return {
        "troop_id": troop.id,
        "villain_id": villain.id if villain else None,
        "territory_id": territory.id,
        "win_chance": round_half_up(chance * 100),
    }


# ---------------------------------------------------------------------------
# Roster / takeover
# ---------------------------------------------------------------------------

def roster_power(members: Iterable[Member]) -> int:
    return sum(rank_power(m.rank) for m in members)


def count_at_or_above(members: Iterable[Member], rank_name: str) -> int:
    """Members whose rank power is >= *rank_name*'s power."""
    threshold = rank_power(rank_name)
    return sum(1 for m in members if rank_power(m.rank) >= threshold)


def compute_takeover_win_chance(
    members: Sequence[Member], org: DominantOrg,
) -> float:
    return clamp_win_chance(roster_power(members) / (org.power_level + 1))


def resolve_presence(current: str, victory: bool) -> str:
    """
    Presence state machine:
      Inexistente → Infiltrado  on any attempt
      Infiltrado → Disputado → Dominado  only on victory
      Dominado is terminal
    """
    idx = PRESENCE_ORDER.index(current)
    if idx + 1 >= len(PRESENCE_ORDER):
        return current
    candidate = PRESENCE_ORDER[idx + 1]
    if current == PRESENCE_NONE or victory:
        return candidate
    return current


# ---------------------------------------------------------------------------
# Crimes
# ---------------------------------------------------------------------------

def can_commit_crime(state: RpgState, crime: Crime) -> bool:
    """
    True iff every required item is held (qty > 0) and, for each
    (rank, count) requirement, at least *count* members rank at or above
    that rank by power.
    """
    for item_id in crime.required_item_ids:
        if state.inventory.get(item_id, 0) <= 0:
            return False
    for rank_name, count in crime.min_rank_counts:
        if count_at_or_above(state.members, rank_name) < count:
            return False
    return True


def eligible_crimes(state: RpgState) -> List[str]:
    return [c.id for c in CRIMES if can_commit_crime(state, c)]
