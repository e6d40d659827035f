"""
Empire Kernel — Core Domain Types

Pure data. No transition logic.
Catalog entries are frozen; the only mutable records are the top-level
states and the members / neighborhoods they own, and those are only ever
mutated on a fresh copy inside a transition.

────────────────────────────────────────────────
DOMAIN GLOSSARY
────────────────────────────────────────────────

Presence:
    Ordinal territorial-control state of a neighborhood:
    Inexistente < Infiltrado < Disputado < Dominado.

Rank power:
    Integer weight used to sum roster combat strength.

Buff:
    Villain-granted modifier of one type (profit | attack | influence |
    defense) applied during the matching calculation.

Takeover:
    Contesting a neighborhood's presence with roster power versus the
    dominant organisation's power.

────────────────────────────────────────────────
"""

from __future__ import annotations

import copy
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Iterator, List, Optional, Tuple


VARIANT_RAID = "raid"
VARIANT_RPG = "rpg"
VARIANTS = (VARIANT_RAID, VARIANT_RPG)

# ── Presence ──────────────────────────────────────────────────
PRESENCE_NONE = "Inexistente"
PRESENCE_INFILTRATED = "Infiltrado"
PRESENCE_CONTESTED = "Disputado"
PRESENCE_DOMINATED = "Dominado"

PRESENCE_ORDER: Tuple[str, ...] = (
    PRESENCE_NONE,
    PRESENCE_INFILTRATED,
    PRESENCE_CONTESTED,
    PRESENCE_DOMINATED,
)


def presence_index(presence: str) -> int:
    """Ordinal of a presence value. Raises ValueError on unknown values."""
    return PRESENCE_ORDER.index(presence)


# ── Resources ─────────────────────────────────────────────────

@dataclass(frozen=True)
class Resources:
    """Cash / influence / respect triple. No floor, no clamping."""

    cash: int = 0
    influence: int = 0
    respect: int = 0

    def plus(self, delta: "Resources") -> "Resources":
        return Resources(
            cash=self.cash + delta.cash,
            influence=self.influence + delta.influence,
            respect=self.respect + delta.respect,
        )

    def negated(self) -> "Resources":
        return Resources(-self.cash, -self.influence, -self.respect)

    def to_dict(self) -> dict:
        return {
            "cash": self.cash,
            "influence": self.influence,
            "respect": self.respect,
        }


ZERO_RESOURCES = Resources()


# ── Raid catalog types ────────────────────────────────────────

@dataclass(frozen=True)
class Business:
    id: str
    name: str
    income: Resources
    heat: int = 0


@dataclass(frozen=True)
class Troop:
    id: str
    name: str
    type: str
    description: str
    attack: int
    defense: int
    upkeep: int


@dataclass(frozen=True)
class Territory:
    """Raid target. Static; linked businesses produce passive income."""

    id: str
    name: str
    defense: int
    business_ids: Tuple[str, ...] = ()


@dataclass(frozen=True)
class VillainBuff:
    type: str  # profit | attack | influence | defense
    value: float
    description: str


@dataclass(frozen=True)
class Villain:
    id: str
    name: str
    rarity: str
    role: str
    buff: VillainBuff


@dataclass
class RaidSelection:
    """Currently selected troop / lieutenant / target territory."""

    troop_id: str
    villain_id: str
    territory_id: str


# ── RPG catalog types ─────────────────────────────────────────

@dataclass(frozen=True)
class Rank:
    name: str
    min_xp: int
    promote_cost: Resources
    power: int


@dataclass
class Member:
    """Roster entry. ``level`` follows xp; ``rank`` changes only by promotion."""

    id: str
    name: str
    rank: str
    xp: int = 0
    level: int = 1


@dataclass(frozen=True)
class Crime:
    id: str
    name: str
    tier: int
    rewards: Resources
    xp: int
    risk: float
    required_item_ids: Tuple[str, ...] = ()
    min_rank_counts: Tuple[Tuple[str, int], ...] = ()


@dataclass(frozen=True)
class BlackMarketItem:
    id: str
    name: str
    price: int
    effects: Resources = ZERO_RESOURCES


@dataclass(frozen=True)
class RecruitCandidate:
    id: str
    name: str
    rank: str
    xp: int
    level: int
    entry_type: str  # cash | respect
    entry_value: int

    def to_member(self) -> Member:
        return Member(
            id=self.id, name=self.name, rank=self.rank,
            xp=self.xp, level=self.level,
        )


# ── World map (arena + hierarchy index) ───────────────────────

@dataclass(frozen=True)
class DominantOrg:
    name: str
    power_level: int
    elite_count: int


@dataclass
class Neighborhood:
    """Leaf of the world map. ``presence`` is the only mutable field."""

    id: str
    name: str
    dominant_org: DominantOrg
    presence: str = PRESENCE_NONE


@dataclass(frozen=True)
class Region:
    """Country, state or city node. ``children`` holds composite ids in order."""

    id: str
    name: str
    level: str  # country | state | city
    children: Tuple[str, ...] = ()


@dataclass(frozen=True)
class SelectedLocation:
    country_id: str
    state_id: str
    city_id: str
    neighborhood_id: str

    def key(self) -> str:
        return join_key(
            self.country_id, self.state_id, self.city_id, self.neighborhood_id,
        )


def join_key(*parts: str) -> str:
    """Composite arena key, e.g. ``br/sp/sao-paulo/se``."""
    return "/".join(parts)


@dataclass
class WorldMap:
    """
    Country → State → City → Neighborhood, stored flat.

    ``regions`` and ``neighborhoods`` are keyed by composite id;
    the hierarchy lives in ``country_ids`` and each ``Region.children``.
    """

    regions: Dict[str, Region] = field(default_factory=dict)
    neighborhoods: Dict[str, Neighborhood] = field(default_factory=dict)
    country_ids: List[str] = field(default_factory=list)

    def resolve(self, location: SelectedLocation) -> Optional[Neighborhood]:
        """Walk the four levels; None when any step is missing."""
        country_key = location.country_id
        state_key = join_key(country_key, location.state_id)
        city_key = join_key(state_key, location.city_id)
        hood_key = join_key(city_key, location.neighborhood_id)

        if country_key not in self.country_ids:
            return None
        if state_key not in self.regions[country_key].children:
            return None
        state = self.regions.get(state_key)
        if state is None or city_key not in state.children:
            return None
        city = self.regions.get(city_key)
        if city is None or hood_key not in city.children:
            return None
        return self.neighborhoods.get(hood_key)

    def iter_locations(self) -> Iterator[Tuple[SelectedLocation, Neighborhood]]:
        """Yield every neighborhood in hierarchy order."""
        for country_key in self.country_ids:
            for state_key in self.regions[country_key].children:
                for city_key in self.regions[state_key].children:
                    for hood_key in self.regions[city_key].children:
                        c, s, ci, n = hood_key.split("/")
                        yield (
                            SelectedLocation(c, s, ci, n),
                            self.neighborhoods[hood_key],
                        )

    def to_dict(self) -> dict:
        def _region(key: str) -> dict:
            region = self.regions[key]
            return {"id": region.id, "name": region.name, "level": region.level}

        countries = []
        for country_key in self.country_ids:
            country = _region(country_key)
            country["states"] = []
            for state_key in self.regions[country_key].children:
                state = _region(state_key)
                state["cities"] = []
                for city_key in self.regions[state_key].children:
                    city = _region(city_key)
                    city["neighborhoods"] = [
                        {
                            "id": hood.id,
                            "name": hood.name,
                            "presence": hood.presence,
                            "dominant_org": {
                                "name": hood.dominant_org.name,
                                "power_level": hood.dominant_org.power_level,
                                "elite_count": hood.dominant_org.elite_count,
                            },
                        }
                        for hood in (
                            self.neighborhoods[k]
                            for k in self.regions[city_key].children
                        )
                    ]
                    state["cities"].append(city)
                country["states"].append(state)
            countries.append(country)
        return {"countries": countries}


# ── Transition outcome ────────────────────────────────────────

class RejectionReason(str, Enum):
    INSUFFICIENT_FUNDS = "InsufficientFunds"
    UNKNOWN_ID = "UnknownId"
    REQUIREMENTS_NOT_MET = "RequirementsNotMet"
    RANK_AT_MAXIMUM = "RankAtMaximum"
    CANDIDATE_NOT_FOUND = "CandidateNotFound"
    UNSUPPORTED_ACTION = "UnsupportedAction"


@dataclass(frozen=True)
class TransitionResult:
    """
    Structured, immutable outcome of a state transition.

    ``applied=False`` means the state was returned unchanged;
    ``rejection`` then says why.
    """

    action_type: str = ""
    applied: bool = True
    rejection: Optional[RejectionReason] = None
    reason: str = ""
    log_entry: str = ""
    resource_delta: Resources = ZERO_RESOURCES
    win_chance: Optional[float] = None
    roll: Optional[float] = None
    victory: Optional[bool] = None
    presence_before: str = ""
    presence_after: str = ""
    absorbed_count: int = 0

    def to_dict(self) -> dict:
        return {
            "action_type": self.action_type,
            "applied": self.applied,
            "rejection": self.rejection.value if self.rejection else None,
            "reason": self.reason,
            "log_entry": self.log_entry,
            "resource_delta": self.resource_delta.to_dict(),
            "win_chance": self.win_chance,
            "roll": self.roll,
            "victory": self.victory,
            "presence_before": self.presence_before,
            "presence_after": self.presence_after,
            "absorbed_count": self.absorbed_count,
        }


def rejected(
    action_type: str, rejection: RejectionReason, reason: str = "",
) -> TransitionResult:
    return TransitionResult(
        action_type=action_type,
        applied=False,
        rejection=rejection,
        reason=reason,
    )


# ── Game states ───────────────────────────────────────────────

@dataclass
class RaidState:
    """Complete snapshot of the raid variant."""

    resources: Resources
    territories: List[Territory] = field(default_factory=list)
    businesses: List[Business] = field(default_factory=list)
    troops: List[Troop] = field(default_factory=list)
    villains: List[Villain] = field(default_factory=list)
    activity_log: List[str] = field(default_factory=list)
    active_raid: Optional[RaidSelection] = None

    variant = VARIANT_RAID

    def copy(self) -> "RaidState":
        """Deep-copy the entire state for copy-on-write transitions."""
        return copy.deepcopy(self)

    def to_dict(self) -> dict:
        return {
            "variant": self.variant,
            "resources": self.resources.to_dict(),
            "territories": [
                {
                    "id": t.id,
                    "name": t.name,
                    "defense": t.defense,
                    "business_ids": list(t.business_ids),
                }
                for t in self.territories
            ],
            "villains": [
                {
                    "id": v.id,
                    "name": v.name,
                    "rarity": v.rarity,
                    "role": v.role,
                    "buff": {
                        "type": v.buff.type,
                        "value": v.buff.value,
                        "description": v.buff.description,
                    },
                }
                for v in self.villains
            ],
            "activity_log": list(self.activity_log),
            "active_raid": (
                {
                    "troop_id": self.active_raid.troop_id,
                    "villain_id": self.active_raid.villain_id,
                    "territory_id": self.active_raid.territory_id,
                }
                if self.active_raid else None
            ),
        }


@dataclass
class RpgState:
    """Complete snapshot of the geopolitical RPG variant."""

    resources: Resources
    members: List[Member] = field(default_factory=list)
    inventory: Dict[str, int] = field(default_factory=dict)
    recruit_pool: List[RecruitCandidate] = field(default_factory=list)
    world_map: WorldMap = field(default_factory=WorldMap)
    selected_location: Optional[SelectedLocation] = None
    activity_log: List[str] = field(default_factory=list)
    day: int = 1
    info_panel: Optional[str] = None

    variant = VARIANT_RPG

    def copy(self) -> "RpgState":
        """Deep-copy the entire state for copy-on-write transitions."""
        return copy.deepcopy(self)

    def member(self, member_id: str) -> Optional[Member]:
        for m in self.members:
            if m.id == member_id:
                return m
        return None

    def to_dict(self) -> dict:
        loc = self.selected_location
        return {
            "variant": self.variant,
            "resources": self.resources.to_dict(),
            "members": [
                {
                    "id": m.id,
                    "name": m.name,
                    "rank": m.rank,
                    "xp": m.xp,
                    "level": m.level,
                }
                for m in self.members
            ],
            "inventory": dict(sorted(self.inventory.items())),
            "recruit_pool": [
                {
                    "id": c.id,
                    "name": c.name,
                    "rank": c.rank,
                    "xp": c.xp,
                    "level": c.level,
                    "entry": {"type": c.entry_type, "value": c.entry_value},
                }
                for c in self.recruit_pool
            ],
            "world_map": self.world_map.to_dict(),
            "selected_location": (
                {
                    "country_id": loc.country_id,
                    "state_id": loc.state_id,
                    "city_id": loc.city_id,
                    "neighborhood_id": loc.neighborhood_id,
                }
                if loc else None
            ),
            "activity_log": list(self.activity_log),
            "day": self.day,
            "info_panel": self.info_panel,
        }
