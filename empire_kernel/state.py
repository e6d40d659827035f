"""
Empire Kernel — State Construction

Initial snapshots for both variants. Villain generation is the only
random step and draws from the injected RNG.
"""

from __future__ import annotations

from .catalog import (
    BUSINESSES, DEFAULT_RAID_TERRITORY_ID, DEFAULT_RAID_TROOP_ID,
    FIRST_NAMES, INTRO_LOG as RAID_INTRO_LOG, LAST_NAMES, TERRITORIES,
    TROOPS, VILLAIN_RARITIES, VILLAIN_ROLES,
)
from .constants import VILLAIN_COUNT
from .domain_types import (
    Member, RaidSelection, RaidState, Resources, RpgState, Villain,
)
from .rng import DeterministicRNG
from .rpg_catalog import (
    INTRO_LOG as RPG_INTRO_LOG, PLAYER_ID, PLAYER_NAME, RANK_RECRUIT,
    RECRUIT_POOL, build_world_map,
)


def create_villain(rng: DeterministicRNG, index: int) -> Villain:
    """Draw a lieutenant uniformly from the role / name / rarity tables."""
    role_title, buff = rng.rand_choice(VILLAIN_ROLES)
    first = rng.rand_choice(FIRST_NAMES)
    last = rng.rand_choice(LAST_NAMES)
    rarity = rng.rand_choice(VILLAIN_RARITIES)
    tag = rng.rand_int(0, 0xFFFFFF)
    return Villain(
        id=f"villain-{index}-{tag:06x}",
        name=f"{first} {last}",
        rarity=rarity,
        role=role_title,
        buff=buff,
    )


def create_initial_state(
    rng: DeterministicRNG,
    cash: int = 2500,
    influence: int = 35,
    respect: int = 20,
) -> RaidState:
    """Create a fresh raid-variant state with generated lieutenants."""
    villains = [create_villain(rng, i) for i in range(VILLAIN_COUNT)]
    return RaidState(
        resources=Resources(cash=cash, influence=influence, respect=respect),
        territories=list(TERRITORIES),
        businesses=list(BUSINESSES),
        troops=list(TROOPS),
        villains=villains,
        activity_log=list(RAID_INTRO_LOG),
        active_raid=RaidSelection(
            troop_id=DEFAULT_RAID_TROOP_ID,
            villain_id=villains[0].id if villains else "",
            territory_id=DEFAULT_RAID_TERRITORY_ID,
        ),
    )


def create_initial_rpg_state(
    cash: int = 2500,
    influence: int = 10,
    respect: int = 10,
) -> RpgState:
    """Create a fresh RPG-variant state. Fully deterministic."""
    world = build_world_map()
    first_location = next(world.iter_locations(), None)
    return RpgState(
        resources=Resources(cash=cash, influence=influence, respect=respect),
        members=[
            Member(id=PLAYER_ID, name=PLAYER_NAME, rank=RANK_RECRUIT,
                   xp=0, level=1),
        ],
        inventory={},
        recruit_pool=list(RECRUIT_POOL),
        world_map=world,
        selected_location=first_location[0] if first_location else None,
        activity_log=list(RPG_INTRO_LOG),
        day=1,
        info_panel=None,
    )
