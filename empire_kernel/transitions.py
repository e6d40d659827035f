"""
Empire Kernel — Centralized Transition Logic

ALL state-mutation logic lives here.
Handlers run on a deep copy; a rejected action hands back the original
state object untouched, so ``next_state is state`` signals a no-op.
"""

from __future__ import annotations

from typing import Callable, Dict, Tuple, Union

from .actions import ACTION_CLASS_MAP, BaseAction
from .calculators import (
    calculate_passive_income, calculate_raid_outcome,
    calculate_territory_income, can_commit_crime, clamp,
    compute_takeover_win_chance, count_at_or_above, find_villain,
    level_for_xp, resolve_presence, roster_power, round_half_up,
)
from .constants import (
    ABSORB_CHANCE, ABSORB_MAX, ABSORB_MIN, ABSORBED_LEVEL, ABSORBED_RANK,
    ABSORBED_XP, CRIME_FAILURE_RESPECT, CRIME_FAILURE_XP_DIVISOR,
    RAID_DEFEAT_RESPECT, RAID_LOG_CAP, RAID_VICTORY_RESPECT, RPG_LOG_CAP,
)
from .domain_types import (
    PRESENCE_DOMINATED, VARIANT_RAID, Member, RaidSelection, RaidState,
    RejectionReason, Resources, RpgState, SelectedLocation, TransitionResult,
    rejected,
)
from .rng import DeterministicRNG
from .rpg_catalog import (
    RANK_RECRUIT, RANK_SOLDIER, get_crime, get_item, get_next_rank, get_rank,
)

GameState = Union[RaidState, RpgState]


# ---------------------------------------------------------------------------
# Public dispatcher
# ---------------------------------------------------------------------------

def apply_action(
    state: GameState, action: BaseAction, rng: DeterministicRNG,
) -> Tuple[GameState, TransitionResult]:
    """
    Apply *action* to *state* and return ``(next_state, result)``.
    The original state is never mutated.
    """
    atype = action.action_type
    if atype not in ACTION_CLASS_MAP:
        raise ValueError(f"Unknown action type: {atype}")

    handlers = _RAID_HANDLERS if state.variant == VARIANT_RAID else _RPG_HANDLERS
    handler = handlers.get(atype)
    if handler is None:
        return state, rejected(
            atype, RejectionReason.UNSUPPORTED_ACTION,
            f"{atype} is not available in the {state.variant} variant",
        )

    new_state = state.copy()
    result = handler(new_state, action, rng)
    if not result.applied:
        return state, result
    return new_state, result


# ---------------------------------------------------------------------------
# Shared helpers
# ---------------------------------------------------------------------------

def _push_log(state: GameState, entry: str, cap: int) -> None:
    """Most-recent-first; entries beyond *cap* are dropped."""
    state.activity_log = [entry] + state.activity_log[: cap - 1]


def _find_by_id(items, item_id):
    for item in items:
        if item.id == item_id:
            return item
    return None


def _can_afford(resources: Resources, cost: Resources) -> bool:
    return (
        resources.cash >= cost.cash
        and resources.influence >= cost.influence
        and resources.respect >= cost.respect
    )


# ---------------------------------------------------------------------------
# Raid variant handlers (private)
# ---------------------------------------------------------------------------

def _apply_tick(
    state: RaidState, action: BaseAction, rng: DeterministicRNG,
) -> TransitionResult:
    income = calculate_passive_income(state.territories)
    state.resources = state.resources.plus(income)
    entry = f"Negócios renderam ${income.cash} e +{income.influence} influência."
    _push_log(state, entry, RAID_LOG_CAP)
    return TransitionResult(
        action_type=action.action_type, log_entry=entry,
        resource_delta=income,
    )


def _apply_raid(
    state: RaidState, action: BaseAction, rng: DeterministicRNG,
) -> TransitionResult:
    """
    One draw against the clamped win chance:
      victory → respect +4, defeat → respect -2
    """
    p = action.payload
    selection = state.active_raid
    troop_id = p.get("troop_id") or (selection.troop_id if selection else "")
    territory_id = p.get("territory_id") or (
        selection.territory_id if selection else ""
    )
    villain_id = p.get("villain_id") or (
        selection.villain_id if selection else ""
    )

    troop = _find_by_id(state.troops, troop_id)
    if troop is None:
        return rejected(action.action_type, RejectionReason.UNKNOWN_ID,
                        f"troop {troop_id!r} does not exist")
    territory = _find_by_id(state.territories, territory_id)
    if territory is None:
        return rejected(action.action_type, RejectionReason.UNKNOWN_ID,
                        f"territory {territory_id!r} does not exist")
    villain = find_villain(state, villain_id)

    outcome = calculate_raid_outcome(troop, villain, territory, rng)
    if outcome.victory:
        delta = Resources(respect=RAID_VICTORY_RESPECT)
        entry = f"Raid bem-sucedido em {territory.name}. O respeito aumenta."
    else:
        delta = Resources(respect=RAID_DEFEAT_RESPECT)
        entry = f"Raid falhou em {territory.name}. Reorganize suas tropas."

    state.resources = state.resources.plus(delta)
    _push_log(state, entry, RAID_LOG_CAP)
    return TransitionResult(
        action_type=action.action_type,
        log_entry=entry,
        resource_delta=delta,
        win_chance=outcome.win_chance,
        roll=outcome.roll,
        victory=outcome.victory,
    )


def _apply_set_raid_target(
    state: RaidState, action: BaseAction, rng: DeterministicRNG,
) -> TransitionResult:
    p = action.payload
    troop_id = p.get("troop_id", "")
    territory_id = p.get("territory_id", "")
    villain_id = p.get("villain_id") or ""

    if _find_by_id(state.troops, troop_id) is None:
        return rejected(action.action_type, RejectionReason.UNKNOWN_ID,
                        f"troop {troop_id!r} does not exist")
    if _find_by_id(state.territories, territory_id) is None:
        return rejected(action.action_type, RejectionReason.UNKNOWN_ID,
                        f"territory {territory_id!r} does not exist")
    if villain_id and find_villain(state, villain_id) is None:
        return rejected(action.action_type, RejectionReason.UNKNOWN_ID,
                        f"villain {villain_id!r} does not exist")

    state.active_raid = RaidSelection(
        troop_id=troop_id, villain_id=villain_id, territory_id=territory_id,
    )
    return TransitionResult(action_type=action.action_type)


# ---------------------------------------------------------------------------
# RPG variant handlers (private)
# ---------------------------------------------------------------------------

def _apply_advance_day(
    state: RpgState, action: BaseAction, rng: DeterministicRNG,
) -> TransitionResult:
    income = calculate_territory_income(state.world_map)
    state.resources = state.resources.plus(income)
    state.day += 1
    entry = (
        f"Dia {state.day}: territórios renderam ${income.cash}, "
        f"+{income.influence} influência e +{income.respect} respeito."
    )
    _push_log(state, entry, RPG_LOG_CAP)
    return TransitionResult(
        action_type=action.action_type, log_entry=entry,
        resource_delta=income,
    )


def _apply_set_location(
    state: RpgState, action: BaseAction, rng: DeterministicRNG,
) -> TransitionResult:
    p = action.payload
    location = SelectedLocation(
        country_id=p.get("country_id", ""),
        state_id=p.get("state_id", ""),
        city_id=p.get("city_id", ""),
        neighborhood_id=p.get("neighborhood_id", ""),
    )
    if state.world_map.resolve(location) is None:
        return rejected(action.action_type, RejectionReason.UNKNOWN_ID,
                        f"location {location.key()!r} does not exist")
    state.selected_location = location
    return TransitionResult(action_type=action.action_type)


def _grant_leader_xp(state: RpgState, xp: int) -> None:
    # Only roster index 0 (the player) earns crime xp.
    if not state.members:
        return
    leader = state.members[0]
    leader.xp += xp
    leader.level = level_for_xp(leader.xp)


def _apply_commit_crime(
    state: RpgState, action: BaseAction, rng: DeterministicRNG,
) -> TransitionResult:
    """
    success = roll > risk
      success → rewards + full xp
      failure → respect -1, round(xp / 3) xp
    """
    crime_id = action.payload.get("crime_id", "")
    crime = get_crime(crime_id)
    if crime is None:
        return rejected(action.action_type, RejectionReason.UNKNOWN_ID,
                        f"crime {crime_id!r} does not exist")
    if not can_commit_crime(state, crime):
        return rejected(action.action_type,
                        RejectionReason.REQUIREMENTS_NOT_MET,
                        f"requirements for {crime.name!r} not met")

    roll = rng.roll()
    success = roll > crime.risk
    if success:
        delta = crime.rewards
        xp_gain = crime.xp
        entry = (
            f"{crime.name}: sucesso! +${delta.cash}, "
            f"+{delta.respect} respeito, +{xp_gain} XP."
        )
    else:
        delta = Resources(respect=CRIME_FAILURE_RESPECT)
        xp_gain = round_half_up(crime.xp / CRIME_FAILURE_XP_DIVISOR)
        entry = (
            f"{crime.name} falhou. A polícia apertou o cerco "
            f"({CRIME_FAILURE_RESPECT} respeito, +{xp_gain} XP)."
        )

    state.resources = state.resources.plus(delta)
    _grant_leader_xp(state, xp_gain)
    _push_log(state, entry, RPG_LOG_CAP)
    return TransitionResult(
        action_type=action.action_type,
        log_entry=entry,
        resource_delta=delta,
        win_chance=1 - crime.risk,
        roll=roll,
        victory=success,
    )


def _apply_buy_item(
    state: RpgState, action: BaseAction, rng: DeterministicRNG,
) -> TransitionResult:
    item_id = action.payload.get("item_id", "")
    item = get_item(item_id)
    if item is None:
        return rejected(action.action_type, RejectionReason.UNKNOWN_ID,
                        f"item {item_id!r} does not exist")
    if state.resources.cash < item.price:
        return rejected(action.action_type,
                        RejectionReason.INSUFFICIENT_FUNDS,
                        f"cash={state.resources.cash} < price={item.price}")

    delta = Resources(cash=-item.price).plus(item.effects)
    state.resources = state.resources.plus(delta)
    state.inventory[item.id] = state.inventory.get(item.id, 0) + 1
    entry = f"Comprou {item.name} no mercado negro por ${item.price}."
    _push_log(state, entry, RPG_LOG_CAP)
    return TransitionResult(
        action_type=action.action_type, log_entry=entry,
        resource_delta=delta,
    )


def _apply_recruit(
    state: RpgState, action: BaseAction, rng: DeterministicRNG,
) -> TransitionResult:
    member_id = action.payload.get("member_id", "")
    candidate = _find_by_id(state.recruit_pool, member_id)
    if candidate is None:
        return rejected(action.action_type,
                        RejectionReason.CANDIDATE_NOT_FOUND,
                        f"candidate {member_id!r} is not in the recruit pool")

    if candidate.entry_type == "cash":
        cost = Resources(cash=candidate.entry_value)
    else:
        cost = Resources(respect=candidate.entry_value)
    if not _can_afford(state.resources, cost):
        return rejected(action.action_type,
                        RejectionReason.INSUFFICIENT_FUNDS,
                        f"entry costs {candidate.entry_value} "
                        f"{candidate.entry_type}")

    delta = cost.negated()
    state.resources = state.resources.plus(delta)
    state.members.append(candidate.to_member())
    state.recruit_pool = [c for c in state.recruit_pool if c.id != member_id]
    entry = f"{candidate.name} ({candidate.rank}) entrou para a organização."
    _push_log(state, entry, RPG_LOG_CAP)
    return TransitionResult(
        action_type=action.action_type, log_entry=entry,
        resource_delta=delta,
    )


def _apply_promote(
    state: RpgState, action: BaseAction, rng: DeterministicRNG,
) -> TransitionResult:
    member_id = action.payload.get("member_id", "")
    member = state.member(member_id)
    if member is None:
        return rejected(action.action_type, RejectionReason.UNKNOWN_ID,
                        f"member {member_id!r} does not exist")
    next_name = get_next_rank(member.rank)
    if next_name is None:
        return rejected(action.action_type, RejectionReason.RANK_AT_MAXIMUM,
                        f"{member.rank} is the highest rank")
    next_rank = get_rank(next_name)
    if member.xp < next_rank.min_xp:
        return rejected(action.action_type,
                        RejectionReason.REQUIREMENTS_NOT_MET,
                        f"xp={member.xp} < min_xp={next_rank.min_xp}")
    if not _can_afford(state.resources, next_rank.promote_cost):
        return rejected(action.action_type,
                        RejectionReason.INSUFFICIENT_FUNDS,
                        f"promotion to {next_name} costs "
                        f"${next_rank.promote_cost.cash} and "
                        f"{next_rank.promote_cost.respect} respeito")

    delta = next_rank.promote_cost.negated()
    state.resources = state.resources.plus(delta)
    member.rank = next_name
    entry = f"{member.name} foi promovido a {next_name}."
    _push_log(state, entry, RPG_LOG_CAP)
    return TransitionResult(
        action_type=action.action_type, log_entry=entry,
        resource_delta=delta,
    )


def _apply_takeover(
    state: RpgState, action: BaseAction, rng: DeterministicRNG,
) -> TransitionResult:
    """
    Contest the selected neighborhood:
      win_chance = clamp(roster_power / (enemy_power + 1), 0.1, 0.9)
      presence advances per resolve_presence (Inexistente always advances)
      reaching Dominado by victory → 20% chance to absorb 1..2 Elites
    """
    location = state.selected_location
    hood = state.world_map.resolve(location) if location else None
    if hood is None:
        return rejected(action.action_type, RejectionReason.UNKNOWN_ID,
                        "selected location does not resolve to a neighborhood")

    org = hood.dominant_org
    our_power = roster_power(state.members)
    soldiers = count_at_or_above(state.members, RANK_SOLDIER)
    recruits = count_at_or_above(state.members, RANK_RECRUIT)
    win_chance = compute_takeover_win_chance(state.members, org)
    roll = rng.roll()
    victory = roll <= win_chance

    before = hood.presence
    after = resolve_presence(before, victory)
    hood.presence = after

    absorbed = 0
    if victory and after == PRESENCE_DOMINATED and before != PRESENCE_DOMINATED:
        if rng.roll() < ABSORB_CHANCE:
            absorbed = clamp(org.elite_count, ABSORB_MIN, ABSORB_MAX)
            for i in range(absorbed):
                state.members.append(Member(
                    id=f"{hood.id}-elite-{i + 1}",
                    name=f"Elite de {org.name} #{i + 1}",
                    rank=ABSORBED_RANK,
                    xp=ABSORBED_XP,
                    level=ABSORBED_LEVEL,
                ))

    entry = (
        f"Ataque em {hood.name}: {soldiers} soldados e {recruits} membros "
        f"(poder {our_power}) contra {org.name} (poder {org.power_level}). "
        f"{'Vitória' if victory else 'Derrota'}. "
        f"Presença: {before} -> {after}."
    )
    if absorbed:
        entry += f" {absorbed} elite(s) de {org.name} se juntaram a nós."
    _push_log(state, entry, RPG_LOG_CAP)
    return TransitionResult(
        action_type=action.action_type,
        log_entry=entry,
        win_chance=win_chance,
        roll=roll,
        victory=victory,
        presence_before=before,
        presence_after=after,
        absorbed_count=absorbed,
    )


def _apply_toggle_info(
    state: RpgState, action: BaseAction, rng: DeterministicRNG,
) -> TransitionResult:
    panel = action.payload.get("panel")
    state.info_panel = None if state.info_panel == panel else panel
    return TransitionResult(action_type=action.action_type)


Handler = Callable[[GameState, BaseAction, DeterministicRNG], TransitionResult]

_RAID_HANDLERS: Dict[str, Handler] = {
    "TICK": _apply_tick,
    "RAID": _apply_raid,
    "SET_RAID_TARGET": _apply_set_raid_target,
}

_RPG_HANDLERS: Dict[str, Handler] = {
    "ADVANCE_DAY": _apply_advance_day,
    "SET_LOCATION": _apply_set_location,
    "ACTION_COMMIT_CRIME": _apply_commit_crime,
    "ACTION_BUY_ITEM": _apply_buy_item,
    "ACTION_RECRUIT": _apply_recruit,
    "ACTION_PROMOTE": _apply_promote,
    "ACTION_TAKEOVER": _apply_takeover,
    "TOGGLE_INFO": _apply_toggle_info,
}
