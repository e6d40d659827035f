"""
Empire Kernel — Calculator Tests

Covers:
  - Passive income (full catalog, empty list, unknown business ids)
  - Territory income (all Inexistente, one Dominado)
  - Raid win chance (buffs, clamp at both ends)
  - Raid outcome with injected rolls
  - Rank order / power lookups
  - Crime eligibility (items, rank counts by power)
  - Presence state machine

Run:  py -3 -m empire_kernel.test_calculators
"""

from __future__ import annotations

import os
import sys

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from empire_kernel.calculators import (
    calculate_passive_income,
    calculate_raid_outcome,
    calculate_territory_income,
    can_commit_crime,
    compute_raid_win_chance,
    compute_takeover_win_chance,
    count_at_or_above,
    level_for_xp,
    project_active_raid,
    resolve_presence,
    roster_power,
    round_half_up,
)
from empire_kernel.catalog import TERRITORIES, VILLAIN_ROLES, get_territory, get_troop
from empire_kernel.domain_types import (
    PRESENCE_CONTESTED, PRESENCE_DOMINATED, PRESENCE_INFILTRATED,
    PRESENCE_NONE, DominantOrg, Member, Resources, Territory, Troop, Villain,
)
from empire_kernel.rng import DeterministicRNG, ScriptedRNG
from empire_kernel.rpg_catalog import (
    RANK_ELITE, RANK_GENERAL, RANK_RECRUIT, RANK_SOLDIER, get_crime,
    get_next_rank, get_rank, rank_power,
)
from empire_kernel.state import create_initial_rpg_state, create_initial_state


def _villain(buff_type: str) -> Villain:
    for title, buff in VILLAIN_ROLES:
        if buff.type == buff_type:
            return Villain(id="v", name="Test", rarity="Comum",
                           role=title, buff=buff)
    raise AssertionError(f"no villain role with buff {buff_type}")


# ---------------------------------------------------------------------------
# Income
# ---------------------------------------------------------------------------

def test_passive_income_full_catalog():
    income = calculate_passive_income(TERRITORIES)
    assert income == Resources(cash=520, influence=10, respect=8)


def test_passive_income_empty():
    assert calculate_passive_income([]) == Resources(0, 0, 0)


def test_passive_income_unknown_business_contributes_zero():
    ghost = Territory(id="ghost", name="Ghost", defense=1,
                      business_ids=("nope", "casino"))
    assert calculate_passive_income([ghost]) == Resources(cash=120, respect=3)


def test_passive_income_order_independent():
    forward = calculate_passive_income(TERRITORIES)
    backward = calculate_passive_income(list(reversed(TERRITORIES)))
    assert forward == backward


def test_territory_income_all_inexistente():
    state = create_initial_rpg_state()
    assert calculate_territory_income(state.world_map) == Resources(0, 0, 0)


def test_territory_income_dominated():
    state = create_initial_rpg_state()
    state.world_map.neighborhoods["br/sp/sao-paulo/se"].presence = PRESENCE_DOMINATED
    state.world_map.neighborhoods["br/rj/rio/mare"].presence = PRESENCE_CONTESTED
    # Sé power 6 → 15 + 12
    assert calculate_territory_income(state.world_map) == Resources(
        cash=27, influence=1, respect=1,
    )


# ---------------------------------------------------------------------------
# Raid combat
# ---------------------------------------------------------------------------

def test_raid_win_chance_no_villain():
    chance = compute_raid_win_chance(
        get_troop("capangas"), None, get_territory("central"),
    )
    assert abs(chance - 8 / 19) < 1e-9


def test_raid_win_chance_attack_buff():
    chance = compute_raid_win_chance(
        get_troop("capangas"), _villain("attack"), get_territory("central"),
    )
    assert abs(chance - 10 / 19) < 1e-9


def test_raid_win_chance_defense_debuff():
    chance = compute_raid_win_chance(
        get_troop("capangas"), _villain("defense"), get_territory("central"),
    )
    assert abs(chance - 8 / (18 * 0.8 + 1)) < 1e-9


def test_raid_win_chance_ignores_profit_and_influence_buffs():
    troop, territory = get_troop("capangas"), get_territory("central")
    base = compute_raid_win_chance(troop, None, territory)
    assert compute_raid_win_chance(troop, _villain("profit"), territory) == base
    assert compute_raid_win_chance(troop, _villain("influence"), territory) == base


def test_raid_win_chance_clamped():
    strong = Troop(id="t", name="T", type="x", description="",
                   attack=10000, defense=1, upkeep=0)
    weak = Troop(id="w", name="W", type="x", description="",
                 attack=1, defense=1, upkeep=0)
    fortress = Territory(id="f", name="F", defense=10000)
    shack = Territory(id="s", name="S", defense=1)
    assert compute_raid_win_chance(strong, None, shack) == 0.9
    assert compute_raid_win_chance(weak, None, fortress) == 0.1
    assert compute_raid_win_chance(strong, _villain("attack"), fortress) <= 0.9
    for troop in (strong, weak):
        for territory in (fortress, shack):
            chance = compute_raid_win_chance(troop, None, territory)
            assert 0.1 <= chance <= 0.9


def test_raid_outcome_uses_injected_roll():
    troop, territory = get_troop("capangas"), get_territory("central")
    win = calculate_raid_outcome(troop, None, territory, ScriptedRNG([0.2]))
    assert win.victory is True and win.roll == 0.2
    loss = calculate_raid_outcome(troop, None, territory, ScriptedRNG([0.8]))
    assert loss.victory is False


def test_raid_outcome_roll_equal_to_chance_wins():
    strong = Troop(id="t", name="T", type="x", description="",
                   attack=10000, defense=1, upkeep=0)
    outcome = calculate_raid_outcome(
        strong, None, get_territory("central"), ScriptedRNG([0.9]),
    )
    assert outcome.victory is True


def test_project_active_raid_percentage():
    state = create_initial_state(DeterministicRNG(3))
    preview = project_active_raid(state)
    assert preview["troop_id"] == "capangas"
    assert preview["territory_id"] == "central"
    assert 10 <= preview["win_chance"] <= 90


def test_project_active_raid_missing_troop():
    state = create_initial_state(DeterministicRNG(3))
    state.active_raid.troop_id = "ghost"
    assert project_active_raid(state) is None


# ---------------------------------------------------------------------------
# Ranks / roster
# ---------------------------------------------------------------------------

def test_rank_order_and_next_rank():
    assert get_next_rank(RANK_RECRUIT) == RANK_SOLDIER
    assert get_next_rank(RANK_SOLDIER) == RANK_GENERAL
    assert get_next_rank(RANK_GENERAL) == RANK_ELITE
    assert get_next_rank(RANK_ELITE) is None
    assert get_next_rank("Capo") is None
    powers = [rank_power(r) for r in
              (RANK_RECRUIT, RANK_SOLDIER, RANK_GENERAL, RANK_ELITE)]
    assert powers == sorted(powers) and len(set(powers)) == 4
    assert get_rank(RANK_SOLDIER).min_xp < get_rank(RANK_GENERAL).min_xp


def test_level_for_xp():
    assert level_for_xp(0) == 1
    assert level_for_xp(49) == 1
    assert level_for_xp(50) == 2
    assert level_for_xp(400) == 9


def test_round_half_up():
    assert round_half_up(40 / 3) == 13
    assert round_half_up(2 / 3) == 1
    assert round_half_up(2.5) == 3


def test_roster_power_and_counts():
    members = [
        Member("a", "A", RANK_RECRUIT),
        Member("b", "B", RANK_SOLDIER),
        Member("c", "C", RANK_GENERAL),
    ]
    assert roster_power(members) == 1 + 3 + 7
    assert count_at_or_above(members, RANK_SOLDIER) == 2
    assert count_at_or_above(members, RANK_RECRUIT) == 3
    assert count_at_or_above(members, RANK_ELITE) == 0


def test_takeover_win_chance_clamped():
    org = DominantOrg(name="X", power_level=6, elite_count=1)
    assert compute_takeover_win_chance([], org) == 0.1
    many = [Member(str(i), "E", RANK_ELITE) for i in range(10)]
    assert compute_takeover_win_chance(many, org) == 0.9


# ---------------------------------------------------------------------------
# Crime eligibility
# ---------------------------------------------------------------------------

def test_crime_requires_item():
    state = create_initial_rpg_state()
    assalto = get_crime("assalto")
    assert can_commit_crime(state, assalto) is False
    state.inventory["arma-fogo"] = 1
    assert can_commit_crime(state, assalto) is True


def test_crime_without_requirements():
    state = create_initial_rpg_state()
    assert can_commit_crime(state, get_crime("furto")) is True


def test_crime_rank_counts_by_power():
    state = create_initial_rpg_state()
    state.inventory.update({"arma-fogo": 1, "celular-descartavel": 1})
    sequestro = get_crime("sequestro")
    state.members.append(Member("s1", "S1", RANK_SOLDIER))
    assert can_commit_crime(state, sequestro) is False
    # A General counts toward a Soldado requirement.
    state.members.append(Member("g1", "G1", RANK_GENERAL))
    assert can_commit_crime(state, sequestro) is True


def test_crime_zero_quantity_is_missing():
    state = create_initial_rpg_state()
    state.inventory["arma-fogo"] = 0
    assert can_commit_crime(state, get_crime("assalto")) is False


# ---------------------------------------------------------------------------
# Presence state machine
# ---------------------------------------------------------------------------

def test_resolve_presence_transitions():
    assert resolve_presence(PRESENCE_NONE, False) == PRESENCE_INFILTRATED
    assert resolve_presence(PRESENCE_NONE, True) == PRESENCE_INFILTRATED
    assert resolve_presence(PRESENCE_INFILTRATED, False) == PRESENCE_INFILTRATED
    assert resolve_presence(PRESENCE_INFILTRATED, True) == PRESENCE_CONTESTED
    assert resolve_presence(PRESENCE_CONTESTED, False) == PRESENCE_CONTESTED
    assert resolve_presence(PRESENCE_CONTESTED, True) == PRESENCE_DOMINATED
    assert resolve_presence(PRESENCE_DOMINATED, True) == PRESENCE_DOMINATED
    assert resolve_presence(PRESENCE_DOMINATED, False) == PRESENCE_DOMINATED


def test_scripted_rng_exhaustion():
    rng = ScriptedRNG([0.5])
    assert rng.roll() == 0.5
    assert rng.remaining == 0
    try:
        rng.roll()
    except RuntimeError:
        return
    raise AssertionError("exhausted ScriptedRNG should raise")


# ---------------------------------------------------------------------------
# Runner
# ---------------------------------------------------------------------------

def main() -> None:
    tests = [(name, fn) for name, fn in sorted(globals().items())
             if name.startswith("test_") and callable(fn)]
    failed = 0
    for name, fn in tests:
        try:
            fn()
            print(f"  [PASS] {name}")
        except Exception as exc:
            print(f"  [FAIL] {name}: {exc}")
            failed += 1
    print(f"\n{len(tests) - failed} passed, {failed} failed")
    if failed:
        sys.exit(1)


if __name__ == "__main__":
    main()
