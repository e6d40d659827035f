"""
Empire Kernel — Invariant Checks

Hard-fail validation run after every transition. Every check raises
InvariantViolationError on failure. These guard against reducer bugs;
player mistakes are rejections, never invariant violations.
"""

from __future__ import annotations

from .constants import RAID_LOG_CAP, RPG_LOG_CAP
from .domain_types import PRESENCE_ORDER, VARIANT_RAID, RaidState, RpgState
from .rpg_catalog import RANK_NAMES


class InvariantViolationError(Exception):
    """Raised when a game-state invariant is violated."""

    def __init__(self, rule: str, detail: str) -> None:
        self.rule = rule
        self.detail = detail
        super().__init__(f"[INVARIANT:{rule}] {detail}")


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def validate_invariants(state) -> None:
    """Run every check for the state's variant."""
    if state.variant == VARIANT_RAID:
        _check_log_cap(state, RAID_LOG_CAP)
        _check_active_raid(state)
    else:
        _check_log_cap(state, RPG_LOG_CAP)
        _check_presence_values(state)
        _check_member_ranks(state)
        _check_unique_member_ids(state)
        _check_inventory_positive(state)
        _check_selected_location(state)
        _check_pool_disjoint_from_roster(state)


# ---------------------------------------------------------------------------
# Individual checks (private)
# ---------------------------------------------------------------------------

def _check_log_cap(state, cap: int) -> None:
    if len(state.activity_log) > cap:
        raise InvariantViolationError(
            "log_cap",
            f"activity log holds {len(state.activity_log)} entries, cap={cap}",
        )


def _check_active_raid(state: RaidState) -> None:
    selection = state.active_raid
    if selection is None:
        return
    if not any(t.id == selection.troop_id for t in state.troops):
        raise InvariantViolationError(
            "active_raid", f"troop {selection.troop_id!r} not in state",
        )
    if not any(t.id == selection.territory_id for t in state.territories):
        raise InvariantViolationError(
            "active_raid", f"territory {selection.territory_id!r} not in state",
        )


def _check_presence_values(state: RpgState) -> None:
    for key, hood in state.world_map.neighborhoods.items():
        if hood.presence not in PRESENCE_ORDER:
            raise InvariantViolationError(
                "presence_value",
                f"neighborhood {key!r} has presence {hood.presence!r}",
            )


def _check_member_ranks(state: RpgState) -> None:
    for member in state.members:
        if member.rank not in RANK_NAMES:
            raise InvariantViolationError(
                "member_rank",
                f"member {member.id!r} has unknown rank {member.rank!r}",
            )


def _check_unique_member_ids(state: RpgState) -> None:
    ids = [m.id for m in state.members]
    if len(ids) != len(set(ids)):
        raise InvariantViolationError(
            "duplicate_member_ids", "duplicate member ids in roster",
        )


def _check_inventory_positive(state: RpgState) -> None:
    for item_id, qty in state.inventory.items():
        if qty <= 0:
            raise InvariantViolationError(
                "inventory_quantity",
                f"item {item_id!r} has quantity {qty}",
            )


def _check_selected_location(state: RpgState) -> None:
    loc = state.selected_location
    if loc is not None and state.world_map.resolve(loc) is None:
        raise InvariantViolationError(
            "selected_location",
            f"selected location {loc.key()!r} does not resolve",
        )


def _check_pool_disjoint_from_roster(state: RpgState) -> None:
    roster = {m.id for m in state.members}
    overlap = sorted(c.id for c in state.recruit_pool if c.id in roster)
    if overlap:
        raise InvariantViolationError(
            "recruit_pool",
            f"candidates already recruited: {', '.join(overlap)}",
        )
