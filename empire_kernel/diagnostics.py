"""
Empire Kernel — Diagnostics

Compute a diagnostic snapshot of the current game state.
"""

from __future__ import annotations

from .calculators import (
    calculate_passive_income, calculate_territory_income, eligible_crimes,
    project_active_raid, roster_power,
)
from .constants import RAID_LOG_CAP, RPG_LOG_CAP
from .domain_types import PRESENCE_ORDER, VARIANT_RAID


def compute_diagnostics(state) -> dict:
    """Return a diagnostic dict summarising the current state."""
    warnings: list[str] = []
    res = state.resources
    for name in ("cash", "influence", "respect"):
        value = getattr(res, name)
        if value < 0:
            warnings.append(f"Negative {name} ({value})")

    if state.variant == VARIANT_RAID:
        if len(state.activity_log) >= RAID_LOG_CAP:
            warnings.append("Activity log full: oldest entries are dropped")
        return {
            "variant": state.variant,
            "income_per_tick": calculate_passive_income(state.territories).to_dict(),
            "active_raid": project_active_raid(state),
            "villain_count": len(state.villains),
            "warnings": warnings,
        }

    presence_counts = {p: 0 for p in PRESENCE_ORDER}
    for hood in state.world_map.neighborhoods.values():
        presence_counts[hood.presence] += 1

    if not state.members:
        warnings.append("Roster is empty: takeovers run at minimum odds")
    if len(state.activity_log) >= RPG_LOG_CAP:
        warnings.append("Activity log full: oldest entries are dropped")

    return {
        "variant": state.variant,
        "day": state.day,
        "income_per_day": calculate_territory_income(state.world_map).to_dict(),
        "member_count": len(state.members),
        "roster_power": roster_power(state.members),
        "presence_counts": presence_counts,
        "eligible_crimes": eligible_crimes(state),
        "inventory_items": sum(state.inventory.values()),
        "warnings": warnings,
    }
