"""
Empire Kernel — Action Definitions

Actions are **pure data**. They carry intent and payload only.
They contain ZERO transition logic.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict


@dataclass
class BaseAction:
    """Base for all player / timer actions; pure data container."""

    action_type: str = ""
    sequence: int = 0
    payload: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict:
        return {
            "action_type": self.action_type,
            "sequence": self.sequence,
            "payload": dict(self.payload),
        }


# ── Raid variant ──────────────────────────────────────────────

@dataclass
class TickAction(BaseAction):
    """Periodic timer tick: collect passive business income."""

    action_type: str = "TICK"


@dataclass
class RaidAction(BaseAction):
    """Raid a territory. Ids default to the active raid selection."""

    action_type: str = "RAID"
    # payload keys (optional): troop_id, villain_id, territory_id


@dataclass
class SetRaidTargetAction(BaseAction):
    """Change the active raid selection."""

    action_type: str = "SET_RAID_TARGET"
    # payload keys: troop_id, villain_id, territory_id


# ── RPG variant ───────────────────────────────────────────────

@dataclass
class AdvanceDayAction(BaseAction):
    """Periodic day advance: collect territory income."""

    action_type: str = "ADVANCE_DAY"


@dataclass
class SetLocationAction(BaseAction):
    action_type: str = "SET_LOCATION"
    # payload keys: country_id, state_id, city_id, neighborhood_id


@dataclass
class CommitCrimeAction(BaseAction):
    action_type: str = "ACTION_COMMIT_CRIME"
    # payload keys: crime_id


@dataclass
class BuyItemAction(BaseAction):
    action_type: str = "ACTION_BUY_ITEM"
    # payload keys: item_id


@dataclass
class RecruitAction(BaseAction):
    action_type: str = "ACTION_RECRUIT"
    # payload keys: member_id


@dataclass
class PromoteAction(BaseAction):
    action_type: str = "ACTION_PROMOTE"
    # payload keys: member_id


@dataclass
class TakeoverAction(BaseAction):
    """Contest the neighborhood at the selected location."""

    action_type: str = "ACTION_TAKEOVER"


@dataclass
class ToggleInfoAction(BaseAction):
    """Show *panel*, or hide it when it is already showing."""

    action_type: str = "TOGGLE_INFO"
    # payload keys: panel


# Strict tag → class mapping. Never fall back to generic BaseAction.
ACTION_CLASS_MAP = {
    "TICK": TickAction,
    "RAID": RaidAction,
    "SET_RAID_TARGET": SetRaidTargetAction,
    "ADVANCE_DAY": AdvanceDayAction,
    "SET_LOCATION": SetLocationAction,
    "ACTION_COMMIT_CRIME": CommitCrimeAction,
    "ACTION_BUY_ITEM": BuyItemAction,
    "ACTION_RECRUIT": RecruitAction,
    "ACTION_PROMOTE": PromoteAction,
    "ACTION_TAKEOVER": TakeoverAction,
    "TOGGLE_INFO": ToggleInfoAction,
}


def reconstruct_action(action_dict: dict) -> BaseAction:
    """
    Build a typed action from a plain dict.

    Raises ValueError for unknown tags instead of degrading to BaseAction.
    """
    atype = action_dict["action_type"]
    cls = ACTION_CLASS_MAP.get(atype)
    if cls is None:
        raise ValueError(
            f"Unknown action_type {atype!r}: cannot reconstruct. "
            f"Known types: {sorted(ACTION_CLASS_MAP)}"
        )
    return cls(
        sequence=action_dict.get("sequence", 0),
        payload=dict(action_dict.get("payload") or {}),
    )
