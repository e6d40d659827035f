"""
Observability — In-process metrics collection.

No external dependencies. Uses compute_diagnostics + timing.
"""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Dict, List

from empire_kernel.hashing import canonical_hash

if TYPE_CHECKING:
    from .session import GameSession


@dataclass(frozen=True)
class SessionMetrics:
    """Snapshot of observable session metrics."""

    session_id: str
    variant: str
    action_count: int
    applied_count: int
    rejected_count: int
    tick_count: int
    last_state_hash: str
    replay_latency_ms: float
    rejection_counts: Dict[str, int] = field(default_factory=dict)
    warnings: List[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "session_id": self.session_id,
            "variant": self.variant,
            "action_count": self.action_count,
            "applied_count": self.applied_count,
            "rejected_count": self.rejected_count,
            "tick_count": self.tick_count,
            "last_state_hash": self.last_state_hash,
            "replay_latency_ms": self.replay_latency_ms,
            "rejection_counts": dict(self.rejection_counts),
            "warnings": list(self.warnings),
        }


def collect_metrics(session: "GameSession") -> SessionMetrics:
    """
    Collect metrics from a live session.

    Replays the history once on a scratch engine: the same replay is
    timed and checked against the live hash (DeterminismError on
    mismatch). The live state is left alone.
    """
    history = session.history
    start = time.perf_counter()
    scratch = session.replay_scratch()
    elapsed_ms = (time.perf_counter() - start) * 1000.0
    session.verify_determinism(scratch)

    diagnostics = session.get_diagnostics()
    rejections = session.rejection_counts

    return SessionMetrics(
        session_id=session.session_id,
        variant=session.variant,
        action_count=len(history),
        applied_count=session.applied_count,
        rejected_count=sum(rejections.values()),
        tick_count=session.tick_count,
        last_state_hash=canonical_hash(session.state),
        replay_latency_ms=round(elapsed_ms, 2),
        rejection_counts=rejections,
        warnings=diagnostics["warnings"],
    )
