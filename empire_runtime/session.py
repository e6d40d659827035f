"""
Game Session — explicit owner of one game's state.

Wraps a GameEngine, records every dispatched action, and can prove
determinism by replaying the recorded history under the same seed.

Apply order:
  1. engine.apply_action(action)     may raise on programming errors
  2. record action + outcome         only if step 1 returned
"""

from __future__ import annotations

import logging
from collections import Counter
from typing import Dict, List, Optional

from empire_kernel.actions import (
    AdvanceDayAction, BaseAction, TickAction, reconstruct_action,
)
from empire_kernel.domain_types import VARIANT_RAID, TransitionResult
from empire_kernel.engine import GameEngine
from empire_kernel.hashing import canonical_hash

logger = logging.getLogger(__name__)


class DeterminismError(Exception):
    """Raised when replay produces a different hash than the live state."""

    def __init__(self, session_id: str, expected: str, actual: str):
        self.session_id = session_id
        self.expected = expected
        self.actual = actual
        super().__init__(
            f"Determinism failure for session {session_id!r}: "
            f"live hash={expected!r}, replayed hash={actual!r}"
        )


class GameSession:
    """
    Process-wide owner of a single game.

    The state is only ever replaced through ``apply_action`` /
    ``advance_tick``; callers receive plain dicts and TransitionResults.
    """

    def __init__(
        self,
        session_id: str,
        variant: str = VARIANT_RAID,
        seed: int = 0,
        engine: Optional[GameEngine] = None,
    ) -> None:
        self._session_id = session_id
        self._engine = engine or GameEngine(variant=variant, seed=seed)
        self._engine.initialize_state()
        self._history: List[BaseAction] = []
        self._applied_count: int = 0
        self._rejections: Counter = Counter()
        self._tick_count: int = 0

    # ------------------------------------------------------------------
    # Transitions
    # ------------------------------------------------------------------

    def apply_action(self, action: BaseAction) -> TransitionResult:
        """Dispatch a player or timer action and return its outcome."""
        _, result = self._engine.apply_action(action)
        self._history.append(action)
        if result.applied:
            self._applied_count += 1
        else:
            self._rejections[result.rejection.value] += 1
        return result

    def advance_tick(self) -> TransitionResult:
        """Periodic step: TICK for the raid variant, ADVANCE_DAY for RPG."""
        if self.variant == VARIANT_RAID:
            action: BaseAction = TickAction()
        else:
            action = AdvanceDayAction()
        result = self.apply_action(action)
        self._tick_count += 1
        return result

    # ------------------------------------------------------------------
    # Replay / determinism
    # ------------------------------------------------------------------

    def replay_full(self) -> dict:
        """Reset the engine and replay every recorded action."""
        self._engine.replay(self._copy_history())
        return self.get_state()

    def replay_scratch(self) -> GameEngine:
        """Replay the history on a fresh engine with the same seed."""
        temp_engine = GameEngine(variant=self.variant, seed=self.seed)
        temp_engine.replay(self._copy_history())
        return temp_engine

    def verify_determinism(self, replayed: Optional[GameEngine] = None) -> bool:
        """
        Compare the live canonical hash with a replay of the history.
        *replayed* reuses an engine from ``replay_scratch()``.

        Raises DeterminismError on mismatch.
        """
        temp_engine = replayed or self.replay_scratch()

        live_hash = canonical_hash(self._engine.state)
        replayed_hash = canonical_hash(temp_engine.state)
        if live_hash != replayed_hash:
            logger.error("session %s diverged on replay", self._session_id)
            raise DeterminismError(self._session_id, live_hash, replayed_hash)
        return True

    def _copy_history(self) -> List[BaseAction]:
        return [reconstruct_action(a.to_dict()) for a in self._history]

    # ------------------------------------------------------------------
    # Observability
    # ------------------------------------------------------------------

    def get_metrics(self) -> "SessionMetrics":
        """Collect metrics from the current session."""
        from .observability import collect_metrics
        return collect_metrics(self)

    # ------------------------------------------------------------------
    # Delegates
    # ------------------------------------------------------------------

    def get_state(self) -> dict:
        """Return current state as dict."""
        return self._engine.state.to_dict()

    def get_diagnostics(self) -> dict:
        return self._engine.get_diagnostics()

    def state_hash(self) -> str:
        return canonical_hash(self._engine.state)

    @property
    def session_id(self) -> str:
        return self._session_id

    @property
    def variant(self) -> str:
        return self._engine.variant

    @property
    def seed(self) -> int:
        return self._engine.seed

    @property
    def state(self):
        return self._engine.state

    @property
    def history(self) -> List[BaseAction]:
        return list(self._history)

    @property
    def applied_count(self) -> int:
        return self._applied_count

    @property
    def rejection_counts(self) -> Dict[str, int]:
        return dict(self._rejections)

    @property
    def tick_count(self) -> int:
        return self._tick_count
