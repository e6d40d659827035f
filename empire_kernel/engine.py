"""
Empire Kernel — Engine

Top-level orchestrator. Delegates mutation to transitions.py,
validates via invariants.py, reports via diagnostics.py.

Sequence numbers are strictly increasing with no gaps; an action
arriving with sequence 0 is stamped with the next number.
"""

from __future__ import annotations

import logging
from typing import List, Tuple

from .actions import BaseAction
from .diagnostics import compute_diagnostics
from .domain_types import VARIANT_RAID, VARIANTS, TransitionResult
from .invariants import validate_invariants
from .rng import DeterministicRNG
from .state import create_initial_rpg_state, create_initial_state
from .transitions import GameState, apply_action as _transition_apply

logger = logging.getLogger(__name__)


class GameEngine:
    """
    Stateful engine that wraps the pure functional transition layer.

    Owns the current state and the RNG. The RNG is re-seeded on every
    ``initialize_state`` so a replay reproduces the same draws.
    """

    def __init__(self, variant: str = VARIANT_RAID, seed: int = 0) -> None:
        if variant not in VARIANTS:
            raise ValueError(
                f"Unknown variant {variant!r}; expected one of {VARIANTS}"
            )
        self.variant = variant
        self.seed = seed
        self._rng = DeterministicRNG(seed)
        self._state: GameState | None = None
        self._last_sequence: int = 0

    # -- State access -------------------------------------------------------

    @property
    def state(self) -> GameState:
        if self._state is None:
            raise RuntimeError("Engine not initialised; call initialize_state() first")
        return self._state

    @property
    def last_sequence(self) -> int:
        return self._last_sequence

    # -- Public API ---------------------------------------------------------

    def initialize_state(self, rng: DeterministicRNG | None = None) -> GameState:
        """Create a fresh initial state and store it."""
        self._rng = rng or DeterministicRNG(self.seed)
        if self.variant == VARIANT_RAID:
            self._state = create_initial_state(self._rng)
        else:
            self._state = create_initial_rpg_state()
        self._last_sequence = 0
        validate_invariants(self._state)
        return self._state

    def apply_action(
        self, action: BaseAction,
    ) -> Tuple[GameState, TransitionResult]:
        """
        Apply a single action:
          1. Validate / stamp sequence
          2. Delegate to transitions.apply_action
          3. Validate invariants on the new state
          4. Store and return
        """
        expected = self._last_sequence + 1
        if action.sequence == 0:
            action.sequence = expected
        elif action.sequence != expected:
            raise ValueError(
                f"Sequence violation: expected {expected}, "
                f"got {action.sequence}"
            )

        rng_state = self._rng.getstate()
        try:
            new_state, result = _transition_apply(self.state, action, self._rng)
            if result.applied:
                validate_invariants(new_state)
        except Exception:
            # The action is not recorded, so its draws must not be either.
            self._rng.setstate(rng_state)
            raise

        if result.applied:
            logger.debug("seq=%d %s applied: %s", action.sequence,
                         action.action_type, result.log_entry)
        else:
            logger.info("seq=%d %s rejected (%s): %s", action.sequence,
                        action.action_type, result.rejection.value,
                        result.reason)
        self._state = new_state
        self._last_sequence = action.sequence
        return new_state, result

    def apply_sequence(self, actions: List[BaseAction]) -> GameState:
        """Apply an ordered sequence of actions. Returns the final state."""
        for action in actions:
            self.apply_action(action)
        return self.state

    def replay(self, actions: List[BaseAction]) -> GameState:
        """
        Reconstruction: reset to a fresh seeded state, then replay every
        action from scratch.
        """
        self.initialize_state()
        for action in actions:
            self.apply_action(action)
        return self.state

    def get_diagnostics(self) -> dict:
        """Return diagnostic snapshot of the current state."""
        return compute_diagnostics(self.state)
