"""
Empire Runtime — Session Ownership Layer

Owns game state outside the pure kernel: one GameSession per game,
an asyncio TickScheduler for the periodic timer, and in-process metrics.
"""

from .session import GameSession, DeterminismError
from .scheduler import TickScheduler
from .observability import SessionMetrics, collect_metrics

__all__ = [
    "GameSession",
    "DeterminismError",
    "TickScheduler",
    "SessionMetrics",
    "collect_metrics",
]
