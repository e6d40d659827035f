# file: empire_runtime/test_runtime.py
"""
Empire Runtime -- Integration Test

Scenario:
  Phase 1: Raid session, ticks + raids, history and counters recorded
  Phase 2: RPG session, rejected actions counted by reason
  Phase 3: Determinism verification (and a tampered engine that fails it)
  Phase 4: replay_full reproduces the live state
  Phase 5: Observability (get_metrics returns valid data)
  Phase 6: TickScheduler drives the session and stops on cancel

Exit 0 on success, 1 on failure.
"""

from __future__ import annotations

import asyncio
import os
import sys

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from empire_kernel.actions import (
    BuyItemAction, CommitCrimeAction, RaidAction, TakeoverAction, TickAction,
)
from empire_kernel.domain_types import Resources, VARIANT_RAID, VARIANT_RPG

from empire_runtime.scheduler import TickScheduler
from empire_runtime.session import DeterminismError, GameSession


def _raid_session(session_id: str = "raid-1", seed: int = 42) -> GameSession:
    session = GameSession(session_id, variant=VARIANT_RAID, seed=seed)
    for i in range(6):
        session.apply_action(TickAction() if i % 2 == 0 else RaidAction())
    return session


# ---------------------------------------------------------------------------
# Phase 1-2: sessions
# ---------------------------------------------------------------------------

def test_raid_session_records_history():
    session = _raid_session()
    assert len(session.history) == 6
    assert session.applied_count == 6
    assert session.rejection_counts == {}
    assert [a.sequence for a in session.history] == [1, 2, 3, 4, 5, 6]
    assert session.state.resources.cash == 2500 + 3 * 520


def test_advance_tick_picks_variant_action():
    raid = GameSession("raid-tick", variant=VARIANT_RAID)
    result = raid.advance_tick()
    assert result.action_type == "TICK"
    assert raid.tick_count == 1

    rpg = GameSession("rpg-tick", variant=VARIANT_RPG)
    result = rpg.advance_tick()
    assert result.action_type == "ADVANCE_DAY"
    assert rpg.state.day == 2
    assert rpg.get_state()["day"] == 2


def test_rejections_are_counted():
    session = GameSession("rpg-rej", variant=VARIANT_RPG)
    session.apply_action(CommitCrimeAction(payload={"crime_id": "assalto"}))
    session.apply_action(BuyItemAction(payload={"item_id": "nope"}))
    session.apply_action(TickAction())
    result = session.apply_action(BuyItemAction(payload={"item_id": "arma-fogo"}))
    assert result.applied
    assert session.applied_count == 1
    assert session.rejection_counts == {
        "RequirementsNotMet": 1,
        "UnknownId": 1,
        "UnsupportedAction": 1,
    }
    assert len(session.history) == 4


def test_unknown_variant_rejected():
    try:
        GameSession("bad", variant="chess")
    except ValueError:
        return
    raise AssertionError("unknown variant should raise ValueError")


# ---------------------------------------------------------------------------
# Phase 3-4: determinism
# ---------------------------------------------------------------------------

def test_verify_determinism():
    session = _raid_session()
    assert session.verify_determinism() is True

    rpg = GameSession("rpg-det", variant=VARIANT_RPG, seed=3)
    for _ in range(10):
        rpg.apply_action(TakeoverAction())
        rpg.apply_action(CommitCrimeAction(payload={"crime_id": "furto"}))
        rpg.advance_tick()
    assert rpg.verify_determinism() is True


def test_tampered_state_fails_determinism():
    session = _raid_session("raid-tamper")
    session.state.resources = Resources(cash=1, influence=1, respect=1)
    try:
        session.verify_determinism()
    except DeterminismError as exc:
        assert exc.session_id == "raid-tamper"
        assert exc.expected != exc.actual
        return
    raise AssertionError("tampered state should fail verification")


def test_replay_full_matches_live_state():
    session = _raid_session("raid-replay", seed=9)
    before = session.state_hash()
    state = session.replay_full()
    assert session.state_hash() == before
    assert state["resources"] == session.get_state()["resources"]


def test_same_seed_sessions_agree():
    a = _raid_session("a", seed=17)
    b = _raid_session("b", seed=17)
    assert a.state_hash() == b.state_hash()


# ---------------------------------------------------------------------------
# Phase 5: observability
# ---------------------------------------------------------------------------

def test_metrics():
    session = GameSession("rpg-metrics", variant=VARIANT_RPG)
    session.apply_action(CommitCrimeAction(payload={"crime_id": "assalto"}))
    session.advance_tick()
    metrics = session.get_metrics()
    assert metrics.session_id == "rpg-metrics"
    assert metrics.variant == VARIANT_RPG
    assert metrics.action_count == 2
    assert metrics.applied_count == 1
    assert metrics.rejected_count == 1
    assert metrics.tick_count == 1
    assert metrics.last_state_hash == session.state_hash()
    assert metrics.replay_latency_ms >= 0
    data = metrics.to_dict()
    assert data["rejection_counts"] == {"RequirementsNotMet": 1}


# ---------------------------------------------------------------------------
# Phase 6: scheduler
# ---------------------------------------------------------------------------

def test_scheduler_ticks_and_cancels():
    session = GameSession("raid-sched", variant=VARIANT_RAID)
    seen = []

    async def scenario():
        scheduler = TickScheduler(session, interval_seconds=0.01,
                                  on_tick=seen.append)
        scheduler.start()
        assert scheduler.running
        await asyncio.sleep(0.1)
        scheduler.cancel()
        scheduler.cancel()  # idempotent
        assert not scheduler.running
        stopped_at = session.tick_count
        await asyncio.sleep(0.05)
        return stopped_at

    stopped_at = asyncio.run(scenario())
    assert stopped_at >= 1
    assert session.tick_count == stopped_at
    assert len(seen) == stopped_at
    assert all(r.action_type == "TICK" for r in seen)


def test_scheduler_double_start_and_bad_interval():
    session = GameSession("raid-sched-2", variant=VARIANT_RAID)
    try:
        TickScheduler(session, interval_seconds=0)
    except ValueError:
        pass
    else:
        raise AssertionError("zero interval should raise ValueError")

    async def scenario():
        scheduler = TickScheduler(session, interval_seconds=10)
        scheduler.start()
        try:
            scheduler.start()
        except RuntimeError:
            return True
        finally:
            scheduler.cancel()
        return False

    assert asyncio.run(scenario()) is True


def test_scheduler_stops_cleanly_when_tick_fails():
    session = GameSession("raid-sched-fail", variant=VARIANT_RAID)
    before = session.state_hash()

    def broken_tick():
        raise RuntimeError("tick exploded")

    session.advance_tick = broken_tick

    async def scenario():
        scheduler = TickScheduler(session, interval_seconds=0.01)
        task = scheduler.start()
        await asyncio.sleep(0.05)
        assert task.done() and task.exception() is None
        return scheduler

    scheduler = asyncio.run(scenario())
    assert not scheduler.running
    assert isinstance(scheduler.last_error, RuntimeError)
    assert session.state_hash() == before


def test_metrics_replay_history_once():
    session = _raid_session("raid-metrics-once")
    replays = []
    original = session.replay_scratch

    def counting_replay():
        replays.append(1)
        return original()

    session.replay_scratch = counting_replay
    session.get_metrics()
    assert len(replays) == 1


def test_metrics_detect_divergence():
    session = _raid_session("raid-metrics-tamper")
    session.state.resources = Resources(cash=0, influence=0, respect=0)
    try:
        session.get_metrics()
    except DeterminismError:
        return
    raise AssertionError("metrics on a tampered session should fail")


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
    sys.exit(1 if failed else 0)


if __name__ == "__main__":
    main()
