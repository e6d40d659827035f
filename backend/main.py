"""
FastAPI Backend — Neon Empire API v1.

The presentation layer's only door into the kernel: it dispatches
actions into in-memory GameSessions and returns the resulting state.

Endpoints:
  POST   /sessions                      create a game (raid | rpg)
  GET    /sessions/{id}/state           current state
  POST   /sessions/{id}/actions         dispatch one action
  POST   /sessions/{id}/tick            advance one timer step
  POST   /sessions/{id}/auto-tick       start the periodic scheduler
  DELETE /sessions/{id}/auto-tick       cancel it
  GET    /sessions/{id}/diagnostics     derived values + warnings
  GET    /sessions/{id}/metrics         session metrics
  DELETE /sessions/{id}                 drop a game
  GET    /catalog/{variant}             static tables
"""
from __future__ import annotations

import dataclasses
import logging
import os
import uuid
from contextlib import asynccontextmanager
from typing import Any, Dict, Optional, Type

from dotenv import load_dotenv

env_path = os.path.join(os.path.dirname(__file__), ".env")
if os.path.exists(env_path):
    load_dotenv(env_path)

from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel, ConfigDict, ValidationError

from empire_kernel import catalog, rpg_catalog
from empire_kernel.actions import reconstruct_action
from empire_kernel.domain_types import VARIANT_RAID, VARIANT_RPG, VARIANTS
from empire_kernel.invariants import InvariantViolationError
from empire_runtime.session import DeterminismError, GameSession
from empire_runtime.scheduler import TickScheduler

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Config
# ---------------------------------------------------------------------------

FRONTEND_URL = os.environ.get("FRONTEND_URL", "http://localhost:5173")
TICK_INTERVAL_MS = int(os.environ.get("TICK_INTERVAL_MS", "4000"))
DEFAULT_SEED = int(os.environ.get("DEFAULT_SEED", "0"))

# ---------------------------------------------------------------------------
# In-memory registry
# ---------------------------------------------------------------------------

_SESSIONS: Dict[str, GameSession] = {}
_SCHEDULERS: Dict[str, TickScheduler] = {}


def _cancel_scheduler(session_id: str) -> bool:
    scheduler = _SCHEDULERS.pop(session_id, None)
    if scheduler is None:
        return False
    was_running = scheduler.running
    scheduler.cancel()
    return was_running


def _auto_ticking(session_id: str) -> bool:
    """True while a live scheduler drives the session; drops dead ones."""
    scheduler = _SCHEDULERS.get(session_id)
    if scheduler is None:
        return False
    if not scheduler.running:
        del _SCHEDULERS[session_id]
        if scheduler.last_error is not None:
            logger.warning("auto-tick for session %s had stopped: %r",
                           session_id, scheduler.last_error)
        return False
    return True


@asynccontextmanager
async def lifespan(app: FastAPI):
    yield
    for session_id in list(_SCHEDULERS):
        _cancel_scheduler(session_id)


# ---------------------------------------------------------------------------
# App
# ---------------------------------------------------------------------------

app = FastAPI(
    title="Neon Empire API",
    version="1.0.0",
    description="Deterministic criminal-empire game kernel",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=[FRONTEND_URL, "http://localhost:5173"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# ---------------------------------------------------------------------------
# Request models
# ---------------------------------------------------------------------------


class CreateSessionRequest(BaseModel):
    variant: str = VARIANT_RAID
    seed: Optional[int] = None
    session_id: Optional[str] = None


class ActionRequest(BaseModel):
    action_type: str
    payload: Dict[str, Any] = {}


class AutoTickRequest(BaseModel):
    interval_ms: Optional[int] = None


# One payload model per action shape. Ids must be JSON strings and
# unexpected keys are refused.

class _Payload(BaseModel):
    model_config = ConfigDict(extra="forbid", strict=True)


class EmptyPayload(_Payload):
    pass


class RaidPayload(_Payload):
    troop_id: Optional[str] = None
    territory_id: Optional[str] = None
    villain_id: Optional[str] = None


class RaidTargetPayload(_Payload):
    troop_id: str
    territory_id: str
    villain_id: Optional[str] = None


class LocationPayload(_Payload):
    country_id: str
    state_id: str
    city_id: str
    neighborhood_id: str


class CrimePayload(_Payload):
    crime_id: str


class ItemPayload(_Payload):
    item_id: str


class MemberPayload(_Payload):
    member_id: str


class InfoPanelPayload(_Payload):
    panel: Optional[str] = None


PAYLOAD_MODELS: Dict[str, Type[_Payload]] = {
    "TICK": EmptyPayload,
    "RAID": RaidPayload,
    "SET_RAID_TARGET": RaidTargetPayload,
    "ADVANCE_DAY": EmptyPayload,
    "SET_LOCATION": LocationPayload,
    "ACTION_COMMIT_CRIME": CrimePayload,
    "ACTION_BUY_ITEM": ItemPayload,
    "ACTION_RECRUIT": MemberPayload,
    "ACTION_PROMOTE": MemberPayload,
    "ACTION_TAKEOVER": EmptyPayload,
    "TOGGLE_INFO": InfoPanelPayload,
}


# ---------------------------------------------------------------------------
# Core helpers
# ---------------------------------------------------------------------------


def _get_session(session_id: str) -> GameSession:
    session = _SESSIONS.get(session_id)
    if session is None:
        raise HTTPException(
            status_code=404, detail=f"Session {session_id!r} not found",
        )
    return session


def _session_view(session: GameSession) -> dict:
    return {
        "session_id": session.session_id,
        "variant": session.variant,
        "seed": session.seed,
        "sequence": len(session.history),
        "auto_tick": _auto_ticking(session.session_id),
        "state": session.get_state(),
    }


def _outcome_view(session: GameSession, result) -> dict:
    view = _session_view(session)
    view["result"] = result.to_dict()
    return view


# ---------------------------------------------------------------------------
# Endpoints
# ---------------------------------------------------------------------------


@app.post("/sessions", status_code=201)
async def create_session(req: CreateSessionRequest):
    """Start a new game. The seed fixes villain generation and every roll."""
    if req.variant not in VARIANTS:
        raise HTTPException(
            status_code=400,
            detail=f"Unknown variant {req.variant!r}. "
                   f"Valid variants: {list(VARIANTS)}",
        )
    session_id = req.session_id or uuid.uuid4().hex
    if session_id in _SESSIONS:
        raise HTTPException(
            status_code=409, detail=f"Session {session_id!r} already exists",
        )
    seed = DEFAULT_SEED if req.seed is None else req.seed
    session = GameSession(session_id, variant=req.variant, seed=seed)
    _SESSIONS[session_id] = session
    logger.info("session created: id=%s variant=%s seed=%d",
                session_id, req.variant, seed)
    return _session_view(session)


@app.get("/sessions/{session_id}/state")
async def get_state(session_id: str):
    return _session_view(_get_session(session_id))


@app.post("/sessions/{session_id}/actions")
async def dispatch_action(session_id: str, req: ActionRequest):
    """
    Dispatch one action. Rejections are not errors: they come back with
    ``result.applied == false`` and the rejection reason.
    """
    session = _get_session(session_id)
    model = PAYLOAD_MODELS.get(req.action_type)
    if model is None:
        raise HTTPException(
            status_code=400,
            detail=f"Unknown action_type {req.action_type!r}. "
                   f"Valid types: {sorted(PAYLOAD_MODELS)}",
        )
    try:
        payload = model.model_validate(req.payload)
    except ValidationError as exc:
        raise HTTPException(
            status_code=422,
            detail=f"Invalid payload for {req.action_type}: {exc}",
        )
    try:
        action = reconstruct_action({
            "action_type": req.action_type,
            "payload": payload.model_dump(exclude_none=True),
        })
        result = session.apply_action(action)
    except InvariantViolationError as exc:
        logger.error("invariant violated in session %s: %s", session_id, exc)
        raise HTTPException(status_code=422, detail=str(exc))
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc))
    return _outcome_view(session, result)


@app.post("/sessions/{session_id}/tick")
async def tick(session_id: str):
    session = _get_session(session_id)
    result = session.advance_tick()
    return _outcome_view(session, result)


@app.post("/sessions/{session_id}/auto-tick")
async def start_auto_tick(
    session_id: str, req: Optional[AutoTickRequest] = None,
):
    """Start the periodic timer for this session on the server loop."""
    session = _get_session(session_id)
    if _auto_ticking(session_id):
        raise HTTPException(
            status_code=409, detail="Auto-tick already running",
        )
    interval_ms = (req.interval_ms if req else None) or TICK_INTERVAL_MS
    if interval_ms <= 0:
        raise HTTPException(
            status_code=400, detail="interval_ms must be positive",
        )
    scheduler = TickScheduler(session, interval_seconds=interval_ms / 1000)
    scheduler.start()
    _SCHEDULERS[session_id] = scheduler
    return {"session_id": session_id, "running": True,
            "interval_ms": interval_ms}


@app.delete("/sessions/{session_id}/auto-tick")
async def stop_auto_tick(session_id: str):
    _get_session(session_id)
    was_running = _cancel_scheduler(session_id)
    return {"session_id": session_id, "running": False,
            "was_running": was_running}


@app.get("/sessions/{session_id}/diagnostics")
async def get_diagnostics(session_id: str):
    return _get_session(session_id).get_diagnostics()


@app.get("/sessions/{session_id}/metrics")
async def get_metrics(session_id: str):
    """Metrics from a single replay, which also proves determinism."""
    session = _get_session(session_id)
    try:
        metrics = session.get_metrics()
    except DeterminismError as exc:
        raise HTTPException(status_code=500, detail=str(exc))
    return metrics.to_dict()


@app.delete("/sessions/{session_id}")
async def delete_session(session_id: str):
    _get_session(session_id)
    _cancel_scheduler(session_id)
    del _SESSIONS[session_id]
    return {"status": "deleted", "session_id": session_id}


@app.get("/catalog/{variant}")
def get_catalog(variant: str):
    """Static tables the front end renders from."""
    if variant == VARIANT_RAID:
        return {
            "businesses": [dataclasses.asdict(b) for b in catalog.BUSINESSES],
            "troops": [dataclasses.asdict(t) for t in catalog.TROOPS],
            "territories": [dataclasses.asdict(t) for t in catalog.TERRITORIES],
        }
    if variant == VARIANT_RPG:
        return {
            "ranks": [dataclasses.asdict(r) for r in rpg_catalog.RANKS],
            "crimes": [dataclasses.asdict(c) for c in rpg_catalog.CRIMES],
            "items": [dataclasses.asdict(i) for i in rpg_catalog.ITEMS],
        }
    raise HTTPException(status_code=404, detail=f"Unknown variant {variant!r}")


@app.get("/health")
def health():
    return {"status": "ok", "sessions": len(_SESSIONS)}
