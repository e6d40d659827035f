"""
Empire Kernel — Canonical Hashing

Deterministic canonical serialization + SHA-256 hashing of a game state.

Rules:
  - Built from state.to_dict() (lists already in reducer order)
  - Keys sorted, UTF-8 JSON, no whitespace
  - Floats (villain buff values) serialised by json's repr
"""

from __future__ import annotations

import hashlib
import json

KERNEL_VERSION = 1


def canonical_serialize(state) -> bytes:
    """Canonical serialization of a game state to UTF-8 JSON bytes."""
    obj = {"kernel_version": KERNEL_VERSION, "state": state.to_dict()}
    return json.dumps(
        obj, ensure_ascii=True, separators=(",", ":"), sort_keys=True,
    ).encode("utf-8")


def canonical_hash(state) -> str:
    """SHA-256 of canonical serialization. Lowercase hex string."""
    return hashlib.sha256(canonical_serialize(state)).hexdigest()
