"""Deterministic request fingerprints.

Callers use the fingerprint as a cache / deduplication key; the engine never
caches.  Serialization is canonical (sorted keys, stable float tokens) so the
key is identical across processes and hash seeds.
"""

from __future__ import annotations

import hashlib
import json
import math
from collections.abc import Mapping
from enum import Enum
from typing import Any

from pydantic import BaseModel


def _canon(x: Any) -> Any:
    """Canonicalize to JSON-safe primitives with stable float handling."""
    if isinstance(x, BaseModel):
        return _canon(x.model_dump(mode="json"))
    if isinstance(x, Enum):
        return _canon(x.value)
    if isinstance(x, Mapping):
        return {str(k): _canon(v) for k, v in x.items()}
    if isinstance(x, (list, tuple)):
        return [_canon(v) for v in x]
    # bool is an int subclass; keep it as-is
    if isinstance(x, bool) or x is None or isinstance(x, str):
        return x
    if isinstance(x, (int, float)):
        # 20 and 20.0 are the same request
        f = float(x)
        if math.isnan(f):
            return "NaN"
        if math.isinf(f):
            return "Infinity" if f > 0 else "-Infinity"
        return repr(f)
    return str(x)


def canonical_json(payload: Any) -> str:
    return json.dumps(_canon(payload), sort_keys=True, separators=(",", ":"), ensure_ascii=True)


def fingerprint(calculator_id: str, calculator_version: str, request: BaseModel) -> str:
    """SHA-256 hex digest of the normalized request for one calculator version."""
    payload = {
        "calculator": calculator_id,
        "version": calculator_version,
        "request": request,
    }
    return hashlib.sha256(canonical_json(payload).encode("utf-8")).hexdigest()
