"""
tychee_core.utils
-----------------
Lightweight helpers for base64, hashing, and canonical JSON serialization.
These keep call descriptors, stored values, and event payloads deterministic.
"""

from __future__ import annotations
import base64, json, hashlib
from enum import Enum
from typing import Any


def b64e(b: bytes) -> str:
    return base64.b64encode(b).decode("ascii")

def b64d(s: str) -> bytes:
    return base64.b64decode(s.encode("ascii"))

def to_jsonable(obj: Any) -> Any:
    # bytes -> base64, enums -> value, tuples -> lists
    if isinstance(obj, (bytes, bytearray)):
        return b64e(bytes(obj))
    if isinstance(obj, Enum):
        return obj.value
    if isinstance(obj, (list, tuple)):
        return [to_jsonable(x) for x in obj]
    if isinstance(obj, dict):
        return {str(k): to_jsonable(v) for k, v in obj.items()}
    if hasattr(obj, "to_dict"):
        return obj.to_dict()
    return obj

def canonical_json(obj: Any) -> bytes:
    # Deterministic, minimal JSON for signing and storage
    return json.dumps(to_jsonable(obj), separators=(",", ":"), sort_keys=True, ensure_ascii=False).encode("utf-8")

def sha256(data: bytes) -> str:
    return hashlib.sha256(data).hexdigest()

def sha256_digest(data: bytes) -> bytes:
    return hashlib.sha256(data).digest()
