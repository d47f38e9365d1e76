from __future__ import annotations
from typing import Any, Callable, Dict, Optional
import json

Headers = Dict[str, str]


class TransportError(Exception):
    pass


class BaseTransport:
    """
    Event mirror contract.

    Committed contract events are published after the invocation commits.
    Canonical payload at the transport boundary is bytes; adapters accept
    dict and convert. Delivery failures surface as TransportError.
    """
    name: str = "base"

    def publish(
        self,
        topic: str,
        payload: bytes | dict,
        headers: Optional[Headers] = None,
        key: Optional[str] = None,
    ) -> Any:
        raise NotImplementedError

    def subscribe(self, topic: str, handler: Callable[[dict], None]) -> Any:
        raise NotImplementedError

    def close(self) -> None:
        return

    @staticmethod
    def to_bytes(payload: bytes | dict) -> bytes:
        if isinstance(payload, bytes):
            return payload
        return json.dumps(payload, ensure_ascii=False, sort_keys=True).encode("utf-8")
