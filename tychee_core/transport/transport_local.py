# tychee_core/transport/transport_local.py
from __future__ import annotations
from typing import Callable, Dict, List, Optional
import json
from tychee_core.logger import get_logger
from tychee_core.transport.transport_base import BaseTransport, Headers

log = get_logger("tychee.transport.local")


class LocalAdapter(BaseTransport):
    """
    In-process pub/sub loopback.

    Handlers run synchronously inside publish(). Subscribing to "*" receives
    every topic.
    """

    name = "local"

    def __init__(self):
        self.handlers: Dict[str, List[Callable[[dict], None]]] = {}

    def publish(self, topic: str, payload: bytes | dict, headers: Optional[Headers] = None, key: Optional[str] = None):
        if isinstance(payload, bytes):
            payload = json.loads(payload.decode("utf-8"))
        log.info(f"[LOCAL PUB] topic={topic} key={key}")
        delivered = 0
        for handler in self.handlers.get(topic, []) + self.handlers.get("*", []):
            handler(payload)
            delivered += 1
        return delivered

    def subscribe(self, topic: str, handler: Callable[[dict], None]):
        log.info(f"[LOCAL SUB] topic={topic}")
        self.handlers.setdefault(topic, []).append(handler)
