"""
tychee_core.events
------------------
Contract events and the event log.

Events emitted during an invocation are written to the storage provider's
audit log inside the invocation's transaction, so they commit or vanish
together with the state change. After commit they are mirrored to the
configured transport (if any); mirroring never fails an invocation.
"""

from __future__ import annotations
from dataclasses import dataclass, asdict
from typing import Any, Dict, Iterable, List, Optional

from tychee_core.constants import EVENT_TOPIC_PREFIX
from tychee_core.logger import get_logger
from tychee_core.storage.provider import StorageProvider
from tychee_core.transport.transport_base import BaseTransport, TransportError

log = get_logger("tychee.events")


@dataclass
class ContractEvent:
    contract: str
    topic: str
    principal: str
    data: Any = None       # JSON form: bytes are base64, enums are their value
    ledger_ts: int = 0
    seq: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ContractEvent":
        return cls(
            contract=data["contract"],
            topic=data["topic"],
            principal=data.get("principal", ""),
            data=data.get("data"),
            ledger_ts=int(data.get("ledger_ts") or 0),
            seq=int(data.get("seq") or 0),
        )


class EventLog:
    def __init__(self, storage: StorageProvider, transport: Optional[BaseTransport] = None):
        self.storage = storage
        self.transport = transport

    def record(self, events: Iterable[ContractEvent]) -> List[ContractEvent]:
        written = []
        for ev in events:
            ev.seq = self.storage.log_event(ev.to_dict())
            written.append(ev)
        return written

    def mirror(self, events: Iterable[ContractEvent]) -> None:
        if self.transport is None:
            return
        for ev in events:
            topic = f"{EVENT_TOPIC_PREFIX}.{ev.contract}.{ev.topic}"
            try:
                self.transport.publish(topic, ev.to_dict(), key=ev.principal)
            except TransportError as e:
                log.error(f"[EVENT MIRROR ERROR] topic={topic} seq={ev.seq} reason={e}")
            except Exception:
                log.exception(f"[EVENT MIRROR ERROR] topic={topic} seq={ev.seq}")

    def query(
        self,
        contract: Optional[str] = None,
        topic: Optional[str] = None,
        principal: Optional[str] = None,
    ) -> List[ContractEvent]:
        out = []
        for raw in self.storage.list_events():
            ev = ContractEvent.from_dict(raw)
            if contract is not None and ev.contract != contract:
                continue
            if topic is not None and ev.topic != topic:
                continue
            if principal is not None and ev.principal != principal:
                continue
            out.append(ev)
        return out

    def all(self) -> List[ContractEvent]:
        return self.query()
