"""
tychee_core.env
---------------
The host runtime the contracts execute against.

Env bundles the capabilities every contract operation needs: a storage
provider, a ledger clock, an event log, and a default authenticator.
Env.invoke() opens one Invocation per contract call:

- invocations are serialized and may not nest
- the ledger timestamp is read once and is constant for the whole call
- storage writes, emitted events and consumed proof nonces commit only
  if the call returns; any exception rolls them back and propagates to
  the caller
"""

from __future__ import annotations
from contextlib import contextmanager
from typing import Any, Iterator, List, Optional, Tuple
import threading

from tychee_core.auth import Authenticator, CallDescriptor, StaticAuthenticator
from tychee_core.clock import LedgerClock, SystemClock
from tychee_core.config import CoreConfig, load_config
from tychee_core.errors import AuthenticationFailure, ContractError
from tychee_core.events import ContractEvent, EventLog
from tychee_core.logger import get_logger, set_level
from tychee_core.storage import InMemoryStorage, load_storage_provider
from tychee_core.storage.keys import DataKey
from tychee_core.storage.provider import StorageProvider
from tychee_core.transport import transport_factory
from tychee_core.transport.transport_base import BaseTransport
from tychee_core.utils import to_jsonable

log = get_logger("tychee.env")


class ContractStorage:
    """Storage view scoped to one contract id."""

    def __init__(self, provider: StorageProvider, namespace: str):
        self.provider = provider
        self.namespace = namespace

    def get(self, key: DataKey, default: Any = None) -> Any:
        return self.provider.get(self.namespace, key, default)

    def set(self, key: DataKey, value: Any) -> None:
        self.provider.set(self.namespace, key, value)

    def has(self, key: DataKey) -> bool:
        return self.provider.has(self.namespace, key)


class Invocation:
    def __init__(self, env: "Env", call: CallDescriptor, authenticator: Authenticator, now: int):
        self.env = env
        self.call = call
        self.authenticator = authenticator
        self.now = now
        self.storage = ContractStorage(env.storage, call.contract)
        self.pending_events: List[ContractEvent] = []
        self._authorized = set()

    def require_auth(self, principal: str) -> None:
        if principal in self._authorized:
            return
        nonce = self.authenticator.require_auth(principal, self.call)
        if nonce is not None:
            # recorded inside the invocation's transaction; a rollback frees it
            if self.env.storage.seen_nonce(principal, nonce):
                log.warning(f"[AUTH DENY] principal={principal} reason=replayed_nonce nonce={nonce}")
                raise AuthenticationFailure(f"nonce {nonce} already used by principal {principal}", principal)
            self.env.storage.mark_nonce(principal, nonce)
        self._authorized.add(principal)

    def emit(self, topic: str, principal: str, data: Any = None) -> None:
        self.pending_events.append(ContractEvent(
            contract=self.call.contract,
            topic=topic,
            principal=principal,
            data=to_jsonable(data),
            ledger_ts=self.now,
        ))


class Env:
    def __init__(
        self,
        storage: Optional[StorageProvider] = None,
        clock: Optional[LedgerClock] = None,
        transport: Optional[BaseTransport] = None,
        authenticator: Optional[Authenticator] = None,
        config: Optional[CoreConfig] = None,
    ):
        self.config = config or CoreConfig()
        self.storage = storage if storage is not None else InMemoryStorage()
        self.clock = clock or SystemClock()
        self.events = EventLog(self.storage, transport)
        self.authenticator = authenticator or StaticAuthenticator()
        self._lock = threading.Lock()
        self._owner_thread = None

    @classmethod
    def from_config(
        cls,
        config: CoreConfig | dict | None = None,
        clock: Optional[LedgerClock] = None,
        authenticator: Optional[Authenticator] = None,
    ) -> "Env":
        if not isinstance(config, CoreConfig):
            config = load_config(config)
        set_level(config.log_level)
        storage = load_storage_provider({
            "provider": config.storage_provider,
            "sqlite_path": config.sqlite_path,
        })
        transport = transport_factory(
            config.event_transport,
            brokers=config.kafka_brokers,
            enabled=config.kafka_enabled,
        )
        log.info(f"[ENV] storage={config.storage_provider} transport={config.event_transport}")
        return cls(storage=storage, clock=clock, transport=transport, authenticator=authenticator, config=config)

    @property
    def transport(self) -> Optional[BaseTransport]:
        return self.events.transport

    def mock_all_auths(self) -> None:
        self.authenticator = StaticAuthenticator.mock_all_auths()

    @contextmanager
    def invoke(
        self,
        contract: str,
        function: str,
        args: Tuple[Any, ...] = (),
        auth: Optional[Authenticator] = None,
    ) -> Iterator[Invocation]:
        if self._owner_thread == threading.get_ident():
            raise RuntimeError(f"nested invocation of {contract}.{function}")

        with self._lock:
            self._owner_thread = threading.get_ident()
            try:
                call = CallDescriptor(contract, function, tuple(args))
                inv = Invocation(self, call, auth or self.authenticator, self.clock.timestamp())
                self.storage.begin()
                try:
                    yield inv
                    committed = self.events.record(inv.pending_events)
                except ContractError as e:
                    self.storage.rollback()
                    log.warning(f"[INVOKE FAIL] {contract}.{function} reason={type(e).__name__}: {e}")
                    raise
                except BaseException:
                    self.storage.rollback()
                    log.exception(f"[INVOKE ERROR] {contract}.{function}")
                    raise
                self.storage.commit()
                log.debug(f"[INVOKE OK] {contract}.{function} events={len(committed)}")
                self.events.mirror(committed)
            finally:
                self._owner_thread = None


class Contract:
    """Base for public contract facades bound to an Env and a contract id."""

    contract_id = "contract"

    def __init__(self, env: Env, contract_id: Optional[str] = None):
        self.env = env
        if contract_id is not None:
            self.contract_id = contract_id

    def _invoke(self, function: str, args: Tuple[Any, ...] = (), auth: Optional[Authenticator] = None):
        return self.env.invoke(self.contract_id, function, args, auth)

    def events(self, topic: Optional[str] = None, principal: Optional[str] = None) -> List[ContractEvent]:
        return self.env.events.query(contract=self.contract_id, topic=topic, principal=principal)
