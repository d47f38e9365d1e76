# tychee_core/storage/provider.py
from __future__ import annotations
from typing import Any, Dict, List
from tychee_core.storage.keys import DataKey


class StorageProvider:
    """
    Interface for the host key-value store.

    Values are addressed by (namespace, key); the namespace is the contract
    id. begin/commit/rollback bracket one contract invocation. log_event and
    list_events back the audit log of committed contract events; events
    written inside a transaction are discarded by rollback.

    seen_nonce/mark_nonce back the replay guard for signed proofs. A nonce
    marked inside a transaction is released again by rollback.
    """

    def get(self, namespace: str, key: DataKey, default: Any = None) -> Any: ...
    def set(self, namespace: str, key: DataKey, value: Any) -> None: ...
    def has(self, namespace: str, key: DataKey) -> bool: ...

    def begin(self) -> None: ...
    def commit(self) -> None: ...
    def rollback(self) -> None: ...

    def log_event(self, event: Dict[str, Any]) -> int: ...
    def list_events(self) -> List[Dict[str, Any]]: ...

    def seen_nonce(self, principal: str, nonce: int) -> bool: ...
    def mark_nonce(self, principal: str, nonce: int) -> None: ...

    def close(self) -> None:
        return
