import copy
from typing import Any, Dict, List
from tychee_core.storage.keys import DataKey, INSTANCE, PERSISTENT
from tychee_core.storage.provider import StorageProvider

_MISSING = object()


class InMemoryStorage(StorageProvider):
    def __init__(self):
        self.tiers = {INSTANCE: {}, PERSISTENT: {}}
        self.audit = []
        self.replay = set()
        self._in_txn = False
        # (tier, ident) -> value before the first write in this transaction
        self._undo = {}
        self._replay_added = []
        self._audit_len = 0

    # values are copied in and out so callers cannot mutate stored state
    def get(self, namespace: str, key: DataKey, default: Any = None):
        slot = self.tiers[key.tier]
        ident = (namespace, key.encode())
        if ident not in slot:
            return default
        return copy.deepcopy(slot[ident])

    def set(self, namespace: str, key: DataKey, value: Any):
        slot = self.tiers[key.tier]
        ident = (namespace, key.encode())
        if self._in_txn and (key.tier, ident) not in self._undo:
            self._undo[(key.tier, ident)] = slot.get(ident, _MISSING)
        slot[ident] = copy.deepcopy(value)

    def has(self, namespace: str, key: DataKey) -> bool:
        return (namespace, key.encode()) in self.tiers[key.tier]

    # transactions
    def begin(self):
        if self._in_txn:
            raise RuntimeError("transaction already open")
        self._in_txn = True
        self._undo = {}
        self._replay_added = []
        self._audit_len = len(self.audit)

    def commit(self):
        self._in_txn = False
        self._undo = {}
        self._replay_added = []

    def rollback(self):
        if not self._in_txn:
            return
        for (tier, ident), old in self._undo.items():
            if old is _MISSING:
                self.tiers[tier].pop(ident, None)
            else:
                self.tiers[tier][ident] = old
        del self.audit[self._audit_len:]
        self.replay.difference_update(self._replay_added)
        self.commit()

    # replay guard
    def seen_nonce(self, principal: str, nonce: int) -> bool:
        return (principal, nonce) in self.replay

    def mark_nonce(self, principal: str, nonce: int) -> None:
        if (principal, nonce) in self.replay:
            return
        self.replay.add((principal, nonce))
        if self._in_txn:
            self._replay_added.append((principal, nonce))

    # audit
    def log_event(self, event: Dict[str, Any]) -> int:
        seq = len(self.audit) + 1
        self.audit.append(dict(event, seq=seq))
        return seq

    def list_events(self) -> List[Dict[str, Any]]:
        return [copy.deepcopy(e) for e in self.audit]
