from __future__ import annotations
from typing import Dict, Any, List
import json, sqlite3, os
from tychee_core.storage.keys import DataKey
from tychee_core.storage.provider import StorageProvider


class SQLiteStorage(StorageProvider):
    def __init__(self, path="db/tychee_state.db"):
        # If no directory, default to current working directory
        dir_path = os.path.dirname(path) or "."
        os.makedirs(dir_path, exist_ok=True)
        self.db = sqlite3.connect(path, check_same_thread=False)
        self._in_txn = False

        self._init()

    def _init(self) -> None:
        c = self.db.cursor()

        c.execute("""CREATE TABLE IF NOT EXISTS contract_data(
            tier TEXT NOT NULL,
            namespace TEXT NOT NULL,
            key TEXT NOT NULL,
            value TEXT NOT NULL,
            PRIMARY KEY (tier, namespace, key)
        )""")
        c.execute("""CREATE TABLE IF NOT EXISTS audit(
            seq INTEGER PRIMARY KEY AUTOINCREMENT,
            contract TEXT NOT NULL,
            topic TEXT NOT NULL,
            principal TEXT,
            ledger_ts INTEGER,
            data TEXT
        )""")
        c.execute("""CREATE TABLE IF NOT EXISTS replay_guard(
            principal TEXT NOT NULL,
            nonce INTEGER NOT NULL,
            PRIMARY KEY (principal, nonce)
        )""")

        self.db.commit()

    def _autocommit(self) -> None:
        # outside an invocation every write stands on its own
        if not self._in_txn:
            self.db.commit()

    def get(self, namespace: str, key: DataKey, default: Any = None) -> Any:
        cur = self.db.execute(
            "SELECT value FROM contract_data WHERE tier=? AND namespace=? AND key=?",
            (key.tier, namespace, key.encode()),
        )
        row = cur.fetchone()
        if not row:
            return default
        return key.load(row[0])

    def set(self, namespace: str, key: DataKey, value: Any) -> None:
        self.db.execute(
            "INSERT INTO contract_data(tier,namespace,key,value) VALUES(?,?,?,?) "
            "ON CONFLICT(tier,namespace,key) DO UPDATE SET value=excluded.value",
            (key.tier, namespace, key.encode(), key.dump(value)),
        )
        self._autocommit()

    def has(self, namespace: str, key: DataKey) -> bool:
        cur = self.db.execute(
            "SELECT 1 FROM contract_data WHERE tier=? AND namespace=? AND key=?",
            (key.tier, namespace, key.encode()),
        )
        return cur.fetchone() is not None

    # --- transactions ---

    def begin(self) -> None:
        if self._in_txn:
            raise RuntimeError("transaction already open")
        if self.db.in_transaction:
            self.db.commit()
        self.db.execute("BEGIN")
        self._in_txn = True

    def commit(self) -> None:
        self.db.commit()
        self._in_txn = False

    def rollback(self) -> None:
        self.db.rollback()
        self._in_txn = False

    # --- replay guard ---

    def seen_nonce(self, principal: str, nonce: int) -> bool:
        cur = self.db.execute(
            "SELECT 1 FROM replay_guard WHERE principal=? AND nonce=?", (principal, nonce)
        )
        return cur.fetchone() is not None

    def mark_nonce(self, principal: str, nonce: int) -> None:
        self.db.execute(
            "INSERT OR IGNORE INTO replay_guard(principal, nonce) VALUES(?,?)", (principal, nonce)
        )
        self._autocommit()

    # --- audit ---

    def log_event(self, event: Dict[str, Any]) -> int:
        cur = self.db.execute(
            "INSERT INTO audit(contract,topic,principal,ledger_ts,data) VALUES(?,?,?,?,?)",
            (
                event["contract"],
                event["topic"],
                event.get("principal"),
                event.get("ledger_ts"),
                json.dumps(event.get("data"), separators=(",", ":"), sort_keys=True),
            ),
        )
        self._autocommit()
        return cur.lastrowid

    def list_events(self) -> List[Dict[str, Any]]:
        cur = self.db.execute(
            "SELECT seq, contract, topic, principal, ledger_ts, data FROM audit ORDER BY seq"
        )
        return [
            {
                "seq": seq,
                "contract": contract,
                "topic": topic,
                "principal": principal,
                "ledger_ts": ledger_ts,
                "data": json.loads(data) if data is not None else None,
            }
            for seq, contract, topic, principal, ledger_ts, data in cur.fetchall()
        ]

    def close(self):
        self.db.close()
