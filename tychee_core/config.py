"""
tychee_core.config
------------------
Runtime configuration. Explicit values passed to load_config() win over
environment variables, which win over the defaults below.
"""

from __future__ import annotations
from dataclasses import dataclass, asdict
from typing import Any, Dict, Optional
import os

from tychee_core.constants import DEFAULT_METATX_GAS_COST


@dataclass
class CoreConfig:
    storage_provider: str = "memory"          # memory | sqlite
    sqlite_path: str = "db/tychee_state.db"
    event_transport: str = "none"             # none | local | kafka
    kafka_brokers: str = "localhost:9092"
    kafka_enabled: bool = True
    log_level: str = "INFO"
    metatx_gas_cost: int = DEFAULT_METATX_GAS_COST
    max_session_keys: Optional[int] = None    # None keeps every key ever added
    dedupe_multisig_signers: bool = False
    enforce_pause: bool = False

    def __post_init__(self):
        if self.metatx_gas_cost < 0:
            raise ValueError("metatx_gas_cost must be non-negative")
        if self.max_session_keys is not None and self.max_session_keys < 1:
            raise ValueError("max_session_keys must be at least 1")

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


_ENV_VARS = {
    "storage_provider": "TYCHEE_STORAGE_PROVIDER",
    "sqlite_path": "TYCHEE_DB_PATH",
    "event_transport": "TYCHEE_EVENT_TRANSPORT",
    "kafka_brokers": "KAFKA_BROKERS",
    "kafka_enabled": "KAFKA_ENABLED",
    "log_level": "TYCHEE_LOG_LEVEL",
    "metatx_gas_cost": "TYCHEE_METATX_GAS_COST",
    "max_session_keys": "TYCHEE_MAX_SESSION_KEYS",
    "dedupe_multisig_signers": "TYCHEE_DEDUPE_MULTISIG",
    "enforce_pause": "TYCHEE_ENFORCE_PAUSE",
}

_BOOL_FIELDS = {"kafka_enabled", "dedupe_multisig_signers", "enforce_pause"}
_INT_FIELDS = {"metatx_gas_cost", "max_session_keys"}


def _coerce(name: str, raw: Any) -> Any:
    if raw is None:
        return None
    if name in _BOOL_FIELDS:
        if isinstance(raw, bool):
            return raw
        return str(raw).strip().lower() in ("1", "true", "yes", "on")
    if name in _INT_FIELDS:
        if str(raw).strip() == "":
            return None
        return int(raw)
    if name in ("storage_provider", "event_transport"):
        return str(raw).lower()
    return raw


def load_config(config: dict | None = None) -> CoreConfig:
    config = config or {}
    unknown = set(config) - set(_ENV_VARS)
    if unknown:
        raise ValueError(f"Unknown config keys: {sorted(unknown)}")

    values = {}
    for name, env_var in _ENV_VARS.items():
        if name in config:
            raw = config[name]
        elif env_var in os.environ:
            raw = os.environ[env_var]
        else:
            continue
        values[name] = _coerce(name, raw)

    return CoreConfig(**values)
