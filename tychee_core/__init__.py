"""
Tychee Core Package
===================
On-ledger authorization and permission-lifecycle engine.

Provides:
- Account abstraction policy engine (modes, sponsors, session keys,
  multi-signature, gas pool, meta-transaction authorization)
- Permission-gated encrypted credential vault with lazy expiry
- Host plumbing: atomic invocations, pluggable storage (memory, SQLite),
  authenticators, ledger clocks, event log with transport mirroring
"""

from tychee_core.account import AccountAbstraction
from tychee_core.auth import SignatureAuthenticator, StaticAuthenticator
from tychee_core.clock import ManualClock, SystemClock
from tychee_core.config import CoreConfig, load_config
from tychee_core.env import Env
from tychee_core.storage.models import (
    AuthMode,
    CredentialRecord,
    CredentialStatus,
    Permission,
    SessionKeyRecord,
)
from tychee_core.vault import CredentialVault

__all__ = [
    "AccountAbstraction",
    "AuthMode",
    "CoreConfig",
    "CredentialRecord",
    "CredentialStatus",
    "CredentialVault",
    "Env",
    "ManualClock",
    "Permission",
    "SessionKeyRecord",
    "SignatureAuthenticator",
    "StaticAuthenticator",
    "SystemClock",
    "load_config",
]
