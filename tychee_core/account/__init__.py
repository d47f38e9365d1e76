"""
Account abstraction policy engine.

Components:
- AuthorizationPolicyStore: per-principal mode and sponsor link
- SessionKeyRegistry: append-only ephemeral keys with expiry
- MultiSigVerifier: signer set + threshold
- GasPoolLedger: shared prepaid balance
- MetaTransactionAuthorizer: mode gate + gas charge for meta-transactions
- AccountAbstraction: contract facade composing the above
"""

from .contract import AccountAbstraction
from .gas_pool import GasPoolLedger, MetaTransactionAuthorizer
from .multisig import MultiSigVerifier
from .policy import AuthorizationPolicyStore
from .session_keys import SessionKeyRegistry

__all__ = [
    "AccountAbstraction",
    "AuthorizationPolicyStore",
    "GasPoolLedger",
    "MetaTransactionAuthorizer",
    "MultiSigVerifier",
    "SessionKeyRegistry",
]
