"""
Permission-gated encrypted credential vault.

Components:
- PermissionGate: Owner / Read / Revoked access level per principal
- ExpiryEnforcer: lazy ACTIVE -> EXPIRED transition on read
- CredentialVault: contract facade, one record per principal
"""

from .contract import CredentialVault
from .expiry import ExpiryEnforcer
from .permissions import PermissionGate

__all__ = ["CredentialVault", "ExpiryEnforcer", "PermissionGate"]
