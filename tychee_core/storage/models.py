# tychee_core/storage/models.py
from __future__ import annotations
from dataclasses import dataclass, asdict, field
from enum import Enum
from typing import Any, Dict, List
from tychee_core.utils import b64e, b64d


class AuthMode(str, Enum):
    STANDARD = "standard"        # user authenticates and pays directly
    SPONSORED = "sponsored"      # gas sponsored by a sponsor principal
    SESSION_KEY = "session_key"  # temporary session key
    MULTI_SIG = "multi_sig"      # threshold signer set


class CredentialStatus(str, Enum):
    ACTIVE = "active"
    EXPIRED = "expired"
    REVOKED = "revoked"


class Permission(str, Enum):
    OWNER = "owner"      # full access
    READ = "read"        # can read own record
    REVOKED = "revoked"  # no access

    def allows_read(self) -> bool:
        return self in (Permission.OWNER, Permission.READ)


@dataclass
class SessionKeyRecord:
    key: bytes
    expires_at: int
    permissions: List[str] = field(default_factory=list)

    def is_live(self, now: int) -> bool:
        return now < self.expires_at

    def to_dict(self) -> Dict[str, Any]:
        return {
            "key": b64e(self.key),
            "expires_at": self.expires_at,
            "permissions": list(self.permissions),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "SessionKeyRecord":
        return cls(
            key=b64d(data["key"]),
            expires_at=int(data["expires_at"]),
            permissions=list(data.get("permissions", [])),
        )


@dataclass
class CredentialRecord:
    """
    Storage-level representation of one encrypted credential.

    The payload is opaque to the vault; it was sealed client-side and is
    returned as-is to principals holding Owner or Read permission.
    """
    owner: str
    encrypted_payload: bytes
    integrity_hash: bytes
    display_digits: str
    network: str
    status: CredentialStatus = CredentialStatus.ACTIVE
    created_at: int = 0
    expires_at: int = 0

    def to_dict(self) -> Dict[str, Any]:
        d = asdict(self)
        d["encrypted_payload"] = b64e(self.encrypted_payload)
        d["integrity_hash"] = b64e(self.integrity_hash)
        d["status"] = self.status.value
        return d

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "CredentialRecord":
        return cls(
            owner=data["owner"],
            encrypted_payload=b64d(data["encrypted_payload"]),
            integrity_hash=b64d(data["integrity_hash"]),
            display_digits=data.get("display_digits", ""),
            network=data.get("network", ""),
            status=CredentialStatus(data.get("status", "active")),
            created_at=int(data.get("created_at", 0)),
            expires_at=int(data.get("expires_at", 0)),
        )
