"""
tychee_core.storage.keys
------------------------
The closed set of storage keys used by the contracts.

Every key knows its tier (instance for small contract-wide values,
persistent for per-principal data) and how to serialize its value to JSON
for providers that do not keep Python objects (SQLite).
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Any, ClassVar, Union
import json

from tychee_core.storage.models import AuthMode, CredentialRecord, Permission, SessionKeyRecord

INSTANCE = "instance"
PERSISTENT = "persistent"


class DataKey:
    tier: ClassVar[str] = PERSISTENT

    def encode(self) -> str:
        return type(self).__name__

    def to_json(self, value: Any) -> Any:
        return value

    def from_json(self, data: Any) -> Any:
        return data

    def dump(self, value: Any) -> str:
        return json.dumps(self.to_json(value), separators=(",", ":"), sort_keys=True)

    def load(self, raw: str) -> Any:
        return self.from_json(json.loads(raw))


@dataclass(frozen=True)
class _PrincipalKey(DataKey):
    principal: str

    def encode(self) -> str:
        return f"{type(self).__name__}({self.principal})"


# --- account abstraction ---

@dataclass(frozen=True)
class Mode(_PrincipalKey):
    def to_json(self, value: AuthMode) -> str:
        return value.value

    def from_json(self, data: str) -> AuthMode:
        return AuthMode(data)


@dataclass(frozen=True)
class Sponsor(_PrincipalKey):
    pass


@dataclass(frozen=True)
class SessionKeys(_PrincipalKey):
    def to_json(self, value):
        return [rec.to_dict() for rec in value]

    def from_json(self, data):
        return [SessionKeyRecord.from_dict(d) for d in data]


@dataclass(frozen=True)
class Signers(_PrincipalKey):
    def from_json(self, data):
        return list(data)


@dataclass(frozen=True)
class Threshold(_PrincipalKey):
    pass


@dataclass(frozen=True)
class GasPool(DataKey):
    tier = INSTANCE

    # i128 does not fit a JSON number for every consumer
    def to_json(self, value: int) -> str:
        return str(value)

    def from_json(self, data: str) -> int:
        return int(data)


@dataclass(frozen=True)
class Owner(DataKey):
    tier = INSTANCE


# --- credential vault ---

@dataclass(frozen=True)
class TokenData(_PrincipalKey):
    def to_json(self, value: CredentialRecord):
        return value.to_dict()

    def from_json(self, data) -> CredentialRecord:
        return CredentialRecord.from_dict(data)


@dataclass(frozen=True)
class Permissions(_PrincipalKey):
    def to_json(self, value: Permission) -> str:
        return value.value

    def from_json(self, data: str) -> Permission:
        return Permission(data)


@dataclass(frozen=True)
class TokenCount(DataKey):
    tier = INSTANCE


@dataclass(frozen=True)
class Paused(DataKey):
    tier = INSTANCE


StorageKey = Union[
    Mode, Sponsor, SessionKeys, Signers, Threshold, GasPool, Owner,
    TokenData, Permissions, TokenCount, Paused,
]
