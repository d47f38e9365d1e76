"""
tychee_core.auth
----------------
Authenticator capabilities.

A contract operation declares which principal must have authorized the
call by calling `Invocation.require_auth(principal)`. The invocation hands
the principal and a CallDescriptor (contract, function, arguments) to its
authenticator, which either returns or raises AuthenticationFailure before
the operation touches any state.

- StaticAuthenticator: a fixed set of principals the host has already
  authenticated (or every principal, for tests and trusted hosts).
- SignatureAuthenticator: Ed25519 proofs over the canonical call bytes.
  Each proof carries a per-principal nonce; the invocation records the
  nonce in the replay guard so one proof authorizes exactly one call.
"""

from __future__ import annotations
from dataclasses import dataclass, replace
from typing import Any, Dict, Iterable, Optional, Tuple

from tychee_core.crypto import ed25519_sign, ed25519_verify, principal_from_pubkey
from tychee_core.errors import AuthenticationFailure
from tychee_core.logger import get_logger
from tychee_core.utils import canonical_json

log = get_logger("tychee.auth")

Principal = str


@dataclass(frozen=True)
class CallDescriptor:
    contract: str
    function: str
    args: Tuple[Any, ...] = ()
    nonce: Optional[int] = None

    def to_signing_bytes(self) -> bytes:
        return canonical_json({
            "contract": self.contract,
            "function": self.function,
            "args": list(self.args),
            "nonce": self.nonce,
        })


class Authenticator:
    def require_auth(self, principal: Principal, call: CallDescriptor) -> Optional[int]:
        """Raise AuthenticationFailure or return the nonce the proof consumed (None if none)."""
        raise NotImplementedError


class StaticAuthenticator(Authenticator):
    def __init__(self, principals: Iterable[Principal] = (), mock_all: bool = False):
        self.principals = set(principals)
        self.mock_all = mock_all

    @classmethod
    def mock_all_auths(cls) -> "StaticAuthenticator":
        return cls(mock_all=True)

    def require_auth(self, principal: Principal, call: CallDescriptor) -> Optional[int]:
        if self.mock_all or principal in self.principals:
            return None
        log.warning(f"[AUTH DENY] principal={principal} call={call.contract}.{call.function}")
        raise AuthenticationFailure(f"principal {principal} did not authorize {call.function}", principal)


class SignatureAuthenticator(Authenticator):
    """
    Verifies Ed25519 proofs.

    keyring maps principal -> raw public key; proofs maps principal ->
    (nonce, signature), the signature being over the signing bytes of the
    call with that nonce filled in.
    """

    def __init__(
        self,
        keyring: Optional[Dict[Principal, bytes]] = None,
        proofs: Optional[Dict[Principal, Tuple[int, bytes]]] = None,
    ):
        self.keyring = dict(keyring or {})
        self.proofs = dict(proofs or {})

    def register(self, pub_raw: bytes) -> Principal:
        principal = principal_from_pubkey(pub_raw)
        self.keyring[principal] = pub_raw
        return principal

    def add_proof(self, principal: Principal, signature: bytes, nonce: int) -> None:
        self.proofs[principal] = (int(nonce), signature)

    def require_auth(self, principal: Principal, call: CallDescriptor) -> Optional[int]:
        pub = self.keyring.get(principal)
        proof = self.proofs.get(principal)
        if pub is None or proof is None:
            log.warning(f"[AUTH DENY] principal={principal} reason=no_key_or_proof")
            raise AuthenticationFailure(f"no key or proof for principal {principal}", principal)
        nonce, sig = proof
        if not ed25519_verify(pub, sig, replace(call, nonce=nonce).to_signing_bytes()):
            log.warning(f"[AUTH DENY] principal={principal} reason=bad_signature")
            raise AuthenticationFailure(f"invalid signature from principal {principal}", principal)
        return nonce


def sign_call(priv_raw: bytes, call: CallDescriptor, nonce: int) -> bytes:
    return ed25519_sign(priv_raw, replace(call, nonce=int(nonce)).to_signing_bytes())
