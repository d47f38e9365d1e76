"""
tychee_core.vault.contract
--------------------------
CredentialVault: one encrypted credential record per principal.

The vault never sees plaintext. Clients seal the payload and compute its
integrity hash before store_token (see tychee_core.crypto.seal_credential).
Reads go through PermissionGate, then ExpiryEnforcer.
"""

from __future__ import annotations
from typing import Optional

from tychee_core.auth import Authenticator
from tychee_core.constants import (
    INTEGRITY_HASH_LEN,
    TOPIC_ACCESS,
    TOPIC_PAUSE,
    TOPIC_PERM,
    TOPIC_REVOKE,
    TOPIC_STORE,
    TOPIC_UNPAUSE,
    VAULT_CONTRACT_ID,
)
from tychee_core.env import Contract, Env, Invocation
from tychee_core.errors import (
    AlreadyExists,
    AlreadyInitialized,
    ContractPaused,
    ExpiredAtCreation,
    InvalidArgument,
    NotInitialized,
)
from tychee_core.logger import get_logger
from tychee_core.storage.keys import Owner, Paused, TokenCount, TokenData
from tychee_core.storage.models import CredentialRecord, CredentialStatus, Permission
from tychee_core.vault.expiry import ExpiryEnforcer
from tychee_core.vault.permissions import PermissionGate

log = get_logger("tychee.vault")


class CredentialVault(Contract):
    contract_id = VAULT_CONTRACT_ID

    def __init__(self, env: Env, contract_id: Optional[str] = None):
        super().__init__(env, contract_id)
        self.permissions = PermissionGate()
        self.expiry = ExpiryEnforcer()
        self.enforce_pause = env.config.enforce_pause

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------
    def _require_owner(self, ctx: Invocation) -> str:
        owner = ctx.storage.get(Owner())
        if owner is None:
            raise NotInitialized("Contract not initialized")
        ctx.require_auth(owner)
        return owner

    def _check_paused(self, ctx: Invocation) -> None:
        # the flag is inert unless enforce_pause is configured
        if self.enforce_pause and ctx.storage.get(Paused(), False):
            raise ContractPaused("Vault is paused")

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------
    def initialize(self, owner: str, auth: Optional[Authenticator] = None) -> None:
        with self._invoke("initialize", (owner,), auth) as ctx:
            if ctx.storage.has(Owner()):
                raise AlreadyInitialized("Already initialized")
            ctx.require_auth(owner)
            ctx.storage.set(Owner(), owner)
            ctx.storage.set(TokenCount(), 0)
            log.info(f"[VAULT INIT] owner={owner}")

    def store_token(
        self,
        user: str,
        encrypted_payload: bytes,
        integrity_hash: bytes,
        display_digits: str,
        network: str,
        expires_at: int,
        auth: Optional[Authenticator] = None,
    ) -> CredentialRecord:
        args = (user, encrypted_payload, integrity_hash, display_digits, network, expires_at)
        with self._invoke("store_token", args, auth) as ctx:
            ctx.require_auth(user)
            self._check_paused(ctx)
            if not isinstance(integrity_hash, (bytes, bytearray)) or len(integrity_hash) != INTEGRITY_HASH_LEN:
                raise InvalidArgument(f"integrity hash must be {INTEGRITY_HASH_LEN} bytes")
            if ctx.storage.has(TokenData(user)):
                raise AlreadyExists("Token already exists for this user")
            if expires_at <= ctx.now:
                raise ExpiredAtCreation("Expiration date must be in the future")

            record = CredentialRecord(
                owner=user,
                encrypted_payload=bytes(encrypted_payload),
                integrity_hash=bytes(integrity_hash),
                display_digits=display_digits,
                network=network,
                status=CredentialStatus.ACTIVE,
                created_at=ctx.now,
                expires_at=expires_at,
            )
            ctx.storage.set(TokenData(user), record)
            self.permissions.grant(ctx, user, Permission.OWNER)
            ctx.storage.set(TokenCount(), ctx.storage.get(TokenCount(), 0) + 1)

            ctx.emit(TOPIC_STORE, user, (record.integrity_hash, network, ctx.now))
            log.info(f"[VAULT STORE] user={user} network={network} expires_at={expires_at}")
            return record

    def retrieve_token(self, user: str, auth: Optional[Authenticator] = None) -> Optional[CredentialRecord]:
        with self._invoke("retrieve_token", (user,), auth) as ctx:
            ctx.require_auth(user)
            self._check_paused(ctx)
            if not self.permissions.allows_read(ctx, user):
                log.info(f"[VAULT DENY] user={user} permission={self.permissions.get(ctx, user)}")
                return None

            record = ctx.storage.get(TokenData(user))
            if record is None:
                return None

            record, expired = self.expiry.enforce(ctx, record)
            if expired:
                return record

            ctx.emit(TOPIC_ACCESS, user, ctx.now)
            return record

    def revoke_token(self, user: str, auth: Optional[Authenticator] = None) -> bool:
        with self._invoke("revoke_token", (user,), auth) as ctx:
            ctx.require_auth(user)
            self._check_paused(ctx)
            record = ctx.storage.get(TokenData(user))
            if record is None:
                return False

            record.status = CredentialStatus.REVOKED
            ctx.storage.set(TokenData(user), record)
            self.permissions.grant(ctx, user, Permission.REVOKED)
            ctx.emit(TOPIC_REVOKE, user, ctx.now)
            log.info(f"[VAULT REVOKE] user={user}")
            return True

    # ------------------------------------------------------------------
    # Owner administration
    # ------------------------------------------------------------------
    def update_permissions(self, user: str, level: Permission, auth: Optional[Authenticator] = None) -> None:
        with self._invoke("update_permissions", (user, level), auth) as ctx:
            self._require_owner(ctx)
            level = self.permissions.grant(ctx, user, level)
            ctx.emit(TOPIC_PERM, user, ctx.now)
            log.info(f"[VAULT PERM] user={user} level={level.value}")

    def pause(self, auth: Optional[Authenticator] = None) -> None:
        with self._invoke("pause", (), auth) as ctx:
            owner = self._require_owner(ctx)
            ctx.storage.set(Paused(), True)
            ctx.emit(TOPIC_PAUSE, owner, ctx.now)
            log.warning(f"[VAULT PAUSE] owner={owner} enforced={self.enforce_pause}")

    def unpause(self, auth: Optional[Authenticator] = None) -> None:
        with self._invoke("unpause", (), auth) as ctx:
            owner = self._require_owner(ctx)
            ctx.storage.set(Paused(), False)
            ctx.emit(TOPIC_UNPAUSE, owner, ctx.now)
            log.info(f"[VAULT UNPAUSE] owner={owner}")

    # ------------------------------------------------------------------
    # Public reads
    # ------------------------------------------------------------------
    def is_paused(self) -> bool:
        with self._invoke("is_paused") as ctx:
            return ctx.storage.get(Paused(), False)

    def get_token_status(self, user: str) -> Optional[CredentialStatus]:
        with self._invoke("get_token_status", (user,)) as ctx:
            record = ctx.storage.get(TokenData(user))
            return record.status if record is not None else None

    def get_token_count(self) -> int:
        with self._invoke("get_token_count") as ctx:
            return ctx.storage.get(TokenCount(), 0)

    def get_permission(self, user: str) -> Optional[Permission]:
        with self._invoke("get_permission", (user,)) as ctx:
            return self.permissions.get(ctx, user)

    def get_owner(self) -> Optional[str]:
        with self._invoke("get_owner") as ctx:
            return ctx.storage.get(Owner())
