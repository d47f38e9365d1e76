# tychee_core/vault/expiry.py
from __future__ import annotations
from dataclasses import replace
from typing import Tuple

from tychee_core.env import Invocation
from tychee_core.logger import get_logger
from tychee_core.storage.keys import TokenData
from tychee_core.storage.models import CredentialRecord, CredentialStatus

log = get_logger("tychee.vault.expiry")


class ExpiryEnforcer:
    """Lazily moves ACTIVE records read past expiry to EXPIRED and persists it."""

    def is_expired(self, ctx: Invocation, record: CredentialRecord) -> bool:
        return ctx.now > record.expires_at

    def enforce(self, ctx: Invocation, record: CredentialRecord) -> Tuple[CredentialRecord, bool]:
        """Returns (record, expired). REVOKED and EXPIRED are never rewritten."""
        if not self.is_expired(ctx, record):
            return record, False
        if record.status is CredentialStatus.ACTIVE:
            record = replace(record, status=CredentialStatus.EXPIRED)
            ctx.storage.set(TokenData(record.owner), record)
            log.info(f"[VAULT EXPIRE] user={record.owner} expires_at={record.expires_at} now={ctx.now}")
        return record, True
