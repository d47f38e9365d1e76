# tychee_core/account/session_keys.py
from __future__ import annotations
from typing import List, Optional

from tychee_core.account.policy import AuthorizationPolicyStore
from tychee_core.constants import SESSION_KEY_LEN, TOPIC_SESSION
from tychee_core.env import Invocation
from tychee_core.errors import InvalidArgument
from tychee_core.logger import get_logger
from tychee_core.storage.keys import SessionKeys
from tychee_core.storage.models import AuthMode, SessionKeyRecord

log = get_logger("tychee.account.session")


class SessionKeyRegistry:
    """
    Per-principal list of ephemeral keys, appended in registration order.

    Records are never revoked individually. With max_keys unset the list
    grows for the principal's lifetime and verify() is a linear scan; with
    max_keys set only the most recent max_keys records are kept.
    """

    def __init__(self, policy: AuthorizationPolicyStore, max_keys: Optional[int] = None):
        if max_keys is not None and (isinstance(max_keys, bool) or not isinstance(max_keys, int) or max_keys < 1):
            raise ValueError(f"max_keys must be a positive integer or None, got {max_keys!r}")
        self.policy = policy
        self.max_keys = max_keys

    def add(self, ctx: Invocation, user: str, key: bytes, duration: int, permissions: List[str]) -> int:
        ctx.require_auth(user)
        if not isinstance(key, (bytes, bytearray)) or len(key) != SESSION_KEY_LEN:
            raise InvalidArgument(f"session key must be {SESSION_KEY_LEN} bytes")
        if isinstance(duration, bool) or not isinstance(duration, int) or duration < 0:
            raise InvalidArgument(f"session duration must be a non-negative integer, got {duration!r}")

        expires_at = ctx.now + duration
        records = self.list(ctx, user)
        records.append(SessionKeyRecord(key=bytes(key), expires_at=expires_at, permissions=list(permissions)))
        if self.max_keys is not None:
            records = records[-self.max_keys:]
        ctx.storage.set(SessionKeys(user), records)

        self.policy.assign_mode(ctx, user, AuthMode.SESSION_KEY)
        ctx.emit(TOPIC_SESSION, user, expires_at)
        log.info(f"[AA SESSION] user={user} expires_at={expires_at} scopes={list(permissions)} keys={len(records)}")
        return expires_at

    def verify(self, ctx: Invocation, user: str, key: bytes) -> bool:
        for rec in self.list(ctx, user):
            if rec.key == key and rec.is_live(ctx.now):
                return True
        return False

    def list(self, ctx: Invocation, user: str) -> List[SessionKeyRecord]:
        return ctx.storage.get(SessionKeys(user), [])
