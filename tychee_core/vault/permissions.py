# tychee_core/vault/permissions.py
from __future__ import annotations
from typing import Optional

from tychee_core.env import Invocation
from tychee_core.errors import InvalidArgument
from tychee_core.storage.keys import Permissions
from tychee_core.storage.models import Permission


class PermissionGate:
    """
    Per-principal access level guarding vault reads.

    The level is independent of the record's own status: a REVOKED
    permission denies reads even if the record is still ACTIVE, and an
    OWNER/READ permission still lets an EXPIRED or REVOKED record be read.
    """

    def get(self, ctx: Invocation, user: str) -> Optional[Permission]:
        return ctx.storage.get(Permissions(user))

    def grant(self, ctx: Invocation, user: str, level) -> Permission:
        try:
            level = Permission(level)
        except ValueError:
            raise InvalidArgument(f"unknown permission level: {level!r}") from None
        ctx.storage.set(Permissions(user), level)
        return level

    def allows_read(self, ctx: Invocation, user: str) -> bool:
        level = self.get(ctx, user)
        return level is not None and level.allows_read()
