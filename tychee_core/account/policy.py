# tychee_core/account/policy.py
from __future__ import annotations
from typing import Optional

from tychee_core.constants import TOPIC_AA_MODE, TOPIC_SPONSOR
from tychee_core.env import Invocation
from tychee_core.errors import AlreadyInitialized, InvalidArgument, NotInitialized
from tychee_core.logger import get_logger
from tychee_core.storage.keys import Mode, Owner, Sponsor
from tychee_core.storage.models import AuthMode

log = get_logger("tychee.account.policy")


def coerce_mode(mode) -> AuthMode:
    try:
        return AuthMode(mode)
    except ValueError:
        raise InvalidArgument(f"unknown authorization mode: {mode!r}") from None


class AuthorizationPolicyStore:
    """
    Per-principal authorization mode and sponsor link, plus the contract
    owner of the policy half.

    Modes are overwritten wholesale; there is no merge and no delete.
    """

    def initialize(self, ctx: Invocation, owner: str) -> None:
        if ctx.storage.has(Owner()):
            raise AlreadyInitialized("Already initialized")
        ctx.require_auth(owner)
        ctx.storage.set(Owner(), owner)
        log.info(f"[AA INIT] owner={owner}")

    def get_owner(self, ctx: Invocation) -> Optional[str]:
        return ctx.storage.get(Owner())

    def require_owner(self, ctx: Invocation) -> str:
        owner = self.get_owner(ctx)
        if owner is None:
            raise NotInitialized("Contract not initialized")
        ctx.require_auth(owner)
        return owner

    def get_mode(self, ctx: Invocation, user: str) -> AuthMode:
        return ctx.storage.get(Mode(user), AuthMode.STANDARD)

    def assign_mode(self, ctx: Invocation, user: str, mode: AuthMode) -> None:
        # side-effect write used by sponsor/session/multisig registration
        ctx.storage.set(Mode(user), mode)

    def set_mode(self, ctx: Invocation, user: str, mode) -> None:
        mode = coerce_mode(mode)
        ctx.require_auth(user)
        self.assign_mode(ctx, user, mode)
        ctx.emit(TOPIC_AA_MODE, user, mode)
        log.info(f"[AA MODE] user={user} mode={mode.value}")

    def get_sponsor(self, ctx: Invocation, user: str) -> Optional[str]:
        return ctx.storage.get(Sponsor(user))

    def set_sponsor(self, ctx: Invocation, user: str, sponsor: str) -> None:
        # the sponsor grants sponsorship, not the beneficiary
        ctx.require_auth(sponsor)
        ctx.storage.set(Sponsor(user), sponsor)
        self.assign_mode(ctx, user, AuthMode.SPONSORED)
        ctx.emit(TOPIC_SPONSOR, user, sponsor)
        log.info(f"[AA SPONSOR] user={user} sponsor={sponsor}")
