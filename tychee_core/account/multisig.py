# tychee_core/account/multisig.py
from __future__ import annotations
from typing import List, Optional, Tuple

from tychee_core.account.policy import AuthorizationPolicyStore
from tychee_core.constants import TOPIC_MULTISIG
from tychee_core.env import Invocation
from tychee_core.errors import InvalidThreshold
from tychee_core.logger import get_logger
from tychee_core.storage.keys import Signers, Threshold
from tychee_core.storage.models import AuthMode

log = get_logger("tychee.account.multisig")


class MultiSigVerifier:
    """
    Threshold signer sets.

    verify() counts one match per entry in `signatures`. By default the same
    signer listed twice counts twice, so [A, A] meets a threshold of 2.
    Set dedupe=True to count each configured signer at most once.
    """

    def __init__(self, policy: AuthorizationPolicyStore, dedupe: bool = False):
        self.policy = policy
        self.dedupe = dedupe

    def setup(self, ctx: Invocation, user: str, signers: List[str], threshold: int) -> None:
        ctx.require_auth(user)
        signers = list(signers)
        if isinstance(threshold, bool) or not isinstance(threshold, int) or threshold <= 0 or threshold > len(signers):
            raise InvalidThreshold(f"Invalid threshold {threshold!r} for {len(signers)} signers")

        ctx.storage.set(Signers(user), signers)
        ctx.storage.set(Threshold(user), threshold)
        self.policy.assign_mode(ctx, user, AuthMode.MULTI_SIG)
        ctx.emit(TOPIC_MULTISIG, user, (threshold, len(signers)))
        log.info(f"[AA MULTISIG] user={user} threshold={threshold} signers={len(signers)}")

    def config(self, ctx: Invocation, user: str) -> Optional[Tuple[List[str], int]]:
        signers = ctx.storage.get(Signers(user))
        threshold = ctx.storage.get(Threshold(user))
        if signers is None or threshold is None:
            return None
        return signers, threshold

    def verify(self, ctx: Invocation, user: str, signatures: List[str]) -> bool:
        cfg = self.config(ctx, user)
        if cfg is None:
            return False
        signers, threshold = cfg

        valid_count = 0
        seen = set()
        for sig in signatures:
            if sig not in signers:
                continue
            if self.dedupe:
                if sig in seen:
                    continue
                seen.add(sig)
            valid_count += 1
        return valid_count >= threshold
