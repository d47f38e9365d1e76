"""
tychee_core.account.gas_pool
----------------------------
GasPoolLedger: the single shared prepaid balance.
MetaTransactionAuthorizer: decides whether a meta-transaction may proceed
under the principal's mode and charges the pool for it.

The pool is first-come-first-served; there is no reservation. A debit the
pool cannot cover aborts the invocation, so the decision and the charge
land together or not at all.
"""

from __future__ import annotations

from tychee_core.account.policy import AuthorizationPolicyStore
from tychee_core.constants import I128_MAX, I128_MIN, TOPIC_FUND, TOPIC_METATX
from tychee_core.env import Invocation
from tychee_core.errors import (
    GasPoolOverflow,
    InsufficientGasPool,
    InvalidArgument,
    NoSponsor,
    UnsupportedMode,
)
from tychee_core.logger import get_logger
from tychee_core.storage.keys import GasPool
from tychee_core.storage.models import AuthMode

log = get_logger("tychee.account.gas")


def _check_amount(amount) -> int:
    if isinstance(amount, bool) or not isinstance(amount, int):
        raise InvalidArgument(f"gas amount must be an integer, got {amount!r}")
    return amount


class GasPoolLedger:
    def balance(self, ctx: Invocation) -> int:
        return ctx.storage.get(GasPool(), 0)

    def set_balance(self, ctx: Invocation, amount: int) -> None:
        amount = _check_amount(amount)
        if not I128_MIN <= amount <= I128_MAX:
            raise GasPoolOverflow(f"gas pool balance out of range: {amount}")
        ctx.storage.set(GasPool(), amount)

    def credit(self, ctx: Invocation, amount: int) -> int:
        new_balance = self.balance(ctx) + _check_amount(amount)
        if not I128_MIN <= new_balance <= I128_MAX:
            raise GasPoolOverflow("gas pool overflow")
        ctx.storage.set(GasPool(), new_balance)
        return new_balance

    def debit(self, ctx: Invocation, amount: int) -> int:
        balance = self.balance(ctx)
        if balance < _check_amount(amount):
            raise InsufficientGasPool(f"Insufficient gas pool: balance={balance} cost={amount}")
        ctx.storage.set(GasPool(), balance - amount)
        return balance - amount

    def fund(self, ctx: Invocation, owner: str, amount: int) -> int:
        """Owner top-up. Caller has already authenticated `owner`."""
        new_balance = self.credit(ctx, amount)
        ctx.emit(TOPIC_FUND, owner, amount)
        log.info(f"[GAS FUND] owner={owner} amount={amount} balance={new_balance}")
        return new_balance


class MetaTransactionAuthorizer:
    """
    Authorizes and charges meta-transactions; never dispatches them.

    SESSION_KEY mode is accepted without checking a key here. The caller's
    orchestration layer must have checked the key with verify_session_key
    before submitting the meta-transaction.
    """

    def __init__(self, policy: AuthorizationPolicyStore, gas_pool: GasPoolLedger, gas_cost: int):
        self.policy = policy
        self.gas_pool = gas_pool
        self.gas_cost = gas_cost

    def authorize(self, ctx: Invocation, user: str) -> AuthMode:
        mode = self.policy.get_mode(ctx, user)
        if mode is AuthMode.SPONSORED:
            if self.policy.get_sponsor(ctx, user) is None:
                raise NoSponsor("No sponsor set")
        elif mode is AuthMode.SESSION_KEY:
            pass
        else:
            raise UnsupportedMode(f"AA mode {mode.value} does not support meta-tx")
        return mode

    def execute(self, ctx: Invocation, user: str, target: str, function: str, args: bytes) -> bytes:
        ctx.require_auth(user)
        mode = self.authorize(ctx, user)
        remaining = self.gas_pool.debit(ctx, self.gas_cost)
        ctx.emit(TOPIC_METATX, user, (target, function, ctx.now))
        log.info(
            f"[METATX] user={user} mode={mode.value} target={target} fn={function} "
            f"args_len={len(args)} cost={self.gas_cost} pool={remaining}"
        )
        return b""
