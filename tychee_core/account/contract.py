"""
tychee_core.account.contract
----------------------------
AccountAbstraction: public surface of the policy engine.

Every method runs as one atomic invocation on the bound Env. Methods that
require a principal's authorization accept an optional `auth` overriding
the Env's default authenticator for that call.
"""

from __future__ import annotations
from typing import List, Optional, Tuple

from tychee_core.account.gas_pool import GasPoolLedger, MetaTransactionAuthorizer
from tychee_core.account.multisig import MultiSigVerifier
from tychee_core.account.policy import AuthorizationPolicyStore
from tychee_core.account.session_keys import SessionKeyRegistry
from tychee_core.auth import Authenticator
from tychee_core.constants import AA_CONTRACT_ID
from tychee_core.env import Contract, Env
from tychee_core.storage.models import AuthMode, SessionKeyRecord


class AccountAbstraction(Contract):
    contract_id = AA_CONTRACT_ID

    def __init__(self, env: Env, contract_id: Optional[str] = None):
        super().__init__(env, contract_id)
        cfg = env.config
        self.policy = AuthorizationPolicyStore()
        self.gas_pool = GasPoolLedger()
        self.session_keys = SessionKeyRegistry(self.policy, max_keys=cfg.max_session_keys)
        self.multisig = MultiSigVerifier(self.policy, dedupe=cfg.dedupe_multisig_signers)
        self.metatx = MetaTransactionAuthorizer(self.policy, self.gas_pool, cfg.metatx_gas_cost)

    # ------------------------------------------------------------------
    # Initialization / policy
    # ------------------------------------------------------------------
    def initialize(self, owner: str, initial_gas_pool: int, auth: Optional[Authenticator] = None) -> None:
        with self._invoke("initialize", (owner, initial_gas_pool), auth) as ctx:
            self.policy.initialize(ctx, owner)
            self.gas_pool.set_balance(ctx, initial_gas_pool)

    def get_owner(self) -> Optional[str]:
        with self._invoke("get_owner") as ctx:
            return self.policy.get_owner(ctx)

    def set_mode(self, user: str, mode: AuthMode, auth: Optional[Authenticator] = None) -> None:
        with self._invoke("set_mode", (user, mode), auth) as ctx:
            self.policy.set_mode(ctx, user, mode)

    def get_mode(self, user: str) -> AuthMode:
        with self._invoke("get_mode", (user,)) as ctx:
            return self.policy.get_mode(ctx, user)

    def set_sponsor(self, user: str, sponsor: str, auth: Optional[Authenticator] = None) -> None:
        with self._invoke("set_sponsor", (user, sponsor), auth) as ctx:
            self.policy.set_sponsor(ctx, user, sponsor)

    def get_sponsor(self, user: str) -> Optional[str]:
        with self._invoke("get_sponsor", (user,)) as ctx:
            return self.policy.get_sponsor(ctx, user)

    # ------------------------------------------------------------------
    # Session keys
    # ------------------------------------------------------------------
    def add_session_key(
        self,
        user: str,
        session_key: bytes,
        duration: int,
        permissions: List[str],
        auth: Optional[Authenticator] = None,
    ) -> int:
        with self._invoke("add_session_key", (user, session_key, duration, list(permissions)), auth) as ctx:
            return self.session_keys.add(ctx, user, session_key, duration, permissions)

    def verify_session_key(self, user: str, session_key: bytes) -> bool:
        with self._invoke("verify_session_key", (user, session_key)) as ctx:
            return self.session_keys.verify(ctx, user, session_key)

    def get_session_keys(self, user: str) -> List[SessionKeyRecord]:
        with self._invoke("get_session_keys", (user,)) as ctx:
            return self.session_keys.list(ctx, user)

    # ------------------------------------------------------------------
    # Multi-signature
    # ------------------------------------------------------------------
    def setup_multisig(self, user: str, signers: List[str], threshold: int, auth: Optional[Authenticator] = None) -> None:
        with self._invoke("setup_multisig", (user, list(signers), threshold), auth) as ctx:
            self.multisig.setup(ctx, user, signers, threshold)

    def verify_multisig(self, user: str, signatures: List[str]) -> bool:
        with self._invoke("verify_multisig", (user, list(signatures))) as ctx:
            return self.multisig.verify(ctx, user, signatures)

    def get_multisig(self, user: str) -> Optional[Tuple[List[str], int]]:
        with self._invoke("get_multisig", (user,)) as ctx:
            return self.multisig.config(ctx, user)

    # ------------------------------------------------------------------
    # Meta-transactions / gas pool
    # ------------------------------------------------------------------
    def execute_metatx(
        self,
        user: str,
        target: str,
        function: str,
        args: bytes = b"",
        auth: Optional[Authenticator] = None,
    ) -> bytes:
        with self._invoke("execute_metatx", (user, target, function, args), auth) as ctx:
            return self.metatx.execute(ctx, user, target, function, args)

    def fund_gas_pool(self, amount: int, auth: Optional[Authenticator] = None) -> None:
        with self._invoke("fund_gas_pool", (amount,), auth) as ctx:
            owner = self.policy.require_owner(ctx)
            self.gas_pool.fund(ctx, owner, amount)

    def get_gas_pool(self) -> int:
        with self._invoke("get_gas_pool") as ctx:
            return self.gas_pool.balance(ctx)
