# tests/test_account_abstraction.py

import pytest
from tychee_core import AccountAbstraction, AuthMode, CoreConfig, Env, ManualClock, StaticAuthenticator
from tychee_core.account import AuthorizationPolicyStore, SessionKeyRegistry
from tychee_core.errors import (
    AlreadyInitialized,
    AuthenticationFailure,
    GasPoolOverflow,
    InsufficientGasPool,
    InvalidArgument,
    InvalidThreshold,
    NoSponsor,
    NotInitialized,
    UnsupportedMode,
)

START = 1_700_000_000
OWNER = "owner"
USER = "alice"
SPONSOR = "sponsor-co"
KEY = bytes(range(32))


@pytest.fixture
def clock():
    return ManualClock(START)


@pytest.fixture
def env(clock):
    e = Env(clock=clock)
    e.mock_all_auths()
    return e


@pytest.fixture
def aa(env):
    contract = AccountAbstraction(env)
    contract.initialize(OWNER, 10_000)
    return contract


def test_get_mode_defaults_to_standard(env):
    contract = AccountAbstraction(env)
    assert contract.get_mode(USER) is AuthMode.STANDARD
    assert contract.get_mode("nobody") is AuthMode.STANDARD


def test_initialize_twice_keeps_first_state(aa):
    with pytest.raises(AlreadyInitialized):
        aa.initialize("intruder", 1)
    assert aa.get_owner() == OWNER
    assert aa.get_gas_pool() == 10_000


def test_initialize_requires_owner_auth(env):
    contract = AccountAbstraction(env)
    with pytest.raises(AuthenticationFailure):
        contract.initialize(OWNER, 500, auth=StaticAuthenticator(["someone-else"]))
    assert contract.get_owner() is None
    assert contract.get_gas_pool() == 0


def test_set_mode_overwrites_and_emits(aa):
    aa.set_mode(USER, AuthMode.MULTI_SIG)
    aa.set_mode(USER, AuthMode.SPONSORED)
    assert aa.get_mode(USER) is AuthMode.SPONSORED

    events = aa.events(topic="aa_mode", principal=USER)
    assert [e.data for e in events] == ["multi_sig", "sponsored"]
    assert events[0].ledger_ts == START


def test_set_mode_rejects_unknown_mode(aa):
    with pytest.raises(InvalidArgument):
        aa.set_mode(USER, "turbo")
    assert aa.get_mode(USER) is AuthMode.STANDARD


def test_set_mode_requires_user_auth(aa):
    with pytest.raises(AuthenticationFailure):
        aa.set_mode(USER, AuthMode.SESSION_KEY, auth=StaticAuthenticator(["mallory"]))
    assert aa.get_mode(USER) is AuthMode.STANDARD


def test_set_sponsor_is_authorized_by_sponsor(aa):
    # the beneficiary alone cannot grant itself a sponsor
    with pytest.raises(AuthenticationFailure):
        aa.set_sponsor(USER, SPONSOR, auth=StaticAuthenticator([USER]))
    assert aa.get_sponsor(USER) is None

    aa.set_sponsor(USER, SPONSOR, auth=StaticAuthenticator([SPONSOR]))
    assert aa.get_sponsor(USER) == SPONSOR
    assert aa.get_mode(USER) is AuthMode.SPONSORED
    assert aa.events(topic="sponsor")[0].data == SPONSOR


# --- session keys ---

def test_session_key_valid_until_expiry(aa, clock):
    expires_at = aa.add_session_key(USER, KEY, 3600, ["transfer", "swap"])
    assert expires_at == START + 3600
    assert aa.get_mode(USER) is AuthMode.SESSION_KEY
    assert aa.verify_session_key(USER, KEY)

    clock.advance(3599)
    assert aa.verify_session_key(USER, KEY)

    clock.advance(1)
    assert not aa.verify_session_key(USER, KEY)


def test_session_key_unknown_key_or_user(aa):
    aa.add_session_key(USER, KEY, 60, [])
    assert not aa.verify_session_key(USER, b"\x00" * 32)
    assert not aa.verify_session_key("bob", KEY)


def test_session_keys_append_only(aa, clock):
    other = b"\x07" * 32
    aa.add_session_key(USER, KEY, 10, ["read"])
    aa.add_session_key(USER, other, 1000, ["transfer"])
    clock.advance(20)

    keys = aa.get_session_keys(USER)
    assert [k.key for k in keys] == [KEY, other]
    assert keys[0].permissions == ["read"]
    assert not aa.verify_session_key(USER, KEY)
    assert aa.verify_session_key(USER, other)

    # a fresh record for an expired key makes it usable again
    aa.add_session_key(USER, KEY, 10, ["read"])
    assert len(aa.get_session_keys(USER)) == 3
    assert aa.verify_session_key(USER, KEY)


def test_session_key_event_carries_expiry(aa):
    aa.add_session_key(USER, KEY, 120, [])
    (ev,) = aa.events(topic="session")
    assert ev.principal == USER
    assert ev.data == START + 120


def test_session_key_must_be_32_bytes(aa):
    with pytest.raises(InvalidArgument):
        aa.add_session_key(USER, b"short", 60, [])
    assert aa.get_session_keys(USER) == []
    assert aa.get_mode(USER) is AuthMode.STANDARD


def test_session_key_ring_keeps_most_recent(clock):
    env = Env(clock=clock, config=CoreConfig(max_session_keys=2))
    env.mock_all_auths()
    aa = AccountAbstraction(env)
    keys = [bytes([i]) * 32 for i in range(3)]
    for k in keys:
        aa.add_session_key(USER, k, 100, [])

    assert [r.key for r in aa.get_session_keys(USER)] == keys[1:]
    assert not aa.verify_session_key(USER, keys[0])


@pytest.mark.parametrize("cap", [0, -1, True, "2"])
def test_session_key_registry_rejects_bad_cap(cap):
    with pytest.raises(ValueError):
        SessionKeyRegistry(AuthorizationPolicyStore(), max_keys=cap)


def test_session_key_cap_mutated_after_config_is_rejected(clock):
    cfg = CoreConfig()
    cfg.max_session_keys = 0
    with pytest.raises(ValueError):
        AccountAbstraction(Env(clock=clock, config=cfg))


# --- multisig ---

@pytest.mark.parametrize("threshold", [0, 4])
def test_setup_multisig_invalid_threshold_stores_nothing(aa, threshold):
    with pytest.raises(InvalidThreshold):
        aa.setup_multisig(USER, ["A", "B", "C"], threshold)
    assert aa.get_multisig(USER) is None
    assert aa.get_mode(USER) is AuthMode.STANDARD
    assert aa.events(topic="multisig") == []


def test_verify_multisig_counts_duplicates(aa):
    aa.setup_multisig(USER, ["A", "B", "C"], 2)
    assert aa.get_mode(USER) is AuthMode.MULTI_SIG
    assert aa.get_multisig(USER) == (["A", "B", "C"], 2)
    assert aa.events(topic="multisig")[0].data == [2, 3]

    # duplicate signer entries are counted per entry
    assert aa.verify_multisig(USER, ["A", "A"])
    assert not aa.verify_multisig(USER, ["A"])
    assert aa.verify_multisig(USER, ["A", "C"])
    assert not aa.verify_multisig(USER, ["A", "X", "Y"])


def test_verify_multisig_dedupe_option(clock):
    env = Env(clock=clock, config=CoreConfig(dedupe_multisig_signers=True))
    env.mock_all_auths()
    aa = AccountAbstraction(env)
    aa.setup_multisig(USER, ["A", "B", "C"], 2)

    assert not aa.verify_multisig(USER, ["A", "A"])
    assert aa.verify_multisig(USER, ["A", "B"])


def test_verify_multisig_without_config(aa):
    assert not aa.verify_multisig(USER, ["A"])


# --- meta-transactions and gas pool ---

def test_metatx_sponsored_without_sponsor_fails(aa):
    aa.set_mode(USER, AuthMode.SPONSORED)
    with pytest.raises(NoSponsor):
        aa.execute_metatx(USER, "target-contract", "transfer", b"\x01")
    assert aa.get_gas_pool() == 10_000


@pytest.mark.parametrize("mode", [AuthMode.STANDARD, AuthMode.MULTI_SIG])
def test_metatx_unsupported_modes(aa, mode):
    if mode is not AuthMode.STANDARD:
        aa.set_mode(USER, mode)
    with pytest.raises(UnsupportedMode):
        aa.execute_metatx(USER, "target-contract", "transfer")
    assert aa.get_gas_pool() == 10_000


def test_metatx_sponsored_debits_fixed_cost(aa, clock):
    aa.set_sponsor(USER, SPONSOR)
    clock.advance(5)
    result = aa.execute_metatx(USER, "target-contract", "transfer", b"\x01\x02")

    assert result == b""
    assert aa.get_gas_pool() == 9_000
    (ev,) = aa.events(topic="metatx")
    assert ev.principal == USER
    assert ev.data == ["target-contract", "transfer", START + 5]


def test_metatx_session_key_mode_is_not_rechecked(aa):
    # key verification belongs to the caller; execute only gates on mode
    aa.add_session_key(USER, KEY, 0, [])
    assert not aa.verify_session_key(USER, KEY)
    aa.execute_metatx(USER, "target-contract", "swap")
    assert aa.get_gas_pool() == 9_000


def test_metatx_insufficient_pool_is_atomic(env):
    aa = AccountAbstraction(env)
    aa.initialize(OWNER, 1_500)
    aa.set_sponsor(USER, SPONSOR)

    aa.execute_metatx(USER, "t", "f")
    assert aa.get_gas_pool() == 500

    with pytest.raises(InsufficientGasPool):
        aa.execute_metatx(USER, "t", "f")
    assert aa.get_gas_pool() == 500
    assert len(aa.events(topic="metatx")) == 1


def test_metatx_requires_user_auth(aa):
    aa.set_sponsor(USER, SPONSOR)
    with pytest.raises(AuthenticationFailure):
        aa.execute_metatx(USER, "t", "f", auth=StaticAuthenticator([SPONSOR]))
    assert aa.get_gas_pool() == 10_000


def test_metatx_gas_cost_configurable(clock):
    env = Env(clock=clock, config=CoreConfig(metatx_gas_cost=250))
    env.mock_all_auths()
    aa = AccountAbstraction(env)
    aa.initialize(OWNER, 1_000)
    aa.set_sponsor(USER, SPONSOR)
    aa.execute_metatx(USER, "t", "f")
    assert aa.get_gas_pool() == 750


def test_fund_gas_pool_owner_only(aa):
    with pytest.raises(AuthenticationFailure):
        aa.fund_gas_pool(5_000, auth=StaticAuthenticator([USER]))
    assert aa.get_gas_pool() == 10_000

    aa.fund_gas_pool(5_000, auth=StaticAuthenticator([OWNER]))
    assert aa.get_gas_pool() == 15_000
    (ev,) = aa.events(topic="fund")
    assert ev.principal == OWNER
    assert ev.data == 5_000


def test_fund_gas_pool_before_initialize(env):
    aa = AccountAbstraction(env)
    with pytest.raises(NotInitialized):
        aa.fund_gas_pool(1)


def test_fund_gas_pool_overflow(env):
    aa = AccountAbstraction(env)
    aa.initialize(OWNER, 2 ** 127 - 10)
    with pytest.raises(GasPoolOverflow):
        aa.fund_gas_pool(11)
    assert aa.get_gas_pool() == 2 ** 127 - 10


def test_policy_halves_do_not_share_owner(env):
    from tychee_core import CredentialVault

    aa = AccountAbstraction(env)
    vault = CredentialVault(env)
    aa.initialize("aa-owner", 0)
    vault.initialize("vault-owner")

    assert aa.get_owner() == "aa-owner"
    assert vault.get_owner() == "vault-owner"
