# tests/test_token_vault.py

import pytest
from tychee_core import CoreConfig, CredentialStatus, CredentialVault, Env, ManualClock, Permission, StaticAuthenticator
from tychee_core.crypto import generate_credential_key, open_credential, seal_credential
from tychee_core.errors import (
    AlreadyExists,
    AlreadyInitialized,
    AuthenticationFailure,
    ContractPaused,
    ExpiredAtCreation,
    InvalidArgument,
    NotInitialized,
)
from tychee_core.utils import b64e

START = 1_700_000_000
YEAR = 31_536_000
OWNER = "vault-owner"
USER = "alice"
PAYLOAD = bytes([1, 2, 3, 4, 5, 6, 7, 8])
HASH = bytes(32)


@pytest.fixture
def clock():
    return ManualClock(START)


@pytest.fixture
def env(clock):
    e = Env(clock=clock)
    e.mock_all_auths()
    return e


@pytest.fixture
def vault(env):
    v = CredentialVault(env)
    v.initialize(OWNER)
    return v


def store(vault, user=USER, expires_at=START + YEAR, digits="1234", network="visa", **kw):
    return vault.store_token(user, PAYLOAD, HASH, digits, network, expires_at, **kw)


def test_initialize(vault):
    assert vault.get_token_count() == 0
    assert not vault.is_paused()
    assert vault.get_owner() == OWNER


def test_initialize_twice(vault):
    with pytest.raises(AlreadyInitialized):
        vault.initialize("someone-else")
    assert vault.get_owner() == OWNER


def test_store_and_retrieve_token(vault):
    record = store(vault)

    assert record.owner == USER
    assert record.display_digits == "1234"
    assert record.network == "visa"
    assert record.status is CredentialStatus.ACTIVE
    assert record.created_at == START
    assert vault.get_token_count() == 1
    assert vault.get_permission(USER) is Permission.OWNER

    retrieved = vault.retrieve_token(USER)
    assert retrieved.encrypted_payload == PAYLOAD
    assert retrieved.integrity_hash == HASH


def test_store_emits_event(vault):
    store(vault, network="mastercard")
    (ev,) = vault.events(topic="store")
    assert ev.principal == USER
    assert ev.data == [b64e(HASH), "mastercard", START]


def test_store_duplicate_keeps_first_record(vault):
    store(vault, digits="1234")
    with pytest.raises(AlreadyExists):
        store(vault, digits="9999")

    assert vault.retrieve_token(USER).display_digits == "1234"
    assert vault.get_token_count() == 1
    assert len(vault.events(topic="store")) == 1


@pytest.mark.parametrize("offset", [0, -1])
def test_store_expired_at_creation(vault, offset):
    with pytest.raises(ExpiredAtCreation):
        store(vault, expires_at=START + offset)
    assert vault.get_token_status(USER) is None
    assert vault.get_permission(USER) is None
    assert vault.get_token_count() == 0


def test_store_rejects_bad_hash_length(vault):
    with pytest.raises(InvalidArgument):
        vault.store_token(USER, PAYLOAD, b"\x00" * 16, "1234", "visa", START + YEAR)


def test_store_requires_user_auth(vault):
    with pytest.raises(AuthenticationFailure):
        store(vault, auth=StaticAuthenticator(["mallory"]))
    assert vault.get_token_status(USER) is None


def test_retrieve_emits_access_event(vault, clock):
    store(vault)
    clock.advance(10)
    vault.retrieve_token(USER)
    (ev,) = vault.events(topic="access")
    assert ev.data == START + 10


def test_expired_token_is_persisted(vault, clock):
    store(vault, expires_at=START + 1, network="rupay")
    clock.advance(2)

    retrieved = vault.retrieve_token(USER)
    assert retrieved.status is CredentialStatus.EXPIRED
    assert vault.get_token_status(USER) is CredentialStatus.EXPIRED
    # expiry reads do not count as access
    assert vault.events(topic="access") == []


def test_token_readable_at_exact_expiry(vault, clock):
    store(vault, expires_at=START + 5)
    clock.advance(5)
    assert vault.retrieve_token(USER).status is CredentialStatus.ACTIVE


def test_retrieve_without_permission(vault):
    assert vault.retrieve_token(USER) is None
    assert vault.events(topic="access") == []


def test_retrieve_denied_after_revoke(vault):
    assert vault.revoke_token(USER) is False

    store(vault, network="mastercard")
    assert vault.revoke_token(USER) is True
    assert vault.get_token_status(USER) is CredentialStatus.REVOKED
    assert vault.get_permission(USER) is Permission.REVOKED
    assert vault.retrieve_token(USER) is None
    assert len(vault.events(topic="revoke")) == 1


def test_revoked_record_never_becomes_expired(vault, clock):
    store(vault, expires_at=START + 10)
    vault.revoke_token(USER)
    vault.update_permissions(USER, Permission.READ)
    clock.advance(100)

    retrieved = vault.retrieve_token(USER)
    assert retrieved.status is CredentialStatus.REVOKED
    assert vault.get_token_status(USER) is CredentialStatus.REVOKED


def test_update_permissions_owner_only(vault):
    store(vault)
    with pytest.raises(AuthenticationFailure):
        vault.update_permissions(USER, Permission.REVOKED, auth=StaticAuthenticator([USER]))
    assert vault.get_permission(USER) is Permission.OWNER

    vault.update_permissions(USER, Permission.REVOKED, auth=StaticAuthenticator([OWNER]))
    assert vault.retrieve_token(USER) is None
    # the record itself is untouched
    assert vault.get_token_status(USER) is CredentialStatus.ACTIVE
    assert vault.events(topic="perm")[0].principal == USER


def test_read_permission_allows_retrieve(vault):
    store(vault)
    vault.update_permissions(USER, Permission.REVOKED)
    vault.update_permissions(USER, Permission.READ)
    assert vault.retrieve_token(USER).status is CredentialStatus.ACTIVE


def test_update_permissions_before_initialize(env):
    vault = CredentialVault(env)
    with pytest.raises(NotInitialized):
        vault.update_permissions(USER, Permission.READ)


def test_pause_unpause(vault):
    assert not vault.is_paused()
    vault.pause()
    assert vault.is_paused()
    vault.unpause()
    assert not vault.is_paused()
    assert [e.topic for e in vault.events()] == ["pause", "unpause"]


def test_pause_requires_owner(vault):
    with pytest.raises(AuthenticationFailure):
        vault.pause(auth=StaticAuthenticator([USER]))
    assert not vault.is_paused()


def test_pause_flag_is_inert_by_default(vault):
    vault.pause()
    store(vault)
    assert vault.retrieve_token(USER) is not None
    assert vault.revoke_token(USER)


def test_pause_enforced_when_configured(clock):
    env = Env(clock=clock, config=CoreConfig(enforce_pause=True))
    env.mock_all_auths()
    vault = CredentialVault(env)
    vault.initialize(OWNER)
    store(vault)

    vault.pause()
    with pytest.raises(ContractPaused):
        vault.retrieve_token(USER)
    with pytest.raises(ContractPaused):
        vault.revoke_token(USER)
    with pytest.raises(ContractPaused):
        store(vault, user="bob")

    vault.unpause()
    assert vault.retrieve_token(USER) is not None


def test_sealed_credential_roundtrip_through_vault(vault):
    key = generate_credential_key()
    payload, digest = seal_credential(b"4111111111111111|12/30|123", key)
    vault.store_token(USER, payload, digest, "1111", "visa", START + YEAR)

    record = vault.retrieve_token(USER)
    assert open_credential(record.encrypted_payload, key, record.integrity_hash) == b"4111111111111111|12/30|123"
