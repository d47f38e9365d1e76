"""
tychee_core.crypto
------------------
Thin wrappers over the `cryptography` library:

- Ed25519: principal keys and call proofs for SignatureAuthenticator
- AES-256-GCM: client-side sealing of credential payloads before
  store_token (nonce || ciphertext || tag layout)
- SHA-256 integrity hashes and public key fingerprints

The contracts never decrypt; the vault only stores what a client sealed.
"""

from __future__ import annotations
from typing import Tuple
from cryptography.exceptions import InvalidSignature, InvalidTag
from cryptography.hazmat.primitives.asymmetric import ed25519
from cryptography.hazmat.primitives.ciphers.aead import AESGCM
import os
from .utils import b64e, b64d, sha256, sha256_digest

NONCE_LEN = 12
KEY_LEN = 32

# --------- Ed25519 (sign/verify) ----------
def ed25519_generate() -> Tuple[bytes, bytes]:
    sk = ed25519.Ed25519PrivateKey.generate()
    pk = sk.public_key()
    return sk.private_bytes_raw(), pk.public_bytes_raw()

def ed25519_sign(priv_raw: bytes, data: bytes) -> bytes:
    sk = ed25519.Ed25519PrivateKey.from_private_bytes(priv_raw)
    return sk.sign(data)

def ed25519_verify(pub_raw: bytes, sig: bytes, data: bytes) -> bool:
    try:
        ed25519.Ed25519PublicKey.from_public_bytes(pub_raw).verify(sig, data)
        return True
    except (InvalidSignature, ValueError):
        return False

def compute_pubkey_fingerprint(pubkey_b64: str) -> str:
    """
    Compute a stable fingerprint for an Ed25519 public key.

    - Input: base64-encoded Ed25519 public key
    - Output: hex-encoded SHA256 hash (truncated to 32 chars for readability)
    """
    return sha256(b64d(pubkey_b64))[:32]

def principal_from_pubkey(pub_raw: bytes) -> str:
    # Principals issued by signature-authenticated hosts are key fingerprints
    return compute_pubkey_fingerprint(b64e(pub_raw))

# --------- AES-GCM (client-side credential sealing) ----------
def generate_credential_key() -> bytes:
    return AESGCM.generate_key(bit_length=256)

def integrity_hash(plaintext: bytes) -> bytes:
    return sha256_digest(plaintext)

def seal_credential(plaintext: bytes, key: bytes) -> Tuple[bytes, bytes]:
    """Encrypt credential data for store_token.

    Returns (encrypted_payload, integrity_hash) where the payload is
    nonce || ciphertext || tag and the hash is SHA-256 of the plaintext.
    """
    if len(key) != KEY_LEN:
        raise ValueError("Key must be 256 bits (32 bytes)")
    nonce = os.urandom(NONCE_LEN)
    ct = AESGCM(key).encrypt(nonce, plaintext, None)
    return nonce + ct, integrity_hash(plaintext)

def open_credential(encrypted_payload: bytes, key: bytes, expected_hash: bytes = None) -> bytes:
    if len(key) != KEY_LEN:
        raise ValueError("Key must be 256 bits (32 bytes)")
    nonce, ct = encrypted_payload[:NONCE_LEN], encrypted_payload[NONCE_LEN:]
    try:
        plaintext = AESGCM(key).decrypt(nonce, ct, None)
    except InvalidTag:
        raise ValueError("Credential payload failed authentication") from None
    if expected_hash is not None and integrity_hash(plaintext) != expected_hash:
        raise ValueError("Credential integrity hash mismatch")
    return plaintext
