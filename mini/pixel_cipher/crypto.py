from __future__ import annotations

import logging
import os
from typing import Callable, Optional, Union

from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.ciphers.aead import AESGCM
from cryptography.hazmat.primitives.kdf.pbkdf2 import PBKDF2HMAC

from .errors import AuthenticationError, InputError

logger = logging.getLogger(__name__)

# Fixed salt keeps images produced by earlier releases decodable.
SALT = b"a-secure-salt-for-your-app"
ITERATIONS = 100_000
KEY_SIZE = 32
NONCE_SIZE = 12
TAG_SIZE = 16
OVERHEAD = NONCE_SIZE + TAG_SIZE

Passphrase = Union[str, bytes]


def derive_key(passphrase: Passphrase, salt: bytes = SALT, iterations: int = ITERATIONS) -> bytes:
    """Stretch a passphrase into a 256-bit AES key with PBKDF2-HMAC-SHA256."""
    if isinstance(passphrase, str):
        passphrase = passphrase.encode("utf-8")
    if not passphrase:
        raise InputError("Passphrase must not be empty")
    kdf = PBKDF2HMAC(
        algorithm=hashes.SHA256(),
        length=KEY_SIZE,
        salt=salt,
        iterations=iterations,
    )
    return kdf.derive(passphrase)


def encrypt_bytes(key: bytes, plaintext: bytes, nonce: Optional[bytes] = None) -> bytes:
    """Encrypt bytes using AES-256-GCM.

    Output format: nonce(12) || ciphertext || tag(16)
    """
    if len(key) != KEY_SIZE:
        raise ValueError(f"Key must be {KEY_SIZE} bytes")
    if nonce is None:
        nonce = os.urandom(NONCE_SIZE)
    if len(nonce) != NONCE_SIZE:
        raise ValueError(f"Nonce must be {NONCE_SIZE} bytes")
    aesgcm = AESGCM(key)
    ct = aesgcm.encrypt(nonce, plaintext, associated_data=None)
    return nonce + ct


def decrypt_bytes(key: bytes, payload: bytes) -> bytes:
    """Decrypt bytes produced by encrypt_bytes.

    Every failure mode raises the same AuthenticationError so callers cannot
    tell a wrong key from a damaged payload.
    """
    if len(key) != KEY_SIZE:
        raise ValueError(f"Key must be {KEY_SIZE} bytes")
    if len(payload) < OVERHEAD:
        logger.debug("Payload of %d bytes is shorter than nonce+tag", len(payload))
        raise AuthenticationError()
    nonce = payload[:NONCE_SIZE]
    ct = payload[NONCE_SIZE:]
    aesgcm = AESGCM(key)
    try:
        return aesgcm.decrypt(nonce, ct, associated_data=None)
    except InvalidTag:
        raise AuthenticationError() from None


class CryptoProvider:
    """Key derivation and authenticated encryption behind one seam.

    `random_bytes` is the nonce source; tests swap it for a fixed value.
    """

    def __init__(self, random_bytes: Optional[Callable[[int], bytes]] = None, iterations: int = ITERATIONS):
        self.random_bytes = random_bytes or os.urandom
        self.iterations = iterations

    def derive_key(self, passphrase: Passphrase) -> bytes:
        return derive_key(passphrase, iterations=self.iterations)

    def encrypt(self, plaintext: bytes, key: bytes) -> bytes:
        return encrypt_bytes(key, plaintext, nonce=self.random_bytes(NONCE_SIZE))

    def decrypt(self, payload: bytes, key: bytes) -> bytes:
        return decrypt_bytes(key, payload)
