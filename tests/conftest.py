from __future__ import annotations

import random

import pytest

from pixel_cipher.crypto import NONCE_SIZE, CryptoProvider, derive_key, encrypt_bytes
from pixel_cipher.embedder import SENTINEL


def _clean_nonce(passphrase: str, plaintext: bytes, seed: int = 0) -> bytes:
    """Return a nonce whose payload for (passphrase, plaintext) holds no zero byte."""
    key = derive_key(passphrase)
    rng = random.Random(seed)
    for _ in range(1000):
        nonce = bytes(rng.randrange(1, 256) for _ in range(NONCE_SIZE))
        if SENTINEL not in encrypt_bytes(key, plaintext, nonce=nonce):
            return nonce
    raise AssertionError("no zero-free payload found")


@pytest.fixture
def clean_nonce():
    return _clean_nonce


@pytest.fixture
def fixed_crypto():
    def make(nonce: bytes) -> CryptoProvider:
        return CryptoProvider(random_bytes=lambda n: nonce)

    return make


@pytest.fixture
def passphrases():
    """Passphrase provider that replays answers and records prompts."""

    class Provider:
        def __init__(self):
            self.answers = []
            self.prompts = []

        def __call__(self, prompt):
            self.prompts.append(prompt)
            return self.answers.pop(0) if self.answers else None

    return Provider()
