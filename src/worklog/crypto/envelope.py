"""Authenticated encryption of one serialized record at a time.

Envelope string: ``enc:<version>:<base64 nonce>:<base64 ciphertext+tag>``.
"""

from __future__ import annotations

import base64
import binascii
import os
from dataclasses import dataclass

from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives.ciphers.aead import AESGCM
from loguru import logger

from ..core.exceptions import DecryptionError, NotAnEnvelope
from .keys import CURRENT_KDF, LEGACY_KDF, KeyRing

ENVELOPE_TAG = "enc"
CURRENT_VERSION = "v1"
LEGACY_VERSION = "v0"
NONCE_BYTES = 12

_KDF_BY_VERSION = {
    CURRENT_VERSION: CURRENT_KDF,
    LEGACY_VERSION: LEGACY_KDF,
}


@dataclass(frozen=True)
class StoredEnvelope:
    version: str
    nonce: bytes
    ciphertext: bytes
    tag: str = ENVELOPE_TAG

    def render(self) -> str:
        return ":".join([self.tag, self.version, _b64e(self.nonce), _b64e(self.ciphertext)])

    @classmethod
    def parse(cls, text: object, *, version: str = CURRENT_VERSION) -> "StoredEnvelope":
        prefix = f"{ENVELOPE_TAG}:{version}:"
        if not isinstance(text, str) or not text.startswith(prefix):
            raise NotAnEnvelope(f"not an {prefix} envelope")

        parts = text.split(":")
        if len(parts) != 4:
            raise DecryptionError("malformed envelope")
        try:
            nonce = _b64d(parts[2])
            ciphertext = _b64d(parts[3])
        except (binascii.Error, ValueError) as e:
            raise DecryptionError("malformed envelope encoding") from e
        if len(nonce) != NONCE_BYTES:
            raise DecryptionError("malformed envelope nonce")
        return cls(version=version, nonce=nonce, ciphertext=ciphertext)


def is_envelope(text: object, *, version: str = CURRENT_VERSION) -> bool:
    return isinstance(text, str) and text.startswith(f"{ENVELOPE_TAG}:{version}:")


class EnvelopeCipher:
    """AES-GCM over UTF-8 text with a fresh 96-bit nonce per call."""

    def __init__(self, keys: KeyRing):
        self._keys = keys

    async def encrypt(self, plaintext: str) -> str:
        key = await self._keys.key_for(CURRENT_KDF)
        nonce = os.urandom(NONCE_BYTES)
        ciphertext = AESGCM(key).encrypt(nonce, plaintext.encode("utf-8"), None)
        return StoredEnvelope(version=CURRENT_VERSION, nonce=nonce, ciphertext=ciphertext).render()

    async def decrypt(self, text: object, *, version: str = CURRENT_VERSION) -> str:
        """Decrypt and verify an envelope.

        Raises:
            NotAnEnvelope: If `text` does not carry the exact tag/version prefix
            DecryptionError: If the envelope is malformed or fails authentication
        """
        envelope = StoredEnvelope.parse(text, version=version)
        key = await self._keys.key_for(_KDF_BY_VERSION[version])
        try:
            plaintext = AESGCM(key).decrypt(envelope.nonce, envelope.ciphertext, None)
        except InvalidTag as e:
            logger.error(f"Envelope authentication failed ({version})")
            raise DecryptionError("envelope authentication failed") from e
        return plaintext.decode("utf-8")

    async def decrypt_legacy(self, text: object) -> str:
        return await self.decrypt(text, version=LEGACY_VERSION)


def _b64e(data: bytes) -> str:
    return base64.b64encode(data).decode("ascii")


def _b64d(text: str) -> bytes:
    return base64.b64decode(text.encode("ascii"), validate=True)
