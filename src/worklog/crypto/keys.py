"""Secret resolution and key derivation.

The encryption key is stretched from a passphrase-strength secret with
PBKDF2-HMAC-SHA256. The secret comes from configuration (WORKLOG_SECRET) or,
failing that, is generated once and kept in the data directory.
"""

from __future__ import annotations

import asyncio
import base64
import os
import threading
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.kdf.pbkdf2 import PBKDF2HMAC
from loguru import logger

from ..core.exceptions import CryptoError

SECRET_BYTES = 32


@dataclass(frozen=True)
class KdfParams:
    salt: bytes
    iterations: int
    length: int = 32


CURRENT_KDF = KdfParams(salt=b"worklog:v1:kdf-salt", iterations=150_000)
# Envelopes tagged enc:v0 were written with these parameters; decrypt-only.
LEGACY_KDF = KdfParams(salt=b"worklog-salt", iterations=100_000)


def derive_key(secret: str, params: KdfParams) -> bytes:
    kdf = PBKDF2HMAC(
        algorithm=hashes.SHA256(),
        length=params.length,
        salt=params.salt,
        iterations=params.iterations,
    )
    return kdf.derive(secret.encode("utf-8"))


class SecretSource:
    """Operator-supplied secret, or a generated one persisted once per device."""

    def __init__(self, configured: Optional[str] = None, *, secret_path: Optional[Path] = None):
        self._configured = configured or None
        self._secret_path = Path(secret_path) if secret_path else None
        self._throwaway: Optional[str] = None

    def resolve(self) -> str:
        if self._configured:
            return self._configured

        if self._secret_path is None:
            if self._throwaway is None:
                logger.warning("WORKLOG_SECRET not set and no data directory; using a throwaway secret")
                self._throwaway = self._generate()
            return self._throwaway

        if self._secret_path.exists():
            secret = self._secret_path.read_text(encoding="utf-8").strip()
            if not secret:
                raise CryptoError(f"Secret file {self._secret_path} is empty")
            return secret

        secret = self._generate()
        self._secret_path.parent.mkdir(parents=True, exist_ok=True)
        fd = os.open(self._secret_path, os.O_WRONLY | os.O_CREAT | os.O_EXCL, 0o600)
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            f.write(secret)
        logger.info(f"Generated a new device secret at {self._secret_path}")
        return secret

    @staticmethod
    def _generate() -> str:
        return base64.b64encode(os.urandom(SECRET_BYTES)).decode("ascii")


class KeyRing:
    """Derived keys for one secret source, cached per parameter set.

    Derivation runs once per parameter set on a worker thread; concurrent first
    callers share the same pending future. Loop-agnostic, so it works no matter
    which event loop awaits it.
    """

    def __init__(self, secrets: SecretSource):
        self._secrets = secrets
        self._lock = threading.Lock()
        self._futures: dict[KdfParams, Future] = {}
        self._executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="worklog-kdf")

    async def key_for(self, params: KdfParams = CURRENT_KDF) -> bytes:
        with self._lock:
            future = self._futures.get(params)
            if future is None:
                future = self._executor.submit(self._derive, params)
                self._futures[params] = future
        try:
            return await asyncio.wrap_future(future)
        except Exception:
            with self._lock:
                if self._futures.get(params) is future:
                    del self._futures[params]
            raise

    def _derive(self, params: KdfParams) -> bytes:
        logger.debug(f"Deriving encryption key ({params.iterations} iterations)")
        return derive_key(self._secrets.resolve(), params)
