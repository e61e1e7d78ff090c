from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional

from .crypto.envelope import EnvelopeCipher
from .crypto.keys import KeyRing, SecretSource
from .days.service import DayService
from .ledger.model import PolicyConfig
from .storage.day_store import DayStore
from .storage.engine import StorageEngine
from .storage.factory import StorageBackendFactory
from .storage.settings_store import SettingsStore


@dataclass(frozen=True)
class Container:
    key_ring: KeyRing
    cipher: EnvelopeCipher
    engine: StorageEngine

    day_store: DayStore
    settings_store: SettingsStore
    day_service: DayService


def build_container(
    settings: Any,
    *,
    backend_factory: Optional[StorageBackendFactory] = None,
    policy: Optional[PolicyConfig] = None,
) -> Container:
    """Wire one process worth of collaborators from a settings module (or any object with the same attributes)."""
    secret_path = getattr(settings, "SECRET_PATH", "") or None
    secrets = SecretSource(getattr(settings, "WORKLOG_SECRET", "") or None, secret_path=secret_path)
    key_ring = KeyRing(secrets)
    cipher = EnvelopeCipher(key_ring)

    choice = (backend_factory or StorageBackendFactory()).select(
        db_path=getattr(settings, "DB_PATH", ":memory:"),
        fallback_path=getattr(settings, "FALLBACK_PATH", "") or None,
        native_enabled=bool(getattr(settings, "NATIVE_STORAGE", True)),
    )
    engine = StorageEngine(choice.backend, cipher, residual=choice.residual)

    day_store = DayStore(engine)
    settings_store = SettingsStore(engine)
    day_service = DayService(day_store, settings_store, policy=policy)

    return Container(
        key_ring=key_ring,
        cipher=cipher,
        engine=engine,
        day_store=day_store,
        settings_store=settings_store,
        day_service=day_service,
    )
