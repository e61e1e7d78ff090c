import pytest

from worklog.core.constants import AUTO_SAVE_KEY
from worklog.crypto.envelope import EnvelopeCipher
from worklog.crypto.keys import KeyRing, SecretSource
from worklog.storage.engine import StorageEngine
from worklog.storage.settings_store import SettingsStore
from worklog.storage.sqlite_backend import SQLiteBackend


@pytest.mark.asyncio
async def test_autosave_defaults_to_off_and_persists(tmp_path):
    engine = StorageEngine(SQLiteBackend(tmp_path / "w.db"), EnvelopeCipher(KeyRing(SecretSource("test-secret"))))
    settings = SettingsStore(engine)

    assert await settings.get_autosave_enabled() is False

    await settings.set_autosave_enabled(True)
    assert await settings.get_autosave_enabled() is True
    assert await (await engine.ready()).get_setting(AUTO_SAVE_KEY) == "1"

    await settings.set_autosave_enabled(False)
    assert await settings.get_autosave_enabled() is False
    await engine.close()
