"""Legacy-format detection and in-place re-encryption.

Every read path goes through `migrate_if_needed`, so a row is upgraded the
same way whether the open-time pass, `load` or `list_all` touched it first.
"""

from __future__ import annotations

from dataclasses import dataclass

from loguru import logger

from ..core.exceptions import CryptoError, RecordLoadError, ValidationError
from ..crypto.envelope import CURRENT_VERSION, LEGACY_VERSION, EnvelopeCipher, is_envelope
from ..records.codec import decode_record, encode_record, has_legacy_values, record_from_dict, record_from_legacy_row
from ..records.model import DayRecord
from .backend import StorageBackend, StoredRow

# json.JSONDecodeError is a ValueError; a payload decoding to a non-object surfaces as AttributeError.
READ_ERRORS = (CryptoError, RecordLoadError, ValidationError, ValueError, TypeError, AttributeError)


@dataclass(frozen=True)
class MigrationReport:
    migrated: int = 0
    skipped: int = 0
    current: int = 0


async def migrate_if_needed(row: StoredRow, cipher: EnvelopeCipher) -> tuple[DayRecord, bool]:
    """Read a stored row into a record; the flag says it must be re-persisted.

    Raises:
        RecordLoadError: If the row carries nothing readable
        CryptoError: If an envelope fails to decrypt
    """
    if is_envelope(row.payload, version=CURRENT_VERSION):
        record = decode_record(await cipher.decrypt(row.payload))
        return record, has_legacy_values(row.columns)

    if is_envelope(row.payload, version=LEGACY_VERSION):
        return decode_record(await cipher.decrypt_legacy(row.payload)), True

    if row.flat is not None:
        return record_from_dict(row.flat), True

    if has_legacy_values(row.columns):
        return record_from_legacy_row({**row.columns, "updated_at": row.updated_at}), True

    raise RecordLoadError(row.day_key, "no readable data")


async def rewrite(backend: StorageBackend, cipher: EnvelopeCipher, day_key: str, record: DayRecord) -> None:
    payload = await cipher.encrypt(encode_record(record))
    await backend.upsert_day(day_key=day_key, payload=payload, updated_at=record.updated_at)


async def run_migration(backend: StorageBackend, cipher: EnvelopeCipher) -> MigrationReport:
    """Upgrade every row lacking a current envelope. Safe to re-run.

    Current envelopes are not decrypted here; a bad one surfaces on read.
    """
    migrated = skipped = current = 0
    for row in await backend.list_rows():
        if is_envelope(row.payload, version=CURRENT_VERSION) and not has_legacy_values(row.columns):
            current += 1
            continue

        try:
            record, needs_rewrite = await migrate_if_needed(row, cipher)
        except READ_ERRORS as e:
            logger.warning(f"Skipping migration of {row.day_key}: {e}")
            skipped += 1
            continue

        if not needs_rewrite:
            current += 1
            continue
        await rewrite(backend, cipher, row.day_key, record)
        migrated += 1

    if migrated or skipped:
        logger.info(f"Migration on {backend.name}: migrated={migrated} skipped={skipped} current={current}")
    return MigrationReport(migrated=migrated, skipped=skipped, current=current)
