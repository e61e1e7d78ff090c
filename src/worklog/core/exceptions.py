class DomainError(Exception):
    """Base exception for business rule violations."""


class ValidationError(DomainError):
    """Raised when input data is invalid or violates workplace policy."""


class StorageError(DomainError):
    """Raised when the storage backend cannot complete an operation."""


class CryptoError(DomainError):
    """Base exception for envelope encryption failures."""


class NotAnEnvelope(CryptoError):
    """Raised when a stored value is not a current-format envelope."""


class DecryptionError(CryptoError):
    """Raised when a well-formed envelope fails authentication."""


class RecordLoadError(DomainError):
    """Raised when a stored day cannot be read back."""

    def __init__(self, day_key: str, message: str):
        super().__init__(f"{day_key}: {message}")
        self.day_key = day_key
