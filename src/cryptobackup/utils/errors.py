"""Error taxonomy shared by the cipher, store and pipeline layers."""
from typing import Optional


class CryptoBackupError(Exception):
    """Base class. ``stage`` names the layer that failed (cipher, store, local, pipeline)."""

    def __init__(self, message: str = "", stage: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.stage = stage

    def __str__(self) -> str:
        if self.stage:
            return f"{self.stage}: {self.message}"
        return self.message


class ConstructionError(CryptoBackupError, ValueError):
    """Bad key size/encoding, unsupported algorithm or store kind."""


class BackupIOError(CryptoBackupError, OSError):
    """Filesystem, backend or stream failure."""


class NotFoundError(CryptoBackupError, FileNotFoundError):
    """Missing object or directory."""


class AuthenticationError(CryptoBackupError):
    """Integrity tag did not verify. Never says why."""


class FormatError(CryptoBackupError, ValueError):
    """Malformed ciphertext framing or metadata document."""


class UnsafePathError(CryptoBackupError, ValueError):
    """Remote path resolves outside the store root."""


class OperationCancelled(CryptoBackupError):
    """The operation context was cancelled or ran past its deadline."""
