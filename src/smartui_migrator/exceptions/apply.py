"""Apply-phase and checkpoint exceptions: file IO, checkpoint lifecycle."""

from pathlib import Path
from typing import Optional

from .base import MigratorError


class ApplyError(MigratorError):
    """Base class for errors raised while mutating a project."""
    pass


class FileAccessError(ApplyError):
    """Raised when a file cannot be read."""

    def __init__(self, filepath: Path, reason: str):
        super().__init__(
            f"Cannot access file: {filepath}",
            details={"filepath": str(filepath), "reason": reason},
        )
        self.filepath = filepath
        self.reason = reason


class WriteFailedError(ApplyError):
    """Raised when a file cannot be written."""

    def __init__(self, filepath: Path, reason: str):
        super().__init__(
            f"Cannot write file: {filepath}",
            details={"filepath": str(filepath), "reason": reason},
        )
        self.filepath = filepath
        self.reason = reason


class CheckpointError(MigratorError):
    """Base class for checkpoint store errors."""
    pass


class CheckpointNotFoundError(CheckpointError):
    """Raised when a checkpoint id has no record."""

    def __init__(self, checkpoint_id: str):
        super().__init__(
            f"Checkpoint not found: {checkpoint_id}",
            details={"checkpoint_id": checkpoint_id},
        )
        self.checkpoint_id = checkpoint_id


class CheckpointStateError(CheckpointError):
    """Raised on an invalid checkpoint state transition."""

    def __init__(self, checkpoint_id: str, current: str, requested: str):
        super().__init__(
            f"Checkpoint {checkpoint_id} cannot go from {current} to {requested}",
            details={"checkpoint_id": checkpoint_id, "current": current, "requested": requested},
        )
        self.checkpoint_id = checkpoint_id
        self.current = current
        self.requested = requested


class CheckpointIntegrityError(CheckpointError):
    """Raised when a checkpoint is missing a backup for a file about to be written."""

    def __init__(self, reason: str, filepath: Optional[Path] = None):
        details = {"reason": reason}
        if filepath:
            details["filepath"] = str(filepath)

        super().__init__(f"Checkpoint integrity violation: {reason}", details=details)
        self.reason = reason
        self.filepath = filepath
