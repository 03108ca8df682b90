"""Checkpoint and rollback management."""

from .manager import ALLOWED_HIDDEN_DIRS, BACKUP_EXTENSIONS, CheckpointManager, generate_checkpoint_id
from .models import (
    Checkpoint,
    CheckpointMetadata,
    CheckpointStatus,
    CleanupResult,
    FileBackup,
    RollbackResult,
)

__all__ = [
    "ALLOWED_HIDDEN_DIRS",
    "BACKUP_EXTENSIONS",
    "Checkpoint",
    "CheckpointManager",
    "CheckpointMetadata",
    "CheckpointStatus",
    "CleanupResult",
    "FileBackup",
    "RollbackResult",
    "generate_checkpoint_id",
]
