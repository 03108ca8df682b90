"""Checkpoint store: full-content backups, rollback and cleanup.

Each checkpoint is one JSON record under ``<project>/.smartui-checkpoints/``,
written atomically and independent of every other checkpoint. Deleting a
checkpoint drops its file contents but keeps a tombstone record, so a later
rollback against that id fails with a state error rather than "not found".

Usage:
    manager = CheckpointManager(Path("."))
    checkpoint = manager.create_checkpoint(Path("."), "Before migration")
    ...
    result = manager.rollback_to_checkpoint(checkpoint.id)
"""

from __future__ import annotations

import json
import re
import threading
import time
import uuid
from collections.abc import Iterable
from concurrent.futures import ThreadPoolExecutor
from datetime import datetime, timezone
from pathlib import Path, PurePosixPath
from typing import Optional

from ..config import MigrationConfig, default_config
from ..exceptions import (
    CheckpointError,
    CheckpointIntegrityError,
    CheckpointNotFoundError,
    CheckpointStateError,
    MigratorError,
)
from ..file_ops import safe_read_file, safe_write_file, sha256_file, sha256_text, walk_files
from ..logging_config import get_logger
from ..mappings.dependencies import GENERATED_ARTIFACTS
from .models import (
    TRANSITIONS,
    Checkpoint,
    CheckpointMetadata,
    CheckpointStatus,
    CleanupResult,
    FileBackup,
    RollbackResult,
)

logger = get_logger(__name__)

BACKUP_EXTENSIONS = frozenset(
    {".js", ".jsx", ".ts", ".tsx", ".mjs", ".cjs", ".java", ".py", ".robot", ".json", ".xml", ".yml", ".yaml", ".txt"}
)
BACKUP_NAMES = frozenset({"Jenkinsfile"})
ALLOWED_HIDDEN_DIRS = (".github", ".storybook", ".circleci")

_ID_PATTERN = re.compile(r"^checkpoint_\d+_[0-9a-z]+$")


def generate_checkpoint_id() -> str:
    return f"checkpoint_{int(time.time() * 1000)}_{uuid.uuid4().hex[:9]}"


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


def _is_backup_candidate(rel_path: str) -> bool:
    name = PurePosixPath(rel_path)
    return name.suffix.lower() in BACKUP_EXTENSIONS or name.name in BACKUP_NAMES


class CheckpointManager:
    """Creates, lists, restores and retires checkpoints for one project."""

    def __init__(self, project_path: Path, config: Optional[MigrationConfig] = None):
        self.config = config or default_config
        self.project_path = Path(project_path).resolve()
        self.checkpoints_dir = self.project_path / self.config.checkpoint_dir
        self._locks: dict[str, threading.Lock] = {}
        self._locks_guard = threading.Lock()

    # ------------------------------------------------------------------
    # Creation
    # ------------------------------------------------------------------

    def create_checkpoint(
        self,
        project_path: Optional[Path] = None,
        description: str = "",
        metadata: Optional[dict] = None,
        files: Optional[Iterable[str]] = None,
    ) -> Checkpoint:
        """Back up the project and persist the checkpoint.

        Args:
            project_path: Project root (defaults to the manager's project)
            description: Free-form label shown by `checkpoints`
            metadata: platform / framework / language labels
            files: Explicit project-relative paths the run will write. Paths
                that exist are backed up; missing ones are recorded as files
                the migration creates. When omitted every candidate file
                under the project is backed up.

        Raises:
            CheckpointIntegrityError: If an explicitly listed file cannot be read
            CheckpointError: If the record cannot be persisted
        """
        root = Path(project_path).resolve() if project_path else self.project_path
        created: list[str] = []
        if files is None:
            paths = [
                p
                for p in walk_files(root, self.config.ignore_dirs, allow_hidden=ALLOWED_HIDDEN_DIRS)
                if _is_backup_candidate(p)
            ]
            strict = False
        else:
            paths = []
            for rel in dict.fromkeys(files):
                (paths if (root / rel).is_file() else created).append(rel)
            strict = True

        backups = self._backup_files(root, paths, strict)
        info = dict(metadata or {})
        checkpoint = Checkpoint(
            id=generate_checkpoint_id(),
            timestamp=_now(),
            description=description,
            project_path=str(root),
            files=backups,
            metadata=CheckpointMetadata(
                platform=str(info.get("platform", "unknown")),
                framework=str(info.get("framework", "unknown")),
                language=str(info.get("language", "unknown")),
                files_count=len(backups),
                total_size=sum(b.size for b in backups),
                created_files=created,
                preexisting_artifacts=[rel for rel in GENERATED_ARTIFACTS if (root / rel).is_file()],
            ),
        )
        self._save(checkpoint)
        logger.info(f"Checkpoint {checkpoint.id} created with {len(backups)} file(s)")
        return checkpoint

    def _backup_files(self, root: Path, paths: list[str], strict: bool) -> list[FileBackup]:
        max_bytes = None if strict else self.config.max_file_size_bytes

        def backup(rel: str) -> Optional[FileBackup]:
            try:
                content = safe_read_file(root / rel, max_bytes=max_bytes)
            except MigratorError as e:
                if strict:
                    raise CheckpointIntegrityError(f"cannot back up {rel}: {e}", root / rel) from e
                logger.debug(f"Skipped backup of {rel}: {e}")
                return None
            size = (root / rel).stat().st_size
            return FileBackup(rel, content, sha256_text(content), size, _now())

        if not paths:
            return []
        workers = min(self.config.worker_count, len(paths))
        with ThreadPoolExecutor(max_workers=workers) as executor:
            results = list(executor.map(backup, paths))
        return [b for b in results if b is not None]

    def ensure_covers(self, checkpoint: Checkpoint, paths: Iterable[str]) -> None:
        """Every path about to be written must be backed up or recorded as created.

        Raises:
            CheckpointIntegrityError: For the first uncovered path
        """
        covered = checkpoint.backed_up_paths | set(checkpoint.metadata.created_files)
        for path in paths:
            if path not in covered:
                raise CheckpointIntegrityError(
                    f"no backup in {checkpoint.id} for {path}", self.project_path / path
                )

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def list_checkpoints(self, include_deleted: bool = False) -> list[Checkpoint]:
        """Stored checkpoints, newest first."""
        if not self.checkpoints_dir.is_dir():
            return []
        checkpoints = []
        for record in sorted(self.checkpoints_dir.glob("checkpoint_*.json")):
            try:
                checkpoint = self._load_record(record)
            except CheckpointError as e:
                logger.warning(f"Ignoring unreadable checkpoint {record.name}: {e}")
                continue
            if include_deleted or checkpoint.status is not CheckpointStatus.DELETED:
                checkpoints.append(checkpoint)
        return sorted(checkpoints, key=lambda c: (c.timestamp, c.id), reverse=True)

    def get_checkpoint(self, checkpoint_id: str) -> Checkpoint:
        """Load one checkpoint, tombstones included.

        Raises:
            CheckpointNotFoundError: If no record exists for the id
        """
        return self._load_record(self._record_path(checkpoint_id))

    def delete_checkpoint(self, checkpoint_id: str) -> Checkpoint:
        """Drop the stored contents, leaving a tombstone."""
        checkpoint = self.get_checkpoint(checkpoint_id)
        self._transition(checkpoint, CheckpointStatus.DELETED)
        checkpoint.files = []
        self._save(checkpoint)
        logger.info(f"Checkpoint {checkpoint_id} deleted")
        return checkpoint

    def mark_committed(self, checkpoint_id: str) -> Checkpoint:
        checkpoint = self.get_checkpoint(checkpoint_id)
        self._transition(checkpoint, CheckpointStatus.COMMITTED)
        self._save(checkpoint)
        return checkpoint

    # ------------------------------------------------------------------
    # Rollback
    # ------------------------------------------------------------------

    def rollback_to_checkpoint(self, checkpoint_id: str) -> RollbackResult:
        """Restore every backed-up file and remove files the run created.

        Best effort: a failed restore is recorded and the remaining files are
        still restored. Only one rollback per checkpoint runs at a time.

        Raises:
            CheckpointNotFoundError: Unknown id
            CheckpointStateError: The checkpoint is deleted or already rolled back
        """
        with self._lock_for(checkpoint_id):
            started = time.monotonic()
            checkpoint = self.get_checkpoint(checkpoint_id)
            self._transition(checkpoint, CheckpointStatus.ROLLED_BACK)
            root = Path(checkpoint.project_path)
            restored: list[str] = []
            removed: list[str] = []
            errors: list[str] = []

            for backup in checkpoint.files:
                target = root / backup.path
                try:
                    safe_write_file(target, backup.content)
                except MigratorError as e:
                    errors.append(f"Failed to restore {backup.path}: {e}")
                    continue
                if self.config.verify_checksums and sha256_file(target) != backup.checksum:
                    errors.append(f"Checksum mismatch after restoring {backup.path}")
                    continue
                restored.append(backup.path)

            for rel in checkpoint.metadata.created_files:
                target = root / rel
                if not target.exists():
                    continue
                try:
                    target.unlink()
                    removed.append(rel)
                except OSError as e:
                    errors.append(f"Failed to remove {rel}: {e}")

            self._save(checkpoint)
            success = not errors
            message = (
                f"Successfully rolled back to checkpoint {checkpoint_id}"
                if success
                else f"Rollback completed with {len(errors)} error(s)"
            )
            log = logger.info if success else logger.error
            log(message)
            return RollbackResult(success, message, restored, removed, errors, time.monotonic() - started)

    def cleanup_after_rollback(self, checkpoint_id: str) -> CleanupResult:
        """Remove migration artifacts and retire a rolled-back checkpoint.

        Raises:
            CheckpointStateError: If the checkpoint has not been rolled back
        """
        checkpoint = self.get_checkpoint(checkpoint_id)
        if checkpoint.status is not CheckpointStatus.ROLLED_BACK:
            raise CheckpointStateError(checkpoint_id, checkpoint.status.value, "cleanup")
        root = Path(checkpoint.project_path)
        keep = checkpoint.backed_up_paths | set(checkpoint.metadata.preexisting_artifacts)
        removed: list[str] = []
        errors: list[str] = []
        for rel in dict.fromkeys([*GENERATED_ARTIFACTS, *checkpoint.metadata.created_files]):
            target = root / rel
            # restored originals and files that predate the run are not artifacts
            if rel in keep or not target.is_file():
                continue
            try:
                target.unlink()
                removed.append(rel)
            except OSError as e:
                errors.append(f"Failed to remove {rel}: {e}")

        if not errors:
            self.delete_checkpoint(checkpoint_id)
        success = not errors
        message = "Cleanup completed successfully" if success else f"Cleanup completed with {len(errors)} error(s)"
        return CleanupResult(success, message, removed, errors)

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------

    def _record_path(self, checkpoint_id: str) -> Path:
        if not _ID_PATTERN.match(checkpoint_id):
            raise CheckpointNotFoundError(checkpoint_id)
        return self.checkpoints_dir / f"{checkpoint_id}.json"

    def _load_record(self, record: Path) -> Checkpoint:
        checkpoint_id = record.stem
        if not record.is_file():
            raise CheckpointNotFoundError(checkpoint_id)
        try:
            return Checkpoint.from_dict(json.loads(safe_read_file(record)))
        except (json.JSONDecodeError, KeyError, TypeError, ValueError) as e:
            raise CheckpointError(f"Corrupt checkpoint record {record.name}: {e}") from e

    def _save(self, checkpoint: Checkpoint) -> None:
        try:
            safe_write_file(self._record_path(checkpoint.id), json.dumps(checkpoint.to_dict(), indent=2))
        except MigratorError as e:
            raise CheckpointError(f"Failed to persist checkpoint {checkpoint.id}: {e}") from e

    @staticmethod
    def _transition(checkpoint: Checkpoint, target: CheckpointStatus) -> None:
        if target not in TRANSITIONS[checkpoint.status]:
            raise CheckpointStateError(checkpoint.id, checkpoint.status.value, target.value)
        checkpoint.status = target

    def _lock_for(self, checkpoint_id: str) -> threading.Lock:
        with self._locks_guard:
            return self._locks.setdefault(checkpoint_id, threading.Lock())
