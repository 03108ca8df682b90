"""Apply a migration: checkpoint, write in phase order, roll back on failure.

Writes come from the dry-run's planned writes so that what the user previewed
is exactly what lands on disk. The checkpoint is fully persisted before the
first write, and every path written must be covered by it.
"""

from __future__ import annotations

import threading
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Optional

from ..analysis import PHASES, DryRunAnalyzer
from ..checkpoint import Checkpoint, CheckpointManager, RollbackResult
from ..config import MigrationConfig, default_config
from ..exceptions import MigratorError, WriteFailedError
from ..file_ops import safe_write_file
from ..logging_config import get_logger
from ..models import AnalysisResult, ChangeType, DetectionResult, PlannedWrite, TransformationWarning

logger = get_logger(__name__)

ConfirmCallback = Callable[[PlannedWrite], bool]


@dataclass
class TransformationOptions:
    dry_run: bool = False
    create_backup: bool = True
    confirm_each_file: bool = False
    confirm: Optional[ConfirmCallback] = None


@dataclass
class TransformationResult:
    """Outcome of one apply run."""

    success: bool = True
    files_created: list[str] = field(default_factory=list)
    files_modified: list[str] = field(default_factory=list)
    files_backed_up: list[str] = field(default_factory=list)
    checkpoint_id: Optional[str] = None
    skipped_files: list[str] = field(default_factory=list)
    warnings: list[TransformationWarning] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)
    rolled_back: bool = False
    rollback: Optional[RollbackResult] = None
    preview: Optional[AnalysisResult] = None

    @property
    def files_written(self) -> list[str]:
        return [*self.files_created, *self.files_modified]


class TransformationManager:
    """Runs the write phase of a migration."""

    def __init__(
        self,
        config: Optional[MigrationConfig] = None,
        analyzer: Optional[DryRunAnalyzer] = None,
        checkpoints: Optional[CheckpointManager] = None,
    ):
        self.config = config or default_config
        self.analyzer = analyzer or DryRunAnalyzer(self.config)
        self._checkpoints: dict[Path, CheckpointManager] = {}
        if checkpoints is not None:
            self._checkpoints[checkpoints.project_path] = checkpoints
        self._rollback_lock = threading.Lock()

    def checkpoint_manager(self, project_root: Path) -> CheckpointManager:
        key = Path(project_root).resolve()
        if key not in self._checkpoints:
            self._checkpoints[key] = CheckpointManager(key, self.config)
        return self._checkpoints[key]

    def execute_transformation(
        self,
        detection: DetectionResult,
        preview: Optional[AnalysisResult] = None,
        options: Optional[TransformationOptions] = None,
    ) -> TransformationResult:
        """Apply the planned writes of `preview` (analyzed now when omitted).

        Raises:
            KeyboardInterrupt: Re-raised after rolling back an interrupted write phase
        """
        options = options or TransformationOptions()
        preview = preview if preview is not None else self.analyzer.analyze(detection)
        result = TransformationResult(warnings=list(preview.warnings), preview=preview)
        if options.dry_run:
            return result

        writes = self._select(preview.planned_writes, options, result)
        if not writes:
            logger.info("Nothing to write")
            return result

        root = detection.project_root
        checkpoint: Optional[Checkpoint] = None
        if options.create_backup:
            manager = self.checkpoint_manager(root)
            try:
                checkpoint = manager.create_checkpoint(
                    root,
                    "Before SmartUI migration",
                    {
                        "platform": detection.platform.value,
                        "framework": detection.framework.value,
                        "language": detection.language.value,
                    },
                    files=[w.path for w in writes],
                )
                manager.ensure_covers(checkpoint, [w.path for w in writes])
            except MigratorError as e:
                logger.error(f"Checkpoint failed, nothing was written: {e}")
                result.success = False
                result.errors.append(f"Checkpoint creation failed: {e}")
                return result
            result.checkpoint_id = checkpoint.id
            result.files_backed_up = [b.path for b in checkpoint.files]

        stop = threading.Event()
        try:
            failure = self._write_phases(root, writes, stop, result)
        except KeyboardInterrupt:
            logger.warning("Interrupted during the write phase")
            result.success = False
            result.errors.append("Interrupted by user")
            if checkpoint is not None:
                self._rollback(checkpoint, result)
            raise

        if failure is not None:
            result.success = False
            result.errors.append(str(failure))
            if checkpoint is not None:
                self._rollback(checkpoint, result)
            else:
                logger.error(f"Write failed without a checkpoint; files already written: {result.files_written}")
            return result

        if checkpoint is not None:
            self.checkpoint_manager(root).mark_committed(checkpoint.id)
        logger.info(f"Created {len(result.files_created)} and modified {len(result.files_modified)} file(s)")
        return result

    # -- internals ---------------------------------------------------------

    @staticmethod
    def _select(
        planned: list[PlannedWrite], options: TransformationOptions, result: TransformationResult
    ) -> list[PlannedWrite]:
        ordered = sorted(planned, key=lambda w: PHASES.index(w.phase))
        if not options.confirm_each_file or options.confirm is None:
            return ordered
        selected = []
        for write in ordered:
            if options.confirm(write):
                selected.append(write)
            else:
                result.skipped_files.append(write.path)
        return selected

    def _write_phases(
        self, root: Path, writes: list[PlannedWrite], stop: threading.Event, result: TransformationResult
    ) -> Optional[MigratorError]:
        """Write phase by phase; the first failure stops queued writes.

        Each phase's pool is drained before returning, so no write is still
        running when a rollback starts.
        """
        failure: Optional[MigratorError] = None
        for phase in PHASES:
            batch = [w for w in writes if w.phase == phase]
            if not batch:
                continue
            with ThreadPoolExecutor(max_workers=min(self.config.write_workers, len(batch))) as executor:
                try:
                    futures = [executor.submit(_write_one, root, w, stop) for w in batch]
                    for write, future in zip(batch, futures):
                        try:
                            written = future.result()
                        except MigratorError as e:
                            stop.set()
                            failure = failure or e
                            continue
                        except Exception as e:
                            logger.error(f"Unexpected error writing {write.path}: {type(e).__name__}: {e}")
                            stop.set()
                            failure = failure or WriteFailedError(root / write.path, f"{type(e).__name__}: {e}")
                            continue
                        if not written:
                            continue
                        if write.type is ChangeType.CREATE:
                            result.files_created.append(write.path)
                        else:
                            result.files_modified.append(write.path)
                        logger.debug(f"Wrote {write.path}")
                except KeyboardInterrupt:
                    stop.set()
                    raise
            if failure is not None:
                return failure
        return None

    def _rollback(self, checkpoint: Checkpoint, result: TransformationResult) -> None:
        with self._rollback_lock:
            if result.rolled_back:
                return
            manager = self.checkpoint_manager(Path(checkpoint.project_path))
            try:
                rollback = manager.rollback_to_checkpoint(checkpoint.id)
            except MigratorError as e:
                result.errors.append(f"Rollback failed: {e}")
                logger.error(f"Rollback of {checkpoint.id} failed: {e}")
                return
            result.rolled_back = True
            result.rollback = rollback
            result.errors.extend(rollback.errors)


def _write_one(root: Path, write: PlannedWrite, stop: threading.Event) -> bool:
    if stop.is_set():
        return False
    safe_write_file(root / write.path, write.content)
    return True
