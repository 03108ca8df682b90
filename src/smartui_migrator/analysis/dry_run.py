"""Dry-run analysis: what a migration would change, without writing anything.

Every detected file is transformed in memory. Per-file work runs in a bounded
thread pool; the results come back in detection-file order and are folded
into one AnalysisResult by the calling thread, so two runs over the same
project produce identical change lists.
"""

from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Callable, Optional

from ..collaborators import ConfigTransformer, ExecutionTransformer
from ..collaborators.config_transformer import DEFAULT_PROJECT_NAME
from ..config import MigrationConfig, default_config
from ..exceptions import MigratorError
from ..file_ops import safe_read_file
from ..logging_config import get_logger
from ..mappings.dependencies import SMARTUI_CONFIG_FILE
from ..models import (
    AnalysisResult,
    ChangeType,
    DetectionResult,
    PlannedWrite,
    ProposedChange,
    TransformationWarning,
)
from ..transform import SyntaxTransformEngine

logger = get_logger(__name__)

ANALYSIS_PATH = "Migration Analysis"

PHASE_CONFIG = "config"
PHASE_CODE = "code"
PHASE_EXECUTION = "execution"
PHASES = (PHASE_CONFIG, PHASE_CODE, PHASE_EXECUTION)


@dataclass
class _FileReport:
    """What one file contributes; built by a worker, merged by the caller."""

    path: str
    changes: list[ProposedChange] = field(default_factory=list)
    warnings: list[TransformationWarning] = field(default_factory=list)
    snapshot_count: int = 0
    write: Optional[PlannedWrite] = None


class DryRunAnalyzer:
    """Side-effect-free preview of a migration.

    Example:
        >>> detection = Detector().detect(Path("."))
        >>> result = DryRunAnalyzer().analyze(detection)
        >>> result.files_to_modify, result.snapshot_count
        (2, 2)
    """

    def __init__(
        self,
        config: Optional[MigrationConfig] = None,
        engine: Optional[SyntaxTransformEngine] = None,
    ):
        self.config = config or default_config
        self.engine = engine or SyntaxTransformEngine()

    def analyze(self, detection: DetectionResult) -> AnalysisResult:
        files = detection.files
        tasks: list[tuple[str, Callable[[DetectionResult, str], _FileReport]]] = []
        if files.config:
            tasks.append((files.config[0], self._analyze_config))
            tasks.extend((path, self._skip_extra_config) for path in files.config[1:])
        tasks.extend((path, self._analyze_source) for path in files.source)
        tasks.extend((path, self._analyze_execution) for path in (*files.package, *files.ci))

        workers = min(self.config.worker_count, max(len(tasks), 1))
        with ThreadPoolExecutor(max_workers=workers) as executor:
            reports = list(executor.map(lambda task: self._guarded(detection, *task), tasks))

        result = AnalysisResult()
        for report in reports:
            result.changes.extend(report.changes)
            result.warnings.extend(report.warnings)
            result.snapshot_count += report.snapshot_count
            if report.write is not None:
                result.planned_writes.append(report.write)
        result.planned_writes.sort(key=lambda w: PHASES.index(w.phase))
        result.files_to_create = sum(1 for c in result.changes if c.type is ChangeType.CREATE)
        result.files_to_modify = sum(1 for c in result.changes if c.type is ChangeType.MODIFY)
        result.changes.extend(
            ProposedChange(ANALYSIS_PATH, ChangeType.INFO, _describe_warning(w)) for w in result.warnings
        )
        logger.info(
            f"Dry run: {result.files_to_create} to create, {result.files_to_modify} to modify, "
            f"{result.snapshot_count} snapshot(s), {len(result.warnings)} warning(s)"
        )
        return result

    # -- per file ----------------------------------------------------------

    def _guarded(
        self, detection: DetectionResult, path: str, handler: Callable[[DetectionResult, str], _FileReport]
    ) -> _FileReport:
        """Unreadable or unsupported files degrade to a warning."""
        try:
            return handler(detection, path)
        except MigratorError as e:
            logger.debug(f"Skipping {path}: {e}")
            return _FileReport(path, warnings=[TransformationWarning(f"Could not analyze {path}: {e.message}", file=path)])

    def _read(self, detection: DetectionResult, path: str) -> str:
        return safe_read_file(detection.project_root / path, max_bytes=self.config.max_file_size_bytes)

    def _analyze_config(self, detection: DetectionResult, path: str) -> _FileReport:
        content = self._read(detection, path)
        project_name = detection.project_root.name or DEFAULT_PROJECT_NAME
        config = ConfigTransformer(detection.platform, project_name).transform(path, content)
        report = _FileReport(path, warnings=list(config.warnings))
        report.changes.append(
            ProposedChange(SMARTUI_CONFIG_FILE, ChangeType.CREATE, f"Generated SmartUI configuration from {path}")
        )
        report.write = PlannedWrite(SMARTUI_CONFIG_FILE, config.content, ChangeType.CREATE, PHASE_CONFIG)
        return report

    @staticmethod
    def _skip_extra_config(detection: DetectionResult, path: str) -> _FileReport:
        warning = TransformationWarning(
            f"Additional {detection.platform.value} configuration {path} was not merged.",
            f"Only the first configuration file contributes to {SMARTUI_CONFIG_FILE}.",
            file=path,
        )
        return _FileReport(path, warnings=[warning])

    def _analyze_source(self, detection: DetectionResult, path: str) -> _FileReport:
        transformed = self.engine.transform_file(
            detection.project_root / path,
            detection.platform,
            detection.framework,
            display_path=path,
            max_bytes=self.config.max_file_size_bytes,
        )
        report = _FileReport(path, warnings=list(transformed.warnings), snapshot_count=transformed.snapshot_count)
        if transformed.snapshot_count or transformed.warnings or transformed.modified:
            report.changes.append(
                ProposedChange(
                    path,
                    ChangeType.MODIFY,
                    f"Transform {transformed.snapshot_count} snapshot(s) using {transformed.variant} transformer",
                )
            )
        if transformed.modified:
            report.write = PlannedWrite(path, transformed.content, ChangeType.MODIFY, PHASE_CODE)
        return report

    def _analyze_execution(self, detection: DetectionResult, path: str) -> _FileReport:
        content = self._read(detection, path)
        outcome = ExecutionTransformer(detection.platform).transform(path, content)
        report = _FileReport(path, warnings=list(outcome.warnings))
        if outcome.changed:
            kind = "CI configuration" if path in detection.files.ci else "dependencies"
            report.changes.append(ProposedChange(path, ChangeType.MODIFY, f"Update {kind} for SmartUI"))
            report.write = PlannedWrite(path, outcome.content, ChangeType.MODIFY, PHASE_EXECUTION)
        return report


def _describe_warning(warning: TransformationWarning) -> str:
    where = warning.file or ""
    if warning.file and warning.line:
        where = f"{warning.file}:{warning.line}"
    return f"{where}: {warning.message}" if where else warning.message
