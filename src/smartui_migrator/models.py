"""Core data model shared by detection, transform, dry-run and apply."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import Enum
from pathlib import Path
from typing import Any, Optional


class Platform(Enum):
    """Source visual-testing vendor."""

    PERCY = "Percy"
    APPLITOOLS = "Applitools"
    SAUCE_LABS = "Sauce Labs Visual"


class Framework(Enum):
    """Test-runner context of the project."""

    CYPRESS = "Cypress"
    PLAYWRIGHT = "Playwright"
    SELENIUM = "Selenium"
    STORYBOOK = "Storybook"
    ROBOT_FRAMEWORK = "Robot Framework"
    APPIUM = "Appium"


class Language(Enum):
    JAVASCRIPT = "JavaScript/TypeScript"
    JAVA = "Java"
    PYTHON = "Python"


class TestType(Enum):
    """Kind of suite, derived from the framework."""

    __test__ = False

    E2E = "e2e"
    STORYBOOK = "storybook"
    APPIUM = "appium"

    @classmethod
    def for_framework(cls, framework: Framework) -> TestType:
        if framework is Framework.STORYBOOK:
            return cls.STORYBOOK
        if framework is Framework.APPIUM:
            return cls.APPIUM
        return cls.E2E


class Confidence(Enum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class EvidenceSource(Enum):
    DEPENDENCY_MANIFEST = "dependency-manifest"
    CONFIG_FILE = "config-file"
    USER_SELECTION = "user-selection"


class ChangeType(Enum):
    CREATE = "CREATE"
    MODIFY = "MODIFY"
    INFO = "INFO"


# ---------------------------------------------------------------------------
# Detection
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Evidence:
    """Why the detector decided what it decided."""

    source: EvidenceSource
    match: str
    confidence: Confidence
    files: tuple[str, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        return {
            "source": self.source.value,
            "match": self.match,
            "confidence": self.confidence.value,
            "files": list(self.files),
        }


@dataclass(frozen=True)
class DetectedFiles:
    """Four disjoint, sorted lists of project-relative POSIX paths."""

    config: tuple[str, ...] = ()
    source: tuple[str, ...] = ()
    ci: tuple[str, ...] = ()
    package: tuple[str, ...] = ()

    def all(self) -> list[str]:
        return [*self.config, *self.source, *self.ci, *self.package]

    def to_dict(self) -> dict[str, list[str]]:
        return {
            "config": list(self.config),
            "source": list(self.source),
            "ci": list(self.ci),
            "package": list(self.package),
        }


@dataclass(frozen=True)
class DetectionResult:
    """Outcome of a detection run. Immutable once created."""

    project_root: Path
    platform: Platform
    framework: Framework
    language: Language
    files: DetectedFiles
    evidence: tuple[Evidence, ...]

    @property
    def test_type(self) -> TestType:
        return TestType.for_framework(self.framework)

    def to_dict(self) -> dict[str, Any]:
        return {
            "project_root": str(self.project_root),
            "platform": self.platform.value,
            "framework": self.framework.value,
            "language": self.language.value,
            "test_type": self.test_type.value,
            "files": self.files.to_dict(),
            "evidence": [e.to_dict() for e in self.evidence],
        }


@dataclass(frozen=True)
class DetectionCandidate:
    """One platform/framework/language combination found by the broad scan."""

    platform: Platform
    framework: Framework
    language: Language
    confidence: Confidence
    evidence: tuple[Evidence, ...]

    @property
    def files(self) -> list[str]:
        seen: dict[str, None] = {}
        for ev in self.evidence:
            for f in ev.files:
                seen.setdefault(f, None)
        return list(seen)


# ---------------------------------------------------------------------------
# Transform
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class TransformationWarning:
    """A fidelity-loss or failure note attached to a file (and line)."""

    message: str
    details: Optional[str] = None
    file: Optional[str] = None
    line: Optional[int] = None

    def with_file(self, file: str) -> TransformationWarning:
        return self if self.file else replace(self, file=file)

    def to_dict(self) -> dict[str, Any]:
        return {
            "message": self.message,
            "details": self.details,
            "file": self.file,
            "line": self.line,
        }


@dataclass(frozen=True)
class CodeChange:
    """A single rewrite applied to a source file.

    kind is one of: import, rename, remap, emulate, remove.
    """

    kind: str
    original: str
    replacement: str
    line: int
    description: str


@dataclass
class TransformedFile:
    """Result of transforming one source file."""

    original_path: str
    content: str
    changes: list[CodeChange] = field(default_factory=list)
    warnings: list[TransformationWarning] = field(default_factory=list)
    snapshot_count: int = 0
    variant: Optional[str] = None
    modified: bool = False


# ---------------------------------------------------------------------------
# Dry run
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ProposedChange:
    """A descriptive entry in the preview. Never mutates anything."""

    file_path: str
    type: ChangeType
    description: str

    def to_dict(self) -> dict[str, str]:
        return {"file_path": self.file_path, "type": self.type.value, "description": self.description}


@dataclass(frozen=True)
class PlannedWrite:
    """Content the apply phase will write for one path.

    phase orders the writes: config, then code, then execution.
    """

    path: str
    content: str
    type: ChangeType
    phase: str


@dataclass
class AnalysisResult:
    """Aggregate output of a dry run."""

    files_to_create: int = 0
    files_to_modify: int = 0
    snapshot_count: int = 0
    warnings: list[TransformationWarning] = field(default_factory=list)
    changes: list[ProposedChange] = field(default_factory=list)
    planned_writes: list[PlannedWrite] = field(default_factory=list)

    @property
    def paths_to_write(self) -> list[str]:
        return [w.path for w in self.planned_writes]

    def to_dict(self) -> dict[str, Any]:
        return {
            "files_to_create": self.files_to_create,
            "files_to_modify": self.files_to_modify,
            "snapshot_count": self.snapshot_count,
            "warnings": [w.to_dict() for w in self.warnings],
            "changes": [c.to_dict() for c in self.changes],
        }
