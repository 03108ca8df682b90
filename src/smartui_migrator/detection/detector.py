"""Platform, framework and language detection.

Detection runs in two tiers. Dependency manifests are checked first and are
authoritative; platform configuration files are only consulted when no
manifest evidences a platform. Exactly one platform may be evidenced per run.

Usage:
    detector = Detector()
    result = detector.detect(Path("."))

    # ambiguity: let a caller pick among every candidate
    candidates = detector.scan_candidates(Path("."))
    result = detector.result_from_candidate(Path("."), candidates[0])
"""

from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from ..config import MigrationConfig, default_config
from ..exceptions import InvalidPathError, MultiplePlatformsDetectedError, PlatformNotDetectedError
from ..file_ops import glob_regex, walk_files
from ..logging_config import get_logger
from ..mappings.dependencies import CONFIG_FILES, SIGNATURES, Signature
from ..mappings.patterns import (
    CI_PATTERNS,
    DEFAULT_FRAMEWORK,
    FRAMEWORK_HINTS,
    LANGUAGE_MARKERS,
    PACKAGE_PATTERNS,
    SOURCE_EXTENSIONS,
    source_patterns,
)
from ..models import (
    Confidence,
    DetectedFiles,
    DetectionCandidate,
    DetectionResult,
    Evidence,
    EvidenceSource,
    Framework,
    Language,
    Platform,
)
from .manifests import Manifest, read_manifests

logger = get_logger(__name__)

_JS_ONLY_FRAMEWORKS = {Framework.CYPRESS, Framework.PLAYWRIGHT, Framework.STORYBOOK}
_CONFIDENCE_ORDER = {Confidence.HIGH: 0, Confidence.MEDIUM: 1, Confidence.LOW: 2}


@dataclass(frozen=True)
class _ManifestHit:
    signature: Signature
    manifest: Manifest

    def evidence(self) -> Evidence:
        return Evidence(
            source=EvidenceSource.DEPENDENCY_MANIFEST,
            match=self.signature.package,
            confidence=Confidence.HIGH,
            files=(self.manifest.path,),
        )


class ProjectIndex:
    """Every non-ignored file under a project root, walked once."""

    def __init__(self, root: Path, ignore_dirs: frozenset[str]):
        self.root = root
        self.paths: list[str] = list(walk_files(root, ignore_dirs))

    def glob(self, pattern: str) -> list[str]:
        regex = glob_regex(pattern)
        return [p for p in self.paths if regex.match(p)]

    def exists(self, pattern: str) -> bool:
        regex = glob_regex(pattern)
        return any(regex.match(p) for p in self.paths)

    def has_dir(self, name: str) -> bool:
        prefix = name.rstrip("/") + "/"
        return (self.root / name).is_dir() or any(p.startswith(prefix) for p in self.paths)


class Detector:
    """Resolves a project's visual-testing platform, framework and language."""

    def __init__(self, config: Optional[MigrationConfig] = None):
        self.config = config or default_config

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def detect(self, project_root: Path) -> DetectionResult:
        """Detect the single platform in use.

        Raises:
            PlatformNotDetectedError: No evidence in manifests or config files
            MultiplePlatformsDetectedError: More than one platform evidenced
            ManifestReadError: A manifest exists but is malformed
        """
        root = self._validate_root(project_root)
        index = ProjectIndex(root, self.config.ignore_dirs)

        hits = self._manifest_hits(root, index)
        if hits:
            platforms = _distinct(h.signature.platform for h in hits)
            if len(platforms) > 1:
                raise MultiplePlatformsDetectedError(
                    [p.value for p in platforms], candidates=self._candidates(index, hits)
                )
            chosen = hits[0]
            sig = chosen.signature
            evidence = tuple(h.evidence() for h in hits)
            logger.info(
                f"Detected {sig.platform.value} ({sig.framework.value}, {sig.language.value}) "
                f"from {chosen.manifest.path}"
            )
            return self._build_result(root, index, sig.platform, sig.framework, sig.language, evidence)

        config_hits = self._config_hits(index)
        platforms = list(config_hits)
        if len(platforms) > 1:
            raise MultiplePlatformsDetectedError(
                [p.value for p in platforms], candidates=self._candidates(index, hits)
            )
        if len(platforms) == 1:
            platform = platforms[0]
            language = self._infer_language(index)
            framework, framework_evidence = self._infer_framework(index, language)
            evidence = (
                Evidence(
                    source=EvidenceSource.CONFIG_FILE,
                    match=config_hits[platform][0],
                    confidence=Confidence.MEDIUM,
                    files=tuple(config_hits[platform]),
                ),
                framework_evidence,
            )
            logger.info(f"Detected {platform.value} from config file {config_hits[platform][0]}")
            return self._build_result(root, index, platform, framework, language, evidence)

        raise PlatformNotDetectedError(root)

    def scan_candidates(self, project_root: Path) -> list[DetectionCandidate]:
        """Every platform/framework/language combination with evidence.

        Never raises for ambiguity; the caller picks one candidate.
        """
        root = self._validate_root(project_root)
        index = ProjectIndex(root, self.config.ignore_dirs)
        return self._candidates(index, self._manifest_hits(root, index, first_only=False))

    def result_from_candidate(self, project_root: Path, candidate: DetectionCandidate) -> DetectionResult:
        """Synthesize a DetectionResult from an externally chosen candidate."""
        root = self._validate_root(project_root)
        index = ProjectIndex(root, self.config.ignore_dirs)
        selection = Evidence(
            source=EvidenceSource.USER_SELECTION,
            match=f"{candidate.platform.value} / {candidate.framework.value}",
            confidence=candidate.confidence,
        )
        return self._build_result(
            root,
            index,
            candidate.platform,
            candidate.framework,
            candidate.language,
            (*candidate.evidence, selection),
        )

    # ------------------------------------------------------------------
    # Tier 1: dependency manifests
    # ------------------------------------------------------------------

    def _manifest_hits(self, root: Path, index: ProjectIndex, first_only: bool = True) -> list[_ManifestHit]:
        """Signatures satisfied by the project's manifests, in table order.

        With first_only, each (ecosystem, platform) keeps only its first
        framework so a package listed under several gated variants counts once.
        """
        manifests = {m.ecosystem: m for m in read_manifests(root)}
        hits: list[_ManifestHit] = []
        seen: set[tuple[str, Platform]] = set()
        for sig in SIGNATURES:
            manifest = manifests.get(sig.ecosystem)
            if manifest is None or not manifest.declares(sig.package):
                continue
            if not self._gates_pass(sig, manifest, index):
                continue
            key = (sig.ecosystem, sig.platform)
            if first_only and key in seen:
                logger.debug(f"Ignoring additional {sig.platform.value} framework {sig.framework.value}")
                continue
            seen.add(key)
            hits.append(_ManifestHit(sig, manifest))
        return hits

    @staticmethod
    def _gates_pass(sig: Signature, manifest: Manifest, index: ProjectIndex) -> bool:
        if sig.requires_dir and not index.has_dir(sig.requires_dir):
            return False
        if sig.requires_any and not any(manifest.declares(p) for p in sig.requires_any):
            return False
        if sig.excludes_any and any(manifest.declares(p) for p in sig.excludes_any):
            return False
        if sig.requires_glob and not index.exists(sig.requires_glob):
            return False
        return True

    # ------------------------------------------------------------------
    # Tier 2: platform config files
    # ------------------------------------------------------------------

    @staticmethod
    def _config_hits(index: ProjectIndex) -> dict[Platform, list[str]]:
        found: dict[Platform, list[str]] = {}
        for platform, names in CONFIG_FILES.items():
            matched = [n for n in names if n in index.paths]
            if matched:
                found[platform] = matched
        return found

    @staticmethod
    def _infer_language(index: ProjectIndex) -> Language:
        for language, markers in LANGUAGE_MARKERS:
            if any(m in index.paths for m in markers):
                return language
        return Language.JAVASCRIPT

    @staticmethod
    def _infer_framework(index: ProjectIndex, language: Language) -> tuple[Framework, Evidence]:
        for framework, hints in FRAMEWORK_HINTS:
            if framework in _JS_ONLY_FRAMEWORKS and language is not Language.JAVASCRIPT:
                continue
            if framework is Framework.ROBOT_FRAMEWORK and language is not Language.PYTHON:
                continue
            for hint in hints:
                matched = index.glob(hint)
                if matched:
                    return framework, Evidence(
                        source=EvidenceSource.CONFIG_FILE,
                        match=hint,
                        confidence=Confidence.MEDIUM,
                        files=tuple(matched[:5]),
                    )
        framework = DEFAULT_FRAMEWORK[language]
        return framework, Evidence(
            source=EvidenceSource.CONFIG_FILE,
            match=f"default framework for {language.value}",
            confidence=Confidence.LOW,
        )

    # ------------------------------------------------------------------
    # Candidates
    # ------------------------------------------------------------------

    def _candidates(
        self, index: ProjectIndex, hits: list[_ManifestHit]
    ) -> list[DetectionCandidate]:
        grouped: dict[tuple[Platform, Framework, Language], list[Evidence]] = {}
        for hit in hits:
            sig = hit.signature
            grouped.setdefault((sig.platform, sig.framework, sig.language), []).append(hit.evidence())

        candidates = [
            DetectionCandidate(platform, framework, language, Confidence.HIGH, tuple(evidence))
            for (platform, framework, language), evidence in grouped.items()
        ]

        manifest_platforms = {p for p, _, _ in grouped}
        config_hits = self._config_hits(index)
        if config_hits:
            language = self._infer_language(index)
            framework, framework_evidence = self._infer_framework(index, language)
            for platform, files in config_hits.items():
                config_evidence = Evidence(
                    source=EvidenceSource.CONFIG_FILE,
                    match=files[0],
                    confidence=Confidence.MEDIUM,
                    files=tuple(files),
                )
                if platform in manifest_platforms:
                    # Corroborating evidence for the manifest candidates
                    candidates = [
                        DetectionCandidate(c.platform, c.framework, c.language, c.confidence,
                                           (*c.evidence, config_evidence))
                        if c.platform is platform else c
                        for c in candidates
                    ]
                    continue
                # A candidate is only as strong as its weakest evidence
                confidence = max(
                    (config_evidence.confidence, framework_evidence.confidence),
                    key=_CONFIDENCE_ORDER.__getitem__,
                )
                candidates.append(
                    DetectionCandidate(platform, framework, language, confidence,
                                       (config_evidence, framework_evidence))
                )

        candidates.sort(key=lambda c: (_CONFIDENCE_ORDER[c.confidence], c.platform.value, c.framework.value))
        return candidates

    # ------------------------------------------------------------------
    # File collection
    # ------------------------------------------------------------------

    def _build_result(
        self,
        root: Path,
        index: ProjectIndex,
        platform: Platform,
        framework: Framework,
        language: Language,
        evidence: tuple[Evidence, ...],
    ) -> DetectionResult:
        return DetectionResult(
            project_root=root,
            platform=platform,
            framework=framework,
            language=language,
            files=self._collect(index, platform, framework, language),
            evidence=evidence,
        )

    def _collect(
        self, index: ProjectIndex, platform: Platform, framework: Framework, language: Language
    ) -> DetectedFiles:
        """Resolve the four pattern sets into disjoint, sorted path lists.

        Precedence for a path matching several sets: config, package, CI, source.
        """
        pattern_sets = {
            "config": CONFIG_FILES[platform],
            "package": PACKAGE_PATTERNS[language],
            "ci": CI_PATTERNS,
            "source": source_patterns(framework, language),
        }
        jobs = [(category, pattern) for category, patterns in pattern_sets.items() for pattern in patterns]

        with ThreadPoolExecutor(max_workers=self.config.worker_count) as executor:
            results = list(executor.map(lambda job: (job[0], index.glob(job[1])), jobs))

        # Single writer: merge per-pattern matches in submission order
        matched: dict[str, set[str]] = {category: set() for category in pattern_sets}
        for category, paths in results:
            matched[category].update(paths)

        extensions = SOURCE_EXTENSIONS[language]
        claimed: set[str] = set()
        resolved: dict[str, tuple[str, ...]] = {}
        for category in ("config", "package", "ci", "source"):
            paths = matched[category] - claimed
            if category == "source":
                paths = {p for p in paths if p.endswith(extensions)}
            claimed |= paths
            resolved[category] = tuple(sorted(paths))

        logger.debug(
            "Collected files: "
            + ", ".join(f"{category}={len(paths)}" for category, paths in resolved.items())
        )
        return DetectedFiles(**resolved)

    @staticmethod
    def _validate_root(project_root: Path) -> Path:
        root = Path(project_root).resolve()
        if not root.is_dir():
            raise InvalidPathError(root, "Project root is not a directory")
        return root


def _distinct(platforms) -> list[Platform]:
    seen: dict[Platform, None] = {}
    for p in platforms:
        seen.setdefault(p, None)
    return list(seen)

