"""Detection exceptions: missing or ambiguous platform evidence, bad manifests."""

from pathlib import Path
from typing import List, Optional

from .base import MigratorError


class DetectionError(MigratorError):
    """Base class for detection-related errors. Fatal to the current run."""
    pass


class PlatformNotDetectedError(DetectionError):
    """Raised when no visual testing platform evidence is found."""

    def __init__(self, project_root: Optional[Path] = None):
        details = {"project_root": str(project_root)} if project_root else None
        super().__init__(
            "Could not detect a supported visual testing platform. "
            "Please run this tool from the root of your project.",
            details=details,
        )
        self.project_root = project_root


class MultiplePlatformsDetectedError(DetectionError):
    """Raised when evidence for more than one platform is found at once."""

    def __init__(self, platforms: List[str], candidates: Optional[list] = None):
        super().__init__(
            "Multiple visual testing platforms were detected. "
            "The migration tool supports migrating from only one platform at a time.",
            details={"platforms": ", ".join(platforms)},
        )
        self.platforms = platforms
        self.candidates = candidates or []


class ManifestReadError(DetectionError):
    """Raised when a dependency manifest exists but cannot be parsed."""

    def __init__(self, manifest: Path, reason: str):
        super().__init__(
            f"Cannot read dependency manifest: {manifest}",
            details={"manifest": str(manifest), "reason": reason},
        )
        self.manifest = manifest
        self.reason = reason
