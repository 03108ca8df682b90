"""Exception hierarchy for the SmartUI migrator."""

from .apply import (
    ApplyError,
    CheckpointError,
    CheckpointIntegrityError,
    CheckpointNotFoundError,
    CheckpointStateError,
    FileAccessError,
    WriteFailedError,
)
from .base import MigratorError
from .config import (
    ConfigurationError,
    InvalidConfigError,
    InvalidPathError,
)
from .detection import (
    DetectionError,
    ManifestReadError,
    MultiplePlatformsDetectedError,
    PlatformNotDetectedError,
)
from .transform import (
    ParsingError,
    TransformError,
    UnsupportedLanguageError,
)

__all__ = [
    "MigratorError",
    "DetectionError",
    "PlatformNotDetectedError",
    "MultiplePlatformsDetectedError",
    "ManifestReadError",
    "TransformError",
    "ParsingError",
    "UnsupportedLanguageError",
    "ApplyError",
    "FileAccessError",
    "WriteFailedError",
    "CheckpointError",
    "CheckpointNotFoundError",
    "CheckpointStateError",
    "CheckpointIntegrityError",
    "ConfigurationError",
    "InvalidPathError",
    "InvalidConfigError",
]
