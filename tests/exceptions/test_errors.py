"""Tests for the exception hierarchy."""

from pathlib import Path

import pytest

from smartui_migrator.exceptions import (
    ApplyError,
    CheckpointError,
    CheckpointNotFoundError,
    CheckpointStateError,
    ConfigurationError,
    DetectionError,
    FileAccessError,
    InvalidPathError,
    ManifestReadError,
    MigratorError,
    MultiplePlatformsDetectedError,
    ParsingError,
    PlatformNotDetectedError,
    TransformError,
    UnsupportedLanguageError,
    WriteFailedError,
)


class TestMigratorError:
    def test_str_includes_details(self):
        error = MigratorError("Something failed", {"file": "a.js"})
        assert str(error) == "Something failed (file=a.js)"
        assert error.message == "Something failed"

    def test_str_without_details(self):
        assert str(MigratorError("plain")) == "plain"


class TestHierarchy:
    """Each phase has its own base class under MigratorError."""

    @pytest.mark.parametrize(
        "error, base",
        [
            (PlatformNotDetectedError(), DetectionError),
            (MultiplePlatformsDetectedError(["Percy", "Applitools"]), DetectionError),
            (ManifestReadError(Path("package.json"), "bad json"), DetectionError),
            (ParsingError("Java", "syntax error"), TransformError),
            (UnsupportedLanguageError(".css", [".js", ".py"]), TransformError),
            (FileAccessError(Path("a"), "denied"), ApplyError),
            (WriteFailedError(Path("a"), "disk full"), ApplyError),
            (CheckpointNotFoundError("checkpoint_1_a"), CheckpointError),
            (CheckpointStateError("checkpoint_1_a", "deleted", "rolled_back"), CheckpointError),
            (InvalidPathError(Path("/nope"), "missing"), ConfigurationError),
        ],
    )
    def test_base_classes(self, error, base):
        assert isinstance(error, base)
        assert isinstance(error, MigratorError)

    def test_multiple_platforms_details(self):
        """The platform list is kept for display."""
        error = MultiplePlatformsDetectedError(["Percy", "Applitools"])
        assert error.details["platforms"] == "Percy, Applitools"
        assert error.candidates == []

    def test_state_error_message(self):
        error = CheckpointStateError("checkpoint_1_a", "deleted", "rolled_back")
        assert error.message == "Checkpoint checkpoint_1_a cannot go from deleted to rolled_back"
