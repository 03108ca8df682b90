"""Transform exceptions: parse failures and unsupported source files."""

from pathlib import Path
from typing import List, Optional

from .base import MigratorError


class TransformError(MigratorError):
    """Base class for transform errors. Non-fatal at the file boundary."""
    pass


class ParsingError(TransformError):
    """Raised when a source file cannot be parsed into a syntax tree."""

    def __init__(self, language: str, reason: str, filepath: Optional[Path] = None):
        details = {"language": language, "reason": reason}
        if filepath:
            details["filepath"] = str(filepath)
        super().__init__(f"Failed to parse {language} source", details=details)
        self.language = language
        self.reason = reason
        self.filepath = filepath


class UnsupportedLanguageError(TransformError):
    """Raised when no transform variant handles a file."""

    def __init__(self, language: str, supported_languages: List[str]):
        super().__init__(
            f"Unsupported language: {language}",
            details={"language": language, "supported": ", ".join(supported_languages)},
        )
        self.language = language
        self.supported_languages = supported_languages
