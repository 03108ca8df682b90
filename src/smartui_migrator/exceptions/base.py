"""Root of the migrator's exception tree.

Detection, transform, config and apply errors all derive from
``MigratorError``; the CLI catches it once and prints ``str(error)``.
"""

from typing import Dict, Optional


class MigratorError(Exception):
    """A failure the CLI reports as ``Error: <message> (key=value, ...)``.

    ``details`` carries the paths, platforms or checkpoint ids involved,
    kept apart from ``message`` so callers can read them without parsing.
    """

    def __init__(self, message: str, details: Optional[Dict[str, str]] = None):
        super().__init__(message)
        self.message = message
        self.details: Dict[str, str] = dict(details) if details else {}

    def __str__(self) -> str:
        if not self.details:
            return self.message
        context = ", ".join(f"{key}={value}" for key, value in self.details.items())
        return f"{self.message} ({context})"
