"""Configuration loading and management for the SmartUI migrator.

Configuration sources are merged in priority order:
    1. Defaults (defined in MigrationConfig)
    2. Global config (~/.smartui-migrator.toml)
    3. Project config (./smartui-migrator.toml)
    4. Explicit config file
    5. Environment variables (SMARTUI_MIGRATOR_* prefix)
    6. CLI overrides (passed as kwargs)

Example:
    >>> config = load_config(workers=2)
    >>> config.worker_count
    2
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Literal, Optional, get_type_hints

from .exceptions import ConfigurationError
from .mappings import IGNORE_DIRS

Verbosity = Literal["quiet", "normal", "verbose"]

ENV_PREFIX = "SMARTUI_MIGRATOR_"
CONFIG_FILENAME = "smartui-migrator.toml"

# Default worker count: use CPU count, capped at 8 to avoid overwhelming I/O
_DEFAULT_WORKERS = min(os.cpu_count() or 4, 8)


@dataclass(frozen=True)
class MigrationConfig:
    """Settings shared by detection, dry-run, checkpoint and apply.

    Attributes:
        workers: Worker threads for per-file work (None = auto)
        write_workers: Worker threads for the apply write phase
        checkpoint_dir: Checkpoint store, relative to the project root
        max_file_size_mb: Larger source files are skipped with a warning
        create_backup: Take a checkpoint before writing
        verify_checksums: Re-hash restored files during rollback
        extra_ignore_dirs: Directory names pruned in addition to the defaults
        verbosity: Output level for the CLI
    """

    workers: Optional[int] = None
    write_workers: int = 1
    checkpoint_dir: str = ".smartui-checkpoints"
    max_file_size_mb: float = 5.0
    create_backup: bool = True
    verify_checksums: bool = True
    extra_ignore_dirs: list[str] = field(default_factory=list)
    verbosity: Verbosity = "normal"

    def __post_init__(self) -> None:
        """Validate configuration after initialization."""
        if self.workers is not None and self.workers < 1:
            raise ValueError("workers must be at least 1")
        if self.write_workers < 1:
            raise ValueError("write_workers must be at least 1")
        if self.max_file_size_mb <= 0:
            raise ValueError("max_file_size_mb must be positive")
        if not self.checkpoint_dir or Path(self.checkpoint_dir).is_absolute():
            raise ValueError("checkpoint_dir must be a relative directory name")
        if self.verbosity not in ("quiet", "normal", "verbose"):
            raise ValueError("verbosity must be quiet, normal or verbose")

    @property
    def max_file_size_bytes(self) -> int:
        """Get max file size in bytes."""
        return int(self.max_file_size_mb * 1024 * 1024)

    @property
    def worker_count(self) -> int:
        return self.workers or _DEFAULT_WORKERS

    @property
    def ignore_dirs(self) -> frozenset[str]:
        """Default ignore set plus the checkpoint store and user additions."""
        return IGNORE_DIRS | {Path(self.checkpoint_dir).parts[0]} | set(self.extra_ignore_dirs)


default_config = MigrationConfig()


def load_config(config_file: Optional[Path] = None, **overrides) -> MigrationConfig:
    """Load configuration with auto-discovery and merging.

    Args:
        config_file: Optional explicit config file path
        **overrides: Direct overrides (typically from CLI flags); None values are ignored

    Returns:
        Validated MigrationConfig instance

    Raises:
        ConfigurationError: If a config file is invalid or missing
    """
    merged: dict = {}

    global_config = Path.home() / f".{CONFIG_FILENAME}"
    if global_config.exists():
        merged.update(_load_toml_section(global_config))

    project_config = Path.cwd() / CONFIG_FILENAME
    if project_config.exists():
        merged.update(_load_toml_section(project_config))

    if config_file is not None:
        if not config_file.exists():
            raise ConfigurationError(f"Config file not found: {config_file}")
        merged.update(_load_toml_section(config_file))

    merged.update(_load_env_vars())

    if overrides.pop("verbose", False):
        overrides["verbosity"] = "verbose"
    if overrides.pop("quiet", False):
        overrides["verbosity"] = "quiet"
    merged.update({k: v for k, v in overrides.items() if v is not None})

    try:
        return MigrationConfig(**merged)
    except TypeError as e:
        # Unknown field in config
        raise ConfigurationError(f"Invalid configuration: {e}")
    except ValueError as e:
        raise ConfigurationError(f"Invalid configuration: {e}")


def _load_env_vars() -> dict[str, Any]:
    """Load configuration from SMARTUI_MIGRATOR_* environment variables.

    Supported environment variables:
        SMARTUI_MIGRATOR_WORKERS: int
        SMARTUI_MIGRATOR_WRITE_WORKERS: int
        SMARTUI_MIGRATOR_CHECKPOINT_DIR: str
        SMARTUI_MIGRATOR_MAX_FILE_SIZE_MB: float
        SMARTUI_MIGRATOR_CREATE_BACKUP: bool (true/false/1/0)
        SMARTUI_MIGRATOR_VERIFY_CHECKSUMS: bool
        SMARTUI_MIGRATOR_VERBOSITY: quiet/normal/verbose

    Returns:
        Dict of field_name -> parsed_value for any variables found.
    """
    type_hints = get_type_hints(MigrationConfig)

    result: dict[str, Any] = {}

    for field_name in MigrationConfig.__dataclass_fields__:
        env_key = f"{ENV_PREFIX}{field_name.upper()}"
        env_value = os.environ.get(env_key)

        if env_value is None:
            continue

        type_hint = type_hints.get(field_name)
        if type_hint is None:
            continue

        try:
            parsed = _parse_env_value(env_value, type_hint)
            if parsed is not None:
                result[field_name] = parsed
        except ValueError as e:
            raise ConfigurationError(f"Invalid {env_key}: {e}")

    return result


def _parse_env_value(value: str, type_hint: Any) -> Any:
    """Parse environment variable string to the correct type.

    Returns:
        Parsed value or None if the type is not settable from the environment

    Raises:
        ValueError: If value can't be parsed to expected type
    """
    origin = getattr(type_hint, "__origin__", None)

    # Optional[X] is Union[X, None]
    args = getattr(type_hint, "__args__", ())
    if type(None) in args:
        non_none_types = [t for t in args if t is not type(None)]
        if non_none_types:
            type_hint = non_none_types[0]
            origin = getattr(type_hint, "__origin__", None)

    # Comma-separated lists
    if origin is list:
        return [item.strip() for item in value.split(",") if item.strip()]

    if type_hint is bool:
        lower = value.lower()
        if lower in ("true", "1", "yes", "on"):
            return True
        elif lower in ("false", "0", "no", "off"):
            return False
        else:
            raise ValueError(f"expected true/false, got '{value}'")

    if type_hint is int:
        return int(value)

    if type_hint is float:
        return float(value)

    if type_hint is str or origin is Literal:
        return value

    return None


def _load_toml_section(path: Path) -> dict:
    """Load a TOML file; a [smartui-migrator] table wins over top-level keys."""
    try:
        data = _load_toml_file(path)
    except ConfigurationError:
        raise
    except Exception as e:
        raise ConfigurationError(f"Invalid config file '{path}': {e}")
    section = data.get("smartui-migrator")
    if isinstance(section, dict):
        return dict(section)
    return data


def _load_toml_file(path: Path) -> dict:
    """Load TOML file and return parsed dict.

    Raises:
        ConfigurationError: If tomllib/tomli not available
        Exception: If TOML parsing fails
    """
    try:
        # Python 3.11+ has tomllib in stdlib
        import tomllib
    except ModuleNotFoundError:
        try:
            # Fallback to tomli for Python 3.9-3.10
            import tomli as tomllib  # type: ignore
        except ImportError:
            raise ConfigurationError(
                "TOML support requires Python 3.11+ or 'tomli' package. "
                "Install with: pip install tomli"
            )

    with open(path, "rb") as f:
        return tomllib.load(f)
