"""Config, package-manifest and CI transforms used by dry-run and apply."""

from .config_transformer import ConfigParseError, ConfigResult, ConfigTransformer, parse_config
from .execution_transformer import ExecutionResult, ExecutionTransformer, rewrite_command

__all__ = [
    "ConfigParseError",
    "ConfigResult",
    "ConfigTransformer",
    "ExecutionResult",
    "ExecutionTransformer",
    "parse_config",
    "rewrite_command",
]
