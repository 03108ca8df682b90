"""Static mapping tables from source-platform identifiers to SmartUI equivalents."""

from .api import (
    API_RULES,
    DEFAULT_SNAPSHOT_NAME,
    OPTION_RULES,
    CallShape,
    NestedOption,
    OptionRules,
    PlatformRules,
    SnapshotTarget,
    Strategy,
    option_key,
    rules_for,
    snapshot_target,
    visibility_assertion,
)
from .dependencies import (
    CONFIG_FILES,
    ENV_VAR_MAPPINGS,
    GENERATED_ARTIFACTS,
    JAVA_IMPORT_MAPPINGS,
    MAVEN_PACKAGE_MAPPINGS,
    MIGRATION_VERSION,
    NPM_PACKAGE_MAPPINGS,
    PIP_PACKAGE_MAPPINGS,
    PYTHON_MODULE_MAPPINGS,
    SIGNATURES,
    SMARTUI_CONFIG_FILE,
    STORYBOOK_COMMAND_MAPPINGS,
    Signature,
)
from .patterns import CI_PATTERNS, IGNORE_DIRS, PACKAGE_PATTERNS, source_patterns

__all__ = [
    "API_RULES",
    "CI_PATTERNS",
    "CONFIG_FILES",
    "DEFAULT_SNAPSHOT_NAME",
    "ENV_VAR_MAPPINGS",
    "GENERATED_ARTIFACTS",
    "IGNORE_DIRS",
    "JAVA_IMPORT_MAPPINGS",
    "MAVEN_PACKAGE_MAPPINGS",
    "MIGRATION_VERSION",
    "NPM_PACKAGE_MAPPINGS",
    "OPTION_RULES",
    "PACKAGE_PATTERNS",
    "PIP_PACKAGE_MAPPINGS",
    "PYTHON_MODULE_MAPPINGS",
    "SIGNATURES",
    "SMARTUI_CONFIG_FILE",
    "STORYBOOK_COMMAND_MAPPINGS",
    "CallShape",
    "NestedOption",
    "OptionRules",
    "PlatformRules",
    "Signature",
    "SnapshotTarget",
    "Strategy",
    "option_key",
    "rules_for",
    "snapshot_target",
    "source_patterns",
    "visibility_assertion",
]
