"""Glob pattern sets used to collect a project's files.

Patterns are POSIX globs relative to the project root. `**/` matches zero or
more directories.
"""

from __future__ import annotations

from ..models import Framework, Language
from .dependencies import ECOSYSTEM_LANGUAGE, ECOSYSTEM_MANIFEST

IGNORE_DIRS: frozenset[str] = frozenset(
    {
        ".git",
        ".hg",
        ".svn",
        "node_modules",
        "dist",
        "build",
        "out",
        ".next",
        "coverage",
        ".nyc_output",
        "target",
        "__pycache__",
        ".venv",
        "venv",
        ".tox",
        ".smartui-backup",
        ".smartui-checkpoints",
    }
)

IGNORE_FILES: tuple[str, ...] = ("*.log", ".DS_Store", "*.min.js")

_JS_EXTS = ("js", "jsx", "ts", "tsx")


def _js(prefix: str, exts: tuple[str, ...] = _JS_EXTS) -> tuple[str, ...]:
    return tuple(f"{prefix}.{ext}" for ext in exts)


_JAVA_TESTS = ("src/**/*.java", "test/**/*.java", "**/*Test.java", "**/*Tests.java")
_PYTHON_TESTS = ("**/test_*.py", "**/*_test.py", "tests/**/*.py", "test/**/*.py")
_JS_TESTS = (
    *_js("test/**/*"),
    *_js("tests/**/*"),
    *_js("**/*.spec"),
    *_js("**/*.test"),
)

SOURCE_PATTERNS: dict[tuple[Framework, Language], tuple[str, ...]] = {
    (Framework.CYPRESS, Language.JAVASCRIPT): _js("cypress/**/*"),
    (Framework.PLAYWRIGHT, Language.JAVASCRIPT): (
        *_js("tests/**/*"),
        *_js("e2e/**/*"),
        *_js("**/*.spec"),
        *_js("**/*.test"),
    ),
    (Framework.STORYBOOK, Language.JAVASCRIPT): (
        *_js(".storybook/**/*"),
        *_js("stories/**/*"),
        *_js("**/*.stories"),
    ),
    (Framework.SELENIUM, Language.JAVASCRIPT): _JS_TESTS,
    (Framework.APPIUM, Language.JAVASCRIPT): _JS_TESTS,
    (Framework.SELENIUM, Language.JAVA): _JAVA_TESTS,
    (Framework.APPIUM, Language.JAVA): _JAVA_TESTS,
    (Framework.SELENIUM, Language.PYTHON): _PYTHON_TESTS,
    (Framework.APPIUM, Language.PYTHON): _PYTHON_TESTS,
    (Framework.ROBOT_FRAMEWORK, Language.PYTHON): ("**/*.robot", *_PYTHON_TESTS),
}

CI_PATTERNS: tuple[str, ...] = (
    ".github/workflows/*.yml",
    ".github/workflows/*.yaml",
    ".gitlab-ci.yml",
    "Jenkinsfile",
    "azure-pipelines.yml",
    ".circleci/config.yml",
    "bitbucket-pipelines.yml",
)

PACKAGE_PATTERNS: dict[Language, tuple[str, ...]] = {
    language: (ECOSYSTEM_MANIFEST[eco],) for eco, language in ECOSYSTEM_LANGUAGE.items()
}

# Structural hints for tier-2 framework inference, checked in order
FRAMEWORK_HINTS: tuple[tuple[Framework, tuple[str, ...]], ...] = (
    (Framework.CYPRESS, ("cypress/**/*", "cypress.json", *_js("cypress.config", ("js", "ts", "mjs", "cjs")))),
    (Framework.PLAYWRIGHT, _js("playwright.config", ("js", "ts", "mjs", "cjs"))),
    (Framework.STORYBOOK, (".storybook/*",)),
    (Framework.ROBOT_FRAMEWORK, ("**/*.robot",)),
)

DEFAULT_FRAMEWORK: dict[Language, Framework] = {
    Language.JAVASCRIPT: Framework.PLAYWRIGHT,
    Language.JAVA: Framework.SELENIUM,
    Language.PYTHON: Framework.SELENIUM,
}

# Marker files for tier-2 language inference, checked in order
LANGUAGE_MARKERS: tuple[tuple[Language, tuple[str, ...]], ...] = (
    (Language.JAVA, ("pom.xml", "build.gradle", "build.gradle.kts")),
    (Language.PYTHON, ("requirements.txt", "pyproject.toml", "setup.py")),
)


def source_patterns(framework: Framework, language: Language) -> tuple[str, ...]:
    """Source globs for a framework/language pair, falling back to the language's tests."""
    patterns = SOURCE_PATTERNS.get((framework, language))
    if patterns is not None:
        return patterns
    if language is Language.JAVA:
        return _JAVA_TESTS
    if language is Language.PYTHON:
        return _PYTHON_TESTS
    return _JS_TESTS

# Extensions handled by the transform engine, per language
SOURCE_EXTENSIONS: dict[Language, tuple[str, ...]] = {
    Language.JAVASCRIPT: (".js", ".jsx", ".mjs", ".cjs", ".ts", ".tsx", ".mts", ".cts"),
    Language.PYTHON: (".py", ".robot"),
    Language.JAVA: (".java",),
}
