"""Syntax transform engine.

One closed set of source dialects, each bound to a variant implementing the
same contract:

    variant.transform(source, platform, framework) -> TransformOutcome

Tree-based variants share one rewriter; only the grammar adapter differs.
A parse or rewrite failure never raises: the file comes back unchanged with a
warning.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Optional, Union

from ..exceptions import UnsupportedLanguageError
from ..file_ops import decode, encode, safe_read_file
from ..logging_config import get_logger
from ..mappings.api import (
    API_RULES,
    JS_TARGET_SYMBOL,
    PARSE_FAILURE,
    PARSE_FAILURE_DETAILS,
    PYTHON_TARGET_SYMBOL,
    REWRITE_FAILURE,
    REWRITE_FAILURE_DETAILS,
    snapshot_target,
)
from ..mappings.dependencies import (
    JAVA_IMPORT_MAPPINGS,
    JS_SYMBOL_RENAMES,
    NPM_PACKAGE_MAPPINGS,
    PYTHON_MODULE_MAPPINGS,
    PYTHON_SYMBOL_RENAMES,
)
from ..models import CodeChange, Framework, Language, Platform, TransformationWarning, TransformedFile
from .adapters import JavaAdapter, JavaScriptAdapter, LanguageAdapter, PythonAdapter, TsxAdapter, TypeScriptAdapter
from .adapters.base import ImportTable
from .parser import TreeSitterParser, first_error
from .rewriter import Rewriter
from .robot import transform_robot

logger = get_logger(__name__)


class SourceDialect(Enum):
    JAVASCRIPT = "javascript"
    TYPESCRIPT = "typescript"
    TSX = "tsx"
    PYTHON = "python"
    JAVA = "java"
    ROBOT = "robot"


DIALECT_BY_EXTENSION: dict[str, SourceDialect] = {
    ".js": SourceDialect.JAVASCRIPT,
    ".jsx": SourceDialect.JAVASCRIPT,
    ".mjs": SourceDialect.JAVASCRIPT,
    ".cjs": SourceDialect.JAVASCRIPT,
    ".ts": SourceDialect.TYPESCRIPT,
    ".mts": SourceDialect.TYPESCRIPT,
    ".cts": SourceDialect.TYPESCRIPT,
    ".tsx": SourceDialect.TSX,
    ".py": SourceDialect.PYTHON,
    ".java": SourceDialect.JAVA,
    ".robot": SourceDialect.ROBOT,
}


def dialect_for(path: Union[str, Path]) -> SourceDialect:
    """Pick the dialect from a file extension.

    Raises:
        UnsupportedLanguageError: If the extension is not handled
    """
    suffix = Path(path).suffix.lower()
    dialect = DIALECT_BY_EXTENSION.get(suffix)
    if dialect is None:
        raise UnsupportedLanguageError(suffix or str(path), sorted(DIALECT_BY_EXTENSION))
    return dialect


@dataclass
class TransformOutcome:
    content: str
    warnings: list[TransformationWarning] = field(default_factory=list)
    snapshot_count: int = 0
    changes: list[CodeChange] = field(default_factory=list)


class TransformVariant(ABC):
    """Shared contract for every dialect."""

    dialect: SourceDialect
    label: str

    @abstractmethod
    def transform(self, source: str, platform: Platform, framework: Framework) -> TransformOutcome: ...


def _import_table(language: Language, platform: Platform, framework: Framework) -> ImportTable:
    if language is Language.JAVASCRIPT:
        callee = snapshot_target(language, framework).callee
        target = JS_TARGET_SYMBOL if callee == JS_TARGET_SYMBOL else None
        return ImportTable(NPM_PACKAGE_MAPPINGS.get(platform, {}), JS_SYMBOL_RENAMES.get(platform, {}), target)
    if language is Language.PYTHON:
        return ImportTable(
            PYTHON_MODULE_MAPPINGS.get(platform, {}), PYTHON_SYMBOL_RENAMES.get(platform, {}), PYTHON_TARGET_SYMBOL
        )
    return ImportTable(JAVA_IMPORT_MAPPINGS.get(platform, {}), {}, None)


class TreeVariant(TransformVariant):
    """Parse with tree-sitter, rewrite through a grammar adapter."""

    def __init__(self, dialect: SourceDialect, adapter: LanguageAdapter, label: str, parser: TreeSitterParser) -> None:
        self.dialect = dialect
        self.adapter = adapter
        self.label = label
        self._parser = parser

    def transform(self, source: str, platform: Platform, framework: Framework) -> TransformOutcome:
        rules = API_RULES.get((platform, self.adapter.language))
        if rules is None:
            return TransformOutcome(source)
        raw = encode(source)
        tree = self._parser.parse(raw, self.adapter.grammar)
        error = first_error(tree.root_node)
        if error is not None:
            where = f"line {error.start_point[0] + 1}, column {error.start_point[1] + 1}"
            reason = f"unexpected `{decode(error.text or b'')[:40]}` at {where}" if error.text else f"syntax error at {where}"
            logger.debug(f"{self.label}: parse failure: {reason}")
            warning = TransformationWarning(
                PARSE_FAILURE.format(reason=reason), PARSE_FAILURE_DETAILS, line=error.start_point[0] + 1
            )
            return TransformOutcome(source, [warning])
        table = _import_table(self.adapter.language, platform, framework)
        try:
            result = Rewriter(self.adapter, rules, framework, table).rewrite(raw, tree.root_node)
        except Exception as e:
            logger.warning(f"{self.label}: rewrite failed: {type(e).__name__}: {e}")
            warning = TransformationWarning(REWRITE_FAILURE.format(reason=f"{type(e).__name__}: {e}"), REWRITE_FAILURE_DETAILS)
            return TransformOutcome(source, [warning])
        return TransformOutcome(decode(result.source), result.warnings, result.snapshot_count, result.changes)


class RobotVariant(TransformVariant):
    dialect = SourceDialect.ROBOT
    label = "Robot Framework"

    def transform(self, source: str, platform: Platform, framework: Framework) -> TransformOutcome:
        content, changes, warnings, count = transform_robot(source, platform)
        return TransformOutcome(content, warnings, count, changes)


def build_variants(parser: Optional[TreeSitterParser] = None) -> dict[SourceDialect, TransformVariant]:
    parser = parser or TreeSitterParser()
    return {
        SourceDialect.JAVASCRIPT: TreeVariant(SourceDialect.JAVASCRIPT, JavaScriptAdapter(), "JavaScript", parser),
        SourceDialect.TYPESCRIPT: TreeVariant(SourceDialect.TYPESCRIPT, TypeScriptAdapter(), "TypeScript", parser),
        SourceDialect.TSX: TreeVariant(SourceDialect.TSX, TsxAdapter(), "TypeScript", parser),
        SourceDialect.PYTHON: TreeVariant(SourceDialect.PYTHON, PythonAdapter(), "Python", parser),
        SourceDialect.JAVA: TreeVariant(SourceDialect.JAVA, JavaAdapter(), "Java", parser),
        SourceDialect.ROBOT: RobotVariant(),
    }


class SyntaxTransformEngine:
    """Entry point: routes sources to the variant for their dialect.

    Example:
        >>> engine = SyntaxTransformEngine()
        >>> out = engine.transform("percySnapshot(page, 'Home')", Platform.PERCY,
        ...                        Framework.PLAYWRIGHT, SourceDialect.JAVASCRIPT)
        >>> out.content
        "smartuiSnapshot(page, 'Home')"
    """

    def __init__(self, parser: Optional[TreeSitterParser] = None) -> None:
        self.variants = build_variants(parser)

    def variant(self, dialect: SourceDialect) -> TransformVariant:
        return self.variants[dialect]

    def transform(
        self, source: str, platform: Platform, framework: Framework, dialect: SourceDialect
    ) -> TransformOutcome:
        return self.variants[dialect].transform(source, platform, framework)

    def transform_file(
        self,
        path: Union[str, Path],
        platform: Platform,
        framework: Framework,
        display_path: Optional[str] = None,
        max_bytes: Optional[int] = None,
    ) -> TransformedFile:
        """Read and transform one file; warnings carry `display_path`.

        Raises:
            UnsupportedLanguageError: For an extension no variant handles
            FileAccessError: If the file cannot be read
        """
        dialect = dialect_for(path)
        name = display_path or str(path)
        source = safe_read_file(Path(path), max_bytes=max_bytes)
        variant = self.variants[dialect]
        outcome = variant.transform(source, platform, framework)
        logger.debug(f"{name}: {outcome.snapshot_count} snapshot(s), {len(outcome.warnings)} warning(s)")
        return TransformedFile(
            original_path=name,
            content=outcome.content,
            changes=outcome.changes,
            warnings=[w.with_file(name) for w in outcome.warnings],
            snapshot_count=outcome.snapshot_count,
            variant=variant.label,
            modified=outcome.content != source,
        )


__all__ = [
    "DIALECT_BY_EXTENSION",
    "SourceDialect",
    "SyntaxTransformEngine",
    "TransformOutcome",
    "TransformVariant",
    "dialect_for",
]
