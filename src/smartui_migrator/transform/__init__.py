"""Syntax-tree based rewriting of vendor visual-testing calls."""

from .engine import DIALECT_BY_EXTENSION, SourceDialect, SyntaxTransformEngine, TransformOutcome, dialect_for
from .parser import TreeSitterParser

__all__ = [
    "DIALECT_BY_EXTENSION",
    "SourceDialect",
    "SyntaxTransformEngine",
    "TransformOutcome",
    "TreeSitterParser",
    "dialect_for",
]
