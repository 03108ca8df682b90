"""Tree-sitter parser wrapper.

Provides a unified interface for tree-sitter parsing across the grammars the
transform engine needs. Parsers are kept per thread; languages are shared.

Usage:
    parser = TreeSitterParser()
    tree = parser.parse(code_bytes, "python")
"""

from __future__ import annotations

import threading
from typing import Any

import tree_sitter
import tree_sitter_java
import tree_sitter_javascript
import tree_sitter_python
import tree_sitter_typescript

from ..exceptions import UnsupportedLanguageError

# grammar name -> (module, language function)
_GRAMMARS: dict[str, tuple[Any, str]] = {
    "javascript": (tree_sitter_javascript, "language"),
    "typescript": (tree_sitter_typescript, "language_typescript"),
    "tsx": (tree_sitter_typescript, "language_tsx"),
    "python": (tree_sitter_python, "language"),
    "java": (tree_sitter_java, "language"),
}

Node = tree_sitter.Node
Tree = tree_sitter.Tree


def get_supported_languages() -> list[str]:
    """Get list of grammar names the parser can load."""
    return list(_GRAMMARS)


class TreeSitterParser:
    """Wrapper around tree-sitter for multi-language parsing."""

    def __init__(self) -> None:
        self._languages: dict[str, tree_sitter.Language] = {}
        self._lock = threading.Lock()
        self._local = threading.local()

    def language(self, name: str) -> tree_sitter.Language:
        """Load (once) and return the grammar for `name`.

        Raises:
            UnsupportedLanguageError: If no grammar is registered under `name`
        """
        lang = self._languages.get(name)
        if lang is not None:
            return lang
        if name not in _GRAMMARS:
            raise UnsupportedLanguageError(name, get_supported_languages())
        with self._lock:
            if name not in self._languages:
                module, fn_name = _GRAMMARS[name]
                # tree-sitter >= 0.23 returns PyCapsule; wrap in Language()
                self._languages[name] = tree_sitter.Language(getattr(module, fn_name)())
            return self._languages[name]

    def _parser(self, name: str) -> tree_sitter.Parser:
        parsers: dict[str, tree_sitter.Parser] = getattr(self._local, "parsers", None) or {}
        if not parsers:
            self._local.parsers = parsers
        parser = parsers.get(name)
        if parser is None:
            parser = tree_sitter.Parser(self.language(name))
            parsers[name] = parser
        return parser

    def parse(self, code: bytes, language: str) -> Tree:
        """Parse code and return its syntax tree.

        Tree-sitter never rejects input; malformed code yields a tree whose
        root reports ``has_error``.
        """
        return self._parser(language).parse(code)


def walk(node: Node):
    """Yield node and all descendants in document order."""
    stack = [node]
    while stack:
        current = stack.pop()
        yield current
        stack.extend(reversed(current.children))


def node_text(node: Node) -> str:
    return (node.text or b"").decode("utf-8", "surrogateescape")


def first_error(node: Node) -> Node | None:
    """The first ERROR or MISSING node in document order, if any."""
    if not node.has_error:
        return None
    for child in walk(node):
        if child.type == "ERROR" or child.is_missing:
            return child
    return node
