"""Per-language parser/printer adapter contract.

An adapter knows one grammar's node shapes: where calls and imports live,
how literals read and how values print. Everything else (matching against
the call-shape tables and choosing a rewrite) is done once, in the rewriter.
"""

from __future__ import annotations

import re
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Iterator, Optional

from ...models import CodeChange, Language
from ..edits import EditBuffer
from ..parser import Node, node_text
from ..values import Value

_IDENTIFIER = re.compile(r"^[A-Za-z_$][A-Za-z0-9_$]*$")


@dataclass
class CallSite:
    """A call expression with its callee split into receiver and method.

    receiver is None for a bare call, the last name segment for
    ``a.b.method()``, and "" when the receiver is not a plain reference.
    """

    node: Node
    receiver: Optional[str]
    method: str
    name_node: Node
    arguments: Node
    args: list[Node] = field(default_factory=list)
    kwargs: list[tuple[str, Node]] = field(default_factory=list)

    @property
    def line(self) -> int:
        return self.node.start_point[0] + 1


@dataclass
class Binding:
    """A variable holding a vendor object, e.g. ``Eyes eyes = new Eyes(runner)``."""

    name: str
    class_name: str
    driver: Optional[str]
    statement: Optional[Node]


@dataclass(frozen=True)
class ImportTable:
    """What the import rewrite needs for one platform."""

    modules: dict[str, str]
    symbols: dict[str, Optional[str]]
    target_symbol: Optional[str]


class LanguageAdapter(ABC):
    """Grammar-specific half of the transform engine."""

    language: Language
    grammar: str
    comment_prefix = "//"

    def __init__(self, grammar: Optional[str] = None) -> None:
        if grammar is not None:
            self.grammar = grammar

    # -- discovery ---------------------------------------------------------

    @abstractmethod
    def iter_calls(self, root: Node) -> Iterator[CallSite]:
        """Yield every call in document order."""

    @abstractmethod
    def find_bindings(self, root: Node, classes: frozenset[str]) -> list[Binding]:
        """Declarations and assignments whose value constructs one of `classes`."""

    @abstractmethod
    def rewrite_imports(self, root: Node, buffer: EditBuffer, table: ImportTable) -> list[CodeChange]:
        """Remap module references that exactly match the table."""

    def finalize(self, root: Node, buffer: EditBuffer, emitted: list[str]) -> list[CodeChange]:
        """Last-pass fixups once all rewrites are recorded."""
        return []

    # -- values ------------------------------------------------------------

    @abstractmethod
    def value(self, node: Node) -> Value:
        """Convert an expression node into a neutral value."""

    @abstractmethod
    def render(self, value: Value) -> str:
        """Print a neutral value as source text."""

    def render_options(self, options: dict) -> str:
        return self.render(options)

    def render_call(self, callee: str, args: list[str]) -> str:
        return f"{callee}({', '.join(args)})"

    def trailing_options(self, site: CallSite) -> tuple[list[Node], Optional[dict]]:
        """Split arguments into (leading positional nodes, options record)."""
        return list(site.args), None

    # -- statements --------------------------------------------------------

    @abstractmethod
    def statement_of(self, node: Node) -> Optional[Node]:
        """The statement consisting solely of this call (awaited or not)."""

    def removal_text(self, statement: Node, removing: frozenset[int] = frozenset()) -> str:
        """Replacement for a removed statement; empty deletes the line.

        removing holds the start offsets of every statement removed in this pass.
        """
        return ""

    def enclosing_statement(self, node: Node) -> Node:
        """Closest ancestor that is a statement, used as an insertion point."""
        current = node
        while current.parent is not None and not self.is_statement(current):
            current = current.parent
        return current

    @abstractmethod
    def is_statement(self, node: Node) -> bool: ...

    def comment(self, text: str) -> str:
        return f"{self.comment_prefix} {text}"

    # -- helpers -----------------------------------------------------------

    @staticmethod
    def text(node: Optional[Node]) -> str:
        return node_text(node) if node is not None else ""

    @staticmethod
    def is_identifier(text: str) -> bool:
        return bool(_IDENTIFIER.match(text))

    @staticmethod
    def line_of(node: Node) -> int:
        return node.start_point[0] + 1
