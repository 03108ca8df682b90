"""Language-neutral argument values.

Adapters convert literal syntax into plain Python values (str, int, float,
bool, None, list, dict) so that option remapping can work the same way for
every language. Anything that is not a literal keeps its source text.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Optional, Union


@dataclass(frozen=True)
class Opaque:
    """An expression the engine does not interpret; re-emitted verbatim."""

    text: str


@dataclass(frozen=True)
class Name:
    """A bare identifier or dotted reference such as ``Target`` or ``By``."""

    text: str


@dataclass(frozen=True)
class Invocation:
    """A method call, possibly one link of a fluent chain.

    ``Target.region("#hero").fully()`` is an Invocation of ``fully`` whose
    target is the Invocation of ``region`` whose target is ``Name("Target")``.
    """

    target: Any
    method: str
    args: tuple = ()
    text: str = field(default="", compare=False)

    def chain(self) -> tuple[Optional[str], list[tuple[str, tuple]]]:
        """Flatten into (root name, [(method, args), ...]) innermost first."""
        steps: list[tuple[str, tuple]] = []
        node: Any = self
        while isinstance(node, Invocation):
            steps.append((node.method, node.args))
            node = node.target
        steps.reverse()
        root = node.text if isinstance(node, Name) else None
        return root, steps


Value = Union[str, int, float, bool, None, list, dict, Opaque, Name, Invocation]

_BY_PREFIX = {
    "cssSelector": "",
    "id": "#",
    "className": ".",
    "tagName": "",
    "name": "",
}


def join_surrogates(text: str) -> Optional[str]:
    """Combine UTF-16 surrogate pairs produced by ``\\uXXXX`` escapes.

    Returns None when an unpaired surrogate is left, since such a string
    cannot be written back as UTF-8.
    """
    if not any("\ud800" <= c <= "\udfff" for c in text):
        return text
    try:
        return text.encode("utf-16", "surrogatepass").decode("utf-16")
    except UnicodeDecodeError:
        return None


def is_literal(value: Value) -> bool:
    return not isinstance(value, (Opaque, Name, Invocation))


def source_text(value: Value) -> str:
    """Best-effort text for messages."""
    if isinstance(value, (Opaque, Name)):
        return value.text
    if isinstance(value, Invocation):
        return value.text or value.method
    return repr(value)


def selector_of(value: Value) -> Optional[str]:
    """Resolve a region reference to a CSS selector, or None.

    Accepts plain strings, ``{"selector": ...}`` objects and Selenium
    ``By.cssSelector/id/className`` locators.
    """
    if isinstance(value, str):
        return value
    if isinstance(value, dict):
        sel = value.get("selector")
        kind = value.get("type", "css")
        if isinstance(sel, str) and kind == "css":
            return sel
        return None
    if isinstance(value, Invocation):
        root, steps = value.chain()
        if root == "By" and len(steps) == 1:
            method, args = steps[0]
            prefix = _BY_PREFIX.get(method)
            if prefix is not None and len(args) == 1 and isinstance(args[0], str):
                if method == "name":
                    return f'[name="{args[0]}"]'
                return prefix + args[0]
    return None


def selectors_from(value: Value) -> tuple[list[str], list[Value]]:
    """Split a single region or a list of regions into (resolved, unresolved)."""
    items = value if isinstance(value, list) else [value]
    resolved: list[str] = []
    unresolved: list[Value] = []
    for item in items:
        sel = selector_of(item)
        if sel is None:
            unresolved.append(item)
        else:
            resolved.append(sel)
    return resolved, unresolved
