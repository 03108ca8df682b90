"""Byte-range edits over the original source.

Edits are recorded against the untouched source and applied back to front,
so node offsets from a single parse stay valid for the whole rewrite.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class Edit:
    start: int
    end: int
    text: bytes
    seq: int

    @property
    def is_insert(self) -> bool:
        return self.start == self.end


class EditBuffer:
    """Collects non-overlapping edits and applies them in one pass."""

    def __init__(self, source: bytes) -> None:
        self.source = source
        self._edits: list[Edit] = []

    def __len__(self) -> int:
        return len(self._edits)

    def overlaps(self, start: int, end: int) -> bool:
        for edit in self._edits:
            if start == end:
                if edit.start < start < edit.end:
                    return True
            elif edit.is_insert:
                if start < edit.start < end:
                    return True
            elif start < edit.end and edit.start < end:
                return True
        return False

    def replace(self, start: int, end: int, text: str) -> bool:
        """Record a replacement; returns False if it collides with an earlier edit."""
        if self.overlaps(start, end):
            return False
        self._edits.append(Edit(start, end, text.encode("utf-8", "surrogateescape"), len(self._edits)))
        return True

    def insert(self, pos: int, text: str) -> bool:
        return self.replace(pos, pos, text)

    def delete_statement(self, start: int, end: int, replacement: str = "") -> bool:
        """Remove a statement, taking its whole line(s) when nothing else shares them."""
        if replacement:
            return self.replace(start, end, replacement)
        s, e = statement_span(self.source, start, end)
        return self.replace(s, e, "")

    def apply(self) -> bytes:
        # Back to front. At one offset the replacement goes first so that
        # insertions land in front of it, and insertions keep their order.
        ordered = sorted(self._edits, key=lambda ed: (ed.start, not ed.is_insert, ed.seq), reverse=True)
        out = self.source
        for edit in ordered:
            out = out[: edit.start] + edit.text + out[edit.end :]
        return out


def line_start(source: bytes, pos: int) -> int:
    return source.rfind(b"\n", 0, pos) + 1


def line_end(source: bytes, pos: int) -> int:
    """Offset just past the newline that ends the line containing pos."""
    nl = source.find(b"\n", pos)
    return len(source) if nl == -1 else nl + 1


def indentation_at(source: bytes, pos: int) -> str:
    start = line_start(source, pos)
    prefix = source[start:pos]
    indent = prefix[: len(prefix) - len(prefix.lstrip(b" \t"))]
    return indent.decode("utf-8", "surrogateescape")


def statement_span(source: bytes, start: int, end: int) -> tuple[int, int]:
    """Widen [start, end) to full lines if only whitespace surrounds it."""
    ls = line_start(source, start)
    if source[ls:start].strip(b" \t"):
        return start, end
    le = line_end(source, end)
    tail = source[end:le].rstrip(b"\r\n")
    if tail.strip(b" \t"):
        return start, end
    return ls, le
