"""Robot Framework keyword tables.

Robot files have no expression grammar to parse; the structural unit is the
keyword cell of a test or keyword row. Cells are separated by two or more
spaces, a tab, or a pipe in the pipe-separated format.
"""

from __future__ import annotations

import re

from ..mappings.api import (
    REMOVE_NOT_STATEMENT,
    REMOVE_NOT_STATEMENT_DETAILS,
    ROBOT_KEYWORD_REMOVALS,
    ROBOT_KEYWORD_RENAMES,
)
from ..models import CodeChange, Platform, TransformationWarning

_CELL = re.compile(r"[^\s|](?:[^\S\t\r\n]?[^\s|])*")
_ASSIGNMENT = re.compile(r"^[$@&]\{[^}]*\}\s*=?$")
_SETTING_HOOKS = frozenset({"suitesetup", "suiteteardown", "testsetup", "testteardown", "tasksetup", "taskteardown"})

UNSUPPORTED_PLATFORM = "Robot Framework transformation is not implemented for {platform}."
UNSUPPORTED_PLATFORM_DETAILS = "Only Sauce Labs Visual Robot Framework files are supported."


def normalize_keyword(name: str) -> str:
    """Robot matches keywords case-, space- and underscore-insensitively."""
    return re.sub(r"[\s_]", "", name).lower()


def split_cells(line: str) -> list[tuple[int, int, str]]:
    """(start, end, text) for each data cell, stopping at a comment."""
    cells = []
    for m in _CELL.finditer(line):
        if m.group().startswith("#"):
            break
        cells.append((m.start(), m.end(), m.group()))
    return cells


def transform_robot(source: str, platform: Platform):
    """Rewrite vendor keywords. Returns (content, changes, warnings, snapshot_count)."""
    renames = {normalize_keyword(k): v for k, v in ROBOT_KEYWORD_RENAMES.get(platform, {}).items()}
    removals = {normalize_keyword(k) for k in ROBOT_KEYWORD_REMOVALS.get(platform, frozenset())}
    if not renames and not removals:
        return source, [], [TransformationWarning(UNSUPPORTED_PLATFORM.format(platform=platform.value),
                                                  UNSUPPORTED_PLATFORM_DETAILS)], 0

    changes: list[CodeChange] = []
    warnings: list[TransformationWarning] = []
    count = 0
    section = ""
    out: list[str] = []
    for lineno, line in enumerate(source.splitlines(keepends=True), start=1):
        stripped = line.strip()
        if stripped.startswith("*"):
            section = normalize_keyword(stripped.strip("* "))
            out.append(line)
            continue
        if section in ("variables", "comments", ""):
            out.append(line)
            continue
        cells = split_cells(line)
        body_row = line[:1] in (" ", "\t") or line.startswith("| ")
        keyword_at = 0
        if section == "settings":
            keyword_at = 1 if cells and normalize_keyword(cells[0][2]) in _SETTING_HOOKS else -1
        elif body_row:
            while keyword_at < len(cells) and _ASSIGNMENT.match(cells[keyword_at][2]):
                keyword_at += 1
        else:
            # test or keyword name row; a body may follow on the same line
            keyword_at = 1
        new_line = line
        removed = False
        for index in range(len(cells) - 1, -1, -1):
            start, end, text = cells[index]
            key = normalize_keyword(text)
            if key in removals:
                if index == keyword_at:
                    removed = True
                    changes.append(CodeChange("remove", stripped, "", lineno, f"Remove `{text}` keyword"))
                else:
                    warnings.append(TransformationWarning(
                        REMOVE_NOT_STATEMENT.format(text=text), REMOVE_NOT_STATEMENT_DETAILS, line=lineno))
            elif key in renames and index >= max(keyword_at, 0):
                replacement = renames[key]
                new_line = new_line[:start] + replacement + new_line[end:]
                count += 1
                changes.append(CodeChange("rename", text, replacement, lineno, f"Rename `{text}` to `{replacement}`"))
        if not removed:
            out.append(new_line)
    return "".join(out), changes, warnings, count
