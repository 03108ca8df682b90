"""
Safe file operations for the SmartUI migrator.

Text is decoded with surrogateescape so any byte sequence survives a
read/write round trip unchanged. Writes go through a temp file and an atomic
replace.
"""

import fnmatch
import hashlib
import os
import re
import tempfile
from collections.abc import Iterable, Iterator
from functools import lru_cache
from pathlib import Path
from typing import Optional

from .exceptions import FileAccessError, WriteFailedError
from .mappings.patterns import IGNORE_FILES

ENCODING = "utf-8"
ERRORS = "surrogateescape"
_CHUNK_SIZE = 8192


def decode(data: bytes) -> str:
    return data.decode(ENCODING, ERRORS)


def encode(text: str) -> bytes:
    return text.encode(ENCODING, ERRORS)


def safe_read_file(filepath: Path, max_bytes: Optional[int] = None) -> str:
    """
    Read a file's text without newline translation.

    Args:
        filepath: File to read
        max_bytes: Refuse files larger than this

    Returns:
        File contents as string

    Raises:
        FileAccessError: If file cannot be read or is too large
    """
    try:
        if max_bytes is not None:
            size = filepath.stat().st_size
            if size > max_bytes:
                raise FileAccessError(filepath, f"File too large: {size} bytes (limit {max_bytes})")
        return decode(filepath.read_bytes())
    except FileAccessError:
        raise
    except OSError as e:
        raise FileAccessError(filepath, f"OS error: {e}")


def safe_write_file(filepath: Path, content: str) -> None:
    """
    Atomically replace a file's content, creating parent directories.

    Raises:
        WriteFailedError: If file cannot be written
    """
    tmp_name = None
    try:
        filepath.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(prefix=f".{filepath.name}.", suffix=".tmp", dir=filepath.parent)
        with os.fdopen(fd, "wb") as f:
            f.write(encode(content))
            f.flush()
            os.fsync(f.fileno())
        if filepath.exists():
            os.chmod(tmp_name, filepath.stat().st_mode & 0o7777)
        os.replace(tmp_name, filepath)
        tmp_name = None
    except (OSError, UnicodeError) as e:
        raise WriteFailedError(filepath, f"Write failed: {e}")
    finally:
        if tmp_name is not None and os.path.exists(tmp_name):
            os.unlink(tmp_name)


def sha256_text(content: str) -> str:
    return hashlib.sha256(encode(content)).hexdigest()


def sha256_file(filepath: Path) -> str:
    """SHA-256 of a file, read in chunks."""
    sha256 = hashlib.sha256()
    with open(filepath, "rb") as f:
        for chunk in iter(lambda: f.read(_CHUNK_SIZE), b""):
            sha256.update(chunk)
    return sha256.hexdigest()


def should_skip_file(name: str, exclude_patterns: Iterable[str] = IGNORE_FILES) -> bool:
    """Check a file name against exclusion globs (e.g. ``*.log``)."""
    return any(fnmatch.fnmatch(name, pattern) for pattern in exclude_patterns)


def walk_files(
    root_dir: Path,
    ignore_dirs: Iterable[str],
    allow_hidden: Iterable[str] = (".github", ".storybook", ".circleci", ".sauce"),
) -> Iterator[str]:
    """
    Yield project-relative POSIX paths of every file under root_dir.

    Ignored directories are pruned during the walk rather than filtered after,
    so dependency caches are never descended into. Hidden directories are
    skipped unless listed in allow_hidden. Symlinked directories are not
    followed.

    Raises:
        FileAccessError: If root_dir cannot be listed
    """
    ignored = set(ignore_dirs)
    hidden_ok = set(allow_hidden)

    def _on_error(err: OSError) -> None:
        if Path(err.filename or "") == root_dir:
            raise FileAccessError(root_dir, f"Directory scan failed: {err}")

    for dirpath, dirnames, filenames in os.walk(root_dir, onerror=_on_error):
        dirnames[:] = sorted(
            d
            for d in dirnames
            if d not in ignored and (not d.startswith(".") or d in hidden_ok)
        )
        rel_dir = Path(dirpath).relative_to(root_dir)
        for name in sorted(filenames):
            if should_skip_file(name):
                continue
            yield (rel_dir / name).as_posix()


@lru_cache(maxsize=512)
def glob_regex(pattern: str) -> re.Pattern[str]:
    """Translate a POSIX glob with ``**`` into an anchored regex.

    ``**/`` matches zero or more directories, ``*`` and ``?`` never cross ``/``.
    """
    out = []
    i = 0
    while i < len(pattern):
        if pattern.startswith("**/", i):
            out.append("(?:.*/)?")
            i += 3
        elif pattern.startswith("**", i):
            out.append(".*")
            i += 2
        elif pattern[i] == "*":
            out.append("[^/]*")
            i += 1
        elif pattern[i] == "?":
            out.append("[^/]")
            i += 1
        else:
            out.append(re.escape(pattern[i]))
            i += 1
    return re.compile("".join(out) + r"\Z")
