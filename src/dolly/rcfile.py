"""Managed attach aliases in shell RC files."""
import logging
import re
from pathlib import Path
from typing import List

from .errors import RcFileError
from .utils import expand_tilde

logger = logging.getLogger(__name__)

MARKER = "dolly-managed:"
ALIAS_SUFFIX = "dolly"
MAX_ALIAS_ATTEMPTS = 100


def _alias_pattern(name: str) -> "re.Pattern[str]":
    return re.compile(r"^\s*alias\s+" + re.escape(name) + "=")


def _managed_pattern(session_name: str) -> "re.Pattern[str]":
    return re.compile(r"^\s*alias\s+.*=.*#\s*" + re.escape(MARKER) + r"\s*" + re.escape(session_name) + r"\s*$")


def alias_line(alias_name: str, session_name: str) -> str:
    return f"alias {alias_name}='tmux attach -t {session_name}' # {MARKER} {session_name}"


def _has_alias(lines: List[str], name: str) -> bool:
    pattern = _alias_pattern(name)
    return any(pattern.match(line) for line in lines)


def find_available_alias(lines: List[str], base_name: str) -> str:
    """Pick the first alias name not already defined.

    Tries ``<name>-dolly``, then ``<name>-dolly-1`` up to ``<name>-dolly-99``.
    """
    candidate = f"{base_name}-{ALIAS_SUFFIX}"
    if not _has_alias(lines, candidate):
        return candidate

    for i in range(1, MAX_ALIAS_ATTEMPTS):
        candidate = f"{base_name}-{ALIAS_SUFFIX}-{i}"
        if not _has_alias(lines, candidate):
            return candidate

    return f"{base_name}-{ALIAS_SUFFIX}-{MAX_ALIAS_ATTEMPTS - 1}"


def _read(path: Path) -> str:
    try:
        return path.read_text(encoding="utf-8", errors="surrogateescape")
    except OSError as e:
        raise RcFileError(f"Failed to read RC file {path}: {e}") from e


def _write(path: Path, content: str):
    try:
        path.write_text(content, encoding="utf-8", errors="surrogateescape")
    except OSError as e:
        raise RcFileError(f"Failed to write RC file {path}: {e}") from e


def _strip_managed(content: str, session_name: str) -> str:
    pattern = _managed_pattern(session_name)
    kept = [line for line in content.splitlines(keepends=True)
            if not pattern.match(line.rstrip("\r\n"))]
    return "".join(kept)


def add_alias(rc_file: str, session_name: str) -> str:
    """Add an alias that attaches to the session.

    An existing managed alias for the session is replaced. If the user
    already defines an alias with the session's name, a ``-dolly`` variant
    is used instead.

    Returns:
        The alias name that was written

    Raises:
        RcFileError: If the RC file does not exist or cannot be accessed
    """
    path = Path(expand_tilde(rc_file))
    if not path.exists():
        raise RcFileError(f"RC file not found: {path}. Please create it first")

    content = _strip_managed(_read(path), session_name)
    lines = content.splitlines()

    alias_name = session_name
    if _has_alias(lines, session_name):
        alias_name = find_available_alias(lines, session_name)

    if content and not content.endswith("\n"):
        content += "\n"
    content += alias_line(alias_name, session_name) + "\n"

    _write(path, content)
    logger.debug(f"Wrote alias '{alias_name}' for session '{session_name}' to {path}")
    return alias_name


def remove_alias(rc_file: str, session_name: str):
    """Remove every managed alias for the session; a missing file is fine."""
    path = Path(expand_tilde(rc_file))
    if not path.exists():
        logger.debug(f"RC file {path} does not exist, nothing to remove")
        return

    content = _read(path)
    cleaned = _strip_managed(content, session_name)
    if cleaned == content:
        return

    _write(path, cleaned)
    logger.debug(f"Removed alias for session '{session_name}' from {path}")
