"""Utility functions for dolly."""
import hashlib
import os
import re
from pathlib import Path
from typing import Optional

LOGIN_SHELLS = ("bash", "zsh", "fish")


def resolve_shell_command(terminal: str) -> str:
    """Return the command that starts an interactive login shell.

    Known shells are matched case-insensitively; anything else is passed
    through unchanged with the login flag appended.

    Example:
        >>> resolve_shell_command("Zsh")
        'zsh -l'
        >>> resolve_shell_command("nu")
        'nu -l'
    """
    name = terminal.lower()
    if name in LOGIN_SHELLS:
        return f"{name} -l"
    return f"{terminal} -l"


def expand_tilde(path: str) -> str:
    """Expand a leading ``~`` to the user's home directory."""
    if not path.startswith("~"):
        return path
    home = str(Path.home())
    if path == "~":
        return home
    return os.path.join(home, path[1:].lstrip("/"))


def safe_filename(name: str) -> str:
    """Make a string safe to use as a single filename component.

    Path separators, characters reserved on common filesystems and control
    characters become underscores; the result is capped at 100 characters.
    """
    cleaned = re.sub(r'[/\\<>:|?*"\x00-\x1f\x7f]', '_', name)
    return cleaned[:100]


def get_stream_dir(session_name: str, base_dir: Optional[str] = None) -> Path:
    """
    Generate the directory holding log stream files for a session.

    Args:
        session_name: The tmux session name
        base_dir: Base directory for dolly runtime data

    Returns:
        Path to the session's stream directory

    Example:
        >>> get_stream_dir("my project", base_dir="/tmp/dolly")
        PosixPath('/tmp/dolly/my_project_a1b2c3')
    """
    if base_dir is None:
        base_dir = f"/tmp/dolly-{os.getenv('USER', 'nobody')}/streams"

    # Clean session name for filesystem (keep alphanums, dash, underscore)
    clean_session = re.sub(r'[^a-zA-Z0-9_-]', '_', session_name)[:20]

    # Hash for collision protection
    hash_suffix = hashlib.md5(session_name.encode()).hexdigest()[:6]

    return Path(base_dir) / f"{clean_session}_{hash_suffix}"
