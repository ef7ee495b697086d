"""Build a layout from a flat list of shell commands."""
import os
import re
from typing import List, Set

from .errors import LayoutError
from .models import Pane, SessionConfig, Window

EXEC_WINDOW = "exec"

_PREFIX_LEN = 4
_SUFFIX_LEN = 4
# Shorter ids are used whole; longer ones become first4..last4
_MAX_WHOLE_LEN = _PREFIX_LEN + _SUFFIX_LEN + 1


def parse_commands(text: str) -> List[str]:
    """Split a comma-separated command string into commands."""
    if not text:
        return []
    return [part.strip() for part in text.split(",") if part.strip()]


def generate_pane_id(command: str, used: Set[str]) -> str:
    """Derive a short, unique pane id from a command.

    Example:
        >>> generate_pane_id("npm run build", set())
        'npmr..uild'
    """
    sanitized = re.sub(r'[^a-zA-Z0-9\-_]', '', command) or "pane"

    if len(sanitized) <= _MAX_WHOLE_LEN:
        base_id = sanitized
    else:
        base_id = f"{sanitized[:_PREFIX_LEN]}..{sanitized[-_SUFFIX_LEN:]}"

    pane_id = base_id
    counter = 1
    while pane_id in used:
        counter += 1
        pane_id = f"{base_id}-{counter}"
    used.add(pane_id)
    return pane_id


def build_config_from_commands(session_name: str, commands: List[str],
                               working_directory: str = "") -> SessionConfig:
    """Create a single-window layout with one pane per command."""
    if not commands:
        raise LayoutError("no commands provided")

    if not working_directory:
        working_directory = os.getcwd()

    used: Set[str] = set()
    pane_ids = [generate_pane_id(command, used) for command in commands]

    panes = []
    for i, command in enumerate(commands):
        if i == 0:
            split, split_from = "none", ""
        else:
            split, split_from = "vertical", pane_ids[i - 1]
        panes.append(Pane(
            id=pane_ids[i],
            command=command,
            split=split,
            split_from=split_from,
            working_directory=working_directory,
        ))

    return SessionConfig(
        session_name=session_name,
        working_directory=working_directory,
        terminal="bash",
        windows=[Window(name=EXEC_WINDOW, panes=panes)],
    )
