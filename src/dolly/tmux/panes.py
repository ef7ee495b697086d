"""Pane provisioning for a single window.

tmux addresses panes positionally (``session:window.index``) and those indices
shift whenever a pane is created. Panes are therefore tracked by their stable
handle (``#{pane_id}``, e.g. ``%12``): every split targets a handle, and the
positional index is only resolved right before keys are sent to a pane.
"""
import logging
import time
from typing import Dict, List

from .. import proc
from ..errors import LayoutError, ProvisionError, TmuxError
from ..models import Pane, resolve_pane_ids
from ..utils import expand_tilde

logger = logging.getLogger(__name__)

HOOK_SETTLE_DELAY = 0.1


def split_flag(split: str) -> str:
    """Map a split orientation to the split-window flag.

    tmux's ``-h`` places panes side by side and ``-v`` stacks them.
    """
    if split == "horizontal":
        return "-h"
    return "-v"


def validate_panes(panes: List[Pane]) -> List[str]:
    """Check pane ids and split references before anything is created.

    Returns:
        The effective id of every pane, in declared order

    Raises:
        LayoutError: On a duplicate id, or a ``split_from`` that does not name
            a pane declared earlier in the window
    """
    pane_ids = resolve_pane_ids(panes)

    seen = set()
    skipped = set()
    for position, (pane_id, pane) in enumerate(zip(pane_ids, panes)):
        if pane_id in seen:
            raise LayoutError(f"duplicate pane id '{pane_id}'")
        if pane.split_from:
            if pane.split_from not in seen:
                raise LayoutError(f"pane '{pane_id}' splits from unknown pane '{pane.split_from}'")
            if pane.split_from in skipped:
                raise LayoutError(f"pane '{pane_id}' splits from pane '{pane.split_from}', which is never created")
        seen.add(pane_id)
        if position > 0 and pane.split == "none":
            skipped.add(pane_id)

    return pane_ids


def window_target(session_name: str, window_name: str) -> str:
    """Target a window by exact name.

    Without the ``=`` prefix tmux tries a name like ``1`` as a window index first.
    """
    return f"{session_name}:={window_name}"


def pane_handle(target: str) -> str:
    """Stable handle (``%N``) of the pane addressed by target."""
    return proc.tmux("display-message", "-p", "-t", target, "#{pane_id}")


def pane_index(handle: str) -> int:
    """Current positional index of a pane."""
    return int(proc.tmux("display-message", "-p", "-t", handle, "#{pane_index}"))


def send_line(target: str, text: str):
    """Type text literally into a pane and press Enter."""
    proc.tmux("send-keys", "-t", target, "-l", text)
    proc.tmux("send-keys", "-t", target, "Enter")


def run_pre_hooks(target: str, hooks: List[str]):
    """Send each pre-hook, pausing briefly after each one."""
    for hook in hooks:
        if not hook:
            continue
        send_line(target, hook)
        time.sleep(HOOK_SETTLE_DELAY)


def run_command(target: str, command: str):
    if command:
        send_line(target, command)


def split_pane(source: str, split: str, working_dir: str, shell_command: str) -> str:
    """Split the source pane and return the new pane's handle."""
    args = ["split-window", "-t", source, split_flag(split), "-P", "-F", "#{pane_id}"]
    if working_dir:
        args += ["-c", expand_tilde(working_dir)]
    args.append(shell_command)
    return proc.tmux(*args)


def _start_pane(session_name: str, window_name: str, handle: str, pane: Pane):
    target = f"{window_target(session_name, window_name)}.{pane_index(handle)}"
    run_pre_hooks(target, pane.pre_hooks)
    run_command(target, pane.command)


def provision_panes(session_name: str, window_name: str, panes: List[Pane],
                    fallback_dir: str, shell_command: str) -> Dict[str, str]:
    """Create and start every pane of a window.

    The window must already exist with a single pane, which becomes the
    first declared pane. Panes without ``split_from`` split from that first
    pane.

    Args:
        session_name: tmux session name
        window_name: Window the panes belong to
        panes: Panes in declared order, root pane first
        fallback_dir: Working directory for panes without an override
        shell_command: Shell started in every new pane

    Returns:
        Mapping of pane id to stable pane handle

    Raises:
        LayoutError: If the panes fail validation; nothing has been created
        ProvisionError: If a tmux call fails; earlier panes are left in place
    """
    if not panes:
        return {}

    pane_ids = validate_panes(panes)
    handles: Dict[str, str] = {}

    root_id, root = pane_ids[0], panes[0]
    if root.split not in ("", "none"):
        logger.warning(f"Ignoring split '{root.split}' on first pane '{root_id}' of window '{window_name}'")

    try:
        handles[root_id] = pane_handle(window_target(session_name, window_name))
        _start_pane(session_name, window_name, handles[root_id], root)
    except TmuxError as e:
        raise ProvisionError(str(e), window_name, root_id) from e

    for pane_id, pane in zip(pane_ids[1:], panes[1:]):
        if pane.split == "none":
            logger.warning(f"Skipping pane '{pane_id}' in window '{window_name}': only the first pane may use split 'none'")
            continue

        source = handles[pane.split_from or root_id]

        try:
            handle = split_pane(source, pane.split, pane.working_directory or fallback_dir, shell_command)
            handles[pane_id] = handle
            logger.debug(f"Created pane '{pane_id}' ({handle}) in window '{window_name}' from {source}")
            _start_pane(session_name, window_name, handle, pane)
        except TmuxError as e:
            raise ProvisionError(str(e), window_name, pane_id) from e

    return handles
