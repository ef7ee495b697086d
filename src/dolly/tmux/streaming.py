"""Log aggregation window."""
import logging
import shlex
import shutil
import time
from typing import Dict, List, Optional

from .. import proc
from ..errors import StreamError, TmuxError
from ..models import SessionConfig, resolve_pane_ids
from ..utils import expand_tilde, get_stream_dir, resolve_shell_command
from .panes import window_target

logger = logging.getLogger(__name__)

STREAM_WINDOW = "logs"
MONITOR_COMMAND = "dolly-monitor"
WILDCARD = "*"
WINDOW_SETTLE_DELAY = 0.1


def _selected(name: str, selection: List[str]) -> bool:
    return WILDCARD in selection or name in selection


def select_stream_targets(config: SessionConfig,
                          handles: Optional[Dict[str, Dict[str, str]]] = None) -> List[str]:
    """Resolve the handles of every pane the log window should follow.

    Handles recorded during provisioning (window name to pane id to handle)
    are used when given; otherwise each pane is looked up by its position.

    Raises:
        StreamError: If no pane matches the filters
    """
    session_name = config.session_name
    selection = config.log_stream
    targets = []

    for window in config.windows:
        if not _selected(window.name, selection.windows):
            continue

        index = -1
        for position, (pane_id, pane) in enumerate(zip(resolve_pane_ids(window.panes), window.panes)):
            # Later panes declaring split none are never created
            created = position == 0 or pane.split != "none"
            if created:
                index += 1
            if not _selected(pane_id, selection.panes):
                continue

            if handles is not None:
                handle = handles.get(window.name, {}).get(pane_id)
                if handle is None:
                    logger.warning(f"Pane '{pane_id}' in window '{window.name}' was not created, not streaming it")
                else:
                    targets.append(handle)
                continue

            if not created:
                logger.warning(f"Pane '{pane_id}' in window '{window.name}' was not created, not streaming it")
                continue

            target = f"{window_target(session_name, window.name)}.{index}"
            try:
                targets.append(proc.tmux("display-message", "-p", "-t", target, "#{pane_id}"))
            except TmuxError as e:
                logger.warning(f"Could not get tmux pane ID for {target}: {e}")

    if not targets:
        raise StreamError("nothing to stream: no panes match the log_stream filters")

    return targets


def build_streaming_command(session_name: str, targets: List[str], keywords: List[str],
                            monitor: str = MONITOR_COMMAND) -> str:
    """Build the monitor invocation typed into the log window."""
    args = [monitor, session_name]
    if keywords:
        args += ["--grep", *keywords, "--"]
    args += targets
    return " ".join(shlex.quote(arg) for arg in args)


def create_streaming_window(config: SessionConfig):
    """Create the log window and move it in front of the user's windows."""
    session_name = config.session_name
    args = ["new-window", "-d", "-t", f"{session_name}:", "-n", STREAM_WINDOW]
    if config.working_directory:
        args += ["-c", expand_tilde(config.working_directory)]
    args.append(resolve_shell_command(config.terminal))

    try:
        proc.tmux(*args)
        proc.tmux("move-window", "-s", window_target(session_name, STREAM_WINDOW), "-t", f"{session_name}:0")
    except TmuxError as e:
        raise StreamError(f"Failed to create streaming window: {e}") from e

    time.sleep(WINDOW_SETTLE_DELAY)


def start_log_streaming(config: SessionConfig, handles: Optional[Dict[str, Dict[str, str]]] = None):
    """Start the monitor in the log window."""
    targets = select_stream_targets(config, handles)
    command = build_streaming_command(config.session_name, targets, config.log_stream.grep)
    target = window_target(config.session_name, STREAM_WINDOW)

    try:
        proc.tmux("send-keys", "-t", target, "-l", command)
        proc.tmux("send-keys", "-t", target, "Enter")
    except TmuxError as e:
        raise StreamError(f"Failed to start log streaming: {e}") from e

    logger.info(f"Streaming {len(targets)} pane(s) into window '{STREAM_WINDOW}'")


def cleanup_streaming(session_name: str):
    """Remove the stream files left behind by the monitor."""
    stream_dir = get_stream_dir(session_name)
    if not stream_dir.exists():
        return
    try:
        shutil.rmtree(stream_dir)
        logger.debug(f"Removed stream directory {stream_dir}")
    except OSError as e:
        logger.warning(f"Failed to remove stream directory {stream_dir}: {e}")
