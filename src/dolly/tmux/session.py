"""Session creation and teardown."""
import logging
from typing import Dict, List

from .. import proc
from ..errors import LayoutError, ProvisionError, RcFileError, TmuxError
from ..models import Pane, SessionConfig, Window, resolve_pane_ids
from ..rcfile import add_alias, remove_alias
from ..utils import expand_tilde, resolve_shell_command
from .panes import provision_panes, validate_panes, window_target
from .streaming import STREAM_WINDOW, cleanup_streaming, create_streaming_window, start_log_streaming

logger = logging.getLogger(__name__)

# Window tab colors, assigned in order and wrapping around
COLOR_PALETTE = (
    "green",
    "blue",
    "red",
    "yellow",
    "cyan",
    "magenta",
    "white",
    "black",
    "brightgreen",
    "brightblue",
    "brightred",
    "brightyellow",
    "brightcyan",
    "brightmagenta",
    "brightwhite",
)

LABEL_COLOR_OPTION = "@dolly_label_color"


def auto_color(window_index: int) -> str:
    return COLOR_PALETTE[window_index % len(COLOR_PALETTE)]


def window_color(config: SessionConfig, window: Window, window_index: int) -> str:
    """Explicit window color, else the palette color when auto-color is on."""
    if window.color:
        return window.color
    if config.auto_color:
        return auto_color(window_index)
    return ""


def window_working_dir(config: SessionConfig, window: Window) -> str:
    return window.working_directory or config.working_directory


def validate_layout(config: SessionConfig):
    """Reject layouts that would fail part way through provisioning.

    Raises:
        LayoutError: On the first problem found
    """
    if not config.windows:
        raise LayoutError("no windows defined in config")

    seen = set()
    for window in config.windows:
        if window.name in seen:
            raise LayoutError(f"duplicate window name '{window.name}'")
        seen.add(window.name)
        if config.log_stream.enabled and window.name == STREAM_WINDOW:
            raise LayoutError(f"window name '{STREAM_WINDOW}' is reserved for log streaming")
        try:
            validate_panes(window.panes)
        except LayoutError as e:
            raise LayoutError(f"window '{window.name}': {e}") from e


def kill_session_quietly(session_name: str) -> bool:
    """Kill a session that may not exist; the outcome is deliberately ignored."""
    return proc.tmux_quietly("kill-session", "-t", f"={session_name}")


def set_window_color(session_name: str, window_name: str, color: str):
    """Color a window's status bar tab."""
    if not color:
        return

    target = window_target(session_name, window_name)
    proc.tmux("set-window-option", "-t", target, "window-status-style", f"bg={color},fg=black")

    if not proc.tmux_quietly("set-window-option", "-t", target,
                             "window-status-current-style", f"bg=bright{color},fg=black,bold"):
        logger.debug(f"No bright variant of '{color}', using it as is for the active tab")
        if not proc.tmux_quietly("set-window-option", "-t", target,
                                 "window-status-current-style", f"bg={color},fg=white,bold"):
            logger.warning(f"Could not set active tab style for window '{window_name}'")


def _label_visible(config: SessionConfig, pane: Pane) -> bool:
    if pane.show_label is None:
        return config.show_pane_labels
    return pane.show_label


def labels_enabled(config: SessionConfig, window: Window) -> bool:
    if not window.panes:
        return config.show_pane_labels
    return any(_label_visible(config, pane) for pane in window.panes)


def enable_pane_borders(session_name: str, window_name: str, default_color: str):
    """Show pane titles in the top border of every pane of the window."""
    target = window_target(session_name, window_name)
    color = f"#{{?{LABEL_COLOR_OPTION},#{{{LABEL_COLOR_OPTION}}},{default_color}}}"
    proc.tmux("set-window-option", "-t", target, "pane-border-status", "top")
    proc.tmux("set-window-option", "-t", target, "pane-border-format",
              f"#[bg={color},fg=white,bold] #{{pane_title}} #[default]")


def label_panes(config: SessionConfig, window: Window, handles: Dict[str, str]):
    """Title each pane with its id and apply per-pane label colors."""
    for pane_id, pane in zip(resolve_pane_ids(window.panes), window.panes):
        handle = handles.get(pane_id)
        if handle is None:
            continue
        title = pane_id if _label_visible(config, pane) else ""
        proc.tmux("select-pane", "-t", handle, "-T", title)
        if pane.label_color:
            proc.tmux("set-option", "-p", "-t", handle, LABEL_COLOR_OPTION, pane.label_color)


def _style_window(config: SessionConfig, window: Window, window_index: int, handles: Dict[str, str]):
    session_name = config.session_name
    try:
        if labels_enabled(config, window):
            enable_pane_borders(session_name, window.name, config.default_label_color)
            label_panes(config, window, handles)
        set_window_color(session_name, window.name, window_color(config, window, window_index))
    except TmuxError as e:
        raise ProvisionError(f"failed to style window: {e}", window.name) from e


def select_first_pane(session_name: str, window: Window, handles: Dict[str, str]):
    target = window_target(session_name, window.name)
    if window.panes:
        target = handles.get(resolve_pane_ids(window.panes)[0], target)
    proc.tmux_quietly("select-pane", "-t", target)


def _new_window_args(config: SessionConfig, window: Window, shell_command: str) -> List[str]:
    working_dir = window_working_dir(config, window)
    args = ["-n", window.name]
    if working_dir:
        args += ["-c", expand_tilde(working_dir)]
    args.append(shell_command)
    return args


def create_session(config: SessionConfig) -> Dict[str, Dict[str, str]]:
    """Build the whole workspace described by config.

    Any session with the same name is replaced. Validation problems are
    raised before tmux is touched; a tmux failure part way through leaves
    the windows created so far in place.

    Returns:
        Pane handles of every window, keyed by window name then pane id

    Raises:
        LayoutError: If the layout is invalid
        ProvisionError: If building a window fails
        StreamError: If the log window cannot be started
        TmuxError: If the session itself cannot be created
    """
    validate_layout(config)

    session_name = config.session_name
    shell_command = resolve_shell_command(config.terminal)

    if kill_session_quietly(session_name):
        logger.info(f"Replaced existing session '{session_name}'")

    first = config.windows[0]
    proc.tmux("new-session", "-d", "-s", session_name, *_new_window_args(config, first, shell_command))
    # Window indices start at 1 so the log window can take index 0
    proc.tmux("set-option", "-t", session_name, "base-index", "1")
    proc.tmux("move-window", "-r", "-t", session_name)

    handles: Dict[str, Dict[str, str]] = {}
    for window_index, window in enumerate(config.windows):
        if window_index > 0:
            try:
                proc.tmux("new-window", "-t", f"{session_name}:", *_new_window_args(config, window, shell_command))
            except TmuxError as e:
                raise ProvisionError(f"failed to create window: {e}", window.name) from e

        handles[window.name] = provision_panes(
            session_name, window.name, window.panes, config.working_directory, shell_command)
        _style_window(config, window, window_index, handles[window.name])

        if window_index > 0:
            select_first_pane(session_name, window, handles[window.name])

        logger.debug(f"Window '{window.name}' ready with {len(handles[window.name])} pane(s)")

    if config.log_stream.enabled:
        create_streaming_window(config)
        start_log_streaming(config, handles)
        proc.tmux("select-window", "-t", window_target(session_name, STREAM_WINDOW))
    else:
        proc.tmux("select-window", "-t", window_target(session_name, first.name))

    if config.rc_file:
        _install_alias(config.rc_file, session_name)

    return handles


def _install_alias(rc_file: str, session_name: str):
    try:
        alias_name = add_alias(rc_file, session_name)
    except RcFileError as e:
        logger.warning(f"Failed to add shell alias: {e}")
        return

    if alias_name != session_name:
        logger.info(f"Created alias '{alias_name}' (conflict with existing '{session_name}')")
    logger.info(f"Shell alias '{alias_name}' added to {rc_file}")
    logger.info(f"Run 'source {rc_file}' or restart your shell to use it")


def terminate_session(session_name: str, rc_file: str = ""):
    """Remove the session's alias and stream files, then kill it.

    Raises:
        TmuxError: If the session cannot be killed
    """
    if rc_file:
        try:
            remove_alias(rc_file, session_name)
            logger.info(f"Shell alias removed from {rc_file}")
        except RcFileError as e:
            logger.warning(f"Failed to remove shell alias: {e}")

    cleanup_streaming(session_name)

    proc.tmux("kill-session", "-t", f"={session_name}")
    logger.info(f"Session '{session_name}' terminated")
