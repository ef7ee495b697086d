"""Exceptions raised by dolly."""
from typing import List, Optional


class DollyError(Exception):
    """Base class for all dolly errors."""


class LayoutError(DollyError):
    """The layout is invalid and was rejected before touching tmux."""


class ConfigError(DollyError):
    """A configuration document could not be read or validated."""


class TmuxError(DollyError):
    """A tmux invocation exited with a non-zero status."""

    def __init__(self, args: List[str], returncode: int, stderr: str = ""):
        self.args_list = list(args)
        self.returncode = returncode
        self.stderr = stderr
        detail = f": {stderr}" if stderr else ""
        super().__init__(f"tmux {' '.join(self.args_list)} failed with exit code {returncode}{detail}")


class ProvisionError(DollyError):
    """An external failure while building a window."""

    def __init__(self, message: str, window: str, pane: Optional[str] = None):
        self.window = window
        self.pane = pane
        where = f"window '{window}'"
        if pane is not None:
            where = f"pane '{pane}' in {where}"
        super().__init__(f"{where}: {message}")


class StreamError(DollyError):
    """Log streaming could not be started."""


class RcFileError(DollyError):
    """The shell RC file could not be used for alias management."""
