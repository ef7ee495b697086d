"""Configuration models."""
from .pane import Pane, resolve_pane_ids
from .session import LogStreamConfig, SessionConfig
from .window import Window

__all__ = ["Pane", "Window", "LogStreamConfig", "SessionConfig", "resolve_pane_ids"]
