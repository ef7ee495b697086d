"""tmux provisioning."""
from .panes import provision_panes, validate_panes
from .session import COLOR_PALETTE, create_session, terminate_session, validate_layout
from .streaming import build_streaming_command, select_stream_targets

__all__ = [
    "COLOR_PALETTE",
    "build_streaming_command",
    "create_session",
    "provision_panes",
    "select_stream_targets",
    "terminate_session",
    "validate_layout",
    "validate_panes",
]
