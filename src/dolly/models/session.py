"""Session model for dolly."""
from typing import List

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from .window import Window


class LogStreamConfig(BaseModel):
    """Which panes feed the log window."""

    model_config = ConfigDict(extra="ignore")

    enabled: bool = Field(False, description="Create a log aggregation window")
    windows: List[str] = Field(default_factory=lambda: ["*"], description="Window names, * for all")
    panes: List[str] = Field(default_factory=lambda: ["*"], description="Pane ids, * for all")
    grep: List[str] = Field(default_factory=list, description="Keywords to filter on")

    @field_validator("windows", "panes", "grep", mode="before")
    @classmethod
    def coerce_list(cls, value):
        if value is None:
            return []
        if isinstance(value, str):
            return [value]
        return value


class SessionConfig(BaseModel):
    """A complete workspace layout."""

    model_config = ConfigDict(extra="ignore")

    session_name: str = Field(..., description="tmux session name")
    working_directory: str = Field("", description="Default working directory")
    terminal: str = Field("bash", description="Shell started in every pane")
    auto_color: bool = Field(True, description="Color window tabs from the palette")
    show_pane_labels: bool = Field(True, description="Show pane titles in borders")
    default_label_color: str = Field("blue", description="Default pane label color")
    rc_file: str = Field("", description="Shell RC file for the attach alias")
    log_stream: LogStreamConfig = Field(default_factory=LogStreamConfig)
    windows: List[Window] = Field(default_factory=list)

    @field_validator("terminal", mode="before")
    @classmethod
    def default_terminal(cls, value):
        return value or "bash"

    @field_validator("default_label_color", mode="before")
    @classmethod
    def default_color(cls, value):
        return value or "blue"

    @field_validator("windows", mode="before")
    @classmethod
    def none_windows(cls, value):
        return [] if value is None else value

    @model_validator(mode="after")
    def unique_window_names(self):
        seen = set()
        for window in self.windows:
            if window.name in seen:
                raise ValueError(f"duplicate window name '{window.name}'")
            seen.add(window.name)
        return self
