"""Window model for dolly."""
from typing import List

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .pane import Pane


class Window(BaseModel):
    """A named tmux window and its panes."""

    model_config = ConfigDict(extra="ignore")

    name: str = Field(..., description="Window name, unique within the session")
    color: str = Field("", description="Tab color")
    panes: List[Pane] = Field(default_factory=list, description="Panes, root pane first")

    @field_validator("panes", mode="before")
    @classmethod
    def none_panes(cls, value):
        return [] if value is None else value

    @property
    def working_directory(self) -> str:
        """Working directory override of the root pane, if any."""
        if self.panes:
            return self.panes[0].working_directory
        return ""
