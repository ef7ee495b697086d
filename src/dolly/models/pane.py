"""Pane model for dolly."""
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

SPLIT_ALIASES = {
    "h": "horizontal",
    "v": "vertical",
}


class Pane(BaseModel):
    """A pane declared in a window layout."""

    model_config = ConfigDict(extra="ignore")

    id: str = Field("", description="Pane identifier, unique within its window")
    command: str = Field("", description="Startup command sent to the pane")
    split: str = Field("", description="Split orientation: none, horizontal or vertical")
    split_from: str = Field("", description="Identifier of the pane to split from")
    working_directory: str = Field("", description="Working directory override")
    pre_hooks: List[str] = Field(default_factory=list, description="Commands run before the startup command")
    show_label: Optional[bool] = Field(None, description="Label visibility override")
    label_color: str = Field("", description="Label background color")

    @field_validator("split", mode="before")
    @classmethod
    def normalize_split(cls, value):
        if value is None:
            return ""
        value = str(value).strip().lower()
        return SPLIT_ALIASES.get(value, value)

    @field_validator("pre_hooks", mode="before")
    @classmethod
    def none_hooks(cls, value):
        return [] if value is None else value


def resolve_pane_ids(panes: List[Pane]) -> List[str]:
    """Return the effective identifier of every pane.

    Panes without an explicit id are named ``pane<N>`` after their 1-based
    position in the window.
    """
    return [pane.id or f"pane{i + 1}" for i, pane in enumerate(panes)]
