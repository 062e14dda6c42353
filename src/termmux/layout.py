"""Column layout settings.

Validated geometry of one run: how wide the terminal is, how wide each
column is, how many wrapped lines a stream may emit per round, and how far
each stream is indented.
"""

from typing import Any

from pydantic import BaseModel, Field, field_validator, model_validator
from rich.console import Console

AUTO = "auto"


def detect_terminal_width() -> int:
    """Width of the attached terminal (``COLUMNS`` or 80 when not a tty)."""
    return Console().size.width


class LayoutSettings(BaseModel):
    """Run geometry.

    ``total_width`` and ``column_width`` accept ``"auto"``: the total width
    is then detected from the terminal, the column width becomes
    ``total_width // stream_count``.
    """

    total_width: int = Field(gt=0)
    column_width: int | None = None
    max_lines_per_turn: int = Field(gt=0)
    stream_count: int = Field(ge=1)

    @field_validator("total_width", mode="before")
    @classmethod
    def _resolve_total_width(cls, value: Any) -> Any:
        if isinstance(value, str) and value.strip().lower() == AUTO:
            return detect_terminal_width()
        return value

    @field_validator("column_width", mode="before")
    @classmethod
    def _resolve_column_width(cls, value: Any) -> Any:
        if isinstance(value, str) and value.strip().lower() == AUTO:
            return None
        return value

    @model_validator(mode="after")
    def _fill_column_width(self) -> "LayoutSettings":
        if self.column_width is None:
            self.column_width = self.total_width // self.stream_count
        if self.column_width <= 0:
            raise ValueError(
                f"column width must be positive (total width {self.total_width}, "
                f"{self.stream_count} streams)"
            )
        return self

    @property
    def indent_step(self) -> int:
        """Indentation added per stream: (total - column) / (streams - 1)."""
        if self.stream_count <= 1:
            return 0
        return max(0, (self.total_width - self.column_width) // (self.stream_count - 1))

    def indent_for(self, index: int) -> str:
        """Indentation prefix of the stream at ``index`` (0-based)."""
        return " " * (index * self.indent_step)
