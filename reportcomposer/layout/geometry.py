from __future__ import annotations

from dataclasses import dataclass

from reportcomposer.config import LayoutConfig


@dataclass
class Geometry:
    """Page box plus the cursor; one instance per compose call."""

    page_width: float
    page_height: float
    margin_top: float
    margin_bottom: float
    margin_left: float
    margin_right: float
    page_index: int = 1
    offset: float = 0.0

    @classmethod
    def from_layout(cls, layout: LayoutConfig) -> 'Geometry':
        return cls(
            page_width=layout.page_width,
            page_height=layout.page_height,
            margin_top=layout.margin_top,
            margin_bottom=layout.margin_bottom,
            margin_left=layout.margin_left,
            margin_right=layout.margin_right,
        )

    @property
    def usable_width(self) -> float:
        return self.page_width - self.margin_left - self.margin_right

    @property
    def usable_height(self) -> float:
        return self.page_height - self.margin_top - self.margin_bottom

    @property
    def remaining(self) -> float:
        return self.usable_height - self.offset

    @property
    def x(self) -> float:
        return self.margin_left

    @property
    def y(self) -> float:
        """Absolute y of the cursor, measured from the top edge of the page."""
        return self.margin_top + self.offset
