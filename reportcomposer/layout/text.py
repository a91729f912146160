from __future__ import annotations

import textwrap

from reportcomposer.config import LayoutConfig
from reportcomposer.types import TextStyle


def chars_per_line(width: float, font_size: float, *, char_width_ratio: float) -> int:
    char_width = max(0.1, float(font_size) * float(char_width_ratio))
    return max(1, int(max(0.0, width) // char_width))


def wrap_text(text: str, width: float, font_size: float, *, char_width_ratio: float) -> list[str]:
    """Greedy wrap on an average glyph width; explicit newlines are kept."""
    limit = chars_per_line(width, font_size, char_width_ratio=char_width_ratio)
    wrapped: list[str] = []
    for paragraph in str(text or '').split('\n'):
        lines = textwrap.wrap(
            paragraph,
            width=limit,
            break_long_words=True,
            break_on_hyphens=False,
        )
        wrapped.extend(lines or [''])
    return wrapped or ['']


def wrap(text: str, width: float, font_size: float, layout: LayoutConfig) -> list[str]:
    return wrap_text(text, width, font_size, char_width_ratio=layout.char_width_ratio)


def heading_font_size(level: int, layout: LayoutConfig) -> float:
    return layout.base_font_size + (4 if level == 1 else 2)


def caption_font_size(layout: LayoutConfig) -> float:
    return max(6.0, layout.base_font_size - 1)


def body_style(layout: LayoutConfig, *, emphasis: str = 'normal', size: float | None = None, **extra) -> TextStyle:
    font = {
        'bold': layout.font_bold,
        'italic': layout.font_italic,
    }.get(emphasis, layout.font_regular)
    return TextStyle(font=font, size=size or layout.base_font_size, **extra)


def baseline(line_top: float, font_size: float) -> float:
    return line_top + font_size
