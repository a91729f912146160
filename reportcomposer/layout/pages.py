from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date
from typing import TYPE_CHECKING

from reportlab.lib.units import mm

from reportcomposer.config import LayoutConfig
from reportcomposer.layout.geometry import Geometry
from reportcomposer.types import DrawCommand, DrawImage, DrawRule, DrawText, RenderedPage, TextStyle

if TYPE_CHECKING:
    from reportcomposer.adapters.images import AcquiredImage


logger = logging.getLogger(__name__)

_EPSILON = 1e-6

HEADER_TEXT_COLOR = '#2C3E50'
FOOTER_TEXT_COLOR = '#808080'
DIVIDER_COLOR = '#D1D5DB'
HEADER_FONT_SIZE = 16.0
HEADER_TEXT_HEIGHT = 15 * mm
LOGO_TEXT_GAP = 10 * mm


@dataclass(frozen=True)
class RunningMeta:
    """What the running header and footer print on every page."""

    organization: str
    title: str
    generated_on: date
    logo: 'AcquiredImage | None' = None


@dataclass(frozen=True)
class Placement:
    page: int
    x: float
    y: float
    width: float
    height: float
    overflow: bool = False


class PageManager:
    """Owns the cursor and the page sequence for one compose pass.

    Space is handed out with ``reserve``; when a request does not fit, the
    current page gets its footer, a new page gets its header and the request is
    retried there. A page that holds no content yet is never broken, so a block
    taller than a page overflows the bottom margin instead of looping.
    """

    def __init__(self, layout: LayoutConfig, meta: RunningMeta):
        self.layout = layout
        self.meta = meta
        self.geometry = Geometry.from_layout(layout)
        self._pages: list[RenderedPage] = []
        self._current = RenderedPage(number=1)
        self._has_content = False
        self._closed = False
        self._stamp_header()

    @property
    def page_number(self) -> int:
        return self.geometry.page_index

    @property
    def current_page(self) -> RenderedPage:
        return self._current

    @property
    def is_fresh(self) -> bool:
        return not self._has_content

    @property
    def header_extent(self) -> float:
        if not self.layout.header_footer_enabled:
            return 0.0
        if self.meta.logo is not None:
            return self.layout.logo_height + self.layout.header_gap
        return HEADER_TEXT_HEIGHT

    def fits(self, height: float) -> bool:
        return self.geometry.offset + height <= self.geometry.usable_height + _EPSILON

    def keep_room(self, height: float) -> None:
        """Break now unless ``height`` fits below the cursor. Fresh pages are kept."""
        self._ensure_open()
        if not self.fits(height) and not self.is_fresh:
            self.break_page()

    def reserve(self, height: float, *, allow_overflow: bool = False) -> Placement:
        self._ensure_open()
        height = max(0.0, float(height))
        if not allow_overflow:
            self.keep_room(height)

        overflow = not self.fits(height)
        if overflow:
            logger.debug(
                'Block of %.1fpt overflows page %d (%.1fpt left)',
                height,
                self.page_number,
                self.geometry.remaining,
            )
        placement = Placement(
            page=self.page_number,
            x=self.geometry.x,
            y=self.geometry.y,
            width=self.geometry.usable_width,
            height=height,
            overflow=overflow,
        )
        self.geometry.offset = min(self.geometry.offset + height, self.geometry.usable_height)
        self._has_content = True
        return placement

    def advance(self, gap: float) -> None:
        self.geometry.offset = min(self.geometry.offset + max(0.0, gap), self.geometry.usable_height)

    def emit(self, *commands: DrawCommand) -> None:
        self._ensure_open()
        self._current.commands.extend(commands)

    def break_page(self) -> None:
        self._ensure_open()
        self._stamp_footer()
        self._pages.append(self._current)
        self.geometry.page_index += 1
        self._current = RenderedPage(number=self.geometry.page_index)
        self._has_content = False
        self._stamp_header()
        logger.debug('Opened page %d', self.page_number)

    def close(self) -> list[RenderedPage]:
        self._ensure_open()
        self._stamp_footer()
        self._pages.append(self._current)
        self._closed = True
        return list(self._pages)

    def _ensure_open(self) -> None:
        if self._closed:
            raise RuntimeError('page manager already closed')

    def _stamp_header(self) -> None:
        self.geometry.offset = min(self.header_extent, self.geometry.usable_height)
        if not self.layout.header_footer_enabled:
            return

        top = self.geometry.margin_top
        cursor_x = self.geometry.margin_left
        commands: list[DrawCommand] = []
        logo = self.meta.logo

        if logo is not None:
            logo_h = self.layout.logo_height
            logo_w = logo_h / logo.aspect
            max_w = self.geometry.usable_width * self.layout.logo_max_width_ratio
            if logo_w > max_w:
                logo_w = max_w
                logo_h = logo_w * logo.aspect
            commands.append(DrawImage(role='header', x=cursor_x, y=top, w=logo_w, h=logo_h, data=logo.data))
            cursor_x += logo_w + LOGO_TEXT_GAP
            text_y = top + logo_h / 2 + HEADER_FONT_SIZE / 3
        else:
            text_y = top + HEADER_FONT_SIZE

        commands.append(
            DrawText(
                role='header',
                x=cursor_x,
                y=text_y,
                text=self.meta.organization,
                style=TextStyle(font=self.layout.font_bold, size=HEADER_FONT_SIZE, color=HEADER_TEXT_COLOR),
            )
        )
        commands.append(
            DrawRule(
                role='header',
                x=self.geometry.margin_left,
                y=top + self.header_extent - 3 * mm,
                w=self.geometry.usable_width,
                h=0.7,
                color=DIVIDER_COLOR,
            )
        )
        self._current.commands.extend(commands)

    def _stamp_footer(self) -> None:
        if not self.layout.header_footer_enabled:
            return

        geometry = self.geometry
        size = self.layout.footer_font_size
        first_line = geometry.page_height - geometry.margin_bottom * 0.75
        second_line = geometry.page_height - geometry.margin_bottom * 0.5
        right_x = geometry.page_width - geometry.margin_right
        left_style = TextStyle(font=self.layout.font_regular, size=size, color=FOOTER_TEXT_COLOR)
        right_style = left_style.model_copy(update={'align': 'right'})

        self._current.commands.extend(
            [
                DrawRule(
                    role='footer',
                    x=geometry.margin_left,
                    y=geometry.page_height - geometry.margin_bottom + 2,
                    w=geometry.usable_width,
                    h=0.7,
                    color=DIVIDER_COLOR,
                ),
                DrawText(
                    role='footer',
                    x=geometry.margin_left,
                    y=first_line,
                    text=f'{self.meta.organization} - {self.meta.title}',
                    style=left_style,
                ),
                DrawText(role='footer', x=right_x, y=first_line, text=f'Page {self.page_number}', style=right_style),
                DrawText(
                    role='footer',
                    x=right_x,
                    y=second_line,
                    text=self.meta.generated_on.strftime(self.layout.date_format),
                    style=right_style,
                ),
            ]
        )
