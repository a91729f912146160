from __future__ import annotations

import io
import logging
from typing import Iterable

from reportlab.lib import colors
from reportlab.lib.utils import ImageReader
from reportlab.pdfgen.canvas import Canvas

from reportcomposer.config import LayoutConfig
from reportcomposer.types import DrawBox, DrawCommand, DrawImage, DrawRule, DrawTableCell, DrawText, RenderedPage


logger = logging.getLogger(__name__)

GRID_COLOR = '#CBD5E1'
PRODUCER = 'reportcomposer'


def _safe_canvas_font(canvas: Canvas, font_name: str, size: float) -> None:
    for candidate in (str(font_name or '').strip(), 'Helvetica'):
        if not candidate:
            continue
        try:
            canvas.setFont(candidate, size)
            return
        except Exception:
            logger.debug('Font %s unavailable, trying fallback', candidate)
            continue


def _draw_string(canvas: Canvas, x: float, y: float, text: str, align: str) -> None:
    if align == 'right':
        canvas.drawRightString(x, y, text)
    elif align == 'center':
        canvas.drawCentredString(x, y, text)
    else:
        canvas.drawString(x, y, text)


class PdfPageRenderer:
    """Replays absolute draw commands on a reportlab canvas (top-left origin flipped to bottom-left)."""

    def __init__(self, layout: LayoutConfig):
        self.layout = layout

    def _bottom(self, y: float, h: float = 0.0) -> float:
        return self.layout.page_height - y - h

    def draw(self, canvas: Canvas, command: DrawCommand) -> None:
        if isinstance(command, DrawText):
            self._text(canvas, command)
        elif isinstance(command, DrawRule):
            self._rule(canvas, command)
        elif isinstance(command, DrawBox):
            self._box(canvas, command)
        elif isinstance(command, DrawImage):
            self._image(canvas, command)
        elif isinstance(command, DrawTableCell):
            self._cell(canvas, command)
        else:
            raise TypeError(f'unsupported draw command: {type(command).__name__}')

    def _text(self, canvas: Canvas, command: DrawText) -> None:
        canvas.setFillColor(colors.HexColor(command.style.color))
        _safe_canvas_font(canvas, command.style.font, command.style.size)
        _draw_string(canvas, command.x, self._bottom(command.y), command.text, command.style.align)

    def _rule(self, canvas: Canvas, command: DrawRule) -> None:
        canvas.setFillColor(colors.HexColor(command.color))
        canvas.rect(command.x, self._bottom(command.y, command.h), command.w, command.h, stroke=0, fill=1)

    def _box(self, canvas: Canvas, command: DrawBox) -> None:
        canvas.saveState()
        canvas.setStrokeColor(colors.HexColor(command.color))
        canvas.setLineWidth(0.5)
        if command.dashed:
            canvas.setDash(3, 2)
        canvas.rect(command.x, self._bottom(command.y, command.h), command.w, command.h, stroke=1, fill=0)
        canvas.restoreState()

    def _image(self, canvas: Canvas, command: DrawImage) -> None:
        try:
            canvas.drawImage(
                ImageReader(io.BytesIO(command.data)),
                command.x,
                self._bottom(command.y, command.h),
                width=command.w,
                height=command.h,
                mask='auto',
            )
        except Exception as exc:
            logger.warning('Failed to draw image at (%.1f, %.1f): %s', command.x, command.y, exc)
            self._box(canvas, DrawBox(x=command.x, y=command.y, w=command.w, h=command.h, dashed=True))

    def _cell(self, canvas: Canvas, command: DrawTableCell) -> None:
        bottom = self._bottom(command.y, command.h)
        canvas.saveState()
        if command.fill:
            canvas.setFillColor(colors.HexColor(command.fill))
            canvas.rect(command.x, bottom, command.w, command.h, stroke=0, fill=1)
        canvas.setStrokeColor(colors.HexColor(GRID_COLOR))
        canvas.setLineWidth(0.5)
        canvas.rect(command.x, bottom, command.w, command.h, stroke=1, fill=0)
        canvas.restoreState()

        style = command.style
        pad = self.layout.cell_padding
        canvas.setFillColor(colors.HexColor(style.color))
        _safe_canvas_font(canvas, style.font, style.size)
        if style.align == 'right':
            x = command.x + command.w - pad
        elif style.align == 'center':
            x = command.x + command.w / 2
        else:
            x = command.x + pad
        line_height = self.layout.line_height(style.size)
        for index, line in enumerate(command.lines):
            baseline = command.y + pad + index * line_height + style.size
            _draw_string(canvas, x, self._bottom(baseline), line, style.align)


def render_pdf(
    pages: Iterable[RenderedPage],
    layout: LayoutConfig,
    *,
    title: str = '',
    author: str = '',
) -> bytes:
    buffer = io.BytesIO()
    canvas = Canvas(buffer, pagesize=(layout.page_width, layout.page_height))
    canvas.setTitle(title)
    canvas.setAuthor(author)
    canvas.setProducer(PRODUCER)

    renderer = PdfPageRenderer(layout)
    count = 0
    for page in pages:
        for command in page.commands:
            renderer.draw(canvas, command)
        canvas.showPage()
        count += 1

    canvas.save()
    logger.info('Rendered %d page(s) to PDF', count)
    return buffer.getvalue()
