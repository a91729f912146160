from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Sequence

from reportlab.lib.units import mm

from reportcomposer.config import LayoutConfig
from reportcomposer.layout.text import body_style, wrap
from reportcomposer.types import DataTable, DrawTableCell

if TYPE_CHECKING:
    from reportcomposer.layout.pages import PageManager


logger = logging.getLogger(__name__)

MIN_COLUMN_WIDTH = 10 * mm
HEADER_TEXT_COLOR = '#FFFFFF'
ALTERNATE_ROW_FILL = '#F8F9FA'


@dataclass(frozen=True)
class TableMetrics:
    widths: tuple[float, ...]
    header_lines: tuple[tuple[str, ...], ...]
    header_height: float
    row_lines: tuple[tuple[tuple[str, ...], ...], ...]
    row_heights: tuple[float, ...]

    @property
    def total_height(self) -> float:
        return self.header_height + sum(self.row_heights)


@dataclass(frozen=True)
class TableSpan:
    metrics: TableMetrics
    first_page: int
    last_page: int
    continuations: int


def table_font_size(layout: LayoutConfig) -> float:
    return max(6.0, layout.base_font_size - 1)


def column_widths(table: DataTable, available: float) -> list[float]:
    count = len(table.header)
    if count == 0:
        return []
    hints = table.column_hints
    if not hints:
        return [available / count] * count

    explicit = [hint.width for hint in hints]
    fixed_total = sum(width for width in explicit if width is not None)
    free = [index for index, width in enumerate(explicit) if width is None]

    if free:
        share = (available - fixed_total) / len(free)
        if share >= MIN_COLUMN_WIDTH:
            return [width if width is not None else share for width in explicit]
        # Over-subscribed: free columns keep the minimum width, explicit ones shrink into the rest.
        room = available - MIN_COLUMN_WIDTH * len(free)
        if fixed_total <= 0 or room <= 0:
            return [available / count] * count
        scale = room / fixed_total
        return [width * scale if width is not None else MIN_COLUMN_WIDTH for width in explicit]

    widths = [float(width) for width in explicit]
    total = sum(widths)
    if total <= available:
        return widths
    scale = available / total
    return [width * scale for width in widths]


def _cell_lines(cells: Sequence[str], widths: Sequence[float], layout: LayoutConfig) -> tuple[tuple[str, ...], ...]:
    size = table_font_size(layout)
    return tuple(
        tuple(wrap(text, width - 2 * layout.cell_padding, size, layout))
        for text, width in zip(cells, widths)
    )


def _row_height(lines: Sequence[Sequence[str]], layout: LayoutConfig) -> float:
    tallest = max((len(cell) for cell in lines), default=1)
    return tallest * layout.line_height(table_font_size(layout)) + 2 * layout.cell_padding


def measure_table(table: DataTable, available: float, layout: LayoutConfig) -> TableMetrics:
    """Resolve column widths first, then the wrapped lines and height of every row."""
    widths = column_widths(table, available)
    header_lines = _cell_lines(table.header, widths, layout)
    header_height = max(layout.header_row_height, _row_height(header_lines, layout))
    row_lines = tuple(_cell_lines(row, widths, layout) for row in table.rows)
    row_heights = tuple(_row_height(lines, layout) for lines in row_lines)
    return TableMetrics(
        widths=tuple(widths),
        header_lines=header_lines,
        header_height=header_height,
        row_lines=row_lines,
        row_heights=row_heights,
    )


class TableLayout:
    """Places a DataTable row by row, repeating the header row after every page break."""

    def __init__(self, layout: LayoutConfig):
        self.layout = layout

    def place(self, table: DataTable, pages: 'PageManager') -> TableSpan:
        metrics = measure_table(table, pages.geometry.usable_width, self.layout)
        x = pages.geometry.x

        first_row = metrics.row_heights[0] if metrics.row_heights else 0.0
        # Header and first row travel together so a header never ends a page alone.
        placement = pages.reserve(metrics.header_height + first_row)
        pages.emit(*self._header_cells(table, metrics, x=x, y=placement.y))
        if metrics.row_heights:
            pages.emit(*self._row_cells(table, metrics, 0, x=x, y=placement.y + metrics.header_height))

        continuations = 0
        for index in range(1, len(metrics.row_heights)):
            height = metrics.row_heights[index]
            if not pages.fits(height):
                pages.break_page()
                header_at = pages.reserve(metrics.header_height)
                pages.emit(*self._header_cells(table, metrics, x=x, y=header_at.y))
                continuations += 1
            row_at = pages.reserve(height, allow_overflow=True)
            pages.emit(*self._row_cells(table, metrics, index, x=x, y=row_at.y))

        if continuations:
            logger.debug('Table with %d rows continued on %d extra page(s)', len(table.rows), continuations)
        pages.advance(self.layout.block_spacing)
        return TableSpan(
            metrics=metrics,
            first_page=placement.page,
            last_page=pages.page_number,
            continuations=continuations,
        )

    def _align(self, table: DataTable, column: int) -> str:
        if table.column_hints:
            return table.column_hints[column].align
        return 'left'

    def _header_cells(self, table: DataTable, metrics: TableMetrics, *, x: float, y: float) -> list[DrawTableCell]:
        style_size = table_font_size(self.layout)
        cells: list[DrawTableCell] = []
        cursor_x = x
        for column, width in enumerate(metrics.widths):
            cells.append(
                DrawTableCell(
                    x=cursor_x,
                    y=y,
                    w=width,
                    h=metrics.header_height,
                    lines=metrics.header_lines[column],
                    style=body_style(
                        self.layout,
                        emphasis='bold',
                        size=style_size,
                        color=HEADER_TEXT_COLOR,
                        align=self._align(table, column),
                    ),
                    fill=table.header_color,
                    header=True,
                )
            )
            cursor_x += width
        return cells

    def _row_cells(
        self, table: DataTable, metrics: TableMetrics, index: int, *, x: float, y: float
    ) -> list[DrawTableCell]:
        style_size = table_font_size(self.layout)
        fill = ALTERNATE_ROW_FILL if index % 2 == 1 else None
        cells: list[DrawTableCell] = []
        cursor_x = x
        for column, width in enumerate(metrics.widths):
            cells.append(
                DrawTableCell(
                    x=cursor_x,
                    y=y,
                    w=width,
                    h=metrics.row_heights[index],
                    lines=metrics.row_lines[index][column],
                    style=body_style(self.layout, size=style_size, align=self._align(table, column)),
                    fill=fill,
                )
            )
            cursor_x += width
        return cells
