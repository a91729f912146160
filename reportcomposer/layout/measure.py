from __future__ import annotations

from typing import TYPE_CHECKING

from reportcomposer.config import LayoutConfig
from reportcomposer.layout.tables import measure_table
from reportcomposer.layout.text import caption_font_size, heading_font_size, wrap
from reportcomposer.types import (
    Block,
    BulletList,
    DataTable,
    Heading,
    Image,
    KeyValueTable,
    Paragraph,
    Rule,
    SignatureBlock,
)

if TYPE_CHECKING:
    from reportcomposer.adapters.images import AcquiredImage


def heading_height(block: Heading, width: float, layout: LayoutConfig) -> float:
    size = heading_font_size(block.level, layout)
    lines = wrap(block.text, width - 2 * layout.heading_padding, size, layout)
    return len(lines) * layout.line_height(size) + 2 * layout.heading_padding


def key_value_columns(width: float, layout: LayoutConfig) -> tuple[float, float]:
    label = width * layout.key_value_label_ratio
    return label, width - label


def key_value_row_lines(
    label: str,
    value: str,
    width: float,
    layout: LayoutConfig,
) -> tuple[list[str], list[str], float]:
    label_width, value_width = key_value_columns(width, layout)
    size = layout.base_font_size
    pad = layout.cell_padding
    label_lines = wrap(label, label_width - 2 * pad, size, layout)
    value_lines = wrap(value, value_width - 2 * pad, size, layout)
    height = max(len(label_lines), len(value_lines)) * layout.line_height(size) + 2 * pad
    return label_lines, value_lines, height


def bullet_lines(item: str, width: float, layout: LayoutConfig) -> list[str]:
    return wrap(item, width - layout.bullet_indent, layout.base_font_size, layout)


def image_body_height(block: Image, image: 'AcquiredImage | None', layout: LayoutConfig) -> float:
    if image is None:
        return layout.placeholder_height
    return block.target_width * image.aspect


def caption_lines(block: Image, layout: LayoutConfig) -> list[str]:
    if not block.caption:
        return []
    return wrap(block.caption, block.target_width, caption_font_size(layout), layout)


def measure(
    block: Block,
    column_width: float,
    layout: LayoutConfig,
    *,
    image: 'AcquiredImage | None' = None,
) -> float:
    """Vertical extent of a block at the given column width, trailing spacing included."""
    spacing = layout.block_spacing
    line = layout.line_height(layout.base_font_size)

    if isinstance(block, Heading):
        return heading_height(block, column_width, layout) + spacing
    if isinstance(block, KeyValueTable):
        rows = sum(key_value_row_lines(label, value, column_width, layout)[2] for label, value in block.rows)
        return rows + spacing
    if isinstance(block, DataTable):
        return measure_table(block, column_width, layout).total_height + spacing
    if isinstance(block, BulletList):
        lines = sum(len(bullet_lines(item, column_width, layout)) for item in block.items)
        return lines * line + spacing
    if isinstance(block, Paragraph):
        return len(wrap(block.text, column_width, layout.base_font_size, layout)) * line + spacing
    if isinstance(block, Image):
        caption = len(caption_lines(block, layout)) * layout.line_height(caption_font_size(layout))
        return image_body_height(block, image, layout) + caption + spacing
    if isinstance(block, SignatureBlock):
        return layout.signature_height + spacing
    if isinstance(block, Rule):
        return layout.rule_height + spacing
    raise TypeError(f'unsupported block kind: {type(block).__name__}')


def lead_height(
    block: Block | None,
    column_width: float,
    layout: LayoutConfig,
    *,
    image: 'AcquiredImage | None' = None,
) -> float:
    """Height of the part of a block that must share a page with the heading above it.

    Data tables split between rows, so only the header row and the first body
    row count. Every other block is placed whole.
    """
    if block is None:
        return 0.0
    if isinstance(block, DataTable):
        metrics = measure_table(block, column_width, layout)
        first_row = metrics.row_heights[0] if metrics.row_heights else 0.0
        return metrics.header_height + first_row
    return max(0.0, measure(block, column_width, layout, image=image) - layout.block_spacing)
