from __future__ import annotations

from typing import TYPE_CHECKING

from reportlab.lib.units import mm

from reportcomposer.config import LayoutConfig
from reportcomposer.layout.measure import (
    bullet_lines,
    caption_lines,
    heading_height,
    image_body_height,
    key_value_columns,
    key_value_row_lines,
)
from reportcomposer.layout.pages import Placement
from reportcomposer.layout.text import baseline, body_style, caption_font_size, heading_font_size, wrap
from reportcomposer.types import (
    BulletList,
    DrawBox,
    DrawCommand,
    DrawImage,
    DrawRule,
    DrawTableCell,
    DrawText,
    Heading,
    Image,
    KeyValueTable,
    Paragraph,
    Rule,
    SignatureBlock,
)

if TYPE_CHECKING:
    from reportcomposer.adapters.images import AcquiredImage


HEADING_COLORS = {1: '#2980B9', 2: '#111827'}
BANNER_TEXT_COLOR = '#FFFFFF'
LABEL_FILL = '#F3F4F6'
CAPTION_COLOR = '#555555'
FRAME_COLOR = '#C8C8C8'
RULE_COLOR = '#2980B9'


def place_heading(block: Heading, at: Placement, layout: LayoutConfig) -> list[DrawCommand]:
    size = heading_font_size(block.level, layout)
    pad = layout.heading_padding
    lines = wrap(block.text, at.width - 2 * pad, size, layout)
    commands: list[DrawCommand] = []

    if block.decoration == 'banner':
        commands.append(
            DrawRule(x=at.x, y=at.y, w=at.width, h=heading_height(block, at.width, layout), color=block.banner_color)
        )
        color = BANNER_TEXT_COLOR
    else:
        color = HEADING_COLORS[block.level]

    style = body_style(layout, emphasis='bold', size=size, color=color)
    for index, line in enumerate(lines):
        line_top = at.y + pad + index * layout.line_height(size)
        commands.append(DrawText(x=at.x + pad, y=baseline(line_top, size), text=line, style=style))
    return commands


def place_key_value(block: KeyValueTable, at: Placement, layout: LayoutConfig) -> list[DrawCommand]:
    label_width, value_width = key_value_columns(at.width, layout)
    label_style = body_style(layout, emphasis='bold')
    value_style = body_style(layout)
    commands: list[DrawCommand] = []
    y = at.y
    for label, value in block.rows:
        label_lines, value_lines, height = key_value_row_lines(label, value, at.width, layout)
        commands.append(
            DrawTableCell(
                x=at.x, y=y, w=label_width, h=height, lines=tuple(label_lines), style=label_style, fill=LABEL_FILL
            )
        )
        commands.append(
            DrawTableCell(
                x=at.x + label_width, y=y, w=value_width, h=height, lines=tuple(value_lines), style=value_style
            )
        )
        y += height
    return commands


def place_bullets(block: BulletList, at: Placement, layout: LayoutConfig) -> list[DrawCommand]:
    size = layout.base_font_size
    line_height = layout.line_height(size)
    style = body_style(layout)
    commands: list[DrawCommand] = []
    line_top = at.y
    for item in block.items:
        lines = bullet_lines(item, at.width, layout)
        commands.append(DrawText(x=at.x + 1.5 * mm, y=baseline(line_top, size), text='•', style=style))
        for line in lines:
            commands.append(DrawText(x=at.x + layout.bullet_indent, y=baseline(line_top, size), text=line, style=style))
            line_top += line_height
    return commands


def place_paragraph(block: Paragraph, at: Placement, layout: LayoutConfig) -> list[DrawCommand]:
    size = layout.base_font_size
    style = body_style(layout, emphasis=block.emphasis)
    lines = wrap(block.text, at.width, size, layout)
    return [
        DrawText(x=at.x, y=baseline(at.y + index * layout.line_height(size), size), text=line, style=style)
        for index, line in enumerate(lines)
    ]


def place_image(
    block: Image,
    at: Placement,
    image: 'AcquiredImage | None',
    layout: LayoutConfig,
) -> list[DrawCommand]:
    """Scaled image anchored at the placement, or a dashed placeholder of fixed height."""
    body = image_body_height(block, image, layout)
    commands: list[DrawCommand] = []
    if image is not None:
        commands.append(DrawImage(x=at.x, y=at.y, w=block.target_width, h=body, data=image.data))
    else:
        commands.append(DrawBox(x=at.x, y=at.y, w=block.target_width, h=body, color=FRAME_COLOR, dashed=True))

    size = caption_font_size(layout)
    style = body_style(layout, emphasis='italic', size=size, color=CAPTION_COLOR)
    for index, line in enumerate(caption_lines(block, layout)):
        line_top = at.y + body + index * layout.line_height(size)
        commands.append(DrawText(x=at.x, y=baseline(line_top, size), text=line, style=style))
    return commands


def place_signature(block: SignatureBlock, at: Placement, layout: LayoutConfig) -> list[DrawCommand]:
    pad = 5 * mm
    size = layout.base_font_size
    return [
        DrawBox(x=at.x, y=at.y, w=at.width, h=layout.signature_height, color=FRAME_COLOR),
        DrawText(x=at.x + pad, y=at.y + 10 * mm, text=f'{block.place}, {block.date}', style=body_style(layout)),
        DrawText(
            x=at.x + pad,
            y=at.y + 10 * mm + layout.line_height(size) * 2,
            text=f'{block.label}:',
            style=body_style(layout, emphasis='bold'),
        ),
    ]


def place_rule(block: Rule, at: Placement, layout: LayoutConfig) -> list[DrawCommand]:
    thickness = layout.rule_thickness
    y = at.y + (layout.rule_height - thickness) / 2
    return [DrawRule(x=at.x, y=y, w=at.width, h=thickness, color=RULE_COLOR)]
