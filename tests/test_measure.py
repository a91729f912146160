from __future__ import annotations

import pytest

from reportcomposer.adapters.images import AcquiredImage
from reportcomposer.layout.measure import measure
from reportcomposer.layout.text import chars_per_line, wrap_text
from reportcomposer.types import (
    BulletList,
    DataTable,
    Heading,
    Image,
    ImageSource,
    KeyValueTable,
    Paragraph,
    Rule,
    SignatureBlock,
)


def test_wrap_text_respects_line_capacity():
    text = 'solar inverter efficiency ' * 20
    lines = wrap_text(text, 100, 10, char_width_ratio=0.5)

    limit = chars_per_line(100, 10, char_width_ratio=0.5)
    assert limit == 20
    assert len(lines) > 1
    assert all(len(line) <= limit for line in lines)
    assert ' '.join(lines).split() == text.split()


def test_wrap_text_keeps_explicit_newlines_and_empty_input():
    assert wrap_text('first\nsecond', 500, 10, char_width_ratio=0.5) == ['first', 'second']
    assert wrap_text('', 500, 10, char_width_ratio=0.5) == ['']
    assert wrap_text('a\n\nb', 500, 10, char_width_ratio=0.5) == ['a', '', 'b']


def test_wrap_text_breaks_words_longer_than_a_line():
    lines = wrap_text('x' * 45, 100, 10, char_width_ratio=0.5)
    assert lines == ['x' * 20, 'x' * 20, 'x' * 5]


def test_paragraph_height_is_lines_plus_spacing(layout):
    one_line = measure(Paragraph(text='Short note.'), layout.column_width, layout)
    assert one_line == pytest.approx(layout.line_height(10) + layout.block_spacing)

    long_text = 'word ' * 200
    many = measure(Paragraph(text=long_text), layout.column_width, layout)
    assert many > one_line


def test_measure_narrower_column_never_shrinks(layout):
    block = Paragraph(text='consumption figures for the heating season ' * 10)
    wide = measure(block, layout.column_width, layout)
    narrow = measure(block, layout.column_width / 2, layout)
    assert narrow >= wide


def test_measure_is_pure(layout):
    block = BulletList(items=('Replace boiler', 'Insulate roof', 'Install heat pump'))
    first = measure(block, layout.column_width, layout)
    second = measure(block, layout.column_width, layout)
    assert first == second
    assert first == pytest.approx(3 * layout.line_height(10) + layout.block_spacing)
    assert block.items == ('Replace boiler', 'Insulate roof', 'Install heat pump')


def test_fixed_height_blocks(layout):
    assert measure(Rule(), layout.column_width, layout) == pytest.approx(layout.rule_height + layout.block_spacing)
    signature = SignatureBlock(place='Lyon', date='15/03/2024')
    assert measure(signature, layout.column_width, layout) == pytest.approx(
        layout.signature_height + layout.block_spacing
    )


def test_heading_includes_padding(layout):
    height = measure(Heading(text='Summary', level=1), layout.column_width, layout)
    assert height == pytest.approx(layout.line_height(14) + 2 * layout.heading_padding + layout.block_spacing)


def test_key_value_rows_add_up(layout):
    row = layout.line_height(10) + 2 * layout.cell_padding
    block = KeyValueTable(rows=(('Site', 'Plant A'), ('Surface', '1200 m2'), ('Year', '1998')))
    assert measure(block, layout.column_width, layout) == pytest.approx(3 * row + layout.block_spacing)


def test_data_table_row_height_follows_tallest_cell(layout):
    short = DataTable(header=('Zone', 'Notes'), rows=(('A', 'ok'),))
    tall = DataTable(header=('Zone', 'Notes'), rows=(('A', 'long remark ' * 40),))
    assert measure(tall, layout.column_width, layout) > measure(short, layout.column_width, layout)


def test_empty_data_table_measures_header_only(layout):
    table = DataTable(header=('Zone', 'kWh'))
    assert measure(table, layout.column_width, layout) == pytest.approx(
        layout.header_row_height + layout.block_spacing
    )


def test_image_height_uses_aspect_ratio(layout):
    block = Image(source=ImageSource(reference='chart.png'), target_width=200)
    image = AcquiredImage(data=b'png', width=400, height=200)
    assert measure(block, layout.column_width, layout, image=image) == pytest.approx(100 + layout.block_spacing)


def test_image_caption_and_placeholder(layout):
    block = Image(source=ImageSource(reference='chart.png'), caption='Monthly load', target_width=200)
    caption_line = layout.line_height(layout.base_font_size - 1)
    assert measure(block, layout.column_width, layout) == pytest.approx(
        layout.placeholder_height + caption_line + layout.block_spacing
    )


def test_unknown_block_kind_is_rejected(layout):
    with pytest.raises(TypeError):
        measure(object(), layout.column_width, layout)
