from __future__ import annotations

import logging
import re

from reportcomposer.composer import compose_sync
from reportcomposer.report.pdf_render import render_pdf
from reportcomposer.types import (
    DataTable,
    DrawImage,
    Heading,
    Image,
    ImageSource,
    Paragraph,
    RenderedPage,
    Rule,
    SignatureBlock,
)

from conftest import FakeFetcher, make_document, png_bytes


_PAGE_OBJECT = re.compile(rb'/Type\s*/Page\b')


def test_render_pdf_emits_one_pdf_page_per_rendered_page(layout):
    document = make_document(
        Heading(text='Site Audit', decoration='banner'),
        Paragraph(text='Visit summary.', emphasis='italic'),
        DataTable(header=('n', 'value'), rows=tuple((str(index), 'x') for index in range(90))),
        Image(source=ImageSource(reference='missing.png'), caption='Plan', target_width=150),
        SignatureBlock(place='Lyon', date='15/03/2024'),
        Rule(),
    )
    pages = compose_sync(document, layout=layout, fetcher=FakeFetcher())
    pdf = render_pdf(pages, layout, title='Site Audit', author='Acme Energy')

    assert pdf.startswith(b'%PDF')
    assert len(_PAGE_OBJECT.findall(pdf)) == len(pages)


def test_render_pdf_draws_real_images(layout):
    page = RenderedPage(number=1, commands=[DrawImage(x=60, y=80, w=100, h=50, data=png_bytes(40, 20))])
    assert render_pdf([page], layout).startswith(b'%PDF')


def test_broken_image_bytes_fall_back_to_frame(layout, caplog):
    page = RenderedPage(number=1, commands=[DrawImage(x=60, y=80, w=100, h=50, data=b'corrupt')])
    with caplog.at_level(logging.WARNING, logger='reportcomposer.report.pdf_render'):
        pdf = render_pdf([page], layout)
    assert pdf.startswith(b'%PDF')
    assert 'Failed to draw image' in caplog.text
