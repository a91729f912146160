from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass

from reportcomposer.adapters.images import AcquiredImage, ImageAcquirer, ImageFetchConfig, ImageFetcher
from reportcomposer.config import LayoutConfig, get_settings
from reportcomposer.errors import ReportContractError
from reportcomposer.layout.blocks import (
    place_bullets,
    place_heading,
    place_image,
    place_key_value,
    place_paragraph,
    place_rule,
    place_signature,
)
from reportcomposer.layout.measure import lead_height, measure
from reportcomposer.layout.pages import PageManager, Placement, RunningMeta
from reportcomposer.layout.tables import TableLayout
from reportcomposer.types import (
    Block,
    BulletList,
    DataTable,
    Document,
    DrawCommand,
    Heading,
    Image,
    ImageSource,
    KeyValueTable,
    Paragraph,
    RenderedPage,
    Rule,
    SignatureBlock,
)


logger = logging.getLogger(__name__)


@dataclass
class Composition:
    pages: list[RenderedPage]
    # Page numbers each block landed on, in block order.
    block_pages: list[tuple[int, ...]]
    failed_images: int = 0


def validate_document(document: Document, layout: LayoutConfig) -> None:
    if layout.column_width <= 0 or layout.usable_height <= 0:
        raise ReportContractError(
            f'margins leave no drawable area ({layout.column_width:.1f} x {layout.usable_height:.1f}pt)'
        )

    column_width = layout.column_width
    for index, block in enumerate(document.blocks):
        if isinstance(block, DataTable):
            columns = len(block.header)
            if columns == 0:
                raise ReportContractError('data table has no columns', block_index=index)
            for row_no, row in enumerate(block.rows):
                if len(row) != columns:
                    raise ReportContractError(
                        f'data table row {row_no} has {len(row)} cells, header has {columns}',
                        block_index=index,
                    )
            if block.column_hints is not None and len(block.column_hints) != columns:
                raise ReportContractError(
                    f'data table has {len(block.column_hints)} column hints for {columns} columns',
                    block_index=index,
                )
        elif isinstance(block, Image):
            if block.target_width <= 0:
                raise ReportContractError(
                    f'image target width must be positive, got {block.target_width}',
                    block_index=index,
                )
            if block.target_width > column_width + 1e-6:
                raise ReportContractError(
                    f'image target width {block.target_width:.1f}pt exceeds column width {column_width:.1f}pt',
                    block_index=index,
                )


async def _acquire(fetcher: ImageAcquirer, source: ImageSource, *, what: str) -> AcquiredImage | None:
    try:
        return await fetcher.acquire(source)
    except Exception as exc:
        logger.warning('Image unavailable for %s (%s), using placeholder: %s', what, source.describe(), exc)
        return None


def _place(block: Block, at: Placement, image: AcquiredImage | None, layout: LayoutConfig) -> list[DrawCommand]:
    if isinstance(block, Heading):
        return place_heading(block, at, layout)
    if isinstance(block, KeyValueTable):
        return place_key_value(block, at, layout)
    if isinstance(block, BulletList):
        return place_bullets(block, at, layout)
    if isinstance(block, Paragraph):
        return place_paragraph(block, at, layout)
    if isinstance(block, Image):
        return place_image(block, at, image, layout)
    if isinstance(block, SignatureBlock):
        return place_signature(block, at, layout)
    if isinstance(block, Rule):
        return place_rule(block, at, layout)
    raise TypeError(f'unsupported block kind: {type(block).__name__}')


async def _compose(document: Document, layout: LayoutConfig, fetcher: ImageAcquirer) -> Composition:
    logo: AcquiredImage | None = None
    if layout.header_footer_enabled and layout.logo_enabled and document.header.logo is not None:
        logo = await _acquire(fetcher, document.header.logo, what='header logo')

    pages = PageManager(
        layout,
        RunningMeta(
            organization=document.header.organization,
            title=document.title,
            generated_on=document.header.generated_on,
            logo=logo,
        ),
    )
    tables = TableLayout(layout)
    column_width = pages.geometry.usable_width
    block_pages: list[tuple[int, ...]] = []
    # Images fetched early so a heading can be kept with the image below it.
    images: dict[int, AcquiredImage | None] = {}
    failed_images = 0

    async def image_for(index: int) -> AcquiredImage | None:
        nonlocal failed_images
        if index not in images:
            images[index] = await _acquire(fetcher, document.blocks[index].source, what=f'block {index}')
            if images[index] is None:
                failed_images += 1
        return images[index]

    blocks = document.blocks
    for index, block in enumerate(blocks):
        if isinstance(block, DataTable):
            span = tables.place(block, pages)
            block_pages.append(tuple(range(span.first_page, span.last_page + 1)))
            continue

        image: AcquiredImage | None = None
        if isinstance(block, Image):
            image = await image_for(index)

        height = measure(block, column_width, layout, image=image)
        if isinstance(block, Heading) and index + 1 < len(blocks):
            following = blocks[index + 1]
            following_image = await image_for(index + 1) if isinstance(following, Image) else None
            lead = lead_height(following, column_width, layout, image=following_image)
            pages.keep_room(min(height + lead, pages.geometry.usable_height - pages.header_extent))
        at = pages.reserve(height)
        pages.emit(*_place(block, at, image, layout))
        block_pages.append((at.page,))
        logger.debug('Block %d (%s) placed on page %d at y=%.1f', index, block.kind, at.page, at.y)

    rendered = pages.close()
    logger.info(
        'Composed %r: %d block(s) on %d page(s), %d image placeholder(s)',
        document.title,
        len(document.blocks),
        len(rendered),
        failed_images,
    )
    return Composition(pages=rendered, block_pages=block_pages, failed_images=failed_images)


async def compose_detailed(
    document: Document,
    *,
    layout: LayoutConfig | None = None,
    fetcher: ImageAcquirer | None = None,
) -> Composition:
    if layout is None:
        layout = LayoutConfig.from_settings(get_settings())
    validate_document(document, layout)

    if fetcher is not None:
        return await _compose(document, layout, fetcher)
    settings = get_settings()
    fetch_cfg = ImageFetchConfig(
        timeout_seconds=settings.image_fetch_timeout_seconds,
        base_dir=settings.image_base_dir,
    )
    async with ImageFetcher(fetch_cfg) as owned:
        return await _compose(document, layout, owned)


async def compose(
    document: Document,
    *,
    layout: LayoutConfig | None = None,
    fetcher: ImageAcquirer | None = None,
) -> list[RenderedPage]:
    """Lay the document out onto pages. Images are awaited one at a time, in block order."""
    composition = await compose_detailed(document, layout=layout, fetcher=fetcher)
    return composition.pages


def compose_sync(
    document: Document,
    *,
    layout: LayoutConfig | None = None,
    fetcher: ImageAcquirer | None = None,
) -> list[RenderedPage]:
    return asyncio.run(compose(document, layout=layout, fetcher=fetcher))
