from __future__ import annotations

import asyncio
import io
from datetime import date

import pytest
from PIL import Image as PILImage

from reportcomposer.adapters.images import AcquiredImage
from reportcomposer.config import LayoutConfig, get_settings
from reportcomposer.errors import ImageAcquisitionError
from reportcomposer.types import Document, HeaderMeta, ImageSource


def png_bytes(width: int = 40, height: int = 20, color: str = 'red') -> bytes:
    buffer = io.BytesIO()
    PILImage.new('RGB', (width, height), color).save(buffer, format='PNG')
    return buffer.getvalue()


def make_document(*blocks, logo: ImageSource | None = None, title: str = 'Energy Review') -> Document:
    return Document(
        title=title,
        report_kind='EnergyReview',
        header=HeaderMeta(organization='Acme Energy', logo=logo, generated_on=date(2024, 3, 15)),
        blocks=blocks,
    )


class FakeFetcher:
    """Serves images by reference; unknown references fail like a broken download."""

    def __init__(self, images: dict[str, AcquiredImage] | None = None):
        self.images = images or {}
        self.calls: list[str] = []
        self.events: list[tuple[str, str]] = []

    async def acquire(self, source: ImageSource) -> AcquiredImage:
        key = source.reference or 'inline'
        self.calls.append(key)
        self.events.append(('start', key))
        await asyncio.sleep(0)
        self.events.append(('end', key))
        if key in self.images:
            return self.images[key]
        raise ImageAcquisitionError(f'no image for {key}')


@pytest.fixture(autouse=True)
def _fresh_settings(monkeypatch, tmp_path):
    monkeypatch.chdir(tmp_path)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def layout() -> LayoutConfig:
    return LayoutConfig()


@pytest.fixture
def fetcher() -> FakeFetcher:
    return FakeFetcher()
