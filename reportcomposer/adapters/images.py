from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from io import BytesIO
from pathlib import Path
from typing import Protocol

import httpx
from reportlab.lib.utils import ImageReader

from reportcomposer.errors import ImageAcquisitionError
from reportcomposer.types import ImageSource


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AcquiredImage:
    data: bytes
    width: int
    height: int

    @property
    def aspect(self) -> float:
        return self.height / self.width


@dataclass
class ImageFetchConfig:
    timeout_seconds: float
    base_dir: Path | None = None


class ImageAcquirer(Protocol):
    async def acquire(self, source: ImageSource) -> AcquiredImage: ...


def decode_image(data: bytes) -> AcquiredImage:
    if not data:
        raise ImageAcquisitionError('empty image payload')
    try:
        width, height = ImageReader(BytesIO(data)).getSize()
    except Exception as exc:
        raise ImageAcquisitionError(f'cannot decode image: {type(exc).__name__}: {exc}') from exc
    if int(width) <= 0 or int(height) <= 0:
        raise ImageAcquisitionError(f'image has no area: {width}x{height}')
    return AcquiredImage(data=data, width=int(width), height=int(height))


def _is_url(reference: str) -> bool:
    return reference.lower().startswith(('http://', 'https://'))


class ImageFetcher:
    """Turns an ImageSource into bytes plus natural pixel size.

    Raw bytes are decoded in place, paths are read in a worker thread and URLs
    go through an httpx client that is shared for the lifetime of the fetcher.
    """

    def __init__(self, cfg: ImageFetchConfig, *, client: httpx.AsyncClient | None = None):
        self.cfg = cfg
        self._client = client
        self._owns_client = client is None

    async def __aenter__(self) -> 'ImageFetcher':
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None

    def client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(
                timeout=max(1.0, float(self.cfg.timeout_seconds)),
                follow_redirects=True,
            )
        return self._client

    async def acquire(self, source: ImageSource) -> AcquiredImage:
        if source.data is not None:
            return decode_image(source.data)

        reference = str(source.reference or '').strip()
        if not reference:
            raise ImageAcquisitionError('image reference is empty')
        if _is_url(reference):
            data = await self._download(reference)
        else:
            data = await self._read_file(reference)
        return decode_image(data)

    async def _download(self, url: str) -> bytes:
        try:
            resp = await self.client().get(url)
            resp.raise_for_status()
        except httpx.HTTPError as exc:
            raise ImageAcquisitionError(f'fetch failed for {url}: {type(exc).__name__}: {exc}') from exc
        logger.debug('Fetched image %s (%d bytes)', url, len(resp.content))
        return resp.content

    async def _read_file(self, reference: str) -> bytes:
        path = Path(reference).expanduser()
        if not path.is_absolute() and self.cfg.base_dir is not None:
            path = self.cfg.base_dir / path
        try:
            return await asyncio.to_thread(path.read_bytes)
        except OSError as exc:
            raise ImageAcquisitionError(f'cannot read {path}: {exc}') from exc
