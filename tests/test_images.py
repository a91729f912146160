from __future__ import annotations

import asyncio

import httpx
import pytest

from reportcomposer.adapters.images import ImageFetchConfig, ImageFetcher, decode_image
from reportcomposer.errors import ImageAcquisitionError
from reportcomposer.types import ImageSource

from conftest import png_bytes


def _fetcher(handler=None, base_dir=None) -> ImageFetcher:
    client = None
    if handler is not None:
        client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return ImageFetcher(ImageFetchConfig(timeout_seconds=5, base_dir=base_dir), client=client)


def _acquire(fetcher: ImageFetcher, source: ImageSource):
    async def run():
        async with fetcher:
            return await fetcher.acquire(source)

    return asyncio.run(run())


def test_decode_image_reads_pixel_size():
    image = decode_image(png_bytes(120, 30))
    assert (image.width, image.height) == (120, 30)
    assert image.aspect == pytest.approx(0.25)


@pytest.mark.parametrize('payload', [b'', b'definitely not an image'])
def test_decode_image_rejects_garbage(payload):
    with pytest.raises(ImageAcquisitionError):
        decode_image(payload)


def test_image_source_needs_exactly_one_origin():
    with pytest.raises(ValueError):
        ImageSource()
    with pytest.raises(ValueError):
        ImageSource(data=b'x', reference='logo.png')


def test_inline_bytes_skip_io():
    image = _acquire(_fetcher(), ImageSource(data=png_bytes(10, 10)))
    assert image.width == 10


def test_relative_path_resolves_against_base_dir(tmp_path):
    (tmp_path / 'charts').mkdir()
    (tmp_path / 'charts' / 'load.png').write_bytes(png_bytes(64, 48))

    image = _acquire(_fetcher(base_dir=tmp_path), ImageSource(reference='charts/load.png'))
    assert (image.width, image.height) == (64, 48)


def test_missing_file_raises(tmp_path):
    with pytest.raises(ImageAcquisitionError):
        _acquire(_fetcher(base_dir=tmp_path), ImageSource(reference='nope.png'))


def test_url_is_downloaded():
    payload = png_bytes(32, 16)
    requested = []

    def handler(request: httpx.Request) -> httpx.Response:
        requested.append(str(request.url))
        return httpx.Response(200, content=payload, headers={'content-type': 'image/png'})

    image = _acquire(_fetcher(handler), ImageSource(reference='https://cdn.example.com/site.png'))
    assert requested == ['https://cdn.example.com/site.png']
    assert image.data == payload
    assert image.aspect == pytest.approx(0.5)


def test_http_error_becomes_acquisition_error():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(404, text='missing')

    with pytest.raises(ImageAcquisitionError, match='404|HTTPStatusError'):
        _acquire(_fetcher(handler), ImageSource(reference='https://cdn.example.com/gone.png'))


def test_undecodable_download_becomes_acquisition_error():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, content=b'<html>not a picture</html>')

    with pytest.raises(ImageAcquisitionError):
        _acquire(_fetcher(handler), ImageSource(reference='http://cdn.example.com/page'))
