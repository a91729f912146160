from __future__ import annotations

import json
import re
from datetime import date
from pathlib import Path
from typing import Any, Iterable

from pydantic import TypeAdapter

from .config import get_settings
from .types import Document, RenderedPage


_UNSAFE_FILENAME_CHARS = re.compile(r'[^0-9A-Za-z._-]+')
_PAGES_ADAPTER = TypeAdapter(list[RenderedPage])


def output_root() -> Path:
    root = get_settings().output_dir
    root.mkdir(parents=True, exist_ok=True)
    return root


def _filename_token(value: str, fallback: str) -> str:
    token = _UNSAFE_FILENAME_CHARS.sub('-', str(value or '').strip()).strip('-.')
    return token or fallback


def report_filename(kind: str, organization: str, generated_on: date, ext: str = 'pdf') -> str:
    """``<ReportKind>_<Organization>_<YYYY-MM-DD>.<ext>``"""
    return '_'.join(
        [
            _filename_token(kind, 'Report'),
            _filename_token(organization, 'Organization'),
            generated_on.isoformat(),
        ]
    ) + '.' + ext.lstrip('.')


def write_json_atomic(path: Path, payload: Any) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    tmp = path.with_suffix(path.suffix + '.tmp')
    tmp.write_text(json.dumps(payload, ensure_ascii=False, indent=2), encoding='utf-8')
    tmp.replace(path)


def write_bytes_atomic(path: Path, content: bytes) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    tmp = path.with_suffix(path.suffix + '.tmp')
    tmp.write_bytes(content)
    tmp.replace(path)


def load_document(path: Path) -> Document:
    return Document.model_validate_json(path.read_text(encoding='utf-8'))


def dump_pages(pages: Iterable[RenderedPage]) -> list[dict[str, Any]]:
    return _PAGES_ADAPTER.dump_python(list(pages), mode='json')


def load_pages(payload: list[dict[str, Any]]) -> list[RenderedPage]:
    # Through JSON so base64 image payloads decode back to bytes.
    return _PAGES_ADAPTER.validate_json(json.dumps(payload))
