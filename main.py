from __future__ import annotations

import argparse
import asyncio
import json
import logging
from dataclasses import replace
from pathlib import Path

from pydantic import ValidationError

from reportcomposer.composer import compose_detailed
from reportcomposer.config import LayoutConfig, get_settings
from reportcomposer.errors import ReportContractError
from reportcomposer.report.pdf_render import render_pdf
from reportcomposer.storage import (
    dump_pages,
    load_document,
    output_root,
    report_filename,
    write_bytes_atomic,
    write_json_atomic,
)
from reportcomposer.types import Document


logger = logging.getLogger(__name__)


def _print_json(payload: dict) -> None:
    print(json.dumps(payload, ensure_ascii=False, indent=2))


def _load(path_arg: str) -> tuple[Document | None, dict | None]:
    path = Path(path_arg).expanduser().resolve()
    if not path.exists() or not path.is_file():
        return None, {'status': 'error', 'message': f'Document not found: {path}'}
    try:
        return load_document(path), None
    except ValidationError as exc:
        errors = exc.errors(include_url=False, include_context=False, include_input=False)
        return None, {'status': 'error', 'message': f'Invalid document: {path}', 'errors': errors}


def _layout(args: argparse.Namespace) -> LayoutConfig:
    layout = LayoutConfig.from_settings(get_settings())
    if getattr(args, 'no_header_footer', False):
        layout = replace(layout, header_footer_enabled=False)
    return layout


def _block_map(block_pages: list[tuple[int, ...]]) -> list[dict]:
    return [{'block': index, 'pages': list(pages)} for index, pages in enumerate(block_pages)]


def cmd_compose(args: argparse.Namespace) -> int:
    document, error = _load(args.document)
    if document is None:
        _print_json(error or {})
        return 2

    layout = _layout(args)
    try:
        composition = asyncio.run(compose_detailed(document, layout=layout))
    except ReportContractError as exc:
        _print_json({'status': 'error', 'message': str(exc), 'block': exc.block_index})
        return 2

    output_dir = Path(args.output).expanduser().resolve() if args.output else output_root()
    pdf_path = output_dir / report_filename(
        document.report_kind,
        document.header.organization,
        document.header.generated_on,
    )
    pdf_bytes = render_pdf(
        composition.pages,
        layout,
        title=document.title,
        author=document.header.organization,
    )
    write_bytes_atomic(pdf_path, pdf_bytes)
    logger.info('Wrote %s (%d bytes)', pdf_path, len(pdf_bytes))

    payload: dict = {
        'status': 'ok',
        'pdf_path': str(pdf_path),
        'page_count': len(composition.pages),
        'image_placeholders': composition.failed_images,
    }
    if args.pages_json:
        pages_path = pdf_path.with_suffix('.pages.json')
        write_json_atomic(pages_path, dump_pages(composition.pages))
        payload['pages_json_path'] = str(pages_path)

    _print_json(payload)
    return 0


def cmd_inspect(args: argparse.Namespace) -> int:
    document, error = _load(args.document)
    if document is None:
        _print_json(error or {})
        return 2

    try:
        composition = asyncio.run(compose_detailed(document, layout=_layout(args)))
    except ReportContractError as exc:
        _print_json({'status': 'error', 'message': str(exc), 'block': exc.block_index})
        return 2

    _print_json(
        {
            'status': 'ok',
            'title': document.title,
            'page_count': len(composition.pages),
            'blocks': _block_map(composition.block_pages),
        }
    )
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description='Paginated report composer CLI')
    parser.add_argument('--log-level', default='WARNING', choices=['DEBUG', 'INFO', 'WARNING', 'ERROR'])
    sub = parser.add_subparsers(dest='command', required=True)

    compose_cmd = sub.add_parser('compose', help='Compose a document JSON into a PDF')
    compose_cmd.add_argument('--document', required=True, help='Path to the document JSON')
    compose_cmd.add_argument('--output', required=False, help='Output directory (defaults to settings.output_dir)')
    compose_cmd.add_argument('--pages-json', action='store_true', help='Also dump the rendered pages as JSON')
    compose_cmd.add_argument('--no-header-footer', action='store_true', help='Skip running headers and footers')
    compose_cmd.set_defaults(func=cmd_compose)

    inspect_cmd = sub.add_parser('inspect', help='Show page count and block-to-page mapping')
    inspect_cmd.add_argument('--document', required=True, help='Path to the document JSON')
    inspect_cmd.add_argument('--no-header-footer', action='store_true', help='Skip running headers and footers')
    inspect_cmd.set_defaults(func=cmd_inspect)

    return parser


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format='%(asctime)s [%(levelname)s] %(name)s: %(message)s',
    )
    return int(args.func(args))


if __name__ == '__main__':
    raise SystemExit(main())
