from __future__ import annotations

import json

from main import main
from reportcomposer.types import DataTable, Heading, Paragraph

from conftest import make_document


def _write_document(tmp_path, *blocks):
    path = tmp_path / 'document.json'
    path.write_text(make_document(*blocks).model_dump_json(), encoding='utf-8')
    return path


def test_compose_writes_pdf_and_pages(tmp_path, capsys):
    document = _write_document(
        tmp_path,
        Heading(text='Site Audit'),
        DataTable(header=('n',), rows=tuple((str(index),) for index in range(60))),
    )
    out_dir = tmp_path / 'out'

    code = main(['compose', '--document', str(document), '--output', str(out_dir), '--pages-json'])

    assert code == 0
    payload = json.loads(capsys.readouterr().out)
    pdf_path = out_dir / 'EnergyReview_Acme-Energy_2024-03-15.pdf'
    assert payload['status'] == 'ok'
    assert payload['pdf_path'] == str(pdf_path)
    assert payload['page_count'] >= 2
    assert pdf_path.read_bytes().startswith(b'%PDF')
    pages = json.loads((out_dir / 'EnergyReview_Acme-Energy_2024-03-15.pages.json').read_text(encoding='utf-8'))
    assert len(pages) == payload['page_count']


def test_inspect_reports_block_pages(tmp_path, capsys):
    document = _write_document(tmp_path, Paragraph(text='One'), Paragraph(text='Two'))

    assert main(['inspect', '--document', str(document), '--no-header-footer']) == 0
    payload = json.loads(capsys.readouterr().out)
    assert payload['page_count'] == 1
    assert payload['blocks'] == [{'block': 0, 'pages': [1]}, {'block': 1, 'pages': [1]}]


def test_missing_document_exits_with_2(tmp_path, capsys):
    assert main(['inspect', '--document', str(tmp_path / 'absent.json')]) == 2
    assert json.loads(capsys.readouterr().out)['status'] == 'error'


def test_invalid_document_reports_validation_errors(tmp_path, capsys):
    path = tmp_path / 'bad.json'
    path.write_text(json.dumps({'title': 'x', 'blocks': [{'kind': 'chart'}]}), encoding='utf-8')

    assert main(['compose', '--document', str(path), '--output', str(tmp_path)]) == 2
    payload = json.loads(capsys.readouterr().out)
    assert payload['message'].startswith('Invalid document')
    assert payload['errors']


def test_contract_error_names_the_block(tmp_path, capsys):
    document = _write_document(tmp_path, Paragraph(text='ok'), DataTable(header=('a', 'b'), rows=(('1',),)))

    assert main(['compose', '--document', str(document), '--output', str(tmp_path / 'out')]) == 2
    payload = json.loads(capsys.readouterr().out)
    assert payload['block'] == 1
    assert not (tmp_path / 'out').exists()
