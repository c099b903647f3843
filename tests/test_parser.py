import io
from datetime import UTC, datetime
from decimal import Decimal
from pathlib import Path

import pytest

from ofx_statement import parser
from ofx_statement.errors import OfxError, OfxParseError
from ofx_statement.models import AccountType, BankAccountType, StatementDocument


def test_parse_text_bank_sgml(bank_sgml: str) -> None:
    document = parser.parse_text(bank_sgml)
    assert isinstance(document, StatementDocument)
    assert document.account_type is AccountType.BANK
    assert document.currency == 'BRL'
    assert document.sign_on.status_code == 0
    assert document.account.account_id == '98765-4'
    assert document.balance.ledger_balance == Decimal('2334.10')
    assert document.statement_start == datetime(2024, 1, 1, tzinfo=UTC)
    assert document.statement_end == datetime(2024, 1, 31, tzinfo=UTC)
    assert [txn.transaction_id for txn in document.transactions] == ['T1', 'T2', 'T3']
    assert document.header.startswith('OFXHEADER:100\r\n')
    assert document.tree.tag == 'OFX'


def test_parse_text_credit_card_sgml(credit_card_sgml: str) -> None:
    document = parser.parse_text(credit_card_sgml)
    assert document.account_type is AccountType.CREDIT_CARD
    assert document.currency == 'USD'
    assert document.balance.available_balance is None
    assert len(document.transactions) == 1
    assert document.transactions[0].description == 'COFFEE SHOP'


def test_parse_text_xml_skips_normalization(monkeypatch: pytest.MonkeyPatch, bank_xml: str) -> None:
    def fail_normalize(_markup: str) -> str:
        raise AssertionError('normalization should be skipped for XML input')

    monkeypatch.setattr(parser, 'normalize_sgml', fail_normalize)
    document = parser.parse_text(bank_xml)
    assert document.header == ''
    assert document.currency == 'EUR'
    assert document.account.bank_account_type is BankAccountType.SAVINGS
    assert document.transactions[0].amount == Decimal('1.23')


def test_parse_text_rejects_bad_header(bank_sgml: str) -> None:
    with pytest.raises(OfxParseError, match='VERSION'):
        parser.parse_text(bank_sgml.replace('VERSION:102', 'VERSION:151'))


def test_parse_text_rejects_unsupported_account_type(bank_sgml: str) -> None:
    text = bank_sgml.replace('BANKMSGSRSV1', 'INVSTMTMSGSRSV1')
    with pytest.raises(OfxError, match='Unsupported account type'):
        parser.parse_text(text)


def test_parse_text_missing_ledger_balance_fails(bank_sgml: str) -> None:
    with pytest.raises(OfxParseError, match='Balance information not found'):
        parser.parse_text(bank_sgml.replace('LEDGERBAL', 'BALLIST'))


def test_parse_text_missing_currency_fails(bank_sgml: str) -> None:
    with pytest.raises(OfxParseError, match='Currency not found'):
        parser.parse_text(bank_sgml.replace('<CURDEF>BRL\n', ''))


def test_parse_text_allows_empty_transaction_list(bank_sgml: str) -> None:
    start = bank_sgml.index('<STMTTRN>')
    end = bank_sgml.rindex('</STMTTRN>') + len('</STMTTRN>')
    document = parser.parse_text(bank_sgml[:start] + bank_sgml[end:])
    assert document.transactions == []
    assert not document.has_transactions()


def test_parse_text_strips_byte_order_mark(bank_sgml: str) -> None:
    document = parser.parse_text('\ufeff' + bank_sgml)
    assert document.header.startswith('OFXHEADER:100')


def test_document_rendering(bank_sgml: str, bank_xml: str) -> None:
    sgml_document = parser.parse_text(bank_sgml)
    rendered = str(sgml_document)
    header, _, markup = rendered.partition('\n\n')
    assert header == sgml_document.header
    assert markup.startswith('<OFX><SIGNONMSGSRSV1>')
    assert '\n' not in markup

    xml_document = parser.parse_text(bank_xml)
    assert str(xml_document).startswith('\n\n<OFX>')


def test_parse_bytes_sniffs_cp1252(bank_sgml: str) -> None:
    data = bank_sgml.replace('ACME PAYROLL', 'CAFÉ SÃO JOSÉ').encode('cp1252')
    document = parser.parse_bytes(data)
    assert document.transactions[2].name == 'CAFÉ SÃO JOSÉ'


def test_parse_bytes_explicit_encoding_wins(bank_sgml: str) -> None:
    data = bank_sgml.replace('ACME PAYROLL', 'ÜBER').encode('utf-8')
    document = parser.parse_bytes(data, encoding='utf-8')
    assert document.transactions[2].name == 'ÜBER'


def test_parse_bytes_decode_error(bank_sgml: str) -> None:
    data = bank_sgml.replace('ACME PAYROLL', 'ÜBER').encode('utf-8')
    with pytest.raises(OfxParseError, match='Unable to decode'):
        parser.parse_bytes(data, encoding='ascii')


def test_resolve_encoding_fallbacks(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(parser.locale, 'getpreferredencoding', lambda _do_setlocale: 'latin-1')
    assert parser.resolve_encoding(b'<OFX></OFX>') == 'latin-1'
    assert parser.resolve_encoding(b'\xef\xbb\xbf<OFX></OFX>') == 'utf-8-sig'
    assert parser.resolve_encoding(b'<OFX></OFX>', 'utf-16') == 'utf-16'


def test_parse_stream(bank_xml: str) -> None:
    document = parser.parse_stream(io.BytesIO(bank_xml.encode('utf-8')))
    assert document.account.account_id == '555'


def test_parse_file(tmp_path: Path, credit_card_sgml: str) -> None:
    target = tmp_path / 'statement.ofx'
    target.write_bytes(credit_card_sgml.encode('ascii'))
    document = parser.parse_file(target)
    assert document.account_type is AccountType.CREDIT_CARD
    assert document.account.account_id == '4111111111111111'


def test_parse_file_missing(tmp_path: Path) -> None:
    with pytest.raises(FileNotFoundError):
        parser.parse_file(tmp_path / 'missing.ofx')


def test_parse_text_tolerates_empty_extension_tag(bank_sgml: str) -> None:
    text = bank_sgml.replace('<DTPOSTED>', '<BANKEXT>\n<DTPOSTED>', 1)
    document = parser.parse_text(text)
    assert [txn.transaction_id for txn in document.transactions] == ['T1', 'T2', 'T3']
    assert document.transactions[0].amount == Decimal('-45.90')
