"""Assemble ``StatementDocument`` objects from OFX files, streams and text."""

from __future__ import annotations

import locale
import logging
from pathlib import Path
from typing import IO

from ofx_statement.detect import detect_account_type
from ofx_statement.errors import OfxParseError
from ofx_statement.extractors import (
    extract_account,
    extract_balance,
    extract_currency,
    extract_sign_on,
    extract_statement_period,
    extract_transactions,
)
from ofx_statement.header import is_sgml, read_header, sniff_encoding
from ofx_statement.models import StatementDocument
from ofx_statement.sgml import normalize_sgml, parse_markup

LOGGER = logging.getLogger(__name__)

_BOM = '\ufeff'


def parse_text(text: str) -> StatementDocument:
    """Parse decoded OFX ``text`` (SGML with header, or XML) into a document.

    Either every required section is found and a complete document is
    returned, or an :class:`~ofx_statement.errors.OfxError` is raised.
    """

    text = text.lstrip(_BOM)
    header = ''
    markup = text
    if is_sgml(text):
        header, body = read_header(text)
        markup = normalize_sgml(body)
    else:
        LOGGER.debug('No SGML header found, parsing as XML')

    account_type = detect_account_type(text)
    root = parse_markup(markup)

    currency = extract_currency(root, account_type)
    sign_on = extract_sign_on(root)
    account = extract_account(root, account_type)
    statement_start, statement_end = extract_statement_period(root, account_type)
    transactions = extract_transactions(root, account_type, currency)
    balance = extract_balance(root, account_type)
    LOGGER.debug('Parsed %d transactions for account %s', len(transactions), account.account_id)

    return StatementDocument(
        account_type=account_type,
        currency=currency,
        sign_on=sign_on,
        account=account,
        balance=balance,
        tree=root,
        transactions=transactions,
        statement_start=statement_start,
        statement_end=statement_end,
        header=header,
    )


def resolve_encoding(data: bytes, encoding: str | None = None) -> str:
    """Pick the codec for ``data``: explicit, declared in the file, or platform default."""

    if encoding:
        return encoding
    if data.startswith(_BOM.encode('utf-8')):
        return 'utf-8-sig'
    return sniff_encoding(data) or locale.getpreferredencoding(False)


def parse_bytes(data: bytes, encoding: str | None = None) -> StatementDocument:
    """Decode ``data`` and parse it with :func:`parse_text`."""

    codec = resolve_encoding(data, encoding)
    try:
        text = data.decode(codec)
    except (UnicodeDecodeError, LookupError) as exc:
        raise OfxParseError(f'Unable to decode OFX data as {codec}: {exc}') from exc
    return parse_text(text)


def parse_stream(handle: IO[bytes], encoding: str | None = None) -> StatementDocument:
    """Read a binary stream fully and parse it."""

    return parse_bytes(handle.read(), encoding)


def parse_file(path: Path | str, encoding: str | None = None) -> StatementDocument:
    """Open ``path`` read-only and parse its contents."""

    source = Path(path).expanduser()
    LOGGER.debug('Reading OFX statement %s', source)
    with source.open('rb') as handle:
        return parse_stream(handle, encoding)
