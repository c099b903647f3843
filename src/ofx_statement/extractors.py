"""Typed constructors for the sections of a parsed OFX statement."""

from __future__ import annotations

import hashlib
import logging
import warnings
from typing import TYPE_CHECKING, cast

from ofx_statement.errors import OfxParseError
from ofx_statement.models import (
    Account,
    AccountType,
    Balance,
    BankAccountType,
    SignOn,
    Transaction,
    TransactionType,
)
from ofx_statement.paths import SIGNON_PATH, Section, resolve_path
from ofxtools.Types import DateTime, OFXTypeWarning
from ofxtools.Types import Decimal as OFXDecimal

if TYPE_CHECKING:  # pragma: no cover - typing helpers only
    import xml.etree.ElementTree as ET
    from datetime import datetime
    from decimal import Decimal

LOGGER = logging.getLogger(__name__)

_DATETIME = DateTime()
_AMOUNT = OFXDecimal()


def _text(node: ET.Element, path: str) -> str | None:
    """Return the stripped text at ``path`` below ``node`` or ``None`` when absent/empty."""

    child = node.find(path)
    if child is None or child.text is None:
        return None
    return child.text.strip() or None


def _require(node: ET.Element, path: str, label: str) -> str:
    value = _text(node, path)
    if value is None:
        raise OfxParseError(f'{label} not found')
    return value


def _convert(converter: DateTime | OFXDecimal, value: str, label: str) -> object:
    with warnings.catch_warnings():
        warnings.simplefilter('ignore', category=OFXTypeWarning)
        try:
            return converter.convert(value)
        except (ValueError, ArithmeticError) as exc:
            raise OfxParseError(f'Invalid {label} value: {value!r}') from exc


def parse_datetime(value: str, label: str = 'date') -> datetime:
    """Convert an OFX ``YYYYMMDDHHMMSS[.XXX][offset:TZ]`` string to an aware datetime."""

    return cast('datetime', _convert(_DATETIME, value, label))


def parse_amount(value: str, label: str = 'amount') -> Decimal:
    """Convert an OFX amount string to a signed ``Decimal``."""

    return cast('Decimal', _convert(_AMOUNT, value, label))


def _optional_datetime(node: ET.Element, path: str) -> datetime | None:
    value = _text(node, path)
    return parse_datetime(value, path) if value is not None else None


def _find_section(root: ET.Element, account_type: AccountType, section: Section, label: str) -> ET.Element:
    node = root.find(resolve_path(account_type, section))
    if node is None:
        raise OfxParseError(f'{label} not found')
    return node


def extract_currency(root: ET.Element, account_type: AccountType) -> str:
    """Return the statement's default currency (``CURDEF``)."""

    code = _text(root, resolve_path(account_type, Section.CURRENCY))
    if code is None:
        raise OfxParseError('Currency not found')
    code = code.upper()
    if len(code) != 3 or not code.isalpha():
        raise OfxParseError(f'Invalid currency code: {code!r}')
    return code


def extract_sign_on(root: ET.Element) -> SignOn:
    """Build the ``SignOn`` record from the ``SONRS`` aggregate, shared by every account type."""

    node = root.find(SIGNON_PATH)
    if node is None:
        raise OfxParseError('Sign On information not found')
    code = _require(node, 'STATUS/CODE', 'Sign On status code')
    try:
        status_code = int(code)
    except ValueError as exc:
        raise OfxParseError(f'Invalid Sign On status code: {code!r}') from exc
    return SignOn(
        status_code=status_code,
        status_severity=_require(node, 'STATUS/SEVERITY', 'Sign On status severity'),
        server_date=parse_datetime(_require(node, 'DTSERVER', 'Sign On server date'), 'DTSERVER'),
        language=_text(node, 'LANGUAGE') or '',
        institution=_text(node, 'FI/ORG'),
        institution_id=_text(node, 'FI/FID'),
        intu_bid=_text(node, 'INTU.BID'),
    )


def _bank_account_type(value: str | None) -> BankAccountType:
    if value is None:
        return BankAccountType.NA
    try:
        return BankAccountType(value.upper())
    except ValueError:
        LOGGER.debug('Unknown bank account type %r, using NA', value)
        return BankAccountType.NA


def extract_account(root: ET.Element, account_type: AccountType) -> Account:
    """Build the ``Account`` record from ``BANKACCTFROM`` or ``CCACCTFROM``."""

    node = _find_section(root, account_type, Section.ACCOUNT_INFO, 'Account information')
    account = Account(
        account_id=_require(node, 'ACCTID', 'Account number'),
        account_type=account_type,
        account_key=_text(node, 'ACCTKEY'),
    )
    if account_type is AccountType.BANK:
        account.bank_id = _text(node, 'BANKID')
        account.branch_id = _text(node, 'BRANCHID')
        account.bank_account_type = _bank_account_type(_text(node, 'ACCTTYPE'))
    return account


def extract_balance(root: ET.Element, account_type: AccountType) -> Balance:
    """Build the ``Balance`` record; ``AVAILBAL`` may be missing, ``LEDGERBAL`` may not."""

    statement = root.find(resolve_path(account_type, Section.BALANCE))
    ledger = statement.find('LEDGERBAL') if statement is not None else None
    if statement is None or ledger is None:
        raise OfxParseError('Balance information not found')
    balance = Balance(
        ledger_balance=parse_amount(_require(ledger, 'BALAMT', 'Ledger balance amount'), 'BALAMT'),
        ledger_balance_date=parse_datetime(_require(ledger, 'DTASOF', 'Ledger balance date'), 'DTASOF'),
    )
    available = statement.find('AVAILBAL')
    if available is not None:
        balance.available_balance = parse_amount(
            _require(available, 'BALAMT', 'Available balance amount'),
            'BALAMT',
        )
        balance.available_balance_date = parse_datetime(
            _require(available, 'DTASOF', 'Available balance date'),
            'DTASOF',
        )
    return balance


def extract_statement_period(
    root: ET.Element,
    account_type: AccountType,
) -> tuple[datetime | None, datetime | None]:
    """Return the ``(DTSTART, DTEND)`` pair of the transaction list, if present."""

    tranlist = root.find(resolve_path(account_type, Section.TRANSACTIONS))
    if tranlist is None:
        return None, None
    return _optional_datetime(tranlist, './/DTSTART'), _optional_datetime(tranlist, './/DTEND')


def _transaction_id(date: datetime, description: str, amount: Decimal, fallback: str | None) -> str:
    if fallback:
        return fallback
    digest = hashlib.sha256(f'{date.isoformat()}{description}{amount}'.encode()).hexdigest()
    return digest[:15]


def build_transaction(node: ET.Element, currency: str) -> Transaction:
    """Build a ``Transaction`` from a ``STMTTRN`` element."""

    type_code = _require(node, 'TRNTYPE', 'Transaction type')
    try:
        transaction_type = TransactionType(type_code.upper())
    except ValueError as exc:
        raise OfxParseError(f'Unsupported transaction type: {type_code!r}') from exc
    date_posted = parse_datetime(_require(node, 'DTPOSTED', 'Transaction posted date'), 'DTPOSTED')
    amount = parse_amount(_require(node, 'TRNAMT', 'Transaction amount'), 'TRNAMT')
    name = _text(node, 'NAME')
    memo = _text(node, 'MEMO')
    return Transaction(
        transaction_type=transaction_type,
        date_posted=date_posted,
        amount=amount,
        currency=_text(node, 'CURRENCY/CURSYM') or _text(node, 'ORIGCURRENCY/CURSYM') or currency,
        transaction_id=_transaction_id(date_posted, name or memo or '', amount, _text(node, 'FITID')),
        name=name,
        memo=memo,
        user_date=_optional_datetime(node, 'DTUSER'),
        available_date=_optional_datetime(node, 'DTAVAIL'),
        check_number=_text(node, 'CHECKNUM'),
        reference_number=_text(node, 'REFNUM'),
        sic=_text(node, 'SIC'),
        payee_id=_text(node, 'PAYEEID'),
        server_transaction_id=_text(node, 'SRVRTID'),
        corrected_transaction_id=_text(node, 'CORRECTFITID'),
        correction_action=_text(node, 'CORRECTACTION'),
        element=node,
    )


def find_transaction_nodes(root: ET.Element, account_type: AccountType) -> list[ET.Element]:
    """Return every ``STMTTRN`` below the transaction list, in document order."""

    tranlist = root.find(resolve_path(account_type, Section.TRANSACTIONS))
    if tranlist is None:
        LOGGER.debug('No transaction list found for %s statement', account_type.value)
        return []
    return list(tranlist.iter('STMTTRN'))


def extract_transactions(root: ET.Element, account_type: AccountType, currency: str) -> list[Transaction]:
    """Return the statement's transactions in document order."""

    return [build_transaction(node, currency) for node in find_transaction_nodes(root, account_type)]
