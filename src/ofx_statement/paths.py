"""Structural paths to the sections of an OFX statement.

Paths are relative to the ``<OFX>`` root element and can be handed directly
to :meth:`xml.etree.ElementTree.Element.find`.
"""

from __future__ import annotations

from enum import Enum

from ofx_statement.errors import OfxError
from ofx_statement.models import AccountType


class Section(str, Enum):
    """Logical sections looked up in a statement."""

    SIGNON = 'signon'
    ACCOUNT_INFO = 'account_info'
    TRANSACTIONS = 'transactions'
    BALANCE = 'balance'
    CURRENCY = 'currency'


SIGNON_PATH = 'SIGNONMSGSRSV1/SONRS'
TRANSACTION_LIST_TAG = 'BANKTRANLIST'
CURRENCY_TAG = 'CURDEF'

ACCOUNT_PATHS: dict[AccountType, tuple[str, str]] = {
    AccountType.BANK: ('BANKMSGSRSV1/STMTTRNRS/STMTRS', 'BANKACCTFROM'),
    AccountType.CREDIT_CARD: ('CREDITCARDMSGSRSV1/CCSTMTTRNRS/CCSTMTRS', 'CCACCTFROM'),
}
"""Statement response root and account aggregate tag per account type."""


def resolve_path(account_type: AccountType, section: Section) -> str:
    """Return the path to ``section`` for statements of ``account_type``."""

    try:
        base, account_tag = ACCOUNT_PATHS[account_type]
    except (KeyError, TypeError) as exc:
        raise OfxError(f'Account type not supported: {account_type!r}') from exc

    section_paths: dict[Section, str] = {
        Section.ACCOUNT_INFO: f'{base}/{account_tag}',
        Section.BALANCE: base,
        Section.TRANSACTIONS: f'{base}/{TRANSACTION_LIST_TAG}',
        Section.SIGNON: SIGNON_PATH,
        Section.CURRENCY: f'{base}/{CURRENCY_TAG}',
    }
    try:
        return section_paths[section]
    except (KeyError, TypeError) as exc:
        raise OfxError(f'Unknown section: {section!r}') from exc
