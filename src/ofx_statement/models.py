"""Shared data models used across OFX statement modules."""

from __future__ import annotations

import xml.etree.ElementTree as ET
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING

if TYPE_CHECKING:  # pragma: no cover - type-checking imports only
    from datetime import datetime
    from decimal import Decimal


class AccountType(str, Enum):
    """Statement flavours supported by the parser."""

    BANK = 'bank'
    CREDIT_CARD = 'credit_card'


class BankAccountType(str, Enum):
    """Values of the ``ACCTTYPE`` element of a bank account."""

    CHECKING = 'CHECKING'
    SAVINGS = 'SAVINGS'
    MONEYMRKT = 'MONEYMRKT'
    CREDITLINE = 'CREDITLINE'
    CD = 'CD'
    NA = 'NA'

    @property
    def description(self) -> str:
        return BANK_ACCOUNT_DESCRIPTIONS[self]


BANK_ACCOUNT_DESCRIPTIONS: dict[BankAccountType, str] = {
    BankAccountType.CHECKING: 'Checking Account',
    BankAccountType.SAVINGS: 'Savings Account',
    BankAccountType.MONEYMRKT: 'Money Market Account',
    BankAccountType.CREDITLINE: 'Line of Credit',
    BankAccountType.CD: 'Certificate of Deposit',
    BankAccountType.NA: 'Not Available',
}


class TransactionType(str, Enum):
    """Values of the ``TRNTYPE`` element."""

    CREDIT = 'CREDIT'
    DEBIT = 'DEBIT'
    INT = 'INT'
    DIV = 'DIV'
    FEE = 'FEE'
    SRVCHG = 'SRVCHG'
    DEP = 'DEP'
    ATM = 'ATM'
    POS = 'POS'
    XFER = 'XFER'
    CHECK = 'CHECK'
    PAYMENT = 'PAYMENT'
    CASH = 'CASH'
    DIRECTDEP = 'DIRECTDEP'
    DIRECTDEBIT = 'DIRECTDEBIT'
    REPEATPMT = 'REPEATPMT'
    HOLD = 'HOLD'
    OTHER = 'OTHER'


@dataclass(slots=True)
class SignOn:
    """Sign-on response status sent ahead of every statement."""

    status_code: int
    status_severity: str
    server_date: datetime
    language: str = ''
    institution: str | None = None
    institution_id: str | None = None
    intu_bid: str | None = None


@dataclass(slots=True)
class Account:
    """Account the statement was issued for."""

    account_id: str
    account_type: AccountType
    bank_id: str | None = None
    branch_id: str | None = None
    account_key: str | None = None
    bank_account_type: BankAccountType | None = None


@dataclass(slots=True)
class Balance:
    """Ledger balance plus the optional available balance."""

    ledger_balance: Decimal
    ledger_balance_date: datetime
    available_balance: Decimal | None = None
    available_balance_date: datetime | None = None


@dataclass(slots=True)
class Transaction:
    """Single ``STMTTRN`` record in document order."""

    transaction_type: TransactionType
    date_posted: datetime
    amount: Decimal
    currency: str
    transaction_id: str
    name: str | None = None
    memo: str | None = None
    user_date: datetime | None = None
    available_date: datetime | None = None
    check_number: str | None = None
    reference_number: str | None = None
    sic: str | None = None
    payee_id: str | None = None
    server_transaction_id: str | None = None
    corrected_transaction_id: str | None = None
    correction_action: str | None = None
    element: ET.Element | None = field(default=None, repr=False, compare=False)

    @property
    def description(self) -> str:
        """Return the best human readable label for the transaction."""

        return (self.name or self.memo or '').strip()


@dataclass(slots=True)
class StatementDocument:
    """Fully parsed OFX statement."""

    account_type: AccountType
    currency: str
    sign_on: SignOn
    account: Account
    balance: Balance
    tree: ET.Element = field(repr=False, compare=False)
    transactions: list[Transaction] = field(default_factory=list)
    statement_start: datetime | None = None
    statement_end: datetime | None = None
    header: str = ''

    def has_transactions(self) -> bool:
        """Return ``True`` if the statement lists at least one transaction."""

        return bool(self.transactions)

    def to_markup(self) -> str:
        """Serialize the (possibly renamed) tree as well-formed markup."""

        return ET.tostring(self.tree, encoding='unicode')

    def summary(self) -> str:
        """Return a human readable summary string for logging/UX."""

        count = len(self.transactions)
        return (
            f'{self.account_type.value} account {self.account.account_id}: {count} transactions, '
            f'ledger balance {self.balance.ledger_balance} {self.currency}'
        )

    def __str__(self) -> str:
        return f'{self.header}\n\n{self.to_markup()}'
