"""Output utilities for exporting parsed statements."""

from __future__ import annotations

import csv
import io
from collections.abc import Iterable
from pathlib import Path

from ofx_statement.models import StatementDocument, Transaction

CSV_COLUMNS: tuple[str, ...] = ('transaction_id', 'date', 'type', 'description', 'memo', 'amount', 'currency')
"""Column order of the exported CSV."""


def _row(txn: Transaction) -> dict[str, str]:
    return {
        'transaction_id': txn.transaction_id,
        'date': txn.date_posted.date().isoformat(),
        'type': txn.transaction_type.value,
        'description': txn.description,
        'memo': txn.memo or '',
        'amount': format(txn.amount, 'f'),
        'currency': txn.currency,
    }


def build_csv_payload(transactions: Iterable[Transaction], *, delimiter: str = ',') -> str:
    """Serialize transactions into a CSV string, one row per transaction."""

    if not isinstance(transactions, Iterable):
        raise TypeError('transactions must be iterable')

    buffer = io.StringIO()
    writer = csv.DictWriter(buffer, fieldnames=list(CSV_COLUMNS), delimiter=delimiter)
    writer.writeheader()
    for txn in transactions:
        writer.writerow(_row(txn))
    return buffer.getvalue()


def render_document(document: StatementDocument) -> str:
    """Return the debug rendering: header, blank line, normalized markup."""

    if not isinstance(document, StatementDocument):
        raise TypeError('invalid statement document')
    return str(document)


def write_output(
    document: StatementDocument,
    *,
    output_path: Path | str | None,
    delimiter: str = ',',
) -> str:
    """Write the CSV payload to ``output_path`` if provided and return the CSV string."""

    if not isinstance(document, StatementDocument):
        raise TypeError('invalid statement document')

    csv_payload = build_csv_payload(document.transactions, delimiter=delimiter)
    if output_path:
        path = Path(output_path)
        with path.open('w', encoding='utf-8', newline='') as handle:
            handle.write(csv_payload)
    return csv_payload
