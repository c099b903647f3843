"""Input discovery and statement classification helpers."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from ofx_statement.errors import OfxError
from ofx_statement.models import AccountType

if TYPE_CHECKING:  # pragma: no cover - typing helpers only
    from collections.abc import Iterable, Iterator
    from pathlib import Path

LOGGER = logging.getLogger(__name__)

SUPPORTED_SUFFIXES: frozenset[str] = frozenset({'.ofx', '.qfx'})
"""File suffixes picked up when scanning directories."""

ACCOUNT_MARKERS: tuple[tuple[str, AccountType], ...] = (
    ('<CREDITCARDMSGSRSV1>', AccountType.CREDIT_CARD),
    ('<BANKMSGSRSV1>', AccountType.BANK),
)
"""Response wrappers identifying the account type, checked in order."""


def detect_account_type(text: str) -> AccountType:
    """Classify raw OFX ``text`` as a credit-card or bank statement."""

    haystack = text.upper()
    for marker, account_type in ACCOUNT_MARKERS:
        if marker in haystack:
            LOGGER.debug('Detected %s statement via %s', account_type.value, marker)
            return account_type
    raise OfxError('Unsupported account type: no bank or credit card statement response found')


def is_supported(path: Path) -> bool:
    """Return ``True`` if ``path`` looks like an OFX/QFX statement file."""

    return path.suffix.lower() in SUPPORTED_SUFFIXES


def iter_jobs(target: Path) -> Iterator[Path]:
    """Yield statement files for ``target`` (file or directory)."""

    expanded = target.expanduser()
    if expanded.is_file():
        if not is_supported(expanded):
            raise ValueError(f'Unsupported input format: {expanded.suffix}')
        yield expanded
        return

    if not expanded.is_dir():
        raise FileNotFoundError(f'Input path not found: {expanded}')

    for entry in sorted(expanded.iterdir()):
        if entry.is_file() and is_supported(entry):
            yield entry


def gather_jobs(paths: Iterable[Path]) -> list[Path]:
    """Collect statement files for all provided ``paths``."""

    jobs: list[Path] = []
    for path in paths:
        jobs.extend(iter_jobs(path))
    return jobs
