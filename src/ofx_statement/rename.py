"""Rewrite transaction memos using a prefix → replacement mapping."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from ofx_statement.errors import OfxError

if TYPE_CHECKING:  # pragma: no cover - typing helpers only
    from collections.abc import Mapping

    from ofx_statement.models import StatementDocument

LOGGER = logging.getLogger(__name__)


def ordered_prefixes(mapping: Mapping[str, str]) -> list[str]:
    """Return the mapping keys longest first; equal lengths keep insertion order."""

    return sorted(mapping, key=len, reverse=True)


def match_prefix(memo: str, prefixes: list[str]) -> str | None:
    """Return the first prefix ``memo`` starts with, if any."""

    for prefix in prefixes:
        if memo.startswith(prefix):
            return prefix
    return None


def rename_transactions(document: StatementDocument, mapping: Mapping[str, str]) -> StatementDocument:
    """Replace memos starting with a mapping key by the mapped text, in place.

    Empty replacement values leave the memo untouched. Both the parsed tree
    and the ``Transaction`` records are updated so that
    :meth:`StatementDocument.to_markup` reflects the new memos.
    """

    if document is None or not document.transactions or document.tree is None or not mapping:
        raise OfxError('Invalid arguments: a statement with transactions and a non-empty mapping are required')

    prefixes = ordered_prefixes(mapping)
    renamed = 0
    for transaction in document.transactions:
        if transaction.element is None:
            continue
        memo_node = transaction.element.find('MEMO')
        if memo_node is None or not (memo_node.text or '').strip():
            continue
        prefix = match_prefix((memo_node.text or '').strip(), prefixes)
        if prefix is None:
            continue
        replacement = mapping[prefix]
        if not replacement:
            continue
        memo_node.text = replacement
        transaction.memo = replacement
        renamed += 1
    LOGGER.debug('Renamed %d of %d transaction memos', renamed, len(document.transactions))
    return document
