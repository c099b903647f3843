"""SGML tag-soup normalization for OFX 1.x statements.

OFX 1.x bodies are SGML: element (leaf) tags usually have no closing tag,
tag names are case-insensitive and text is not reliably escaped. The body is
read with the ``ofxtools`` tree builder, extended with a :class:`TagModel`
that decides which tags close implicitly, and re-emitted through
:mod:`xml.etree.ElementTree` as strict, single-line markup.
"""

from __future__ import annotations

import html
import logging
import re
import xml.etree.ElementTree as ET
from dataclasses import dataclass

from ofx_statement.errors import OfxParseError
from ofxtools.Parser import ParseError, TreeBuilder

LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class TagModel:
    """DTD-like description of which tags are aggregates and which are leaves.

    Tags missing from both sets are classified while reading: an unknown tag
    carrying text is a leaf, one whose end tag appears in the document is an
    aggregate, and any other is an empty leaf.
    """

    aggregates: frozenset[str]
    elements: frozenset[str]

    def is_aggregate(self, tag: str) -> bool:
        return tag in self.aggregates

    def is_element(self, tag: str) -> bool:
        return tag in self.elements


OFX_TAG_MODEL = TagModel(
    aggregates=frozenset(
        {
            'OFX',
            # sign-on
            'SIGNONMSGSRQV1',
            'SIGNONMSGSRSV1',
            'SONRQ',
            'SONRS',
            'STATUS',
            'FI',
            # banking
            'BANKMSGSRQV1',
            'BANKMSGSRSV1',
            'STMTTRNRQ',
            'STMTTRNRS',
            'STMTRQ',
            'STMTRS',
            'BANKACCTFROM',
            'BANKACCTTO',
            'BANKTRANLIST',
            'STMTTRN',
            'LEDGERBAL',
            'AVAILBAL',
            'BALLIST',
            'BAL',
            'PAYEE',
            'CURRENCY',
            'ORIGCURRENCY',
            'INCTRAN',
            # credit card
            'CREDITCARDMSGSRQV1',
            'CREDITCARDMSGSRSV1',
            'CCSTMTTRNRQ',
            'CCSTMTTRNRS',
            'CCSTMTRQ',
            'CCSTMTRS',
            'CCACCTFROM',
            'CCACCTTO',
            # account information
            'SIGNUPMSGSRSV1',
            'ACCTINFOTRNRS',
            'ACCTINFORS',
            'ACCTINFO',
            'BANKACCTINFO',
            'CCACCTINFO',
        },
    ),
    elements=frozenset(
        {
            'CODE',
            'SEVERITY',
            'MESSAGE',
            'DTSERVER',
            'USERKEY',
            'TSKEYEXPIRE',
            'LANGUAGE',
            'DTPROFUP',
            'DTACCTUP',
            'ORG',
            'FID',
            'SESSCOOKIE',
            'INTU.BID',
            'INTU.USERID',
            'TRNUID',
            'CLTCOOKIE',
            'CURDEF',
            'BANKID',
            'BRANCHID',
            'ACCTID',
            'ACCTTYPE',
            'ACCTKEY',
            'DTSTART',
            'DTEND',
            'TRNTYPE',
            'DTPOSTED',
            'DTUSER',
            'DTAVAIL',
            'TRNAMT',
            'FITID',
            'CORRECTFITID',
            'CORRECTACTION',
            'SRVRTID',
            'CHECKNUM',
            'REFNUM',
            'SIC',
            'PAYEEID',
            'NAME',
            'EXTDNAME',
            'MEMO',
            'CURRATE',
            'CURSYM',
            'BALAMT',
            'DTASOF',
            'DESC',
            'BALTYPE',
            'VALUE',
            'MKTGINFO',
            'SUPTXDL',
            'XFERSRC',
            'XFERDEST',
            'SVCSTATUS',
        },
    ),
)
"""Tag model covering the OFX 1.02 sign-on, banking, credit-card and signup messages."""

_DECLARATION_RE = re.compile(r'<!--.*?-->|<![A-Za-z][^<>]*>|<\?[^<>]*>', re.DOTALL)
_ATTRIBUTES_RE = re.compile(r'<(/?[A-Za-z_][\w.]*)\s+[^<>!]*>')
_CLOSE_TAG_RE = re.compile(r'</\s*([A-Za-z0-9./_]+)\s*>')


class SgmlNormalizer(TreeBuilder):
    """``ofxtools`` tree builder that closes OFX elements according to a :class:`TagModel`.

    Tag names are matched case-insensitively and upper-cased. Leaf text is
    entity-decoded while CDATA sections are kept verbatim. Use it like any
    ``TreeBuilder``: :meth:`feed` the body, then :meth:`close` to get the root.
    """

    regex = re.compile(TreeBuilder.regex.pattern, TreeBuilder.regex.flags | re.IGNORECASE)

    def __init__(self, tag_model: TagModel = OFX_TAG_MODEL) -> None:
        super().__init__()
        self._model = tag_model
        self._open: list[str] = []
        self._closed_tags: frozenset[str] = frozenset()
        self._root_tag: str | None = None

    def feed(self, data: str) -> None:
        markup = _ATTRIBUTES_RE.sub(r'<\1>', _DECLARATION_RE.sub('', data))
        self._closed_tags = frozenset(tag.upper() for tag in _CLOSE_TAG_RE.findall(markup))
        self._check_coverage(markup)
        try:
            super().feed(markup)
        except ParseError as exc:
            raise OfxParseError(f'Malformed OFX markup: {exc.args[0]}') from exc

    def _check_coverage(self, markup: str) -> None:
        """Reject stray ``<`` the tag regex would otherwise skip without a trace."""

        position = 0
        for match in self.regex.finditer(markup):
            self._check_gap(markup[position : match.start()])
            position = match.end()
        self._check_gap(markup[position:])

    @staticmethod
    def _check_gap(text: str) -> None:
        if '<' in text:
            snippet = text[text.index('<') :][:30]
            raise OfxParseError(f'Malformed tag near {snippet!r}')
        if text.strip():
            LOGGER.warning('Ignoring text outside the OFX root element: %r', text.strip()[:30])

    def _feedmatch(self, tag: str, text: str | None, closetag: str | None) -> None:
        super()._feedmatch(tag.strip().upper(), text, closetag.strip().upper() if closetag else None)

    def _start(self, tag: str, text: str | None, closetag: str | None) -> None:
        if text and self._model.is_aggregate(tag):
            raise OfxParseError(f'Unexpected text {text[:30]!r} inside <{tag}>')
        super()._start(tag, text, closetag)
        if not text and not closetag and self._is_empty_leaf(tag):
            self.end(tag)

    def _is_empty_leaf(self, tag: str) -> bool:
        # unknown tags are aggregates only when an end tag for them appears somewhere
        if self._model.is_element(tag):
            return True
        return not self._model.is_aggregate(tag) and tag not in self._closed_tags

    @staticmethod
    def _groomstring(string: str | None) -> str | None:
        groomed = TreeBuilder._groomstring(string)  # noqa: SLF001
        return html.unescape(groomed) if groomed else groomed

    def start(self, tag: str, attrs: dict[str, str]) -> ET.Element:
        if self._root_tag is not None and not self._open:
            raise OfxParseError(f'Unexpected <{tag}> after closing </{self._root_tag}>')
        if self._root_tag is None:
            self._root_tag = tag
        self._open.append(tag)
        return super().start(tag, attrs)

    def end(self, tag: str) -> ET.Element:
        tag = tag.strip()
        if tag not in self._open:
            raise OfxParseError(f'Unexpected closing tag </{tag}>')
        if self._open[-1] != tag:
            raise OfxParseError(f'Closing tag </{tag}> found while <{self._open[-1]}> is still open')
        self._open.pop()
        return super().end(tag)

    def close(self) -> ET.Element:
        if self._open:
            raise OfxParseError(f'Unexpected end of document: <{self._open[-1]}> is not closed')
        if self._root_tag is None:
            raise OfxParseError('No OFX markup found')
        return super().close()


def _single_line(markup: str) -> str:
    return ''.join(markup.splitlines())


def normalize_sgml(markup: str, tag_model: TagModel = OFX_TAG_MODEL) -> str:
    """Rewrite OFX tag soup as strict, single-line markup."""

    builder = SgmlNormalizer(tag_model)
    builder.feed(markup)
    normalized = _single_line(ET.tostring(builder.close(), encoding='unicode'))
    LOGGER.debug('Normalized SGML body into %d characters of markup', len(normalized))
    return normalized


_XML_DECLARATION_RE = re.compile(r'^\s*<\?xml[^>]*\?>')


def parse_markup(markup: str) -> ET.Element:
    """Parse well-formed markup and return its ``<OFX>`` root element."""

    cleaned = _XML_DECLARATION_RE.sub('', markup.lstrip('\ufeff'), count=1).strip()
    try:
        root = ET.fromstring(cleaned)
    except ET.ParseError as exc:
        raise OfxParseError(f'Malformed OFX markup: {exc}') from exc
    if root.tag != 'OFX':
        raise OfxParseError(f'Root element OFX not found (got {root.tag!r})')
    return root
