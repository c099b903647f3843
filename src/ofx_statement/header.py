"""Plaintext header handling for OFX 1.x (SGML) statements."""

from __future__ import annotations

import logging
import re

from ofx_statement.errors import OfxParseError
from ofxtools.header import OFXHeaderError, OFXHeaderV1

LOGGER = logging.getLogger(__name__)

SGML_MARKER = 'OFXHEADER:100'
"""Literal that only appears in the header of SGML statements."""

HEADER_FIELDS: tuple[tuple[str, frozenset[str]], ...] = (
    ('OFXHEADER', frozenset({'100'})),
    ('DATA', frozenset({'OFXSGML'})),
    ('VERSION', frozenset({'102'})),
    ('SECURITY', frozenset({'NONE'})),
    ('ENCODING', frozenset({'USASCII', 'UTF-8'})),
    ('CHARSET', frozenset({'1252', 'NONE'})),
    ('COMPRESSION', frozenset({'NONE'})),
    ('OLDFILEUID', frozenset({'NONE'})),
)
"""Required header fields, in order, with the values this parser accepts."""

_XML_ENCODING_RE = re.compile(rb'<\?xml[^>]*encoding=["\']([A-Za-z0-9._-]+)["\']')
_SNIFF_BYTES = 1024
_HEADER_ARGUMENTS = frozenset(
    {'ofxheader', 'data', 'version', 'security', 'encoding', 'charset', 'compression', 'oldfileuid', 'newfileuid'},
)


def is_sgml(text: str) -> bool:
    """Return ``True`` when ``text`` carries an OFX 1.x SGML header."""

    return SGML_MARKER in text


def _markup_start(text: str) -> int:
    start = text.find('<')
    if start == -1:
        raise OfxParseError('No OFX markup found')
    return start


def split_header(text: str) -> list[str]:
    """Return the non-empty header lines preceding the first markup tag."""

    block = text[: _markup_start(text)]
    return [line.strip() for line in block.splitlines() if line.strip()]


def validate_header(lines: list[str]) -> dict[str, str]:
    """Check the eight required header fields and return all fields by name.

    Lines beyond the eighth (``NEWFILEUID`` for example) are not validated.
    """

    fields: dict[str, str] = {}
    for index, (name, accepted) in enumerate(HEADER_FIELDS):
        if index >= len(lines):
            raise OfxParseError(f'Missing header field {name}')
        key, sep, value = lines[index].partition(':')
        key, value = key.strip(), value.strip()
        if not sep or key != name:
            raise OfxParseError(f'Expected header field {name}, found {lines[index]!r}')
        if value not in accepted:
            raise OfxParseError(f'Unsupported {name} header value: {value!r}')
        fields[name] = value
    for line in lines[len(HEADER_FIELDS) :]:
        key, _, value = line.partition(':')
        fields[key.strip()] = value.strip()
    return fields


def header_record(fields: dict[str, str]) -> OFXHeaderV1:
    """Convert validated header ``fields`` into an ``ofxtools`` header object."""

    known = {name.lower(): value for name, value in fields.items() if name.lower() in _HEADER_ARGUMENTS}
    if 'version' not in known:
        raise OfxParseError('Missing header field VERSION')
    try:
        return OFXHeaderV1(**known)
    except OFXHeaderError as exc:
        raise OfxParseError(str(exc)) from exc


def read_header(text: str) -> tuple[str, str]:
    """Validate the header of ``text`` and return ``(header_text, body)``."""

    lines = split_header(text)
    header = header_record(validate_header(lines))
    LOGGER.debug('OFX header accepted: version %s, codec %s', header.version, header.codec)
    return '\r\n'.join(lines), text[_markup_start(text) :]


def sniff_encoding(data: bytes) -> str | None:
    """Guess the text encoding declared by an OFX byte stream.

    SGML headers name their codec through ``CHARSET`` (``1252`` is
    ``cp1252``, ``NONE`` is UTF-8); XML bodies through their declaration.
    """

    head = data[:_SNIFF_BYTES]
    if SGML_MARKER.encode('ascii') in head:
        text = head.decode('latin-1')
        fields: dict[str, str] = {}
        for line in text[: text.find('<') if '<' in text else len(text)].splitlines():
            key, sep, value = line.partition(':')
            if sep:
                fields[key.strip()] = value.strip()
        try:
            return header_record(fields).codec
        except OfxParseError as exc:
            LOGGER.debug('Cannot derive codec from OFX header: %s', exc)
            return None
    match = _XML_ENCODING_RE.search(head)
    if match:
        return match.group(1).decode('ascii')
    return None
