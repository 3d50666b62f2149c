"""Percent-encoding helpers with browser URI semantics.

encode_uri leaves URI structure characters alone and encodes everything
else as UTF-8 escapes. decode_uri keeps escapes of reserved characters
intact; decode_uri_component decodes every escape. Both decoders raise
ValueError on malformed input (a bare "%" or invalid UTF-8) so callers can
fall back to the raw string.
"""

import re
from urllib.parse import quote

URI_SAFE_CHARACTERS = ";,/?:@&=+$!*'()#~"
URI_RESERVED_CHARACTERS = frozenset(";/?:@&=+$,#")

_ESCAPE_RUN = re.compile(r'(?:%[0-9A-Fa-f]{2})+')
_MALFORMED_ESCAPE = re.compile(r'%(?![0-9A-Fa-f]{2})')


def encode_uri(value: str) -> str:
    return quote(value or '', safe=URI_SAFE_CHARACTERS)


def _decode(value: str, preserved: frozenset) -> str:
    if '%' not in value:
        return value
    if _MALFORMED_ESCAPE.search(value):
        raise ValueError(f"Malformed percent-encoding in {value!r}")

    def replace(match):
        run = match.group(0)
        try:
            decoded = bytes.fromhex(run.replace('%', '')).decode('utf-8')
        except UnicodeDecodeError as e:
            raise ValueError(f"Invalid UTF-8 escape sequence {run!r}") from e
        if not preserved:
            return decoded
        parts = []
        position = 0
        for char in decoded:
            width = 3 * len(char.encode('utf-8'))
            original = run[position:position + width]
            position += width
            parts.append(original if char in preserved else char)
        return ''.join(parts)

    return _ESCAPE_RUN.sub(replace, value)


def decode_uri(value: str) -> str:
    return _decode(value or '', URI_RESERVED_CHARACTERS)


def decode_uri_component(value: str) -> str:
    return _decode(value or '', frozenset())
