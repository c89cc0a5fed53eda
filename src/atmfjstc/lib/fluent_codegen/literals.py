"""
Helpers for rendering string and character literals with C-style escapes.
"""

_ESCAPES = {
    '\\': '\\\\',
    '\n': '\\n',
    '\r': '\\r',
    '\t': '\\t',
    '\b': '\\b',
    '\f': '\\f',
    '\0': '\\0',
}


def escape_literal(text: str, quote: str = '"') -> str:
    """
    Escapes a piece of text so that it can be placed between `quote` characters in C-family source code.

    Backslashes, the quote character and control characters are escaped. Other non-printable characters are rendered
    as ``\\uXXXX`` escapes.
    """
    parts = []

    for char in text:
        if char in _ESCAPES:
            parts.append(_ESCAPES[char])
        elif char == quote:
            parts.append('\\' + char)
        elif not char.isprintable() and ord(char) <= 0xffff:
            parts.append(f'\\u{ord(char):04x}')
        else:
            parts.append(char)

    return ''.join(parts)


def string_literal(text: str, quote: str = '"') -> str:
    return quote + escape_literal(text, quote) + quote


def char_literal(char: str) -> str:
    if len(char) != 1:
        raise ValueError(f"Character literal must contain exactly one character, got {char!r}")

    return "'" + escape_literal(char, "'") + "'"
