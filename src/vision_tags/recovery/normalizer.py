"""Escape-sequence normalization for double-encoded generator output."""

from typing import Any

# Order matters: multi-character sequences go first so that unescaping a
# backslash never manufactures a new escape out of its neighbours.
_ESCAPE_REPLACEMENTS: tuple[tuple[str, str], ...] = (
    ("\\r\\n", "\r\n"),
    ("\\n", "\n"),
    ("\\t", "\t"),
    ('\\"', '"'),
    ("\\'", "'"),
    ("\\\\", "\\"),
)


def normalize_escapes(text: Any) -> str:
    """Replace literal backslash escapes with the characters they stand for.

    Intended for text that is a string literal holding structured data, e.g.
    ``{\\"objects\\": []}``. Already-unescaped text comes back unchanged and
    non-string input is coerced with ``str()``; the function never raises.

    Example:
        >>> normalize_escapes('{\\\\"caption\\\\": \\\\"x\\\\"}')
        '{"caption": "x"}'
    """
    result = text if isinstance(text, str) else str(text)
    for escaped, literal in _ESCAPE_REPLACEMENTS:
        if escaped in result:
            result = result.replace(escaped, literal)
    return result
