"""Public entry points for htmlpath.

Simple functions (``parse_string``, ``parse_file``, ``parse_url``,
``parse_tokens``) for one-off use and ``HTMLPathParser`` for configured,
reusable parsing with statistics.
"""

from .parser import (
    HTMLPathParser,
    parse_file,
    parse_string,
    parse_tokens,
    parse_url,
)
from .transport import TransportError, fetch_chunks

__all__ = [
    "HTMLPathParser",
    "TransportError",
    "fetch_chunks",
    "parse_file",
    "parse_string",
    "parse_tokens",
    "parse_url",
]
