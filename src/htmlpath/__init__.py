"""htmlpath: build element trees from HTML and look nodes up by path.

The tree builder tolerates badly nested markup instead of repairing it, and
lookups use a small path language of tag names, ``/`` separators and ``.``
direct-child markers, filtered by exact ``class`` and ``id`` values.

Example:
    >>> import htmlpath
    >>> root = htmlpath.parse_string(
    ...     '<div><h1 class="element">Testing</h1><h1>Other</h1></div>'
    ... )
    >>> [node.path() for node in root.find_path_all("div/h1")]
    ['/div/h1', '/div/h1']
    >>> len(root.find_path_all(htmlpath.NodePath("div/h1", class_="element")))
    1
"""

__version__ = "0.1.0"

from .api import (
    HTMLPathParser,
    TransportError,
    parse_file,
    parse_string,
    parse_tokens,
    parse_url,
)
from .shared import ConfigError, ConfigValidationError, HTMLPathError, ParserConfig
from .tokenization import HTMLTokenizer, Token, TokenType, tokenize
from .tree import Node, NodePath, PathExpression, TreeBuilder, build

__all__ = [
    "__version__",

    # Entry points
    "parse_string",
    "parse_file",
    "parse_url",
    "parse_tokens",
    "HTMLPathParser",

    # Tree and queries
    "Node",
    "NodePath",
    "PathExpression",
    "TreeBuilder",
    "build",

    # Tokens
    "HTMLTokenizer",
    "Token",
    "TokenType",
    "tokenize",

    # Configuration and errors
    "ParserConfig",
    "HTMLPathError",
    "ConfigError",
    "ConfigValidationError",
    "TransportError",
]
