"""Tokenization layer for htmlpath.

Converts markup text into the lazy token stream the tree builder consumes.

Key Components:
    HTMLTokenizer: Chunk-fed tokenizer yielding tokens as markup arrives
    Token: A single start/end/self-closing tag, text, comment or error event
    TokenType: Enumeration of token kinds
    TokenPosition: Line/column of a token for diagnostics
"""

from .tokenizer import (
    END_OF_STREAM,
    HTMLTokenizer,
    Token,
    TokenPosition,
    TokenType,
    tokenize,
)

__all__ = [
    "END_OF_STREAM",
    "HTMLTokenizer",
    "Token",
    "TokenPosition",
    "TokenType",
    "tokenize",
]
