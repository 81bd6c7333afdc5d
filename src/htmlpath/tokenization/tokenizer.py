"""Lazy HTML tokenizer producing the token stream consumed by the tree builder.

The tokenizer is a thin adapter over the standard library's ``html.parser``:
markup is fed in chunks and the tokens produced by each chunk are yielded
before the next chunk is read, so a streamed HTTP body never has to be held
in memory as a whole. Every stream ends with exactly one ``ERROR`` token.
"""

from dataclasses import dataclass, field
from enum import Enum, auto
from html.parser import HTMLParser
from typing import Dict, Iterable, Iterator, List, Optional, Tuple

from htmlpath.shared.config import TokenizerConfig
from htmlpath.shared.logging import get_logger

END_OF_STREAM = "EOF"

Attribute = Tuple[str, str]


class TokenType(Enum):
    """Kinds of tokens in an HTML token stream."""

    START_TAG = auto()          # <div ...>
    END_TAG = auto()            # </div>
    SELF_CLOSING_TAG = auto()   # <img .../>
    TEXT = auto()               # Character data between tags
    COMMENT = auto()            # <!-- ... -->
    DOCTYPE = auto()            # <!DOCTYPE ...>
    ERROR = auto()              # End of stream or tokenizer failure


@dataclass
class TokenPosition:
    """Line and column of the first character of a token (line is 1-based)."""

    line: int
    column: int

    def __post_init__(self) -> None:
        if self.line < 1:
            raise ValueError("Line number must be >= 1")
        if self.column < 0:
            raise ValueError("Column number must be >= 0")

    def to_dict(self) -> Dict[str, int]:
        return {"line": self.line, "column": self.column}


@dataclass
class Token:
    """A single lexical event.

    ``data`` is the tag name for tag tokens, the character data for text and
    comment tokens and the reason for ``ERROR`` tokens. ``attributes`` keeps
    the order and any duplicates found in the markup.
    """

    type: TokenType
    data: str
    attributes: List[Attribute] = field(default_factory=list)
    position: Optional[TokenPosition] = None

    @property
    def is_tag(self) -> bool:
        return self.type in (
            TokenType.START_TAG, TokenType.END_TAG, TokenType.SELF_CLOSING_TAG
        )

    def attribute_map(self) -> Dict[str, str]:
        """Collapse the attribute pairs into a mapping, last write wins."""
        attrs: Dict[str, str] = {}
        for key, value in self.attributes:
            attrs[key] = value
        return attrs


class _TokenCollector(HTMLParser):
    """HTMLParser subclass that records callbacks as ``Token`` objects."""

    def __init__(self, config: TokenizerConfig) -> None:
        super().__init__(convert_charrefs=config.convert_charrefs)
        self.config = config
        self.pending: List[Token] = []

    def _position(self) -> TokenPosition:
        line, column = self.getpos()
        return TokenPosition(line, column)

    def _emit(
        self,
        token_type: TokenType,
        data: str,
        attrs: Optional[List[Tuple[str, Optional[str]]]] = None
    ) -> None:
        attributes = [(key, value or "") for key, value in attrs or []]
        self.pending.append(Token(token_type, data, attributes, self._position()))

    def handle_starttag(self, tag: str, attrs: List[Tuple[str, Optional[str]]]) -> None:
        self._emit(TokenType.START_TAG, tag, attrs)

    def handle_startendtag(
        self, tag: str, attrs: List[Tuple[str, Optional[str]]]
    ) -> None:
        self._emit(TokenType.SELF_CLOSING_TAG, tag, attrs)

    def handle_endtag(self, tag: str) -> None:
        self._emit(TokenType.END_TAG, tag)

    def handle_data(self, data: str) -> None:
        if self.config.emit_text and data:
            self._emit(TokenType.TEXT, data)

    def handle_entityref(self, name: str) -> None:
        # Only called when convert_charrefs is off
        self.handle_data(f"&{name};")

    def handle_charref(self, name: str) -> None:
        self.handle_data(f"&#{name};")

    def handle_comment(self, data: str) -> None:
        if self.config.emit_comments:
            self._emit(TokenType.COMMENT, data)

    def handle_decl(self, decl: str) -> None:
        self._emit(TokenType.DOCTYPE, decl)

    def drain(self) -> List[Token]:
        tokens, self.pending = self.pending, []
        return tokens


class HTMLTokenizer:
    """Produce lazy token streams from markup text.

    Examples:
        >>> tokenizer = HTMLTokenizer()
        >>> [t.type.name for t in tokenizer.tokenize("<p>Hi</p>")]
        ['START_TAG', 'TEXT', 'END_TAG', 'ERROR']
    """

    def __init__(
        self,
        config: Optional[TokenizerConfig] = None,
        correlation_id: Optional[str] = None
    ) -> None:
        self.config = config or TokenizerConfig()
        self.logger = get_logger(__name__, correlation_id, "html_tokenizer")

    def tokenize(self, text: str) -> Iterator[Token]:
        """Tokenize a complete markup string."""
        size = self.config.feed_chunk_size
        chunks = (text[i:i + size] for i in range(0, len(text), size))
        return self.tokenize_chunks(chunks)

    def tokenize_chunks(self, chunks: Iterable[str]) -> Iterator[Token]:
        """Tokenize markup arriving as a sequence of text chunks.

        Exceptions raised while pulling chunks (for example a dropped
        connection) propagate to the consumer unchanged.
        """
        collector = _TokenCollector(self.config)
        chunk_count = 0
        for chunk in chunks:
            if not chunk:
                continue
            chunk_count += 1
            collector.feed(chunk)
            yield from collector.drain()
        collector.close()
        yield from collector.drain()

        self.logger.debug(
            "Token stream exhausted", extra={"chunk_count": chunk_count}
        )
        line, column = collector.getpos()
        yield Token(TokenType.ERROR, END_OF_STREAM, position=TokenPosition(line, column))


def tokenize(text: str, config: Optional[TokenizerConfig] = None) -> Iterator[Token]:
    """Tokenize a markup string with a default or given configuration."""
    return HTMLTokenizer(config).tokenize(text)
