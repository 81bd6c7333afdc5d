"""Parsing entry points for htmlpath.

Module-level functions cover one-off use; ``HTMLPathParser`` keeps a
configuration and usage statistics across calls. Every entry point drives
tokenization and tree building and returns the root ``Node``, or None when
the input contains no element at all.

Malformed markup never raises. Failures of the surrounding collaborators do:
``TransportError`` for network fetches and ``OSError`` for unreadable files.
"""

import time
from pathlib import Path
from typing import Any, Dict, Iterable, Iterator, List, Optional, Union

import requests

from htmlpath.api.transport import TransportError, fetch_chunks
from htmlpath.shared import DiagnosticEntry, ParserConfig, get_logger
from htmlpath.tokenization import HTMLTokenizer, Token
from htmlpath.tree import Node, TreeBuilder

PathLike = Union[str, Path]

MS_PER_SECOND = 1000


class HTMLPathParser:
    """Configured parser that can be reused for many documents.

    Attributes:
        config: Active parser configuration
        correlation_id: Correlation ID attached to logs and diagnostics
        last_diagnostics: Diagnostics from the most recent parse

    Examples:
        >>> parser = HTMLPathParser()
        >>> root = parser.parse_string("<div><h1 class='x'>A</h1></div>")
        >>> root.find_path("div/h1").attributes
        {'class': 'x'}
        >>> parser.statistics["total_parses"]
        1
    """

    def __init__(
        self,
        config: Optional[ParserConfig] = None,
        correlation_id: Optional[str] = None
    ) -> None:
        self.config = config or ParserConfig()
        self.correlation_id = correlation_id
        self.logger = get_logger(__name__, correlation_id, "html_path_parser")

        self._tokenizer = HTMLTokenizer(self.config.tokenizer, correlation_id)
        self._tree_builder = TreeBuilder(correlation_id)
        self.last_diagnostics: List[DiagnosticEntry] = []

        self._parse_count = 0
        self._empty_documents = 0
        self._transport_failures = 0
        self._nodes_created = 0
        self._tolerated_tags = 0
        self._total_processing_time = 0.0

    def parse_tokens(self, tokens: Iterable[Token]) -> Optional[Node]:
        """Build a tree from an already tokenized stream."""
        start_time = time.time()
        root = self._tree_builder.build(tokens)
        self._record(root, start_time)
        return root

    def parse_string(self, html: str) -> Optional[Node]:
        """Parse markup held in a string."""
        self.logger.debug("Parsing string", extra={"length": len(html)})
        return self.parse_tokens(self._tokenizer.tokenize(html))

    def parse_file(self, path: PathLike, encoding: str = "utf-8") -> Optional[Node]:
        """Parse markup from a file, reading it in chunks.

        Raises:
            OSError: If the file cannot be opened or read
        """
        file_path = Path(path)
        self.logger.debug("Parsing file", extra={"path": str(file_path)})
        with file_path.open(encoding=encoding, errors="replace") as handle:
            return self.parse_tokens(
                self._tokenizer.tokenize_chunks(self._read_chunks(handle))
            )

    def parse_url(
        self, url: str, session: Optional[requests.Session] = None
    ) -> Optional[Node]:
        """Fetch a document over HTTP and parse it while it downloads.

        Raises:
            TransportError: If the request or the body download fails
        """
        self.logger.info("Fetching document", extra={"url": url})
        try:
            chunks = fetch_chunks(url, self.config.fetch, session)
            return self.parse_tokens(self._tokenizer.tokenize_chunks(chunks))
        except TransportError:
            self._transport_failures += 1
            raise

    def _read_chunks(self, handle: Any) -> Iterator[str]:
        size = self.config.tokenizer.feed_chunk_size
        return iter(lambda: handle.read(size), "")

    def _record(self, root: Optional[Node], start_time: float) -> None:
        processing_time = (time.time() - start_time) * MS_PER_SECOND
        stats = self._tree_builder.statistics
        self.last_diagnostics = list(self._tree_builder.diagnostics)

        self._parse_count += 1
        self._nodes_created += stats.nodes_created
        self._tolerated_tags += stats.tolerated_count
        self._total_processing_time += processing_time
        if root is None:
            self._empty_documents += 1

        self.logger.info(
            "Document parsed",
            extra={
                "has_root": root is not None,
                "nodes_created": stats.nodes_created,
                "tolerated_tags": stats.tolerated_count,
                "processing_time_ms": processing_time,
            },
        )

    @property
    def statistics(self) -> Dict[str, Any]:
        """Usage statistics accumulated across parses."""
        return {
            "total_parses": self._parse_count,
            "empty_documents": self._empty_documents,
            "transport_failures": self._transport_failures,
            "nodes_created": self._nodes_created,
            "tolerated_tags": self._tolerated_tags,
            "total_processing_time_ms": self._total_processing_time,
            "average_processing_time_ms": (
                self._total_processing_time / self._parse_count
                if self._parse_count > 0 else 0.0
            ),
            "correlation_id": self.correlation_id,
        }

    def reset_statistics(self) -> None:
        """Reset parser usage statistics."""
        self._parse_count = 0
        self._empty_documents = 0
        self._transport_failures = 0
        self._nodes_created = 0
        self._tolerated_tags = 0
        self._total_processing_time = 0.0
        self.logger.debug("Parser statistics reset")


def parse_tokens(
    tokens: Iterable[Token], correlation_id: Optional[str] = None
) -> Optional[Node]:
    """Build a tree from a token stream."""
    return HTMLPathParser(correlation_id=correlation_id).parse_tokens(tokens)


def parse_string(
    html: str,
    config: Optional[ParserConfig] = None,
    correlation_id: Optional[str] = None
) -> Optional[Node]:
    """Parse markup from a string.

    Examples:
        >>> root = parse_string("<html><body><p>Test</p></body></html>")
        >>> root.find_path("body").tag
        'body'
        >>> root.find_path("span") is None
        True
    """
    return HTMLPathParser(config, correlation_id).parse_string(html)


def parse_file(
    path: PathLike,
    encoding: str = "utf-8",
    config: Optional[ParserConfig] = None,
    correlation_id: Optional[str] = None
) -> Optional[Node]:
    """Parse markup from a file."""
    return HTMLPathParser(config, correlation_id).parse_file(path, encoding)


def parse_url(
    url: str,
    config: Optional[ParserConfig] = None,
    session: Optional[requests.Session] = None,
    correlation_id: Optional[str] = None
) -> Optional[Node]:
    """Fetch and parse a remote document.

    Raises:
        TransportError: If the document cannot be fetched
    """
    return HTMLPathParser(config, correlation_id).parse_url(url, session)
