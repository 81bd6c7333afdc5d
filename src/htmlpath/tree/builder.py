"""Tree construction from a token stream.

The builder keeps a single cursor, the innermost element that is still open:

* a start tag creates a node under the cursor and becomes the new cursor;
* a self-closing tag creates a leaf under the cursor and leaves it alone;
* an end tag closes the nearest open element with the same name (the cursor
  or one of its ancestors) and moves the cursor to that element's parent.

Malformed markup is tolerated rather than repaired. An end tag with no open
element of that name is ignored, and so is a self-closing tag that arrives
while no element is open. Both are recorded as diagnostics. A start tag that
follows the close of the root element is attached to the root.
"""

import time
from typing import Callable, Dict, Iterable, List, Optional

from htmlpath.shared import (
    BuildStatistics,
    DiagnosticEntry,
    DiagnosticSeverity,
    get_logger,
)
from htmlpath.tokenization import Token, TokenType
from htmlpath.tree.node import Node

COMPONENT = "tree_builder"


class TreeBuilder:
    """Build a ``Node`` tree from tokens.

    A builder can be reused; ``diagnostics`` and ``statistics`` describe the
    most recent ``build`` call.

    Examples:
        >>> from htmlpath.tokenization import tokenize
        >>> root = TreeBuilder().build(tokenize("<div><img/><p>X</p></div>"))
        >>> [child.tag for child in root.children]
        ['img', 'p']
    """

    def __init__(self, correlation_id: Optional[str] = None) -> None:
        self.correlation_id = correlation_id
        self.logger = get_logger(__name__, correlation_id, COMPONENT)

        self._root: Optional[Node] = None
        self._cursor: Optional[Node] = None
        self.diagnostics: List[DiagnosticEntry] = []
        self.statistics = BuildStatistics()

        self._handlers: Dict[TokenType, Callable[[Token], None]] = {
            TokenType.START_TAG: self._handle_start_tag,
            TokenType.SELF_CLOSING_TAG: self._handle_self_closing_tag,
            TokenType.END_TAG: self._handle_end_tag,
            TokenType.TEXT: self._ignore_token,
            TokenType.COMMENT: self._ignore_token,
            TokenType.DOCTYPE: self._ignore_token,
        }

    def build(self, tokens: Iterable[Token]) -> Optional[Node]:
        """Consume ``tokens`` and return the root node.

        The stream is read until an ``ERROR`` token or until it is exhausted.

        Returns:
            The first element opened by a start tag, or None if there was none
        """
        self._reset_state()
        start_time = time.time()

        for token in tokens:
            self.statistics.tokens_processed += 1
            if token.type is TokenType.ERROR:
                break
            self._handlers[token.type](token)

        self.statistics.processing_time_ms = (time.time() - start_time) * 1000
        self.logger.debug(
            "Tree building completed",
            extra={
                "has_root": self._root is not None,
                **self.statistics.to_dict(),
            },
        )
        return self._root

    def _reset_state(self) -> None:
        self._root = None
        self._cursor = None
        self.diagnostics = []
        self.statistics = BuildStatistics()

    def _new_node(self, token: Token, parent: Optional[Node]) -> Node:
        node = Node(tag=token.data, attributes=token.attribute_map(), parent=parent)
        if parent is not None:
            parent.children.append(node)
        self.statistics.nodes_created += 1
        return node

    def _handle_start_tag(self, token: Token) -> None:
        if self._root is None:
            self._root = self._new_node(token, None)
            self._cursor = self._root
            return
        if self._cursor is None:
            self._tolerate(
                token,
                f"<{token.data}> after the root was closed; attached to root",
                DiagnosticSeverity.INFO,
            )
        self._cursor = self._new_node(token, self._cursor or self._root)

    def _handle_self_closing_tag(self, token: Token) -> None:
        if self._cursor is None:
            self.statistics.orphan_self_closing_tags += 1
            self._tolerate(token, f"Ignored <{token.data}/> outside any open element")
            return
        self._new_node(token, self._cursor)

    def _handle_end_tag(self, token: Token) -> None:
        opener = None
        if self._cursor is not None:
            opener = self._cursor.find_tag_reverse(token.data)
        if opener is None:
            self.statistics.ignored_end_tags += 1
            self._tolerate(token, f"Ignored unmatched </{token.data}>")
            return
        self._cursor = opener.parent

    def _ignore_token(self, token: Token) -> None:
        self.statistics.ignored_tokens += 1

    def _tolerate(
        self,
        token: Token,
        message: str,
        severity: DiagnosticSeverity = DiagnosticSeverity.WARNING
    ) -> None:
        position = token.position.to_dict() if token.position else None
        self.diagnostics.append(
            DiagnosticEntry(
                severity=severity,
                message=message,
                component=COMPONENT,
                position=position,
                details={"tag": token.data, "token_type": token.type.name},
                correlation_id=self.correlation_id,
            )
        )
        self.logger.debug(message, extra={"position": position})


def build(tokens: Iterable[Token]) -> Optional[Node]:
    """Build a tree from ``tokens`` with a fresh ``TreeBuilder``."""
    return TreeBuilder().build(tokens)
