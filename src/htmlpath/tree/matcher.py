"""Path expressions for locating nodes by tag lineage, class and id.

A path is a ``/``-separated list of tag names read from the outermost
element to the target, e.g. ``div/ul/li``. The last name must be the tag of
the node being tested. Each earlier name is looked up by walking upward from
the node matched by the name after it, that node included, so a lone ``h1``
satisfies ``h1/h1``. Prefixing a name with ``.`` tightens that relation for
the name it is attached to: in ``div/.h1`` the ``h1`` must be an immediate
child of the ``div``.

A leading ``/`` makes the expression absolute: every name must be the
immediate parent of the next and the first must be the root. This is the
form ``Node.path()`` produces. The empty expression matches every node.

Upward lookups are resolved greedily: the nearest node with the wanted tag is
used and no other candidate is tried if the rest of the expression then fails.
"""

from dataclasses import dataclass
from functools import lru_cache
from typing import TYPE_CHECKING, List, Optional, Tuple, Union

if TYPE_CHECKING:
    from htmlpath.tree.node import Node

DIRECT_CHILD_MARKER = "."
SEPARATOR = "/"


@dataclass(frozen=True)
class PathSegment:
    """One tag name of a path expression."""

    name: str
    direct: bool = False

    @classmethod
    def parse(cls, text: str) -> "PathSegment":
        if text.startswith(DIRECT_CHILD_MARKER):
            return cls(text[len(DIRECT_CHILD_MARKER):], direct=True)
        return cls(text)

    def __str__(self) -> str:
        return (DIRECT_CHILD_MARKER if self.direct else "") + self.name


@dataclass(frozen=True)
class PathExpression:
    """A compiled path expression.

    Use ``PathExpression.compile`` rather than the constructor; compiled
    expressions are cached and safe to share.

    Examples:
        >>> expr = PathExpression.compile("div/.h1")
        >>> [str(segment) for segment in expr.segments]
        ['div', '.h1']
    """

    segments: Tuple[PathSegment, ...] = ()
    anchored: bool = False

    @classmethod
    def compile(cls, path: str) -> "PathExpression":
        return _compile(path)

    @property
    def is_wildcard(self) -> bool:
        return not self.segments

    def __str__(self) -> str:
        body = SEPARATOR.join(str(segment) for segment in self.segments)
        return SEPARATOR + body if self.anchored else body

    def matches(self, node: "Node") -> bool:
        """Evaluate the expression against ``node``, right to left."""
        if self.is_wildcard:
            return True
        if node.tag != self.segments[-1].name:
            return False

        current = node
        for index in range(len(self.segments) - 2, -1, -1):
            wanted = self.segments[index].name
            if self.anchored or self.segments[index + 1].direct:
                parent = current.parent
                if parent is None or parent.tag != wanted:
                    return False
                current = parent
            else:
                ancestor = current.find_tag_reverse(wanted)
                if ancestor is None:
                    return False
                current = ancestor

        if self.anchored:
            return current.parent is None
        return True


@lru_cache(maxsize=512)
def _compile(path: str) -> PathExpression:
    if not path:
        return PathExpression()
    anchored = path.startswith(SEPARATOR)
    if anchored:
        path = path[len(SEPARATOR):]
    segments = tuple(PathSegment.parse(part) for part in path.split(SEPARATOR))
    return PathExpression(segments, anchored)


@dataclass(frozen=True)
class NodePath:
    """A lookup query: path expression plus optional exact class and id filters.

    Empty fields do not constrain the match, so ``NodePath()`` matches every
    node.
    """

    path: str = ""
    class_: str = ""
    id: str = ""

    @property
    def expression(self) -> PathExpression:
        return PathExpression.compile(self.path)

    def matches(self, node: "Node") -> bool:
        return (
            self.expression.matches(node)
            and node.has_class(self.class_)
            and node.has_id(self.id)
        )


QueryType = Union[NodePath, str]


def _as_query(query: QueryType) -> NodePath:
    if isinstance(query, NodePath):
        return query
    if isinstance(query, str):
        return NodePath(path=query)
    raise TypeError(f"Query must be a NodePath or str, not {type(query).__name__}")


def matches_path(node: "Node", path: Union[str, PathExpression]) -> bool:
    """Check whether ``node`` is the target of ``path``."""
    if isinstance(path, str):
        path = PathExpression.compile(path)
    return path.matches(node)


def find_path(node: "Node", query: QueryType) -> Optional["Node"]:
    """Return the first node of the subtree at ``node`` satisfying ``query``.

    Nodes are visited in pre-order: the node itself, then each child's
    subtree in turn.
    """
    node_path = _as_query(query)
    for candidate in node.iter():
        if node_path.matches(candidate):
            return candidate
    return None


def find_path_all(node: "Node", query: QueryType) -> List["Node"]:
    """Return all nodes of the subtree at ``node`` satisfying ``query``, in pre-order."""
    node_path = _as_query(query)
    return [candidate for candidate in node.iter() if node_path.matches(candidate)]
