"""Element nodes of a built HTML tree.

A ``Node`` owns its children; ``parent`` is a back-reference used only for
upward searches. Every traversal here is iterative so documents nested deeper
than the interpreter's recursion limit can still be walked.
"""

import sys
from dataclasses import dataclass, field
from typing import IO, Any, Dict, Iterator, List, Optional, Union

from htmlpath.tree import matcher


@dataclass(eq=False)
class Node:
    """One element instance in the tree.

    Nodes compare by identity. ``repr`` only shows the tag, attributes and
    child count so that printing a node never walks the whole tree.
    """

    tag: str
    attributes: Dict[str, str] = field(default_factory=dict)
    parent: Optional["Node"] = field(default=None, repr=False)
    children: List["Node"] = field(default_factory=list, repr=False)

    def __repr__(self) -> str:
        return (
            f"Node(tag={self.tag!r}, attributes={self.attributes!r}, "
            f"children={len(self.children)})"
        )

    @property
    def is_root(self) -> bool:
        return self.parent is None

    @property
    def depth(self) -> int:
        """Number of ancestors above this node (root = 0)."""
        depth = 0
        current = self.parent
        while current is not None:
            depth += 1
            current = current.parent
        return depth

    def attribute(self, name: str, default: Optional[str] = None) -> Optional[str]:
        """Get attribute value with optional default."""
        return self.attributes.get(name, default)

    def has_class(self, class_: str) -> bool:
        """Check the ``class`` attribute for an exact value match.

        The whole attribute value is compared, so ``"a b"`` does not match
        ``"a"``. An empty ``class_`` always matches.
        """
        if not class_:
            return True
        return self.attributes.get("class") == class_

    def has_id(self, id_: str) -> bool:
        """Check the ``id`` attribute for an exact value match; empty always matches."""
        if not id_:
            return True
        return self.attributes.get("id") == id_

    def iter(self) -> Iterator["Node"]:
        """Iterate over this node and all descendants in document order."""
        stack = [self]
        while stack:
            node = stack.pop()
            yield node
            stack.extend(reversed(node.children))

    def find_tag(self, tag: str) -> Optional["Node"]:
        """Find the first node named ``tag``, searching self then descendants depth-first."""
        return next((node for node in self.iter() if node.tag == tag), None)

    def find_tag_reverse(self, tag: str) -> Optional["Node"]:
        """Find the nearest node named ``tag`` walking up from self through parents."""
        current: Optional[Node] = self
        while current is not None:
            if current.tag == tag:
                return current
            current = current.parent
        return None

    def flatten_children(self) -> List["Node"]:
        """Return every descendant (not self) in pre-order."""
        nodes = list(self.iter())
        return nodes[1:]

    def path(self) -> str:
        """Build the root-anchored tag path of this node, e.g. ``/html/body/p``.

        The result always satisfies ``node.matches_path(node.path())``.
        """
        tags = []
        current: Optional[Node] = self
        while current is not None:
            tags.append(current.tag)
            current = current.parent
        return "/" + "/".join(reversed(tags))

    def matches_path(self, path: Union[str, "matcher.PathExpression"]) -> bool:
        """Check whether this node is the target of a path expression."""
        return matcher.matches_path(self, path)

    def find_path(
        self, query: Union["matcher.NodePath", str]
    ) -> Optional["Node"]:
        """Find the first node in this subtree that satisfies ``query``."""
        return matcher.find_path(self, query)

    def find_path_all(self, query: Union["matcher.NodePath", str]) -> List["Node"]:
        """Find every node in this subtree that satisfies ``query``, in document order."""
        return matcher.find_path_all(self, query)

    def render_structure(self, indent: int = 0, character: str = "  ") -> str:
        """Render the indented structure dump printed by ``print_structure``.

        Each tag is written on its own line at its depth; a tag that has
        children is written again after them, at the same depth.
        """
        lines = []
        stack = [(self, indent, False)]
        while stack:
            node, level, closing = stack.pop()
            lines.append(character * level + node.tag)
            if closing or not node.children:
                continue
            stack.append((node, level, True))
            for child in reversed(node.children):
                stack.append((child, level + 1, False))
        return "\n".join(lines)

    def print_structure(
        self,
        indent: int = 0,
        character: str = "  ",
        file: Optional[IO[str]] = None
    ) -> None:
        """Print the structure of this node and its descendants."""
        print(self.render_structure(indent, character), file=file or sys.stdout)

    def to_dict(self) -> Dict[str, Any]:
        """Convert node and descendants to a dictionary representation."""
        result: Dict[str, Any] = {
            "tag": self.tag,
            "path": self.path(),
            "attributes": dict(self.attributes),
        }
        if self.children:
            result["children"] = [child.to_dict() for child in self.children]
        return result
