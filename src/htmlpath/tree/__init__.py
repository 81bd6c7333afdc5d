"""Tree layer for htmlpath.

Key Components:
    Node: Element with attributes, ordered children and a parent back-reference
    TreeBuilder: Builds a Node tree from a token stream, tolerating bad nesting
    NodePath: Lookup query combining a path expression with class/id filters
    PathExpression: Compiled form of a path expression
"""

from .node import Node
from .matcher import (
    NodePath,
    PathExpression,
    PathSegment,
    find_path,
    find_path_all,
    matches_path,
)
from .builder import TreeBuilder, build

__all__ = [
    "Node",
    "NodePath",
    "PathExpression",
    "PathSegment",
    "TreeBuilder",
    "build",
    "find_path",
    "find_path_all",
    "matches_path",
]
