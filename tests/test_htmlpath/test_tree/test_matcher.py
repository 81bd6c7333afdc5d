"""Tests for path expressions and path-based lookups."""

import pytest

from htmlpath.api import parse_string
from htmlpath.tree import NodePath, PathExpression, PathSegment, find_path, find_path_all, matches_path

SAMPLE = """
<html>
    <body>
        <p>Test</p>
        <div>
            <h1 class="element">Testing</h1>
            <h1>Other</h1>
            <h2>Something</h2>
        </div>
        <h1 class="outer">Wooo!</h1>
        <img class="element"/>
    </body>
</html>
"""


@pytest.fixture
def root():
    return parse_string(SAMPLE)


@pytest.fixture
def nested_heading():
    """The h1 of <div><section><h1>X</h1></section></div>."""
    tree = parse_string("<div><section><h1>X</h1></section></div>")
    return tree.find_tag("h1")


class TestPathExpression:
    """Test compiling path expressions."""

    def test_compile_segments(self):
        """Test segment names and direct-child markers."""
        expr = PathExpression.compile("div/.h1/span")

        assert expr.segments == (
            PathSegment("div"),
            PathSegment("h1", direct=True),
            PathSegment("span"),
        )
        assert not expr.anchored
        assert str(expr) == "div/.h1/span"

    def test_compile_anchored(self):
        """Test that a leading slash anchors the expression."""
        expr = PathExpression.compile("/html/.body")

        assert expr.anchored
        assert [segment.name for segment in expr.segments] == ["html", "body"]
        assert str(expr) == "/html/.body"

    def test_empty_is_wildcard(self):
        """Test that the empty expression has no segments."""
        assert PathExpression.compile("").is_wildcard

    def test_compile_is_cached(self):
        """Test that compiling the same text returns the same object."""
        assert PathExpression.compile("a/b") is PathExpression.compile("a/b")


class TestMatchesPath:
    """Test right-to-left evaluation of path expressions."""

    def test_empty_path_matches_any_node(self, root):
        """Test the wildcard base case."""
        assert all(node.matches_path("") for node in root.iter())

    def test_single_segment_compares_tag(self, root):
        """Test that one segment only checks the node's own tag."""
        body = root.find_tag("body")

        assert body.matches_path("body")
        assert not body.matches_path("html")
        assert body.matches_path(".body")

    def test_last_segment_must_match(self, nested_heading):
        """Test that the final segment names the node itself."""
        assert not matches_path(nested_heading, "div/section")

    def test_direct_child_marker(self, nested_heading):
        """Test that a marked segment requires the immediate parent."""
        assert not matches_path(nested_heading, "div/.h1")
        assert matches_path(nested_heading, "section/.h1")
        assert matches_path(nested_heading, "div/.section/.h1")

    def test_unmarked_segment_allows_any_ancestor(self, nested_heading):
        """Test that unmarked segments search all ancestors."""
        assert matches_path(nested_heading, "div/h1")
        assert matches_path(nested_heading, "div/section/h1")
        assert not matches_path(nested_heading, "span/h1")

    def test_order_of_ancestors_matters(self, nested_heading):
        """Test that ancestors must appear in the written order."""
        assert not matches_path(nested_heading, "section/div/h1")

    def test_upward_search_includes_self(self):
        """Test that the upward lookup starts at the node itself."""
        single = parse_string("<h1>alone</h1>")
        assert single.matches_path("h1/h1") is True

        nested = parse_string("<div><div>x</div></div>")
        outer, inner = nested, nested.children[0]
        assert inner.matches_path("div/div")
        assert outer.matches_path("div/div")
        assert nested.find_path_all("div/div") == [outer, inner]

    def test_repeated_direct_segment_needs_real_parent(self):
        """Test that a marked repeat still requires a distinct parent."""
        nested = parse_string("<div><div>x</div></div>")
        outer, inner = nested, nested.children[0]
        assert inner.matches_path("div/.div")
        assert not outer.matches_path("div/.div")

    def test_nearest_ancestor_is_used(self):
        """Test that ancestor resolution does not backtrack."""
        tree = parse_string("<a><div><section><div><h1>x</h1></div></section></div></a>")
        heading = tree.find_tag("h1")

        # The outer div is a's direct child but the nearest div is not
        assert not heading.matches_path("a/.div/h1")
        assert heading.matches_path("section/.div/h1")
        assert heading.matches_path("a/div/h1")

    def test_anchored_paths(self, root):
        """Test that anchored expressions spell the full chain from the root."""
        heading = root.find_path(NodePath("div/h1"))

        assert heading.matches_path("/html/body/div/h1")
        assert not heading.matches_path("/html/h1")
        assert not heading.matches_path("/html/body/body/div/h1")
        assert not heading.matches_path("/body/div/h1")
        assert not heading.matches_path("/html/.div/h1")
        assert heading.matches_path("/html/.body/.div/.h1")

    def test_node_path_round_trip(self, root):
        """Test that every node matches its own computed path."""
        for node in root.iter():
            assert node.matches_path(node.path())

        nested = parse_string("<div><div><p><div></div></p></div></div>")
        for node in nested.iter():
            assert node.matches_path(node.path())
            assert nested.find_path_all(node.path()) == [node]

    def test_empty_segments_never_match(self, root):
        """Test that empty names in the middle or end fail."""
        heading = root.find_path(NodePath("div/h1"))

        assert not heading.matches_path("div//h1")
        assert not heading.matches_path("div/h1/")
        assert not heading.matches_path("/")

    def test_accepts_compiled_expression(self, nested_heading):
        """Test passing a precompiled expression."""
        expr = PathExpression.compile("div/h1")
        assert matches_path(nested_heading, expr)
        assert nested_heading.matches_path(expr)


class TestFindPath:
    """Test the first-match lookup."""

    def test_find_body(self):
        """Test finding an element by tag."""
        tree = parse_string("<html><body><p>Test</p></body></html>")

        assert tree.find_path(NodePath(path="body")).tag == "body"
        assert tree.find_path(NodePath(path="span")) is None

    def test_returns_first_in_pre_order(self, root):
        """Test that the first match in document order is returned."""
        heading = root.find_path(NodePath("h1"))
        assert heading.attributes == {"class": "element"}

    def test_includes_start_node(self, root):
        """Test that the search starts with the node itself."""
        assert find_path(root, NodePath("html")) is root

    def test_class_filter(self, root):
        """Test restricting matches by exact class."""
        outer = root.find_path(NodePath("h1", class_="outer"))
        assert outer.path() == "/html/body/h1"

        element = root.find_path(NodePath(class_="element"))
        assert element.tag == "h1"

    def test_id_filter(self):
        """Test restricting matches by exact id."""
        tree = parse_string('<ul><li id="a">1</li><li id="b">2</li></ul>')

        assert tree.find_path(NodePath("li", id="b")).attributes["id"] == "b"
        assert tree.find_path(NodePath("li", id="c")) is None

    def test_string_query(self, root):
        """Test that a plain string is treated as a path."""
        assert root.find_path("div/h2").tag == "h2"

    def test_invalid_query_type(self, root):
        """Test that unsupported query types raise TypeError."""
        with pytest.raises(TypeError, match="Query must be a NodePath or str"):
            root.find_path(42)  # type: ignore[arg-type]

    def test_search_limited_to_subtree(self, root):
        """Test that the search only covers the start node's subtree."""
        div = root.find_path("body/.div")
        assert div.find_path(NodePath("h1", class_="outer")) is None
        assert div.find_path("p") is None


class TestFindPathAll:
    """Test the all-matches lookup."""

    def test_div_h1(self):
        """Test collecting every match in document order."""
        tree = parse_string('<div><h1 class="element">Testing</h1><h1>Other</h1></div>')
        matches = find_path_all(tree, NodePath(path="div/h1"))

        assert [node.tag for node in matches] == ["h1", "h1"]
        assert matches[0].attributes == {"class": "element"}
        assert matches[1].attributes == {}

        filtered = tree.find_path_all(NodePath(path="div/h1", class_="element"))
        assert filtered == [matches[0]]

    def test_descendant_versus_direct(self, root):
        """Test the difference between any-ancestor and direct-child matching."""
        assert len(root.find_path_all("body/h1")) == 3
        direct = root.find_path_all("body/.h1")
        assert [node.attributes.get("class") for node in direct] == ["outer"]

    def test_class_only(self, root):
        """Test matching by class alone."""
        matches = root.find_path_all(NodePath(class_="element"))
        assert [node.tag for node in matches] == ["h1", "img"]

    def test_wildcard_returns_every_node(self, root):
        """Test that an empty query matches every node including the root."""
        matches = root.find_path_all(NodePath())
        assert matches == list(root.iter())
        assert len(matches) == 9

    def test_no_matches(self, root):
        """Test that no match yields an empty list."""
        assert root.find_path_all("table/tr") == []

    def test_queries_are_idempotent(self, root):
        """Test that repeated lookups give identical results and leave the tree alone."""
        before = [(node.tag, dict(node.attributes), len(node.children)) for node in root.iter()]
        query = NodePath("div/h1")

        first = root.find_path_all(query)
        second = root.find_path_all(query)

        assert first == second
        assert root.find_path(query) is root.find_path(query)
        after = [(node.tag, dict(node.attributes), len(node.children)) for node in root.iter()]
        assert before == after


class TestNodePath:
    """Test the NodePath query object."""

    def test_defaults_match_everything(self, nested_heading):
        """Test that an empty NodePath matches any node."""
        assert NodePath().matches(nested_heading)

    def test_expression_property(self):
        """Test that the compiled expression is shared with the cache."""
        assert NodePath("a/.b").expression is PathExpression.compile("a/.b")

    def test_is_hashable(self):
        """Test that queries can be used as dictionary keys."""
        assert {NodePath("a"): 1}[NodePath("a")] == 1
