"""Tests for the lazy HTML tokenizer."""

import pytest

from htmlpath.shared.config import TokenizerConfig
from htmlpath.tokenization import (
    END_OF_STREAM,
    HTMLTokenizer,
    Token,
    TokenPosition,
    TokenType,
    tokenize,
)


def tag_tokens(tokens):
    """Reduce a stream to (type, data) pairs of its tag tokens."""
    return [(token.type, token.data) for token in tokens if token.is_tag]


class TestToken:
    """Test Token and TokenPosition helpers."""

    def test_attribute_map_last_write_wins(self):
        """Test that duplicate attribute keys collapse to the last value."""
        token = Token(
            TokenType.START_TAG,
            "p",
            [("class", "first"), ("id", "x"), ("class", "second")],
        )
        assert token.attribute_map() == {"class": "second", "id": "x"}

    def test_is_tag(self):
        """Test which token kinds count as tags."""
        assert Token(TokenType.START_TAG, "a").is_tag
        assert Token(TokenType.END_TAG, "a").is_tag
        assert Token(TokenType.SELF_CLOSING_TAG, "a").is_tag
        assert not Token(TokenType.TEXT, "a").is_tag
        assert not Token(TokenType.ERROR, END_OF_STREAM).is_tag

    def test_position_validation(self):
        """Test that impossible positions are rejected."""
        with pytest.raises(ValueError, match="Line number"):
            TokenPosition(0, 0)
        with pytest.raises(ValueError, match="Column number"):
            TokenPosition(1, -1)


class TestHTMLTokenizer:
    """Test tokenization of markup strings."""

    def test_basic_stream(self):
        """Test the token kinds produced for simple markup."""
        tokens = list(tokenize("<p>Hi</p>"))

        assert [token.type for token in tokens] == [
            TokenType.START_TAG,
            TokenType.TEXT,
            TokenType.END_TAG,
            TokenType.ERROR,
        ]
        assert tokens[1].data == "Hi"
        assert tokens[-1].data == END_OF_STREAM

    def test_stream_is_lazy(self):
        """Test that tokenize returns an iterator, not a list."""
        stream = tokenize("<p>Hi</p>")
        assert iter(stream) is stream
        assert next(stream).type is TokenType.START_TAG

    def test_empty_input_yields_only_end_of_stream(self):
        """Test that empty input produces a single ERROR token."""
        tokens = list(tokenize(""))
        assert len(tokens) == 1
        assert tokens[0].type is TokenType.ERROR

    def test_self_closing_versus_void_start_tag(self):
        """Test that only the /> syntax yields SELF_CLOSING_TAG."""
        tokens = list(tokenize('<div><img class="element"/><br></div>'))

        assert tag_tokens(tokens) == [
            (TokenType.START_TAG, "div"),
            (TokenType.SELF_CLOSING_TAG, "img"),
            (TokenType.START_TAG, "br"),
            (TokenType.END_TAG, "div"),
        ]
        assert tokens[1].attributes == [("class", "element")]

    def test_tag_names_are_lowercased(self):
        """Test that tag names are normalized to lower case."""
        tokens = list(tokenize("<DIV></Div>"))
        assert tag_tokens(tokens) == [
            (TokenType.START_TAG, "div"),
            (TokenType.END_TAG, "div"),
        ]

    def test_attribute_order_and_duplicates_preserved(self):
        """Test that attribute pairs keep order, duplicates and bare values."""
        token = next(tokenize('<input class="a" disabled class="b">'))

        assert token.attributes == [("class", "a"), ("disabled", ""), ("class", "b")]
        assert token.attribute_map() == {"class": "b", "disabled": ""}

    def test_charrefs_converted(self):
        """Test that entities are decoded in text and attributes."""
        tokens = list(tokenize('<p title="a &amp; b">Tom &amp; Jerry</p>'))

        assert tokens[0].attributes == [("title", "a & b")]
        assert tokens[1].data == "Tom & Jerry"

    def test_charrefs_kept_when_disabled(self):
        """Test that entity references pass through as text when conversion is off."""
        tokenizer = HTMLTokenizer(TokenizerConfig(convert_charrefs=False))
        text = "".join(
            token.data
            for token in tokenizer.tokenize("<p>Tom &amp; Jerry</p>")
            if token.type is TokenType.TEXT
        )
        assert text == "Tom &amp; Jerry"

    def test_text_can_be_suppressed(self):
        """Test that emit_text=False drops text tokens."""
        tokenizer = HTMLTokenizer(TokenizerConfig(emit_text=False))
        tokens = list(tokenizer.tokenize("<p>Hi</p>"))
        assert TokenType.TEXT not in {token.type for token in tokens}

    def test_comments_and_doctype(self):
        """Test comment and doctype tokens."""
        markup = "<!DOCTYPE html><!-- note --><html></html>"

        default_types = [token.type for token in tokenize(markup)]
        assert TokenType.DOCTYPE in default_types
        assert TokenType.COMMENT not in default_types

        tokenizer = HTMLTokenizer(TokenizerConfig(emit_comments=True))
        comments = [
            token for token in tokenizer.tokenize(markup)
            if token.type is TokenType.COMMENT
        ]
        assert [token.data for token in comments] == [" note "]

    def test_positions(self):
        """Test that tag tokens record line and column."""
        tokens = list(tokenize("<div>\n  <p>x</p>\n</div>"))
        starts = [token for token in tokens if token.type is TokenType.START_TAG]

        assert starts[0].position == TokenPosition(1, 0)
        assert starts[1].position == TokenPosition(2, 2)

    def test_small_feed_chunks_give_same_tags(self):
        """Test that tags split across feed chunks are reassembled."""
        markup = '<html><body><div class="wide"><p>Text</p><img src="x.png"/></div></body></html>'
        tokenizer = HTMLTokenizer(TokenizerConfig(feed_chunk_size=3))

        chunked = list(tokenizer.tokenize(markup))
        whole = list(tokenize(markup))

        assert tag_tokens(chunked) == tag_tokens(whole)
        assert chunked[-1].type is TokenType.ERROR

    def test_tokenize_chunks_is_incremental(self):
        """Test that tokens are yielded before later chunks are requested."""
        requested = []

        def chunks():
            for chunk in ["<div>", "<p>", "</p></div>"]:
                requested.append(chunk)
                yield chunk

        stream = HTMLTokenizer().tokenize_chunks(chunks())
        first = next(stream)

        assert first.data == "div"
        assert requested == ["<div>"]

    def test_chunk_errors_propagate(self):
        """Test that exceptions from the chunk source are not swallowed."""
        def chunks():
            yield "<div>"
            raise ConnectionError("dropped")

        with pytest.raises(ConnectionError, match="dropped"):
            list(HTMLTokenizer().tokenize_chunks(chunks()))
