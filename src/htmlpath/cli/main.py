"""Main CLI entry point for the htmlpath command-line tool.

Loads a document from a URL, a file or stdin and either runs a path query
against it or prints its structure.

Exit codes: 0 on success, 1 when nothing matched or the document has no
elements, 2 for transport, file and configuration errors.
"""

import argparse
import json
import sys
from pathlib import Path
from typing import List, Optional

from htmlpath import __version__
from htmlpath.api import HTMLPathParser, TransportError
from htmlpath.shared import ConfigError, ParserConfig, configure_logging
from htmlpath.tree import Node, NodePath

EXIT_OK = 0
EXIT_NO_MATCH = 1
EXIT_ERROR = 2


def create_argument_parser() -> argparse.ArgumentParser:
    """Create the main argument parser."""
    parser = argparse.ArgumentParser(
        prog="htmlpath",
        description="Build an element tree from HTML and look nodes up by path"
    )
    parser.add_argument("--version", action="version", version=__version__)
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Enable debug logging"
    )
    parser.add_argument(
        "--quiet", "-q",
        action="store_true",
        help="Only log errors"
    )
    parser.add_argument(
        "--config", "-c",
        type=Path,
        help="JSON configuration file"
    )
    parser.add_argument(
        "--timeout",
        type=float,
        help="Network timeout in seconds"
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    query_parser = subparsers.add_parser("query", help="Find nodes matching a path")
    query_parser.add_argument(
        "source",
        help="http(s) URL, file path, or - for stdin"
    )
    query_parser.add_argument("--path", "-p", default="", help="Path expression")
    query_parser.add_argument(
        "--class", dest="class_", default="", help="Exact class attribute value"
    )
    query_parser.add_argument("--id", default="", help="Exact id attribute value")
    query_parser.add_argument(
        "--all", "-a",
        action="store_true",
        help="Print every match instead of the first"
    )
    query_parser.add_argument(
        "--format", "-f",
        choices=["text", "json"],
        default="text",
        help="Output format (default: text)"
    )

    tree_parser = subparsers.add_parser("tree", help="Print the document structure")
    tree_parser.add_argument(
        "source",
        help="http(s) URL, file path, or - for stdin"
    )
    tree_parser.add_argument(
        "--indent-char",
        default="  ",
        help="String repeated once per nesting level (default: two spaces)"
    )

    return parser


def load_config(args: argparse.Namespace) -> ParserConfig:
    """Build the parser configuration from ``--config`` and flag overrides."""
    config = ParserConfig()
    if args.config:
        config = ParserConfig.from_json(args.config.read_text())
    if args.timeout is not None:
        config = config.override(fetch__timeout_seconds=args.timeout)
    return config


def load_document(source: str, parser: HTMLPathParser) -> Optional[Node]:
    """Parse ``source``, choosing URL, stdin or file handling by its form."""
    if source.startswith(("http://", "https://")):
        return parser.parse_url(source)
    if source == "-":
        return parser.parse_string(sys.stdin.read())
    return parser.parse_file(source)


def format_matches(matches: List[Node], format_type: str) -> str:
    """Format matched nodes for output."""
    if format_type == "json":
        return json.dumps([node.to_dict() for node in matches], indent=2)
    return "\n".join(node.path() for node in matches)


def cmd_query(args: argparse.Namespace, root: Node) -> int:
    """Handle query command."""
    query = NodePath(path=args.path, class_=args.class_, id=args.id)
    if args.all:
        matches = root.find_path_all(query)
    else:
        match = root.find_path(query)
        matches = [match] if match is not None else []

    if matches or args.format == "json":
        print(format_matches(matches, args.format))
    return EXIT_OK if matches else EXIT_NO_MATCH


def cmd_tree(args: argparse.Namespace, root: Node) -> int:
    """Handle tree command."""
    root.print_structure(0, args.indent_char)
    return EXIT_OK


def main(argv: Optional[List[str]] = None) -> int:
    """Main CLI entry point."""
    parser = create_argument_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return EXIT_NO_MATCH

    try:
        config = load_config(args)
    except (ConfigError, OSError) as e:
        print(f"Error loading configuration: {e}", file=sys.stderr)
        return EXIT_ERROR

    if args.verbose:
        configure_logging("DEBUG")
    elif args.quiet:
        configure_logging("ERROR")
    else:
        configure_logging(config.global_.logging_level)

    try:
        root = load_document(args.source, HTMLPathParser(config))
    except TransportError as e:
        print(f"Error fetching document: {e}", file=sys.stderr)
        return EXIT_ERROR
    except OSError as e:
        print(f"Error reading document: {e}", file=sys.stderr)
        return EXIT_ERROR
    except KeyboardInterrupt:
        print("\nOperation interrupted by user", file=sys.stderr)
        return 130

    if root is None:
        print("Document contains no elements", file=sys.stderr)
        return EXIT_NO_MATCH

    if args.command == "query":
        return cmd_query(args, root)
    return cmd_tree(args, root)


if __name__ == "__main__":
    sys.exit(main())
