"""Command-line interface for htmlpath.

Queries documents by path and prints their structure.
"""

from .main import main

__all__ = ["main"]
