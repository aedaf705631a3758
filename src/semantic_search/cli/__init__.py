"""
CLI module - command line entry point.
"""

from semantic_search.cli.commands import build_parser, main

__all__ = ["build_parser", "main"]
