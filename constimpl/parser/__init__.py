"""
Text front-end for const-generic interface declarations.

Parses interface/struct/impl/fn/require items with lark and lowers them into
an `ImplRegistry` and the queries the `require` items ask.
"""

from __future__ import annotations

from .parser import ParsedUnit, parse_file, parse_source

__all__ = ["ParsedUnit", "parse_file", "parse_source"]
