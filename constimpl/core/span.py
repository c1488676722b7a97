# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Source span attached to declarations, queries and diagnostics.

The front-end stores whatever location object it has in `raw`; the resolver
never inspects spans, it only carries them through to reports.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional


@dataclass(frozen=True)
class Span:
	"""Best-effort file/line/column plus the raw parser location."""

	file: Optional[str] = None
	line: Optional[int] = None
	column: Optional[int] = None
	end_line: Optional[int] = None
	end_column: Optional[int] = None
	raw: Any = None

	@classmethod
	def from_loc(cls, loc: Any, *, file: Optional[str] = None) -> "Span":
		"""
		Construct a Span from a parser location object.

		A Span is returned unchanged. Anything else is probed for the usual
		`line`/`column`/`end_line`/`end_column` attributes (lark's `Meta` and
		`Token` both expose them).
		"""
		if loc is None:
			return cls(file=file)
		if isinstance(loc, cls):
			return loc
		return cls(
			file=file or getattr(loc, "file", None) or getattr(loc, "filename", None) or None,
			line=getattr(loc, "line", None),
			column=getattr(loc, "column", None),
			end_line=getattr(loc, "end_line", None),
			end_column=getattr(loc, "end_column", None),
			raw=loc,
		)

	def label(self) -> str:
		"""`line:column`, with `?` for unknown parts."""
		line = self.line if self.line is not None else "?"
		column = self.column if self.column is not None else "?"
		return f"{line}:{column}"


__all__ = ["Span"]
