"""
Common diagnostic structure shared by the front-end, registry and reports.

A message plus optional span/notes; renderers decide on the layout.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from .span import Span


@dataclass
class Diagnostic:
	"""Represents a diagnostic (error/warning/etc.)."""

	message: str
	code: str | None = None
	# Phase label: "parser", "declare" or "resolve".
	phase: str | None = None
	severity: str = "error"
	span: Span = field(default_factory=Span)  # Span() denotes unknown.
	notes: list[str] = field(default_factory=list)

	def __post_init__(self) -> None:
		if self.span is None:  # type: ignore[unreachable]
			self.span = Span()

	def to_dict(self, *, default_file: str | None = None) -> dict:
		"""Render to a structured JSON-friendly dict."""
		return {
			"phase": self.phase,
			"code": self.code,
			"message": self.message,
			"severity": self.severity,
			"file": self.span.file or default_file,
			"line": self.span.line,
			"column": self.span.column,
			"notes": list(self.notes),
		}


__all__ = ["Diagnostic"]
