# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Structured reports for verdicts that are not `Resolved`.

A Report fixes the *content* of a diagnostic (which impls, in what order,
with which const arguments); layout is left to whoever renders it. Reports
are built per call site: the same failing query reached from two places
yields two independent reports.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional, Tuple

from constimpl.core.const_term import ConstTerm, FreeVar, render_term
from constimpl.core.diagnostics import Diagnostic
from constimpl.core.span import Span
from .collect import Candidate, MissReason, NearMiss
from .resolve import Ambiguous, NotFound, Verdict
from .unify import Substitution

NOT_FOUND_CODE = "E-IMPL-NOT-FOUND"
AMBIGUOUS_CODE = "E-IMPL-AMBIGUOUS"

FOUND_LABEL = "found but does not apply"
CANDIDATE_LABEL = "candidate"


@dataclass(frozen=True)
class ReportEntry:
	record_id: int
	signature: str
	slots: Tuple[str, ...]
	label: str
	detail: Optional[str] = None

	def to_dict(self) -> dict:
		return {
			"record_id": self.record_id,
			"signature": self.signature,
			"slots": list(self.slots),
			"label": self.label,
			"detail": self.detail,
		}

	def note(self) -> str:
		text = f"  {self.signature}"
		if self.label == CANDIDATE_LABEL and self.slots:
			text += f" [{', '.join(self.slots)}]"
		suffix = self.label if self.detail is None else f"{self.label}: {self.detail}"
		return f"{text} ({suffix})"


@dataclass(frozen=True)
class Report:
	code: str
	message: str
	interface: str
	query_args: Tuple[str, ...]
	entries: Tuple[ReportEntry, ...] = ()
	span: Span = field(default_factory=Span)

	@property
	def heading(self) -> str:
		if self.code == AMBIGUOUS_CODE:
			return "multiple impls satisfy the query:"
		if not self.entries:
			return f"no implementations of `{self.interface}` were found"
		return "the following implementations were found:"

	def to_dict(self) -> dict:
		return {
			"code": self.code,
			"message": self.message,
			"interface": self.interface,
			"query_args": list(self.query_args),
			"entries": [e.to_dict() for e in self.entries],
			"file": self.span.file,
			"line": self.span.line,
			"column": self.span.column,
		}

	def to_diagnostic(self) -> Diagnostic:
		notes = [self.heading] + [e.note() for e in self.entries]
		return Diagnostic(
			message=self.message,
			code=self.code,
			phase="resolve",
			severity="error",
			span=self.span,
			notes=notes,
		)


def _miss_detail(miss: NearMiss) -> str:
	if miss.reason is not MissReason.CONST_MISMATCH or miss.position is None:
		return miss.reason.value
	n_target = len(miss.record.target.args)
	if miss.position < n_target:
		where = f"type argument {miss.position}"
	else:
		where = f"interface argument {miss.position - n_target}"
	return f"{miss.reason.value} at {where}"


def _slot(term: ConstTerm, subst: Substitution) -> str:
	if not isinstance(term, FreeVar):
		return render_term(term)
	bound = subst.walk(term)
	if bound == term:
		return term.name
	return f"{term.name} = {render_term(bound)}"


def _near_miss_entry(miss: NearMiss) -> ReportEntry:
	rec = miss.record
	return ReportEntry(
		record_id=rec.id,
		signature=rec.signature(),
		slots=tuple(render_term(t) for t in rec.terms),
		label=FOUND_LABEL,
		detail=_miss_detail(miss),
	)


def _candidate_entry(cand: Candidate) -> ReportEntry:
	rec = cand.record
	return ReportEntry(
		record_id=rec.id,
		signature=rec.signature(),
		slots=tuple(_slot(t, cand.subst) for t in rec.terms),
		label=CANDIDATE_LABEL,
	)


def build_report(verdict: Verdict, span: Span | None = None) -> Optional[Report]:
	"""
	Build the report for a failed resolution at call site `span`.

	Falls back to the query's own span when no call-site span is given.
	Returns None for `Resolved`.
	"""
	if isinstance(verdict, NotFound):
		query = verdict.query
		return Report(
			code=NOT_FOUND_CODE,
			message=f"the trait bound `{query}` is not satisfied",
			interface=query.interface,
			query_args=tuple(render_term(t) for t in query.terms),
			entries=tuple(_near_miss_entry(m) for m in verdict.considered),
			span=span or query.span,
		)
	if isinstance(verdict, Ambiguous):
		query = verdict.query
		return Report(
			code=AMBIGUOUS_CODE,
			message=f"multiple impls satisfying `{query}` found",
			interface=query.interface,
			query_args=tuple(render_term(t) for t in query.terms),
			entries=tuple(_candidate_entry(c) for c in verdict.candidates),
			span=span or query.span,
		)
	return None


__all__ = [
	"NOT_FOUND_CODE",
	"AMBIGUOUS_CODE",
	"FOUND_LABEL",
	"CANDIDATE_LABEL",
	"ReportEntry",
	"Report",
	"build_report",
]
