# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import List

from constimpl.core.diagnostics import Diagnostic
from constimpl.parser import parse_file
from constimpl.traits.registry import Query
from constimpl.traits.report import build_report
from constimpl.traits.resolve import Ambiguous, NotFound, Resolved, Verdict, resolve_many

logger = logging.getLogger(__name__)


def _verdict_to_json(verdict: Verdict) -> dict:
	"""Summarize a verdict for --json output."""
	query: Query = verdict.query
	out: dict = {
		"query": str(query),
		"status": verdict.status.name.lower(),
		"line": query.span.line,
		"column": query.span.column,
	}
	if isinstance(verdict, Resolved):
		out["impl"] = verdict.record.id
		out["bindings"] = {f"{v.name}@{v.decl}": str(t) for v, t in verdict.subst.resolved().items()}
	elif isinstance(verdict, Ambiguous):
		out["impls"] = [r.id for r in verdict.records]
	elif isinstance(verdict, NotFound):
		out["near_misses"] = [m.record.id for m in verdict.considered]
	return out


def _print_human(source: Path, diags: List[Diagnostic]) -> None:
	for d in diags:
		print(f"{d.span.file or source}:{d.span.label()}: {d.severity}: {d.message}", file=sys.stderr)
		for note in d.notes:
			print(f"  help: {note}", file=sys.stderr)


def _build_parser() -> argparse.ArgumentParser:
	p = argparse.ArgumentParser(prog="constimpl", description="Const-generic impl resolution")
	p.add_argument(
		"--log-level",
		default="WARNING",
		choices=["DEBUG", "INFO", "WARNING", "ERROR"],
		help="Logging level for resolver traces on stderr (default: WARNING)",
	)
	sub = p.add_subparsers(dest="cmd", required=True)

	check = sub.add_parser("check", help="Resolve every `require` in a declaration file")
	check.add_argument("source", type=Path, help="Path to the declaration file")
	check.add_argument(
		"--json",
		action="store_true",
		help="Emit diagnostics and verdicts as JSON on stdout",
	)
	check.add_argument(
		"-j",
		"--jobs",
		type=int,
		default=1,
		help="Resolve queries on this many worker threads (default: 1)",
	)
	return p


def check(source: Path, *, as_json: bool, jobs: int) -> int:
	"""
	Parse `source`, resolve its queries, report the ones that do not resolve.

	Declaration problems are reported and stop before resolution.
	"""
	unit = parse_file(source)
	if unit.diagnostics:
		if as_json:
			payload = {
				"exit_code": 1,
				"diagnostics": [d.to_dict(default_file=str(source)) for d in unit.diagnostics],
				"verdicts": [],
			}
			print(json.dumps(payload))
		else:
			_print_human(source, unit.diagnostics)
		return 1

	logger.info("%s: %d impl(s), %d quer(ies)", source, len(unit.registry.records), len(unit.queries))
	verdicts = resolve_many(unit.queries, unit.registry, jobs=jobs)
	diags: List[Diagnostic] = []
	for verdict in verdicts:
		report = build_report(verdict)
		if report is not None:
			diags.append(report.to_diagnostic())
	exit_code = 1 if diags else 0
	if as_json:
		payload = {
			"exit_code": exit_code,
			"diagnostics": [d.to_dict(default_file=str(source)) for d in diags],
			"verdicts": [_verdict_to_json(v) for v in verdicts],
		}
		print(json.dumps(payload))
	else:
		_print_human(source, diags)
	return exit_code


def main(argv: list[str] | None = None) -> int:
	args = _build_parser().parse_args(argv)
	logging.basicConfig(level=getattr(logging, args.log_level), format="%(levelname)s %(name)s: %(message)s")
	if args.cmd == "check":
		if not args.source.is_file():
			print(f"{args.source}:?:?: error: no such file", file=sys.stderr)
			return 1
		if args.jobs < 1:
			print(f"{args.source}:?:?: error: --jobs must be at least 1", file=sys.stderr)
			return 1
		return check(args.source, as_json=args.json, jobs=args.jobs)
	return 2


__all__ = ["main", "check"]
