# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Iterable, List, Optional

from .registry import ImplRecord, ImplRegistry, Query
from .unify import Substitution, first_mismatch, unify_terms


class MissReason(Enum):
	TYPE_MISMATCH = "type mismatch"
	ARITY_MISMATCH = "arity mismatch"
	CONST_MISMATCH = "const argument mismatch"


@dataclass(frozen=True)
class Candidate:
	record: ImplRecord
	subst: Substitution


@dataclass(frozen=True)
class NearMiss:
	"""An impl of the queried interface that did not apply, and why."""

	record: ImplRecord
	reason: MissReason
	# Index into `record.terms` of the first failing position (CONST_MISMATCH only).
	position: Optional[int] = None


def _shape_matches(query: Query, record: ImplRecord) -> bool:
	return (
		record.interface == query.interface
		and record.target.head() == query.target.head()
		and len(record.target.args) == len(query.target.args)
		and len(record.args) == len(query.args)
	)


def collect_from(query: Query, records: Iterable[ImplRecord]) -> List[Candidate]:
	"""Candidates among `records`, in the order given."""
	out: List[Candidate] = []
	for record in records:
		if not _shape_matches(query, record):
			continue
		subst = unify_terms(record.terms, query.terms)
		if subst is not None:
			out.append(Candidate(record=record, subst=subst))
	return out


def collect(query: Query, registry: ImplRegistry) -> List[Candidate]:
	"""
	Every impl that unifies with `query` at all const positions.

	Only same-head, same-interface, same-arity records are tried. Declaration
	order is preserved and no specificity ranking is applied.
	"""
	return collect_from(query, registry.records_for_target(query.interface, query.target.head()))


def _miss_for(query: Query, record: ImplRecord) -> Optional[NearMiss]:
	if record.target.head() != query.target.head():
		return NearMiss(record=record, reason=MissReason.TYPE_MISMATCH)
	if len(record.target.args) != len(query.target.args) or len(record.args) != len(query.args):
		return NearMiss(record=record, reason=MissReason.ARITY_MISMATCH)
	pos = first_mismatch(record.terms, query.terms)
	if pos is None:
		return None
	return NearMiss(record=record, reason=MissReason.CONST_MISMATCH, position=pos)


def near_misses(query: Query, registry: ImplRegistry) -> List[NearMiss]:
	"""Impls of the queried interface that are not candidates, in declaration order."""
	out: List[NearMiss] = []
	for record in registry.records_for(query.interface):
		miss = _miss_for(query, record)
		if miss is not None:
			out.append(miss)
	return out


__all__ = ["MissReason", "Candidate", "NearMiss", "collect", "collect_from", "near_misses"]
