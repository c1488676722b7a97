# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from enum import Enum, auto
from typing import Iterable, List, Tuple, Union

from constimpl.core.errors import RegistryNotFrozenError
from .collect import Candidate, NearMiss, collect, near_misses
from .registry import ImplRecord, ImplRegistry, Query
from .unify import Substitution

logger = logging.getLogger(__name__)


class VerdictStatus(Enum):
	RESOLVED = auto()
	NOT_FOUND = auto()
	AMBIGUOUS = auto()


@dataclass(frozen=True)
class Resolved:
	query: Query
	record: ImplRecord
	subst: Substitution
	status: VerdictStatus = VerdictStatus.RESOLVED


@dataclass(frozen=True)
class NotFound:
	query: Query
	considered: Tuple[NearMiss, ...] = ()
	status: VerdictStatus = VerdictStatus.NOT_FOUND

	def same_target(self) -> Tuple[NearMiss, ...]:
		"""Near misses whose implementing type head matches the query's."""
		head = self.query.target.head()
		return tuple(m for m in self.considered if m.record.target.head() == head)


@dataclass(frozen=True)
class Ambiguous:
	query: Query
	candidates: Tuple[Candidate, ...]
	status: VerdictStatus = VerdictStatus.AMBIGUOUS

	@property
	def records(self) -> Tuple[ImplRecord, ...]:
		return tuple(c.record for c in self.candidates)


Verdict = Union[Resolved, NotFound, Ambiguous]


def resolve(query: Query, registry: ImplRegistry) -> Verdict:
	"""
	Decide which impl applies to `query`.

	Zero candidates is NotFound (carrying every impl of the interface as a near
	miss), one is Resolved, more is Ambiguous in declaration order. Candidates
	are never deduplicated or ranked.
	"""
	registry.check_query(query)
	candidates = collect(query, registry)
	if not candidates:
		misses = tuple(near_misses(query, registry))
		logger.debug("%s: no impl applies (%d near miss(es))", query, len(misses))
		return NotFound(query=query, considered=misses)
	if len(candidates) == 1:
		cand = candidates[0]
		logger.debug("%s: resolved to impl #%d", query, cand.record.id)
		return Resolved(query=query, record=cand.record, subst=cand.subst)
	logger.debug("%s: ambiguous between impls %s", query, [c.record.id for c in candidates])
	return Ambiguous(query=query, candidates=tuple(candidates))


def resolve_many(queries: Iterable[Query], registry: ImplRegistry, *, jobs: int = 1) -> List[Verdict]:
	"""
	Resolve a batch of queries against a frozen registry.

	With `jobs > 1` the queries fan out over a thread pool; verdicts come back
	in query order either way.
	"""
	if not registry.frozen:
		raise RegistryNotFrozenError(
			reason_code="E-REGISTRY-NOT-FROZEN",
			message="resolve_many requires a frozen impl registry",
		)
	batch = list(queries)
	if jobs <= 1 or len(batch) <= 1:
		return [resolve(q, registry) for q in batch]
	with ThreadPoolExecutor(max_workers=jobs) as pool:
		return list(pool.map(lambda q: resolve(q, registry), batch))


__all__ = ["VerdictStatus", "Resolved", "NotFound", "Ambiguous", "Verdict", "resolve", "resolve_many"]
