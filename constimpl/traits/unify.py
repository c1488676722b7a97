# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Positional unification of an impl's const terms against a query's.

The pattern side always comes from the impl record and the subject side from
the query. The two sides are not symmetric:

* an impl's own FreeVar is *instantiated* by whatever the query supplies;
* a query's FreeVar (a const parameter of the caller) is *constrained* when the
  impl demands a literal there, and that constraint is recorded under the
  query variable's identity because the caller's context owns it.

A query FreeVar is either narrowed to a literal or handed opaquely to an impl
variable, never both. Once handed over it is pinned to itself, so a later
position may not narrow it; once narrowed, a later impl variable may not
receive it. Either order fails the record, so the verdict does not depend on
which slot carries the literal.

Binding is monotonic and a conflict fails the record immediately, so a single
left-to-right pass suffices.
"""

from __future__ import annotations

from typing import Dict, Iterator, List, Optional, Sequence, Tuple

from constimpl.core.const_term import ConstTerm, DeclId, FreeVar, Literal


class Substitution:
	"""FreeVar -> ConstTerm bindings, at most one per variable."""

	def __init__(self, bindings: Dict[FreeVar, ConstTerm] | None = None) -> None:
		self._bindings: Dict[FreeVar, ConstTerm] = dict(bindings or {})

	def lookup(self, var: FreeVar) -> Optional[ConstTerm]:
		return self._bindings.get(var)

	def is_bound(self, var: FreeVar) -> bool:
		return var in self._bindings

	def walk(self, term: ConstTerm) -> ConstTerm:
		"""Follow bindings until a literal, an unbound var, or a self-bound var."""
		seen: set[FreeVar] = set()
		while isinstance(term, FreeVar) and term not in seen:
			seen.add(term)
			nxt = self._bindings.get(term)
			if nxt is None or nxt == term:
				return term
			term = nxt
		return term

	def bind(self, var: FreeVar, value: ConstTerm) -> bool:
		"""Bind `var := value`; an existing binding must agree, it is never replaced."""
		current = self._bindings.get(var)
		if current is None:
			self._bindings[var] = value
			return True
		return self.walk(current) == self.walk(value)

	def bindings_for(self, decl: DeclId) -> Dict[FreeVar, ConstTerm]:
		"""Bindings of `decl`'s variables, without pins."""
		return {v: t for v, t in self.resolved().items() if v.decl == decl}

	def resolved(self) -> Dict[FreeVar, ConstTerm]:
		"""Walked bindings; a caller constant pinned to itself is left out."""
		out: Dict[FreeVar, ConstTerm] = {}
		for v, t in self._bindings.items():
			value = self.walk(t)
			if value != v:
				out[v] = value
		return out

	def items(self) -> List[Tuple[FreeVar, ConstTerm]]:
		return list(self._bindings.items())

	def copy(self) -> "Substitution":
		return Substitution(self._bindings)

	def __iter__(self) -> Iterator[FreeVar]:
		return iter(self._bindings)

	def __len__(self) -> int:
		return len(self._bindings)

	def __contains__(self, var: object) -> bool:
		return var in self._bindings

	def __eq__(self, other: object) -> bool:
		if not isinstance(other, Substitution):
			return NotImplemented
		return self._bindings == other._bindings

	def __hash__(self) -> int:
		return hash(frozenset(self._bindings.items()))

	def __repr__(self) -> str:
		inner = ", ".join(f"{v.name}@{v.decl} := {t}" for v, t in self._bindings.items())
		return f"Substitution({inner})"


def unify(pattern: ConstTerm, subject: ConstTerm, subst: Substitution) -> bool:
	"""Unify one impl-side term with one query-side term, extending `subst`."""
	if isinstance(pattern, FreeVar):
		value = subst.walk(subject)
		if isinstance(subject, FreeVar) and isinstance(value, Literal):
			# The caller's constant was already narrowed to a literal; it cannot
			# also flow opaquely into the impl.
			return False
		current = subst.lookup(pattern)
		if current is not None:
			return subst.walk(current) == value
		subst.bind(pattern, value)
		if isinstance(value, FreeVar) and not subst.is_bound(value):
			# Pin the caller's constant.
			subst.bind(value, value)
		return True
	if isinstance(subject, Literal):
		return pattern == subject
	# Literal in the impl vs the caller's FreeVar.
	value = subst.walk(subject)
	if isinstance(value, Literal):
		return value == pattern
	return subst.bind(value, pattern)


def first_mismatch(patterns: Sequence[ConstTerm], subjects: Sequence[ConstTerm]) -> Optional[int]:
	"""Index of the first position that fails, or None when all unify."""
	subst = Substitution()
	for idx, (p, s) in enumerate(zip(patterns, subjects)):
		if not unify(p, s, subst):
			return idx
	return None


def unify_terms(patterns: Sequence[ConstTerm], subjects: Sequence[ConstTerm]) -> Optional[Substitution]:
	"""Unify two equal-length term sequences with a fresh substitution."""
	if len(patterns) != len(subjects):
		return None
	subst = Substitution()
	for p, s in zip(patterns, subjects):
		if not unify(p, s, subst):
			return None
	return subst


__all__ = ["Substitution", "unify", "unify_terms", "first_mismatch"]
