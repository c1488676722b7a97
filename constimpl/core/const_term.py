# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Constant terms: the values that fill const generic slots.

A term is either a concrete `Literal` of a fixed-width integer kind, or a
`FreeVar` naming a const parameter of some enclosing generic declaration
(an impl, or the function a query sits in). FreeVars are identified by the
owning declaration's `DeclId` plus the parameter name, so `N` in one impl and
`N` in a caller are never the same variable.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Tuple, Union

from .errors import ConstRangeError, UnknownConstParamError
from .int_kinds import IntKind
from .span import Span

DeclId = int  # opaque handle into a DeclArena


@dataclass(frozen=True)
class Literal:
	kind: IntKind
	value: int

	def __post_init__(self) -> None:
		if isinstance(self.value, bool) or not isinstance(self.value, int):
			raise ConstRangeError(
				reason_code="E-CONST-RANGE",
				message=f"const literal must be an integer, got {type(self.value).__name__}",
				subject=repr(self.value),
			)
		if not self.kind.contains(self.value):
			raise ConstRangeError(
				reason_code="E-CONST-RANGE",
				message=(
					f"literal {self.value} does not fit {self.kind} "
					f"(range {self.kind.min_value}..={self.kind.max_value})"
				),
				subject=f"{self.value}{self.kind}",
			)

	def __str__(self) -> str:
		return f"{self.value}{self.kind}"


@dataclass(frozen=True)
class FreeVar:
	decl: DeclId
	name: str

	def __str__(self) -> str:
		return self.name


ConstTerm = Union[Literal, FreeVar]


@dataclass(frozen=True)
class ConstParam:
	name: str
	kind: IntKind


@dataclass(frozen=True)
class GenericDecl:
	"""A declaration that introduces const parameters (impl, fn, or bare query)."""

	id: DeclId
	name: str
	role: str
	params: Tuple[ConstParam, ...] = ()
	span: Span = field(default_factory=Span)

	def param(self, name: str) -> Optional[ConstParam]:
		for p in self.params:
			if p.name == name:
				return p
		return None


class DeclArena:
	"""
	Owns GenericDecls; DeclIds index into it.

	Ids are handed out in allocation order starting at 0.
	"""

	def __init__(self) -> None:
		self._decls: List[GenericDecl] = []

	def add(
		self,
		name: str,
		*,
		role: str,
		params: Iterable[ConstParam] = (),
		span: Span | None = None,
	) -> GenericDecl:
		decl = GenericDecl(
			id=len(self._decls),
			name=name,
			role=role,
			params=tuple(params),
			span=span or Span(),
		)
		self._decls.append(decl)
		return decl

	def get(self, decl_id: DeclId) -> GenericDecl:
		return self._decls[decl_id]

	def free_var(self, decl_id: DeclId, name: str) -> FreeVar:
		decl = self.get(decl_id)
		if decl.param(name) is None:
			raise UnknownConstParamError(
				reason_code="E-CONST-PARAM",
				message=f"'{decl.name}' declares no const parameter '{name}'",
				subject=name,
			)
		return FreeVar(decl=decl_id, name=name)

	def kind_of(self, var: FreeVar) -> Optional[IntKind]:
		p = self.get(var.decl).param(var.name)
		return p.kind if p is not None else None

	def __len__(self) -> int:
		return len(self._decls)

	def __iter__(self):
		return iter(self._decls)


def free_vars(terms: Iterable[ConstTerm]) -> List[FreeVar]:
	"""FreeVars of `terms`, deduplicated, in first-appearance order."""
	seen: Dict[FreeVar, None] = {}
	for t in terms:
		if isinstance(t, FreeVar):
			seen.setdefault(t, None)
	return list(seen)


def render_term(term: ConstTerm) -> str:
	return str(term)


def render_args(terms: Iterable[ConstTerm]) -> str:
	return ", ".join(render_term(t) for t in terms)


__all__ = [
	"DeclId",
	"Literal",
	"FreeVar",
	"ConstTerm",
	"ConstParam",
	"GenericDecl",
	"DeclArena",
	"free_vars",
	"render_term",
	"render_args",
]
