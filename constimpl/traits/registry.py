# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

from constimpl.core.const_term import ConstParam, ConstTerm, FreeVar, free_vars, render_args
from constimpl.core.diagnostics import Diagnostic
from constimpl.core.errors import ArityError, ImplOrderError, ImplParamsError, RegistryFrozenError
from constimpl.core.span import Span


@dataclass(frozen=True)
class TypeRef:
	"""Implementing type: a head name plus the type's own const arguments."""

	name: str
	args: Tuple[ConstTerm, ...] = ()

	def head(self) -> str:
		return self.name

	def __str__(self) -> str:
		if not self.args:
			return self.name
		return f"{self.name}<{render_args(self.args)}>"


@dataclass(frozen=True)
class InterfaceDef:
	name: str
	params: Tuple[ConstParam, ...] = ()
	span: Span = field(default_factory=Span)

	@property
	def arity(self) -> int:
		return len(self.params)


def _interface_str(name: str, args: Tuple[ConstTerm, ...]) -> str:
	if not args:
		return name
	return f"{name}<{render_args(args)}>"


@dataclass(frozen=True)
class ImplRecord:
	"""
	One declared `impl<params> Interface<args> for Target<targs>`.

	`params` must be exactly the free variables used in the target and
	interface arguments; this is checked at construction.
	"""

	id: int
	target: TypeRef
	interface: str
	args: Tuple[ConstTerm, ...]
	params: Tuple[FreeVar, ...] = ()
	span: Span = field(default_factory=Span)

	def __post_init__(self) -> None:
		used = set(free_vars(self.terms))
		declared = set(self.params)
		if used != declared:
			missing = sorted(v.name for v in used - declared)
			unused = sorted(v.name for v in declared - used)
			detail = []
			if missing:
				detail.append(f"undeclared {', '.join(missing)}")
			if unused:
				detail.append(f"unconstrained {', '.join(unused)}")
			raise ImplParamsError(
				reason_code="E-IMPL-PARAMS",
				message=f"impl #{self.id} const parameters do not match its arguments ({'; '.join(detail)})",
				subject=self.signature(),
			)

	@property
	def terms(self) -> Tuple[ConstTerm, ...]:
		return self.target.args + self.args

	def signature(self) -> str:
		generics = ""
		if self.params:
			generics = "<" + ", ".join(p.name for p in self.params) + ">"
		return f"impl{generics} {_interface_str(self.interface, self.args)} for {self.target}"


@dataclass(frozen=True)
class Query:
	"""`target: interface<args>` as asked by some call site."""

	target: TypeRef
	interface: str
	args: Tuple[ConstTerm, ...]
	span: Span = field(default_factory=Span)

	@property
	def terms(self) -> Tuple[ConstTerm, ...]:
		return self.target.args + self.args

	def __str__(self) -> str:
		return f"{self.target}: {_interface_str(self.interface, self.args)}"


def _diag(message: str, span: Span | None) -> Diagnostic:
	return Diagnostic(message=message, phase="declare", severity="error", span=span or Span())


class ImplRegistry:
	"""
	Process-wide set of interfaces and impl records.

	Populated once in declaration order, then frozen. After `freeze()` the
	registry is read-only and may be shared across resolver threads.
	"""

	def __init__(self) -> None:
		self.interfaces: Dict[str, InterfaceDef] = {}
		self.records: List[ImplRecord] = []
		self.records_by_interface: Dict[str, List[int]] = {}
		self.records_by_interface_head: Dict[Tuple[str, str], List[int]] = {}
		self.diagnostics: List[Diagnostic] = []
		self._frozen = False

	@property
	def frozen(self) -> bool:
		return self._frozen

	def freeze(self) -> "ImplRegistry":
		self._frozen = True
		return self

	def _check_mutable(self) -> None:
		if self._frozen:
			raise RegistryFrozenError(reason_code="E-REGISTRY-FROZEN", message="impl registry is frozen")

	def next_record_id(self) -> int:
		return len(self.records)

	def add_interface(self, iface: InterfaceDef) -> bool:
		self._check_mutable()
		if iface.name in self.interfaces:
			self.diagnostics.append(_diag(f"duplicate interface definition '{iface.name}'", iface.span))
			return False
		self.interfaces[iface.name] = iface
		return True

	def add_impl(self, record: ImplRecord) -> bool:
		self._check_mutable()
		iface = self.interfaces.get(record.interface)
		if iface is None:
			self.diagnostics.append(_diag(f"unknown interface '{record.interface}' in impl", record.span))
			return False
		if len(record.args) != iface.arity:
			self.diagnostics.append(
				_diag(
					f"interface '{iface.name}' takes {iface.arity} const argument(s) but impl supplies {len(record.args)}",
					record.span,
				)
			)
			return False
		if record.id != len(self.records):
			raise ImplOrderError(
				reason_code="E-IMPL-ORDER",
				message=f"impl record id {record.id} out of declaration order (expected {len(self.records)})",
				subject=record.signature(),
			)
		self.records.append(record)
		self.records_by_interface.setdefault(record.interface, []).append(record.id)
		self.records_by_interface_head.setdefault((record.interface, record.target.head()), []).append(record.id)
		return True

	def interface(self, name: str) -> Optional[InterfaceDef]:
		return self.interfaces.get(name)

	def records_for(self, interface: str) -> List[ImplRecord]:
		return [self.records[i] for i in self.records_by_interface.get(interface, [])]

	def records_for_target(self, interface: str, head: str) -> List[ImplRecord]:
		return [self.records[i] for i in self.records_by_interface_head.get((interface, head), [])]

	def check_query(self, query: Query) -> Optional[InterfaceDef]:
		"""
		Enforce the caller-side arity precondition.

		An interface with no declaration has no impls either; that is an
		ordinary not-found, so None is returned rather than raising.
		"""
		iface = self.interfaces.get(query.interface)
		if iface is None:
			return None
		if len(query.args) != iface.arity:
			raise ArityError(
				reason_code="E-ARITY",
				message=f"interface '{iface.name}' takes {iface.arity} const argument(s), query supplies {len(query.args)}",
				subject=str(query),
			)
		return iface


__all__ = ["TypeRef", "InterfaceDef", "ImplRecord", "Query", "ImplRegistry"]
