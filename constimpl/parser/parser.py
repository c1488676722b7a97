# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Declaration front-end: parse interface/struct/impl/require text and lower it
into an `ImplRegistry` plus the list of queries to resolve.

Problems in the source are reported as Diagnostics; nothing here raises for
bad input.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional, Sequence, Tuple

from lark import Lark, Token, Tree
from lark.exceptions import UnexpectedInput

from constimpl.core.const_term import ConstParam, ConstTerm, DeclArena, FreeVar, GenericDecl, Literal
from constimpl.core.diagnostics import Diagnostic
from constimpl.core.errors import ConstImplError
from constimpl.core.int_kinds import IntKind
from constimpl.core.span import Span
from constimpl.traits.registry import ImplRecord, ImplRegistry, InterfaceDef, Query, TypeRef

_GRAMMAR_PATH = Path(__file__).with_name("grammar.lark")
_GRAMMAR_SRC = _GRAMMAR_PATH.read_text()

_PARSER = Lark(
	_GRAMMAR_SRC,
	parser="lalr",
	lexer="basic",
	start="start",
	propagate_positions=True,
	maybe_placeholders=False,
)

_INT_RE = re.compile(r"^(-?[0-9][0-9_]*)([a-z][a-z0-9]*)?$")


@dataclass
class ParsedUnit:
	"""Everything one source text declares, ready for resolution."""

	registry: ImplRegistry
	arena: DeclArena
	queries: List[Query] = field(default_factory=list)
	structs: Dict[str, Tuple[ConstParam, ...]] = field(default_factory=dict)
	diagnostics: List[Diagnostic] = field(default_factory=list)


def _name(node: object) -> str:
	return node.data if isinstance(node, Tree) else ""


def _subtrees(tree: Tree, name: str) -> List[Tree]:
	return [c for c in tree.children if isinstance(c, Tree) and c.data == name]


def _subtree(tree: Tree, name: str) -> Optional[Tree]:
	found = _subtrees(tree, name)
	return found[0] if found else None


def _names(tree: Tree) -> List[Token]:
	return [c for c in tree.children if isinstance(c, Token) and c.type == "NAME"]


class _Lowerer:
	def __init__(self, *, file: Optional[str]) -> None:
		self.file = file
		self.arena = DeclArena()
		self.registry = ImplRegistry()
		self.queries: List[Query] = []
		self.structs: Dict[str, Tuple[ConstParam, ...]] = {}
		self.diagnostics: List[Diagnostic] = []

	def span(self, node: object) -> Span:
		meta = node.meta if isinstance(node, Tree) else node
		return Span.from_loc(meta, file=self.file)

	def error(self, message: str, node: object) -> None:
		self.diagnostics.append(Diagnostic(message=message, phase="declare", span=self.span(node)))

	# Const parameters and arguments.

	def const_params(self, tree: Optional[Tree]) -> Tuple[ConstParam, ...]:
		if tree is None:
			return ()
		out: List[ConstParam] = []
		seen: set[str] = set()
		for p in _subtrees(tree, "const_param"):
			name_tok, kind_tok = _names(p)
			try:
				kind = IntKind.from_name(str(kind_tok))
			except ConstImplError as err:
				self.error(err.message, kind_tok)
				continue
			if str(name_tok) in seen:
				self.error(f"duplicate const parameter '{name_tok}'", name_tok)
				continue
			seen.add(str(name_tok))
			out.append(ConstParam(name=str(name_tok), kind=kind))
		return tuple(out)

	def const_arg(
		self,
		node: Tree,
		*,
		expected: Optional[IntKind],
		scope: Optional[GenericDecl],
		where: str,
	) -> Optional[ConstTerm]:
		tok = node.children[0]
		if _name(node) == "name_arg":
			param = scope.param(str(tok)) if scope is not None else None
			if param is None:
				self.error(f"unknown const parameter '{tok}' in {where}", tok)
				return None
			if expected is not None and param.kind is not expected:
				self.error(f"mismatched const kind in {where}: '{tok}' is {param.kind}, expected {expected}", tok)
				return None
			return self.arena.free_var(scope.id, str(tok))
		m = _INT_RE.match(str(tok))
		if m is None:
			self.error(f"malformed integer literal '{tok}'", tok)
			return None
		digits, suffix = m.group(1), m.group(2)
		if suffix is not None:
			kind = IntKind.from_name(suffix)
			if expected is not None and kind is not expected:
				self.error(f"mismatched const kind in {where}: '{tok}' is {kind}, expected {expected}", tok)
				return None
		elif expected is not None:
			kind = expected
		else:
			self.error(f"cannot infer the integer kind of '{tok}' in {where}; add a suffix", tok)
			return None
		try:
			return Literal(kind=kind, value=int(digits.replace("_", "")))
		except ConstImplError as err:
			self.error(err.message, tok)
			return None

	def const_args(
		self,
		tree: Optional[Tree],
		*,
		kinds: Optional[Sequence[ConstParam]],
		scope: Optional[GenericDecl],
		where: str,
	) -> Optional[Tuple[ConstTerm, ...]]:
		"""Lower `<...>`; None when any argument failed to lower."""
		if tree is None:
			return ()
		out: List[ConstTerm] = []
		ok = True
		for idx, node in enumerate(tree.children):
			expected = kinds[idx].kind if kinds is not None and idx < len(kinds) else None
			term = self.const_arg(node, expected=expected, scope=scope, where=where)
			if term is None:
				ok = False
				continue
			out.append(term)
		return tuple(out) if ok else None

	def type_ref(self, tree: Tree, *, scope: Optional[GenericDecl]) -> Optional[TypeRef]:
		name_tok = _names(tree)[0]
		args_tree = _subtree(tree, "const_args")
		params = self.structs.get(str(name_tok))
		if params is not None and len(args_tree.children if args_tree is not None else []) != len(params):
			self.error(
				f"struct '{name_tok}' takes {len(params)} const argument(s)",
				tree,
			)
			return None
		args = self.const_args(args_tree, kinds=params, scope=scope, where=f"type '{name_tok}'")
		if args is None:
			return None
		return TypeRef(name=str(name_tok), args=args)

	# Items.

	def interface_def(self, tree: Tree) -> None:
		name_tok = _names(tree)[0]
		params = self.const_params(_subtree(tree, "const_params"))
		self.registry.add_interface(InterfaceDef(name=str(name_tok), params=params, span=self.span(tree)))

	def struct_def(self, tree: Tree) -> None:
		name_tok = _names(tree)[0]
		if str(name_tok) in self.structs:
			self.error(f"duplicate struct definition '{name_tok}'", tree)
			return
		self.structs[str(name_tok)] = self.const_params(_subtree(tree, "const_params"))

	def impl_def(self, tree: Tree) -> None:
		iface_tok = _names(tree)[0]
		params = self.const_params(_subtree(tree, "const_params"))
		record_id = self.registry.next_record_id()
		decl = self.arena.add(f"impl#{record_id}", role="impl", params=params, span=self.span(tree))
		iface = self.registry.interface(str(iface_tok))
		if iface is None:
			self.error(f"unknown interface '{iface_tok}' in impl", iface_tok)
			return
		args_tree = _subtree(tree, "const_args")
		n_args = len(args_tree.children) if args_tree is not None else 0
		if n_args != iface.arity:
			self.error(
				f"interface '{iface.name}' takes {iface.arity} const argument(s) but impl supplies {n_args}",
				tree,
			)
			return
		target = self.type_ref(_subtree(tree, "type_ref"), scope=decl)
		args = self.const_args(args_tree, kinds=iface.params, scope=decl, where=f"interface '{iface.name}'")
		if target is None or args is None:
			return
		try:
			record = ImplRecord(
				id=record_id,
				target=target,
				interface=str(iface_tok),
				args=args,
				params=tuple(FreeVar(decl=decl.id, name=p.name) for p in params),
				span=self.span(tree),
			)
		except ConstImplError as err:
			self.error(err.message, tree)
			return
		self.registry.add_impl(record)

	def require_stmt(self, tree: Tree, *, scope: Optional[GenericDecl]) -> None:
		iface_tok = _names(tree)[0]
		iface = self.registry.interface(str(iface_tok))
		if iface is None:
			self.error(f"unknown interface '{iface_tok}' in require", iface_tok)
			return
		args_tree = _subtree(tree, "const_args")
		n_args = len(args_tree.children) if args_tree is not None else 0
		if n_args != iface.arity:
			self.error(
				f"interface '{iface.name}' takes {iface.arity} const argument(s) but require supplies {n_args}",
				tree,
			)
			return
		target = self.type_ref(_subtree(tree, "type_ref"), scope=scope)
		args = self.const_args(args_tree, kinds=iface.params, scope=scope, where=f"interface '{iface.name}'")
		if target is None or args is None:
			return
		self.queries.append(Query(target=target, interface=iface.name, args=args, span=self.span(tree)))

	def fn_def(self, tree: Tree) -> None:
		name_tok = _names(tree)[0]
		params = self.const_params(_subtree(tree, "const_params"))
		decl = self.arena.add(str(name_tok), role="fn", params=params, span=self.span(tree))
		for req in _subtrees(tree, "require_stmt"):
			self.require_stmt(req, scope=decl)

	def lower(self, root: Tree) -> None:
		items = [c for c in root.children if isinstance(c, Tree)]
		# Interfaces and structs first so impls may precede them textually.
		for item in items:
			if item.data == "interface_def":
				self.interface_def(item)
			elif item.data == "struct_def":
				self.struct_def(item)
		for item in items:
			if item.data == "impl_def":
				self.impl_def(item)
			elif item.data == "fn_def":
				self.fn_def(item)
			elif item.data == "require_stmt":
				self.require_stmt(item, scope=None)


def _sort_key(d: Diagnostic) -> Tuple[int, int]:
	return (d.span.line or 0, d.span.column or 0)


def parse_source(source: str, *, file: Optional[str] = None) -> ParsedUnit:
	"""Parse and lower `source`; the returned registry is frozen."""
	lowerer = _Lowerer(file=file)
	try:
		tree = _PARSER.parse(source)
	except UnexpectedInput as err:
		diag = Diagnostic(
			message=f"syntax error: unexpected input {_describe(err)}",
			phase="parser",
			span=Span(file=file, line=getattr(err, "line", None), column=getattr(err, "column", None)),
		)
		return ParsedUnit(registry=lowerer.registry.freeze(), arena=lowerer.arena, diagnostics=[diag])
	lowerer.lower(tree)
	diags = sorted(lowerer.diagnostics + lowerer.registry.diagnostics, key=_sort_key)
	return ParsedUnit(
		registry=lowerer.registry.freeze(),
		arena=lowerer.arena,
		queries=lowerer.queries,
		structs=lowerer.structs,
		diagnostics=diags,
	)


def parse_file(path: Path) -> ParsedUnit:
	return parse_source(path.read_text(), file=str(path))


def _describe(err: UnexpectedInput) -> str:
	token = getattr(err, "token", None)
	if token is not None:
		return f"'{token}'"
	char = getattr(err, "char", None)
	if char is not None:
		return f"'{char}'"
	return "at end of input"


__all__ = ["ParsedUnit", "parse_source", "parse_file"]
