# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
from __future__ import annotations

import pytest

from constimpl.core.const_term import ConstParam, DeclArena, Literal
from constimpl.core.errors import RegistryNotFrozenError
from constimpl.core.int_kinds import IntKind
from constimpl.traits.collect import MissReason, collect, collect_from
from constimpl.traits.registry import ImplRecord, ImplRegistry, InterfaceDef, Query, TypeRef
from constimpl.traits.resolve import Ambiguous, NotFound, Resolved, VerdictStatus, resolve, resolve_many

U8 = IntKind.U8
U32 = IntKind.U32
USIZE = IntKind.USIZE


def _u8(v: int) -> Literal:
	return Literal(U8, v)


def _impl(reg: ImplRegistry, arena: DeclArena, iface: str, args, target: TypeRef, params=()) -> ImplRecord:
	rec = ImplRecord(
		id=reg.next_record_id(),
		target=target,
		interface=iface,
		args=tuple(args),
		params=tuple(params),
	)
	assert reg.add_impl(rec), reg.diagnostics
	return rec


def _traitor_registry() -> ImplRegistry:
	reg = ImplRegistry()
	reg.add_interface(InterfaceDef(name="Traitor", params=(ConstParam("A", U8), ConstParam("B", U8))))
	return reg


def test_near_miss_on_fixed_type_argument() -> None:
	# impl<N> Trait for Uwu<N, 11>, queried with Uwu<10, 12>.
	arena = DeclArena()
	reg = ImplRegistry()
	reg.add_interface(InterfaceDef(name="Trait"))
	d = arena.add("impl#0", role="impl", params=[ConstParam("N", USIZE)])
	n = arena.free_var(d.id, "N")
	rec = _impl(reg, arena, "Trait", [], TypeRef("Uwu", (n, Literal(USIZE, 11))), params=[n])
	reg.freeze()

	query = Query(target=TypeRef("Uwu", (Literal(USIZE, 10), Literal(USIZE, 12))), interface="Trait", args=())
	verdict = resolve(query, reg)
	assert isinstance(verdict, NotFound)
	assert verdict.status is VerdictStatus.NOT_FOUND
	assert [m.record for m in verdict.considered] == [rec]
	assert verdict.considered[0].reason is MissReason.CONST_MISMATCH
	assert verdict.considered[0].position == 1


def test_caller_const_verdict_independent_of_literal_slot() -> None:
	# impl<M> Traitor<M, 2> and impl<M> Traitor<2, M>, each queried with <N, N>.
	verdicts = []
	for literal_slot in (0, 1):
		arena = DeclArena()
		reg = _traitor_registry()
		d = arena.add("impl#0", role="impl", params=[ConstParam("M", U8)])
		m = arena.free_var(d.id, "M")
		args = [m, m]
		args[literal_slot] = _u8(2)
		_impl(reg, arena, "Traitor", args, TypeRef("u32"), params=[m])
		caller = arena.add("caller", role="fn", params=[ConstParam("N", U8)])
		q = arena.free_var(caller.id, "N")
		reg.freeze()
		verdicts.append(resolve(Query(target=TypeRef("u32"), interface="Traitor", args=(q, q)), reg))
	assert all(isinstance(v, NotFound) for v in verdicts)
	assert [v.considered[0].reason for v in verdicts] == [MissReason.CONST_MISMATCH] * 2
	assert [v.considered[0].position for v in verdicts] == [1, 1]


def test_caller_const_used_twice_cannot_match_fixed_slot() -> None:
	# fn caller<const N: u8> { require u32: Traitor<N, N>; }
	arena = DeclArena()
	reg = _traitor_registry()
	d0 = arena.add("impl#0", role="impl", params=[ConstParam("N", U8)])
	n0 = arena.free_var(d0.id, "N")
	first = _impl(reg, arena, "Traitor", [n0, _u8(2)], TypeRef("u32"), params=[n0])
	second = _impl(reg, arena, "Traitor", [_u8(1), _u8(2)], TypeRef("u64"))
	caller = arena.add("caller", role="fn", params=[ConstParam("N", U8)])
	m = arena.free_var(caller.id, "N")
	reg.freeze()

	verdict = resolve(Query(target=TypeRef("u32"), interface="Traitor", args=(m, m)), reg)
	assert isinstance(verdict, NotFound)
	assert [x.record for x in verdict.considered] == [first, second]
	assert [x.reason for x in verdict.considered] == [MissReason.CONST_MISMATCH, MissReason.TYPE_MISMATCH]
	assert verdict.considered[0].position == 1
	assert [x.record for x in verdict.same_target()] == [first]


def test_literal_query_lists_every_impl_of_interface() -> None:
	arena = DeclArena()
	reg = _traitor_registry()
	first = _impl(reg, arena, "Traitor", [_u8(1), _u8(2)], TypeRef("u64"))
	d = arena.add("impl#1", role="impl", params=[ConstParam("N", U8)])
	n = arena.free_var(d.id, "N")
	second = _impl(reg, arena, "Traitor", [n, _u8(2)], TypeRef("u32"), params=[n])
	reg.freeze()

	verdict = resolve(Query(target=TypeRef("u64"), interface="Traitor", args=(_u8(1), _u8(1))), reg)
	assert isinstance(verdict, NotFound)
	assert [x.record for x in verdict.considered] == [first, second]
	assert verdict.considered[0].reason is MissReason.CONST_MISMATCH
	assert verdict.considered[1].reason is MissReason.TYPE_MISMATCH


def test_two_blanket_impls_are_ambiguous_in_declaration_order() -> None:
	arena = DeclArena()
	reg = ImplRegistry()
	reg.add_interface(InterfaceDef(name="I", params=(ConstParam("A", U32),)))
	d0 = arena.add("impl#0", role="impl", params=[ConstParam("N", U32)])
	d1 = arena.add("impl#1", role="impl", params=[ConstParam("M", U32)])
	n = arena.free_var(d0.id, "N")
	m = arena.free_var(d1.id, "M")
	first = _impl(reg, arena, "I", [n], TypeRef("T"), params=[n])
	second = _impl(reg, arena, "I", [m], TypeRef("T"), params=[m])
	reg.freeze()

	verdict = resolve(Query(target=TypeRef("T"), interface="I", args=(Literal(U32, 5),)), reg)
	assert isinstance(verdict, Ambiguous)
	assert verdict.records == (first, second)
	assert verdict.candidates[0].subst.bindings_for(d0.id) == {n: Literal(U32, 5)}
	assert verdict.candidates[1].subst.bindings_for(d1.id) == {m: Literal(U32, 5)}


def test_identical_impls_are_not_deduplicated() -> None:
	reg = ImplRegistry()
	arena = DeclArena()
	reg.add_interface(InterfaceDef(name="I", params=(ConstParam("A", U32),)))
	_impl(reg, arena, "I", [Literal(U32, 5)], TypeRef("T"))
	_impl(reg, arena, "I", [Literal(U32, 5)], TypeRef("T"))
	reg.freeze()
	verdict = resolve(Query(target=TypeRef("T"), interface="I", args=(Literal(U32, 5),)), reg)
	assert isinstance(verdict, Ambiguous)
	assert [r.id for r in verdict.records] == [0, 1]


def test_no_impls_is_not_found_with_empty_listing() -> None:
	reg = ImplRegistry()
	reg.add_interface(InterfaceDef(name="I", params=(ConstParam("A", U32),)))
	reg.freeze()
	verdict = resolve(Query(target=TypeRef("T"), interface="I", args=(Literal(U32, 5),)), reg)
	assert verdict == NotFound(query=verdict.query, considered=())

	empty = ImplRegistry().freeze()
	verdict = resolve(Query(target=TypeRef("T"), interface="Undeclared", args=()), empty)
	assert isinstance(verdict, NotFound)
	assert verdict.considered == ()


def test_undeclared_interface_is_not_found() -> None:
	reg = _traitor_registry().freeze()
	query = Query(target=TypeRef("u32"), interface="Missing", args=(_u8(1),))
	assert reg.check_query(query) is None
	verdict = resolve(query, reg)
	assert verdict == NotFound(query=query, considered=())


def test_single_candidate_resolves_with_substitution() -> None:
	arena = DeclArena()
	reg = _traitor_registry()
	d = arena.add("impl#0", role="impl", params=[ConstParam("N", U8)])
	n = arena.free_var(d.id, "N")
	rec = _impl(reg, arena, "Traitor", [n, _u8(2)], TypeRef("u32"), params=[n])
	_impl(reg, arena, "Traitor", [_u8(1), _u8(2)], TypeRef("u64"))
	reg.freeze()

	verdict = resolve(Query(target=TypeRef("u32"), interface="Traitor", args=(_u8(9), _u8(2))), reg)
	assert isinstance(verdict, Resolved)
	assert verdict.record == rec
	assert verdict.subst.lookup(n) == _u8(9)

	same = resolve(Query(target=TypeRef("u32"), interface="Traitor", args=(_u8(9), _u8(2))), reg)
	assert hash(verdict) == hash(same)
	assert len({verdict, same}) == 1


def test_caller_const_constrained_by_impl_literal() -> None:
	arena = DeclArena()
	reg = _traitor_registry()
	_impl(reg, arena, "Traitor", [_u8(1), _u8(2)], TypeRef("u64"))
	caller = arena.add("caller", role="fn", params=[ConstParam("N", U8)])
	q = arena.free_var(caller.id, "N")
	reg.freeze()

	verdict = resolve(Query(target=TypeRef("u64"), interface="Traitor", args=(q, _u8(2))), reg)
	assert isinstance(verdict, Resolved)
	assert verdict.subst.bindings_for(caller.id) == {q: _u8(1)}

	# The same caller constant cannot be both 1 and 2.
	verdict = resolve(Query(target=TypeRef("u64"), interface="Traitor", args=(q, q)), reg)
	assert isinstance(verdict, NotFound)


def test_caller_const_propagates_into_impl_var() -> None:
	arena = DeclArena()
	reg = _traitor_registry()
	d = arena.add("impl#0", role="impl", params=[ConstParam("K", U8)])
	k = arena.free_var(d.id, "K")
	_impl(reg, arena, "Traitor", [k, k], TypeRef("u8"), params=[k])
	caller = arena.add("caller", role="fn", params=[ConstParam("N", U8)])
	q = arena.free_var(caller.id, "N")
	reg.freeze()

	verdict = resolve(Query(target=TypeRef("u8"), interface="Traitor", args=(q, q)), reg)
	assert isinstance(verdict, Resolved)
	assert verdict.subst.bindings_for(d.id) == {k: q}
	# q is pinned, not narrowed.
	assert verdict.subst.bindings_for(caller.id) == {}
	assert q not in verdict.subst.resolved()

	verdict = resolve(Query(target=TypeRef("u8"), interface="Traitor", args=(q, _u8(3))), reg)
	assert isinstance(verdict, NotFound)


def test_repeated_impl_var_binding_is_monotonic() -> None:
	arena = DeclArena()
	reg = _traitor_registry()
	d = arena.add("impl#0", role="impl", params=[ConstParam("N", U8)])
	n = arena.free_var(d.id, "N")
	_impl(reg, arena, "Traitor", [n, n], TypeRef("T"), params=[n])
	reg.freeze()

	miss = resolve(Query(target=TypeRef("T"), interface="Traitor", args=(_u8(1), _u8(2))), reg)
	assert isinstance(miss, NotFound)
	assert miss.considered[0].position == 1
	hit = resolve(Query(target=TypeRef("T"), interface="Traitor", args=(_u8(3), _u8(3))), reg)
	assert isinstance(hit, Resolved)


def test_literal_kind_must_match_exactly() -> None:
	arena = DeclArena()
	reg = ImplRegistry()
	reg.add_interface(InterfaceDef(name="I", params=(ConstParam("A", U32),)))
	_impl(reg, arena, "I", [Literal(IntKind.U64, 5)], TypeRef("T"))
	reg.freeze()
	verdict = resolve(Query(target=TypeRef("T"), interface="I", args=(Literal(U32, 5),)), reg)
	assert isinstance(verdict, NotFound)
	assert verdict.considered[0].reason is MissReason.CONST_MISMATCH


def test_arity_mismatch_is_never_a_candidate() -> None:
	arena = DeclArena()
	reg = ImplRegistry()
	reg.add_interface(InterfaceDef(name="Trait"))
	d = arena.add("impl#0", role="impl", params=[ConstParam("N", USIZE)])
	n = arena.free_var(d.id, "N")
	_impl(reg, arena, "Trait", [], TypeRef("Uwu", (n,)), params=[n])
	reg.freeze()

	query = Query(target=TypeRef("Uwu", (Literal(USIZE, 1), Literal(USIZE, 2))), interface="Trait", args=())
	assert collect(query, reg) == []
	verdict = resolve(query, reg)
	assert isinstance(verdict, NotFound)
	assert verdict.considered[0].reason is MissReason.ARITY_MISMATCH

	# Interface arity too, bypassing the registry's own arity check.
	wide = ImplRecord(id=0, target=TypeRef("T"), interface="I", args=(_u8(1), _u8(2)))
	narrow = Query(target=TypeRef("T"), interface="I", args=(_u8(1),))
	assert collect_from(narrow, [wide]) == []


def test_resolution_is_deterministic() -> None:
	arena = DeclArena()
	reg = ImplRegistry()
	reg.add_interface(InterfaceDef(name="I", params=(ConstParam("A", U32),)))
	for i in range(3):
		d = arena.add(f"impl#{i}", role="impl", params=[ConstParam("N", U32)])
		n = arena.free_var(d.id, "N")
		_impl(reg, arena, "I", [n], TypeRef("T"), params=[n])
	reg.freeze()
	query = Query(target=TypeRef("T"), interface="I", args=(Literal(U32, 5),))
	first = resolve(query, reg)
	assert all(resolve(query, reg) == first for _ in range(5))
	assert [r.id for r in first.records] == [0, 1, 2]


def test_resolve_many_matches_sequential_results() -> None:
	arena = DeclArena()
	reg = _traitor_registry()
	d = arena.add("impl#0", role="impl", params=[ConstParam("N", U8)])
	n = arena.free_var(d.id, "N")
	_impl(reg, arena, "Traitor", [n, _u8(2)], TypeRef("u32"), params=[n])
	_impl(reg, arena, "Traitor", [_u8(1), _u8(2)], TypeRef("u64"))
	reg.freeze()
	queries = [
		Query(target=TypeRef("u32"), interface="Traitor", args=(_u8(i), _u8(i % 3)))
		for i in range(20)
	]
	sequential = [resolve(q, reg) for q in queries]
	assert resolve_many(queries, reg, jobs=4) == sequential
	assert resolve_many(queries, reg) == sequential


def test_resolve_many_requires_frozen_registry() -> None:
	reg = _traitor_registry()
	with pytest.raises(RegistryNotFrozenError) as exc:
		resolve_many([], reg)
	assert exc.value.reason_code == "E-REGISTRY-NOT-FROZEN"
