# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Implementation selection for interfaces whose generic parameters are
compile-time integer constants.

Given a frozen registry of impl records and a query `T: I<c1, .., ck>`,
`resolve` returns Resolved, NotFound or Ambiguous; `build_report` turns the
last two into structured diagnostics.
"""

from constimpl.traits import (
	Ambiguous,
	ImplRecord,
	ImplRegistry,
	InterfaceDef,
	NotFound,
	Query,
	Resolved,
	TypeRef,
	build_report,
	resolve,
	resolve_many,
)

__all__ = [
	"Ambiguous",
	"ImplRecord",
	"ImplRegistry",
	"InterfaceDef",
	"NotFound",
	"Query",
	"Resolved",
	"TypeRef",
	"build_report",
	"resolve",
	"resolve_many",
]
