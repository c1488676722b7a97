# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
from .const_term import (
	ConstParam,
	ConstTerm,
	DeclArena,
	DeclId,
	FreeVar,
	GenericDecl,
	Literal,
	free_vars,
	render_args,
	render_term,
)
from .diagnostics import Diagnostic
from .errors import (
	ArityError,
	ConstImplError,
	ConstKindError,
	ConstRangeError,
	ImplOrderError,
	ImplParamsError,
	RegistryFrozenError,
	RegistryNotFrozenError,
	UnknownConstParamError,
)
from .int_kinds import IntKind
from .span import Span

__all__ = [
	"ConstParam",
	"ConstTerm",
	"DeclArena",
	"DeclId",
	"FreeVar",
	"GenericDecl",
	"Literal",
	"free_vars",
	"render_args",
	"render_term",
	"Diagnostic",
	"ArityError",
	"ConstImplError",
	"ConstKindError",
	"ConstRangeError",
	"ImplOrderError",
	"ImplParamsError",
	"RegistryFrozenError",
	"RegistryNotFrozenError",
	"UnknownConstParamError",
	"IntKind",
	"Span",
]
