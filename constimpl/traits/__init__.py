# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
from .registry import (
	ImplRecord,
	ImplRegistry,
	InterfaceDef,
	Query,
	TypeRef,
)
from .unify import (
	Substitution,
	first_mismatch,
	unify,
	unify_terms,
)
from .collect import (
	Candidate,
	MissReason,
	NearMiss,
	collect,
	near_misses,
)
from .resolve import (
	Ambiguous,
	NotFound,
	Resolved,
	Verdict,
	VerdictStatus,
	resolve,
	resolve_many,
)
from .report import (
	Report,
	ReportEntry,
	build_report,
)

__all__ = [
	"ImplRecord",
	"ImplRegistry",
	"InterfaceDef",
	"Query",
	"TypeRef",
	"Substitution",
	"first_mismatch",
	"unify",
	"unify_terms",
	"Candidate",
	"MissReason",
	"NearMiss",
	"collect",
	"near_misses",
	"Ambiguous",
	"NotFound",
	"Resolved",
	"Verdict",
	"VerdictStatus",
	"resolve",
	"resolve_many",
	"Report",
	"ReportEntry",
	"build_report",
]
