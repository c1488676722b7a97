# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
from __future__ import annotations

from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class ConstImplError(Exception):
	"""
	A structured error for violated preconditions.

	Resolution outcomes (not found / ambiguous) are verdicts, never exceptions;
	these are raised only when a caller hands the core malformed input.
	"""

	reason_code: str
	message: str
	subject: str | None = None

	def __str__(self) -> str:
		return self.format_human()

	def to_dict(self) -> dict[str, Any]:
		return {"reason_code": self.reason_code, "message": self.message, "subject": self.subject}

	def format_human(self) -> str:
		parts: list[str] = [f"[{self.reason_code}] {self.message}"]
		if self.subject:
			parts.append(f"subject={self.subject}")
		return " ".join(parts)


class ConstKindError(ConstImplError):
	"""Unknown integer kind name."""


class ConstRangeError(ConstImplError):
	"""Literal value does not fit its kind."""


class UnknownConstParamError(ConstImplError):
	"""FreeVar refers to a const parameter its declaration does not have."""


class ImplParamsError(ConstImplError):
	"""Impl params differ from the free variables used in its terms."""


class ArityError(ConstImplError):
	"""Query or record arity differs from the interface declaration."""


class RegistryFrozenError(ConstImplError):
	"""Registry mutated after population finished."""


class RegistryNotFrozenError(ConstImplError):
	"""Batch resolution started before population finished."""


class ImplOrderError(ConstImplError):
	"""Impl record id does not follow declaration order."""


__all__ = [
	"ConstImplError",
	"ConstKindError",
	"ConstRangeError",
	"UnknownConstParamError",
	"ImplParamsError",
	"ArityError",
	"RegistryFrozenError",
	"RegistryNotFrozenError",
	"ImplOrderError",
]
