# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Closed set of fixed-width integer kinds usable as const generic values.

Kinds are tags, not Python numeric types: two literals with equal numeric
values but different kinds are different constants.
"""

from __future__ import annotations

from enum import Enum

from .errors import ConstKindError

# Pointer-sized kinds are fixed at 64 bits.
WORD_BITS = 64


class IntKind(Enum):
	U8 = ("u8", 8, False)
	U16 = ("u16", 16, False)
	U32 = ("u32", 32, False)
	U64 = ("u64", 64, False)
	U128 = ("u128", 128, False)
	USIZE = ("usize", WORD_BITS, False)
	I8 = ("i8", 8, True)
	I16 = ("i16", 16, True)
	I32 = ("i32", 32, True)
	I64 = ("i64", 64, True)
	I128 = ("i128", 128, True)
	ISIZE = ("isize", WORD_BITS, True)

	def __init__(self, spelling: str, bits: int, signed: bool) -> None:
		self.spelling = spelling
		self.bits = bits
		self.signed = signed

	@property
	def min_value(self) -> int:
		return -(1 << (self.bits - 1)) if self.signed else 0

	@property
	def max_value(self) -> int:
		return (1 << (self.bits - 1)) - 1 if self.signed else (1 << self.bits) - 1

	def contains(self, value: int) -> bool:
		return self.min_value <= value <= self.max_value

	@classmethod
	def from_name(cls, name: str) -> "IntKind":
		kind = _BY_SPELLING.get(name)
		if kind is None:
			raise ConstKindError(reason_code="E-CONST-KIND", message=f"unknown integer kind '{name}'", subject=name)
		return kind

	def __str__(self) -> str:
		return self.spelling


_BY_SPELLING = {k.spelling: k for k in IntKind}

INT_KIND_NAMES = tuple(_BY_SPELLING)


__all__ = ["IntKind", "INT_KIND_NAMES", "WORD_BITS"]
