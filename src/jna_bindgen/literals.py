"""Constant literal adaptation for Java source."""

from __future__ import annotations

from jna_bindgen.ir import (
    ExprLiteral,
    IntKind,
    Literal,
    PathType,
    PrimitiveKind,
    PrimitiveType,
    Type,
)

LONG_SUFFIX_KINDS = {IntKind.LONG_LONG, IntKind.B64}


def wrap_java_value(literal: Literal, ty: Type) -> Literal:
    """Give an expression literal the suffix or constructor ``ty`` needs in Java."""
    if not isinstance(literal, ExprLiteral):
        return literal

    expr = literal.text
    if isinstance(ty, PathType):
        return ExprLiteral(f"new {ty.name}({expr})")
    if not isinstance(ty, PrimitiveType):
        return literal

    if ty.kind == PrimitiveKind.DOUBLE:
        return ExprLiteral(f"{expr}d")
    if ty.kind == PrimitiveKind.FLOAT:
        return ExprLiteral(f"{expr}f")
    if ty.is_integer() and ty.int_kind in LONG_SUFFIX_KINDS:
        return ExprLiteral(f"{expr}L")
    if ty.int_kind is not None and ty.int_kind.is_platform_dependent():
        return ExprLiteral(f"new NativeLong({expr})")
    return literal


def java_writable_literal(ty: Type, literal: Literal) -> bool:
    """Whether a constant of type ``ty`` can be declared with ``literal``.

    Integer-typed values stay out: Java has no unsigned literals, and a
    value that fits the C type may not fit the signed Java one.
    """
    if not isinstance(literal, ExprLiteral):
        return False
    expr = literal.text
    if ty == PrimitiveType(PrimitiveKind.CHAR32) and expr.startswith("U'\\U"):
        return False
    if isinstance(ty, PrimitiveType) and ty.is_integer():
        return False
    return not expr.endswith("ull")
