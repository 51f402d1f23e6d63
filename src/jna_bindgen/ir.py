"""IR definitions for a native library's public surface.

The tree is built once by a front end (or read back from a JSON dump by
``jna_bindgen.loader``) and is never mutated while bindings are emitted.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import Union as TypingUnion


class IntKind(enum.Enum):
    """Integer kinds, fixed-width and platform-dependent."""

    SHORT = enum.auto()
    INT = enum.auto()
    LONG = enum.auto()  # platform `long`
    LONG_LONG = enum.auto()
    SIZE_T = enum.auto()  # platform `size_t`
    SIZE = enum.auto()  # platform pointer-sized integer
    B8 = enum.auto()
    B16 = enum.auto()
    B32 = enum.auto()
    B64 = enum.auto()

    def is_platform_dependent(self) -> bool:
        return self in {IntKind.LONG, IntKind.SIZE_T, IntKind.SIZE}


class PrimitiveKind(enum.Enum):
    VOID = enum.auto()
    BOOL = enum.auto()
    CHAR = enum.auto()
    SCHAR = enum.auto()
    UCHAR = enum.auto()
    CHAR32 = enum.auto()
    FLOAT = enum.auto()
    DOUBLE = enum.auto()
    VA_LIST = enum.auto()
    PTRDIFF_T = enum.auto()
    INTEGER = enum.auto()


@dataclass(frozen=True)
class PrimitiveType:
    kind: PrimitiveKind
    int_kind: IntKind | None = None
    signed: bool = True

    @staticmethod
    def integer(int_kind: IntKind, signed: bool = True) -> PrimitiveType:
        return PrimitiveType(PrimitiveKind.INTEGER, int_kind=int_kind, signed=signed)

    def is_integer(self) -> bool:
        return self.kind == PrimitiveKind.INTEGER


@dataclass(frozen=True)
class PtrType:
    """Pointer to ``ty``; ``is_ref`` marks a C++-style reference."""

    ty: Type
    is_const: bool = False
    is_nullable: bool = True
    is_ref: bool = False


@dataclass(frozen=True)
class PathType:
    """Reference to a named struct, union, enum, typedef or opaque item."""

    name: str


@dataclass(frozen=True)
class ArrayType:
    ty: Type
    length: str


@dataclass(frozen=True)
class FuncPtrType:
    ret: Type
    args: tuple[tuple[str | None, Type], ...] = ()
    is_nullable: bool = False


Type = TypingUnion[PrimitiveType, PtrType, PathType, ArrayType, FuncPtrType]


@dataclass(frozen=True)
class ExprLiteral:
    """A literal already spelled as a target-compatible expression."""

    text: str


@dataclass(frozen=True)
class StructLiteral:
    export_name: str
    fields: dict[str, Literal] = field(default_factory=dict, hash=False)


@dataclass(frozen=True)
class PathLiteral:
    associated_to: str | None
    name: str


@dataclass(frozen=True)
class PostfixUnaryLiteral:
    op: str
    value: Literal


@dataclass(frozen=True)
class BinOpLiteral:
    left: Literal
    op: str
    right: Literal


@dataclass(frozen=True)
class FieldAccessLiteral:
    base: Literal
    field: str


@dataclass(frozen=True)
class CastLiteral:
    ty: Type
    value: Literal


Literal = TypingUnion[
    ExprLiteral,
    StructLiteral,
    PathLiteral,
    PostfixUnaryLiteral,
    BinOpLiteral,
    FieldAccessLiteral,
    CastLiteral,
]


def literal_uses_only_primitive_types(literal: Literal) -> bool:
    """False if ``literal`` builds a struct value anywhere inside it."""
    if isinstance(literal, StructLiteral):
        return False
    if isinstance(literal, (PostfixUnaryLiteral, CastLiteral)):
        return literal_uses_only_primitive_types(literal.value)
    if isinstance(literal, BinOpLiteral):
        left = literal_uses_only_primitive_types(literal.left)
        return left and literal_uses_only_primitive_types(literal.right)
    if isinstance(literal, FieldAccessLiteral):
        return literal_uses_only_primitive_types(literal.base)
    return True


def is_primitive_or_ptr_primitive(ty: Type) -> bool:
    if isinstance(ty, PtrType):
        return isinstance(ty.ty, PrimitiveType)
    return isinstance(ty, PrimitiveType)


@dataclass
class Documentation:
    """Doc comment lines, each written verbatim after `` *``."""

    lines: list[str] = field(default_factory=list)

    def is_empty(self) -> bool:
        return not self.lines


@dataclass
class Annotations:
    # None: not deprecated; "": deprecated without a note
    deprecated: str | None = None


@dataclass
class Field:
    name: str
    ty: Type
    documentation: Documentation = field(default_factory=Documentation)


@dataclass
class Constant:
    name: str
    ty: Type
    value: Literal
    associated_to: str | None = None
    documentation: Documentation = field(default_factory=Documentation)

    def uses_only_primitive_types(self) -> bool:
        if not is_primitive_or_ptr_primitive(self.ty):
            return False
        return literal_uses_only_primitive_types(self.value)


@dataclass
class Struct:
    name: str
    fields: list[Field] = field(default_factory=list)
    associated_constants: list[Constant] = field(default_factory=list)
    is_transparent: bool = False
    annotations: Annotations = field(default_factory=Annotations)
    documentation: Documentation = field(default_factory=Documentation)


@dataclass
class Union:
    name: str
    fields: list[Field] = field(default_factory=list)
    annotations: Annotations = field(default_factory=Annotations)
    documentation: Documentation = field(default_factory=Documentation)


@dataclass
class EnumVariant:
    name: str
    discriminant: Literal | None = None
    documentation: Documentation = field(default_factory=Documentation)


@dataclass
class Enum:
    name: str
    variants: list[EnumVariant] = field(default_factory=list)
    annotations: Annotations = field(default_factory=Annotations)
    documentation: Documentation = field(default_factory=Documentation)


@dataclass
class Typedef:
    name: str
    aliased: Type
    annotations: Annotations = field(default_factory=Annotations)
    documentation: Documentation = field(default_factory=Documentation)


@dataclass
class OpaqueItem:
    name: str
    annotations: Annotations = field(default_factory=Annotations)
    documentation: Documentation = field(default_factory=Documentation)


@dataclass
class FunctionArg:
    name: str | None
    ty: Type


@dataclass
class Function:
    name: str
    args: list[FunctionArg] = field(default_factory=list)
    ret: Type = field(default_factory=lambda: PrimitiveType(PrimitiveKind.VOID))
    annotations: Annotations = field(default_factory=Annotations)
    documentation: Documentation = field(default_factory=Documentation)


@dataclass
class Static:
    name: str
    ty: Type
    mutable: bool = False
    annotations: Annotations = field(default_factory=Annotations)
    documentation: Documentation = field(default_factory=Documentation)


Item = TypingUnion[Enum, Struct, Union, OpaqueItem, Typedef]


@dataclass
class Bindings:
    """Complete, resolved description of one native library."""

    name: str
    constants: list[Constant] = field(default_factory=list)
    items: list[Item] = field(default_factory=list)
    globals: list[Static] = field(default_factory=list)
    functions: list[Function] = field(default_factory=list)
