"""IR type -> Java/JNA type name mapping.

See https://github.com/java-native-access/jna/blob/master/www/Mappings.md
for the JNA side of each rule.
"""

from __future__ import annotations

from enum import Enum, auto

from jna_bindgen.ir import (
    ArrayType,
    FuncPtrType,
    IntKind,
    PathType,
    PrimitiveKind,
    PrimitiveType,
    PtrType,
    Type,
)

PRIMITIVE_TYPE_MAP: dict[PrimitiveKind, str] = {
    PrimitiveKind.VOID: "void",
    PrimitiveKind.BOOL: "boolean",
    PrimitiveKind.CHAR: "byte",
    PrimitiveKind.SCHAR: "byte",
    PrimitiveKind.UCHAR: "byte",
    PrimitiveKind.CHAR32: "char",
    PrimitiveKind.FLOAT: "float",
    PrimitiveKind.DOUBLE: "double",
    PrimitiveKind.VA_LIST: "Pointer",
    PrimitiveKind.PTRDIFF_T: "Pointer",
}

# Platform-dependent kinds go through NativeLong so the native width is
# looked up at runtime, never fixed to Java's 64-bit long.
INTEGER_TYPE_MAP: dict[IntKind, str] = {
    IntKind.SHORT: "short",
    IntKind.INT: "int",
    IntKind.LONG: "NativeLong",
    IntKind.LONG_LONG: "long",
    IntKind.SIZE_T: "NativeLong",
    IntKind.SIZE: "NativeLong",
    IntKind.B8: "byte",
    IntKind.B16: "short",
    IntKind.B32: "int",
    IntKind.B64: "long",
}

PRIMITIVE_REFERENCE_MAP: dict[PrimitiveKind, str] = {
    PrimitiveKind.VOID: "Pointer",
    PrimitiveKind.BOOL: "Pointer",
    PrimitiveKind.CHAR: "ByteByReference",
    PrimitiveKind.SCHAR: "ByteByReference",
    PrimitiveKind.UCHAR: "ByteByReference",
    PrimitiveKind.CHAR32: "Pointer",
    PrimitiveKind.FLOAT: "FloatByReference",
    PrimitiveKind.DOUBLE: "DoubleByReference",
    PrimitiveKind.VA_LIST: "PointerByReference",
    PrimitiveKind.PTRDIFF_T: "PointerByReference",
}

INTEGER_REFERENCE_MAP: dict[IntKind, str] = {
    IntKind.SHORT: "ShortByReference",
    IntKind.INT: "IntByReference",
    IntKind.LONG: "NativeLongByReference",
    IntKind.LONG_LONG: "LongByReference",
    IntKind.SIZE_T: "NativeLongByReference",
    IntKind.SIZE: "NativeLongByReference",
    IntKind.B8: "ByteByReference",
    IntKind.B16: "ShortByReference",
    IntKind.B32: "IntByReference",
    IntKind.B64: "LongByReference",
}


def not_implemented_text(value: object) -> str:
    return f"/* Not implemented yet : {value!r} */"


def java_type_name(ty: Type) -> str:
    """Return the Java spelling of ``ty`` as used in fields, args and returns."""
    if isinstance(ty, PtrType):
        return _pointer_type_name(ty)
    if isinstance(ty, PathType):
        return ty.name
    if isinstance(ty, PrimitiveType):
        return _primitive_type_name(ty, PRIMITIVE_TYPE_MAP, INTEGER_TYPE_MAP)
    if isinstance(ty, ArrayType):
        # The length is a declaration-site concern, not part of the name.
        return f"{java_type_name(ty.ty)}[]"
    if isinstance(ty, FuncPtrType):
        return "Callback"
    return not_implemented_text(ty)


def _pointer_type_name(ty: PtrType) -> str:
    pointee = ty.ty
    if isinstance(pointee, PtrType):
        return "PointerByReference"
    if isinstance(pointee, PathType):
        return f"{pointee.name}ByReference"
    if isinstance(pointee, PrimitiveType):
        return _primitive_type_name(pointee, PRIMITIVE_REFERENCE_MAP, INTEGER_REFERENCE_MAP)
    if isinstance(pointee, ArrayType):
        return "Pointer"
    if isinstance(pointee, FuncPtrType):
        return "CallbackReference"
    return not_implemented_text(ty)


def _primitive_type_name(
    ty: PrimitiveType,
    primitives: dict[PrimitiveKind, str],
    integers: dict[IntKind, str],
) -> str:
    if ty.is_integer():
        if ty.int_kind is None:
            return not_implemented_text(ty)
        return integers[ty.int_kind]
    return primitives.get(ty.kind, not_implemented_text(ty))


class JnaIntegerType(Enum):
    """Storage class behind a generated ``IntegerType`` wrapper."""

    BYTE = auto()
    SHORT = auto()
    INT = auto()
    NATIVE_LONG = auto()
    LONG = auto()
    SIZE_T = auto()

    def size(self) -> str:
        """Byte width expression; platform kinds defer to the JNA runtime."""
        mapping = {
            JnaIntegerType.BYTE: "1",
            JnaIntegerType.SHORT: "2",
            JnaIntegerType.INT: "4",
            JnaIntegerType.NATIVE_LONG: "Native.LONG_SIZE",
            JnaIntegerType.LONG: "8",
            JnaIntegerType.SIZE_T: "Native.SIZE_T_SIZE",
        }
        return mapping[self]

    def get_method(self) -> str:
        """Pointer accessor reading the value at offset 0."""
        mapping = {
            JnaIntegerType.BYTE: "getByte(0)",
            JnaIntegerType.SHORT: "getShort(0)",
            JnaIntegerType.INT: "getInt(0)",
            JnaIntegerType.NATIVE_LONG: "getNativeLong(0).longValue()",
            JnaIntegerType.LONG: "getLong(0)",
            JnaIntegerType.SIZE_T: "getNativeLong(0).longValue()",
        }
        return mapping[self]

    def set_method(self) -> str:
        """Pointer accessor writing ``value`` at offset 0."""
        mapping = {
            JnaIntegerType.BYTE: "setByte(0, (byte)value.intValue())",
            JnaIntegerType.SHORT: "setShort(0, (short)value.intValue())",
            JnaIntegerType.INT: "setInt(0, value.intValue())",
            JnaIntegerType.NATIVE_LONG: "setNativeLong(0, new NativeLong(value.longValue()))",
            JnaIntegerType.LONG: "setLong(0, value.longValue())",
            JnaIntegerType.SIZE_T: "setNativeLong(0, new NativeLong(value.longValue()))",
        }
        return mapping[self]

    @staticmethod
    def from_kind(kind: IntKind) -> JnaIntegerType:
        mapping = {
            IntKind.SHORT: JnaIntegerType.SHORT,
            IntKind.INT: JnaIntegerType.INT,
            IntKind.LONG: JnaIntegerType.NATIVE_LONG,
            IntKind.LONG_LONG: JnaIntegerType.LONG,
            IntKind.SIZE_T: JnaIntegerType.SIZE_T,
            IntKind.SIZE: JnaIntegerType.SIZE_T,
            IntKind.B8: JnaIntegerType.BYTE,
            IntKind.B16: JnaIntegerType.SHORT,
            IntKind.B32: JnaIntegerType.INT,
            IntKind.B64: JnaIntegerType.LONG,
        }
        return mapping[kind]
