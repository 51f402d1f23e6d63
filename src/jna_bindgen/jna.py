"""Java/JNA language backend: IR items -> Java declarations.

Every IR item is emitted inside a single ``interface <Name> extends Library``
so that generated code looks like::

    interface Bindings extends Library {
      Bindings INSTANCE = BindingsSingleton.INSTANCE.lib;

      class Handle extends PointerType { ... }

      void handle_free(Handle handle);
    }

Integer-like items (enums, integer typedefs, transparent integer structs)
become ``IntegerType`` subclasses, opaque items become ``PointerType``
subclasses, structs and unions become ``Structure``/``Union`` subclasses.
Each is paired with a ``<Name>ByReference`` class.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from enum import Enum as PyEnum
from enum import auto
from typing import Callable, Sequence

from jna_bindgen import __version__
from jna_bindgen.config import Config, Layout
from jna_bindgen.ir import (
    Annotations,
    ArrayType,
    Constant,
    Documentation,
    Enum,
    ExprLiteral,
    Field,
    FuncPtrType,
    Function,
    Literal,
    OpaqueItem,
    PathType,
    PrimitiveType,
    PtrType,
    Static,
    Struct,
    StructLiteral,
    Type,
    Typedef,
    Union,
)
from jna_bindgen.java_types import JnaIntegerType, java_type_name, not_implemented_text
from jna_bindgen.literals import java_writable_literal, wrap_java_value
from jna_bindgen.writer import SourceWriter

logger = logging.getLogger(__name__)

I32_PATTERN = re.compile(r"[+-]?[0-9]+")
I32_MIN = -(2**31)
I32_MAX = 2**31 - 1


class NamespaceOperation(PyEnum):
    OPEN = auto()
    CLOSE = auto()


@dataclass
class JnaStruct:
    """One generated ``Structure``/``Union`` class."""

    name: str
    superclass: str
    interface: str
    documentation: Documentation
    annotations: Annotations
    fields: Sequence[Field] = ()
    constants: Sequence[Constant] = ()
    associated_to: Struct | None = None


@dataclass
class IndexedArg:
    index: int
    name: str | None
    ty: Type

    def java_name(self) -> str:
        if self.name is None or self.name == "_":
            return f"arg{self.index}"
        return self.name


@dataclass
class JavaJnaBackend:
    config: Config
    binding_lib_name: str
    unsupported: list[str] = field(default_factory=list)

    def write_headers(self, out: SourceWriter) -> None:
        if self.config.header is not None:
            out.new_line_if_not_start()
            out.write(self.config.header)
            out.new_line()

        if self.config.include_version:
            out.new_line_if_not_start()
            out.write(f"/* Generated with jna-bindgen:{__version__} */")
            out.new_line()

        if self.config.autogen_warning is not None:
            out.new_line_if_not_start()
            out.write(self.config.autogen_warning)
            out.new_line()

        if self.config.java_jna.package is not None:
            out.new_line_if_not_start()
            out.write(f"package {self.config.java_jna.package};")
            out.new_line()
            out.new_line()

        out.write("import com.sun.jna.*;")
        out.new_line()
        out.write("import com.sun.jna.ptr.*;")
        out.new_line()

    def open_close_namespaces(self, op: NamespaceOperation, out: SourceWriter) -> None:
        if op == NamespaceOperation.CLOSE:
            out.close_brace(False)
            return

        out.new_line_if_not_start()
        name = self.config.java_jna.resolved_interface_name()

        out.write(f"enum {name}Singleton")
        out.open_brace()
        out.write("INSTANCE;")
        out.new_line()
        out.write(f'final {name} lib = Native.load("{self.binding_lib_name}", {name}.class);')
        out.close_brace(False)
        out.new_line()
        out.new_line()

        out.write(f"interface {name} extends Library")
        out.open_brace()
        out.write(f"{name} INSTANCE = {name}Singleton.INSTANCE.lib;")
        out.new_line()

        if self.config.java_jna.extra_defs:
            out.write(self.config.java_jna.extra_defs)
            out.new_line()

    def write_footers(self, out: SourceWriter) -> None:
        pass

    # -- items ---------------------------------------------------------------

    def write_enum(self, out: SourceWriter, e: Enum) -> None:
        def write_variants(out: SourceWriter) -> None:
            for variant, discriminant in zip(e.variants, enum_discriminants(e)):
                self.write_documentation(out, variant.documentation)
                out.write(
                    f"public static final {e.name} {variant.name} = new {e.name}({discriminant});"
                )
                out.new_line()

        # C enums are int-sized on every platform JNA supports
        self.write_integer_type(
            out, e.documentation, e.name, JnaIntegerType.INT, e.annotations, write_variants
        )

    def write_struct(self, out: SourceWriter, s: Struct) -> None:
        if not s.is_transparent:
            self._write_struct_pair(out, s, "Structure", "Structure", s.fields)
            return

        sole = s.fields[0] if s.fields else None
        ty = sole.ty if sole is not None else None

        if isinstance(ty, PrimitiveType) and ty.is_integer() and ty.int_kind is not None:

            def write_constants(out: SourceWriter) -> None:
                for constant in s.associated_constants:
                    self.write_constant(out, constant, s)

            self.write_integer_type(
                out,
                s.documentation,
                s.name,
                JnaIntegerType.from_kind(ty.int_kind),
                s.annotations,
                write_constants,
            )
        elif isinstance(ty, PathType):
            self._write_struct_pair(out, s, ty.name, f"{ty.name}ByReference", ())
        elif isinstance(ty, ArrayType):
            self.write_pointer_type(out, s.documentation, s.annotations, s.name)
        else:
            self.not_implemented(out, s)

    def write_union(self, out: SourceWriter, u: Union) -> None:
        for name, interface in (
            (u.name, "Structure.ByValue"),
            (f"{u.name}ByReference", "Structure.ByReference"),
        ):
            self.write_jna_struct(
                out,
                JnaStruct(
                    name=name,
                    superclass="Union",
                    interface=interface,
                    documentation=u.documentation,
                    annotations=u.annotations,
                    fields=u.fields,
                ),
            )

    def write_opaque_item(self, out: SourceWriter, o: OpaqueItem) -> None:
        self.write_pointer_type(out, o.documentation, o.annotations, o.name)

    def write_type_def(self, out: SourceWriter, t: Typedef) -> None:
        aliased = t.aliased
        if isinstance(aliased, FuncPtrType):
            self._write_callback_interface(out, t, aliased)
        elif isinstance(aliased, PathType):
            self._write_subclass_pair(out, t, aliased)
        elif isinstance(aliased, PrimitiveType):
            if aliased.is_integer() and aliased.int_kind is not None:
                self.write_integer_type(
                    out,
                    t.documentation,
                    t.name,
                    JnaIntegerType.from_kind(aliased.int_kind),
                    t.annotations,
                    lambda out: None,
                )
            else:
                self.not_implemented(out, t)
        elif isinstance(aliased, (PtrType, ArrayType)):
            self.write_pointer_type(out, t.documentation, t.annotations, t.name)
        else:
            self.not_implemented(out, t)

    def write_static(self, out: SourceWriter, s: Static) -> None:
        self.not_implemented(out, s)

    def write_function(self, out: SourceWriter, f: Function) -> None:
        self.write_documentation(out, f.documentation)
        self.write_deprecated(out, f.annotations)
        self.write_type(out, f.ret)
        out.write(f" {f.name}(")
        self.write_indexed_args(
            out, [IndexedArg(i, arg.name, arg.ty) for i, arg in enumerate(f.args)]
        )
        out.write(");")

    def write_constant(
        self, out: SourceWriter, constant: Constant, associated_to: Struct | None = None
    ) -> None:
        """Declare ``constant`` as a static field and end the line.

        ``associated_to`` is the struct whose class body the constant is
        written into, if any.
        """
        self.write_documentation(out, constant.documentation)
        if java_writable_literal(constant.ty, constant.value):
            out.write("public static final ")
            self.write_type(out, constant.ty)
            out.write(f" {constant.name} = ")
            self.write_literal(out, wrap_java_value(constant.value, constant.ty))
            out.write(";")
        else:
            scope = f" of {associated_to.name}" if associated_to is not None else ""
            logger.warning("Unsupported literal for constant %s%s", constant.name, scope)
            text = f"/* Unsupported literal for constant {constant.name} */"
            self.unsupported.append(text)
            out.write(text)
        out.new_line()

    # -- shared pieces -------------------------------------------------------

    def write_type(self, out: SourceWriter, ty: Type) -> None:
        out.write(java_type_name(ty))

    def write_documentation(self, out: SourceWriter, doc: Documentation) -> None:
        if doc.is_empty():
            return
        out.new_line_if_not_start()
        out.write("/**")
        for line in doc.lines:
            out.new_line()
            out.write(f" *{line}")
        out.new_line()
        out.write(" */")
        out.new_line()

    def write_literal(self, out: SourceWriter, literal: Literal) -> None:
        if isinstance(literal, ExprLiteral):
            out.write(literal.text)
        elif isinstance(literal, StructLiteral):
            # field order of a struct literal is not meaningful, keep it out
            self.not_implemented(out, f"Struct Literal {literal.export_name}")
        else:
            self.not_implemented(out, literal)

    def write_deprecated(self, out: SourceWriter, annotations: Annotations) -> None:
        note = annotations.deprecated
        if note is None:
            return
        if note:
            out.write("/**")
            out.new_line()
            out.write(f" * @deprecated {note}")
            out.new_line()
            out.write(" */")
            out.new_line()
        out.write("@Deprecated")
        out.new_line()

    def not_implemented(self, out: SourceWriter, value: object) -> None:
        text = not_implemented_text(value)
        logger.warning("Cannot express %r in Java, emitting a placeholder", value)
        self.unsupported.append(text)
        out.write(text)

    def write_indexed_args(self, out: SourceWriter, args: Sequence[IndexedArg]) -> None:
        def write_arg(out: SourceWriter, arg: IndexedArg) -> None:
            self.write_type(out, arg.ty)
            out.write(f" {arg.java_name()}")

        out.write_source_list(
            args,
            self.config.function_args,
            self.config.line_length,
            write_arg,
            join=", ",
            vertical_join=",",
        )

    def write_jna_struct(self, out: SourceWriter, s: JnaStruct) -> None:
        out.new_line()
        self.write_documentation(out, s.documentation)
        self.write_deprecated(out, s.annotations)

        field_names = [f'"{f.name}"' for f in s.fields]
        if field_names:
            out.write("@Structure.FieldOrder({")
            out.write_source_list(
                field_names,
                Layout.AUTO,
                self.config.line_length,
                _write_text,
                join=", ",
                vertical_join=",",
            )
            out.write("})")
            out.new_line()

        out.write(f"class {s.name} extends {s.superclass} implements {s.interface}")
        out.open_brace()

        for constant in s.constants:
            self.write_constant(out, constant, s.associated_to)

        out.write(f"public {s.name}()")
        out.open_brace()
        out.write("super();")
        out.close_brace(False)
        out.new_line()
        out.new_line()

        out.write(f"public {s.name}(Pointer p)")
        out.open_brace()
        out.write("super(p);")
        out.close_brace(False)
        out.new_line()
        out.new_line()

        for f in s.fields:
            self.write_documentation(out, f.documentation)
            out.write("public ")
            self.write_type(out, f.ty)
            out.write(f" {f.name};")
            out.new_line()

        out.close_brace(False)
        out.new_line()

    def write_integer_type(
        self,
        out: SourceWriter,
        doc: Documentation,
        name: str,
        storage: JnaIntegerType,
        annotations: Annotations,
        extra: Callable[[SourceWriter], None],
    ) -> None:
        """Emit an ``IntegerType`` wrapper and its ``ByReference`` companion.

        ``extra`` writes additional class members (enum variants, associated
        constants) at the end of the value class body.
        """
        size = storage.size()
        self.write_documentation(out, doc)
        self.write_deprecated(out, annotations)
        out.write(f"class {name} extends IntegerType")
        out.open_brace()
        out.write(f"public {name}()")
        out.open_brace()
        out.write(f"super({size});")
        out.close_brace(False)
        out.new_line()
        out.new_line()
        out.write(f"public {name}(long value)")
        out.open_brace()
        out.write(f"super({size}, value);")
        out.close_brace(False)
        out.new_line()
        out.new_line()
        out.write(f"public {name}(Pointer p)")
        out.open_brace()
        out.write(f"this(p.{storage.get_method()});")
        out.close_brace(False)
        out.new_line()
        extra(out)
        out.close_brace(False)
        out.new_line()
        out.new_line()

        out.write(f"class {name}ByReference extends ByReference")
        out.open_brace()
        out.write(f"public {name}ByReference()")
        out.open_brace()
        out.write(f"super({size});")
        out.close_brace(False)
        out.new_line()
        out.new_line()
        out.write(f"public {name}ByReference(Pointer p)")
        out.open_brace()
        out.write(f"super({size});")
        out.new_line()
        out.write("setPointer(p);")
        out.close_brace(False)
        out.new_line()
        out.new_line()
        out.write(f"public {name} getValue()")
        out.open_brace()
        out.write(f"return new {name}(getPointer().{storage.get_method()});")
        out.close_brace(False)
        out.new_line()
        out.new_line()
        out.write(f"public void setValue({name} value)")
        out.open_brace()
        out.write(f"getPointer().{storage.set_method()};")
        out.close_brace(False)
        out.new_line()
        out.close_brace(False)

    def write_pointer_type(
        self, out: SourceWriter, doc: Documentation, annotations: Annotations, name: str
    ) -> None:
        """Emit a ``PointerType`` handle and its ``ByReference`` companion."""
        self.write_documentation(out, doc)
        self.write_deprecated(out, annotations)
        out.write(f"class {name} extends PointerType")
        out.open_brace()
        out.write(f"public {name}()")
        out.open_brace()
        out.write("super(null);")
        out.close_brace(False)
        out.new_line()
        out.write(f"public {name}(Pointer p)")
        out.open_brace()
        out.write("super(p);")
        out.close_brace(False)
        out.close_brace(False)
        out.new_line()
        out.new_line()

        self.write_documentation(out, doc)
        self.write_deprecated(out, annotations)
        out.write(f"class {name}ByReference extends {name}")
        out.open_brace()
        out.write(f"public {name}ByReference()")
        out.open_brace()
        out.write("super(null);")
        out.close_brace(False)
        out.new_line()
        out.write(f"public {name}ByReference(Pointer p)")
        out.open_brace()
        out.write("super(p);")
        out.close_brace(False)
        out.close_brace(False)

    def _write_struct_pair(
        self,
        out: SourceWriter,
        s: Struct,
        superclass: str,
        ref_superclass: str,
        fields: Sequence[Field],
    ) -> None:
        for name, parent, interface in (
            (s.name, superclass, "Structure.ByValue"),
            (f"{s.name}ByReference", ref_superclass, "Structure.ByReference"),
        ):
            self.write_jna_struct(
                out,
                JnaStruct(
                    name=name,
                    superclass=parent,
                    interface=interface,
                    documentation=s.documentation,
                    annotations=s.annotations,
                    fields=fields,
                    constants=s.associated_constants,
                    associated_to=s,
                ),
            )

    def _write_callback_interface(self, out: SourceWriter, t: Typedef, fn: FuncPtrType) -> None:
        self.write_documentation(out, t.documentation)
        self.write_deprecated(out, t.annotations)
        out.write(f"interface {t.name} extends Callback")
        out.open_brace()
        self.write_type(out, fn.ret)
        out.write(" invoke(")
        self.write_indexed_args(
            out, [IndexedArg(i, name, ty) for i, (name, ty) in enumerate(fn.args)]
        )
        out.write(");")
        out.close_brace(False)

    def _write_subclass_pair(self, out: SourceWriter, t: Typedef, path: PathType) -> None:
        for suffix in ("", "ByReference"):
            name = f"{t.name}{suffix}"
            if suffix:
                out.new_line()
                out.new_line()
            self.write_documentation(out, t.documentation)
            self.write_deprecated(out, t.annotations)
            out.write(f"class {name} extends {path.name}{suffix}")
            out.open_brace()
            out.write(f"public {name}()")
            out.open_brace()
            out.write("super();")
            out.close_brace(False)
            out.new_line()
            out.write(f"public {name}(Pointer p)")
            out.open_brace()
            out.write("super(p);")
            out.close_brace(False)
            out.close_brace(False)


def _write_text(out: SourceWriter, text: str) -> None:
    out.write(text)


def parse_i32(literal: Literal | None) -> int | None:
    """Read an explicit discriminant, or None if it is not a plain 32-bit integer."""
    if not isinstance(literal, ExprLiteral):
        return None
    text = literal.text
    if not I32_PATTERN.fullmatch(text):
        return None
    value = int(text)
    if value < I32_MIN or value > I32_MAX:
        return None
    return value


def enum_discriminants(e: Enum) -> list[int]:
    """Resolve each variant's value: explicit if parseable, else previous + 1.

    The first variant without a usable explicit value gets 0. Counting
    past I32_MAX wraps to I32_MIN, as the int-sized wrapper would.
    """
    values: list[int] = []
    current: int | None = None
    for variant in e.variants:
        explicit = parse_i32(variant.discriminant)
        if explicit is not None:
            current = explicit
        elif current is None:
            current = 0
        elif current == I32_MAX:
            current = I32_MIN
        else:
            current += 1
        values.append(current)
    return values
