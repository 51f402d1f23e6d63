from __future__ import annotations

import pytest

from jna_bindgen.compiler import BindingCompiler
from jna_bindgen.config import Config, JavaJnaConfig
from jna_bindgen.generator import BindingsGenerator, generate
from jna_bindgen.ir import (
    BinOpLiteral,
    Bindings,
    CastLiteral,
    Constant,
    Enum,
    EnumVariant,
    ExprLiteral,
    Field,
    FieldAccessLiteral,
    Function,
    FunctionArg,
    IntKind,
    OpaqueItem,
    PathLiteral,
    PathType,
    PostfixUnaryLiteral,
    PrimitiveKind,
    PrimitiveType,
    PtrType,
    Static,
    Struct,
    StructLiteral,
    Typedef,
)
from jna_bindgen.loader import load_bindings

INT = PrimitiveType.integer(IntKind.INT)


def sample_bindings() -> Bindings:
    return Bindings(
        name="sample",
        constants=[Constant("SCALE", PrimitiveType(PrimitiveKind.FLOAT), ExprLiteral("1.5"))],
        items=[
            Enum("Status", [EnumVariant("Ok"), EnumVariant("Err", ExprLiteral("5"))]),
            OpaqueItem("Handle"),
            Struct("Point", fields=[Field("x", INT), Field("y", INT)]),
            Typedef("Length", PrimitiveType.integer(IntKind.SIZE_T)),
        ],
        globals=[Static("COUNTER", INT)],
        functions=[
            Function("handle_new", ret=PathType("Handle")),
            Function(
                "point_move",
                [FunctionArg("p", PtrType(PathType("Point"))), FunctionArg(None, INT)],
                ret=PrimitiveType(PrimitiveKind.BOOL),
            ),
        ],
    )


class TestGoldenOutput:
    def test_mod_2018(self, fixtures_dir, expectations_dir):
        bindings = load_bindings(fixtures_dir / "mod_2018.json")
        expected = (expectations_dir / "mod_2018.java").read_text()

        assert generate(bindings) == expected

    def test_mod_2018_through_compiler(self, fixtures_dir, expectations_dir):
        result = BindingCompiler().compile_file(fixtures_dir / "mod_2018.json")

        assert result.success
        assert result.library_name == "mod_2018"
        assert result.java_code == (expectations_dir / "mod_2018.java").read_text()


class TestGenerator:
    def test_is_idempotent(self):
        config = Config(java_jna=JavaJnaConfig(package="org.sample"))
        bindings = sample_bindings()

        first = generate(bindings, config, "sample")
        second = generate(bindings, config, "sample")

        assert first == second
        assert BindingsGenerator(bindings, config, "sample").generate() == first

    def test_declaration_order(self):
        text = generate(sample_bindings())

        positions = [
            text.index("public static final float SCALE = 1.5f;"),
            text.index("class Status extends IntegerType"),
            text.index("class Handle extends PointerType"),
            text.index("class Point extends Structure"),
            text.index("class Length extends IntegerType"),
            text.index("/* Not implemented yet : Static(name='COUNTER'"),
            text.index("Handle handle_new();"),
            text.index("boolean point_move(PointByReference p, int arg1);"),
        ]
        assert positions == sorted(positions)

    def test_constants_of_declared_types_follow_items(self):
        origin = Constant("ORIGIN", PathType("Point"), ExprLiteral("0"))
        bindings = sample_bindings()
        bindings.constants.insert(0, origin)

        text = generate(bindings)

        assert text.index("class PointByReference") < text.index("ORIGIN")
        assert text.index("SCALE") < text.index("class Status")

    def test_string_constant_precedes_items(self):
        greeting = Constant(
            "GREETING",
            PtrType(PrimitiveType(PrimitiveKind.CHAR), is_const=True),
            ExprLiteral('"hi"'),
        )
        bindings = sample_bindings()
        bindings.constants.append(greeting)

        text = generate(bindings)

        assert text.index("GREETING") < text.index("class Status")

    @pytest.mark.parametrize(
        ("ty", "value", "expected"),
        [
            (INT, BinOpLiteral(ExprLiteral("1"), "<<", PathLiteral(None, "SHIFT")), True),
            (INT, CastLiteral(INT, PostfixUnaryLiteral("-", ExprLiteral("1"))), True),
            (PtrType(INT), ExprLiteral("0"), True),
            (INT, FieldAccessLiteral(StructLiteral("Point"), "x"), False),
            (PtrType(PtrType(INT)), ExprLiteral("0"), False),
            (PathType("Point"), ExprLiteral("0"), False),
        ],
    )
    def test_primitive_constant_rule(self, ty, value, expected):
        assert Constant("C", ty, value).uses_only_primitive_types() is expected

    def test_scaffold_wraps_declarations(self):
        text = generate(sample_bindings(), binding_lib_name="sample_ffi")

        assert text.startswith(
            "import com.sun.jna.*;\nimport com.sun.jna.ptr.*;\n\nenum BindingsSingleton {"
        )
        assert 'final Bindings lib = Native.load("sample_ffi", Bindings.class);' in text
        assert "\ninterface Bindings extends Library {\n" in text
        assert text.endswith("\n}")

    def test_library_name_defaults_to_ir_name(self):
        text = generate(sample_bindings())

        assert 'Native.load("sample", Bindings.class)' in text

    def test_declarations_are_indented_inside_interface(self):
        text = generate(sample_bindings())

        assert "\n  class Handle extends PointerType {\n    public Handle() {\n" in text
        assert "\n  Handle handle_new();\n" in text

    def test_placeholders_are_reported(self):
        generator = BindingsGenerator(sample_bindings(), Config(), "sample")
        generator.generate()

        assert len(generator.backend.unsupported) == 1
        assert "COUNTER" in generator.backend.unsupported[0]

    def test_placeholders_are_not_repeated_across_runs(self):
        generator = BindingsGenerator(sample_bindings(), Config(), "sample")
        generator.generate()
        generator.generate()

        assert len(generator.backend.unsupported) == 1

    def test_unsupported_constants_are_reported(self):
        bindings = sample_bindings()
        bindings.constants.append(
            Constant("ORIGIN", PathType("Point"), StructLiteral("Point", {"x": ExprLiteral("0")}))
        )
        generator = BindingsGenerator(bindings, Config(), "sample")
        generator.generate()

        assert "/* Unsupported literal for constant ORIGIN */" in generator.backend.unsupported

    def test_empty_bindings(self):
        text = generate(Bindings(name="empty"))

        assert text == (
            "import com.sun.jna.*;\n"
            "import com.sun.jna.ptr.*;\n"
            "\n"
            "enum BindingsSingleton {\n"
            "  INSTANCE;\n"
            '  final Bindings lib = Native.load("empty", Bindings.class);\n'
            "}\n"
            "\n"
            "interface Bindings extends Library {\n"
            "  Bindings INSTANCE = BindingsSingleton.INSTANCE.lib;\n"
            "\n"
            "}"
        )
