"""Read a resolved IR document (JSON) into a Bindings tree.

The document is a dump of an already-resolved IR; nothing here looks at
native source. Shape::

    {
      "name": "mylib",
      "constants": [{"name": "MAX", "type": {"primitive": "double"},
                     "value": {"expr": "1.5"}}],
      "items": [{"kind": "struct", "name": "Point",
                 "fields": [{"name": "x", "type": {"int": "b32"}}]}],
      "globals": [],
      "functions": [{"name": "point_len",
                     "args": [{"name": "p", "type": {"ptr": {"path": "Point"}}}],
                     "ret": {"primitive": "double"}}]
    }
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from jna_bindgen.errors import IRLoadError
from jna_bindgen.ir import (
    Annotations,
    ArrayType,
    BinOpLiteral,
    Bindings,
    CastLiteral,
    Constant,
    Documentation,
    Enum,
    EnumVariant,
    ExprLiteral,
    Field,
    FieldAccessLiteral,
    FuncPtrType,
    Function,
    FunctionArg,
    IntKind,
    Item,
    Literal,
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
    Type,
    Typedef,
    Union,
)

PRIMITIVE_NAME_MAP: dict[str, PrimitiveKind] = {
    "void": PrimitiveKind.VOID,
    "bool": PrimitiveKind.BOOL,
    "char": PrimitiveKind.CHAR,
    "schar": PrimitiveKind.SCHAR,
    "uchar": PrimitiveKind.UCHAR,
    "char32": PrimitiveKind.CHAR32,
    "float": PrimitiveKind.FLOAT,
    "double": PrimitiveKind.DOUBLE,
    "va_list": PrimitiveKind.VA_LIST,
    "ptrdiff_t": PrimitiveKind.PTRDIFF_T,
}

INT_KIND_NAME_MAP: dict[str, IntKind] = {
    "short": IntKind.SHORT,
    "int": IntKind.INT,
    "long": IntKind.LONG,
    "long_long": IntKind.LONG_LONG,
    "size_t": IntKind.SIZE_T,
    "size": IntKind.SIZE,
    "b8": IntKind.B8,
    "b16": IntKind.B16,
    "b32": IntKind.B32,
    "b64": IntKind.B64,
}


class BindingsLoader:
    """Build Bindings from the JSON form of the IR."""

    def load_file(self, path: Path) -> Bindings:
        try:
            source = path.read_text()
        except OSError as e:
            raise IRLoadError(f"cannot read IR document: {e}", str(path)) from e
        return self.load_source(source, path.stem)

    def load_source(self, source: str, name: str = "bindings") -> Bindings:
        try:
            data = json.loads(source)
        except json.JSONDecodeError as e:
            raise IRLoadError(f"invalid JSON: {e.msg} (line {e.lineno})") from e
        return self.load_dict(data, name)

    def load_dict(self, data: Any, name: str = "bindings") -> Bindings:
        root = _expect(data, dict, "$")
        bindings = Bindings(name=_optional_str(root, "name", "$") or name)

        for i, raw in enumerate(_list(root, "constants", "$")):
            bindings.constants.append(self._constant(raw, f"$.constants[{i}]"))
        for i, raw in enumerate(_list(root, "items", "$")):
            bindings.items.append(self._item(raw, f"$.items[{i}]"))
        for i, raw in enumerate(_list(root, "globals", "$")):
            bindings.globals.append(self._static(raw, f"$.globals[{i}]"))
        for i, raw in enumerate(_list(root, "functions", "$")):
            bindings.functions.append(self._function(raw, f"$.functions[{i}]"))

        return bindings

    def _item(self, raw: Any, where: str) -> Item:
        obj = _expect(raw, dict, where)
        kind = _str(obj, "kind", where)
        name = _str(obj, "name", where)
        annotations = _annotations(obj, where)
        documentation = _documentation(obj, where)

        if kind == "struct":
            return Struct(
                name=name,
                fields=self._fields(obj, where),
                associated_constants=[
                    self._constant(c, f"{where}.constants[{i}]", associated_to=name)
                    for i, c in enumerate(_list(obj, "constants", where))
                ],
                is_transparent=bool(obj.get("transparent", False)),
                annotations=annotations,
                documentation=documentation,
            )
        if kind == "union":
            return Union(
                name=name,
                fields=self._fields(obj, where),
                annotations=annotations,
                documentation=documentation,
            )
        if kind == "enum":
            variants = []
            for i, v in enumerate(_list(obj, "variants", where)):
                vwhere = f"{where}.variants[{i}]"
                vobj = _expect(v, dict, vwhere)
                discriminant = vobj.get("discriminant")
                variants.append(
                    EnumVariant(
                        name=_str(vobj, "name", vwhere),
                        discriminant=(
                            None
                            if discriminant is None
                            else self._literal(discriminant, f"{vwhere}.discriminant")
                        ),
                        documentation=_documentation(vobj, vwhere),
                    )
                )
            return Enum(
                name=name, variants=variants, annotations=annotations, documentation=documentation
            )
        if kind == "typedef":
            return Typedef(
                name=name,
                aliased=self._type(obj.get("aliased"), f"{where}.aliased"),
                annotations=annotations,
                documentation=documentation,
            )
        if kind == "opaque":
            return OpaqueItem(name=name, annotations=annotations, documentation=documentation)

        raise IRLoadError(f"unknown item kind {kind!r}", f"{where}.kind")

    def _fields(self, obj: dict[str, Any], where: str) -> list[Field]:
        fields = []
        for i, raw in enumerate(_list(obj, "fields", where)):
            fwhere = f"{where}.fields[{i}]"
            fobj = _expect(raw, dict, fwhere)
            fields.append(
                Field(
                    name=_str(fobj, "name", fwhere),
                    ty=self._type(fobj.get("type"), f"{fwhere}.type"),
                    documentation=_documentation(fobj, fwhere),
                )
            )
        return fields

    def _constant(self, raw: Any, where: str, associated_to: str | None = None) -> Constant:
        obj = _expect(raw, dict, where)
        return Constant(
            name=_str(obj, "name", where),
            ty=self._type(obj.get("type"), f"{where}.type"),
            value=self._literal(obj.get("value"), f"{where}.value"),
            associated_to=associated_to,
            documentation=_documentation(obj, where),
        )

    def _static(self, raw: Any, where: str) -> Static:
        obj = _expect(raw, dict, where)
        return Static(
            name=_str(obj, "name", where),
            ty=self._type(obj.get("type"), f"{where}.type"),
            mutable=bool(obj.get("mutable", False)),
            annotations=_annotations(obj, where),
            documentation=_documentation(obj, where),
        )

    def _function(self, raw: Any, where: str) -> Function:
        obj = _expect(raw, dict, where)
        args = []
        for i, a in enumerate(_list(obj, "args", where)):
            awhere = f"{where}.args[{i}]"
            aobj = _expect(a, dict, awhere)
            args.append(
                FunctionArg(
                    name=_optional_str(aobj, "name", awhere),
                    ty=self._type(aobj.get("type"), f"{awhere}.type"),
                )
            )
        ret = obj.get("ret")
        return Function(
            name=_str(obj, "name", where),
            args=args,
            ret=(
                PrimitiveType(PrimitiveKind.VOID)
                if ret is None
                else self._type(ret, f"{where}.ret")
            ),
            annotations=_annotations(obj, where),
            documentation=_documentation(obj, where),
        )

    def _type(self, raw: Any, where: str) -> Type:
        obj = _expect(raw, dict, where)
        if len(obj) == 0:
            raise IRLoadError("empty type", where)

        if "primitive" in obj:
            name = _str(obj, "primitive", where)
            if name not in PRIMITIVE_NAME_MAP:
                raise IRLoadError(f"unknown primitive {name!r}", where)
            return PrimitiveType(PRIMITIVE_NAME_MAP[name])
        if "int" in obj:
            name = _str(obj, "int", where)
            if name not in INT_KIND_NAME_MAP:
                raise IRLoadError(f"unknown integer kind {name!r}", where)
            return PrimitiveType.integer(
                INT_KIND_NAME_MAP[name], signed=bool(obj.get("signed", True))
            )
        if "ptr" in obj:
            return PtrType(
                ty=self._type(obj["ptr"], f"{where}.ptr"),
                is_const=bool(obj.get("const", False)),
                is_nullable=bool(obj.get("nullable", True)),
                is_ref=bool(obj.get("ref", False)),
            )
        if "path" in obj:
            return PathType(_str(obj, "path", where))
        if "array" in obj:
            return ArrayType(
                ty=self._type(obj["array"], f"{where}.array"),
                length=str(obj.get("len", "")),
            )
        if "fn_ptr" in obj:
            fn = _expect(obj["fn_ptr"], dict, f"{where}.fn_ptr")
            args = []
            for i, pair in enumerate(_list(fn, "args", f"{where}.fn_ptr")):
                pwhere = f"{where}.fn_ptr.args[{i}]"
                if not isinstance(pair, list) or len(pair) != 2:
                    raise IRLoadError("expected a [name, type] pair", pwhere)
                arg_name, arg_type = pair
                if arg_name is not None and not isinstance(arg_name, str):
                    raise IRLoadError("argument name must be a string or null", pwhere)
                args.append((arg_name, self._type(arg_type, f"{pwhere}[1]")))
            ret = fn.get("ret")
            return FuncPtrType(
                ret=(
                    PrimitiveType(PrimitiveKind.VOID)
                    if ret is None
                    else self._type(ret, f"{where}.fn_ptr.ret")
                ),
                args=tuple(args),
                is_nullable=bool(fn.get("nullable", False)),
            )

        raise IRLoadError(f"unknown type form with keys {sorted(obj)}", where)

    def _literal(self, raw: Any, where: str) -> Literal:
        if isinstance(raw, str):
            return ExprLiteral(raw)
        obj = _expect(raw, dict, where)

        if "expr" in obj:
            return ExprLiteral(_str(obj, "expr", where))
        if "struct" in obj:
            body = _expect(obj["struct"], dict, f"{where}.struct")
            fields = _expect(body.get("fields", {}), dict, f"{where}.struct.fields")
            return StructLiteral(
                export_name=_str(body, "name", f"{where}.struct"),
                fields={
                    k: self._literal(v, f"{where}.struct.fields.{k}") for k, v in fields.items()
                },
            )
        if "path" in obj:
            body = _expect(obj["path"], dict, f"{where}.path")
            return PathLiteral(
                associated_to=_optional_str(body, "associated_to", f"{where}.path"),
                name=_str(body, "name", f"{where}.path"),
            )
        if "postfix_unary" in obj:
            body = _expect(obj["postfix_unary"], dict, f"{where}.postfix_unary")
            return PostfixUnaryLiteral(
                op=_str(body, "op", f"{where}.postfix_unary"),
                value=self._literal(body.get("value"), f"{where}.postfix_unary.value"),
            )
        if "bin_op" in obj:
            body = _expect(obj["bin_op"], dict, f"{where}.bin_op")
            return BinOpLiteral(
                left=self._literal(body.get("left"), f"{where}.bin_op.left"),
                op=_str(body, "op", f"{where}.bin_op"),
                right=self._literal(body.get("right"), f"{where}.bin_op.right"),
            )
        if "field_access" in obj:
            body = _expect(obj["field_access"], dict, f"{where}.field_access")
            return FieldAccessLiteral(
                base=self._literal(body.get("base"), f"{where}.field_access.base"),
                field=_str(body, "field", f"{where}.field_access"),
            )
        if "cast" in obj:
            body = _expect(obj["cast"], dict, f"{where}.cast")
            return CastLiteral(
                ty=self._type(body.get("type"), f"{where}.cast.type"),
                value=self._literal(body.get("value"), f"{where}.cast.value"),
            )

        raise IRLoadError(f"unknown literal form with keys {sorted(obj)}", where)


def load_bindings(path: Path) -> Bindings:
    return BindingsLoader().load_file(path)


def bindings_from_dict(data: Any, name: str = "bindings") -> Bindings:
    return BindingsLoader().load_dict(data, name)


def _expect(value: Any, kind: type, where: str) -> Any:
    if not isinstance(value, kind):
        raise IRLoadError(f"expected {kind.__name__}, got {type(value).__name__}", where)
    return value


def _str(obj: dict[str, Any], key: str, where: str) -> str:
    value = obj.get(key)
    if not isinstance(value, str) or not value:
        raise IRLoadError(f"missing or empty string {key!r}", where)
    return value


def _optional_str(obj: dict[str, Any], key: str, where: str) -> str | None:
    value = obj.get(key)
    if value is not None and not isinstance(value, str):
        raise IRLoadError(f"{key!r} must be a string or null", where)
    return value


def _list(obj: dict[str, Any], key: str, where: str) -> list[Any]:
    return _expect(obj.get(key, []), list, f"{where}.{key}")


def _documentation(obj: dict[str, Any], where: str) -> Documentation:
    lines = _list(obj, "documentation", where)
    for i, line in enumerate(lines):
        if not isinstance(line, str):
            raise IRLoadError("documentation lines must be strings", f"{where}.documentation[{i}]")
    return Documentation(list(lines))


def _annotations(obj: dict[str, Any], where: str) -> Annotations:
    return Annotations(deprecated=_optional_str(obj, "deprecated", where))
