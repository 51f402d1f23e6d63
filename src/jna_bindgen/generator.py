"""Walk a Bindings tree once and write the Java source for it."""

from __future__ import annotations

import logging

from jna_bindgen.config import Config
from jna_bindgen.ir import Bindings, Enum, Item, OpaqueItem, Struct, Typedef, Union
from jna_bindgen.jna import JavaJnaBackend, NamespaceOperation
from jna_bindgen.writer import SourceWriter

logger = logging.getLogger(__name__)


class BindingsGenerator:
    def __init__(self, bindings: Bindings, config: Config, binding_lib_name: str) -> None:
        self.bindings = bindings
        self.config = config
        self.backend = JavaJnaBackend(config, binding_lib_name)

    def generate(self) -> str:
        out = SourceWriter(self.config.tab_width)
        self.write(out)
        return out.getvalue()

    def write(self, out: SourceWriter) -> None:
        b = self.bindings
        backend = self.backend
        backend.unsupported.clear()
        logger.debug(
            "Emitting %s: %d constant(s), %d item(s), %d global(s), %d function(s)",
            b.name,
            len(b.constants),
            len(b.items),
            len(b.globals),
            len(b.functions),
        )

        backend.write_headers(out)
        backend.open_close_namespaces(NamespaceOperation.OPEN, out)

        # constants that reference declared types go after the items
        primitive = [c for c in b.constants if c.uses_only_primitive_types()]
        dependent = [c for c in b.constants if not c.uses_only_primitive_types()]

        for constant in primitive:
            out.new_line_if_not_start()
            backend.write_constant(out, constant)
            out.new_line()

        for item in b.items:
            out.new_line_if_not_start()
            self._write_item(out, item)
            out.new_line()

        for constant in dependent:
            out.new_line_if_not_start()
            backend.write_constant(out, constant)
            out.new_line()

        for static in b.globals:
            out.new_line_if_not_start()
            backend.write_static(out, static)
            out.new_line()

        for function in b.functions:
            out.new_line_if_not_start()
            backend.write_function(out, function)
            out.new_line()

        backend.open_close_namespaces(NamespaceOperation.CLOSE, out)
        backend.write_footers(out)

        if backend.unsupported:
            logger.info("%d declaration(s) emitted as placeholders", len(backend.unsupported))

    def _write_item(self, out: SourceWriter, item: Item) -> None:
        backend = self.backend
        if isinstance(item, Enum):
            backend.write_enum(out, item)
        elif isinstance(item, Struct):
            backend.write_struct(out, item)
        elif isinstance(item, Union):
            backend.write_union(out, item)
        elif isinstance(item, OpaqueItem):
            backend.write_opaque_item(out, item)
        elif isinstance(item, Typedef):
            backend.write_type_def(out, item)
        else:
            backend.not_implemented(out, item)


def generate(bindings: Bindings, config: Config | None = None, binding_lib_name: str = "") -> str:
    """Return the Java source for ``bindings``.

    ``binding_lib_name`` is the name passed to ``Native.load``; it defaults
    to the IR's library name.
    """
    config = config or Config()
    return BindingsGenerator(bindings, config, binding_lib_name or bindings.name).generate()
