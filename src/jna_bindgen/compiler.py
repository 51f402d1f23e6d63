from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from jna_bindgen.config import Config
from jna_bindgen.errors import BindgenError
from jna_bindgen.generator import BindingsGenerator
from jna_bindgen.ir import Bindings
from jna_bindgen.loader import BindingsLoader

logger = logging.getLogger(__name__)


@dataclass
class CompilationResult:
    success: bool
    java_code: str = ""
    class_name: str = ""
    library_name: str = ""
    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)
    output_path: Path | None = None


class BindingCompiler:
    def __init__(self, config: Config | None = None) -> None:
        self.config = config or Config()
        self.loader = BindingsLoader()

    def compile_file(
        self,
        ir_path: Path,
        output: Path | None = None,
        *,
        lib_name: str | None = None,
    ) -> CompilationResult:
        try:
            bindings = self.loader.load_file(ir_path)
        except BindgenError as e:
            return CompilationResult(success=False, errors=[f"IR load error: {e}"])

        result = self.compile_bindings(bindings, lib_name=lib_name)
        if result.success and output is not None:
            try:
                result.output_path = self._write_output(output, result)
            except OSError as e:
                result.success = False
                result.errors.append(f"Cannot write {output}: {e}")
        return result

    def compile_dict(
        self,
        data: Any,
        name: str = "bindings",
        *,
        lib_name: str | None = None,
    ) -> CompilationResult:
        try:
            bindings = self.loader.load_dict(data, name)
        except BindgenError as e:
            return CompilationResult(success=False, errors=[f"IR load error: {e}"])
        return self.compile_bindings(bindings, lib_name=lib_name)

    def compile_bindings(
        self, bindings: Bindings, *, lib_name: str | None = None
    ) -> CompilationResult:
        library_name = lib_name or bindings.name
        generator = BindingsGenerator(bindings, self.config, library_name)
        java_code = generator.generate()

        return CompilationResult(
            success=True,
            java_code=java_code,
            class_name=self.config.java_jna.resolved_interface_name(),
            library_name=library_name,
            warnings=list(generator.backend.unsupported),
        )

    def _write_output(self, output: Path, result: CompilationResult) -> Path:
        # A directory gets <Interface>.java, anything else is the file itself
        if output.is_dir() or output.suffix != ".java":
            output.mkdir(parents=True, exist_ok=True)
            path = output / f"{result.class_name}.java"
        else:
            output.parent.mkdir(parents=True, exist_ok=True)
            path = output

        path.write_text(result.java_code)
        logger.debug("Wrote %d bytes to %s", len(result.java_code), path)
        return path
