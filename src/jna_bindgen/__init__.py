"""Java/JNA bindings from a resolved native-library IR.

Generate a Java interface (plus wrapper classes) that loads a native
library through JNA.
"""

from __future__ import annotations

__version__ = "0.1.0"

from jna_bindgen.compiler import BindingCompiler, CompilationResult  # noqa: E402
from jna_bindgen.config import Config, JavaJnaConfig, Layout  # noqa: E402
from jna_bindgen.generator import BindingsGenerator, generate  # noqa: E402

__all__ = [
    "BindingCompiler",
    "BindingsGenerator",
    "CompilationResult",
    "Config",
    "JavaJnaConfig",
    "Layout",
    "generate",
]
