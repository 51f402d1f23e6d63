"""Resolved settings for Java/JNA binding generation."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Any

from jna_bindgen.errors import ConfigError


class Layout(Enum):
    """How argument and field-order lists are laid out."""

    HORIZONTAL = auto()
    VERTICAL = auto()
    AUTO = auto()

    @staticmethod
    def from_name(name: str) -> Layout:
        if not isinstance(name, str):
            raise ConfigError(f"layout must be a string, got {name!r}")
        mapping = {
            "horizontal": Layout.HORIZONTAL,
            "vertical": Layout.VERTICAL,
            "auto": Layout.AUTO,
        }
        try:
            return mapping[name.strip().lower()]
        except KeyError:
            raise ConfigError(
                f"unknown layout {name!r}, expected one of: {', '.join(mapping)}"
            ) from None


@dataclass
class JavaJnaConfig:
    package: str | None = None
    interface_name: str | None = None
    extra_defs: str | None = None

    def resolved_interface_name(self) -> str:
        return self.interface_name or "Bindings"


@dataclass
class Config:
    header: str | None = None
    autogen_warning: str | None = None
    include_version: bool = False
    line_length: int = 100
    tab_width: int = 2
    function_args: Layout = Layout.AUTO
    java_jna: JavaJnaConfig = field(default_factory=JavaJnaConfig)

    def __post_init__(self) -> None:
        if self.line_length <= 0:
            raise ConfigError(f"line_length must be positive, got {self.line_length}")
        if self.tab_width <= 0:
            raise ConfigError(f"tab_width must be positive, got {self.tab_width}")

    @staticmethod
    def from_dict(data: dict[str, Any]) -> Config:
        """Build a Config from a plain mapping.

        Option names may be written snake_case or kebab-case. Function
        argument layout is read from ``fn.args`` (or ``function.args``) and
        Java options from the ``java_jna`` table.
        """
        data = _normalize_keys(data)

        fn = _table(data, "fn") or _table(data, "function")
        java = _table(data, "java_jna")
        layout = fn.get("args", data.get("function_args"))

        return Config(
            header=_str_option(data, "header"),
            autogen_warning=_str_option(data, "autogen_warning"),
            include_version=bool(data.get("include_version", False)),
            line_length=_int_option(data, "line_length", 100),
            tab_width=_int_option(data, "tab_width", 2),
            function_args=Layout.AUTO if layout is None else Layout.from_name(layout),
            java_jna=JavaJnaConfig(
                package=_str_option(java, "package"),
                interface_name=_str_option(java, "interface_name"),
                extra_defs=_str_option(java, "extra_defs"),
            ),
        )


def _normalize_keys(value: Any) -> Any:
    if isinstance(value, dict):
        return {str(k).replace("-", "_"): _normalize_keys(v) for k, v in value.items()}
    return value


def _table(data: dict[str, Any], key: str) -> dict[str, Any]:
    value = data.get(key)
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise ConfigError(f"{key} must be a table, got {value!r}")
    return value


def _str_option(data: dict[str, Any], key: str) -> str | None:
    value = data.get(key)
    if value is not None and not isinstance(value, str):
        raise ConfigError(f"{key} must be a string, got {value!r}")
    return value


def _int_option(data: dict[str, Any], key: str, default: int) -> int:
    value = data.get(key, default)
    if isinstance(value, bool) or not isinstance(value, (int, str)):
        raise ConfigError(f"{key} must be an integer, got {value!r}")
    try:
        return int(value)
    except ValueError:
        raise ConfigError(f"{key} must be an integer, got {value!r}") from None
