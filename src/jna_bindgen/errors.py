from __future__ import annotations


class BindgenError(Exception):
    """Base class for errors raised outside the emission pass."""


class ConfigError(BindgenError):
    pass


class IRLoadError(BindgenError):
    def __init__(self, message: str, where: str = "$") -> None:
        super().__init__(f"{where}: {message}")
        self.where = where
