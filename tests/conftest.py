from __future__ import annotations

from pathlib import Path
from typing import Callable

import pytest

from jna_bindgen.config import Config
from jna_bindgen.jna import JavaJnaBackend
from jna_bindgen.writer import SourceWriter

TESTS_DIR = Path(__file__).parent


@pytest.fixture
def fixtures_dir() -> Path:
    return TESTS_DIR / "fixtures"


@pytest.fixture
def expectations_dir() -> Path:
    return TESTS_DIR / "expectations"


@pytest.fixture
def render():
    """Run one backend call against a fresh writer and return the text."""

    def _render(
        emit: Callable[[JavaJnaBackend, SourceWriter], None],
        config: Config | None = None,
    ) -> str:
        backend = JavaJnaBackend(config or Config(), "native")
        out = SourceWriter((config or Config()).tab_width)
        emit(backend, out)
        return out.getvalue()

    return _render
