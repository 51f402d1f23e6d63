"""Indentation-aware text sink used by the language backend.

The writer tracks the cursor (line length, line number, indentation stack)
so callers can check whether a rendering fits the configured line length
before committing it.
"""

from __future__ import annotations

from typing import Callable, Sequence, TypeVar

from jna_bindgen.config import Layout

T = TypeVar("T")

ItemWriter = Callable[["SourceWriter", T], None]


class SourceWriter:
    def __init__(self, tab_width: int = 2) -> None:
        self.tab_width = tab_width
        self.chunks: list[str] = []
        self.spaces: list[int] = [0]
        self.line_started = False
        self.line_length = 0
        self.line_number = 1
        self.max_line_length = 0

    def getvalue(self) -> str:
        return "".join(self.chunks)

    def write(self, text: str) -> None:
        if not text:
            return
        if not self.line_started:
            indent = self.spaces[-1]
            self.chunks.append(" " * indent)
            self.line_started = True
            self.line_length += indent
        self.chunks.append(text)
        self.line_length += len(text)
        self.max_line_length = max(self.max_line_length, self.line_length)

    def new_line(self) -> None:
        self.chunks.append("\n")
        self.line_started = False
        self.line_length = 0
        self.line_number += 1

    def new_line_if_not_start(self) -> None:
        """End the current line unless nothing has been written yet."""
        if self.line_number != 1:
            self.new_line()

    def push_tab(self) -> None:
        current = self.spaces[-1]
        self.spaces.append(current - current % self.tab_width + self.tab_width)

    def push_set_spaces(self, spaces: int) -> None:
        self.spaces.append(spaces)

    def pop_tab(self) -> None:
        if len(self.spaces) == 1:
            raise RuntimeError("unbalanced indentation: pop_tab at top level")
        self.spaces.pop()

    def open_brace(self) -> None:
        self.write(" {")
        self.push_tab()
        self.new_line()

    def close_brace(self, semicolon: bool) -> None:
        self.pop_tab()
        self.new_line()
        self.write("};" if semicolon else "}")

    def line_length_for_align(self) -> int:
        if self.line_started:
            return self.line_length
        return self.line_length + self.spaces[-1]

    def try_write(self, func: Callable[[SourceWriter], None], max_line_length: int) -> bool:
        """Render ``func`` and keep it only if no line exceeds ``max_line_length``."""
        if self.line_length > max_line_length:
            return False

        measurer = SourceWriter(self.tab_width)
        measurer.spaces = list(self.spaces)
        measurer.line_started = self.line_started
        measurer.line_length = self.line_length
        measurer.line_number = self.line_number
        measurer.max_line_length = self.line_length
        func(measurer)

        if measurer.max_line_length > max_line_length:
            return False

        self.chunks.append(measurer.getvalue())
        self.line_started = measurer.line_started
        self.line_length = measurer.line_length
        self.line_number = measurer.line_number
        self.max_line_length = max(self.max_line_length, measurer.max_line_length)
        return True

    def write_horizontal_source_list(
        self, items: Sequence[T], join: str, write_item: ItemWriter
    ) -> None:
        last = len(items) - 1
        for i, item in enumerate(items):
            write_item(self, item)
            if i != last:
                self.write(join)

    def write_vertical_source_list(
        self, items: Sequence[T], join: str, write_item: ItemWriter
    ) -> None:
        self.push_set_spaces(self.line_length_for_align())
        last = len(items) - 1
        for i, item in enumerate(items):
            write_item(self, item)
            if i != last:
                self.write(join)
                self.new_line()
        self.pop_tab()

    def write_source_list(
        self,
        items: Sequence[T],
        layout: Layout,
        max_line_length: int,
        write_item: ItemWriter,
        join: str = ", ",
        vertical_join: str | None = None,
    ) -> None:
        """Lay out ``items`` on one line or one per line.

        ``Layout.AUTO`` keeps the horizontal rendering when it fits within
        ``max_line_length`` (counting what is already on the current line)
        and falls back to the vertical one otherwise.
        """
        if vertical_join is None:
            vertical_join = join

        if layout == Layout.HORIZONTAL:
            self.write_horizontal_source_list(items, join, write_item)
        elif layout == Layout.VERTICAL:
            self.write_vertical_source_list(items, vertical_join, write_item)
        elif not self.try_write(
            lambda out: out.write_horizontal_source_list(items, join, write_item),
            max_line_length,
        ):
            self.write_vertical_source_list(items, vertical_join, write_item)
