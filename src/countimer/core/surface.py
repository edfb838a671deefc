"""Text surfaces a countdown can write to."""

from __future__ import annotations

from typing import Callable, Protocol, runtime_checkable

import click


@runtime_checkable
class TextSurface(Protocol):
    """Anything that can show a line of text and report what it shows."""

    def get_text(self) -> str: ...

    def set_text(self, text: str) -> None: ...


class TextBuffer:
    """An in-memory surface that just holds its text."""

    def __init__(self, text: str = "") -> None:
        self._text = text

    def get_text(self) -> str:
        return self._text

    def set_text(self, text: str) -> None:
        self._text = text

    def __repr__(self) -> str:
        return f"TextBuffer({self._text!r})"


class EchoSurface(TextBuffer):
    """A surface that prints every new text as a line of output."""

    def __init__(self, text: str = "", echo: Callable[[str], None] = click.echo) -> None:
        super().__init__(text)
        self._echo = echo

    def set_text(self, text: str) -> None:
        super().set_text(text)
        self._echo(text)
