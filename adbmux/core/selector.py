"""Interactive selection of devices and packages."""

from __future__ import annotations

from collections.abc import Callable, Sequence
from typing import TypeVar

import typer

from adbmux.core.errors import InvalidSelectionError, NoCandidatesError
from adbmux.core.model import SelectionMode

T = TypeVar("T")

ALL_TOKEN = "all"


def resolve_selection(raw: str, count: int, mode: SelectionMode) -> tuple[int, ...]:
    """Map one line of operator input to zero-based candidate indices.

    Raises InvalidSelectionError for anything that is not an in-range 1-based index,
    or the ``all`` token when ``mode`` is MULTI_OR_ALL.
    """
    text = raw.strip()
    if mode is SelectionMode.MULTI_OR_ALL and text.lower() == ALL_TOKEN:
        return tuple(range(count))
    if not text.isdecimal():
        raise InvalidSelectionError(f"'{text}' is not a valid index")
    index = int(text)
    if index < 1 or index > count:
        raise InvalidSelectionError(f"Index {index} is out of range 1-{count}")
    return (index - 1,)


def _read_line(message: str) -> str:
    return typer.prompt(message, default="", show_default=False, prompt_suffix=" ")


def _confirm(message: str) -> bool:
    return typer.confirm(message, default=False)


class Selector:
    def __init__(
        self,
        *,
        read_line: Callable[[str], str] = _read_line,
        confirm: Callable[[str], bool] = _confirm,
        echo: Callable[[str], None] = typer.echo,
    ) -> None:
        self._read_line = read_line
        self._confirm = confirm
        self._echo = echo

    def select(
        self,
        candidates: Sequence[T],
        mode: SelectionMode,
        *,
        render: Callable[[T], str] = str,
        noun: str = "device",
    ) -> list[T]:
        if not candidates:
            raise NoCandidatesError(f"No {noun}s to select from.")
        if len(candidates) == 1:
            return [candidates[0]]

        self._echo(f"Multiple {noun}s found:")
        for position, candidate in enumerate(candidates, start=1):
            self._echo(f"[{position}] {render(candidate)}")

        if mode is SelectionMode.MULTI_OR_ALL:
            message = f'Input index to select a {noun}, or type "all" to select all {noun}s:'
        else:
            message = f"Input index to select a {noun}:"

        while True:
            raw = self._read_line(message)
            try:
                indices = resolve_selection(raw, len(candidates), mode)
            except InvalidSelectionError as exc:
                self._echo(f"Invalid selection: {exc}. Try again.")
                continue
            chosen = [candidates[i] for i in indices]
            if len(chosen) == 1:
                self._echo(f"Selected {noun}: {render(chosen[0])}")
            else:
                self._echo(f"Selected all {len(chosen)} {noun}s")
            return chosen

    def confirm(self, question: str) -> bool:
        return self._confirm(question)
