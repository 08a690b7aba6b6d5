"""Operator prompts.

Every prompt takes an explicit `interactive` flag and returns its default
immediately when it is False, so CI runs never block on stdin.
"""

from __future__ import annotations

import os
from collections.abc import Mapping, Sequence
from typing import Protocol

import typer

_CI_VALUES = ("true", "1")


def is_interactive(yes: bool, env: Mapping[str, str] | None = None) -> bool:
    """False when `--yes` was given or a CI indicator is set."""
    environ = os.environ if env is None else env
    ci = environ.get("CI", "").strip().lower()
    return not yes and ci not in _CI_VALUES


class Prompter(Protocol):
    def confirm(self, message: str, *, default: bool, interactive: bool) -> bool: ...

    def text(self, message: str, *, default: str, interactive: bool) -> str: ...

    def choose(
        self,
        message: str,
        options: Sequence[str],
        *,
        interactive: bool,
    ) -> int | None:
        """Index of the selected option, None when not interactive."""
        ...


class TyperPrompter:
    """Prompts on the terminal through typer."""

    def confirm(self, message: str, *, default: bool, interactive: bool) -> bool:
        if not interactive:
            return default
        return typer.confirm(message, default=default)

    def text(self, message: str, *, default: str, interactive: bool) -> str:
        if not interactive:
            return default
        answer: str = typer.prompt(message, default=default, show_default=bool(default))
        return answer.strip()

    def choose(
        self,
        message: str,
        options: Sequence[str],
        *,
        interactive: bool,
    ) -> int | None:
        if not interactive or not options:
            return None
        typer.echo(message)
        for idx, option in enumerate(options, start=1):
            typer.echo(f"  {idx}. {option}")
        while True:
            choice: int = typer.prompt("Enter choice", type=int)
            if 1 <= choice <= len(options):
                return choice - 1
            typer.echo(f"Error: {choice} is not in the range 1-{len(options)}.", err=True)
