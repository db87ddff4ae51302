from __future__ import annotations

from typing import Protocol

import typer

from adsquery.util import is_yes


class Prompter(Protocol):
    def ask(self, text: str, *, hide: bool = False) -> str:
        """Return the operator's answer, stripped. May be empty."""

    def confirm(self, text: str) -> bool:
        """Ask a yes/no question. Anything but y/yes is a no."""


class TyperPrompter:
    def ask(self, text: str, *, hide: bool = False) -> str:
        answer = typer.prompt(text, default="", show_default=False, hide_input=hide)
        return str(answer or "").strip()

    def confirm(self, text: str) -> bool:
        return is_yes(self.ask(f"{text} (yes/no)"))


def banner(title: str, subtitle: str | None = None) -> None:
    typer.echo("=" * 40)
    typer.echo(title)
    if subtitle:
        typer.echo(subtitle)
    typer.echo("=" * 40)


def ok(msg: str) -> None:
    typer.echo(f"OK {msg}")


def warn(msg: str) -> None:
    typer.echo(f"WARN: {msg}")


def error(msg: str) -> None:
    typer.echo(f"ERROR: {msg}")
