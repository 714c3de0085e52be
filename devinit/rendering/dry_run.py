"""Printing of rendered output for ``--dry-run``."""

from __future__ import annotations

import typer

INDENT_PREFIX = "    "


def format_file_render(name: str, render: str) -> str:
    header = typer.style(f'"{name}"', fg=typer.colors.GREEN)
    body = render.replace("\n", f"\n{INDENT_PREFIX}")
    return f"{header}:\n{INDENT_PREFIX}{body}"


def print_file_render(name: str, render: str) -> None:
    typer.echo(format_file_render(name, render))


def print_project_render(outputs: dict[str, str]) -> None:
    for name, render in outputs.items():
        print_file_render(name, render)
