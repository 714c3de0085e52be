"""CLI argument parsers and validators."""

from __future__ import annotations

import typer


def parse_variable(value: str) -> tuple[str, str]:
    """Parse a variable definition in format KEY=VALUE."""
    if "=" not in value:
        raise typer.BadParameter(f"Must be KEY=VALUE, got: {value!r}")
    key, val = value.split("=", 1)
    if not key:
        raise typer.BadParameter(f"Variable name must not be empty, got: {value!r}")
    return key, val


def parse_variables(values: list[str]) -> dict[str, str]:
    """Parse repeated KEY=VALUE definitions, later ones winning."""
    return dict(map(parse_variable, values))
