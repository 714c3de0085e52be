"""Main CLI application."""

from __future__ import annotations

import json
import logging
from contextlib import contextmanager
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Iterator, Optional

import typer
from typing_extensions import Annotated

from ..core.config import load_config
from ..core.models import BuiltinVariables
from ..errors import DevinitError
from ..rendering import dry_run, io
from ..templating import TemplateSet, get_missing_vars, make_renderer
from ..templating.templates import FileTemplate, Template
from .parsers import parse_variables

logger = logging.getLogger(__name__)

app = typer.Typer(
    name="devinit",
    help="Initialise files and projects from Jinja2 templates.",
    no_args_is_help=True,
)


class TemplateKind(str, Enum):
    FILE = "file"
    PROJECT = "project"


@dataclass
class CliState:
    config_path: Optional[Path] = None


@contextmanager
def handle_errors() -> Iterator[None]:
    """Convert devinit errors into a logged message and an exit code."""
    try:
        yield
    except DevinitError as e:
        logger.error(e.describe())
        raise typer.Exit(code=e.exit_code) from e


def load_template_set(state: CliState) -> TemplateSet:
    config = load_config(state.config_path)
    logger.debug(
        f"Template roots: {config.file_templates_dir}, {config.project_templates_dir}"
    )
    return (
        TemplateSet()
        .load_file_templates(config.file_templates_dir)
        .load_project_templates(config.project_templates_dir)
    )


@app.callback()
def configure(
    ctx: typer.Context,
    config: Annotated[
        Optional[Path],
        typer.Option(
            "--config",
            help="Path to devinitrc.yml (default: system locations).",
            metavar="PATH",
        ),
    ] = None,
    verbose: Annotated[
        bool,
        typer.Option(
            "--verbose",
            "-v",
            help="Enable verbose logging.",
        ),
    ] = False,
) -> None:
    """Initialise files and projects from Jinja2 templates."""
    # Configure logging
    logging.basicConfig(
        level=logging.INFO if verbose else logging.WARNING,
        format="[%(levelname)s] %(message)s",
    )
    ctx.obj = CliState(config_path=config)


def run_template(
    state: CliState,
    kind: TemplateKind,
    name: str,
    path: Optional[Path],
    dry_run_: bool,
    list_vars: bool,
    parsable: bool,
    assert_empty: bool,
    variables: list[str],
) -> None:
    selected = sum([path is not None, dry_run_, list_vars])
    if selected != 1:
        raise typer.BadParameter(
            "Exactly one of --path, --dry-run or --list-vars is required"
        )
    definitions = parse_variables(variables)

    with handle_errors():
        templates = load_template_set(state)
        template: Template
        if kind is TemplateKind.FILE:
            template = templates.get_file_template(name)
        else:
            template = templates.get_project_template(name)

        if list_vars:
            remaining = [v for v in get_missing_vars(template) if v not in definitions]
            if parsable:
                typer.echo(json.dumps(remaining))
            else:
                for var in remaining:
                    typer.echo(var)
            return

        renderer = make_renderer(template)
        for key, value in definitions.items():
            renderer.add_variable(key, value)

        if isinstance(template, FileTemplate):
            builtins = BuiltinVariables.for_file(path) if path else BuiltinVariables()
        else:
            builtins = BuiltinVariables.for_project(path) if path else BuiltinVariables()
        renderer.set_builtin_variables(builtins)

        output = renderer.render()

        if dry_run_:
            if isinstance(output, dict):
                dry_run.print_project_render(output)
            else:
                dry_run.print_file_render(template.name, output)
        elif isinstance(output, dict):
            io.write_project_output(path, output, assert_empty=assert_empty)
        else:
            io.write_file_output(path, output, assert_empty=assert_empty)


PathOption = Annotated[
    Optional[Path],
    typer.Option("--path", "-p", help="Write output to PATH.", metavar="PATH"),
]
DryRunOption = Annotated[
    bool,
    typer.Option("--dry-run", help="Print rendered output instead of writing it."),
]
ListVarsOption = Annotated[
    bool,
    typer.Option(
        "--list-vars",
        help="List the variables the template needs that are not given with -D.",
    ),
]
ParsableOption = Annotated[
    bool,
    typer.Option("--parsable", help="Print machine-readable JSON output."),
]
AssertEmptyOption = Annotated[
    bool,
    typer.Option(
        "--assert-empty",
        help="Fail instead of writing into a non-empty file or directory.",
    ),
]
VariableOption = Annotated[
    list[str],
    typer.Option(
        "--define",
        "-D",
        help="Define template variable KEY as VALUE. Repeatable.",
        metavar="KEY=VALUE",
    ),
]
NameArgument = Annotated[str, typer.Argument(help="Template id.", metavar="NAME")]


@app.command("file")
def file_command(
    ctx: typer.Context,
    name: NameArgument,
    path: PathOption = None,
    dry_run_: DryRunOption = False,
    list_vars: ListVarsOption = False,
    parsable: ParsableOption = False,
    assert_empty: AssertEmptyOption = False,
    variables: VariableOption = [],
) -> None:
    """Render a file template."""
    run_template(
        ctx.obj, TemplateKind.FILE, name, path, dry_run_, list_vars,
        parsable, assert_empty, variables,
    )


@app.command("project")
def project_command(
    ctx: typer.Context,
    name: NameArgument,
    path: PathOption = None,
    dry_run_: DryRunOption = False,
    list_vars: ListVarsOption = False,
    parsable: ParsableOption = False,
    assert_empty: AssertEmptyOption = False,
    variables: VariableOption = [],
) -> None:
    """Render a project template into a directory."""
    run_template(
        ctx.obj, TemplateKind.PROJECT, name, path, dry_run_, list_vars,
        parsable, assert_empty, variables,
    )


app.command("f", hidden=True, help="Alias of 'file'.")(file_command)
app.command("p", hidden=True, help="Alias of 'project'.")(project_command)


@app.command("list")
def list_command(
    ctx: typer.Context,
    parsable: ParsableOption = False,
) -> None:
    """List every available template."""
    with handle_errors():
        templates = load_template_set(ctx.obj)

    file_templates = sorted(templates.get_file_templates_all())
    project_templates = sorted(templates.get_project_templates_all())

    if parsable:
        entries = [
            {"name": t.name, "source": str(t.source), "kind": TemplateKind.FILE.value}
            for t in file_templates
        ] + [
            {"name": t.name, "source": str(t.source), "kind": TemplateKind.PROJECT.value}
            for t in project_templates
        ]
        typer.echo(json.dumps(entries))
        return

    typer.echo("File templates:")
    for t in file_templates:
        typer.echo(f"    {t.name}  ({t.source})")
    typer.echo("Project templates:")
    for t in project_templates:
        typer.echo(f"    {t.name}  ({t.source})")


def main() -> None:
    """Entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
