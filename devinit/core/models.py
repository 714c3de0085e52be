"""Domain models for configuration, project manifests and built-in variables."""

from __future__ import annotations

from pathlib import Path

from pydantic import BaseModel, Field

from ..rendering.io import read_text

# Identifier under which built-in variables are exposed to templates.
BUILTIN_VARIABLES_IDENT = "BUILTIN"

# Fixed filename of a project template manifest.
PROJECT_MANIFEST_FILENAME = "templaterc.yml"


class BuiltinVariables(BaseModel):
    """Values computed by devinit itself and injected before rendering."""

    file_name: str = Field(default="", description="Output file name")
    parent_name: str = Field(
        default="", description="Name of the directory containing the output"
    )
    file_contents: str = Field(
        default="", description="Previous contents of the output file, if any"
    )

    @classmethod
    def for_file(cls, output_path: Path) -> BuiltinVariables:
        """Build built-ins for rendering a file template into *output_path*."""
        resolved = output_path.resolve()
        contents = ""
        if resolved.is_file():
            contents = read_text(resolved)
        return cls(
            file_name=resolved.name,
            parent_name=resolved.parent.name,
            file_contents=contents,
        )

    @classmethod
    def for_project(cls, output_dir: Path) -> BuiltinVariables:
        """Build built-ins for rendering a project template into *output_dir*."""
        return cls(parent_name=output_dir.resolve().name)


class ProjectManifest(BaseModel):
    """Contents of a project template's ``templaterc.yml``."""

    files: dict[str, str] = Field(
        ..., description="Output-relative path mapped to source-relative path"
    )


class ConfigFile(BaseModel):
    """Values expected in ``devinitrc.yml``."""

    file_templates_loc: str = Field(..., description="File templates directory")
    project_templates_loc: str = Field(
        ..., description="Project templates directory"
    )


class Config(BaseModel):
    """Resolved configuration, with template roots as absolute paths."""

    source: Path = Field(..., description="Config file that was loaded")
    file_templates_dir: Path
    project_templates_dir: Path
