"""File and project template objects."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path, PurePosixPath
from typing import Union

import yaml
from pydantic import ValidationError

from ..core.models import PROJECT_MANIFEST_FILENAME, ProjectManifest
from ..errors import InvalidProjectConfigError, MissingProjectDirError
from ..rendering.io import read_text
from .context import Context
from .preprocessor import Preprocessor


# Templates compare, hash and sort by name only.
@dataclass(frozen=True, order=True)
class FileTemplate:
    """A template that renders a single file."""

    name: str
    literal: str = field(compare=False, repr=False)
    source: Path = field(compare=False)
    context: Context = field(compare=False, repr=False)

    @classmethod
    def load(cls, path: Path, context: Context) -> FileTemplate:
        """Load a file template from *path*.

        The identifier is taken from a ``SPECIFY NAME`` directive, falling
        back to the file name. The template is not registered until
        :meth:`register` is called.
        """
        preproc = Preprocessor.run(read_text(path))
        name = preproc.id or path.name
        return cls(
            name=name,
            literal=preproc.clean_literal,
            source=path,
            context=context,
        )

    def context_ids(self) -> list[str]:
        return [self.name]

    def register(self) -> None:
        self.context.register(self.name, self.literal)


@dataclass(frozen=True, order=True)
class ProjectTemplate:
    """A template that renders a directory of files.

    Attributes:
        name: Project identifier, the name of the directory holding the manifest
        literals: Output-relative path mapped to the member's template body
        source: Path of the project manifest
        file_template_names: Context identifiers of every member template
    """

    name: str
    literals: dict[str, str] = field(compare=False, repr=False)
    source: Path = field(compare=False)
    file_template_names: list[str] = field(compare=False)
    context: Context = field(compare=False, repr=False)

    @classmethod
    def load(cls, path: Path, context: Context) -> ProjectTemplate:
        """Load a project template from its manifest file at *path*."""
        project_dir = path.parent
        if not project_dir.is_dir():
            raise MissingProjectDirError(str(path))
        name = project_dir.resolve().name
        if not name:
            raise InvalidProjectConfigError(
                f"No directory name found for project at {project_dir}"
            )

        manifest = load_manifest(project_dir / PROJECT_MANIFEST_FILENAME)

        literals: dict[str, str] = {}
        for output_path, source_path in manifest.files.items():
            check_output_path(output_path)
            raw = read_text(project_dir / source_path)
            literals[output_path] = Preprocessor.run(raw).clean_literal

        return cls(
            name=name,
            literals=literals,
            source=path,
            file_template_names=[member_id(name, p) for p in literals],
            context=context,
        )

    def context_ids(self) -> list[str]:
        return list(self.file_template_names)

    def register(self) -> None:
        for output_path, literal in self.literals.items():
            self.context.register(member_id(self.name, output_path), literal)


Template = Union[FileTemplate, ProjectTemplate]


def member_id(project_name: str, output_path: str) -> str:
    """Return the context identifier of a project member template."""
    return f"{project_name}/{output_path}"


def load_manifest(path: Path) -> ProjectManifest:
    raw = read_text(path)
    try:
        data = yaml.safe_load(raw) or {}
        return ProjectManifest.model_validate(data)
    except (yaml.YAMLError, ValidationError) as e:
        raise InvalidProjectConfigError(f"{path}: {e}") from e


def check_output_path(output_path: str) -> None:
    """Reject member output paths that would escape the output directory."""
    parts = PurePosixPath(output_path.replace("\\", "/"))
    if not output_path or parts.is_absolute() or ".." in parts.parts:
        raise InvalidProjectConfigError(
            f"Output path must be relative and inside the project: {output_path!r}"
        )
