"""Discovery and indexing of every available template."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Callable, TypeVar

from ..core.models import PROJECT_MANIFEST_FILENAME
from ..errors import FileReadWriteError, IdNotFoundError
from .context import Context
from .templates import FileTemplate, ProjectTemplate

T = TypeVar("T", FileTemplate, ProjectTemplate)


class TemplateSet:
    """The file and project templates available to the user.

    Built once with ``TemplateSet().load_file_templates(a).load_project_templates(b)``
    and read-only afterwards. Every template shares this set's :class:`Context`.
    """

    def __init__(self, logger: logging.Logger | None = None) -> None:
        self.context = Context()
        self._logger = logger or logging.getLogger(__name__)
        self._file_templates: dict[str, FileTemplate] = {}
        self._project_templates: dict[str, ProjectTemplate] = {}

    def load_file_templates(self, root: Path) -> TemplateSet:
        paths = read_templates_dir(root, projects=False)
        self._load_from_paths(self._file_templates, paths, FileTemplate.load)
        return self

    def load_project_templates(self, root: Path) -> TemplateSet:
        paths = read_templates_dir(root, projects=True)
        self._load_from_paths(self._project_templates, paths, ProjectTemplate.load)
        return self

    def _load_from_paths(
        self,
        collection: dict[str, T],
        paths: list[Path],
        load: Callable[[Path, Context], T],
    ) -> None:
        for path in paths:
            template = load(path, self.context)

            # first template loaded under an id wins
            if template.name in collection:
                self._logger.warning(
                    f"Found duplicate template id: {template.name!r} "
                    f"({path} ignored, using {collection[template.name].source})"
                )
                continue

            # file and project member ids share one context
            taken = [i for i in template.context_ids() if i in self.context]
            if taken:
                self._logger.warning(
                    f"Found duplicate template id: {taken[0]!r} "
                    f"({path} ignored, id already registered)"
                )
                continue

            template.register()
            collection[template.name] = template
            self._logger.debug(f"Loaded template {template.name!r} from {path}")

    def get_file_template(self, template_id: str) -> FileTemplate:
        try:
            return self._file_templates[template_id]
        except KeyError:
            raise IdNotFoundError(f"{template_id!r} (FILE)") from None

    def get_project_template(self, template_id: str) -> ProjectTemplate:
        try:
            return self._project_templates[template_id]
        except KeyError:
            raise IdNotFoundError(f"{template_id!r} (PROJECT)") from None

    def get_file_templates_all(self) -> list[FileTemplate]:
        return list(self._file_templates.values())

    def get_project_templates_all(self) -> list[ProjectTemplate]:
        return list(self._project_templates.values())


def read_templates_dir(root: Path, projects: bool) -> list[Path]:
    """Recursively list template files under *root*.

    A missing *root* yields no templates. With ``projects`` set, only project
    manifests are returned.
    """
    if not root.is_dir():
        return []

    try:
        entries = sorted(root.iterdir())
    except OSError as e:
        raise FileReadWriteError(f"{root}: {e.strerror or e}") from e

    paths: list[Path] = []
    for entry in entries:
        if entry.is_dir():
            paths.extend(read_templates_dir(entry, projects))
        elif entry.is_file():
            if not projects or entry.name == PROJECT_MANIFEST_FILENAME:
                paths.append(entry)
    return paths
