"""Binding variables to templates and producing rendered text."""

from __future__ import annotations

import logging
import re
from typing import Any, Union

import jinja2

from ..core.models import BUILTIN_VARIABLES_IDENT, BuiltinVariables
from ..errors import (
    IdNotFoundError,
    TemplateRenderError,
    UnknownFunctionError,
    UnknownVariableError,
)
from .analyzer import get_called_names
from .context import Context
from .templates import FileTemplate, ProjectTemplate, Template, member_id

logger = logging.getLogger(__name__)

_UNDEFINED_NAME = re.compile(r"^'([^']+)' is undefined$")


class _BaseRenderer:
    def __init__(self, context: Context) -> None:
        self.context = context
        self.var_context: dict[str, Any] = {}

    def add_variable(self, key: str, value: str) -> None:
        """Bind *key* to *value*, replacing any previous binding."""
        self.var_context[key] = value

    def set_builtin_variables(self, values: BuiltinVariables) -> None:
        self.var_context[BUILTIN_VARIABLES_IDENT] = values.model_dump()

    def _render_id(self, template_id: str) -> str:
        try:
            return self.context.render(template_id, self.var_context)
        except IdNotFoundError:
            raise
        except jinja2.UndefinedError as e:
            raise self._undefined_error(template_id, e) from e
        except (jinja2.TemplateError, TypeError, ValueError, ArithmeticError) as e:
            raise TemplateRenderError(template_id, str(e)) from e

    def _undefined_error(
        self, template_id: str, error: jinja2.UndefinedError
    ) -> TemplateRenderError:
        match = _UNDEFINED_NAME.match(str(error))
        if match is None:
            return TemplateRenderError(template_id, str(error))

        name = match.group(1)
        if name in get_called_names(self.context, template_id):
            return UnknownFunctionError(name, template_id)
        return UnknownVariableError(name, template_id)


class FileRenderer(_BaseRenderer):
    """Renders a file template to a single string."""

    def __init__(self, template: FileTemplate) -> None:
        super().__init__(template.context)
        self.template = template

    def render(self) -> str:
        logger.debug(f"Rendering file template {self.template.name!r}")
        return self._render_id(self.template.name)


class ProjectRenderer(_BaseRenderer):
    """Renders every member of a project template."""

    def __init__(self, template: ProjectTemplate) -> None:
        super().__init__(template.context)
        self.template = template

    def render(self) -> dict[str, str]:
        """Render each member, keyed by output-relative path.

        A failing member fails the whole render and no outputs are returned.
        """
        logger.debug(f"Rendering project template {self.template.name!r}")
        outputs: dict[str, str] = {}
        for output_path in self.template.literals:
            outputs[output_path] = self._render_id(
                member_id(self.template.name, output_path)
            )
        return outputs


Renderer = Union[FileRenderer, ProjectRenderer]


def make_renderer(template: Template) -> Renderer:
    if isinstance(template, FileTemplate):
        return FileRenderer(template)
    return ProjectRenderer(template)
