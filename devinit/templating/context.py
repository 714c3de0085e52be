"""Shared registry of parsed templates, backed by a Jinja2 environment."""

from __future__ import annotations

import logging
import threading
from typing import Any, Callable

import jinja2
from jinja2 import Environment, FunctionLoader, StrictUndefined, nodes

from ..errors import IdNotFoundError, TemplateParseError
from .functions import TEMPLATE_FILTERS, TEMPLATE_FUNCTIONS

logger = logging.getLogger(__name__)


class Context:
    """Registration surface onto which every template body is parsed once.

    Templates are addressed by identifier, so ``{% include "id" %}`` and
    ``{% extends "id" %}`` resolve against other registered templates. All
    registration happens while template sets load, before any render.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._sources: dict[str, str] = {}
        self._parsed: dict[str, nodes.Template] = {}

        self.env = Environment(
            loader=FunctionLoader(self._load_source),
            undefined=StrictUndefined,
            autoescape=False,
            trim_blocks=True,
            lstrip_blocks=True,
            keep_trailing_newline=True,
        )
        self.env.globals.update(TEMPLATE_FUNCTIONS)
        self.env.filters.update(TEMPLATE_FILTERS)

    def _load_source(
        self, template_id: str
    ) -> tuple[str, None, Callable[[], bool]] | None:
        source = self._sources.get(template_id)
        if source is None:
            return None
        return source, None, lambda: True

    def register(self, template_id: str, source: str) -> None:
        """Parse *source* and register it under *template_id*.

        Args:
            template_id: Unique identifier of the template
            source: Template body, already preprocessed
        """
        with self._lock:
            if template_id in self._sources:
                raise TemplateParseError(template_id, "template id is already registered")
            try:
                parsed = self.env.parse(source, name=template_id)
            except jinja2.TemplateSyntaxError as e:
                raise TemplateParseError(
                    template_id, f"line {e.lineno}: {e.message}"
                ) from e

            self._sources[template_id] = source
            self._parsed[template_id] = parsed

        logger.debug(f"Registered template {template_id!r}")

    def __contains__(self, template_id: object) -> bool:
        return template_id in self._sources

    def template_ids(self) -> list[str]:
        with self._lock:
            return list(self._sources)

    def parsed(self, template_id: str) -> nodes.Template:
        """Return the parsed structure of a registered template."""
        with self._lock:
            try:
                return self._parsed[template_id]
            except KeyError:
                raise IdNotFoundError(repr(template_id)) from None

    def render(self, template_id: str, variables: dict[str, Any]) -> str:
        """Evaluate a registered template with *variables*.

        Jinja2 evaluation errors propagate unchanged to the caller.
        """
        with self._lock:
            if template_id not in self._sources:
                raise IdNotFoundError(repr(template_id))
            template = self.env.get_template(template_id)
            return template.render(variables)
