"""Template loading, analysis and rendering."""

from .analyzer import get_missing_template_vars, get_missing_vars
from .context import Context
from .preprocessor import Preprocessor
from .renderer import FileRenderer, ProjectRenderer, make_renderer
from .templates import FileTemplate, ProjectTemplate, Template
from .template_set import TemplateSet

__all__ = [
    "Context",
    "FileRenderer",
    "FileTemplate",
    "Preprocessor",
    "ProjectRenderer",
    "ProjectTemplate",
    "Template",
    "TemplateSet",
    "get_missing_template_vars",
    "get_missing_vars",
    "make_renderer",
]
