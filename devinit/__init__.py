"""Devinit - template-driven file and project scaffolding.

Renders Jinja2 file and project templates with variables supplied on the
command line.
"""

__version__ = "0.1.0"

import logging

# silent unless the CLI (or an embedding app) configures logging
logging.getLogger(__name__).addHandler(logging.NullHandler())

from .cli import main

__all__ = ["main"]
