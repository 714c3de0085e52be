"""Shared pytest fixtures for the devinit test suite.

Provides reusable fixtures for:
- Writing template files below a temporary directory
- A fresh template Context
- A complete config directory with file and project templates
"""

from __future__ import annotations

import textwrap
from pathlib import Path
from typing import Callable

import pytest

from devinit.templating.context import Context

WriteFile = Callable[[str, str], Path]


@pytest.fixture
def write_file(tmp_path: Path) -> WriteFile:
    """Write *text* to *relative* below ``tmp_path``, creating directories."""

    def _write(relative: str, text: str) -> Path:
        path = tmp_path / relative
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(text.encode("utf-8"))
        return path

    return _write


@pytest.fixture
def context() -> Context:
    return Context()


@pytest.fixture
def config_file(write_file: WriteFile) -> Path:
    """A devinitrc.yml with one project and two file templates."""
    write_file(
        "templates/file/greeting.txt",
        '{: SPECIFY NAME "greeting" :}\nHello {{ name }}!\n',
    )
    write_file(
        "templates/file/header.txt",
        "{# shows the built-ins #}\n"
        "{{ BUILTIN.file_name }} in {{ BUILTIN.parent_name }}\n",
    )
    write_file(
        "templates/project/app/templaterc.yml",
        textwrap.dedent(
            """\
            files:
              README.md: readme.tpl
              src/main.py: main.tpl
            """
        ),
    )
    write_file("templates/project/app/readme.tpl", "# {{ project }}\n")
    write_file("templates/project/app/main.tpl", 'print("{{ message }}")\n')
    return write_file(
        "devinitrc.yml",
        "file_templates_loc: templates/file\n"
        "project_templates_loc: templates/project\n",
    )
