"""Functions and filters available inside every template."""

from __future__ import annotations

import datetime as dt
import textwrap
from pathlib import PurePath
from typing import Any, Callable, NamedTuple

import spdx_lookup

EXT_BY_LANG_ID: dict[str, str] = {
    "bat": "batch",
    "c": "c",
    "h": "c",
    "clj": "clojure",
    "cmake": "cmake",
    "cl": "common-lisp",
    "cc": "cpp",
    "cpp": "cpp",
    "cxx": "cpp",
    "c++": "cpp",
    "hpp": "cpp",
    "hxx": "cpp",
    "h++": "cpp",
    "cs": "csharp",
    "css": "css",
    "dart": "dart",
    "comp": "glsl",
    "frag": "glsl",
    "geom": "glsl",
    "glsl": "glsl",
    "tesc": "glsl",
    "tese": "glsl",
    "vert": "glsl",
    "go": "go",
    "haml": "haml",
    "handlebars": "handlebars",
    "hbs": "handlebars",
    "hlsl": "hlsl",
    "html": "html",
    "ini": "ini",
    "java": "java",
    "js": "javascript",
    "cjs": "javascript",
    "mjs": "javascript",
    "jsx": "javascript",
    "jinja": "jinja",
    "jinja2": "jinja",
    "json": "json",
    "jsonc": "jsonc",
    "kt": "kotlin",
    "less": "less",
    "lua": "lua",
    "md": "markdown",
    "pl": "perl",
    "py": "python",
    "pyc": "python",
    "pyo": "python",
    "rkt": "racket",
    "rb": "ruby",
    "rs": "rust",
    "sass": "sass",
    "sc": "scala",
    "scala": "scala",
    "scss": "scss",
    "sh": "shell",
    "sql": "sql",
    "swift": "swift",
    "tex": "tex",
    "toml": "toml",
    "ts": "typescript",
    "cts": "typescript",
    "mts": "typescript",
    "tsx": "typescript",
    "xhtml": "xhtml",
    "xml": "xml",
    "yaml": "yaml",
    "yml": "yaml",
}

FILENAME_BY_LANG_ID: dict[str, str] = {
    "Makefile": "makefile",
    "CMakeLists.txt": "cmake",
}


class CommentStyle(NamedTuple):
    """Block comment delimiters, e.g. ``("/*", " *", " */")`` for C."""

    block_start: str
    block_prefix: str
    block_end: str


_C_STYLE = CommentStyle("/*", " *", " */")
_HASH_STYLE = CommentStyle("", "#", "")
_XML_STYLE = CommentStyle("<!--", "   ", "-->")

COMMENTS_BY_LANG_ID: dict[str, CommentStyle] = {
    "batch": CommentStyle("", "REM", ""),
    "c": _C_STYLE,
    "clojure": CommentStyle("", ";;", ""),
    "cmake": _HASH_STYLE,
    "common-lisp": CommentStyle("", ";;", ""),
    "cpp": _C_STYLE,
    "csharp": _C_STYLE,
    "css": _C_STYLE,
    "dart": _C_STYLE,
    "glsl": _C_STYLE,
    "go": _C_STYLE,
    "haml": CommentStyle("", "-#", ""),
    "handlebars": CommentStyle("{{!", "   ", "}}"),
    "hlsl": _C_STYLE,
    "html": _XML_STYLE,
    "ini": _HASH_STYLE,
    "java": _C_STYLE,
    "javascript": _C_STYLE,
    "jinja": CommentStyle("{#", "   ", "#}"),
    "json": _C_STYLE,
    "jsonc": _C_STYLE,
    "kotlin": _C_STYLE,
    "less": _C_STYLE,
    "lua": CommentStyle("", "--", ""),
    "makefile": _HASH_STYLE,
    "markdown": CommentStyle("", "", ""),
    "perl": _HASH_STYLE,
    "python": _HASH_STYLE,
    "racket": CommentStyle("#|", "   ", "|#"),
    "ruby": _HASH_STYLE,
    "rust": _C_STYLE,
    "sass": _C_STYLE,
    "scala": _C_STYLE,
    "scss": _C_STYLE,
    "shell": _HASH_STYLE,
    "sql": CommentStyle("", "--", ""),
    "swift": _C_STYLE,
    "tex": CommentStyle("", "%", ""),
    "toml": _HASH_STYLE,
    "typescript": _C_STYLE,
    "xhtml": _XML_STYLE,
    "xml": _XML_STYLE,
    "yaml": _HASH_STYLE,
}


def year() -> int:
    """Return the current year."""
    return dt.date.today().year


def lang_by_filename(filename: str) -> str | None:
    """Return the language id for *filename*, from its extension or name."""
    path = PurePath(filename)
    if path.name in FILENAME_BY_LANG_ID:
        return FILENAME_BY_LANG_ID[path.name]
    if not path.suffix:
        return None
    return EXT_BY_LANG_ID.get(path.suffix[1:].lower())


def comment_by_lang(id: str) -> CommentStyle | None:
    """Return the comment style for a language id."""
    return COMMENTS_BY_LANG_ID.get(id)


def licence(id: str) -> dict[str, str]:
    """Expand an SPDX licence id into its name, full text and header.

    ``header`` is only present for licences that define a standard notice.
    """
    found = spdx_lookup.by_id(id)
    if found is None:
        raise ValueError(f"Unknown SPDX licence id: {id!r}")

    expanded = {"name": found.name, "text": _strip_trailing_newline(found.template)}
    header = getattr(found, "header", None)
    if header:
        expanded["header"] = _strip_trailing_newline(header)
    return expanded


def _strip_trailing_newline(text: str) -> str:
    return text.rstrip("\r\n")


def wrap(text: str, len: int) -> str:
    """Wrap *text* onto lines no longer than *len* characters.

    Existing line breaks, including blank lines, are kept.
    """
    return "\n".join(textwrap.fill(line, width=len) for line in text.splitlines())


TEMPLATE_FUNCTIONS: dict[str, Callable[..., Any]] = {
    "year": year,
    "lang_by_filename": lang_by_filename,
    "comment_by_lang": comment_by_lang,
    "licence": licence,
}

TEMPLATE_FILTERS: dict[str, Callable[..., Any]] = {
    "wrap": wrap,
}
