"""Tests for the shared template Context and template functions."""

from __future__ import annotations

import datetime as dt

import pytest
from jinja2 import nodes

from devinit.errors import IdNotFoundError, TemplateParseError, TemplateRenderError
from devinit.templating import FileRenderer, FileTemplate
from devinit.templating import functions
from devinit.templating.functions import comment_by_lang, lang_by_filename, licence, wrap


# ---------------------------------------------------------------------------
# Context
# ---------------------------------------------------------------------------


class TestContext:
    def test_register_and_render(self, context):
        context.register("greet", "Hello {{ name }}!")
        assert context.render("greet", {"name": "World"}) == "Hello World!"

    def test_register_parses_once(self, context):
        context.register("t", "{{ x }}")
        assert "t" in context
        assert isinstance(context.parsed("t"), nodes.Template)
        assert context.template_ids() == ["t"]

    def test_duplicate_registration(self, context):
        context.register("t", "one")
        with pytest.raises(TemplateParseError):
            context.register("t", "two")
        assert context.render("t", {}) == "one"

    def test_syntax_error(self, context):
        with pytest.raises(TemplateParseError) as exc:
            context.register("broken", "{% if x %}never closed")
        assert exc.value.template_id == "broken"
        assert "broken" not in context

    def test_include_by_id(self, context):
        context.register("inner", "[{{ v }}]")
        context.register("outer", '<{% include "inner" %}>')
        assert context.render("outer", {"v": "1"}) == "<[1]>"

    def test_unknown_id(self, context):
        with pytest.raises(IdNotFoundError):
            context.render("missing", {})
        with pytest.raises(IdNotFoundError):
            context.parsed("missing")

    def test_keeps_trailing_newline(self, context):
        context.register("t", "line\n")
        assert context.render("t", {}) == "line\n"


# ---------------------------------------------------------------------------
# Template functions and filters
# ---------------------------------------------------------------------------


class TestFunctions:
    def test_lang_by_filename(self):
        assert lang_by_filename("main.py") == "python"
        assert lang_by_filename("lib.RS") == "rust"
        assert lang_by_filename("Makefile") == "makefile"
        assert lang_by_filename("CMakeLists.txt") == "cmake"
        assert lang_by_filename("README") is None
        assert lang_by_filename("notes.unknown") is None

    def test_comment_by_lang(self):
        style = comment_by_lang("c")
        assert style == ("/*", " *", " */")
        assert style.block_prefix == " *"
        assert comment_by_lang("python").block_prefix == "#"
        assert comment_by_lang("klingon") is None

    def test_wrap(self):
        assert wrap("aaa bbb ccc", 7) == "aaa bbb\nccc"

    def test_functions_in_templates(self, context):
        context.register(
            "t",
            '{% set c = comment_by_lang(lang_by_filename("x.c")) %}'
            "{{ c.block_start }}|{{ year() }}|{{ 'aa bb' | wrap(2) }}",
        )
        year = dt.date.today().year
        assert context.render("t", {}) == f"/*|{year}|aa\nbb"

    def test_wrap_keeps_line_breaks(self):
        assert wrap("a\nb", 80) == "a\nb"
        assert wrap("first para\n\nsecond para", 6) == "first\npara\n\nsecond\npara"


class _FakeLicence:
    name = "Example Licence"
    template = "Permission is granted.\n\n"
    header = "Copyright notice\r\n"


class TestLicence:
    def test_known_id(self):
        expanded = licence("MIT")
        assert expanded["name"] == "MIT License"
        assert "Permission is hereby granted" in expanded["text"]
        assert not expanded["text"].endswith("\n")

    def test_trailing_newlines_stripped(self, monkeypatch):
        monkeypatch.setattr(functions.spdx_lookup, "by_id", lambda id: _FakeLicence())
        assert licence("X") == {
            "name": "Example Licence",
            "text": "Permission is granted.",
            "header": "Copyright notice",
        }

    def test_header_omitted_when_absent(self, monkeypatch):
        fake = _FakeLicence()
        fake.header = None
        monkeypatch.setattr(functions.spdx_lookup, "by_id", lambda id: fake)
        assert "header" not in licence("X")

    def test_unknown_id_fails_render(self, write_file, context):
        path = write_file("t", '{{ licence("NOT-A-LICENCE").name }}')
        template = FileTemplate.load(path, context)
        template.register()
        with pytest.raises(TemplateRenderError) as exc:
            FileRenderer(template).render()
        assert "NOT-A-LICENCE" in exc.value.reason

    def test_in_template(self, context):
        context.register("t", '{{ licence("MIT").name }}')
        assert context.render("t", {}) == "MIT License"
