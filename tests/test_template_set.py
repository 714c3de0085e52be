"""Tests for template objects and the template set.

Covers:
- File template identifiers from NAME directives and file names
- Project manifests and member registration
- Duplicate identifiers, missing roots and lookups
"""

from __future__ import annotations

import logging

import pytest

from devinit.errors import (
    FileReadWriteError,
    IdNotFoundError,
    InvalidProjectConfigError,
    MissingProjectDirError,
    TemplateParseError,
    TemplateSyntaxError,
)
from devinit.templating.template_set import TemplateSet, read_templates_dir
from devinit.templating.templates import FileTemplate, ProjectTemplate


# ---------------------------------------------------------------------------
# File templates
# ---------------------------------------------------------------------------


class TestFileTemplate:
    def test_name_from_directive(self, write_file, context):
        path = write_file("t.txt", '{: SPECIFY NAME "custom" :}\nbody {{ x }}\n')
        template = FileTemplate.load(path, context)
        assert template.name == "custom"
        assert template.literal == "body {{ x }}\n"
        assert template.source == path

    def test_name_falls_back_to_file_name(self, write_file, context):
        path = write_file("plain.py", "x")
        assert FileTemplate.load(path, context).name == "plain.py"

    def test_load_does_not_register(self, write_file, context):
        template = FileTemplate.load(write_file("a", "x"), context)
        assert "a" not in context
        template.register()
        assert "a" in context

    def test_equality_and_order_by_name(self, write_file, context):
        a = FileTemplate.load(write_file("one/t", "{: SPECIFY NAME a :}\n1"), context)
        a2 = FileTemplate.load(write_file("two/t", "{: SPECIFY NAME a :}\n2"), context)
        b = FileTemplate.load(write_file("three/t", "{: SPECIFY NAME b :}\n3"), context)
        assert a == a2
        assert sorted([b, a]) == [a, b]
        assert len({a, a2, b}) == 2

    def test_missing_file(self, tmp_path, context):
        with pytest.raises(FileReadWriteError):
            FileTemplate.load(tmp_path / "nope", context)


# ---------------------------------------------------------------------------
# Project templates
# ---------------------------------------------------------------------------


class TestProjectTemplate:
    def test_load(self, write_file, context):
        manifest = write_file(
            "proj/templaterc.yml",
            "files:\n  a.txt: tmpl_a\n  sub/b.txt: tmpl_b\n",
        )
        write_file("proj/tmpl_a", "{# header #}\n{{ x }}")
        write_file("proj/tmpl_b", "static")

        template = ProjectTemplate.load(manifest, context)
        assert template.name == "proj"
        assert template.literals == {"a.txt": "{{ x }}", "sub/b.txt": "static"}
        assert template.file_template_names == ["proj/a.txt", "proj/sub/b.txt"]

        template.register()
        assert "proj/a.txt" in context
        assert "proj/sub/b.txt" in context

    def test_missing_project_dir(self, tmp_path, context):
        with pytest.raises(MissingProjectDirError):
            ProjectTemplate.load(tmp_path / "gone" / "templaterc.yml", context)

    def test_invalid_yaml(self, write_file, context):
        manifest = write_file("proj/templaterc.yml", "files: [unclosed\n")
        with pytest.raises(InvalidProjectConfigError):
            ProjectTemplate.load(manifest, context)

    def test_missing_files_key(self, write_file, context):
        manifest = write_file("proj/templaterc.yml", "other: 1\n")
        with pytest.raises(InvalidProjectConfigError):
            ProjectTemplate.load(manifest, context)

    def test_missing_member_source(self, write_file, context):
        manifest = write_file("proj/templaterc.yml", "files:\n  a.txt: absent\n")
        with pytest.raises(FileReadWriteError):
            ProjectTemplate.load(manifest, context)

    @pytest.mark.parametrize("output", ["../escape.txt", "/abs.txt"])
    def test_output_must_stay_inside(self, write_file, context, output):
        manifest = write_file("proj/templaterc.yml", f"files:\n  {output}: src\n")
        write_file("proj/src", "x")
        with pytest.raises(InvalidProjectConfigError):
            ProjectTemplate.load(manifest, context)


# ---------------------------------------------------------------------------
# Template set
# ---------------------------------------------------------------------------


class TestTemplateSet:
    def test_recursive_scan(self, tmp_path, write_file):
        write_file("root/a.txt", "A")
        write_file("root/nested/deeper/b.txt", "B")
        templates = TemplateSet().load_file_templates(tmp_path / "root")
        names = sorted(t.name for t in templates.get_file_templates_all())
        assert names == ["a.txt", "b.txt"]

    def test_missing_root_is_empty(self, tmp_path):
        templates = (
            TemplateSet()
            .load_file_templates(tmp_path / "none")
            .load_project_templates(tmp_path / "none")
        )
        assert templates.get_file_templates_all() == []
        assert templates.get_project_templates_all() == []

    def test_duplicate_first_wins(self, tmp_path, write_file, caplog):
        write_file("root/a.txt", "{: SPECIFY NAME dup :}\nfirst")
        write_file("root/b.txt", "{: SPECIFY NAME dup :}\nsecond")

        with caplog.at_level(logging.WARNING):
            templates = TemplateSet().load_file_templates(tmp_path / "root")

        assert len(templates.get_file_templates_all()) == 1
        template = templates.get_file_template("dup")
        assert template.literal == "first"
        assert templates.context.render("dup", {}) == "first"
        assert "duplicate template id" in caplog.text

    def test_injected_logger(self, tmp_path, write_file, caplog):
        write_file("root/a.txt", "{: SPECIFY NAME dup :}\n1")
        write_file("root/b.txt", "{: SPECIFY NAME dup :}\n2")
        logger = logging.getLogger("test.injected")

        with caplog.at_level(logging.WARNING, logger="test.injected"):
            TemplateSet(logger=logger).load_file_templates(tmp_path / "root")

        assert [r.name for r in caplog.records] == ["test.injected"]

    def test_project_templates_only_use_manifests(self, tmp_path, write_file):
        write_file("projects/app/templaterc.yml", "files:\n  out.txt: in.tpl\n")
        write_file("projects/app/in.tpl", "{{ v }}")
        write_file("projects/stray.txt", "ignored")

        paths = read_templates_dir(tmp_path / "projects", projects=True)
        assert [p.name for p in paths] == ["templaterc.yml"]

        templates = TemplateSet().load_project_templates(tmp_path / "projects")
        project = templates.get_project_template("app")
        assert project.file_template_names == ["app/out.txt"]
        assert "stray.txt" not in templates.context

    def test_file_and_project_share_context(self, tmp_path, write_file):
        write_file("files/part.txt", "{: SPECIFY NAME part :}\n[{{ v }}]")
        write_file("projects/app/templaterc.yml", "files:\n  out.txt: in.tpl\n")
        write_file("projects/app/in.tpl", '{% include "part" %}')

        templates = (
            TemplateSet()
            .load_file_templates(tmp_path / "files")
            .load_project_templates(tmp_path / "projects")
        )
        assert templates.context.render("app/out.txt", {"v": "1"}) == "[1]"

    def test_lookup_not_found(self):
        templates = TemplateSet()
        with pytest.raises(IdNotFoundError, match="FILE"):
            templates.get_file_template("x")
        with pytest.raises(IdNotFoundError, match="PROJECT"):
            templates.get_project_template("x")

    def test_parse_error_aborts_load(self, tmp_path, write_file):
        write_file("root/bad.txt", "{% for %}")
        with pytest.raises(TemplateParseError):
            TemplateSet().load_file_templates(tmp_path / "root")

    def test_directive_error_aborts_load(self, tmp_path, write_file):
        write_file("root/bad.txt", '{: SPECIFY NAME oops" :}')
        with pytest.raises(TemplateSyntaxError):
            TemplateSet().load_file_templates(tmp_path / "root")

    def test_binary_file_is_a_read_error(self, tmp_path):
        root = tmp_path / "root"
        root.mkdir()
        (root / "logo.png").write_bytes(b"\x89PNG\r\n\x1a\n\xff\xfe")
        with pytest.raises(FileReadWriteError, match="logo.png"):
            TemplateSet().load_file_templates(root)

    def test_file_id_clashing_with_project_member(self, tmp_path, write_file, caplog):
        write_file("files/readme.txt", "{: SPECIFY NAME app/README.md :}\nfile")
        write_file("projects/app/templaterc.yml", "files:\n  README.md: r.tpl\n")
        write_file("projects/app/r.tpl", "project")

        with caplog.at_level(logging.WARNING):
            templates = (
                TemplateSet()
                .load_file_templates(tmp_path / "files")
                .load_project_templates(tmp_path / "projects")
            )

        assert templates.context.render("app/README.md", {}) == "file"
        assert templates.get_project_templates_all() == []
        assert "'app/README.md'" in caplog.text
