"""Tests for the Jinja2 template renderer and its custom filters."""

from __future__ import annotations

from pathlib import Path

import pytest
from jinja2 import TemplateNotFound, UndefinedError

from archgen.scaffolder.templates import TemplateRenderer, _reactive_type_filter


pytestmark = pytest.mark.unit


# ---------------------------------------------------------------------------
# Filters
# ---------------------------------------------------------------------------


class TestReactiveTypeFilter:
    @pytest.mark.parametrize(
        "value, reactive, many, mutiny, expected",
        [
            ("User", True, False, False, "Mono<User>"),
            ("User", True, True, False, "Flux<User>"),
            ("User", True, False, True, "Uni<User>"),
            ("User", True, True, True, "Multi<User>"),
            ("void", True, False, False, "Mono<Void>"),
            ("void", True, False, True, "Uni<Void>"),
            ("User", False, False, False, "User"),
            ("User", False, True, False, "List<User>"),
            ("void", False, False, False, "void"),
        ],
    )
    def test_wrapping(self, value, reactive, many, mutiny, expected):
        assert _reactive_type_filter(value, reactive, many=many, mutiny=mutiny) == expected


class TestRendererFilters:
    @pytest.fixture
    def renderer(self) -> TemplateRenderer:
        return TemplateRenderer()

    def test_case_filters(self, renderer: TemplateRenderer):
        output = renderer.render_string(
            "{{ n | pascal_case }} {{ n | camel_case }} {{ n | snake_case }} {{ n | kebab_case }}",
            {"n": "user-profile"},
        )
        assert output == "UserProfile userProfile user_profile user-profile"

    def test_package_path(self, renderer: TemplateRenderer):
        assert renderer.render_string("{{ p | package_path }}", {"p": "com.example"}) == "com/example"

    def test_reactive_type_in_template(self, renderer: TemplateRenderer):
        output = renderer.render_string("{{ 'User' | reactive_type(true, many=true) }}", {})
        assert output == "Flux<User>"


# ---------------------------------------------------------------------------
# Rendering
# ---------------------------------------------------------------------------


class TestTemplateRenderer:
    def test_lists_bundled_templates(self):
        templates = TemplateRenderer().list_templates()
        assert "adapters/driven/adapter.java.j2" in templates
        assert "project/settings.gradle.kts.j2" in templates
        assert templates == sorted(templates)

    def test_list_templates_prefix(self):
        config_templates = TemplateRenderer().list_templates("config/")
        assert config_templates == [
            "config/mongodb.yml.j2",
            "config/postgresql.yml.j2",
            "config/redis.yml.j2",
            "config/rest.yml.j2",
        ]

    def test_has_template(self):
        renderer = TemplateRenderer()
        assert renderer.has_template("domain/entity.java.j2")
        assert not renderer.has_template("config/kafka.yml.j2")

    def test_missing_template_raises(self):
        with pytest.raises(TemplateNotFound):
            TemplateRenderer().render("nope.j2", {})

    def test_undefined_variable_is_error(self):
        with pytest.raises(UndefinedError):
            TemplateRenderer().render_string("package {{ package }};", {})

    def test_keeps_trailing_newline(self):
        assert TemplateRenderer().render_string("x\n", {}) == "x\n"

    def test_local_directory_overrides_bundled(self, tmp_path: Path):
        override = tmp_path / "domain" / "entity.java.j2"
        override.parent.mkdir(parents=True)
        override.write_text("// custom {{ entity.name }}\n")
        renderer = TemplateRenderer(tmp_path)

        assert renderer.template_dir == tmp_path
        assert renderer.render("domain/entity.java.j2", {"entity": {"name": "User"}}) == "// custom User\n"
        # Templates the local directory lacks still come from the bundled set.
        assert renderer.has_template("usecase/port.java.j2")
