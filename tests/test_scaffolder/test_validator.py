"""Tests for architecture and template validation (archgen.scaffolder.validator)."""

from __future__ import annotations

from pathlib import Path

import pytest

from archgen.core.metadata import MetadataProvider
from archgen.core.models import ArchitectureType
from archgen.scaffolder.templates import TemplateRenderer
from archgen.scaffolder.validator import validate_architecture, validate_templates


pytestmark = pytest.mark.unit


class TestValidateArchitecture:
    @pytest.mark.parametrize("architecture", list(ArchitectureType))
    def test_builtin_architectures_are_valid(self, architecture):
        result = validate_architecture(architecture)
        assert result.valid, result.all_errors

    def test_missing_component_paths(self, custom_provider: MetadataProvider):
        result = validate_architecture("hexagonal-single", provider=custom_provider)
        assert not result.valid
        assert "Missing component path: port" in result.errors
        assert "Missing component path: model" not in result.errors

    def test_unknown_architecture(self, custom_provider: MetadataProvider):
        result = validate_architecture("layered", provider=custom_provider)
        assert not result.valid
        assert "layered" in result.first_error

    def test_broken_template_fails_sample_generation(self, tmp_path: Path):
        override = tmp_path / "domain" / "entity.java.j2"
        override.parent.mkdir(parents=True)
        override.write_text("package {{ no_such_variable }};\n")

        result = validate_architecture("clean", renderer=TemplateRenderer(tmp_path))

        assert not result.valid
        assert result.first_error.startswith("Sample generation failed:")
        assert "no_such_variable" in result.first_error


class TestValidateTemplates:
    def test_all_builtin(self):
        results = validate_templates()
        assert set(results) == {a.value for a in ArchitectureType}
        assert all(r.valid for r in results.values())

    def test_selected_only(self):
        results = validate_templates(architectures=["clean", ArchitectureType.LAYERED])
        assert list(results) == ["clean", "layered"]

    def test_provider_architectures(self, custom_provider: MetadataProvider):
        results = validate_templates(provider=custom_provider)
        assert list(results) == ["hexagonal-single"]
        assert not results["hexagonal-single"].valid
