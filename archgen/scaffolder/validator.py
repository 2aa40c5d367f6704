"""Checks that an architecture's structure metadata and templates can generate a project.

Used by ``archgen validate`` to vet a template pack before anyone scaffolds
with it. Each architecture is checked statically (required components and
templates present) and then by a dry-run generation of a sample project.
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import Any, Optional

import jinja2
import yaml
from pydantic import ValidationError

from archgen.core.errors import GenerationError
from archgen.core.metadata import MetadataProvider, default_provider
from archgen.core.models import AdapterConfig, EntityConfig, ProjectConfig, UseCaseConfig
from archgen.core.validation import ValidationResult

from .generator import ProjectGenerator
from .templates import TemplateRenderer

REQUIRED_COMPONENTS = ("model", "port", "useCasePort", "useCase", "application", "resources")

REQUIRED_TEMPLATES = (
    "project/settings.gradle.kts.j2",
    "project/build.gradle.kts.j2",
    "project/Application.java.j2",
    "project/application.yml.j2",
    "adapters/driven/port.java.j2",
    "adapters/driven/adapter.java.j2",
    "adapters/driving/controller.java.j2",
    "usecase/port.java.j2",
    "usecase/impl.java.j2",
    "domain/entity.java.j2",
)

SAMPLE_PROJECT = {"name": "sample-service", "base_package": "com.example.sample"}


def _static_errors(metadata: Any, renderer: TemplateRenderer) -> list[str]:
    errors = list(metadata.validate_structure().errors)
    errors += [
        f"Missing component path: {component}"
        for component in REQUIRED_COMPONENTS
        if component not in metadata.component_paths
    ]
    errors += [
        f"Module path '{direction}' has no matching path template"
        for direction in metadata.module_paths
        if direction not in metadata.path_templates
    ]
    errors += [
        f"Missing template: {template}"
        for template in REQUIRED_TEMPLATES
        if not renderer.has_template(template)
    ]
    return errors


def _sample_generation(
    architecture: Any, provider: MetadataProvider, renderer: TemplateRenderer
) -> list[str]:
    """Generate a sample project with one of each component; errors as messages."""
    project = ProjectConfig(architecture=architecture, **SAMPLE_PROJECT)
    try:
        generator = ProjectGenerator(project, provider=provider, renderer=renderer)
        generator.generate_project()
        adapters = [
            AdapterConfig(
                name=name,
                package_name=generator.default_adapter_package(name, direction),
                type=direction,
                entity_name="Sample",
                technology=technology,
            )
            for name, direction, technology in (
                ("SampleRepository", "driven", "mongodb"),
                ("SampleApi", "driving", "rest"),
            )
            if direction in generator.metadata.path_templates
        ]
        generator.generate(
            adapters=adapters,
            use_cases=[UseCaseConfig(name="CreateSample")],
            entities=[EntityConfig(name="Sample")],
        )
    except (GenerationError, ValidationError, jinja2.TemplateError, yaml.YAMLError) as exc:
        return [f"Sample generation failed: {exc}"]
    return []


def validate_architecture(
    architecture: Any,
    provider: Optional[MetadataProvider] = None,
    renderer: Optional[TemplateRenderer] = None,
) -> ValidationResult:
    """Validate one architecture's metadata and the templates it renders with."""
    provider = provider or default_provider()
    renderer = renderer or TemplateRenderer()
    try:
        metadata = provider.metadata_for(architecture)
    except GenerationError as exc:
        return ValidationResult.failure(str(exc))

    errors = _static_errors(metadata, renderer)
    if not errors:
        errors = _sample_generation(architecture, provider, renderer)
    return ValidationResult.failure(errors) if errors else ValidationResult.success()


def validate_templates(
    provider: Optional[MetadataProvider] = None,
    renderer: Optional[TemplateRenderer] = None,
    architectures: Optional[Iterable[Any]] = None,
) -> dict[str, ValidationResult]:
    """Validate every architecture the provider knows (or just *architectures*)."""
    provider = provider or default_provider()
    renderer = renderer or TemplateRenderer()
    selected = list(architectures) if architectures is not None else list(provider.architectures)
    return {
        getattr(arch, "value", str(arch)): validate_architecture(arch, provider, renderer)
        for arch in selected
    }
