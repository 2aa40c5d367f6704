"""Shared pytest fixtures for the archgen test suite.

Provides reusable fixtures for:
- Temporary project directories
- Project configurations for the common architecture/framework combinations
- A small custom structure.yml and a provider built from it
- Generators wired to the built-in metadata
"""

from __future__ import annotations

import textwrap
from datetime import datetime
from pathlib import Path
from typing import Any, Callable

import pytest

from archgen.core.metadata import MetadataProvider, load_structure_metadata
from archgen.core.models import ArchitectureType, ProjectConfig
from archgen.scaffolder.generator import ProjectGenerator


# ---------------------------------------------------------------------------
# Paths & Directories
# ---------------------------------------------------------------------------

@pytest.fixture
def tmp_project_dir(tmp_path: Path) -> Path:
    """Temporary directory for generated projects (auto-cleanup)."""
    project_dir = tmp_path / "user-service"
    project_dir.mkdir()
    yield project_dir


# ---------------------------------------------------------------------------
# Project configuration
# ---------------------------------------------------------------------------

FIXED_CREATED_AT = datetime(2024, 5, 1, 12, 30, 0)


@pytest.fixture
def make_project() -> Callable[..., ProjectConfig]:
    """Factory for ProjectConfig with sensible defaults and a fixed timestamp."""

    def _make(**overrides: Any) -> ProjectConfig:
        fields: dict[str, Any] = {
            "name": "user-service",
            "base_package": "com.example.users",
            "architecture": ArchitectureType.HEXAGONAL_SINGLE,
            "created_at": FIXED_CREATED_AT,
        }
        fields.update(overrides)
        return ProjectConfig(**fields)

    return _make


@pytest.fixture
def project_config(make_project) -> ProjectConfig:
    """Reactive Spring project on the single-module hexagonal layout."""
    return make_project()


@pytest.fixture
def generator(project_config: ProjectConfig) -> ProjectGenerator:
    return ProjectGenerator(project_config)


# ---------------------------------------------------------------------------
# Custom structure metadata
# ---------------------------------------------------------------------------

CUSTOM_STRUCTURE_YML = textwrap.dedent("""\
    architecture: hexagonal-single
    pathTemplates:
      driven: infrastructure/adapter/out/{name}
      driving: infrastructure/adapter/in/{name}
    componentPaths:
      model: domain/model
    layerDependencies:
      domain: []
      infrastructure: [domain]
""")


@pytest.fixture
def custom_structure_yml() -> str:
    return CUSTOM_STRUCTURE_YML


@pytest.fixture
def custom_provider(custom_structure_yml: str) -> MetadataProvider:
    """Provider that knows only the custom hexagonal-single structure."""
    metadata = load_structure_metadata(custom_structure_yml)
    return MetadataProvider({ArchitectureType.HEXAGONAL_SINGLE: metadata})


@pytest.fixture
def template_pack(tmp_path: Path, custom_structure_yml: str) -> Path:
    """A local template pack overriding hexagonal-single only."""
    root = tmp_path / "pack"
    target = root / "architectures" / "hexagonal-single" / "structure.yml"
    target.parent.mkdir(parents=True)
    target.write_text(custom_structure_yml, encoding="utf-8")
    return root
