"""Pydantic v2 models for the archgen generation core.

Defines the closed enumerations (architecture, framework, paradigm, adapter
direction), the per-run configuration records (project, adapters, use cases,
entities), the per-architecture structure metadata, and the small result
records passed back to callers. Every model is frozen: configuration is built
once and then only read.
"""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from pathlib import PurePosixPath
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel

from archgen.core.errors import InvalidName, UnknownArchitecture
from archgen.core.naming import (
    is_valid_class_name,
    is_valid_identifier,
    is_valid_package_name,
    is_valid_project_name,
)
from archgen.core.validation import ValidationResult

DEFAULT_GENERATOR_VERSION = "0.1.0"

_FROZEN = ConfigDict(frozen=True, populate_by_name=True, alias_generator=to_camel)


# ---------------------------------------------------------------------------
# Enumerations
# ---------------------------------------------------------------------------

class ArchitectureType(str, Enum):
    """Structural style of the generated project."""
    HEXAGONAL_SINGLE = "hexagonal-single"
    HEXAGONAL_MULTI = "hexagonal-multi"
    HEXAGONAL_MULTI_GRANULAR = "hexagonal-multi-granular"
    ONION_SINGLE = "onion-single"
    ONION_MULTI = "onion-multi"
    CLEAN = "clean"
    LAYERED = "layered"

    @classmethod
    def from_value(cls, value: str) -> "ArchitectureType":
        """Parse ``value`` case-insensitively, accepting ``_`` for ``-``."""
        normalized = str(value).strip().lower().replace("_", "-")
        for member in cls:
            if member.value == normalized:
                return member
        raise UnknownArchitecture(value)

    @property
    def is_multi_module(self) -> bool:
        return self in (
            ArchitectureType.HEXAGONAL_MULTI,
            ArchitectureType.HEXAGONAL_MULTI_GRANULAR,
            ArchitectureType.ONION_MULTI,
        )


class Framework(str, Enum):
    """Target application framework."""
    SPRING = "spring"
    QUARKUS = "quarkus"

    @classmethod
    def from_value(cls, value: str) -> "Framework":
        for member in cls:
            if member.value == str(value).strip().lower():
                return member
        raise ValueError(f"Unknown framework: {value}")


class Paradigm(str, Enum):
    """Reactive (non-blocking) or imperative (blocking) programming model."""
    REACTIVE = "reactive"
    IMPERATIVE = "imperative"

    @classmethod
    def from_value(cls, value: str) -> "Paradigm":
        for member in cls:
            if member.value == str(value).strip().lower():
                return member
        raise ValueError(f"Unknown paradigm: {value}")


class AdapterType(str, Enum):
    """Adapter direction. Driven adapters are called by the domain, driving ones call it."""
    DRIVEN = "driven"
    DRIVING = "driving"

    @classmethod
    def from_value(cls, value: str) -> "AdapterType":
        normalized = str(value).strip().lower()
        if normalized in _ADAPTER_TYPE_ALIASES:
            return _ADAPTER_TYPE_ALIASES[normalized]
        raise ValueError(f"Unknown adapter type: {value}")


_ADAPTER_TYPE_ALIASES: dict[str, AdapterType] = {
    "driven": AdapterType.DRIVEN,
    "out": AdapterType.DRIVEN,
    "output": AdapterType.DRIVEN,
    "secondary": AdapterType.DRIVEN,
    "driving": AdapterType.DRIVING,
    "in": AdapterType.DRIVING,
    "input": AdapterType.DRIVING,
    "primary": AdapterType.DRIVING,
    "entry-point": AdapterType.DRIVING,
    "entrypoint": AdapterType.DRIVING,
}


class FileType(str, Enum):
    """Kind of generated file, inferred from its extension."""
    JAVA = "java"
    GRADLE = "gradle"
    YAML = "yaml"
    OTHER = "other"

    @classmethod
    def for_path(cls, path: str) -> "FileType":
        name = PurePosixPath(path).name
        if name.endswith(".java"):
            return cls.JAVA
        if name.endswith((".gradle", ".gradle.kts")):
            return cls.GRADLE
        if name.endswith((".yml", ".yaml")):
            return cls.YAML
        return cls.OTHER


# ---------------------------------------------------------------------------
# Project configuration
# ---------------------------------------------------------------------------

class ProjectConfig(BaseModel):
    """One generation run's project settings. Persisted as ``.cleanarch.yml``."""
    model_config = _FROZEN

    name: str = Field(..., description="Project name, e.g. 'user-service'")
    base_package: str = Field(..., description="Root package, e.g. 'com.example.users'")
    architecture: ArchitectureType = Field(..., description="Structural style")
    framework: Framework = Field(default=Framework.SPRING, description="Application framework")
    paradigm: Paradigm = Field(default=Paradigm.REACTIVE, description="Programming model")
    generator_version: str = Field(
        default=DEFAULT_GENERATOR_VERSION, description="Version of archgen that created the project"
    )
    created_at: datetime = Field(
        default_factory=lambda: datetime.now().replace(microsecond=0),
        description="When the project was initialised",
    )
    adapters_as_modules: bool = Field(
        default=False, description="Generate each adapter as its own Gradle module"
    )
    dependency_overrides: dict[str, str] = Field(
        default_factory=dict, description="'group:artifact' -> version pins"
    )

    @field_validator("name")
    @classmethod
    def _check_name(cls, value: str) -> str:
        if not is_valid_project_name(value):
            raise InvalidName(
                "project name", value,
                "use lowercase letters, digits and single hyphens, e.g. 'user-service'",
            )
        return value

    @field_validator("base_package")
    @classmethod
    def _check_base_package(cls, value: str) -> str:
        if not is_valid_package_name(value):
            raise InvalidName(
                "base package", value,
                "use at least two lowercase dot-separated segments, e.g. 'com.company.service'",
            )
        return value

    @field_validator("architecture", mode="before")
    @classmethod
    def _parse_architecture(cls, value: Any) -> Any:
        if isinstance(value, str) and not isinstance(value, ArchitectureType):
            return ArchitectureType.from_value(value)
        return value

    @field_validator("framework", mode="before")
    @classmethod
    def _parse_framework(cls, value: Any) -> Any:
        if isinstance(value, str) and not isinstance(value, Framework):
            return Framework.from_value(value)
        return value

    @field_validator("paradigm", mode="before")
    @classmethod
    def _parse_paradigm(cls, value: Any) -> Any:
        if isinstance(value, str) and not isinstance(value, Paradigm):
            return Paradigm.from_value(value)
        return value

    @property
    def is_reactive(self) -> bool:
        return self.paradigm is Paradigm.REACTIVE


# ---------------------------------------------------------------------------
# Component configuration
# ---------------------------------------------------------------------------

class ParameterSpec(BaseModel):
    """A method parameter: ``String id``."""
    model_config = _FROZEN

    name: str = Field(..., description="Parameter name")
    type: str = Field(..., description="Java type, e.g. 'String'")

    @field_validator("name")
    @classmethod
    def _check_name(cls, value: str) -> str:
        if not is_valid_identifier(value):
            raise InvalidName("parameter name", value, "must be a Java identifier")
        return value

    @field_validator("type")
    @classmethod
    def _check_type(cls, value: str) -> str:
        if not value.strip():
            raise InvalidName("parameter type", value, "cannot be blank")
        return value.strip()


class MethodSpec(BaseModel):
    """A method declared on an adapter or use case."""
    model_config = _FROZEN

    name: str = Field(..., description="Method name, e.g. 'findById'")
    return_type: str = Field(default="void", description="Unwrapped Java return type")
    parameters: tuple[ParameterSpec, ...] = Field(default=(), description="Ordered parameters")

    @field_validator("name")
    @classmethod
    def _check_name(cls, value: str) -> str:
        if not is_valid_identifier(value):
            raise InvalidName("method name", value, "must be a Java identifier")
        return value


class AdapterConfig(BaseModel):
    """A declared adapter (repository, client, controller, ...)."""
    model_config = _FROZEN

    name: str = Field(..., description="PascalCase adapter name, e.g. 'UserRepository'")
    package_name: str = Field(..., description="Package of the generated adapter class")
    type: AdapterType = Field(..., description="Adapter direction")
    entity_name: str = Field(..., description="Domain entity handled by the adapter")
    methods: tuple[MethodSpec, ...] = Field(default=(), description="Declared methods, in order")
    technology: str = Field(
        default="generic", description="Backing technology, e.g. 'redis', 'mongodb', 'rest'"
    )

    @field_validator("name", "entity_name")
    @classmethod
    def _check_class_name(cls, value: str, info) -> str:
        if not is_valid_class_name(value):
            field = "adapter name" if info.field_name == "name" else "entity name"
            raise InvalidName(field, value, "must be PascalCase letters and digits")
        return value

    @field_validator("package_name")
    @classmethod
    def _check_package(cls, value: str) -> str:
        if not is_valid_package_name(value):
            raise InvalidName("package name", value)
        return value

    @field_validator("type", mode="before")
    @classmethod
    def _parse_type(cls, value: Any) -> Any:
        if isinstance(value, str) and not isinstance(value, AdapterType):
            return AdapterType.from_value(value)
        return value

    @field_validator("technology")
    @classmethod
    def _check_technology(cls, value: str) -> str:
        normalized = value.strip().lower()
        if not normalized or not all(ch.isalnum() or ch == "-" for ch in normalized):
            raise InvalidName("technology", value, "use lowercase letters, digits and hyphens")
        return normalized


class UseCaseConfig(BaseModel):
    """A use case: an input port interface plus its implementation."""
    model_config = _FROZEN

    name: str = Field(..., description="PascalCase use case name, e.g. 'CreateUser'")
    methods: tuple[MethodSpec, ...] = Field(default=(), description="Declared methods")
    generate_port: bool = Field(default=True, description="Generate the input port interface")
    generate_impl: bool = Field(default=True, description="Generate the implementation class")

    @field_validator("name")
    @classmethod
    def _check_name(cls, value: str) -> str:
        if not is_valid_class_name(value):
            raise InvalidName("use case name", value, "must be PascalCase letters and digits")
        return value


class EntityField(BaseModel):
    """A field on a domain entity."""
    model_config = _FROZEN

    name: str = Field(..., description="Field name")
    type: str = Field(default="String", description="Java type")

    @field_validator("name")
    @classmethod
    def _check_name(cls, value: str) -> str:
        if not is_valid_identifier(value):
            raise InvalidName("field name", value, "must be a Java identifier")
        return value


class EntityConfig(BaseModel):
    """A domain entity."""
    model_config = _FROZEN

    name: str = Field(..., description="PascalCase entity name, e.g. 'User'")
    fields: tuple[EntityField, ...] = Field(default=(), description="Entity fields")
    has_id: bool = Field(default=True, description="Whether an id field is generated")
    id_type: str = Field(default="String", description="Type of the id field")

    @field_validator("name")
    @classmethod
    def _check_name(cls, value: str) -> str:
        if not is_valid_class_name(value):
            raise InvalidName("entity name", value, "must be PascalCase letters and digits")
        return value


# ---------------------------------------------------------------------------
# Structure metadata
# ---------------------------------------------------------------------------

class NamingConventions(BaseModel):
    """Prefixes and suffixes applied to generated class names per component."""
    model_config = _FROZEN

    suffixes: dict[str, str] = Field(default_factory=dict)
    prefixes: dict[str, str] = Field(default_factory=dict)

    def apply(self, component: str, base_name: str) -> str:
        """``apply("adapter", "UserRepository")`` -> ``"UserRepositoryAdapter"``."""
        return f"{self.prefix_for(component)}{base_name}{self.suffix_for(component)}"

    def suffix_for(self, component: str) -> str:
        return self.suffixes.get(component, "")

    def prefix_for(self, component: str) -> str:
        return self.prefixes.get(component, "")

    def has_conventions_for(self, component: str) -> bool:
        return component in self.suffixes or component in self.prefixes


class LayerDependencies(BaseModel):
    """Which layers each layer may depend on."""
    model_config = _FROZEN

    allowed: dict[str, tuple[str, ...]] = Field(default_factory=dict)

    @property
    def layers(self) -> tuple[str, ...]:
        return tuple(self.allowed)

    def can_depend_on(self, from_layer: str, to_layer: str) -> bool:
        return to_layer in self.allowed.get(from_layer, ())

    def allowed_for(self, layer: str) -> tuple[str, ...]:
        return self.allowed.get(layer, ())

    def validate_dependency(self, from_layer: str, to_layer: str) -> ValidationResult:
        if self.can_depend_on(from_layer, to_layer):
            return ValidationResult.success()
        return ValidationResult.failure(
            f"Layer '{from_layer}' cannot depend on layer '{to_layer}'. "
            f"Allowed dependencies: {list(self.allowed_for(from_layer))}"
        )


class StructureMetadata(BaseModel):
    """Layout rules of one architecture type, loaded from its ``structure.yml``.

    ``path_templates`` maps an adapter direction to a directory template that
    contains ``{name}``; ``component_paths`` does the same for non-adapter
    components (model, ports, use cases, ...); ``module_paths`` names the
    per-adapter Gradle module directory for layouts that have one.
    """
    model_config = _FROZEN

    architecture_value: str = Field(..., description="ArchitectureType value this describes")
    path_templates: dict[str, str] = Field(..., description="direction -> path template")
    naming_conventions: Optional[NamingConventions] = Field(default=None)
    layer_dependencies: Optional[LayerDependencies] = Field(default=None)
    packages: tuple[str, ...] = Field(default=(), description="Packages created at init")
    modules: tuple[str, ...] = Field(default=(), description="Gradle modules, multi-module only")
    component_paths: dict[str, str] = Field(default_factory=dict)
    module_paths: dict[str, str] = Field(default_factory=dict)

    @property
    def is_multi_module(self) -> bool:
        return bool(self.modules)

    @property
    def has_naming_conventions(self) -> bool:
        return self.naming_conventions is not None

    @property
    def has_layer_dependencies(self) -> bool:
        return self.layer_dependencies is not None

    def validate_structure(self) -> ValidationResult:
        """Check the invariants every loaded structure must satisfy."""
        if not self.path_templates:
            return ValidationResult.failure("Adapter paths cannot be empty")
        if "driven" not in self.path_templates and "driving" not in self.path_templates:
            return ValidationResult.failure(
                "Adapter paths must contain at least 'driven' or 'driving' entries"
            )
        errors = [
            f"Path template for '{direction}' must contain '{{name}}': {template}"
            for direction, template in self.path_templates.items()
            if "{name}" not in template
        ]
        return ValidationResult.failure(errors) if errors else ValidationResult.success()


# ---------------------------------------------------------------------------
# Results
# ---------------------------------------------------------------------------

class GeneratedFile(BaseModel):
    """A rendered file waiting to be written, addressed relative to the project root."""
    model_config = _FROZEN

    path: str = Field(..., description="Relative POSIX path")
    content: str = Field(..., description="Rendered file content")
    file_type: FileType = Field(default=FileType.OTHER)

    @model_validator(mode="before")
    @classmethod
    def _infer_file_type(cls, data: Any) -> Any:
        if isinstance(data, dict) and "path" in data:
            if "file_type" not in data and "fileType" not in data:
                data = {**data, "file_type": FileType.for_path(str(data["path"]))}
        return data

    @field_validator("path")
    @classmethod
    def _check_relative(cls, value: str) -> str:
        normalized = value.replace("\\", "/")
        if not normalized or normalized.startswith("/"):
            raise InvalidName("generated file path", value, "must be a relative path")
        return normalized


class MergeResult(BaseModel):
    """Merged configuration plus what the merge added and what it refused to change."""
    model_config = ConfigDict(frozen=True)

    merged: dict[str, Any] = Field(default_factory=dict)
    conflicts: tuple[str, ...] = Field(default=())
    added_keys: tuple[str, ...] = Field(default=())

    @property
    def has_conflicts(self) -> bool:
        return bool(self.conflicts)

    @property
    def added_keys_count(self) -> int:
        return len(self.added_keys)
