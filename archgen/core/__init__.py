"""archgen generation core.

Pure, I/O-free building blocks: the configuration models, the
architecture metadata provider, the path resolver and the structural
configuration merge.

Usage::

    from archgen.core import ArchitectureType, merge, resolve_adapter_path

    path = resolve_adapter_path(
        ArchitectureType.HEXAGONAL_SINGLE,
        "driven",
        "UserRepository",
        {"basePackage": "com.example.users"},
    )
    config = merge(existing_yaml, generated_fragment)
"""

from archgen.core.dependencies import (
    Dependency,
    apply_version_overrides,
    detect_framework_conflicts,
    detect_version_conflicts,
    suggest_resolution,
)
from archgen.core.errors import (
    GenerationError,
    InvalidName,
    MetadataError,
    MissingContextValue,
    UnknownArchitecture,
    UnknownComponent,
    UnsupportedDirection,
)
from archgen.core.merge import has_conflict, merge, merge_with_report
from archgen.core.metadata import (
    MetadataProvider,
    default_provider,
    load_structure_metadata,
    metadata_for,
)
from archgen.core.models import (
    AdapterConfig,
    AdapterType,
    ArchitectureType,
    EntityConfig,
    EntityField,
    FileType,
    Framework,
    GeneratedFile,
    LayerDependencies,
    MergeResult,
    MethodSpec,
    NamingConventions,
    Paradigm,
    ParameterSpec,
    ProjectConfig,
    StructureMetadata,
    UseCaseConfig,
)
from archgen.core.paths import (
    PathResolver,
    normalize_path,
    resolve_adapter_path,
    resolve_component_path,
    resolve_module_path,
    substitute_placeholders,
    validate_path,
)
from archgen.core.validation import ValidationResult

__all__ = [
    "Dependency",
    "apply_version_overrides",
    "detect_framework_conflicts",
    "detect_version_conflicts",
    "suggest_resolution",
    "GenerationError",
    "InvalidName",
    "MetadataError",
    "MissingContextValue",
    "UnknownArchitecture",
    "UnknownComponent",
    "UnsupportedDirection",
    "merge",
    "merge_with_report",
    "has_conflict",
    "MetadataProvider",
    "default_provider",
    "load_structure_metadata",
    "metadata_for",
    "AdapterConfig",
    "AdapterType",
    "ArchitectureType",
    "EntityConfig",
    "EntityField",
    "FileType",
    "Framework",
    "GeneratedFile",
    "LayerDependencies",
    "MergeResult",
    "MethodSpec",
    "NamingConventions",
    "Paradigm",
    "ParameterSpec",
    "ProjectConfig",
    "StructureMetadata",
    "UseCaseConfig",
    "PathResolver",
    "normalize_path",
    "resolve_adapter_path",
    "resolve_component_path",
    "resolve_module_path",
    "substitute_placeholders",
    "validate_path",
    "ValidationResult",
]
