"""Architecture metadata provider.

Each architecture type is described by a ``structure.yml`` document (adapter
path templates, component paths, naming conventions, layer dependencies,
packages and modules). The built-in set ships under ``archgen/architectures``
and is parsed once per process; local template packs may override it.

Usage::

    from archgen.core.metadata import metadata_for
    from archgen.core.models import ArchitectureType

    structure = metadata_for(ArchitectureType.HEXAGONAL_SINGLE)
    structure.path_templates["driven"]
"""

from __future__ import annotations

import functools
from collections.abc import Mapping
from pathlib import Path
from typing import Any, Optional, Union

import yaml
from pydantic import ValidationError

from archgen.core.errors import MetadataError, UnknownArchitecture
from archgen.core.models import (
    ArchitectureType,
    LayerDependencies,
    NamingConventions,
    StructureMetadata,
)

BUILTIN_ARCHITECTURES_DIR = Path(__file__).resolve().parent.parent / "architectures"
STRUCTURE_FILE = "structure.yml"


# ---------------------------------------------------------------------------
# Loading
# ---------------------------------------------------------------------------


def _string_map(data: Mapping[str, Any], key: str, source: str) -> dict[str, str]:
    value = data.get(key)
    if value is None:
        return {}
    if not isinstance(value, Mapping):
        raise MetadataError(source, f"field '{key}' must be a map")
    return {str(k): str(v) for k, v in value.items()}


def _string_list(data: Mapping[str, Any], key: str, source: str) -> tuple[str, ...]:
    value = data.get(key)
    if value is None:
        return ()
    if not isinstance(value, list):
        raise MetadataError(source, f"field '{key}' must be a list")
    return tuple(str(item) for item in value)


def load_structure_metadata(
    document: Union[str, Mapping[str, Any]], source: str = "<structure.yml>"
) -> StructureMetadata:
    """Parse a structure.yml document (text or already-loaded mapping).

    Raises:
        MetadataError: The document is empty, lacks ``architecture`` or a
            path-template section, has wrongly typed fields, or describes a
            structure that fails validation.
    """
    if isinstance(document, str):
        try:
            data = yaml.safe_load(document)
        except yaml.YAMLError as exc:
            raise MetadataError(source, f"not valid YAML: {exc}") from exc
    else:
        data = document

    if not data or not isinstance(data, Mapping):
        raise MetadataError(source, "structure file is empty or not a map")

    architecture = data.get("architecture")
    if architecture is None:
        raise MetadataError(source, "required field 'architecture' is missing")
    if not isinstance(architecture, str):
        raise MetadataError(source, "field 'architecture' must be a string")

    templates_key = "pathTemplates" if "pathTemplates" in data else "adapterPaths"
    if templates_key not in data:
        raise MetadataError(source, "required field 'pathTemplates' is missing")
    path_templates = _string_map(data, templates_key, source)
    if not path_templates:
        raise MetadataError(source, f"field '{templates_key}' cannot be empty")

    naming = None
    if "namingConventions" in data:
        naming_data = data["namingConventions"]
        if not isinstance(naming_data, Mapping):
            raise MetadataError(source, "field 'namingConventions' must be a map")
        naming = NamingConventions(
            suffixes=_string_map(naming_data, "suffixes", source),
            prefixes=_string_map(naming_data, "prefixes", source),
        )

    layers = None
    if "layerDependencies" in data:
        layer_data = data["layerDependencies"]
        if not isinstance(layer_data, Mapping):
            raise MetadataError(source, "field 'layerDependencies' must be a map")
        layers = LayerDependencies(
            allowed={
                str(layer): tuple(str(dep) for dep in (deps or ()))
                for layer, deps in layer_data.items()
            }
        )

    try:
        metadata = StructureMetadata(
            architecture_value=architecture,
            path_templates=path_templates,
            naming_conventions=naming,
            layer_dependencies=layers,
            packages=_string_list(data, "packages", source),
            modules=_string_list(data, "modules", source),
            component_paths=_string_map(data, "componentPaths", source),
            module_paths=_string_map(data, "modulePaths", source),
        )
    except ValidationError as exc:
        raise MetadataError(source, str(exc)) from exc

    result = metadata.validate_structure()
    if not result.valid:
        raise MetadataError(source, ", ".join(result.errors))
    return metadata


def load_structure_file(path: Path) -> StructureMetadata:
    """Read and parse one ``structure.yml`` from disk."""
    return load_structure_metadata(path.read_text(encoding="utf-8"), source=str(path))


def _load_pack(
    root: Path, fallback: Optional["MetadataProvider"]
) -> dict[ArchitectureType, StructureMetadata]:
    structures: dict[ArchitectureType, StructureMetadata] = {}
    for architecture in ArchitectureType:
        path = root / "architectures" / architecture.value / STRUCTURE_FILE
        if path.is_file():
            structures[architecture] = load_structure_file(path)
        elif fallback is not None and fallback.supports(architecture):
            structures[architecture] = fallback.metadata_for(architecture)
    return structures


# ---------------------------------------------------------------------------
# Provider
# ---------------------------------------------------------------------------


class MetadataProvider:
    """Read-only lookup from architecture type to its structure metadata."""

    def __init__(self, structures: Mapping[ArchitectureType, StructureMetadata]) -> None:
        self._structures: dict[ArchitectureType, StructureMetadata] = dict(structures)

    @classmethod
    def builtin(cls) -> "MetadataProvider":
        """Load every bundled ``architectures/<value>/structure.yml``."""
        return cls(_load_pack(BUILTIN_ARCHITECTURES_DIR.parent, None))

    @classmethod
    def from_directory(
        cls, root: Path, fallback: Optional["MetadataProvider"] = None
    ) -> "MetadataProvider":
        """Load a template pack laid out as ``<root>/architectures/<value>/structure.yml``.

        Architectures the pack does not define are taken from *fallback*,
        the built-in provider by default.
        """
        return cls(_load_pack(Path(root), fallback or default_provider()))

    @property
    def architectures(self) -> tuple[ArchitectureType, ...]:
        return tuple(self._structures)

    def supports(self, architecture: Any) -> bool:
        return self._lookup(architecture) is not None

    def metadata_for(self, architecture: Any) -> StructureMetadata:
        """Return the structure metadata for *architecture*.

        Raises:
            UnknownArchitecture: *architecture* is not an ArchitectureType
                value this provider was built with.
        """
        metadata = self._lookup(architecture)
        if metadata is None:
            raise UnknownArchitecture(architecture)
        return metadata

    def _lookup(self, architecture: Any) -> Optional[StructureMetadata]:
        if isinstance(architecture, ArchitectureType):
            return self._structures.get(architecture)
        if isinstance(architecture, str):
            for member in self._structures:
                if member.value == architecture:
                    return self._structures[member]
        return None


@functools.cache
def default_provider() -> MetadataProvider:
    """The built-in provider, parsed on first use and shared afterwards."""
    return MetadataProvider.builtin()


def metadata_for(architecture: Any) -> StructureMetadata:
    return default_provider().metadata_for(architecture)
