"""Architecture-aware path resolution.

Maps a logical component (an adapter direction plus a name, or a named
component such as ``model``) to a relative POSIX directory by substituting
``{placeholder}`` tokens in the architecture's path templates.

Guarantees for every returned path: relative (no leading separator),
forward slashes only, no ``..`` segments, no whitespace or control
characters, and the same output for the same inputs.
"""

from __future__ import annotations

import functools
import re
import unicodedata
from collections.abc import Iterable, Mapping
from typing import Any, Optional, Union

from archgen.core.errors import (
    InvalidName,
    MissingContextValue,
    UnknownComponent,
    UnsupportedDirection,
)
from archgen.core.metadata import MetadataProvider, default_provider
from archgen.core.models import AdapterType, StructureMetadata
from archgen.core.validation import ValidationResult

_PLACEHOLDER = re.compile(r"\{([^{}]+)\}")
MODULE_PLACEHOLDER = "module"

Context = Mapping[str, Any]


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _is_package_key(key: str) -> bool:
    return key == "package" or key.endswith("Package")


def _has_unsafe_chars(value: str) -> bool:
    return any(ch.isspace() or unicodedata.category(ch) == "Cc" for ch in value)


def _direction_key(direction: Union[AdapterType, str], declared: Iterable[str] = ()) -> str:
    if isinstance(direction, AdapterType):
        return direction.value
    if direction in declared:
        return str(direction)
    try:
        return AdapterType.from_value(direction).value
    except ValueError:
        # Custom directions declared by a template pack keep their own key.
        return str(direction)


def normalize_path(raw: str) -> str:
    """Use forward slashes and drop empty and ``.`` segments.

    ``"/a//b/./c\\\\d/"`` -> ``"a/b/c/d"``. A ``..`` segment raises
    :class:`InvalidName`; a resolved path never climbs out of the project.
    """
    segments = [seg for seg in raw.replace("\\", "/").split("/") if seg not in ("", ".")]
    if ".." in segments:
        raise InvalidName("path", raw, "parent directory segments are not allowed")
    return "/".join(segments)


def substitute_placeholders(template: str, context: Context) -> str:
    """Replace every ``{key}`` in *template* with ``context[key]``.

    Values for package-like keys (``package``, ``basePackage``, ...) are
    converted from dotted to slashed form.

    Raises:
        MissingContextValue: A placeholder has no entry in *context*.
        InvalidName: A substituted value contains whitespace or control characters,
            or a package-like value has an empty segment.
    """

    def replace(match: re.Match) -> str:
        key = match.group(1)
        if key not in context or context[key] is None:
            raise MissingContextValue(key, template)
        value = str(context[key])
        if _has_unsafe_chars(value):
            raise InvalidName(key, value, "whitespace and control characters are not allowed")
        if _is_package_key(key):
            if any(not segment for segment in value.split(".")):
                raise InvalidName(key, value, "package segments cannot be empty")
            value = value.replace(".", "/")
        return value

    return _PLACEHOLDER.sub(replace, template)


# ---------------------------------------------------------------------------
# Resolver
# ---------------------------------------------------------------------------


class PathResolver:
    """Resolves adapter, component and module paths against structure metadata."""

    def __init__(self, provider: Optional[MetadataProvider] = None) -> None:
        self.provider = provider or default_provider()

    def resolve_adapter_path(
        self,
        architecture: Any,
        direction: Union[AdapterType, str],
        adapter_name: str,
        context: Optional[Context] = None,
    ) -> str:
        """Directory of the adapter *adapter_name* for the given direction.

        Raises:
            UnknownArchitecture: The provider has no metadata for *architecture*.
            UnsupportedDirection: The architecture has no template for *direction*.
            MissingContextValue: A placeholder cannot be filled from *context*.
            InvalidName: The adapter name or the result is not a safe relative path.
        """
        metadata = self.provider.metadata_for(architecture)
        key = _direction_key(direction, metadata.path_templates)
        template = metadata.path_templates.get(key)
        if template is None:
            raise UnsupportedDirection(
                metadata.architecture_value, key, metadata.path_templates.keys()
            )
        return self._resolve(metadata, template, self._adapter_values(adapter_name, key, context))

    def resolve_module_path(
        self,
        architecture: Any,
        direction: Union[AdapterType, str],
        adapter_name: str,
        context: Optional[Context] = None,
    ) -> Optional[str]:
        """Gradle module directory of the adapter, or ``None`` if the layout has none."""
        metadata = self.provider.metadata_for(architecture)
        key = _direction_key(direction, metadata.path_templates)
        template = metadata.module_paths.get(key)
        if template is None:
            return None
        return self._resolve(metadata, template, self._adapter_values(adapter_name, key, context))

    def resolve_component_path(
        self, architecture: Any, component: str, context: Optional[Context] = None
    ) -> str:
        """Directory of a non-adapter component (``model``, ``port``, ``useCase``, ...)."""
        metadata = self.provider.metadata_for(architecture)
        template = metadata.component_paths.get(component)
        if template is None:
            raise UnknownComponent(
                metadata.architecture_value, component, metadata.component_paths.keys()
            )
        return self._resolve(metadata, template, dict(context or {}))

    def resolve_template(
        self, architecture: Any, template: str, context: Optional[Context] = None
    ) -> str:
        """Resolve an arbitrary template (e.g. a ``packages`` entry) for *architecture*."""
        metadata = self.provider.metadata_for(architecture)
        return self._resolve(metadata, template, dict(context or {}))

    def validate_path(self, path: str, architecture: Any) -> ValidationResult:
        """Check that *path* lies inside one of the architecture's declared layers.

        Architectures without layer dependencies accept any path.
        """
        metadata = self.provider.metadata_for(architecture)
        if metadata.layer_dependencies is None:
            return ValidationResult.success()
        try:
            segments = normalize_path(path).split("/")
        except InvalidName as exc:
            return ValidationResult.failure(str(exc))

        layers = metadata.layer_dependencies.layers
        for segment in segments:
            if segment in layers:
                return ValidationResult.success()
        return ValidationResult.failure(
            f"Path '{path}' is not inside any layer of architecture "
            f"'{metadata.architecture_value}'. Valid layers: {list(layers)}"
        )

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    @staticmethod
    def _adapter_values(
        adapter_name: str, direction: str, context: Optional[Context]
    ) -> dict[str, Any]:
        if not adapter_name or adapter_name in (".", ".."):
            raise InvalidName("adapter name", adapter_name, "cannot be empty or a relative segment")
        if "/" in adapter_name or "\\" in adapter_name:
            raise InvalidName("adapter name", adapter_name, "path separators are not allowed")
        if _has_unsafe_chars(adapter_name):
            raise InvalidName(
                "adapter name", adapter_name, "whitespace and control characters are not allowed"
            )
        return {**(context or {}), "name": adapter_name.lower(), "type": direction}

    @staticmethod
    def _resolve(metadata: StructureMetadata, template: str, values: dict[str, Any]) -> str:
        module_token = "{" + MODULE_PLACEHOLDER + "}"
        if module_token in template and values.get(MODULE_PLACEHOLDER) is None:
            if metadata.is_multi_module:
                raise MissingContextValue(MODULE_PLACEHOLDER, template, metadata.modules)
            template = template.replace(module_token, "")

        path = normalize_path(substitute_placeholders(template, values))
        if _has_unsafe_chars(path):
            raise InvalidName("path", path, "whitespace and control characters are not allowed")
        return path


@functools.cache
def _default_resolver() -> PathResolver:
    return PathResolver()


# ---------------------------------------------------------------------------
# Module-level API (built-in metadata)
# ---------------------------------------------------------------------------


def resolve_adapter_path(
    architecture: Any,
    direction: Union[AdapterType, str],
    adapter_name: str,
    context: Optional[Context] = None,
) -> str:
    return _default_resolver().resolve_adapter_path(architecture, direction, adapter_name, context)


def resolve_module_path(
    architecture: Any,
    direction: Union[AdapterType, str],
    adapter_name: str,
    context: Optional[Context] = None,
) -> Optional[str]:
    return _default_resolver().resolve_module_path(architecture, direction, adapter_name, context)


def resolve_component_path(
    architecture: Any, component: str, context: Optional[Context] = None
) -> str:
    return _default_resolver().resolve_component_path(architecture, component, context)


def validate_path(path: str, architecture: Any) -> ValidationResult:
    return _default_resolver().validate_path(path, architecture)
