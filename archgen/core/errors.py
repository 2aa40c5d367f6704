"""Typed failures raised by the generation core.

Every error is a ``GenerationError`` so hosts can catch the whole family at
one boundary, while the attributes on each subclass identify the offending
field or value.
"""

from __future__ import annotations

from collections.abc import Iterable


class GenerationError(Exception):
    """Base class for every failure reported by archgen."""


class InvalidName(GenerationError):
    """A project, package, class or path name fails its naming rule."""

    def __init__(self, field: str, value: object, reason: str = "") -> None:
        self.field = field
        self.value = value
        self.reason = reason
        message = f"Invalid {field}: {value!r}"
        if reason:
            message = f"{message} ({reason})"
        super().__init__(message)


class UnknownArchitecture(GenerationError):
    """No structure metadata exists for the requested architecture."""

    def __init__(self, value: object) -> None:
        self.value = value
        super().__init__(f"Unknown architecture type: {value!r}")


class UnsupportedDirection(GenerationError):
    """The architecture defines no path template for an adapter direction."""

    def __init__(self, architecture: str, direction: str, available: Iterable[str] = ()) -> None:
        self.architecture = architecture
        self.direction = direction
        self.available = tuple(available)
        super().__init__(
            f"No adapter path defined for type '{direction}' in architecture "
            f"'{architecture}' (available: {', '.join(self.available) or 'none'})"
        )


class UnknownComponent(GenerationError):
    """The architecture defines no path template for a named component."""

    def __init__(self, architecture: str, component: str, available: Iterable[str] = ()) -> None:
        self.architecture = architecture
        self.component = component
        self.available = tuple(available)
        super().__init__(
            f"No component path defined for '{component}' in architecture "
            f"'{architecture}' (available: {', '.join(self.available) or 'none'})"
        )


class MissingContextValue(GenerationError):
    """A path template references a placeholder the context does not supply."""

    def __init__(self, placeholder: str, template: str, available: Iterable[str] = ()) -> None:
        self.placeholder = placeholder
        self.template = template
        self.available = tuple(available)
        message = f"Missing value for placeholder '{{{placeholder}}}' in template '{template}'"
        if self.available:
            message = f"{message}. Available {placeholder}s: {', '.join(self.available)}"
        super().__init__(message)


class MetadataError(GenerationError):
    """A structure.yml document is missing required fields or is malformed."""

    def __init__(self, source: str, message: str) -> None:
        self.source = source
        super().__init__(f"Invalid structure metadata in {source}: {message}")
