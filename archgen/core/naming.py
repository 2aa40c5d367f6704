"""Naming rules for generated projects, packages and classes.

The predicates here are the single source of truth for the invariants
enforced by the config models; the case converters are shared with the
Jinja2 filters so that templates and file paths always agree on a name.
"""

from __future__ import annotations

import re

# ---------------------------------------------------------------------------
# Patterns
# ---------------------------------------------------------------------------

PROJECT_NAME_RE = re.compile(r"[a-z0-9]+(?:-[a-z0-9]+)*")
PACKAGE_SEGMENT_RE = re.compile(r"[a-z0-9_]+")
CLASS_NAME_RE = re.compile(r"[A-Z][A-Za-z0-9]*")
IDENTIFIER_RE = re.compile(r"[A-Za-z_$][A-Za-z0-9_$]*")

JAVA_KEYWORDS: frozenset[str] = frozenset({
    "abstract", "assert", "boolean", "break", "byte", "case", "catch", "char",
    "class", "const", "continue", "default", "do", "double", "else", "enum",
    "extends", "final", "finally", "float", "for", "goto", "if", "implements",
    "import", "instanceof", "int", "interface", "long", "native", "new", "package",
    "private", "protected", "public", "return", "short", "static", "strictfp",
    "super", "switch", "synchronized", "this", "throw", "throws", "transient",
    "try", "void", "volatile", "while", "true", "false", "null",
})


# ---------------------------------------------------------------------------
# Predicates
# ---------------------------------------------------------------------------


def is_valid_project_name(name: str) -> bool:
    """Lowercase letters, digits and single inner hyphens (``my-service-2``)."""
    return bool(PROJECT_NAME_RE.fullmatch(name))


def is_valid_package_name(name: str) -> bool:
    """At least two dot-separated segments of ``[a-z0-9_]``."""
    segments = name.split(".")
    if len(segments) < 2:
        return False
    return all(PACKAGE_SEGMENT_RE.fullmatch(segment) for segment in segments)


def is_valid_class_name(name: str) -> bool:
    """PascalCase: starts uppercase, letters and digits only."""
    return bool(CLASS_NAME_RE.fullmatch(name))


def is_valid_identifier(name: str) -> bool:
    """A Java identifier that is not a reserved keyword."""
    return bool(IDENTIFIER_RE.fullmatch(name)) and name not in JAVA_KEYWORDS


# ---------------------------------------------------------------------------
# Case conversion
# ---------------------------------------------------------------------------


def to_pascal(name: str) -> str:
    """Convert ``some-thing``, ``some_thing`` or ``someThing`` to ``SomeThing``."""
    parts = re.split(r"[-_\s]+", name)
    return "".join(word[:1].upper() + word[1:] for word in parts if word)


def to_camel(name: str) -> str:
    """Convert ``SomeThing`` or ``some-thing`` to ``someThing``."""
    pascal = to_pascal(name)
    return pascal[:1].lower() + pascal[1:]


def to_snake(name: str) -> str:
    """Convert ``SomeThing`` or ``some-thing`` to ``some_thing``."""
    s1 = re.sub(r"(.)([A-Z][a-z]+)", r"\1_\2", name)
    s2 = re.sub(r"([a-z0-9])([A-Z])", r"\1_\2", s1)
    return re.sub(r"[-\s]+", "_", s2).lower()


def to_kebab(name: str) -> str:
    """Convert ``UserRepository`` to ``user-repository``."""
    return to_snake(name).replace("_", "-")


def package_to_path(package: str) -> str:
    """``com.example.domain`` -> ``com/example/domain``."""
    return package.replace(".", "/")
