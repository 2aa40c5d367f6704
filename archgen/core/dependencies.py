"""Gradle dependency coordinates and conflict detection.

Coordinates use Gradle's ``group:artifact[:version]`` notation. Conflicts are
returned as human-readable messages for the host to show; nothing here raises
because two versions disagree.
"""

from __future__ import annotations

import re
from collections.abc import Iterable, Mapping
from typing import Optional, Union

from pydantic import BaseModel, ConfigDict, Field

from archgen.core.models import Framework

# framework -> dependency group -> artifacts to use instead
FRAMEWORK_INCOMPATIBLE_GROUPS: dict[Framework, dict[str, tuple[str, ...]]] = {
    Framework.SPRING: {
        "javax.enterprise": ("spring-context", "spring-boot-starter"),
        "io.quarkus": ("spring-boot-starter",),
    },
    Framework.QUARKUS: {
        "org.springframework": ("quarkus-arc", "quarkus-resteasy"),
        "org.springframework.boot": ("quarkus-arc", "quarkus-resteasy"),
    },
}

_GRADLE_COORDINATE = re.compile(r"""["']([\w.\-]+):([\w.\-]+):([\w.\-]+)["']""")


class Dependency(BaseModel):
    """One ``group:artifact`` with an optional version."""

    model_config = ConfigDict(frozen=True)

    group: str = Field(..., description="Maven group id")
    artifact: str = Field(..., description="Maven artifact id")
    version: Optional[str] = Field(default=None, description="Pinned version, if any")

    @classmethod
    def parse(cls, coordinate: str) -> "Dependency":
        parts = coordinate.strip().split(":")
        if len(parts) not in (2, 3) or not all(part.strip() for part in parts):
            raise ValueError(
                f"Invalid dependency coordinate {coordinate!r}, expected group:artifact[:version]"
            )
        version = parts[2].strip() if len(parts) == 3 else None
        return cls(group=parts[0].strip(), artifact=parts[1].strip(), version=version)

    @property
    def key(self) -> str:
        return f"{self.group}:{self.artifact}"

    def __str__(self) -> str:
        return f"{self.key}:{self.version}" if self.version else self.key


def dependencies_in_gradle(text: str) -> list[Dependency]:
    """Versioned ``"group:artifact:version"`` strings found in a Gradle build script."""
    return [
        Dependency(group=group, artifact=artifact, version=version)
        for group, artifact, version in _GRADLE_COORDINATE.findall(text)
    ]


def apply_version_overrides(
    dependencies: Iterable[Dependency], overrides: Optional[Mapping[str, str]]
) -> list[Dependency]:
    """Pin every dependency whose ``group:artifact`` has an override."""
    if not overrides:
        return list(dependencies)
    return [
        dep.model_copy(update={"version": overrides[dep.key]}) if dep.key in overrides else dep
        for dep in dependencies
    ]


def detect_version_conflicts(
    existing: Iterable[Dependency], new: Iterable[Dependency]
) -> list[str]:
    """One message per new dependency pinned to a different version than an existing one.

    Unversioned dependencies never conflict: their version comes from the
    framework's dependency management.
    """
    versions = {dep.key: dep.version for dep in existing if dep.version}
    conflicts: list[str] = []
    for dep in new:
        current = versions.get(dep.key)
        if dep.version and current and current != dep.version:
            conflicts.append(
                f"Version conflict for {dep.key}: existing version {current}, "
                f"new version {dep.version}"
            )
    return conflicts


def detect_framework_conflicts(
    framework: Union[Framework, str], dependencies: Iterable[Dependency]
) -> list[str]:
    """One message per dependency from a group known to clash with *framework*."""
    if not isinstance(framework, Framework):
        framework = Framework.from_value(framework)
    incompatible = FRAMEWORK_INCOMPATIBLE_GROUPS.get(framework, {})
    conflicts: list[str] = []
    for dep in dependencies:
        alternatives = incompatible.get(dep.group)
        if alternatives:
            conflicts.append(
                f"Framework conflict: {dep.key} may be incompatible with {framework.value} "
                f"framework. Consider using {', '.join(alternatives)} alternatives."
            )
    return conflicts


def suggest_resolution(conflicts: Iterable[str]) -> list[str]:
    """Advice lines for the kinds of conflict present; empty when there are none."""
    conflicts = list(conflicts)
    if not conflicts:
        return []
    lines = ["Dependency conflicts detected. Consider the following resolutions:"]
    if any(c.startswith("Version conflict") for c in conflicts):
        lines += [
            "- For version conflicts:",
            "  use dependency management to enforce a single version, or",
            "  add a version override under 'dependencyOverrides' in .cleanarch.yml",
        ]
    if any(c.startswith("Framework conflict") for c in conflicts):
        lines += [
            "- For framework conflicts:",
            "  review adapter dependencies for framework compatibility and",
            "  prefer framework-specific variants when available",
        ]
    lines += [
        "To override dependency versions, add to .cleanarch.yml:",
        "dependencyOverrides:",
        "  'group:artifact': 'version'",
    ]
    return lines
