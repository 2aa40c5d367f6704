"""YAML configuration store.

Reads and writes the project's ``.cleanarch.yml`` and merges generated
configuration fragments into existing YAML files without overwriting user
edits. Every write goes to a sibling ``.tmp`` file first and is then moved
into place with ``os.replace``, so readers never observe a half-written file.
"""

from __future__ import annotations

import os
import re
from collections.abc import Mapping
from pathlib import Path
from typing import Any, Optional

import yaml
from pydantic import ValidationError
from rich.markup import escape

from archgen.core.dependencies import Dependency, dependencies_in_gradle
from archgen.core.errors import GenerationError
from archgen.core.merge import merge_with_report
from archgen.core.models import MergeResult, ProjectConfig
from archgen.utils import dump_yaml, ensure_dir, load_yaml, print_warning

DEFAULT_CONFIG_FILE = ".cleanarch.yml"

CONFIG_HEADER = "# archgen project configuration\n"

# Directories never scanned for build scripts.
SKIPPED_BUILD_DIRS = frozenset({".cleanarch", ".gradle", "build"})

SECURITY_WARNING = (
    "# WARNING: Do not store credentials in source control\n"
    "# Use environment variables or secret management in production\n"
)

SENSITIVE_KEY_PATTERNS = tuple(
    re.compile(pattern, re.IGNORECASE)
    for pattern in ("password", "secret", "credential", "token", "key", "uri", "url")
)


class ConfigurationError(GenerationError):
    """A configuration file exists but cannot be read as expected."""

    def __init__(self, path: Path | str, message: str) -> None:
        self.path = Path(path)
        super().__init__(f"{path}: {message}")


def has_sensitive_keys(data: Mapping[str, Any]) -> bool:
    """True when any key at any depth looks like it holds a credential."""
    for key, value in data.items():
        if any(pattern.search(str(key)) for pattern in SENSITIVE_KEY_PATTERNS):
            return True
        if isinstance(value, Mapping) and has_sensitive_keys(value):
            return True
    return False


def leading_comments(text: str) -> str:
    """The comment block (and blank lines) at the top of a YAML document."""
    lines: list[str] = []
    for line in text.splitlines(keepends=True):
        stripped = line.strip()
        if stripped.startswith("#") or not stripped:
            lines.append(line if line.endswith("\n") else line + "\n")
        else:
            break
    return "".join(lines)


class ConfigurationStore:
    """File-backed access to a project's configuration files."""

    def __init__(self, project_dir: Path | str, config_file: str = DEFAULT_CONFIG_FILE) -> None:
        self.project_dir = Path(project_dir)
        self.config_file = config_file

    @property
    def config_path(self) -> Path:
        return self.project_dir / self.config_file

    def exists(self) -> bool:
        return self.config_path.is_file()

    # -- Project configuration -------------------------------------------

    @staticmethod
    def project_config_to_dict(config: ProjectConfig) -> dict[str, Any]:
        data: dict[str, Any] = {
            "project": {
                "name": config.name,
                "basePackage": config.base_package,
                "generatorVersion": config.generator_version,
                "createdAt": config.created_at.isoformat(),
            },
            "architecture": {
                "type": config.architecture.value,
                "paradigm": config.paradigm.value,
                "framework": config.framework.value,
                "adaptersAsModules": config.adapters_as_modules,
            },
        }
        if config.dependency_overrides:
            data["dependencyOverrides"] = dict(config.dependency_overrides)
        return data

    @staticmethod
    def project_config_from_dict(data: Mapping[str, Any], source: str = DEFAULT_CONFIG_FILE) -> ProjectConfig:
        project = data.get("project")
        architecture = data.get("architecture")
        if not isinstance(project, Mapping) or not isinstance(architecture, Mapping):
            raise ConfigurationError(source, "expected 'project' and 'architecture' sections")

        fields: dict[str, Any] = {
            "name": project.get("name"),
            "base_package": project.get("basePackage"),
            "architecture": architecture.get("type"),
            "adapters_as_modules": bool(architecture.get("adaptersAsModules", False)),
            "dependency_overrides": {
                str(k): str(v) for k, v in (data.get("dependencyOverrides") or {}).items()
            },
        }
        for key, yaml_key, section in (
            ("framework", "framework", architecture),
            ("paradigm", "paradigm", architecture),
            ("generator_version", "generatorVersion", project),
            ("created_at", "createdAt", project),
        ):
            if section.get(yaml_key) is not None:
                fields[key] = section[yaml_key]
        try:
            return ProjectConfig(**fields)
        except ValidationError as exc:
            raise ConfigurationError(source, str(exc)) from exc

    @classmethod
    def dump_project_config(cls, config: ProjectConfig) -> str:
        """Render *config* as the text of a ``.cleanarch.yml`` file."""
        return CONFIG_HEADER + dump_yaml(cls.project_config_to_dict(config))

    def read_project_config(self) -> Optional[ProjectConfig]:
        """The stored project configuration, or ``None`` when there is none yet."""
        if not self.exists():
            return None
        return self.project_config_from_dict(self.read_yaml(self.config_path), str(self.config_path))

    def write_project_config(self, config: ProjectConfig) -> Path:
        self._atomic_write(self.config_path, self.dump_project_config(config))
        return self.config_path

    # -- Generic YAML ------------------------------------------------------

    def read_yaml(self, path: Path | str) -> dict[str, Any]:
        target = self._resolve(path)
        try:
            return load_yaml(target)
        except (ValueError, yaml.YAMLError) as exc:
            raise ConfigurationError(target, str(exc)) from exc

    def write_yaml(self, path: Path | str, data: Mapping[str, Any], header: str = "") -> Path:
        target = self._resolve(path)
        self._atomic_write(target, header + dump_yaml(dict(data)))
        return target

    def merge_yaml(self, base: Mapping[str, Any], overlay: Mapping[str, Any]) -> MergeResult:
        """Merge *overlay* into *base*, warning about every value kept over a new one."""
        result = merge_with_report(base, overlay)
        for conflict in result.conflicts:
            print_warning(f"Config conflict: {escape(conflict)}")
        return result

    def merge_yaml_file(self, path: Path | str, overlay: Mapping[str, Any]) -> MergeResult:
        """Merge *overlay* into the YAML file at *path*, creating it if needed.

        The file's leading comment block is kept. When the overlay brings in
        credential-like keys a warning comment is prepended once.
        """
        target = self._resolve(path)
        header = ""
        existing: dict[str, Any] = {}
        if target.is_file():
            header = leading_comments(target.read_text(encoding="utf-8"))
            existing = self.read_yaml(target)

        result = self.merge_yaml(existing, overlay)
        if has_sensitive_keys(overlay) and "Do not store credentials" not in header:
            header = SECURITY_WARNING + header
        self.write_yaml(target, result.merged, header)
        return result

    # -- Build scripts -----------------------------------------------------

    def build_dependencies(self) -> list[Dependency]:
        """Versioned dependencies declared in the project's Gradle build scripts."""
        found: list[Dependency] = []
        for script in sorted(self.project_dir.rglob("build.gradle.kts")):
            relative = script.relative_to(self.project_dir).parts
            if any(part in SKIPPED_BUILD_DIRS for part in relative[:-1]):
                continue
            found.extend(dependencies_in_gradle(script.read_text(encoding="utf-8")))
        return found

    # -- Internals ---------------------------------------------------------

    def _resolve(self, path: Path | str) -> Path:
        candidate = Path(path)
        return candidate if candidate.is_absolute() else self.project_dir / candidate

    @staticmethod
    def _atomic_write(target: Path, content: str) -> None:
        ensure_dir(target.parent)
        temp = target.with_name(target.name + ".tmp")
        temp.write_text(content, encoding="utf-8")
        os.replace(temp, target)
