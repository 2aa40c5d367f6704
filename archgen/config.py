"""archgen settings.

Typed settings for one archgen invocation: where the target project lives,
where its configuration files are, and where to look for a local template
pack. Pydantic v2 validates them at construction time and serialises them
to/from JSON or environment variables.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, Field

from archgen.utils import write_text

_TRUTHY = {"1", "true", "yes", "on"}


class GeneratorSettings(BaseModel):
    """Settings shared by the CLI, the writer and the configuration store.

    Instances are typically created once by the CLI entry point (from flags
    layered over :meth:`from_env`) and then passed through the rest of the
    system.
    """

    project_dir: Path = Field(default=Path("."), description="Root of the generated project")
    config_file: str = Field(default=".cleanarch.yml", description="Project config file name")
    application_config: Optional[str] = Field(
        default=None,
        description=(
            "Application config that adapter fragments are merged into, relative to "
            "project_dir. Defaults to the architecture's resources directory."
        ),
    )
    template_dir: Optional[Path] = Field(
        default=None, description="Jinja2 template directory overriding the bundled one"
    )
    metadata_dir: Optional[Path] = Field(
        default=None,
        description="Local template pack containing architectures/<type>/structure.yml",
    )
    overwrite: bool = Field(default=False, description="Replace files that already exist")
    keep_backup: bool = Field(
        default=False, description="Keep the backup of modified files after a successful run"
    )

    # ------------------------------------------------------------------
    # Derived paths (read-only properties)
    # ------------------------------------------------------------------

    @property
    def config_path(self) -> Path:
        """Path to the project's ``.cleanarch.yml``."""
        return self.project_dir / self.config_file

    @property
    def settings_path(self) -> Path:
        """Default location of persisted settings."""
        return self.project_dir / ".archgen" / "settings.json"

    # ------------------------------------------------------------------
    # Serialisation helpers
    # ------------------------------------------------------------------

    def save(self, path: Path | None = None) -> Path:
        """Persist the settings to a JSON file.

        Args:
            path: Destination file. Defaults to ``<project_dir>/.archgen/settings.json``.

        Returns:
            The resolved path where the file was written.
        """
        target = path or self.settings_path
        write_text(target, self.model_dump_json(indent=2))
        return target

    @classmethod
    def load(cls, path: Path) -> "GeneratorSettings":
        """Load previously-saved settings from JSON."""
        raw = Path(path).read_text(encoding="utf-8")
        return cls.model_validate_json(raw)

    @classmethod
    def from_env(cls) -> "GeneratorSettings":
        """Build settings from environment variables.

        Recognised variables (all optional):
            ARCHGEN_PROJECT_DIR, ARCHGEN_TEMPLATE_DIR, ARCHGEN_METADATA_DIR,
            ARCHGEN_OVERWRITE, ARCHGEN_KEEP_BACKUP.
        """
        kwargs: dict[str, object] = {}
        if os.environ.get("ARCHGEN_PROJECT_DIR"):
            kwargs["project_dir"] = Path(os.environ["ARCHGEN_PROJECT_DIR"])
        if os.environ.get("ARCHGEN_TEMPLATE_DIR"):
            kwargs["template_dir"] = Path(os.environ["ARCHGEN_TEMPLATE_DIR"])
        if os.environ.get("ARCHGEN_METADATA_DIR"):
            kwargs["metadata_dir"] = Path(os.environ["ARCHGEN_METADATA_DIR"])
        if os.environ.get("ARCHGEN_OVERWRITE"):
            kwargs["overwrite"] = os.environ["ARCHGEN_OVERWRITE"].strip().lower() in _TRUTHY
        if os.environ.get("ARCHGEN_KEEP_BACKUP"):
            kwargs["keep_backup"] = os.environ["ARCHGEN_KEEP_BACKUP"].strip().lower() in _TRUTHY
        return cls(**kwargs)
