"""Backups of project files taken before a generation run modifies them.

Each backup is a directory below ``.cleanarch/backups`` holding copies of the
covered files at their project-relative paths plus a ``manifest.yml`` listing
them. The writer takes one before overwriting anything, restores it when the
run fails and deletes it when the run succeeds.
"""

from __future__ import annotations

import os
import shutil
from collections.abc import Iterable
from datetime import datetime
from pathlib import Path
from typing import Optional

import yaml

from archgen.core.errors import GenerationError
from archgen.core.paths import normalize_path
from archgen.utils import dump_yaml, ensure_dir, load_yaml

BACKUP_DIR = ".cleanarch/backups"
MANIFEST_FILE = "manifest.yml"


class BackupError(GenerationError):
    """A backup could not be created, read or restored."""

    def __init__(self, backup_id: Optional[str], message: str) -> None:
        self.backup_id = backup_id
        super().__init__(f"Backup {backup_id}: {message}" if backup_id else message)


class BackupStore:
    """Creates, restores and deletes backups below a project directory."""

    def __init__(self, project_dir: Path | str) -> None:
        self.project_dir = Path(project_dir)

    @property
    def backup_root(self) -> Path:
        return self.project_dir / BACKUP_DIR

    def create(self, paths: Iterable[str]) -> Optional[str]:
        """Copy every existing file in *paths* into a new backup.

        Returns the backup id, or ``None`` when none of the files exist yet.
        A backup that fails half-way is removed before the error propagates.
        """
        existing = sorted(
            {normalize_path(p) for p in paths if (self.project_dir / normalize_path(p)).is_file()}
        )
        if not existing:
            return None

        created_at = datetime.now()
        backup_id = created_at.strftime("backup_%Y%m%d_%H%M%S_%f")
        backup_dir = self.backup_root / backup_id
        try:
            ensure_dir(backup_dir)
            for relative in existing:
                target = backup_dir / relative
                ensure_dir(target.parent)
                shutil.copy2(self.project_dir / relative, target)
            manifest = backup_dir / MANIFEST_FILE
            temp = manifest.with_name(MANIFEST_FILE + ".tmp")
            temp.write_text(
                dump_yaml({"files": existing, "createdAt": created_at.isoformat()}),
                encoding="utf-8",
            )
            os.replace(temp, manifest)
        except OSError as exc:
            shutil.rmtree(backup_dir, ignore_errors=True)
            raise BackupError(backup_id, f"could not be created: {exc}") from exc
        return backup_id

    def files(self, backup_id: str) -> list[str]:
        """Project-relative paths held by *backup_id*."""
        manifest = self.backup_root / backup_id / MANIFEST_FILE
        if not manifest.is_file():
            raise BackupError(backup_id, "not found")
        try:
            data = load_yaml(manifest)
        except (ValueError, yaml.YAMLError) as exc:
            raise BackupError(backup_id, f"unreadable manifest: {exc}") from exc
        return [str(path) for path in data.get("files") or []]

    def restore(self, backup_id: str) -> list[str]:
        """Copy every file in *backup_id* back to its place; returns the restored paths."""
        backup_dir = self.backup_root / backup_id
        restored: list[str] = []
        for relative in self.files(backup_id):
            target = self.project_dir / relative
            try:
                ensure_dir(target.parent)
                shutil.copy2(backup_dir / relative, target)
            except OSError as exc:
                raise BackupError(backup_id, f"could not restore {relative}: {exc}") from exc
            restored.append(relative)
        return restored

    def delete(self, backup_id: str) -> None:
        """Remove *backup_id*; a missing backup is not an error."""
        backup_dir = self.backup_root / backup_id
        if backup_dir.exists():
            shutil.rmtree(backup_dir)
        # Leave no empty .cleanarch/backups behind.
        for directory in (self.backup_root, self.backup_root.parent):
            if directory.is_dir() and not any(directory.iterdir()):
                directory.rmdir()

    def list_backups(self) -> list[str]:
        """Ids of the backups present, oldest first."""
        if not self.backup_root.is_dir():
            return []
        return sorted(
            entry.name
            for entry in self.backup_root.iterdir()
            if (entry / MANIFEST_FILE).is_file()
        )
