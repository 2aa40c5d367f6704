"""Async sink that writes generated files under a project root."""

from __future__ import annotations

import asyncio
from collections.abc import Iterable, Mapping
from pathlib import Path
from typing import Any, Optional

from pydantic import BaseModel, Field

from archgen.core.errors import GenerationError
from archgen.core.models import GeneratedFile, MergeResult
from archgen.core.paths import normalize_path
from archgen.utils import write_text

from .backup import BackupStore
from .config_store import ConfigurationStore
from .generator import GenerationPlan


class WriteReport(BaseModel):
    """Relative paths written and skipped by one write call."""

    written: list[str] = Field(default_factory=list)
    skipped: list[str] = Field(default_factory=list)
    config: Optional[MergeResult] = Field(default=None, description="Result of the config merge")
    backup_id: Optional[str] = Field(default=None, description="Backup kept after the run")

    @property
    def total(self) -> int:
        return len(self.written) + len(self.skipped)


class ScaffoldWriter:
    """Writes ``GeneratedFile`` objects below *root*.

    Existing files are left alone unless *overwrite* is set; the writer never
    writes outside *root*. Every file a run may modify is backed up first:
    the backup is restored when the run fails and deleted when it succeeds,
    unless *keep_backup* is set.
    """

    def __init__(self, root: Path | str, overwrite: bool = False, keep_backup: bool = False) -> None:
        self.root = Path(root)
        self.overwrite = overwrite
        self.keep_backup = keep_backup
        self.store = ConfigurationStore(self.root)
        self.backups = BackupStore(self.root)

    async def write(self, files: Iterable[GeneratedFile]) -> WriteReport:
        return await self._run(list(files))

    async def apply(self, plan: GenerationPlan, config_path: Path | str) -> WriteReport:
        """Write the plan's files, then merge its config fragment into *config_path*."""
        return await self._run(list(plan.files), config_path, plan.config)

    async def _run(
        self,
        pending: list[GeneratedFile],
        config_path: Optional[Path | str] = None,
        config: Optional[Mapping[str, Any]] = None,
    ) -> WriteReport:
        covered = self._covered_paths(pending, config_path if config else None)
        backup_id = await asyncio.to_thread(self.backups.create, covered)
        report = WriteReport()
        try:
            results = await asyncio.gather(
                *(asyncio.to_thread(self._write_one, f) for f in pending), return_exceptions=True
            )
            for result in results:
                if isinstance(result, BaseException):
                    raise result
            for generated, written in zip(pending, results):
                (report.written if written else report.skipped).append(generated.path)
            if config:
                report.config = await asyncio.to_thread(
                    self.store.merge_yaml_file, config_path, config
                )
        except (OSError, GenerationError):
            if backup_id:
                await asyncio.to_thread(self.backups.restore, backup_id)
                await asyncio.to_thread(self.backups.delete, backup_id)
            raise

        if backup_id and self.keep_backup:
            report.backup_id = backup_id
        elif backup_id:
            await asyncio.to_thread(self.backups.delete, backup_id)
        return report

    def _covered_paths(
        self, pending: list[GeneratedFile], config_path: Optional[Path | str]
    ) -> list[str]:
        """Project-relative paths the run may modify."""
        paths = [normalize_path(f.path) for f in pending] if self.overwrite else []
        if config_path is not None:
            candidate = Path(config_path)
            if candidate.is_absolute():
                try:
                    candidate = candidate.relative_to(self.root)
                except ValueError:
                    # Outside the project: not ours to back up.
                    return paths
            paths.append(normalize_path(candidate.as_posix()))
        return paths

    def _write_one(self, generated: GeneratedFile) -> bool:
        target = self.root / normalize_path(generated.path)
        if target.exists() and not self.overwrite:
            return False
        write_text(target, generated.content)
        return True
