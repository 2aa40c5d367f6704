"""Tests for project file backups (archgen.scaffolder.backup)."""

from __future__ import annotations

from pathlib import Path

import pytest
import yaml

from archgen.core.errors import InvalidName
from archgen.scaffolder.backup import BACKUP_DIR, MANIFEST_FILE, BackupError, BackupStore


pytestmark = pytest.mark.unit


@pytest.fixture
def project(tmp_project_dir: Path) -> Path:
    (tmp_project_dir / "build.gradle.kts").write_text("// root\n")
    resources = tmp_project_dir / "src" / "main" / "resources"
    resources.mkdir(parents=True)
    (resources / "application.yml").write_text("spring: {}\n")
    return tmp_project_dir


class TestCreate:
    def test_copies_existing_files_only(self, project: Path):
        store = BackupStore(project)
        backup_id = store.create(
            ["build.gradle.kts", "src/main/resources/application.yml", "settings.gradle.kts"]
        )

        assert backup_id is not None
        assert backup_id.startswith("backup_")
        backup_dir = project / BACKUP_DIR / backup_id
        assert (backup_dir / "build.gradle.kts").read_text() == "// root\n"
        assert (backup_dir / "src/main/resources/application.yml").read_text() == "spring: {}\n"
        assert not (backup_dir / "settings.gradle.kts").exists()

        manifest = yaml.safe_load((backup_dir / MANIFEST_FILE).read_text())
        assert manifest["files"] == ["build.gradle.kts", "src/main/resources/application.yml"]
        assert "createdAt" in manifest

    def test_none_when_nothing_exists(self, tmp_project_dir: Path):
        store = BackupStore(tmp_project_dir)
        assert store.create(["missing.txt"]) is None
        assert not (tmp_project_dir / BACKUP_DIR).exists()

    def test_rejects_parent_segments(self, project: Path):
        with pytest.raises(InvalidName):
            BackupStore(project).create(["../outside.txt"])


class TestRestore:
    def test_restores_contents(self, project: Path):
        store = BackupStore(project)
        backup_id = store.create(["build.gradle.kts", "src/main/resources/application.yml"])
        (project / "build.gradle.kts").write_text("// broken\n")
        (project / "src/main/resources/application.yml").unlink()

        restored = store.restore(backup_id)

        assert restored == ["build.gradle.kts", "src/main/resources/application.yml"]
        assert (project / "build.gradle.kts").read_text() == "// root\n"
        assert (project / "src/main/resources/application.yml").read_text() == "spring: {}\n"

    def test_missing_backup(self, project: Path):
        with pytest.raises(BackupError, match="not found") as excinfo:
            BackupStore(project).restore("backup_19700101_000000_000000")
        assert excinfo.value.backup_id == "backup_19700101_000000_000000"


class TestDelete:
    def test_removes_backup_and_empty_parents(self, project: Path):
        store = BackupStore(project)
        backup_id = store.create(["build.gradle.kts"])
        assert store.list_backups() == [backup_id]

        store.delete(backup_id)

        assert store.list_backups() == []
        assert not (project / ".cleanarch").exists()

    def test_missing_backup_is_a_no_op(self, project: Path):
        BackupStore(project).delete("backup_19700101_000000_000000")
        assert (project / "build.gradle.kts").is_file()

    def test_keeps_other_backups(self, project: Path):
        store = BackupStore(project)
        first = store.create(["build.gradle.kts"])
        (project / BACKUP_DIR / "backup_00000000_000000_000000").mkdir()
        (project / BACKUP_DIR / "backup_00000000_000000_000000" / MANIFEST_FILE).write_text("files: []\n")

        store.delete(first)

        assert store.list_backups() == ["backup_00000000_000000_000000"]
