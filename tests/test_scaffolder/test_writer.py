"""Tests for the async scaffold writer (archgen.scaffolder.writer)."""

from __future__ import annotations

from pathlib import Path

import pytest
import yaml

from archgen.core.errors import InvalidName
from archgen.core.models import GeneratedFile
from archgen.scaffolder.config_store import ConfigurationError
from archgen.scaffolder.generator import GenerationPlan, ProjectGenerator
from archgen.scaffolder.writer import ScaffoldWriter, WriteReport


pytestmark = pytest.mark.unit


class TestWriteReport:
    def test_total(self):
        report = WriteReport(written=["a", "b"], skipped=["c"])
        assert report.total == 3
        assert report.config is None


class TestScaffoldWriter:
    @pytest.mark.asyncio
    async def test_writes_files(self, tmp_project_dir: Path):
        writer = ScaffoldWriter(tmp_project_dir)
        report = await writer.write(
            [
                GeneratedFile(path="build.gradle.kts", content="plugins {}\n"),
                GeneratedFile(path="src/main/java/App.java", content="class App {}\n"),
            ]
        )
        assert report.written == ["build.gradle.kts", "src/main/java/App.java"]
        assert report.skipped == []
        assert (tmp_project_dir / "src" / "main" / "java" / "App.java").read_text() == "class App {}\n"

    @pytest.mark.asyncio
    async def test_skips_existing(self, tmp_project_dir: Path):
        (tmp_project_dir / "build.gradle.kts").write_text("// mine\n")
        report = await ScaffoldWriter(tmp_project_dir).write(
            [GeneratedFile(path="build.gradle.kts", content="plugins {}\n")]
        )
        assert report.skipped == ["build.gradle.kts"]
        assert (tmp_project_dir / "build.gradle.kts").read_text() == "// mine\n"

    @pytest.mark.asyncio
    async def test_overwrite(self, tmp_project_dir: Path):
        (tmp_project_dir / "build.gradle.kts").write_text("// mine\n")
        report = await ScaffoldWriter(tmp_project_dir, overwrite=True).write(
            [GeneratedFile(path="build.gradle.kts", content="plugins {}\n")]
        )
        assert report.written == ["build.gradle.kts"]
        assert (tmp_project_dir / "build.gradle.kts").read_text() == "plugins {}\n"

    @pytest.mark.asyncio
    async def test_rejects_parent_segments(self, tmp_project_dir: Path):
        with pytest.raises(InvalidName):
            await ScaffoldWriter(tmp_project_dir).write(
                [GeneratedFile(path="../escape.txt", content="x")]
            )
        assert not (tmp_project_dir.parent / "escape.txt").exists()

    @pytest.mark.asyncio
    async def test_project_skeleton(self, tmp_project_dir: Path, generator: ProjectGenerator):
        files = generator.generate_project()
        report = await ScaffoldWriter(tmp_project_dir).write(files)
        assert len(report.written) == len(files)
        assert (tmp_project_dir / ".cleanarch.yml").is_file()
        assert (tmp_project_dir / "settings.gradle.kts").is_file()


class TestApply:
    @pytest.mark.asyncio
    async def test_apply_merges_config(self, tmp_project_dir: Path):
        app_yml = tmp_project_dir / "src" / "main" / "resources" / "application.yml"
        app_yml.parent.mkdir(parents=True)
        app_yml.write_text("spring:\n  application:\n    name: user-service\n")

        plan = GenerationPlan(
            files=[GeneratedFile(path="src/main/java/Repo.java", content="class Repo {}\n")],
            config={"spring": {"data": {"redis": {"host": "localhost"}}}},
        )
        report = await ScaffoldWriter(tmp_project_dir).apply(plan, "src/main/resources/application.yml")

        assert report.written == ["src/main/java/Repo.java"]
        assert report.config is not None
        assert report.config.added_keys == ("spring.data",)
        assert yaml.safe_load(app_yml.read_text()) == {
            "spring": {"application": {"name": "user-service"}, "data": {"redis": {"host": "localhost"}}}
        }

    @pytest.mark.asyncio
    async def test_apply_without_config(self, tmp_project_dir: Path):
        plan = GenerationPlan(files=[GeneratedFile(path="A.java", content="")])
        report = await ScaffoldWriter(tmp_project_dir).apply(plan, "application.yml")
        assert report.config is None
        assert not (tmp_project_dir / "application.yml").exists()


class TestBackups:
    @pytest.mark.asyncio
    async def test_restored_when_a_write_fails(self, tmp_project_dir: Path):
        (tmp_project_dir / "build.gradle.kts").write_text("// mine\n")
        (tmp_project_dir / "src").mkdir()
        writer = ScaffoldWriter(tmp_project_dir, overwrite=True)

        with pytest.raises(OSError):
            await writer.write(
                [
                    GeneratedFile(path="build.gradle.kts", content="plugins {}\n"),
                    GeneratedFile(path="src", content="not a directory\n"),
                ]
            )

        assert (tmp_project_dir / "build.gradle.kts").read_text() == "// mine\n"
        assert writer.backups.list_backups() == []

    @pytest.mark.asyncio
    async def test_restored_when_config_merge_fails(self, tmp_project_dir: Path):
        (tmp_project_dir / "build.gradle.kts").write_text("// mine\n")
        (tmp_project_dir / "application.yml").write_text("- 1\n")
        plan = GenerationPlan(
            files=[GeneratedFile(path="build.gradle.kts", content="plugins {}\n")],
            config={"spring": {"data": {}}},
        )

        with pytest.raises(ConfigurationError):
            await ScaffoldWriter(tmp_project_dir, overwrite=True).apply(plan, "application.yml")

        assert (tmp_project_dir / "build.gradle.kts").read_text() == "// mine\n"
        assert (tmp_project_dir / "application.yml").read_text() == "- 1\n"

    @pytest.mark.asyncio
    async def test_deleted_after_success(self, tmp_project_dir: Path):
        (tmp_project_dir / "build.gradle.kts").write_text("// mine\n")
        report = await ScaffoldWriter(tmp_project_dir, overwrite=True).write(
            [GeneratedFile(path="build.gradle.kts", content="plugins {}\n")]
        )
        assert report.backup_id is None
        assert not (tmp_project_dir / ".cleanarch").exists()

    @pytest.mark.asyncio
    async def test_keep_backup(self, tmp_project_dir: Path):
        (tmp_project_dir / "build.gradle.kts").write_text("// mine\n")
        (tmp_project_dir / "application.yml").write_text("app: {}\n")
        writer = ScaffoldWriter(tmp_project_dir, overwrite=True, keep_backup=True)
        plan = GenerationPlan(
            files=[GeneratedFile(path="build.gradle.kts", content="plugins {}\n")],
            config={"spring": {"data": {}}},
        )

        report = await writer.apply(plan, tmp_project_dir / "application.yml")

        assert report.backup_id is not None
        assert writer.backups.files(report.backup_id) == ["application.yml", "build.gradle.kts"]
        assert (tmp_project_dir / "build.gradle.kts").read_text() == "plugins {}\n"

    @pytest.mark.asyncio
    async def test_nothing_to_back_up(self, tmp_project_dir: Path):
        report = await ScaffoldWriter(tmp_project_dir, keep_backup=True).write(
            [GeneratedFile(path="A.java", content="")]
        )
        assert report.backup_id is None
