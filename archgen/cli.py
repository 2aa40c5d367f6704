"""Command-line host for archgen.

Usage::

    python -m archgen.cli init user-service --base-package com.example.users \\
        --architecture hexagonal-single --framework spring --paradigm reactive
    python -m archgen.cli adapter UserRepository --type driven --entity User --technology redis
    python -m archgen.cli usecase CreateUser
    python -m archgen.cli entity User --field email:String --field age:Integer
    python -m archgen.cli validate --architecture clean
"""

from __future__ import annotations

import argparse
import asyncio
import sys
from pathlib import Path
from typing import Optional

from pydantic import ValidationError
from rich.markup import escape

from archgen.config import GeneratorSettings
from archgen.core.dependencies import suggest_resolution
from archgen.core.errors import GenerationError
from archgen.core.metadata import MetadataProvider
from archgen.core.models import (
    AdapterConfig,
    ArchitectureType,
    EntityConfig,
    EntityField,
    ProjectConfig,
    UseCaseConfig,
)
from archgen.scaffolder import (
    ConfigurationStore,
    GenerationPlan,
    ProjectGenerator,
    ScaffoldWriter,
    TemplateRenderer,
    WriteReport,
    validate_templates,
)
from archgen.scaffolder.backup import BACKUP_DIR
from archgen.utils import (
    console,
    print_error,
    print_file_tree,
    print_success,
    print_summary_table,
    print_warning,
)


# ---------------------------------------------------------------------------
# Argument parsing
# ---------------------------------------------------------------------------


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="archgen",
        description="archgen -- clean architecture project generator for Java/Gradle services",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=(
            "Examples:\n"
            "  archgen init user-service --base-package com.example.users "
            "--architecture hexagonal-single\n"
            "  archgen adapter UserRepository --type driven --entity User --technology redis\n"
            "  archgen usecase CreateUser\n"
            "  archgen entity User --field email:String\n"
            "  archgen validate\n"
        ),
    )
    parser.add_argument(
        "--project-dir", "-C",
        default=None,
        help="Project root (default: $ARCHGEN_PROJECT_DIR or the current directory)",
    )
    parser.add_argument(
        "--overwrite",
        action="store_true",
        help="Replace files that already exist",
    )
    parser.add_argument(
        "--keep-backup",
        action="store_true",
        help="Keep the backup of modified files after a successful run",
    )
    parser.add_argument(
        "--template-dir",
        default=None,
        help="Directory of Jinja2 templates overriding the bundled ones",
    )
    parser.add_argument(
        "--metadata-dir",
        default=None,
        help="Local template pack containing architectures/<type>/structure.yml",
    )

    commands = parser.add_subparsers(dest="command", required=True)

    init = commands.add_parser("init", help="Initialise a new project")
    init.add_argument("name", help="Project name, e.g. user-service")
    init.add_argument("--base-package", required=True, help="Root package, e.g. com.example.users")
    init.add_argument(
        "--architecture",
        default=ArchitectureType.HEXAGONAL_SINGLE.value,
        help=f"One of: {', '.join(a.value for a in ArchitectureType)} (default: hexagonal-single)",
    )
    init.add_argument("--framework", default="spring", help="spring or quarkus (default: spring)")
    init.add_argument(
        "--paradigm", default="reactive", help="reactive or imperative (default: reactive)"
    )
    init.add_argument(
        "--adapters-as-modules",
        action="store_true",
        help="Generate each adapter as its own Gradle module",
    )
    init.add_argument(
        "--dependency",
        action="append",
        default=[],
        metavar="GROUP:ARTIFACT=VERSION",
        help="Pin a dependency version (repeatable)",
    )

    adapter = commands.add_parser("adapter", help="Add a driven or driving adapter")
    adapter.add_argument("name", help="Adapter name, e.g. UserRepository")
    adapter.add_argument("--type", default="driven", help="driven or driving (default: driven)")
    adapter.add_argument("--entity", required=True, help="Domain entity, e.g. User")
    adapter.add_argument(
        "--technology", default="generic", help="e.g. redis, mongodb, postgresql, rest"
    )
    adapter.add_argument(
        "--package", default=None, help="Adapter package (default: derived from its directory)"
    )

    usecase = commands.add_parser("usecase", help="Add a use case port and implementation")
    usecase.add_argument("name", help="Use case name, e.g. CreateUser")
    usecase.add_argument("--no-port", action="store_true", help="Skip the input port interface")
    usecase.add_argument("--no-impl", action="store_true", help="Skip the implementation class")

    entity = commands.add_parser("entity", help="Add a domain entity")
    entity.add_argument("name", help="Entity name, e.g. User")
    entity.add_argument(
        "--field",
        action="append",
        default=[],
        metavar="NAME:TYPE",
        help="Entity field (repeatable); TYPE defaults to String",
    )
    entity.add_argument("--no-id", action="store_true", help="Do not generate an id field")
    entity.add_argument("--id-type", default="String", help="Type of the id field")

    validate = commands.add_parser(
        "validate", help="Check that architecture metadata and templates can generate a project"
    )
    validate.add_argument(
        "--architecture",
        action="append",
        default=None,
        help="Architecture to check (repeatable; default: all)",
    )

    return parser


def settings_from_args(args: argparse.Namespace) -> GeneratorSettings:
    """Layer command-line flags over the environment-derived settings."""
    settings = GeneratorSettings.from_env()
    updates: dict[str, object] = {}
    if args.project_dir:
        updates["project_dir"] = Path(args.project_dir)
    if args.overwrite:
        updates["overwrite"] = True
    if args.keep_backup:
        updates["keep_backup"] = True
    if args.template_dir:
        updates["template_dir"] = Path(args.template_dir)
    if args.metadata_dir:
        updates["metadata_dir"] = Path(args.metadata_dir)
    return settings.model_copy(update=updates)


def _is_granular(architecture: str) -> bool:
    # Granular layouts give every adapter its own module.
    return ArchitectureType.from_value(architecture) is ArchitectureType.HEXAGONAL_MULTI_GRANULAR


def parse_field(text: str) -> EntityField:
    name, _, type_name = text.partition(":")
    return EntityField(name=name.strip(), type=type_name.strip() or "String")


def parse_dependency(text: str) -> tuple[str, str]:
    coordinate, sep, version = text.partition("=")
    if not sep or not version.strip() or coordinate.count(":") != 1:
        raise ValueError(f"Invalid dependency pin {text!r}, expected group:artifact=version")
    return coordinate.strip(), version.strip()


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------


class Cli:
    """Runs one parsed command against the project in ``settings.project_dir``."""

    def __init__(self, settings: GeneratorSettings) -> None:
        self.settings = settings
        self.store = ConfigurationStore(settings.project_dir, settings.config_file)
        self.writer = ScaffoldWriter(
            settings.project_dir, overwrite=settings.overwrite, keep_backup=settings.keep_backup
        )
        self.renderer = TemplateRenderer(settings.template_dir)
        self.provider = (
            MetadataProvider.from_directory(settings.metadata_dir)
            if settings.metadata_dir is not None
            else None
        )

    def generator_for(self, project: ProjectConfig) -> ProjectGenerator:
        return ProjectGenerator(project, provider=self.provider, renderer=self.renderer)

    def load_project(self) -> ProjectConfig:
        project = self.store.read_project_config()
        if project is None:
            raise GenerationError(
                f"No {self.settings.config_file} found in {self.settings.project_dir}. "
                "Run 'archgen init' first."
            )
        return project

    # -- Command handlers --------------------------------------------------

    def init(self, args: argparse.Namespace) -> WriteReport:
        if self.store.exists() and not self.settings.overwrite:
            raise GenerationError(
                f"{self.store.config_path} already exists; use --overwrite to re-initialise"
            )
        overrides = dict(parse_dependency(pin) for pin in args.dependency)
        project = ProjectConfig(
            name=args.name,
            base_package=args.base_package,
            architecture=args.architecture,
            framework=args.framework,
            paradigm=args.paradigm,
            adapters_as_modules=args.adapters_as_modules or _is_granular(args.architecture),
            dependency_overrides=overrides,
        )
        generator = self.generator_for(project)
        warn_conflicts(generator.dependency_conflicts())
        report = asyncio.run(self.writer.write(generator.generate_project()))
        print_summary_table(
            {
                "Project": project.name,
                "Base package": project.base_package,
                "Architecture": project.architecture.value,
                "Framework": project.framework.value,
                "Paradigm": project.paradigm.value,
            },
            title="archgen init",
        )
        return report

    def adapter(self, args: argparse.Namespace) -> WriteReport:
        project = self.load_project()
        generator = self.generator_for(project)
        package = args.package or generator.default_adapter_package(args.name, args.type)
        config = AdapterConfig(
            name=args.name,
            package_name=package,
            type=args.type,
            entity_name=args.entity,
            technology=args.technology,
        )
        plan = generator.generate(adapters=[config])
        warn_conflicts(
            generator.dependency_conflicts(args.technology, self.store.build_dependencies())
        )
        return self._apply(generator, plan)

    def usecase(self, args: argparse.Namespace) -> WriteReport:
        project = self.load_project()
        generator = self.generator_for(project)
        config = UseCaseConfig(
            name=args.name, generate_port=not args.no_port, generate_impl=not args.no_impl
        )
        return self._apply(generator, generator.generate(use_cases=[config]))

    def entity(self, args: argparse.Namespace) -> WriteReport:
        project = self.load_project()
        generator = self.generator_for(project)
        config = EntityConfig(
            name=args.name,
            fields=tuple(parse_field(item) for item in args.field),
            has_id=not args.no_id,
            id_type=args.id_type,
        )
        return self._apply(generator, generator.generate(entities=[config]))

    def validate(self, args: argparse.Namespace) -> None:
        results = validate_templates(self.provider, self.renderer, args.architecture)
        failed = 0
        for architecture, result in results.items():
            if result.valid:
                print_success(f"{architecture}: valid")
                continue
            failed += 1
            print_error(f"{architecture}: invalid")
            for error in result.errors:
                console.print(f"  - {escape(error)}")
        if failed:
            raise GenerationError(f"{failed} of {len(results)} architecture(s) failed validation")
        print_success(f"All {len(results)} architecture(s) are valid")

    def _apply(self, generator: ProjectGenerator, plan: GenerationPlan) -> WriteReport:
        config_path = self.settings.application_config or generator.application_config_path()
        return asyncio.run(self.writer.apply(plan, config_path))


def warn_conflicts(conflicts: list[str]) -> None:
    for conflict in conflicts:
        print_warning(escape(conflict))
    for line in suggest_resolution(conflicts):
        console.print(escape(line))


def report_results(report: WriteReport) -> None:
    if report.written:
        print_file_tree(report.written)
    for path in report.skipped:
        print_warning(f"Skipped existing file: {escape(path)} (use --overwrite to replace)")
    if report.config is not None and report.config.added_keys:
        console.print(f"Added {report.config.added_keys_count} configuration key(s)")
    if report.backup_id:
        console.print(f"Backup kept in {BACKUP_DIR}/{report.backup_id}")
    print_success(f"Wrote {len(report.written)} file(s), skipped {len(report.skipped)}")


def main(argv: Optional[list[str]] = None) -> None:
    """CLI entry point for ``archgen`` / ``python -m archgen.cli``."""
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        cli = Cli(settings_from_args(args))
        report = getattr(cli, args.command)(args)
    except (GenerationError, ValidationError, ValueError) as exc:
        print_error(f"Error: {escape(str(exc))}")
        sys.exit(1)

    if report is not None:
        report_results(report)


if __name__ == "__main__":
    main()
