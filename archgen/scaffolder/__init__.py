"""archgen scaffolder -- turns a ``ProjectConfig`` into files on disk.

The generator renders Jinja2 templates into an in-memory
:class:`GenerationPlan`; the writer then lays the plan out below a project
root and merges any configuration fragment into the application config.

Quick usage::

    from archgen.core import ProjectConfig
    from archgen.scaffolder import ProjectGenerator, ScaffoldWriter

    project = ProjectConfig(
        name="user-service",
        base_package="com.example.users",
        architecture="hexagonal-single",
    )
    generator = ProjectGenerator(project)
    report = await ScaffoldWriter("/tmp/user-service").write(generator.generate_project())
"""

from archgen.scaffolder.backup import BackupError, BackupStore
from archgen.scaffolder.config_store import ConfigurationError, ConfigurationStore
from archgen.scaffolder.generator import GenerationPlan, ProjectGenerator
from archgen.scaffolder.templates import TemplateRenderer
from archgen.scaffolder.validator import validate_architecture, validate_templates
from archgen.scaffolder.writer import ScaffoldWriter, WriteReport

__all__ = [
    "BackupError",
    "BackupStore",
    "ConfigurationError",
    "ConfigurationStore",
    "GenerationPlan",
    "ProjectGenerator",
    "ScaffoldWriter",
    "TemplateRenderer",
    "WriteReport",
    "validate_architecture",
    "validate_templates",
]
