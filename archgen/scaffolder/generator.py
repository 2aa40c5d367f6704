"""Main scaffolding orchestrator.

Takes a ``ProjectConfig`` plus adapter, use case and entity declarations and
produces the ``GeneratedFile`` list and the merged application-config
fragment for them. Paths come from the architecture's structure metadata via
the path resolver; contents come from the Jinja2 templates. Nothing here
touches the file system: the writer and the configuration store do.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import Any, Optional, Union

import yaml
from pydantic import BaseModel, Field, ValidationError

from archgen.core.dependencies import (
    Dependency,
    apply_version_overrides,
    detect_framework_conflicts,
    detect_version_conflicts,
)
from archgen.core.errors import GenerationError, InvalidName
from archgen.core.merge import merge
from archgen.core.metadata import MetadataProvider, default_provider
from archgen.core.models import (
    AdapterConfig,
    AdapterType,
    EntityConfig,
    Framework,
    GeneratedFile,
    MethodSpec,
    NamingConventions,
    ParameterSpec,
    ProjectConfig,
    UseCaseConfig,
)
from archgen.core.naming import is_valid_identifier, to_camel, to_kebab, to_pascal
from archgen.core.paths import PathResolver
from archgen.core.validation import (
    ValidationResult,
    check_base_package_consistency,
    check_package_name,
)

from .config_store import ConfigurationStore
from .templates import TemplateRenderer


# ---------------------------------------------------------------------------
# Defaults
# ---------------------------------------------------------------------------

DEFAULT_SUFFIXES: dict[str, str] = {
    "adapter": "Adapter",
    "controller": "Controller",
    "port": "Port",
    "useCasePort": "UseCase",
    "useCase": "UseCaseImpl",
    "mapper": "Mapper",
    "entity": "Data",
}

PERSISTENCE_TECHNOLOGIES = frozenset({"redis", "mongodb", "postgresql"})

# technology -> framework -> (reactive artifact, imperative artifact)
TECHNOLOGY_STARTERS: dict[str, dict[str, tuple[str, str]]] = {
    "redis": {
        "spring": (
            "org.springframework.boot:spring-boot-starter-data-redis-reactive",
            "org.springframework.boot:spring-boot-starter-data-redis",
        ),
        "quarkus": ("io.quarkus:quarkus-redis-client", "io.quarkus:quarkus-redis-client"),
    },
    "mongodb": {
        "spring": (
            "org.springframework.boot:spring-boot-starter-data-mongodb-reactive",
            "org.springframework.boot:spring-boot-starter-data-mongodb",
        ),
        "quarkus": ("io.quarkus:quarkus-mongodb-panache", "io.quarkus:quarkus-mongodb-panache"),
    },
    "postgresql": {
        "spring": (
            "org.springframework.boot:spring-boot-starter-data-r2dbc",
            "org.springframework.boot:spring-boot-starter-data-jpa",
        ),
        "quarkus": (
            "io.quarkus:quarkus-hibernate-reactive-panache",
            "io.quarkus:quarkus-hibernate-orm-panache",
        ),
    },
    "rest": {
        "spring": (
            "org.springframework.boot:spring-boot-starter-webflux",
            "org.springframework.boot:spring-boot-starter-web",
        ),
        "quarkus": (
            "io.quarkus:quarkus-rest-client-jackson",
            "io.quarkus:quarkus-rest-client-jackson",
        ),
    },
}

SPRING_BOOT_VERSION = "3.3.4"
QUARKUS_VERSION = "3.15.1"

# Use cases declared without methods get a single no-argument entry point.
DEFAULT_USE_CASE_METHODS = (MethodSpec(name="execute"),)

_JAVA_ROOT = ("src", "main", "java")


# ---------------------------------------------------------------------------
# Result model
# ---------------------------------------------------------------------------


class GenerationPlan(BaseModel):
    """Everything one ``generate`` call produced."""

    files: list[GeneratedFile] = Field(default_factory=list)
    config: dict[str, Any] = Field(
        default_factory=dict, description="Merged application-config fragment"
    )
    errors: list[str] = Field(default_factory=list, description="Skipped items and why")

    @property
    def paths(self) -> list[str]:
        return [f.path for f in self.files]

    def add(self, files: Iterable[GeneratedFile]) -> None:
        """Append *files*, keeping the first file generated for any given path."""
        seen = set(self.paths)
        for generated in files:
            if generated.path not in seen:
                self.files.append(generated)
                seen.add(generated.path)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def package_for_path(path: str, base_package: str) -> str:
    """Java package of a source directory.

    ``"app/src/main/java/com/example/domain"`` -> ``"com.example.domain"``.
    Directories outside a ``src/main/java`` root are placed below *base_package*.
    """
    parts = [p for p in path.split("/") if p]
    for index in range(len(parts) - 2):
        if tuple(parts[index:index + 3]) == _JAVA_ROOT:
            return ".".join(parts[index + 3:])
    return ".".join([base_package, *parts])


def gradle_project_path(module_dir: str) -> str:
    """``"domain/model"`` -> ``":domain:model"``."""
    return ":" + module_dir.strip("/").replace("/", ":")


def _method_context(method: MethodSpec) -> dict[str, Any]:
    return {
        "name": method.name,
        "return_type": method.return_type,
        "parameters": [{"name": p.name, "type": p.type} for p in method.parameters],
        "signature": ", ".join(f"{p.type} {p.name}" for p in method.parameters),
        "arguments": ", ".join(p.name for p in method.parameters),
        "path": to_kebab(method.name),
    }


def variable_name(type_name: str) -> str:
    """``"UserProfile"`` -> ``"userProfile"``; falls back to ``"value"`` for keywords."""
    variable = to_camel(type_name)
    return variable if is_valid_identifier(variable) else "value"


def default_driven_methods(entity_name: str) -> tuple[MethodSpec, ...]:
    """CRUD methods given to a driven adapter declared without any."""
    variable = variable_name(entity_name)
    return (
        MethodSpec(
            name="save",
            return_type=entity_name,
            parameters=(ParameterSpec(name=variable, type=entity_name),),
        ),
        MethodSpec(
            name="findById",
            return_type=entity_name,
            parameters=(ParameterSpec(name="id", type="String"),),
        ),
        MethodSpec(
            name="deleteById",
            return_type="void",
            parameters=(ParameterSpec(name="id", type="String"),),
        ),
    )


# ---------------------------------------------------------------------------
# Main generator
# ---------------------------------------------------------------------------


class ProjectGenerator:
    """Scaffolding orchestrator for one project.

    Given a ``ProjectConfig``, produces:
    - the project skeleton (``.cleanarch.yml``, Gradle settings and build
      files, application class, ``application.yml``, package markers)
    - driven adapters with their domain port, plus mapper and data entity
      for persistence technologies
    - driving adapters (controllers)
    - use case ports and implementations, and domain entities
    """

    def __init__(
        self,
        project: ProjectConfig,
        *,
        provider: Optional[MetadataProvider] = None,
        renderer: Optional[TemplateRenderer] = None,
    ) -> None:
        self.project = project
        self.provider = provider or default_provider()
        self.resolver = PathResolver(self.provider)
        self.renderer = renderer or TemplateRenderer()
        self.metadata = self.provider.metadata_for(project.architecture)
        self.naming = self.metadata.naming_conventions or NamingConventions(
            suffixes=DEFAULT_SUFFIXES
        )

    # -- Context -----------------------------------------------------------

    @property
    def path_context(self) -> dict[str, str]:
        """Placeholder values shared by every path template."""
        return {
            "basePackage": self.project.base_package,
            "projectName": self.project.name,
        }

    def _base_context(self) -> dict[str, Any]:
        project = self.project
        return {
            "project": project,
            "project_name": project.name,
            "base_package": project.base_package,
            "architecture": project.architecture.value,
            "framework": project.framework.value,
            "paradigm": project.paradigm.value,
            "reactive": project.is_reactive,
            "spring": project.framework is Framework.SPRING,
            "quarkus": project.framework is Framework.QUARKUS,
            "generator_version": project.generator_version,
            "dependency_overrides": project.dependency_overrides,
            "reactive_imports": self._reactive_imports(),
            "spring_boot_version": SPRING_BOOT_VERSION,
            "quarkus_version": QUARKUS_VERSION,
        }

    def _component_dir(self, component: str) -> str:
        return self.resolver.resolve_component_path(
            self.project.architecture, component, self.path_context
        )

    def _component_package(self, component: str) -> str:
        return package_for_path(self._component_dir(component), self.project.base_package)

    def _file(
        self, directory: str, filename: str, template: str, context: dict[str, Any]
    ) -> GeneratedFile:
        path = f"{directory}/{filename}" if directory else filename
        return GeneratedFile(path=path, content=self.renderer.render(template, context))

    def _dependency(self, coordinate: str) -> str:
        """``group:artifact`` with its pinned version appended when overridden."""
        (pinned,) = apply_version_overrides(
            [Dependency.parse(coordinate)], self.project.dependency_overrides
        )
        return str(pinned)

    def technology_dependencies(self, technology: str) -> list[str]:
        starters = TECHNOLOGY_STARTERS.get(technology, {}).get(self.project.framework.value)
        if starters is None:
            return []
        reactive, imperative = starters
        return [self._dependency(reactive if self.project.is_reactive else imperative)]

    def dependency_conflicts(
        self, technology: Optional[str] = None, existing: Iterable[Dependency] = ()
    ) -> list[str]:
        """Conflicts the project's dependencies would introduce.

        Version conflicts compare the technology's starters against *existing*
        (usually read from the project's build scripts). Framework conflicts
        also cover every pinned override.
        """
        new = [Dependency.parse(c) for c in self.technology_dependencies(technology or "")]
        pinned = [
            Dependency.parse(f"{key}:{version}")
            for key, version in self.project.dependency_overrides.items()
        ]
        return detect_version_conflicts(existing, new) + detect_framework_conflicts(
            self.project.framework, new + pinned
        )

    def check_adapter_package(self, package: str) -> ValidationResult:
        """Check that an adapter package is well formed and lives below the base package."""
        result = check_package_name(package)
        if not result.valid:
            return result
        return check_base_package_consistency(package, self.project.base_package)

    def application_config_path(self) -> str:
        """Relative path of the application config that adapter fragments merge into."""
        return f"{self._component_dir('resources')}/application.yml"

    def default_adapter_package(self, name: str, direction: Union[AdapterType, str]) -> str:
        """Package an adapter gets when none is declared: the one its directory implies."""
        directory = self.resolver.resolve_adapter_path(
            self.project.architecture, direction, name, self.path_context
        )
        return package_for_path(directory, self.project.base_package)

    # -- Project skeleton --------------------------------------------------

    def generate_project(self) -> list[GeneratedFile]:
        """Files created once, when the project is initialised."""
        metadata = self.metadata
        application_dir = self._component_dir("application")
        modules = [
            {
                "dir": module,
                "path": gradle_project_path(module),
                "dependencies": self._module_dependencies(module),
                "application": application_dir.startswith(module + "/"),
            }
            for module in metadata.modules
        ]
        adapter_roots = sorted(
            {template.split("/{name}")[0] for template in metadata.module_paths.values()}
        )
        context = self._base_context()
        context.update(
            modules=modules,
            multi_module=metadata.is_multi_module,
            adapter_module_roots=adapter_roots,
            include_adapter_modules=bool(adapter_roots) or self.project.adapters_as_modules,
            application_package=package_for_path(application_dir, self.project.base_package),
            application_class=f"{to_pascal(self.project.name)}Application",
            web_dependency=self._dependency(self._web_starter()),
        )

        files = [
            GeneratedFile(
                path=".cleanarch.yml",
                content=ConfigurationStore.dump_project_config(self.project),
            ),
            self._file("", "settings.gradle.kts", "project/settings.gradle.kts.j2", context),
            self._file("", "build.gradle.kts", "project/build.gradle.kts.j2", context),
        ]
        for module in modules:
            files.append(
                self._file(
                    module["dir"], "build.gradle.kts",
                    "project/module-build.gradle.kts.j2", {**context, "module": module},
                )
            )
        files.append(
            self._file(
                application_dir, f"{context['application_class']}.java",
                "project/Application.java.j2", context,
            )
        )
        files.append(
            self._file(
                self._component_dir("resources"), "application.yml",
                "project/application.yml.j2", context,
            )
        )
        for package_template in metadata.packages:
            directory = self.resolver.resolve_template(
                self.project.architecture, package_template, self.path_context
            )
            package = package_for_path(directory, self.project.base_package)
            files.append(
                self._file(
                    directory, "package-info.java",
                    "project/package-info.java.j2", {**context, "package": package},
                )
            )
        return files

    def _reactive_imports(self) -> list[str]:
        if not self.project.is_reactive:
            return []
        if self.project.framework is Framework.QUARKUS:
            return ["io.smallrye.mutiny.Uni"]
        return ["reactor.core.publisher.Mono"]

    def _web_starter(self) -> str:
        if self.project.framework is Framework.QUARKUS:
            if self.project.is_reactive:
                return "io.quarkus:quarkus-rest"
            return "io.quarkus:quarkus-resteasy"
        if self.project.is_reactive:
            return "org.springframework.boot:spring-boot-starter-webflux"
        return "org.springframework.boot:spring-boot-starter-web"

    def _module_dependencies(self, module: str) -> list[str]:
        """Gradle paths of the modules *module* may depend on, by layer rules."""
        layers = self.metadata.layer_dependencies
        if layers is None:
            return []
        layer = module.split("/")[0]
        allowed = set(layers.allowed_for(layer))
        deps = []
        for other in self.metadata.modules:
            other_layer = other.split("/")[0]
            if other == module:
                continue
            if other_layer in allowed or (other_layer == layer and other < module):
                deps.append(gradle_project_path(other))
        return deps

    # -- Adapters ----------------------------------------------------------

    def generate_adapter(self, adapter: AdapterConfig) -> list[GeneratedFile]:
        """Files for one driven or driving adapter."""
        result = self.check_adapter_package(adapter.package_name)
        if not result.valid:
            raise InvalidName("package name", adapter.package_name, "; ".join(result.errors))
        project = self.project
        path_context = {**self.path_context, "package": adapter.package_name}
        directory = self.resolver.resolve_adapter_path(
            project.architecture, adapter.type, adapter.name, path_context
        )
        module_dir = self.resolver.resolve_module_path(
            project.architecture, adapter.type, adapter.name, path_context
        )
        adapter_package = package_for_path(directory, project.base_package)

        methods = adapter.methods
        if not methods and adapter.type is AdapterType.DRIVEN:
            methods = default_driven_methods(adapter.entity_name)

        context = self._base_context()
        context.update(
            adapter=adapter,
            technology=adapter.technology,
            package=adapter_package,
            adapter_package=adapter_package,
            entity_name=adapter.entity_name,
            entity_variable=variable_name(adapter.entity_name),
            entity_path=to_kebab(adapter.entity_name),
            model_package=self._component_package("model"),
            methods=[_method_context(m) for m in methods],
            persistence=adapter.technology in PERSISTENCE_TECHNOLOGIES,
            mapper_class=self.naming.apply("mapper", adapter.entity_name),
            data_class=self.naming.apply("entity", adapter.entity_name),
        )

        files: list[GeneratedFile] = []
        if adapter.type is AdapterType.DRIVEN:
            port_dir = self._component_dir("port")
            context.update(
                port_class=self.naming.apply("port", adapter.entity_name),
                port_package=package_for_path(port_dir, project.base_package),
                adapter_class=self.naming.apply("adapter", adapter.name),
            )
            files.append(
                self._file(
                    port_dir, f"{context['port_class']}.java",
                    "adapters/driven/port.java.j2", context,
                )
            )
            files.append(
                self._file(
                    directory, f"{context['adapter_class']}.java",
                    "adapters/driven/adapter.java.j2", context,
                )
            )
            if context["persistence"]:
                for sub, class_key, template in (
                    ("mapper", "mapper_class", "adapters/driven/mapper.java.j2"),
                    ("entity", "data_class", "adapters/driven/data-entity.java.j2"),
                ):
                    files.append(
                        self._file(
                            f"{directory}/{sub}", f"{context[class_key]}.java",
                            template, {**context, "package": f"{adapter_package}.{sub}"},
                        )
                    )
        else:
            context.update(controller_class=self.naming.apply("controller", adapter.name))
            files.append(
                self._file(
                    directory, f"{context['controller_class']}.java",
                    "adapters/driving/controller.java.j2", context,
                )
            )

        if module_dir is not None:
            module_context = {
                **context,
                "module_dependencies": [
                    gradle_project_path(m) for m in self.metadata.modules if m.startswith("domain")
                ],
                "technology_dependencies": self.technology_dependencies(adapter.technology),
            }
            files.append(
                self._file(
                    module_dir, "build.gradle.kts",
                    "adapters/module-build.gradle.kts.j2", module_context,
                )
            )
        return files

    def config_fragment(self, adapter: AdapterConfig) -> dict[str, Any]:
        """Application-config entries the adapter's technology needs (may be empty)."""
        template = f"config/{adapter.technology}.yml.j2"
        if not self.renderer.has_template(template):
            return {}
        context = self._base_context()
        context.update(adapter=adapter, entity_path=to_kebab(adapter.entity_name))
        data = yaml.safe_load(self.renderer.render(template, context))
        return data if isinstance(data, dict) else {}

    # -- Use cases and entities --------------------------------------------

    def generate_use_case(self, use_case: UseCaseConfig) -> list[GeneratedFile]:
        port_dir = self._component_dir("useCasePort")
        impl_dir = self._component_dir("useCase")
        context = self._base_context()
        context.update(
            use_case=use_case,
            methods=[_method_context(m) for m in use_case.methods or DEFAULT_USE_CASE_METHODS],
            port_class=self.naming.apply("useCasePort", use_case.name),
            port_package=package_for_path(port_dir, self.project.base_package),
            impl_class=self.naming.apply("useCase", use_case.name),
            impl_package=package_for_path(impl_dir, self.project.base_package),
            generate_port=use_case.generate_port,
        )
        files: list[GeneratedFile] = []
        if use_case.generate_port:
            files.append(
                self._file(port_dir, f"{context['port_class']}.java", "usecase/port.java.j2", context)
            )
        if use_case.generate_impl:
            files.append(
                self._file(impl_dir, f"{context['impl_class']}.java", "usecase/impl.java.j2", context)
            )
        return files

    def generate_entity(self, entity: EntityConfig) -> list[GeneratedFile]:
        model_dir = self._component_dir("model")
        context = self._base_context()
        context.update(
            entity=entity,
            package=package_for_path(model_dir, self.project.base_package),
            fields=[
                {"name": f.name, "type": f.type}
                for f in entity.fields
                if not (entity.has_id and f.name == "id")
            ],
        )
        return [self._file(model_dir, f"{entity.name}.java", "domain/entity.java.j2", context)]

    # -- Batch -------------------------------------------------------------

    def generate(
        self,
        adapters: Iterable[Union[AdapterConfig, Mapping[str, Any]]] = (),
        use_cases: Iterable[Union[UseCaseConfig, Mapping[str, Any]]] = (),
        entities: Iterable[Union[EntityConfig, Mapping[str, Any]]] = (),
        *,
        skip_invalid: bool = False,
    ) -> GenerationPlan:
        """Generate every declared component into one plan.

        Raw mappings are validated into their config models first. With
        *skip_invalid* a failing item is recorded in ``plan.errors`` and the
        rest are still generated; otherwise the first error propagates.
        """
        plan = GenerationPlan()
        batches: list[tuple[str, type[BaseModel], Iterable[Any]]] = [
            ("entity", EntityConfig, entities),
            ("adapter", AdapterConfig, adapters),
            ("use case", UseCaseConfig, use_cases),
        ]
        for kind, model, items in batches:
            for item in items:
                try:
                    config = item if isinstance(item, model) else model.model_validate(item)
                    if isinstance(config, AdapterConfig):
                        plan.add(self.generate_adapter(config))
                        plan.config = merge(plan.config, self.config_fragment(config))
                    elif isinstance(config, UseCaseConfig):
                        plan.add(self.generate_use_case(config))
                    else:
                        plan.add(self.generate_entity(config))
                except (GenerationError, ValidationError) as exc:
                    if not skip_invalid:
                        raise
                    plan.errors.append(f"{kind} {_item_name(item)}: {exc}")
        return plan


def _item_name(item: Any) -> str:
    if isinstance(item, Mapping):
        return str(item.get("name", "<unnamed>"))
    return str(getattr(item, "name", "<unnamed>"))
