"""Jinja2 template rendering for Java project scaffolding.

Provides the TemplateRenderer class which loads Jinja2 templates from the
``archgen/scaffolder/templates/`` directory (or a local template pack) and
renders them with project-specific context data. Undefined variables are
errors so a template never silently emits an empty class or package name.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

from jinja2 import Environment, FileSystemLoader, StrictUndefined, TemplateNotFound

from archgen.core.naming import package_to_path, to_camel, to_kebab, to_pascal, to_snake


# ---------------------------------------------------------------------------
# Template directory discovery
# ---------------------------------------------------------------------------

_DEFAULT_TEMPLATE_DIR = Path(__file__).parent / "templates"


# ---------------------------------------------------------------------------
# TemplateRenderer
# ---------------------------------------------------------------------------


class TemplateRenderer:
    """Renders Jinja2 templates for project scaffolding.

    The renderer discovers ``.j2`` template files under a configurable
    template directory. A local directory may override individual bundled
    templates: it is searched first, then the bundled set.
    """

    def __init__(self, template_dir: str | Path | None = None) -> None:
        search_path = [str(_DEFAULT_TEMPLATE_DIR)]
        if template_dir is not None:
            search_path.insert(0, str(template_dir))
        self.template_dir = Path(template_dir) if template_dir is not None else _DEFAULT_TEMPLATE_DIR
        self.env = Environment(
            loader=FileSystemLoader(search_path),
            autoescape=False,
            keep_trailing_newline=True,
            trim_blocks=True,
            lstrip_blocks=True,
            undefined=StrictUndefined,
        )
        # Register custom filters
        self.env.filters["pascal_case"] = to_pascal
        self.env.filters["camel_case"] = to_camel
        self.env.filters["snake_case"] = to_snake
        self.env.filters["kebab_case"] = to_kebab
        self.env.filters["package_path"] = package_to_path
        self.env.filters["reactive_type"] = _reactive_type_filter

    # -- Rendering ---------------------------------------------------------

    def render(self, template_path: str, context: dict[str, Any]) -> str:
        """Render a single template with the provided context.

        Args:
            template_path: Path relative to the template directory (e.g.
                ``"adapters/driven/adapter.java.j2"``).
            context: Dictionary of variables available inside the template.

        Returns:
            The rendered template content as a string.
        """
        template = self.env.get_template(template_path)
        return template.render(**context)

    def render_string(self, template_string: str, context: dict[str, Any]) -> str:
        """Render an inline template string with the provided context."""
        template = self.env.from_string(template_string)
        return template.render(**context)

    # -- Utility -----------------------------------------------------------

    def has_template(self, template_path: str) -> bool:
        try:
            self.env.get_template(template_path)
        except TemplateNotFound:
            return False
        return True

    def list_templates(self, prefix: str = "") -> list[str]:
        """Return a sorted list of all ``.j2`` template paths under *prefix*."""
        return sorted(
            name
            for name in self.env.list_templates(extensions=["j2"])
            if name.startswith(prefix)
        )


# ---------------------------------------------------------------------------
# Jinja2 custom filters
# ---------------------------------------------------------------------------


def _reactive_type_filter(value: str, reactive: bool, many: bool = False, mutiny: bool = False) -> str:
    """Wrap a Java type for the paradigm.

    ``"User" | reactive_type(true)`` -> ``Mono<User>``;
    ``"User" | reactive_type(true, many=true)`` -> ``Flux<User>``;
    with ``mutiny=true`` the Quarkus types ``Uni`` and ``Multi`` are used instead.
    Imperative code keeps ``User`` or ``List<User>``. ``void`` becomes
    ``Mono<Void>`` (or ``Uni<Void>``).
    """
    if not reactive:
        return f"List<{value}>" if many else value
    single, stream = ("Uni", "Multi") if mutiny else ("Mono", "Flux")
    if value == "void":
        return f"{single}<Void>"
    return f"{stream}<{value}>" if many else f"{single}<{value}>"
