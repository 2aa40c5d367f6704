"""Validation results and the package-name checks that produce them."""

from __future__ import annotations

import re

from pydantic import BaseModel, ConfigDict, Field

from archgen.core.naming import JAVA_KEYWORDS


class ValidationResult(BaseModel):
    """Outcome of a check that reports problems instead of raising."""

    model_config = ConfigDict(frozen=True)

    valid: bool = Field(..., description="Whether the check passed")
    errors: tuple[str, ...] = Field(default=(), description="Human-readable problems")

    @classmethod
    def success(cls) -> "ValidationResult":
        return cls(valid=True)

    @classmethod
    def failure(cls, errors: str | list[str] | tuple[str, ...]) -> "ValidationResult":
        if isinstance(errors, str):
            errors = (errors,)
        return cls(valid=False, errors=tuple(errors))

    @property
    def first_error(self) -> str:
        return self.errors[0] if self.errors else ""

    @property
    def all_errors(self) -> str:
        return "\n".join(self.errors)


def check_package_name(name: str) -> ValidationResult:
    """Validate a package name and explain every problem found.

    Stricter than :func:`archgen.core.naming.is_valid_package_name`: segments
    must also start with a letter and must not be Java keywords, which is what
    the compiler will eventually demand of the generated sources.
    """
    if not name or not name.strip():
        return ValidationResult.failure("Package name cannot be null or empty")

    errors: list[str] = []
    if name.startswith(".") or name.endswith("."):
        errors.append(f"Package name cannot start or end with a dot: {name}")

    segments = name.split(".")
    if len(segments) < 2:
        errors.append(f"Package name must contain at least two segments: {name}")
        errors.append("Example: com.company.service")

    for position, segment in enumerate(segments, start=1):
        if not segment:
            errors.append(f"Package name contains empty segment at position {position}: {name}")
            continue
        if not re.fullmatch(r"[a-z][a-z0-9_]*", segment):
            errors.append(
                f"Package segment must start with a lowercase letter and contain only "
                f"lowercase letters, numbers and underscores: '{segment}' in {name}"
            )
        if segment in JAVA_KEYWORDS:
            errors.append(f"Package segment cannot be a Java reserved keyword: '{segment}' in {name}")

    return ValidationResult.failure(errors) if errors else ValidationResult.success()


def check_base_package_consistency(package_name: str, base_package: str) -> ValidationResult:
    """Check that *package_name* lives strictly below *base_package*."""
    errors: list[str] = []
    if package_name == base_package:
        errors.append(f"Package cannot be exactly the base package: {package_name}")
        errors.append(f"Example: {base_package}.domain or {base_package}.application")
    elif not package_name.startswith(base_package + "."):
        errors.append(f"Package '{package_name}' does not start with base package '{base_package}'")
    return ValidationResult.failure(errors) if errors else ValidationResult.success()
