"""Non-destructive structural merge of configuration mappings.

``merge(base, overlay)`` adds what *overlay* has and *base* lacks, recursing
into nested mappings, and otherwise leaves *base* untouched: an existing
value is never replaced by a generated one. Inputs are never mutated and the
result shares no containers with them.
"""

from __future__ import annotations

import copy
from collections.abc import Mapping
from typing import Any

from archgen.core.models import MergeResult


def merge(base: Mapping[str, Any], overlay: Mapping[str, Any]) -> dict[str, Any]:
    """Merge *overlay* into a copy of *base*; *base* wins every scalar conflict.

    >>> merge({"a": 1}, {"a": 2, "b": 3})
    {'a': 1, 'b': 3}
    """
    result: dict[str, Any] = {}
    for key, value in base.items():
        if key in overlay and isinstance(value, Mapping) and isinstance(overlay[key], Mapping):
            result[key] = merge(value, overlay[key])
        else:
            result[key] = copy.deepcopy(value)
    for key, value in overlay.items():
        if key not in base:
            result[key] = copy.deepcopy(value)
    return result


def merge_with_report(base: Mapping[str, Any], overlay: Mapping[str, Any]) -> MergeResult:
    """Like :func:`merge`, also recording added keys and preserved conflicts.

    Keys are reported as dotted paths (``spring.data.redis.host``). A conflict
    is reported only when the overlay value actually differs from the kept one.
    """
    conflicts: list[str] = []
    added: list[str] = []
    merged = _merge_tracked(base, overlay, "", conflicts, added)
    return MergeResult(merged=merged, conflicts=tuple(conflicts), added_keys=tuple(added))


def _merge_tracked(
    base: Mapping[str, Any],
    overlay: Mapping[str, Any],
    prefix: str,
    conflicts: list[str],
    added: list[str],
) -> dict[str, Any]:
    result: dict[str, Any] = {}
    for key, value in base.items():
        path = f"{prefix}{key}"
        if key not in overlay:
            result[key] = copy.deepcopy(value)
            continue
        other = overlay[key]
        if isinstance(value, Mapping) and isinstance(other, Mapping):
            result[key] = _merge_tracked(value, other, f"{path}.", conflicts, added)
        else:
            if value != other:
                conflicts.append(
                    f"Key '{path}' already exists with value '{value}', "
                    f"keeping existing value (new value '{other}' ignored)"
                )
            result[key] = copy.deepcopy(value)
    for key, value in overlay.items():
        if key not in base:
            added.append(f"{prefix}{key}")
            result[key] = copy.deepcopy(value)
    return result


def has_conflict(base: Mapping[str, Any], overlay: Mapping[str, Any], key: str) -> bool:
    """True when merging *key* would keep a base value over a different overlay value.

    Nested mappings are compared leaf by leaf, so two fragments that only add
    different keys below *key* do not conflict.
    """
    if key not in base or key not in overlay:
        return False
    value, other = base[key], overlay[key]
    if isinstance(value, Mapping) and isinstance(other, Mapping):
        return any(has_conflict(value, other, nested) for nested in other)
    return value != other
