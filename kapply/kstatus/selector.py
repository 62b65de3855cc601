"""Label selector extraction and rendering.

Converts a ``metav1.LabelSelector`` (``matchLabels`` + ``matchExpressions``)
found inside an object into the query-string form the API server accepts
for ``labelSelector``, e.g. ``app=nginx,tier in (backend,cache),!canary``.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any

from kapply.errors import NoSelectorError


def parse_field_path(path: str | Sequence[str]) -> tuple[str, ...]:
    """Accept ``"spec.selector"`` or ``("spec", "selector")``."""
    if isinstance(path, str):
        parts = tuple(p for p in path.split(".") if p)
    else:
        parts = tuple(path)
    if not parts:
        raise ValueError("field path must not be empty")
    return parts


def nested_field(obj: Mapping[str, Any], path: Sequence[str]) -> Any:
    """Value at *path*, or None if any step is missing or not a mapping."""
    current: Any = obj
    for key in path:
        if not isinstance(current, Mapping) or key not in current:
            return None
        current = current[key]
    return current


def _render_expression(expr: Any) -> tuple[str, str]:
    if not isinstance(expr, Mapping):
        raise ValueError("matchExpressions entry is not a mapping")
    key = expr.get("key")
    operator = expr.get("operator")
    values = expr.get("values") or []
    if not isinstance(key, str) or not key:
        raise ValueError("matchExpressions entry has no key")
    if not isinstance(values, list) or not all(isinstance(v, str) for v in values):
        raise ValueError(f"values for {key!r} must be a list of strings")

    if operator in ("In", "NotIn"):
        if not values:
            raise ValueError(f"operator {operator} on {key!r} requires values")
        op = "in" if operator == "In" else "notin"
        return key, f"{key} {op} ({','.join(sorted(set(values)))})"
    if operator in ("Exists", "DoesNotExist"):
        if values:
            raise ValueError(f"operator {operator} on {key!r} takes no values")
        return key, key if operator == "Exists" else f"!{key}"
    raise ValueError(f"unsupported operator {operator!r} on {key!r}")


def label_selector_to_string(selector: Any) -> str:
    """Render a LabelSelector mapping; requirements are sorted by key.

    Raises:
        ValueError: the selector is malformed or has no requirements.
    """
    if not isinstance(selector, Mapping):
        raise ValueError("selector is not a mapping")
    requirements: list[tuple[str, str]] = []

    match_labels = selector.get("matchLabels") or {}
    if not isinstance(match_labels, Mapping):
        raise ValueError("matchLabels is not a mapping")
    for key, value in match_labels.items():
        if not isinstance(key, str) or not key or not isinstance(value, str):
            raise ValueError(f"invalid matchLabels entry {key!r}")
        requirements.append((key, f"{key}={value}"))

    match_expressions = selector.get("matchExpressions") or []
    if not isinstance(match_expressions, list):
        raise ValueError("matchExpressions is not a list")
    requirements.extend(_render_expression(expr) for expr in match_expressions)

    if not requirements:
        # an empty selector would match every object in the namespace
        raise ValueError("selector has no requirements")
    return ",".join(rendered for _key, rendered in sorted(requirements))


def selector_from_object(obj: Mapping[str, Any], path: str | Sequence[str]) -> str:
    """Extract and render the label selector at *path* inside *obj*.

    Raises:
        NoSelectorError: nothing at *path*, or the selector is malformed.
    """
    parts = parse_field_path(path)
    owner = _describe(obj)
    raw = nested_field(obj, parts)
    if raw is None:
        raise NoSelectorError(parts, owner=owner)
    try:
        return label_selector_to_string(raw)
    except ValueError as exc:
        raise NoSelectorError(parts, owner=owner, reason=str(exc)) from exc


def _describe(obj: Mapping[str, Any]) -> str:
    metadata = obj.get("metadata") if isinstance(obj, Mapping) else None
    name = metadata.get("name", "") if isinstance(metadata, Mapping) else ""
    kind = obj.get("kind", "") if isinstance(obj, Mapping) else ""
    return f"{kind} {name}".strip()
