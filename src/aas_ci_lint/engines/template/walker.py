"""Submodel element tree traversal.

One traversal serves both sides of template matching:

- template mode (required_only=True) collects the paths a template
  requires, honoring cardinality qualifiers;
- instance mode (required_only=False) collects every path an instance
  actually contains.

Paths are built twice in parallel: from idShort segments and from
semantic ID segments, each joined with "/". A node without one kind of
identifier contributes no segment of that kind, but its children are
still visited.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Any, NamedTuple

# List-valued fields that hold nested submodel elements
CHILD_LIST_FIELDS = ("submodelElements", "value", "elements", "statements", "annotations")

# Operation variable lists; each entry wraps its element in "value"
OPERATION_VARIABLE_FIELDS = ("inputVariables", "outputVariables", "inoutputVariables")

# Qualifier type fragments that carry a cardinality
CARDINALITY_QUALIFIER_TYPES = ("cardinality", "multiplicity", "occurrence")

_RANGE_RE = re.compile(r"^(\d+)\.\.(\d+|\*)$")
_LEADING_INT_RE = re.compile(r"^\s*([+-]?\d+)")
_WHITESPACE_RE = re.compile(r"\s+")


@dataclass
class PathSets:
    """Element paths of a submodel, by idShort and by semantic ID."""

    id_short: set[str] = field(default_factory=set)
    semantic: set[str] = field(default_factory=set)

    def __contains__(self, path: object) -> bool:
        # An idShort path may satisfy a semantic requirement and vice versa
        return path in self.id_short or path in self.semantic


class Cardinality(NamedTuple):
    min: int
    max: int | None  # None means unbounded or unspecified


def get_semantic_id_value(semantic_id: Any) -> str | None:
    """Normalize a semantic ID to its identifier string.

    Accepts a bare string, an object with a string "value", or a reference
    with a "keys" array (the first key carrying a string value wins).
    """
    if not semantic_id:
        return None
    if isinstance(semantic_id, str):
        return semantic_id
    if not isinstance(semantic_id, dict):
        return None

    value = semantic_id.get("value")
    if isinstance(value, str):
        return value or None

    keys = semantic_id.get("keys")
    if isinstance(keys, list):
        for key in keys:
            if isinstance(key, dict) and isinstance(key.get("value"), str):
                return key["value"] or None
    return None


def extract_child_elements(element: dict[str, Any]) -> list[Any]:
    """Pool the nested elements of a node from all child-bearing fields."""
    children: list[Any] = []
    for key in CHILD_LIST_FIELDS:
        value = element.get(key)
        if isinstance(value, list):
            children.extend(value)

    for key in OPERATION_VARIABLE_FIELDS:
        variables = element.get(key)
        if not isinstance(variables, list):
            continue
        for variable in variables:
            if isinstance(variable, dict) and isinstance(variable.get("value"), dict):
                children.append(variable["value"])

    return children


def parse_cardinality(value: str) -> Cardinality | None:
    """Parse a cardinality qualifier value.

    Recognized forms: "0", "1", "min..max" (max may be "*"), and lexical
    values starting with "zero" or "one" (ZeroToOne, OneToMany, ...).
    """
    if not value:
        return None

    normalized = _WHITESPACE_RE.sub("", value).lower()
    if normalized == "0":
        return Cardinality(0, 0)
    if normalized == "1":
        return Cardinality(1, 1)

    match = _RANGE_RE.match(normalized)
    if match:
        raw_max = match.group(2)
        return Cardinality(int(match.group(1)), None if raw_max == "*" else int(raw_max))

    if normalized.startswith("zero"):
        return Cardinality(0, None)
    if normalized.startswith("one"):
        return Cardinality(1, None)
    return None


def _parse_leading_int(value: str) -> int | None:
    match = _LEADING_INT_RE.match(value)
    return int(match.group(1)) if match else None


def _qualifier_type(qualifier: dict[str, Any]) -> str:
    qualifier_type = qualifier.get("type")
    if isinstance(qualifier_type, str):
        return qualifier_type
    if isinstance(qualifier_type, dict) and isinstance(qualifier_type.get("value"), str):
        return qualifier_type["value"]
    return ""


def is_required(element: dict[str, Any]) -> bool:
    """Check whether an element is required by itself.

    An element is optional when it declares minOccurrences 0, or carries a
    cardinality-like qualifier with minimum 0, or a "min" qualifier with
    value 0. Without any such information the element is required.
    """
    min_occurrences = element.get("minOccurrences")
    if (
        isinstance(min_occurrences, (int, float))
        and not isinstance(min_occurrences, bool)
        and min_occurrences == 0
    ):
        return False

    qualifiers = element.get("qualifiers")
    if not isinstance(qualifiers, list):
        return True

    for qualifier in qualifiers:
        if not isinstance(qualifier, dict):
            continue

        type_value = _qualifier_type(qualifier)
        value = next(
            (qualifier[k] for k in ("value", "valueType", "kind") if qualifier.get(k) is not None),
            None,
        )
        if not type_value and value is None:
            continue

        type_lower = type_value.lower()
        value_lower = str(value).lower() if value is not None else ""

        if any(fragment in type_lower for fragment in CARDINALITY_QUALIFIER_TYPES):
            cardinality = parse_cardinality(value_lower)
            if cardinality is not None and cardinality.min == 0:
                return False

        if "min" in type_lower and value_lower:
            if _parse_leading_int(value_lower) == 0:
                return False

    return True


def collect_paths(elements: Any, required_only: bool) -> PathSets:
    """Collect idShort and semantic paths of an element tree.

    Args:
        elements: Top-level submodel elements
        required_only: Template mode; only paths whose whole ancestry is
            required are collected

    Returns:
        PathSets with "/"-joined paths
    """
    path_sets = PathSets()
    _collect(elements, (), (), True, path_sets, required_only)
    return path_sets


def collect_template_paths(elements: Any) -> PathSets:
    """Paths a template requires."""
    return collect_paths(elements, required_only=True)


def collect_instance_paths(elements: Any) -> PathSets:
    """Paths an instance contains."""
    return collect_paths(elements, required_only=False)


def _collect(
    elements: Any,
    parent_id_short_path: tuple[str, ...],
    parent_semantic_path: tuple[str, ...],
    parent_required: bool,
    path_sets: PathSets,
    required_only: bool,
) -> None:
    if not isinstance(elements, list):
        return

    for element in elements:
        if not isinstance(element, dict):
            continue

        id_short = element.get("idShort")
        if not isinstance(id_short, str) or not id_short:
            id_short = None
        semantic_id = get_semantic_id_value(element.get("semanticId"))
        required = parent_required and (is_required(element) if required_only else True)

        id_short_path = (*parent_id_short_path, id_short) if id_short else parent_id_short_path
        semantic_path = (
            (*parent_semantic_path, semantic_id) if semantic_id else parent_semantic_path
        )

        if not required_only or required:
            if id_short:
                path_sets.id_short.add("/".join(id_short_path))
            if semantic_id:
                path_sets.semantic.add("/".join(semantic_path))

        children = extract_child_elements(element)
        if children:
            _collect(children, id_short_path, semantic_path, required, path_sets, required_only)
