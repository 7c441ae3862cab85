from __future__ import annotations

from typing import Any, Dict, List, Union

from ..models import SortDirection, SortField

DEFAULT_SORT_FIELD = "created_at"
DEFAULT_SORT_DIRECTION = SortDirection.DESC

# Analyzed text cannot be sorted, so title sorts on its keyword sub-field.
SORT_FIELD_MAPPING: Dict[str, str] = {
    SortField.CREATED_AT.value: "created_at",
    SortField.UPDATED_AT.value: "updated_at",
    SortField.COMPLETED_AT.value: "completed_at",
    SortField.TITLE.value: "title.keyword",
    SortField.STATUS.value: "status",
    SortField.PRIORITY.value: "priority",
    SortField.SEVERITY.value: "severity",
    SortField.DUE_DATE.value: "due_date",
}


def resolve_sort_field(field: Union[None, str, SortField]) -> str:
    if field is None:
        return DEFAULT_SORT_FIELD
    key = field.value if isinstance(field, SortField) else field
    return SORT_FIELD_MAPPING.get(key, DEFAULT_SORT_FIELD)


def resolve_sort_direction(direction: Union[None, str, SortDirection]) -> SortDirection:
    if direction is None:
        return DEFAULT_SORT_DIRECTION
    try:
        return SortDirection(direction)
    except ValueError:
        return DEFAULT_SORT_DIRECTION


def resolve_sort(
    field: Union[None, str, SortField] = None,
    direction: Union[None, str, SortDirection] = None,
) -> List[Dict[str, Any]]:
    """Sort clause for a logical field, e.g. ``[{"created_at": {"order": "desc"}}]``."""

    return [{resolve_sort_field(field): {"order": resolve_sort_direction(direction).value}}]
