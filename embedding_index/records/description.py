"""Textual descriptions of records for embedding."""

from collections.abc import Sequence
from typing import Any

from embedding_index.records.models import Record


def _label(key: str) -> str:
    return key.replace("_", " ").strip().capitalize()


def _render(value: Any) -> str:
    if isinstance(value, (list, tuple)):
        return ", ".join(str(item) for item in value if item not in (None, ""))
    return str(value)


def describe_record(record: Record, field_order: Sequence[str] | None = None) -> str:
    """Describe a record as ``Label: value`` lines.

    The result depends only on the record's fields, so re-describing an
    unchanged record always yields the same text.

    Args:
        record: Record to describe.
        field_order: Fields to include, in order. Defaults to every field in
            the record's own order.

    Returns:
        Multi-line description. Empty values are skipped.
    """
    keys = field_order if field_order is not None else list(record.fields)
    lines = []
    for key in keys:
        value = record.fields.get(key)
        if value is None:
            continue
        rendered = _render(value).strip()
        if rendered:
            lines.append(f"{_label(key)}: {rendered}")
    return "\n".join(lines)
