"""Record data models."""

from typing import Any

from pydantic import BaseModel, Field


class Record(BaseModel):
    """A domain record as held by the record store.

    The index only ever keeps ``id``; ``fields`` feed the description that
    gets embedded.

    Attributes:
        id: Stable identifier, shared with the vector table.
        fields: Record attributes in display order.
    """

    id: str = Field(min_length=1, description="Record identifier")
    fields: dict[str, Any] = Field(
        default_factory=dict,
        description="Record attributes",
    )

    @classmethod
    def from_mapping(cls, data: dict[str, Any]) -> "Record":
        """Build a record from a flat mapping holding an ``id`` key.

        Args:
            data: Mapping such as one element of a JSON export.

        Returns:
            New Record with every other key moved into ``fields``.
        """
        fields = {key: value for key, value in data.items() if key != "id"}
        return cls(id=str(data["id"]), fields=fields)
