"""Vector table data models."""

import math

from pydantic import BaseModel, ConfigDict, Field, field_validator


class Entry(BaseModel):
    """A single identifier to embedding mapping.

    Attributes:
        id: Opaque, non-empty identifier. No format is assumed.
        vector: Embedding components, all finite.
    """

    model_config = ConfigDict(frozen=True)

    id: str = Field(min_length=1, description="Record identifier")
    vector: tuple[float, ...] = Field(min_length=1, description="Embedding vector")

    @field_validator("vector")
    @classmethod
    def _check_finite(cls, vector: tuple[float, ...]) -> tuple[float, ...]:
        if not all(math.isfinite(component) for component in vector):
            raise ValueError("vector components must be finite")
        return vector

    @property
    def dimensions(self) -> int:
        """Number of components in the vector."""
        return len(self.vector)
