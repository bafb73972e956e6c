"""Similarity index data models."""

from pydantic import BaseModel, Field


class SearchResult(BaseModel):
    """Result from a similarity query.

    Attributes:
        id: Identifier of the matched entry.
        score: Cosine similarity in [-1, 1] (higher is more similar).
    """

    id: str = Field(description="Entry identifier")
    score: float = Field(description="Cosine similarity score")
