"""Pipeline result models."""

from pydantic import BaseModel, Field

from embedding_index.records.models import Record


class IndexingReport(BaseModel):
    """Outcome of an indexing run.

    Attributes:
        reindexed: Whether the table was rebuilt.
        record_count: Records found in the record store.
        entry_count: Entries in the table after the run.
    """

    reindexed: bool = Field(description="Whether the table was rebuilt")
    record_count: int = Field(description="Records in the record store")
    entry_count: int = Field(description="Entries in the vector table")


class RecordMatch(BaseModel):
    """A search hit resolved against the record store."""

    rank: int = Field(ge=1, description="1-based position in the results")
    record: Record = Field(description="Matched record")
    score: float = Field(description="Cosine similarity score")


class SearchResponse(BaseModel):
    """Response from a search.

    Attributes:
        query: Query text as received.
        final_query: Text that was embedded (after any rewrite).
        matches: Resolved hits, best first.
        missing_ids: Index hits with no matching record.
    """

    query: str = Field(description="Original query text")
    final_query: str = Field(description="Embedded query text")
    matches: list[RecordMatch] = Field(default_factory=list, description="Search hits")
    missing_ids: list[str] = Field(
        default_factory=list,
        description="Index ids the record store did not know",
    )
