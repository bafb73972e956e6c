"""Record store module."""

from embedding_index.records.description import describe_record
from embedding_index.records.models import Record
from embedding_index.records.store import InMemoryRecordStore, JSONRecordStore, RecordStore

__all__ = [
    "InMemoryRecordStore",
    "JSONRecordStore",
    "Record",
    "RecordStore",
    "describe_record",
]
