"""Indexing pipeline — record store, request, processing, and the worker loop."""

from talentmatch.indexing.processor import DocumentProcessor
from talentmatch.indexing.requests import request_indexing
from talentmatch.indexing.store import EmbeddingRecordStore
from talentmatch.indexing.types import BatchResult, EmbeddingStatusSnapshot, ProcessResult
from talentmatch.indexing.worker import IndexingWorker

__all__ = [
    "BatchResult",
    "DocumentProcessor",
    "EmbeddingRecordStore",
    "EmbeddingStatusSnapshot",
    "IndexingWorker",
    "ProcessResult",
    "request_indexing",
]
