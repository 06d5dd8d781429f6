"""Build-time pipeline: records -> documents -> chunks -> vectors -> store."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Iterable, Iterator, List, Mapping, Sequence, Union

from .documents.factory import create_from_record
from .errors import UnsupportedEmbeddingModelError
from .ingestion.files import find_log_files, load_log_file
from .models import LogRecord, SemanticDocument
from .storage.vector_store import VectorStore
from .utils.chunking import DEFAULT_CHUNK_OVERLAP, DEFAULT_CHUNK_SIZE, split_document, validate_chunking
from .vectorizer import Vectorizer

logger = logging.getLogger(__name__)

RecordLike = Union[LogRecord, Mapping[str, Any]]


@dataclass
class IndexingError:
    source: str
    error: str


@dataclass
class IndexingSummary:
    """Outcome of one indexing call."""

    succeeded: int = 0
    failed: int = 0
    documents_saved: int = 0
    errors: List[IndexingError] = field(default_factory=list)

    def merge(self, other: "IndexingSummary") -> "IndexingSummary":
        return IndexingSummary(
            succeeded=self.succeeded + other.succeeded,
            failed=self.failed + other.failed,
            documents_saved=self.documents_saved + other.documents_saved,
            errors=[*self.errors, *other.errors],
        )

    def to_dict(self) -> dict:
        return {
            "succeeded": self.succeeded,
            "failed": self.failed,
            "documents_saved": self.documents_saved,
            "errors": [{"source": err.source, "error": err.error} for err in self.errors],
        }


class LogIndexer:
    """Index log records, documents or files into a vector store.

    Each source is processed on its own: a failure is recorded in the
    returned ``IndexingSummary`` and the batch continues, unless ``strict`` is
    set, in which case the first error is re-raised. Re-indexing a source
    always adds new vector documents; the store does not deduplicate.
    """

    def __init__(
        self,
        vectorizer: Vectorizer,
        store: VectorStore,
        *,
        chunk_size: int = DEFAULT_CHUNK_SIZE,
        chunk_overlap: int = DEFAULT_CHUNK_OVERLAP,
        strict: bool = False,
    ) -> None:
        validate_chunking(chunk_size, chunk_overlap)
        if not vectorizer.supports_embeddings():
            raise UnsupportedEmbeddingModelError(vectorizer.model_name)
        self.vectorizer = vectorizer
        self.store = store
        self.chunk_size = chunk_size
        self.chunk_overlap = chunk_overlap
        self.strict = strict

    # ------------------------------------------------------------------
    def _index_document(self, document: SemanticDocument) -> int:
        chunks = split_document(document, chunk_size=self.chunk_size, chunk_overlap=self.chunk_overlap)
        if not chunks:
            return 0
        vector_documents = self.vectorizer.vectorize(chunks)
        self.store.save(vector_documents)
        return len(vector_documents)

    def _run(self, sources: Iterable[tuple[str, Any]], build) -> IndexingSummary:
        summary = IndexingSummary()
        for label, source in sources:
            try:
                for document in build(source):
                    summary.documents_saved += self._index_document(document)
            except Exception as exc:
                if self.strict:
                    raise
                logger.warning("Skipping %s: %s", label, exc)
                summary.failed += 1
                summary.errors.append(IndexingError(source=label, error=str(exc)))
                continue
            summary.succeeded += 1

        logger.info(
            "Indexed %d sources (%d failed, %d vector documents saved)",
            summary.succeeded,
            summary.failed,
            summary.documents_saved,
        )
        return summary

    # ------------------------------------------------------------------
    def index_documents(self, documents: Sequence[SemanticDocument]) -> IndexingSummary:
        """Index already-built semantic documents."""

        return self._run(((doc.id, doc) for doc in documents), lambda doc: [doc])

    def index_records(self, records: Sequence[RecordLike]) -> IndexingSummary:
        """Index log records (or mappings accepted by ``LogRecord.from_mapping``)."""

        def build(record: RecordLike) -> List[SemanticDocument]:
            if not isinstance(record, LogRecord):
                record = LogRecord.from_mapping(record)
            return [create_from_record(record)]

        return self._run(((f"record[{idx}]", rec) for idx, rec in enumerate(records)), build)

    def index_files(self, paths: Sequence[str | Path]) -> IndexingSummary:
        """Index log files line by line.

        Each line is its own source, labelled ``path:line_no``; a file that
        cannot be read is recorded as a single failed source.
        """

        def sources() -> Iterator[tuple[str, Union[LogRecord, OSError]]]:
            for path in paths:
                try:
                    records = load_log_file(path)
                except OSError as exc:
                    yield str(path), exc
                    continue
                for record in records:
                    yield f"{path}:{record.extra.get('line_no')}", record

        def build(item: Union[LogRecord, OSError]) -> List[SemanticDocument]:
            if isinstance(item, OSError):
                raise item
            return [create_from_record(item)]

        return self._run(sources(), build)

    def index_directory(
        self,
        directory: str | Path,
        *,
        pattern: str = "*.log",
        recursive: bool = False,
    ) -> IndexingSummary:
        files = find_log_files(directory, pattern=pattern, recursive=recursive)
        if not files:
            logger.warning("No log files matching %s found in %s", pattern, directory)
        return self.index_files(files)
