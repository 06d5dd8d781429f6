"""Answer "why did X happen" questions from indexed logs.

Each invocation runs through three tiers and always returns a structured
``SearchOutcome``:

1. semantic search through the retriever, filtered by a relevance threshold;
2. keyword ranking over a scan of the store when embeddings are unsupported
   or the semantic tier fails;
3. root cause synthesis by the generation provider, with a regex fallback.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional, Sequence

from ..config import InspectorSettings
from ..models import VectorDocument
from ..providers.base import GenerationBackend, call_with_timeout, generate_text
from ..retriever import LogRetriever
from ..storage.vector_store import VectorStore
from .keyword import keyword_search
from .outcome import ErrorKind, Outcome, classify
from .patterns import match_root_cause
from .schemas import EvidenceEntry, SearchMethod, SearchOutcome

logger = logging.getLogger(__name__)

EMPTY_QUERY_MESSAGE = (
    "Query parameter is required and cannot be empty. "
    "Please provide a search term to find relevant log entries."
)

ANALYSIS_PROMPT = (
    "Analyze these log entries and provide a concise explanation of what caused the "
    "error or issue. Focus on the root cause, not just listing what happened:\n\n"
)


def filter_relevant(results: Sequence[VectorDocument], threshold: float) -> List[VectorDocument]:
    """Keep results scoring at least ``threshold``; unscored results always pass."""

    return [doc for doc in results if doc.score is None or doc.score >= threshold]


class LogSearchTool:
    """Search indexed logs and explain the most likely root cause."""

    name = "log_search"
    description = (
        "Search logs for relevant entries. Provide a query string with keywords to "
        "search for (e.g. 'payment errors', 'database timeouts')."
    )

    def __init__(
        self,
        store: VectorStore,
        retriever: LogRetriever,
        generator: Optional[GenerationBackend] = None,
        *,
        settings: Optional[InspectorSettings] = None,
    ) -> None:
        self.store = store
        self.retriever = retriever
        self.generator = generator
        self.settings = settings or InspectorSettings()

    @property
    def relevance_threshold(self) -> float:
        return self.settings.relevance_threshold

    @property
    def max_results(self) -> int:
        return self.settings.max_results

    # ------------------------------------------------------------------
    # Search tiers
    # ------------------------------------------------------------------
    def semantic_search(self, query: str) -> Outcome[List[VectorDocument]]:
        if not self.retriever.vectorizer.supports_embeddings():
            return Outcome.failure(ErrorKind.EMBEDDINGS_UNSUPPORTED)
        try:
            results = self.retriever.retrieve(query, max_items=self.max_results)
        except Exception as exc:
            return Outcome.failure(classify(exc), str(exc))
        return Outcome.success(filter_relevant(results, self.relevance_threshold))

    def keyword_search(self, query: str) -> Outcome[List[VectorDocument]]:
        try:
            candidates = self.store.scan(limit=self.settings.keyword_scan_limit)
        except Exception as exc:
            return Outcome.failure(ErrorKind.STORE_FAILURE, str(exc))
        return Outcome.success(keyword_search(query, candidates, max_results=self.max_results))

    def _find_evidence(self, query: str) -> tuple[Outcome[List[VectorDocument]], SearchMethod]:
        semantic = self.semantic_search(query)
        if semantic.ok:
            return semantic, "semantic"

        if semantic.error is ErrorKind.EMBEDDINGS_UNSUPPORTED:
            logger.info("Embeddings unsupported; using keyword search for %r", query)
        else:
            logger.warning(
                "Semantic search failed (%s: %s); falling back to keyword search",
                semantic.error.value,
                semantic.detail,
            )
        return self.keyword_search(query), "keyword-based"

    # ------------------------------------------------------------------
    # Root cause synthesis
    # ------------------------------------------------------------------
    def _generate_reason(self, combined: str) -> Outcome[str]:
        if self.generator is None:
            return Outcome.failure(ErrorKind.GENERATION_FAILURE, "no generation provider configured")
        try:
            text = call_with_timeout(
                generate_text,
                self.generator,
                ANALYSIS_PROMPT + combined,
                timeout=self.settings.provider_timeout,
            )
        except Exception as exc:
            kind = classify(exc)
            if kind is not ErrorKind.PROVIDER_TIMEOUT:
                kind = ErrorKind.GENERATION_FAILURE
            return Outcome.failure(kind, str(exc))
        text = (text or "").strip()
        if not text:
            return Outcome.failure(ErrorKind.GENERATION_FAILURE, "empty response")
        return Outcome.success(text)

    def analyze(self, contents: Sequence[str]) -> str:
        """Explain the root cause behind ``contents``; never raises."""

        if not contents:
            return "No relevant logs found to determine the cause."
        combined = "\n".join(contents)
        generated = self._generate_reason(combined)
        if generated.ok:
            return generated.value
        logger.warning(
            "Root cause generation failed (%s: %s); using pattern matching",
            generated.error.value,
            generated.detail,
        )
        return match_root_cause(combined)

    # ------------------------------------------------------------------
    def search(self, query: str) -> SearchOutcome:
        query = (query or "").strip()
        if not query:
            return SearchOutcome(success=False, reason=EMPTY_QUERY_MESSAGE, search_method="none")

        found, method = self._find_evidence(query)
        if not found.ok:
            logger.error("Keyword search failed for %r: %s", query, found.detail)
            return SearchOutcome(
                success=False,
                reason=f"Search failed: {found.detail or found.error.value}",
                search_method=method,
                query=query,
            )

        results = found.value or []
        if not results:
            return SearchOutcome(
                success=False,
                reason=(
                    f"No relevant log entries found matching '{query}' using {method} search. "
                    "Try different keywords or check if the logs have been loaded correctly."
                ),
                search_method=method,
                query=query,
            )

        evidence = [EvidenceEntry.from_document(doc) for doc in results]
        return SearchOutcome(
            success=True,
            reason=self.analyze([entry.content for entry in evidence]),
            evidence_logs=evidence,
            search_method=method,
            query=query,
            log_count=len(evidence),
        )

    def __call__(self, query: str = "") -> Dict[str, Any]:
        return self.search(query).to_dict()
