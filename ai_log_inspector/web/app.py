"""FastAPI application exposing the log search tools over HTTP."""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from fastapi import FastAPI, HTTPException
from pydantic import BaseModel, Field

from ..analysis.schemas import RequestContextOutcome, SearchOutcome
from ..config import InspectorSettings
from ..errors import LogInspectorError, UnsupportedEmbeddingModelError
from ..inspector import LogInspector, create_openai_inspector


class SearchRequest(BaseModel):
    """Request payload for the search endpoint."""

    query: str = Field(..., description="Natural language question about the logs")


class RequestContextRequest(BaseModel):
    identifier: str = Field(..., description="request_id, trace_id or session_id to follow")


class IndexRequest(BaseModel):
    """Log records to index, in the shape accepted by ``LogRecord.from_mapping``."""

    records: List[Dict[str, Any]] = Field(..., min_length=1)


class IndexResponse(BaseModel):
    succeeded: int
    failed: int
    documents_saved: int
    errors: List[Dict[str, str]]


def create_app(
    *,
    settings: Optional[InspectorSettings] = None,
    inspector: Optional[LogInspector] = None,
) -> FastAPI:
    """Instantiate the FastAPI app with shared dependencies."""

    settings = settings or InspectorSettings()
    inspector = inspector or create_openai_inspector(settings)

    app = FastAPI(title="AI Log Inspector", version="1.0.0")

    @app.get("/healthz")
    async def healthcheck() -> dict[str, Any]:
        return {"status": "ok", "documents": inspector.store.count}

    # Sync handlers: provider calls block, so FastAPI runs them in its threadpool.
    @app.post("/api/search", response_model=SearchOutcome)
    def search_endpoint(payload: SearchRequest) -> SearchOutcome:
        return inspector.search_tool.search(payload.query)

    @app.post("/api/request-context", response_model=RequestContextOutcome)
    def request_context_endpoint(payload: RequestContextRequest) -> RequestContextOutcome:
        return inspector.request_context_tool.trace(payload.identifier)

    @app.post("/api/index", response_model=IndexResponse)
    def index_endpoint(payload: IndexRequest) -> IndexResponse:
        try:
            summary = inspector.indexer.index_records(payload.records)
        except UnsupportedEmbeddingModelError as exc:
            raise HTTPException(status_code=503, detail=str(exc)) from exc
        except LogInspectorError as exc:
            raise HTTPException(status_code=422, detail=str(exc)) from exc
        return IndexResponse(**summary.to_dict())

    return app
