"""
HTTP API over the vector memory service.
"""

import threading
from dataclasses import asdict
from typing import Optional

from fastapi import FastAPI, Depends, Request
from fastapi.responses import JSONResponse

from .schemas import (
    MemoryCreateRequest,
    MemoryCreateResponse,
    MemoryResponse,
    SearchRequest,
    SearchResponse,
    SearchResultItem,
    DeleteResponse,
    StatisticsResponse,
    HealthResponse,
    ErrorResponse,
)
from .. import VERSION
from ..core.config import debug_enabled, get_record_store, get_vector_driver, get_embedding_provider
from ..core.exceptions import ConfigurationError, DimensionMismatchError, StorageError
from ..core.memory_service import VectorMemoryService
from ..util.logging import logger

app = FastAPI(
    title="Vector Memory API",
    version=VERSION,
    description="Agent vector memory with pluggable in-memory and pgvector drivers",
    docs_url="/docs" if debug_enabled() else None,
    redoc_url="/redoc" if debug_enabled() else None
)

_service: Optional[VectorMemoryService] = None
_service_lock = threading.Lock()


def get_memory_service() -> VectorMemoryService:
    """Build the configured service once per process."""
    global _service
    if _service is None:
        with _service_lock:
            if _service is None:
                store = get_record_store()
                _service = VectorMemoryService(store, get_vector_driver(store=store), get_embedding_provider())
    return _service


@app.exception_handler(ConfigurationError)
async def configuration_error_handler(request: Request, exc: ConfigurationError):
    logger.error(f"Vector backend unavailable: {exc}")
    return JSONResponse(
        status_code=503,
        content=ErrorResponse(error="backend_unavailable", detail=str(exc)).model_dump()
    )


@app.exception_handler(StorageError)
async def storage_error_handler(request: Request, exc: StorageError):
    logger.error(f"Vector backend operation failed: {exc}")
    return JSONResponse(
        status_code=500,
        content=ErrorResponse(error="storage_error", detail=exc.original_message, operation=exc.operation).model_dump()
    )


@app.exception_handler(DimensionMismatchError)
async def dimension_error_handler(request: Request, exc: DimensionMismatchError):
    return JSONResponse(
        status_code=400,
        content=ErrorResponse(error="dimension_mismatch", detail=str(exc)).model_dump()
    )


@app.exception_handler(ValueError)
async def value_error_handler(request: Request, exc: ValueError):
    return JSONResponse(
        status_code=422,
        content=ErrorResponse(error="invalid_request", detail=str(exc)).model_dump()
    )


@app.get("/health", response_model=HealthResponse)
def health_check_endpoint(service: VectorMemoryService = Depends(get_memory_service)):
    """Check system health."""
    db_health = service.record_store.health_check()
    driver_available = service.driver.is_available()

    return HealthResponse(
        status="healthy" if db_health and driver_available else "unhealthy",
        version=VERSION,
        db_health=db_health,
        driver=service.driver.get_name(),
        driver_available=driver_available
    )


@app.post("/memories", response_model=MemoryCreateResponse)
def add_memory_endpoint(req: MemoryCreateRequest, service: VectorMemoryService = Depends(get_memory_service)):
    if req.chunk:
        records = service.add_document(
            req.agent_name, req.content, req.metadata, req.namespace, req.source, req.source_id,
            chunk_size=req.chunk_size, overlap=req.overlap
        )
    else:
        records = [service.add_memory(req.agent_name, req.content, req.metadata, req.namespace,
                                      req.source, req.source_id)]

    return MemoryCreateResponse(
        success=True,
        driver=service.driver.get_name(),
        memories=[
            MemoryResponse(
                id=r.id,
                agent_name=r.agent_name,
                namespace=r.namespace,
                source=r.source,
                source_id=r.source_id,
                embedding_provider=r.embedding_provider,
                embedding_model=r.embedding_model,
                token_count=r.token_count,
                created_at=r.created_at,
            )
            for r in records
        ]
    )


@app.post("/memories/search", response_model=SearchResponse)
def search_memories_endpoint(req: SearchRequest, service: VectorMemoryService = Depends(get_memory_service)):
    results = service.search(req.agent_name, req.query, req.namespace, req.limit, req.threshold)

    return SearchResponse(
        driver=service.driver.get_name(),
        query=req.query,
        results=[SearchResultItem(**asdict(r)) for r in results],
        count=len(results)
    )


@app.delete("/memories/{agent_name}", response_model=DeleteResponse)
def delete_memories_endpoint(agent_name: str, namespace: str = "default", source: Optional[str] = None,
                             service: VectorMemoryService = Depends(get_memory_service)):
    deleted = service.forget(agent_name, namespace, source)
    return DeleteResponse(success=True, deleted=deleted)


@app.get("/memories/{agent_name}/stats", response_model=StatisticsResponse)
def memory_statistics_endpoint(agent_name: str, namespace: str = "default",
                               service: VectorMemoryService = Depends(get_memory_service)):
    stats = service.statistics(agent_name, namespace)

    return StatisticsResponse(
        agent_name=agent_name,
        namespace=namespace,
        driver=service.driver.get_name(),
        **stats.to_dict()
    )
