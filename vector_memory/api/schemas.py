"""
Request and response models for the vector memory API.
"""

from pydantic import BaseModel, Field, field_validator
from typing import Optional, List, Dict, Any
from datetime import datetime


class MemoryCreateRequest(BaseModel):
    agent_name: str
    content: str
    namespace: str = "default"
    metadata: Dict[str, Any] = Field(default_factory=dict)
    source: Optional[str] = None
    source_id: Optional[str] = None
    chunk: bool = False
    chunk_size: int = Field(default=1000, gt=0)
    overlap: int = Field(default=100, ge=0)

    @field_validator('agent_name')
    @classmethod
    def agent_name_must_not_be_empty(cls, v):
        if not v.strip():
            raise ValueError('agent_name cannot be empty')
        return v

    @field_validator('content')
    @classmethod
    def content_must_not_be_empty(cls, v):
        if not v.strip():
            raise ValueError('content cannot be empty')
        return v


class MemoryResponse(BaseModel):
    id: int
    agent_name: str
    namespace: str
    source: Optional[str] = None
    source_id: Optional[str] = None
    embedding_provider: str
    embedding_model: str
    token_count: int
    created_at: Optional[datetime] = None


class MemoryCreateResponse(BaseModel):
    success: bool
    driver: str
    memories: List[MemoryResponse]


class SearchRequest(BaseModel):
    agent_name: str
    query: str
    namespace: str = "default"
    limit: int = 5
    threshold: float = 0.7

    @field_validator('agent_name')
    @classmethod
    def agent_name_must_not_be_empty(cls, v):
        if not v.strip():
            raise ValueError('agent_name cannot be empty')
        return v


class SearchResultItem(BaseModel):
    id: Optional[int] = None
    agent_name: str
    namespace: str
    content: str
    metadata: Dict[str, Any] = Field(default_factory=dict)
    source: Optional[str] = None
    source_id: Optional[str] = None
    embedding_provider: str
    embedding_model: str
    created_at: Optional[datetime] = None
    similarity: float


class SearchResponse(BaseModel):
    driver: str
    query: str
    results: List[SearchResultItem]
    count: int


class DeleteResponse(BaseModel):
    success: bool
    deleted: int


class StatisticsResponse(BaseModel):
    agent_name: str
    namespace: str
    driver: str
    total_memories: int
    total_tokens: int
    providers: Dict[str, int]
    sources: Dict[str, int]
    error: Optional[str] = None


class HealthResponse(BaseModel):
    status: str
    version: str
    db_health: bool
    driver: str
    driver_available: bool


class ErrorResponse(BaseModel):
    error: str
    detail: Optional[str] = None
    operation: Optional[str] = None
