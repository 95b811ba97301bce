"""Data models for smart blocks, their metadata, and engine results"""

from datetime import datetime
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, Field, field_validator


class BlockType(str, Enum):
    """Restrict smart blocks to a predefined set of kinds"""
    note = "note"
    summary = "summary"
    extract = "extract"
    embedding = "embedding"
    custom = "custom"


class Priority(str, Enum):
    low = "low"
    medium = "medium"
    high = "high"
    critical = "critical"


class BlockStatus(str, Enum):
    draft = "draft"
    active = "active"
    archived = "archived"
    deleted = "deleted"


class Sentiment(str, Enum):
    positive = "positive"
    negative = "negative"
    neutral = "neutral"


class RelationshipType(str, Enum):
    references = "references"
    similar = "similar"
    parent = "parent"
    child = "child"
    related = "related"


BLOCK_TYPES = tuple(t.value for t in BlockType)
PROCESSING_VERSION = "1.0.0"


class ReadabilityMetrics(BaseModel):
    flesch_kincaid: float = 0
    gunning_fog: float = 0
    coleman_liau: float = 0
    smog: float = 0
    automated_readability: float = 0
    average_grade: float = 0


class AIMetadata(BaseModel):
    """Output of the AI collaborators, stamped with the time it was produced."""
    summary: Optional[str] = None
    embedding: Optional[list[float]] = None
    sentiment: Optional[Sentiment] = None
    topics: list[str] = Field(default_factory=list)
    entities: list[str] = Field(default_factory=list)
    keywords: list[str] = Field(default_factory=list)
    readability: ReadabilityMetrics = Field(default_factory=ReadabilityMetrics)
    last_processed: datetime = Field(default_factory=datetime.now)
    processing_version: str = PROCESSING_VERSION


class UsageStats(BaseModel):
    view_count: int = 0
    edit_count: int = 0
    extract_count: int = 0
    last_viewed: datetime = Field(default_factory=datetime.now)
    last_edited: datetime = Field(default_factory=datetime.now)
    popularity: float = 0


class BlockRelationship(BaseModel):
    target_id: str
    type: RelationshipType
    strength: float
    bidirectional: bool = False
    metadata: dict[str, Any] = Field(default_factory=dict)


class BlockMetadata(BaseModel):
    """Descriptive, AI and usage metadata attached to every block."""
    title: Optional[str] = None
    description: Optional[str] = None
    keywords: list[str] = Field(default_factory=list)
    category: Optional[str] = None
    priority: Priority = Priority.medium
    status: BlockStatus = BlockStatus.active
    custom_fields: dict[str, str] = Field(default_factory=dict)     # string-only; serialized into markers
    ai_metadata: AIMetadata = Field(default_factory=AIMetadata)
    relationships: list[BlockRelationship] = Field(default_factory=list)
    usage: UsageStats = Field(default_factory=UsageStats)

    @field_validator("custom_fields")
    @classmethod
    def check_quotable(cls, v: dict[str, str]) -> dict[str, str]:
        """Marker values are quoted with " or '; a value cannot contain both."""
        for key, value in v.items():
            if '"' in value and "'" in value:
                raise ValueError(f"custom field {key!r} cannot contain both quote characters")
        return v


class Block(BaseModel):
    """A typed, metadata-bearing span of document content opened by a marker."""
    id: str
    type: BlockType
    content: str = ""
    position: int = 0               # ordinal assigned in document order at parse time
    tags: list[str] = Field(default_factory=list)       # duplicates preserved
    ai_generated: bool = False
    confidence: Optional[float] = None                  # range checked by validate_block
    version: int = 1
    created_at: datetime = Field(default_factory=datetime.now)
    updated_at: datetime = Field(default_factory=datetime.now)
    parent_id: Optional[str] = None
    children: list[str] = Field(default_factory=list)
    extracted_from: Optional[str] = None
    metadata: Optional[BlockMetadata] = Field(default_factory=BlockMetadata)


class MarkerAttributes(BaseModel):
    """Attributes carried by a single `<!-- @block ... -->` marker line."""
    id: str
    type: str                       # raw value; checked against BlockType when a Block is built
    tags: Optional[list[str]] = None
    ai_generated: bool = False
    confidence: Optional[float] = None
    custom_attributes: dict[str, str] = Field(default_factory=dict)


class ExtractedBlock(BaseModel):
    block: Optional[Block] = None
    remaining_content: str


class ValidationResult(BaseModel):
    is_valid: bool
    errors: list[str] = Field(default_factory=list)


class AIResponse(BaseModel):
    success: bool
    data: Optional[dict[str, Any]] = None
    error: Optional[str] = None
    processing_time: int            # milliseconds
    model: str
    confidence: float
    suggestions: list[str] = Field(default_factory=list)


class ExtractionStats(BaseModel):
    total_blocks: int
    successful_extractions: int
    failed_extractions: int
    processing_time: int


class ExtractionResult(BaseModel):
    extracted_blocks: list[Block]
    remaining_content: str
    extraction_stats: ExtractionStats


class ReorderSuggestion(BaseModel):
    block_id: str
    suggested_position: int
    reason: str
    confidence: float


class ReorderResult(BaseModel):
    reordered_blocks: list[Block]
    reorder_suggestions: list[ReorderSuggestion]
    confidence: float
    reasoning: str


class BatchItemResult(BaseModel):
    block_id: str
    operation: str
    success: bool
    data: Any = None
    error: Optional[str] = None


class BatchStats(BaseModel):
    total: int
    successful: int
    failed: int
    processing_time: int


class BatchResult(BaseModel):
    results: list[BatchItemResult]
    stats: BatchStats


class DocumentStats(BaseModel):
    """File-level counts reported by the stats command."""
    path: str
    size: int                       # bytes
    lines: int
    words: int
    total_blocks: int
    blocks_by_type: dict[str, int] = Field(default_factory=dict)
    ai_generated: int = 0
    total_content_length: int = 0
    average_block_length: int = 0
