"""Block operation engine: summaries, embeddings, AI metadata, extraction, reordering, batches"""

import logging
import time
from datetime import datetime
from typing import Any, Optional

from pydantic import ValidationError

from smartblocks.config import Settings
from smartblocks.core.errors import OperationError
from smartblocks.core.models import (
    AIMetadata,
    AIResponse,
    BatchResult,
    BatchStats,
    Block,
    ExtractionResult,
    ExtractionStats,
    Priority,
    ReorderResult,
    ReorderSuggestion,
)
from smartblocks.core.parse import BlockSpan, new_block, scan_spans
from smartblocks.engine.batch import BatchJob, Executor, SequentialExecutor, iter_jobs
from smartblocks.engine.service import AIService, LocalAIService


logger = logging.getLogger(__name__)

PRIORITY_RANK = {Priority.critical: 4, Priority.high: 3, Priority.medium: 2, Priority.low: 1}
DEFAULT_RANK = 2
SHORT_CONTENT_WORDS = 20


def _elapsed_ms(start: float) -> int:
    return int((time.perf_counter() - start) * 1000)


def _span_matches(span: BlockSpan, block_type: Optional[str], min_length: Optional[int],
                  max_length: Optional[int], tags: Optional[list[str]]) -> bool:
    """True when the span passes every supplied filter."""
    content = span.content
    if block_type and span.marker.type != block_type:
        return False
    if min_length is not None and len(content) < min_length:
        return False
    if max_length is not None and len(content) > max_length:
        return False
    if tags and not set(tags) & set(span.marker.tags or []):
        return False
    return True


class SummaryEngine:
    """Runs AI operations over blocks through an injected AIService.

    Holds no per-call state; one instance may serve concurrent calls over
    disjoint blocks.
    """

    def __init__(
        self,
        service: Optional[AIService] = None,
        settings: Optional[Settings] = None,
        executor: Optional[Executor] = None,
    ):
        self.settings = settings or Settings()
        self.service = service or LocalAIService(embedding_dim=self.settings.embedding_dim)
        self.executor = executor or SequentialExecutor()
        self._operations = {
            'summarize': self.generate_summary,
            'embed': self.generate_embeddings,
            'metadata': self.update_ai_metadata,
        }

    def _payload(self, block: Block) -> dict[str, Any]:
        return {
            'content': block.content,
            'type': getattr(block.type, 'value', block.type),
            'context': block.metadata.model_dump(mode='json', exclude={'ai_metadata'}) if block.metadata else {},
        }

    def _suggestions(self, block: Block) -> list[str]:
        suggestions = []
        if len(block.content.split()) < SHORT_CONTENT_WORDS:
            suggestions.append('Consider adding more context')
        if block.metadata is None or not block.metadata.relationships:
            suggestions.append('This could be linked to related blocks')
        if not block.tags:
            suggestions.append('Add tags for better categorization')
        return suggestions

    async def generate_summary(self, block: Block) -> AIResponse:
        """Summarize a block. Collaborator errors come back as success=False; never raises."""
        start = time.perf_counter()
        confidence = self.settings.summary_confidence
        try:
            payload = self._payload(block)
            summary = await self.service.call('summarize', payload)
            topics = await self.service.call('topics', payload)
            keywords = await self.service.call('keywords', payload)
        except Exception as e:
            logger.debug("summary failed for block %s: %s", block.id, e)
            return AIResponse(
                success=False,
                error=f"Failed to generate summary: {e}",
                processing_time=_elapsed_ms(start),
                model=self.service.model,
                confidence=0,
                suggestions=[],
            )

        return AIResponse(
            success=True,
            data={'summary': summary, 'confidence': confidence, 'topics': topics, 'keywords': keywords},
            processing_time=_elapsed_ms(start),
            model=self.service.model,
            confidence=confidence,
            suggestions=self._suggestions(block),
        )

    async def generate_embeddings(self, block: Block) -> list[float]:
        """Embed content plus metadata keywords. Raises OperationError on collaborator failure."""
        keywords = block.metadata.keywords if block.metadata else []
        try:
            return await self.service.call('embed', {'text': f"{block.content} {' '.join(keywords)}"})
        except Exception as e:
            raise OperationError(f"Failed to generate embeddings: {e}") from e

    async def update_ai_metadata(self, block: Block) -> AIMetadata:
        """Collect every collaborator output for a block into one AIMetadata."""
        try:
            summary = await self.generate_summary(block)
            embedding = await self.generate_embeddings(block)
            payload = self._payload(block)
            return AIMetadata(
                summary=summary.data['summary'] if summary.success else None,
                embedding=embedding,
                sentiment=await self.service.call('sentiment', payload),
                topics=await self.service.call('topics', payload),
                entities=await self.service.call('entities', payload),
                keywords=await self.service.call('keywords', payload),
                readability=await self.service.call('readability', payload),
                last_processed=datetime.now(),
                processing_version=self.settings.processing_version,
            )
        except Exception as e:
            raise OperationError(f"Failed to update AI metadata: {e}") from e

    async def extract_blocks(
        self,
        content: str,
        block_type: Optional[str] = None,
        min_length: Optional[int] = None,
        max_length: Optional[int] = None,
        tags: Optional[list[str]] = None,
    ) -> ExtractionResult:
        """Pull the blocks matching every given filter out of content.

        A block that matches but cannot be built (e.g. unsupported type) is
        counted as a failed extraction and left in remaining_content.
        """
        start = time.perf_counter()
        preamble, spans = scan_spans(content)
        extracted: list[Block] = []
        remaining = list(preamble)
        failed = 0

        for span in spans:
            if not span.body or not _span_matches(span, block_type, min_length, max_length, tags):
                remaining.extend(span.lines)
                continue
            try:
                block = new_block(span.marker, span.content, len(extracted))
            except ValidationError as e:
                logger.debug("could not extract block %s: %s", span.marker.id, e)
                failed += 1
                remaining.extend(span.lines)
                continue
            block.metadata.usage.extract_count += 1
            extracted.append(block)

        return ExtractionResult(
            extracted_blocks=extracted,
            remaining_content='\n'.join(remaining),
            extraction_stats=ExtractionStats(
                total_blocks=len(spans),
                successful_extractions=len(extracted),
                failed_extractions=failed,
                processing_time=_elapsed_ms(start),
            ),
        )

    async def reorder_blocks(self, blocks: list[Block]) -> ReorderResult:
        """Order by priority (critical first), then oldest first; stable for ties."""
        def _key(block: Block):
            priority = block.metadata.priority if block.metadata else None
            return -PRIORITY_RANK.get(priority, DEFAULT_RANK), block.created_at

        indexed = sorted(enumerate(blocks), key=lambda pair: _key(pair[1]))
        confidence = self.settings.reorder_confidence
        suggestions = [
            ReorderSuggestion(
                block_id=block.id,
                suggested_position=new_index,
                reason=f"Moved to position {new_index} based on priority and creation date",
                confidence=confidence,
            )
            for new_index, (old_index, block) in enumerate(indexed)
            if old_index != new_index
        ]
        return ReorderResult(
            reordered_blocks=[block for _, block in indexed],
            reorder_suggestions=suggestions,
            confidence=confidence,
            reasoning="Blocks reordered by priority and creation date",
        )

    async def _run(self, job: BatchJob) -> Any:
        operation = self._operations.get(job.operation)
        if operation is None:
            raise ValueError(f"Unknown operation: {job.operation}")
        data = await operation(job.block)
        if isinstance(data, AIResponse) and not data.success:
            raise OperationError(data.error)
        return data

    async def batch_process(self, blocks: list[Block], operations: list[str]) -> BatchResult:
        """Apply each operation to each block; one failing pair never stops the others."""
        start = time.perf_counter()
        results = await self.executor.run(iter_jobs(blocks, operations), self._run)
        successful = sum(1 for r in results if r.success)

        stats = BatchStats(
            total=len(blocks) * len(operations),
            successful=successful,
            failed=len(results) - successful,
            processing_time=_elapsed_ms(start),
        )
        logger.info("batch finished: %d ok, %d failed of %d", stats.successful, stats.failed, stats.total)
        return BatchResult(results=results, stats=stats)
