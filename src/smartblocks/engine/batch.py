"""Batch work queue and execution strategies for per-block operations"""

import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Iterable, Iterator, Protocol

from smartblocks.core.models import BatchItemResult, Block


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BatchJob:
    block: Block
    operation: str


Handler = Callable[[BatchJob], Awaitable[Any]]


def iter_jobs(blocks: Iterable[Block], operations: list[str]) -> Iterator[BatchJob]:
    """Yield one job per (block, operation) pair, block-major."""
    for block in blocks:
        for operation in operations:
            yield BatchJob(block=block, operation=operation)


async def run_job(job: BatchJob, handler: Handler) -> BatchItemResult:
    """Run a single job; any exception becomes a failed result, never propagates."""
    try:
        data = await handler(job)
    except Exception as e:
        logger.warning("%s failed for block %s: %s", job.operation, job.block.id, e)
        return BatchItemResult(block_id=job.block.id, operation=job.operation, success=False, error=str(e))
    return BatchItemResult(block_id=job.block.id, operation=job.operation, success=True, data=data)


class Executor(Protocol):
    async def run(self, jobs: Iterable[BatchJob], handler: Handler) -> list[BatchItemResult]:
        ...


class SequentialExecutor:
    """Awaits one job at a time in queue order."""

    async def run(self, jobs: Iterable[BatchJob], handler: Handler) -> list[BatchItemResult]:
        return [await run_job(job, handler) for job in jobs]


class ConcurrentExecutor:
    """Runs up to max_concurrency jobs at once; results keep queue order."""

    def __init__(self, max_concurrency: int = 4):
        if max_concurrency < 1:
            raise ValueError("max_concurrency must be >= 1")
        self.max_concurrency = max_concurrency

    async def run(self, jobs: Iterable[BatchJob], handler: Handler) -> list[BatchItemResult]:
        semaphore = asyncio.Semaphore(self.max_concurrency)

        async def _bounded(job: BatchJob) -> BatchItemResult:
            async with semaphore:
                return await run_job(job, handler)

        return list(await asyncio.gather(*(_bounded(job) for job in jobs)))


def make_executor(concurrency: int = 1) -> Executor:
    return SequentialExecutor() if concurrency <= 1 else ConcurrentExecutor(concurrency)
