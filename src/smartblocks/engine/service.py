"""AI-service collaborator interface and the offline heuristic implementation"""

import logging
import math
from abc import ABC, abstractmethod
from typing import Any

from smartblocks.config import Settings
from smartblocks.core.utils.hashing import hash_bucket
from smartblocks.engine import text


logger = logging.getLogger(__name__)

OPERATIONS = ('summarize', 'embed', 'topics', 'keywords', 'entities', 'sentiment', 'readability')


class AIService(ABC):
    """Boundary to an external AI provider.

    call() returns operation-specific data or raises; callers treat any
    exception as a recoverable per-item failure.
    """

    model: str = "unknown"

    @abstractmethod
    async def call(self, operation: str, payload: dict[str, Any]) -> Any:
        ...


class LocalAIService(AIService):
    """Deterministic offline stand-in for a hosted model.

    Payloads carry at least a `content` string; `embed` reads `text`.
    """

    model = "local-heuristic"

    def __init__(self, embedding_dim: int = 384, summary_chars: int = 100):
        self.embedding_dim = embedding_dim
        self.summary_chars = summary_chars

    async def call(self, operation: str, payload: dict[str, Any]) -> Any:
        handler = getattr(self, f"_{operation}", None)
        if operation not in OPERATIONS or handler is None:
            raise ValueError(f"Unknown AI operation: {operation}")
        logger.debug("%s: %s", self.model, operation)
        return await handler(payload)

    async def _summarize(self, payload: dict[str, Any]) -> str:
        prose = text.plain_text(payload['content']).strip()
        if not prose:
            raise ValueError("Cannot summarize empty content")
        if len(prose) <= self.summary_chars:
            return prose
        return f"{prose[:self.summary_chars].rstrip()}..."

    async def _embed(self, payload: dict[str, Any]) -> list[float]:
        """L2-normalized signed feature hash of lowercased words."""
        vector = [0.0] * self.embedding_dim
        for word in text.words(payload['text']):
            index, sign = hash_bucket(word.lower(), self.embedding_dim)
            vector[index] += sign
        norm = math.sqrt(sum(v * v for v in vector))
        return [v / norm for v in vector] if norm else vector

    async def _topics(self, payload: dict[str, Any]) -> list[str]:
        return text.extract_topics(payload['content'])

    async def _keywords(self, payload: dict[str, Any]) -> list[str]:
        return text.extract_keywords(payload['content'])

    async def _entities(self, payload: dict[str, Any]) -> list[str]:
        return text.extract_entities(payload['content'])

    async def _sentiment(self, payload: dict[str, Any]):
        return text.analyze_sentiment(payload['content'])

    async def _readability(self, payload: dict[str, Any]):
        return text.calculate_readability(payload['content'])


def make_service(settings: Settings) -> AIService:
    """Build the collaborator named by settings.ai_provider."""
    if settings.ai_provider == "openai":
        from smartblocks.engine.openai_service import OpenAIService
        return OpenAIService(settings)
    return LocalAIService(embedding_dim=settings.embedding_dim)
