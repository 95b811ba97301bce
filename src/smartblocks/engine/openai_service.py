"""AI-service collaborator backed by an OpenAI-compatible API via the OpenAI SDK."""

import logging
from typing import Any

from openai import AsyncOpenAI

from smartblocks.config import Settings
from smartblocks.engine.service import LocalAIService


logger = logging.getLogger(__name__)

SUMMARY_PROMPT = (
    "Summarize the following {type} note in one or two sentences. "
    "Reply with the summary only.\n\n{content}"
)


class OpenAIService(LocalAIService):
    """Hosted summaries and embeddings; the remaining operations stay local."""

    def __init__(self, settings: Settings, client: AsyncOpenAI | None = None):
        super().__init__(embedding_dim=settings.embedding_dim)
        self.model = settings.ai_model
        self.embedding_model = settings.embedding_model
        self._settings = settings
        self._client = client

    def _get_client(self) -> AsyncOpenAI:
        """Get or create the async client; created lazily so no key is needed until first call."""
        if self._client is None:
            self._client = AsyncOpenAI(
                api_key=self._settings.openai_api_key or None,
                base_url=self._settings.openai_base_url,
            )
        return self._client

    async def _summarize(self, payload: dict[str, Any]) -> str:
        content = payload['content']
        if not content.strip():
            raise ValueError("Cannot summarize empty content")

        response = await self._get_client().chat.completions.create(
            model=self.model,
            messages=[{
                "role": "user",
                "content": SUMMARY_PROMPT.format(type=payload.get('type', 'note'), content=content),
            }],
        )
        summary = (response.choices[0].message.content or "").strip()
        if not summary:
            raise RuntimeError(f"Empty summary returned by {self.model}")
        return summary

    async def _embed(self, payload: dict[str, Any]) -> list[float]:
        text = payload['text']
        if not text.strip():
            raise ValueError("Cannot embed empty text")

        response = await self._get_client().embeddings.create(
            model=self.embedding_model,
            input=text,
            dimensions=self.embedding_dim,
        )
        logger.debug("embedded %d chars with %s", len(text), self.embedding_model)
        return response.data[0].embedding
