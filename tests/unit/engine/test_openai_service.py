"""Tests for the OpenAI-backed collaborator with a mocked client."""

from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from smartblocks.config import Settings
from smartblocks.engine.openai_service import OpenAIService


def create_mock_client(summary: str = "A summary.", embedding: list[float] = None):
    """Create a mock AsyncOpenAI client with chat and embedding endpoints."""
    client = MagicMock()
    chat_response = MagicMock()
    chat_response.choices = [MagicMock(message=MagicMock(content=summary))]
    client.chat.completions.create = AsyncMock(return_value=chat_response)

    embed_response = MagicMock()
    embed_response.data = [MagicMock(embedding=embedding or [0.1, 0.2, 0.3, 0.4])]
    client.embeddings.create = AsyncMock(return_value=embed_response)
    return client


@pytest.fixture(name="settings")
def settings_fixture():
    return Settings(ai_provider="openai", openai_api_key="sk-test", embedding_dim=4)


class TestOpenAISummarize:
    """Tests for hosted summaries."""

    @pytest.mark.asyncio
    async def test_returns_stripped_summary(self, settings):
        """The chat reply is returned without surrounding whitespace."""
        client = create_mock_client(summary="  Notes on caching.  ")
        service = OpenAIService(settings, client=client)

        summary = await service.call("summarize", {"content": "Long text about caching", "type": "note"})

        assert summary == "Notes on caching."

    @pytest.mark.asyncio
    async def test_prompt_carries_content_and_model(self, settings):
        """The configured chat model receives the block content and type."""
        client = create_mock_client()
        service = OpenAIService(settings, client=client)

        await service.call("summarize", {"content": "Body text", "type": "extract"})

        kwargs = client.chat.completions.create.await_args.kwargs
        assert kwargs["model"] == "gpt-4o-mini"
        prompt = kwargs["messages"][0]["content"]
        assert "Body text" in prompt
        assert "extract note" in prompt

    @pytest.mark.asyncio
    async def test_empty_content_raises_without_request(self, settings):
        """Blank content fails before any request is made."""
        client = create_mock_client()
        service = OpenAIService(settings, client=client)

        with pytest.raises(ValueError, match="Cannot summarize empty content"):
            await service.call("summarize", {"content": " "})
        client.chat.completions.create.assert_not_called()

    @pytest.mark.asyncio
    async def test_empty_reply_raises(self, settings):
        """An empty model reply is an error."""
        service = OpenAIService(settings, client=create_mock_client(summary=""))
        with pytest.raises(RuntimeError, match="Empty summary"):
            await service.call("summarize", {"content": "text"})


class TestOpenAIEmbed:
    """Tests for hosted embeddings."""

    @pytest.mark.asyncio
    async def test_returns_vector_and_requests_dimensions(self, settings):
        """The embedding model is called with the configured dimensions."""
        client = create_mock_client(embedding=[0.5, 0.5, 0.5, 0.5])
        service = OpenAIService(settings, client=client)

        vector = await service.call("embed", {"text": "hello"})

        assert vector == [0.5, 0.5, 0.5, 0.5]
        client.embeddings.create.assert_called_once_with(
            model="text-embedding-3-small",
            input="hello",
            dimensions=4,
        )

    @pytest.mark.asyncio
    async def test_empty_text_raises(self, settings):
        """Blank text is rejected before calling the API."""
        service = OpenAIService(settings, client=create_mock_client())
        with pytest.raises(ValueError, match="Cannot embed empty text"):
            await service.call("embed", {"text": "   "})


class TestOpenAIClient:
    """Tests for client handling."""

    @pytest.mark.asyncio
    async def test_analysis_stays_local(self, settings):
        """Topic and sentiment analysis never touch the API."""
        client = create_mock_client()
        service = OpenAIService(settings, client=client)

        assert await service.call("topics", {"content": "business news"}) == ["business"]
        client.chat.completions.create.assert_not_called()
        client.embeddings.create.assert_not_called()

    def test_client_created_lazily_once(self, settings):
        """The SDK client is built on first use with the configured key and reused."""
        with patch("smartblocks.engine.openai_service.AsyncOpenAI") as mock_cls:
            service = OpenAIService(settings)
            mock_cls.assert_not_called()

            first = service._get_client()
            second = service._get_client()

            assert first is second
            mock_cls.assert_called_once_with(api_key="sk-test", base_url=None)
