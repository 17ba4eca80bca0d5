"""Tests for seo_intel.services.content_analysis.completion."""

from unittest.mock import AsyncMock, MagicMock, patch

import anthropic
import httpx
import pytest

from seo_intel.errors import CompletionServiceError
from seo_intel.services.content_analysis.completion import AnthropicCompletionService


def _make_response(*texts: str) -> MagicMock:
    blocks = []
    for text in texts:
        block = MagicMock()
        block.type = "text"
        block.text = text
        blocks.append(block)
    response = MagicMock()
    response.content = blocks
    response.stop_reason = "end_turn"
    response.usage.output_tokens = 42
    return response


def _make_client(**create_kwargs) -> MagicMock:
    client = MagicMock()
    client.messages.create = AsyncMock(**create_kwargs)
    return client


@pytest.mark.asyncio
class TestAnthropicCompletionService:
    async def test_returns_joined_text(self):
        client = _make_client(return_value=_make_response('{"patterns": ', "[]}"))
        service = AnthropicCompletionService(client, "test-model", max_tokens=100)

        text = await service.complete("system", "user prompt", '{"patterns": []}')

        assert text == '{"patterns": []}'
        kwargs = client.messages.create.call_args.kwargs
        assert kwargs["model"] == "test-model"
        assert kwargs["max_tokens"] == 100
        assert kwargs["messages"] == [{"role": "user", "content": "user prompt"}]
        assert kwargs["system"].startswith("system")
        assert '{"patterns": []}' in kwargs["system"]

    async def test_non_text_blocks_ignored(self):
        response = _make_response("{}")
        tool_block = MagicMock()
        tool_block.type = "tool_use"
        response.content.append(tool_block)
        service = AnthropicCompletionService(_make_client(return_value=response), "m")
        assert await service.complete("s", "u", "{}") == "{}"

    async def test_empty_response_raises(self):
        client = _make_client(return_value=_make_response("   "))
        service = AnthropicCompletionService(client, "test-model")
        with pytest.raises(CompletionServiceError):
            await service.complete("s", "u", "{}")

    async def test_api_error_raises_service_error(self):
        request = httpx.Request("POST", "https://api.anthropic.com/v1/messages")
        error = anthropic.BadRequestError(
            "bad request", response=httpx.Response(400, request=request), body=None
        )
        client = _make_client(side_effect=error)
        service = AnthropicCompletionService(client, "test-model")

        with pytest.raises(CompletionServiceError):
            await service.complete("s", "u", "{}")
        assert client.messages.create.await_count == 1

    async def test_model_defaults_to_settings(self):
        with patch(
            "seo_intel.services.content_analysis.completion.get_settings"
        ) as mock_settings:
            mock_settings.return_value = MagicMock(claude_model="settings-model")
            service = AnthropicCompletionService(_make_client())
        assert service.model == "settings-model"
