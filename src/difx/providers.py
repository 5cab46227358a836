"""Provider adapters for the supported model APIs."""

from __future__ import annotations

from collections.abc import AsyncIterator, Iterator
from contextlib import asynccontextmanager
from dataclasses import dataclass
from typing import Any

import aiohttp

from .config import MODEL_AZURE_OPENAI, MODEL_CLAUDE, Config
from .errors import ConfigError, DecodeError, ProviderError, TransportError
from .sse import StreamEvent, StreamEventKind, decode_stream, parse_json

MAX_TOKENS = 4000
TEMPERATURE = 0.7
TOP_P = 0.95

ANTHROPIC_VERSION = "2023-06-01"
EVENT_STREAM = "text/event-stream"


@dataclass(frozen=True)
class ProviderRequest:
    """Backend-specific HTTP request for one prompt."""

    url: str
    headers: dict[str, str]
    payload: dict[str, Any]


class Provider:
    """
    Base adapter: turns a prompt into an HTTP call and the answer into text.

    Subclasses describe their wire format through build_request,
    parse_batch_response and parse_stream_event; the HTTP handling is shared.
    """

    name = "provider"
    # Data line that ends the stream instead of a typed stop event
    stream_sentinel: str | None = None

    def __init__(self, config: Config):
        self.config = config

    @property
    def model(self) -> str:
        raise NotImplementedError

    def check_credentials(self) -> list[str]:
        """Names of config fields that must be filled in before a request."""
        raise NotImplementedError

    def build_request(self, prompt: str, stream: bool) -> ProviderRequest:
        raise NotImplementedError

    def parse_batch_response(self, data: Any) -> str:
        raise NotImplementedError

    def parse_stream_event(self, event_type: str, data: Any) -> Iterator[StreamEvent]:
        raise NotImplementedError

    @asynccontextmanager
    async def _post(self, request: ProviderRequest):
        """POST the request and yield the response once its status is 200."""
        timeout = aiohttp.ClientTimeout(total=None)
        try:
            async with aiohttp.ClientSession(timeout=timeout) as session:
                async with session.post(request.url, json=request.payload, headers=request.headers) as response:
                    if response.status != 200:
                        body = await response.text(errors="replace")
                        raise ProviderError(self.name, response.status, body)
                    yield response
        except aiohttp.ClientError as e:
            raise TransportError(f"Error sending request to {self.name} API: {e}") from e

    async def complete(self, prompt: str) -> str:
        """Send the prompt and return the whole answer."""
        request = self.build_request(prompt, stream=False)
        async with self._post(request) as response:
            body = await response.text(errors="replace")
        return self.parse_batch_response(parse_json(body))

    async def stream(self, prompt: str) -> AsyncIterator[str]:
        """Send the prompt and yield the answer's text deltas as they arrive."""
        request = self.build_request(prompt, stream=True)
        async with self._post(request) as response:
            async for text in decode_stream(response.content, self):
                yield text


class ClaudeProvider(Provider):
    """Anthropic messages API."""

    name = "Claude"

    _EVENT_KINDS = {
        "message_start": StreamEventKind.MESSAGE_START,
        "content_block_stop": StreamEventKind.CONTENT_STOP,
        "message_stop": StreamEventKind.MESSAGE_STOP,
        "ping": StreamEventKind.PING,
    }

    @property
    def model(self) -> str:
        return self.config.claude_model

    def check_credentials(self) -> list[str]:
        return [] if self.config.claude_api_key else ["claude_api_key"]

    def build_request(self, prompt: str, stream: bool) -> ProviderRequest:
        headers = {
            "Content-Type": "application/json",
            "x-api-key": self.config.claude_api_key,
            "anthropic-version": ANTHROPIC_VERSION,
        }
        if stream:
            headers["Accept"] = EVENT_STREAM
        payload = {
            "model": self.model,
            "messages": [{"role": "user", "content": prompt}],
            "max_tokens": MAX_TOKENS,
            "temperature": TEMPERATURE,
            "stream": stream,
        }
        return ProviderRequest(self.config.claude_api_url, headers, payload)

    def parse_batch_response(self, data: Any) -> str:
        blocks = data.get("content") if isinstance(data, dict) else None
        if not isinstance(blocks, list):
            raise DecodeError("No content in Claude API response", fragment=str(data))
        texts = [
            block.get("text", "")
            for block in blocks
            if isinstance(block, dict) and block.get("type") == "text"
        ]
        if not texts:
            raise DecodeError("No text content in Claude API response", fragment=str(data))
        return "".join(texts).strip()

    def parse_stream_event(self, event_type: str, data: Any) -> Iterator[StreamEvent]:
        if not isinstance(data, dict):
            yield StreamEvent(StreamEventKind.UNKNOWN)
            return
        event_type = event_type or data.get("type", "")

        if event_type == "error":
            # Mid-stream failure, e.g. overloaded_error after a 200 response
            raise ProviderError(self.name, 200, str(data.get("error", data)))

        if event_type == "content_block_delta":
            delta = data.get("delta") or {}
            if not isinstance(delta, dict):
                raise DecodeError("Malformed delta in Claude stream event", fragment=str(data))
            if delta.get("type") == "text_delta":
                yield StreamEvent(StreamEventKind.CONTENT_DELTA, delta.get("text") or "")
            else:
                yield StreamEvent(StreamEventKind.CONTENT_DELTA)
            return

        yield StreamEvent(self._EVENT_KINDS.get(event_type, StreamEventKind.UNKNOWN))


class AzureOpenAIProvider(Provider):
    """Azure OpenAI chat completions API."""

    name = "Azure OpenAI"
    stream_sentinel = "[DONE]"

    @property
    def model(self) -> str:
        return self.config.azure_openai_deployment

    def check_credentials(self) -> list[str]:
        missing = []
        if not self.config.azure_openai_key:
            missing.append("azure_openai_key")
        if not self.config.azure_openai_endpoint:
            missing.append("azure_openai_endpoint")
        return missing

    @property
    def url(self) -> str:
        endpoint = self.config.azure_openai_endpoint.rstrip("/")
        return (
            f"{endpoint}/openai/deployments/{self.model}/chat/completions"
            f"?api-version={self.config.azure_openai_api_version}"
        )

    def build_request(self, prompt: str, stream: bool) -> ProviderRequest:
        headers = {
            "Content-Type": "application/json",
            "api-key": self.config.azure_openai_key,
        }
        if stream:
            headers["Accept"] = EVENT_STREAM
        payload = {
            "messages": [{"role": "user", "content": prompt}],
            "temperature": TEMPERATURE,
            "top_p": TOP_P,
            "max_tokens": MAX_TOKENS,
            "stream": stream,
        }
        return ProviderRequest(self.url, headers, payload)

    def parse_batch_response(self, data: Any) -> str:
        choices = data.get("choices") if isinstance(data, dict) else None
        if not isinstance(choices, list) or not choices:
            raise DecodeError("No choices in Azure OpenAI API response", fragment=str(data))
        message = choices[0].get("message") if isinstance(choices[0], dict) else None
        content = message.get("content") if isinstance(message, dict) else None
        if not isinstance(content, str):
            raise DecodeError("No message content in Azure OpenAI API response", fragment=str(data))
        return content.strip()

    def parse_stream_event(self, event_type: str, data: Any) -> Iterator[StreamEvent]:
        if not isinstance(data, dict):
            yield StreamEvent(StreamEventKind.UNKNOWN)
            return
        choices = data.get("choices") or []
        if not isinstance(choices, list):
            raise DecodeError("Malformed choices in Azure OpenAI stream chunk", fragment=str(data))
        for choice in choices:
            delta = (choice.get("delta") or {}) if isinstance(choice, dict) else None
            if not isinstance(delta, dict):
                raise DecodeError("Malformed choice in Azure OpenAI stream chunk", fragment=str(data))
            content = delta.get("content")
            if content:
                yield StreamEvent(StreamEventKind.CONTENT_DELTA, content)
            if choice.get("finish_reason"):
                yield StreamEvent(StreamEventKind.MESSAGE_STOP)
                return


# Provider adapters by active_model - extend this dict to add new backends
PROVIDERS: dict[str, type[Provider]] = {
    MODEL_CLAUDE: ClaudeProvider,
    MODEL_AZURE_OPENAI: AzureOpenAIProvider,
}


def get_provider(config: Config) -> Provider:
    """
    Build the adapter for the configured model.

    Raises:
        ConfigError: If the active model is not supported
    """
    if config.active_model not in PROVIDERS:
        raise ConfigError(f"Unsupported model: {config.active_model}. Available: {list(PROVIDERS.keys())}")
    return PROVIDERS[config.active_model](config)
