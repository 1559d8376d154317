"""
LLM client implementations for different providers.

This module provides the ranking oracle clients: Google Gemini over its
REST API, and OpenAI or Anthropic through their SDKs. Each client makes a
single attempt; retries are applied by the caller.
"""

import logging
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional, Union

import anthropic
import openai
import requests

from ..models.config import LLMProviderConfig
from ..utils.error_handling import OracleError

logger = logging.getLogger(__name__)

GEMINI_BASE_URL = "https://generativelanguage.googleapis.com/v1beta"
DEFAULT_GEMINI_MODEL = "gemini-3-flash-preview"


@dataclass
class LLMResponse:
    """Raw response from LLM provider."""

    content: str
    provider: str
    model: str
    response_time: float
    tokens_used: Optional[int] = None


class LLMProvider(ABC):
    """Abstract base class for LLM providers."""

    def __init__(self, config: LLMProviderConfig):
        self.config = config
        self.model = config.model
        self.timeout = config.timeout

    @abstractmethod
    async def evaluate(self, prompt: str) -> LLMResponse:
        """Send a prompt and return the response text."""
        pass


class GeminiLLMClient(LLMProvider):
    """Client for the Google Gemini generateContent API."""

    def __init__(
        self, config: LLMProviderConfig, session: Optional[requests.Session] = None
    ):
        super().__init__(config)
        self.base_url = (config.base_url or GEMINI_BASE_URL).rstrip("/")
        self.session = session or requests.Session()

    @property
    def endpoint(self) -> str:
        return f"{self.base_url}/models/{self.model}:generateContent"

    def build_payload(self, prompt: str) -> dict:
        return {
            "contents": [{"parts": [{"text": prompt}]}],
            "generationConfig": {
                "temperature": self.config.temperature,
                "maxOutputTokens": self.config.max_output_tokens,
            },
        }

    async def evaluate(self, prompt: str) -> LLMResponse:
        """Evaluate prompt using Gemini."""
        start_time = time.time()

        try:
            response = self.session.post(
                self.endpoint,
                params={"key": self.config.api_key},
                json=self.build_payload(prompt),
                timeout=self.timeout,
            )
            data = response.json()
        except requests.exceptions.RequestException as e:
            raise OracleError(f"Gemini request failed: {e}") from e
        except ValueError as e:
            raise OracleError(
                f"Gemini returned a non-JSON response ({response.status_code})"
            ) from e

        if "error" in data:
            message = data["error"].get("message", "Unknown Gemini error")
            raise OracleError(message)

        if not response.ok:
            raise OracleError(f"Gemini {response.status_code}: {response.reason}")

        try:
            content = data["candidates"][0]["content"]["parts"][0]["text"]
        except (KeyError, IndexError, TypeError):
            raise OracleError("No response from Gemini")

        usage = data.get("usageMetadata", {})

        return LLMResponse(
            content=content,
            provider="google",
            model=self.model,
            response_time=time.time() - start_time,
            tokens_used=usage.get("totalTokenCount"),
        )


class APILLMClient(LLMProvider):
    """Client for the OpenAI and Anthropic SDKs."""

    def __init__(self, config: LLMProviderConfig):
        super().__init__(config)
        self.provider = config.provider

        self.client: Union[openai.OpenAI, anthropic.Anthropic]
        if self.provider == "openai":
            self.client = openai.OpenAI(api_key=config.api_key, base_url=config.base_url)
        elif self.provider == "anthropic":
            self.client = anthropic.Anthropic(
                api_key=config.api_key, base_url=config.base_url
            )
        else:
            raise ValueError(f"Unsupported API provider: {self.provider}")

    async def evaluate(self, prompt: str) -> LLMResponse:
        """Evaluate prompt using external API service."""
        start_time = time.time()

        try:
            if self.provider == "openai":
                return self._evaluate_openai(prompt, start_time)
            return self._evaluate_anthropic(prompt, start_time)
        except (openai.OpenAIError, anthropic.AnthropicError) as e:
            logger.error(f"API LLM evaluation failed: {e}")
            raise OracleError(f"{self.provider} evaluation failed: {e}") from e

    def _evaluate_openai(self, prompt: str, start_time: float) -> LLMResponse:
        response = self.client.chat.completions.create(
            model=self.model,
            messages=[{"role": "user", "content": prompt}],
            temperature=self.config.temperature,
            max_tokens=self.config.max_output_tokens,
            timeout=self.timeout,
        )

        content = response.choices[0].message.content
        if not content:
            raise OracleError("No response from openai")

        return LLMResponse(
            content=content,
            provider="openai",
            model=self.model,
            response_time=time.time() - start_time,
            tokens_used=response.usage.total_tokens if response.usage else None,
        )

    def _evaluate_anthropic(self, prompt: str, start_time: float) -> LLMResponse:
        response = self.client.messages.create(
            model=self.model,
            max_tokens=self.config.max_output_tokens,
            temperature=self.config.temperature,
            messages=[{"role": "user", "content": prompt}],
            timeout=self.timeout,
        )

        if not response.content:
            raise OracleError("No response from anthropic")

        return LLMResponse(
            content=response.content[0].text,
            provider="anthropic",
            model=self.model,
            response_time=time.time() - start_time,
            tokens_used=response.usage.input_tokens + response.usage.output_tokens,
        )


def create_llm_client(config: LLMProviderConfig) -> LLMProvider:
    """Create the client matching the configured provider."""
    if config.provider == "google":
        return GeminiLLMClient(config)
    if config.provider in ("openai", "anthropic"):
        return APILLMClient(config)
    raise ValueError(f"Unsupported LLM provider: {config.provider}")
