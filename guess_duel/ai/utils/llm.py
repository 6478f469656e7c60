import asyncio
import json
import logging
from typing import Any, Dict, Optional, Tuple

import aiohttp

from ...config import ProviderConfig
from ...exceptions import (
    AuthFailure,
    ConfigError,
    ConnectionFailure,
    MalformedResponse,
    RateLimited,
    RequestTimeout,
    UpstreamError,
)

logger = logging.getLogger(__name__)

REQUEST_TIMEOUT = 15.0  # seconds
DEFAULT_TEMPERATURE = 0.7
MAX_OUTPUT_TOKENS = 100
BODY_EXCERPT_LENGTH = 100


class ChatProvider:
    """One text-generation backend: how to build its request and where its reply text lives."""

    name: str = ""
    default_model: str = ""

    def build_request(
        self, prompt: str, api_key: str, temperature: float, model: Optional[str] = None
    ) -> Tuple[str, Dict[str, str], Dict[str, str], Dict[str, Any]]:
        """Return (url, headers, query params, json payload)."""
        raise NotImplementedError

    def extract_text(self, data: Any) -> str:
        raise NotImplementedError


class ZhipuProvider(ChatProvider):
    """Chat-completion endpoint with bearer auth (OpenAI-compatible wire format)."""

    name = "zhipu"
    default_model = "glm-4-flash"
    url = "https://open.bigmodel.cn/api/paas/v4/chat/completions"

    def build_request(self, prompt, api_key, temperature, model=None):
        headers = {
            "Content-Type": "application/json",
            "Authorization": f"Bearer {api_key}",
        }
        payload = {
            "model": model or self.default_model,
            "messages": [{"role": "user", "content": prompt}],
            "temperature": temperature,
            "max_tokens": MAX_OUTPUT_TOKENS,
        }
        return self.url, headers, {}, payload

    def extract_text(self, data):
        return data["choices"][0]["message"]["content"]


class GeminiProvider(ChatProvider):
    """generateContent endpoint with the API key passed as a query parameter."""

    name = "gemini"
    default_model = "gemini-2.0-flash"
    base_url = "https://generativelanguage.googleapis.com/v1beta/models"

    def build_request(self, prompt, api_key, temperature, model=None):
        url = f"{self.base_url}/{model or self.default_model}:generateContent"
        headers = {"Content-Type": "application/json"}
        payload = {
            "contents": [{"parts": [{"text": prompt}]}],
            "generationConfig": {
                "temperature": temperature,
                "maxOutputTokens": MAX_OUTPUT_TOKENS,
            },
        }
        return url, headers, {"key": api_key}, payload

    def extract_text(self, data):
        return data["candidates"][0]["content"]["parts"][0]["text"]


PROVIDERS: Dict[str, ChatProvider] = {
    provider.name: provider for provider in (ZhipuProvider(), GeminiProvider())
}


class LLMClient:
    """Client for single-prompt calls to the configured text-generation provider.

    Stateless and never retries; callers own their retry policy.
    """

    def __init__(self, timeout: float = REQUEST_TIMEOUT, prompt_manager=None):
        self.timeout = timeout
        if prompt_manager is None:
            # Import PromptManager here to avoid circular imports
            from .prompt_manager import PromptManager
            prompt_manager = PromptManager()
        self.prompt_manager = prompt_manager

    def get_provider(self, name: str) -> ChatProvider:
        provider = PROVIDERS.get(name)
        if provider is None:
            raise ConfigError(f"Unknown AI provider: {name}")
        return provider

    async def invoke(
        self,
        prompt: str,
        config: ProviderConfig,
        temperature: float = DEFAULT_TEMPERATURE,
    ) -> str:
        """
        Send one prompt and return the stripped reply text.

        Args:
            prompt: The user prompt
            config: Provider selection and API key
            temperature: Sampling temperature

        Returns:
            Reply text

        Raises:
            ConfigError, RequestTimeout, AuthFailure, RateLimited,
            UpstreamError, MalformedResponse, ConnectionFailure
        """
        api_key = (config.api_key or "").strip()
        if not api_key:
            raise ConfigError("Configure an API key in the game settings first")
        provider = self.get_provider(config.provider)

        url, headers, params, payload = provider.build_request(
            prompt, api_key, temperature, config.model
        )
        logger.info(f"Sending request to {provider.name} (temperature={temperature})")
        logger.debug(f"Prompt for {provider.name}: {prompt}")

        try:
            status, body = await asyncio.wait_for(
                self._post(url, headers, params, payload), timeout=self.timeout
            )
        except asyncio.TimeoutError:
            logger.error(f"{provider.name} request timed out after {self.timeout}s")
            raise RequestTimeout(
                "AI request timed out, check the network and try again"
            ) from None
        except aiohttp.ClientError as e:
            logger.error(f"{provider.name} request failed: {e}")
            raise ConnectionFailure(f"Could not reach the AI provider: {e}") from e

        return self._handle_response(provider, status, body)

    async def _post(
        self,
        url: str,
        headers: Dict[str, str],
        params: Dict[str, str],
        payload: Dict[str, Any],
    ) -> Tuple[int, str]:
        """POST the payload and return (status, body text)."""
        async with aiohttp.ClientSession() as session:
            async with session.post(url, json=payload, headers=headers, params=params) as response:
                return response.status, await response.text()

    def _handle_response(self, provider: ChatProvider, status: int, body: str) -> str:
        if status in (401, 403):
            logger.error(f"{provider.name} rejected the credentials ({status})")
            raise AuthFailure("API key is invalid or expired, check the settings")
        if status == 429:
            logger.error(f"{provider.name} rate limit hit")
            raise RateLimited("AI call quota exceeded, try again later")
        if not 200 <= status < 300:
            excerpt = (body or "")[:BODY_EXCERPT_LENGTH]
            logger.error(f"{provider.name} API error response ({status}): {excerpt}")
            raise UpstreamError(status, excerpt)

        try:
            data = json.loads(body)
            text = provider.extract_text(data)
        except (ValueError, KeyError, IndexError, TypeError) as e:
            logger.error(f"Failed to extract response text from {provider.name} body: {body[:200]}")
            raise MalformedResponse("AI returned data in an unexpected format") from e

        if not isinstance(text, str):
            raise MalformedResponse("AI returned data in an unexpected format")
        text = text.strip()
        logger.debug(f"Extracted response text from {provider.name}: {text}")
        return text

    async def chat_with_template(
        self,
        template: str,
        context: Dict[str, Any],
        config: ProviderConfig,
        temperature: float = DEFAULT_TEMPERATURE,
    ) -> str:
        """
        Render a Jinja2 prompt template and send it.

        Args:
            template: Name of the prompt template file
            context: Context variables for the template
            config: Provider selection and API key
            temperature: Sampling temperature

        Returns:
            Reply text
        """
        prompt = self.prompt_manager.render_template(template, **context)
        return await self.invoke(prompt, config, temperature)
