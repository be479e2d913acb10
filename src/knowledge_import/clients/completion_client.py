"""HTTP client for an OpenAI-compatible chat-completions endpoint."""

import re
import time
from typing import Any, Dict, List, Optional

import httpx

from knowledge_import.config import get_settings
from knowledge_import.utils.errors import RegionRestrictedError, TestGenerationError
from knowledge_import.utils.logging import get_logger, log_provider_response

logger = get_logger("completion_client")

_REGION_HINT = re.compile(r"region|country|territor|not available in your location", re.IGNORECASE)


def is_region_restricted(status_code: int, body: str) -> bool:
    """Whether a provider error response is a geographic restriction."""
    if status_code == 451:
        return True
    return status_code == 403 and bool(_REGION_HINT.search(body or ""))


class CompletionClient:
    """
    Client for the chat-completions endpoint used by test generation.

    Sends ``{model, messages, max_tokens, temperature}`` and returns the first
    choice's message content. There is no retry: any non-2xx response is
    raised as ``TestGenerationError`` (``RegionRestrictedError`` for a
    geographic restriction).
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
        model: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """Initialize completion client."""
        settings = get_settings().test_generation
        self.api_key = api_key if api_key is not None else settings.api_key
        self.base_url = (base_url or settings.base_url).rstrip("/")
        self.model = model or settings.model
        self.timeout = timeout if timeout is not None else settings.timeout
        self._transport = transport

    @property
    def is_configured(self) -> bool:
        return bool(self.api_key)

    def _headers(self) -> Dict[str, str]:
        return {
            "Content-Type": "application/json",
            "Authorization": f"Bearer {self.api_key}",
        }

    async def create_chat_completion(
        self,
        messages: List[Dict[str, str]],
        max_tokens: int,
        temperature: float,
    ) -> str:
        """
        Request a chat completion.

        Args:
            messages: Chat messages with 'role' and 'content'
            max_tokens: Maximum tokens to generate
            temperature: Sampling temperature

        Returns:
            Content of the first choice's message ('' when absent)

        Raises:
            RegionRestrictedError: If the provider refuses this region
            TestGenerationError: On any other non-2xx response or transport failure
        """
        url = f"{self.base_url}/chat/completions"
        payload: Dict[str, Any] = {
            "model": self.model,
            "messages": messages,
            "max_tokens": max_tokens,
            "temperature": temperature,
        }

        started = time.perf_counter()
        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                response = await client.post(url, json=payload, headers=self._headers())
        except httpx.TimeoutException as e:
            logger.error(f"Timeout calling completion provider: {e}")
            raise TestGenerationError(
                "Timeout calling completion provider",
                status_code=504,
            ) from e
        except httpx.RequestError as e:
            logger.error(f"Request error calling completion provider: {e}")
            raise TestGenerationError(f"Request error calling completion provider: {str(e)}") from e

        log_provider_response(self.model, response.status_code, (time.perf_counter() - started) * 1000)

        if not response.is_success:
            error_text = response.text
            if is_region_restricted(response.status_code, error_text):
                logger.warning(f"Completion provider is region restricted: {error_text[:200]}")
                raise RegionRestrictedError(
                    provider_status=response.status_code,
                    details={"response": error_text[:500]},
                )
            logger.error(
                f"Completion provider error. Status: {response.status_code}, Response: {error_text[:500]}"
            )
            raise TestGenerationError(
                f"Completion provider returned {response.status_code}",
                provider_status=response.status_code,
                details={"response": error_text[:500]},
            )

        try:
            result = response.json()
        except ValueError as e:
            raise TestGenerationError("Completion provider returned invalid JSON") from e

        choices = result.get("choices") or []
        if not choices:
            return ""
        message = choices[0].get("message") or {}
        return message.get("content") or ""
