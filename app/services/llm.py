"""Completion client using LiteLLM for provider abstraction."""
from __future__ import annotations

from typing import Any, Optional, Protocol

import structlog
from litellm import acompletion

from app.core.config import settings
from app.core.errors import CompletionFailureError

logger = structlog.get_logger(__name__)


class CompletionClient(Protocol):
    async def complete(self, system_prompt: str, user_input: str, **model_params: Any) -> str:
        ...


class LLMClient:
    """Text-in / text-out wrapper around LiteLLM.

    Every transport problem (missing key, auth, rate limit, timeout, server
    error, empty choice list) surfaces as CompletionFailureError.
    """

    def __init__(
        self,
        provider: Optional[str] = None,
        api_key: Optional[str] = None,
        model: Optional[str] = None,
        max_tokens: Optional[int] = None,
        temperature: Optional[float] = None,
        timeout: Optional[float] = None,
    ):
        self.provider = provider or settings.llm_provider
        self.api_key = settings.llm_api_key if api_key is None else api_key
        self.model = self._normalize_model_name(model or settings.llm_model)
        self.max_tokens = max_tokens or settings.LLM_MAX_TOKENS
        self.temperature = settings.LLM_TEMPERATURE if temperature is None else temperature
        self.timeout = timeout or settings.LLM_TIMEOUT_SECONDS

    def _normalize_model_name(self, model: str) -> str:
        """LiteLLM routes OpenRouter models by an `openrouter/` prefix."""
        if self.provider == "openrouter" and not model.startswith("openrouter/"):
            return f"openrouter/{model}"
        return model

    async def complete(self, system_prompt: str, user_input: str, **model_params: Any) -> str:
        if not self.api_key:
            raise CompletionFailureError(
                f"No API key configured for LLM provider '{self.provider}'.",
                details={"provider": self.provider},
            )

        params = {
            "max_tokens": self.max_tokens,
            "temperature": self.temperature,
            "timeout": self.timeout,
        }
        params.update(model_params)

        logger.info("completion_requested", provider=self.provider, model=self.model)
        try:
            response = await acompletion(
                model=self.model,
                messages=[
                    {"role": "system", "content": system_prompt},
                    {"role": "user", "content": user_input},
                ],
                api_key=self.api_key,
                **params,
            )
        except Exception as exc:
            logger.warning("completion_failed", provider=self.provider, error=str(exc))
            raise CompletionFailureError(
                f"{self.provider} API error: {exc}",
                details={"provider": self.provider},
            ) from exc

        choices = getattr(response, "choices", None) or []
        if not choices:
            raise CompletionFailureError(
                f"{self.provider} API returned no choices.",
                details={"provider": self.provider},
            )
        return choices[0].message.content or ""


def get_completion_client() -> CompletionClient:
    """FastAPI dependency; tests override it with a fake."""
    return LLMClient()
