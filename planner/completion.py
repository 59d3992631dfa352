"""
Chat completion client for meal plan generation
Wraps the OpenAI API with retry, exponential backoff and error mapping
"""

import asyncio
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Optional

import openai
import structlog
from openai import AsyncOpenAI
from tenacity import (
    AsyncRetrying,
    RetryCallState,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from .errors import (
    CompletionError,
    InvalidCredential,
    MalformedResponse,
    NotConfigured,
    QuotaExceeded,
    RateLimited,
    TransientUnavailable,
)
from .prompts import SYSTEM_PROMPT

logger = structlog.get_logger(__name__)

Sleep = Callable[[float], Awaitable[Any]]


@dataclass(frozen=True)
class CompletionConfig:
    """Fixed request parameters for the completion provider"""
    api_key: Optional[str] = None
    model: str = "gpt-4"
    temperature: float = 0.7
    max_tokens: int = 1500
    max_attempts: int = 3
    backoff_base: float = 1.0
    request_timeout: float = 60.0

    @property
    def configured(self) -> bool:
        return bool(self.api_key)

    @classmethod
    def from_settings(cls, settings) -> "CompletionConfig":
        return cls(
            api_key=settings.openai_api_key,
            model=settings.openai_model,
            temperature=settings.temperature,
            max_tokens=settings.max_tokens,
            max_attempts=settings.ai_max_attempts,
            backoff_base=settings.ai_backoff_base,
            request_timeout=settings.ai_request_timeout,
        )


def classify_provider_error(error: Exception) -> CompletionError:
    """Map an OpenAI SDK error onto the completion error taxonomy"""
    code = getattr(error, "code", None)

    if code == "invalid_api_key" or isinstance(error, openai.AuthenticationError):
        return InvalidCredential()
    if code == "insufficient_quota":
        return QuotaExceeded()
    if code == "rate_limit_exceeded" or isinstance(error, openai.RateLimitError):
        return RateLimited()
    return TransientUnavailable()


class CompletionClient:
    """Issues chat completions with retry; unconfigured when no API key is set"""

    def __init__(
        self,
        config: CompletionConfig,
        client: Optional[Any] = None,
        sleep: Sleep = asyncio.sleep,
    ):
        self.config = config
        self._sleep = sleep
        self._client = client
        if self._client is None and config.configured:
            # Retries are handled here, not by the SDK
            self._client = AsyncOpenAI(
                api_key=config.api_key,
                timeout=config.request_timeout,
                max_retries=0,
            )

    @property
    def is_configured(self) -> bool:
        return self._client is not None

    async def complete(self, prompt: str, decode: Optional[Callable[[str], Any]] = None) -> Any:
        """
        Return the completion text for a user prompt.

        When ``decode`` is given it runs inside each attempt, so text it
        rejects with MalformedResponse is requested again.
        """
        if not self.is_configured:
            raise NotConfigured()

        retrying = AsyncRetrying(
            stop=stop_after_attempt(self.config.max_attempts),
            wait=wait_exponential(multiplier=self.config.backoff_base, min=0),
            retry=retry_if_exception_type((CompletionError, MalformedResponse)),
            before_sleep=self._log_retry,
            sleep=self._sleep,
            reraise=True,
        )
        return await retrying(self._complete_once, prompt, decode)

    async def _complete_once(self, prompt: str, decode: Optional[Callable[[str], Any]] = None) -> Any:
        try:
            completion = await self._client.chat.completions.create(
                model=self.config.model,
                temperature=self.config.temperature,
                max_tokens=self.config.max_tokens,
                messages=[
                    {"role": "system", "content": SYSTEM_PROMPT},
                    {"role": "user", "content": prompt},
                ],
            )
            content = completion.choices[0].message.content if completion.choices else None
        except openai.OpenAIError as e:
            mapped = classify_provider_error(e)
            logger.error(
                "Completion request failed",
                error=str(e),
                error_type=type(e).__name__,
                failure_type=mapped.failure_type.value,
            )
            raise mapped from e
        except Exception as e:
            logger.error(
                "Unrecognized completion provider error",
                error=str(e),
                error_type=type(e).__name__,
                exc_info=True,
            )
            raise TransientUnavailable() from e

        if not content:
            logger.error("Empty response from completion provider")
            raise TransientUnavailable("Empty response from the AI service")

        logger.info("Completion received", model=self.config.model, length=len(content))
        if decode is None:
            return content
        return decode(content)

    def _log_retry(self, retry_state: RetryCallState) -> None:
        error = retry_state.outcome.exception() if retry_state.outcome else None
        logger.warning(
            "Completion attempt failed, retrying",
            attempt=retry_state.attempt_number,
            delay=retry_state.next_action.sleep if retry_state.next_action else None,
            failure_type=getattr(getattr(error, "failure_type", None), "value", None),
        )

    async def close(self) -> None:
        if self._client is not None and hasattr(self._client, "close"):
            await self._client.close()
