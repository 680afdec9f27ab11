import asyncio
import random
from typing import Awaitable, Callable, Optional

import openai
from openai import AsyncOpenAI

from analysis.errors import (
    InvalidCredentialError,
    MalformedRequestError,
    ModelUnavailableError,
    NotConfiguredError,
    RateLimitedError,
    RateLimitExhaustedError,
    TransportError,
    UnknownServiceError,
)
from analysis.prompt_builder import SYSTEM_PROMPT
from configs.settings import Config
from tools.credential_store import resolve_api_key
from tools.logger import setup_logger
from tools.request_queue import RequestQueue

logger = setup_logger("generation-client")


def parse_retry_after_ms(headers) -> Optional[int]:
    """
    Read the service's retry hint in milliseconds.

    Prefers "retry-after-ms"; falls back to "retry-after" in seconds.
    Only positive numeric values count.
    """
    if headers is None:
        return None

    for name, scale in (("retry-after-ms", 1), ("retry-after", 1000)):
        value = headers.get(name)
        if value is None:
            continue
        try:
            amount = float(value)
        except (TypeError, ValueError):
            continue
        if amount > 0:
            return int(amount * scale)
    return None


class GenerationClient:
    """
    Sends analysis prompts to an OpenAI-compatible chat completion endpoint.

    - One request in flight at a time (per client instance), FIFO order
    - Rate-limited attempts retried with exponential backoff and jitter
    - Every other failure surfaces immediately as a typed GenerationError

    Example:
        >>> client = GenerationClient()
        >>> raw = await client.generate(prompt)
    """

    def __init__(
        self,
        *,
        model: str = Config.GENERATION_MODEL,
        temperature: float = Config.GENERATION_TEMPERATURE,
        max_tokens: int = Config.GENERATION_MAX_TOKENS,
        max_attempts: int = Config.MAX_ATTEMPTS,
        base_delay_ms: int = Config.BASE_DELAY_MS,
        max_jitter_ms: int = Config.MAX_JITTER_MS,
        base_url: Optional[str] = Config.OPENAI_BASE_URL,
        request_timeout: float = Config.GENERATION_TIMEOUT,
        api_key_resolver: Optional[Callable[[], Optional[str]]] = None,
        sdk_factory: Callable[..., AsyncOpenAI] = AsyncOpenAI,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
        rng: Optional[random.Random] = None,
    ):
        if max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")

        self.model = model
        self.temperature = temperature
        self.max_tokens = max_tokens
        self.max_attempts = max_attempts
        self.base_delay_ms = base_delay_ms
        self.max_jitter_ms = max_jitter_ms
        self.base_url = base_url
        self.request_timeout = request_timeout

        self._resolve_api_key = api_key_resolver or resolve_api_key
        self._sdk_factory = sdk_factory
        self._sleep = sleep
        self._rng = rng or random.Random()

        self._sdk = None
        self._sdk_key: Optional[str] = None

        self.queue = RequestQueue()

    # -------------------------------------------------
    # Public API
    # -------------------------------------------------

    def is_configured(self) -> bool:
        return bool(self._resolve_api_key())

    async def aclose(self):
        """Close the underlying SDK client, if one was built."""
        if self._sdk is None:
            return
        sdk, self._sdk, self._sdk_key = self._sdk, None, None
        await sdk.close()

    async def generate(self, prompt: str) -> str:
        """
        Return the raw text of one completion for the prompt.

        Raises:
            GenerationError subclasses; RateLimitExhaustedError once every
            attempt was rate limited.
        """
        if self.queue.pending:
            logger.info(f"Queued generation request ({self.queue.pending} ahead)")
        return await self.queue.submit(lambda: self._call_with_retry(prompt))

    async def verify_credential(self, api_key: Optional[str] = None) -> bool:
        """
        Check a key against the service by listing models.

        Returns False for a rejected key; other failures raise.
        """
        api_key = api_key or self._resolve_api_key()
        if not api_key:
            raise NotConfiguredError()

        sdk = await self._client_for(api_key)
        try:
            await sdk.models.list()
        except openai.AuthenticationError:
            logger.warning("API key was rejected by the service")
            return False
        except openai.APIError as e:
            raise self._map_error(e) from e

        logger.info("API key verified")
        return True

    # -------------------------------------------------
    # Retry policy
    # -------------------------------------------------

    async def _call_with_retry(self, prompt: str) -> str:
        for attempt in range(1, self.max_attempts + 1):
            try:
                return await self._request_completion(prompt)
            except RateLimitedError as e:
                if attempt >= self.max_attempts:
                    logger.error(f"Rate limit persists after {attempt} attempts")
                    raise RateLimitExhaustedError(attempts=attempt) from e

                delay_ms = self._backoff_delay_ms(attempt, e.retry_after_ms)
                logger.warning(
                    f"Rate limit hit, retrying in {delay_ms}ms "
                    f"(attempt {attempt}/{self.max_attempts})"
                )
                await self._sleep(delay_ms / 1000)

        # Unreachable: the loop either returns or raises.
        raise RateLimitExhaustedError(attempts=self.max_attempts)

    def _backoff_delay_ms(self, attempt: int, retry_after_ms: Optional[int]) -> int:
        if retry_after_ms and retry_after_ms > 0:
            base = retry_after_ms
        else:
            base = self.base_delay_ms * 2 ** (attempt - 1)
        jitter = int(self._rng.random() * self.max_jitter_ms)
        return base + jitter

    # -------------------------------------------------
    # Single attempt
    # -------------------------------------------------

    async def _request_completion(self, prompt: str) -> str:
        api_key = self._resolve_api_key()
        if not api_key:
            raise NotConfiguredError()

        sdk = await self._client_for(api_key)
        logger.info(f"Calling generation service with model: {self.model}")

        try:
            response = await sdk.chat.completions.create(
                model=self.model,
                messages=[
                    {"role": "system", "content": SYSTEM_PROMPT},
                    {"role": "user", "content": prompt},
                ],
                temperature=self.temperature,
                max_tokens=self.max_tokens,
            )
        except openai.APIError as e:
            raise self._map_error(e) from e

        if not response.choices:
            return ""
        return response.choices[0].message.content or ""

    async def _client_for(self, api_key: str):
        # Rebuilt when the resolved key changes (e.g. a newly stored key).
        if self._sdk is None or self._sdk_key != api_key:
            await self.aclose()
            self._sdk = self._sdk_factory(
                api_key=api_key,
                base_url=self.base_url,
                timeout=self.request_timeout,
                max_retries=0,
            )
            self._sdk_key = api_key
        return self._sdk

    def _map_error(self, error: openai.APIError) -> Exception:
        detail = getattr(error, "message", None) or str(error)

        if isinstance(error, openai.RateLimitError):
            return RateLimitedError(retry_after_ms=parse_retry_after_ms(error.response.headers))
        if isinstance(error, openai.AuthenticationError):
            return InvalidCredentialError()
        if isinstance(error, (openai.NotFoundError, openai.PermissionDeniedError)):
            return ModelUnavailableError(self.model)
        if isinstance(error, openai.BadRequestError):
            return MalformedRequestError(detail)
        if isinstance(error, openai.APIConnectionError):
            return TransportError(detail)
        if isinstance(error, openai.APIStatusError):
            return UnknownServiceError(error.status_code, detail)
        return UnknownServiceError(None, detail)
