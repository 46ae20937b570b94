"""
Chat completion client for the text-extraction service.

Supports both Azure OpenAI and standard OpenAI backends, preferring
Azure when fully configured. SDK failures are mapped onto
``ExtractionServiceError`` so the retry policy can tell rate limits
from other transient errors and from permanent ones.
"""

from __future__ import annotations

from typing import Protocol

import openai

from compliance_scout import config
from compliance_scout.utils import errors, logger

log = logger.create_logger("LLM-Client")


class CompletionService(Protocol):
    """The single call the pipeline makes to the extraction service."""

    async def complete(
        self,
        system_prompt: str,
        user_prompt: str,
        *,
        max_tokens: int,
        model: str,
        timeout_s: float,
    ) -> str:
        """Return the completion text, or raise ``ExtractionServiceError``."""
        ...


def _retry_after_ms(response: object) -> int | None:
    headers = getattr(response, "headers", None)
    if headers is None:
        return None
    raw = headers.get("retry-after")
    if not raw:
        return None
    try:
        return int(float(raw) * 1000)
    except (TypeError, ValueError):
        return None


class OpenAICompletionService:
    """``CompletionService`` backed by the OpenAI Python SDK."""

    def __init__(self, client: openai.AsyncOpenAI | openai.AsyncAzureOpenAI) -> None:
        self._client = client

    async def complete(
        self,
        system_prompt: str,
        user_prompt: str,
        *,
        max_tokens: int,
        model: str,
        timeout_s: float,
    ) -> str:
        try:
            completion = await self._client.chat.completions.create(
                model=model,
                messages=[
                    {"role": "system", "content": system_prompt},
                    {"role": "user", "content": user_prompt},
                ],
                max_tokens=max_tokens,
                timeout=timeout_s,
            )
        except openai.RateLimitError as exc:
            raise errors.ExtractionServiceError(
                f"Rate limited by extraction service: {exc}",
                rate_limited=True,
                status_code=429,
                retry_after_ms=_retry_after_ms(exc.response),
            ) from exc
        except openai.APIConnectionError as exc:
            # Includes APITimeoutError.
            raise errors.ExtractionServiceError(
                f"Extraction service unreachable: {exc}",
                retryable=True,
            ) from exc
        except openai.APIStatusError as exc:
            raise errors.ExtractionServiceError(
                f"Extraction service error ({exc.status_code}): {exc}",
                retryable=exc.status_code >= 500,
                status_code=exc.status_code,
            ) from exc

        if completion.usage is not None:
            log.debug(
                "Tokens used",
                {
                    "model": completion.model,
                    "prompt": completion.usage.prompt_tokens,
                    "completion": completion.usage.completion_tokens,
                },
            )

        content = completion.choices[0].message.content if completion.choices else None
        if not content or not content.strip():
            raise errors.ExtractionServiceError("Extraction service returned an empty response", retryable=True)
        return content


def create_completion_service() -> OpenAICompletionService | None:
    """Create the completion service for the configured backend.

    SDK-level retries are disabled; retry and backoff are handled by
    the extractor so every call site shares one policy.

    Returns:
        The service, or ``None`` if no backend is configured.
    """
    azure_cfg = config.AzureOpenAIConfig()
    if azure_cfg.validate_config():
        log.info("Using Azure OpenAI")
        return OpenAICompletionService(
            openai.AsyncAzureOpenAI(
                azure_endpoint=azure_cfg.endpoint,
                api_key=azure_cfg.api_key,
                api_version=azure_cfg.api_version,
                azure_deployment=azure_cfg.deployment,
                max_retries=0,
            )
        )

    openai_cfg = config.OpenAIConfig()
    if openai_cfg.validate_config():
        log.info("Using standard OpenAI")
        return OpenAICompletionService(
            openai.AsyncOpenAI(
                api_key=openai_cfg.api_key,
                base_url=openai_cfg.base_url,
                max_retries=0,
            )
        )

    log.warn(
        "LLM not configured. Set either Azure OpenAI or"
        " standard OpenAI environment variables."
    )
    return None
