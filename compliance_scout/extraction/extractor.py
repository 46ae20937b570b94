"""
Document extraction through the text-extraction service.

Every call runs through one policy: capped exponential backoff on
transient failures, then a single downgrade to the fallback model (with
its own timeout) when the primary model keeps failing transiently.
Failures are returned as ``DocumentResult.failed`` rather than raised,
so one document's failure never aborts its siblings.
"""

from __future__ import annotations

import functools

from compliance_scout.extraction import content, llm_client, prompts
from compliance_scout.models import browser, documents
from compliance_scout.utils import errors, logger, retry

log = logger.create_logger("Extractor")

# Attempts per call site.
DOCUMENT_ATTEMPTS = 3
COMBINED_ATTEMPTS = 4
COMBINED_COOKIE_FOLLOWUP_ATTEMPTS = 3
DERIVED_COOKIE_ATTEMPTS = 2

DOCUMENT_MAX_TOKENS = 2500
COMBINED_MAX_TOKENS = 3000
COOKIE_SECTIONS_MAX_TOKENS = 1500


def is_not_found_reply(reply: str, document_type: documents.DocumentType) -> bool:
    """Whether *reply* is the service's "No <document> found" sentinel."""
    normalised = reply.strip().strip('"').strip().lower()
    sentinel = f"no {document_type.label} found"
    return normalised.startswith(sentinel) and len(normalised) <= len(prompts.not_found_sentinel(document_type)) + 20


class DocumentExtractor:
    """Turns cleaned page text into compliance documents."""

    def __init__(
        self,
        service: llm_client.CompletionService | None,
        strategy: browser.ModelStrategy,
        *,
        unconfigured_reason: str | None = None,
    ) -> None:
        self._service = service
        self.strategy = strategy
        self._unconfigured_reason = unconfigured_reason or "LLM is not configured"

    @property
    def is_configured(self) -> bool:
        return self._service is not None

    @property
    def unconfigured_reason(self) -> str:
        return self._unconfigured_reason

    async def complete(
        self,
        system_prompt: str,
        user_prompt: str,
        *,
        max_tokens: int,
        retry_budget: int,
        context: str,
    ) -> str:
        """Send one prompt pair, retrying and downgrading the model as needed.

        Returns:
            The trimmed completion text.

        Raises:
            ExtractionServiceError: The service is unconfigured, a
                non-retryable error occurred, or every model exhausted
                its attempts.
        """
        if self._service is None:
            raise errors.ExtractionServiceError(self._unconfigured_reason)

        candidates = self.strategy.candidates()
        for index, (model, timeout_s) in enumerate(candidates):
            call = functools.partial(
                self._service.complete,
                system_prompt,
                user_prompt,
                max_tokens=max_tokens,
                model=model,
                timeout_s=timeout_s,
            )
            try:
                reply = await retry.with_retry(call, max_attempts=retry_budget, context=f"{context} ({model})")
            except Exception as exc:
                is_last = index + 1 == len(candidates)
                if is_last or not retry.is_retryable_error(exc):
                    raise
                next_model, next_timeout_s = candidates[index + 1]
                log.warn(
                    "Downgrading model after repeated failures",
                    {"context": context, "from": model, "to": next_model, "timeoutS": next_timeout_s},
                )
                continue
            return reply.strip()

        raise errors.ExtractionServiceError("No model configured")

    async def extract(
        self,
        document_type: documents.DocumentType,
        text: str,
        *,
        source_url: str | None = None,
        retry_budget: int = DOCUMENT_ATTEMPTS,
    ) -> documents.DocumentResult:
        """Extract one document from cleaned page text."""
        request = documents.ExtractionRequest(
            document_type=document_type,
            source_text=text,
            retry_budget=retry_budget,
            max_tokens=DOCUMENT_MAX_TOKENS,
        )
        log.info(f"Extracting {document_type.label}", {"url": source_url, "chars": len(text)})
        log.debug("Source text preview", {"preview": content.content_preview(text, 100)})
        try:
            reply = await self.complete(
                prompts.document_system_prompt(request.document_type),
                prompts.document_user_prompt(request.document_type, request.source_text),
                max_tokens=request.max_tokens,
                retry_budget=request.retry_budget,
                context=document_type.label,
            )
        except Exception as exc:
            log.error(f"Failed to extract {document_type.label}", {"url": source_url, "error": str(exc)})
            return documents.DocumentResult.failed(document_type, errors.get_error_message(exc), source_url)

        if is_not_found_reply(reply, document_type):
            log.info(f"No {document_type.label} on page", {"url": source_url})
            return documents.DocumentResult.not_found(document_type, source_url)

        log.success(f"Extracted {document_type.label}", {"url": source_url, "chars": len(reply)})
        return documents.DocumentResult.found(document_type, reply, source_url)

    async def extract_cookie_sections(
        self,
        privacy_text: str,
        *,
        source_url: str | None = None,
        char_limit: int = prompts.DERIVED_COOKIE_CHAR_LIMIT,
        retry_budget: int = DERIVED_COOKIE_ATTEMPTS,
    ) -> documents.DocumentResult:
        """Pull only the cookie-related sections out of privacy policy text."""
        request = documents.ExtractionRequest(
            document_type=documents.DocumentType.COOKIE,
            source_text=content.truncate_content(privacy_text, char_limit),
            retry_budget=retry_budget,
            max_tokens=COOKIE_SECTIONS_MAX_TOKENS,
        )
        try:
            reply = await self.complete(
                prompts.COOKIE_SECTIONS_SYSTEM_PROMPT,
                prompts.cookie_sections_user_prompt(request.source_text),
                max_tokens=request.max_tokens,
                retry_budget=request.retry_budget,
                context="cookie sections",
            )
        except Exception as exc:
            log.error("Failed to extract cookie sections", {"url": source_url, "error": str(exc)})
            return documents.DocumentResult.failed(request.document_type, errors.get_error_message(exc), source_url)

        if prompts.NO_COOKIE_INFORMATION.lower() in reply.lower():
            return documents.DocumentResult.not_found(request.document_type, source_url)
        return documents.DocumentResult.found(request.document_type, reply, source_url, derived=True)

    async def derive_cookie_policy(self, privacy: documents.DocumentResult) -> documents.DocumentResult | None:
        """Derive a cookie policy from an extracted privacy policy.

        Returns:
            The derived document, or ``None`` when there is no privacy
            text to derive from.
        """
        if not privacy.is_found or not privacy.text:
            return None
        log.info("No dedicated cookie policy found, searching in privacy policy")
        return await self.extract_cookie_sections(privacy.text, source_url=privacy.source_url)
