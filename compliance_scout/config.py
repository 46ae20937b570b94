"""
Configuration for the discovery pipeline.

Centralises all environment variable names, default values, and
configuration validation for the Azure OpenAI / standard OpenAI
backends and for the scraper itself.

Uses ``pydantic_settings.BaseSettings`` for automatic environment
variable binding, type coercion, and validation.
"""

from __future__ import annotations

from typing import Literal

import pydantic
import pydantic_settings

from compliance_scout.models import browser
from compliance_scout.utils import logger

log = logger.create_logger("Config")


class AzureOpenAIConfig(pydantic_settings.BaseSettings):
    """Configuration for the Azure OpenAI chat completions client.

    Attributes:
        endpoint: Azure OpenAI service endpoint URL.
        api_key: API key for authentication.
        api_version: API version to use.
        deployment: Model deployment name.
    """

    endpoint: str = pydantic.Field(default="", validation_alias="AZURE_OPENAI_ENDPOINT")
    api_key: str = pydantic.Field(default="", validation_alias="AZURE_OPENAI_API_KEY")
    api_version: str = pydantic.Field(default="2024-12-01-preview", validation_alias="OPENAI_API_VERSION")
    deployment: str = pydantic.Field(default="", validation_alias="AZURE_OPENAI_DEPLOYMENT")

    def validate_config(self) -> bool:
        """Check if all required configuration is present.

        Returns:
            True when endpoint, api_key, and deployment are set.
        """
        return bool(self.endpoint and self.api_key and self.deployment)


class OpenAIConfig(pydantic_settings.BaseSettings):
    """Configuration for the standard OpenAI chat completions client.

    Attributes:
        api_key: OpenAI API key (sent as a bearer token).
        model: Optional model override for the primary model.
        base_url: Optional custom base URL for OpenAI-compatible providers.
    """

    api_key: str = pydantic.Field(default="", validation_alias="OPENAI_API_KEY")
    model: str = pydantic.Field(default="", validation_alias="OPENAI_MODEL")
    base_url: str | None = pydantic.Field(default=None, validation_alias="OPENAI_BASE_URL")

    def validate_config(self) -> bool:
        """Check if the API key is present."""
        return bool(self.api_key)


class ScraperSettings(pydantic_settings.BaseSettings):
    """Tunables for navigation, content capping, and model selection."""

    model_config = pydantic_settings.SettingsConfigDict(populate_by_name=True)

    navigation_policy: browser.NavigationPolicy = pydantic.Field(
        default=browser.NavigationPolicy.FAST, validation_alias="NAVIGATION_POLICY"
    )
    primary_model: str = pydantic.Field(default="gpt-4o-mini", validation_alias="PRIMARY_MODEL")
    fallback_model: str = pydantic.Field(default="gpt-3.5-turbo", validation_alias="FALLBACK_MODEL")
    primary_timeout_seconds: float = pydantic.Field(default=60.0, gt=0, validation_alias="PRIMARY_TIMEOUT_SECONDS")
    fallback_timeout_seconds: float = pydantic.Field(default=30.0, gt=0, validation_alias="FALLBACK_TIMEOUT_SECONDS")
    content_char_limit: int = pydantic.Field(default=80_000, gt=0, validation_alias="CONTENT_CHAR_LIMIT")
    max_secondary_pages: int = pydantic.Field(default=3, ge=0, validation_alias="MAX_SECONDARY_PAGES")
    consent_timeout_seconds: float = pydantic.Field(default=1.0, gt=0, validation_alias="CONSENT_TIMEOUT_SECONDS")
    browser_headless: bool = pydantic.Field(default=True, validation_alias="BROWSER_HEADLESS")
    scraper_mode: Literal["live", "sample"] = pydantic.Field(default="live", validation_alias="SCRAPER_MODE")

    def model_strategy(self) -> browser.ModelStrategy:
        """Build the model-selection strategy.

        ``OPENAI_MODEL`` overrides the primary model when set. Azure
        deployments are addressed by deployment name, so Azure runs use
        the deployment as the only model.
        """
        azure_cfg = AzureOpenAIConfig()
        if azure_cfg.validate_config():
            primary, fallback = azure_cfg.deployment, None
        else:
            primary, fallback = OpenAIConfig().model or self.primary_model, self.fallback_model or None
        return browser.ModelStrategy(
            primary_model=primary,
            fallback_model=fallback,
            primary_timeout_s=self.primary_timeout_seconds,
            fallback_timeout_s=self.fallback_timeout_seconds,
        )


def validate_llm_config() -> str | None:
    """Check if an LLM backend is properly configured.

    Returns:
        An error message string when misconfigured, or ``None`` if valid.
    """
    if AzureOpenAIConfig().validate_config():
        return None
    if OpenAIConfig().validate_config():
        return None

    return (
        "LLM is not configured. Please set one of the following:\n"
        "  Azure OpenAI: AZURE_OPENAI_ENDPOINT, AZURE_OPENAI_API_KEY,"
        " AZURE_OPENAI_DEPLOYMENT\n"
        "  Standard OpenAI: OPENAI_API_KEY (and optionally"
        " OPENAI_MODEL, OPENAI_BASE_URL)"
    )
