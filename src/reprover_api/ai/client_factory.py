"""LLM client factory with optional Helicone proxying."""
import logging
from dataclasses import dataclass, field
from typing import Any

from reprover_api.config import settings


logger = logging.getLogger(__name__)

_HELICONE_BASE_URLS = {
    "openai": "https://oai.helicone.ai/v1",
    "anthropic": "https://anthropic.helicone.ai",
}

DEFAULT_TIMEOUT = 60.0


class LLMConfigurationError(RuntimeError):
    """Raised when an LLM client cannot be built (missing SDK or API key)."""


@dataclass
class AIRequestContext:
    """Per-request metadata forwarded to the observability proxy."""

    user_id: str | None = None
    feature_name: str | None = None
    request_id: str | None = None
    custom_properties: dict[str, str] = field(default_factory=dict)

    def to_tracking_headers(self) -> dict[str, str]:
        """Convert context to Helicone tracking headers."""
        headers: dict[str, str] = {}

        if self.user_id:
            headers["Helicone-User-Id"] = self.user_id
        if self.feature_name:
            headers["Helicone-Property-Feature"] = self.feature_name
        if self.request_id:
            headers["Helicone-Request-Id"] = self.request_id

        headers["Helicone-Property-Environment"] = settings.ENVIRONMENT

        for key, value in self.custom_properties.items():
            header_key = f"Helicone-Property-{key.replace('_', '-').title()}"
            headers[header_key] = str(value)

        return headers


class AIClientFactory:
    """Builds OpenAI / Anthropic SDK clients from settings."""

    @staticmethod
    def _client_kwargs(provider: str, api_key: str, context: AIRequestContext | None, timeout: float) -> dict[str, Any]:
        client_kwargs: dict[str, Any] = {
            "api_key": api_key,
            "timeout": timeout,
        }

        if not settings.HELICONE_ENABLED:
            return client_kwargs

        if not settings.HELICONE_API_KEY:
            logger.warning(
                "HELICONE_ENABLED=true but HELICONE_API_KEY not set. "
                "Falling back to direct %s API calls.", provider
            )
            return client_kwargs

        default_headers = {"Helicone-Auth": f"Bearer {settings.HELICONE_API_KEY}"}
        if context:
            default_headers.update(context.to_tracking_headers())

        client_kwargs["base_url"] = _HELICONE_BASE_URLS[provider]
        client_kwargs["default_headers"] = default_headers
        return client_kwargs

    @staticmethod
    def create_openai_client(
        context: AIRequestContext | None = None,
        timeout: float = DEFAULT_TIMEOUT,
    ) -> Any:
        """
        Create an OpenAI client, optionally proxied through Helicone.

        Raises:
            LLMConfigurationError: If the SDK is missing or OPENAI_API_KEY is unset
        """
        try:
            import openai
        except ImportError as e:
            raise LLMConfigurationError("OpenAI library not installed. Run: pip install openai") from e

        if not settings.OPENAI_API_KEY:
            raise LLMConfigurationError("OpenAI API key not configured. Set OPENAI_API_KEY environment variable.")

        client_kwargs = AIClientFactory._client_kwargs("openai", settings.OPENAI_API_KEY, context, timeout)
        logger.debug("Creating OpenAI client (proxied=%s)", "base_url" in client_kwargs)
        return openai.OpenAI(**client_kwargs)

    @staticmethod
    def create_anthropic_client(
        context: AIRequestContext | None = None,
        timeout: float = DEFAULT_TIMEOUT,
    ) -> Any:
        """
        Create an Anthropic client, optionally proxied through Helicone.

        Raises:
            LLMConfigurationError: If the SDK is missing or ANTHROPIC_API_KEY is unset
        """
        try:
            from anthropic import Anthropic
        except ImportError as e:
            raise LLMConfigurationError("Anthropic library not installed. Run: pip install anthropic") from e

        if not settings.ANTHROPIC_API_KEY:
            raise LLMConfigurationError("Anthropic API key not configured. Set ANTHROPIC_API_KEY environment variable.")

        client_kwargs = AIClientFactory._client_kwargs("anthropic", settings.ANTHROPIC_API_KEY, context, timeout)
        logger.debug("Creating Anthropic client (proxied=%s)", "base_url" in client_kwargs)
        return Anthropic(**client_kwargs)

    @staticmethod
    def create_client(
        provider: str,
        context: AIRequestContext | None = None,
        timeout: float = DEFAULT_TIMEOUT,
    ) -> Any:
        """Create a client for `provider` ("openai" or "anthropic")."""
        if provider == "openai":
            return AIClientFactory.create_openai_client(context=context, timeout=timeout)
        if provider == "anthropic":
            return AIClientFactory.create_anthropic_client(context=context, timeout=timeout)
        raise LLMConfigurationError(f"Unknown LLM provider: {provider}. Use 'openai' or 'anthropic'.")
