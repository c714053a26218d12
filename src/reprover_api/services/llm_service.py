"""One-shot chat completions against the configured LLM provider."""
import logging
from typing import Optional

from reprover_api.ai import AIClientFactory, AIRequestContext
from reprover_api.config import settings


logger = logging.getLogger(__name__)

DEFAULT_MODELS = {
    "openai": "gpt-4o-mini",
    "anthropic": "claude-3-5-sonnet-20241022",
}

ANTHROPIC_MAX_TOKENS = 4096


class LLMServiceError(RuntimeError):
    """Raised when the LLM provider call fails."""


class LLMService:
    """Thin request/response wrapper around the LLM provider.

    A failed call is surfaced once; nothing here retries.
    """

    @staticmethod
    def resolve_model(provider: str, model: Optional[str] = None) -> str:
        return model or settings.LLM_MODEL or DEFAULT_MODELS.get(provider, DEFAULT_MODELS["openai"])

    @staticmethod
    def _complete_openai(client, model: str, system_prompt: str, user_message: str,
                         temperature: float, max_tokens: Optional[int]) -> str:
        kwargs = {}
        if max_tokens is not None:
            kwargs["max_tokens"] = max_tokens
        response = client.chat.completions.create(
            model=model,
            messages=[
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": user_message},
            ],
            temperature=temperature,
            **kwargs,
        )
        return response.choices[0].message.content or ""

    @staticmethod
    def _complete_anthropic(client, model: str, system_prompt: str, user_message: str,
                            temperature: float, max_tokens: Optional[int]) -> str:
        message = client.messages.create(
            model=model,
            max_tokens=max_tokens or ANTHROPIC_MAX_TOKENS,
            system=system_prompt,
            messages=[{"role": "user", "content": user_message}],
            temperature=temperature,
        )
        return "".join(
            getattr(block, "text", "") for block in message.content
        )

    @staticmethod
    def complete(
        system_prompt: str,
        user_message: str,
        temperature: float = 0.0,
        max_tokens: Optional[int] = None,
        model: Optional[str] = None,
        provider: Optional[str] = None,
        user_id: Optional[str] = None,
        feature_name: Optional[str] = None,
    ) -> str:
        """
        Send a system prompt plus one user message and return the raw text reply.

        Args:
            system_prompt: Fixed instruction for the model
            user_message: Caller-provided text
            temperature: Sampling temperature (0 for parsing)
            max_tokens: Optional completion length cap
            model: Model override (defaults to LLM_MODEL or the provider default)
            provider: "openai" or "anthropic" (defaults to LLM_PROVIDER)
            user_id: Optional user ID for request tracking
            feature_name: Feature label for request tracking

        Returns:
            The model's text content, unmodified

        Raises:
            LLMConfigurationError: If the provider client cannot be built
            LLMServiceError: If the provider call fails
        """
        provider = (provider or settings.LLM_PROVIDER).lower()
        model = LLMService.resolve_model(provider, model)

        context = AIRequestContext(
            user_id=user_id,
            feature_name=feature_name,
            custom_properties={"model": model},
        )
        client = AIClientFactory.create_client(provider, context=context)

        try:
            if provider == "anthropic":
                return LLMService._complete_anthropic(
                    client, model, system_prompt, user_message, temperature, max_tokens
                )
            return LLMService._complete_openai(
                client, model, system_prompt, user_message, temperature, max_tokens
            )
        except Exception as e:
            logger.error(f"{provider} API call failed ({feature_name}): {e}")
            raise LLMServiceError(f"{provider} API call failed: {e}") from e
