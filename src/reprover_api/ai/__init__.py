"""LLM client management for the Reprover API."""
from .client_factory import AIClientFactory, AIRequestContext, LLMConfigurationError

__all__ = [
    "AIClientFactory",
    "AIRequestContext",
    "LLMConfigurationError",
]
