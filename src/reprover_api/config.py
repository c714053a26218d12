"""Configuration settings for the Reprover API."""
import os
from typing import Literal


EnvironmentType = Literal["development", "staging", "production"]
LLMProviderType = Literal["openai", "anthropic"]
StoreBackendType = Literal["supabase", "memory"]

DEFAULT_CORS_ORIGINS = "http://localhost:3000,http://localhost:3001"


class Settings:
    """Application settings."""

    # Environment
    ENVIRONMENT: EnvironmentType = "development"

    # LLM
    LLM_PROVIDER: LLMProviderType = "openai"
    LLM_MODEL: str | None = None
    HELICONE_ENABLED: bool = False

    # API Keys
    OPENAI_API_KEY: str | None = None
    ANTHROPIC_API_KEY: str | None = None
    HELICONE_API_KEY: str | None = None

    # Document store
    STORE_BACKEND: StoreBackendType = "supabase"
    SUPABASE_URL: str | None = None
    SUPABASE_KEY: str | None = None

    # Identity provider
    FIREBASE_PROJECT_ID: str | None = None

    CORS_ORIGINS: list[str] = []

    def __init__(self):
        # Environment
        env = os.getenv("ENVIRONMENT", "development").lower()
        if env in ("development", "staging", "production"):
            self.ENVIRONMENT = env  # type: ignore
        else:
            self.ENVIRONMENT = "development"

        # LLM
        provider = os.getenv("LLM_PROVIDER", "openai").lower()
        self.LLM_PROVIDER = provider if provider in ("openai", "anthropic") else "openai"  # type: ignore
        self.LLM_MODEL = os.getenv("LLM_MODEL") or None
        self.HELICONE_ENABLED = os.getenv("HELICONE_ENABLED", "false").lower() == "true"

        # API Keys
        self.OPENAI_API_KEY = os.getenv("OPENAI_API_KEY")
        self.ANTHROPIC_API_KEY = os.getenv("ANTHROPIC_API_KEY")
        self.HELICONE_API_KEY = os.getenv("HELICONE_API_KEY")

        # Document store
        backend = os.getenv("STORE_BACKEND", "supabase").lower()
        self.STORE_BACKEND = backend if backend in ("supabase", "memory") else "supabase"  # type: ignore
        self.SUPABASE_URL = os.getenv("SUPABASE_URL")
        self.SUPABASE_KEY = os.getenv("SUPABASE_SERVICE_ROLE_KEY") or os.getenv("SUPABASE_ANON_KEY")

        self.FIREBASE_PROJECT_ID = os.getenv("FIREBASE_PROJECT_ID")

        self.CORS_ORIGINS = [
            origin.strip()
            for origin in os.getenv("CORS_ORIGINS", DEFAULT_CORS_ORIGINS).split(",")
            if origin.strip()
        ]


settings = Settings()
