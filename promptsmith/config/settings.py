from pydantic import Field
from pydantic_settings import BaseSettings
from typing import Optional
import os


class Settings(BaseSettings):
    # Server Configuration
    HOST: str = "127.0.0.1"
    PORT: int = 8000
    DEBUG: bool = True
    LOG_LEVEL: str = "INFO"

    # Vagueness Analysis
    VAGUENESS_THRESHOLD: int = Field(30, ge=0, le=100)  # Prompts scoring below this skip enhancement
    MODEL_STORE_PATH: str = "./data/models/vagueness_model.json"
    TRAIN_ON_STARTUP: bool = False  # Train on bundled seed prompts when no stored model exists

    # Rate Limiting
    RATE_LIMIT_MAX_REQUESTS: int = Field(10, ge=1)
    RATE_LIMIT_WINDOW_MS: int = Field(60000, ge=1)

    # Result Cache
    CACHE_TTL_MS: int = Field(300000, ge=1)  # 5 minutes
    CACHE_MAX_SIZE: int = Field(100, ge=1)

    # Workspace Context
    WORKSPACE_ROOT: Optional[str] = None  # No workspace context when unset
    ENABLE_SEMANTIC_CONTEXT: bool = False  # Consent flag for reading source of the active file
    CONTEXT_MAX_LENGTH: int = 2000

    # Providers
    PROVIDER_TIMEOUT_SECONDS: float = 30.0
    PREFERRED_MODEL: str = "auto"  # Host model preference: auto, gpt-4 or claude
    CHAT_API_KEY: Optional[str] = None  # Chat-completion provider is disabled without a key
    CHAT_API_URL: str = "https://api.groq.com/openai/v1/chat/completions"
    CHAT_MODEL: str = "llama-3.3-70b-versatile"
    CHAT_MAX_TOKENS: int = 1000
    CHAT_TEMPERATURE: float = 0.7

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"


# Create settings instance
settings = Settings()

# Ensure data directories exist
os.makedirs(os.path.dirname(settings.MODEL_STORE_PATH) or ".", exist_ok=True)
os.makedirs("logs", exist_ok=True)
