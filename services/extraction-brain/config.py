"""Environment-based configuration for the extraction brain."""

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Extraction brain settings, loaded from environment variables."""

    # Server
    PORT: int = 8092
    LOG_LEVEL: str = "INFO"

    # Ollama connection (empty model = extraction unavailable, local dev default)
    OLLAMA_URL: str = "http://localhost:11434"
    OLLAMA_MODEL: str = ""

    # Sampling
    MODEL_TEMPERATURE: float = 0.1

    # Timeout and retry for the model call (1 attempt = no retry)
    MODEL_TIMEOUT_SECONDS: float = 300.0
    MODEL_RETRY_ATTEMPTS: int = 1
    MODEL_RETRY_DELAY: float = 5.0
    MODEL_RETRY_BACKOFF: float = 2.0

    model_config = {"env_prefix": "", "case_sensitive": True}


settings = Settings()
