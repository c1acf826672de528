from pydantic_settings import BaseSettings
from functools import lru_cache
from typing import Optional


class Settings(BaseSettings):
    # LLM (Groq, OpenAI-compatible API)
    GROQ_API_KEY: str = ""
    GROQ_BASE_URL: str = "https://api.groq.com/openai/v1"
    LLM_MODEL: str = "meta-llama/llama-4-maverick-17b-128e-instruct"
    LLM_MAX_RETRIES: int = 2
    LLM_RETRY_DELAY: float = 1.0

    # Text-to-speech
    TTS_MODEL: str = "playai-tts"
    TTS_MODEL_ARABIC: str = "playai-tts-arabic"
    TTS_VOICE: str = "Celeste-PlayAI"
    TTS_VOICE_ARABIC: str = "Khalid-PlayAI"
    TTS_FALLBACK_ENABLED: bool = True

    # Uploads / export
    MAX_FILE_SIZE_MB: int = 10
    PDF_FONT_PATH: Optional[str] = None

    # Reading sessions (in memory)
    SESSION_TTL_MINUTES: int = 60
    MAX_SESSIONS: int = 100

    # CORS
    CORS_ORIGINS: str = "http://localhost:3000"

    # App
    DEBUG: bool = True
    LOG_LEVEL: str = "INFO"

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"


@lru_cache()
def get_settings() -> Settings:
    return Settings()
