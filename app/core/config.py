from pydantic_settings import BaseSettings, SettingsConfigDict
from pathlib import Path
from dotenv import load_dotenv


# Path to the .env file in the project root (two levels up from app/core)
CONFIG_DIR = Path(__file__).resolve().parent
PROJECT_ROOT = CONFIG_DIR.parent.parent
ENV_FILE_PATH = PROJECT_ROOT / '.env'

# Load environment variables from .env file
load_dotenv(ENV_FILE_PATH)


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=str(ENV_FILE_PATH),
        env_file_encoding='utf-8',
        extra='ignore'
    )

    DEBUG_MODE: bool = False
    LOG_JSON: bool = False

    # Question generation limits
    DEFAULT_QUESTION_COUNT: int = 5
    MIN_QUESTION_COUNT: int = 1
    MAX_QUESTION_COUNT: int = 20

    # Generation provider defaults (overridden per call by the provider context)
    OPENAI_MODEL: str = "gpt-4-turbo-preview"
    ANTHROPIC_MODEL: str = "claude-3-opus-20240229"
    ANTHROPIC_VALIDATION_MODEL: str = "claude-3-haiku-20240307"
    GEMINI_MODEL: str = "gemini-2.5-flash"
    OLLAMA_MODEL: str = "llama2"
    OLLAMA_BASE_URL: str = "http://localhost:11434"

    GENERATION_TEMPERATURE: float = 0.7
    GENERATION_MAX_TOKENS: int = 2000

    # Transcription provider defaults
    WHISPER_MODEL: str = "whisper-1"
    WHISPER_LANGUAGE: str = "en"
    LOCAL_WHISPER_ENDPOINT: str = "http://localhost:8000"
    LOCAL_WHISPER_MODEL: str = "base"

    # Timeout for direct HTTP calls to Ollama / local Whisper (seconds)
    PROVIDER_HTTP_TIMEOUT: float = 120.0

    # Object storage (MinIO / S3)
    MINIO_ENDPOINT: str = "http://localhost:9000"
    MINIO_BUCKET: str = "recordings"
    MINIO_ACCESS_KEY: str = "admin"
    MINIO_SECRET_KEY: str = "password123"
    MINIO_REGION: str = "us-east-1"
    MINIO_VERIFY_TLS: bool = True


settings = Settings()
