from typing import List

from pydantic_settings import BaseSettings, SettingsConfigDict
from pathlib import Path

env_path = Path(__file__).parent / ".env"

class Settings(BaseSettings):
    DATABASE_URL: str = "sqlite+aiosqlite:///./recordings.db"
    RECORDINGS_HOST: str = "0.0.0.0"
    RECORDINGS_PORT: int = 5000
    STORAGE_BASE_PATH: Path = Path("uploads")
    RECORDING_EXTENSION: str = ".webm"
    RECORDING_MEDIA_TYPE: str = "video/webm"
    STORAGE_CHUNK_SIZE: int = 1024 * 1024
    CORS_ORIGINS: List[str] = ["*"]
    LOG_LEVEL: str = "INFO"

    model_config = SettingsConfigDict(env_file=env_path, extra='ignore')

settings = Settings()

def get_settings() -> Settings:
    return settings
