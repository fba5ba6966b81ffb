"""Settings and configuration."""
from pydantic_settings import BaseSettings, SettingsConfigDict

from cryptobackup.utils.dataModels import DEFAULT_ALGORITHM, DEFAULT_KEY_SIZE, DEFAULT_STORAGE_PATH


class Settings(BaseSettings):
    # Storage
    storage_path: str = DEFAULT_STORAGE_PATH
    confine_paths: bool = False

    # Crypto
    algorithm: str = DEFAULT_ALGORITHM
    key_size: int = DEFAULT_KEY_SIZE

    # Logging
    log_level: str = "WARNING"

    model_config = SettingsConfigDict(
        env_prefix="CRYPTOBACKUP_",
        env_file=".env",
        extra="ignore",
    )


def get_settings() -> Settings:
    return Settings()
