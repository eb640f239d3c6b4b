from functools import lru_cache
from typing import List, Optional

from pydantic_settings import BaseSettings, SettingsConfigDict

class Settings(BaseSettings):
    meshy_api_key: str
    host: str = "0.0.0.0"
    port: int = 3000
    log_level: str = "INFO"

    # Meshy API Configuration
    meshy_api_base_url: str = "https://api.meshy.ai"
    MESHY_API_TIMEOUT_SECONDS: Optional[float] = None  # None keeps the httpx default timeout
    MESHY_DOWNLOAD_TIMEOUT_SECONDS: int = 60  # Timeout for downloading GLB files from the Meshy CDN
    DOWNLOAD_CHUNK_SIZE: int = 64 * 1024

    # Browser client
    public_dir: Optional[str] = "public"  # Served at / when the directory exists
    cors_allow_origins: str = "*"  # Comma-separated

    model_config = SettingsConfigDict(env_file='.env', extra='ignore')

    @property
    def cors_allow_origins_list(self) -> List[str]:
        return [origin.strip() for origin in self.cors_allow_origins.split(",") if origin.strip()]

@lru_cache()
def get_settings() -> Settings:
    return Settings()
