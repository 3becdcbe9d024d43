from typing import List, Optional
from pydantic_settings import BaseSettings, SettingsConfigDict

class Settings(BaseSettings):
    app_host: str = "0.0.0.0"
    app_port: int = 4000
    env: str = "development"
    log_level: str = "INFO"

    relayer_api_url: str = "https://api3.privacycash.org"
    relayer_timeout: float = 10.0

    # base for generated /pay/{id} urls; falls back to the request's own base url
    public_base_url: Optional[str] = None
    cors_origins: List[str] = ["http://localhost:3000"]

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8")

settings = Settings()
