from functools import lru_cache
from pathlib import Path
from typing import List, Optional

from pydantic import Field
from pydantic_settings import BaseSettings

DEFAULT_METHODS = "GET,POST,PUT,PATCH,DELETE,OPTIONS"
DEFAULT_HEADERS = "Content-Type,Authorization"


def _parse_csv(s: str) -> List[str]:
    parts = [p.strip() for p in (s or "").split(",")]
    return [p for p in parts if p]


class Settings(BaseSettings):
    db_dir: Path = Field(default=Path("./data"))
    db_name: str = Field(default="equipos_biomedicos")
    db_file: Optional[str] = Field(default=None)
    db_pool_size: int = Field(default=10, ge=1)
    db_timeout_seconds: float = Field(default=5.0)
    host: str = Field(default="0.0.0.0")
    port: int = Field(default=4000)
    frontend_url: str = Field(default="http://localhost:3000")
    # listas separadas por comas, como llegan del entorno
    allowed_origins: str = Field(default="")
    cors_allow_methods: str = Field(default=DEFAULT_METHODS)
    cors_allow_headers: str = Field(default=DEFAULT_HEADERS)
    cors_allow_credentials: bool = Field(default=True)
    log_level: str = Field(default="INFO")
    log_dir: Optional[Path] = Field(default=None)

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "case_sensitive": False,
        "env_ignore_empty": True,
        "extra": "ignore",
    }

    @property
    def db_path(self) -> Path:
        return Path(self.db_dir) / (self.db_file or f"{self.db_name}.sqlite")

    @property
    def origins(self) -> List[str]:
        # ALLOWED_ORIGINS manda sobre FRONTEND_URL
        return _parse_csv(self.allowed_origins) or [self.frontend_url]

    @property
    def methods(self) -> List[str]:
        return _parse_csv(self.cors_allow_methods) or _parse_csv(DEFAULT_METHODS)

    @property
    def headers(self) -> List[str]:
        return _parse_csv(self.cors_allow_headers) or _parse_csv(DEFAULT_HEADERS)


@lru_cache
def get_settings() -> Settings:
    return Settings()
