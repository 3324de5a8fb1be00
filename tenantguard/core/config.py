from functools import lru_cache
from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # App
    app_name: str = "tenantguard"
    debug: bool = False

    # Authorization
    # YAML permission matrix; the built-in table is used when unset
    authz_matrix_path: Optional[str] = None
    # Raise on caller misuse instead of denying (development builds)
    authz_strict: bool = False

    # Logging
    log_level: str = "INFO"
    log_dir: str = "logs"
    log_to_file: bool = False

    @property
    def strict_mode(self) -> bool:
        return self.authz_strict or self.debug

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        extra="ignore"  # Allow extra env vars without raising validation errors
    )


@lru_cache
def get_settings() -> Settings:
    return Settings()
