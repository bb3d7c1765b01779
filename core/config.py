"""
core/config.py -- ShopAdmin settings, read once from the environment.

Every environment variable ShopAdmin understands is a field on Settings.
Other modules take a Settings instance (or call get_settings()) instead of
reading os.environ themselves.

Loading: pydantic-settings maps each field to the upper-cased env var of the
same name (database_url -> DATABASE_URL) and falls back to a .env file in the
working directory. List fields such as ALLOWED_HOSTS are given as JSON.

Signing key policy (enforced by the model validator):
  DEBUG=true and no SECRET_KEY  -> a random key is generated and a warning
                                   logged; sessions end on restart.
  DEBUG unset and no SECRET_KEY -> startup fails.
  Any key under 32 characters   -> startup fails.

The key is handed to TokenCodec once, in api/main.py init_state(); nothing
reads it from module state afterwards.

Layer rule: core/ is the kernel. This module may not import from api/, auth/,
or shop/.
"""

import logging
import secrets
from functools import lru_cache
from pathlib import Path

from pydantic import model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger("shopadmin.config")

_DEFAULT_DB_URL = f"sqlite:///{Path(__file__).resolve().parent.parent / 'shopadmin.db'}"


class Settings(BaseSettings):
    """Every ShopAdmin setting, with a default that works for local development.

    Only SECRET_KEY lacks a usable default outside DEBUG mode.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ------------------------------------------------------------------
    # Core
    # ------------------------------------------------------------------

    debug: bool = False
    # "" means unset; validate_secret_key() replaces it or refuses to start.
    secret_key: str = ""
    database_url: str = _DEFAULT_DB_URL

    # ------------------------------------------------------------------
    # Sessions
    # ------------------------------------------------------------------

    # 24 hours: the session cookie and the token expire together.
    token_expire_seconds: int = 24 * 60 * 60
    secure_cookies: bool = False

    # ------------------------------------------------------------------
    # Rate limiting
    # ------------------------------------------------------------------

    rate_limit_enabled: bool = True
    login_rate_limit: str = "10/minute"
    register_rate_limit: str = "5/minute"

    # ------------------------------------------------------------------
    # Roles
    # ------------------------------------------------------------------

    # Role assigned to self-registered accounts.
    default_role: str = "viewer"
    # Create the default role set at startup when the roles table is empty.
    seed_roles: bool = True

    # ------------------------------------------------------------------
    # HTTP
    # ------------------------------------------------------------------

    allowed_hosts: list[str] = ["localhost", "127.0.0.1", "*.localhost"]
    cors_origins: list[str] = ["http://localhost", "http://localhost:3000", "http://127.0.0.1"]

    # ------------------------------------------------------------------
    # Validators
    # ------------------------------------------------------------------

    @model_validator(mode="after")
    def validate_secret_key(self) -> "Settings":
        """Apply the signing key policy described in the module docstring."""
        if not self.secret_key:
            if not self.debug:
                raise ValueError(
                    "SECRET_KEY is not set. Provide a key of at least 32 characters "
                    "via the environment or .env, or set DEBUG=true for local development."
                )
            self.secret_key = secrets.token_hex(32)
            logger.warning("No SECRET_KEY configured; generated a temporary one. Sessions end on restart.")
        if len(self.secret_key) < 32:
            raise ValueError("SECRET_KEY must be at least 32 characters.")
        return self


@lru_cache
def get_settings() -> Settings:
    """Return the process-wide Settings, built on first call.

    Tests that change environment variables after import must call
    get_settings.cache_clear().
    """
    return Settings()
