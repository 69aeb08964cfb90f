"""
core/config.py -- Centralized configuration via pydantic-settings.

All environment variable reads happen here. No module should call os.getenv()
directly -- import get_settings() instead.

Design patterns used:
  Singleton via lru_cache: get_settings() instantiates Settings once at first
      call and returns the cached instance on every subsequent call. This is
      the FastAPI dependency injection pattern for config.

  BaseSettings (pydantic-settings): field names map to env var names
      (security_config_file -> SECURITY_CONFIG_FILE). Complex fields are read
      as JSON, so the whole security section can be given inline:
          SECURITY='{"checks": ["api_key"], "skip_routes": {"/health": "*"}}'

  @model_validator(mode="after"): when no inline SECURITY is set but
      SECURITY_CONFIG_FILE is, the file is loaded here. A missing or broken
      file is a hard startup failure -- the service must not come up with an
      unintended "no checks" policy.

Layer rule: core/ is the kernel. This module may not import from api/.
"""

import json
import logging
from collections.abc import Mapping
from functools import lru_cache
from pathlib import Path
from typing import Any, Optional

from pydantic import ValidationError, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from core.models import SecurityConfig

logger = logging.getLogger("requestgate.config")


def parse_security_config(data: Any) -> Optional[SecurityConfig]:
    """Build a SecurityConfig from decoded config data.

    Accepts either a full application config with a `security` key or the
    security section itself. Anything that is not a mapping means "no policy".
    """
    if not isinstance(data, Mapping):
        return None
    if "security" in data:
        return SecurityConfig.from_app_config(data)
    return SecurityConfig.model_validate(dict(data))


def load_security_config(path: str | Path) -> Optional[SecurityConfig]:
    """Read a JSON config file and return its security section.

    Raises ValueError if the file is missing, unreadable, or not valid JSON.
    """
    file_path = Path(path).resolve()
    if not file_path.is_file():
        raise ValueError(f"Security config file '{path}' is not a readable file.")
    try:
        data = json.loads(file_path.read_text(encoding="utf-8"))
    except OSError as e:
        raise ValueError(f"Could not read security config file '{path}': {e}") from e
    except json.JSONDecodeError as e:
        raise ValueError(f"Security config file '{path}' is not valid JSON: {e}") from e
    try:
        return parse_security_config(data)
    except ValidationError as e:
        raise ValueError(f"Security config file '{path}' is invalid: {e}") from e


class Settings(BaseSettings):
    """Application settings loaded from environment variables and .env file.

    All fields have defaults so Settings() can be instantiated in tests
    without a real .env file. With no SECURITY and no SECURITY_CONFIG_FILE the
    gate runs with no policy and lets every request through.
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
    log_level: str = "INFO"
    allowed_hosts: list[str] = ["localhost", "127.0.0.1", "*.localhost"]

    # ------------------------------------------------------------------
    # Security gate
    # ------------------------------------------------------------------

    # Empty string is the sentinel for "no file".
    security_config_file: str = ""
    security: Optional[SecurityConfig] = None

    # Dotted module paths imported at startup. Each module registers its
    # checks on core.registry.default_registry when imported.
    check_modules: list[str] = []

    @model_validator(mode="after")
    def load_security_file(self) -> "Settings":
        """Load SECURITY_CONFIG_FILE when no inline SECURITY is given.

        Inline SECURITY wins when both are set; a warning is logged because
        the file is then silently unused.
        """
        if not self.security_config_file:
            return self
        if self.security is not None:
            logger.warning(
                "Both SECURITY and SECURITY_CONFIG_FILE are set -- using SECURITY, ignoring %s",
                self.security_config_file,
            )
            return self
        self.security = load_security_config(self.security_config_file)
        return self


@lru_cache
def get_settings() -> Settings:
    """Return the application Settings singleton.

    In tests: call get_settings.cache_clear() between test cases if you need
    to inject different environment variables.
    """
    return Settings()
