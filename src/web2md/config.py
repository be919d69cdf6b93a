"""Configuration loading.

Settings are loaded in priority order (highest first):
  1. Environment variables  (WEB2MD__CACHE__TTL_HOURS=6)
  2. web2md.yaml            (searched in cwd, then platform config dir)
  3. Hardcoded defaults

The config file is optional: all fields have sensible defaults.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Literal

import platformdirs
from pydantic import BaseModel
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
    YamlConfigSettingsSource,
)

_DEFAULT_CACHE_DIR = platformdirs.user_cache_dir("web2md")

BROWSER_USER_AGENT = (
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
)
DIRECT_USER_AGENT = "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36"


def _find_config_file() -> str | None:
    """Return the path of the first web2md.yaml found, or None."""
    candidates = [
        Path("web2md.yaml"),
        Path(platformdirs.user_config_dir("web2md")) / "web2md.yaml",
    ]
    for path in candidates:
        if path.exists():
            return str(path)
    return None


class CacheSettings(BaseModel):
    ttl_hours: int = 24
    dir: str = _DEFAULT_CACHE_DIR
    cleanup_interval_hours: int = 6


class FetcherSettings(BaseModel):
    browser_user_agent: str = BROWSER_USER_AGENT
    direct_user_agent: str = DIRECT_USER_AGENT
    request_timeout_seconds: float = 30.0
    headless: bool = True
    # Bound applied to each readiness wait (networkidle, then domcontentloaded)
    readiness_timeout_ms: int = 15_000
    settle_delay_ms: int = 2_000
    lazy_load_delay_ms: int = 1_000


class LoggingSettings(BaseModel):
    level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    format: Literal["json", "text"] = "json"


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        # Double-underscore separates nesting: WEB2MD__FETCHER__HEADLESS=false
        env_prefix="WEB2MD__",
        env_nested_delimiter="__",
        yaml_file=_find_config_file(),
        yaml_file_encoding="utf-8",
    )

    cache: CacheSettings = CacheSettings()
    fetcher: FetcherSettings = FetcherSettings()
    logging: LoggingSettings = LoggingSettings()

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
        **kwargs: Any,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        return (
            init_settings,  # Constructor args (highest priority)
            env_settings,  # Environment variables
            YamlConfigSettingsSource(settings_cls),  # YAML file
            # dotenv and file secrets intentionally excluded
        )
