"""Configuration management.

Loads from TOML config files + environment variables.
Uses pydantic-settings for validation and env var overriding.

Aggregates read :data:`DEFAULT_LIMITS`, never the environment.
``Settings.limits`` exposes the same numbers to the orchestration layer
(form hints, API docs).
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic_settings import BaseSettings

from .errors import ConfigError


# ---------------------------------------------------------------------------
# Sub-configs
# ---------------------------------------------------------------------------

class DomainLimits(BaseModel):
    """Numeric limits enforced by the aggregates."""

    model_config = ConfigDict(frozen=True)

    max_items_per_wishlist: int = 100
    wishlist_title_min: int = 3
    wishlist_title_max: int = 100
    wishlist_description_max: int = 500
    item_name_min: int = 3
    item_name_max: int = 100
    item_description_max: int = 200
    username_min: int = 3
    username_max: int = 30
    bio_max: int = 500


class ObservabilityConfig(BaseModel):
    log_level: str = "INFO"
    log_format: str = "json"  # "json" or "console"


DEFAULT_LIMITS = DomainLimits()


# ---------------------------------------------------------------------------
# Top-level settings
# ---------------------------------------------------------------------------

class Settings(BaseSettings):
    """Top-level settings.

    Loaded from TOML config files, overridden by environment variables.
    """

    limits: DomainLimits = Field(default_factory=DomainLimits)
    observability: ObservabilityConfig = Field(default_factory=ObservabilityConfig)

    model_config = {"env_prefix": "WISHIN_", "env_nested_delimiter": "__"}


def load_settings(
    config_path: str | Path | None = None,
    overrides: dict[str, Any] | None = None,
) -> Settings:
    """Load settings from TOML file + env vars.

    Args:
        config_path: Path to TOML config file (optional).
        overrides: Dict of overrides to apply on top.

    Raises:
        ConfigError: If *config_path* is given but cannot be parsed.
    """
    data: dict[str, Any] = {}

    if config_path:
        path = Path(config_path)
        if path.exists():
            import tomli

            try:
                with open(path, "rb") as f:
                    data = tomli.load(f)
            except tomli.TOMLDecodeError as exc:
                raise ConfigError(f"Invalid config file {path}: {exc}") from exc

    if overrides:
        data.update(overrides)

    return Settings(**data)
