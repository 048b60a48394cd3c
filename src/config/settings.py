# src/config/settings.py — v1
"""Typed configuration loaded from .env via pydantic-settings.

Single source of truth for all deployment-specific settings: the metadata
API endpoint, HTTP client behaviour, validation concurrency, cache TTLs,
repair policy and logging.
"""

from __future__ import annotations

from pathlib import Path
from typing import Literal

from pydantic import field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from linkrepair.version import __version__


class ConfigurationError(Exception):
    """Raised when configuration is internally inconsistent."""


class Settings(BaseSettings):
    """Application settings loaded from .env file."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # === Metadata API ===
    # "" = offline (synthetic records only), "test" = canned payload
    api_base_url: str = ""
    api_key: str = ""
    api_timeout_s: float = 30.0

    # === HTTP client ===
    http_timeout_s: float = 30.0
    user_agent: str = f"linkrepair/{__version__}"
    follow_redirects: bool = True

    # === Validation ===
    max_concurrent_validations: int = 10
    check_expired_content: bool = True
    skip_domains: str = ""

    # === Cache ===
    content_id_cache_ttl_s: float = 24 * 3600.0
    lookup_cache_ttl_s: float = 30 * 60.0

    # === Repair ===
    remove_invisible_hyperlinks: bool = True
    update_hyperlinks: bool = True
    add_content_ids: bool = True
    # {document_id} is replaced by the record's document id (or content id)
    document_url_template: str = (
        "https://thesource.cvshealth.com/nuxeo/thesource/#!/view?docid={document_id}"
    )
    auto_replace_titles: bool = False
    report_title_differences: bool = True
    track_changes: bool = False
    revision_author: str = "linkrepair"

    # === Logging ===
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    log_format: Literal["json", "text"] = "json"
    log_file: Path | None = None
    log_rotation: str = "10MB"
    log_retention: int = 5

    # --- Validators ---

    @field_validator("max_concurrent_validations")
    @classmethod
    def validate_concurrency(cls, v: int) -> int:
        if v < 1:
            raise ValueError("max_concurrent_validations must be >= 1")
        return v

    @model_validator(mode="after")
    def validate_config_consistency(self) -> Settings:
        """Validate cross-field consistency rules."""
        errors: list[str] = []

        if self.content_id_cache_ttl_s <= 0 or self.lookup_cache_ttl_s <= 0:
            errors.append("Cache TTLs must be > 0")

        if self.http_timeout_s <= 0 or self.api_timeout_s <= 0:
            errors.append("HTTP_TIMEOUT_S and API_TIMEOUT_S must be > 0")

        if self.track_changes and not self.revision_author.strip():
            errors.append("TRACK_CHANGES requires a non-empty REVISION_AUTHOR")

        if self.update_hyperlinks and "{document_id}" not in self.document_url_template:
            errors.append("DOCUMENT_URL_TEMPLATE must contain {document_id}")

        if errors:
            raise ConfigurationError("; ".join(errors))

        return self

    # --- Helpers ---

    @property
    def skip_domains_list(self) -> list[str]:
        """Parse comma-separated skip domains (lower-cased)."""
        return [d.strip().lower() for d in self.skip_domains.split(",") if d.strip()]

    @property
    def offline(self) -> bool:
        return not self.api_base_url.strip()


def load_settings(**overrides: object) -> Settings:
    """Load settings from .env with optional overrides.

    Raises:
        ConfigurationError: If configuration is internally inconsistent.
    """
    return Settings(**overrides)  # type: ignore[arg-type]
