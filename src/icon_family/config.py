from __future__ import annotations

from typing import ClassVar, final

from pydantic import model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


@final
class Settings(BaseSettings):
    model_config: ClassVar[SettingsConfigDict] = SettingsConfigDict(
        env_prefix="ICON_FAMILY_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    log_level: str = "INFO"

    # Capacity hint used by Encoder.new(); typical icon families hold a handful of sizes.
    default_capacity: int = 7

    # Favicon option defaults; per-encoder setters override these.
    favicon_apple_touch: bool = False
    favicon_pwa: bool = False

    # View-box side for SVG documents declaring neither viewBox nor width/height.
    svg_fallback_size: float = 100.0

    @model_validator(mode="after")
    def _validate_settings(self) -> "Settings":  # pyright: ignore[reportUnusedFunction]
        errors: list[str] = []

        if self.default_capacity <= 0:
            errors.append("DEFAULT_CAPACITY must be positive")

        if self.svg_fallback_size <= 0:
            errors.append("SVG_FALLBACK_SIZE must be positive")

        if errors:
            raise ValueError("Invalid icon_family settings: " + "; ".join(errors))
        return self


settings = Settings()
