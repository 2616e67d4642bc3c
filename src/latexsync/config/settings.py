from __future__ import annotations

from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


RenderEngineChoice = Literal["mathtext", "mathml"]
DisplayModeChoice = Literal["inline", "block"]


class Settings(BaseSettings):
    """Environment-driven configuration for editor sessions and rendering.

    Values are read from environment variables with prefix ``LATEXSYNC_`` and
    optionally from a local ``.env`` file. A session treats its settings as
    immutable for its whole lifetime.
    """

    model_config = SettingsConfigDict(
        env_prefix="LATEXSYNC_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        frozen=True,
    )

    # --- Rendering ---
    default_engine: RenderEngineChoice = Field(
        "mathtext",
        description="Rendering backend tried first.",
    )
    display_mode: DisplayModeChoice = Field(
        "block",
        description="Default display mode for previews.",
    )
    error_color: str = Field(
        "#cc0000",
        description="Colour of the error span emitted for failed renders.",
    )

    # --- Timing ---
    render_debounce_ms: int = Field(
        300,
        description="Quiet period before an edit triggers a render.",
    )
    validation_debounce_ms: int = Field(
        500,
        description="Quiet period before an edit triggers validation.",
    )
    engine_load_timeout_ms: int = Field(
        10_000,
        description="Hard ceiling for waiting on a rendering backend to load.",
    )
    engine_poll_interval_ms: int = Field(
        100,
        description="Polling interval while waiting for a backend to load.",
    )

    # --- Editor behaviour ---
    auto_sync: bool = Field(True, description="Render automatically after edits.")
    auto_validate: bool = Field(True, description="Validate automatically after edits.")
    auto_save: bool = Field(False, description="Save automatically when the content is valid.")
    strict_commands: bool = Field(
        False,
        description="Reject LaTeX commands missing from the known-command allow-list.",
    )

    # --- Logging ---
    log_level: str = Field("INFO", description="Root log level.")
    json_logs: bool = Field(False, description="Render structured logs as JSON.")

    @field_validator(
        "render_debounce_ms",
        "validation_debounce_ms",
        "engine_load_timeout_ms",
    )
    @classmethod
    def non_negative(cls, value: int) -> int:
        if value < 0:
            raise ValueError("durations must be non-negative")
        return value

    @field_validator("engine_poll_interval_ms")
    @classmethod
    def positive(cls, value: int) -> int:
        if value <= 0:
            raise ValueError("poll interval must be positive")
        return value


# Global singleton used by library code.
settings = Settings()


__all__ = [
    "Settings",
    "settings",
    "RenderEngineChoice",
    "DisplayModeChoice",
]
