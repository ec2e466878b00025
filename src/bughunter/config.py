"""Environment-based configuration."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Annotated, Any

from pydantic import field_validator
from pydantic_settings import BaseSettings, NoDecode

logger = logging.getLogger(__name__)


class Settings(BaseSettings):
    """Reads from .env file and environment variables."""

    # LLM Provider
    gemini_api_key: str = ""
    openai_api_key: str = ""

    # Model chain (first = primary, rest = fallbacks tried in order)
    litellm_model_chain: Annotated[list[str], NoDecode] = [
        "gemini/gemini-2.5-flash",
        "openai/gpt-4.1-mini",
    ]
    llm_timeout_seconds: int = 60

    # Gateway client
    gateway_url: str = "http://localhost:8000/api/analyze"
    gateway_timeout_seconds: float = 90.0
    gateway_max_attempts: int = 3

    # Directories
    log_dir: Path = Path("logs")
    export_dir: Path = Path("exports")

    # Logging
    log_level: str = "INFO"
    debug_mode: bool = False

    # API
    api_key: str = ""
    cors_origins: str = "*"

    @field_validator("litellm_model_chain", mode="before")
    @classmethod
    def _parse_chain(cls, v: Any) -> Any:
        """Accept comma-separated string or JSON array."""
        if isinstance(v, str):
            return [s.strip() for s in v.split(",") if s.strip()]
        return v

    @field_validator("litellm_model_chain")
    @classmethod
    def _validate_chain(cls, v: list[str]) -> list[str]:
        if not v:
            raise ValueError(
                "litellm_model_chain must contain at least one model"
            )
        seen: set[str] = set()
        dupes: list[str] = []
        for m in v:
            if m in seen:
                dupes.append(m)
            seen.add(m)
        if dupes:
            logger.warning(
                "Duplicate models in LITELLM_MODEL_CHAIN: %s",
                ", ".join(dupes),
            )
        return v

    @field_validator("gateway_max_attempts")
    @classmethod
    def _validate_attempts(cls, v: int) -> int:
        if v < 1:
            raise ValueError("gateway_max_attempts must be >= 1")
        return v

    @property
    def cors_origin_list(self) -> list[str]:
        """CORS origins split from the comma-separated setting."""
        return [
            o.strip() for o in self.cors_origins.split(",") if o.strip()
        ]

    def provider_api_key(self, model: str) -> str | None:
        """Configured key for a ``provider/model`` id, else None.

        None leaves litellm to find the key in the environment.
        """
        provider = model.split("/", 1)[0]
        key = {
            "gemini": self.gemini_api_key,
            "openai": self.openai_api_key,
        }.get(provider, "")
        return key or None

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "env_prefix": "",
        "extra": "ignore",
    }
