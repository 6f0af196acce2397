from __future__ import annotations

import logging
import os
from functools import lru_cache
from typing import Any, Dict, List, Mapping, Tuple

from dotenv import load_dotenv
from pydantic import BaseModel, Field, model_validator


logger = logging.getLogger(__name__)

GEMINI_KEY_PREFIX = "AIza"
DEFAULT_GEMINI_MODELS = ["gemini-2.0-flash", "gemini-1.5-flash", "gemini-pro"]


class Settings(BaseModel):
    """Provider configuration, resolved once at startup."""

    openai_api_key: str | None = Field(default=None, repr=False)
    gemini_api_key: str | None = Field(default=None, repr=False)

    gemini_models: List[str] = Field(default_factory=lambda: list(DEFAULT_GEMINI_MODELS))
    openai_model: str = "gpt-3.5-turbo"
    request_timeout: float = 15.0

    port: int = 3000
    static_dir: str | None = "."

    class Config:
        extra = "ignore"
        frozen = True

    @model_validator(mode="before")
    @classmethod
    def _sort_keys(cls, data: Any) -> Any:
        if isinstance(data, dict):
            data = dict(data)
            data["openai_api_key"], data["gemini_api_key"] = classify_keys(
                data.get("openai_api_key"), data.get("gemini_api_key")
            )
        return data

    @property
    def has_openai(self) -> bool:
        return bool(self.openai_api_key)

    @property
    def has_gemini(self) -> bool:
        return bool(self.gemini_api_key)


def classify_keys(openai_raw: str | None, gemini_raw: str | None) -> Tuple[str | None, str | None]:
    """Sort the two secret slots into (openai_key, gemini_key) by shape.

    Anything starting with ``AIza`` is a Google key. When it sits in the OpenAI
    slot and no explicit Gemini key is set, it is used for Gemini instead.
    """

    openai_key = (openai_raw or "").strip()
    gemini_key = (gemini_raw or "").strip()
    if not gemini_key and openai_key.startswith(GEMINI_KEY_PREFIX):
        gemini_key = openai_key
    if openai_key.startswith(GEMINI_KEY_PREFIX):
        openai_key = ""
    return openai_key or None, gemini_key or None


def _split_models(raw: str | None) -> List[str]:
    if not raw:
        return list(DEFAULT_GEMINI_MODELS)
    models = [name.strip() for name in raw.split(",") if name.strip()]
    return models or list(DEFAULT_GEMINI_MODELS)


def load_settings(environ: Mapping[str, str]) -> Settings:
    """Build Settings from an environment-like mapping."""

    return Settings(
        openai_api_key=environ.get("OPENAI_API_KEY"),
        gemini_api_key=environ.get("GEMINI_API_KEY"),
        gemini_models=_split_models(environ.get("GEMINI_MODELS")),
        openai_model=environ.get("OPENAI_MODEL") or "gpt-3.5-turbo",
        request_timeout=float(environ.get("REQUEST_TIMEOUT") or 15.0),
        port=int(environ.get("PORT") or 3000),
        static_dir=environ.get("STATIC_DIR", "."),
    )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Load .env + environment variables and return Settings singleton."""

    load_dotenv()
    return load_settings(os.environ)


def provider_summary(settings: Settings) -> Dict[str, Any]:
    # prefixes only; the full secrets never leave Settings
    return {
        "has_gemini": settings.has_gemini,
        "has_openai": settings.has_openai,
        "gemini_key_prefix": settings.gemini_api_key[:4] if settings.gemini_api_key else "(none)",
        "openai_key_prefix": settings.openai_api_key[:5] if settings.openai_api_key else "(none)",
        "models": list(settings.gemini_models),
    }


def log_provider_summary(settings: Settings) -> None:
    logger.info("[moon] config %s", provider_summary(settings))
