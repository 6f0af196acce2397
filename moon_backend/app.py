from __future__ import annotations

import logging
from pathlib import Path, PurePosixPath
from typing import Any

import uvicorn
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles
from pydantic import BaseModel, field_validator
from starlette.exceptions import HTTPException as StarletteHTTPException

from .config import Settings, get_settings, log_provider_summary
from .resolver import AnswerResolver


logger = logging.getLogger(__name__)
logging.basicConfig(level=logging.INFO, format="%(asctime)s [%(levelname)s] %(message)s")
# httpx logs request URLs at INFO, and Gemini URLs carry the key
logging.getLogger("httpx").setLevel(logging.WARNING)


class MoonRequest(BaseModel):
    question: str = ""

    @field_validator("question", mode="before")
    @classmethod
    def _coerce_question(cls, value: Any) -> str:
        return value if isinstance(value, str) else ""


class MoonResponse(BaseModel):
    answer: str


class PublicFiles(StaticFiles):
    """Static files that never expose dotfiles such as ``.env``."""

    async def get_response(self, path: str, scope):
        if any(part.startswith(".") for part in PurePosixPath(path.replace("\\", "/")).parts):
            raise StarletteHTTPException(status_code=404)
        return await super().get_response(path, scope)


async def _read_question(request: Request) -> str:
    try:
        body = await request.json()
    except (ValueError, RecursionError):
        body = None
    return MoonRequest.model_validate(body if isinstance(body, dict) else {}).question


def create_app(settings: Settings | None = None, resolver: AnswerResolver | None = None) -> FastAPI:
    if settings is None:
        settings = get_settings()
    if resolver is None:
        resolver = AnswerResolver(settings)
    log_provider_summary(settings)

    app = FastAPI(title="Moon Guide API", version="0.1.0")
    app.state.settings = settings
    app.state.resolver = resolver

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.get("/healthz")
    async def healthcheck():
        return {
            "status": "ok",
            "gemini": settings.has_gemini,
            "openai": settings.has_openai,
            "models": list(settings.gemini_models),
        }

    @app.post("/api/moon", response_model=MoonResponse)
    async def ask_moon(request: Request):
        # Always 200: malformed bodies are treated as an empty question.
        question = await _read_question(request)
        resolved = await resolver.resolve(question)
        return MoonResponse(answer=resolved.text)

    if settings.static_dir and Path(settings.static_dir).is_dir():
        app.mount("/", PublicFiles(directory=settings.static_dir, html=True), name="static")

    return app


app = create_app()


def main() -> None:
    settings = get_settings()
    logger.info("Moon backend on http://localhost:%s", settings.port)
    uvicorn.run(app, host="0.0.0.0", port=settings.port)


if __name__ == "__main__":
    main()
