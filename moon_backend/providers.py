from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, Tuple

import httpx
from openai import AsyncOpenAI

from .config import Settings


logger = logging.getLogger(__name__)

GEMINI_ENDPOINT = "https://generativelanguage.googleapis.com/v1beta/models/{model}:generateContent"
DEFAULT_QUESTION = "Dis bonjour."
SYSTEM_PREAMBLE = "Tu es le guide de la Maison de Verre."
NO_ANSWER = "Je n'ai pas trouvé de réponse."


class GeminiUnavailableError(RuntimeError):
    """Every candidate model failed; ``last_error`` holds the final reason."""

    def __init__(self, last_error: str | None):
        self.last_error = last_error or "no Gemini model answered"
        super().__init__(self.last_error)


@dataclass
class CandidateOutcome:
    model: str
    text: str = ""
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None and bool(self.text)


def _extract_text(data: Any) -> str:
    try:
        answer = data["candidates"][0]["content"]["parts"][0]["text"]
    except (KeyError, IndexError, TypeError):
        return ""
    return answer.strip() if isinstance(answer, str) else ""


def _error_message(data: Any, status_code: int) -> str:
    error = data.get("error") if isinstance(data, dict) else None
    message = error.get("message") if isinstance(error, dict) else None
    return message or f"HTTP {status_code}"


class GeminiClient:
    """Tries each configured Gemini model in order until one returns text."""

    def __init__(self, settings: Settings, transport: httpx.AsyncBaseTransport | None = None):
        self.settings = settings
        self._transport = transport

    async def generate(self, question: str) -> str:
        prompt = question if question and question.strip() else DEFAULT_QUESTION
        payload = {"contents": [{"parts": [{"text": prompt}]}]}
        last_error: str | None = None
        async with httpx.AsyncClient(timeout=self.settings.request_timeout, transport=self._transport) as client:
            for model in self.settings.gemini_models:
                outcome = await self._try_model(client, model, payload)
                if outcome.ok:
                    logger.info("[moon] gemini success model=%s", model)
                    return outcome.text
                last_error = outcome.error
                logger.warning("[moon] gemini fallback model=%s err=%s", model, outcome.error)
        raise GeminiUnavailableError(last_error)

    async def _try_model(self, client: httpx.AsyncClient, model: str, payload: Dict[str, Any]) -> CandidateOutcome:
        url = GEMINI_ENDPOINT.format(model=model)
        try:
            resp = await client.post(
                url,
                params={"key": self.settings.gemini_api_key},
                json=payload,
                headers={"Content-Type": "application/json"},
            )
        except httpx.HTTPError as exc:
            return CandidateOutcome(model=model, error=str(exc) or exc.__class__.__name__)
        try:
            data = resp.json()
        except ValueError:
            data = None
        if not resp.is_success:
            return CandidateOutcome(model=model, error=_error_message(data, resp.status_code))
        if data is None:
            return CandidateOutcome(model=model, error="malformed response")
        text = _extract_text(data)
        if not text:
            return CandidateOutcome(model=model, error="empty response")
        return CandidateOutcome(model=model, text=text)


class OpenAIResponder:
    """Single chat-completion call; no retry and no model fallback."""

    def __init__(self, settings: Settings, client: Any = None):
        self.settings = settings
        if client is None:
            client = AsyncOpenAI(api_key=settings.openai_api_key, timeout=settings.request_timeout)
        self.client = client

    async def answer(self, question: str) -> str:
        completion = await self.client.chat.completions.create(
            model=self.settings.openai_model,
            messages=[
                {"role": "system", "content": SYSTEM_PREAMBLE},
                {"role": "user", "content": question},
            ],
            temperature=0.6,
            max_tokens=200,
        )
        choices = getattr(completion, "choices", None) or []
        message = getattr(choices[0], "message", None) if choices else None
        content = getattr(message, "content", None) or ""
        return content.strip() or NO_ANSWER


def describe_error(exc: BaseException) -> Tuple[int, str]:
    status = getattr(exc, "status_code", None)
    if status is None:
        status = getattr(getattr(exc, "response", None), "status_code", None)
    detail = getattr(exc, "message", None) or str(exc)
    return status or 500, detail or "Erreur inconnue"
