from __future__ import annotations

import enum
import logging
from dataclasses import dataclass

from .config import Settings
from .offline import offline_reply
from .providers import GeminiClient, GeminiUnavailableError, OpenAIResponder, describe_error


logger = logging.getLogger(__name__)


class AnswerKind(str, enum.Enum):
    PROVIDER = "provider"
    FALLBACK = "fallback"


@dataclass(frozen=True)
class ResolvedAnswer:
    text: str
    kind: AnswerKind
    provider: str = "offline"


class AnswerResolver:
    """Picks a provider from Settings and degrades to the offline responder.

    Gemini wins whenever its key is present; OpenAI is only used without one.
    Any failure, on either branch, ends in ``offline_reply`` so callers always
    get non-empty text.
    """

    def __init__(
        self,
        settings: Settings,
        gemini: GeminiClient | None = None,
        openai: OpenAIResponder | None = None,
    ):
        self.settings = settings
        if gemini is None and settings.has_gemini:
            gemini = GeminiClient(settings)
        if openai is None and settings.has_openai and not settings.has_gemini:
            openai = OpenAIResponder(settings)
        self.gemini = gemini
        self.openai = openai

    async def resolve(self, question: str) -> ResolvedAnswer:
        if not self.settings.has_gemini and not self.settings.has_openai:
            return self._fallback(question)
        provider = "gemini" if self.settings.has_gemini else "openai"
        try:
            if self.settings.has_gemini:
                return await self._ask_gemini(question)
            logger.info("[moon] provider=openai q=%r", question)
            text = await self.openai.answer(question)
            return ResolvedAnswer(text=text, kind=AnswerKind.PROVIDER, provider="openai")
        except Exception as exc:
            status, detail = describe_error(exc)
            logger.error("Moon API error provider=%s status=%s detail=%s", provider, status, detail)
            return self._fallback(question)

    async def _ask_gemini(self, question: str) -> ResolvedAnswer:
        logger.info("[moon] provider=gemini models=%s q=%r", self.settings.gemini_models, question)
        try:
            text = await self.gemini.generate(question)
        except GeminiUnavailableError as exc:
            logger.warning("[moon] gemini exhausted, last error: %s", exc.last_error)
            return self._fallback(question)
        if not text:
            return self._fallback(question)
        return ResolvedAnswer(text=text, kind=AnswerKind.PROVIDER, provider="gemini")

    @staticmethod
    def _fallback(question: str) -> ResolvedAnswer:
        logger.info("[moon] provider=offline")
        return ResolvedAnswer(text=offline_reply(question), kind=AnswerKind.FALLBACK)
