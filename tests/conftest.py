import json

import httpx
import pytest

from moon_backend.config import Settings


GEMINI_KEY = "AIzaSyTESTKEY0000000000"
OPENAI_KEY = "sk-test-openai-key"


@pytest.fixture
def offline_settings():
    return Settings(static_dir=None)


@pytest.fixture
def gemini_settings():
    return Settings(gemini_api_key=GEMINI_KEY, static_dir=None)


@pytest.fixture
def openai_settings():
    return Settings(openai_api_key=OPENAI_KEY, static_dir=None)


def gemini_body(text):
    return {"candidates": [{"content": {"parts": [{"text": text}]}}]}


class GeminiStub:
    """Scripted Gemini endpoint: one queued reply per call, recorded requests."""

    def __init__(self, replies):
        self.replies = list(replies)
        self.requests = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        reply = self.replies.pop(0)
        if isinstance(reply, Exception):
            raise reply
        status, body = reply
        if isinstance(body, str):
            return httpx.Response(status, content=body.encode("utf-8"))
        return httpx.Response(status, content=json.dumps(body).encode("utf-8"),
                              headers={"content-type": "application/json"})

    @property
    def models(self):
        return [req.url.path.rsplit("/", 1)[-1].split(":", 1)[0] for req in self.requests]

    def transport(self):
        return httpx.MockTransport(self)
