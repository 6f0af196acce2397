import pytest
from fastapi.testclient import TestClient

from conftest import GeminiStub, gemini_body
from moon_backend.app import create_app
from moon_backend.config import Settings
from moon_backend.offline import GENERIC_PROMPT, offline_reply
from moon_backend.providers import GeminiClient
from moon_backend.resolver import AnswerResolver


@pytest.fixture
def offline_client(offline_settings):
    return TestClient(create_app(offline_settings))


def _gemini_client(settings, stub):
    resolver = AnswerResolver(settings, gemini=GeminiClient(settings, transport=stub.transport()))
    return TestClient(create_app(settings, resolver=resolver))


def test_offline_answer_for_location_question(offline_client):
    resp = offline_client.post("/api/moon", json={"question": "Comment protéger ma géolocalisation ?"})
    assert resp.status_code == 200, resp.text
    assert resp.json() == {"answer": offline_reply("Comment protéger ma géolocalisation ?")}


@pytest.mark.parametrize(
    "kwargs",
    [
        {"json": {}},
        {"json": {"question": None}},
        {"json": {"question": 42}},
        {"json": ["not", "an", "object"]},
        {"content": b"{not json", "headers": {"content-type": "application/json"}},
        {"content": b"[" * 200000, "headers": {"content-type": "application/json"}},
        {},
    ],
)
def test_malformed_requests_still_get_an_answer(offline_client, kwargs):
    resp = offline_client.post("/api/moon", **kwargs)
    assert resp.status_code == 200
    assert resp.json()["answer"] == GENERIC_PROMPT


def test_gemini_third_candidate_answers(gemini_settings):
    stub = GeminiStub([
        (404, {"error": {"message": "not found"}}),
        (400, {"error": {"message": "bad model"}}),
        (200, gemini_body("Troisième essai")),
    ])
    resp = _gemini_client(gemini_settings, stub).post("/api/moon", json={"question": "Salut"})

    assert resp.status_code == 200
    assert resp.json() == {"answer": "Troisième essai"}
    assert len(stub.requests) == 3


def test_gemini_all_empty_falls_back_to_offline(gemini_settings):
    stub = GeminiStub([(200, gemini_body(""))] * 3)
    question = "Je veux supprimer mes données"
    resp = _gemini_client(gemini_settings, stub).post("/api/moon", json={"question": question})

    assert resp.status_code == 200
    assert resp.json() == {"answer": offline_reply(question)}


def test_healthz_reports_providers_without_secrets(gemini_settings):
    client = TestClient(create_app(gemini_settings))
    data = client.get("/healthz").json()
    assert data == {
        "status": "ok",
        "gemini": True,
        "openai": False,
        "models": ["gemini-2.0-flash", "gemini-1.5-flash", "gemini-pro"],
    }


def test_cors_headers_present(offline_client):
    resp = offline_client.post(
        "/api/moon", json={"question": "?"}, headers={"Origin": "https://example.org"}
    )
    assert resp.headers.get("access-control-allow-origin") in {"*", "https://example.org"}


def test_static_files_served_but_dotfiles_hidden(tmp_path):
    (tmp_path / "index.html").write_text("<h1>Maison de Verre</h1>", encoding="utf-8")
    (tmp_path / ".env").write_text("OPENAI_API_KEY=sk-secret", encoding="utf-8")
    client = TestClient(create_app(Settings(static_dir=str(tmp_path))))

    assert "Maison de Verre" in client.get("/").text
    assert client.get("/index.html").status_code == 200
    assert client.get("/.env").status_code == 404
    assert client.post("/api/moon", json={"question": "Qui es-tu ?"}).json() == {
        "answer": offline_reply("Qui es-tu ?")
    }
