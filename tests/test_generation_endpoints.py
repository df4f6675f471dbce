from secreq_api.core.errors import ProviderError
from secreq_api.domain.models import Principal

from tests.conftest import AUTH_HEADERS, TOKEN, USER_ID, FakeEmbedder, FakeIdentity, FakeTextGenerator


def test_generate_returns_text(harness):
    r = harness.client.post("/api/v1/generate", json={"prompt": "What is SOC2?", "userId": USER_ID}, headers=AUTH_HEADERS)
    assert r.status_code == 200
    assert r.json() == {"text": "generated answer"}
    assert harness.generator.prompts == ["What is SOC2?"]


def test_generate_missing_prompt_is_400_without_provider_call(harness):
    r = harness.client.post("/api/v1/generate", json={"userId": USER_ID}, headers=AUTH_HEADERS)
    assert r.status_code == 400
    assert r.json()["error"] == "prompt required"
    assert harness.generator.prompts == []


def test_generate_missing_user_id_is_400(harness):
    r = harness.client.post("/api/v1/generate", json={"prompt": "hi"}, headers=AUTH_HEADERS)
    assert r.status_code == 400
    assert r.json()["error"] == "userId required"


def test_generate_whitespace_prompt_is_forwarded(harness):
    r = harness.client.post("/api/v1/generate", json={"prompt": "   ", "userId": USER_ID}, headers=AUTH_HEADERS)
    assert r.status_code == 200
    assert harness.generator.prompts == ["   "]


def test_generate_empty_prompt_or_user_id_is_400(harness):
    r = harness.client.post("/api/v1/generate", json={"prompt": "", "userId": USER_ID}, headers=AUTH_HEADERS)
    assert r.json() == {"error": "prompt required"}
    r = harness.client.post("/api/v1/generate", json={"prompt": "hi", "userId": ""}, headers=AUTH_HEADERS)
    assert r.json() == {"error": "userId required"}
    r = harness.client.post("/api/v1/generate", json={"prompt": 42, "userId": USER_ID}, headers=AUTH_HEADERS)
    assert r.status_code == 400
    assert r.json()["error"].startswith("prompt: ")
    assert harness.generator.prompts == []


def test_generate_invalid_json_is_400(harness):
    r = harness.client.post(
        "/api/v1/generate",
        content=b"{not json",
        headers={**AUTH_HEADERS, "Content-Type": "application/json"},
    )
    assert r.status_code == 400
    assert r.json() == {"error": "Invalid JSON body"}


def test_generate_unauthenticated_is_401_without_provider_call(harness):
    r = harness.client.post("/api/v1/generate", json={"prompt": "hi", "userId": USER_ID})
    assert r.status_code == 401
    assert "error" in r.json()
    assert harness.generator.prompts == []


def test_generate_for_another_user_id_is_401(harness):
    r = harness.client.post("/api/v1/generate", json={"prompt": "hi", "userId": "someone-else"}, headers=AUTH_HEADERS)
    assert r.status_code == 401
    assert "text" not in r.json()
    assert harness.generator.prompts == []


def test_identity_provider_error_is_401(harness_factory):
    h = harness_factory(identity=FakeIdentity(error=ConnectionError("supabase down")))
    r = h.client.post("/api/v1/generate", json={"prompt": "hi", "userId": USER_ID}, headers=AUTH_HEADERS)
    assert r.status_code == 401


def test_principal_without_id_is_401(harness_factory):
    h = harness_factory(identity=FakeIdentity({TOKEN: Principal(id="")}))
    r = h.client.post("/api/v1/generate", json={"prompt": "hi", "userId": USER_ID}, headers=AUTH_HEADERS)
    assert r.status_code == 401


def test_session_cookie_is_accepted(harness):
    harness.client.cookies.set("sb-access-token", TOKEN)
    r = harness.client.post("/api/v1/generate", json={"prompt": "hi", "userId": USER_ID})
    assert r.status_code == 200


def test_generate_provider_failure_is_500(harness_factory):
    h = harness_factory(generator=FakeTextGenerator(error=ProviderError("quota", operation="generation")))
    r = h.client.post("/api/v1/generate", json={"prompt": "hi", "userId": USER_ID}, headers=AUTH_HEADERS)
    assert r.status_code == 500
    assert "error" in r.json()


def test_generate_unexpected_failure_is_500(harness_factory):
    h = harness_factory(generator=FakeTextGenerator(error=KeyError("weird")))
    r = h.client.post("/api/v1/generate", json={"prompt": "hi", "userId": USER_ID}, headers=AUTH_HEADERS)
    assert r.status_code == 500
    assert r.json() == {"error": "Generation failed"}


def test_embed_preserves_positional_mapping(harness):
    texts = ["alpha", "be", "charlie", "d", "echo-echo", "f" * 12, "golf"]
    r = harness.client.post("/api/v1/embed", json={"texts": texts, "userId": USER_ID}, headers=AUTH_HEADERS)
    assert r.status_code == 200
    embeddings = r.json()["embeddings"]
    assert len(embeddings) == len(texts)
    for text, vector in zip(texts, embeddings):
        assert vector == [float(len(text)), float(ord(text[0]))]


def test_embed_cleans_nul_and_whitespace(harness):
    r = harness.client.post("/api/v1/embed", json={"texts": ["  ab\u0000c  "], "userId": USER_ID}, headers=AUTH_HEADERS)
    assert r.status_code == 200
    assert harness.embedder.texts == ["abc"]


def test_embed_empty_texts_is_400_without_provider_call(harness):
    r = harness.client.post("/api/v1/embed", json={"texts": [], "userId": USER_ID}, headers=AUTH_HEADERS)
    assert r.status_code == 400
    assert r.json()["error"] == "texts must not be empty"
    assert harness.embedder.texts == []


def test_embed_blank_or_non_string_item_is_400(harness):
    r = harness.client.post("/api/v1/embed", json={"texts": ["ok", "   "], "userId": USER_ID}, headers=AUTH_HEADERS)
    assert r.status_code == 400
    assert r.json() == {"error": "texts[1] is empty"}
    r = harness.client.post("/api/v1/embed", json={"texts": ["ok", 3], "userId": USER_ID}, headers=AUTH_HEADERS)
    assert r.status_code == 400
    assert r.json()["error"].startswith("texts[1]: ")
    assert harness.embedder.texts == []


def test_embed_unauthenticated_is_401_without_provider_call(harness):
    r = harness.client.post("/api/v1/embed", json={"texts": ["a"], "userId": USER_ID})
    assert r.status_code == 401
    assert harness.embedder.texts == []


def test_embed_single_failure_fails_whole_request(harness_factory):
    h = harness_factory(embedder=FakeEmbedder(fail_on="bad"))
    r = h.client.post("/api/v1/embed", json={"texts": ["a", "bad", "c"], "userId": USER_ID}, headers=AUTH_HEADERS)
    assert r.status_code == 500
    assert "embeddings" not in r.json()
    assert "error" in r.json()


def test_not_ready_container_is_503():
    from fastapi.testclient import TestClient
    from secreq_api.main import create_app

    client = TestClient(create_app())
    r = client.post("/api/v1/generate", json={"prompt": "hi", "userId": USER_ID}, headers=AUTH_HEADERS)
    assert r.status_code == 503


def test_health_reports_models(harness):
    r = harness.client.get("/health")
    assert r.status_code == 200
    assert r.json()["generation_model"] == {"model_name": "fake-text"}
    assert "X-Request-ID" in r.headers
