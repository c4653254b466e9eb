from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

import api


@pytest.fixture
def http(ledger, monkeypatch):
    monkeypatch.setattr(api, "usage_ledger", ledger)
    return TestClient(api.app)


@pytest.fixture
def use_client(mocker):
    def install(client):
        return mocker.patch("api.create_client", return_value=client)

    return install


def form_json(form, **updates):
    return form.model_copy(update=updates).model_dump(mode="json", by_alias=True)


def test_health(http):
    assert http.get("/health").json() == {"status": "ok"}


def test_voices_lists_categories(http):
    categories = [item["category"] for item in http.get("/voices").json()]
    assert "Personas" in categories


def test_generate_returns_camel_case_result(http, form, fake_client, use_client):
    create = use_client(fake_client(" ".join(["mug"] * 150)))

    response = http.post("/generate", json={"form": form_json(form), "apiKey": "sk-test"})

    assert response.status_code == 200
    body = response.json()
    assert body["wordCountAccuracy"] == 100
    assert body["sessionId"]
    create.assert_called_once_with("gpt-4o", "sk-test")


def test_generate_rejects_empty_source(http, form):
    response = http.post("/generate", json={"form": form_json(form, business_description="")})
    assert response.status_code == 400


def test_generate_failure_is_a_friendly_500(http, form, fake_client, use_client):
    use_client(fake_client(RuntimeError("Error code: 429 - rate limited")))

    response = http.post("/generate", json={"form": form_json(form)})

    assert response.status_code == 500
    assert response.json()["detail"] == "Rate limit exceeded. Please try again in a moment."


def test_missing_api_key_is_reported(http, form, mocker):
    mocker.patch("api.create_client", side_effect=ValueError("OpenAI API key is missing"))
    response = http.post("/seo", json={"form": form_json(form), "content": "copy"})
    assert response.status_code == 500
    assert "API key is missing" in response.json()["detail"]


def test_restyle_requires_persona(http):
    response = http.post("/restyle", json={"content": "copy", "persona": " "})
    assert response.status_code == 400


def test_restyle_plain_text(http, fake_client, use_client):
    use_client(fake_client("Think different about mugs."))

    response = http.post("/restyle", json={"content": "Mugs.", "persona": "Steve Jobs", "model": "gpt-4o"})

    assert response.json() == {
        "content": "Think different about mugs.",
        "personaUsed": "Steve Jobs",
        "geoScore": None,
        "faqSchema": None,
    }


def test_headlines(http, form, fake_client, use_client):
    use_client(fake_client({"headlines": ["A", "B"]}))

    response = http.post("/headlines", json={"form": form_json(form), "content": "copy", "count": 2})

    assert response.json() == {"headlines": ["A", "B"]}


def test_faq_schema_is_built_locally(http, form, mocker):
    create = mocker.patch("api.create_client")
    content = {"headline": "FAQ", "sections": [{"title": "Is it handmade?", "content": "Yes, in Portland."}]}

    response = http.post("/faq-schema", json={"form": form_json(form), "content": content})

    assert response.json()["faqSchema"]["mainEntity"][0]["name"] == "Is it handmade?"
    create.assert_not_called()


def test_suggestions_validation_and_success(http, fake_client, use_client):
    assert http.post("/suggestions", json={"text": "", "fieldType": "keywords"}).status_code == 400

    use_client(fake_client({"suggestions": ["handmade mugs"]}))
    response = http.post("/suggestions", json={"text": "Mugs", "fieldType": "keywords", "model": "gpt-4o"})

    assert response.json() == {"suggestions": ["handmade mugs"]}


def test_template_suggestion_uses_template_model(http, fake_client, use_client):
    create = use_client(fake_client({"businessDescription": "Coffee blog", "tone": "Friendly"}))

    response = http.post("/template-suggestion", json={"instruction": "A friendly coffee blog"})

    assert response.json()["tone"] == "Friendly"
    create.assert_called_once_with("gpt-4o", None)


def test_modify(http, form, fake_client, use_client):
    use_client(fake_client("Shorter copy."))

    response = http.post("/modify", json={"form": form_json(form), "content": "Long copy.", "instruction": "shorter"})

    assert response.json() == {"content": "Shorter copy."}


def test_evaluate_falls_back_to_error_tips(http, form, fake_client, use_client):
    use_client(fake_client("nonsense"))

    response = http.post("/evaluate", json={"form": form_json(form)})

    assert response.status_code == 200
    assert response.json()["score"] == 0


def test_usage_status_reports_session_usage(http, form, fake_client, use_client):
    use_client(fake_client(" ".join(["mug"] * 150)))
    session_id = http.post("/generate", json={"form": form_json(form)}).json()["sessionId"]

    body = http.get("/usage/status", params={"session_id": session_id}).json()

    assert body["queue"]["queue_length"] == 0
    assert body["usage"][0]["tokens_used"] == 42


def test_options_expose_form_catalogues(http):
    body = http.get("/options").json()
    assert "English" in body["languages"]
    assert {"value": "faqJson", "label": "FAQ (JSON)"} in body["outputStructure"]
