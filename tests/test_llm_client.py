import json

import pytest
import requests
from google.auth.exceptions import DefaultCredentialsError, RefreshError

from prepwise.infrastructure.llm import (
    VertexRestClient, LLMRequestError, SchemaValidationError, parse_structured_output
)
from prepwise.interview.schemas import FeedbackScores
from prepwise.interview.testing import sample_feedback_scores


class FakeResponse:
    def __init__(self, status_code=200, payload=None, text=""):
        self.status_code = status_code
        self._payload = payload or {}
        self.text = text or json.dumps(self._payload)

    def json(self):
        return self._payload


def _candidate(text):
    return {"candidates": [{"content": {"parts": [{"text": text}]}}]}


@pytest.fixture
def client():
    client = VertexRestClient(project="demo-project")
    client._token = "test-token"
    return client


@pytest.fixture
def posted(monkeypatch):
    calls = []

    def install(response):
        def fake_post(url, headers=None, json=None, timeout=None):
            calls.append({"url": url, "headers": headers, "json": json, "timeout": timeout})
            if isinstance(response, Exception):
                raise response
            return response
        monkeypatch.setattr(requests, "post", fake_post)
        return calls

    return install


def test_generate_text_posts_prompt(client, posted):
    calls = posted(FakeResponse(payload=_candidate('["Q1"]')))

    assert client.generate_text("Generate questions") == '["Q1"]'

    call = calls[0]
    assert call["url"].endswith(
        "/projects/demo-project/locations/us-central1/publishers/google/models/gemini-2.0-flash-001:generateContent"
    )
    assert call["headers"]["Authorization"] == "Bearer test-token"
    assert call["json"]["contents"][0]["parts"][0]["text"] == "Generate questions"
    assert call["json"]["generationConfig"]["temperature"] == 0.7


def test_generate_object_sends_schema_and_validates(client, posted):
    calls = posted(FakeResponse(payload=_candidate(json.dumps(sample_feedback_scores(64)))))

    scores = client.generate_object(FeedbackScores, "Score this", system="Be strict.")

    assert scores.total_score == 64
    body = calls[0]["json"]
    assert body["generationConfig"]["responseMimeType"] == "application/json"
    system_text = body["systemInstruction"]["parts"][0]["text"]
    assert system_text.startswith("Be strict.")
    assert "categoryScores" in system_text


def test_generate_object_rejects_schema_mismatch(client, posted):
    posted(FakeResponse(payload=_candidate('{"totalScore": 50}')))

    with pytest.raises(SchemaValidationError):
        client.generate_object(FeedbackScores, "Score this")


def test_http_error_raises_request_error(client, posted):
    posted(FakeResponse(status_code=503, text="unavailable"))

    with pytest.raises(LLMRequestError, match="503"):
        client.generate_text("hello")


def test_network_error_raises_request_error(client, posted):
    posted(requests.ConnectionError("connection refused"))

    with pytest.raises(LLMRequestError):
        client.generate_text("hello")


def test_structured_output_is_extracted_from_surrounding_text():
    text = "Here is the evaluation:\n```json\n" + json.dumps(sample_feedback_scores(55)) + "\n```"

    assert parse_structured_output(FeedbackScores, text).total_score == 55


def test_unparseable_structured_output():
    with pytest.raises(SchemaValidationError):
        parse_structured_output(FeedbackScores, "I cannot score this interview.")


class HtmlResponse(FakeResponse):
    def json(self):
        return json.loads(self.text)


def test_non_json_body_raises_request_error(client, posted):
    posted(HtmlResponse(text="<html>maintenance</html>"))

    with pytest.raises(LLMRequestError, match="non-JSON"):
        client.generate_text("hello")


@pytest.mark.parametrize("error", [DefaultCredentialsError("no creds"), RefreshError("token expired")])
def test_credential_failure_raises_request_error(monkeypatch, posted, error):
    calls = posted(FakeResponse(payload=_candidate("unused")))
    client = VertexRestClient(project="demo-project")

    def failing_refresh():
        raise error

    monkeypatch.setattr(client, "_refresh_token", failing_refresh)

    with pytest.raises(LLMRequestError, match="credentials"):
        client.generate_text("hello")
    assert calls == []
