import pytest
import requests

from prepwise.errors import ConfigurationError, TransportError
from prepwise.infrastructure.voice import VapiRestClient


class FakeResponse:
    def __init__(self, status_code=201, payload=None, text=""):
        self.status_code = status_code
        self._payload = payload or {}
        self.text = text

    def json(self):
        return self._payload


def test_start_workflow_call_posts_workflow_overrides(monkeypatch):
    calls = []

    def fake_post(url, headers=None, json=None, timeout=None):
        calls.append({"url": url, "headers": headers, "json": json})
        return FakeResponse(payload={"id": "call_9", "status": "queued"})

    monkeypatch.setattr(requests, "post", fake_post)
    client = VapiRestClient("secret", "wf_1")

    call = client.start_workflow_call({"username": "Ada", "userid": "user_1"})

    assert call["id"] == "call_9"
    assert calls[0]["url"] == "https://api.vapi.ai/call"
    assert calls[0]["headers"]["Authorization"] == "Bearer secret"
    assert calls[0]["json"] == {
        "workflowId": "wf_1",
        "type": "webCall",
        "workflowOverrides": {"variableValues": {"username": "Ada", "userid": "user_1"}},
    }


@pytest.mark.parametrize("secret, workflow", [(None, "wf_1"), ("secret", None)])
def test_missing_credentials(secret, workflow):
    with pytest.raises(ConfigurationError):
        VapiRestClient(secret, workflow).start_workflow_call({})


def test_api_error_raises_transport_error(monkeypatch):
    monkeypatch.setattr(requests, "post", lambda *a, **kw: FakeResponse(status_code=401, text="bad key"))

    with pytest.raises(TransportError, match="401"):
        VapiRestClient("secret", "wf_1").start_workflow_call({})


def test_network_error_raises_transport_error(monkeypatch):
    def fake_post(*args, **kwargs):
        raise requests.Timeout("timed out")

    monkeypatch.setattr(requests, "post", fake_post)

    with pytest.raises(TransportError):
        VapiRestClient("secret", "wf_1").start_workflow_call({})
