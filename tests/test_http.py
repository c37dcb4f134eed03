import pytest
import requests

from lookaround import config
from lookaround.http import (
    GraphAPIError,
    GraphHttpClient,
    GraphRequest,
    RequestMetrics,
    TransportError,
)


class FakeResponse:
    def __init__(self, payload, status_code=200, headers=None):
        self._payload = payload
        self.status_code = status_code
        self.headers = headers or {}

    def json(self):
        if isinstance(self._payload, Exception):
            raise self._payload
        return self._payload


class FakeSession:
    def __init__(self, outcomes):
        self.outcomes = list(outcomes)
        self.calls = []

    def request(self, method, url, params=None, timeout=None):
        self.calls.append({"method": method, "url": url, "params": params})
        outcome = self.outcomes.pop(0)
        if isinstance(outcome, Exception):
            raise outcome
        return outcome


def make_client(outcomes, retry_max=1):
    client = GraphHttpClient(
        base_url="https://graph.example.com/",
        timeout=1,
        retry_max=retry_max,
        backoff_base=0.0,
        backoff_max=0.0,
    )
    client.session = FakeSession(outcomes)
    return client


def test_execute_builds_versioned_url_and_adds_token():
    client = make_client([FakeResponse({"data": []})])
    request = GraphRequest("/search?", {"type": "place"}, api_version="v2.11", access_token="tok")
    assert client.execute(request) == {"data": []}
    call = client.session.calls[0]
    assert call["method"] == "GET"
    assert call["url"] == "https://graph.example.com/v2.11/search?"
    assert call["params"] == {"type": "place", "access_token": "tok"}


def test_execute_retries_server_errors_then_succeeds():
    client = make_client(
        [FakeResponse({}, status_code=503), FakeResponse({"id": "1"})],
        retry_max=2,
    )
    assert client.execute(GraphRequest("/me")) == {"id": "1"}
    assert len(client.session.calls) == 2


def test_execute_raises_graph_error_from_error_payload():
    payload = {"error": {"message": "Invalid OAuth access token.", "type": "OAuthException", "code": 190}}
    client = make_client([FakeResponse(payload, status_code=400)], retry_max=3)
    with pytest.raises(GraphAPIError) as excinfo:
        client.execute(GraphRequest("/me"))
    assert excinfo.value.code == 190
    assert excinfo.value.error_type == "OAuthException"
    assert excinfo.value.status_code == 400
    assert len(client.session.calls) == 1


def test_execute_wraps_network_errors():
    client = make_client([requests.ConnectionError("down")])
    with pytest.raises(TransportError):
        client.execute(GraphRequest("/me"))


def test_execute_non_json_body_is_transport_error():
    client = make_client([FakeResponse(ValueError("bad json"))])
    with pytest.raises(TransportError):
        client.execute(GraphRequest("/me"))


def test_execute_gives_up_after_retry_max():
    client = make_client([FakeResponse({}, status_code=500), FakeResponse({}, status_code=500)], retry_max=2)
    with pytest.raises(TransportError) as excinfo:
        client.execute(GraphRequest("/me"))
    assert excinfo.value.status_code == 500


def test_metrics_reject_unknown_kind():
    metrics = RequestMetrics()
    metrics.inc_network("places")
    metrics.inc_network("profile")
    assert metrics.network_places == 1
    assert metrics.network_profile == 1
    with pytest.raises(ValueError):
        metrics.inc_network("routes")
    with pytest.raises(ValueError):
        metrics.inc_cache_hit("places")


def test_build_url_resolves_api_version_at_call_time(monkeypatch):
    client = make_client([])
    monkeypatch.setattr(config, "GRAPH_API_VERSION", "v9.9")
    assert client.build_url(GraphRequest("/me")) == "https://graph.example.com/v9.9/me"
    assert client.build_url(GraphRequest("me", api_version="v2.11")) == "https://graph.example.com/v2.11/me"
