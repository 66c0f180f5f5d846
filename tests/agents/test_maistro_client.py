import json

import httpx
import pytest

from autonotes.agents.maistro_client import call_maistro
from autonotes.utils.config import AgentSettings
from autonotes.utils.error_handler import ConfigurationMissingError, UpstreamRequestError

PARAMS = [{"name": "companyName", "value": "Acme"}]


def _client(handler):
    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


@pytest.mark.asyncio
async def test_request_shape_and_response(configured_settings):
    captured = {}

    def handler(request: httpx.Request):
        captured["url"] = str(request.url)
        captured["auth"] = request.headers["Authorization"]
        captured["body"] = json.loads(request.content)
        return httpx.Response(200, json={
            "answer": "done",
            "variables": {"score": 0.7},
            "variablesExpanded": [{"name": "Summary", "value": "ok"}],
        })

    async with _client(handler) as client:
        raw = await call_maistro(configured_settings, "fin_health", PARAMS, user_id="Acme", client=client)

    assert captured["url"] == "https://neuralseek.test/v1/acme/maistro"
    assert captured["auth"] == "Bearer secret-key"
    assert captured["body"] == {
        "ntl": "",
        "agent": "fin_health",
        "params": PARAMS,
        "options": {"streaming": False, "user_id": "Acme", "lastTurn": []},
        "returnVariables": True,
        "returnVariablesExpanded": True,
        "returnRender": False,
        "returnSource": False,
        "maxRecursion": 10,
    }
    assert raw.answer == "done"
    assert raw.variables == {"score": 0.7}
    assert raw.variables_expanded == [{"name": "Summary", "value": "ok"}]


@pytest.mark.asyncio
async def test_non_2xx_raises_with_status_and_body(configured_settings):
    def handler(request):
        return httpx.Response(401, text="invalid api key")

    async with _client(handler) as client:
        with pytest.raises(UpstreamRequestError) as exc_info:
            await call_maistro(configured_settings, "fin_health", PARAMS, client=client)

    assert exc_info.value.status_code == 401
    assert str(exc_info.value) == "NeuralSeek request failed with 401: invalid api key"


@pytest.mark.asyncio
async def test_empty_error_body_reports_unknown_error(configured_settings):
    async with _client(lambda request: httpx.Response(500)) as client:
        with pytest.raises(UpstreamRequestError, match="500: Unknown error"):
            await call_maistro(configured_settings, "fin_health", PARAMS, client=client)


@pytest.mark.asyncio
async def test_transport_failure_is_wrapped(configured_settings):
    def handler(request):
        raise httpx.ConnectError("connection refused", request=request)

    async with _client(handler) as client:
        with pytest.raises(UpstreamRequestError) as exc_info:
            await call_maistro(configured_settings, "fin_health", PARAMS, client=client)
    assert exc_info.value.status_code is None


@pytest.mark.asyncio
async def test_missing_configuration_fails_before_network():
    calls = []

    def handler(request):
        calls.append(request)
        return httpx.Response(200, json={})

    async with _client(handler) as client:
        with pytest.raises(ConfigurationMissingError, match="base URL or API key"):
            await call_maistro(AgentSettings(base_url="https://x.test"), "agent", PARAMS, client=client)
        with pytest.raises(ConfigurationMissingError, match="agent name"):
            await call_maistro(AgentSettings(base_url="https://x.test", api_key="k"), None, PARAMS, client=client)

    assert calls == []


@pytest.mark.asyncio
async def test_non_object_body_degrades_to_empty_response(configured_settings):
    async with _client(lambda request: httpx.Response(200, json=["unexpected"])) as client:
        raw = await call_maistro(configured_settings, "fin_health", PARAMS, client=client)
    assert raw.answer is None
    assert raw.variables == {}
