import asyncio
import json

import httpx
import pytest

from arpay.arcodes import HttpPersistenceGateway, InMemoryPersistenceGateway
from arpay.errors import PersistenceError

BASE_URL = "https://store.example.com"


def make_gateway(handler):
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return HttpPersistenceGateway(BASE_URL, api_key="secret", client=client)


def test_create_posts_record_and_returns_id():
    seen = []

    def handler(request):
        seen.append(request)
        return httpx.Response(201, json=[{"id": 17, "status": "active"}])

    gateway = make_gateway(handler)
    result = asyncio.run(gateway.create({"transaction_id": "code-1", "status": "active"}))

    assert result == {"id": "17", "status": "active"}
    request = seen[0]
    assert request.method == "POST"
    assert str(request.url) == f"{BASE_URL}/rest/v1/ar_qr_codes"
    assert request.headers["apikey"] == "secret"
    assert request.headers["Authorization"] == "Bearer secret"
    assert json.loads(request.content)["transaction_id"] == "code-1"


def test_update_status_patches_by_id():
    seen = []

    def handler(request):
        seen.append(request)
        return httpx.Response(204)

    asyncio.run(make_gateway(handler).update_status("17", "scanned"))

    request = seen[0]
    assert request.method == "PATCH"
    assert request.url.params["id"] == "eq.17"
    body = json.loads(request.content)
    assert body["status"] == "scanned"
    assert "scanned_at" in body


def test_http_error_status_is_rejected():
    gateway = make_gateway(lambda request: httpx.Response(500, text="boom"))
    with pytest.raises(PersistenceError) as exc:
        asyncio.run(gateway.create({"status": "active"}))
    assert exc.value.error_code == "persistence:rejected"
    assert exc.value.details["status_code"] == 500


def test_transport_failure_is_unavailable():
    def handler(request):
        raise httpx.ConnectError("refused", request=request)

    with pytest.raises(PersistenceError) as exc:
        asyncio.run(make_gateway(handler).update_status("17", "expired"))
    assert exc.value.reason == "unavailable"


def test_timeout():
    def handler(request):
        raise httpx.ReadTimeout("slow", request=request)

    with pytest.raises(PersistenceError) as exc:
        asyncio.run(make_gateway(handler).create({"status": "active"}))
    assert exc.value.reason == "timeout"


def test_response_without_id_is_rejected():
    gateway = make_gateway(lambda request: httpx.Response(201, json=[]))
    with pytest.raises(PersistenceError):
        asyncio.run(gateway.create({"status": "active"}))


def test_in_memory_gateway_outage():
    gateway = InMemoryPersistenceGateway(available=False)
    with pytest.raises(PersistenceError):
        asyncio.run(gateway.create({"status": "active"}))
    assert gateway.create_calls == 1
