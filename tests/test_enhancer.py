"""Tests for the feedback enhancement client."""

import json

import httpx

from app.services.enhancer import FeedbackEnhancer


async def test_disabled_without_url():
    enhancer = FeedbackEnhancer(url="", token="")
    assert enhancer.enabled is False
    assert await enhancer.enhance("Great work") is None


async def test_list_payload(stub_enhancer_cls):
    stub = stub_enhancer_cls(reply=[{"generated_text": " Excellent work on the release. "}])
    assert await stub.enhance("great work") == "Excellent work on the release."
    assert "great work" in stub.calls[0]["inputs"]


async def test_object_payload(stub_enhancer_cls):
    stub = stub_enhancer_cls(reply={"generated_text": "Polished"})
    assert await stub.enhance("x") == "Polished"


async def test_unexpected_payload_is_unavailable(stub_enhancer_cls):
    assert await stub_enhancer_cls(reply={"error": "loading"}).enhance("x") is None
    assert await stub_enhancer_cls(reply=[]).enhance("x") is None


async def test_transport_error_is_unavailable(stub_enhancer_cls):
    stub = stub_enhancer_cls(error=httpx.ConnectError("boom"))
    assert await stub.enhance("x") is None


async def test_http_error_is_unavailable(stub_enhancer_cls):
    request = httpx.Request("POST", "http://enhancer.test/generate")
    response = httpx.Response(503, request=request)
    stub = stub_enhancer_cls(error=httpx.HTTPStatusError("503", request=request, response=response))
    assert await stub.enhance("x") is None


# ── Over a mocked HTTP transport ────────────────────────────────────
URL = "http://enhancer.test/generate"


def _enhancer(handler, token: str = "hf-token", timeout: float = 2.5) -> FeedbackEnhancer:
    return FeedbackEnhancer(url=URL, token=token, timeout=timeout, transport=httpx.MockTransport(handler))


async def test_request_carries_bearer_token_and_prompt():
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json=[{"generated_text": "Thoughtful and precise."}])

    assert await _enhancer(handler).enhance("nice job") == "Thoughtful and precise."

    request = seen[0]
    assert request.method == "POST"
    assert str(request.url) == URL
    assert request.headers["Authorization"] == "Bearer hf-token"
    assert request.headers["Content-Type"] == "application/json"
    assert request.extensions["timeout"]["read"] == 2.5
    body = json.loads(request.content)
    assert "nice job" in body["inputs"]
    assert body["parameters"] == {"max_length": 200, "temperature": 0.7}


async def test_no_authorization_header_without_token():
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json={"generated_text": "ok"})

    assert await _enhancer(handler, token="").enhance("x") == "ok"
    assert "Authorization" not in seen[0].headers


async def test_service_unavailable_status():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(503, json={"error": "Model is loading"})

    assert await _enhancer(handler).enhance("x") is None


async def test_non_json_body():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, text="<html>gateway</html>")

    assert await _enhancer(handler).enhance("x") is None


async def test_timeout():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ReadTimeout("slow model", request=request)

    assert await _enhancer(handler).enhance("x") is None
