import json

import httpx
import pytest

from contentgen.dashboard.generation_client import GenerationClient
from contentgen.errors import GenerationError

BASE_URL = "http://generation.test/api/v1/functions"


def _client(handler, **kwargs) -> GenerationClient:
    return GenerationClient(BASE_URL, transport=httpx.MockTransport(handler), **kwargs)


@pytest.mark.asyncio
async def test_invoke_posts_payload_to_function_path():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["path"] = request.url.path
        seen["body"] = json.loads(request.content)
        seen["auth"] = request.headers.get("Authorization")
        return httpx.Response(200, json={"blog": "# Title"})

    async with _client(handler, access_token="tok") as client:
        data = await client.invoke("generate-blog", {"topic": "AI"})

    assert data == {"blog": "# Title"}
    assert seen == {"path": "/api/v1/functions/generate-blog", "body": {"topic": "AI"}, "auth": "Bearer tok"}


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "status_code, body, message",
    [
        (429, {"error": "Rate limit exceeded. Please try again later."}, "Rate limit exceeded. Please try again later."),
        (402, {"detail": "Payment required. Please add credits to your workspace."}, "Payment required. Please add credits to your workspace."),
        (400, {"detail": [{"msg": "Field required"}]}, "Field required"),
    ],
)
async def test_non_2xx_surfaces_provider_message_verbatim(status_code, body, message):
    calls = []

    def handler(request):
        calls.append(request)
        return httpx.Response(status_code, json=body)

    async with _client(handler, max_retries=3) as client:
        with pytest.raises(GenerationError) as exc_info:
            await client.invoke("generate-blog", {"topic": "AI"})

    assert exc_info.value.message == message
    assert exc_info.value.status_code == status_code
    # HTTP errors are final, never retried
    assert len(calls) == 1


@pytest.mark.asyncio
async def test_plain_text_error_body_is_passed_through():
    async with _client(lambda request: httpx.Response(500, text="upstream exploded")) as client:
        with pytest.raises(GenerationError, match="upstream exploded"):
            await client.invoke("analyze-seo", {"content": "x"})


@pytest.mark.asyncio
async def test_transport_errors_are_not_retried_by_default():
    calls = []

    def handler(request):
        calls.append(request)
        raise httpx.ConnectError("connection refused", request=request)

    async with _client(handler) as client:
        with pytest.raises(GenerationError, match="connection refused"):
            await client.invoke("generate-blog", {"topic": "AI"})

    assert len(calls) == 1


@pytest.mark.asyncio
async def test_transport_errors_retry_up_to_max_retries():
    calls = []

    def handler(request):
        calls.append(request)
        if len(calls) < 3:
            raise httpx.ConnectError("connection refused", request=request)
        return httpx.Response(200, json={"post": "hello"})

    async with _client(handler, max_retries=2) as client:
        data = await client.invoke("generate-social", {"topic": "AI"})

    assert data == {"post": "hello"}
    assert len(calls) == 3


@pytest.mark.asyncio
async def test_non_object_json_is_rejected():
    async with _client(lambda request: httpx.Response(200, json=["not", "an", "object"])) as client:
        with pytest.raises(GenerationError, match="unexpected payload"):
            await client.invoke("generate-blog", {"topic": "AI"})
