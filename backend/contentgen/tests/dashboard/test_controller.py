import asyncio
import json

import httpx
import pytest

from contentgen.dashboard.controller import GenerationController, Phase
from contentgen.dashboard.domains import DOMAINS
from contentgen.dashboard.generation_client import GenerationClient
from contentgen.data_service import SqlDataService
from contentgen.errors import GenerationError, PersistenceError, ValidationError
from contentgen.realtime import ChangeEvent

BASE_URL = "http://generation.test/api/v1/functions"


class RecordingService:
    """MockTransport handler answering each function from a queue of canned responses."""

    def __init__(self, **responses):
        self.responses = responses
        self.requests: list[tuple[str, dict]] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        function = request.url.path.rsplit("/", 1)[-1]
        body = json.loads(request.content)
        self.requests.append((function, body))
        answer = self.responses[function]
        if callable(answer):
            return answer(body)
        return answer


def _controller(domain, service, data_service, **kwargs) -> GenerationController:
    client = GenerationClient(BASE_URL, transport=httpx.MockTransport(service))
    return GenerationController(domain, client, data_service, **kwargs)


def _product_answer(body):
    platform = body["category"]
    return httpx.Response(
        200,
        json={
            "productData": {
                "title": f"Leather Bag for {platform}",
                "description": f"Described for {platform}",
                "tags": ["leather", platform],
                "metaDescription": f"Meta {platform}",
                "sellingPoints": ["Durable"],
            }
        },
    )


@pytest.mark.asyncio
async def test_blog_generate_preview_save_round_trip(data_service):
    service = RecordingService(**{"generate-blog": httpx.Response(200, json={"blog": "# AI in Healthcare\n\n..."})})
    controller = _controller("blog", service, data_service)

    preview = await controller.generate({"topic": "AI in Healthcare", "tone": "professional", "word_count": 800})

    assert service.requests == [
        (
            "generate-blog",
            {"topic": "AI in Healthcare", "keywords": "", "tone": "professional", "wordCount": 800, "language": "english"},
        )
    ]
    assert controller.state.phase == Phase.PREVIEWING
    assert controller.state.current_result is preview
    assert preview.row["content"] == "# AI in Healthcare\n\n..."
    assert preview.form["topic"] == "AI in Healthcare"
    # the form resets once a preview exists
    assert controller.state.form["topic"] == ""

    saved = await controller.save()

    assert len(saved) == 1
    row = saved[0]
    assert row["title"] == "AI in Healthcare"
    assert row["content"] == "# AI in Healthcare\n\n..."
    assert row["user_id"] == data_service._user.id
    assert controller.state.current_result is None
    assert controller.state.phase == Phase.IDLE
    assert controller.state.refresh_trigger == 1

    history = await data_service.select("generated_blogs")
    assert [item["id"] for item in history] == [row["id"]]
    assert {k: history[0][k] for k in preview.row} == preview.row


@pytest.mark.asyncio
async def test_validation_failure_issues_no_request(data_service):
    service = RecordingService()
    controller = _controller("blog", service, data_service)

    with pytest.raises(ValidationError, match="Please enter a topic"):
        await controller.generate({"topic": "   "})

    assert service.requests == []
    assert controller.state.phase == Phase.IDLE
    assert isinstance(controller.state.error, ValidationError)
    controller.dismiss_error()
    assert controller.state.error is None


@pytest.mark.asyncio
async def test_generation_failure_keeps_prior_preview_and_form(data_service):
    answers = iter(
        [
            httpx.Response(200, json={"blog": "first draft"}),
            httpx.Response(429, json={"error": "Rate limit exceeded. Please try again later."}),
        ]
    )
    service = RecordingService(**{"generate-blog": lambda body: next(answers)})
    controller = _controller("blog", service, data_service)

    first = await controller.generate({"topic": "First"})
    with pytest.raises(GenerationError) as exc_info:
        await controller.generate({"topic": "Second"})

    assert exc_info.value.message == "Rate limit exceeded. Please try again later."
    assert controller.state.error is exc_info.value
    assert controller.state.current_result is first
    assert controller.state.form["topic"] == "Second"
    assert controller.state.phase == Phase.IDLE
    assert controller.state.loading is False


@pytest.mark.asyncio
async def test_save_without_session_keeps_preview(engine, feed):
    data_service = SqlDataService(engine, feed=feed, user=None)
    service = RecordingService(**{"generate-blog": httpx.Response(200, json={"blog": "body"})})
    controller = _controller("blog", service, data_service)
    preview = await controller.generate({"topic": "Offline"})

    with pytest.raises(PersistenceError, match="Not authenticated"):
        await controller.save()

    assert controller.state.current_result is preview
    assert controller.state.refresh_trigger == 0


@pytest.mark.asyncio
async def test_save_without_preview_is_rejected(data_service):
    controller = _controller("blog", RecordingService(), data_service)

    with pytest.raises(ValidationError):
        await controller.save()


@pytest.mark.asyncio
async def test_discard_returns_to_idle_without_writing(data_service, feed):
    events: list[ChangeEvent] = []
    feed.subscribe("generated_blogs", events.append)
    service = RecordingService(**{"generate-blog": httpx.Response(200, json={"blog": "body"})})
    controller = _controller("blog", service, data_service)
    await controller.generate({"topic": "Throwaway"})

    controller.discard()

    assert controller.state.current_result is None
    assert controller.state.phase == Phase.IDLE
    assert events == []
    assert await data_service.select("generated_blogs") == []


@pytest.mark.asyncio
async def test_multi_platform_batch_one_request_and_row_per_platform(data_service):
    service = RecordingService(**{"generate-product": _product_answer})
    controller = _controller("ecommerce", service, data_service)

    preview = await controller.generate(
        {"product_input": "Leather Bag\nFull grain, hand stitched", "platforms": ["instagram", "facebook"]}
    )

    assert [body["category"] for _, body in service.requests] == ["instagram", "facebook"]
    assert all(body["productName"] == "Leather Bag" for _, body in service.requests)
    assert service.requests[0][1]["targetAudience"] == "instagram shoppers"
    assert [row["category"] for row in preview.rows] == ["instagram", "facebook"]
    assert controller.domain.describe(preview.rows[1]) == "Leather Bag (Facebook)"

    saved = await controller.save()

    assert len(saved) == 2
    stored = await data_service.select("ecommerce_products")
    assert sorted(row["category"] for row in stored) == ["facebook", "instagram"]
    assert stored[0]["selling_points"] == ["Durable"]


@pytest.mark.asyncio
async def test_multi_platform_batch_requires_a_platform(data_service):
    service = RecordingService()
    controller = _controller("ecommerce", service, data_service)

    with pytest.raises(ValidationError, match="at least one platform"):
        await controller.generate({"product_input": "Leather Bag", "platforms": []})
    assert service.requests == []


@pytest.mark.asyncio
async def test_batch_failure_aborts_remaining_platforms(data_service):
    def answer(body):
        if body["category"] == "facebook":
            return httpx.Response(500, json={"detail": "AI API error: 500"})
        return _product_answer(body)

    service = RecordingService(**{"generate-product": answer})
    controller = _controller("ecommerce", service, data_service)

    with pytest.raises(GenerationError, match="AI API error: 500"):
        await controller.generate({"product_input": "Bag", "platforms": ["instagram", "facebook", "amazon"]})

    assert [body["category"] for _, body in service.requests] == ["instagram", "facebook"]
    assert controller.state.current_result is None


@pytest.mark.asyncio
async def test_concurrent_batch_keeps_selection_order(data_service):
    class SlowFirstClient:
        async def invoke(self, function, body):
            # the first platform finishes last
            await asyncio.sleep(0.05 if body["category"] == "amazon" else 0)
            return _product_answer(body).json()

    controller = GenerationController("ecommerce", SlowFirstClient(), data_service, batch_concurrency=3)

    preview = await controller.generate({"product_input": "Bag", "platforms": ["amazon", "shopify", "meesho"]})

    assert [row["category"] for row in preview.rows] == ["amazon", "shopify", "meesho"]


@pytest.mark.asyncio
async def test_second_generate_while_loading_is_rejected(data_service):
    release = asyncio.Event()

    class BlockingClient:
        calls = 0

        async def invoke(self, function, body):
            BlockingClient.calls += 1
            await release.wait()
            return {"blog": "done"}

    controller = GenerationController("blog", BlockingClient(), data_service)
    first = asyncio.create_task(controller.generate({"topic": "One"}))
    await asyncio.sleep(0)
    assert controller.state.loading is True

    with pytest.raises(ValidationError, match="already in progress"):
        await controller.generate({"topic": "Two"})

    release.set()
    await first
    assert BlockingClient.calls == 1


@pytest.mark.asyncio
async def test_generated_image_is_attached_to_the_saved_row(data_service):
    service = RecordingService(
        **{
            "generate-image": httpx.Response(200, json={"imageUrl": "https://img.test/cover.png"}),
            "generate-social": httpx.Response(200, json={"post": "New drop! #leather"}),
        }
    )
    controller = _controller("social", service, data_service)

    with pytest.raises(ValidationError):
        await controller.generate_image("  ")
    url = await controller.generate_image("leather bag on a desk")
    await controller.generate({"topic": "New drop", "platform": "instagram"})
    saved = await controller.save()

    assert url == "https://img.test/cover.png"
    assert saved[0]["image_url"] == "https://img.test/cover.png"
    assert saved[0]["image_prompt"] == "leather bag on a desk"
    assert controller.state.attachments == {}


@pytest.mark.asyncio
async def test_delete_always_bumps_refresh(data_service, make_user, engine, feed):
    service = RecordingService(**{"generate-blog": httpx.Response(200, json={"blog": "body"})})
    controller = _controller("blog", service, data_service)
    refreshes = []

    async def listener():
        refreshes.append(controller.state.refresh_trigger)

    remove = controller.add_refresh_listener(listener)
    await controller.generate({"topic": "Mine"})
    saved = await controller.save()

    stranger = SqlDataService(engine, feed=feed, user=make_user("stranger@example.com"))
    assert await _controller("blog", service, stranger).delete(saved[0]["id"]) is False
    assert await data_service.select("generated_blogs") != []

    assert await controller.delete(saved[0]["id"]) is True
    assert refreshes == [1, 2]

    remove()
    await controller.delete(saved[0]["id"])
    assert refreshes == [1, 2]
    assert controller.state.refresh_trigger == 3


@pytest.mark.asyncio
async def test_non_numeric_word_count_is_a_validation_error(data_service):
    service = RecordingService()
    controller = _controller("blog", service, data_service)

    with pytest.raises(ValidationError, match="valid word count"):
        await controller.generate({"topic": "AI", "word_count": "eight hundred"})

    assert service.requests == []
    assert controller.state.phase == Phase.IDLE
    assert isinstance(controller.state.error, ValidationError)


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "domain, form, body",
    [
        ("seo", {"content": "Some text"}, {"analysis": "Score: 80"}),
        ("seo", {"content": "Some text"}, {"analysis": {"seoScore": "high"}}),
        ("audit", {"url": "example.com"}, {"overall_score": "great"}),
        ("audit", {"url": "example.com"}, {"overall_score": 80, "details": "none"}),
    ],
)
async def test_off_schema_response_is_a_generation_error(data_service, domain, form, body):
    service = RecordingService(**{DOMAINS[domain].function: httpx.Response(200, json=body)})
    controller = _controller(domain, service, data_service)

    with pytest.raises(GenerationError):
        await controller.generate(form)

    assert controller.state.phase == Phase.IDLE
    assert controller.state.loading is False
    assert controller.state.current_result is None
    assert isinstance(controller.state.error, GenerationError)


# One valid form and one canned 2xx body per content domain.
DOMAIN_CASES = {
    "blog": ({"topic": "AI in Healthcare"}, {"blog": "# AI in Healthcare"}),
    "social": ({"topic": "New drop", "platform": "instagram"}, {"post": "New drop! #leather"}),
    "ecommerce": (
        {"product_input": "Leather Bag", "platforms": ["amazon"]},
        _product_answer({"category": "amazon"}).json(),
    ),
    "seo": (
        {"content": "Leather bags last for years.", "target_keywords": "leather bag"},
        {
            "analysis": {
                "seoScore": 72,
                "readabilityScore": 64,
                "metaDescription": "Leather bags that last",
                "suggestions": ["Add headings"],
                "missingKeywords": ["handmade"],
            }
        },
    ),
    "website": (
        {"template": "portfolio", "project_name": "Studio", "business_type": "Photography"},
        {"html": "<html></html>", "css": "body {}", "description": "A portfolio", "sections": ["Hero"]},
    ),
    "audit": (
        {"url": "example.com"},
        {
            "overall_score": 80,
            "performance_score": 70,
            "seo_score": 90,
            "accessibility_score": 60,
            "security_score": 85,
            "mobile_score": 75,
            "suggestions": [{"category": "seo", "message": "Add a sitemap"}],
            "details": {"https": True},
        },
    ),
}


@pytest.mark.asyncio
@pytest.mark.parametrize("domain", sorted(DOMAINS))
async def test_empty_required_field_issues_no_request(data_service, domain):
    service = RecordingService()
    controller = _controller(domain, service, data_service)
    field = DOMAINS[domain].required[0][0]
    form = {**DOMAIN_CASES[domain][0], field: ""}

    with pytest.raises(ValidationError):
        await controller.generate(form)

    assert service.requests == []
    assert controller.state.phase == Phase.IDLE
    assert controller.state.current_result is None


@pytest.mark.asyncio
@pytest.mark.parametrize("domain", sorted(DOMAINS))
async def test_generate_save_select_round_trip(data_service, domain):
    form, body = DOMAIN_CASES[domain]
    function = DOMAINS[domain].function
    service = RecordingService(**{function: httpx.Response(200, json=body)})
    controller = _controller(domain, service, data_service)

    preview = await controller.generate(form)

    assert [name for name, _ in service.requests] == [function]
    assert len(preview.rows) == 1
    assert controller.state.phase == Phase.PREVIEWING

    [saved] = await controller.save()
    stored = await data_service.select(DOMAINS[domain].table)

    assert [row["id"] for row in stored] == [saved["id"]]
    assert {key: stored[0][key] for key in preview.row} == preview.row
