import asyncio
import logging
import uuid
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from contentgen.core.config import settings
from contentgen.dashboard.domains import ContentDomain, get_domain
from contentgen.dashboard.generation_client import GenerationClient
from contentgen.data_service import NOT_AUTHENTICATED, BackendDataService
from contentgen.errors import ContentError, GenerationError, PersistenceError, ValidationError

logger = logging.getLogger(__name__)

IMAGE_FUNCTION = "generate-image"

RefreshListener = Callable[[], Awaitable[Any]]


class Phase(str, Enum):
    IDLE = "idle"
    VALIDATING = "validating"
    REQUESTING = "requesting"
    PREVIEWING = "previewing"


@dataclass
class Preview:
    """A generated, not yet persisted result and the form it came from."""

    form: dict[str, Any]
    payloads: list[dict[str, Any]]
    responses: list[dict[str, Any]]
    rows: list[dict[str, Any]]

    @property
    def row(self) -> dict[str, Any]:
        return self.rows[0]


@dataclass
class ControllerState:
    form: dict[str, Any]
    phase: Phase = Phase.IDLE
    loading: bool = False
    image_loading: bool = False
    current_result: Preview | None = None
    error: ContentError | None = None
    refresh_trigger: int = 0
    attachments: dict[str, Any] = field(default_factory=dict)


class GenerationController:
    """
    Generate, preview, then save or discard, for one content domain.

    Failures are recorded on `state.error` for display and re-raised to the
    caller. A failed generate never touches the current preview or the form,
    and a failed save keeps the preview so the user can retry.
    """

    def __init__(
        self,
        domain: ContentDomain | str,
        generation: GenerationClient,
        data: BackendDataService,
        *,
        batch_concurrency: int | None = None,
    ):
        self.domain = get_domain(domain) if isinstance(domain, str) else domain
        self.generation = generation
        self.data = data
        self.batch_concurrency = batch_concurrency or settings.GENERATION_BATCH_CONCURRENCY
        self.state = ControllerState(form=self.domain.defaults())
        self._refresh_listeners: list[RefreshListener] = []

    def _fail(self, exc: ContentError) -> ContentError:
        self.state.error = exc
        logger.warning("%s %s failed: %s", self.domain.name, exc.kind, exc.message)
        return exc

    def update_form(self, **fields: Any) -> dict[str, Any]:
        self.state.form = {**self.state.form, **fields}
        return self.state.form

    def reset_form(self) -> None:
        self.state.form = self.domain.defaults()

    def dismiss_error(self) -> None:
        self.state.error = None

    def add_refresh_listener(self, listener: RefreshListener) -> Callable[[], None]:
        """Register a coroutine function run on every refresh bump; returns the remover."""
        self._refresh_listeners.append(listener)

        def remove() -> None:
            if listener in self._refresh_listeners:
                self._refresh_listeners.remove(listener)

        return remove

    async def _bump_refresh(self) -> None:
        self.state.refresh_trigger += 1
        for listener in list(self._refresh_listeners):
            await listener()

    async def _request_all(self, payloads: list[dict[str, Any]]) -> list[dict[str, Any]]:
        function = self.domain.function
        if self.batch_concurrency <= 1 or len(payloads) <= 1:
            return [await self.generation.invoke(function, payload) for payload in payloads]

        semaphore = asyncio.Semaphore(self.batch_concurrency)

        async def invoke_one(payload: dict[str, Any]) -> dict[str, Any]:
            async with semaphore:
                return await self.generation.invoke(function, payload)

        tasks = [asyncio.ensure_future(invoke_one(payload)) for payload in payloads]
        try:
            # gather keeps selection order regardless of completion order
            return list(await asyncio.gather(*tasks))
        except BaseException:
            for task in tasks:
                task.cancel()
            await asyncio.gather(*tasks, return_exceptions=True)
            raise

    async def generate(self, form: dict[str, Any] | None = None) -> Preview:
        if self.state.loading:
            raise self._fail(ValidationError("A request is already in progress"))

        if form:
            self.update_form(**form)
        draft = dict(self.state.form)

        self.state.phase = Phase.VALIDATING
        try:
            self.domain.validate(draft)
            payloads = self.domain.build_requests(draft)
        except ValidationError as exc:
            self.state.phase = Phase.IDLE
            raise self._fail(exc)
        except Exception:
            self.state.phase = Phase.IDLE
            raise

        self.state.phase = Phase.REQUESTING
        self.state.loading = True
        logger.info("Generating %s: %s request(s)", self.domain.name, len(payloads))
        try:
            responses = await self._request_all(payloads)
            rows = [
                self.domain.to_row(draft, payload, response)
                for payload, response in zip(payloads, responses)
            ]
        except GenerationError as exc:
            raise self._fail(exc)
        except Exception as exc:
            raise self._fail(GenerationError(f"{self.domain.function} returned an unusable response: {exc}")) from exc
        finally:
            self.state.loading = False
            # PREVIEWING is only set once rows exist
            self.state.phase = Phase.IDLE

        preview = Preview(form=draft, payloads=payloads, responses=responses, rows=rows)
        self.state.current_result = preview
        self.state.error = None
        self.state.phase = Phase.PREVIEWING
        self.reset_form()
        return preview

    def _rows_to_save(self, preview: Preview) -> list[dict[str, Any]]:
        if not (self.domain.stores_image and self.state.attachments):
            return [dict(row) for row in preview.rows]
        return [{**row, **self.state.attachments} for row in preview.rows]

    async def save(self) -> list[dict[str, Any]]:
        preview = self.state.current_result
        if preview is None:
            raise self._fail(ValidationError("Nothing to save yet. Generate content first."))
        if self.state.loading:
            raise self._fail(ValidationError("A request is already in progress"))

        if await self.data.get_user() is None:
            raise self._fail(PersistenceError(NOT_AUTHENTICATED))

        self.state.loading = True
        try:
            saved = await self.data.insert(self.domain.table, self._rows_to_save(preview))
        except PersistenceError as exc:
            raise self._fail(exc)
        finally:
            self.state.loading = False

        logger.info("Saved %s %s row(s)", len(saved), self.domain.name)
        self.state.current_result = None
        self.state.attachments = {}
        self.state.error = None
        self.state.phase = Phase.IDLE
        await self._bump_refresh()
        return saved

    def discard(self) -> None:
        self.state.current_result = None
        self.state.attachments = {}
        self.state.phase = Phase.IDLE

    async def delete(self, record_id: uuid.UUID) -> bool:
        try:
            deleted = await self.data.delete(self.domain.table, record_id)
        except PersistenceError as exc:
            raise self._fail(exc)
        await self._bump_refresh()
        return deleted

    async def generate_image(self, prompt: str) -> str:
        prompt = (prompt or "").strip()
        if not prompt:
            raise self._fail(ValidationError("Please enter an image description."))
        if self.state.image_loading:
            raise self._fail(ValidationError("An image is already being generated"))

        self.state.image_loading = True
        try:
            data = await self.generation.invoke(IMAGE_FUNCTION, {"prompt": prompt})
        except GenerationError as exc:
            raise self._fail(exc)
        finally:
            self.state.image_loading = False

        image_url = data.get("imageUrl")
        if not image_url:
            raise self._fail(GenerationError(f"{IMAGE_FUNCTION} returned no imageUrl"))
        self.state.attachments = {"image_url": image_url, "image_prompt": prompt}
        return image_url
