import logging
from typing import Any

import httpx

from contentgen.core.config import settings
from contentgen.errors import GenerationError

logger = logging.getLogger(__name__)

_UNSET: Any = object()


def _error_message(response: httpx.Response) -> str:
    """Pull the provider's message out of an error response without rewording it."""
    try:
        payload = response.json()
    except ValueError:
        payload = None

    if isinstance(payload, dict):
        for key in ("error", "detail", "message"):
            value = payload.get(key)
            if isinstance(value, str) and value:
                return value
            # FastAPI request validation errors
            if isinstance(value, list) and value and isinstance(value[0], dict) and value[0].get("msg"):
                return str(value[0]["msg"])
    text = response.text.strip()
    return text or f"Generation service returned HTTP {response.status_code}"


class GenerationClient:
    """
    HTTP client for the Generation Service: one POST per content function.

    Every call is a single request unless `max_retries` is raised, and only
    transport failures (connection errors, timeouts) are ever retried. A
    non-2xx answer is final.
    """

    def __init__(
        self,
        base_url: str | None = None,
        *,
        access_token: str | None = None,
        timeout: float | None = _UNSET,
        max_retries: int | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.base_url = (base_url or settings.generation_service_url).rstrip("/")
        self.max_retries = settings.GENERATION_MAX_RETRIES if max_retries is None else max_retries
        timeout_seconds = settings.GENERATION_TIMEOUT_SECONDS if timeout is _UNSET else timeout

        headers = {"Content-Type": "application/json"}
        if access_token:
            headers["Authorization"] = f"Bearer {access_token}"

        self._client = httpx.AsyncClient(
            base_url=self.base_url,
            headers=headers,
            timeout=httpx.Timeout(timeout_seconds),
            transport=transport,
        )

    async def invoke(self, function: str, body: dict[str, Any]) -> dict[str, Any]:
        attempts = 1 + self.max_retries
        for attempt in range(1, attempts + 1):
            try:
                logger.info("Invoking generation function %s (attempt %s/%s)", function, attempt, attempts)
                response = await self._client.post(f"/{function}", json=body)
            except httpx.TransportError as exc:
                if attempt < attempts:
                    logger.warning("Generation function %s unreachable: %s. Retrying...", function, exc)
                    continue
                logger.error("Generation function %s failed: %s", function, exc)
                raise GenerationError(str(exc) or exc.__class__.__name__) from exc

            if response.is_error:
                message = _error_message(response)
                logger.error("Generation function %s returned %s: %s", function, response.status_code, message)
                raise GenerationError(message, status_code=response.status_code)

            try:
                data = response.json()
            except ValueError as exc:
                raise GenerationError(f"Generation function {function} returned invalid JSON") from exc
            if not isinstance(data, dict):
                raise GenerationError(f"Generation function {function} returned an unexpected payload")
            return data

        # The loop either returns or raises.
        raise GenerationError(f"Generation function {function} was not attempted")

    async def aclose(self) -> None:
        await self._client.aclose()

    async def __aenter__(self) -> "GenerationClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()
