import json
import logging
import re
from typing import TypeVar

import openai
from openai import AsyncOpenAI
from pydantic import BaseModel, ValidationError

from contentgen.core.config import settings

logger = logging.getLogger(__name__)

T = TypeVar("T", bound=BaseModel)

RATE_LIMIT_MESSAGE = "Rate limit exceeded. Please try again later."
PAYMENT_REQUIRED_MESSAGE = "Payment required. Please add credits to your workspace."
API_KEY_MESSAGE = "AI provider API key issue. Please check your API key."


class ProviderError(Exception):
    """Failure talking to the model provider, carrying the HTTP status the endpoint should answer with."""

    def __init__(self, status_code: int, message: str):
        super().__init__(message)
        self.status_code = status_code
        self.message = message


_FENCE_RE = re.compile(r"```(?:[a-zA-Z0-9_-]+)?\s*([\s\S]*?)\s*```")


def strip_code_fences(text: str) -> str:
    text = (text or "").strip()
    match = _FENCE_RE.fullmatch(text)
    return match.group(1).strip() if match else text


def _first_json_span(text: str) -> str | None:
    """Slice out the first balanced {...} or [...] span, skipping brackets inside strings."""
    positions = [pos for pos in (text.find("{"), text.find("[")) if pos != -1]
    if not positions:
        return None
    start = min(positions)
    opener = text[start]
    closer = "}" if opener == "{" else "]"

    depth = 0
    in_string = escaped = False
    for idx in range(start, len(text)):
        char = text[idx]
        if in_string:
            if escaped:
                escaped = False
            elif char == "\\":
                escaped = True
            elif char == '"':
                in_string = False
        elif char == '"':
            in_string = True
        elif char == opener:
            depth += 1
        elif char == closer:
            depth -= 1
            if depth == 0:
                return text[start:idx + 1]
    return None


def json_candidates(raw_text: str) -> list[str]:
    """Ordered, de-duplicated strings worth handing to json.loads."""
    text = (raw_text or "").strip()
    if not text:
        return []

    found: list[str] = []
    fenced = _FENCE_RE.search(text)
    if fenced:
        found.append(fenced.group(1))
    found.append(text)
    span = _first_json_span(text)
    if span:
        found.append(span)

    return list(dict.fromkeys(c.strip() for c in found if c and c.strip()))


def _provider_error(exc: Exception) -> ProviderError:
    if isinstance(exc, openai.RateLimitError):
        return ProviderError(429, RATE_LIMIT_MESSAGE)
    if isinstance(exc, openai.APIStatusError):
        if exc.status_code == 402:
            return ProviderError(402, PAYMENT_REQUIRED_MESSAGE)
        if exc.status_code in (401, 403):
            return ProviderError(402, API_KEY_MESSAGE)
        return ProviderError(500, f"AI API error: {exc.status_code}")
    return ProviderError(500, str(exc) or exc.__class__.__name__)


class LLMClient:
    """Provider-agnostic client for the OpenAI-compatible chat and image APIs."""

    def __init__(
        self,
        model_name: str | None = None,
        base_url: str | None = None,
        api_key: str | None = None,
    ):
        self.model_name = model_name or settings.MODEL_DEFAULT

        resolved_api_key = api_key or settings.LLM_API_KEY
        if not resolved_api_key:
            raise ProviderError(500, "LLM_API_KEY is not configured")

        self.client = AsyncOpenAI(
            base_url=base_url or settings.LLM_BASE_URL,
            api_key=resolved_api_key,
        )

    def _chat_completion_kwargs(self, *, temperature: float | None) -> dict:
        # GPT-5 family rejects non-default temperature values.
        if temperature is None or (self.model_name or "").lower().startswith("gpt-5"):
            return {}
        return {"temperature": temperature}

    async def _complete(self, system_prompt: str, user_prompt: str, *, temperature: float | None) -> str:
        logger.info("Issuing chat request to model %s...", self.model_name)
        try:
            response = await self.client.chat.completions.create(
                model=self.model_name,
                messages=[
                    {"role": "system", "content": system_prompt},
                    {"role": "user", "content": user_prompt},
                ],
                **self._chat_completion_kwargs(temperature=temperature),
            )
        except openai.OpenAIError as exc:
            logger.error("Provider call to %s failed: %s", self.model_name, exc)
            raise _provider_error(exc) from exc

        if not getattr(response, "choices", None):
            logger.error("Received no choices from %s: %s", self.model_name, response)
            raise ProviderError(500, "No content returned from AI")
        return response.choices[0].message.content or ""

    async def generate_structured(
        self, system_prompt: str, user_prompt: str, response_schema: type[T]
    ) -> T:
        """
        Generate a response validated against `response_schema`.

        JSON is enforced through the prompt rather than response_format, since not
        every OpenAI-compatible provider supports JSON mode. One extra attempt is
        made when the model answers with something that does not parse.
        """
        schema_json = json.dumps(response_schema.model_json_schema())
        augmented = (
            f"{system_prompt}\n\n"
            "Respond with ONLY valid JSON matching this JSON Schema, with no markdown fences "
            f"and no prose around it.\n\nEXPECTED SCHEMA:\n{schema_json}"
        )
        attempts = [
            (augmented, 0.2),
            (f"{augmented}\n\nYour previous response was not valid JSON. Return a single JSON object only.", 0),
        ]

        parse_errors: list[str] = []
        for attempt_idx, (prompt, temperature) in enumerate(attempts, start=1):
            text = await self._complete(prompt, user_prompt, temperature=temperature)
            candidates = json_candidates(text)
            if not candidates:
                parse_errors.append("empty content")
            for candidate in candidates:
                try:
                    return response_schema.model_validate(json.loads(candidate, strict=False))
                except (json.JSONDecodeError, ValidationError) as exc:
                    parse_errors.append(str(exc))
            if attempt_idx < len(attempts):
                logger.warning(
                    "Structured parsing failed for %s on attempt %s/%s. Retrying...",
                    self.model_name,
                    attempt_idx,
                    len(attempts),
                )

        logger.error("Could not parse structured response from %s", self.model_name)
        raise ValueError("Unable to parse structured response: " + " | ".join(parse_errors[:3]))

    async def generate_text(self, system_prompt: str, user_prompt: str, *, temperature: float = 0.7) -> str:
        text = strip_code_fences(await self._complete(system_prompt, user_prompt, temperature=temperature))
        if not text:
            raise ProviderError(500, "No content returned from AI")
        logger.info("Received text response from %s (%s chars).", self.model_name, len(text))
        return text

    async def generate_image(self, prompt: str, *, size: str = "1024x1024") -> str:
        """Returns a URL for the generated image (a data: URL when the provider answers in base64)."""
        logger.info("Issuing image request to model %s...", settings.IMAGE_MODEL)
        try:
            response = await self.client.images.generate(
                model=settings.IMAGE_MODEL,
                prompt=prompt,
                n=1,
                size=size,
            )
        except openai.OpenAIError as exc:
            logger.error("Image generation with %s failed: %s", settings.IMAGE_MODEL, exc)
            raise _provider_error(exc) from exc

        if not getattr(response, "data", None):
            raise ProviderError(500, "No image returned from AI")
        image = response.data[0]
        if getattr(image, "url", None):
            return image.url
        if getattr(image, "b64_json", None):
            return f"data:image/png;base64,{image.b64_json}"
        raise ProviderError(500, "No image returned from AI")
