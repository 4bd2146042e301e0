import asyncio
import math
from collections.abc import AsyncIterator, Awaitable, Callable
from contextlib import asynccontextmanager
from logging import Logger, getLogger
from typing import Any

import httpx
from google.genai import Client as GoogleGenaiClient
from google.genai.errors import APIError
from google.genai.types import Candidate, GenerateContentConfig, GenerateContentResponse, GoogleSearch, HttpOptions, Part, Tool, UserContent

from github_profile_roast.clients.errors.gemini import (
    AccessForbiddenError,
    BadRequestError,
    ContentBlockedError,
    GenerationNotConfiguredError,
    GenerationServerError,
    MalformedResponseError,
    RateLimitExhaustedError,
)
from github_profile_roast.clients.models.gemini import BLOCKED_FINISH_REASONS, NORMAL_FINISH_REASONS, UNSPECIFIED_BLOCK_REASON, GenerationRequest
from github_profile_roast.config import GeminiSettings
from github_profile_roast.servers.shared.utility import mask_secret, preview

MAX_ATTEMPTS = 4
INITIAL_RETRY_DELAY = 1.0
DEFAULT_ATTACHMENT_MIME_TYPE = "image/jpeg"

BAD_REQUEST = 400
ACCESS_FORBIDDEN = 403
TOO_MANY_REQUESTS = 429

SleepFunc = Callable[[float], Awaitable[Any]]


def get_retry_delay(response: httpx.Response | None, attempt: int, initial_delay: float = INITIAL_RETRY_DELAY) -> float:
    """The Retry-After hint in seconds when the server sends a usable one, else exponential backoff from the first attempt."""
    if response is not None and (retry_after := response.headers.get("Retry-After")):
        try:
            delay = float(retry_after)
        except ValueError:
            pass
        else:
            if math.isfinite(delay) and delay >= 0:
                return delay

    return initial_delay * 2 ** (attempt - 1)


def get_error_response(error: APIError) -> httpx.Response | None:
    return error.response if isinstance(error.response, httpx.Response) else None


def get_candidate_text(candidate: Candidate) -> str:
    if not candidate.content or not candidate.content.parts:
        return ""
    return "".join(part.text for part in candidate.content.parts if part.text and not part.thought)


class GeminiClient:
    """Generates text with the Gemini `generateContent` endpoint through google-genai.

    Rate limited calls are retried with backoff, every other failure is raised as a `GenerationError`.
    """

    settings: GeminiSettings
    http_client: httpx.AsyncClient | None
    sleep: SleepFunc
    logger: Logger

    def __init__(
        self,
        settings: GeminiSettings | None = None,
        http_client: httpx.AsyncClient | None = None,
        sleep: SleepFunc = asyncio.sleep,
        logger: Logger | None = None,
    ):
        self.settings = settings or GeminiSettings.from_env()
        self.http_client = http_client
        self.sleep = sleep
        self.logger = logger or getLogger(__name__)

    @asynccontextmanager
    async def _client(self) -> AsyncIterator[httpx.AsyncClient]:
        if self.http_client is not None:
            yield self.http_client
            return

        async with httpx.AsyncClient(timeout=self.settings.timeout) as http_client:
            yield http_client

    def get_genai_client(self, http_client: httpx.AsyncClient) -> GoogleGenaiClient:
        # No retry options: the SDK makes a single attempt and 429s are retried here.
        return GoogleGenaiClient(
            vertexai=False,
            api_key=self.settings.api_key,
            http_options=HttpOptions(
                base_url=self.settings.base_url,
                api_version=self.settings.api_version,
                timeout=self.settings.timeout_ms,
                httpx_async_client=http_client,
            ),
        )

    def get_model(self, request: GenerationRequest) -> str:
        return self.settings.vision_model if request.attachments else self.settings.text_model

    def get_config(self, request: GenerationRequest) -> GenerateContentConfig:
        if not request.enrich:
            return self.settings.generation_config

        return self.settings.generation_config.model_copy(update={"tools": [Tool(google_search=GoogleSearch())]})

    async def generate(self, request: GenerationRequest) -> str:
        """Generate text for the request.

        Raises:
            GenerationNotConfiguredError: If no API key is configured.
            RateLimitExhaustedError: If every attempt was rate limited.
            BadRequestError: On HTTP 400.
            AccessForbiddenError: On HTTP 403.
            GenerationServerError: On any other error status or a transport failure.
            ContentBlockedError: If the prompt or the candidate was blocked.
            MalformedResponseError: If the response carries no usable text.
        """

        if not self.settings.has_api_key:
            raise GenerationNotConfiguredError

        model = self.get_model(request)
        config = self.get_config(request)

        self.logger.info(f"Making Gemini request to {model} with prompt {preview(request.prompt)!r}")

        async with self._client() as http_client:
            genai_client = self.get_genai_client(http_client=http_client)
            contents = await self.build_contents(http_client=http_client, request=request)

            for attempt in range(1, MAX_ATTEMPTS + 1):
                try:
                    response = await self._generate_content(
                        genai_client=genai_client, model=model, contents=contents, config=config, attempt=attempt
                    )
                except APIError as e:
                    if e.code != TOO_MANY_REQUESTS:
                        raise self.classify_error(e) from e

                    if attempt == MAX_ATTEMPTS:
                        break

                    delay = get_retry_delay(get_error_response(e), attempt=attempt)
                    self.logger.warning(f"Attempt {attempt}: rate limited (429), retrying in {delay}s")
                    await self.sleep(delay)
                    continue

                return self.extract_text(response)

        raise RateLimitExhaustedError(attempts=MAX_ATTEMPTS)

    async def _generate_content(
        self, genai_client: GoogleGenaiClient, model: str, contents: list[UserContent], config: GenerateContentConfig, attempt: int
    ) -> GenerateContentResponse:
        api_key = self.settings.api_key

        self.logger.debug(f"Attempt {attempt}: generateContent on {model}")

        try:
            response: GenerateContentResponse = await genai_client.aio.models.generate_content(model=model, contents=contents, config=config)
        except httpx.TransportError as e:
            raise GenerationServerError(status_code=None, message=mask_secret(str(e), api_key)) from e
        except APIError as e:
            self.logger.info(f"Attempt {attempt}: response status {e.code}")
            raise
        except ValueError as e:
            raise MalformedResponseError(message="The response body is not a generateContent response.") from e

        self.logger.info(f"Attempt {attempt}: response received")

        return response

    async def build_contents(self, http_client: httpx.AsyncClient, request: GenerationRequest) -> list[UserContent]:
        parts: list[Part] = [Part.from_text(text=request.prompt)]

        for url in request.attachments:
            if attachment := await self.fetch_attachment(http_client=http_client, url=url):
                parts.append(attachment)

        return [UserContent(parts=parts)]

    async def fetch_attachment(self, http_client: httpx.AsyncClient, url: str) -> Part | None:
        """Fetch an image and wrap it for inline embedding. A failure skips the attachment."""

        try:
            response = await http_client.get(url, headers={"Accept": "image/*"}, follow_redirects=True)
            _ = response.raise_for_status()
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            self.logger.warning(f"Failed to fetch image from {url}, skipping it: {e}")
            return None

        mime_type = response.headers.get("Content-Type", "").split(";")[0].strip() or DEFAULT_ATTACHMENT_MIME_TYPE

        return Part.from_bytes(data=response.content, mime_type=mime_type)

    def classify_error(self, error: APIError) -> Exception:
        """Map a non-429 error status to its `GenerationError`."""

        if error.code == BAD_REQUEST:
            return BadRequestError(message=error.message)

        if error.code == ACCESS_FORBIDDEN:
            return AccessForbiddenError(message=error.message)

        return GenerationServerError(status_code=error.code, message=error.message)

    def extract_text(self, response: GenerateContentResponse) -> str:
        """Classify a successful response, returning the generated text."""

        if not response.candidates:
            prompt_feedback = response.prompt_feedback
            if prompt_feedback and prompt_feedback.block_reason and prompt_feedback.block_reason != UNSPECIFIED_BLOCK_REASON:
                raise ContentBlockedError(reason=prompt_feedback.block_reason.value)

            raise MalformedResponseError(message="No candidates in the response.")

        candidate = response.candidates[0]
        finish_reason = candidate.finish_reason

        if finish_reason in BLOCKED_FINISH_REASONS:
            raise ContentBlockedError(reason=finish_reason.value)

        if finish_reason is not None and finish_reason not in NORMAL_FINISH_REASONS:
            raise MalformedResponseError(message=f"Generation stopped: {finish_reason.value}")

        if not (text := get_candidate_text(candidate).strip()):
            raise MalformedResponseError(message="No content generated.")

        return text
