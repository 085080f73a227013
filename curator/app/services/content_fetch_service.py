from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Literal, cast

from pydantic import ValidationError

from curator.app.models.content_contracts import (
    ContentError,
    ContentMarkdown,
    NormalizedContent,
    StoredContentPayload,
)
from curator.app.services.association_targets import ASSOCIATION_ENDPOINTS
from curator.app.services.content_locator import locate_with_heuristic
from curator.app.services.markdown_converter import convert_to_markdown
from curator.app.services.remote_client import (
    RemoteClient,
    RemoteError,
    decode_json_body,
    describe_status,
)
from curator.app.telemetry import TelemetryClient

LOGGER = logging.getLogger("curator.content")

ContentResourceKind = Literal["article", "uri"]

CONTENT_RESOURCE_KINDS: tuple[ContentResourceKind, ...] = ("article", "uri")


@dataclass(frozen=True)
class PageRef:
    """A page fetched as raw HTML and normalized locally."""

    url: str


@dataclass(frozen=True)
class StoredContentRef:
    """A resource whose markdown the server has already normalized."""

    kind: ContentResourceKind
    resource_id: int

    @property
    def path(self) -> str:
        return f"/{ASSOCIATION_ENDPOINTS[self.kind].collection}/{self.resource_id}/content"


ResourceRef = PageRef | StoredContentRef


def normalize_content_kind(value: str) -> ContentResourceKind:
    normalized = value.strip().lower()
    if normalized not in CONTENT_RESOURCE_KINDS:
        raise ValueError(
            f"Unsupported content kind: {value!r}. "
            f"Expected one of: {', '.join(CONTENT_RESOURCE_KINDS)}."
        )
    return cast(ContentResourceKind, normalized)


class ContentFetchService:
    def __init__(
        self,
        *,
        client: RemoteClient,
        telemetry: TelemetryClient | None = None,
    ) -> None:
        self._client = client
        self._telemetry = telemetry if telemetry is not None else TelemetryClient.disabled()

    async def fetch(self, ref: ResourceRef) -> NormalizedContent:
        """Fetch and normalize content; failures come back as `ContentError`."""
        if isinstance(ref, PageRef):
            result = await self._fetch_page(ref)
        else:
            result = await self._fetch_stored(ref)
        self._telemetry.emit(
            "content.fetch.completed",
            variant="page" if isinstance(ref, PageRef) else ref.kind,
            succeeded=isinstance(result, ContentMarkdown),
        )
        return result

    async def _fetch_page(self, ref: PageRef) -> NormalizedContent:
        try:
            response = await self._client.fetch_page(ref.url)
        except RemoteError as exc:
            return ContentError(error=f"Failed to fetch article: {exc.reason or exc}")

        if not response.is_success:
            LOGGER.info("page fetch failed url=%s status=%s", ref.url, response.status_code)
            return ContentError(error=f"Failed to fetch article: {describe_status(response)}")

        located = locate_with_heuristic(response.text)
        LOGGER.debug(
            "located page content url=%s heuristic=%s chars=%s",
            ref.url,
            located.heuristic,
            len(located.fragment),
        )
        return convert_to_markdown(located.fragment)

    async def _fetch_stored(self, ref: StoredContentRef) -> NormalizedContent:
        try:
            response = await self._client.request("GET", ref.path)
        except RemoteError as exc:
            return ContentError(error=f"Failed to fetch {ref.kind} content: {exc.reason or exc}")

        payload = _parse_stored_payload(response.text)
        if not response.is_success:
            LOGGER.info(
                "stored content fetch failed kind=%s id=%s status=%s",
                ref.kind,
                ref.resource_id,
                response.status_code,
            )
            message = payload.error if payload is not None else None
            return ContentError(error=message or describe_status(response))

        if payload is None:
            return ContentError(error=f"Failed to fetch {ref.kind} content: malformed response")
        if payload.error:
            return ContentError(error=payload.error)
        if payload.markdown is None:
            return ContentError(error=f"Failed to fetch {ref.kind} content: no markdown returned")
        return ContentMarkdown(markdown=payload.markdown)


def _parse_stored_payload(raw_body: str) -> StoredContentPayload | None:
    parsed = decode_json_body(raw_body)
    if not isinstance(parsed, dict):
        return None
    try:
        return StoredContentPayload.model_validate(parsed)
    except ValidationError:
        return None
