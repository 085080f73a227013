from __future__ import annotations

from dataclasses import dataclass
from typing import TypeGuard

from pydantic import BaseModel, ConfigDict


@dataclass(frozen=True)
class ContentMarkdown:
    markdown: str


@dataclass(frozen=True)
class ContentError:
    error: str


NormalizedContent = ContentMarkdown | ContentError


def is_content_error(result: NormalizedContent) -> TypeGuard[ContentError]:
    return isinstance(result, ContentError)


class StoredContentPayload(BaseModel):
    """Body of `GET /{collection}/{id}/content`.

    The server answers with either `markdown` or `error`; some deployments put
    the error in a 200 response.
    """

    model_config = ConfigDict(extra="ignore")

    markdown: str | None = None
    error: str | None = None
