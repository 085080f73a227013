from __future__ import annotations

from collections.abc import Iterable

from pydantic import ValidationError

from curator.app.models.tag_contracts import Tag, TagPage
from curator.app.services.remote_client import RemoteClient, RemoteError

# Guards against a server that keeps reporting more pages.
MAX_CATALOG_PAGES = 500


class TagCatalogService:
    def __init__(self, *, client: RemoteClient, page_size: int = 20) -> None:
        self._client = client
        self._page_size = max(1, int(page_size))

    async def list_page(self, *, page: int, query: str | None = None) -> TagPage:
        params = {"page": str(max(1, page)), "per_page": str(self._page_size)}
        if query is not None and query.strip():
            params["query"] = query.strip()
        payload = await self._client.get_json("/tags", params=params)
        if not isinstance(payload, dict):
            raise RemoteError("Unexpected /tags response: expected a JSON object.")
        try:
            return TagPage.model_validate(payload)
        except ValidationError as exc:
            raise RemoteError(f"Malformed /tags response: {exc}") from exc

    async def list_all(self, *, query: str | None = None) -> list[Tag]:
        tags: list[Tag] = []
        page_number = 1
        while page_number <= MAX_CATALOG_PAGES:
            page = await self.list_page(page=page_number, query=query)
            tags.extend(page.data)
            if not page.has_more or not page.data:
                break
            page_number += 1
        return tags

    async def resolve_tag_ids(self, tokens: Iterable[str]) -> frozenset[int]:
        """Map numeric ids or tag names (case-insensitive) to tag ids."""
        ids: set[int] = set()
        invalid: list[str] = []
        names: list[str] = []
        for token in tokens:
            stripped = token.strip()
            if not stripped:
                continue
            if stripped.isdecimal():
                tag_id = int(stripped)
                if tag_id < 1:
                    invalid.append(stripped)
                else:
                    ids.add(tag_id)
            else:
                names.append(stripped)
        if invalid:
            raise ValueError(f"Tag ids must be positive integers: {', '.join(invalid)}")

        if not names:
            return frozenset(ids)

        by_name = {tag.name.lower(): tag.id for tag in await self.list_all()}
        unknown = [name for name in names if name.lower() not in by_name]
        if unknown:
            raise ValueError(f"Unknown tag name(s): {', '.join(unknown)}")
        ids.update(by_name[name.lower()] for name in names)
        return frozenset(ids)
