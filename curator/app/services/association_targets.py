from __future__ import annotations

from dataclasses import dataclass
from typing import Literal, Protocol, cast

from pydantic import ValidationError

from curator.app.models.tag_contracts import Tag, TagRef
from curator.app.services.remote_client import RemoteClient, RemoteError

EntityKind = Literal["connection", "feed", "article", "person", "uri"]

ENTITY_KINDS: tuple[EntityKind, ...] = ("connection", "feed", "article", "person", "uri")


class AssociationTarget(Protocol):
    """Remote tag operations for one entity kind."""

    @property
    def kind(self) -> EntityKind:
        ...

    async def list(self, entity_id: int) -> frozenset[int]:
        ...

    async def add(self, entity_id: int, tag_id: int) -> None:
        ...

    async def remove(self, entity_id: int, tag_id: int) -> None:
        ...


@dataclass(frozen=True)
class AssociationEndpoints:
    kind: EntityKind
    collection: str

    def list_path(self, entity_id: int) -> str:
        return f"/{self.collection}/{entity_id}/tags"

    def tag_path(self, entity_id: int, tag_id: int) -> str:
        return f"/{self.collection}/{entity_id}/tags/{tag_id}"


ASSOCIATION_ENDPOINTS: dict[EntityKind, AssociationEndpoints] = {
    "connection": AssociationEndpoints(kind="connection", collection="connections"),
    "feed": AssociationEndpoints(kind="feed", collection="feeds"),
    "article": AssociationEndpoints(kind="article", collection="articles"),
    "person": AssociationEndpoints(kind="person", collection="persons"),
    "uri": AssociationEndpoints(kind="uri", collection="uris"),
}


def normalize_entity_kind(value: str) -> EntityKind:
    normalized = value.strip().lower()
    if normalized not in ASSOCIATION_ENDPOINTS:
        raise ValueError(
            f"Unsupported entity kind: {value!r}. Expected one of: {', '.join(ENTITY_KINDS)}."
        )
    return cast(EntityKind, normalized)


class RemoteAssociationTarget:
    def __init__(self, *, client: RemoteClient, endpoints: AssociationEndpoints) -> None:
        self._client = client
        self._endpoints = endpoints

    @property
    def kind(self) -> EntityKind:
        return self._endpoints.kind

    @property
    def endpoints(self) -> AssociationEndpoints:
        return self._endpoints

    async def _listing_rows(self, entity_id: int) -> tuple[object, ...]:
        payload = await self._client.get_json(self._endpoints.list_path(entity_id))
        if isinstance(payload, dict) and isinstance(payload.get("data"), list):
            payload = payload["data"]
        if not isinstance(payload, list):
            raise RemoteError(
                f"Unexpected tag listing for {self.kind} {entity_id}: expected a JSON array."
            )
        return tuple(payload)

    async def list_tags(self, entity_id: int) -> tuple[Tag, ...]:
        rows = await self._listing_rows(entity_id)
        try:
            return tuple(Tag.model_validate(item) for item in rows)
        except ValidationError as exc:
            raise RemoteError(f"Malformed tag listing for {self.kind} {entity_id}: {exc}") from exc

    async def list(self, entity_id: int) -> frozenset[int]:
        # Only ids matter for reconciliation; a row with a blank name is still attached.
        rows = await self._listing_rows(entity_id)
        try:
            return frozenset(TagRef.model_validate(item).id for item in rows)
        except ValidationError as exc:
            raise RemoteError(f"Malformed tag listing for {self.kind} {entity_id}: {exc}") from exc

    async def add(self, entity_id: int, tag_id: int) -> None:
        await self._client.post(self._endpoints.tag_path(entity_id, tag_id))

    async def remove(self, entity_id: int, tag_id: int) -> None:
        await self._client.delete(self._endpoints.tag_path(entity_id, tag_id))


def build_association_target(kind: str, client: RemoteClient) -> RemoteAssociationTarget:
    return RemoteAssociationTarget(
        client=client,
        endpoints=ASSOCIATION_ENDPOINTS[normalize_entity_kind(kind)],
    )
