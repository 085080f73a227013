from __future__ import annotations

import json
import logging
from types import TracebackType
from typing import Any, cast

import httpx

from curator.app.models.tag_contracts import RemoteErrorPayload

LOGGER = logging.getLogger("curator.remote")


class RemoteError(RuntimeError):
    """Transport failure or non-2xx answer from the content-tracking server."""

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        reason: str | None = None,
    ) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.reason = reason


class RemoteClient:
    def __init__(
        self,
        *,
        base_url: str,
        timeout_seconds: float = 15.0,
        user_agent: str = "curator-client/0.1",
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        self._base_url = base_url.strip().rstrip("/")
        self._owns_http_client = http_client is None
        self._http = (
            http_client
            if http_client is not None
            else httpx.AsyncClient(
                timeout=max(1.0, float(timeout_seconds)),
                follow_redirects=True,
                headers={"User-Agent": user_agent},
            )
        )

    @property
    def base_url(self) -> str:
        return self._base_url

    async def __aenter__(self) -> RemoteClient:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        traceback: TracebackType | None,
    ) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._owns_http_client:
            await self._http.aclose()

    def url_for(self, path: str) -> str:
        if path.startswith(("http://", "https://")):
            return path
        return f"{self._base_url}/{path.lstrip('/')}"

    async def request(
        self,
        method: str,
        path: str,
        *,
        params: dict[str, str] | None = None,
        payload: dict[str, object] | None = None,
        accept: str = "application/json",
    ) -> httpx.Response:
        """Send one request; only transport failures raise here."""
        url = self.url_for(path)
        try:
            return await self._http.request(
                method,
                url,
                params=params,
                json=payload,
                headers={"Accept": accept},
            )
        except httpx.HTTPError as exc:
            detail = str(exc) or type(exc).__name__
            LOGGER.info("remote transport failure method=%s url=%s error=%s", method, url, detail)
            raise RemoteError(f"{method} {url} failed: {detail}", reason=detail) from exc

    async def get_json(self, path: str, *, params: dict[str, str] | None = None) -> Any:
        response = await self.request("GET", path, params=params)
        _raise_for_status(response)
        return decode_json_body(response.text)

    async def post(self, path: str, *, payload: dict[str, object] | None = None) -> None:
        response = await self.request("POST", path, payload=payload)
        _raise_for_status(response)

    async def delete(self, path: str) -> None:
        response = await self.request("DELETE", path)
        _raise_for_status(response)

    async def fetch_page(self, url: str) -> httpx.Response:
        return await self.request("GET", url, accept="text/html,application/xhtml+xml")


def _raise_for_status(response: httpx.Response) -> None:
    if response.is_success:
        return
    reason = extract_error_message(response)
    status_text = describe_status(response)
    raise RemoteError(
        f"{response.request.method} {response.request.url} failed: {reason or status_text}",
        status_code=response.status_code,
        reason=reason,
    )


def describe_status(response: httpx.Response) -> str:
    return f"{response.status_code} {response.reason_phrase}".strip()


def extract_error_message(response: httpx.Response) -> str | None:
    parsed = decode_json_body(response.text)
    if not isinstance(parsed, dict):
        return None
    return RemoteErrorPayload.model_validate(parsed).error


def decode_json_body(raw_body: str) -> Any:
    if not raw_body.strip():
        return None
    try:
        parsed = json.loads(raw_body)
    except json.JSONDecodeError:
        return None
    if isinstance(parsed, dict):
        parsed_dict = cast(dict[object, object], parsed)
        return {key: value for key, value in parsed_dict.items() if isinstance(key, str)}
    return parsed
