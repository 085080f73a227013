from __future__ import annotations

import asyncio
from collections.abc import Coroutine
from typing import Any, Generic, TypeVar

from curator.app.services.remote_client import RemoteError

T = TypeVar("T")


class JoinAllTaskGroup(Generic[T]):
    """Run independent remote operations concurrently and wait for every one.

    Unlike `asyncio.TaskGroup`, a failing operation does not cancel its
    siblings: each `RemoteError` is captured as that operation's result.
    There is no cancellation support; once spawned, operations run to
    completion even if the caller stops waiting.
    """

    def __init__(self) -> None:
        self._pending: list[Coroutine[Any, Any, T]] = []
        self._started = False

    def spawn(self, operation: Coroutine[Any, Any, T]) -> int:
        if self._started:
            operation.close()
            raise RuntimeError("JoinAllTaskGroup already started; spawn before wait().")
        self._pending.append(operation)
        return len(self._pending) - 1

    def __len__(self) -> int:
        return len(self._pending)

    async def wait(self) -> list[T | RemoteError]:
        """Results in spawn order. Non-`RemoteError` failures re-raise after all finish."""
        self._started = True
        if not self._pending:
            return []
        raw_results = await asyncio.gather(*self._pending, return_exceptions=True)
        results: list[T | RemoteError] = []
        unexpected: BaseException | None = None
        for raw in raw_results:
            if isinstance(raw, RemoteError):
                results.append(raw)
            elif isinstance(raw, BaseException):
                if unexpected is None:
                    unexpected = raw
            else:
                results.append(raw)
        if unexpected is not None:
            raise unexpected
        return results
