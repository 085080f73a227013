from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass
from typing import Literal

from curator.app.services.association_targets import AssociationTarget
from curator.app.services.fan_out import JoinAllTaskGroup
from curator.app.services.remote_client import RemoteError
from curator.app.services.tag_diff import ReconciliationPlan, diff_tag_ids
from curator.app.telemetry import TelemetryClient

LOGGER = logging.getLogger("curator.tags")

OPERATION_ADD = "add"
OPERATION_REMOVE = "remove"

AssociationOperation = Literal["add", "remove"]


class ReconciliationAbort(RemoteError):
    """The current association set could not be listed; nothing was changed."""


@dataclass(frozen=True)
class OperationFailure:
    operation: AssociationOperation
    tag_id: int
    error: str


@dataclass(frozen=True)
class ReconciliationOutcome:
    added_count: int
    removed_count: int
    failures: tuple[OperationFailure, ...]
    plan: ReconciliationPlan

    @property
    def has_failures(self) -> bool:
        return bool(self.failures)

    @property
    def changed(self) -> bool:
        return not self.plan.is_noop

    def summary(self) -> str:
        if not self.changed:
            return "No changes"
        return f"{self.added_count} added, {self.removed_count} removed"


class TagReconciliationService:
    def __init__(self, *, telemetry: TelemetryClient | None = None) -> None:
        self._telemetry = telemetry if telemetry is not None else TelemetryClient.disabled()

    async def reconcile(
        self,
        target: AssociationTarget,
        entity_id: int,
        desired: Iterable[int],
    ) -> ReconciliationOutcome:
        desired_ids = frozenset(desired)
        try:
            current_ids = await target.list(entity_id)
        except RemoteError as exc:
            LOGGER.warning(
                "tag reconciliation aborted kind=%s entity_id=%s status=%s",
                target.kind,
                entity_id,
                exc.status_code,
            )
            self._telemetry.emit(
                "tags.reconcile.aborted",
                kind=target.kind,
                entity_id=entity_id,
                status_code=exc.status_code,
            )
            raise ReconciliationAbort(
                f"Could not load current tags for {target.kind} {entity_id}: {exc}",
                status_code=exc.status_code,
                reason=exc.reason,
            ) from exc

        plan = diff_tag_ids(current_ids, desired_ids)

        issued: list[tuple[AssociationOperation, int]] = []
        group: JoinAllTaskGroup[None] = JoinAllTaskGroup()
        for tag_id in plan.ordered_additions():
            issued.append((OPERATION_ADD, tag_id))
            group.spawn(target.add(entity_id, tag_id))
        for tag_id in plan.ordered_removals():
            issued.append((OPERATION_REMOVE, tag_id))
            group.spawn(target.remove(entity_id, tag_id))

        results = await group.wait()

        added_count = 0
        removed_count = 0
        failures: list[OperationFailure] = []
        for (operation, tag_id), result in zip(issued, results, strict=True):
            if isinstance(result, RemoteError):
                failures.append(
                    OperationFailure(operation=operation, tag_id=tag_id, error=str(result))
                )
            elif operation == OPERATION_ADD:
                added_count += 1
            else:
                removed_count += 1

        outcome = ReconciliationOutcome(
            added_count=added_count,
            removed_count=removed_count,
            failures=tuple(failures),
            plan=plan,
        )
        if outcome.has_failures:
            LOGGER.warning(
                "tag reconciliation partially failed kind=%s entity_id=%s failed=%s",
                target.kind,
                entity_id,
                ", ".join(f"{failure.operation}:{failure.tag_id}" for failure in failures),
            )
        self._telemetry.emit(
            "tags.reconcile.completed",
            kind=target.kind,
            entity_id=entity_id,
            planned_adds=len(plan.to_add),
            planned_removes=len(plan.to_remove),
            added=added_count,
            removed=removed_count,
            failed=len(failures),
        )
        return outcome
