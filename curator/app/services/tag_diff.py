from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass


@dataclass(frozen=True)
class ReconciliationPlan:
    to_add: frozenset[int]
    to_remove: frozenset[int]

    @property
    def is_noop(self) -> bool:
        return not self.to_add and not self.to_remove

    def ordered_additions(self) -> list[int]:
        return sorted(self.to_add)

    def ordered_removals(self) -> list[int]:
        return sorted(self.to_remove)


def diff_tag_ids(current: Iterable[int], desired: Iterable[int]) -> ReconciliationPlan:
    """Tags to attach (`desired - current`) and detach (`current - desired`)."""
    current_ids = frozenset(current)
    desired_ids = frozenset(desired)
    return ReconciliationPlan(
        to_add=desired_ids - current_ids,
        to_remove=current_ids - desired_ids,
    )
