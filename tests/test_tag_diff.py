from __future__ import annotations

import pytest

from curator.app.services.tag_diff import ReconciliationPlan, diff_tag_ids


def test_diff_tag_ids_adds_missing_and_removes_unwanted() -> None:
    plan = diff_tag_ids({1, 2, 3}, {2, 3, 4})

    assert plan.to_add == frozenset({4})
    assert plan.to_remove == frozenset({1})
    assert not plan.is_noop


@pytest.mark.parametrize(
    ("current", "desired"),
    [
        (set(), set()),
        ({5, 6}, {5, 6}),
        (set(), {1, 2}),
        ({1, 2}, set()),
        ({1, 2, 3}, {3, 4, 5}),
        ({10, 20}, {30}),
    ],
)
def test_diff_tag_ids_matches_set_differences(current: set[int], desired: set[int]) -> None:
    plan = diff_tag_ids(current, desired)

    assert plan.to_add == frozenset(desired - current)
    assert plan.to_remove == frozenset(current - desired)
    assert not plan.to_add & plan.to_remove


def test_diff_of_identical_sets_is_noop() -> None:
    plan = diff_tag_ids([7, 8, 9], (9, 8, 7))

    assert plan == ReconciliationPlan(to_add=frozenset(), to_remove=frozenset())
    assert plan.is_noop


def test_diff_does_not_mutate_inputs() -> None:
    current = {1, 2}
    desired = {2, 3}

    diff_tag_ids(current, desired)

    assert current == {1, 2}
    assert desired == {2, 3}


def test_plan_orders_operations_by_tag_id() -> None:
    plan = diff_tag_ids({9, 1, 5}, {3, 2, 8})

    assert plan.ordered_additions() == [2, 3, 8]
    assert plan.ordered_removals() == [1, 5, 9]
