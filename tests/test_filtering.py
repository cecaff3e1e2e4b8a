"""Tests for in-memory search and dashboard counters."""

from datetime import date, timedelta

from models.enums import Priority
from services.filtering import compute_stats, filter_tasks, is_blank, is_overdue
from shared.models import TaskItem

TODAY = date(2024, 6, 15)


def _task(task_id: int, title: str, **fields) -> TaskItem:
    return TaskItem(id=task_id, user_id=1, title=title, **fields)


class TestFilterTasks:
    """Search across title and description."""

    def setup_method(self) -> None:
        self.tasks = [
            _task(1, "Buy milk", description="Semi-skimmed"),
            _task(2, "File taxes", description="Deadline is near"),
            _task(3, "Call mum"),
            _task(4, "Milkshake recipe"),
        ]

    def test_matches_title_case_insensitively(self) -> None:
        assert [task.id for task in filter_tasks(self.tasks, "MILK")] == [1, 4]

    def test_matches_description(self) -> None:
        assert [task.id for task in filter_tasks(self.tasks, "deadline")] == [2]

    def test_tasks_without_description(self) -> None:
        assert [task.id for task in filter_tasks(self.tasks, "mum")] == [3]

    def test_no_match(self) -> None:
        assert filter_tasks(self.tasks, "holiday") == []

    def test_order_is_preserved(self) -> None:
        reversed_tasks = list(reversed(self.tasks))
        assert [task.id for task in filter_tasks(reversed_tasks, "milk")] == [4, 1]


def test_is_blank() -> None:
    assert is_blank(None)
    assert is_blank("")
    assert is_blank("   ")
    assert not is_blank(" milk ")


def test_overdue_and_high_priority_scenario() -> None:
    tasks = [
        _task(1, "Buy milk", priority=Priority.LOW),
        _task(2, "File taxes", priority=Priority.HIGH, deadline=TODAY - timedelta(days=1)),
    ]
    stats = compute_stats(tasks, today=TODAY)
    assert stats.total == 2
    assert stats.overdue == 1
    assert stats.high_priority_pending == 1
    assert stats.pending == 2
    assert stats.completed == 0


def test_completed_tasks_are_never_overdue_or_pending() -> None:
    tasks = [
        _task(1, "Old and done", priority=Priority.HIGH, completed=True, deadline=TODAY - timedelta(days=10)),
        _task(2, "Due today", deadline=TODAY),
        _task(3, "No deadline"),
    ]
    stats = compute_stats(tasks, today=TODAY)
    assert stats.total == 3
    assert stats.completed == 1
    assert stats.pending == 2
    assert stats.high_priority_pending == 0
    assert stats.overdue == 0


def test_is_overdue_boundary() -> None:
    assert is_overdue(_task(1, "late", deadline=TODAY - timedelta(days=1)), TODAY)
    assert not is_overdue(_task(2, "today", deadline=TODAY), TODAY)
    assert not is_overdue(_task(3, "none"), TODAY)


def test_empty_list() -> None:
    stats = compute_stats([], today=TODAY)
    assert stats.model_dump() == {
        "total": 0,
        "completed": 0,
        "pending": 0,
        "high_priority_pending": 0,
        "overdue": 0,
    }
