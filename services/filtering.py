"""In-memory search and summary counters over a loaded task list."""

from collections.abc import Iterable, Sequence
from datetime import date

from models.enums import Priority
from shared.models import TaskItem, TaskStats


def is_blank(search_term: str | None) -> bool:
    return search_term is None or not search_term.strip()


def matches(task: TaskItem, search_term: str) -> bool:
    """Case-insensitive substring match on title or description."""
    needle = search_term.lower()
    if needle in task.title.lower():
        return True
    return task.description is not None and needle in task.description.lower()


def filter_tasks(tasks: Iterable[TaskItem], search_term: str) -> list[TaskItem]:
    """Tasks matching the search term, in their original order.

    A blank term is not treated as "match everything": callers reload the
    full list from storage instead (see ``TaskSession.search_tasks``).
    """
    return [task for task in tasks if matches(task, search_term)]


def is_overdue(task: TaskItem, today: date) -> bool:
    return not task.completed and task.deadline is not None and task.deadline < today


def compute_stats(tasks: Sequence[TaskItem], today: date | None = None) -> TaskStats:
    """Recount the dashboard counters from scratch."""
    today = today or date.today()
    stats = TaskStats(total=len(tasks))
    for task in tasks:
        if task.completed:
            stats.completed += 1
            continue
        stats.pending += 1
        if task.priority == Priority.HIGH:
            stats.high_priority_pending += 1
        if is_overdue(task, today):
            stats.overdue += 1
    return stats
