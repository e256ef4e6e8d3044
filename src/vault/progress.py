"""Project completion math.

Everything here is recomputed from the items on every read; nothing is
stored on the project.
"""

from __future__ import annotations

from collections.abc import Iterable

from paravault.vault.models import Project


def completion_counts(project: Project) -> tuple[int, int]:
    """Return ``(completed, total)`` item counts."""
    total = len(project.items)
    completed = sum(1 for item in project.items if item.completed)
    return completed, total


def progress(project: Project) -> int:
    """Completion percentage in [0, 100], rounded half-up.

    A project with no items is at 0.
    """
    completed, total = completion_counts(project)
    if total == 0:
        return 0
    # round(100 * completed / total) with half-up rounding, in integers
    return (200 * completed + total) // (2 * total)


def is_complete(project: Project) -> bool:
    """True when the project has items and every one is done."""
    completed, total = completion_counts(project)
    return total > 0 and completed == total


def is_active(project: Project) -> bool:
    """True when the project belongs in the working list.

    Empty projects stay active; a project leaves the list once all of its
    items are completed.
    """
    return not is_complete(project)


def active_projects(projects: Iterable[Project]) -> list[Project]:
    """Filter to the projects that are still being worked on."""
    return [p for p in projects if is_active(p)]
