"""Archival transition: moving a finished project into the archive.

Whether a project is still active is a predicate recomputed on read
(:func:`paravault.vault.progress.is_active`). Archiving itself is a
separate, explicit state transition that removes the project from the
working set and appends a frozen ``ArchivedProjectEntry``. The archive
policy decides whether that transition also runs automatically once a
project's last item is done.
"""

from __future__ import annotations

import logging
from datetime import UTC, date, datetime
from enum import StrEnum

from paravault.vault.models import (
    ArchivedItem,
    ArchivedProjectEntry,
    Project,
    VaultState,
)
from paravault.vault.operations import find_project
from paravault.vault.progress import is_complete

logger = logging.getLogger(__name__)


class ArchivePolicy(StrEnum):
    """When completed projects are moved into the archive."""

    MANUAL = "manual"  # completed projects are only hidden until archived explicitly
    ON_COMPLETE = "on_complete"  # archived as soon as the last item is done


def snapshot(project: Project, *, on_date: date, now: datetime) -> ArchivedProjectEntry:
    """Build the frozen archive record for a project."""
    return ArchivedProjectEntry(
        title=project.title,
        date=on_date,
        notes=project.description,
        archived_items=tuple(
            ArchivedItem(
                id=item.id,
                title=item.title,
                completed=item.completed,
                deadline=item.deadline,
            )
            for item in project.items
        ),
        project_id=project.id,
        slug=project.slug,
        term=project.term,
        archived_at=now,
    )


def archive_project(
    state: VaultState,
    project_id: str,
    *,
    on_date: date | None = None,
    now: datetime | None = None,
    force: bool = False,
) -> VaultState:
    """Move a project out of the working set and into the archive.

    Unknown ids are a no-op. A project that is not complete is left alone
    unless ``force`` is set.

    Args:
        state: Current snapshot.
        project_id: Project to archive.
        on_date: Day the archive entry is filed under (default: today).
        now: Transition timestamp (default: current UTC time).
        force: Archive even if some items are still open.

    Returns:
        The new snapshot.
    """
    project = find_project(state, project_id)
    if project is None:
        logger.debug("No project %s to archive", project_id)
        return state
    if not force and not is_complete(project):
        logger.info("Project %s is not complete, not archiving", project.slug)
        return state

    now = now or datetime.now(tz=UTC)
    record = snapshot(project, on_date=on_date or date.today(), now=now)
    logger.info("Archived project %s (%d items)", project.slug, len(record.archived_items))
    return state.model_copy(
        update={
            "projects": [p for p in state.projects if p.id != project_id],
            "entries": [*state.entries, record],
        }
    )


def sweep_completed(
    state: VaultState,
    policy: ArchivePolicy,
    *,
    on_date: date | None = None,
    now: datetime | None = None,
) -> VaultState:
    """Archive every complete project when the policy asks for it."""
    if policy != ArchivePolicy.ON_COMPLETE:
        return state
    for project in [p for p in state.projects if is_complete(p)]:
        state = archive_project(state, project.id, on_date=on_date, now=now)
    return state
