"""Copy-on-write operations over a vault snapshot.

Each function takes a ``VaultState`` and returns a new one; models held
by the input snapshot are never mutated. Operations naming an id that
does not exist return the input state unchanged.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable
from datetime import date

from paravault.vault.models import (
    ArchivedProjectEntry,
    Category,
    Entry,
    LinkMetadata,
    Project,
    ProjectItem,
    ProjectTerm,
    ProjectUpdate,
    RegularEntry,
    VaultState,
)

logger = logging.getLogger(__name__)


# ── Lookups ──────────────────────────────────────────────────────


def find_project(state: VaultState, project_id: str) -> Project | None:
    for project in state.projects:
        if project.id == project_id:
            return project
    return None


def find_entry(state: VaultState, entry_id: str) -> Entry | None:
    for entry in state.entries:
        if entry.id == entry_id:
            return entry
    return None


def entries_on(state: VaultState, on_date: date) -> list[Entry]:
    """Entries associated with a calendar day."""
    return [e for e in state.entries if e.date == on_date]


def entries_by_category(entries: Iterable[Entry]) -> dict[Category, list[Entry]]:
    """Group entries under the four categories, in PARA order."""
    grouped: dict[Category, list[Entry]] = {c: [] for c in Category}
    for entry in entries:
        grouped[entry.category].append(entry)
    return grouped


# ── Private helpers ──────────────────────────────────────────────


def _replace_project(
    state: VaultState,
    project_id: str,
    change: Callable[[Project], Project],
) -> VaultState:
    project = find_project(state, project_id)
    if project is None:
        logger.debug("No project %s, leaving state unchanged", project_id)
        return state
    updated = change(project)
    if updated is project:
        return state
    projects = [updated if p.id == project_id else p for p in state.projects]
    return state.model_copy(update={"projects": projects})


def _with_items(project: Project, items: list[ProjectItem]) -> Project:
    return project.model_copy(update={"items": items})


def _unique_slug(state: VaultState, slug: str) -> str:
    taken = {p.slug for p in state.projects}
    taken.update(e.slug for e in state.entries if isinstance(e, ArchivedProjectEntry))
    if slug not in taken:
        return slug
    n = 2
    while f"{slug}-{n}" in taken:
        n += 1
    return f"{slug}-{n}"


# ── Entries ──────────────────────────────────────────────────────


def add_entry(
    state: VaultState,
    title: str,
    category: Category,
    on_date: date,
    link_metadata: LinkMetadata | None = None,
) -> VaultState:
    """Append a new, not-yet-completed entry with a fresh id."""
    entry = RegularEntry(
        title=title,
        category=category,
        date=on_date,
        link_metadata=link_metadata,
    )
    logger.debug("Adding %s entry %s", category, entry.id)
    return state.model_copy(update={"entries": [*state.entries, entry]})


def toggle_entry(state: VaultState, entry_id: str) -> VaultState:
    """Flip an entry's completed flag.

    Resources are reference material and archived projects are terminal,
    so neither can be toggled.
    """
    entry = find_entry(state, entry_id)
    if entry is None or isinstance(entry, ArchivedProjectEntry):
        return state
    if entry.category == Category.RESOURCES:
        return state
    toggled = entry.model_copy(update={"completed": not entry.completed})
    entries = [toggled if e.id == entry_id else e for e in state.entries]
    return state.model_copy(update={"entries": entries})


def delete_entry(state: VaultState, entry_id: str) -> VaultState:
    entries = [e for e in state.entries if e.id != entry_id]
    return state.model_copy(update={"entries": entries})


# ── Projects ─────────────────────────────────────────────────────


def create_project(
    state: VaultState,
    title: str,
    *,
    slug: str,
    description: str = "",
    term: ProjectTerm = ProjectTerm.MID,
    deadline: date | None = None,
    seed_items: str = "",
) -> tuple[VaultState, Project]:
    """Start a new project, newest first.

    ``seed_items`` is a comma-separated list; each non-blank part becomes
    an item, in order. The slug is made unique within the vault.

    Returns:
        The new state and the created project.
    """
    items = [ProjectItem(title=part.strip()) for part in seed_items.split(",") if part.strip()]
    project = Project(
        title=title,
        description=description,
        term=term,
        deadline=deadline,
        slug=_unique_slug(state, slug),
        items=items,
    )
    logger.debug("Creating project %s (%s) with %d items", project.id, project.slug, len(items))
    return state.model_copy(update={"projects": [project, *state.projects]}), project


def update_project(state: VaultState, project_id: str, update: ProjectUpdate) -> VaultState:
    """Merge editable fields; id, slug and items are preserved.

    Only fields set on ``update`` are applied. An explicit ``deadline=None``
    clears the deadline.
    """
    changes = {
        key: value
        for key, value in update.model_dump(exclude_unset=True).items()
        if value is not None or key == "deadline"
    }
    if not changes:
        return state
    return _replace_project(state, project_id, lambda p: p.model_copy(update=changes))


def delete_project(state: VaultState, project_id: str) -> VaultState:
    projects = [p for p in state.projects if p.id != project_id]
    return state.model_copy(update={"projects": projects})


# ── Project items ────────────────────────────────────────────────


def add_item(state: VaultState, project_id: str, item: ProjectItem) -> VaultState:
    """Append an item. An item whose id is already present is not duplicated."""

    def change(project: Project) -> Project:
        if any(i.id == item.id for i in project.items):
            return project
        return _with_items(project, [*project.items, item])

    return _replace_project(state, project_id, change)


def append_items(state: VaultState, project_id: str, titles: Iterable[str]) -> VaultState:
    """Append one new item per non-blank title, in the given order."""
    new_items = [ProjectItem(title=t.strip()) for t in titles if t.strip()]
    if not new_items:
        return state
    return _replace_project(
        state, project_id, lambda p: _with_items(p, [*p.items, *new_items])
    )


def update_item(state: VaultState, project_id: str, item: ProjectItem) -> VaultState:
    """Replace the item with the same id. Unknown items are ignored."""

    def change(project: Project) -> Project:
        if not any(i.id == item.id for i in project.items):
            return project
        return _with_items(project, [item if i.id == item.id else i for i in project.items])

    return _replace_project(state, project_id, change)


def toggle_item(state: VaultState, project_id: str, item_id: str) -> VaultState:
    project = find_project(state, project_id)
    if project is None:
        return state
    for item in project.items:
        if item.id == item_id:
            return update_item(
                state, project_id, item.model_copy(update={"completed": not item.completed})
            )
    return state


def remove_item(state: VaultState, project_id: str, item_id: str) -> VaultState:
    """Drop an item by id; removing an unknown id is a no-op."""

    def change(project: Project) -> Project:
        if not any(i.id == item_id for i in project.items):
            return project
        return _with_items(project, [i for i in project.items if i.id != item_id])

    return _replace_project(state, project_id, change)
