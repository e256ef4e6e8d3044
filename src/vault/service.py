"""Vault service: the entry point the CLI drives.

Loads a snapshot from the store, runs the async capture and breakdown
flows against the collaborators, applies the archive policy after item
changes, and saves the resulting snapshot.
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from datetime import date

from paravault.capture.classifier import classify
from paravault.capture.links import DEFAULT_FAVICON_TEMPLATE, fallback_slug, resolve_link
from paravault.shared.errors import CollaboratorError
from paravault.vault import operations as ops
from paravault.vault.archive import ArchivePolicy, archive_project, sweep_completed
from paravault.vault.models import (
    Category,
    Entry,
    LinkMetadata,
    Project,
    ProjectItem,
    ProjectTerm,
    ProjectUpdate,
    VaultState,
)
from paravault.vault.store import VaultStore

logger = logging.getLogger(__name__)


@dataclass
class Collaborators:
    """The external services the vault consumes."""

    classify_text: Callable[[str], Awaitable[Category]]
    summarize_link: Callable[[str], Awaitable[str]]
    generate_slug: Callable[[str], Awaitable[str]]
    decompose_project: Callable[[Project], Awaitable[list[str]]]


class VaultService:
    """Applies operations to the stored vault and persists the result."""

    def __init__(
        self,
        store: VaultStore,
        collaborators: Collaborators,
        *,
        archive_policy: ArchivePolicy = ArchivePolicy.MANUAL,
        fallback_category: Category = Category.RESOURCES,
        favicon_template: str = DEFAULT_FAVICON_TEMPLATE,
    ) -> None:
        self.store = store
        self.collaborators = collaborators
        self.archive_policy = archive_policy
        self.fallback_category = fallback_category
        self.favicon_template = favicon_template
        self.state = store.load()

    # ── Private helpers ──────────────────────────────────────────

    def _commit(self, state: VaultState) -> VaultState:
        if state is not self.state:
            self.store.save(state)
            self.state = state
        return state

    def _commit_items(self, state: VaultState) -> VaultState:
        return self._commit(sweep_completed(state, self.archive_policy))

    async def _resolve_link(self, url: str) -> LinkMetadata:
        return await resolve_link(
            url,
            summarize=self.collaborators.summarize_link,
            slugify=self.collaborators.generate_slug,
            favicon_template=self.favicon_template,
        )

    # ── Entries ──────────────────────────────────────────────────

    async def capture(
        self,
        text: str,
        *,
        on_date: date,
        manual_category: Category | None = None,
    ) -> Entry | None:
        """Classify raw input and file it as a new entry.

        Returns the new entry, or ``None`` when the input was blank.
        """
        result = await classify(
            text,
            manual_category=manual_category,
            resolve_link=self._resolve_link,
            resolve_category=self.collaborators.classify_text,
            fallback_category=self.fallback_category,
        )
        if result is None:
            return None
        state = self._commit(
            ops.add_entry(
                self.state,
                text.strip(),
                result.category,
                on_date,
                result.link_metadata,
            )
        )
        return state.entries[-1]

    def toggle_entry(self, entry_id: str) -> VaultState:
        return self._commit(ops.toggle_entry(self.state, entry_id))

    def delete_entry(self, entry_id: str) -> VaultState:
        return self._commit(ops.delete_entry(self.state, entry_id))

    # ── Projects ─────────────────────────────────────────────────

    async def create_project(
        self,
        title: str,
        *,
        description: str = "",
        term: ProjectTerm = ProjectTerm.MID,
        deadline: date | None = None,
        seed_items: str = "",
    ) -> Project | None:
        """Start a project; the slug falls back to a local one if generation fails."""
        if not title.strip():
            return None
        try:
            slug = await self.collaborators.generate_slug(title)
        except CollaboratorError as exc:
            logger.warning("Slug generation failed, using a local slug: %s", exc)
            slug = ""
        except Exception:
            logger.warning("Slug generation failed, using a local slug", exc_info=True)
            slug = ""
        state, project = ops.create_project(
            self.state,
            title.strip(),
            slug=slug.strip() or fallback_slug(title),
            description=description,
            term=term,
            deadline=deadline,
            seed_items=seed_items,
        )
        self._commit(state)
        return project

    def update_project(self, project_id: str, update: ProjectUpdate) -> VaultState:
        return self._commit(ops.update_project(self.state, project_id, update))

    def delete_project(self, project_id: str) -> VaultState:
        return self._commit(ops.delete_project(self.state, project_id))

    def archive_project(self, project_id: str, *, force: bool = False) -> VaultState:
        return self._commit(archive_project(self.state, project_id, force=force))

    async def breakdown_project(self, project_id: str) -> list[ProjectItem]:
        """Ask the decomposition service for next steps and append them.

        Returns the items that were added; a failed breakdown adds none.
        """
        project = ops.find_project(self.state, project_id)
        if project is None:
            return []
        try:
            steps = await self.collaborators.decompose_project(project)
        except CollaboratorError as exc:
            logger.warning("Breakdown failed for %s: %s", project.slug, exc)
            return []
        except Exception:
            logger.warning("Breakdown failed for %s", project.slug, exc_info=True)
            return []
        appended = ops.append_items(self.state, project_id, steps)
        updated = ops.find_project(appended, project_id)
        new_items = updated.items[len(project.items):] if updated else []
        self._commit_items(appended)
        return list(new_items)

    # ── Project items ────────────────────────────────────────────

    def add_item(
        self, project_id: str, title: str, *, deadline: date | None = None
    ) -> ProjectItem | None:
        if ops.find_project(self.state, project_id) is None or not title.strip():
            return None
        item = ProjectItem(title=title.strip(), deadline=deadline)
        self._commit_items(ops.add_item(self.state, project_id, item))
        return item

    def update_item(self, project_id: str, item: ProjectItem) -> VaultState:
        return self._commit_items(ops.update_item(self.state, project_id, item))

    def toggle_item(self, project_id: str, item_id: str) -> VaultState:
        return self._commit_items(ops.toggle_item(self.state, project_id, item_id))

    def remove_item(self, project_id: str, item_id: str) -> VaultState:
        return self._commit_items(ops.remove_item(self.state, project_id, item_id))
