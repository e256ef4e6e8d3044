"""Vault domain: PARA entries, projects and their lifecycle.

Models are immutable-by-convention snapshots; every change goes through
the copy-on-write functions in ``operations`` and ``archive``.
"""

from paravault.vault.archive import ArchivePolicy, archive_project, sweep_completed
from paravault.vault.models import (
    ArchivedItem,
    ArchivedProjectEntry,
    Category,
    Entry,
    LinkMetadata,
    Project,
    ProjectItem,
    ProjectStatus,
    ProjectTerm,
    ProjectUpdate,
    RegularEntry,
    VaultState,
)
from paravault.vault.progress import active_projects, is_active, is_complete, progress
from paravault.vault.store import VaultStore

__all__ = [
    "ArchivePolicy",
    "ArchivedItem",
    "ArchivedProjectEntry",
    "Category",
    "Entry",
    "LinkMetadata",
    "Project",
    "ProjectItem",
    "ProjectStatus",
    "ProjectTerm",
    "ProjectUpdate",
    "RegularEntry",
    "VaultState",
    "VaultStore",
    "active_projects",
    "archive_project",
    "is_active",
    "is_complete",
    "progress",
    "sweep_completed",
]
