"""Vault domain models: pure Pydantic v2 data types.

A vault is two collections: entries (the daily PARA stream, including
frozen records of archived projects) and active projects with their
sub-items. No I/O and no business logic live here.
"""

from __future__ import annotations

import uuid
from datetime import UTC, date, datetime
from enum import StrEnum
from typing import Annotated, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator


def new_id() -> str:
    """Return a fresh opaque identifier."""
    return str(uuid.uuid4())


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------


class Category(StrEnum):
    """The four PARA categories."""

    PROJECTS = "Projects"
    AREAS = "Areas"
    RESOURCES = "Resources"
    ARCHIVES = "Archives"


class ProjectTerm(StrEnum):
    """Planning horizon of a project."""

    MID = "Mid"
    LONG = "Long"


class ProjectStatus(StrEnum):
    """Lifecycle status of an active project."""

    IN_PROGRESS = "In Progress"


# ---------------------------------------------------------------------------
# Entries
# ---------------------------------------------------------------------------


class LinkMetadata(BaseModel):
    """Display metadata derived for a link-bearing entry."""

    display_title: str
    domain: str
    favicon: str
    slug: str
    is_pinned: bool = False


class RegularEntry(BaseModel):
    """A dated, categorized item of text, optionally a link."""

    kind: Literal["entry"] = "entry"
    id: str = Field(default_factory=new_id)
    title: str
    category: Category
    date: date
    completed: bool = False
    link_metadata: LinkMetadata | None = None

    @property
    def is_link(self) -> bool:
        return self.link_metadata is not None


class ArchivedItem(BaseModel):
    """Frozen snapshot of a project item at archival time."""

    model_config = ConfigDict(frozen=True)

    id: str
    title: str
    completed: bool
    deadline: date | None = None


class ArchivedProjectEntry(BaseModel):
    """Terminal record of a project moved to the archive.

    Frozen: the snapshot can be deleted but never edited.
    """

    model_config = ConfigDict(frozen=True)

    kind: Literal["archived_project"] = "archived_project"
    id: str = Field(default_factory=new_id)
    title: str
    category: Category = Category.ARCHIVES
    date: date
    completed: bool = True
    notes: str = ""
    archived_items: tuple[ArchivedItem, ...] = ()
    project_id: str
    slug: str
    term: ProjectTerm
    archived_at: datetime = Field(default_factory=lambda: datetime.now(tz=UTC))

    @field_validator("category")
    @classmethod
    def _archives_only(cls, value: Category) -> Category:
        if value != Category.ARCHIVES:
            raise ValueError("archived projects always belong to Archives")
        return value


Entry = Annotated[RegularEntry | ArchivedProjectEntry, Field(discriminator="kind")]


# ---------------------------------------------------------------------------
# Projects
# ---------------------------------------------------------------------------


class ProjectItem(BaseModel):
    """A sub-task owned by exactly one project."""

    id: str = Field(default_factory=new_id)
    title: str
    completed: bool = False
    deadline: date | None = None


class Project(BaseModel):
    """An active project and its ordered sub-items."""

    id: str = Field(default_factory=new_id)
    title: str
    description: str = ""
    term: ProjectTerm = ProjectTerm.MID
    deadline: date | None = None
    status: ProjectStatus = ProjectStatus.IN_PROGRESS
    slug: str
    items: list[ProjectItem] = Field(default_factory=list)
    created_at: datetime = Field(default_factory=lambda: datetime.now(tz=UTC))


class ProjectUpdate(BaseModel):
    """Editable project fields. ``None`` leaves a field unchanged."""

    title: str | None = None
    description: str | None = None
    deadline: date | None = None


# ---------------------------------------------------------------------------
# Snapshot
# ---------------------------------------------------------------------------


class VaultState(BaseModel):
    """One snapshot of both collections; the persisted shape."""

    entries: list[Entry] = Field(default_factory=list)
    projects: list[Project] = Field(default_factory=list)
