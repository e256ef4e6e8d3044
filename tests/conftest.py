"""Shared fixtures: fake collaborators for the capture and breakdown flows."""

from __future__ import annotations

from dataclasses import dataclass, field

import pytest
from paravault.shared.errors import (
    ClassificationUnavailable,
    DecompositionFailed,
    LinkResolutionFailed,
    SlugGenerationFailed,
)
from paravault.vault.models import Category, Project
from paravault.vault.service import Collaborators


@dataclass
class FakeCollaborators:
    """Scriptable stand-ins that record every call."""

    category: Category = Category.AREAS
    title: str = "Example page"
    slug: str = "example-page"
    steps: list[str] = field(default_factory=lambda: ["Outline", "Draft"])
    fail_classify: bool = False
    fail_summary: bool = False
    fail_slug: bool = False
    fail_decompose: bool = False
    calls: list[tuple[str, str]] = field(default_factory=list)

    async def classify_text(self, text: str) -> Category:
        self.calls.append(("classify", text))
        if self.fail_classify:
            raise ClassificationUnavailable("classifier down")
        return self.category

    async def summarize_link(self, url: str) -> str:
        self.calls.append(("summarize", url))
        if self.fail_summary:
            raise LinkResolutionFailed("summarizer down")
        return self.title

    async def generate_slug(self, text: str) -> str:
        self.calls.append(("slug", text))
        if self.fail_slug:
            raise SlugGenerationFailed("slugger down")
        return self.slug

    async def decompose_project(self, project: Project) -> list[str]:
        self.calls.append(("decompose", project.title))
        if self.fail_decompose:
            raise DecompositionFailed("planner down")
        return list(self.steps)

    def bundle(self) -> Collaborators:
        return Collaborators(
            classify_text=self.classify_text,
            summarize_link=self.summarize_link,
            generate_slug=self.generate_slug,
            decompose_project=self.decompose_project,
        )

    def called(self, name: str) -> bool:
        return any(call == name for call, _ in self.calls)


@pytest.fixture
def fakes() -> FakeCollaborators:
    return FakeCollaborators()
