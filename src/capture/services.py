"""LLM-backed collaborators for classification, titling, slugs and breakdown.

Each function is async and satisfies one collaborator contract. Transport
errors and unusable answers are translated into the matching
:mod:`paravault.shared.errors` type; callers decide the fallback.
"""

from __future__ import annotations

import json
import logging

from paravault.capture.links import normalize_slug
from paravault.capture.prompts import (
    BREAKDOWN_SYSTEM,
    CLASSIFY_SYSTEM,
    SLUG_SYSTEM,
    SUMMARIZE_SYSTEM,
    get_breakdown_prompt,
    get_classify_prompt,
    get_slug_prompt,
    get_summarize_prompt,
)
from paravault.shared.errors import (
    ClassificationUnavailable,
    DecompositionFailed,
    LinkResolutionFailed,
    SlugGenerationFailed,
)
from paravault.shared.llm import LLMError, acall_claude, extract_json_array
from paravault.vault.models import Category, Project

logger = logging.getLogger(__name__)

_CATEGORY_LOOKUP = {c.value.lower(): c for c in Category}


class LLMCollaborators:
    """Claude-backed implementations of the four collaborator contracts."""

    def __init__(self, *, model: str | None = None, timeout: int = 60) -> None:
        self.model = model
        self.timeout = timeout

    async def _call(self, system_prompt: str, user_prompt: str, label: str) -> str:
        return await acall_claude(
            system_prompt,
            user_prompt,
            model=self.model,
            timeout=self.timeout,
            label=label,
        )

    async def classify_text(self, text: str) -> Category:
        try:
            raw = await self._call(CLASSIFY_SYSTEM, get_classify_prompt(text), "classify")
        except LLMError as exc:
            raise ClassificationUnavailable(str(exc)) from exc
        category = parse_category(raw)
        if category is None:
            raise ClassificationUnavailable(f"Unrecognized category answer: {raw[:80]!r}")
        return category

    async def summarize_link(self, url: str) -> str:
        try:
            raw = await self._call(SUMMARIZE_SYSTEM, get_summarize_prompt(url), "summarize-link")
        except LLMError as exc:
            raise LinkResolutionFailed(str(exc)) from exc
        lines = raw.strip().splitlines()
        title = lines[0].strip().strip("\"'").strip() if lines else ""
        if not title:
            raise LinkResolutionFailed(f"Empty title for {url}")
        return title

    async def generate_slug(self, text: str) -> str:
        try:
            raw = await self._call(SLUG_SYSTEM, get_slug_prompt(text), "slug")
        except LLMError as exc:
            raise SlugGenerationFailed(str(exc)) from exc
        slug = normalize_slug(raw)
        if not slug:
            raise SlugGenerationFailed(f"Unusable slug answer: {raw[:80]!r}")
        return slug

    async def decompose_project(self, project: Project) -> list[str]:
        prompt = get_breakdown_prompt(
            project.title,
            project.description,
            [item.title for item in project.items],
        )
        try:
            raw = await self._call(BREAKDOWN_SYSTEM, prompt, "breakdown")
            steps = json.loads(extract_json_array(raw))
        except LLMError as exc:
            raise DecompositionFailed(str(exc)) from exc
        except json.JSONDecodeError as exc:
            raise DecompositionFailed(f"Breakdown was not JSON: {exc}") from exc
        if not isinstance(steps, list):
            raise DecompositionFailed("Breakdown was not a JSON array")
        return [str(step).strip() for step in steps if str(step).strip()]


def parse_category(answer: str) -> Category | None:
    """Pick the category named in a classifier answer, if any."""
    words = answer.strip().strip(".\"'`*").lower()
    if words in _CATEGORY_LOOKUP:
        return _CATEGORY_LOOKUP[words]
    # Tolerate a sentence around the answer; first category mentioned wins
    positions = [
        (pos, category)
        for key, category in _CATEGORY_LOOKUP.items()
        if (pos := words.find(key)) != -1
    ]
    if not positions:
        return None
    return min(positions)[1]
