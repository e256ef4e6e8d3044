"""LLM prompts for the capture collaborators."""

from __future__ import annotations

CLASSIFY_SYSTEM = "You sort a person's notes into the PARA method. Answer with one word."

SUMMARIZE_SYSTEM = "You write short, plain titles for web links."

SLUG_SYSTEM = "You generate short URL slugs."

BREAKDOWN_SYSTEM = "You are a pragmatic project planner."


def get_classify_prompt(text: str) -> str:
    return f"""Classify the following input into exactly one PARA category.

- Projects: a time-bound goal with a clear outcome
- Areas: an ongoing responsibility with no end date
- Resources: reference material or a topic of interest
- Archives: something finished or no longer active

Input:
{text[:1000]}

Reply with ONLY one of: Projects, Areas, Resources, Archives"""


def get_summarize_prompt(url: str) -> str:
    return f"""Write a short title (at most 8 words) describing what this link is about.
Use the URL itself as your only source; do not invent details.

URL: {url}

Reply with ONLY the title, no quotes."""


def get_slug_prompt(text: str) -> str:
    return f"""Create a short, memorable slug for the text below.
Use 2-4 lowercase English words joined by hyphens.

Text: {text[:500]}

Reply with ONLY the slug."""


def get_breakdown_prompt(title: str, description: str, existing: list[str]) -> str:
    existing_list = "\n".join(f"- {t}" for t in existing[:30]) if existing else "(none)"
    return f"""Break this project down into 3-7 concrete next actions.

## Project
{title}

## Description
{description[:2000] or "(none)"}

## Existing tasks (DO NOT repeat)
{existing_list}

Return a JSON array of short task titles, in the order they should be done.
Example: ["Draft outline", "Collect references", "Write first section"]
Return ONLY the JSON array, no other text."""
