"""Link metadata for URL entries.

The domain and favicon are derived locally from the URL. The display
title and slug come from two collaborators that are awaited concurrently.
"""

from __future__ import annotations

import asyncio
import logging
import re
import uuid
from collections.abc import Awaitable, Callable
from urllib.parse import urlparse

from paravault.shared.errors import (
    LinkResolutionFailed,
    ResolutionError,
    SlugGenerationFailed,
)
from paravault.vault.models import LinkMetadata

logger = logging.getLogger(__name__)

DEFAULT_FAVICON_TEMPLATE = "https://www.google.com/s2/favicons?domain={domain}&sz=64"

_URL_PREFIXES = ("http://", "https://")
_SLUG_RE = re.compile(r"[^a-z0-9]+")
_SLUG_MAX_LEN = 48

TextCollaborator = Callable[[str], Awaitable[str]]


def is_url(text: str) -> bool:
    """Whether the text should be treated as a link."""
    return text.strip().lower().startswith(_URL_PREFIXES)


def extract_domain(url: str) -> str:
    """Host of ``url`` with a leading ``www.`` removed.

    Raises:
        LinkResolutionFailed: If the URL has no host.
    """
    try:
        host = urlparse(url.strip()).hostname
    except ValueError as exc:
        raise LinkResolutionFailed(f"Malformed URL: {url!r}") from exc
    domain = (host or "").removeprefix("www.")
    if not domain:
        raise LinkResolutionFailed(f"URL has no host: {url!r}")
    return domain


def favicon_for(domain: str, template: str = DEFAULT_FAVICON_TEMPLATE) -> str:
    return template.format(domain=domain)


def normalize_slug(text: str) -> str:
    """Lower-case kebab-case slug, trimmed on a word boundary."""
    slug = _SLUG_RE.sub("-", text.lower()).strip("-")
    if len(slug) > _SLUG_MAX_LEN:
        slug = slug[:_SLUG_MAX_LEN].rsplit("-", 1)[0] or slug[:_SLUG_MAX_LEN]
    return slug


def fallback_slug(title: str) -> str:
    """Local slug used when the slug collaborator is unavailable."""
    base = normalize_slug(title)[:24].strip("-") or "item"
    return f"{base}-{uuid.uuid4().hex[:6]}"


async def resolve_link(
    url: str,
    *,
    summarize: TextCollaborator,
    slugify: TextCollaborator,
    favicon_template: str = DEFAULT_FAVICON_TEMPLATE,
) -> LinkMetadata:
    """Build display metadata for a URL.

    Summary and slug are requested at the same time. If either fails the
    other is cancelled.

    Args:
        url: The link to describe.
        summarize: Returns a short human-readable title for the URL.
        slugify: Returns a short identifier for the URL.
        favicon_template: ``str.format`` template taking ``domain``.

    Returns:
        Link metadata with ``is_pinned`` false.

    Raises:
        LinkResolutionFailed: Malformed URL, or the summary failed.
        SlugGenerationFailed: The slug could not be generated.
    """
    domain = extract_domain(url)

    title_task = asyncio.ensure_future(_require_text(summarize, url, LinkResolutionFailed))
    slug_task = asyncio.ensure_future(_require_text(slugify, url, SlugGenerationFailed))
    try:
        display_title, slug = await asyncio.gather(title_task, slug_task)
    except BaseException:
        for task in (title_task, slug_task):
            task.cancel()
        raise

    logger.debug("Resolved %s as %r (%s)", domain, display_title, slug)
    return LinkMetadata(
        display_title=display_title,
        domain=domain,
        favicon=favicon_for(domain, favicon_template),
        slug=normalize_slug(slug) or slug,
        is_pinned=False,
    )


async def _require_text(
    collaborator: TextCollaborator,
    url: str,
    error: type[ResolutionError],
) -> str:
    try:
        text = await collaborator(url)
    except ResolutionError:
        raise
    except Exception as exc:
        raise error(f"{error.__name__} for {url}: {exc}") from exc
    text = (text or "").strip()
    if not text:
        raise error(f"Empty result for {url}")
    return text
