"""Categorization engine: decides the PARA category of a new entry.

Decision order:
1. Text that looks like a URL is resolved to link metadata. On success the
   entry is a link filed under the manual category, or Resources.
2. Anything else (including links that failed to resolve) takes the manual
   category if one was chosen, otherwise the classifier's answer.
3. If the classifier is unavailable, the configured fallback is used.

Collaborator failures are logged and never raised to the caller.
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from paravault.capture.links import is_url
from paravault.shared.errors import ClassificationUnavailable, ResolutionError
from paravault.vault.models import Category, LinkMetadata

logger = logging.getLogger(__name__)

LinkResolver = Callable[[str], Awaitable[LinkMetadata]]
CategoryResolver = Callable[[str], Awaitable[Category]]


@dataclass(frozen=True)
class Classification:
    """Outcome of classifying one raw input."""

    category: Category
    link_metadata: LinkMetadata | None = None


async def classify(
    text: str,
    *,
    manual_category: Category | None = None,
    resolve_link: LinkResolver,
    resolve_category: CategoryResolver,
    fallback_category: Category = Category.RESOURCES,
) -> Classification | None:
    """Classify raw input into a category, attaching link metadata for URLs.

    Args:
        text: The raw input.
        manual_category: Category chosen by the user; ``None`` means automatic.
        resolve_link: Builds link metadata for a URL.
        resolve_category: External text classifier.
        fallback_category: Used when the classifier is unavailable.

    Returns:
        The classification, or ``None`` for empty input.
    """
    raw = text.strip()
    if not raw:
        return None

    if is_url(raw):
        link_metadata = await _try_resolve_link(raw, resolve_link)
        if link_metadata is not None:
            return Classification(
                category=manual_category or Category.RESOURCES,
                link_metadata=link_metadata,
            )

    if manual_category is not None:
        return Classification(category=manual_category)

    try:
        category = Category(await resolve_category(raw))
    except ClassificationUnavailable as exc:
        logger.warning("Classifier unavailable, using %s: %s", fallback_category, exc)
        return Classification(category=fallback_category)
    except Exception:
        logger.warning("Classifier failed, using %s", fallback_category, exc_info=True)
        return Classification(category=fallback_category)
    return Classification(category=category)


async def _try_resolve_link(url: str, resolve_link: LinkResolver) -> LinkMetadata | None:
    try:
        return await resolve_link(url)
    except ResolutionError as exc:
        logger.warning("Link resolution failed, treating as text: %s", exc)
    except Exception:
        logger.warning("Link resolution failed, treating as text: %s", url, exc_info=True)
    return None
