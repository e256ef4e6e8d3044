"""Error hierarchy for paravault.

Every collaborator failure is recoverable: the engine and services catch
these at the point of origin and continue with a fallback.
"""

from __future__ import annotations


class ParaVaultError(Exception):
    """Base error for paravault."""


class CollaboratorError(ParaVaultError):
    """An external collaborator (classifier, summarizer, ...) failed."""


class ClassificationUnavailable(CollaboratorError):
    """Free text could not be classified into a PARA category."""


class DecompositionFailed(CollaboratorError):
    """A project could not be broken down into sub-tasks."""


class ResolutionError(CollaboratorError):
    """Link metadata could not be constructed for a URL."""


class LinkResolutionFailed(ResolutionError):
    """The URL was malformed or could not be summarized."""


class SlugGenerationFailed(ResolutionError):
    """No slug could be generated."""
