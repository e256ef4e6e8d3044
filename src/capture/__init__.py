"""Capture pipeline: turning raw input into classified entries."""

from paravault.capture.classifier import Classification, classify  # noqa: F401
from paravault.capture.links import (  # noqa: F401
    extract_domain,
    is_url,
    resolve_link,
)
