"""JSON-backed vault snapshot store.

Persists the whole ``VaultState`` in a single JSON file. The store only
loads and saves snapshots; every change goes through the copy-on-write
functions in :mod:`paravault.vault.operations` first.
"""

from __future__ import annotations

import json
import logging
import os
import tempfile
from pathlib import Path

from paravault.vault.models import VaultState

logger = logging.getLogger(__name__)

STORE_FILENAME = ".paravault-store.json"


class VaultStore:
    """Loads and saves vault snapshots under a directory."""

    def __init__(self, directory: Path) -> None:
        self._path = directory / STORE_FILENAME

    @property
    def path(self) -> Path:
        return self._path

    def load(self) -> VaultState:
        """Read the stored snapshot, or an empty one if none exists.

        A corrupt file is logged and treated as empty; it is only replaced
        on the next save.
        """
        if not self._path.exists():
            return VaultState()
        try:
            raw = json.loads(self._path.read_text(encoding="utf-8"))
            return VaultState.model_validate(raw)
        except (ValueError, OSError):
            logger.warning("Corrupt vault store at %s, starting fresh", self._path)
            return VaultState()

    def save(self, state: VaultState) -> None:
        """Replace the stored snapshot with ``state``."""
        self._path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp = tempfile.mkstemp(dir=self._path.parent, prefix=".paravault-", suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(state.model_dump_json(indent=2))
            os.replace(tmp, self._path)
        except BaseException:
            Path(tmp).unlink(missing_ok=True)
            raise
        logger.debug(
            "Saved %d entries and %d projects to %s",
            len(state.entries),
            len(state.projects),
            self._path,
        )
