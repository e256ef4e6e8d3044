"""Unified configuration loaded from .paravault.toml, env vars, and CLI flags.

Loading order: defaults → TOML file → env vars → CLI flags.
"""

from __future__ import annotations

import logging
import os
import tomllib
from pathlib import Path

from paravault.capture.links import DEFAULT_FAVICON_TEMPLATE
from paravault.vault.archive import ArchivePolicy
from paravault.vault.models import Category
from pydantic import BaseModel, Field, ValidationError

logger = logging.getLogger(__name__)

CONFIG_FILENAME = ".paravault.toml"
GLOBAL_CONFIG = Path.home() / ".config" / "paravault" / "config.toml"


class StoreConfig(BaseModel):
    """[store] section."""

    directory: str = "./vault"

    @property
    def path(self) -> Path:
        return Path(self.directory).expanduser()


class LLMConfig(BaseModel):
    """[llm] section."""

    model: str | None = None
    timeout: int = 60


class CaptureConfig(BaseModel):
    """[capture] section."""

    fallback_category: Category = Category.RESOURCES
    favicon_template: str = DEFAULT_FAVICON_TEMPLATE


class ArchiveConfig(BaseModel):
    """[archive] section."""

    policy: ArchivePolicy = ArchivePolicy.MANUAL


class ParaVaultConfig(BaseModel):
    """Top-level configuration."""

    store: StoreConfig = Field(default_factory=StoreConfig)
    llm: LLMConfig = Field(default_factory=LLMConfig)
    capture: CaptureConfig = Field(default_factory=CaptureConfig)
    archive: ArchiveConfig = Field(default_factory=ArchiveConfig)


def load_config(path: str | Path | None = None) -> ParaVaultConfig:
    """Load configuration from a TOML file.

    Search order:
    1. Explicit path (if provided)
    2. .paravault.toml in CWD
    3. ~/.config/paravault/config.toml

    Then overlay environment variables.

    Args:
        path: Explicit path to a TOML file.

    Returns:
        Merged ParaVaultConfig.
    """
    data: dict[str, object] = {}

    if path is not None:
        toml_path = Path(path)
        if toml_path.exists():
            data = _load_toml(toml_path)
        else:
            logger.warning("Config file not found: %s", toml_path)
    else:
        for candidate in (Path(".") / CONFIG_FILENAME, GLOBAL_CONFIG):
            if candidate.exists():
                data = _load_toml(candidate)
                logger.info("Loaded config from %s", candidate)
                break

    config = _validate(data)
    return _apply_env_vars(config)


def merge_cli_overrides(config: ParaVaultConfig, **cli_kwargs: object) -> ParaVaultConfig:
    """Overlay explicitly-set CLI flags onto the config.

    Only values that are not None are applied.
    """
    data = config.model_dump()

    mapping: dict[str, tuple[str, str]] = {
        "store_directory": ("store", "directory"),
        "model": ("llm", "model"),
        "timeout": ("llm", "timeout"),
        "archive_policy": ("archive", "policy"),
        "fallback_category": ("capture", "fallback_category"),
    }

    for key, value in cli_kwargs.items():
        if value is None or key not in mapping:
            continue
        section, field = mapping[key]
        data[section][field] = value

    return ParaVaultConfig.model_validate(data)


def _load_toml(path: Path) -> dict[str, object]:
    """Load a TOML file and return the data dict."""
    try:
        with open(path, "rb") as f:
            return tomllib.load(f)
    except (tomllib.TOMLDecodeError, OSError) as exc:
        logger.warning("Failed to parse %s: %s", path, exc)
        return {}


def _validate(data: dict[str, object]) -> ParaVaultConfig:
    if not data:
        return ParaVaultConfig()
    try:
        return ParaVaultConfig.model_validate(data)
    except ValidationError as exc:
        logger.warning("Invalid configuration, using defaults: %s", exc)
        return ParaVaultConfig()


def _apply_env_vars(config: ParaVaultConfig) -> ParaVaultConfig:
    """Apply environment variable overrides to config."""
    data = config.model_dump()

    env_mapping: dict[str, tuple[str, str]] = {
        "PARAVAULT_DIR": ("store", "directory"),
        "PARAVAULT_MODEL": ("llm", "model"),
        "PARAVAULT_TIMEOUT": ("llm", "timeout"),
        "PARAVAULT_ARCHIVE_POLICY": ("archive", "policy"),
        "PARAVAULT_FALLBACK_CATEGORY": ("capture", "fallback_category"),
    }

    for env_var, (section, field) in env_mapping.items():
        value = os.environ.get(env_var)
        if value is not None:
            data[section][field] = value

    try:
        return ParaVaultConfig.model_validate(data)
    except ValidationError as exc:
        logger.warning("Ignoring invalid environment overrides: %s", exc)
        return config
