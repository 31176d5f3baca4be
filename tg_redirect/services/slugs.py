"""
Slug Configuration

Loads and validates the redirect rules from a JSON file:

    {"slugs": [{"slug": "sales-bot", "type": "bot", "mode": "302",
                "destination": "SalesBot", "active": true}]}

Design Decisions:
- Pydantic models validate each entry; a bad file fails at startup
- Duplicate slugs are rejected
- Inactive slugs are kept but never returned by get()
"""

import json
import logging
import re
from pathlib import Path
from typing import Optional, Union

from pydantic import BaseModel, Field, ValidationError, field_validator, model_validator

from tg_redirect.core.exceptions import ConfigurationError
from tg_redirect.core.types import DestinationType, RedirectMode

logger = logging.getLogger(__name__)

SLUG_PATTERN = re.compile(r"[a-zA-Z0-9_-]+")
USERNAME_PATTERN = re.compile(r"[a-zA-Z0-9_]+")
MAX_START_PARAM_LENGTH = 64

DEFAULT_SEARCH_PATHS = (
    "tg_redirect/config/slugs.json",
    "config/slugs.json",
    "slugs.json",
)


class SlugConfig(BaseModel):
    """One redirect rule."""

    slug: str = Field(..., min_length=1)
    type: DestinationType
    mode: RedirectMode
    destination: str = Field(..., min_length=1)
    description: Optional[str] = None
    active: bool = True
    default_start_param: Optional[str] = Field(default=None, alias="defaultStartParam")

    model_config = {"populate_by_name": True}

    @field_validator("slug")
    @classmethod
    def _check_slug(cls, value: str) -> str:
        if not SLUG_PATTERN.fullmatch(value):
            raise ValueError("slug must contain only [a-zA-Z0-9_-]")
        return value

    @field_validator("default_start_param")
    @classmethod
    def _check_start_param(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return value
        if len(value) > MAX_START_PARAM_LENGTH or not SLUG_PATTERN.fullmatch(value):
            raise ValueError("defaultStartParam must be at most 64 chars of [A-Za-z0-9_-]")
        return value

    @model_validator(mode="after")
    def _check_destination(self) -> "SlugConfig":
        pattern = SLUG_PATTERN if self.type == "invite" else USERNAME_PATTERN
        if not pattern.fullmatch(self.destination):
            kind = "invite hash" if self.type == "invite" else "username"
            raise ValueError(f"{kind} contains invalid characters")
        return self


class SlugsFile(BaseModel):
    slugs: list[SlugConfig]


def find_slugs_config_path(explicit: Optional[str] = None) -> Path:
    """
    Locate slugs.json.

    An explicit path (SLUGS_CONFIG_PATH) wins; otherwise the working
    directory and the package are searched.
    """
    if explicit:
        return Path(explicit)

    candidates = [Path.cwd() / p for p in DEFAULT_SEARCH_PATHS]
    candidates.append(Path(__file__).resolve().parent.parent / "config" / "slugs.json")
    for candidate in candidates:
        if candidate.exists():
            return candidate
    return candidates[0]


class SlugRegistry:
    """
    In-memory view of the slug configuration.

    Usage:
        registry = SlugRegistry.from_file("config/slugs.json")
        config = registry.get("sales-bot")
    """

    def __init__(self, slugs: Optional[list[SlugConfig]] = None):
        self._slugs: dict[str, SlugConfig] = {}
        self._path: Optional[Path] = None
        self._replace(slugs or [])

    def _replace(self, slugs: list[SlugConfig]) -> None:
        by_slug: dict[str, SlugConfig] = {}
        for config in slugs:
            if config.slug in by_slug:
                raise ConfigurationError(f"Duplicate slug found: {config.slug}")
            by_slug[config.slug] = config
        self._slugs = by_slug

    @classmethod
    def from_file(cls, path: Union[str, Path]) -> "SlugRegistry":
        registry = cls()
        registry.load(path)
        return registry

    def load(self, path: Union[str, Path]) -> None:
        """
        Load and validate a slugs file, replacing the current rules.

        Raises:
            ConfigurationError: Missing file, invalid JSON or invalid entries
        """
        path = Path(path)
        if not path.exists():
            raise ConfigurationError(f"Slugs config file not found: {path}")

        try:
            data = json.loads(path.read_text(encoding="utf-8"))
        except json.JSONDecodeError as e:
            raise ConfigurationError(f"Invalid JSON in slugs config: {path}") from e

        try:
            parsed = SlugsFile.model_validate(data)
        except ValidationError as e:
            raise ConfigurationError(f"Invalid slugs config {path}: {e}") from e

        self._replace(parsed.slugs)
        self._path = path
        logger.info(f"Loaded {len(self._slugs)} slugs from {path}")

    def reload(self) -> None:
        """Re-read the file the registry was loaded from."""
        if self._path is None:
            raise ConfigurationError("Slug registry was not loaded from a file")
        self.load(self._path)

    def get(self, slug: str) -> Optional[SlugConfig]:
        """Return the active config for a slug, or None."""
        config = self._slugs.get(slug)
        if config is None or not config.active:
            return None
        return config

    def all_active(self) -> list[SlugConfig]:
        return [config for config in self._slugs.values() if config.active]
