"""Reader for the content repository's ``config.yml``."""

import logging
import threading
import time
from collections.abc import Callable
from pathlib import Path

from pydantic import ValidationError

from dirstash.content.parser import read_yaml
from dirstash.core.exceptions import ParseError
from dirstash.models.site import SiteConfig

logger = logging.getLogger(__name__)

SITE_CONFIG_FILE = "config.yml"
SITE_CONFIG_TTL = 60.0


def read_site_config(content_path: Path) -> SiteConfig:
    """Load ``<content_path>/config.yml``; a missing file gives defaults.

    Raises:
        ParseError: If the file is not a valid YAML mapping.
    """
    try:
        data = read_yaml(content_path, SITE_CONFIG_FILE)
    except FileNotFoundError:
        return SiteConfig()

    if data is None:
        return SiteConfig()
    if not isinstance(data, dict):
        raise ParseError(content_path / SITE_CONFIG_FILE, "expected a mapping at the top level")
    try:
        return SiteConfig.model_validate(data)
    except ValidationError as e:
        raise ParseError(content_path / SITE_CONFIG_FILE, str(e)) from e


class SiteConfigReader:
    """Caches the site config for ``ttl`` seconds between reads."""

    def __init__(
        self,
        content_path: Path,
        ttl: float = SITE_CONFIG_TTL,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.content_path = content_path
        self.ttl = ttl
        self._clock = clock
        self._lock = threading.Lock()
        self._cached: tuple[float, SiteConfig] | None = None

    def get(self) -> SiteConfig:
        with self._lock:
            if self._cached is not None and self._clock() - self._cached[0] < self.ttl:
                return self._cached[1]
        logger.debug(f"Reading site config from {self.content_path}")
        config = read_site_config(self.content_path)
        with self._lock:
            self._cached = (self._clock(), config)
        return config

    def invalidate(self) -> None:
        with self._lock:
            self._cached = None
