"""CLI context management for database connections and shared state."""

import logging
import os
import sys
from dataclasses import dataclass, field

from legacysearch import LegacySearch

DEFAULT_DATABASE_URL = "sqlite:///./legacysearch.db"


def get_database_url(url: str | None) -> str:
    """Resolve record store URL from CLI arg, environment variable, or default.

    Priority:
    1. Explicit URL argument
    2. LEGACYSEARCH_URL environment variable
    3. Default: sqlite:///./legacysearch.db
    """
    if url:
        return url
    if env_url := os.getenv("LEGACYSEARCH_URL"):
        return env_url
    return DEFAULT_DATABASE_URL


def get_index_url(url: str | None, database_url: str) -> str:
    """Resolve search index URL; falls back to the record store URL."""
    if url:
        return url
    if env_url := os.getenv("LEGACYSEARCH_INDEX_URL"):
        return env_url
    return database_url


def configure_logging(verbose: bool = False) -> None:
    """Send logs to stderr so stdout stays clean for --json output."""
    level_name = "DEBUG" if verbose else os.getenv("LEGACYSEARCH_LOG_LEVEL", "WARNING")
    level = logging.getLevelName(level_name.upper())
    if not isinstance(level, int):
        level = logging.WARNING
    logging.basicConfig(
        level=level,
        stream=sys.stderr,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    logging.getLogger("legacysearch").setLevel(level)


@dataclass
class CLIContext:
    """Shared context for CLI commands.

    Manages the application lifecycle and output preferences.
    """

    database_url: str
    index_url: str
    echo: bool
    json_output: bool
    _app: LegacySearch | None = field(default=None, init=False, repr=False)

    def get_app(self) -> LegacySearch:
        """Get or create the application (lazy initialization).

        Returns:
            LegacySearch instance
        """
        if self._app is None:
            self._app = LegacySearch(self.database_url, index_url=self.index_url, echo=self.echo)
        return self._app

    def close(self) -> None:
        """Close database connections if open."""
        if self._app is not None:
            self._app.close()
            self._app = None
