"""
Configuration - Settings read from the environment.

    RINGSOLVE_ENV             development | production (default development)
    RINGSOLVE_CATALOG         path to a JSON attack catalog (default: built-in)
    RINGSOLVE_SEARCH_WORKERS  threads per optimal search (default 1)
    RINGSOLVE_TT_ENTRIES      transposition table size (default 200000)
    RINGSOLVE_MAX_DEPTH       cap for unbounded searches (default none)
    RINGSOLVE_SOLVE_TIMEOUT   seconds before a solve is cancelled (default none)
    RINGSOLVE_LOG_LEVEL       logging level name (default INFO)
    ALLOWED_ORIGINS           comma-separated CORS origins (default *)
"""

from __future__ import annotations
from dataclasses import dataclass
import os
from typing import Mapping

from .catalog import Catalog, default_catalog, load_catalog
from .errors import RingSolveError


class ConfigError(RingSolveError):
    """An environment variable holds a value of the wrong kind."""
    code: str = "INVALID_CONFIG"


@dataclass(frozen=True)
class Settings:
    env: str = "development"
    catalog_path: str | None = None
    search_workers: int = 1
    table_entries: int = 200_000
    max_depth: int | None = None
    solve_timeout: float | None = None
    log_level: str = "INFO"
    allowed_origins: tuple[str, ...] = ("*",)

    @property
    def is_production(self) -> bool:
        return self.env == "production"

    def catalog(self) -> Catalog:
        """The configured catalog, or the built-in one."""
        if self.catalog_path:
            return load_catalog(self.catalog_path)
        return default_catalog()


def _int(environ: Mapping[str, str], name: str, default: int | None, minimum: int) -> int | None:
    raw = environ.get(name, "").strip()
    if not raw:
        return default
    try:
        value = int(raw)
    except ValueError:
        raise ConfigError(f"{name} must be an integer, got '{raw}'", context={"name": name})
    if value < minimum:
        raise ConfigError(f"{name} must be at least {minimum}, got {value}", context={"name": name})
    return value


def _float(environ: Mapping[str, str], name: str) -> float | None:
    raw = environ.get(name, "").strip()
    if not raw:
        return None
    try:
        value = float(raw)
    except ValueError:
        raise ConfigError(f"{name} must be a number, got '{raw}'", context={"name": name})
    if value <= 0:
        raise ConfigError(f"{name} must be positive, got {value}", context={"name": name})
    return value


def load_settings(environ: Mapping[str, str] | None = None) -> Settings:
    """Read Settings from ``environ`` (defaults to os.environ)."""
    if environ is None:
        environ = os.environ
    origins = environ.get("ALLOWED_ORIGINS", "*")
    return Settings(
        env=environ.get("RINGSOLVE_ENV", "development"),
        catalog_path=environ.get("RINGSOLVE_CATALOG") or None,
        search_workers=_int(environ, "RINGSOLVE_SEARCH_WORKERS", 1, minimum=1),
        table_entries=_int(environ, "RINGSOLVE_TT_ENTRIES", 200_000, minimum=1),
        max_depth=_int(environ, "RINGSOLVE_MAX_DEPTH", None, minimum=0),
        solve_timeout=_float(environ, "RINGSOLVE_SOLVE_TIMEOUT"),
        log_level=environ.get("RINGSOLVE_LOG_LEVEL", "INFO").upper(),
        allowed_origins=tuple(o.strip() for o in origins.split(",") if o.strip()),
    )
