"""
=============================================================================
SERVER CONFIGURATION
=============================================================================

All settings live in one frozen dataclass that is built once at startup
and handed to the server. Worker threads only ever read it.

=============================================================================
CONFIGURATION SOURCES
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │                    CONFIGURATION HIERARCHY                          │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │   Priority (highest to lowest):                                     │
    │                                                                      │
    │   1. Command-line arguments                                         │
    │      └── statichttpd --listen 0.0.0.0:8080                          │
    │                                                                      │
    │   2. Environment variables                                          │
    │      └── STATICHTTPD_THREADS_MAX=8 statichttpd                      │
    │                                                                      │
    │   3. Configuration file (TOML, in the working directory)            │
    │      └── web.toml                                                   │
    │                                                                      │
    │   4. Default values (in this dataclass)                             │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

A web.toml looks like:

    listen_addr = "127.0.0.1:7878"
    webroot = "webroot"
    threads_max = 100
    request_max_bytes = 1000

=============================================================================
FAIL FAST
=============================================================================

Every value is type-checked before the server binds its socket. A bad
config stops the process at startup with a clear message instead of
surfacing as a strange error in a worker thread later.

=============================================================================
"""

import logging
import os
import tomllib
from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Any, Mapping, Optional, Union


logger = logging.getLogger(__name__)


ENV_PREFIX = "STATICHTTPD_"

DEFAULT_CONFIG_FILE = "web.toml"

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")
LOG_FORMATS = ("text", "json")


class ConfigError(ValueError):
    """Configuration is missing, unreadable or has a value of the wrong type."""


@dataclass(frozen=True)
class ServerConfig:
    """
    Configuration for the static file server.

    =========================================================================
    CONFIGURATION GROUPS
    =========================================================================

    NETWORK
    - listen_addr

    FILES
    - working_dir, webroot, error_page

    LIMITS
    - threads_max, request_max_bytes

    LOGGING
    - log_level, log_format

    =========================================================================
    """

    # ─────────────────────────────────────────────────────────────────────
    # NETWORK
    # ─────────────────────────────────────────────────────────────────────

    listen_addr: str = "127.0.0.1:7878"
    """
    Address to bind, as "host:port". IPv6 hosts go in brackets:
    "[::1]:7878". Port 0 lets the OS pick a free port.
    """

    # ─────────────────────────────────────────────────────────────────────
    # FILES
    # ─────────────────────────────────────────────────────────────────────

    working_dir: str = "data"
    """
    Directory the process runs in. web.toml, the webroot and error.html
    are all looked up relative to it.
    """

    webroot: str = "webroot"
    """Directory files are served from."""

    error_page: str = "error.html"
    """Error page template, re-read on every error response."""

    # ─────────────────────────────────────────────────────────────────────
    # LIMITS
    # ─────────────────────────────────────────────────────────────────────

    threads_max: int = 100
    """
    Number of worker threads, and so the number of connections handled
    at the same time. Further connections wait in the OS listen backlog.
    """

    request_max_bytes: int = 1000
    """
    Largest request accepted, in bytes. A read that fills this many bytes
    is answered with 413 Payload Too Large.
    """

    # ─────────────────────────────────────────────────────────────────────
    # LOGGING
    # ─────────────────────────────────────────────────────────────────────

    log_level: str = "INFO"
    """DEBUG, INFO, WARNING, ERROR or CRITICAL."""

    log_format: str = "text"
    """Access log format: "text" (one readable line) or "json"."""

    # =========================================================================
    # DERIVED VALUES
    # =========================================================================

    @property
    def host(self) -> str:
        """Host part of listen_addr, without IPv6 brackets."""
        return _split_listen_addr(self.listen_addr)[0]

    @property
    def port(self) -> int:
        """Port part of listen_addr."""
        return _split_listen_addr(self.listen_addr)[1]

    # =========================================================================
    # CONSTRUCTION
    # =========================================================================

    @classmethod
    def from_mapping(cls, values: Mapping[str, Any]) -> "ServerConfig":
        """
        Build a config from a plain mapping (e.g. a parsed TOML table).

        Keys that are not config fields are ignored with a warning, so an
        old web.toml with extra settings still loads.
        """
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(values) - known)
        if unknown:
            logger.warning(f"Ignoring unknown config keys: {', '.join(unknown)}")

        config = cls(**{k: v for k, v in values.items() if k in known})
        config.validate()
        return config

    @classmethod
    def from_env(cls, base: Optional["ServerConfig"] = None,
                 environ: Optional[Mapping[str, str]] = None) -> "ServerConfig":
        """
        Overlay environment variables onto ``base`` (defaults if omitted).

        =====================================================================
        ENVIRONMENT VARIABLES
        =====================================================================

        STATICHTTPD_LISTEN_ADDR        host:port to bind
        STATICHTTPD_WEBROOT            Webroot directory
        STATICHTTPD_ERROR_PAGE         Error page template
        STATICHTTPD_THREADS_MAX        Worker threads
        STATICHTTPD_REQUEST_MAX_BYTES  Largest accepted request
        STATICHTTPD_LOG_LEVEL          Logging level
        STATICHTTPD_LOG_FORMAT         Access log format

        =====================================================================
        """
        base = base or cls()
        environ = os.environ if environ is None else environ

        overrides: dict[str, Any] = {}
        for f in fields(cls):
            if f.name == "working_dir":
                continue  # Chosen on the command line, before anything is read
            raw = environ.get(ENV_PREFIX + f.name.upper())
            if raw is None:
                continue
            if f.type is int:
                try:
                    overrides[f.name] = int(raw)
                except ValueError as e:
                    raise ConfigError(f"{ENV_PREFIX}{f.name.upper()} must be an integer, got {raw!r}") from e
            else:
                overrides[f.name] = raw

        config = replace(base, **overrides)
        config.validate()
        return config

    def validate(self) -> None:
        """
        Check every value, raising ConfigError on the first bad one.
        """
        for name in ("listen_addr", "working_dir", "webroot", "error_page", "log_level", "log_format"):
            value = getattr(self, name)
            if not isinstance(value, str) or not value:
                raise ConfigError(f"{name} must be a non-empty string, got {value!r}")

        for name in ("threads_max", "request_max_bytes"):
            value = getattr(self, name)
            # bool is a subclass of int, but "threads_max = true" is a mistake
            if not isinstance(value, int) or isinstance(value, bool) or value < 1:
                raise ConfigError(f"{name} must be a positive integer, got {value!r}")

        _split_listen_addr(self.listen_addr)

        if self.log_level.upper() not in LOG_LEVELS:
            raise ConfigError(f"log_level must be one of {', '.join(LOG_LEVELS)}, got {self.log_level!r}")

        if self.log_format not in LOG_FORMATS:
            raise ConfigError(f"log_format must be one of {', '.join(LOG_FORMATS)}, got {self.log_format!r}")


def _split_listen_addr(listen_addr: str) -> tuple[str, int]:
    """Split "host:port" / "[v6host]:port" into (host, port)."""
    host, sep, port_text = listen_addr.rpartition(":")
    if not sep or not host:
        raise ConfigError(f"listen_addr must look like host:port, got {listen_addr!r}")

    if host.startswith("[") and host.endswith("]"):
        host = host[1:-1]

    try:
        port = int(port_text)
    except ValueError as e:
        raise ConfigError(f"Invalid port in listen_addr {listen_addr!r}") from e

    if not 0 <= port < 65536:
        raise ConfigError(f"Invalid port: {port}. Must be 0-65535.")

    return host, port


def read_config_file(path: Union[str, Path], required: bool = False) -> dict[str, Any]:
    """
    Parse a TOML config file.

    A missing file is only an error when ``required`` is set; otherwise
    it just means "use the defaults".
    """
    path = Path(path)
    try:
        with path.open("rb") as f:
            return tomllib.load(f)
    except FileNotFoundError as e:
        if required:
            raise ConfigError(f"Config file not found: {path}") from e
        logger.debug(f"No config file at {path}, using defaults")
        return {}
    except tomllib.TOMLDecodeError as e:
        raise ConfigError(f"Could not parse {path}: {e}") from e
    except OSError as e:
        raise ConfigError(f"Could not read {path}: {e}") from e


def load_config(
    path: Union[str, Path] = DEFAULT_CONFIG_FILE,
    overrides: Optional[Mapping[str, Any]] = None,
    required: bool = False,
    environ: Optional[Mapping[str, str]] = None,
) -> ServerConfig:
    """
    Build the final config: defaults ← file ← environment ← overrides.

    Args:
        path: TOML file to read.
        overrides: Values that win over everything else (from the CLI).
            None values are skipped, so unset CLI flags can be passed as-is.
        required: Fail if ``path`` does not exist.
        environ: Environment to read (os.environ by default).

    Raises:
        ConfigError: Any missing, unreadable or mistyped value.
    """
    config = ServerConfig.from_mapping(read_config_file(path, required=required))
    config = ServerConfig.from_env(config, environ=environ)

    if overrides:
        config = replace(config, **{k: v for k, v in overrides.items() if v is not None})
        config.validate()

    return config
