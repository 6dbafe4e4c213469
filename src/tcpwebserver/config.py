"""
=============================================================================
SERVER CONFIGURATION
=============================================================================

Centralized configuration for the web server.

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
    │      └── python -m tcpwebserver 3000 --root ./public               │
    │                                                                      │
    │   2. Environment variables                                          │
    │      └── WEBSERVER_PORT=3000 python -m tcpwebserver                │
    │                                                                      │
    │   3. Default values (in this dataclass)                            │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

=============================================================================
WHAT IS DELIBERATELY MISSING
=============================================================================

There is no socket read timeout. A client that connects and never sends
a byte holds its handler thread until it goes away. That is a known
limitation of the single-read design, not a setting someone forgot.

There is no worker limit either: every accepted connection gets its own
thread.

=============================================================================
"""

import os
import logging
from dataclasses import dataclass
from typing import Optional


LOG_FORMATS = ("text", "json")


@dataclass
class ServerConfig:
    """
    Configuration for the web server.

    =========================================================================
    CONFIGURATION GROUPS
    =========================================================================

    NETWORK SETTINGS
    - host, port, backlog, buffer_size

    CONTENT
    - root_dir, create_root, index_file

    LIFECYCLE
    - drain_timeout

    LOGGING
    - log_level, log_format

    =========================================================================
    """

    # ─────────────────────────────────────────────────────────────────────
    # NETWORK SETTINGS
    # ─────────────────────────────────────────────────────────────────────

    host: str = "0.0.0.0"
    """
    The IP address to bind to.
    - "0.0.0.0" - All network interfaces (default)
    - "127.0.0.1" - Localhost only
    """

    port: int = 8080
    """
    The port number to listen on. 0 lets the OS pick a free port (tests).
    """

    backlog: int = 128
    """
    Maximum number of queued connections before the OS refuses new ones.
    """

    buffer_size: int = 4096
    """
    Size of the single read performed per connection, in bytes.
    The request line must fit in it.
    """

    # ─────────────────────────────────────────────────────────────────────
    # CONTENT
    # ─────────────────────────────────────────────────────────────────────

    root_dir: str = "webroot"
    """
    Directory to serve. The only part of the file system clients can read.
    """

    create_root: bool = True
    """
    Create root_dir with sample pages if it does not exist.
    When False, a missing root_dir is a startup error.
    """

    index_file: str = "index.html"
    """
    File served for "/".
    """

    # ─────────────────────────────────────────────────────────────────────
    # LIFECYCLE
    # ─────────────────────────────────────────────────────────────────────

    drain_timeout: float = 5.0
    """
    Seconds to wait, after the listener closes, for in-flight connections
    to finish. They are never cancelled; this only bounds how long stop
    blocks.
    """

    # ─────────────────────────────────────────────────────────────────────
    # LOGGING
    # ─────────────────────────────────────────────────────────────────────

    log_level: str = "INFO"
    """
    Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL).
    """

    log_format: str = "text"
    """
    Access log format: 'text' (Apache-like) or 'json'.
    """

    # ─────────────────────────────────────────────────────────────────────
    # SERVER IDENTITY
    # ─────────────────────────────────────────────────────────────────────

    server_name: str = "TCPWebServer/1.0"
    """
    Server header value, also the signature line on error pages.
    """

    @classmethod
    def from_env(cls, environ: Optional[dict] = None) -> "ServerConfig":
        """
        Create configuration from environment variables.

        =====================================================================
        ENVIRONMENT VARIABLES
        =====================================================================

        WEBSERVER_HOST        Bind address (default: 0.0.0.0)
        WEBSERVER_PORT        Port (default: 8080)
        WEBSERVER_ROOT        Web root directory (default: webroot)
        WEBSERVER_LOG_LEVEL   Logging level (default: INFO)
        WEBSERVER_LOG_FORMAT  Access log format (default: text)

        =====================================================================

        Args:
            environ: Mapping to read instead of os.environ.
        """
        env = os.environ if environ is None else environ
        return cls(
            host=env.get("WEBSERVER_HOST", "0.0.0.0"),
            port=int(env.get("WEBSERVER_PORT", "8080")),
            root_dir=env.get("WEBSERVER_ROOT", "webroot"),
            log_level=env.get("WEBSERVER_LOG_LEVEL", "INFO"),
            log_format=env.get("WEBSERVER_LOG_FORMAT", "text"),
        )

    def validate(self) -> None:
        """
        Validate configuration values.

        Called by WebServer at construction: a bad port should fail at
        startup, not when the first client shows up.

        Raises:
            ValueError: On the first invalid value.
        """
        if not 0 <= self.port < 65536:
            raise ValueError(f"Invalid port: {self.port}. Must be 0-65535.")

        if self.backlog < 1:
            raise ValueError("backlog must be >= 1")

        if self.buffer_size < 256:
            raise ValueError("buffer_size must be >= 256")

        if not self.root_dir:
            raise ValueError("root_dir must not be empty")

        if not self.index_file or "/" in self.index_file or "\\" in self.index_file:
            raise ValueError(f"index_file must be a bare file name: {self.index_file!r}")

        if self.drain_timeout < 0:
            raise ValueError("drain_timeout must be >= 0")

        if not isinstance(logging.getLevelName(self.log_level.upper()), int):
            raise ValueError(f"Unknown log level: {self.log_level}")

        if self.log_format not in LOG_FORMATS:
            raise ValueError(f"log_format must be one of {LOG_FORMATS}")


# =============================================================================
# MODULE SUMMARY
# =============================================================================
#
# 1. Type-safe configuration with a dataclass
# 2. Environment variable support (WEBSERVER_*)
# 3. Validation at startup (fail-fast)
#
# There are no timeout or worker-count settings on purpose; see the
# module docstring.
# =============================================================================
