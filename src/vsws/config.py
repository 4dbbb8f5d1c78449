"""
=============================================================================
SERVER CONFIGURATION
=============================================================================

All settings live in one ServerConfig value that is passed explicitly to
the server and everything it builds. No module reads settings from globals.

=============================================================================
CONFIGURATION SOURCES
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │   Priority (highest to lowest):                                     │
    │                                                                      │
    │   1. Command-line arguments                                         │
    │      └── python -m vsws --port 3000                                 │
    │                                                                      │
    │   2. Environment variables                                          │
    │      └── VSWS_PORT=3000 python -m vsws                              │
    │                                                                      │
    │   3. Default values (in this dataclass)                             │
    └─────────────────────────────────────────────────────────────────────┘

=============================================================================
"""

import os
from dataclasses import dataclass
from typing import Optional

LOG_FORMATS = ("text", "json")


@dataclass
class ServerConfig:
    """
    Configuration for the web server.

    NETWORK
    - host, port, backlog

    REQUEST HANDLING
    - buffer_size, timeout

    CONTENT
    - root, index_file, error_template, template_dir

    LOGGING
    - log_level, log_format

    LIFECYCLE
    - shutdown_timeout
    """

    # ─────────────────────────────────────────────────────────────────────
    # NETWORK SETTINGS
    # ─────────────────────────────────────────────────────────────────────

    host: str = "127.0.0.1"
    """IP address to bind to. "0.0.0.0" listens on all interfaces."""

    port: int = 9999
    """Port number to listen on."""

    backlog: int = 128
    """Maximum number of connections queued by the kernel before accept()."""

    # ─────────────────────────────────────────────────────────────────────
    # REQUEST HANDLING
    # ─────────────────────────────────────────────────────────────────────

    buffer_size: int = 1024
    """
    Size of the single read that receives the request, in bytes.
    Anything the client sends beyond this is not looked at.
    """

    timeout: float = 30.0
    """
    Read deadline in seconds. A client that sends nothing within this
    window is disconnected without a response.
    """

    # ─────────────────────────────────────────────────────────────────────
    # CONTENT
    # ─────────────────────────────────────────────────────────────────────

    root: str = "templates"
    """Content root. Every served file is resolved under this directory."""

    index_file: str = "index.html"
    """Resource served for "/" (and for an empty request-target)."""

    error_template: str = "error.html"
    """File name of the error page template."""

    template_dir: Optional[str] = None
    """Directory holding error_template. None means the content root."""

    server_name: str = "Very Simple Web Server"
    """Value of the Server header on successful responses."""

    # ─────────────────────────────────────────────────────────────────────
    # LOGGING
    # ─────────────────────────────────────────────────────────────────────

    log_level: str = "INFO"
    """Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)."""

    log_format: str = "text"
    """Access log format: 'text' (human) or 'json' (log aggregators)."""

    # ─────────────────────────────────────────────────────────────────────
    # LIFECYCLE
    # ─────────────────────────────────────────────────────────────────────

    shutdown_timeout: float = 5.0
    """Seconds to wait for in-flight connections when shutting down."""

    @property
    def error_template_path(self) -> str:
        """Full path of the error page template."""
        return os.path.join(self.template_dir or self.root, self.error_template)

    @classmethod
    def from_env(cls) -> "ServerConfig":
        """
        Create configuration from environment variables.

        VSWS_HOST         Server host (default: 127.0.0.1)
        VSWS_PORT         Server port (default: 9999)
        VSWS_ROOT         Content root (default: templates)
        VSWS_BUFFER_SIZE  Request read size in bytes (default: 1024)
        VSWS_TIMEOUT      Read deadline in seconds (default: 30)
        VSWS_LOG_LEVEL    Logging level (default: INFO)
        VSWS_LOG_FORMAT   Access log format (default: text)
        """
        defaults = cls()
        return cls(
            host=os.getenv("VSWS_HOST", defaults.host),
            port=int(os.getenv("VSWS_PORT", str(defaults.port))),
            root=os.getenv("VSWS_ROOT", defaults.root),
            buffer_size=int(os.getenv("VSWS_BUFFER_SIZE", str(defaults.buffer_size))),
            timeout=float(os.getenv("VSWS_TIMEOUT", str(defaults.timeout))),
            log_level=os.getenv("VSWS_LOG_LEVEL", defaults.log_level),
            log_format=os.getenv("VSWS_LOG_FORMAT", defaults.log_format),
        )

    def validate(self) -> None:
        """
        Validate configuration values at startup, before any socket is
        created.

        Raises:
            ValueError: On the first invalid setting.
        """
        if not 0 < self.port < 65536:
            raise ValueError(f"Invalid port: {self.port}. Must be 1-65535.")

        if self.buffer_size < 128:
            raise ValueError("buffer_size must be >= 128")

        if self.timeout <= 0:
            raise ValueError("timeout must be > 0")

        if not self.index_file:
            raise ValueError("index_file must not be empty")

        if self.log_format not in LOG_FORMATS:
            raise ValueError(
                f"Invalid log_format: {self.log_format!r}. Must be one of {LOG_FORMATS}."
            )
