"""
=============================================================================
VSWS - Very Simple Web Server
=============================================================================

A minimal static file server on raw sockets: one HTTP GET per connection,
one thread per connection, files served from a single content root.

=============================================================================
PACKAGE STRUCTURE
=============================================================================

    vsws/
    ├── __init__.py          # This file - package exports
    ├── __main__.py          # CLI entry point (python -m vsws)
    ├── server.py            # WebServer: wiring, dispatch, shutdown
    ├── config.py            # ServerConfig dataclass
    ├── access_log.py        # Per-connection access log
    ├── core/                # Sockets
    │   ├── socket_server.py # Listener and accept loop
    │   └── connection.py    # Single read, writes, close
    ├── http/                # Protocol (pure functions, no I/O)
    │   ├── request.py       # Request parsing
    │   ├── paths.py         # Request-target → safe relative path
    │   ├── mime_types.py    # Extension → Content-Type
    │   ├── response.py      # Response header framing
    │   └── status_codes.py  # Status codes and reason phrases
    └── handlers/            # Per-connection behaviour
        ├── connection_handler.py  # read → respond → close
        ├── content.py       # Content root access
        └── error_pages.py   # Error page rendering

=============================================================================
QUICK START
=============================================================================

    from vsws import WebServer, ServerConfig

    server = WebServer(ServerConfig(root="public", port=8000))
    server.run()

Or from the command line:

    python -m vsws --root public --port 8000

=============================================================================
"""

from .server import WebServer, create_server
from .config import ServerConfig

__version__ = "1.0.0"
__all__ = [
    "WebServer",
    "create_server",
    "ServerConfig",
]
