"""
=============================================================================
TCPWEBSERVER - A Static File Web Server On Raw TCP Sockets
=============================================================================

Serves the files of one directory over HTTP, using nothing but the
standard library socket module: no http.server, no framework.

=============================================================================
PROJECT OVERVIEW
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │                   TCP WEB SERVER ARCHITECTURE                        │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │   1. RAW SOCKET PROGRAMMING                                          │
    │      - TCP socket creation and binding                               │
    │      - Accept loop with graceful shutdown                            │
    │      - One read and one write per connection                         │
    │                                                                      │
    │   2. MINIMAL HTTP                                                    │
    │      - Request line parsing (method, target)                         │
    │      - Status line + five headers + body                             │
    │      - Connection: close after every response                        │
    │                                                                      │
    │   3. FILE SYSTEM SAFETY                                              │
    │      - Path traversal detection                                      │
    │      - Extension allow-list (.html, .css, .js)                       │
    │                                                                      │
    │   4. CONCURRENCY                                                     │
    │      - One thread per connection, tracked and joined at shutdown     │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

=============================================================================
PACKAGE STRUCTURE
=============================================================================

    tcpwebserver/
    ├── __init__.py          # This file - package exports
    ├── __main__.py          # CLI entry point (python -m tcpwebserver)
    ├── server.py            # WebServer orchestrator
    ├── config.py            # ServerConfig dataclass
    ├── bootstrap.py         # Sample web root on first run
    ├── access_log.py        # One log line per request
    ├── core/                # Networking
    │   ├── socket_server.py # Listener loop
    │   ├── connection.py    # Connection wrapper + state machine
    │   ├── handler.py       # Per-connection pipeline
    │   └── workers.py       # Thread per connection
    ├── http/                # Protocol
    │   ├── request.py       # Request line parsing
    │   ├── response.py      # Response building
    │   ├── mime_types.py    # Extension → content type
    │   ├── errors.py        # Exceptions carrying HTTP statuses
    │   └── status_codes.py  # Status code enum
    └── handlers/
        └── static.py        # Path resolution + file serving

=============================================================================
"""

__version__ = "1.0.0"

from .server import WebServer
from .config import ServerConfig

__all__ = ["WebServer", "ServerConfig", "__version__"]
