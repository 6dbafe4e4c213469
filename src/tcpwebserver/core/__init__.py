"""
=============================================================================
CORE SERVER COMPONENTS
=============================================================================

The networking layer: everything between the listening socket and the
HTTP code.

    ┌─────────────────────────────────────────────────────────────────────┐
    │                         SOCKET SERVER                                │
    │  ─────────────────────────────────────────────────────────────────  │
    │  • Binds IP:PORT and runs the accept() loop                          │
    │  • Wraps each client socket in a Connection                          │
    │  • Stops on shutdown(), SIGINT or SIGTERM                            │
    └─────────────────────────────────────────────────────────────────────┘
                                    │
                                    │ Hands off new connections
                                    ▼
    ┌─────────────────────────────────────────────────────────────────────┐
    │                      CONNECTION WORKERS                              │
    │  ─────────────────────────────────────────────────────────────────  │
    │  • One tracked thread per connection                                 │
    │  • Failures logged, never propagated to the accept loop              │
    │  • join() bounds the wait at shutdown                                │
    └─────────────────────────────────────────────────────────────────────┘
                                    │
                                    │ Runs on the worker thread
                                    ▼
    ┌─────────────────────────────────────────────────────────────────────┐
    │                      CONNECTION HANDLER                              │
    │  ─────────────────────────────────────────────────────────────────  │
    │  • Single read → parse → resolve → respond → close                   │
    │  • Walks the Connection through its state machine                    │
    └─────────────────────────────────────────────────────────────────────┘

=============================================================================
"""

from .connection import Connection, ConnectionState
from .handler import ConnectionHandler
from .socket_server import SocketServer
from .workers import ConnectionWorkers

__all__ = [
    "Connection",
    "ConnectionState",
    "ConnectionHandler",
    "ConnectionWorkers",
    "SocketServer",
]
