"""
=============================================================================
PER-CONNECTION WORKER THREADS
=============================================================================

Every accepted connection gets its own thread. There is no pool and no
queue: a burst of 500 connections means 500 threads. For a small static
file server that is an accepted trade-off, and it means a slow client
never delays anybody else.

=============================================================================
NOT FIRE-AND-FORGET
=============================================================================

A bare threading.Thread(target=...).start() loses track of the thread
and of any exception it dies with (it ends up on stderr, outside the
logging setup). ConnectionWorkers keeps a handle on each thread:

    ┌─────────────────────────────────────────────────────────────────────┐
    │                                                                      │
    │   spawn(handler, conn)                                               │
    │      │                                                               │
    │      ├──► thread registered in _threads                              │
    │      │                                                               │
    │      └──► _run():                                                    │
    │              try:     handler(conn)                                  │
    │              except:  logger.exception(...), conn.close()            │
    │              finally: thread removed from _threads                   │
    │                                                                      │
    │   join(timeout)  ──► wait for every live thread (used at shutdown)   │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

Shutdown never cancels a running connection. join() only bounds how long
the server waits for them; threads are daemons so a client that never
sends anything cannot keep the process alive forever.

=============================================================================
"""

import time
import logging
import threading
from typing import Callable, Optional

from .connection import Connection


logger = logging.getLogger(__name__)


class ConnectionWorkers:
    """
    Spawns and tracks one thread per connection.

    The lock only guards the bookkeeping set; handlers themselves share
    nothing mutable.

    Usage:
        workers = ConnectionWorkers()
        workers.spawn(handler, conn)
        ...
        workers.join(timeout=5.0)
    """

    def __init__(self, name_prefix: str = "conn"):
        self.name_prefix = name_prefix
        self._threads: set[threading.Thread] = set()
        self._lock = threading.Lock()

        # Metrics
        self.spawned = 0
        self.failed = 0

    def spawn(self, handler: Callable[[Connection], None], conn: Connection) -> threading.Thread:
        """
        Start a thread running handler(conn).

        Args:
            handler: Callable that owns the connection from here on.
            conn:    The accepted connection.

        Returns:
            The started thread.
        """
        thread = threading.Thread(
            target=self._run,
            args=(handler, conn),
            name=f"{self.name_prefix}-{conn.id}",
            daemon=True,
        )
        with self._lock:
            self._threads.add(thread)
            self.spawned += 1

        try:
            thread.start()
        except RuntimeError as e:
            # Thread limit of the OS reached
            with self._lock:
                self._threads.discard(thread)
            logger.error(f"[{conn.id}] Could not start handler thread: {e}")
            conn.close()
            raise

        return thread

    def _run(self, handler: Callable[[Connection], None], conn: Connection) -> None:
        start_time = time.time()
        try:
            handler(conn)
            logger.debug(f"[{conn.id}] Handled in {time.time() - start_time:.3f}s")
        except Exception as e:
            with self._lock:
                self.failed += 1
            logger.exception(f"[{conn.id}] Connection handler failed: {e}")
            conn.close()
        finally:
            with self._lock:
                self._threads.discard(threading.current_thread())

    @property
    def active(self) -> int:
        """Number of connection threads still running."""
        with self._lock:
            return len(self._threads)

    def join(self, timeout: Optional[float] = None) -> bool:
        """
        Wait for running connections to finish.

        Args:
            timeout: Overall limit in seconds. None waits forever.

        Returns:
            True if every thread finished, False if some are still running.
        """
        deadline = None if timeout is None else time.time() + timeout

        with self._lock:
            threads = list(self._threads)

        for thread in threads:
            remaining = None if deadline is None else max(0.0, deadline - time.time())
            thread.join(remaining)

        still_running = self.active
        if still_running:
            logger.warning(f"{still_running} connection(s) still running after shutdown wait")
        return still_running == 0
