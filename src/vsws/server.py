"""
=============================================================================
WEB SERVER
=============================================================================

Ties the pieces together:

    ServerConfig
         │
         ▼
    WebServer.run()
         │
         ├──► logging setup, startup banner
         │
         └──► SocketServer.start(self._dispatch)          (main thread)
                    │
                    └──► for each accepted Connection:
                            Thread(target=ConnectionHandler.handle)
                                 │
                                 └──► read → parse → respond → close

=============================================================================
CONCURRENCY MODEL
=============================================================================

One thread per connection. The accept loop only starts the thread and
goes straight back to accept(), so a client that connects and then sends
nothing ties up its own thread for at most `timeout` seconds and nobody
else's.

Connections share nothing mutable: the handler, content store and error
page renderer are read-only after construction. The only lock guards the
set of live threads, which exists so shutdown can wait for in-flight
responses.

=============================================================================
"""

import logging
import threading
import time
from typing import Optional

from .access_log import AccessLogger
from .config import ServerConfig
from .core import Connection, SocketServer
from .handlers import ConnectionHandler, ContentStore, ErrorPageRenderer


logger = logging.getLogger(__name__)


class WebServer:
    """
    Static file server: one GET per connection, thread per connection.

    Usage:
        server = WebServer(ServerConfig(root="public", port=8000))
        server.run()   # blocks until Ctrl+C / SIGTERM / shutdown()
    """

    def __init__(self, config: Optional[ServerConfig] = None):
        """
        Args:
            config: Server configuration. Uses defaults if not provided.

        Raises:
            ValueError: If the configuration is invalid or the content root
                        does not exist.
        """
        self.config = config or ServerConfig()
        self.config.validate()

        self._socket_server = SocketServer(self.config)
        self._handler = ConnectionHandler(
            self.config,
            content=ContentStore(self.config.root),
            error_pages=ErrorPageRenderer(self.config.error_template_path),
            access_log=AccessLogger(log_format=self.config.log_format),
        )

        self._workers: set[threading.Thread] = set()
        self._workers_lock = threading.Lock()

    @property
    def address(self) -> tuple[str, int]:
        """Bound (host, port) while running."""
        return self._socket_server.address

    @property
    def active_connections(self) -> int:
        with self._workers_lock:
            return len(self._workers)

    # =========================================================================
    # LIFECYCLE
    # =========================================================================

    def run(self, host: Optional[str] = None, port: Optional[int] = None):
        """
        Start the server. Blocks until shutdown.

        Args:
            host: Override config.host
            port: Override config.port
        """
        if host is not None:
            self.config.host = host
        if port is not None:
            self.config.port = port

        self._setup_logging()

        try:
            self._socket_server.start(self._dispatch, on_ready=self._print_startup_banner)
        except KeyboardInterrupt:
            logger.info("Received keyboard interrupt")
        finally:
            self._shutdown()

    def wait_until_ready(self, timeout: Optional[float] = None) -> bool:
        """Block until the listener is accepting connections."""
        return self._socket_server.wait_until_ready(timeout)

    def shutdown(self):
        """Ask the server to stop. Callable from any thread."""
        self._socket_server.shutdown()

    def _setup_logging(self):
        level = getattr(logging, self.config.log_level.upper(), logging.INFO)

        logging.basicConfig(
            level=level,
            format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )

        logging.getLogger("vsws").setLevel(level)

    def _print_startup_banner(self):
        host, port = self.address
        print(f"Very Simple Web Server (VSWS) running on http://{host}:{port}")
        print(f"Serving files from: {self._handler.content.root_dir}")
        print("Press Ctrl+C to stop the server")

    def _shutdown(self):
        """
        1. Stop accepting (the socket server has already left its loop)
        2. Wait up to shutdown_timeout for in-flight connections
        """
        logger.info("Shutting down server...")

        with self._workers_lock:
            pending = list(self._workers)

        deadline = time.monotonic() + self.config.shutdown_timeout
        for worker in pending:
            worker.join(timeout=max(0.0, deadline - time.monotonic()))
            if worker.is_alive():
                logger.warning(f"{worker.name} still running after shutdown timeout")

        logger.info("Server stopped")

    # =========================================================================
    # CONNECTION DISPATCH
    # =========================================================================

    def _dispatch(self, conn: Connection):
        """
        Called on the accept thread for every new connection. Starts a
        daemon thread and returns immediately.
        """
        if not self._socket_server.is_running:
            conn.close()
            return

        worker = threading.Thread(
            target=self._serve,
            args=(conn,),
            name=f"conn-{conn.id}",
            daemon=True,
        )

        with self._workers_lock:
            self._workers.add(worker)

        worker.start()

    def _serve(self, conn: Connection):
        """Worker thread body: handle one connection, then deregister."""
        try:
            self._handler.handle(conn)
        finally:
            with self._workers_lock:
                self._workers.discard(threading.current_thread())


def create_server(config: Optional[ServerConfig] = None) -> WebServer:
    """Factory for WebServer instances."""
    return WebServer(config)
