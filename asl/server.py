"""A socket server that serves each client in its own thread (or one after another)."""

from __future__ import annotations

import threading
import time
from abc import ABC, abstractmethod

from asl.address import InetAddress
from asl.sockets import LocalSocket, Socket, SocketSet

_POLL_INTERVAL = 0.25
_TCP_BACKLOG = 40
_LOCAL_BACKLOG = 5


class SocketServer(ABC):
    """Accepts connections on one or more bound sockets and hands each client to ``serve``.

    Subclasses implement ``serve``; the client socket is closed when it returns.
    """

    def __init__(self, sequential: bool = False) -> None:
        self._sockets = SocketSet()
        self._sequential = sequential
        self._request_stop = False
        self._running = False
        self._num_clients = 0
        self._lock = threading.Lock()
        self._thread: threading.Thread | None = None
        self._socket_error = ""

    def bind(self, host: str, port: int) -> bool:
        """Listen for TCP connections on an address and port."""
        server = Socket()
        if server.bind(host, port):
            server.listen(_TCP_BACKLOG)
            self._sockets.add(server)
            return True
        self._socket_error = server.error_msg()
        return False

    def bind_path(self, path: str) -> bool:
        """Listen for local socket connections at a file system path."""
        server = LocalSocket()
        if server.bind(path):
            server.listen(_LOCAL_BACKLOG)
            self._sockets.add(server)
            return True
        self._socket_error = server.error_msg()
        return False

    @abstractmethod
    def serve(self, client: Socket) -> None:
        """Talk to one connected client."""

    def _change_clients(self, delta: int) -> None:
        with self._lock:
            self._num_clients += delta

    def _serve_client(self, client: Socket) -> None:
        try:
            self.serve(client)
        finally:
            client.close()
            self._change_clients(-1)

    def _loop(self) -> None:
        try:
            while True:
                n = self._sockets.wait_input(_POLL_INTERVAL)
                if n > 0:
                    for listener in self._sockets.active():
                        client = listener.accept()
                        if client.handle() < 0:
                            continue
                        self._change_clients(1)
                        if self._sequential:
                            self._serve_client(client)
                        else:
                            threading.Thread(
                                target=self._serve_client, args=(client,), daemon=True
                            ).start()
                if self._request_stop or n < 0:
                    break
        finally:
            self._running = False

    def start(self, nonblocking: bool = False) -> None:
        """Accept clients until stopped; in a background thread if ``nonblocking``."""
        self._running = True
        self._request_stop = False
        if nonblocking:
            self._thread = threading.Thread(target=self._loop, daemon=True)
            self._thread.start()
        else:
            self._loop()

    def stop(self, sync: bool = False) -> None:
        """Ask the server to stop; with ``sync``, wait until it and all clients are done."""
        self._request_stop = True
        if sync:
            while True:
                time.sleep(0.1)
                if not self._running and self.num_clients() <= 0:
                    break

    def socket_error(self) -> str:
        """Return the error text of the last failed bind."""
        return self._socket_error

    def num_clients(self) -> int:
        """Return the number of clients being served."""
        with self._lock:
            return self._num_clients

    def running(self) -> bool:
        """Tell whether the accept loop is running."""
        return self._running

    def addresses(self) -> list[InetAddress]:
        """Return the local addresses of the bound sockets."""
        return [s.local_address() for s in self._sockets]