import logging
import socket
import threading

from .exceptions import ListenerError

logger = logging.getLogger(__name__)

BUFFER_SIZE = 4096


def start_listener(config):
    """Bind and listen on config.host:config.port"""
    sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    try:
        sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
        sock.bind((config.host, config.port))
        sock.listen(1)
    except OSError as e:
        sock.close()
        raise ListenerError(f"failed to start listening: {e}") from e

    host, port = sock.getsockname()[:2]
    logger.debug(f"Listening on {host}:{port}")
    return sock


def read_limited(conn, limit, read_timeout):
    """Read up to `limit` bytes, stopping early on EOF or an idle timeout"""
    conn.settimeout(read_timeout)
    chunks = []
    remaining = limit
    while remaining > 0:
        try:
            chunk = conn.recv(min(BUFFER_SIZE, remaining))
        except socket.timeout:
            logger.debug(f"No data for {read_timeout}s, dumping what arrived")
            break
        if not chunk:
            break
        chunks.append(chunk)
        remaining -= len(chunk)
    return b"".join(chunks)


def serve_once(listener, out, limit=1024, read_timeout=2.0, accept_timeout=None):
    """Accept one connection, dump its first `limit` bytes to `out`, then hang up

    `out` is a binary stream. Returns the bytes that were dumped
    """
    listener.settimeout(accept_timeout)
    try:
        conn, addr = listener.accept()
    except OSError as e:
        raise ListenerError(f"failed to accept connection: {e}") from e

    with conn:
        logger.debug(f"Connection from {addr[0]}:{addr[1]}")
        data = read_limited(conn, limit, read_timeout)
        out.write(data)
        out.write(b"\n")
        out.flush()
    return data


class ServeThread(threading.Thread):
    """Runs serve_once in the background and re-raises its error on join"""

    def __init__(self, listener, out, limit=1024, read_timeout=2.0, accept_timeout=None):
        super().__init__(name="bodyprobe-listener", daemon=True)
        self.listener = listener
        self.out = out
        self.limit = limit
        self.read_timeout = read_timeout
        self.accept_timeout = accept_timeout
        self.data = None
        self.error = None

    def run(self):
        try:
            self.data = serve_once(
                self.listener,
                self.out,
                limit=self.limit,
                read_timeout=self.read_timeout,
                accept_timeout=self.accept_timeout,
            )
        except Exception as e:
            self.error = e

    def stop(self, timeout=1.0):
        """Abandon a pending accept and wait briefly for the thread to exit"""
        if not self.is_alive():
            return
        try:
            # Wakes a blocked accept on Linux
            self.listener.shutdown(socket.SHUT_RDWR)
        except OSError:
            pass
        super().join(timeout)

    def join(self, timeout=None):
        super().join(timeout)
        if self.error is not None:
            raise self.error
        return self.data
