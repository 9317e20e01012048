import logging
import os
import time

import requests

from .client import is_peer_hangup, send_request
from .exceptions import HarnessError
from .listener import ServeThread, start_listener
from .patterns import RequestPattern, build_request

logger = logging.getLogger(__name__)

SEPARATOR = b"\n------\n\n"


def request(session, config, pattern, filename, out, server):
    """Build and send one request for `pattern`, reading the body from `filename`

    `server` is started once the file is open, just before sending
    """
    out.write(f"Request pattern: {pattern}\n\n".encode())
    out.flush()

    try:
        f = open(filename, "rb")
    except OSError as e:
        raise HarnessError(f"failed to open file: {e}") from e

    with f:
        size = None
        if pattern.needs_len:
            try:
                size = os.stat(filename).st_size
            except OSError as e:
                raise HarnessError(f"failed to stat file: {e}") from e

        prepared = build_request(pattern, f, filename, config.url, size=size)
        server.start()
        time.sleep(config.settle_delay)
        try:
            send_request(session, prepared, timeout=config.request_timeout)
        except requests.RequestException as e:
            if not is_peer_hangup(e):
                raise
            logger.debug(f"Listener hung up: {e}")


def run(config, filename, out, patterns=None):
    """Send every pattern in turn to a fresh one-shot listener connection

    Returns the raw bytes the listener captured, one entry per pattern
    """
    if patterns is None:
        patterns = RequestPattern
    patterns = sorted(RequestPattern(p) for p in patterns)
    listener = start_listener(config)
    if config.port == 0:
        config = config.with_port(listener.getsockname()[1])
    dumps = []
    try:
        with requests.Session() as session:
            for pattern in patterns:
                server = ServeThread(
                    listener,
                    out,
                    limit=config.dump_limit,
                    read_timeout=config.read_timeout,
                    accept_timeout=config.request_timeout,
                )
                try:
                    request(session, config, pattern, filename, out, server)
                except Exception:
                    server.stop()
                    raise
                dumps.append(server.join())
                out.write(SEPARATOR)
                out.flush()
    finally:
        listener.close()
    return dumps
