import http.client
import logging

import requests

logger = logging.getLogger(__name__)

# Errors the listener causes on purpose by hanging up mid-request
HANGUP_ERRORS = (
    ConnectionResetError,
    ConnectionAbortedError,
    BrokenPipeError,
    http.client.RemoteDisconnected,
)


def is_peer_hangup(exc):
    """Check whether `exc` is, or wraps, the listener dropping the connection"""
    seen = set()
    pending = [exc]
    while pending:
        err = pending.pop()
        if not isinstance(err, BaseException) or id(err) in seen:
            continue
        seen.add(id(err))
        if isinstance(err, HANGUP_ERRORS):
            return True
        # requests and urllib3 nest the socket error in args or .reason
        pending.extend(err.args)
        pending.append(getattr(err, "reason", None))
        pending.append(err.__cause__)
        pending.append(err.__context__)
    return False


def send_request(session, prepared, timeout=10.0):
    """Send a prepared request and discard whatever comes back"""
    logger.debug(f"{prepared.method} {prepared.url}")
    with session.send(prepared, timeout=timeout, stream=True) as resp:
        for _ in resp.iter_content(chunk_size=8192):
            pass
        logger.debug(f"Response: {resp.status_code}")
        return resp.status_code
