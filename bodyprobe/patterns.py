import logging
from enum import IntEnum

import requests

from .exceptions import RequestBuildError

logger = logging.getLogger(__name__)

BLOCK_SIZE = 32 * 1024


class RequestPattern(IntEnum):
    SINGLE_PART_WITH_LEN = 1
    SINGLE_PART_WITHOUT_LEN = 2
    SINGLE_PART_WITH_LEN_WRONG = 3
    SINGLE_PART_WITH_BUFFER = 4
    SINGLE_PART_EXPLICITLY_CHUNKED = 5
    MULTIPART = 6

    @property
    def label(self):
        return _LABELS[self]

    @property
    def needs_len(self):
        """Whether the builder for this pattern takes the file size"""
        return self in (
            RequestPattern.SINGLE_PART_WITH_LEN,
            RequestPattern.SINGLE_PART_WITH_LEN_WRONG,
        )

    def __str__(self):
        return self.label

    @classmethod
    def parse(cls, text):
        """Look up a pattern by value ("3") or name ("multipart")"""
        text = text.strip()
        if text.isdigit():
            try:
                return cls(int(text))
            except ValueError:
                pass
        else:
            try:
                return cls[text.upper().replace("-", "_")]
            except KeyError:
                pass
        choices = ", ".join(f"{p.value}={p.name.lower()}" for p in cls)
        raise ValueError(f"unknown request pattern {text!r} (choose from {choices})")


_LABELS = {
    RequestPattern.SINGLE_PART_WITH_LEN: "single-part with Content-Length",
    RequestPattern.SINGLE_PART_WITHOUT_LEN: "single-part without Content-Length",
    RequestPattern.SINGLE_PART_WITH_LEN_WRONG: (
        "single-part with wrong Content-Length (setting the header directly)"
    ),
    RequestPattern.SINGLE_PART_WITH_BUFFER: (
        "single-part without Content-Length, using an in-memory buffer"
    ),
    RequestPattern.SINGLE_PART_EXPLICITLY_CHUNKED: (
        "single-part using an in-memory buffer, "
        "setting 'Transfer-Encoding: chunked' explicitly"
    ),
    RequestPattern.MULTIPART: "multipart",
}


def _blocks(body):
    # A bare iterator has no length requests can discover
    return iter(lambda: body.read(BLOCK_SIZE), b"")


def _prepare(method, url, **kwargs):
    try:
        return requests.Request(method, url, **kwargs).prepare()
    except (requests.RequestException, ValueError) as e:
        raise RequestBuildError(f"failed to create HTTP request: {e}") from e


def singlepart_with_len(url, body, length):
    """PUT streaming the file handle, with Content-Length declared"""
    prepared = _prepare("PUT", url, data=body)
    # requests sizes the handle on its own; the declared length wins
    prepared.headers["Content-Length"] = str(length)
    prepared.headers.pop("Transfer-Encoding", None)
    return prepared


def singlepart_with_len_wrong(url, body, length):
    """PUT streaming blocks, with the Content-Length header forced on"""
    return _prepare(
        "PUT", url, data=_blocks(body), headers={"Content-Length": str(length)}
    )


def singlepart_without_len(url, body):
    """PUT streaming blocks of unknown total length"""
    return _prepare("PUT", url, data=_blocks(body))


def singlepart_with_buffer(url, body):
    """PUT after reading the whole file into memory"""
    buf = body.read()
    return _prepare("PUT", url, data=buf)


def singlepart_explicitly_chunked(url, body):
    buf = body.read()
    # Wrapped so requests frames it as chunks instead of sizing the bytes
    return _prepare(
        "PUT", url, data=iter([buf]), headers={"Transfer-Encoding": "chunked"}
    )


def multipart_request(url, body, filename):
    """POST a multipart/form-data body with a single "file" part"""
    prepared = _prepare("POST", url, files={"file": (filename, body)})
    logger.info(f"multipart body: {len(prepared.body)} bytes")
    return prepared


def build_request(pattern, body, filename, url, size=None):
    """Build the request for `pattern` from an open binary file handle"""
    pattern = RequestPattern(pattern)
    if pattern.needs_len and size is None:
        raise RequestBuildError(f"{pattern.name.lower()} needs the body size")

    if pattern is RequestPattern.SINGLE_PART_WITH_LEN:
        return singlepart_with_len(url, body, size)
    if pattern is RequestPattern.SINGLE_PART_WITH_LEN_WRONG:
        return singlepart_with_len_wrong(url, body, size)
    if pattern is RequestPattern.SINGLE_PART_WITHOUT_LEN:
        return singlepart_without_len(url, body)
    if pattern is RequestPattern.SINGLE_PART_WITH_BUFFER:
        return singlepart_with_buffer(url, body)
    if pattern is RequestPattern.SINGLE_PART_EXPLICITLY_CHUNKED:
        return singlepart_explicitly_chunked(url, body)
    return multipart_request(url, body, filename)
