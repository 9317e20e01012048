"""Show how request-body construction changes the bytes on the wire"""

from .config import HarnessConfig
from .exceptions import BodyProbeError, HarnessError, ListenerError, RequestBuildError
from .harness import run
from .patterns import RequestPattern, build_request

__version__ = "0.1.0"

__all__ = [
    "BodyProbeError",
    "HarnessConfig",
    "HarnessError",
    "ListenerError",
    "RequestBuildError",
    "RequestPattern",
    "build_request",
    "run",
]
