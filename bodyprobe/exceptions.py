class BodyProbeError(Exception):
    """Base class for fatal harness errors"""


class ListenerError(BodyProbeError):
    pass


class RequestBuildError(BodyProbeError):
    pass


class HarnessError(BodyProbeError):
    pass
