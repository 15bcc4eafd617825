"""Error taxonomy — every failure the core can classify."""
from image_ask.constants import ERR_CLIENT_STATUS, ERR_SERVER_ATTEMPTS


class AnalysisError(Exception):
    kind = "analysis"

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class EncodingError(AnalysisError):
    """Bad or unparseable file data."""

    kind = "encoding"


class ValidationError(AnalysisError):
    """Missing required input; raised before any network call."""

    kind = "validation"


class ResponseShapeError(AnalysisError):
    """Transport succeeded but the payload is not what we expect."""

    kind = "response_shape"


class RequestFailure(AnalysisError):
    kind = "request"


class ClientError(RequestFailure):
    """4xx: permanent, never retried."""

    kind = "client"

    def __init__(self, status: int) -> None:
        super().__init__(ERR_CLIENT_STATUS % status)
        self.status = status


class ServerError(RequestFailure):
    """5xx or other non-success status that outlived every attempt."""

    kind = "server"

    def __init__(self, attempts: int) -> None:
        super().__init__(ERR_SERVER_ATTEMPTS % attempts)
        self.attempts = attempts


class NetworkError(RequestFailure):
    kind = "network"
