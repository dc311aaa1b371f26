"""
Exception types shared by services, analyzers and the request layer
"""


class AnalyzerrError(Exception):
    """Base error carrying the HTTP status code the request layer should use."""

    status_code = 500

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code


class ServiceUnavailableError(AnalyzerrError):
    """Upstream service is unreachable, timed out, misconfigured or not configured."""

    status_code = 503


class NotFoundError(AnalyzerrError):
    """Requested library or item does not exist upstream."""

    status_code = 404
