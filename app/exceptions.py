"""Domain errors raised by services and translated to HTTP by app.main."""


class SacredSixError(Exception):
    """Base class for all domain errors."""

    status_code = 500

    def __init__(self, message: str = ""):
        super().__init__(message)
        self.message = message


class ValidationError(SacredSixError):
    """Caller violated an input contract (e.g. more than six task ids)."""

    status_code = 400


class NotFoundError(SacredSixError):
    status_code = 404


class AuthorizationError(SacredSixError):
    status_code = 403


class UpstreamError(SacredSixError):
    """The external suggestion source failed, timed out or returned garbage."""

    status_code = 502


class RecommendationParseError(UpstreamError):
    pass


class RecommendationBoundsError(UpstreamError):
    pass
