# sitebuilder/core/errors.py


class SiteBuilderError(Exception):
    """Base class for errors raised by the relay and its client."""


class RequestValidationFailed(SiteBuilderError):
    """A required request field is missing or blank. Answered with 400."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class MissingCredentialError(SiteBuilderError):
    """V0_API_KEY is not configured; no upstream call may be attempted."""


class UpstreamError(SiteBuilderError):
    """The v0 Platform API call failed or answered with an error."""

    def __init__(self, message: str, status_code=None, payload=None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.payload = payload


class RelayError(SiteBuilderError):
    """The relay answered a client request with a non-2xx status."""

    def __init__(self, message: str, status_code=None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
