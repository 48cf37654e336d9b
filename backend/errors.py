"""IP Weather Backend — Error types"""


class AppError(Exception):
    """Base error for the IP weather service."""

    status_code = 500


class InvalidClientIp(AppError):
    """No usable, publicly routable client address could be derived from the request."""

    status_code = 400

    def __init__(self, message: str = "Unable to determine client IP address"):
        super().__init__(message)


class UpstreamError(AppError):
    """The geolocation or weather service failed (network, non-2xx, bad body)."""

    status_code = 500

    def __init__(self, stage: str, message: str = ""):
        self.stage = stage
        super().__init__(message or f"Error fetching {stage} data")
