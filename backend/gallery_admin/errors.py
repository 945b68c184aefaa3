# Error types raised by the relay and mapped to JSON responses in routes.py


class GalleryAdminError(Exception):
    """Base error. ``message`` is safe to show to the client."""

    status_code = 500
    message = 'Internal server error'

    def __init__(self, message: str = None):
        if message is not None:
            self.message = message
        super().__init__(self.message)


class ValidationError(GalleryAdminError):
    status_code = 400
    message = 'Invalid request'


class AuthenticationError(GalleryAdminError):
    status_code = 401
    message = 'Unauthorized'


class RateLimitedError(GalleryAdminError):
    status_code = 429
    message = 'Too many attempts. Try again later.'


class ConfigurationError(GalleryAdminError):
    """Stored secrets or settings are malformed."""
    status_code = 500


class UpstreamError(GalleryAdminError):
    """The content store failed. The detail is kept for the server log only."""

    status_code = 500
    message = 'Upstream request failed'

    def __init__(self, detail: str = '', status: int = None):
        super().__init__()
        self.detail = detail
        self.status = status

    def __str__(self):
        return f'{self.message} (status={self.status}): {self.detail}'


class ConflictError(UpstreamError):
    """The expected sha no longer matches the file in the store."""

    status_code = 409
    message = 'Conflict: the file changed upstream, reload and retry'
