"""Application error taxonomy.

Every error raised across the request boundary derives from
``ArchitectError`` and carries the HTTP status it maps to. The FastAPI
exception handler in ``architect.main`` renders them as ``{"error": message}``.
"""


class ArchitectError(Exception):
    status_code: int = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(ArchitectError):
    """Malformed or missing input."""

    status_code = 400


class ConfigurationError(ArchitectError):
    """A required setting (usually a credential) is missing."""

    status_code = 500


class FetchError(ArchitectError):
    """The page could not be fetched by the hosted API or the browser."""

    status_code = 500


class UpstreamError(ArchitectError):
    """The chat completion provider failed."""

    status_code = 500


class NavigationTimeoutError(ArchitectError):
    """A single navigation attempt timed out.

    Recoverable: the navigation chain moves on to the next wait strategy.
    """

    status_code = 504

    def __init__(self, message: str, wait_until: str = "", timeout_ms: int = 0):
        super().__init__(message)
        self.wait_until = wait_until
        self.timeout_ms = timeout_ms
