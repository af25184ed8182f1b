"""
=============================================================================
EXCEPTIONS
=============================================================================

Every error raised by this package derives from FacadeError, so callers
can catch the whole family with one clause.

    FacadeError
    ├── RequestError      - raw request target cannot be parsed (carries status)
    ├── FileMoveError     - uploaded file cannot be moved
    └── ConfigError       - invalid FacadeConfig values

Missing data is NOT an error. Accessors on the request facade return an
empty mapping, None or False instead of raising. Only malformed input that
makes the request unusable ends up here.
=============================================================================
"""


class FacadeError(Exception):
    """Base class for all httpfacade errors."""


class RequestError(FacadeError):
    """
    Raised when a raw request cannot be turned into a facade.

    Carries the HTTP status code a server should answer with, 400 Bad
    Request for a request target that cannot be parsed.
    """

    def __init__(self, message: str, status_code: int = 400):
        super().__init__(message)
        self.status_code = status_code


class FileMoveError(FacadeError):
    """Raised when an absent or invalid upload is moved."""

    def __init__(self, message: str, field_name: str = ""):
        super().__init__(message)
        self.field_name = field_name


class ConfigError(FacadeError, ValueError):
    """Raised by FacadeConfig.validate() for out-of-range settings."""
