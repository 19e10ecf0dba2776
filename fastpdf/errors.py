"""
Exceptions raised by the FastPDF client.

Every error this package raises derives from PDFServiceError, so callers can
catch all client failures with a single except clause.

Design principles:
- Never include the API key in exception messages
- Keep the server's status code and response body verbatim
- Validation errors are raised before any network call
"""

from typing import Optional


class PDFServiceError(Exception):
    """Base exception for all FastPDF client errors."""
    pass


class ServiceNotConfigured(PDFServiceError):
    """
    Raised when the client configuration is incomplete.

    Example:
        FASTPDF_API_KEY is not set when building a client from the
        environment.
    """
    pass


class PDFApiError(PDFServiceError):
    """
    Raised when the remote service answers with a non-2xx status.

    Attributes:
        status_code: Numeric HTTP status code
        reason: Reason phrase sent by the server
        response_text: Raw response body, unmodified
    """

    def __init__(self, status_code: int, reason: str, response_text: str):
        super().__init__(
            f"{reason}. Status Code: {status_code}, Response: {response_text}"
        )
        self.status_code = status_code
        self.reason = reason
        self.response_text = response_text


class PDFAuthError(PDFApiError):
    """
    Raised when the API key is rejected.

    Corresponds to HTTP 401/403.
    """
    pass


class PDFRateLimited(PDFApiError):
    """
    Raised when the service rate limit is exceeded (HTTP 429).

    Attributes:
        retry_after: Optional seconds the server asked us to wait
    """

    def __init__(
        self,
        status_code: int,
        reason: str,
        response_text: str,
        retry_after: Optional[int] = None,
    ):
        super().__init__(status_code, reason, response_text)
        self.retry_after = retry_after


class PDFServerError(PDFApiError):
    """Raised for HTTP 5xx responses."""
    pass


class PDFClientError(PDFApiError):
    """Raised for HTTP 4xx responses other than 401, 403 and 429."""
    pass


class PDFValidationError(PDFServiceError, ValueError):
    """
    Raised when arguments violate a precondition checked locally.

    Examples:
        Merging a single file, an unsupported image format, a background
        color that is not an RGB triple.
    """
    pass


class InvalidRenderData(PDFValidationError, TypeError):
    """Raised when render data is neither a mapping (list) nor a JSON file path."""
    pass


class PDFDecodeError(PDFServiceError, ValueError):
    """
    Raised when a payload cannot be decoded.

    Covers malformed zip archives and JSON bodies that do not match the
    expected structure.
    """
    pass
