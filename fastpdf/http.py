"""
HTTP transport for the FastPDF client.

Attaches the API key to every request, sends it through a reused httpx
connection pool and maps non-2xx responses to PDFApiError subclasses.

Logging Guidelines:
- Logs method + host + path (no tokens/keys)
- On errors: status code + truncated response (max 500 chars)
- Never logs Authorization headers or API keys

No retries: a failed call surfaces exactly one error. httpx transport
exceptions (timeouts, connection errors) propagate unchanged.
"""

import logging
from typing import Any, Dict, List, Optional, Tuple
from urllib.parse import urlparse

import httpx

from .errors import (
    PDFApiError,
    PDFAuthError,
    PDFRateLimited,
    PDFServerError,
    PDFClientError,
)

logger = logging.getLogger(__name__)

# Maximum response text length to include in log lines
MAX_ERROR_RESPONSE_LENGTH = 500

FilesType = List[Tuple[str, Tuple[Optional[str], Any, Optional[str]]]]


class _BaseHTTPClient:
    """
    Shared request preparation and error mapping.

    Subclasses own the actual httpx client (sync or async).
    """

    def __init__(
        self,
        base_url: str,
        api_key: str,
        timeout: float = 30.0,
    ):
        """
        Initialize the transport.

        Args:
            base_url: Base URL including the version segment
            api_key: API key sent verbatim in the Authorization header
            timeout: Request timeout in seconds
        """
        self.base_url = base_url.rstrip('/')
        self.timeout = timeout
        self.default_headers = {'Authorization': api_key}

    def _sanitize_headers(self, headers: Dict[str, str]) -> Dict[str, str]:
        """
        Remove sensitive headers for logging.

        Args:
            headers: Original headers

        Returns:
            Sanitized headers safe for logging
        """
        sensitive_keys = {'authorization', 'x-api-key', 'api-key', 'token'}
        return {
            k: '***' if k.lower() in sensitive_keys else v
            for k, v in headers.items()
        }

    def _truncate_response(self, text: str) -> str:
        """Truncate response text for log lines."""
        if len(text) > MAX_ERROR_RESPONSE_LENGTH:
            return text[:MAX_ERROR_RESPONSE_LENGTH] + "..."
        return text

    def _build_url(self, path: str) -> str:
        """Build full URL from base URL and path."""
        return f"{self.base_url}/{path.lstrip('/')}"

    def _log_request(self, method: str, url: str) -> None:
        parsed = urlparse(url)
        logger.debug(
            f"{method} {parsed.scheme}://{parsed.netloc}{parsed.path} "
            f"headers={self._sanitize_headers(self.default_headers)}"
        )

    def _raise_for_status(self, response: httpx.Response) -> None:
        """
        Map non-2xx responses to PDFApiError subclasses.

        - 401/403 → PDFAuthError
        - 429 → PDFRateLimited (with retry_after)
        - 5xx → PDFServerError
        - other non-2xx → PDFClientError

        The response body must already be read.

        Raises:
            PDFApiError: For any non-2xx status
        """
        if response.is_success:
            return

        status = response.status_code
        reason = response.reason_phrase or ''
        body = response.text

        logger.warning(
            f"FastPDF request failed (HTTP {status} {reason}): "
            f"{self._truncate_response(body)}"
        )

        if status in (401, 403):
            raise PDFAuthError(status, reason, body)

        if status == 429:
            retry_after = response.headers.get('Retry-After')
            try:
                retry_after = int(retry_after) if retry_after else None
            except (ValueError, TypeError):
                retry_after = None
            raise PDFRateLimited(status, reason, body, retry_after=retry_after)

        if status >= 500:
            raise PDFServerError(status, reason, body)

        if status >= 400:
            raise PDFClientError(status, reason, body)

        # 1xx/3xx that were not followed
        raise PDFApiError(status, reason, body)


class HTTPClient(_BaseHTTPClient):
    """
    Synchronous authenticated transport.

    One httpx.Client (and its connection pool) is reused across calls.
    """

    def __init__(
        self,
        base_url: str,
        api_key: str,
        timeout: float = 30.0,
        client: Optional[httpx.Client] = None,
    ):
        """
        Initialize the transport.

        Args:
            base_url: Base URL including the version segment
            api_key: API key sent verbatim in the Authorization header
            timeout: Request timeout in seconds
            client: Optional pre-built httpx.Client to share a pool
        """
        super().__init__(base_url, api_key, timeout)
        self._owns_client = client is None
        self._client = client or httpx.Client(timeout=timeout)

    def request(
        self,
        method: str,
        path: str,
        *,
        params: Optional[Dict[str, Any]] = None,
        json: Optional[Any] = None,
        files: Optional[FilesType] = None,
        timeout: Optional[float] = None,
    ) -> httpx.Response:
        """
        Send an authenticated request.

        Args:
            method: HTTP method (GET, POST, DELETE)
            path: URL path relative to base_url
            params: Query parameters
            json: JSON body
            files: Multipart parts as httpx file tuples
            timeout: Optional per-call timeout override

        Returns:
            Response with a 2xx status

        Raises:
            PDFApiError: On any non-2xx status
        """
        url = self._build_url(path)
        self._log_request(method, url)

        response = self._client.request(
            method=method,
            url=url,
            headers=self.default_headers,
            params=params,
            json=json,
            files=files or None,
            timeout=self.timeout if timeout is None else timeout,
        )
        self._raise_for_status(response)
        return response

    def close(self) -> None:
        """Close the connection pool if this transport created it."""
        if self._owns_client:
            self._client.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_value, traceback):
        self.close()


class AsyncHTTPClient(_BaseHTTPClient):
    """
    Asynchronous authenticated transport built on httpx.AsyncClient.

    Cancelling the awaiting task cancels the in-flight request.
    """

    def __init__(
        self,
        base_url: str,
        api_key: str,
        timeout: float = 30.0,
        client: Optional[httpx.AsyncClient] = None,
    ):
        super().__init__(base_url, api_key, timeout)
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(timeout=timeout)

    async def request(
        self,
        method: str,
        path: str,
        *,
        params: Optional[Dict[str, Any]] = None,
        json: Optional[Any] = None,
        files: Optional[FilesType] = None,
        timeout: Optional[float] = None,
    ) -> httpx.Response:
        """
        Send an authenticated request.

        Same contract as HTTPClient.request().
        """
        url = self._build_url(path)
        self._log_request(method, url)

        response = await self._client.request(
            method=method,
            url=url,
            headers=self.default_headers,
            params=params,
            json=json,
            files=files or None,
            timeout=self.timeout if timeout is None else timeout,
        )
        self._raise_for_status(response)
        return response

    async def aclose(self) -> None:
        """Close the connection pool if this transport created it."""
        if self._owns_client:
            await self._client.aclose()

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_value, traceback):
        await self.aclose()
