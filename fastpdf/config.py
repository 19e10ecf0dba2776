"""
Client configuration for FastPDF.

Settings are an immutable value computed once when a client is built. The
base URL is derived from the root URL and the API version at construction
and never changes afterwards.

Environment variables understood by get_settings() / get_api_key():
- FASTPDF_API_KEY: API key sent verbatim in the Authorization header
- FASTPDF_BASE_URL: root URL of the service
- FASTPDF_API_VERSION: version path segment (default "v1")
- FASTPDF_TIMEOUT: request timeout in seconds
"""

import os
from dataclasses import dataclass, field
from typing import Mapping, Optional, Tuple

from .errors import ServiceNotConfigured


DEFAULT_ROOT_URL = "https://data.fastpdfservice.com"
DEFAULT_API_VERSION = "v1"
DEFAULT_TIMEOUT = 30.0  # seconds
DEFAULT_TEXT_ENCODING = "utf-8"

SUPPORTED_IMAGE_FORMATS: Tuple[str, ...] = (
    "jpeg", "png", "gif", "bmp", "tiff", "webp", "svg", "ico", "pdf",
    "psd", "ai", "eps", "cr2", "nef", "sr2", "orf", "rw2", "dng",
    "arw", "heic",
)

SUPPORTED_BARCODE_FORMATS: Tuple[str, ...] = (
    "codabar", "code128", "code39", "ean", "ean13", "ean13-guard",
    "ean14", "ean8", "ean8-guard", "gs1", "gs1_128", "gtin", "isbn",
    "isbn10", "isbn13", "issn", "itf", "jan", "nw-7", "pzn", "upc",
    "upca",
)

ENV_API_KEY = "FASTPDF_API_KEY"
ENV_BASE_URL = "FASTPDF_BASE_URL"
ENV_API_VERSION = "FASTPDF_API_VERSION"
ENV_TIMEOUT = "FASTPDF_TIMEOUT"


def build_base_url(root_url: str, api_version: str) -> str:
    """Join the root URL and version segment with exactly one slash."""
    if root_url.endswith("/"):
        return f"{root_url}{api_version}"
    return f"{root_url}/{api_version}"


@dataclass(frozen=True)
class ClientSettings:
    """
    Immutable settings shared by every call of a client.

    Attributes:
        root_url: Service root URL
        api_version: Version path segment appended to root_url
        timeout: Request timeout in seconds
        text_encoding: Encoding used to turn text inputs into bytes
        supported_image_formats: Output formats accepted by to_image()
        supported_barcode_formats: Symbologies accepted by render_barcode()
        base_url: root_url + api_version, computed once
    """
    root_url: str = DEFAULT_ROOT_URL
    api_version: str = DEFAULT_API_VERSION
    timeout: float = DEFAULT_TIMEOUT
    text_encoding: str = DEFAULT_TEXT_ENCODING
    supported_image_formats: Tuple[str, ...] = SUPPORTED_IMAGE_FORMATS
    supported_barcode_formats: Tuple[str, ...] = SUPPORTED_BARCODE_FORMATS
    base_url: str = field(init=False)

    def __post_init__(self):
        object.__setattr__(self, "base_url", build_base_url(self.root_url, self.api_version))


def get_settings(environ: Optional[Mapping[str, str]] = None) -> ClientSettings:
    """
    Build settings from environment variables.

    Unset or blank variables fall back to the defaults.

    Args:
        environ: Mapping to read from (defaults to os.environ)

    Returns:
        ClientSettings instance

    Raises:
        ServiceNotConfigured: If FASTPDF_TIMEOUT is not a number
    """
    environ = os.environ if environ is None else environ

    root_url = (environ.get(ENV_BASE_URL) or "").strip() or DEFAULT_ROOT_URL
    api_version = (environ.get(ENV_API_VERSION) or "").strip() or DEFAULT_API_VERSION

    raw_timeout = (environ.get(ENV_TIMEOUT) or "").strip()
    if raw_timeout:
        try:
            timeout = float(raw_timeout)
        except ValueError:
            raise ServiceNotConfigured(
                f"{ENV_TIMEOUT} must be a number of seconds, got {raw_timeout!r}"
            )
    else:
        timeout = DEFAULT_TIMEOUT

    return ClientSettings(root_url=root_url, api_version=api_version, timeout=timeout)


def get_api_key(environ: Optional[Mapping[str, str]] = None) -> str:
    """
    Read the API key from the environment.

    Raises:
        ServiceNotConfigured: If FASTPDF_API_KEY is missing or blank
    """
    environ = os.environ if environ is None else environ
    api_key = (environ.get(ENV_API_KEY) or "").strip()
    if not api_key:
        raise ServiceNotConfigured(f"{ENV_API_KEY} is not set")
    return api_key
