"""
FastPDF client package.

Python client for the FastPDF document service: template storage,
HTML/CSS-to-PDF rendering, barcode and image rendering, and PDF
post-processing (split, merge, compress, encrypt, convert).

Key Components:
- client.py: PDFClient / AsyncPDFClient, one method per remote operation
- builders.py: multipart/JSON request construction
- http.py: authenticated transport with error mapping
- models.py: Template, StyleFile, ImageFile, RenderOptions
- inputs.py: explicit path/bytes/text inputs and render-data loading
- archive.py: zip extraction for batch results
- sniffer.py: content-based MIME detection for image parts
"""

from .errors import (
    PDFServiceError,
    ServiceNotConfigured,
    PDFApiError,
    PDFAuthError,
    PDFRateLimited,
    PDFServerError,
    PDFClientError,
    PDFValidationError,
    InvalidRenderData,
    PDFDecodeError,
)
from .config import ClientSettings, get_settings, get_api_key
from .models import Template, TemplateFile, StyleFile, ImageFile, RenderOptions
from .inputs import Source, SourceKind
from .archive import extract, extract_to_directory
from .client import PDFClient, AsyncPDFClient

__version__ = "1.0.0"

__all__ = [
    # Exceptions
    'PDFServiceError',
    'ServiceNotConfigured',
    'PDFApiError',
    'PDFAuthError',
    'PDFRateLimited',
    'PDFServerError',
    'PDFClientError',
    'PDFValidationError',
    'InvalidRenderData',
    'PDFDecodeError',
    # Configuration
    'ClientSettings',
    'get_settings',
    'get_api_key',
    # Models
    'Template',
    'TemplateFile',
    'StyleFile',
    'ImageFile',
    'RenderOptions',
    # Inputs
    'Source',
    'SourceKind',
    # Archives
    'extract',
    'extract_to_directory',
    # Clients
    'PDFClient',
    'AsyncPDFClient',
]
