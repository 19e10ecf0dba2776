"""
FastPDF API client.

One method per remote operation. Every call follows the same path:
normalize inputs → build the request → send it → unpack the response.

Example:
    with PDFClient(api_key) as client:
        pdf = client.render(Source.text("<h1>{{ name }}</h1>"), render_data={"name": "John"})
        client.save(pdf, "hello.pdf")

Batch operations (render_many, render_template_many, split_zip) return a zip
archive; pass it to extract() or extract_to_directory().
"""

import asyncio
import dataclasses
import logging
from pathlib import Path
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Union

import httpx

from . import archive
from .builders import ApiRequest, RequestBuilder
from .config import ClientSettings, get_api_key, get_settings
from .errors import ServiceNotConfigured
from .http import AsyncHTTPClient, HTTPClient
from .inputs import RenderData, RenderDataList, SourceLike
from .models import ImageFile, RenderOptions, StyleFile, Template

logger = logging.getLogger(__name__)


def _resolve_settings(
    settings: Optional[ClientSettings],
    base_url: Optional[str],
    api_version: Optional[str],
    timeout: Optional[float],
) -> ClientSettings:
    settings = settings or ClientSettings()
    overrides: Dict[str, Any] = {}
    if base_url:
        overrides['root_url'] = base_url
    if api_version:
        overrides['api_version'] = api_version
    if timeout is not None:
        overrides['timeout'] = timeout
    if overrides:
        settings = dataclasses.replace(settings, **overrides)
    return settings


class _ClientBase:
    """Configuration shared by the sync and async clients."""

    def __init__(
        self,
        api_key: str,
        base_url: Optional[str] = None,
        api_version: Optional[str] = None,
        settings: Optional[ClientSettings] = None,
        timeout: Optional[float] = None,
    ):
        if not api_key or not api_key.strip():
            raise ServiceNotConfigured("An API key is required")
        self.settings = _resolve_settings(settings, base_url, api_version, timeout)
        self.requests = RequestBuilder(self.settings)
        logger.debug(f"FastPDF client initialized for {self.settings.base_url}")

    @staticmethod
    def extract(zip_bytes: bytes) -> List[bytes]:
        """Return the files of a batch result, in archive order."""
        return archive.extract(zip_bytes)


class PDFClient(_ClientBase):
    """
    Synchronous FastPDF client.

    Args:
        api_key: API key sent verbatim in the Authorization header
        base_url: Service root URL (default https://data.fastpdfservice.com)
        api_version: Version segment appended to base_url (default v1)
        settings: Full settings object; base_url/api_version/timeout override it
        timeout: Request timeout in seconds
        http_client: Optional httpx.Client to share a connection pool

    Every operation also takes a keyword timeout that overrides the client
    timeout for that one call.
    """

    def __init__(
        self,
        api_key: str,
        base_url: Optional[str] = None,
        api_version: Optional[str] = None,
        settings: Optional[ClientSettings] = None,
        timeout: Optional[float] = None,
        http_client: Optional[httpx.Client] = None,
    ):
        super().__init__(api_key, base_url, api_version, settings, timeout)
        self.http = HTTPClient(
            base_url=self.settings.base_url,
            api_key=api_key,
            timeout=self.settings.timeout,
            client=http_client,
        )

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None, **kwargs) -> "PDFClient":
        """
        Build a client from FASTPDF_* environment variables.

        Raises:
            ServiceNotConfigured: If FASTPDF_API_KEY is not set
        """
        return cls(get_api_key(environ), settings=get_settings(environ), **kwargs)

    def _execute(
        self,
        build: Callable[..., ApiRequest],
        *args,
        timeout: Optional[float] = None,
        **kwargs,
    ) -> Any:
        """
        Build, send and unpack one call.

        Args:
            build: RequestBuilder method for the operation
            timeout: Per-call timeout in seconds; the client timeout when None
        """
        request = build(*args, **kwargs)
        logger.debug(f"FastPDF {build.__name__}: {request.method} {request.path}")
        response = self.http.request(
            request.method,
            request.path,
            params=request.params,
            json=request.json,
            files=request.files,
            timeout=timeout,
        )
        return request.unpack(response)

    def close(self) -> None:
        self.http.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_value, traceback):
        self.close()

    # Local helpers

    @staticmethod
    def save(content: bytes, file_path: Union[str, Path, None]) -> None:
        """Write bytes to file_path; does nothing for an empty path."""
        archive.save(content, file_path)

    @staticmethod
    def extract_to_directory(zip_bytes: bytes, output_dir: Union[str, Path]) -> List[Path]:
        """Write the files of a batch result under output_dir."""
        return archive.extract_to_directory(zip_bytes, output_dir)

    # Account

    def validate_token(self, timeout: Optional[float] = None) -> bool:
        """
        Check the API key against the service.

        Returns:
            True if the service accepts the key

        Raises:
            PDFAuthError: If the key is rejected
        """
        return self._execute(self.requests.validate_token, timeout=timeout)

    # PDF post-processing

    def split(
        self,
        file: SourceLike,
        splits: Iterable[int],
        timeout: Optional[float] = None,
    ) -> bytes:
        """
        Split a PDF at the given page numbers.

        Args:
            file: PDF as Source, Path, bytes or str
            splits: Page numbers where a new document starts

        Returns:
            Result bytes as returned by the service
        """
        return self._execute(self.requests.split, file, splits, timeout=timeout)

    def split_zip(
        self,
        file: SourceLike,
        splits: Iterable[Iterable[int]],
        timeout: Optional[float] = None,
    ) -> bytes:
        """
        Split a PDF into one document per page group.

        Returns:
            Zip archive with one PDF per group
        """
        return self._execute(self.requests.split_zip, file, splits, timeout=timeout)

    def merge(self, files: Iterable[SourceLike], timeout: Optional[float] = None) -> bytes:
        """
        Merge 2 to 100 PDFs into one.

        Raises:
            PDFValidationError: If fewer than 2 or more than 100 files are given
        """
        return self._execute(self.requests.merge, files, timeout=timeout)

    def edit_metadata(
        self,
        file: SourceLike,
        metadata: Mapping[str, str],
        timeout: Optional[float] = None,
    ) -> bytes:
        """Replace metadata entries (title, author, ...) of a PDF."""
        return self._execute(self.requests.edit_metadata, file, metadata, timeout=timeout)

    def compress(
        self,
        file: SourceLike,
        options: Optional[Mapping[str, bool]] = None,
        timeout: Optional[float] = None,
    ) -> bytes:
        return self._execute(self.requests.compress, file, options, timeout=timeout)

    def encrypt(self, file: SourceLike, password: str, timeout: Optional[float] = None) -> bytes:
        return self._execute(self.requests.encrypt, file, password, timeout=timeout)

    def to_image(
        self,
        file: SourceLike,
        output_format: str,
        timeout: Optional[float] = None,
    ) -> bytes:
        """
        Convert a PDF to an image.

        Raises:
            PDFValidationError: If output_format is not in settings.supported_image_formats
        """
        return self._execute(self.requests.to_image, file, output_format, timeout=timeout)

    def url_to_pdf(self, url: str, timeout: Optional[float] = None) -> bytes:
        return self._execute(self.requests.url_to_pdf, url, timeout=timeout)

    # Images and barcodes

    def render_barcode(
        self,
        data: str,
        barcode_format: str = "code128",
        render_options: Optional[RenderOptions] = None,
        timeout: Optional[float] = None,
    ) -> bytes:
        """
        Render a barcode image.

        Raises:
            PDFValidationError: If barcode_format is not supported
        """
        return self._execute(
            self.requests.render_barcode, data, barcode_format, render_options, timeout=timeout
        )

    def render_image(
        self,
        image: SourceLike,
        render_options: Optional[RenderOptions] = None,
        timeout: Optional[float] = None,
    ) -> bytes:
        return self._execute(self.requests.render_image, image, render_options, timeout=timeout)

    def render_image_from_id(
        self,
        image_id: str,
        render_options: Optional[RenderOptions] = None,
        timeout: Optional[float] = None,
    ) -> bytes:
        return self._execute(
            self.requests.render_image_from_id, image_id, render_options, timeout=timeout
        )

    # Template store

    def get_all_templates(
        self,
        limit: Optional[int] = None,
        timeout: Optional[float] = None,
    ) -> List[Template]:
        return self._execute(self.requests.get_all_templates, limit, timeout=timeout)

    def get_template(self, template_id: str, timeout: Optional[float] = None) -> Template:
        """
        Fetch a stored template.

        Raises:
            PDFDecodeError: If the response is not a template object
        """
        return self._execute(self.requests.get_template, template_id, timeout=timeout)

    def add_template(
        self,
        file: SourceLike,
        template: Template,
        header: Optional[SourceLike] = None,
        footer: Optional[SourceLike] = None,
        timeout: Optional[float] = None,
    ) -> Template:
        """
        Store a new template.

        Args:
            file: Main template file
            template: Template metadata (name, format, layout defaults)
            header: Optional header file
            footer: Optional footer file
            timeout: Per-call timeout in seconds (default: client timeout)

        Returns:
            Template as stored, with its server-assigned id
        """
        return self._execute(
            self.requests.add_template, file, template, header, footer, timeout=timeout
        )

    def add_stylesheet(
        self,
        template_id: str,
        file: SourceLike,
        style_file: StyleFile,
        timeout: Optional[float] = None,
    ) -> StyleFile:
        return self._execute(
            self.requests.add_stylesheet, template_id, file, style_file, timeout=timeout
        )

    def add_image(
        self,
        template_id: str,
        file: SourceLike,
        image_file: ImageFile,
        timeout: Optional[float] = None,
    ) -> ImageFile:
        return self._execute(
            self.requests.add_image, template_id, file, image_file, timeout=timeout
        )

    def delete_template(self, template_id: str, timeout: Optional[float] = None) -> bool:
        """
        Delete a template.

        Returns:
            True on 204 No Content, False for any other 2xx
        """
        return self._execute(self.requests.delete_template, template_id, timeout=timeout)

    def delete_stylesheet(self, stylesheet_id: str, timeout: Optional[float] = None) -> bool:
        return self._execute(self.requests.delete_stylesheet, stylesheet_id, timeout=timeout)

    def delete_image(self, image_id: str, timeout: Optional[float] = None) -> bool:
        return self._execute(self.requests.delete_image, image_id, timeout=timeout)

    def get_template_file(self, template_id: str, timeout: Optional[float] = None) -> bytes:
        return self._execute(self.requests.get_template_file, template_id, timeout=timeout)

    def get_stylesheet(self, stylesheet_id: str, timeout: Optional[float] = None) -> bytes:
        return self._execute(self.requests.get_stylesheet, stylesheet_id, timeout=timeout)

    def get_image(self, image_id: str, timeout: Optional[float] = None) -> bytes:
        return self._execute(self.requests.get_image, image_id, timeout=timeout)

    # Rendering

    def render_template(
        self,
        template_id: str,
        render_data: Optional[RenderData] = None,
        render_options: Optional[RenderOptions] = None,
        format_type: str = "pdf",
        timeout: Optional[float] = None,
    ) -> bytes:
        """
        Render a stored template.

        Args:
            template_id: Id of the stored template
            render_data: Mapping or path to a JSON file
            render_options: Per-call overrides
            format_type: Output format (pdf, docx, odt, ...)
            timeout: Per-call timeout in seconds (default: client timeout)

        Returns:
            Rendered document bytes
        """
        return self._execute(
            self.requests.render_template,
            template_id, render_data, render_options, format_type,
            timeout=timeout,
        )

    def render_template_many(
        self,
        template_id: str,
        render_data_list: Optional[RenderDataList] = None,
        render_options: Optional[RenderOptions] = None,
        format_type: str = "pdf",
        timeout: Optional[float] = None,
    ) -> bytes:
        """Render a stored template once per record. Returns a zip archive."""
        return self._execute(
            self.requests.render_template_many,
            template_id, render_data_list, render_options, format_type,
            timeout=timeout,
        )

    def render(
        self,
        file: SourceLike,
        template: Optional[Template] = None,
        render_data: Optional[RenderData] = None,
        header: Optional[SourceLike] = None,
        footer: Optional[SourceLike] = None,
        render_options: Optional[RenderOptions] = None,
        format_type: str = "pdf",
        timeout: Optional[float] = None,
    ) -> bytes:
        """
        Render content that is not stored as a template.

        Args:
            file: Template content (Source, Path, bytes, or literal str)
            template: Template metadata; a default with the title header
                disabled is sent when omitted
            render_data: Mapping or path to a JSON file
            header: Optional header content
            footer: Optional footer content
            render_options: Per-call overrides
            format_type: Output format
            timeout: Per-call timeout in seconds (default: client timeout)

        Returns:
            Rendered document bytes
        """
        return self._execute(
            self.requests.render,
            file, template, render_data, header, footer, render_options, format_type,
            timeout=timeout,
        )

    def render_many(
        self,
        file: SourceLike,
        template: Optional[Template] = None,
        render_data_list: Optional[RenderDataList] = None,
        header: Optional[SourceLike] = None,
        footer: Optional[SourceLike] = None,
        render_options: Optional[RenderOptions] = None,
        format_type: str = "pdf",
        timeout: Optional[float] = None,
    ) -> bytes:
        """Batch variant of render(). Returns a zip archive."""
        return self._execute(
            self.requests.render_many,
            file, template, render_data_list, header, footer, render_options, format_type,
            timeout=timeout,
        )


class AsyncPDFClient(_ClientBase):
    """
    Asynchronous FastPDF client.

    Same operations as PDFClient, as coroutines. Input files are read and
    output files written in a worker thread so the event loop never blocks;
    cancelling the awaiting task cancels the in-flight request.
    """

    def __init__(
        self,
        api_key: str,
        base_url: Optional[str] = None,
        api_version: Optional[str] = None,
        settings: Optional[ClientSettings] = None,
        timeout: Optional[float] = None,
        http_client: Optional[httpx.AsyncClient] = None,
    ):
        super().__init__(api_key, base_url, api_version, settings, timeout)
        self.http = AsyncHTTPClient(
            base_url=self.settings.base_url,
            api_key=api_key,
            timeout=self.settings.timeout,
            client=http_client,
        )

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None, **kwargs) -> "AsyncPDFClient":
        return cls(get_api_key(environ), settings=get_settings(environ), **kwargs)

    async def _execute(
        self,
        build: Callable[..., ApiRequest],
        *args,
        timeout: Optional[float] = None,
        **kwargs,
    ) -> Any:
        request = await asyncio.to_thread(build, *args, **kwargs)
        logger.debug(f"FastPDF {build.__name__}: {request.method} {request.path}")
        response = await self.http.request(
            request.method,
            request.path,
            params=request.params,
            json=request.json,
            files=request.files,
            timeout=timeout,
        )
        return request.unpack(response)

    async def aclose(self) -> None:
        await self.http.aclose()

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_value, traceback):
        await self.aclose()

    # Local helpers

    @staticmethod
    async def save(content: bytes, file_path: Union[str, Path, None]) -> None:
        await asyncio.to_thread(archive.save, content, file_path)

    @staticmethod
    async def extract_to_directory(zip_bytes: bytes, output_dir: Union[str, Path]) -> List[Path]:
        return await asyncio.to_thread(archive.extract_to_directory, zip_bytes, output_dir)

    # Account

    async def validate_token(self, timeout: Optional[float] = None) -> bool:
        return await self._execute(self.requests.validate_token, timeout=timeout)

    # PDF post-processing

    async def split(
        self,
        file: SourceLike,
        splits: Iterable[int],
        timeout: Optional[float] = None,
    ) -> bytes:
        return await self._execute(self.requests.split, file, splits, timeout=timeout)

    async def split_zip(
        self,
        file: SourceLike,
        splits: Iterable[Iterable[int]],
        timeout: Optional[float] = None,
    ) -> bytes:
        return await self._execute(self.requests.split_zip, file, splits, timeout=timeout)

    async def merge(self, files: Iterable[SourceLike], timeout: Optional[float] = None) -> bytes:
        return await self._execute(self.requests.merge, files, timeout=timeout)

    async def edit_metadata(
        self,
        file: SourceLike,
        metadata: Mapping[str, str],
        timeout: Optional[float] = None,
    ) -> bytes:
        return await self._execute(self.requests.edit_metadata, file, metadata, timeout=timeout)

    async def compress(
        self,
        file: SourceLike,
        options: Optional[Mapping[str, bool]] = None,
        timeout: Optional[float] = None,
    ) -> bytes:
        return await self._execute(self.requests.compress, file, options, timeout=timeout)

    async def encrypt(
        self,
        file: SourceLike,
        password: str,
        timeout: Optional[float] = None,
    ) -> bytes:
        return await self._execute(self.requests.encrypt, file, password, timeout=timeout)

    async def to_image(
        self,
        file: SourceLike,
        output_format: str,
        timeout: Optional[float] = None,
    ) -> bytes:
        return await self._execute(self.requests.to_image, file, output_format, timeout=timeout)

    async def url_to_pdf(self, url: str, timeout: Optional[float] = None) -> bytes:
        return await self._execute(self.requests.url_to_pdf, url, timeout=timeout)

    # Images and barcodes

    async def render_barcode(
        self,
        data: str,
        barcode_format: str = "code128",
        render_options: Optional[RenderOptions] = None,
        timeout: Optional[float] = None,
    ) -> bytes:
        return await self._execute(
            self.requests.render_barcode, data, barcode_format, render_options, timeout=timeout
        )

    async def render_image(
        self,
        image: SourceLike,
        render_options: Optional[RenderOptions] = None,
        timeout: Optional[float] = None,
    ) -> bytes:
        return await self._execute(
            self.requests.render_image, image, render_options, timeout=timeout
        )

    async def render_image_from_id(
        self,
        image_id: str,
        render_options: Optional[RenderOptions] = None,
        timeout: Optional[float] = None,
    ) -> bytes:
        return await self._execute(
            self.requests.render_image_from_id, image_id, render_options, timeout=timeout
        )

    # Template store

    async def get_all_templates(
        self,
        limit: Optional[int] = None,
        timeout: Optional[float] = None,
    ) -> List[Template]:
        return await self._execute(self.requests.get_all_templates, limit, timeout=timeout)

    async def get_template(self, template_id: str, timeout: Optional[float] = None) -> Template:
        return await self._execute(self.requests.get_template, template_id, timeout=timeout)

    async def add_template(
        self,
        file: SourceLike,
        template: Template,
        header: Optional[SourceLike] = None,
        footer: Optional[SourceLike] = None,
        timeout: Optional[float] = None,
    ) -> Template:
        return await self._execute(
            self.requests.add_template, file, template, header, footer, timeout=timeout
        )

    async def add_stylesheet(
        self,
        template_id: str,
        file: SourceLike,
        style_file: StyleFile,
        timeout: Optional[float] = None,
    ) -> StyleFile:
        return await self._execute(
            self.requests.add_stylesheet, template_id, file, style_file, timeout=timeout
        )

    async def add_image(
        self,
        template_id: str,
        file: SourceLike,
        image_file: ImageFile,
        timeout: Optional[float] = None,
    ) -> ImageFile:
        return await self._execute(
            self.requests.add_image, template_id, file, image_file, timeout=timeout
        )

    async def delete_template(self, template_id: str, timeout: Optional[float] = None) -> bool:
        return await self._execute(self.requests.delete_template, template_id, timeout=timeout)

    async def delete_stylesheet(self, stylesheet_id: str, timeout: Optional[float] = None) -> bool:
        return await self._execute(self.requests.delete_stylesheet, stylesheet_id, timeout=timeout)

    async def delete_image(self, image_id: str, timeout: Optional[float] = None) -> bool:
        return await self._execute(self.requests.delete_image, image_id, timeout=timeout)

    async def get_template_file(self, template_id: str, timeout: Optional[float] = None) -> bytes:
        return await self._execute(self.requests.get_template_file, template_id, timeout=timeout)

    async def get_stylesheet(self, stylesheet_id: str, timeout: Optional[float] = None) -> bytes:
        return await self._execute(self.requests.get_stylesheet, stylesheet_id, timeout=timeout)

    async def get_image(self, image_id: str, timeout: Optional[float] = None) -> bytes:
        return await self._execute(self.requests.get_image, image_id, timeout=timeout)

    # Rendering

    async def render_template(
        self,
        template_id: str,
        render_data: Optional[RenderData] = None,
        render_options: Optional[RenderOptions] = None,
        format_type: str = "pdf",
        timeout: Optional[float] = None,
    ) -> bytes:
        return await self._execute(
            self.requests.render_template,
            template_id, render_data, render_options, format_type,
            timeout=timeout,
        )

    async def render_template_many(
        self,
        template_id: str,
        render_data_list: Optional[RenderDataList] = None,
        render_options: Optional[RenderOptions] = None,
        format_type: str = "pdf",
        timeout: Optional[float] = None,
    ) -> bytes:
        return await self._execute(
            self.requests.render_template_many,
            template_id, render_data_list, render_options, format_type,
            timeout=timeout,
        )

    async def render(
        self,
        file: SourceLike,
        template: Optional[Template] = None,
        render_data: Optional[RenderData] = None,
        header: Optional[SourceLike] = None,
        footer: Optional[SourceLike] = None,
        render_options: Optional[RenderOptions] = None,
        format_type: str = "pdf",
        timeout: Optional[float] = None,
    ) -> bytes:
        return await self._execute(
            self.requests.render,
            file, template, render_data, header, footer, render_options, format_type,
            timeout=timeout,
        )

    async def render_many(
        self,
        file: SourceLike,
        template: Optional[Template] = None,
        render_data_list: Optional[RenderDataList] = None,
        header: Optional[SourceLike] = None,
        footer: Optional[SourceLike] = None,
        render_options: Optional[RenderOptions] = None,
        format_type: str = "pdf",
        timeout: Optional[float] = None,
    ) -> bytes:
        return await self._execute(
            self.requests.render_many,
            file, template, render_data_list, header, footer, render_options, format_type,
            timeout=timeout,
        )
