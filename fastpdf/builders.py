"""
Request builders for every FastPDF operation.

Each builder validates its arguments, resolves inputs to bytes and returns
an ApiRequest: method, path, body (multipart form or JSON) and the function
that unpacks the response. Nothing here touches the network, so validation
failures happen before any request is sent.

Part names are a fixed wire contract:
- file_data / header_data / footer_data: template, style and image files
- file (file0..fileN for merge): PDF post-processing input
- image: image to render
- template_data, render_data, render_options, options, metadata, splits:
  JSON side channels
"""

from dataclasses import dataclass
from functools import partial
from typing import Any, Callable, Dict, Iterable, Mapping, Optional

import httpx

from . import responses
from .http import FilesType
from .config import ClientSettings
from .errors import PDFValidationError
from .inputs import (
    LoadedFile,
    RenderData,
    RenderDataList,
    SourceLike,
    load_render_data,
    load_render_data_list,
    load_source,
)
from .models import ImageFile, RenderOptions, StyleFile, Template
from .multipart import MultipartForm
from .sniffer import content_type_for

PDF_CONTENT_TYPE = "application/pdf"
MIN_MERGE_FILES = 2
MAX_MERGE_FILES = 100
DEFAULT_DOCUMENT_NAME = "fastpdf-python document"


@dataclass
class ApiRequest:
    """A fully built call, ready for the transport."""

    method: str
    path: str
    unpack: Callable[[httpx.Response], Any]
    form: Optional[MultipartForm] = None
    json: Optional[Any] = None
    params: Optional[Dict[str, Any]] = None

    @property
    def files(self) -> Optional[FilesType]:
        """Multipart parts as an httpx `files=` list, or None for bodiless and JSON calls."""
        if self.form is None or not len(self.form):
            return None
        return self.form.to_httpx()


def default_template() -> Template:
    """Template sent with ad-hoc renders when the caller gives none."""
    return Template(name=DEFAULT_DOCUMENT_NAME, format="html", title_header_enabled=False)


def _require(value: Optional[str], name: str) -> str:
    if not value or not str(value).strip():
        raise PDFValidationError(f"{name} must not be empty")
    return str(value)


def _format_type(format_type: str) -> str:
    return _require(format_type, "format_type").lower()


class RequestBuilder:
    """
    Builds ApiRequest objects for a given client configuration.

    Args:
        settings: Client settings (text encoding and format allow-lists)
    """

    def __init__(self, settings: ClientSettings):
        self.settings = settings

    def _load(self, value: SourceLike) -> LoadedFile:
        return load_source(value, self.settings.text_encoding)

    def _pdf_form(self, file: SourceLike) -> MultipartForm:
        loaded = self._load(file)
        return MultipartForm().add_file(
            "file", loaded.content, loaded.filename or "file.pdf", PDF_CONTENT_TYPE
        )

    def _add_header_footer(
        self,
        form: MultipartForm,
        header: Optional[SourceLike],
        footer: Optional[SourceLike],
    ) -> None:
        if header is not None:
            loaded = self._load(header)
            form.add_file("header_data", loaded.content, loaded.filename or "header.html")
        if footer is not None:
            loaded = self._load(footer)
            form.add_file("footer_data", loaded.content, loaded.filename or "footer.html")

    @staticmethod
    def _add_options(form: MultipartForm, render_options: Optional[RenderOptions]) -> None:
        if render_options is not None:
            form.add_json("render_options", render_options.to_payload())

    # Account

    def validate_token(self) -> ApiRequest:
        return ApiRequest("GET", "/token", responses.read_ok)

    # PDF post-processing

    def split(self, file: SourceLike, splits: Iterable[int]) -> ApiRequest:
        splits = list(splits)
        form = self._pdf_form(file).add_json("splits", splits)
        return ApiRequest("POST", "/pdf/split", responses.read_bytes, form=form)

    def split_zip(self, file: SourceLike, splits: Iterable[Iterable[int]]) -> ApiRequest:
        splits = [list(pages) for pages in splits]
        form = self._pdf_form(file).add_json("splits", splits)
        return ApiRequest("POST", "/pdf/split-zip", responses.read_bytes, form=form)

    def merge(self, files: Iterable[SourceLike]) -> ApiRequest:
        """
        Merge 2 to 100 PDF files, sent as parts file0..fileN-1.

        Raises:
            PDFValidationError: If the file count is out of range
        """
        files = list(files)
        if len(files) < MIN_MERGE_FILES or len(files) > MAX_MERGE_FILES:
            raise PDFValidationError(
                f"The number of files to merge should be between {MIN_MERGE_FILES} "
                f"and {MAX_MERGE_FILES}, got {len(files)}."
            )
        form = MultipartForm()
        for index, file in enumerate(files):
            loaded = self._load(file)
            form.add_file(
                f"file{index}", loaded.content, loaded.filename or "file.pdf", PDF_CONTENT_TYPE
            )
        return ApiRequest("POST", "/pdf/merge", responses.read_bytes, form=form)

    def edit_metadata(self, file: SourceLike, metadata: Mapping[str, str]) -> ApiRequest:
        form = self._pdf_form(file).add_json("metadata", dict(metadata))
        return ApiRequest("POST", "/pdf/metadata", responses.read_bytes, form=form)

    def compress(self, file: SourceLike, options: Optional[Mapping[str, bool]] = None) -> ApiRequest:
        form = self._pdf_form(file)
        if options is not None:
            form.add_json("options", dict(options))
        return ApiRequest("POST", "/pdf/compress", responses.read_bytes, form=form)

    def encrypt(self, file: SourceLike, password: str) -> ApiRequest:
        if password is None:
            raise PDFValidationError("password must not be None")
        form = self._pdf_form(file).add_json("options", {"encrypt_password": password})
        return ApiRequest("POST", "/pdf/encrypt", responses.read_bytes, form=form)

    def to_image(self, file: SourceLike, output_format: str) -> ApiRequest:
        """
        Convert a PDF to an image format.

        Raises:
            PDFValidationError: If output_format is not supported
        """
        output_format = (output_format or "").lower()
        supported = self.settings.supported_image_formats
        if output_format not in supported:
            raise PDFValidationError(
                f"Unsupported output format. Must be one of: {', '.join(supported)}"
            )
        form = self._pdf_form(file)
        return ApiRequest("POST", f"/pdf/image/{output_format}", responses.read_bytes, form=form)

    def url_to_pdf(self, url: str) -> ApiRequest:
        form = MultipartForm().add_field("url", _require(url, "url"))
        return ApiRequest("POST", "/pdf/url", responses.read_bytes, form=form)

    # Images and barcodes

    def render_barcode(
        self,
        data: str,
        barcode_format: str = "code128",
        render_options: Optional[RenderOptions] = None,
    ) -> ApiRequest:
        """
        Render a barcode; the only operation with a JSON body.

        Raises:
            PDFValidationError: If barcode_format is not supported
        """
        barcode_format = (barcode_format or "").lower()
        supported = self.settings.supported_barcode_formats
        if barcode_format not in supported:
            raise PDFValidationError(
                f"Unsupported barcode format. Must be one of: {', '.join(supported)}"
            )
        body: Dict[str, Any] = {
            "data": {"data": data, "barcode_format": barcode_format},
        }
        if render_options is not None:
            body["render_options"] = render_options.to_payload()
        return ApiRequest("POST", "/render/barcode", responses.read_bytes, json=body)

    def render_image(
        self,
        image: SourceLike,
        render_options: Optional[RenderOptions] = None,
    ) -> ApiRequest:
        loaded = self._load(image)
        form = MultipartForm().add_file(
            "image", loaded.content, loaded.filename or "image", content_type_for(loaded.content)
        )
        self._add_options(form, render_options)
        return ApiRequest("POST", "/render/img", responses.read_bytes, form=form)

    def render_image_from_id(
        self,
        image_id: str,
        render_options: Optional[RenderOptions] = None,
    ) -> ApiRequest:
        image_id = _require(image_id, "image_id")
        form = MultipartForm()
        self._add_options(form, render_options)
        return ApiRequest("POST", f"/img/{image_id}", responses.read_bytes, form=form)

    # Template store

    def get_all_templates(self, limit: Optional[int] = None) -> ApiRequest:
        params = None
        if limit is not None:
            if limit < 1:
                raise PDFValidationError(f"limit must be positive, got {limit}")
            params = {"limit": limit}
        return ApiRequest(
            "GET", "/template", partial(responses.read_model_list, Template), params=params
        )

    def get_template(self, template_id: str) -> ApiRequest:
        template_id = _require(template_id, "template_id")
        return ApiRequest("GET", f"/template/{template_id}", partial(responses.read_model, Template))

    def add_template(
        self,
        file: SourceLike,
        template: Template,
        header: Optional[SourceLike] = None,
        footer: Optional[SourceLike] = None,
    ) -> ApiRequest:
        """
        Store a new template with optional header and footer files.

        Buffers are named file.<format>, header.html and footer.html; files
        read from disk keep their own names.
        """
        if template is None:
            raise PDFValidationError("template must not be None")
        loaded = self._load(file)
        form = MultipartForm().add_file(
            "file_data", loaded.content, loaded.filename or f"file.{template.format}"
        )
        self._add_header_footer(form, header, footer)
        form.add_json("template_data", template.to_payload())
        return ApiRequest("POST", "/template", partial(responses.read_model, Template), form=form)

    def add_stylesheet(self, template_id: str, file: SourceLike, style_file: StyleFile) -> ApiRequest:
        template_id = _require(template_id, "template_id")
        if style_file is None:
            raise PDFValidationError("style_file must not be None")
        loaded = self._load(file)
        form = MultipartForm().add_file(
            "file_data", loaded.content, loaded.filename or f"file.{style_file.format or 'css'}"
        )
        form.add_json("template_data", style_file.to_payload())
        return ApiRequest(
            "POST", f"/template/css/{template_id}", partial(responses.read_model, StyleFile), form=form
        )

    def add_image(self, template_id: str, file: SourceLike, image_file: ImageFile) -> ApiRequest:
        template_id = _require(template_id, "template_id")
        if image_file is None:
            raise PDFValidationError("image_file must not be None")
        loaded = self._load(file)
        if loaded.filename:
            filename = loaded.filename
        elif image_file.format:
            filename = f"image.{image_file.format}"
        else:
            filename = "image"
        form = MultipartForm().add_file(
            "file_data", loaded.content, filename, content_type_for(loaded.content)
        )
        form.add_json("template_data", image_file.to_payload())
        return ApiRequest(
            "POST", f"/template/img/{template_id}", partial(responses.read_model, ImageFile), form=form
        )

    def delete_template(self, template_id: str) -> ApiRequest:
        template_id = _require(template_id, "template_id")
        return ApiRequest("DELETE", f"/template/{template_id}", responses.read_deleted)

    def delete_stylesheet(self, stylesheet_id: str) -> ApiRequest:
        stylesheet_id = _require(stylesheet_id, "stylesheet_id")
        return ApiRequest("DELETE", f"/template/css/{stylesheet_id}", responses.read_deleted)

    def delete_image(self, image_id: str) -> ApiRequest:
        image_id = _require(image_id, "image_id")
        return ApiRequest("DELETE", f"/template/img/{image_id}", responses.read_deleted)

    def get_template_file(self, template_id: str) -> ApiRequest:
        template_id = _require(template_id, "template_id")
        return ApiRequest("GET", f"/template/file/{template_id}", responses.read_bytes)

    def get_stylesheet(self, stylesheet_id: str) -> ApiRequest:
        stylesheet_id = _require(stylesheet_id, "stylesheet_id")
        return ApiRequest("GET", f"/template/css/file/{stylesheet_id}", responses.read_bytes)

    def get_image(self, image_id: str) -> ApiRequest:
        image_id = _require(image_id, "image_id")
        return ApiRequest("GET", f"/template/img/file/{image_id}", responses.read_bytes)

    # Rendering

    def render_template(
        self,
        template_id: str,
        render_data: Optional[RenderData] = None,
        render_options: Optional[RenderOptions] = None,
        format_type: str = "pdf",
    ) -> ApiRequest:
        """Render a stored template with one data record."""
        template_id = _require(template_id, "template_id")
        format_type = _format_type(format_type)
        form = MultipartForm().add_json("render_data", load_render_data(render_data))
        self._add_options(form, render_options)
        return ApiRequest(
            "POST", f"/render/{format_type}/{template_id}", responses.read_bytes, form=form
        )

    def render_template_many(
        self,
        template_id: str,
        render_data_list: Optional[RenderDataList] = None,
        render_options: Optional[RenderOptions] = None,
        format_type: str = "pdf",
    ) -> ApiRequest:
        """Render a stored template once per data record; the result is a zip."""
        template_id = _require(template_id, "template_id")
        format_type = _format_type(format_type)
        form = MultipartForm().add_json("render_data", load_render_data_list(render_data_list))
        self._add_options(form, render_options)
        return ApiRequest(
            "POST", f"/render/{format_type}/batch/{template_id}", responses.read_bytes, form=form
        )

    def _adhoc_form(
        self,
        file: SourceLike,
        template: Optional[Template],
        header: Optional[SourceLike],
        footer: Optional[SourceLike],
    ) -> MultipartForm:
        template = template or default_template()
        loaded = self._load(file)
        form = MultipartForm().add_file(
            "file_data", loaded.content, loaded.filename or f"file.{template.format}"
        )
        form.add_json("template_data", template.to_payload())
        self._add_header_footer(form, header, footer)
        return form

    def render(
        self,
        file: SourceLike,
        template: Optional[Template] = None,
        render_data: Optional[RenderData] = None,
        header: Optional[SourceLike] = None,
        footer: Optional[SourceLike] = None,
        render_options: Optional[RenderOptions] = None,
        format_type: str = "pdf",
    ) -> ApiRequest:
        """
        Render ad-hoc content without storing a template.

        Without a template, a default one with the title header disabled is
        sent so the server does not add its own header.
        """
        format_type = _format_type(format_type)
        data = load_render_data(render_data)
        form = self._adhoc_form(file, template, header, footer)
        form.add_json("render_data", data)
        self._add_options(form, render_options)
        return ApiRequest("POST", f"/render/{format_type}", responses.read_bytes, form=form)

    def render_many(
        self,
        file: SourceLike,
        template: Optional[Template] = None,
        render_data_list: Optional[RenderDataList] = None,
        header: Optional[SourceLike] = None,
        footer: Optional[SourceLike] = None,
        render_options: Optional[RenderOptions] = None,
        format_type: str = "pdf",
    ) -> ApiRequest:
        """Batch variant of render(); the result is a zip archive."""
        format_type = _format_type(format_type)
        data = load_render_data_list(render_data_list)
        form = self._adhoc_form(file, template, header, footer)
        form.add_json("render_data", data)
        self._add_options(form, render_options)
        return ApiRequest("POST", f"/render/{format_type}/batch", responses.read_bytes, form=form)
