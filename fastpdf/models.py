"""
Data Transfer Objects exchanged with the FastPDF service.

All objects serialize to JSON with snake_case keys. Unset (None) fields are
omitted entirely so the server applies its own defaults. Fields assigned by
the server (ids, timestamps, owning template, nested file references) are
parsed from responses but never sent back in request payloads.
"""

import base64
from dataclasses import dataclass, field, fields
from datetime import datetime
from typing import Any, ClassVar, Dict, FrozenSet, List, Mapping, Optional, Tuple

from .errors import PDFDecodeError, PDFValidationError


def _parse_timestamp(value: Any) -> Optional[datetime]:
    if value is None or isinstance(value, datetime):
        return value
    text = str(value)
    if text.endswith('Z'):
        text = text[:-1] + '+00:00'
    try:
        return datetime.fromisoformat(text)
    except ValueError as e:
        raise PDFDecodeError(f"Invalid timestamp: {value!r}") from e


def _to_wire(value: Any) -> Any:
    """Convert a field value to its JSON wire representation."""
    if isinstance(value, WireModel):
        return value.to_dict()
    if isinstance(value, (bytes, bytearray)):
        return base64.b64encode(bytes(value)).decode('ascii')
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, (list, tuple)):
        return [_to_wire(item) for item in value]
    return value


class WireModel:
    """
    Mixin providing snake_case JSON conversion for dataclasses.

    Subclasses list server-assigned fields in SERVER_FIELDS.
    """

    SERVER_FIELDS: ClassVar[FrozenSet[str]] = frozenset()

    def to_dict(self) -> Dict[str, Any]:
        """
        Serialize every set field, server-assigned ones included.

        Returns:
            Dictionary without None values
        """
        return {
            f.name: _to_wire(getattr(self, f.name))
            for f in fields(self)
            if getattr(self, f.name) is not None
        }

    def to_payload(self) -> Dict[str, Any]:
        """
        Serialize the fields a client may send.

        Returns:
            Dictionary without None values and without server-assigned fields
        """
        return {
            key: value
            for key, value in self.to_dict().items()
            if key not in self.SERVER_FIELDS
        }

    @classmethod
    def _known_values(cls, data: Mapping[str, Any]) -> Dict[str, Any]:
        if not isinstance(data, Mapping):
            raise PDFDecodeError(
                f"Expected a JSON object for {cls.__name__}, got {type(data).__name__}"
            )
        names = {f.name for f in fields(cls) if f.init}
        values = {key: value for key, value in data.items() if key in names}
        if 'timestamp' in values:
            values['timestamp'] = _parse_timestamp(values['timestamp'])
        return values

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]):
        """
        Build an instance from a decoded JSON object.

        Unknown keys are ignored.

        Raises:
            PDFDecodeError: If data is not an object or holds invalid values
        """
        return cls._build(cls._known_values(data))

    @classmethod
    def _build(cls, values: Dict[str, Any]):
        try:
            return cls(**values)
        except PDFValidationError as e:
            raise PDFDecodeError(f"Invalid {cls.__name__} in response: {e}") from e


@dataclass(frozen=True)
class TemplateFile(WireModel):
    """Reference to a file stored with a template."""
    id: Optional[str] = None


@dataclass(frozen=True)
class StyleFile(WireModel):
    """A stylesheet attached to a template."""

    SERVER_FIELDS: ClassVar[FrozenSet[str]] = frozenset(
        {'id', 'number', 'timestamp', 'template_id'}
    )

    format: Optional[str] = "css"
    description: Optional[str] = None
    filename: Optional[str] = None
    id: Optional[str] = None
    number: Optional[int] = None
    timestamp: Optional[datetime] = None
    template_id: Optional[str] = None


@dataclass(frozen=True)
class ImageFile(WireModel):
    """
    An image attached to a template.

    The uri is the placeholder key the template uses to reference the image.
    """

    SERVER_FIELDS: ClassVar[FrozenSet[str]] = frozenset(
        {'id', 'number', 'timestamp', 'template_id'}
    )

    format: Optional[str] = None
    uri: Optional[str] = None
    description: Optional[str] = None
    filename: Optional[str] = None
    id: Optional[str] = None
    number: Optional[int] = None
    timestamp: Optional[datetime] = None
    template_id: Optional[str] = None


@dataclass(frozen=True)
class Template(WireModel):
    """
    A reusable document definition stored by the service.

    Layout fields are defaults applied whenever the template is rendered;
    RenderOptions can override them per call.
    """

    SERVER_FIELDS: ClassVar[FrozenSet[str]] = frozenset({
        'id', 'timestamp', 'template_file', 'header_file', 'footer_file',
        'image_files', 'style_files',
    })

    name: Optional[str] = None
    format: Optional[str] = "html"
    description: Optional[str] = None
    id: Optional[str] = None
    timestamp: Optional[datetime] = None
    template_file: Optional[TemplateFile] = None
    header_file: Optional[TemplateFile] = None
    footer_file: Optional[TemplateFile] = None
    image_files: Optional[List[ImageFile]] = None
    style_files: Optional[List[StyleFile]] = None
    landscape: Optional[bool] = None
    paper_format: Optional[str] = None
    print_background: Optional[bool] = None
    page_range: Optional[str] = None
    scale: Optional[float] = None
    margin_top: Optional[float] = None
    margin_right: Optional[float] = None
    margin_bottom: Optional[float] = None
    margin_left: Optional[float] = None
    page_number_footer_enabled: Optional[bool] = None
    title_header_enabled: Optional[bool] = None
    date_header_enabled: Optional[bool] = None
    disable_header_footer_first_page: Optional[bool] = None

    def __post_init__(self):
        if self.format is None:
            object.__setattr__(self, "format", "html")

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Template":
        values = cls._known_values(data)
        for key in ('template_file', 'header_file', 'footer_file'):
            if values.get(key) is not None:
                values[key] = TemplateFile.from_dict(values[key])
        if values.get('image_files') is not None:
            values['image_files'] = [ImageFile.from_dict(item) for item in values['image_files']]
        if values.get('style_files') is not None:
            values['style_files'] = [StyleFile.from_dict(item) for item in values['style_files']]
        return cls._build(values)


@dataclass(frozen=True)
class RenderOptions(WireModel):
    """
    Per-call overrides for a single render.

    Every field is optional; only the fields that are set reach the wire.
    header_file/footer_file hold literal bytes and are sent base64 encoded.
    background_color is an (r, g, b) triple of integers in 0..255.
    """

    templating_engine: Optional[str] = None
    rendering_engine: Optional[str] = None
    display_header_footer: Optional[bool] = None
    header_file: Optional[bytes] = None
    footer_file: Optional[bytes] = None
    landscape: Optional[bool] = None
    paper_format: Optional[str] = None
    background: Optional[bool] = None
    page_range: Optional[str] = None
    scale: Optional[float] = None
    margin_top: Optional[float] = None
    margin_right: Optional[float] = None
    margin_bottom: Optional[float] = None
    margin_left: Optional[float] = None
    page_number_footer_enabled: Optional[bool] = None
    title_header_enabled: Optional[bool] = None
    date_header_enabled: Optional[bool] = None
    x: Optional[float] = None
    y: Optional[float] = None
    w: Optional[float] = None
    h: Optional[float] = None
    width: Optional[float] = None
    height: Optional[float] = None
    keep_ratio: Optional[bool] = None
    text_enabled: Optional[bool] = None
    image_mode: Optional[str] = None
    compress: Optional[bool] = None
    transparency_enabled: Optional[bool] = None
    background_color: Optional[Tuple[int, int, int]] = field(default=None)

    def __post_init__(self):
        if self.background_color is None:
            return
        try:
            color = tuple(self.background_color)
        except TypeError:
            color = ()
        if len(color) != 3 or not all(
            isinstance(c, int) and not isinstance(c, bool) and 0 <= c <= 255 for c in color
        ):
            raise PDFValidationError(
                f"background_color must be an (r, g, b) triple of ints in 0..255, got {self.background_color!r}"
            )
        object.__setattr__(self, "background_color", color)
