"""
Input normalization for FastPDF operations.

A document handed to the client is one of three explicit kinds:

- Source.path(...)   a file on disk, read at call time
- Source.data(...)   an in-memory byte buffer
- Source.text(...)   literal text content, encoded before sending

Plain values are accepted too and tagged by type: pathlib.Path is a path,
bytes/bytearray/memoryview are data, str is literal text. A str is never
treated as a file name; wrap it with Source.path() or pass a Path.

Render data is either a mapping (a list of mappings for batch renders) or a
path to a JSON file holding one.
"""

import enum
import json
import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Union

from .errors import InvalidRenderData, PDFDecodeError

logger = logging.getLogger(__name__)


class SourceKind(enum.Enum):
    PATH = "path"
    DATA = "data"
    TEXT = "text"


@dataclass(frozen=True)
class Source:
    """A tagged document input."""

    kind: SourceKind
    value: Union[str, Path, bytes]

    @classmethod
    def path(cls, path: Union[str, "os.PathLike[str]"]) -> "Source":
        return cls(SourceKind.PATH, Path(path))

    @classmethod
    def data(cls, data: Union[bytes, bytearray, memoryview]) -> "Source":
        return cls(SourceKind.DATA, bytes(data))

    @classmethod
    def text(cls, text: str) -> "Source":
        return cls(SourceKind.TEXT, text)

    @property
    def filename(self) -> Optional[str]:
        """Base name of the file for path sources, None otherwise."""
        if self.kind is SourceKind.PATH:
            return Path(self.value).name
        return None

    def read(self, encoding: str = "utf-8") -> bytes:
        """
        Resolve the input to bytes.

        Args:
            encoding: Encoding applied to text sources

        Returns:
            Content as bytes

        Raises:
            FileNotFoundError, PermissionError: Propagated from the filesystem
        """
        if self.kind is SourceKind.PATH:
            logger.debug(f"Reading input file {self.value}")
            return Path(self.value).read_bytes()
        if self.kind is SourceKind.TEXT:
            return self.value.encode(encoding)
        return self.value


SourceLike = Union[Source, Path, bytes, bytearray, memoryview, str]


def as_source(value: SourceLike) -> Source:
    """
    Tag a plain value as a Source.

    Raises:
        TypeError: For values of any other type
    """
    if isinstance(value, Source):
        return value
    if isinstance(value, os.PathLike):
        return Source.path(value)
    if isinstance(value, (bytes, bytearray, memoryview)):
        return Source.data(value)
    if isinstance(value, str):
        return Source.text(value)
    raise TypeError(
        f"Expected Source, Path, bytes or str. Unsupported input type: {type(value).__name__}"
    )


@dataclass(frozen=True)
class LoadedFile:
    """Input resolved to bytes, with the file name when it came from disk."""

    content: bytes
    filename: Optional[str] = None


def load_source(value: SourceLike, encoding: str = "utf-8") -> LoadedFile:
    """Tag and read an input in one step."""
    source = as_source(value)
    return LoadedFile(content=source.read(encoding), filename=source.filename)


RenderData = Union[Mapping[str, Any], str, "os.PathLike[str]"]
RenderDataList = Union[List[Mapping[str, Any]], str, "os.PathLike[str]"]


def _read_json_file(path: Union[str, "os.PathLike[str]"]) -> Any:
    logger.debug(f"Loading render data from {path}")
    text = Path(path).read_text(encoding="utf-8")
    try:
        return json.loads(text)
    except json.JSONDecodeError as e:
        raise PDFDecodeError(f"Render data file {path} is not valid JSON: {e}") from e


def load_render_data(value: Optional[RenderData]) -> Dict[str, Any]:
    """
    Normalize render data for a single document.

    Args:
        value: Mapping, path to a JSON file, or None (empty data)

    Returns:
        Dictionary of render data

    Raises:
        InvalidRenderData: If value (or the file content) is not a mapping
        PDFDecodeError: If the file is not valid JSON
    """
    if value is None:
        return {}
    if isinstance(value, Mapping):
        return dict(value)
    if isinstance(value, (str, os.PathLike)):
        data = _read_json_file(value)
        if not isinstance(data, dict):
            raise InvalidRenderData(
                f"Render data file {value} must hold a JSON object, got {type(data).__name__}"
            )
        return data
    raise InvalidRenderData(
        f"Expected a mapping or a file path. Unsupported render data type: {type(value).__name__}"
    )


def load_render_data_list(value: Optional[RenderDataList]) -> List[Dict[str, Any]]:
    """
    Normalize render data for a batch render.

    Args:
        value: List of mappings, path to a JSON file, or None (empty list)

    Returns:
        List of render data dictionaries

    Raises:
        InvalidRenderData: If value (or the file content) is not a list of mappings
        PDFDecodeError: If the file is not valid JSON
    """
    if value is None:
        return []
    if isinstance(value, (str, os.PathLike)):
        data = _read_json_file(value)
    elif isinstance(value, (list, tuple)):
        data = value
    else:
        raise InvalidRenderData(
            f"Expected a list or a file path. Unsupported render data type: {type(value).__name__}"
        )

    if not isinstance(data, (list, tuple)) or not all(isinstance(item, Mapping) for item in data):
        raise InvalidRenderData("Batch render data must be a list of objects")
    return [dict(item) for item in data]
