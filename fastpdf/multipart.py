"""
Multipart form assembly.

A MultipartForm is an ordered list of named parts. Binary parts carry a
filename and content type; JSON parts carry serialized metadata; plain
fields carry text. to_httpx() turns the form into the `files=` argument of
httpx, which always produces a multipart/form-data body.
"""

import json
from dataclasses import dataclass
from typing import Any, List, Optional, Tuple

JSON_CONTENT_TYPE = "application/json"


@dataclass(frozen=True)
class FormPart:
    """One part of a multipart body."""

    name: str
    content: bytes
    filename: Optional[str] = None
    content_type: Optional[str] = None

    def json(self) -> Any:
        """Decode the part content as JSON."""
        return json.loads(self.content)


class MultipartForm:
    """Ordered collection of form parts."""

    def __init__(self):
        self.parts: List[FormPart] = []

    def add_file(
        self,
        name: str,
        content: bytes,
        filename: str,
        content_type: Optional[str] = None,
    ) -> "MultipartForm":
        """
        Add a binary part.

        Without a content_type, httpx derives one from the filename.
        """
        self.parts.append(FormPart(name, content, filename, content_type))
        return self

    def add_json(self, name: str, value: Any) -> "MultipartForm":
        """Add a JSON-encoded metadata part."""
        self.parts.append(FormPart(name, json.dumps(value).encode("utf-8"), None, JSON_CONTENT_TYPE))
        return self

    def add_field(self, name: str, value: str) -> "MultipartForm":
        """Add a plain text field."""
        self.parts.append(FormPart(name, value.encode("utf-8")))
        return self

    def get(self, name: str) -> Optional[FormPart]:
        """Return the first part with the given name, or None."""
        for part in self.parts:
            if part.name == name:
                return part
        return None

    def names(self) -> List[str]:
        return [part.name for part in self.parts]

    def __len__(self) -> int:
        return len(self.parts)

    def __contains__(self, name: str) -> bool:
        return self.get(name) is not None

    def to_httpx(self) -> List[Tuple[str, Tuple[Optional[str], bytes, Optional[str]]]]:
        """Render the parts as an httpx `files=` list."""
        return [
            (part.name, (part.filename, part.content, part.content_type))
            for part in self.parts
        ]
