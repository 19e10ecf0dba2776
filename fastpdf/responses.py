"""
Response unpacking.

Turns a successful httpx response into what the caller gets back: raw
document bytes (a zip archive for batch operations, see archive.extract),
decoded models, or a status flag.
"""

import json
import logging
from typing import Any, List, Type

import httpx

from .errors import PDFDecodeError
from .models import WireModel

logger = logging.getLogger(__name__)


def read_bytes(response: httpx.Response) -> bytes:
    return response.content


def _read_json(response: httpx.Response) -> Any:
    try:
        return json.loads(response.text)
    except json.JSONDecodeError as e:
        raise PDFDecodeError(f"Response is not valid JSON: {e}") from e


def read_model(model_cls: Type[WireModel], response: httpx.Response) -> WireModel:
    """
    Decode a JSON object response into a model.

    Raises:
        PDFDecodeError: If the body is not a JSON object
    """
    return model_cls.from_dict(_read_json(response))


def read_model_list(model_cls: Type[WireModel], response: httpx.Response) -> List[WireModel]:
    """
    Decode a JSON array response into a list of models.

    Raises:
        PDFDecodeError: If the body is not a JSON array of objects
    """
    data = _read_json(response)
    if not isinstance(data, list):
        raise PDFDecodeError(
            f"Expected a JSON array of {model_cls.__name__}, got {type(data).__name__}"
        )
    return [model_cls.from_dict(item) for item in data]


def read_deleted(response: httpx.Response) -> bool:
    """
    True only for 204 No Content.

    Any other 2xx is reported as False rather than raised.
    """
    if response.status_code != 204:
        logger.warning(f"Delete answered HTTP {response.status_code} instead of 204")
        return False
    return True


def read_ok(response: httpx.Response) -> bool:
    """True for HTTP 200."""
    return response.status_code == 200
