"""Content-type driven decoding of upstream bodies."""

import json
from dataclasses import dataclass
from typing import Any

from core.exceptions import ResponseDecodeError


@dataclass(frozen=True)
class StructuredBody:
    value: Any


@dataclass(frozen=True)
class RawBody:
    text: str


DecodedBody = StructuredBody | RawBody


def is_json_content_type(content_type: str | None) -> bool:
    """True when the declared content type contains ``application/json``."""
    return "application/json" in (content_type or "").lower()


def decode_body(content_type: str | None, content: bytes, encoding: str = "utf-8") -> DecodedBody:
    """Decode an upstream body according to its declared content type.

    Raises:
        ResponseDecodeError: the content type claims JSON but the body isn't
    """
    if not is_json_content_type(content_type):
        return RawBody(content.decode(encoding, errors="replace"))

    # HEAD responses and 204s declare a type but carry nothing
    if not content.strip():
        return RawBody("")

    try:
        return StructuredBody(json.loads(content))
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise ResponseDecodeError(str(e)) from e
