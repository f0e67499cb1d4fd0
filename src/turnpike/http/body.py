"""Request body parsing — URL-encoded forms and JSON.

Body parameters are a flat ``{key: value}`` mapping. Form fields keep
their first value; JSON bodies must decode to an object.
"""

import json as json_module
from typing import Any
from urllib.parse import parse_qs

from turnpike.errors import HTTPError

FORM_CONTENT_TYPE = "application/x-www-form-urlencoded"


def is_json(content_type: str | None) -> bool:
    """True for ``application/json`` and ``+json`` media types."""
    if not content_type:
        return False
    media_type = content_type.split(";", 1)[0].strip().lower()
    return media_type == "application/json" or media_type.endswith("+json")


def is_form(content_type: str | None) -> bool:
    """True for URL-encoded form submissions."""
    if not content_type:
        return False
    return content_type.split(";", 1)[0].strip().lower() == FORM_CONTENT_TYPE


def parse_body(raw: bytes, content_type: str | None) -> dict[str, Any]:
    """Parse *raw* according to *content_type*.

    Unknown or missing content types (including multipart) yield an empty
    mapping; the bytes stay available as ``Request.raw_body``.

    Raises:
        HTTPError: 400 when a JSON body is malformed or not an object.
    """
    if not raw:
        return {}

    if is_json(content_type):
        try:
            data = json_module.loads(raw)
        except ValueError as exc:
            raise HTTPError(status=400, detail=f"Malformed JSON body: {exc}") from exc
        if not isinstance(data, dict):
            raise HTTPError(status=400, detail="JSON body must be an object")
        return data

    if is_form(content_type):
        parsed = parse_qs(raw.decode("utf-8"), keep_blank_values=True)
        return {key: values[0] for key, values in parsed.items()}

    return {}
