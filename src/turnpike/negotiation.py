"""Content negotiation — maps return values to Response objects.

Handlers, middleware and the fallback may return plain values; the
router converts them here. isinstance-based dispatch, no magic, fully
predictable.
"""

import json as json_module
from typing import Any

from turnpike.http.response import Response

JSON_CONTENT_TYPE = "application/json"


def negotiate(value: Any) -> Response:
    """Convert a return value to a Response.

    Dispatch order:

    1. ``Response``            -> pass through
    2. ``None``                -> 200, empty body
    3. ``str``                 -> 200, text/html
    4. ``bytes``               -> 200, application/octet-stream
    5. ``dict`` / ``list``     -> 200, application/json
    6. ``(value, int)``        -> negotiate value, override status
    7. ``(value, int, dict)``  -> negotiate value, override status + headers
    8. anything else           -> ``str(value)`` as text/html
    """
    match value:
        case Response():
            return value
        case None:
            return Response(body="")
        case str():
            return Response(body=value)
        case bytes():
            return Response(body=value, content_type="application/octet-stream")
        case dict() | list():
            return Response(body=json_module.dumps(value), content_type=JSON_CONTENT_TYPE)
        case (inner, int() as status):
            return negotiate(inner).with_status(status)
        case (inner, int() as status, dict() as headers):
            return negotiate(inner).with_status(status).with_headers(headers)
        case _:
            return Response(body=str(value))
