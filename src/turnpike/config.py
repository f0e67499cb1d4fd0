"""Router configuration.

RouterConfig is a frozen dataclass — immutable after creation, IDE-autocompletable,
no string-key dict lookups.
"""

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class RouterConfig:
    """Router configuration. Immutable after creation.

    All fields have sensible defaults. Override what you need::

        config = RouterConfig(strict=True, not_found_body="Nothing here")
    """

    # Dispatch
    not_found_body: str = "Not Found"

    # Reverse routing: percent-encode substituted placeholder values
    quote_url_params: bool = True

    # Validate string handlers and middleware aliases when the router freezes
    strict: bool = False

    # ASGI adapter
    debug: bool = False
    max_content_length: int = 16 * 1024 * 1024  # 16 MB
