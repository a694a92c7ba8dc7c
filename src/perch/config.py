"""Router configuration.

RouterConfig is a frozen dataclass, immutable after creation. Each Router
owns one, so default headers can differ per router without shared
mutable state.
"""

from dataclasses import dataclass

# Seeded into every ResponseBuilder unless a router overrides them
DEFAULT_HEADERS: tuple[tuple[str, str], ...] = (
    ("Content-Type", "application/json"),
    ("Access-Control-Allow-Origin", "*"),
    ("Access-Control-Allow-Methods", "GET, POST, PUT, DELETE, OPTIONS"),
    ("Access-Control-Allow-Headers", "Content-Type, Authorization"),
)


@dataclass(frozen=True, slots=True)
class RouterConfig:
    """Router configuration. Immutable after creation.

    All fields have sensible defaults. Override what you need::

        config = RouterConfig(default_headers=(("Content-Type", "text/plain"),))
    """

    # Response defaults
    default_headers: tuple[tuple[str, str], ...] = DEFAULT_HEADERS

    # Fallback responses
    not_found_body: str = "404"
    error_body: str = "Internal Server Error"
    fallback_content_type: str = "text/plain; charset=utf-8"

    # CORS preflight reply installed by Router.enable_cors()
    cors_status: int = 204
