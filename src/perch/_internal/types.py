"""Shared type aliases used across perch modules."""

from collections.abc import Callable
from typing import Any, TypeAlias

# Route handler: (request, builder, params, queries) -> Response | Awaitable[Response].
# Trailing parameters may be omitted by the handler.
Handler: TypeAlias = Callable[..., Any]
