"""Route and RouteMatch frozen dataclasses."""

from dataclasses import dataclass

from perch._internal.types import Handler
from perch.routing.pattern import PathPattern


@dataclass(frozen=True, slots=True)
class Route:
    """A frozen route entry.

    Created at registration time and owned by the router's route table.
    ``arity`` caches how many positional arguments the handler accepts
    (``None`` means all of them).
    """

    method: str
    pattern: PathPattern
    handler: Handler
    arity: int | None = None

    @property
    def path(self) -> str:
        """The template this route was registered with."""
        return self.pattern.template


@dataclass(frozen=True, slots=True)
class RouteMatch:
    """Result of a successful route match."""

    route: Route
    path_params: dict[str, str]
