"""Path template parsing and segment-wise matching.

Templates are ``/``-separated segments of three kinds::

    "/users"           -> [literal "users"]
    "/users/:id"       -> [literal "users", param "id"]
    "/static/*"        -> [literal "static", wildcard]

A wildcard may only be the final segment and binds the rest of the path
under the key ``"*"``. Matching is a single left-to-right pass: each
segment kind has exactly one admissible match per position, so no
backtracking is needed.
"""

from dataclasses import dataclass
from enum import Enum
from urllib.parse import unquote

from perch.errors import ConfigurationError

WILDCARD = "*"


class SegmentKind(Enum):
    LITERAL = "literal"
    PARAM = "param"
    WILDCARD = "wildcard"


@dataclass(frozen=True, slots=True)
class PathSegment:
    """A parsed segment of a path template.

    Literal:  ``users``  (kind=LITERAL, value="users")
    Param:    ``:id``    (kind=PARAM, value="id")
    Wildcard: ``*``      (kind=WILDCARD, value="*")
    """

    kind: SegmentKind
    value: str


def split_path(path: str) -> list[str]:
    """Split a path into segments, keeping empty ones.

    ``"/"`` is a single empty segment and a trailing slash adds one, so
    ``"/users"`` and ``"/users/"`` are different paths.
    """
    if path.startswith("/"):
        path = path[1:]
    return path.split("/")


def parse_template(template: str) -> tuple[PathSegment, ...]:
    """Parse a path template into segments.

    Raises ``ConfigurationError`` for malformed templates: a missing
    leading slash, an empty or non-identifier parameter name, a repeated
    parameter name, or a wildcard that is not the final segment.
    """
    if not template.startswith("/"):
        msg = f"Path template {template!r} must start with '/'."
        raise ConfigurationError(msg)

    parts = split_path(template)
    segments: list[PathSegment] = []
    seen: set[str] = set()

    for index, part in enumerate(parts):
        if part == WILDCARD:
            if index != len(parts) - 1:
                msg = f"Wildcard '*' must be the last segment in {template!r}."
                raise ConfigurationError(msg)
            segments.append(PathSegment(SegmentKind.WILDCARD, WILDCARD))
        elif part.startswith(":"):
            name = part[1:]
            if not name.isidentifier():
                msg = (
                    f"Invalid parameter segment {part!r} in {template!r}: "
                    "expected ':name' with a valid identifier."
                )
                raise ConfigurationError(msg)
            if name in seen:
                msg = f"Duplicate parameter {name!r} in {template!r}."
                raise ConfigurationError(msg)
            seen.add(name)
            segments.append(PathSegment(SegmentKind.PARAM, name))
        elif "*" in part:
            msg = f"Wildcard must be a whole segment, got {part!r} in {template!r}."
            raise ConfigurationError(msg)
        else:
            segments.append(PathSegment(SegmentKind.LITERAL, unquote(part)))

    return tuple(segments)


@dataclass(frozen=True, slots=True)
class PathPattern:
    """A compiled path template.

    Usage::

        pattern = PathPattern.compile("/users/:id")
        pattern.match("/users/42")   # {"id": "42"}
        pattern.match("/users")      # None
    """

    template: str
    segments: tuple[PathSegment, ...]

    @classmethod
    def compile(cls, template: str) -> "PathPattern":
        """Parse *template*, failing fast on malformed syntax."""
        return cls(template=template, segments=parse_template(template))

    @property
    def has_wildcard(self) -> bool:
        return bool(self.segments) and self.segments[-1].kind is SegmentKind.WILDCARD

    @property
    def param_names(self) -> tuple[str, ...]:
        """Names bound by this pattern, in template order."""
        return tuple(s.value for s in self.segments if s.kind is SegmentKind.PARAM)

    def match(self, raw_path: str) -> dict[str, str] | None:
        """Match a raw (percent-encoded) request path.

        Returns the bound parameters (empty dict when the template has
        none), or ``None`` when the path does not match.
        """
        parts = split_path(raw_path)
        segments = self.segments

        if self.has_wildcard:
            if len(parts) < len(segments):
                return None
        elif len(parts) != len(segments):
            return None

        params: dict[str, str] = {}
        for index, segment in enumerate(segments):
            if segment.kind is SegmentKind.WILDCARD:
                params[WILDCARD] = unquote("/".join(parts[index:]))
                break

            part = parts[index]
            if segment.kind is SegmentKind.PARAM:
                if not part:
                    return None
                params[segment.value] = unquote(part)
            elif unquote(part) != segment.value:
                return None

        return params
