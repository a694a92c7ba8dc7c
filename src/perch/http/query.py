"""Query string parsing.

Duplicate keys collapse to the LAST occurrence: ``?a=1&a=2`` gives
``{"a": "2"}``. Blank values are kept, so ``?flag=`` gives ``{"flag": ""}``.
"""

from urllib.parse import parse_qsl


def parse_query(query_string: str | bytes) -> dict[str, str]:
    """Parse a raw query string into a last-wins ``{key: value}`` dict.

    Pairs are split on ``&``, then on the first ``=``. Keys and values are
    percent-decoded with ``+`` read as a space. A pair without ``=`` maps
    to an empty string.
    """
    if isinstance(query_string, bytes):
        query_string = query_string.decode("latin-1")
    if not query_string:
        return {}
    # dict() keeps the last value for repeated keys
    return dict(parse_qsl(query_string, keep_blank_values=True))
