"""Invoke helpers: call sync or async handlers uniformly.

Perch handlers can be ``def`` or ``async def``, and may declare fewer
positional parameters than the dispatcher offers. This module keeps the
sync/async check and the arity trimming in one place.

Usage::

    from perch._internal.invoke import invoke, positional_arity

    arity = positional_arity(handler)
    result = await invoke(handler, arity, request, builder, params, queries)
"""

import inspect
from typing import Any


def positional_arity(handler: Any) -> int | None:
    """Number of positional arguments *handler* accepts.

    Returns ``None`` when the handler takes ``*args`` or its signature
    cannot be inspected (some builtins), meaning "pass everything".
    """
    try:
        sig = inspect.signature(handler)
    except (TypeError, ValueError):
        return None

    count = 0
    for param in sig.parameters.values():
        if param.kind is inspect.Parameter.VAR_POSITIONAL:
            return None
        if param.kind in (
            inspect.Parameter.POSITIONAL_ONLY,
            inspect.Parameter.POSITIONAL_OR_KEYWORD,
        ):
            count += 1
    return count


async def invoke(handler: Any, arity: int | None, *args: Any) -> Any:
    """Call a handler with its leading *args* and await the result if needed.

    Works with both sync and async callables::

        # sync: returns immediately
        def health(req, res):
            return res.send({"ok": True})

        # async: returns a coroutine, awaited here
        async def user(req, res, params):
            row = await db.fetch(params["id"])
            return res.send(row)
    """
    call_args = args if arity is None else args[:arity]
    result = handler(*call_args)
    if inspect.isawaitable(result):
        result = await result
    return result
