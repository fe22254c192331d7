"""Call sync or async hooks uniformly.

Lifecycle hooks can be ``def`` or ``async def``. Any code that calls a
user-provided hook must handle both cases. This module provides a single
helper so the sync/async check lives in exactly one place.

Usage::

    from reverie._internal.invoke import invoke

    result = await invoke(hook)
"""

import inspect
from typing import Any


async def invoke(func: Any, *args: Any, **kwargs: Any) -> Any:
    """Call *func* and await the result if it's awaitable."""
    result = func(*args, **kwargs)
    if inspect.isawaitable(result):
        result = await result
    return result
