"""Call controller actions that may be ``def`` or ``async def``.

Usage::

    from yieldkit._internal.invoke import invoke

    result = await invoke(controller.index)
"""

import inspect
from typing import Any


async def invoke(action: Any, *args: Any, **kwargs: Any) -> Any:
    """Call an action and await the result if it is awaitable."""
    result = action(*args, **kwargs)
    if inspect.isawaitable(result):
        result = await result
    return result
