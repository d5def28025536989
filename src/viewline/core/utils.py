"""Small core utilities used across the project."""

import inspect
import logging
from collections.abc import Callable, Mapping, Sequence
from typing import Any

# Set up a module-level logger
logger = logging.getLogger(__name__)


async def run_sync_or_async(func: Callable[..., Any], *args: Any, **kwargs: Any) -> Any:
    """Call ``func`` and await the result when it is awaitable."""
    result = func(*args, **kwargs)
    if inspect.isawaitable(result):
        return await result
    return result


def available_kwargs(func: Callable[..., Any], available: Mapping[str, Any]) -> dict[str, Any]:
    """Select the values of ``available`` that ``func`` accepts by name.

    A function with ``**kwargs`` receives everything. Callables without an
    inspectable signature receive nothing.
    """
    try:
        signature = inspect.signature(func)
    except (TypeError, ValueError):
        return {}
    if any(param.kind == param.VAR_KEYWORD for param in signature.parameters.values()):
        return dict(available)
    return {name: value for name, value in available.items() if name in signature.parameters}


async def call_with_available(func: Callable[..., Any], available: Mapping[str, Any]) -> Any:
    """Invoke a sync or async handler, injecting arguments by parameter name."""
    return await run_sync_or_async(func, **available_kwargs(func, available))


def is_empty_result(result: Any) -> bool:
    """Return True for ``None`` or a zero-length ordered sequence."""
    if result is None:
        return True
    if isinstance(result, Sequence) and not isinstance(result, str | bytes):
        return len(result) == 0
    return False


def is_blank(value: Any) -> bool:
    """Return True for values that count as absent along a dotted path.

    ``None``, ``False``, zero and empty strings are blank. Containers and
    other objects never are, even when empty.
    """
    if value is None:
        return True
    if isinstance(value, str | bytes | int | float):
        return not value
    return False
