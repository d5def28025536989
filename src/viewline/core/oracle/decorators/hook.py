"""``@hook`` decorator and the OracleHook record.

Hook names are checked when the hook is declared: a misspelt name such as
``@hook("pre_rendr")`` fails at import time instead of silently never running.

Ex.
    @hook
    def pre_render(locals):
        locals.set("year", 2024)

    @hook("pre_render", priority=5)
    def add_breadcrumbs(request, locals):
        ...
"""

from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any

from viewline.core.errors import ConfigurationError

PRE_RENDER = "pre_render"

# points of the view pipeline that run Oracle hooks
HOOK_NAMES = (PRE_RENDER,)


def check_hook_name(name: Any) -> str:
    """Return ``name`` when the Oracle runs hooks under it.

    Raises:
        ConfigurationError: Unknown hook name.
    """
    if name not in HOOK_NAMES:
        raise ConfigurationError(
            f"Unknown hook name {name!r}; expected one of: {', '.join(HOOK_NAMES)}",
            context={"hook": name},
        )
    return name


@dataclass(slots=True)
class OracleHook:
    """A function run at a named point of every view, by descending priority."""

    name: str
    function: Callable[..., Any] = field(repr=False)
    priority: int = 1
    source: str | None = None

    def __post_init__(self) -> None:
        check_hook_name(self.name)
        if not callable(self.function):
            raise ConfigurationError(f"Hook {self.name!r} must wrap a callable")

    def __call__(self, *args: Any, **kwargs: Any) -> Any:
        return self.function(*args, **kwargs)


def hook(name_or_function: str | Callable[..., Any] | None = None, *, priority: int = 1) -> Any:
    """Declare an Oracle hook.

    ``@hook`` names the hook after the function; ``@hook("pre_render")``
    names it explicitly; ``@hook(priority=2)`` only sets the priority
    (higher runs first).

    Raises:
        ConfigurationError: The hook name is not one the Oracle runs.
    """
    if callable(name_or_function):
        return OracleHook(
            name=name_or_function.__name__, function=name_or_function, priority=priority
        )
    if name_or_function is not None:
        check_hook_name(name_or_function)

    def decorator(func: Callable[..., Any]) -> OracleHook:
        return OracleHook(name=name_or_function or func.__name__, function=func, priority=priority)

    return decorator
