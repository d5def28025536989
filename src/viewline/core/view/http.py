"""Request/response collaborator contracts.

Viewline never parses HTTP itself. Frameworks hand in objects that satisfy
``Request`` and ``Response``; ``RequestState`` and ``ResponseState`` are small
in-memory implementations for tests, scripts and adapters.
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable, Mapping, MutableMapping
from dataclasses import dataclass, field
from typing import Any, Protocol, runtime_checkable

from viewline.core import utils

logger = logging.getLogger(__name__)

Renderer = Callable[[str, dict[str, Any]], Awaitable[Any] | Any]


@runtime_checkable
class Request(Protocol):
    """What a view reads from the incoming request.

    Any other attribute (``user``, ``session``...) is reachable from field-map
    conditions through dotted paths.
    """

    method: str
    query: Mapping[str, Any]
    body: Mapping[str, Any]


@runtime_checkable
class Response(Protocol):
    """What a view writes to: the template locals and the render operation."""

    locals: MutableMapping[str, Any]

    def render(self, view_name: str, locals: Mapping[str, Any] | None = None) -> Any:
        """Render ``view_name`` with ``locals`` (sync or async)."""
        ...


class RequestState:
    """In-memory request.

    Extra keyword arguments become attributes, so nested data such as
    ``user`` or ``session`` can be matched by field-map conditions.

    Example:
        >>> req = RequestState("post", body={"action": "save"}, user={"role": "admin"})
        >>> req.user["role"]
        'admin'
    """

    def __init__(
        self,
        method: str = "GET",
        *,
        query: Mapping[str, Any] | None = None,
        body: Mapping[str, Any] | None = None,
        **extra: Any,
    ):
        self.method = method.upper()
        self.query = dict(query or {})
        self.body = dict(body or {})
        for key, value in extra.items():
            setattr(self, key, value)

    def __repr__(self) -> str:
        return f"RequestState(method={self.method!r}, query={self.query!r}, body={self.body!r})"


@dataclass(slots=True)
class ResponseState:
    """In-memory response.

    ``render`` merges the response locals with the explicit map (explicit
    values win) and hands both to ``renderer``. Without a renderer the merged
    map itself is the rendered output.
    """

    locals: dict[str, Any] = field(default_factory=dict)
    renderer: Renderer | None = None
    rendered: Any = None
    view_name: str | None = None

    async def render(self, view_name: str, locals: Mapping[str, Any] | None = None) -> Any:
        merged = {**self.locals, **dict(locals or {})}
        self.view_name = view_name
        if self.renderer is None:
            self.rendered = merged
        else:
            self.rendered = await utils.run_sync_or_async(self.renderer, view_name, merged)
        logger.debug("Rendered view %r", view_name)
        return self.rendered
