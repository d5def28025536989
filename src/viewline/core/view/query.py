"""Deferred queries and their outcome chain.

``View.query`` returns a ``QueryOutcomes`` builder; the binding itself runs
later, inside the pipeline's query batch.

Ex.
    view.query("books", Book.find())
    # locals["books"] is the query result

    view.query("admin.books", Book.find(owner="admin")).none(show_placeholder)
    # locals["admin"]["books"]; show_placeholder runs when nothing came back

    view.query("books", Book.find(), "author")
    # the result goes through populate_related(result, "author")
"""

from __future__ import annotations

import asyncio
import inspect
import logging
from collections.abc import Awaitable, Callable, Mapping, Sequence
from typing import Any, Literal, Protocol, Self

from viewline.core import utils
from viewline.core.errors import ConfigurationError, QueryError
from viewline.core.view.context import ExecutionContext

logger = logging.getLogger(__name__)

Outcome = Literal["err", "none", "then", "forward"]
RelationSpec = str | Sequence[str]

OUTCOME_KINDS = ("err", "none", "then")

PopulateRelated = Callable[[Any, RelationSpec], Awaitable[Any] | Any]


class Query(Protocol):
    """A pending data fetch.

    ``exec()`` returns the result (or an awaitable) and raises on failure.
    Callback-style queries report through ``callback(error, result)``: an
    ``exec`` that takes any positional argument (``*args`` included) is
    called with the callback, and still may return its result instead.
    """

    def exec(self, *args: Any) -> Any: ...


def is_relation_spec(value: Any) -> bool:
    if isinstance(value, str):
        return bool(value)
    if isinstance(value, Sequence) and value:
        return all(isinstance(item, str) for item in value)
    return False


class QueryOutcomes:
    """Chainable outcome handlers of one query: ``err``, ``none`` and ``then``.

    At most one handler per kind; registering the same kind again replaces
    the previous handler.
    """

    def __init__(self, options: Any = None, *, can_populate: bool = False):
        """Create the chain from the ``options`` argument of ``View.query``.

        Args:
            options: None, a relation spec (shorthand for ``then``), or a
                mapping with any of ``err``, ``none``, ``then``.
            can_populate: Whether a ``populate_related`` collaborator exists.
        """
        self._can_populate = can_populate
        self.callbacks: dict[str, Any] = {}
        if options is None:
            return
        if is_relation_spec(options):
            options = {"then": options}
        if not isinstance(options, Mapping):
            raise ConfigurationError(
                f"Query options must be a relation spec or a mapping, got {type(options).__name__}"
            )
        for kind in OUTCOME_KINDS:
            if options.get(kind):
                getattr(self, kind)(options[kind])

    def has(self, kind: str) -> bool:
        return kind in self.callbacks

    def err(self, handler: Callable[..., Any]) -> Self:
        """Handle a failed query. Receives ``error``; raising forwards it."""
        self.callbacks["err"] = self._check_callable("err", handler)
        return self

    def none(self, handler: Callable[..., Any]) -> Self:
        """Handle an empty result (``None`` or an empty sequence)."""
        self.callbacks["none"] = self._check_callable("none", handler)
        return self

    def then(self, handler: Callable[..., Any] | RelationSpec) -> Self:
        """Handle a successful result, or populate relations on it."""
        if is_relation_spec(handler):
            if not self._can_populate:
                raise ConfigurationError(
                    f"Relation spec {handler!r} needs a populate_related collaborator"
                )
            self.callbacks["then"] = handler
            return self
        self.callbacks["then"] = self._check_callable("then", handler)
        return self

    @staticmethod
    def _check_callable(kind: str, handler: Any) -> Callable[..., Any]:
        if not callable(handler):
            raise ConfigurationError(f"Query {kind}() handler must be callable")
        return handler


def select_outcome(
    callbacks: Mapping[str, Any], error: BaseException | None, result: Any
) -> Outcome:
    """Pick the single outcome that fires: err > none > then > forward."""
    if error is not None:
        return "err" if "err" in callbacks else "forward"
    if utils.is_empty_result(result) and "none" in callbacks:
        return "none"
    if "then" in callbacks:
        return "then"
    return "forward"


def _accepts_callback(exec_: Callable[..., Any]) -> bool:
    """True when ``exec`` can take a positional argument, ``*args`` included."""
    try:
        signature = inspect.signature(exec_)
    except (TypeError, ValueError):
        return False
    return any(
        param.kind
        in (param.POSITIONAL_ONLY, param.POSITIONAL_OR_KEYWORD, param.VAR_POSITIONAL)
        for param in signature.parameters.values()
    )


class QueryBinding:
    """One deferred fetch: result path, pending query and outcome chain.

    Runs once. The outcome handlers receive by name ``error`` / ``result``
    plus ``context``, ``locals``, ``request`` and ``response``.
    """

    def __init__(
        self,
        path: str,
        query: Query,
        outcomes: QueryOutcomes,
        context: ExecutionContext,
        populate_related: PopulateRelated | None = None,
    ):
        if not callable(getattr(query, "exec", None)):
            raise ConfigurationError(f"Query bound to {path!r} must expose exec()")
        self.path = path
        self.query = query
        self.outcomes = outcomes
        self.context = context
        self.populate_related = populate_related
        self.fired: Outcome | None = None
        self._executed = False
        context.locals.ensure(path)

    async def run(self) -> None:
        """Execute the query and fire exactly one outcome.

        Raises:
            Exception: The query error when no ``err`` handler swallowed it,
                or whatever an outcome handler raised.
        """
        if self._executed:
            raise ConfigurationError(f"Query bound to {self.path!r} already executed")
        self._executed = True

        error, result = await self._exec()
        self.context.locals.set(self.path, result)

        callbacks = self.outcomes.callbacks
        self.fired = select_outcome(callbacks, error, result)
        logger.debug("Query %r finished; outcome=%s", self.path, self.fired)

        available = {
            "error": error,
            "result": result,
            "context": self.context,
            "locals": self.context.locals,
            "request": self.context.request,
            "response": self.context.response,
        }
        match self.fired:
            case "err":
                await utils.call_with_available(callbacks["err"], available)
            case "none":
                await utils.call_with_available(callbacks["none"], available)
            case "then" if callable(callbacks["then"]):
                await utils.call_with_available(callbacks["then"], available)
            case "then":
                await utils.run_sync_or_async(self.populate_related, result, callbacks["then"])
            case "forward":
                if error is not None:
                    raise error

    async def _exec(self) -> tuple[BaseException | None, Any]:
        exec_ = self.query.exec
        try:
            if _accepts_callback(exec_):
                error, result = await self._exec_with_callback(exec_)
            else:
                error, result = None, await utils.run_sync_or_async(exec_)
        except Exception as exc:
            error, result = exc, None
        if not error:
            return None, result
        if not isinstance(error, BaseException):
            error = QueryError(self.path, error)
        return error, result

    async def _exec_with_callback(self, exec_: Callable[..., Any]) -> tuple[Any, Any]:
        """Call ``exec(callback)``.

        The callback wins when it fires. Otherwise an awaitable return value,
        or a non-None plain one, is the result; a plain ``None`` means the
        callback is still to come.
        """
        future: asyncio.Future = asyncio.get_running_loop().create_future()

        def callback(error: Any = None, result: Any = None) -> None:
            if future.done():
                logger.warning("Query %r called back more than once; ignoring", self.path)
                return
            future.set_result((error, result))

        try:
            returned = exec_(callback)
            if inspect.isawaitable(returned):
                returned = await returned
                if not future.done():
                    return None, returned
        except Exception:
            if not future.done():
                raise
            logger.debug("Query %r raised after calling back", self.path, exc_info=True)
            return await future
        if not future.done() and returned is not None:
            return None, returned
        return await future
