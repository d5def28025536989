"""View - per-request orchestration helper.

A View collects the work needed to answer one request: conditional actions,
deferred queries and a final render. Nothing runs until ``render()``.

Ex.
    view = View(request, response)
    view.on("init", load_user)
    view.on("post", {"action": "save"}, save_book)
    view.query("books", Book.find()).none(show_placeholder)
    await view.render("books/index")
"""

import logging
from collections.abc import Callable, Iterable
from typing import Any, Self

from viewline.core import utils
from viewline.core.dto.result_dto import StatusCode, StatusDetail
from viewline.core.dto.view_dto import RenderResult, ViewSettings
from viewline.core.errors import ConfigurationError
from viewline.core.oracle.oracle import Oracle
from viewline.core.scotty.scotty import Scotty
from viewline.core.sherlock.conditions import parse_condition
from viewline.core.sherlock.sherlock import Sherlock
from viewline.core.view.context import ExecutionContext
from viewline.core.view.queues import QueueRegistry
from viewline.core.view.query import PopulateRelated, Query, QueryBinding, QueryOutcomes

logger = logging.getLogger(__name__)


class View:
    """Per-request helper to register actions and queries, then render.

    Handlers are plain or ``async`` callables. Their arguments are injected
    by name from ``context``, ``view``, ``request``, ``response`` and
    ``locals``; returning completes the handler, raising aborts the pipeline.
    """

    def __init__(
        self,
        request: Any,
        response: Any,
        *,
        hooks: Oracle | Iterable[Callable[..., Any]] | None = None,
        populate_related: PopulateRelated | None = None,
        settings: ViewSettings | None = None,
    ):
        """Create a View for one request.

        Args:
            request: Request collaborator (must expose ``method``).
            response: Response collaborator (must expose a ``locals`` mapping).
            hooks: Pre-render hooks, as an Oracle or an ordered iterable of callables.
            populate_related: Collaborator used when a query's ``then`` is a relation spec.
            settings: View settings (verbs, body verbs, strict conditions, default locals).

        Raises:
            ConfigurationError: The request or response object is unusable.
        """
        if request is None or not hasattr(request, "method"):
            raise ConfigurationError("View requires a request object exposing 'method'")
        if response is None:
            raise ConfigurationError("View requires a response object")

        self.settings = settings or ViewSettings()
        self.context = ExecutionContext(request=request, response=response)
        self.context.seed(self.settings.default_locals)
        self.queues = QueueRegistry()
        self.sherlock = Sherlock(request, self.settings)
        self.scotty = Scotty(
            {
                "context": self.context,
                "view": self,
                "request": request,
                "response": response,
                "locals": self.context.locals,
            }
        )
        self.bindings: list[QueryBinding] = []
        self._hooks = hooks
        self._populate_related = populate_related
        self._rendered = False
        logger.debug("View created for %s request", getattr(request, "method", "?"))

    @property
    def request(self) -> Any:
        return self.context.request

    @property
    def response(self) -> Any:
        return self.context.response

    @property
    def locals(self):
        return self.context.locals

    def on(self, on: Any, *args: Any) -> Self:
        """Add a handler (or a list of handlers run in parallel) to a queue.

        Ex.
            view.on(lambda: user.is_admin, handler)        # truthy predicate
            view.on({"user.name.first": "Admin"}, handler)  # request field map
            view.on({"session.cart": True}, handler)         # path exists
            view.on("get", handler)                          # HTTP verb
            view.on("post", {"action": "save"}, handler)    # verb + body fields
            view.on("get", {"page": 2}, handler)            # verb + query fields
            view.on("init", handler)                         # run first, in series
            view.on("init", [first, second])                 # one parallel init step
            view.on("render", handler)                       # run last

        Returns:
            The view, for chaining.
        """
        parsed = parse_condition(on, *args, settings=self.settings)
        if parsed is None:
            return self
        condition, handler = parsed
        queue = self.sherlock.route(condition)
        if queue is not None and self.queues.add(queue, handler):
            logger.debug("Handler queued in %r by %r", queue, condition)
        return self

    def query(self, path: str, query: Query, options: Any = None) -> QueryOutcomes:
        """Queue a query; its result is stored at ``locals[path]`` before render.

        ``path`` may be dotted (``"admin.books"``); intermediate containers are
        created as required. ``options`` is a relation spec (shorthand for
        ``then``) or a mapping of outcome handlers.

        Returns:
            The chainable outcome builder (``err``, ``none``, ``then``).
        """
        outcomes = QueryOutcomes(options, can_populate=self._populate_related is not None)
        if self.queues.sealed:
            logger.warning("Query bound to %r after render started; ignoring it", path)
            return outcomes
        binding = QueryBinding(
            path,
            query,
            outcomes,
            self.context,
            populate_related=self._populate_related,
        )
        self.bindings.append(binding)
        self.queues.add("query", binding.run)
        return outcomes

    async def render(
        self,
        target: str | Callable[..., Any],
        locals: dict[str, Any] | Callable[[], dict[str, Any]] | None = None,
        callback: Callable[..., Any] | None = None,
    ) -> RenderResult:
        """Run the pipeline, then render.

        ``target`` is a template name handed to ``response.render`` or a
        function receiving the terminal error (``error``). ``locals`` may be
        a zero-argument function producing the map when the template renders.
        ``callback(error, rendered)`` is notified for template targets.

        Returns:
            RenderResult; is_error() when a step failed or the template failed.

        Raises:
            ConfigurationError: Invalid target, malformed queue entry, or a
                second render of the same view.
        """
        if self._rendered:
            raise ConfigurationError("View.render() may only be called once per request")
        if not isinstance(target, str) and not callable(target):
            raise ConfigurationError(
                "View.render() target must be a template name (string) or a function"
            )
        if isinstance(target, str) and not callable(getattr(self.response, "render", None)):
            raise ConfigurationError("Response object must expose render() for template targets")

        pipeline = self.scotty.build(self.queues.snapshot(), self._pre_render_hooks())
        pipeline.validate()
        self.queues.seal()
        self._rendered = True

        error = await self.scotty.run(pipeline)
        if error is not None:
            logger.debug("Pipeline ended with error: %r", error)

        if isinstance(target, str):
            return await self._render_template(target, locals, callback, error)

        await utils.call_with_available(
            target, {**self.scotty.available, "error": error, "locals": self.context.locals}
        )
        return self._result(error)

    async def drain(self) -> None:
        """Wait for parallel handlers still running after an aborted batch."""
        await self.scotty.drain()

    def _pre_render_hooks(self) -> list[Callable[..., Any]]:
        if self._hooks is None:
            return []
        if isinstance(self._hooks, Oracle):
            return self._hooks.pre_render_hooks()
        return list(self._hooks)

    async def _render_template(
        self,
        view_name: str,
        locals: Any,
        callback: Callable[..., Any] | None,
        error: BaseException | None,
    ) -> RenderResult:
        if callable(locals):
            locals = locals()
        try:
            rendered = await utils.run_sync_or_async(self.response.render, view_name, locals)
        except Exception as exc:
            if callback is None:
                raise
            logger.debug("Template %r failed: %s", view_name, exc)
            await utils.run_sync_or_async(callback, exc, None)
            return RenderResult.fail(
                StatusDetail(code=StatusCode.RENDER_ERROR, message=str(exc)),
                view_name=view_name,
                error=exc,
            )

        if callback is not None:
            await utils.run_sync_or_async(callback, error, rendered)
        if error is not None:
            return RenderResult.fail(
                StatusDetail(
                    code=StatusCode.PIPELINE_ERROR,
                    message=str(error),
                    context={"view_name": view_name},
                ),
                view_name=view_name,
                rendered=rendered,
                error=error,
            )
        return RenderResult.success(view_name=view_name, rendered=rendered)

    def _result(self, error: BaseException | None) -> RenderResult:
        if error is None:
            return RenderResult.success()
        return RenderResult.fail(
            StatusDetail(code=StatusCode.PIPELINE_ERROR, message=str(error)),
            error=error,
        )
