"""Scotty - pipeline builder and executor for views.

Scotty turns the view queues into one linear pipeline: series steps, some of
which fan out into a parallel batch. Steps run strictly one after the other;
the first error stops the pipeline and becomes the terminal error.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable, Iterable, Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any

from viewline.core import utils
from viewline.core.errors import ConfigurationError
from viewline.core.view.queues import QueueEntry, QueueSnapshot

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class SeriesStep:
    """A single handler run on its own."""

    handler: Callable[..., Any]
    label: str = "init"


@dataclass(frozen=True, slots=True)
class BatchStep:
    """A set of entries started together; done when all of them are done."""

    entries: tuple[QueueEntry, ...]
    label: str = "batch"


Step = SeriesStep | BatchStep


@dataclass(slots=True)
class Pipeline:
    """Linear sequence of steps built from a queue snapshot."""

    steps: list[Step] = field(default_factory=list)

    def validate(self) -> None:
        """Reject malformed entries before anything runs.

        Raises:
            ConfigurationError: An entry is neither callable nor a list/tuple of callables.
        """
        for position, step in enumerate(self.steps):
            match step:
                case SeriesStep(handler=handler):
                    _validate_entry(handler, step.label, position)
                case BatchStep(entries=entries):
                    for entry in entries:
                        _validate_entry(entry, step.label, position)


def _validate_entry(entry: Any, label: str, position: int) -> None:
    if callable(entry):
        return
    if isinstance(entry, list | tuple):
        for member in entry:
            _validate_entry(member, label, position)
        return
    raise ConfigurationError(
        f"Pipeline entries must be functions or lists of functions; "
        f"got {type(entry).__name__} in step {position} ({label})",
        context={"step": position, "label": label},
    )


class Scotty:
    """Builds and runs view pipelines.

    Famous quote from Montgomery Scott in Star Trek:
    "I'm giving her all she's got, Captain!"
    """

    def __init__(self, available: Mapping[str, Any] | None = None):
        """Create a Scotty.

        Args:
            available: Values injected into handlers by parameter name.
        """
        self.available = dict(available or {})
        self._in_flight: set[asyncio.Task] = set()
        logger.debug("Scotty instance created.")

    @staticmethod
    def build(snapshot: QueueSnapshot, pre_render: Iterable[Callable[..., Any]] = ()) -> Pipeline:
        """Linearize the queues.

        1. every init entry as its own step (a list entry becomes a batch)
        2. the action queue as one batch
        3. the query queue as one batch
        4. the pre-render hooks as one batch
        5. the render queue as one batch
        """
        pipeline = Pipeline()
        for entry in snapshot.init:
            if isinstance(entry, list | tuple):
                pipeline.steps.append(BatchStep(entries=tuple(entry), label="init"))
            else:
                pipeline.steps.append(SeriesStep(handler=entry, label="init"))
        pipeline.steps.append(BatchStep(entries=snapshot.action, label="action"))
        pipeline.steps.append(BatchStep(entries=snapshot.query, label="query"))
        pipeline.steps.append(BatchStep(entries=tuple(pre_render), label="pre_render"))
        pipeline.steps.append(BatchStep(entries=snapshot.render, label="render"))
        return pipeline

    async def run(self, pipeline: Pipeline) -> BaseException | None:
        """Run every step in series.

        Returns:
            The first error raised by a handler, or None.
        """
        for position, step in enumerate(pipeline.steps):
            logger.debug("Running step %d (%s)", position, step.label)
            try:
                await self._run_step(step)
            except Exception as exc:
                logger.debug(
                    "Step %d (%s) failed: %s; skipping %d remaining step(s)",
                    position,
                    step.label,
                    exc,
                    len(pipeline.steps) - position - 1,
                )
                return exc
        return None

    async def run_entry(self, entry: QueueEntry) -> None:
        """Run one entry: a handler, or a nested list run as a batch."""
        if isinstance(entry, list | tuple):
            await self.run_batch(entry)
            return
        await utils.call_with_available(entry, self.available)

    async def run_batch(self, entries: Sequence[QueueEntry]) -> None:
        """Start every entry concurrently and wait for all of them.

        The first failure ends the wait and is raised; members still running
        are left to finish on their own (they are not cancelled).
        """
        if not entries:
            return
        tasks = [asyncio.create_task(self.run_entry(entry)) for entry in entries]
        for task in tasks:
            self._in_flight.add(task)
            task.add_done_callback(self._forget)

        done, pending = await asyncio.wait(tasks, return_when=asyncio.FIRST_EXCEPTION)
        for task in tasks:
            if task in done and not task.cancelled() and task.exception() is not None:
                if pending:
                    logger.debug("Batch aborted with %d member(s) still running", len(pending))
                raise task.exception()

    async def drain(self) -> None:
        """Wait for batch members left running after an aborted batch."""
        while self._in_flight:
            await asyncio.gather(*list(self._in_flight), return_exceptions=True)

    @property
    def in_flight(self) -> int:
        return len(self._in_flight)

    async def _run_step(self, step: Step) -> None:
        match step:
            case SeriesStep(handler=handler):
                await utils.call_with_available(handler, self.available)
            case BatchStep(entries=entries):
                await self.run_batch(entries)

    def _forget(self, task: asyncio.Task) -> None:
        self._in_flight.discard(task)
        if task.cancelled():
            return
        if task.exception() is not None:
            logger.debug("Batch member finished with error: %r", task.exception())


Executor = Scotty
