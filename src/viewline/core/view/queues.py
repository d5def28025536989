"""Queue registry for view handlers."""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from typing import Any, Literal

from viewline.core.errors import ConfigurationError

logger = logging.getLogger(__name__)

QueueEntry = Callable[..., Any] | Sequence[Any]
QueueName = Literal["init", "action", "query", "render"]

QUEUE_NAMES: tuple[QueueName, ...] = ("init", "action", "query", "render")


@dataclass(frozen=True, slots=True)
class QueueSnapshot:
    """Copy of the four queues taken when the pipeline is built."""

    init: tuple[QueueEntry, ...]
    action: tuple[QueueEntry, ...]
    query: tuple[QueueEntry, ...]
    render: tuple[QueueEntry, ...]




class QueueRegistry:
    """Four ordered lists of handlers.

    - ``init``: executed first, one entry after the other
    - ``action``: executed second, in parallel, when their conditions were met
    - ``query``: executed third, in parallel
    - ``render``: executed last, in parallel

    A list or tuple entry is a batch run in parallel as one step. Once sealed
    the registry refuses new entries.
    """

    def __init__(self) -> None:
        self._queues: dict[QueueName, list[QueueEntry]] = {name: [] for name in QUEUE_NAMES}
        self._sealed = False

    def add(self, queue: QueueName, entry: QueueEntry) -> bool:
        """Append ``entry`` to ``queue``.

        Returns:
            False when the registry is sealed and the entry was dropped.

        Raises:
            ConfigurationError: Unknown queue name.
        """
        if queue not in self._queues:
            raise ConfigurationError(f"Unknown queue: {queue!r}", context={"queue": queue})
        if self._sealed:
            logger.warning("Handler added to %r queue after render started; ignoring it", queue)
            return False
        self._queues[queue].append(entry)
        return True

    def snapshot(self) -> QueueSnapshot:
        """Return a copy of the queues."""
        return QueueSnapshot(**{name: tuple(entries) for name, entries in self._queues.items()})

    def seal(self) -> None:
        self._sealed = True

    @property
    def sealed(self) -> bool:
        return self._sealed
