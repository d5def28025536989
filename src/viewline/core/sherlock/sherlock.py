"""Sherlock condition evaluator.

Sherlock decides, from the request state, which queue (if any) a handler
registered through ``View.on`` belongs to.
"""

import logging
from collections.abc import Mapping
from typing import Any, Literal

from viewline.core import utils
from viewline.core.dto.view_dto import ViewSettings
from viewline.core.sherlock.conditions import (
    Condition,
    FieldMap,
    Lifecycle,
    Predicate,
    VerbMatch,
)

logger = logging.getLogger(__name__)

QueueName = Literal["init", "action", "render"]

_MISSING = object()


def lookup(container: Any, key: str) -> Any:
    """Return ``container[key]`` for mappings, ``container.key`` otherwise.

    Missing keys return a private sentinel so that ``None`` stays a value.
    """
    if isinstance(container, Mapping):
        return container.get(key, _MISSING)
    return getattr(container, key, _MISSING)


def contains(container: Any, key: str) -> bool:
    """Return True when ``key`` exists in ``container`` (even with a falsy value)."""
    return lookup(container, key) is not _MISSING


def loose_equals(actual: Any, expected: Any) -> bool:
    """Compare request values the way form and query data need.

    Query strings and form bodies only carry text, so ``"2"`` must match
    ``2`` and an object rendering as ``"admin"`` must match ``"admin"``.
    """
    if actual is _MISSING:
        actual = None
    if actual == expected:
        return True
    if actual is None or expected is None:
        return False
    if isinstance(actual, bool) or isinstance(expected, bool):
        return False
    if isinstance(actual, str) and isinstance(expected, int | float):
        return _numeric_equals(actual, expected)
    if isinstance(expected, str) and isinstance(actual, int | float):
        return _numeric_equals(expected, actual)
    if isinstance(expected, str):
        return str(actual) == expected
    if isinstance(actual, str):
        return actual == str(expected)
    return False


def _numeric_equals(text: str, number: int | float) -> bool:
    try:
        return float(text.strip()) == number
    except ValueError:
        return False


def check_path(source: Any, path: str, expected: Any) -> bool:
    """Check one ``{path: expected}`` entry against ``source``.

    Every intermediate segment must exist and not be blank (``None``, ``False``,
    zero or an empty string); empty containers count as present. ``expected is True``
    only requires the final segment to exist; anything else is compared
    with ``loose_equals``.
    """
    *parents, last = path.split(".")
    container = source
    for part in parents:
        value = lookup(container, part)
        if value is _MISSING or utils.is_blank(value):
            return False
        container = value
    if expected is True and contains(container, last):
        return True
    return loose_equals(lookup(container, last), expected)


def check_fields(source: Any, fields: Mapping[str, Any]) -> bool:
    """Logical AND of ``check_path`` over a field map."""
    return all(check_path(source, path, expected) for path, expected in fields.items())


class Sherlock:
    """Evaluates ``on()`` conditions against one request.

    Famous quote from Sherlock Holmes:
    "When you have eliminated the impossible, whatever remains, however
    improbable, must be the truth."
    """

    def __init__(self, request: Any, settings: ViewSettings | None = None):
        """Create a Sherlock bound to a request.

        Args:
            request: Request collaborator (method, query, body, nested data).
            settings: View settings; decides which verbs read the body.
        """
        self.request = request
        self.settings = settings or ViewSettings()

    def evaluate(self, condition: Condition) -> bool:
        """Return True when the handler paired with ``condition`` should run."""
        match condition:
            case Predicate(function=function):
                return self._evaluate_predicate(function)
            case FieldMap(fields=fields):
                return check_fields(self.request, fields)
            case VerbMatch(verb=verb, fields=fields):
                return self._evaluate_verb(verb, fields)
            case Lifecycle():
                return True

    def route(self, condition: Condition) -> QueueName | None:
        """Return the queue the paired handler goes to, or None to drop it."""
        match condition:
            case Lifecycle(stage=stage):
                return stage
            case _:
                if self.evaluate(condition):
                    return "action"
                logger.debug("Condition %r not met; handler skipped", condition)
                return None

    def _evaluate_predicate(self, function) -> bool:
        return bool(function())

    def _evaluate_verb(self, verb: str, fields: Mapping[str, Any] | None) -> bool:
        method = str(getattr(self.request, "method", "") or "")
        if method.upper() != verb.upper():
            return False
        if fields is None:
            return True
        if verb.lower() in self.settings.body_verbs:
            source = getattr(self.request, "body", None)
        else:
            source = getattr(self.request, "query", None)
        return check_fields(source if source is not None else {}, fields)


ConditionEvaluator = Sherlock
