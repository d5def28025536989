"""Condition specifiers accepted by ``View.on``.

Conditions are a closed set of variants. ``parse_condition`` is the only place
that looks at the runtime type of the public ``on()`` arguments; everything
downstream dispatches on the variant.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from typing import Any, Literal

from viewline.core.dto.view_dto import ViewSettings
from viewline.core.errors import ConfigurationError

logger = logging.getLogger(__name__)

Stage = Literal["init", "render"]

STAGES: tuple[Stage, ...] = ("init", "render")


@dataclass(frozen=True, slots=True)
class Predicate:
    """Route to the action queue when ``function()`` is truthy."""

    function: Callable[[], Any]


@dataclass(frozen=True, slots=True)
class FieldMap:
    """Route to the action queue when every ``{path: expected}`` entry matches the request."""

    fields: Mapping[str, Any]


@dataclass(frozen=True, slots=True)
class VerbMatch:
    """Route to the action queue when the request method is ``verb``.

    ``fields`` (optional) is matched against the body for body verbs and
    against the query parameters otherwise.
    """

    verb: str
    fields: Mapping[str, Any] | None = None


@dataclass(frozen=True, slots=True)
class Lifecycle:
    """Route directly to the ``init`` or ``render`` queue."""

    stage: Stage


Condition = Predicate | FieldMap | VerbMatch | Lifecycle

CONDITION_TYPES = (Predicate, FieldMap, VerbMatch, Lifecycle)


def normalize_fields(spec: Any) -> dict[str, Any]:
    """Turn a secondary specifier into a field map.

    A string ``"name"`` means ``{"name": True}``; ``None`` means no constraint.
    """
    if spec is None:
        return {}
    if isinstance(spec, str):
        return {spec: True}
    if isinstance(spec, Mapping):
        return dict(spec)
    raise ConfigurationError(
        f"Secondary condition must be a string or a mapping, got {type(spec).__name__}"
    )


def parse_condition(
    on: Any, *args: Any, settings: ViewSettings | None = None
) -> tuple[Condition, Any] | None:
    """Build a ``(condition, handler)`` pair from ``View.on`` arguments.

    Examples:
        >>> parse_condition("get", handler)
        (VerbMatch(verb='get', fields=None), handler)
        >>> parse_condition("post", {"action": "save"}, handler)
        (VerbMatch(verb='post', fields={'action': 'save'}), handler)
        >>> parse_condition({"user.is_admin": True}, handler)
        (FieldMap(fields={'user.is_admin': True}), handler)

    Returns:
        The pair, or None when ``on`` is an unknown keyword and strict
        conditions are disabled.

    Raises:
        ConfigurationError: Unknown keyword with strict conditions enabled.
    """
    settings = settings or ViewSettings()
    handler = args[-1] if args else None

    if isinstance(on, CONDITION_TYPES):
        return on, handler

    if isinstance(on, str):
        keyword = on.lower()
        if keyword in STAGES:
            return Lifecycle(stage=keyword), handler
        if keyword in settings.verbs:
            if len(args) >= 2:
                return VerbMatch(verb=keyword, fields=normalize_fields(args[0])), handler
            return VerbMatch(verb=keyword), handler
        if settings.strict_conditions:
            raise ConfigurationError(f"Unknown condition keyword: {on!r}")
        logger.debug("Ignoring unknown condition keyword %r", on)
        return None

    if isinstance(on, Mapping):
        return FieldMap(fields=dict(on)), handler

    if callable(on):
        return Predicate(function=on), handler

    if settings.strict_conditions:
        raise ConfigurationError(f"Unsupported condition type: {type(on).__name__}")
    logger.debug("Ignoring unsupported condition of type %s", type(on).__name__)
    return None
