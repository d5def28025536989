"""Execution context and result tree for one request."""

from __future__ import annotations

import logging
from collections.abc import Mapping, MutableMapping
from dataclasses import dataclass, field
from typing import Any

from viewline.core import utils
from viewline.core.errors import ConfigurationError

logger = logging.getLogger(__name__)


class ResultTree:
    """Dotted-path view over the response locals.

    Query results are written here; intermediate containers are created on
    demand. A missing or blank intermediate (``None``, ``False``, zero, empty
    string) is replaced by an empty dict; existing mappings are kept even when
    empty.

    Example:
        >>> tree = ResultTree({})
        >>> tree.set("admin.books", ["Dune"])
        >>> tree.as_dict()
        {'admin': {'books': ['Dune']}}
    """

    def __init__(self, root: MutableMapping[str, Any] | None = None):
        self._root: MutableMapping[str, Any] = root if root is not None else {}

    @property
    def root(self) -> MutableMapping[str, Any]:
        return self._root

    @staticmethod
    def split(path: str) -> list[str]:
        if not isinstance(path, str) or not path:
            raise ConfigurationError(f"Result path must be a non-empty string, got {path!r}")
        parts = path.split(".")
        if any(not part for part in parts):
            raise ConfigurationError(f"Result path has an empty segment: {path!r}")
        return parts

    def ensure(self, path: str) -> tuple[MutableMapping[str, Any], str]:
        """Get-or-create the parent container of ``path``.

        Returns:
            The parent mapping and the final key.

        Raises:
            ConfigurationError: An intermediate segment holds a non-mapping value.
        """
        *parents, key = self.split(path)
        container = self._root
        for part in parents:
            value = container.get(part)
            if utils.is_blank(value):
                value = {}
                container[part] = value
            elif not isinstance(value, MutableMapping):
                raise ConfigurationError(
                    f"Cannot bind {path!r}: {part!r} holds a {type(value).__name__}",
                    context={"path": path},
                )
            container = value
        return container, key

    def set(self, path: str, value: Any) -> None:
        container, key = self.ensure(path)
        container[key] = value

    def get(self, path: str, default: Any = None) -> Any:
        container: Any = self._root
        for part in self.split(path):
            if not isinstance(container, Mapping) or part not in container:
                return default
            container = container[part]
        return container

    def as_dict(self) -> dict[str, Any]:
        return dict(self._root)


@dataclass(slots=True)
class ExecutionContext:
    """Everything a view knows about the request it is answering.

    Created once per view, read by condition evaluation, written by query
    outcomes, discarded after render.
    """

    request: Any
    response: Any
    locals: ResultTree = field(init=False)

    def __post_init__(self) -> None:
        response_locals = getattr(self.response, "locals", None)
        if not isinstance(response_locals, MutableMapping):
            raise ConfigurationError("Response object must expose a mutable 'locals' mapping")
        self.locals = ResultTree(response_locals)

    def seed(self, defaults: Mapping[str, Any]) -> None:
        """Copy default locals in without overwriting values already present."""
        for key, value in defaults.items():
            self.locals.root.setdefault(key, value)
