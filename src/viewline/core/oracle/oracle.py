"""Oracle hook registry.

The Oracle keeps the framework-wide hooks (for now ``pre_render``), ordered
by priority. One Oracle belongs to one Viewline instance and is injected into
every view it creates.
"""

import logging
from collections.abc import Callable
from importlib import import_module
from importlib.metadata import entry_points
from inspect import getmembers
from types import ModuleType

from viewline.core import utils
from viewline.core.oracle.decorators.hook import PRE_RENDER, OracleHook

logger = logging.getLogger(__name__)

DEFAULT_HOOKS_GROUP = "viewline.hooks"


class Oracle:
    """Registry of named hooks.

    Famous quote from the Oracle in Matrix:
    "You didn't come here to make the choice. You've already made it.
    You're here to try to understand why you made it."
    """

    def __init__(self):
        """Create an empty Oracle."""
        self._registered: list[OracleHook] = []
        self.hooks: dict[str, list[OracleHook]] = {}  # hooks cache, indexed by name

        # callback out of the hook system to notify other components about a refresh
        self.on_refresh_callbacks: list[Callable] = []

        logger.debug("Oracle instance created.")

    def register(
        self,
        hook_or_function: OracleHook | Callable,
        name: str | None = None,
        priority: int = 1,
        *,
        source: str | None = None,
    ) -> OracleHook:
        """Register a hook.

        Args:
            hook_or_function: An ``@hook`` decorated function or a plain callable.
            name: Hook name for plain callables (defaults to the function name).
            priority: Priority for plain callables (higher executes first).
            source: Where the hook came from, for diagnostics.

        Returns:
            The registered OracleHook.

        Raises:
            ConfigurationError: The hook name is not one the Oracle runs.
        """
        if isinstance(hook_or_function, OracleHook):
            hook_ = hook_or_function
        elif callable(hook_or_function):
            hook_ = OracleHook(
                name=name or hook_or_function.__name__,
                function=hook_or_function,
                priority=priority,
            )
        else:
            raise TypeError(f"Cannot register {type(hook_or_function).__name__} as a hook")
        if source is not None:
            hook_.source = source
        self._registered.append(hook_)
        self._cache(hook_)
        logger.debug("Registered %r", hook_)
        return hook_

    def register_module(self, module: ModuleType) -> list[OracleHook]:
        """Register every ``@hook`` found in ``module``."""
        found = [member for _, member in getmembers(module, self._is_oracle_hook)]
        for hook_ in found:
            self.register(hook_, source=module.__name__)
        return found

    def load_entry_points(self, group: str = DEFAULT_HOOKS_GROUP) -> int:
        """Register hooks from modules advertised by installed packages.

        Each entry point must resolve to a module (or to a callable returning
        a module or module name). Broken entry points are logged and skipped.

        Returns:
            Number of hooks registered.
        """
        count = 0
        for ep in entry_points(group=group):
            try:
                target = ep.load()
                if not isinstance(target, ModuleType) and callable(target):
                    target = target()
                if isinstance(target, str):
                    target = import_module(target)
                if not isinstance(target, ModuleType):
                    logger.warning(
                        f"Entry point '{ep.name}' did not resolve to a module, got: {type(target)}"
                    )
                    continue
                count += len(self.register_module(target))
                logger.info(f"Loaded hooks from entry point '{ep.name}'")
            except Exception as e:
                logger.error(f"Failed to load hooks from entry point '{ep.name}': {e}", exc_info=True)
        return count

    async def refresh_caches(self):
        """Rebuild the hook cache from the registered hooks."""
        self.hooks = {}
        for hook_ in self._registered:
            self._cache(hook_)

        # Notify subscribers about finished refresh
        for callback in self.on_refresh_callbacks:
            await utils.run_sync_or_async(callback)

    def get_hooks(self, name: str) -> list[Callable]:
        """Return the functions registered under ``name``, highest priority first."""
        return [hook_.function for hook_ in self.hooks.get(name, [])]

    def pre_render_hooks(self) -> list[Callable]:
        return self.get_hooks(PRE_RENDER)

    def has_hook(self, name: str) -> bool:
        return bool(self.hooks.get(name))

    def _cache(self, hook_: OracleHook) -> None:
        bucket = self.hooks.setdefault(hook_.name, [])
        bucket.append(hook_)
        # stable sort keeps registration order within a priority
        bucket.sort(key=lambda x: x.priority, reverse=True)

    @staticmethod
    def _is_oracle_hook(obj):
        return isinstance(obj, OracleHook)


HookManager = Oracle
