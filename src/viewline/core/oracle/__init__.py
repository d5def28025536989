"""Oracle hook registry."""

from viewline.core.oracle.decorators import HOOK_NAMES, PRE_RENDER, OracleHook, hook
from viewline.core.oracle.oracle import HookManager, Oracle

__all__ = ["HOOK_NAMES", "HookManager", "Oracle", "OracleHook", "PRE_RENDER", "hook"]
