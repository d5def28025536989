"""Decorators used by the hook registry."""

from .hook import HOOK_NAMES, PRE_RENDER, OracleHook, hook

__all__ = ["HOOK_NAMES", "PRE_RENDER", "hook", "OracleHook"]
