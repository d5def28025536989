"""Sherlock condition evaluation for ``View.on``."""

from viewline.core.sherlock.conditions import (
    Condition,
    FieldMap,
    Lifecycle,
    Predicate,
    VerbMatch,
    parse_condition,
)
from viewline.core.sherlock.sherlock import ConditionEvaluator, Sherlock, check_path, loose_equals

__all__ = [
    "Condition",
    "ConditionEvaluator",
    "FieldMap",
    "Lifecycle",
    "Predicate",
    "Sherlock",
    "VerbMatch",
    "check_path",
    "loose_equals",
    "parse_condition",
]
