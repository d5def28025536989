"""DTO package for viewline core.

Provides BaseResult pattern for consistent result handling across modules.
"""

from .result_dto import BaseResult, StatusCode, StatusDetail
from .view_dto import RenderResult, ViewSettings

__all__ = [
    "BaseResult",
    "StatusDetail",
    "StatusCode",
    "RenderResult",
    "ViewSettings",
]
