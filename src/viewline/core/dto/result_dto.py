"""Base result types for viewline operations.

Expected outcomes (a pipeline that ended with an unhandled collaborator
error, a render skipped because of it) are returned as Result with
status="error", while configuration errors raise exceptions.

This design:
- Keeps collaborator failures inside the pipeline (no exception escapes render)
- Provides type-safe, inspectable results
- Gives every caller the same is_ok()/is_error() checks
"""

from typing import Any, Final, Literal, Self

from pydantic import BaseModel, Field


class StatusDetail(BaseModel):
    """Structured status information for operation results.

    Attributes:
        code: Machine-readable status code (e.g., "pipeline_error").
        message: Human-readable status description.
        context: Additional diagnostic data (safe to log/serialize).
    """

    code: str = Field(description="Status code: 'pipeline_error', 'render_error', etc.")
    message: str = Field(description="Human-readable status description")
    context: dict[str, Any] = Field(default_factory=dict, description="Diagnostic context")


class BaseResult(BaseModel):
    """Base class for all viewline operation results.

    Pattern:
    - status="success" → operation succeeded, specific fields populated
    - status="error" → expected failure, detail field contains details

    Example:
        >>> result = await view.render("home")
        >>> if result.is_error():
        ...     print(f"Error [{result.detail.code}]: {result.detail.message}")
    """

    status: Literal["success", "error"] = Field(default="success", description="Operation status")
    detail: StatusDetail | None = Field(
        default=None, description="Status details (present for error or partial success)"
    )

    model_config = {"extra": "forbid"}

    def is_ok(self) -> bool:
        """Check if operation succeeded."""
        return self.status == "success"

    def is_error(self) -> bool:
        """Check if operation failed with expected error."""
        return self.status == "error"

    @classmethod
    def success(cls, *, detail: StatusDetail | None = None, **kwargs: Any) -> Self:
        """Factory method for successful result.

        Args:
            detail: Optional status details for informational status.
            **kwargs: Subclass-specific fields.

        Returns:
            Result instance with status="success".
        """
        return cls(status="success", detail=detail, **kwargs)

    @classmethod
    def fail(
        cls,
        detail: StatusDetail,
        **kwargs: Any,
    ) -> Self:
        """Factory method for expected failure result.

        Args:
            detail: Required status details describing the failure.
            **kwargs: Subclass-specific fields (use defaults).

        Returns:
            Result instance with status="error".
        """
        return cls(status="error", detail=detail, **kwargs)


# =============================================================================
# STATUS CODE REGISTRY
# =============================================================================


class StatusCode:
    """Centralized registry of status codes used across viewline.

    Example:
        >>> if result.detail.code == StatusCode.PIPELINE_ERROR:
        ...     send_500(result.error)
    """

    PIPELINE_ERROR: Final = "pipeline_error"
    """[Scotty] A step failed and the remaining series steps were skipped."""

    RENDER_ERROR: Final = "render_error"
    """[View] The template collaborator failed to render the view."""


__all__ = ["BaseResult", "StatusDetail", "StatusCode"]
