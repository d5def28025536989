"""DTOs for views.

ViewSettings carries the knobs read from Uhura; RenderResult is the outcome
of ``View.render``.
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from viewline.core.dto.result_dto import BaseResult

DEFAULT_VERBS = ("get", "post", "put", "delete")
DEFAULT_BODY_VERBS = ("post", "put")


class ViewSettings(BaseModel):
    """Settings shared by every view of a Viewline instance.

    Attributes:
        verbs: HTTP verbs accepted as ``on()`` conditions.
        body_verbs: Verbs whose secondary specifier is checked against the body.
        strict_conditions: Raise on unknown condition keywords instead of ignoring them.
        default_locals: Values copied into every view's result tree.
    """

    verbs: tuple[str, ...] = Field(default=DEFAULT_VERBS)
    body_verbs: tuple[str, ...] = Field(default=DEFAULT_BODY_VERBS)
    strict_conditions: bool = False
    default_locals: dict[str, Any] = Field(default_factory=dict)

    model_config = {"extra": "ignore", "frozen": True}

    @field_validator("verbs", "body_verbs", mode="before")
    @classmethod
    def _lower(cls, value: Any) -> Any:
        if isinstance(value, str):
            value = [value]
        if isinstance(value, list | tuple):
            return tuple(str(v).lower() for v in value)
        return value


class RenderResult(BaseResult):
    """Result of ``View.render``.

    [Result Pattern] Check result.is_ok() before using fields.

    Attributes:
        view_name: Template name when the render target was a string.
        rendered: Output of the template collaborator, if it ran.
        error: Terminal error of the pipeline (or of the template render).

    Example:
        >>> result = await view.render("books/index")
        >>> if result.is_ok():
        ...     return result.rendered
    """

    view_name: str | None = Field(default=None, description="Rendered template name")
    rendered: Any = Field(default=None, description="Template output")
    error: BaseException | None = Field(default=None, description="Terminal error, if any")

    model_config = ConfigDict(arbitrary_types_allowed=True)
