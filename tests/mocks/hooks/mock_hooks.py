"""Mock hooks used by the Oracle tests."""

from viewline.core.oracle.decorators import hook


@hook("pre_render", priority=3)
def add_page_title(locals):
    """Default the page title when no handler set one."""
    if locals.get("title") is None:
        locals.set("title", "Untitled")


@hook("pre_render")
def add_breadcrumbs(request, locals):
    """Build breadcrumbs from the request method."""
    locals.set("breadcrumbs", ["home", request.method.lower()])


@hook(priority=2)
def pre_render(response):
    """Hook named after its function."""
    response.view_name = response.view_name or "pending"


def not_a_hook():
    """Plain functions are not collected."""
