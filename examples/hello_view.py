"""Minimal hello-world demo for a Viewline view."""

from __future__ import annotations

import asyncio
import sys
from pathlib import Path

# Allow running directly from the repo without installing the package.
REPO_ROOT = Path(__file__).resolve().parents[1]
SRC_ROOT = REPO_ROOT / "src"
if str(SRC_ROOT) not in sys.path:
    sys.path.insert(0, str(SRC_ROOT))

from viewline.core.oracle.decorators.hook import hook  # noqa: E402
from viewline.core.view.http import RequestState, ResponseState  # noqa: E402
from viewline.core.viewline import Viewline  # noqa: E402

BOOKS = [{"title": "Dune", "author_id": 1}, {"title": "Emma", "author_id": 2}]
AUTHORS = {1: "Frank Herbert", 2: "Jane Austen"}


class BookQuery:
    """Pretend ORM query returning the books matching ``q``."""

    def __init__(self, q: str = "") -> None:
        self.q = q.lower()

    async def exec(self):
        await asyncio.sleep(0.01)
        return [book for book in BOOKS if self.q in book["title"].lower()]


async def populate_related(result, spec):
    if "author" in spec:
        for book in result:
            book["author"] = AUTHORS[book["author_id"]]


@hook("pre_render")
def add_count(locals):
    locals.set("count", len(locals.get("books") or []))


def render_template(view_name: str, locals: dict) -> str:
    lines = [f"== {locals.get('site_name', '')} / {view_name} =="]
    for book in locals.get("books", []):
        lines.append(f"- {book['title']} ({book.get('author', '?')})")
    lines.append(f"{locals.get('count', 0)} book(s), message: {locals.get('message')}")
    return "\n".join(lines)


async def main() -> int:
    app = await Viewline.create(
        config={"locals": {"site_name": "Hello Viewline"}},
        populate_related=populate_related,
    )
    app.oracle.register(add_count)

    request = RequestState("POST", query={"q": "d"}, body={"action": "save"})
    response = ResponseState(renderer=render_template)
    view = app.view(request, response)

    view.on("init", lambda locals: print("[init] loading session"))
    view.on("get", lambda: print("[action] never runs for POST"))
    view.on("post", {"action": "save"}, lambda locals: locals.set("message", "saved"))
    view.query("books", BookQuery(request.query["q"]), "author").none(
        lambda locals: locals.set("message", "no books")
    )

    result = await view.render("books/index")
    print(result.rendered)
    print(f"[done] ok = {result.is_ok()}")
    return 0


if __name__ == "__main__":
    raise SystemExit(asyncio.run(main()))
