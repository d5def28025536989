"""Pytest fixtures.

This file adjusts sys.path for src-layout imports.
"""

# ruff: noqa: E402

import os
import sys

# Ensure `src` is on sys.path so imports like `from viewline.core...` resolve during tests
ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
SRC = os.path.join(ROOT, "src")
if os.path.isdir(SRC):
    sys.path.insert(0, SRC)
sys.path.insert(0, ROOT)

import pytest
import pytest_asyncio
from rich.traceback import install

from viewline.core.view.http import RequestState, ResponseState
from viewline.core.viewline import Viewline

# Enable readable tracebacks in development / test environments.
# Can be disabled with PYTEST_RICH=0
if os.getenv("PYTEST_RICH", "1") == "1":
    install(
        show_locals=True,  # show local variables for each frame
        width=None,  # use terminal width
        word_wrap=True,  # wrap long lines
        extra_lines=1,  # some context around lines
        suppress=["/usr/lib/python3", "site-packages"],  # hide "noisy" third-party frames
    )


@pytest_asyncio.fixture
async def viewline():
    """Provide a Viewline instance with an in-memory relation populator."""
    populated = []

    async def populate_related(result, spec):
        populated.append((result, spec))

    instance = await Viewline.create(
        config={"locals": {"site_name": "Test site"}},
        populate_related=populate_related,
    )
    instance.populated = populated
    return instance


@pytest.fixture
def get_request():
    """A GET request with query parameters and a logged-in user."""
    return RequestState(
        "GET",
        query={"page": "2", "q": "dune"},
        user={"name": {"first": "Admin"}, "role": "admin"},
    )


@pytest.fixture
def response():
    """An in-memory response rendering to (view_name, locals) tuples."""
    return ResponseState(renderer=lambda view_name, locals: (view_name, locals))
