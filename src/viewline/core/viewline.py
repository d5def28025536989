"""Core Viewline facade.

This module defines the main entry point used by applications and tests:
one Viewline per application, one View per request.
"""

import logging
from typing import Any

from dotenv import load_dotenv

from viewline.core.oracle.oracle import Oracle
from viewline.core.uhura.uhura import Uhura
from viewline.core.view.query import PopulateRelated
from viewline.core.view.view import View

logger = logging.getLogger(__name__)
load_dotenv()


class Viewline:
    """Core facade for the viewline application."""

    def __init__(self, *args, **kwargs):
        """Prevent direct construction; use `await Viewline.create(...)` instead."""
        raise RuntimeError("Use: instance = await Viewline.create(...)")

    def _initialize(
        self,
        *,
        config_path: str | None = None,
        populate_related: PopulateRelated | None = None,
    ):
        """Initialize Viewline internal components.

        Args:
            config_path: Path to JSON configuration file
            populate_related: Collaborator resolving relation specs on query results
        """
        self.uhura = Uhura(config_path=config_path)
        self.oracle = Oracle()
        self.populate_related = populate_related

        # Alias
        self.config_manager = self.uhura
        self.hook_manager = self.oracle
        logger.debug("Viewline instance created.")

    @classmethod
    async def create(
        cls,
        *,
        config_path: str | None = None,
        config: dict[str, Any] | None = None,
        hooks_group: str | None = None,
        populate_related: PopulateRelated | None = None,
    ):
        """Factory method to create and initialize Viewline.

        Args:
            config_path: Path to JSON configuration file
            config: Optional configuration dictionary
            hooks_group: Entry point group to load hook modules from
            populate_related: Collaborator resolving relation specs on query results
        """
        instance = cls.__new__(cls)  # bypass __init__
        instance._initialize(config_path=config_path, populate_related=populate_related)
        # Load configuration first
        instance.uhura.load(config=config)
        # Then discover hooks advertised by installed packages
        if hooks_group:
            instance.oracle.load_entry_points(hooks_group)
        await instance.oracle.refresh_caches()
        return instance

    def view(self, request: Any, response: Any) -> View:
        """Create the View answering one request.

        Args:
            request: Request collaborator.
            response: Response collaborator.

        Returns:
            A View wired with this instance's hooks, settings and relation populator.
        """
        return View(
            request,
            response,
            hooks=self.oracle,
            populate_related=self.populate_related,
            settings=self.uhura.view_settings(),
        )
