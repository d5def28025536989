"""Tests for the Oracle hook registry."""

from importlib.metadata import EntryPoint
from unittest.mock import Mock, patch

import pytest

import tests.mocks.hooks.mock_hooks as mock_hooks
from viewline.core.errors import ConfigurationError
from viewline.core.oracle import PRE_RENDER, HookManager, Oracle, OracleHook, hook
from viewline.core.view.http import RequestState, ResponseState
from viewline.core.view.view import View


def test_alias():
    assert HookManager is Oracle


class TestHookDecorator:
    """@hook forms."""

    def test_bare_decorator_uses_function_name(self):
        @hook
        def pre_render():
            pass

        assert isinstance(pre_render, OracleHook)
        assert pre_render.name == "pre_render"
        assert pre_render.priority == 1

    def test_named_decorator_with_priority(self):
        @hook("pre_render", priority=7)
        def add_title():
            return "title"

        assert add_title.name == "pre_render"
        assert add_title.priority == 7
        assert add_title() == "title"

    def test_priority_only(self):
        @hook(priority=2)
        def pre_render():
            pass

        assert (pre_render.name, pre_render.priority) == ("pre_render", 2)

    def test_misspelt_name_is_rejected(self):
        with pytest.raises(ConfigurationError, match="pre_rendr"):

            @hook("pre_rendr")
            def add_title():
                pass

    def test_function_name_must_be_a_hook_name(self):
        with pytest.raises(ConfigurationError, match="add_title"):

            @hook
            def add_title():
                pass

        with pytest.raises(ConfigurationError):

            @hook(priority=3)
            def add_footer():
                pass


class TestRegistration:
    """Registering and ordering hooks."""

    def test_priority_then_registration_order(self):
        oracle = Oracle()

        def first():
            pass

        def second():
            pass

        def urgent():
            pass

        oracle.register(first, name=PRE_RENDER)
        oracle.register(second, name=PRE_RENDER)
        oracle.register(urgent, name=PRE_RENDER, priority=10)

        assert oracle.pre_render_hooks() == [urgent, first, second]
        assert oracle.has_hook(PRE_RENDER)
        assert not oracle.has_hook("post_render")
        assert oracle.get_hooks("post_render") == []

    def test_unknown_name_is_rejected_on_register(self):
        oracle = Oracle()
        with pytest.raises(ConfigurationError, match="post_render"):
            oracle.register(lambda: None, name="post_render")
        with pytest.raises(ConfigurationError):
            oracle.register(lambda: None)
        assert oracle.hooks == {}

    def test_plain_callable_defaults_to_function_name(self):
        oracle = Oracle()

        def pre_render():
            pass

        registered = oracle.register(pre_render)
        assert registered.name == PRE_RENDER
        assert oracle.pre_render_hooks() == [pre_render]

    def test_non_callable_is_rejected(self):
        with pytest.raises(TypeError):
            Oracle().register("pre_render")

    def test_register_module(self):
        oracle = Oracle()
        found = oracle.register_module(mock_hooks)

        assert len(found) == 3
        assert {h.source for h in found} == {mock_hooks.__name__}
        assert oracle.pre_render_hooks() == [
            mock_hooks.add_page_title.function,
            mock_hooks.pre_render.function,
            mock_hooks.add_breadcrumbs.function,
        ]

    @pytest.mark.asyncio
    async def test_refresh_rebuilds_cache_and_notifies(self):
        oracle = Oracle()
        oracle.register_module(mock_hooks)
        notified = []

        async def on_refresh():
            notified.append(len(oracle.get_hooks(PRE_RENDER)))

        oracle.on_refresh_callbacks.append(on_refresh)
        oracle.on_refresh_callbacks.append(lambda: notified.append("sync"))
        await oracle.refresh_caches()

        assert notified == [3, "sync"]
        assert len(oracle.pre_render_hooks()) == 3


class TestEntryPoints:
    """Hooks advertised by installed packages."""

    def test_entry_point_resolving_to_module_name(self):
        entry_point = Mock(spec=EntryPoint)
        entry_point.name = "mock_hooks"
        entry_point.load.return_value = lambda: "tests.mocks.hooks.mock_hooks"

        oracle = Oracle()
        with patch("viewline.core.oracle.oracle.entry_points") as mock_ep:
            mock_ep.return_value = [entry_point]
            count = oracle.load_entry_points()

        mock_ep.assert_called_once_with(group="viewline.hooks")
        entry_point.load.assert_called_once()
        assert count == 3
        assert len(oracle.pre_render_hooks()) == 3

    def test_entry_point_resolving_to_module(self):
        entry_point = Mock(spec=EntryPoint)
        entry_point.name = "mock_hooks"
        entry_point.load.return_value = mock_hooks

        oracle = Oracle()
        with patch("viewline.core.oracle.oracle.entry_points") as mock_ep:
            mock_ep.return_value = [entry_point]
            assert oracle.load_entry_points("custom.group") == 3

        mock_ep.assert_called_once_with(group="custom.group")

    def test_broken_entry_points_are_skipped(self, caplog):
        broken = Mock(spec=EntryPoint)
        broken.name = "broken"
        broken.load.side_effect = ImportError("no module")
        wrong_type = Mock(spec=EntryPoint)
        wrong_type.name = "wrong_type"
        wrong_type.load.return_value = lambda: 42

        oracle = Oracle()
        with patch("viewline.core.oracle.oracle.entry_points") as mock_ep:
            mock_ep.return_value = [broken, wrong_type]
            assert oracle.load_entry_points() == 0

        assert "broken" in caplog.text
        assert "wrong_type" in caplog.text
        assert oracle.hooks == {}


@pytest.mark.asyncio
async def test_module_hooks_run_before_render_queue():
    oracle = Oracle()
    oracle.register_module(mock_hooks)
    seen = []
    response = ResponseState()

    view = View(RequestState("GET"), response, hooks=oracle)
    view.on("render", lambda locals: seen.append(dict(locals.as_dict())))
    result = await view.render("home")

    assert seen == [{"title": "Untitled", "breadcrumbs": ["home", "get"]}]
    assert result.rendered == {"title": "Untitled", "breadcrumbs": ["home", "get"]}
