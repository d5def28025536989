"""Tests for Sherlock condition parsing and evaluation."""

import pytest

from viewline.core.dto.view_dto import ViewSettings
from viewline.core.errors import ConfigurationError
from viewline.core.sherlock.conditions import (
    FieldMap,
    Lifecycle,
    Predicate,
    VerbMatch,
    parse_condition,
)
from viewline.core.sherlock.sherlock import Sherlock, check_path, loose_equals
from viewline.core.view.http import RequestState


def handler():
    """Placeholder handler."""


class Role:
    """Object rendering as a role name."""

    def __init__(self, name):
        self.name = name

    def __str__(self):
        return self.name


class TestParseCondition:
    """parse_condition builds the right variant for each public form."""

    def test_verb_without_fields(self):
        condition, h = parse_condition("GET", handler)
        assert condition == VerbMatch(verb="get")
        assert h is handler

    def test_verb_with_string_fields(self):
        condition, h = parse_condition("post", "action", handler)
        assert condition == VerbMatch(verb="post", fields={"action": True})
        assert h is handler

    def test_verb_with_mapping_fields(self):
        condition, _ = parse_condition("get", {"page": 2}, handler)
        assert condition == VerbMatch(verb="get", fields={"page": 2})

    def test_lifecycle(self):
        assert parse_condition("init", handler)[0] == Lifecycle(stage="init")
        assert parse_condition("render", handler)[0] == Lifecycle(stage="render")

    def test_field_map_and_predicate(self):
        assert parse_condition({"role": "admin"}, handler)[0] == FieldMap(fields={"role": "admin"})
        predicate = lambda: True  # noqa: E731
        assert parse_condition(predicate, handler)[0] == Predicate(function=predicate)

    def test_condition_instances_pass_through(self):
        condition = FieldMap(fields={"role": True})
        assert parse_condition(condition, handler) == (condition, handler)

    def test_unknown_keyword_is_ignored(self):
        assert parse_condition("patch", handler) is None
        assert parse_condition(42, handler) is None

    def test_unknown_keyword_raises_when_strict(self):
        settings = ViewSettings(strict_conditions=True)
        with pytest.raises(ConfigurationError, match="Unknown condition keyword"):
            parse_condition("patch", handler, settings=settings)

    def test_configured_verbs(self):
        settings = ViewSettings(verbs=["GET", "PATCH"], body_verbs=["patch"])
        condition, _ = parse_condition("patch", {"id": 1}, handler, settings=settings)
        assert condition == VerbMatch(verb="patch", fields={"id": 1})

    def test_invalid_secondary_specifier(self):
        with pytest.raises(ConfigurationError):
            parse_condition("post", 3, handler)


class TestFieldMap:
    """Path resolution and equality rules."""

    def test_true_requires_existence_only(self):
        assert check_path({"role": 0}, "role", True)
        assert check_path({"role": ""}, "role", True)
        assert check_path({"role": None}, "role", True)
        assert not check_path({}, "role", True)

    def test_loose_equality(self):
        assert check_path({"role": "admin"}, "role", "admin")
        assert check_path({"role": Role("admin")}, "role", "admin")
        assert not check_path({"role": Role("editor")}, "role", "admin")
        assert check_path({"page": "2"}, "page", 2)
        assert not check_path({"page": "two"}, "page", 2)

    def test_missing_intermediate_fails(self):
        assert not check_path({}, "user.name.first", "Admin")
        assert not check_path({"user": None}, "user.name", True)
        assert not check_path({"user": {}}, "user.name", True)

    def test_empty_containers_are_present_intermediates(self):
        assert check_path({"session": {}}, "session.cart", None)
        assert check_path({"session": []}, "session.cart", None)
        assert not check_path({"session": {}}, "session.cart", True)

    def test_blank_intermediates_fail(self):
        for blank in (None, False, 0, ""):
            assert not check_path({"session": blank}, "session.cart", None)

    def test_nested_attribute_and_mapping_segments(self):
        request = RequestState("GET", user={"name": {"first": "Admin"}})
        assert check_path(request, "user.name.first", "Admin")
        assert check_path(request, "user.name", True)
        assert not check_path(request, "user.name.last", True)

    def test_missing_value_only_matches_none(self):
        assert check_path({}, "role", None)
        assert not check_path({}, "role", "admin")

    @pytest.mark.parametrize(
        "actual, expected, equal",
        [
            ("1", 1, True),
            (1, "1", True),
            (1.5, "1.5", True),
            (True, "true", False),
            (None, 0, False),
            ("admin", "admin", True),
        ],
    )
    def test_loose_equals_table(self, actual, expected, equal):
        assert loose_equals(actual, expected) is equal


class TestSherlock:
    """Evaluation and routing against a request."""

    def test_predicate_called_without_arguments(self):
        calls = []

        def predicate():
            calls.append(True)
            return 1

        sherlock = Sherlock(RequestState("GET"))
        assert sherlock.evaluate(Predicate(function=predicate))
        assert sherlock.route(Predicate(function=lambda: 0)) is None
        assert calls == [True]

    def test_field_map_is_logical_and(self):
        request = RequestState("GET", user={"role": "admin", "active": False})
        sherlock = Sherlock(request)
        assert sherlock.evaluate(FieldMap(fields={"user.role": "admin", "user.active": True}))
        assert not sherlock.evaluate(FieldMap(fields={"user.role": "admin", "user.email": True}))

    def test_verb_is_case_insensitive(self):
        sherlock = Sherlock(RequestState("post"))
        assert sherlock.evaluate(VerbMatch(verb="POST"))
        assert not sherlock.evaluate(VerbMatch(verb="get"))

    def test_body_verbs_read_body(self):
        request = RequestState("POST", query={"action": "save"}, body={"action": "delete"})
        sherlock = Sherlock(request)
        assert sherlock.evaluate(VerbMatch(verb="post", fields={"action": "delete"}))
        assert not sherlock.evaluate(VerbMatch(verb="post", fields={"action": "save"}))

    def test_other_verbs_read_query(self):
        request = RequestState("GET", query={"page": "2"}, body={"page": "3"})
        sherlock = Sherlock(request)
        assert sherlock.evaluate(VerbMatch(verb="get", fields={"page": 2}))
        assert not sherlock.evaluate(VerbMatch(verb="get", fields={"page": 3}))

    def test_empty_fields_match_once_verb_matches(self):
        sherlock = Sherlock(RequestState("PUT"))
        assert sherlock.evaluate(VerbMatch(verb="put", fields={}))

    def test_route(self):
        sherlock = Sherlock(RequestState("GET"))
        assert sherlock.route(Lifecycle(stage="init")) == "init"
        assert sherlock.route(Lifecycle(stage="render")) == "render"
        assert sherlock.route(VerbMatch(verb="get")) == "action"
        assert sherlock.route(VerbMatch(verb="delete")) is None
