"""Tests for Condition types and coercion helpers."""

from unittest.mock import Mock

import pytest

from formstate.config import reset_framework_config
from formstate.core.conditions import (
    Always,
    ConditionKind,
    Function,
    Predicate,
    as_condition,
    depends_on,
)
from formstate.core.exceptions import PredicateEvaluationError, PredicateSyntaxError


def _form_with_values(**values):
    form = Mock()
    form.predicate_values.return_value = values
    return form


class TestAlways:

    def test_returns_literal(self):
        assert Always(True).evaluate(None) is True
        assert Always(False).evaluate(None) is False

    def test_has_no_tags(self):
        assert Always(True).referenced_tags == frozenset()

    def test_rejects_non_bool(self):
        with pytest.raises(TypeError, match="Always expects a bool"):
            Always(1)


class TestPredicate:

    def test_tags_parsed_at_construction(self):
        assert Predicate("$a == 1 or $b").referenced_tags == frozenset({"a", "b"})

    def test_evaluates_against_form_snapshot(self):
        condition = Predicate("$a == 1")
        assert condition.evaluate(_form_with_values(a=1))
        assert not condition.evaluate(_form_with_values(a=2))

    def test_missing_tag_is_none(self):
        assert Predicate("$a == nil").evaluate(_form_with_values())

    def test_syntax_error_at_construction(self):
        with pytest.raises(PredicateSyntaxError):
            Predicate("$a ==")

    def test_equal_by_expression(self):
        assert Predicate("$a == 1") == Predicate("$a == 1")
        assert hash(Predicate("$a == 1")) == hash(Predicate("$a == 1"))

    def test_strict_mode_from_configuration(self, monkeypatch):
        monkeypatch.setenv("FORMSTATE_STRICT_PREDICATES", "1")
        reset_framework_config()
        try:
            with pytest.raises(PredicateEvaluationError):
                Predicate("$a > 1").evaluate(_form_with_values(a=None))
        finally:
            monkeypatch.delenv("FORMSTATE_STRICT_PREDICATES")
            reset_framework_config()


class TestFunction:

    def test_callback_receives_form(self):
        callback = Mock(return_value=True)
        form = object()
        assert Function({"a"}, callback).evaluate(form) is True
        callback.assert_called_once_with(form)

    def test_result_coerced_to_bool(self):
        assert Function({"a"}, lambda form: "yes").evaluate(None) is True
        assert Function({"a"}, lambda form: 0).evaluate(None) is False

    def test_tags_frozen(self):
        condition = Function(["a", "b", "a"], lambda form: True)
        assert condition.referenced_tags == frozenset({"a", "b"})

    def test_single_string_tag_is_not_split(self):
        assert Function("abc", lambda form: True).referenced_tags == frozenset({"abc"})

    def test_callback_exception_propagates(self):
        def boom(form):
            raise RuntimeError("collaborator bug")

        with pytest.raises(RuntimeError, match="collaborator bug"):
            Function({"a"}, boom).evaluate(None)

    def test_equality_compares_callback(self):
        def first(form):
            return True

        def second(form):
            return True

        assert Function({"a"}, first) == Function({"a"}, first)
        assert Function({"a"}, first) != Function({"a"}, second)

    def test_rejects_non_callable(self):
        with pytest.raises(TypeError, match="must be callable"):
            Function({"a"}, "not callable")

    def test_depends_on_decorator(self):
        @depends_on("plan", "country")
        def hide_billing(form):
            return True

        assert isinstance(hide_billing, Function)
        assert hide_billing.referenced_tags == frozenset({"plan", "country"})
        assert hide_billing.evaluate(None) is True


class TestAsCondition:

    def test_none_passes_through(self):
        assert as_condition(None) is None

    def test_bool_becomes_always(self):
        assert as_condition(True) == Always(True)

    def test_string_becomes_predicate(self):
        condition = as_condition("$a == 1")
        assert isinstance(condition, Predicate)
        assert condition.expression == "$a == 1"

    def test_condition_passes_through(self):
        condition = Always(False)
        assert as_condition(condition) is condition

    def test_other_types_rejected(self):
        with pytest.raises(TypeError, match="Cannot use int as a condition"):
            as_condition(3)


def test_condition_kind_str():
    assert str(ConditionKind.HIDDEN) == "hidden"
    assert str(ConditionKind.DISABLED) == "disabled"
