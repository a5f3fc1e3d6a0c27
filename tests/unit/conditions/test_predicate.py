"""Tests for the predicate language: translation, whitelist and evaluation."""

import pytest

from formstate.core.conditions.predicate import compile_predicate
from formstate.core.exceptions import PredicateEvaluationError, PredicateSyntaxError


def _eval(expression, strict=False, **values):
    return compile_predicate(expression).evaluate(values, strict=strict)


class TestTagReferences:
    """Tag extraction from $tag and ${tag} references."""

    def test_simple_reference(self):
        assert compile_predicate("$age > 18").referenced_tags == frozenset({"age"})

    def test_braced_reference_allows_spaces(self):
        program = compile_predicate("${first name} == 'Ada'")
        assert program.referenced_tags == frozenset({"first name"})
        assert program.evaluate({"first name": "Ada"})

    def test_repeated_reference_counted_once(self):
        program = compile_predicate("$a > 1 and $a < 5 or $b")
        assert program.referenced_tags == frozenset({"a", "b"})

    def test_literal_only_predicate_has_no_tags(self):
        assert compile_predicate("1 < 2").referenced_tags == frozenset()


class TestOperators:

    def test_equality_aliases(self):
        assert _eval("$a = 1", a=1)
        assert _eval("$a == 1", a=1)
        assert _eval("$a <> 1", a=2)
        assert _eval("$a != 1", a=2)

    def test_boolean_keywords_are_case_insensitive(self):
        assert _eval("$a AND $b", a=True, b=True)
        assert not _eval("$a and NOT $b", a=True, b=True)
        assert _eval("$a Or $b", a=False, b=True)

    def test_symbolic_boolean_operators(self):
        assert _eval("$a && !$b", a=True, b=False)
        assert _eval("$a || $b", a=False, b=True)

    def test_literal_keywords(self):
        assert _eval("$flag == YES", flag=True)
        assert _eval("$flag == false", flag=False)
        assert _eval("$x == nil")
        assert _eval("$x == NULL", x=None)
        assert _eval("$x is None")

    def test_membership(self):
        assert _eval("$plan in ['free', 'trial']", plan="free")
        assert _eval("$plan not in ('free', 'trial')", plan="pro")
        assert _eval("$plan IN ['free']", plan="free")

    def test_arithmetic(self):
        assert _eval("$a + $b == 5", a=2, b=3)
        assert _eval("$a % 2 == 1", a=7)
        assert _eval("-$a < 0", a=3)

    def test_chained_comparison(self):
        assert _eval("1 < $a <= 5", a=5)
        assert not _eval("1 < $a <= 5", a=6)

    def test_string_literals_with_both_quotes(self):
        assert _eval("$name == \"Ada\"", name="Ada")
        assert _eval("$name == 'it\\'s'", name="it's")


class TestTotality:
    """Missing and incompatible values never raise unless strict."""

    def test_missing_tag_reads_as_none(self):
        assert _eval("$missing == nil")
        assert not _eval("$missing == 0")

    def test_ordering_none_is_false(self):
        assert not _eval("$a > 3")
        assert not _eval("$a <= 3", a=None)

    def test_ordering_incompatible_types_is_false(self):
        assert not _eval("$a > 3", a="text")

    def test_arithmetic_with_none_is_falsy(self):
        assert not _eval("$a + 1")

    def test_division_by_zero_is_falsy(self):
        assert not _eval("$a / 0 == 1", a=1)

    def test_membership_in_non_container_is_false(self):
        assert not _eval("$a in $b", a=1, b=5)

    def test_strict_mode_raises_on_none_ordering(self):
        with pytest.raises(PredicateEvaluationError, match="cannot order"):
            _eval("$a > 3", strict=True)

    def test_strict_mode_raises_on_bad_arithmetic(self):
        with pytest.raises(PredicateEvaluationError, match="arithmetic"):
            _eval("$a * $b > 1", strict=True, a="x", b=None)

    def test_strict_mode_still_allows_equality_with_none(self):
        assert _eval("$a == nil", strict=True)


class TestSyntaxErrors:

    @pytest.mark.parametrize("expression", [
        "",
        "   ",
        "$a >",
        "($a == 1",
        "$a == 1)",
    ])
    def test_malformed(self, expression):
        with pytest.raises(PredicateSyntaxError):
            compile_predicate(expression)

    def test_bare_identifier_suggests_tag_reference(self):
        with pytest.raises(PredicateSyntaxError, match=r"reference rows as \$age"):
            compile_predicate("age > 18")

    def test_unexpected_character_reports_column(self):
        with pytest.raises(PredicateSyntaxError, match="Column 4") as exc_info:
            compile_predicate("$a @ 1")
        assert exc_info.value.expression == "$a @ 1"

    @pytest.mark.parametrize("expression", [
        "$a[0] == 1",
        "[x for x in $a]",
    ])
    def test_constructs_outside_whitelist(self, expression):
        with pytest.raises(PredicateSyntaxError):
            compile_predicate(expression)

    def test_error_message_includes_predicate(self):
        with pytest.raises(PredicateSyntaxError, match=r"Predicate: \$a >"):
            compile_predicate("$a >")


def test_compiled_programs_are_cached():
    assert compile_predicate("$a == 1") is compile_predicate("$a == 1")


def test_result_is_coerced_to_bool():
    assert _eval("$a", a="non-empty") is True
    assert _eval("$a", a="") is False
