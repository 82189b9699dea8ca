"""
Parameter filters.
"""

import pytest

from starchain.core.filters import ParameterFilter, apply_filter, describe_filter


class TestApplyFilter:

    def test_int_converts_numeric_strings(self):
        assert apply_filter("int", "42") == 42
        assert apply_filter("validate_int", 7) == 7

    def test_int_rejects_garbage(self):
        with pytest.raises(ValueError):
            apply_filter("int", "forty-two")

    def test_float(self):
        assert apply_filter("float", "1.5") == 1.5

    @pytest.mark.parametrize("raw,expected", [("yes", True), ("true", True), ("0", False), (False, False)])
    def test_boolean(self, raw, expected):
        assert apply_filter("boolean", raw) is expected

    def test_boolean_is_strict(self):
        with pytest.raises(ValueError):
            apply_filter("boolean", "maybe")

    def test_string(self):
        assert apply_filter("string", 12) == "12"

    def test_url(self):
        assert apply_filter("url", "https://example.com/a") == "https://example.com/a"
        with pytest.raises(ValueError):
            apply_filter("url", "not a url")

    def test_email(self):
        assert apply_filter("email", "ada@example.com") == "ada@example.com"
        with pytest.raises(ValueError):
            apply_filter("email", "ada-at-example")

    @pytest.mark.parametrize("options", [
        r"^30[1-7]$",
        {"regexp": r"^30[1-7]$"},
        {"options": {"regexp": r"^30[1-7]$"}},
    ])
    def test_regex_option_forms(self, options):
        assert apply_filter("regex", "302", options) == "302"
        with pytest.raises(ValueError):
            apply_filter("regex", "404", options)

    def test_callback(self):
        assert apply_filter("callback", "abc", str.upper) == "ABC"
        with pytest.raises(ValueError):
            apply_filter("callback", "abc", "not callable")

    def test_this_calls_owner_method(self):
        class Owner:
            def double(self, value):
                return value * 2
        assert apply_filter("this", 4, "double", owner=Owner()) == 8

    def test_unknown_filter(self):
        with pytest.raises(ValueError):
            apply_filter("sparkle", "x")


class TestDescribeFilter:

    def test_descriptions(self):
        assert describe_filter(ParameterFilter("int")) == "int"
        assert describe_filter(ParameterFilter("callback", str.upper)) == "callback: upper"
        assert describe_filter(ParameterFilter("regexp", {"regexp": "^a$"})) == "regex: ^a$"
