"""
Tests for Sensitive values and secrecy detection.
"""

import pytest

from provisioner.core.models.sensitive import REDACTED, Sensitive, is_sensitive, redact, reveal


class TestSensitive:
    def test_never_prints_value(self):
        s = Sensitive("hunter2")
        assert repr(s) == REDACTED
        assert str(s) == REDACTED
        assert "hunter2" not in f"{s}"

    def test_reveal(self):
        assert Sensitive({"a": 1}).reveal() == {"a": 1}

    def test_immutable(self):
        s = Sensitive("x")
        with pytest.raises(AttributeError):
            s._value = "y"

    def test_equality(self):
        assert Sensitive("x") == Sensitive("x")
        assert Sensitive("x") != Sensitive("y")

    def test_map_keeps_secret(self):
        mapped = Sensitive("abc").map(str.upper)
        assert isinstance(mapped, Sensitive)
        assert mapped.reveal() == "ABC"


class TestIsSensitive:
    @pytest.mark.parametrize("value", ["x", 1, 1.5, True, None, [], {}, ["a", {"b": [1, 2]}]])
    def test_plain_values(self, value):
        assert is_sensitive(value) is False

    def test_nested_secret(self):
        assert is_sensitive([{"vars": {"token": Sensitive("t")}}])
        assert is_sensitive(("a", Sensitive("b")))

    def test_unknown_objects_treated_as_secret(self):
        class Opaque:
            pass

        assert is_sensitive(Opaque())
        assert is_sensitive({"key": object()})


class TestRevealRedact:
    def test_reveal_deep(self):
        data = {"a": [Sensitive("x"), {"b": Sensitive(Sensitive("y"))}]}
        assert reveal(data) == {"a": ["x", {"b": "y"}]}

    def test_redact_deep(self):
        data = {"a": [Sensitive("x"), "plain"]}
        assert redact(data) == {"a": [REDACTED, "plain"]}
