"""Tests for InvocationResult.

Tests cover:
- ok() mirrors the error message
- Accessors and defaults
- Immutability
- to_dict()
"""

import dataclasses

import pytest

from callgate.dispatch import InvocationResult


class TestInvocationResultOk:
    """ok() is True exactly when there is no error message."""

    def test_default_is_ok(self):
        result = InvocationResult()
        assert result.ok() is True
        assert result.error() == ""
        assert result.echo() == ""
        assert result.return_value() is None

    def test_error_is_not_ok(self):
        result = InvocationResult(error_message="Requested method must be public.", error_kind="policy")
        assert result.ok() is False
        assert result.error() == "Requested method must be public."

    def test_error_kind_requires_message(self):
        with pytest.raises(ValueError, match="error_kind requires"):
            InvocationResult(error_kind="policy")


class TestInvocationResultValues:
    """Accessors return what was captured."""

    def test_accessors(self):
        result = InvocationResult(output="Hi World", value=42)
        assert result.echo() == "Hi World"
        assert result.return_value() == 42

    def test_return_value_is_opaque(self):
        payload = object()
        assert InvocationResult(value=payload).return_value() is payload

    def test_output_kept_alongside_error(self):
        result = InvocationResult(output="partial", error_message="boom", error_kind="runtime")
        assert result.echo() == "partial"
        assert not result.ok()

    def test_is_frozen(self):
        result = InvocationResult(output="x")
        with pytest.raises(dataclasses.FrozenInstanceError):
            result.output = "y"


class TestInvocationResultToDict:
    """Tests for to_dict()."""

    def test_ok_result(self):
        assert InvocationResult(output="o", value=1).to_dict() == {
            "ok": True,
            "echo": "o",
            "return_value": 1,
        }

    def test_error_result(self):
        data = InvocationResult(error_message="No target configured.", error_kind="configuration").to_dict()
        assert data["ok"] is False
        assert data["error"] == "No target configured."
        assert data["error_kind"] == "configuration"
