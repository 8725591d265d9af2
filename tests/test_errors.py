"""
Tests for the exception hierarchy and contract revert formatting.
"""

import pytest

from perpcity import (
    ContractError,
    ErrorCategory,
    ErrorSource,
    InvalidArgumentError,
    PerpCityError,
    ScaledOverflowError,
    format_contract_error,
    with_context,
)


class TestHierarchy:
    """Exception classes stay catchable as their builtin counterparts."""

    def test_invalid_argument_is_value_error(self):
        assert issubclass(InvalidArgumentError, ValueError)
        assert issubclass(InvalidArgumentError, PerpCityError)

    def test_overflow_is_overflow_error(self):
        assert issubclass(ScaledOverflowError, OverflowError)
        assert issubclass(ScaledOverflowError, PerpCityError)

    def test_contract_error_is_perpcity_error(self):
        assert issubclass(ContractError, PerpCityError)

    def test_str_is_message(self):
        assert str(PerpCityError("boom")) == "boom"


class TestFormatContractError:
    """Tests for format_contract_error function."""

    def test_perp_manager_error(self):
        err = format_contract_error("InvalidMargin", [0])

        assert str(err) == "Invalid margin amount: 0"
        assert err.error_name == "InvalidMargin"
        assert err.error_args == (0,)
        assert err.debug.source == ErrorSource.PERP_MANAGER
        assert err.debug.category == ErrorCategory.USER_ERROR
        assert err.debug.can_retry is False

    def test_argument_order(self):
        err = format_contract_error("InvalidCaller", ["0xabc", "0xdef"])
        assert str(err) == "Invalid caller. Expected: 0xdef, Got: 0xabc"

    def test_pool_manager_retryable(self):
        err = format_contract_error("ManagerLocked")

        assert err.debug.source == ErrorSource.POOL_MANAGER
        assert err.debug.category == ErrorCategory.STATE_ERROR
        assert err.debug.can_retry is True
        assert err.debug.retry_guidance

    def test_currency_not_settled_is_not_retryable(self):
        err = format_contract_error("CurrencyNotSettled")
        assert err.debug.can_retry is False
        assert err.debug.retry_guidance

    def test_maker_position_locked(self):
        err = format_contract_error("MakerPositionLocked", [0, 3600])

        assert "locked until 1970-01-01T01:00:00+00:00" in str(err)
        assert "Current time: 1970-01-01T00:00:00+00:00" in str(err)
        assert err.debug.category == ErrorCategory.STATE_ERROR
        assert err.debug.source == ErrorSource.PERP_MANAGER

    def test_maker_position_locked_without_args(self):
        """Reverts decoded without their timestamps still format."""
        err = format_contract_error("MakerPositionLocked")

        assert str(err) == "Maker position is locked until ?. Current time: ?"
        assert err.error_args == ()
        assert err.debug.category == ErrorCategory.STATE_ERROR

    def test_maker_position_locked_partial_args(self):
        err = format_contract_error("MakerPositionLocked", [0])
        assert str(err) == "Maker position is locked until ?. Current time: 1970-01-01T00:00:00+00:00"

    def test_unknown_error_with_args(self):
        err = format_contract_error("SomethingNew", [1, "x"])

        assert str(err) == "Contract error: SomethingNew (1, x)"
        assert err.debug.source == ErrorSource.UNKNOWN
        assert err.debug.category == ErrorCategory.SYSTEM_ERROR

    def test_unknown_error_without_args(self):
        assert str(format_contract_error("SomethingNew")) == "Contract error: SomethingNew"

    def test_missing_args_are_placeholders(self):
        assert str(format_contract_error("InvalidMargin")) == "Invalid margin amount: ?"


class TestWithContext:
    """Tests for with_context function."""

    def test_prefixes_perpcity_error(self):
        original = InvalidArgumentError("Price must be positive: 0")
        err = with_context(original, "Failed to open taker position")

        assert err is original
        assert isinstance(err, InvalidArgumentError)
        assert str(err) == "Failed to open taker position: Price must be positive: 0"

    def test_wraps_foreign_error(self):
        cause = KeyError("markPrice")
        err = with_context(cause, "Failed to fetch perp data")

        assert type(err) is PerpCityError
        assert err.cause is cause
        assert str(err).startswith("Failed to fetch perp data: ")

    def test_raised_with_context(self):
        with pytest.raises(PerpCityError, match="^ctx: boom$"):
            raise with_context(PerpCityError("boom"), "ctx")
