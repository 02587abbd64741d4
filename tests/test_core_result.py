"""
Tests for popgenstats.core.result module.
"""

import pickle

import pytest
from popgenstats.core.result import (
    Ok,
    Err,
    ErrorKind,
    StatError,
    StatisticError,
    collect_results,
    fail,
    returns_result,
)


class TestResult:
    """Tests for Result type."""

    def test_ok_is_ok(self):
        """Test that Ok result returns True for is_ok()."""
        result = Ok(42)
        assert result.is_ok() is True
        assert result.is_err() is False

    def test_err_is_err(self):
        """Test that Err result returns True for is_err()."""
        result = Err(StatError.domain("negative identity"))
        assert result.is_err() is True
        assert result.is_ok() is False

    def test_err_unwrap_raises_with_error(self):
        """Test that unwrapping Err raises StatisticError carrying the error."""
        error = StatError.zero_division("no gamete")
        with pytest.raises(StatisticError) as excinfo:
            Err(error).unwrap()
        assert excinfo.value.error is error

    def test_statistic_error_is_value_error(self):
        """Test that unwrap failures can still be caught as ValueError."""
        with pytest.raises(ValueError, match="no gamete"):
            Err(StatError.zero_division("no gamete")).unwrap()

    def test_ok_unwrap_err_raises(self):
        """Test that unwrap_err on Ok raises ValueError."""
        with pytest.raises(ValueError):
            Ok(42).unwrap_err()

    def test_unwrap_or(self):
        """Test unwrap_or on both variants."""
        assert Ok(42).unwrap_or(0) == 42
        assert Err(StatError.domain("x")).unwrap_or(0) == 0

    def test_map(self):
        """Test map transforms Ok and passes Err through."""
        assert Ok(5).map(lambda x: x * 2).unwrap() == 10
        error = StatError.domain("x")
        assert Err(error).map(lambda x: x * 2).unwrap_err() is error

    def test_and_then(self):
        """Test and_then chains Ok operations."""
        def half(x):
            if x % 2:
                return Err(StatError.invalid_argument("odd"))
            return Ok(x // 2)

        assert Ok(10).and_then(half).unwrap() == 5
        assert Ok(3).and_then(half).is_err()


class TestStatError:
    """Tests for StatError constructors."""

    def test_bounds_message(self):
        """Test bounds error names index and max index."""
        error = StatError.bounds(5, 4)
        assert error.kind is ErrorKind.BOUNDS
        assert "5" in error.message
        assert "max valid index: 4" in error.message

    def test_str_includes_kind(self):
        """Test string form includes the kind."""
        assert str(StatError.domain("log of 0")) == "domain: log of 0"

    def test_statistic_error_pickles(self):
        """Test StatisticError survives pickling with its StatError."""
        error = StatError.zero_division("empty group")
        restored = pickle.loads(pickle.dumps(StatisticError(error)))
        assert restored.error == error


class TestReturnsResult:
    """Tests for the returns_result decorator."""

    def test_value_wrapped_in_ok(self):
        """Test plain return values become Ok."""
        @returns_result
        def answer():
            return 42

        assert answer().unwrap() == 42

    def test_fail_becomes_err(self):
        """Test fail() inside the function becomes Err with the same error."""
        error = StatError.invalid_argument("bad method")

        @returns_result
        def broken():
            fail(error)

        result = broken()
        assert result.is_err()
        assert result.unwrap_err() is error

    def test_nested_unwrap_keeps_kind(self):
        """Test errors keep their kind through nested unwraps."""
        @returns_result
        def inner():
            fail(StatError.bounds(3, 2))

        @returns_result
        def outer():
            return inner().unwrap() + 1

        result = outer()
        assert result.unwrap_err().kind is ErrorKind.BOUNDS

    def test_result_passthrough(self):
        """Test a returned Result is not wrapped again."""
        @returns_result
        def already():
            return Ok(1)

        assert already() == Ok(1)

    def test_other_exceptions_propagate(self):
        """Test unrelated exceptions are not swallowed."""
        @returns_result
        def crash():
            raise KeyError("boom")

        with pytest.raises(KeyError):
            crash()


class TestCollectResults:
    """Tests for collect_results function."""

    def test_all_ok(self):
        """Test collecting all Ok results."""
        collected = collect_results([Ok(1), Ok(2), Ok(3)])
        assert collected.unwrap() == [1, 2, 3]

    def test_first_err_returned(self):
        """Test that the first Err fails the collection."""
        first = StatError.domain("first")
        collected = collect_results([Ok(1), Err(first), Err(StatError.domain("second"))])
        assert collected.unwrap_err() is first

    def test_empty_list(self):
        """Test collecting empty list."""
        assert collect_results([]).unwrap() == []
