"""Unit tests for the exception hierarchy and exception handler utilities."""

import json
import logging

import pytest

from context_store.adapters.common.exception_handler import (
    format_exception_json,
    get_error_code,
    log_exception,
)
from context_store.core.domain.exceptions import (
    BackendFailureError,
    CollectionNotFoundError,
    ConfigurationError,
    ContextStoreError,
    DimensionMismatchError,
    EmbeddingError,
    EmptyQueryError,
    InvalidConfigurationError,
    InvalidFilterError,
    NotInitializedError,
    ValidationError,
    VectorStoreError,
)

pytestmark = pytest.mark.unit


class TestExceptionHierarchy:
    """Tests for exception hierarchy."""

    def test_context_store_error_is_base(self):
        """Test that ContextStoreError is the common base."""
        assert issubclass(VectorStoreError, ContextStoreError)
        assert issubclass(ConfigurationError, ContextStoreError)
        assert issubclass(ValidationError, ContextStoreError)
        assert issubclass(EmbeddingError, ContextStoreError)

    def test_store_errors_inherit_from_vector_store(self):
        """Test that store errors inherit from VectorStoreError."""
        for exc_type in (
            NotInitializedError,
            DimensionMismatchError,
            CollectionNotFoundError,
            InvalidFilterError,
            BackendFailureError,
        ):
            assert issubclass(exc_type, VectorStoreError)

    def test_specialised_errors(self):
        """Test specialised error subclasses."""
        assert issubclass(InvalidConfigurationError, ConfigurationError)
        assert issubclass(EmptyQueryError, ValidationError)

    def test_error_codes_are_unique(self):
        """Test that error codes are unique."""
        codes = [
            ContextStoreError.error_code,
            VectorStoreError.error_code,
            NotInitializedError.error_code,
            DimensionMismatchError.error_code,
            CollectionNotFoundError.error_code,
            InvalidFilterError.error_code,
            BackendFailureError.error_code,
            ConfigurationError.error_code,
            InvalidConfigurationError.error_code,
            ValidationError.error_code,
            EmptyQueryError.error_code,
            EmbeddingError.error_code,
        ]
        assert len(codes) == len(set(codes))


class TestExceptionCreation:
    """Tests for exception creation."""

    def test_basic_exception_creation(self):
        """Test creating a basic ContextStoreError."""
        exc = ContextStoreError("Test error message")
        assert str(exc) == "Test error message"
        assert exc.message == "Test error message"
        assert exc.error_code == "CTX_ERR_001"

    def test_exception_with_context(self):
        """Test exception with extra context."""
        exc = DimensionMismatchError(
            "Wrong size", context={"collection": "demo", "expected": 4, "actual": 3}
        )
        assert exc.extra_context == {"collection": "demo", "expected": 4, "actual": 3}

    def test_exception_with_cause(self):
        """Test exception with an underlying cause."""
        original = ConnectionError("Network unreachable")
        exc = BackendFailureError("Upsert failed", cause=original)

        assert exc.cause is original
        assert exc.to_dict()["cause"] == {"type": "ConnectionError", "message": "Network unreachable"}

    def test_location_captured_from_raise_site(self):
        """Test that the raise site is captured."""
        def raising_function():
            raise CollectionNotFoundError("missing")

        with pytest.raises(CollectionNotFoundError) as exc_info:
            raising_function()

        assert exc_info.value.location.method_name == "raising_function"
        assert exc_info.value.location.file_name == "test_exceptions.py"

    def test_to_dict_shape(self):
        """Test the to_dict shape."""
        exc = InvalidFilterError("bad filter", context={"expression": "x >"})

        data = exc.to_dict()

        assert data["error"] == {
            "type": "InvalidFilterError",
            "code": "CTX_VEC_005",
            "message": "bad filter",
        }
        assert data["context"] == {"expression": "x >"}
        assert "location" in data
        json.dumps(data)


class TestExceptionHandler:
    """Tests for exception handler."""

    def test_format_store_exception(self):
        """Test formatting a store exception."""
        exc = NotInitializedError("not connected")

        data = format_exception_json(exc, extra_context={"operation": "search"})

        assert data["error"]["code"] == "CTX_VEC_002"
        assert data["context"]["operation"] == "search"

    def test_format_python_exception(self):
        """Test formatting a plain Python exception."""
        try:
            raise ValueError("Invalid input")
        except ValueError as e:
            data = format_exception_json(e, include_trace=True)

        assert data["error"] == {"type": "ValueError", "code": "PYTHON_ERR", "message": "Invalid input"}
        assert data["location"]["method"] == "test_format_python_exception"
        assert data["stack_trace"]

    def test_get_error_code(self):
        """Test extracting error codes."""
        assert get_error_code(BackendFailureError("x")) == "CTX_VEC_006"
        assert get_error_code(RuntimeError("x")) == "PYTHON_ERR"

    def test_log_exception_writes_json(self, caplog):
        """Test that log_exception writes JSON."""
        log = logging.getLogger("context_store.tests")

        with caplog.at_level(logging.ERROR, logger="context_store.tests"):
            log_exception(InvalidFilterError("bad"), log=log)

        assert "CTX_VEC_005" in caplog.text

    def test_log_exception_attaches_store_fields(self, caplog):
        """Test that log_exception attaches store fields."""
        error = BackendFailureError("boom", context={"operation": "upsert", "collection": "demo"})

        with caplog.at_level(logging.ERROR, logger="context_store.tests"):
            log_exception(error, log=logging.getLogger("context_store.tests"))

        record = caplog.records[-1]
        assert record.operation == "upsert"
        assert record.collection == "demo"

    def test_store_error_exposes_collection_and_operation(self):
        """Test collection and operation properties."""
        error = CollectionNotFoundError("missing", context={"collection": "demo"})

        assert error.collection == "demo"
        assert error.operation is None
