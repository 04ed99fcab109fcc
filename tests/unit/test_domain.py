"""Unit tests for domain models and naming helpers."""

import pytest

from context_store.core.domain import (
    SearchResult,
    SignalKind,
    VectorDocument,
    normalize_collection_name,
)
from context_store.core.domain.exceptions import ValidationError

pytestmark = pytest.mark.unit


class TestVectorDocument:
    """Tests for VectorDocument."""

    def test_document_creation(self):
        """Test creating a VectorDocument."""
        doc = VectorDocument(
            id="1",
            vector=[0.1, 0.2],
            content="def main(): pass",
            relative_path="src/main.py",
            start_line=3,
            end_line=3,
            file_extension=".py",
            metadata={"language": "python"},
        )
        assert doc.id == "1"
        assert doc.metadata == {"language": "python"}

    def test_metadata_defaults_to_empty(self):
        """Test that metadata defaults to an empty dict."""
        doc = VectorDocument(id="1", vector=[], content="", relative_path="a", start_line=1, end_line=1)
        assert doc.metadata == {}
        assert doc.file_extension == ""

    def test_empty_id_rejected(self):
        """Test that an empty id is rejected."""
        with pytest.raises(ValidationError):
            VectorDocument(id="", vector=[], content="", relative_path="a", start_line=1, end_line=1)

    def test_zero_start_line_rejected(self):
        """Test that a zero start_line is rejected."""
        with pytest.raises(ValidationError):
            VectorDocument(id="1", vector=[], content="", relative_path="a", start_line=0, end_line=1)

    def test_end_before_start_rejected(self):
        """Test that end_line before start_line is rejected."""
        with pytest.raises(ValidationError) as exc_info:
            VectorDocument(id="1", vector=[], content="", relative_path="a", start_line=5, end_line=4)

        assert exc_info.value.extra_context["end_line"] == 4


class TestSearchResult:
    """Tests for SearchResult."""

    def test_source_signals_optional(self):
        """Test that source_signals defaults to None."""
        doc = VectorDocument(id="1", vector=[], content="", relative_path="a", start_line=1, end_line=1)
        result = SearchResult(document=doc, score=0.9)
        assert result.source_signals is None


class TestSignalKind:
    """Tests for SignalKind."""

    def test_values(self):
        """Test signal kind values."""
        assert SignalKind.DENSE.value == "dense"
        assert SignalKind.KEYWORD.value == "keyword"
        assert SignalKind.SPARSE.value == "sparse"
        assert SignalKind("dense") is SignalKind.DENSE


class TestNormalizeCollectionName:
    """Tests for normalize_collection_name."""

    @pytest.mark.parametrize(
        ("name", "expected"),
        [
            ("demo", "demo"),
            ("Demo", "demo"),
            ("my-repo", "my_repo"),
            ("code/base v2", "code_base_v2"),
            ("  Padded  ", "padded"),
            ("snake_case_1", "snake_case_1"),
        ],
    )
    def test_normalization(self, name, expected):
        """Test collection name normalization."""
        assert normalize_collection_name(name) == expected

    @pytest.mark.parametrize("name", ["", "   "])
    def test_empty_name_rejected(self, name):
        """Test that an empty name is rejected."""
        with pytest.raises(ValidationError):
            normalize_collection_name(name)
