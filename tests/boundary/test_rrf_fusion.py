"""
Test suite for reciprocal rank fusion.

System role: Verification of client-side rank fusion
"""

import pytest

from memo_index.boundary.vdb.vector_backend import RankedHit, rrf_fusion


@pytest.fixture
def hit(make_metadata):
    """Provide a RankedHit builder."""

    def _hit(id: str) -> RankedHit:
        return RankedHit(id=id, metadata=make_metadata(file_path=id))

    return _hit


class TestRRFFusion:
    """Test suite for rrf_fusion."""

    def test_rrf_fusion_should_sum_reciprocal_ranks(self, hit) -> None:
        """Test an id ranked first in three lists scores 3/61."""
        # Arrange
        result_sets = [[hit("a"), hit("b")], [hit("a")], [hit("a"), hit("b")]]

        # Act
        results = rrf_fusion(result_sets, limit=10)

        # Assert
        assert [result.id for result in results] == ["a", "b"]
        assert results[0].score == pytest.approx(3 / 61)
        assert results[1].score == pytest.approx(2 / 62)

    def test_rrf_fusion_should_keep_first_seen_order_on_ties(self, hit) -> None:
        """Test equal fused scores keep insertion order."""
        # Arrange
        result_sets = [[hit("x"), hit("y")], [hit("y"), hit("x")]]

        # Act
        results = rrf_fusion(result_sets, limit=10)

        # Assert
        assert results[0].score == pytest.approx(results[1].score)
        assert [result.id for result in results] == ["x", "y"]

    def test_rrf_fusion_should_truncate_to_limit(self, hit) -> None:
        """Test the limit caps the fused list."""
        # Arrange
        result_sets = [[hit(str(i)) for i in range(5)]]

        # Act
        results = rrf_fusion(result_sets, limit=2)

        # Assert
        assert [result.id for result in results] == ["0", "1"]

    def test_rrf_fusion_should_use_custom_k(self, hit) -> None:
        """Test the smoothing constant changes the score."""
        # Act
        results = rrf_fusion([[hit("a")]], limit=1, k=0)

        # Assert
        assert results[0].score == pytest.approx(1.0)

    def test_rrf_fusion_should_return_empty_for_no_hits(self) -> None:
        """Test empty input produces no results."""
        # Act & Assert
        assert rrf_fusion([[], [], []], limit=10) == []
