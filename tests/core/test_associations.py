"""
Test suite for AssociationPreferences.

Tests ignore/unignore, concept deletion and association filtering against
an in-memory preference store.

System role: Verification of association preference bookkeeping
"""

import pytest

from memo_index.core.associations import AssociationPreferences, AssociationPreferencesState
from memo_index.models import NoteAssociation, build_association_id


class InMemoryPreferenceStore:
    """Holds preference state the way a host settings file would."""

    def __init__(self) -> None:
        self.state = AssociationPreferencesState()
        self.saves = 0

    def load(self) -> AssociationPreferencesState:
        return self.state

    async def save(self, state: AssociationPreferencesState) -> None:
        self.state = state
        self.saves += 1


@pytest.fixture
def store() -> InMemoryPreferenceStore:
    """Provide empty preference store."""
    return InMemoryPreferenceStore()


@pytest.fixture
def preferences(store: InMemoryPreferenceStore) -> AssociationPreferences:
    """Provide preferences bound to the store."""
    return AssociationPreferences(store.load, store.save)


class TestBuildAssociationId:
    """Test suite for association id construction."""

    def test_build_association_id_should_ignore_argument_order(self) -> None:
        """Test (A, B) and (B, A) collapse to one id."""
        # Act & Assert
        assert build_association_id("b.md", "a.md") == "a.md|b.md"
        assert build_association_id("a.md", "b.md") == "a.md|b.md"


class TestAssociationPreferences:
    """Test suite for ignore and concept deletion."""

    @pytest.mark.asyncio
    async def test_ignore_association_should_be_idempotent(
        self, preferences: AssociationPreferences, store: InMemoryPreferenceStore
    ) -> None:
        """Test ignoring twice stores the id once."""
        # Act
        await preferences.ignore_association("a.md|b.md")
        await preferences.ignore_association("a.md|b.md")

        # Assert
        assert store.state.ignored_associations == ["a.md|b.md"]
        assert preferences.is_ignored("a.md|b.md")

    @pytest.mark.asyncio
    async def test_unignore_association_should_remove_id(
        self, preferences: AssociationPreferences
    ) -> None:
        """Test unignore reverses ignore."""
        # Arrange
        await preferences.ignore_association("a.md|b.md")

        # Act
        await preferences.unignore_association("a.md|b.md")

        # Assert
        assert not preferences.is_ignored("a.md|b.md")

    @pytest.mark.asyncio
    async def test_delete_and_restore_concept(self, preferences: AssociationPreferences) -> None:
        """Test concept deletion per association and its reversal."""
        # Act
        await preferences.delete_concept("a.md|b.md", "caching")
        await preferences.delete_concept("a.md|b.md", "caching")
        deleted = preferences.get_deleted_concepts("a.md|b.md")
        await preferences.restore_concept("a.md|b.md", "caching")

        # Assert
        assert deleted == ["caching"]
        assert preferences.get_deleted_concepts("a.md|b.md") == []

    @pytest.mark.asyncio
    async def test_filter_associations_should_apply_preferences(
        self, preferences: AssociationPreferences
    ) -> None:
        """Test ignored pairs and emptied associations are dropped."""
        # Arrange
        associations = [
            NoteAssociation(source_note_id="b.md", target_note_id="a.md", shared_concepts=["lru"]),
            NoteAssociation(
                source_note_id="a.md", target_note_id="c.md", shared_concepts=["rrf", "qdrant"]
            ),
            NoteAssociation(source_note_id="c.md", target_note_id="d.md", shared_concepts=["faiss"]),
        ]
        await preferences.ignore_association("a.md|b.md")
        await preferences.delete_concept("a.md|c.md", "rrf")
        await preferences.delete_concept("c.md|d.md", "faiss")

        # Act
        filtered = preferences.filter_associations(associations)

        # Assert
        assert len(filtered) == 1
        assert filtered[0].association_id == "a.md|c.md"
        assert filtered[0].shared_concepts == ["qdrant"]
        assert associations[1].shared_concepts == ["rrf", "qdrant"]

    @pytest.mark.asyncio
    async def test_clear_should_reset_state(
        self, preferences: AssociationPreferences, store: InMemoryPreferenceStore
    ) -> None:
        """Test clearing ignored associations and deleted concepts."""
        # Arrange
        await preferences.ignore_association("a.md|b.md")
        await preferences.delete_concept("a.md|c.md", "rrf")

        # Act
        await preferences.clear_ignored_associations()
        await preferences.clear_deleted_concepts()

        # Assert
        assert store.state.ignored_associations == []
        assert store.state.deleted_concepts == {}
