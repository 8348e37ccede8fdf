"""
Association preferences.

Tracks user decisions about shared-concept associations between notes:
associations the user chose to ignore and individual concepts removed from
an association. Persistence is delegated to host-supplied load/save callables.

Dependencies: pydantic, memo_index.models.association
System role: Read-side filter for associations produced by the concept engine
"""

import logging
from typing import Awaitable, Callable

from pydantic import BaseModel, Field

from memo_index.models.association import NoteAssociation, build_association_id

logger = logging.getLogger(__name__)


class AssociationPreferencesState(BaseModel):
    """Persisted preference state."""

    ignored_associations: list[str] = Field(default_factory=list)
    deleted_concepts: dict[str, list[str]] = Field(default_factory=dict)


PreferencesLoader = Callable[[], AssociationPreferencesState]
PreferencesSaver = Callable[[AssociationPreferencesState], Awaitable[None]]


class AssociationPreferences:
    """User preferences applied on top of discovered associations."""

    def __init__(self, load: PreferencesLoader, save: PreferencesSaver) -> None:
        """
        Initialize preferences.

        Args:
            load: Returns the current persisted state
            save: Persists a new state
        """
        self._load = load
        self._save = save

    def get_ignored_associations(self) -> set[str]:
        return set(self._load().ignored_associations)

    def is_ignored(self, association_id: str) -> bool:
        return association_id in self.get_ignored_associations()

    async def ignore_association(self, association_id: str) -> None:
        state = self._load()
        if association_id in state.ignored_associations:
            return
        ignored = [*state.ignored_associations, association_id]
        await self._save(state.model_copy(update={"ignored_associations": ignored}))
        logger.info(f"{__name__}:ignore_association - Ignored {association_id}")

    async def unignore_association(self, association_id: str) -> None:
        state = self._load()
        ignored = [id for id in state.ignored_associations if id != association_id]
        await self._save(state.model_copy(update={"ignored_associations": ignored}))

    def get_deleted_concepts(self, association_id: str) -> list[str]:
        return list(self._load().deleted_concepts.get(association_id, []))

    async def delete_concept(self, association_id: str, concept: str) -> None:
        """Hide one shared concept of an association."""
        state = self._load()
        existing = state.deleted_concepts.get(association_id, [])
        if concept in existing:
            return
        deleted = {**state.deleted_concepts, association_id: [*existing, concept]}
        await self._save(state.model_copy(update={"deleted_concepts": deleted}))

    async def restore_concept(self, association_id: str, concept: str) -> None:
        state = self._load()
        remaining = [c for c in state.deleted_concepts.get(association_id, []) if c != concept]
        deleted = {**state.deleted_concepts, association_id: remaining}
        await self._save(state.model_copy(update={"deleted_concepts": deleted}))

    async def clear_ignored_associations(self) -> None:
        state = self._load()
        await self._save(state.model_copy(update={"ignored_associations": []}))

    async def clear_deleted_concepts(self) -> None:
        state = self._load()
        await self._save(state.model_copy(update={"deleted_concepts": {}}))

    def filter_associations(self, associations: list[NoteAssociation]) -> list[NoteAssociation]:
        """
        Apply preferences to a list of associations.

        Ignored associations are dropped, deleted concepts are removed from
        the remaining ones, and associations left without concepts are dropped.

        Args:
            associations: Associations from the concept engine

        Returns:
            list[NoteAssociation]: Filtered copies, input order preserved
        """
        state = self._load()
        ignored = set(state.ignored_associations)

        filtered: list[NoteAssociation] = []
        for association in associations:
            association_id = build_association_id(
                association.source_note_id, association.target_note_id
            )
            if association_id in ignored:
                continue
            deleted = set(state.deleted_concepts.get(association_id, []))
            concepts = [c for c in association.shared_concepts if c not in deleted]
            if concepts:
                filtered.append(association.model_copy(update={"shared_concepts": concepts}))
        return filtered
