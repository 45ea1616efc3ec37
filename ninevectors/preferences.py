"""Persisted tour preferences: the welcome flag and completed tours.

Stored as JSON under the ``tour_prefs`` key of a ``KeyValueStore``.
Older payloads written without ``schema_version`` (camelCase keys from the
browser build) are still accepted.
"""

from __future__ import annotations

import logging

from pydantic import AliasChoices, BaseModel, Field, ValidationError

from ninevectors.store import KEY_TOUR_PREFS, KeyValueStore

logger = logging.getLogger(__name__)


class TourPreferences(BaseModel):
    """Top-level preferences model."""

    schema_version: int = 1
    has_seen_welcome: bool = Field(
        default=False,
        validation_alias=AliasChoices("has_seen_welcome", "hasSeenWelcome"),
    )
    completed_tour_ids: list[str] = Field(
        default_factory=list,
        validation_alias=AliasChoices("completed_tour_ids", "completedTours"),
    )

    def with_completed(self, tour_id: str) -> TourPreferences:
        """Return a copy with *tour_id* recorded once."""
        if tour_id in self.completed_tour_ids:
            return self
        return self.model_copy(
            update={"completed_tour_ids": [*self.completed_tour_ids, tour_id]}
        )


def load_tour_prefs(store: KeyValueStore) -> TourPreferences:
    """Load preferences, returning defaults when missing or invalid."""
    raw = store.get(KEY_TOUR_PREFS)
    if raw is None:
        return TourPreferences()
    try:
        return TourPreferences.model_validate(raw)
    except ValidationError as exc:
        logger.warning("Discarding invalid tour preferences: %s", exc)
        return TourPreferences()


def save_tour_prefs(store: KeyValueStore, prefs: TourPreferences) -> None:
    store.set(KEY_TOUR_PREFS, prefs.model_dump(mode="json"))


def update_tour_prefs(store: KeyValueStore, **changes: object) -> TourPreferences:
    """Merge *changes* into the stored preferences and write them back."""
    prefs = load_tour_prefs(store).model_copy(update=changes)
    save_tour_prefs(store, prefs)
    return prefs
