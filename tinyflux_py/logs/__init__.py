"""Journaling for tinyflux stores."""

from .journal import (
    ActionJournal,
    JournalEventType,
    JournalEntry,
    JournalSummary,
    JournalConfig,
    create_journal,
)

__all__ = [
    "ActionJournal",
    "JournalEventType",
    "JournalEntry",
    "JournalSummary",
    "JournalConfig",
    "create_journal",
]
