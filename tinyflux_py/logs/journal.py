"""NDJSON action journal for tinyflux stores.

Provides structured NDJSON logging of a store's activity with:
- One line per dispatched action, plus the resulting state when it changed
- Per-store journal files
- Action type counts and a summary file written on close
- Optional mirroring to a text stream

Context references are never written.
"""

import json
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Optional, TextIO

from ..engine.store import Store
from ..state.actions import Action
from ..streams import CompositeDisposable


class JournalEventType(str, Enum):
    """Event types written to the journal."""
    ATTACH = "store.attach"
    ACTION = "action"
    STATE = "state"
    INFO = "info"


@dataclass
class JournalEntry:
    """A single journal line."""
    timestamp: str
    event_type: str
    store_id: str
    seq: int
    payload: Dict[str, Any]

    def to_ndjson(self) -> str:
        data = {
            "ts": self.timestamp,
            "type": self.event_type,
            "store": self.store_id,
            "seq": self.seq,
            "payload": self.payload,
        }
        return json.dumps(data, separators=(',', ':'))


@dataclass
class JournalSummary:
    """Summary statistics for a journal."""
    store_id: str
    total_events: int = 0
    action_counts: Dict[str, int] = field(default_factory=dict)
    state_versions: int = 0
    first_timestamp: Optional[str] = None
    last_timestamp: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "store_id": self.store_id,
            "total_events": self.total_events,
            "action_counts": self.action_counts,
            "state_versions": self.state_versions,
            "first_timestamp": self.first_timestamp,
            "last_timestamp": self.last_timestamp,
        }


@dataclass
class JournalConfig:
    """Configuration for the action journal."""
    record_state: bool = True
    # After this many events, state snapshots are no longer written.
    truncate_state_after_events: int = 50000


class ActionJournal:
    """Writes a store's actions to {base_dir}/journals/{store_id}/actions.ndjson."""

    def __init__(
        self,
        store_id: str,
        base_dir: str = ".tinyflux",
        config: Optional[JournalConfig] = None,
        stream: Optional[TextIO] = None,
    ):
        self.store_id = store_id
        self.base_dir = Path(base_dir)
        self.config = config or JournalConfig()
        self.stream = stream

        self.summary = JournalSummary(store_id=store_id)
        self._file: Optional[TextIO] = None
        self._seq = 0
        self._last_state: Any = None

        journal_dir = self.base_dir / "journals" / store_id
        journal_dir.mkdir(parents=True, exist_ok=True)
        self._log_path = journal_dir / "actions.ndjson"
        self._summary_path = journal_dir / "actions.summary.json"

    @property
    def log_path(self) -> Path:
        return self._log_path

    @property
    def summary_path(self) -> Path:
        return self._summary_path

    def attach(self, store: Store) -> CompositeDisposable:
        """Start journaling ``store``. Dispose the returned group to stop."""
        group = CompositeDisposable()
        self._last_state = store.state
        self.log(JournalEventType.ATTACH, {"slices": list(store.state)})
        if self.config.record_state:
            self._write_state(store.state)

        def on_action(action: Action) -> None:
            self.record_action(action)
            state = store.state
            if state is not self._last_state:
                self._last_state = state
                self._write_state(state)

        group.add(store.actions.subscribe(on_action))
        return group

    def record_action(self, action: Action) -> None:
        self.summary.action_counts[action.type] = self.summary.action_counts.get(action.type, 0) + 1
        payload: Dict[str, Any] = {"action": action.type}
        if action.payload is not None:
            payload["payload"] = self._safe_serialize(action.payload)
        self.log(JournalEventType.ACTION, payload)

    def _write_state(self, state: Dict[str, Any]) -> None:
        self.summary.state_versions += 1
        if not self.config.record_state:
            return
        if self.summary.total_events >= self.config.truncate_state_after_events:
            return
        self.log(JournalEventType.STATE, {"state": self._safe_serialize(state)})

    def log(self, event_type: str, payload: Dict[str, Any]) -> None:
        """Append one event."""
        timestamp = datetime.now(timezone.utc).isoformat()
        self._seq += 1
        entry = JournalEntry(
            timestamp=timestamp,
            event_type=event_type,
            store_id=self.store_id,
            seq=self._seq,
            payload=payload,
        )

        self.summary.total_events += 1
        if self.summary.first_timestamp is None:
            self.summary.first_timestamp = timestamp
        self.summary.last_timestamp = timestamp

        line = entry.to_ndjson() + "\n"
        if self.stream:
            self.stream.write(line)
            self.stream.flush()

        if self._file is None:
            self._file = open(self._log_path, 'a', encoding='utf-8')
        self._file.write(line)
        self._file.flush()

    def _safe_serialize(self, value: Any) -> Any:
        try:
            json.dumps(value)
            return value
        except (TypeError, ValueError):
            return json.loads(json.dumps(value, default=str))

    def write_summary(self) -> None:
        with open(self._summary_path, 'w', encoding='utf-8') as f:
            json.dump(self.summary.to_dict(), f, indent=2)

    def close(self) -> None:
        """Close the journal file and write the summary."""
        self.write_summary()
        if self._file:
            self._file.close()
            self._file = None


def create_journal(
    store_id: str,
    base_dir: str = ".tinyflux",
    stream: Optional[TextIO] = None,
) -> ActionJournal:
    """Create a journal for a store."""
    return ActionJournal(store_id, base_dir, stream=stream)
