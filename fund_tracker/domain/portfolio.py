"""Caller-owned collection of snapshots and events for a single fund."""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import timedelta
from typing import Iterator

from fund_tracker.config import SETTINGS

from .models import Event, Snapshot


@dataclass
class Portfolio:
    fund_name: str = SETTINGS.default_fund_name
    snapshots: list[Snapshot] = field(default_factory=list)
    events: list[Event] = field(default_factory=list)

    def upsert_snapshot(self, snapshot: Snapshot) -> Snapshot | None:
        """Insert ``snapshot``, replacing any snapshot observed on the same date."""
        for idx, existing in enumerate(self.snapshots):
            if existing.observed_date == snapshot.observed_date:
                self.snapshots[idx] = snapshot
                return existing
        self.snapshots.append(snapshot)
        return None

    def add_event(self, event: Event) -> None:
        self.events.append(event)

    def remove_event(self, event_id: str) -> bool:
        remaining = [event for event in self.events if event.id != event_id]
        removed = len(remaining) != len(self.events)
        self.events = remaining
        return removed

    def delete_last_snapshot(self) -> Snapshot | None:
        last = self.latest()
        if last is None:
            return None
        self.snapshots = [s for s in self.snapshots if s.id != last.id]
        return last

    def clear(self) -> None:
        self.snapshots = []
        self.events = []

    def sorted_snapshots(self) -> list[Snapshot]:
        return sorted(self.snapshots, key=lambda s: s.observed_date)

    def sorted_events(self) -> list[Event]:
        return sorted(self.events, key=lambda e: e.date)

    def latest(self) -> Snapshot | None:
        ordered = self.sorted_snapshots()
        return ordered[-1] if ordered else None

    def previous_of(self, snapshot: Snapshot) -> Snapshot | None:
        earlier = [s for s in self.snapshots if s.observed_date < snapshot.observed_date]
        return max(earlier, key=lambda s: s.observed_date) if earlier else None

    def adjacent_pairs(self) -> Iterator[tuple[Snapshot, Snapshot]]:
        ordered = self.sorted_snapshots()
        yield from zip(ordered, ordered[1:])

    def snapshots_in_range(self, range_days: int | None = None) -> list[Snapshot]:
        """Snapshots no older than ``range_days`` before the latest one."""
        ordered = self.sorted_snapshots()
        if range_days is None or not ordered:
            return ordered
        cutoff = ordered[-1].observed_date - timedelta(days=range_days)
        return [s for s in ordered if s.observed_date >= cutoff]
