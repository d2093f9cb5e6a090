"""
Application state: the Entry Store, the skill and landscape lists, their
persistence, and the KPI cache, owned by one explicit object.

Every mutation runs inside a single lock-guarded boundary that ends with
one full snapshot write of all three persisted values and a KPI cache
invalidation.
"""

import logging
import threading
from collections.abc import Iterable, Iterator
from contextlib import contextmanager
from datetime import datetime
from typing import Any, Callable

from . import kpis
from .config import (
    DEFAULT_LANDSCAPES,
    DEFAULT_SKILLS,
    ENTRIES_KEY,
    LANDSCAPES_KEY,
    SKILLS_KEY,
)
from .errors import DuplicateNameError, InvalidNameError
from .loaders import parse_import_payload
from .periods import parse_year_month, weeks_of_month
from .storage import KeyValueStore, MemoryStore
from .store import Entry, EntryStore
from .utils import clean_name, normalise_date

logger = logging.getLogger(__name__)


class NameList:
    """Ordered set of skill or landscape names."""

    def __init__(self, names: Iterable[Any] = (), kind: str = "name") -> None:
        self.kind = kind
        self._names: list[str] = []
        for raw in names:
            name = clean_name(raw) if isinstance(raw, str) else ""
            if not name:
                logger.warning("Skipping invalid %s name: %r", kind, raw)
                continue
            if name not in self._names:
                self._names.append(name)

    def add(self, name: str) -> str:
        clean = clean_name(name)
        if not clean:
            raise InvalidNameError(f"Please enter a {self.kind} name")
        if clean in self._names:
            raise DuplicateNameError(f"{self.kind.capitalize()} '{clean}' already exists")
        self._names.append(clean)
        return clean

    def remove(self, name: str) -> bool:
        clean = clean_name(name)
        if clean not in self._names:
            return False
        self._names.remove(clean)
        return True

    def union(self, names: Iterable[str]) -> list[str]:
        """Append names not yet present; return the ones added."""
        added = []
        for name in names:
            clean = clean_name(name)
            if clean and clean not in self._names:
                self._names.append(clean)
                added.append(clean)
        return added

    def to_list(self) -> list[str]:
        return list(self._names)

    def __iter__(self) -> Iterator[str]:
        return iter(list(self._names))

    def __len__(self) -> int:
        return len(self._names)

    def __contains__(self, name: object) -> bool:
        return name in self._names

    def __repr__(self) -> str:
        return f"NameList({self._names!r}, kind={self.kind!r})"


class AppState:
    """Single owner of all mutable dashboard state.

    Parameters
    ----------
    kv : Key-value store holding the persisted snapshot. Defaults to an
        in-memory store.
    clock : Optional callable returning an aware datetime, used to stamp
        ``recorded_at`` on saved entries.
    """

    def __init__(
        self,
        kv: KeyValueStore | None = None,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self.kv = kv if kv is not None else MemoryStore()
        self.store = EntryStore.from_payload(self.kv.get(ENTRIES_KEY), clock=clock)

        skills = self.kv.get(SKILLS_KEY)
        landscapes = self.kv.get(LANDSCAPES_KEY)
        self.skills = NameList(DEFAULT_SKILLS if skills is None else skills, kind="skill")
        self.landscapes = NameList(
            DEFAULT_LANDSCAPES if landscapes is None else landscapes, kind="landscape"
        )

        self.cache = kpis.KPICache()
        self._lock = threading.RLock()
        self._depth = 0
        self.store.subscribe(self._on_entries_changed)

        logger.info(
            "Loaded state: %d entries, %d skills, %d landscapes",
            len(self.store), len(self.skills), len(self.landscapes),
        )

    # -- Mutation boundary --------------------------------------------------

    @contextmanager
    def _mutation(self):
        with self._lock:
            self._depth += 1
            try:
                yield
            finally:
                self._depth -= 1
            if self._depth == 0:
                self.cache.invalidate()
                self.persist()

    def _on_entries_changed(self) -> None:
        self.cache.invalidate()
        if self._depth == 0:
            # Store mutated directly, outside a state method
            self.persist()

    def persist(self) -> None:
        """Write the full snapshot of entries, skills and landscapes."""
        self.kv.set(ENTRIES_KEY, self.store.to_payload())
        self.kv.set(SKILLS_KEY, self.skills.to_list())
        self.kv.set(LANDSCAPES_KEY, self.landscapes.to_list())

    def flush(self) -> bool:
        """Best-effort periodic save; returns True if a snapshot was written.

        Skipped while no entries exist. Write failures are logged, not
        raised; data since the last successful write may be lost.
        """
        if not len(self.store):
            return False
        with self._lock:
            try:
                self.persist()
            except OSError:
                logger.exception("Auto-save failed")
                return False
        logger.info("Auto-save completed (%d entries)", len(self.store))
        return True

    # -- Entries ------------------------------------------------------------

    def save_entry(
        self,
        landscape: str,
        skill: str,
        date: Any,
        downtime_hours: Any = 0.0,
        notes: str = "",
        incident_ref: str = "",
        period: str | None = None,
    ) -> Entry:
        with self._mutation():
            return self.store.put(landscape, skill, date, downtime_hours, notes, incident_ref, period)

    def get_entry(self, landscape: str, skill: str, date: Any) -> Entry | None:
        return self.store.get(landscape, skill, date)

    def get_entry_by_key(self, encoded_key: str) -> Entry | None:
        return self.store.get_by_key(encoded_key)

    def delete_entry(self, landscape: str, skill: str, date: Any) -> None:
        with self._mutation():
            self.store.delete(landscape, skill, date)

    def clear_month(self, landscape: str, year_month: str) -> int:
        """Delete every entry of a landscape dated in ``"YYYY-MM"``."""
        year, month = parse_year_month(year_month)
        prefix = f"{year:04d}-{month:02d}-"
        with self._mutation():
            removed = self.store.delete_where(
                lambda e: e.landscape == landscape and e.date.startswith(prefix)
            )
        logger.info("Cleared %d entries for %s in %s", removed, landscape, year_month)
        return removed

    def clear_day(self, landscape: str, day: Any) -> int:
        """Delete every entry of a landscape on one date."""
        iso = normalise_date(day)
        if iso is None:
            raise ValueError(f"Invalid date: {day!r}")
        with self._mutation():
            removed = self.store.delete_where(
                lambda e: e.landscape == landscape and e.date == iso
            )
        logger.info("Cleared %d entries for %s on %s", removed, landscape, iso)
        return removed

    # -- Skills & landscapes ------------------------------------------------

    def add_skill(self, name: str) -> str:
        with self._mutation():
            added = self.skills.add(name)
        logger.info("Added skill '%s'", added)
        return added

    def remove_skill(self, name: str) -> int:
        """Remove a skill and every entry recorded under it.

        Returns the number of entries deleted; unknown names are a no-op.
        """
        clean = clean_name(name)
        if clean not in self.skills:
            return 0
        with self._mutation():
            self.skills.remove(clean)
            removed = self.store.delete_where(lambda e: e.skill == clean)
        logger.info("Removed skill '%s' and %d entries", clean, removed)
        return removed

    def add_landscape(self, name: str) -> str:
        with self._mutation():
            added = self.landscapes.add(name)
        logger.info("Added landscape '%s'", added)
        return added

    def remove_landscape(self, name: str) -> int:
        """Remove a landscape and every entry recorded under it."""
        clean = clean_name(name)
        if clean not in self.landscapes:
            return 0
        with self._mutation():
            self.landscapes.remove(clean)
            removed = self.store.delete_where(lambda e: e.landscape == clean)
        logger.info("Removed landscape '%s' and %d entries", clean, removed)
        return removed

    # -- Import -------------------------------------------------------------

    def import_payload(self, raw: str | bytes | dict) -> dict:
        """Merge an import payload: entries overwrite by key, names union.

        Raises DataImportError before touching state if the payload is
        malformed.
        """
        payload = parse_import_payload(raw)
        with self._mutation():
            merged = self.store.merge(payload.entries)
            skills_added = self.skills.union(payload.skills)
            landscapes_added = self.landscapes.union(payload.landscapes)
        logger.info(
            "Imported %d entries, %d new skills, %d new landscapes",
            merged, len(skills_added), len(landscapes_added),
        )
        return {
            "entries": merged,
            "skills_added": skills_added,
            "landscapes_added": landscapes_added,
        }

    def export_payload(self) -> dict:
        """Snapshot in the wrapped import shape."""
        return {
            "data": self.store.to_payload(),
            "skills": self.skills.to_list(),
            "landscapes": self.landscapes.to_list(),
        }

    # -- KPIs (cached) ------------------------------------------------------

    def _skills_key(self) -> tuple[str, ...]:
        return tuple(self.skills)

    def monthly_kpi(self, landscape: str, year_month: str) -> dict:
        skills = self._skills_key()
        return self.cache.get_or_compute(
            ("monthly", landscape, year_month, skills),
            lambda: kpis.monthly_kpi(self.store, landscape, skills, year_month),
        )

    def yearly_kpi(self, landscape: str, year: int) -> dict:
        skills = self._skills_key()
        return self.cache.get_or_compute(
            ("yearly", landscape, int(year), skills),
            lambda: kpis.yearly_kpi(self.store, landscape, skills, year),
        )

    def weekly_kpi(self, landscape: str, year_month: str) -> list[dict]:
        skills = self._skills_key()
        year, month = parse_year_month(year_month)
        return self.cache.get_or_compute(
            ("weekly", landscape, year_month, skills),
            lambda: kpis.weekly_kpi(self.store, landscape, skills, weeks_of_month(year, month)),
        )

    def daily_stats(self, landscape: str, day: Any) -> dict:
        skills = self._skills_key()
        return self.cache.get_or_compute(
            ("daily", landscape, normalise_date(day), skills),
            lambda: kpis.daily_stats(self.store, landscape, skills, day),
        )

    def summary_counts(self, landscape: str) -> dict:
        return self.cache.get_or_compute(
            ("summary", landscape),
            lambda: kpis.summary_counts(self.store, landscape),
        )
