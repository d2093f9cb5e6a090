"""
Entry records and the in-memory Entry Store.

One Entry per (landscape, skill, date). ``percentage`` and ``status`` are
derived from ``downtime_hours`` inside the record itself, so no caller can
set them independently.
"""

import logging
from collections.abc import Callable, Iterable, Iterator
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, NamedTuple

from .config import KEY_ESCAPE, KEY_SEPARATOR
from .errors import InvalidNameError
from .scoring import clamp_downtime, score
from .utils import clean_name, clean_text, normalise_date

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Composite key
# ---------------------------------------------------------------------------
class EntryKey(NamedTuple):
    landscape: str
    skill: str
    date: str


def _escape(part: str) -> str:
    return part.replace(KEY_ESCAPE, KEY_ESCAPE * 2).replace(KEY_SEPARATOR, KEY_ESCAPE + KEY_SEPARATOR)


def encode_key(key: EntryKey) -> str:
    """Encode a key as a single string for JSON maps.

    ``("Europe", "Revenue", "2024-03-01")`` -> ``"Europe_Revenue_2024-03-01"``.
    Separators and escapes inside a field are backslash-escaped, so
    ``("A_B", "C", d)`` and ``("A", "B_C", d)`` never collide.
    """
    return KEY_SEPARATOR.join(_escape(part) for part in key)


def decode_key(text: str) -> EntryKey:
    """Inverse of encode_key. Raises ValueError for malformed keys."""
    parts: list[str] = []
    current: list[str] = []
    escaped = False
    for char in text:
        if escaped:
            current.append(char)
            escaped = False
        elif char == KEY_ESCAPE:
            escaped = True
        elif char == KEY_SEPARATOR:
            parts.append("".join(current))
            current = []
        else:
            current.append(char)
    if escaped:
        raise ValueError(f"Dangling escape in entry key: {text!r}")
    parts.append("".join(current))
    if len(parts) != 3:
        raise ValueError(f"Entry key must have 3 fields, got {len(parts)}: {text!r}")
    return EntryKey(*parts)


# ---------------------------------------------------------------------------
# Entry
# ---------------------------------------------------------------------------
@dataclass(frozen=True)
class Entry:
    landscape: str
    skill: str
    date: str
    downtime_hours: float = 0.0
    notes: str = ""
    incident_ref: str = ""
    period: str = ""
    recorded_at: str = ""
    percentage: int = field(init=False)
    status: str = field(init=False)

    def __post_init__(self) -> None:
        downtime = clamp_downtime(self.downtime_hours)
        percentage, status = score(downtime)
        object.__setattr__(self, "downtime_hours", downtime)
        object.__setattr__(self, "percentage", percentage)
        object.__setattr__(self, "status", status)
        if not self.period:
            object.__setattr__(self, "period", self.date)

    @property
    def key(self) -> EntryKey:
        return EntryKey(self.landscape, self.skill, self.date)

    def to_dict(self) -> dict[str, Any]:
        return {
            "landscape": self.landscape,
            "skill": self.skill,
            "period": self.period,
            "date": self.date,
            "downtime_hours": self.downtime_hours,
            "percentage": self.percentage,
            "status": self.status,
            "notes": self.notes,
            "incident_ref": self.incident_ref,
            "recorded_at": self.recorded_at,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any], key: str | None = None) -> "Entry":
        """Build an Entry from a persisted or imported row.

        Accepts the legacy field names ``downtime``, ``incident`` and
        ``timestamp``. Any stored ``percentage``/``status`` is ignored and
        recomputed. The key fields come from the row, falling back to the
        decoded map key. Raises ValueError if they cannot be resolved.
        """
        landscape = clean_name(data.get("landscape"))
        skill = clean_name(data.get("skill"))
        day = normalise_date(data.get("date"))
        if key is not None and not (landscape and skill and day):
            fallback = decode_key(key)
            landscape = landscape or fallback.landscape
            skill = skill or fallback.skill
            day = day or normalise_date(fallback.date)
        if not landscape or not skill or not day:
            raise ValueError(f"Entry row is missing landscape, skill or date (key={key!r})")

        downtime = data.get("downtime_hours", data.get("downtime"))
        return cls(
            landscape=landscape,
            skill=skill,
            date=day,
            downtime_hours=downtime,
            notes=clean_text(data.get("notes")),
            incident_ref=clean_text(data.get("incident_ref", data.get("incident"))),
            period=clean_text(data.get("period")),
            recorded_at=clean_text(data.get("recorded_at", data.get("timestamp"))),
        )


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def _require_name(value: Any, kind: str) -> str:
    name = clean_name(value) if isinstance(value, str) else ""
    if not name:
        raise InvalidNameError(f"Entry {kind} must be a non-empty name, got {value!r}")
    return name


# ---------------------------------------------------------------------------
# Entry Store
# ---------------------------------------------------------------------------
class EntryStore:
    """Mapping of EntryKey -> Entry with change notification.

    Listeners registered with ``subscribe`` run after every mutation that
    changed something; AppState uses this for persistence and KPI cache
    invalidation.
    """

    def __init__(
        self,
        entries: Iterable[Entry] = (),
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self._entries: dict[EntryKey, Entry] = {}
        self._clock = clock or _utc_now
        self._listeners: list[Callable[[], None]] = []
        for entry in entries:
            self._entries[entry.key] = entry

    def subscribe(self, callback: Callable[[], None]) -> None:
        self._listeners.append(callback)

    def _notify(self) -> None:
        for callback in self._listeners:
            callback()

    # -- CRUD ---------------------------------------------------------------

    def put(
        self,
        landscape: str,
        skill: str,
        date: Any,
        downtime_hours: Any = 0.0,
        notes: str = "",
        incident_ref: str = "",
        period: str | None = None,
    ) -> Entry:
        """Score and store an entry, overwriting any entry at the same key.

        Names are stripped the same way persisted rows are on reload; an
        empty or non-string name raises InvalidNameError.
        """
        landscape = _require_name(landscape, "landscape")
        skill = _require_name(skill, "skill")
        day = normalise_date(date)
        if day is None:
            raise ValueError(f"Invalid entry date: {date!r}")

        entry = Entry(
            landscape=landscape,
            skill=skill,
            date=day,
            downtime_hours=downtime_hours,
            notes=clean_text(notes),
            incident_ref=clean_text(incident_ref),
            period=period or day,
            recorded_at=self._clock().isoformat(),
        )
        # Re-insert so dict order follows write order
        self._entries.pop(entry.key, None)
        self._entries[entry.key] = entry
        logger.info(
            "Saved %s / %s / %s: %.2fh -> %d%% (%s)",
            landscape, skill, day, entry.downtime_hours, entry.percentage, entry.status,
        )
        self._notify()
        return entry

    def get(self, landscape: str, skill: str, date: Any) -> Entry | None:
        day = normalise_date(date)
        if day is None:
            return None
        return self._entries.get(EntryKey(clean_name(landscape), clean_name(skill), day))

    def get_by_key(self, encoded_key: str) -> Entry | None:
        try:
            key = decode_key(encoded_key)
        except ValueError:
            return None
        return self._entries.get(key)

    def delete(self, landscape: str, skill: str, date: Any) -> None:
        day = normalise_date(date)
        if day is None:
            return
        if self._entries.pop(EntryKey(clean_name(landscape), clean_name(skill), day), None) is not None:
            logger.info("Deleted %s / %s / %s", landscape, skill, day)
            self._notify()

    def delete_where(self, predicate: Callable[[Entry], bool]) -> int:
        """Delete every entry matching predicate; return how many went."""
        doomed = [key for key, entry in self._entries.items() if predicate(entry)]
        for key in doomed:
            del self._entries[key]
        if doomed:
            logger.info("Deleted %d entries", len(doomed))
            self._notify()
        return len(doomed)

    def merge(self, entries: Iterable[Entry]) -> int:
        """Insert entries key by key; incoming entries win on collision."""
        count = 0
        for entry in entries:
            self._entries.pop(entry.key, None)
            self._entries[entry.key] = entry
            count += 1
        if count:
            self._notify()
        return count

    def all(self) -> list[tuple[EntryKey, Entry]]:
        return list(self._entries.items())

    def entries(self) -> list[Entry]:
        return list(self._entries.values())

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[Entry]:
        return iter(list(self._entries.values()))

    def __contains__(self, key: object) -> bool:
        return key in self._entries

    # -- Serialisation ------------------------------------------------------

    def to_payload(self) -> dict[str, dict[str, Any]]:
        return {encode_key(key): entry.to_dict() for key, entry in self._entries.items()}

    @classmethod
    def from_payload(
        cls,
        payload: dict[str, Any] | None,
        clock: Callable[[], datetime] | None = None,
    ) -> "EntryStore":
        """Rebuild a store from a persisted entry map, skipping bad rows."""
        entries = []
        for key, row in (payload or {}).items():
            if not isinstance(row, dict):
                logger.warning("Skipping persisted entry %r: not an object", key)
                continue
            try:
                entries.append(Entry.from_dict(row, key=key))
            except ValueError as exc:
                logger.warning("Skipping persisted entry %r: %s", key, exc)
        return cls(entries, clock=clock)
