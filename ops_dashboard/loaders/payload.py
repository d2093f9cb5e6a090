"""
Loader for import payloads (JSON exports of the dashboard).

Accepted shapes
---------------
- Wrapped: ``{"data": {key: entry, ...}, "skills": [...], "landscapes": [...]}``
  where every member is optional.
- Bare entry map: ``{key: entry, ...}``.

Keys use the ``<landscape>_<skill>_<date>`` form; rows carrying their own
``landscape``/``skill``/``date`` fields take precedence over the key.
Rows in the legacy browser export format (``downtime``,
``incident``, ``timestamp``) are accepted as-is.
"""

import dataclasses
import json
import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, NamedTuple

from ..errors import DataImportError
from ..store import Entry, EntryKey
from ..utils import clean_name

logger = logging.getLogger(__name__)

_WRAPPER_KEYS = {"data", "skills", "landscapes"}


class ImportPayload(NamedTuple):
    entries: list[Entry]
    skills: list[str]
    landscapes: list[str]


def _decode(raw: str | bytes) -> Any:
    try:
        if isinstance(raw, bytes):
            raw = raw.decode("utf-8-sig")
        return json.loads(raw)
    except (UnicodeDecodeError, json.JSONDecodeError) as exc:
        raise DataImportError(f"Import payload is not valid JSON: {exc}") from exc


def _parse_names(value: Any, label: str) -> list[str]:
    if value is None:
        return []
    if not isinstance(value, list):
        raise DataImportError(f"'{label}' must be a list of names")
    names = []
    for item in value:
        if not isinstance(item, str):
            raise DataImportError(f"'{label}' contains a non-string value: {item!r}")
        name = clean_name(item)
        if not name:
            logger.warning("Skipping empty name in '%s'", label)
            continue
        if name not in names:
            names.append(name)
    return names


def _parse_entries(value: Any, stamp: str) -> list[Entry]:
    if value is None:
        return []
    if not isinstance(value, dict):
        raise DataImportError("'data' must be an object mapping keys to entries")
    # Map keys that resolve to the same EntryKey collapse; the last row wins
    entries: dict[EntryKey, Entry] = {}
    for key, row in value.items():
        if not isinstance(row, dict):
            raise DataImportError(f"Entry {key!r} is not an object")
        try:
            entry = Entry.from_dict(row, key=key)
        except ValueError as exc:
            raise DataImportError(f"Entry {key!r} is invalid: {exc}") from exc
        if not entry.recorded_at:
            entry = dataclasses.replace(entry, recorded_at=stamp)
        if entry.key in entries:
            logger.warning("Import row %r duplicates an earlier entry; keeping the last", key)
            del entries[entry.key]
        entries[entry.key] = entry
    return list(entries.values())


def parse_import_payload(raw: str | bytes | dict) -> ImportPayload:
    """Validate an import payload completely and return its parts.

    Raises DataImportError on any malformed part; callers merge only after
    this returns, so a bad payload never causes a partial merge.
    """
    payload = _decode(raw) if isinstance(raw, (str, bytes)) else raw
    if not isinstance(payload, dict):
        raise DataImportError("Import payload must be a JSON object")

    stamp = datetime.now(timezone.utc).isoformat()
    if _WRAPPER_KEYS & set(payload):
        unknown = set(payload) - _WRAPPER_KEYS
        if unknown:
            logger.warning("Ignoring unknown import sections: %s", sorted(unknown))
        result = ImportPayload(
            entries=_parse_entries(payload.get("data"), stamp),
            skills=_parse_names(payload.get("skills"), "skills"),
            landscapes=_parse_names(payload.get("landscapes"), "landscapes"),
        )
    else:
        result = ImportPayload(entries=_parse_entries(payload, stamp), skills=[], landscapes=[])

    logger.info(
        "Parsed import payload: %d entries, %d skills, %d landscapes",
        len(result.entries), len(result.skills), len(result.landscapes),
    )
    return result


def load_import_file(path: str | Path) -> ImportPayload:
    """Read and parse a JSON import file."""
    try:
        raw = Path(path).read_bytes()
    except OSError:
        logger.exception("Failed to open import file: %s", path)
        raise
    return parse_import_payload(raw)
