"""
Shared utilities: value coercion, date normalisation,
name cleaning.
"""

import logging
import math
from datetime import date, datetime
from typing import Any

import pandas as pd

logger = logging.getLogger(__name__)


def normalise_date(val: Any) -> str | None:
    """Convert a date-like value to an ISO ``YYYY-MM-DD`` string.

    Accepts ``date``/``datetime`` objects, pandas Timestamps and strings
    pandas can parse. Returns None for missing or unparseable values.
    """
    if val is None:
        return None
    if isinstance(val, pd.Timestamp):
        return None if pd.isna(val) else val.date().isoformat()
    if isinstance(val, datetime):
        return val.date().isoformat()
    if isinstance(val, date):
        return val.isoformat()
    if isinstance(val, str):
        val = val.strip()
        if not val:
            return None
        # Fast path for the canonical form
        try:
            return date.fromisoformat(val[:10]).isoformat()
        except ValueError:
            pass
    try:
        parsed = pd.Timestamp(val)
    except (ValueError, TypeError):
        logger.warning("Could not parse date value: %s", val)
        return None
    if pd.isna(parsed):
        return None
    return parsed.date().isoformat()


def safe_float(val: Any) -> float | None:
    """Coerce a value to float, returning None for non-numeric values."""
    if val is None or isinstance(val, bool):
        return None
    if isinstance(val, str):
        val = val.strip()
        if not val:
            return None
        # Handle hour strings like "2h"
        if val.lower().endswith("h"):
            val = val[:-1].strip()
        try:
            number = float(val)
        except ValueError:
            return None
    else:
        try:
            number = float(val)
        except (ValueError, TypeError):
            return None
    if math.isnan(number):
        return None
    return number


def clean_name(val: Any) -> str:
    """Strip surrounding whitespace from a skill or landscape name."""
    if val is None:
        return ""
    return str(val).strip()


def clean_text(val: Any) -> str:
    """Free-text field (notes, incident reference); None becomes ''."""
    if val is None:
        return ""
    return str(val)


_EPOCH = pd.Timestamp(0, tz="UTC")


def parse_timestamp(val: Any) -> pd.Timestamp:
    """Parse a recorded-at value to a UTC Timestamp for ordering.

    Naive values are taken as UTC; missing or unparseable values sort as
    the Unix epoch.
    """
    if val in (None, ""):
        return _EPOCH
    try:
        parsed = pd.Timestamp(val)
    except (ValueError, TypeError):
        logger.warning("Could not parse timestamp value: %s", val)
        return _EPOCH
    if pd.isna(parsed):
        return _EPOCH
    if parsed.tzinfo is None:
        return parsed.tz_localize("UTC")
    return parsed.tz_convert("UTC")
