"""
Simulated entry generator for the operations dashboard.

Produces import-shaped payloads with realistic downtime so that demos and
smoke runs show all three status bands. All values are synthetic.
"""

import calendar
from collections.abc import Sequence

import numpy as np
import pandas as pd

from .config import AMBER_MAX_DOWNTIME, DEFAULT_SKILLS, GREEN_MAX_DOWNTIME, HOURS_PER_DAY
from .store import EntryKey, encode_key

# ---------------------------------------------------------------------------
# Band mix: most days are healthy, a few are bad
# ---------------------------------------------------------------------------
_BAND_WEIGHTS = {
    "green": 0.70,
    "amber": 0.22,
    "red": 0.08,
}
_BAND_RANGES = {
    "green": (0.0, GREEN_MAX_DOWNTIME),
    "amber": (GREEN_MAX_DOWNTIME + 0.1, AMBER_MAX_DOWNTIME),
    "red": (AMBER_MAX_DOWNTIME + 0.1, HOURS_PER_DAY),
}

_INCIDENT_PREFIX = "INC"


def generate_payload(
    landscape: str,
    year: int,
    month: int,
    skills: Sequence[str] | None = None,
    coverage: float = 0.85,
    seed: int = 42,
) -> dict:
    """Generate a month of simulated entries for one landscape.

    Parameters
    ----------
    landscape : Landscape the entries belong to.
    year, month : Calendar month to fill.
    skills : Skills to fill; defaults to config.DEFAULT_SKILLS.
    coverage : Probability that a given skill/day has an entry at all.
    seed : Seed for the numpy random generator (reproducible output).

    Returns
    -------
    ``{"data": {key: entry_row}, "skills": [...], "landscapes": [landscape]}``
    """
    rng = np.random.default_rng(seed)
    skills = list(skills or DEFAULT_SKILLS)
    bands = list(_BAND_WEIGHTS)
    weights = np.array([_BAND_WEIGHTS[b] for b in bands])

    last_day = calendar.monthrange(year, month)[1]
    dates = pd.date_range(f"{year:04d}-{month:02d}-01", periods=last_day, freq="D")

    data = {}
    for day in dates:
        iso = day.date().isoformat()
        for skill in skills:
            if rng.random() > coverage:
                continue
            band = bands[rng.choice(len(bands), p=weights)]
            low, high = _BAND_RANGES[band]
            downtime = round(float(rng.uniform(low, high)), 1)
            incident = f"{_INCIDENT_PREFIX}{rng.integers(10000, 99999)}" if band == "red" else ""

            data[encode_key(EntryKey(landscape, skill, iso))] = {
                "landscape": landscape,
                "skill": skill,
                "date": iso,
                "period": iso,
                "downtime_hours": downtime,
                "incident_ref": incident,
                "notes": "Simulated",
                "recorded_at": (day + pd.Timedelta(hours=18)).tz_localize("UTC").isoformat(),
            }

    return {"data": data, "skills": skills, "landscapes": [landscape]}
