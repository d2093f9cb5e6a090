"""
Operations Dashboard — downtime-based KPI tracking backend

Records daily downtime per landscape/skill/date, scores each entry into a
green/amber/red availability band, and rolls entries up into weekly,
monthly and yearly KPI summaries.

To swap the JSON file for another store:
    Pass any object with get(key, default) and set(key, value) to
    state.AppState. The three persisted values (entry map, skill list,
    landscape list) are plain JSON-serialisable structures.

To connect to Streamlit/Dash:
    Call dashboard.get_monthly_matrix() / dashboard.get_daily_matrix() for
    tables and AppState.monthly_kpi() / yearly_kpi() for summary cards.
    transforms.py turns either into a DataFrame.

To change the scoring bands:
    Edit the band edges and thresholds in config.py; scoring.py and every
    status colour follow from them.
"""

__version__ = "0.1.0"
