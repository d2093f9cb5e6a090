"""
Operations Dashboard — Interactive Dashboard

Run with:  streamlit run app.py
"""

import io
import json
import sys
import time
from datetime import date
from pathlib import Path

import streamlit as st
import plotly.graph_objects as go

sys.path.insert(0, str(Path(__file__).resolve().parent))

from ops_dashboard.config import (
    AMBER_THRESHOLD,
    AUTOSAVE_INTERVAL_SECONDS,
    GREEN_THRESHOLD,
    NO_DATA,
    RAG_COLORS,
    STORE_FILE,
)
from ops_dashboard.dashboard import (
    get_daily_matrix,
    get_history,
    get_history_report,
    get_kpi_overview,
    get_monthly_matrix,
    get_monthly_report,
)
from ops_dashboard.errors import DataImportError, DuplicateNameError, InvalidNameError
from ops_dashboard.export import write_history_report, write_monthly_report
from ops_dashboard.scoring import score, status_from_percentage
from ops_dashboard.state import AppState
from ops_dashboard.storage import JsonFileStore
from ops_dashboard.transforms import build_history_frame, build_monthly_status_frame

# ---------------------------------------------------------------------------
# Page config
# ---------------------------------------------------------------------------
st.set_page_config(
    page_title="Operations Dashboard",
    page_icon="📊",
    layout="wide",
    initial_sidebar_state="expanded",
)

TREND_ICONS = {"up": "📈", "down": "📉", "flat": "📊"}


# ---------------------------------------------------------------------------
# State (one instance per server process)
# ---------------------------------------------------------------------------
@st.cache_resource
def load_state() -> AppState:
    return AppState(JsonFileStore(STORE_FILE))


state = load_state()

last_flush = st.session_state.setdefault("last_flush", time.monotonic())
if time.monotonic() - last_flush >= AUTOSAVE_INTERVAL_SECONDS:
    state.flush()
    st.session_state["last_flush"] = time.monotonic()

# ---------------------------------------------------------------------------
# Sidebar
# ---------------------------------------------------------------------------
st.sidebar.title("Operations Dashboard")
st.sidebar.markdown("Downtime-based KPI tracking")
st.sidebar.divider()

landscapes = list(state.landscapes)
if not landscapes:
    st.warning("No landscapes configured. Add one under Settings.")
landscape = st.sidebar.selectbox("Landscape", landscapes) if landscapes else ""

selected_month = st.sidebar.date_input("Month", value=date.today().replace(day=1))
year_month = f"{selected_month.year:04d}-{selected_month.month:02d}"
selected_day = st.sidebar.date_input("Day", value=date.today())

page = st.sidebar.radio("Navigate", ["Monthly View", "Daily View", "History", "Settings"])


# ---------------------------------------------------------------------------
# Helper: KPI card
# ---------------------------------------------------------------------------
def kpi_card(label: str, kpi: dict):
    status_color = RAG_COLORS[status_from_percentage(kpi["overall_avg"])]
    st.markdown(
        f"""
        <div style="background: linear-gradient(135deg, {status_color}22, {status_color}11);
                    border-left: 4px solid {status_color};
                    border-radius: 8px; padding: 16px; margin-bottom: 8px;">
            <div style="font-size: 13px; color: #888; font-weight: 600; text-transform: uppercase;">{label}</div>
            <div style="font-size: 28px; font-weight: 700; color: #222; margin: 4px 0;">{kpi['overall_avg']}%
                <span style="font-size: 20px;">{TREND_ICONS[kpi['trend']]}</span></div>
            <div style="font-size: 13px; color: #666;">
                Green {kpi['green_pct']}% &nbsp;|&nbsp; Amber {kpi['amber_pct']}% &nbsp;|&nbsp;
                Red {kpi['red_pct']}% &nbsp;|&nbsp; {kpi['total_entries']} entries
                (prev {kpi['previous_period_avg']}%)
            </div>
        </div>
        """,
        unsafe_allow_html=True,
    )


def color_status(val):
    color = RAG_COLORS.get(val, "#ffffff")
    return f"background-color: {color}33; color: {color}"


# ===========================================================================
# PAGE: Monthly View
# ===========================================================================
if page == "Monthly View" and landscape:
    st.title(f"Monthly View — {landscape}")

    overview = get_kpi_overview(state, landscape, year_month)
    col1, col2 = st.columns(2)
    with col1:
        kpi_card(f"Month {year_month}", overview["monthly"])
    with col2:
        kpi_card(f"Year {selected_month.year}", overview["yearly"])

    counts = overview["counts"]
    cols = st.columns(4)
    for col, (label, key) in zip(cols, [("Total", "total"), ("Green", "green"), ("Amber", "amber"), ("Red", "red")]):
        col.metric(label, counts[key])

    # Weekly availability chart
    weekly = overview["weekly"]
    fig = go.Figure(go.Bar(
        x=[w["label"] for w in weekly],
        y=[w["avg_percentage"] for w in weekly],
        marker_color=[RAG_COLORS[w["status"]] if w["count"] else RAG_COLORS[NO_DATA] for w in weekly],
        text=[f"{w['avg_percentage']}%" for w in weekly],
        textposition="outside",
    ))
    fig.update_layout(
        title="Weekly Availability",
        yaxis_title="%",
        yaxis_range=[0, 105],
        height=320,
        plot_bgcolor="rgba(0,0,0,0)",
    )
    fig.add_hline(y=GREEN_THRESHOLD, line_dash="dash", line_color=RAG_COLORS["green"])
    fig.add_hline(y=AMBER_THRESHOLD, line_dash="dash", line_color=RAG_COLORS["red"])
    st.plotly_chart(fig, use_container_width=True)

    # Skill x week matrix
    st.subheader("Skills / Operational Areas")
    matrix = get_monthly_matrix(state.store, landscape, list(state.skills), year_month)
    status_df = build_monthly_status_frame(matrix)
    display_df = status_df.copy()
    for row_idx, row in enumerate(matrix["rows"]):
        for col_idx, cell in enumerate(row["cells"], start=1):
            if cell["status"] != NO_DATA:
                display_df.iat[row_idx, col_idx] = f"{cell['percentage']}%"
            else:
                display_df.iat[row_idx, col_idx] = ""

    def _style_from_status(_df):
        styles = status_df.map(color_status)
        styles["skill"] = ""
        return styles

    st.dataframe(display_df.style.apply(_style_from_status, axis=None), use_container_width=True, hide_index=True)

    report = get_monthly_report(state, landscape, year_month)
    buffer = io.BytesIO()
    write_monthly_report(report, buffer)
    st.download_button("Export to Excel", buffer.getvalue(), file_name=report["filename"])

    if st.button(f"Clear all data for {year_month} in {landscape}"):
        removed = state.clear_month(landscape, year_month)
        st.success(f"Cleared {removed} entries.")
        st.rerun()


# ===========================================================================
# PAGE: Daily View
# ===========================================================================
elif page == "Daily View" and landscape:
    st.title(f"Daily View — {landscape}")

    stats = state.daily_stats(landscape, selected_day)
    col1, col2, col3 = st.columns(3)
    col1.metric("Daily Completion", f"{stats['day_avg']}%")
    col2.metric("Weekly Average", f"{stats['week_avg']}%")
    col3.metric("Trend", TREND_ICONS[stats["trend"]])

    matrix = get_daily_matrix(state.store, landscape, list(state.skills), selected_day)
    header = st.columns(len(matrix["columns"]) + 1)
    header[0].markdown("**Skills**")
    for col, column in zip(header[1:], matrix["columns"]):
        col.markdown(f"**{column['weekday']}**<br><small>{column['label']}</small>", unsafe_allow_html=True)
    for row in matrix["rows"]:
        cols = st.columns(len(row["cells"]) + 1)
        cols[0].write(row["skill"])
        for col, cell in zip(cols[1:], row["cells"]):
            color = RAG_COLORS[cell["status"]]
            col.markdown(
                f"<div style='text-align:center; border-top:3px solid {color};'>"
                f"{cell['percentage']}%<br><small>{cell['downtime_hours']:g}h down</small></div>",
                unsafe_allow_html=True,
            )

    st.divider()
    st.subheader("Edit Entry")
    # Pickers sit outside the form so the defaults below follow the selection
    skill = st.selectbox("Skill", list(state.skills), key="entry_skill")
    entry_day = st.date_input("Date", value=selected_day)
    existing = state.get_entry(landscape, skill, entry_day) if skill else None
    form_key = f"entry_form-{skill}-{entry_day.isoformat()}"
    with st.form(form_key):
        downtime = st.number_input(
            "Downtime (hours)", min_value=0.0, max_value=24.0, step=0.1,
            value=min(float(existing.downtime_hours), 24.0) if existing else 0.0,
        )
        percentage, status = score(downtime)
        st.caption(f"Calculated: {percentage}% ({status.upper()})")
        notes = st.text_area("Notes", value=existing.notes if existing else "")
        incident = st.text_input("Incident reference", value=existing.incident_ref if existing else "")
        save_col, delete_col = st.columns(2)
        saved = save_col.form_submit_button("Save")
        deleted = delete_col.form_submit_button("Delete")

    if saved and skill:
        entry = state.save_entry(landscape, skill, entry_day, downtime, notes, incident)
        st.success(f"Saved {entry.percentage}% ({entry.status})")
        st.rerun()
    if deleted and skill:
        state.delete_entry(landscape, skill, entry_day)
        st.success("Entry deleted")
        st.rerun()

    if st.button(f"Clear all data for {selected_day.isoformat()} in {landscape}"):
        removed = state.clear_day(landscape, selected_day)
        st.success(f"Cleared {removed} entries.")
        st.rerun()


# ===========================================================================
# PAGE: History
# ===========================================================================
elif page == "History":
    st.title("Entry History")

    history_filter = st.selectbox("Filter", ["All Landscapes", *state.landscapes])
    selected = None if history_filter == "All Landscapes" else history_filter
    rows = get_history(state.store, selected)

    history_df = build_history_frame(rows)
    styled = history_df.style.map(color_status, subset=["Status"])
    st.dataframe(styled, use_container_width=True, hide_index=True)

    if rows:
        key = st.selectbox("Delete entry", [r["key"] for r in rows])
        if st.button("Delete selected entry"):
            entry = state.get_entry_by_key(key)
            if entry is not None:
                state.delete_entry(entry.landscape, entry.skill, entry.date)
            st.rerun()

    if landscape:
        report = get_history_report(state, landscape, year_month, history_landscape=selected)
        buffer = io.BytesIO()
        write_history_report(report, buffer)
        st.download_button("Export history to Excel", buffer.getvalue(), file_name=report["filename"])


# ===========================================================================
# PAGE: Settings
# ===========================================================================
elif page == "Settings":
    st.title("Settings")

    tab1, tab2, tab3 = st.tabs(["Skills", "Landscapes", "Import"])

    with tab1:
        new_skill = st.text_input("New skill name")
        if st.button("Add skill"):
            try:
                state.add_skill(new_skill)
                st.rerun()
            except (DuplicateNameError, InvalidNameError) as exc:
                st.error(str(exc))
        for name in state.skills:
            col1, col2 = st.columns([4, 1])
            col1.write(name)
            if col2.button("Remove", key=f"remove-skill-{name}"):
                removed = state.remove_skill(name)
                st.success(f"Removed '{name}' and {removed} entries")
                st.rerun()

    with tab2:
        new_landscape = st.text_input("New landscape name")
        if st.button("Add landscape"):
            try:
                state.add_landscape(new_landscape)
                st.rerun()
            except (DuplicateNameError, InvalidNameError) as exc:
                st.error(str(exc))
        for name in state.landscapes:
            col1, col2 = st.columns([4, 1])
            col1.write(name)
            if col2.button("Remove", key=f"remove-landscape-{name}"):
                removed = state.remove_landscape(name)
                st.success(f"Removed '{name}' and {removed} entries")
                st.rerun()

    with tab3:
        uploaded = st.file_uploader("Import JSON", type=["json"])
        if uploaded is not None and st.button("Merge import"):
            try:
                summary = state.import_payload(uploaded.getvalue())
                st.success(
                    f"Imported {summary['entries']} entries, "
                    f"{len(summary['skills_added'])} new skills, "
                    f"{len(summary['landscapes_added'])} new landscapes"
                )
            except DataImportError as exc:
                st.error(f"Invalid file format: {exc}")

        st.download_button(
            "Export all data (JSON)",
            json.dumps(state.export_payload(), indent=2),
            file_name=f"operations_data_{date.today().isoformat()}.json",
            mime="application/json",
        )
