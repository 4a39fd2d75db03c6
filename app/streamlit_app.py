from __future__ import annotations

import sys
from pathlib import Path

_project_root = Path(__file__).resolve().parent.parent
if str(_project_root) not in sys.path:
    sys.path.insert(0, str(_project_root))

import streamlit as st

from app.components import (
    history_key,
    history_table,
    records_from_key,
    result_table,
    risk_chart,
    sector_chart,
    theme_css,
    verdict_badge_html,
)
from workforce.analytics import dashboard_stats, risk_distribution, sector_totals
from workforce.config import CONFIG
from workforce.evaluator import RuleBasedEvaluator, create_evaluator
from workforce.frames import frame_to_base64
from workforce.logging_setup import configure_logging
from workforce.payroll import parse_clock
from workforce.records import ActivityLevel, Observation, PayrollRequest, Sector
from workforce.report import generate_shift_report, report_to_pdf
from workforce.state import clear_history, load_state, save_state, toggle_theme, with_error
from workforce.storage import JsonStore
from workforce.verification import submit

st.set_page_config(page_title="Phoenix Workforce Verification", layout="wide")
configure_logging(CONFIG.log_level)


@st.cache_resource
def get_store() -> JsonStore:
    return JsonStore(CONFIG.store_path)


@st.cache_data(show_spinner="Preparing shift report...")
def shift_report(history_json: str, provider: str, model: str) -> str:
    # widget reruns with an unchanged history reuse the last report
    return generate_shift_report(records_from_key(history_json), provider, model)


store = get_store()
if "app_state" not in st.session_state:
    st.session_state["app_state"] = load_state(store)


def _commit(state, persist: bool = False) -> None:
    st.session_state["app_state"] = state
    if persist:
        save_state(store, state)


state = st.session_state["app_state"]
st.markdown(theme_css(state.dark_mode), unsafe_allow_html=True)

header = st.columns([4, 1])
header[0].title("Phoenix AI Workforce Verification")
header[0].caption(f"Session {state.session_id[:8]} · evaluator: {CONFIG.evaluator_provider}")
if header[1].button("☀️ Light mode" if state.dark_mode else "🌙 Dark mode"):
    _commit(toggle_theme(state), persist=True)
    st.rerun()

calculator_tab, admin_tab = st.tabs(["Calculator", "Admin"])

with calculator_tab:
    left, right = st.columns([1.2, 1.0])
    with left:
        st.subheader("Workforce Monitoring Terminal")
        camera = st.camera_input("Capture worker frame")

        observation = None
        if CONFIG.evaluator_provider.lower() == "offline":
            st.info("Offline mode: record your own inspection of the worker.")
            obs_cols = st.columns(4)
            present = obs_cols[0].checkbox("Worker present", value=True)
            activity = obs_cols[1].selectbox("Activity", [a.value for a in ActivityLevel if a is not ActivityLevel.NOT_PRESENT])
            helmet = obs_cols[2].checkbox("Helmet", value=True)
            vest = obs_cols[3].checkbox("Vest", value=True)
            unsafe = st.checkbox("Unsafe posture")
            observation = Observation(
                human_detected=present,
                activity_level=ActivityLevel(activity),
                helmet=helmet,
                vest=vest,
                unsafe_posture=unsafe,
            )

        with st.form("verification"):
            employee_id = st.text_input("Employee ID", value=CONFIG.default_employee_id)
            sector = st.selectbox("Sector", [s.value for s in Sector])
            times = st.columns(2)
            check_in = times[0].time_input("Check-in time", value=parse_clock(CONFIG.default_check_in).time())
            current = times[1].time_input("Current time", value=parse_clock(CONFIG.default_current_time).time())
            submitted = st.form_submit_button("Verify & calculate", disabled=state.busy, use_container_width=True)

        if submitted:
            try:
                frame = frame_to_base64(camera.getvalue()) if camera is not None else None
            except ValueError as exc:
                _commit(with_error(state, str(exc)))
            else:
                request = PayrollRequest(
                    employee_id=employee_id.strip().upper(),
                    sector=Sector(sector),
                    check_in_time=check_in.strftime("%H:%M"),
                    current_time=current.strftime("%H:%M"),
                    worker_image=frame,
                )
                if observation is not None:
                    evaluator = RuleBasedEvaluator(observation=observation)
                else:
                    evaluator = create_evaluator()
                with st.spinner("Phoenix AI is verifying..."):
                    result = submit(state, request, evaluator, store)
                _commit(result.state)
            st.rerun()

    with right:
        st.subheader("Verdict")
        if state.last_error:
            st.error(state.last_error)
        record = state.last_result
        if record is None:
            st.info("Submit a verification to see the verdict.")
        else:
            st.markdown(verdict_badge_html(record), unsafe_allow_html=True)
            st.table(result_table(record))
            st.caption(record.explanation)

with admin_tab:
    history = list(state.history)
    stats = dashboard_stats(history)
    if stats is None:
        st.info("No verifications recorded yet.")
    else:
        cards = st.columns(4)
        cards[0].metric("Total payroll", f"${stats['total_salary']:,.2f}")
        cards[1].metric("Avg efficiency", f"{stats['avg_efficiency']:.1f}%")
        cards[2].metric("High risk", stats["high_risk_count"])
        cards[3].metric("Unauthorized", stats["unauthorized_count"])

        charts = st.columns(2)
        charts[0].plotly_chart(sector_chart(sector_totals(history)), use_container_width=True)
        fig = risk_chart(risk_distribution(history))
        if fig:
            charts[1].plotly_chart(fig, use_container_width=True)

        st.subheader("Verification history")
        st.dataframe(history_table(history), height=320, use_container_width=True)

        report_md = shift_report(history_key(history), CONFIG.report_llm_provider, CONFIG.report_model)
        with st.expander("Shift report"):
            st.markdown(report_md)
        downloads = st.columns(2)
        downloads[0].download_button("Download report (PDF)", data=report_to_pdf(report_md), file_name="shift_payroll_report.pdf", mime="application/pdf")
        downloads[1].download_button("Download history (CSV)", data=history_table(history).to_csv(index=False), file_name="verification_history.csv", mime="text/csv")

        st.divider()
        confirm = st.checkbox("I understand purging deletes every stored verification.")
        if st.button("Purge history", disabled=not confirm, type="primary"):
            _commit(clear_history(state), persist=True)
            st.rerun()
