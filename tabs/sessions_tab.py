import streamlit as st
import pandas as pd
from typing import List

from session_summary import SessionSummary
from ui_components import render_section_header


def display_sessions(sessions: List[SessionSummary]) -> None:
    """Displays the previous sessions, newest first."""
    render_section_header("Previous sessions", level=4)
    if not sessions:
        st.info("No sessions logged yet.")
        return

    df = pd.DataFrame([s.to_dict() for s in sessions])
    df = df[['date', 'label', 'energy', 'sends', 'attempts', 'conversion', 'projects', 'hardest_label']].copy()
    df['conversion'] = df['conversion'] * 100
    st.dataframe(
        df,
        hide_index=True,
        column_config={
            'date': st.column_config.TextColumn("Date"),
            'label': st.column_config.TextColumn("Session"),
            'energy': st.column_config.TextColumn("Energy"),
            'sends': st.column_config.NumberColumn("Sends", format="%d"),
            'attempts': st.column_config.NumberColumn("Attempts", format="%d"),
            'conversion': st.column_config.NumberColumn("Conversion", format="%.0f%%"),
            'projects': st.column_config.NumberColumn("Projects", format="%d"),
            'hardest_label': st.column_config.TextColumn("Hardest send"),
        },
    )

    latest = sessions[0]
    st.markdown(f"**{latest.date.isoformat()} · {latest.label}**")
    st.caption(latest.copy)
