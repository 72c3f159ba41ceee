import html
import streamlit as st
from typing import Dict, Any, Optional

#-----------------------------------------------------------------------------
# UI HELPER FUNCTIONS
#-----------------------------------------------------------------------------
def render_metrics_row(metrics: Dict[str, Any]):
    """Renders a consistent row of metrics using st.columns and st.metric."""
    cols = st.columns(len(metrics))
    for col, (label, value) in zip(cols, metrics.items()):
        with col:
            st.metric(label=label, value="—" if value is None else str(value))

def render_section_header(title: str, level: int = 4, css_class: Optional[str] = None):
    """Renders a standardized section header with an optional CSS class."""
    class_attr = f" class='{css_class}'" if css_class else ""
    st.markdown(f"<h{level}{class_attr}>{title}</h{level}>", unsafe_allow_html=True)

def render_grade_chip(label: Optional[str], color: Optional[str] = None) -> str:
    """HTML snippet for a grade label with an optional color dot."""
    if not label:
        return "—"
    dot = (f"<span class='grade-dot' style='background-color:{html.escape(color)}'></span>" if color else "")
    return f"<span class='grade-chip'>{dot}{html.escape(label)}</span>"

def render_pill(text: str, color: Optional[str] = None):
    style = f" style='background-color:{html.escape(color)};color:white'" if color else ""
    st.markdown(f"<span class='pill'{style}>{html.escape(text)}</span>", unsafe_allow_html=True)
