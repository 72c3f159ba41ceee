import streamlit as st
import pandas as pd
import plotly.graph_objects as go

import config
from data_processing import ProgressPayload
from recommendations import ZONES, attempts_per_send_hint, zone_meta

from ui_components import render_grade_chip, render_metrics_row, render_pill, render_section_header


def _conversion_gauge(rate: float) -> go.Figure:
    """Gauge with the four coaching zones as colored bands."""
    # ZONES is ordered high to low; bands are drawn from the bottom up
    steps = []
    upper = 50.0
    for zone in ZONES:
        lower = zone.min_rate * 100
        steps.append({'range': [lower, upper], 'color': zone.color})
        upper = lower
    fig = go.Figure(go.Indicator(
        mode="gauge+number",
        value=min(rate * 100, 50.0),
        number={'suffix': '%', 'valueformat': '.0f'},
        gauge={
            'axis': {'range': [0, 50]},
            'bar': {'color': '#111827', 'thickness': 0.25},
            'steps': list(reversed(steps)),
        },
    ))
    fig.update_layout(height=220, margin=dict(l=20, r=20, t=20, b=10))
    return fig


def display_conversion(payload: ProgressPayload) -> None:
    conversion = payload.conversion
    meta = zone_meta(payload.zone)

    render_section_header(f"Conversion (last {config.ROLLING_WINDOW_DAYS} days)", level=4)
    col1, col2 = st.columns([2, 3])
    with col1:
        st.plotly_chart(_conversion_gauge(conversion.rate), use_container_width=True)
    with col2:
        render_pill(f"{meta.label} · {meta.hint}", color=meta.color)
        st.markdown(f"**{meta.coach_title}**")
        st.caption(meta.coach_body)
        st.caption(
            f"{conversion.sends} sends / {conversion.attempts} attempts · "
            f"about 1 send every {attempts_per_send_hint(conversion.rate)} attempts"
        )

    for reco in payload.recommendations:
        st.info(f"**{reco.title}**\n\n{reco.body}")


def display_weekly(payload: ProgressPayload) -> None:
    render_section_header(f"Weekly conversion (last {config.WEEKLY_WINDOW_WEEKS} weeks)", level=5)
    if not payload.weekly:
        st.info("No attempts in the last weeks yet.")
        return
    df = pd.DataFrame([w.to_dict() for w in payload.weekly])
    df['rate_pct'] = df['rate'] * 100
    fig = go.Figure(go.Scatter(
        x=df['week'], y=df['rate_pct'], mode='lines+markers',
        customdata=df[['sends', 'attempts']],
        hovertemplate='Week of %{x}<br>%{y:.0f}%<br>%{customdata[0]} sends / %{customdata[1]} attempts<extra></extra>',
    ))
    fig.update_layout(height=260, yaxis_title='Conversion (%)', margin=dict(l=10, r=10, t=10, b=10))
    st.plotly_chart(fig, use_container_width=True)


def display_efficiency(payload: ProgressPayload) -> None:
    render_section_header("Attempts to send", level=5)
    histogram = payload.efficiency
    if sum(histogram.values()) == 0:
        st.info("Once you log your first send, you'll see how hard-won your sends are.")
        return
    labels = {
        'flash': f"Flash (≤{config.FLASH_MAX_ATTEMPTS})",
        'learn': f"Learn ({config.FLASH_MAX_ATTEMPTS + 1}–{config.LEARN_MAX_ATTEMPTS})",
        'project': f"Project (≥{config.LEARN_MAX_ATTEMPTS + 1})",
    }
    colors = {'flash': '#22C55E', 'learn': '#EAB308', 'project': '#8B5CF6'}
    fig = go.Figure()
    for key in ('flash', 'learn', 'project'):
        fig.add_trace(go.Bar(
            y=['Sends'], x=[histogram[key]], name=labels[key], orientation='h',
            marker_color=colors[key], text=[histogram[key]], textposition='inside',
        ))
    fig.update_layout(barmode='stack', height=140, margin=dict(l=10, r=10, t=10, b=10),
                      legend=dict(orientation='h'))
    st.plotly_chart(fig, use_container_width=True)


def display_grade_steps(payload: ProgressPayload) -> None:
    render_section_header("Hardest grade over time", level=5)
    if not payload.grade_steps:
        st.info("Once you log your first top, you'll see grade milestones here "
                "(using your home-gym grade order when available).")
        return
    df = pd.DataFrame([s.to_dict() for s in payload.grade_steps])
    labels = [entry.label for entry in payload.timeline]
    fig = go.Figure(go.Scatter(
        x=list(range(1, len(df) + 1)), y=df['max_rank_so_far'], mode='lines+markers',
        line_shape='hv', customdata=list(zip(df['day'], labels)),
        hovertemplate='%{customdata[0]}<br>%{customdata[1]}<extra></extra>',
    ))
    fig.update_layout(height=260, xaxis_title='Send #', yaxis_title='Max rank so far',
                      margin=dict(l=10, r=10, t=10, b=10))
    st.plotly_chart(fig, use_container_width=True)

    for entry in payload.recent_milestones:
        st.markdown(
            f"{render_grade_chip(entry.label, entry.color)} · {entry.day.isoformat()} · "
            f"first send after {entry.attempts_to_send} attempts",
            unsafe_allow_html=True,
        )


def display_heatmap(payload: ProgressPayload) -> None:
    render_section_header(f"Activity (last {len(payload.heatmap)} days)", level=5)
    df = pd.DataFrame([d.to_dict() for d in payload.heatmap])
    if df.empty:
        return
    fig = go.Figure()
    fig.add_trace(go.Bar(x=df['day'], y=df['attempts'], name='Attempts', marker_color='#93C5FD'))
    fig.add_trace(go.Bar(x=df['day'], y=df['sends'], name='Sends', marker_color='#22C55E'))
    fig.update_layout(barmode='overlay', height=220, margin=dict(l=10, r=10, t=10, b=10),
                      legend=dict(orientation='h'))
    st.plotly_chart(fig, use_container_width=True)


def display_progress(payload: ProgressPayload) -> None:
    """Displays the Progress tab content."""
    header = payload.header
    hardest = payload.hardest
    avg = payload.avg_attempts_per_send
    worked_pct = payload.worked.pct

    render_metrics_row({
        "Attempts": header['total_attempts'],
        "Projects": header['total_problems'],
        "Hardest grade": hardest['label'] if hardest else None,
        "Avg attempts / send": f"{avg:.1f}" if avg is not None else None,
        "Projects worked": f"{worked_pct:.0f}%" if worked_pct is not None else None,
    })
    if header.get('home_gym_name'):
        st.caption(f"Home: {header['home_gym_name']}")

    display_conversion(payload)
    col1, col2 = st.columns(2)
    with col1:
        display_weekly(payload)
    with col2:
        display_grade_steps(payload)
    display_efficiency(payload)
    display_heatmap(payload)

    render_section_header("Recent first sends", level=5)
    recent = payload.recent_sends
    if not recent:
        st.info("No sends yet.")
    for entry in recent:
        st.markdown(
            f"{render_grade_chip(entry.label, entry.color)} · {entry.day.isoformat()} · "
            f"{entry.attempts_to_send} tries",
            unsafe_allow_html=True,
        )
