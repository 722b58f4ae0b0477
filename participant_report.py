#!/usr/bin/env python3
"""
Personal report page for participants.

Shows a participant's scores next to the team's once the team report has
been calculated.
"""

import html
import logging
import os
import tempfile

import pandas as pd
import streamlit as st

from framework import ALL_DIMENSIONS, DIMENSION_NAMES
from report_generator import create_radar_chart

logger = logging.getLogger(__name__)


def welcome_card_html(report):
    return f"""
    <div style="background: white; padding: 1.5rem; border-radius: 12px; box-shadow: 0 2px 8px rgba(0,0,0,0.08); margin-bottom: 1.5rem;">
        <h3 style="margin: 0 0 0.5rem 0; color: #1F4E79;">Hello, {html.escape(report['participant_name'])}</h3>
        <p style="color: #666; margin: 0;">{html.escape(report['team_name'])} · {report['participation_count']} responses</p>
    </div>
    """


def render_participant_report(db, code):
    """Render the personal report page for a participant code."""
    st.markdown('<p class="main-title">TEAM EFFECTIVENESS ASSESSMENT</p>', unsafe_allow_html=True)
    st.markdown('<p class="subtitle">Your Personal Report</p>', unsafe_allow_html=True)

    try:
        report = db.get_personal_report(code)
    except ValueError as e:
        st.warning(str(e))
        return

    st.markdown(welcome_card_html(report), unsafe_allow_html=True)

    render_score_overview(report)

    st.markdown("---")

    tab1, tab2, tab3 = st.tabs(["📊 Dimensions", "💡 Strengths & Growth", "📈 Chart"])

    with tab1:
        render_dimension_comparison(report)

    with tab2:
        render_strengths_and_growth(report)

    with tab3:
        render_comparison_chart(report)


def render_score_overview(report):
    """Personal and team score cards."""
    col1, col2, col3 = st.columns(3)

    with col1:
        st.metric("Your Score", f"{report['personal_score']:.1f}")
        st.caption(report['personal_grade'])

    with col2:
        st.metric("Team Score", f"{report['team_score']:.1f}")
        st.caption(report['team_grade'])

    with col3:
        difference = report['comparison']['score_difference']
        st.metric("Difference", f"{difference:+.1f}")


def dimension_comparison_frame(report):
    rows = []
    for dimension in ALL_DIMENSIONS:
        entry = report['comparison']['dimensions'][dimension]
        rows.append({
            'Dimension': DIMENSION_NAMES[dimension],
            'You': entry['personal'],
            'Team': entry['team'],
            'Difference': entry['difference'],
        })
    return pd.DataFrame(rows)


def render_dimension_comparison(report):
    st.subheader("You vs. Your Team")
    st.dataframe(dimension_comparison_frame(report), hide_index=True, use_container_width=True)
    st.caption("Warning Signs is scored so that a higher number means fewer warning signs.")


def render_strengths_and_growth(report):
    col1, col2 = st.columns(2)

    with col1:
        st.subheader("✓ Strengths")
        for item in report['strengths']:
            st.markdown(f"- {item}")

    with col2:
        st.subheader("↗ Growth Areas")
        for item in report['growth_areas']:
            st.markdown(f"- {item}")

    st.subheader("Recommendations")
    for item in report['recommendations']:
        st.markdown(f"- {item}")


def render_comparison_chart(report):
    with tempfile.NamedTemporaryFile(suffix='.png', delete=False) as tmp:
        path = tmp.name
    try:
        create_radar_chart(
            report['team_dimensions'], path,
            comparison_scores=report['personal_dimensions'],
            label='Team', comparison_label='You',
        )
        st.image(path, use_container_width=True)
    finally:
        os.unlink(path)
