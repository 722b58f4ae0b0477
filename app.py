#!/usr/bin/env python3
"""
TEAM EFFECTIVENESS ASSESSMENT - Web Application
===============================================

A Streamlit application for team effectiveness surveys.

Features:
- 27-question survey per participant code
- Personal reports compared against the team
- Admin dashboard for assessments, organizations and summaries
- Word reports, CSV/JSON exports and HubSpot email

Run with: streamlit run app.py
"""

import logging

import numpy as np
import streamlit as st

from database import Database, StorageError
from framework import QUESTION_IDS, REVERSED_QUESTIONS
from settings import load_settings, check_admin_password
from survey_form import render_survey_form, render_thank_you
from participant_report import render_participant_report
from admin_dashboard import render_admin_dashboard
from scoring import NoSubmissionsError
from summary_report import NothingToSummarizeError, generate_summary_report

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

# Page config
st.set_page_config(
    page_title="Team Effectiveness Assessment",
    page_icon="🤝",
    layout="wide",
    initial_sidebar_state="collapsed"
)

st.markdown("""
<style>
    :root {
        --brand-blue: #1F4E79;
        --brand-accent: #2F5496;
        --brand-charcoal: #2C2C2C;
    }

    .stApp {
        background: linear-gradient(180deg, #FAFAFA 0%, #F0F0F0 100%);
    }

    h1, h2, h3 {
        color: var(--brand-blue) !important;
    }

    .main-title {
        font-size: 2.6rem;
        font-weight: 600;
        color: #1F4E79;
        text-align: center;
        margin-bottom: 0.5rem;
        letter-spacing: 0.05em;
    }

    .subtitle {
        font-size: 1.1rem;
        color: #666;
        text-align: center;
        margin-bottom: 2rem;
        font-weight: 300;
    }

    /* Form styling */
    .feedback-header {
        background: linear-gradient(135deg, #1F4E79 0%, #2F5496 100%);
        color: white;
        padding: 2rem;
        border-radius: 12px;
        margin-bottom: 2rem;
        text-align: center;
    }

    .feedback-header h1 {
        color: white !important;
        margin-bottom: 0.5rem;
    }

    .dimension-header {
        background: #1F4E79;
        color: white;
        padding: 0.8rem 1.2rem;
        border-radius: 6px;
        margin: 1.5rem 0 1rem 0;
        font-size: 1.3rem;
    }

    .item-container {
        background: white;
        padding: 1rem 1.2rem;
        border-radius: 6px;
        margin-bottom: 0.4rem;
        border: 1px solid #E0E0E0;
    }

    .item-text {
        font-size: 1rem;
        color: #333;
        line-height: 1.5;
    }

    .stButton > button {
        background: linear-gradient(135deg, #1F4E79 0%, #2F5496 100%);
        color: white;
        border: none;
        padding: 0.6rem 2rem;
        font-weight: 600;
        letter-spacing: 0.05em;
    }

    #MainMenu {visibility: hidden;}
    footer {visibility: hidden;}
</style>
""", unsafe_allow_html=True)

settings = load_settings()
db = Database(settings['database_path'])


# Auto-load demo data on first run if database is empty
def load_demo_data_if_empty(db):
    """Seed one organization with three scored teams if there are no assessments."""
    if db.get_all_assessments():
        return

    np.random.seed(42)

    organization_id = db.create_organization(
        "Demo Company", "Alex Morgan", "alex.morgan@example.com",
        description="Sample organization",
    )

    # (team name, members, submissions, base rating)
    demo_teams = [
        ("Product Team", 6, 6, 4.3),
        ("Sales Team", 8, 7, 3.6),
        ("Support Team", 5, 3, 3.0),
    ]

    for team_name, members, submissions, base in demo_teams:
        assessment_id, codes = db.create_assessment(team_name, members, organization_id=organization_id)

        for i, code in enumerate(codes[:submissions]):
            responses = {}
            for question_id in QUESTION_IDS:
                rating = base + np.random.uniform(-1.0, 1.0)
                if question_id in REVERSED_QUESTIONS:
                    rating = 6 - rating
                responses[question_id] = int(round(min(5.0, max(1.0, rating))))

            db.submit_assessment(
                code, f"{team_name.split()[0]} Member {i + 1}",
                f"member{i + 1}.{team_name.split()[0].lower()}@example.com", responses,
            )

        try:
            db.calculate_team_report(assessment_id)
        except NoSubmissionsError:
            logger.info("Demo team %s has no submissions", team_name)

    try:
        generate_summary_report(db, organization_id, generated_by='demo')
    except NothingToSummarizeError:
        logger.info("Demo organization has nothing to summarize")

    logger.info("Demo data loaded")


load_demo_data_if_empty(db)


def get_route():
    """Determine which page to show based on URL parameters."""
    params = st.query_params

    if 'submitted' in params:
        return 'submitted', params.get('code')

    # Check for survey code
    if 'code' in params:
        return 'survey', params['code']

    if 'report' in params:
        return 'report', params['report']

    # Check for admin access
    if 'admin' in params:
        return 'admin', None

    # Default to landing page
    return 'landing', None


def render_landing_page():
    """Render the main landing/info page."""
    st.markdown('<p class="main-title">TEAM EFFECTIVENESS ASSESSMENT</p>', unsafe_allow_html=True)
    st.markdown('<p class="subtitle">How well does your team work together?</p>', unsafe_allow_html=True)

    col1, col2, col3 = st.columns([1, 2, 1])

    with col2:
        st.markdown("""
        <div style="background: white; padding: 2rem; border-radius: 12px; box-shadow: 0 4px 20px rgba(0,0,0,0.08); text-align: center;">
            <h3 style="margin-bottom: 1rem;">Welcome</h3>
            <p style="color: #666; line-height: 1.8;">
                Enter the participant code you received to start the survey, or to view your
                results once your team report is ready.
            </p>
        </div>
        """, unsafe_allow_html=True)

        code = st.text_input("Participant code:", max_chars=8).strip().upper()
        col_survey, col_report = st.columns(2)
        with col_survey:
            if st.button("Start Survey", disabled=not code, use_container_width=True):
                st.query_params["code"] = code
                st.rerun()
        with col_report:
            if st.button("View My Report", disabled=not code, use_container_width=True):
                st.query_params["report"] = code
                st.rerun()

        with st.expander("🔐 Administrator Access"):
            render_admin_login()


def render_admin_login():
    password = st.text_input("Enter admin password:", type="password")
    if st.button("Access Dashboard"):
        if check_admin_password(settings, password):
            st.session_state['admin_authenticated'] = True
            st.query_params["admin"] = "true"
            st.rerun()
        else:
            logger.warning("Failed admin login attempt")
            st.error("Invalid password")


def render_survey_page(code):
    try:
        code_info = db.validate_code(code)
    except ValueError as e:
        st.error(f"{e}. Please check your code or contact your administrator.")
        return

    if code_info['already_used']:
        st.info("This code has already been used. Your answers were recorded.")
        st.markdown(f"[View your report](?report={code_info['code']})")
        return

    render_survey_form(db, code_info)


def main():
    """Main application entry point."""
    route, param = get_route()

    try:
        if route == 'submitted':
            render_thank_you(st.session_state.get('submitted_code'))

        elif route == 'survey':
            render_survey_page(param)

        elif route == 'report':
            render_participant_report(db, param)

        elif route == 'admin':
            if st.session_state.get('admin_authenticated'):
                render_admin_dashboard(db, settings)
            else:
                st.markdown('<p class="main-title">TEAM EFFECTIVENESS ASSESSMENT</p>', unsafe_allow_html=True)
                render_admin_login()

        else:
            render_landing_page()
    except StorageError:
        # already logged with its traceback in database.py
        st.error("Something went wrong while loading or saving data. Please try again, "
                 "or contact your administrator if the problem continues.")


if __name__ == "__main__":
    main()
