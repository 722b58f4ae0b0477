#!/usr/bin/env python3
"""
Survey form for participants in the Team Effectiveness Assessment.

One page with the 27 questions grouped by dimension. Answers are scored and
stored on submit; each participant code can be used once.
"""

import html

import streamlit as st

from framework import (
    ALL_DIMENSIONS, DIMENSION_QUESTIONS, DIMENSION_NAMES, DIMENSION_DESCRIPTIONS,
    QUESTIONS, QUESTION_IDS, QUESTION_SCALES, RATING_SCALES, get_dimension_for_question,
)
from scoring import IncompleteResponsesError


def _collect_current_answers():
    """Gather the answered questions from session state."""
    responses = {}
    for question_id in QUESTION_IDS:
        val = st.session_state.get(f"rating_{question_id}")
        if val is not None:
            responses[question_id] = int(val)
    return responses


def _answered_count():
    return sum(1 for q in QUESTION_IDS if st.session_state.get(f"rating_{q}") is not None)


def _question_list(question_ids, limit=5):
    """'Q4 (Appreciation), Q9 (Responsiveness)...' for the first few ids."""
    labels = [
        f"{qid} ({DIMENSION_NAMES[get_dimension_for_question(qid)]})"
        for qid in question_ids[:limit]
    ]
    return ', '.join(labels) + ('...' if len(question_ids) > limit else '')


def incomplete_answers_message(error):
    """Message for an IncompleteResponsesError, naming the section of each question."""
    parts = []
    if error.missing:
        parts.append(f"Missing: {_question_list(error.missing)}")
    if error.invalid:
        parts.append(f"Invalid rating: {_question_list(error.invalid)}")
    return "Please answer every question before submitting. " + "; ".join(parts)


def survey_header_html(team_name):
    return f"""
    <div class="feedback-header">
        <h1 style="font-size: 1.8rem; margin-bottom: 0.3rem;">TEAM EFFECTIVENESS ASSESSMENT</h1>
        <p style="font-size: 1.1rem; opacity: 0.9; margin: 0;">Team: <strong>{html.escape(team_name)}</strong></p>
    </div>
    """


def render_survey_form(db, code_info):
    """Render the survey for a validated participant code."""
    code = code_info['code']

    st.markdown(survey_header_html(code_info['team_name']), unsafe_allow_html=True)

    st.markdown("""
    <div style="background: #F8F9FA; padding: 1.2rem; border-radius: 8px; margin-bottom: 1.5rem; border-left: 4px solid #1F4E79;">
        <p style="margin: 0; color: #333; line-height: 1.6;">
            Please answer each statement based on your experience of working in this team over the
            last few months. There are no right or wrong answers. Your personal results are only
            shared with you; your team sees combined scores.
        </p>
    </div>
    """, unsafe_allow_html=True)

    with st.form("survey_form"):
        col1, col2 = st.columns(2)
        with col1:
            participant_name = st.text_input("Your name", key="participant_name")
        with col2:
            participant_email = st.text_input("Your email", key="participant_email")

        for dimension in ALL_DIMENSIONS:
            st.markdown(f'<div class="dimension-header">{DIMENSION_NAMES[dimension]}</div>',
                        unsafe_allow_html=True)
            st.markdown(f"""
            <p style="color: #666; font-size: 0.95rem; margin-bottom: 1rem; font-style: italic;">
                {DIMENSION_DESCRIPTIONS[dimension]}
            </p>
            """, unsafe_allow_html=True)

            for question_id in DIMENSION_QUESTIONS[dimension]:
                scale = RATING_SCALES[QUESTION_SCALES[question_id]]
                st.markdown(f"""
                <div class="item-container">
                    <span style="color: #999; font-size: 0.85rem;">{question_id}.</span>
                    <span class="item-text">{QUESTIONS[question_id]}</span>
                </div>
                """, unsafe_allow_html=True)
                st.selectbox(
                    f"Rating for {question_id}",
                    options=list(scale.keys()),
                    index=None,
                    placeholder="Select a rating",
                    format_func=lambda x, scale=scale: f"{x} - {scale[x]}",
                    key=f"rating_{question_id}",
                    label_visibility="collapsed",
                )

            st.markdown("<hr style='margin: 2rem 0; border: none; border-top: 1px solid #E0E0E0;'>",
                        unsafe_allow_html=True)

        submit_clicked = st.form_submit_button(
            "✅ Submit Assessment",
            use_container_width=True,
            type="primary",
        )

    if submit_clicked:
        responses = _collect_current_answers()
        try:
            db.submit_assessment(code, participant_name, participant_email, responses)
        except IncompleteResponsesError as e:
            st.error(incomplete_answers_message(e))
        except ValueError as e:
            st.error(str(e))
        else:
            st.session_state.submitted_code = code
            st.query_params["submitted"] = "true"
            st.rerun()

    with st.sidebar:
        st.markdown("### 📊 Your Progress")
        answered = _answered_count()
        progress = answered / len(QUESTION_IDS)
        st.progress(progress)
        st.markdown(f"**{answered}** of **{len(QUESTION_IDS)}** questions answered ({int(progress * 100)}%)")


def render_thank_you(code=None):
    """Render thank you page after submission."""
    report_line = ""
    if code:
        report_line = (
            f"<p style='color: #666;'>Once your team report is ready you can view your results "
            f"with code <strong>{html.escape(code)}</strong>.</p>"
        )
    st.markdown(f"""
    <div style="text-align: center; padding: 4rem 2rem; background: white; border-radius: 12px;
                box-shadow: 0 4px 20px rgba(0,0,0,0.1); max-width: 600px; margin: 2rem auto;">
        <div style="font-size: 4rem; margin-bottom: 1rem;">✓</div>
        <h2 style="color: #1F4E79; margin-bottom: 1rem;">Thank You</h2>
        <p style="color: #666; font-size: 1.1rem; line-height: 1.8;">
            Your answers have been submitted.
        </p>
        {report_line}
        <p style="color: #999; margin-top: 2rem;">You may now close this window.</p>
    </div>
    """, unsafe_allow_html=True)
