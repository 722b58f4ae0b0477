#!/usr/bin/env python3
"""
Admin dashboard for the Team Effectiveness Assessment.
Provides management of assessments, organizations, summaries, email and exports.
"""
import html
import logging
from datetime import datetime

import pandas as pd
import streamlit as st

from database import STATUS_ACTIVE, STATUS_CLOSED
from email_sender import (
    is_email_configured,
    send_batch_personal_reports,
    send_summary_email,
    send_test_email,
)
from framework import ALL_DIMENSIONS, ROLLUP_DIMENSIONS, DIMENSION_NAMES, MAX_TEAM_MEMBERS
from personalization import (
    generate_personalization_data, get_quadrant_display_name, get_quadrant_emoji,
)
from report_generator import (
    DOCX_MIME,
    export_participants_csv,
    export_summary_csv,
    export_summary_json,
    generate_summary_report_document,
    generate_team_report,
)
from scoring import NoSubmissionsError
from summary_report import NothingToSummarizeError, generate_summary_report, get_summary_status

logger = logging.getLogger(__name__)


def render_admin_dashboard(db, settings):
    """Render the admin dashboard."""

    st.markdown('<p class="main-title">TEAM EFFECTIVENESS ASSESSMENT</p>', unsafe_allow_html=True)
    st.markdown('<p class="subtitle">Administrator Dashboard</p>', unsafe_allow_html=True)

    tab1, tab2, tab3, tab4, tab5, tab6 = st.tabs([
        "📊 Assessments", "📄 Team Reports", "🏢 Organizations",
        "📋 Summaries", "📧 Email", "⚙️ Settings",
    ])

    with tab1:
        render_assessments_tab(db, settings)

    with tab2:
        render_team_reports_tab(db, settings)

    with tab3:
        render_organizations_tab(db)

    with tab4:
        render_summaries_tab(db, settings)

    with tab5:
        render_email_tab(db, settings)

    with tab6:
        render_app_info(db, settings)


def _organization_options(db):
    organizations = db.get_all_organizations()
    options = {None: "No organization"}
    for org in organizations:
        options[org['id']] = org['name']
    return options


# ============================================
# ASSESSMENTS
# ============================================

def render_assessments_tab(db, settings):
    """Create assessments and track their participant codes."""

    stats = db.get_dashboard_stats()
    col1, col2, col3, col4 = st.columns(4)
    with col1:
        st.metric("Assessments", stats['total_assessments'])
    with col2:
        st.metric("Active", stats['active_assessments'])
    with col3:
        st.metric("Responses", f"{stats['completed_responses']} of {stats['total_codes']}")
    with col4:
        st.metric("Team Reports", stats['team_reports'])

    st.markdown("---")

    with st.expander("➕ Create Assessment"):
        org_options = _organization_options(db)
        with st.form("create_assessment_form", clear_on_submit=True):
            team_name = st.text_input("Team Name *", placeholder="e.g., Product Team")
            member_count = st.number_input(
                "Team Members *", min_value=1, max_value=MAX_TEAM_MEMBERS, value=5, step=1
            )
            organization_id = st.selectbox(
                "Organization",
                options=list(org_options.keys()),
                format_func=lambda x: org_options[x],
            )
            submitted = st.form_submit_button("Create Assessment")

            if submitted:
                try:
                    assessment_id, codes = db.create_assessment(
                        team_name, int(member_count), organization_id=organization_id
                    )
                except ValueError as e:
                    st.error(str(e))
                else:
                    st.success(f"Assessment created with {len(codes)} codes")
                    st.code("\n".join(codes))

    assessments = db.get_all_assessments()
    if not assessments:
        st.info("No assessments yet. Create one above.")
        return

    for assessment in assessments:
        label = (
            f"{assessment['team_name']} · {assessment['submitted_count']}/{assessment['member_count']} "
            f"submitted · {assessment['status']}"
        )
        with st.expander(label):
            render_assessment_detail(db, settings, assessment)


def render_assessment_detail(db, settings, assessment):
    assessment_id = assessment['id']

    col1, col2, col3 = st.columns(3)
    with col1:
        st.write(f"**Organization:** {assessment['organization_name'] or 'None'}")
        st.write(f"**Created:** {str(assessment['created_at'])[:16]}")
    with col2:
        if assessment['team_score'] is not None:
            st.write(f"**Team Score:** {assessment['team_score']:.1f} ({assessment['health_grade']})")
        else:
            st.write("**Team Score:** Not calculated")
    with col3:
        new_status = STATUS_CLOSED if assessment['status'] == STATUS_ACTIVE else STATUS_ACTIVE
        if st.button(f"Set {new_status.title()}", key=f"status_{assessment_id}"):
            db.update_assessment_status(assessment_id, new_status)
            st.rerun()

    codes = db.get_codes_for_assessment(assessment_id)
    base_url = settings['frontend_url'].rstrip('/')
    code_rows = [{
        'Code': c['code'],
        'Status': '✓ Submitted' if c['is_used'] else '○ Pending',
        'Name': c['name'] or '',
        'Email': c['email'] or '',
        'Survey Link': f"{base_url}/?code={c['code']}",
        'Emailed': '✓' if c['email_sent'] else '',
    } for c in codes]
    st.dataframe(pd.DataFrame(code_rows), hide_index=True, use_container_width=True)

    col1, col2 = st.columns(2)
    with col1:
        if st.button("🔄 Calculate Team Report", key=f"calc_{assessment_id}"):
            try:
                report = db.calculate_team_report(assessment_id)
            except NoSubmissionsError as e:
                st.warning(str(e))
            except ValueError as e:
                st.error(str(e))
            else:
                st.success(f"Team score: {report['team_score']:.1f}")
    with col2:
        st.download_button(
            "📥 Export Participants (CSV)",
            export_participants_csv(codes),
            f"{assessment['team_name'].replace(' ', '_')}_participants_{datetime.now().strftime('%Y%m%d')}.csv",
            "text/csv",
            key=f"export_codes_{assessment_id}",
        )


# ============================================
# TEAM REPORTS
# ============================================

def render_team_reports_tab(db, settings):
    """Team report, trust matrix and document download per assessment."""

    assessments = [a for a in db.get_all_assessments() if a['team_score'] is not None]
    if not assessments:
        st.info("No team reports yet. Calculate one from the Assessments tab.")
        return

    options = {a['id']: a['team_name'] for a in assessments}
    assessment_id = st.selectbox(
        "Team", options=list(options.keys()), format_func=lambda x: options[x],
        key="team_report_select",
    )
    report = db.get_team_report(assessment_id)

    col1, col2, col3, col4 = st.columns(4)
    with col1:
        st.metric("Team Score", f"{report['team_score']:.1f}")
        st.caption(report['health_grade'])
    with col2:
        st.metric("Average Personal Score", f"{report['base_score']:.1f}")
    with col3:
        st.metric("Consistency", f"{report['consistency_factor']:.2f}")
    with col4:
        st.metric("Penalty", f"{report['penalty_factor']:.2f}")

    dimension_rows = [{
        'Dimension': DIMENSION_NAMES[d],
        'Score': report['dimension_scores'][d],
    } for d in ALL_DIMENSIONS]
    st.dataframe(pd.DataFrame(dimension_rows), hide_index=True, use_container_width=True)

    personalization = generate_personalization_data(report['dimension_scores'])
    position = personalization['team_position']

    st.subheader(
        f"{get_quadrant_emoji(position['quadrant'])} {get_quadrant_display_name(position['quadrant'])}"
    )
    st.caption(f"EBA {position['eba_score']:.1f} · Bids {position['bids_score']:.1f}")
    st.write(position['interpretation'])
    st.write(f"**Next step:** {position['next_step']}")

    st.markdown("**Priority Areas**")
    for area in personalization['priority_areas']:
        st.markdown(
            f"{area['rank']}. **{area['display_name']}** ({area['score']:.1f}): "
            f"{area['current_issue']} → {area['recommended_action']}"
        )

    recommendations = personalization['recommendations']
    col1, col2 = st.columns(2)
    with col1:
        st.markdown("**Immediate**")
        for item in recommendations['immediate']:
            st.markdown(f"- {item}")
        st.markdown("**Next 1-3 months**")
        for item in recommendations['short_term']:
            st.markdown(f"- {item}")
    with col2:
        st.markdown("**Longer term**")
        for item in recommendations['long_term']:
            st.markdown(f"- {item}")
        if recommendations['maintenance_actions']:
            st.markdown("**Keep doing**")
            for item in recommendations['maintenance_actions']:
                st.markdown(f"- {item}")

    st.markdown("---")

    col1, col2 = st.columns(2)
    with col1:
        if st.button("📄 Generate Word Report", key=f"gen_team_{assessment_id}"):
            with st.spinner("Generating team report..."):
                try:
                    output_path = generate_team_report(db, assessment_id)
                    st.success("Report generated!")
                    with open(output_path, 'rb') as f:
                        st.download_button(
                            "📥 Download Report",
                            f,
                            file_name=f"{options[assessment_id].replace(' ', '_')}_Team_Report.docx",
                            mime=DOCX_MIME,
                            key=f"download_team_{assessment_id}",
                        )
                except (ValueError, OSError) as e:
                    logger.exception("Team report generation failed for %s", assessment_id)
                    st.error(f"Error generating report: {str(e)}")

    with col2:
        if st.button("📧 Email Personal Reports", key=f"email_team_{assessment_id}",
                     disabled=not is_email_configured(settings)):
            render_send_personal_reports(db, settings, assessment_id, report)


def render_send_personal_reports(db, settings, assessment_id, team_report):
    codes = [c for c in db.get_codes_for_assessment(assessment_id) if c['is_used']]
    reports = [db.get_personal_report(c['code']) for c in codes]
    if not reports:
        st.info("No submitted participants to email.")
        return

    assessment = db.get_assessment(assessment_id)
    team_summary = {
        'team_name': assessment['team_name'],
        'team_score': team_report['team_score'],
        'team_grade': team_report['health_grade'],
        'participation_count': team_report['participation_count'],
    }

    with st.spinner(f"Sending {len(reports)} personal reports..."):
        result = send_batch_personal_reports(reports, team_summary, settings, db)

    if result['success']:
        st.success(f"✅ Sent {result['sent']} personal reports")
    else:
        st.warning(f"Sent {result['sent']}, failed {result['failed']}")
        for error in result['errors']:
            st.caption(error)


# ============================================
# ORGANIZATIONS
# ============================================

def tree_line_html(node, depth=0):
    indent = "&nbsp;" * 6 * depth
    status = "" if node['is_active'] else " <em>(inactive)</em>"
    return (
        f"{indent}🏢 <strong>{html.escape(node['name'])}</strong>{status} "
        f"<span style='color: #999;'>· {node['assessment_count']} assessments</span>"
    )


def _render_tree(nodes, depth=0):
    for node in nodes:
        st.markdown(tree_line_html(node, depth), unsafe_allow_html=True)
        _render_tree(node['children'], depth + 1)


def render_organizations_tab(db):
    """Organization tree and CRUD."""

    include_inactive = st.checkbox("Show inactive organizations", key="show_inactive_orgs")
    tree = db.get_organization_tree(include_inactive=include_inactive)

    col1, col2 = st.columns([3, 2])

    with col1:
        st.subheader("Organizations")
        if tree:
            _render_tree(tree)
        else:
            st.info("No organizations yet.")

    with col2:
        st.subheader("Add Organization")
        parent_options = _organization_options(db)
        with st.form("add_org_form", clear_on_submit=True):
            name = st.text_input("Name *")
            description = st.text_area("Description", height=68)
            leader_name = st.text_input("Leader Name *")
            leader_email = st.text_input("Leader Email *")
            leader_phone = st.text_input("Leader Phone")
            parent_id = st.selectbox(
                "Parent Organization",
                options=list(parent_options.keys()),
                format_func=lambda x: parent_options[x] if x is not None else "None (top level)",
            )
            submitted = st.form_submit_button("Add Organization")

            if submitted:
                try:
                    db.create_organization(
                        name, leader_name, leader_email,
                        description=description or None,
                        parent_id=parent_id,
                        leader_phone=leader_phone or None,
                    )
                except ValueError as e:
                    st.error(str(e))
                else:
                    st.success(f"Organization '{name}' created!")
                    st.rerun()

    organizations = db.get_all_organizations(include_inactive=True)
    if not organizations:
        return

    st.markdown("---")
    st.subheader("Manage Organization")
    names = {o['id']: o['name'] for o in organizations}
    organization_id = st.selectbox(
        "Organization", options=list(names.keys()), format_func=lambda x: names[x],
        key="manage_org_select",
    )
    render_organization_detail(db, organization_id, names)


def render_organization_detail(db, organization_id, names):
    details = db.get_organization_details(organization_id)
    breadcrumb = " › ".join(a['name'] for a in db.get_organization_ancestors(organization_id))
    st.caption(breadcrumb)

    stats = details['stats']
    col1, col2, col3 = st.columns(3)
    with col1:
        st.metric("Assessments", stats['total_assessments'])
    with col2:
        st.metric("Completed", stats['completed_assessments'])
    with col3:
        st.metric("Participants", f"{stats['completed_participants']} of {stats['total_participants']}")

    with st.form(f"edit_org_{organization_id}"):
        name = st.text_input("Name", value=details['name'])
        leader_name = st.text_input("Leader Name", value=details['leader_name'])
        leader_email = st.text_input("Leader Email", value=details['leader_email'])
        parent_choices = [None] + [i for i in names if i != organization_id]
        parent_id = st.selectbox(
            "Parent Organization",
            options=parent_choices,
            index=parent_choices.index(details['parent_id']) if details['parent_id'] in parent_choices else 0,
            format_func=lambda x: names[x] if x is not None else "None (top level)",
        )
        is_active = st.checkbox("Active", value=bool(details['is_active']))
        saved = st.form_submit_button("Save Changes")

        if saved:
            try:
                db.update_organization(
                    organization_id, name=name, leader_name=leader_name,
                    leader_email=leader_email, parent_id=parent_id, is_active=1 if is_active else 0,
                )
            except ValueError as e:
                st.error(str(e))
            else:
                st.success("Organization updated")
                st.rerun()

    col1, col2 = st.columns(2)
    with col1:
        if st.button("Deactivate", key=f"soft_delete_{organization_id}"):
            try:
                db.delete_organization(organization_id)
            except ValueError as e:
                st.error(str(e))
            else:
                st.success("Organization deactivated")
                st.rerun()
    with col2:
        if st.button("🗑️ Delete Permanently", key=f"hard_delete_{organization_id}"):
            try:
                db.delete_organization(organization_id, hard_delete=True)
            except ValueError as e:
                st.error(str(e))
            else:
                st.success("Organization deleted")
                st.rerun()


# ============================================
# SUMMARIES
# ============================================

def render_summaries_tab(db, settings):
    """Generate, view, export and email organization summaries."""

    organizations = db.get_all_organizations()
    if not organizations:
        st.info("No organizations yet. Add one in the Organizations tab.")
        return

    names = {o['id']: o['name'] for o in organizations}
    organization_id = st.selectbox(
        "Organization", options=list(names.keys()), format_func=lambda x: names[x],
        key="summary_org_select",
    )

    status = get_summary_status(db, organization_id)
    col1, col2, col3 = st.columns(3)
    with col1:
        st.metric("Teams", status['total_assessments'])
    with col2:
        st.metric("Completed", status['completed_assessments'])
    with col3:
        st.metric("Completion", f"{int(status['completion_rate'] * 100)}%")
    st.caption(status['recommendation'])

    if st.button("🔄 Generate Summary", disabled=not status['can_generate'],
                 key=f"gen_summary_{organization_id}"):
        try:
            generate_summary_report(db, organization_id)
        except NothingToSummarizeError as e:
            st.warning(str(e))
        except ValueError as e:
            st.error(str(e))
        else:
            st.success("Summary generated")

    summary = db.get_summary_report(organization_id)
    if summary is None:
        return

    st.markdown("---")
    render_summary(summary)

    st.markdown("---")
    col1, col2, col3 = st.columns(3)
    stamp = datetime.now().strftime('%Y%m%d')
    safe_name = names[organization_id].replace(' ', '_')
    with col1:
        st.download_button(
            "📥 Export CSV", export_summary_csv(summary),
            f"{safe_name}_summary_{stamp}.csv", "text/csv",
            key=f"summary_csv_{organization_id}",
        )
    with col2:
        st.download_button(
            "📥 Export JSON", export_summary_json(summary),
            f"{safe_name}_summary_{stamp}.json", "application/json",
            key=f"summary_json_{organization_id}",
        )
    with col3:
        if st.button("📄 Word Report", key=f"summary_doc_{organization_id}"):
            try:
                output_path = generate_summary_report_document(db, organization_id)
                with open(output_path, 'rb') as f:
                    st.download_button(
                        "📥 Download Report", f,
                        file_name=f"{safe_name}_Summary.docx",
                        mime=DOCX_MIME,
                        key=f"download_summary_{organization_id}",
                    )
            except (ValueError, OSError) as e:
                logger.exception("Summary document failed for organization %s", organization_id)
                st.error(f"Error generating report: {str(e)}")

    render_summary_email(db, settings, organization_id, summary)


def render_summary(summary):
    insights = summary['insights']
    st.info(insights['summary'])

    col1, col2, col3, col4 = st.columns(4)
    with col1:
        st.metric("Average Score", f"{summary['average_team_score']:.2f}")
    with col2:
        st.metric("Highest", f"{summary['highest_score']:.1f}")
    with col3:
        st.metric("Lowest", f"{summary['lowest_score']:.1f}")
    with col4:
        st.metric("Std. Dev.", f"{summary['score_std_dev']:.2f}")

    comparison_rows = [{
        'Team': t['team_name'],
        'Score': t['team_score'],
        'Grade': t['health_grade'],
        'Participation': f"{t['participation_count']}/{t['total_members']}",
    } for t in summary['team_comparisons']]
    st.dataframe(pd.DataFrame(comparison_rows), hide_index=True, use_container_width=True)

    averages = pd.DataFrame(
        {'Average': [summary['dimension_averages'][d] for d in ROLLUP_DIMENSIONS]},
        index=[DIMENSION_NAMES[d] for d in ROLLUP_DIMENSIONS],
    )
    st.bar_chart(averages)

    col1, col2 = st.columns(2)
    with col1:
        st.markdown("**Strengths**")
        for item in insights['strengths']:
            st.markdown(f"- {item}")
        st.markdown("**Recommendations**")
        for item in insights['recommendations']:
            st.markdown(f"- {item}")
    with col2:
        st.markdown("**Concerns**")
        for item in insights['concerns']:
            st.markdown(f"- {item}")
        st.markdown("**Cross-Team Trends**")
        for item in insights['cross_team_trends']:
            st.markdown(f"- {item}")


def render_summary_email(db, settings, organization_id, summary):
    st.markdown("---")
    st.markdown("**Email Summary**")
    if summary['email_sent']:
        st.caption(f"Last emailed: {str(summary['email_sent_at'])[:16]}")

    extra = st.text_input(
        "Additional recipients (comma separated)", key=f"summary_extra_{organization_id}"
    )
    if st.button("📧 Send Summary", key=f"send_summary_{organization_id}",
                 disabled=not is_email_configured(settings)):
        organization = db.get_organization(organization_id)
        recipients = [e.strip() for e in extra.split(',') if e.strip()]
        success, message = send_summary_email(organization, summary, settings, db, recipients)
        if success:
            st.success(f"✅ {message}")
        else:
            st.error(f"❌ Failed: {message}")


# ============================================
# EMAIL & SETTINGS
# ============================================

def render_email_tab(db, settings):
    """Render email configuration status and the send log."""

    st.subheader("Email Configuration")

    if is_email_configured(settings):
        st.success("✅ Email is configured and ready to send")

        st.markdown("**Test Email**")
        test_email = st.text_input("Send test email to:", placeholder="your@email.com")
        if st.button("Send Test Email") and test_email:
            success, message = send_test_email(test_email, settings, db)
            if success:
                st.success(f"✅ Test email sent to {test_email}")
            else:
                st.error(f"❌ Failed: {message}")
    else:
        st.warning("⚠️ Email is not configured")
        st.markdown("""
        To enable email sending, add the following to your Streamlit secrets
        (in the Streamlit Cloud dashboard or `.streamlit/secrets.toml` locally):

        ```toml
        [hubspot]
        api_key = "pat-..."
        sender_email = "noreply@your-domain.com"
        personal_report_template_id = "123"
        summary_template_id = "456"
        test_template_id = "789"
        ```
        """)

    st.markdown("---")
    st.subheader("Email Log")
    log = db.get_email_log()
    if log:
        log_rows = [{
            'Sent': str(entry['sent_at'])[:16],
            'Type': entry['email_type'],
            'To': entry['to_email'],
            'Result': '✓' if entry['success'] else '✗',
            'Message': entry['message'],
        } for entry in log]
        st.dataframe(pd.DataFrame(log_rows), hide_index=True, use_container_width=True)
    else:
        st.info("No emails sent yet.")


def render_app_info(db, settings):
    """Render app info section."""

    st.subheader("App Information")

    stats = db.get_dashboard_stats()
    conn_info = db.get_connection_info()

    col1, col2 = st.columns(2)

    with col1:
        st.write(f"**Database:** {conn_info['type']}")
        st.write(f"**Path:** {conn_info['path']}")
        st.write(f"**Status:** {conn_info['status']}")
        st.write(f"**Frontend URL:** {settings['frontend_url']}")

    with col2:
        st.write(f"**Assessments:** {stats['total_assessments']}")
        st.write(f"**Completed responses:** {stats['completed_responses']}")
        st.write(f"**Active organizations:** {stats['active_organizations']}")

        if is_email_configured(settings):
            st.write("**Email:** ✅ Configured")
        else:
            st.write("**Email:** ❌ Not configured")
