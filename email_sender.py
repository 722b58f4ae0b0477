#!/usr/bin/env python3
"""
Email module for the Team Effectiveness Assessment.

Sends personal reports, organization summaries and test emails through the
HubSpot single-send transactional email API. The email body lives in the
HubSpot template; this module fills the template's custom properties.
Tracks all sent emails in the database.
"""

import logging
import time

import requests

from framework import ALL_DIMENSIONS
from database import is_valid_email

logger = logging.getLogger(__name__)


HUBSPOT_API_URL = "https://api.hubapi.com/marketing/v3/transactional/single-email/send"
REQUEST_TIMEOUT = 15

# HubSpot allows about 10 requests per second
SEND_INTERVAL_SECONDS = 0.15


def is_email_configured(settings):
    """Check if email sending is properly configured."""
    return bool(
        settings.get('hubspot_api_key')
        and settings.get('sender_email')
        and settings.get('personal_report_template_id')
    )


def _send_email(settings, template_key, to_email, subject, custom_properties, contact_properties=None):
    """Send one templated email via HubSpot. Returns (success, message)."""
    if not settings.get('hubspot_api_key') or not settings.get('sender_email'):
        return False, "Email not configured"

    template_id = str(settings.get(template_key) or '')
    if not template_id.isdigit():
        return False, f"Missing or invalid template id ({template_key})"

    if not is_valid_email(to_email):
        return False, f"Invalid email address: {to_email}"

    payload = {
        'emailId': int(template_id),
        'message': {
            'to': to_email,
            'from': settings['sender_email'],
            'subject': subject,
        },
        'customProperties': custom_properties,
    }
    if contact_properties:
        payload['contactProperties'] = contact_properties

    try:
        response = requests.post(
            HUBSPOT_API_URL,
            headers={
                'Authorization': f"Bearer {settings['hubspot_api_key']}",
                'Content-Type': 'application/json',
            },
            json=payload,
            timeout=REQUEST_TIMEOUT,
        )
    except requests.RequestException as e:
        logger.warning("HubSpot request to %s failed: %s", to_email, e)
        return False, f"Error: {e}"

    if response.status_code >= 400:
        try:
            detail = response.json().get('message') or response.text
        except ValueError:
            detail = response.text
        logger.warning("HubSpot returned %s for %s: %s", response.status_code, to_email, detail)
        return False, f"HubSpot error {response.status_code}: {detail}"

    logger.info("Email sent to %s", to_email)
    return True, f"Sent to {to_email}"


def _split_name(full_name):
    parts = (full_name or '').split()
    if not parts:
        return '', ''
    return parts[0], ' '.join(parts[1:])


def _fmt(value):
    return f"{float(value):.1f}"


# ============================================
# PERSONAL REPORTS
# ============================================

def build_report_url(settings, code):
    return f"{settings['frontend_url'].rstrip('/')}/?report={code}"


def personal_report_properties(report, team_summary, report_url=''):
    """Template variables for one participant's report email."""
    properties = {
        'participant_name': report['participant_name'],
        'personal_score': _fmt(report['personal_score']),
        'team_average_score': _fmt(team_summary['team_score']),
        'grade': report['personal_grade'],
        'team_name': team_summary['team_name'],
        'team_grade': team_summary['team_grade'],
        'participation_count': str(team_summary['participation_count']),
        'strengths': ', '.join(report['strengths']),
        'growth_areas': ', '.join(report['growth_areas']),
        'recommendations': ', '.join(report['recommendations']),
        'team_report_url': report_url,
    }
    for dimension in ALL_DIMENSIONS:
        properties[f"dim_{dimension}"] = _fmt(report['personal_dimensions'][dimension])
        properties[f"avg_{dimension}"] = _fmt(report['team_dimensions'][dimension])
    return properties


def send_personal_report(report, team_summary, settings, db=None):
    """
    Send a participant their personal report.

    Args:
        report: Dict from Database.get_personal_report()
        team_summary: Dict with team_name, team_score, team_grade and
            participation_count
        settings: Settings dict from settings.load_settings()
        db: Database instance for logging

    Returns:
        (success: bool, message: str)
    """
    to_email = report.get('participant_email')
    if not to_email:
        return False, "No email address"

    firstname, lastname = _split_name(report['participant_name'])
    success, message = _send_email(
        settings,
        'personal_report_template_id',
        to_email,
        f"Your Team Assessment Results - {report['participant_name']}",
        personal_report_properties(report, team_summary, build_report_url(settings, report['code'])),
        contact_properties={'email': to_email, 'firstname': firstname, 'lastname': lastname},
    )

    if db:
        db.log_email(
            email_type='personal_report',
            to_email=to_email,
            success=success,
            message=message,
            assessment_id=report.get('assessment_id'),
            code=report.get('code'),
        )
        if success and report.get('code'):
            db.mark_code_email_sent(report['code'])

    return success, message


def send_batch_personal_reports(reports, team_summary, settings, db=None):
    """
    Send personal reports one after another, pausing between calls.

    Failures are collected and the loop moves on; nothing is retried.

    Returns:
        Dict with success (no failures), sent, failed and errors.
    """
    sent = 0
    failed = 0
    errors = []

    for i, report in enumerate(reports):
        if i > 0:
            time.sleep(SEND_INTERVAL_SECONDS)
        success, message = send_personal_report(report, team_summary, settings, db)
        if success:
            sent += 1
        else:
            failed += 1
            errors.append(f"{report.get('participant_email')}: {message}")

    logger.info("Batch personal reports: %d sent, %d failed", sent, failed)
    return {
        'success': failed == 0,
        'sent': sent,
        'failed': failed,
        'errors': errors,
    }


# ============================================
# ORGANIZATION SUMMARY
# ============================================

def summary_properties(organization, summary, report_url=''):
    """Template variables for the organization summary email."""
    insights = summary['insights']
    top_performer = insights.get('top_performer') or {}
    return {
        'organization_name': organization['name'],
        'leader_name': organization['leader_name'],
        'total_teams': str(summary['total_teams']),
        'completed_teams': str(summary['completed_teams']),
        'pending_teams': str(summary['pending_teams']),
        'average_team_score': _fmt(summary['average_team_score']),
        'highest_score': _fmt(summary['highest_score']),
        'lowest_score': _fmt(summary['lowest_score']),
        'summary': insights.get('summary', ''),
        'strengths': '; '.join(insights.get('strengths', [])),
        'concerns': '; '.join(insights.get('concerns', [])),
        'recommendations': '; '.join(insights.get('recommendations', [])),
        'top_performer': top_performer.get('team_name', ''),
        'summary_report_url': report_url,
    }


def send_summary_email(organization, summary, settings, db=None, additional_recipients=None):
    """
    Send the organization summary to its leader and any extra recipients.

    The summary is marked as emailed when every recipient succeeds.

    Returns:
        (success: bool, message: str)
    """
    recipients = [organization['leader_email']] + list(additional_recipients or [])
    report_url = f"{settings['frontend_url'].rstrip('/')}/?admin=true"
    properties = summary_properties(organization, summary, report_url)

    failures = []
    for i, to_email in enumerate(recipients):
        if i > 0:
            time.sleep(SEND_INTERVAL_SECONDS)
        success, message = _send_email(
            settings,
            'summary_template_id',
            to_email,
            f"Team Assessment Summary - {organization['name']}",
            properties,
        )
        if db:
            db.log_email(
                email_type='summary_report',
                to_email=to_email,
                success=success,
                message=message,
                organization_id=organization['id'],
            )
        if not success:
            failures.append(f"{to_email}: {message}")

    if failures:
        return False, "; ".join(failures)

    if db:
        db.mark_summary_email_sent(organization['id'])
    return True, f"Sent to {len(recipients)} recipient(s)"


def send_test_email(recipient_email, settings, db=None):
    """Send the test template to check the HubSpot configuration."""
    success, message = _send_email(
        settings,
        'test_template_id',
        recipient_email,
        "Test Email from Team Assessment System",
        {'test_message': "This is a test email from the Team Assessment System."},
    )
    if db:
        db.log_email(email_type='test', to_email=recipient_email, success=success, message=message)
    return success, message


