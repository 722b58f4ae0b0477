#!/usr/bin/env python3
"""
Application settings.

Read once at startup from Streamlit secrets, falling back to environment
variables, and passed explicitly to the pages and the email module.

Example .streamlit/secrets.toml:

    [app]
    admin_password = "change-me"
    database_path = "team_assessment.db"
    frontend_url = "https://team-assessment.streamlit.app"

    [hubspot]
    api_key = "pat-..."
    personal_report_template_id = "123"
    summary_template_id = "456"
    test_template_id = "789"
    sender_email = "noreply@example.com"
"""

import hmac
import logging
import os

logger = logging.getLogger(__name__)


DEFAULT_ADMIN_PASSWORD = "admin123"
DEFAULT_DATABASE_PATH = "team_assessment.db"
DEFAULT_FRONTEND_URL = "http://localhost:8501"

# setting name -> (secrets section, secrets key, env var, default)
SETTING_SOURCES = {
    'admin_password': ('app', 'admin_password', 'ADMIN_PASSWORD', DEFAULT_ADMIN_PASSWORD),
    'database_path': ('app', 'database_path', 'DATABASE_PATH', DEFAULT_DATABASE_PATH),
    'frontend_url': ('app', 'frontend_url', 'FRONTEND_URL', DEFAULT_FRONTEND_URL),
    'hubspot_api_key': ('hubspot', 'api_key', 'HUBSPOT_API_KEY', ''),
    'personal_report_template_id': (
        'hubspot', 'personal_report_template_id', 'HUBSPOT_PERSONAL_REPORT_TEMPLATE_ID', ''
    ),
    'summary_template_id': ('hubspot', 'summary_template_id', 'HUBSPOT_SUMMARY_TEMPLATE_ID', ''),
    'test_template_id': ('hubspot', 'test_template_id', 'HUBSPOT_TEST_TEMPLATE_ID', ''),
    'sender_email': ('hubspot', 'sender_email', 'SENDER_EMAIL', ''),
}


def _streamlit_secrets():
    """Streamlit secrets as a plain dict, or {} when no secrets file exists."""
    import streamlit as st

    try:
        return {section: dict(values) for section, values in st.secrets.items()
                if hasattr(values, 'items')}
    except FileNotFoundError:
        logger.debug("No Streamlit secrets file; using environment variables")
        return {}


def load_settings(secrets=None, environ=None):
    """
    Build the settings dict.

    Args:
        secrets: Mapping of section -> {key: value}. Defaults to the
            Streamlit secrets.
        environ: Mapping used for the environment fallback. Defaults to
            os.environ.
    """
    if secrets is None:
        secrets = _streamlit_secrets()
    if environ is None:
        environ = os.environ

    settings = {}
    for name, (section, key, env_var, default) in SETTING_SOURCES.items():
        value = (secrets.get(section) or {}).get(key)
        if value in (None, ''):
            value = environ.get(env_var, default)
        settings[name] = str(value).strip() if value is not None else default

    if settings['admin_password'] == DEFAULT_ADMIN_PASSWORD:
        logger.warning("Using the default admin password; set ADMIN_PASSWORD for production")
    return settings


def check_admin_password(settings, candidate):
    """Compare a login attempt against the configured password."""
    if not candidate:
        return False
    return hmac.compare_digest(
        candidate.encode('utf-8'),
        settings['admin_password'].encode('utf-8'),
    )


