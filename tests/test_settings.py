"""Tests for settings loading and the admin password check."""
from settings import (
    DEFAULT_ADMIN_PASSWORD,
    DEFAULT_DATABASE_PATH,
    DEFAULT_FRONTEND_URL,
    check_admin_password,
    load_settings,
)


class TestLoadSettings:
    def test_defaults(self):
        settings = load_settings(secrets={}, environ={})
        assert settings['admin_password'] == DEFAULT_ADMIN_PASSWORD
        assert settings['database_path'] == DEFAULT_DATABASE_PATH
        assert settings['frontend_url'] == DEFAULT_FRONTEND_URL
        assert settings['hubspot_api_key'] == ''

    def test_secrets_take_priority(self):
        settings = load_settings(
            secrets={'app': {'admin_password': 'from-secrets'}, 'hubspot': {'api_key': 'pat-1'}},
            environ={'ADMIN_PASSWORD': 'from-env', 'HUBSPOT_API_KEY': 'pat-2'},
        )
        assert settings['admin_password'] == 'from-secrets'
        assert settings['hubspot_api_key'] == 'pat-1'

    def test_environment_fallback(self):
        settings = load_settings(
            secrets={'app': {'admin_password': ''}},
            environ={'ADMIN_PASSWORD': 'from-env', 'HUBSPOT_SUMMARY_TEMPLATE_ID': ' 456 '},
        )
        assert settings['admin_password'] == 'from-env'
        assert settings['summary_template_id'] == '456'

    def test_values_become_strings(self):
        settings = load_settings(secrets={'hubspot': {'test_template_id': 789}}, environ={})
        assert settings['test_template_id'] == '789'

    def test_default_password_is_logged(self, caplog):
        load_settings(secrets={}, environ={})
        assert "default admin password" in caplog.text


class TestAdminPassword:
    def test_match(self):
        assert check_admin_password({'admin_password': 's3cret'}, 's3cret') is True

    def test_mismatch(self):
        assert check_admin_password({'admin_password': 's3cret'}, 'S3cret') is False

    def test_empty_candidate(self):
        assert check_admin_password({'admin_password': ''}, '') is False
        assert check_admin_password({'admin_password': 's3cret'}, None) is False
