"""Shared fixtures for the assessment tests."""
import pytest

from database import Database
from framework import QUESTION_IDS


def build_responses(value=5, **overrides):
    """A complete response set with every answer = value, plus per-question overrides."""
    responses = {qid: value for qid in QUESTION_IDS}
    responses.update(overrides)
    return responses


@pytest.fixture
def responses():
    return build_responses


@pytest.fixture
def perfect_responses():
    # Q22 is reverse scored, so 1 is its best answer
    return build_responses(5, Q22=1)


@pytest.fixture
def db(tmp_path):
    return Database(str(tmp_path / "test_assessment.db"))


@pytest.fixture
def organization_id(db):
    return db.create_organization("Acme Corp", "Jane Leader", "jane@example.com")


@pytest.fixture
def settings():
    return {
        'admin_password': 'secret-pass',
        'database_path': ':memory:',
        'frontend_url': 'https://assess.example.com/',
        'hubspot_api_key': 'pat-test',
        'personal_report_template_id': '111',
        'summary_template_id': '222',
        'test_template_id': '333',
        'sender_email': 'noreply@example.com',
    }
