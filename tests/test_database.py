"""Tests for persistence: assessments, codes, submissions, reports and organizations."""
import logging
import sqlite3

import pytest

from database import STATUS_CLOSED, StorageError, build_organization_tree, is_valid_email
from framework import CODE_ALPHABET, CODE_LENGTH
from scoring import IncompleteResponsesError, NoSubmissionsError
from summary_report import generate_summary_report


class TestAssessments:
    def test_create_generates_unique_codes(self, db):
        assessment_id, codes = db.create_assessment("Product Team", 12)
        assert len(codes) == 12
        assert len(set(codes)) == 12
        assert all(len(c) == CODE_LENGTH and set(c) <= set(CODE_ALPHABET) for c in codes)

        assessment = db.get_assessment(assessment_id)
        assert assessment['team_name'] == "Product Team"
        assert assessment['status'] == 'ACTIVE'
        assert assessment['submitted_count'] == 0

    @pytest.mark.parametrize('count', [0, 101, True, 2.5])
    def test_member_count_bounds(self, db, count):
        with pytest.raises(ValueError, match="Member count"):
            db.create_assessment("Team", count)

    def test_team_name_required(self, db):
        with pytest.raises(ValueError, match="Team name is required"):
            db.create_assessment("  ", 3)

    def test_unknown_organization(self, db):
        with pytest.raises(ValueError, match="Organization not found"):
            db.create_assessment("Team", 3, organization_id=42)

    def test_list_includes_counts_and_grade(self, db, organization_id, responses):
        assessment_id, codes = db.create_assessment("Team", 2, organization_id=organization_id)
        db.submit_assessment(codes[0], "Pat", "pat@example.com", responses(5, Q22=1))
        db.calculate_team_report(assessment_id)

        [listed] = db.get_all_assessments(organization_id)
        assert listed['organization_name'] == "Acme Corp"
        assert listed['submitted_count'] == 1
        assert listed['team_score'] == 100.0
        assert listed['health_grade'] == 'Exceptional Team'

    def test_update_status(self, db):
        assessment_id, _ = db.create_assessment("Team", 1)
        db.update_assessment_status(assessment_id, STATUS_CLOSED)
        assert db.get_assessment(assessment_id)['status'] == STATUS_CLOSED
        with pytest.raises(ValueError):
            db.update_assessment_status(assessment_id, 'ARCHIVED')


class TestCodesAndSubmissions:
    def test_validate_code_normalizes_input(self, db):
        assessment_id, codes = db.create_assessment("Team", 1)
        info = db.validate_code(f"  {codes[0].lower()} ")
        assert info == {
            'code': codes[0],
            'assessment_id': assessment_id,
            'team_name': "Team",
            'already_used': False,
        }

    def test_invalid_code(self, db):
        with pytest.raises(ValueError, match="Invalid code"):
            db.validate_code("ZZZZZZZZ")

    def test_closed_assessment_rejects_code(self, db, responses):
        assessment_id, codes = db.create_assessment("Team", 1)
        db.update_assessment_status(assessment_id, STATUS_CLOSED)
        with pytest.raises(ValueError, match="no longer active"):
            db.validate_code(codes[0])
        with pytest.raises(ValueError, match="no longer active"):
            db.submit_assessment(codes[0], "Pat", "pat@example.com", responses(4))

    def test_submit_scores_and_stores(self, db, responses):
        assessment_id, codes = db.create_assessment("Team", 2)
        result = db.submit_assessment(codes[0], " Pat Doe ", "pat@example.com", responses(5, Q22=1))
        assert result['personal_score'] == 100.0

        [stored] = db.get_submitted_results(assessment_id)
        assert stored == result

        rows = db.get_codes_for_assessment(assessment_id)
        assert rows[0]['is_used'] == 1
        assert rows[0]['name'] == "Pat Doe"
        assert rows[0]['result']['grade'] == 'Excellent'
        assert rows[1]['result'] is None

    def test_code_used_once(self, db, responses):
        _, codes = db.create_assessment("Team", 1)
        db.submit_assessment(codes[0], "Pat", "pat@example.com", responses(4))
        with pytest.raises(ValueError, match="already been used"):
            db.submit_assessment(codes[0], "Sam", "sam@example.com", responses(2))
        assert db.validate_code(codes[0])['already_used'] is True

    def test_incomplete_responses_not_stored(self, db, responses):
        assessment_id, codes = db.create_assessment("Team", 1)
        answers = responses(4)
        del answers['Q9']
        with pytest.raises(IncompleteResponsesError):
            db.submit_assessment(codes[0], "Pat", "pat@example.com", answers)
        assert db.get_submitted_results(assessment_id) == []

    def test_participant_details_required(self, db, responses):
        _, codes = db.create_assessment("Team", 1)
        with pytest.raises(ValueError, match="required"):
            db.submit_assessment(codes[0], "", "pat@example.com", responses(4))


class TestTeamReports:
    def test_no_submissions(self, db):
        assessment_id, _ = db.create_assessment("Team", 3)
        with pytest.raises(NoSubmissionsError):
            db.calculate_team_report(assessment_id)
        assert db.get_team_report(assessment_id) is None

    def test_unknown_assessment(self, db):
        with pytest.raises(ValueError, match="Assessment not found"):
            db.calculate_team_report(404)

    def test_recalculation_is_idempotent(self, db, responses):
        assessment_id, codes = db.create_assessment("Team", 3)
        db.submit_assessment(codes[0], "A", "a@example.com", responses(5, Q22=1))
        db.submit_assessment(codes[1], "B", "b@example.com", responses(3))

        first = db.calculate_team_report(assessment_id)
        stored_first = db.get_team_report(assessment_id)
        second = db.calculate_team_report(assessment_id)
        stored_second = db.get_team_report(assessment_id)

        assert first == second
        for key in ('team_score', 'base_score', 'consistency_factor', 'penalty_factor',
                    'standard_deviation', 'dimension_scores', 'participation_count'):
            assert stored_first[key] == stored_second[key]
        assert stored_second['participation_count'] == 2
        assert stored_second['health_grade'] == first['health_grade']

    def test_recalculation_picks_up_new_submissions(self, db, responses):
        assessment_id, codes = db.create_assessment("Team", 2)
        db.submit_assessment(codes[0], "A", "a@example.com", responses(5, Q22=1))
        db.calculate_team_report(assessment_id)
        db.submit_assessment(codes[1], "B", "b@example.com", responses(5, Q22=1))
        report = db.calculate_team_report(assessment_id)
        assert report['participation_count'] == 2

    def test_personal_report(self, db, responses):
        assessment_id, codes = db.create_assessment("Team", 2)
        db.submit_assessment(codes[0], "A", "a@example.com", responses(5, Q22=1))

        with pytest.raises(ValueError, match="not been completed"):
            db.get_personal_report(codes[1])
        with pytest.raises(ValueError, match="Team report not ready"):
            db.get_personal_report(codes[0])

        db.submit_assessment(codes[1], "B", "b@example.com", responses(3))
        db.calculate_team_report(assessment_id)

        report = db.get_personal_report(codes[0].lower())
        assert report['participant_name'] == "A"
        assert report['personal_score'] == 100.0
        assert report['team_score'] == db.get_team_report(assessment_id)['team_score']
        assert report['comparison']['dimensions']['appreciation']['team'] == 80.0
        assert report['participation_count'] == 2

    def test_mark_code_email_sent(self, db):
        assessment_id, codes = db.create_assessment("Team", 1)
        db.mark_code_email_sent(codes[0])
        assert db.get_codes_for_assessment(assessment_id)[0]['email_sent'] == 1


class TestOrganizations:
    def test_create_validates(self, db):
        with pytest.raises(ValueError, match="required"):
            db.create_organization("", "Lee", "lee@example.com")
        with pytest.raises(ValueError, match="Invalid email"):
            db.create_organization("Org", "Lee", "not-an-email")
        with pytest.raises(ValueError, match="Parent organization not found"):
            db.create_organization("Org", "Lee", "lee@example.com", parent_id=99)

    def test_no_child_under_inactive_parent(self, db, organization_id):
        db.delete_organization(organization_id)
        with pytest.raises(ValueError, match="inactive"):
            db.create_organization("Child", "Lee", "lee@example.com", parent_id=organization_id)

    def test_tree(self, db, organization_id):
        child = db.create_organization("Sales", "Lee", "lee@example.com", parent_id=organization_id)
        db.create_organization("Sales East", "Kim", "kim@example.com", parent_id=child)

        [root] = db.get_organization_tree()
        assert root['name'] == "Acme Corp"
        assert [c['name'] for c in root['children']] == ["Sales"]
        assert [c['name'] for c in root['children'][0]['children']] == ["Sales East"]

    def test_build_tree_from_flat_list(self):
        flat = [
            {'id': 1, 'parent_id': None, 'name': 'Root'},
            {'id': 2, 'parent_id': 1, 'name': 'Child'},
        ]
        tree = build_organization_tree(flat)
        assert tree[0]['children'][0]['name'] == 'Child'
        assert tree[0]['children'][0]['children'] == []

    def test_cannot_be_own_parent(self, db, organization_id):
        with pytest.raises(ValueError, match="own parent"):
            db.update_organization(organization_id, parent_id=organization_id)

    def test_cycle_rejected(self, db, organization_id):
        child = db.create_organization("Sales", "Lee", "lee@example.com", parent_id=organization_id)
        grandchild = db.create_organization("East", "Kim", "kim@example.com", parent_id=child)
        with pytest.raises(ValueError, match="cycle"):
            db.update_organization(organization_id, parent_id=grandchild)

    def test_update_fields(self, db, organization_id):
        updated = db.update_organization(organization_id, name="Acme Ltd", unknown_field="x")
        assert updated['name'] == "Acme Ltd"

    def test_deactivate_blocked_by_active_children(self, db, organization_id):
        db.create_organization("Sales", "Lee", "lee@example.com", parent_id=organization_id)
        with pytest.raises(ValueError, match="Cannot deactivate"):
            db.update_organization(organization_id, is_active=False)
        with pytest.raises(ValueError, match="Cannot delete"):
            db.delete_organization(organization_id)

    def test_soft_delete(self, db, organization_id):
        assert db.delete_organization(organization_id) == 'soft'
        assert db.get_organization(organization_id)['is_active'] == 0
        assert db.get_all_organizations() == []
        assert len(db.get_all_organizations(include_inactive=True)) == 1

    def test_hard_delete_refused_with_assessments(self, db, organization_id):
        db.create_assessment("Team", 2, organization_id=organization_id)
        with pytest.raises(ValueError, match="assessment"):
            db.delete_organization(organization_id, hard_delete=True)

    def test_hard_delete_refused_with_inactive_children(self, db, organization_id):
        child = db.create_organization("Sales", "Lee", "lee@example.com", parent_id=organization_id)
        db.delete_organization(child)
        with pytest.raises(ValueError, match="inactive child"):
            db.delete_organization(organization_id, hard_delete=True)

    def test_hard_delete(self, db, organization_id):
        assert db.delete_organization(organization_id, hard_delete=True) == 'hard'
        assert db.get_organization(organization_id) is None

    def test_ancestors_root_first(self, db, organization_id):
        child = db.create_organization("Sales", "Lee", "lee@example.com", parent_id=organization_id)
        grandchild = db.create_organization("East", "Kim", "kim@example.com", parent_id=child)
        names = [a['name'] for a in db.get_organization_ancestors(grandchild)]
        assert names == ["Acme Corp", "Sales", "East"]

    def test_details(self, db, organization_id):
        db.create_assessment("Team", 4, organization_id=organization_id)
        details = db.get_organization_details(organization_id)
        assert details['parent'] is None
        assert details['stats']['total_assessments'] == 1
        assert details['stats']['total_participants'] == 4
        assert details['stats']['has_latest_report'] is False
        assert db.get_organization_details(999) is None

    def test_assign_assessment(self, db, organization_id):
        assessment_id, _ = db.create_assessment("Team", 2)
        db.assign_assessment_to_organization(assessment_id, organization_id)
        assert db.get_assessment(assessment_id)['organization_id'] == organization_id
        db.assign_assessment_to_organization(assessment_id, None)
        assert db.get_assessment(assessment_id)['organization_id'] is None


class TestEmailLogAndStats:
    def test_log_email(self, db):
        db.log_email('test', 'a@example.com', True, "Sent to a@example.com")
        db.log_email('test', 'b@example.com', False, "HubSpot error 400: bad")
        log = db.get_email_log()
        assert len(log) == 2
        assert {entry['success'] for entry in log} == {0, 1}

    def test_dashboard_stats(self, db, organization_id, responses):
        _, codes = db.create_assessment("Team", 3, organization_id=organization_id)
        db.submit_assessment(codes[0], "A", "a@example.com", responses(4))
        stats = db.get_dashboard_stats()
        assert stats['total_assessments'] == 1
        assert stats['active_assessments'] == 1
        assert stats['total_codes'] == 3
        assert stats['completed_responses'] == 1
        assert stats['team_reports'] == 0
        assert stats['active_organizations'] == 1

    def test_delete_summary_report(self, db, organization_id):
        assert db.delete_summary_report(organization_id) is False


class _TrackedConnection:
    """Wraps a sqlite3 connection and remembers whether it was closed."""

    def __init__(self, conn):
        self._conn = conn
        self.closed = False

    def cursor(self):
        return self._conn.cursor()

    def commit(self):
        self._conn.commit()

    def rollback(self):
        self._conn.rollback()

    def close(self):
        self.closed = True
        self._conn.close()


class TestStorageFailures:
    def _corrupt(self, db, query, params):
        conn = sqlite3.connect(db.db_path)
        conn.execute(query, params)
        conn.commit()
        conn.close()

    def _submitted_team(self, db, responses, organization_id=None):
        assessment_id, codes = db.create_assessment("Alpha", 2, organization_id=organization_id)
        db.submit_assessment(codes[0], "Pat Doe", "pat@example.com", responses(4, Q22=2))
        db.calculate_team_report(assessment_id)
        return assessment_id, codes

    def test_corrupt_summary_is_logged_and_generic(self, db, organization_id, responses, caplog):
        self._submitted_team(db, responses, organization_id)
        generate_summary_report(db, organization_id)
        self._corrupt(db, "UPDATE summary_reports SET insights = ? WHERE organization_id = ?",
                      ('{broken', organization_id))

        caplog.set_level(logging.DEBUG)
        with pytest.raises(StorageError, match="Stored data could not be read"):
            db.get_summary_report(organization_id)

        errors = [r for r in caplog.records if r.levelno >= logging.ERROR and r.name == 'database']
        assert errors
        assert errors[0].exc_info is not None

    def test_corrupt_personal_result_is_not_a_validation_error(self, db, responses):
        _, codes = self._submitted_team(db, responses)
        self._corrupt(db, "UPDATE participant_codes SET scores = ? WHERE code = ?", ('{broken', codes[0]))

        with pytest.raises(StorageError) as excinfo:
            db.get_personal_report(codes[0])
        assert not isinstance(excinfo.value, ValueError)
        assert "Expecting" not in str(excinfo.value)

    def test_sqlite_error_is_logged_and_wrapped(self, db, caplog):
        self._corrupt(db, "DROP TABLE email_log", ())

        with pytest.raises(StorageError, match="Database operation failed"):
            db.get_email_log()
        assert "Database operation failed" in caplog.text

    def test_connections_closed_when_a_statement_fails(self, db, monkeypatch):
        self._corrupt(db, "DROP TABLE participant_codes", ())
        opened = []
        real_connect = db.get_connection

        def tracked():
            conn = _TrackedConnection(real_connect())
            opened.append(conn)
            return conn

        monkeypatch.setattr(db, 'get_connection', tracked)

        with pytest.raises(StorageError):
            db.create_assessment("Beta", 3)
        with pytest.raises(StorageError):
            db.get_codes_for_assessment(1)

        assert opened
        assert all(conn.closed for conn in opened)

    def test_failed_create_leaves_no_partial_assessment(self, db):
        self._corrupt(db, "DROP TABLE participant_codes", ())
        with pytest.raises(StorageError):
            db.create_assessment("Beta", 3)

        conn = sqlite3.connect(db.db_path)
        count = conn.execute("SELECT COUNT(*) FROM assessments").fetchone()[0]
        conn.close()
        assert count == 0


@pytest.mark.parametrize('email, valid', [
    ('user@example.com', True),
    ('first.last@sub.example.org', True),
    ('no-at-sign', False),
    ('user@nodot', False),
    ('', False),
    (None, False),
])
def test_is_valid_email(email, valid):
    assert is_valid_email(email) is valid
