#!/usr/bin/env python3
"""
Database module for the Team Effectiveness Assessment.

Handles all data persistence using a local SQLite database. Response sets
and derived records (personal results, team dimension averages, summary
reports) are stored as JSON text columns.
"""

import json
import logging
import re
import secrets
import sqlite3
from contextlib import contextmanager
from datetime import datetime

from framework import (
    CODE_ALPHABET, CODE_LENGTH, MIN_TEAM_MEMBERS, MAX_TEAM_MEMBERS,
)
from scoring import (
    score_responses, calculate_team_report as build_team_report,
    get_team_health_grade, compare_to_team,
)

logger = logging.getLogger(__name__)


DEFAULT_DATABASE_PATH = "team_assessment.db"

STATUS_ACTIVE = 'ACTIVE'
STATUS_CLOSED = 'CLOSED'
ASSESSMENT_STATUSES = (STATUS_ACTIVE, STATUS_CLOSED)

EMAIL_PATTERN = re.compile(r'^[^\s@]+@[^\s@]+\.[^\s@]+$')


def is_valid_email(email):
    return bool(email) and EMAIL_PATTERN.match(email) is not None


def _now():
    return datetime.now().isoformat(timespec='seconds')


class StorageError(RuntimeError):
    """A read or write against the database failed; details are in the log."""


def _loads(text, default=None):
    """Parse a stored JSON column."""
    if not text:
        return default
    try:
        return json.loads(text)
    except json.JSONDecodeError as e:
        logger.exception("Stored JSON could not be parsed")
        raise StorageError("Stored data could not be read") from e


def build_organization_tree(organizations, parent_id=None):
    """Nest a flat organization list under its parents, starting at parent_id."""
    return [
        dict(org, children=build_organization_tree(organizations, org['id']))
        for org in organizations
        if org['parent_id'] == parent_id
    ]


class Database:
    def __init__(self, db_path=DEFAULT_DATABASE_PATH):
        """Open (and create if needed) the SQLite database at db_path."""
        self.db_path = db_path
        self.init_database()

    def get_connection(self):
        """Get a database connection."""
        conn = sqlite3.connect(self.db_path)
        conn.row_factory = sqlite3.Row
        return conn

    @contextmanager
    def _transaction(self):
        """
        Yield a cursor, commit on success and always close the connection.

        Raises:
            StorageError: any sqlite3 error, logged with its traceback.
        """
        conn = None
        try:
            conn = self.get_connection()
            yield conn.cursor()
            conn.commit()
        except sqlite3.Error as e:
            logger.exception("Database operation failed on %s", self.db_path)
            if conn is not None:
                conn.rollback()
            raise StorageError("Database operation failed") from e
        finally:
            if conn is not None:
                conn.close()

    def _fetchall(self, query, params=()):
        """Execute a query and fetch all results as list of dicts."""
        with self._transaction() as cursor:
            cursor.execute(query, params or ())
            return [dict(row) for row in cursor.fetchall()]

    def _fetchone(self, query, params=()):
        """Execute a query and fetch one result as dict."""
        with self._transaction() as cursor:
            cursor.execute(query, params or ())
            row = cursor.fetchone()
            return dict(row) if row else None

    def _write(self, query, params=()):
        """Execute a write and return (lastrowid, rowcount)."""
        with self._transaction() as cursor:
            cursor.execute(query, params or ())
            return cursor.lastrowid, cursor.rowcount

    def init_database(self):
        """Initialize the database schema."""
        with self._transaction() as cursor:
            self._create_tables(cursor)

    def _create_tables(self, cursor):
        # Organizations (a simple tree through parent_id)
        cursor.execute("""
            CREATE TABLE IF NOT EXISTS organizations (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                name TEXT NOT NULL,
                description TEXT,
                parent_id INTEGER,
                leader_name TEXT NOT NULL,
                leader_email TEXT NOT NULL,
                leader_phone TEXT,
                created_by TEXT NOT NULL DEFAULT 'admin',
                is_active INTEGER NOT NULL DEFAULT 1,
                created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
                updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
                FOREIGN KEY (parent_id) REFERENCES organizations(id)
            )
        """)

        # Assessments (one per team)
        cursor.execute("""
            CREATE TABLE IF NOT EXISTS assessments (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                team_name TEXT NOT NULL,
                member_count INTEGER NOT NULL,
                status TEXT NOT NULL DEFAULT 'ACTIVE',
                created_by TEXT NOT NULL DEFAULT 'admin',
                organization_id INTEGER,
                created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
                FOREIGN KEY (organization_id) REFERENCES organizations(id)
            )
        """)

        # Participant codes (one per team member, single use)
        cursor.execute("""
            CREATE TABLE IF NOT EXISTS participant_codes (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                assessment_id INTEGER NOT NULL,
                code TEXT UNIQUE NOT NULL,
                name TEXT,
                email TEXT,
                is_used INTEGER NOT NULL DEFAULT 0,
                responses TEXT,
                scores TEXT,
                submitted_at TIMESTAMP,
                email_sent INTEGER NOT NULL DEFAULT 0,
                FOREIGN KEY (assessment_id) REFERENCES assessments(id)
            )
        """)

        # Team reports (recomputed in place)
        cursor.execute("""
            CREATE TABLE IF NOT EXISTS team_reports (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                assessment_id INTEGER UNIQUE NOT NULL,
                team_score REAL NOT NULL,
                base_score REAL NOT NULL,
                consistency_factor REAL NOT NULL,
                penalty_factor REAL NOT NULL,
                standard_deviation REAL NOT NULL,
                dimension_scores TEXT NOT NULL,
                participation_count INTEGER NOT NULL,
                created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
                updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
                FOREIGN KEY (assessment_id) REFERENCES assessments(id)
            )
        """)

        # Organization summary reports (one per organization)
        cursor.execute("""
            CREATE TABLE IF NOT EXISTS summary_reports (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                organization_id INTEGER UNIQUE NOT NULL,
                leader_name TEXT NOT NULL,
                leader_email TEXT NOT NULL,
                total_teams INTEGER NOT NULL,
                completed_teams INTEGER NOT NULL,
                pending_teams INTEGER NOT NULL,
                average_team_score REAL NOT NULL,
                highest_score REAL NOT NULL,
                lowest_score REAL NOT NULL,
                score_std_dev REAL NOT NULL,
                dimension_averages TEXT NOT NULL,
                team_comparisons TEXT NOT NULL,
                insights TEXT NOT NULL,
                generated_by TEXT NOT NULL,
                email_sent INTEGER NOT NULL DEFAULT 0,
                email_sent_at TIMESTAMP,
                created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
                updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
                FOREIGN KEY (organization_id) REFERENCES organizations(id)
            )
        """)

        # Email log
        cursor.execute("""
            CREATE TABLE IF NOT EXISTS email_log (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                email_type TEXT NOT NULL,
                to_email TEXT NOT NULL,
                assessment_id INTEGER,
                organization_id INTEGER,
                code TEXT,
                success INTEGER NOT NULL,
                message TEXT,
                sent_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
            )
        """)

    # ==========================================
    # ASSESSMENT MANAGEMENT
    # ==========================================

    def generate_code(self):
        """Generate an 8-character participant code without look-alike characters."""
        return ''.join(secrets.choice(CODE_ALPHABET) for _ in range(CODE_LENGTH))

    def create_assessment(self, team_name, member_count, created_by='admin', organization_id=None):
        """
        Create an assessment with one unique code per team member.

        Returns:
            (assessment_id, codes)
        """
        if not team_name or not str(team_name).strip():
            raise ValueError("Team name is required")
        if isinstance(member_count, bool) or not isinstance(member_count, int) \
                or not MIN_TEAM_MEMBERS <= member_count <= MAX_TEAM_MEMBERS:
            raise ValueError(f"Member count must be between {MIN_TEAM_MEMBERS} and {MAX_TEAM_MEMBERS}")
        if organization_id is not None and self.get_organization(organization_id) is None:
            raise ValueError("Organization not found")

        with self._transaction() as cursor:
            cursor.execute("""
                INSERT INTO assessments (team_name, member_count, status, created_by, organization_id)
                VALUES (?, ?, ?, ?, ?)
            """, (team_name.strip(), member_count, STATUS_ACTIVE, created_by, organization_id))
            assessment_id = cursor.lastrowid

            codes = []
            while len(codes) < member_count:
                code = self.generate_code()
                cursor.execute("SELECT 1 FROM participant_codes WHERE code = ?", (code,))
                if cursor.fetchone() or code in codes:
                    continue
                cursor.execute("""
                    INSERT INTO participant_codes (assessment_id, code) VALUES (?, ?)
                """, (assessment_id, code))
                codes.append(code)

        logger.info("Created assessment %s for %s with %d codes", assessment_id, team_name, member_count)
        return assessment_id, codes

    def get_all_assessments(self, organization_id=None):
        """Get assessments with submission counts and team score, newest first."""
        query = """
            SELECT
                a.*,
                o.name as organization_name,
                (SELECT COUNT(*) FROM participant_codes c
                 WHERE c.assessment_id = a.id AND c.is_used = 1) as submitted_count,
                tr.team_score
            FROM assessments a
            LEFT JOIN organizations o ON a.organization_id = o.id
            LEFT JOIN team_reports tr ON tr.assessment_id = a.id
        """
        params = None
        if organization_id is not None:
            query += " WHERE a.organization_id = ?"
            params = (organization_id,)
        query += " ORDER BY a.created_at DESC, a.id DESC"

        assessments = self._fetchall(query, params)
        for assessment in assessments:
            score = assessment['team_score']
            assessment['health_grade'] = get_team_health_grade(score) if score is not None else None
        return assessments

    def get_assessment(self, assessment_id):
        """Get a specific assessment by ID."""
        return self._fetchone("""
            SELECT a.*,
                   (SELECT COUNT(*) FROM participant_codes c
                    WHERE c.assessment_id = a.id AND c.is_used = 1) as submitted_count
            FROM assessments a WHERE a.id = ?
        """, (assessment_id,))

    def update_assessment_status(self, assessment_id, status):
        if status not in ASSESSMENT_STATUSES:
            raise ValueError(f"Unknown status: {status}")
        _, rowcount = self._write(
            "UPDATE assessments SET status = ? WHERE id = ?", (status, assessment_id)
        )
        if rowcount == 0:
            raise ValueError("Assessment not found")

    def assign_assessment_to_organization(self, assessment_id, organization_id):
        """Move an assessment under an organization, or detach it with None."""
        if organization_id is not None and self.get_organization(organization_id) is None:
            raise ValueError("Organization not found")
        _, rowcount = self._write(
            "UPDATE assessments SET organization_id = ? WHERE id = ?",
            (organization_id, assessment_id),
        )
        if rowcount == 0:
            raise ValueError("Assessment not found")

    def get_codes_for_assessment(self, assessment_id):
        """All participant codes with their submission and parsed personal result."""
        rows = self._fetchall("""
            SELECT code, name, email, is_used, submitted_at, scores, email_sent
            FROM participant_codes
            WHERE assessment_id = ?
            ORDER BY id
        """, (assessment_id,))

        for row in rows:
            row['result'] = _loads(row.pop('scores'))
        return rows

    # ==========================================
    # PARTICIPANT FLOW
    # ==========================================

    def _get_code(self, code):
        return self._fetchone("""
            SELECT c.*, a.team_name, a.status as assessment_status
            FROM participant_codes c
            JOIN assessments a ON c.assessment_id = a.id
            WHERE c.code = ?
        """, (code,))

    def validate_code(self, code):
        """
        Check a participant code before showing the survey.

        Returns:
            Dict with assessment_id, team_name and already_used.

        Raises:
            ValueError: unknown code or assessment no longer active.
        """
        code = (code or '').strip().upper()
        record = self._get_code(code)
        if record is None:
            raise ValueError("Invalid code")
        if record['assessment_status'] != STATUS_ACTIVE:
            raise ValueError("This assessment is no longer active")

        return {
            'code': code,
            'assessment_id': record['assessment_id'],
            'team_name': record['team_name'],
            'already_used': bool(record['is_used']),
        }

    def submit_assessment(self, code, participant_name, participant_email, responses):
        """
        Score and store one participant's answers. A code can be used once.

        Returns:
            The personal result dict from scoring.score_responses().

        Raises:
            ValueError: missing participant details, invalid/used code or
                inactive assessment.
            IncompleteResponsesError: answers missing or out of range.
        """
        if not participant_name or not participant_email or not responses:
            raise ValueError("Participant name, email and responses are required")

        code = (code or '').strip().upper()
        record = self._get_code(code)
        if record is None:
            raise ValueError("Invalid code")
        if record['assessment_status'] != STATUS_ACTIVE:
            raise ValueError("This assessment is no longer active")
        if record['is_used']:
            raise ValueError("This code has already been used")

        result = score_responses(responses)

        # is_used = 0 in the WHERE clause keeps a second submit from overwriting
        _, rowcount = self._write("""
            UPDATE participant_codes
            SET is_used = 1, name = ?, email = ?, responses = ?, scores = ?, submitted_at = ?
            WHERE code = ? AND is_used = 0
        """, (
            participant_name.strip(), participant_email.strip(),
            json.dumps(responses), json.dumps(result), _now(), code,
        ))
        if rowcount == 0:
            raise ValueError("This code has already been used")

        logger.info("Submission stored for assessment %s", record['assessment_id'])
        return result

    def get_submitted_results(self, assessment_id):
        """Personal result dicts of every submitted code, in submission order."""
        rows = self._fetchall("""
            SELECT scores FROM participant_codes
            WHERE assessment_id = ? AND is_used = 1 AND scores IS NOT NULL
            ORDER BY submitted_at, id
        """, (assessment_id,))
        return [_loads(row['scores']) for row in rows]

    def get_personal_report(self, code):
        """
        Personal result side by side with the team report.

        Raises:
            ValueError: unknown code, code not yet used, or no team report.
        """
        code = (code or '').strip().upper()
        record = self._get_code(code)
        if record is None:
            raise ValueError("Invalid code")
        if not record['is_used']:
            raise ValueError("This assessment has not been completed yet")

        team_report = self.get_team_report(record['assessment_id'])
        if team_report is None:
            raise ValueError(
                "Team report not ready yet. Please wait for all team members to complete their assessments."
            )

        personal = _loads(record['scores'])
        return {
            'code': code,
            'participant_name': record['name'],
            'participant_email': record['email'],
            'team_name': record['team_name'],
            'assessment_id': record['assessment_id'],
            'submitted_at': record['submitted_at'],
            'personal_score': personal['personal_score'],
            'personal_grade': personal['grade'],
            'personal_dimensions': personal['dimension_scores'],
            'strengths': personal['strengths'],
            'growth_areas': personal['growth_areas'],
            'recommendations': personal['recommendations'],
            'team_score': team_report['team_score'],
            'team_grade': team_report['health_grade'],
            'team_dimensions': team_report['dimension_scores'],
            'participation_count': team_report['participation_count'],
            'comparison': compare_to_team(personal, team_report),
        }

    def mark_code_email_sent(self, code):
        self._write("UPDATE participant_codes SET email_sent = 1 WHERE code = ?", (code,))

    # ==========================================
    # TEAM REPORTS
    # ==========================================

    def calculate_team_report(self, assessment_id):
        """
        Recompute the team report from every submission and store it.

        Running it twice on the same submissions stores the same values.

        Raises:
            ValueError: unknown assessment.
            NoSubmissionsError: nobody has submitted yet.
        """
        if self.get_assessment(assessment_id) is None:
            raise ValueError("Assessment not found")

        report = build_team_report(self.get_submitted_results(assessment_id))

        self._write("""
            INSERT INTO team_reports (
                assessment_id, team_score, base_score, consistency_factor, penalty_factor,
                standard_deviation, dimension_scores, participation_count, updated_at
            ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
            ON CONFLICT(assessment_id) DO UPDATE SET
                team_score = excluded.team_score,
                base_score = excluded.base_score,
                consistency_factor = excluded.consistency_factor,
                penalty_factor = excluded.penalty_factor,
                standard_deviation = excluded.standard_deviation,
                dimension_scores = excluded.dimension_scores,
                participation_count = excluded.participation_count,
                updated_at = excluded.updated_at
        """, (
            assessment_id, report['team_score'], report['base_score'],
            report['consistency_factor'], report['penalty_factor'],
            report['standard_deviation'], json.dumps(report['dimension_scores']),
            report['participation_count'], _now(),
        ))

        logger.info(
            "Team report for assessment %s: %.1f (%d submissions)",
            assessment_id, report['team_score'], report['participation_count'],
        )
        return report

    def get_team_report(self, assessment_id):
        """Stored team report with parsed dimension scores and health grade, or None."""
        row = self._fetchone("SELECT * FROM team_reports WHERE assessment_id = ?", (assessment_id,))
        if row is None:
            return None
        row['dimension_scores'] = _loads(row['dimension_scores'])
        row['health_grade'] = get_team_health_grade(row['team_score'])
        return row

    # ==========================================
    # ORGANIZATION MANAGEMENT
    # ==========================================

    def create_organization(self, name, leader_name, leader_email, description=None,
                            parent_id=None, leader_phone=None, created_by='admin'):
        """Add a new organization, optionally under an active parent."""
        if not name or not leader_name or not leader_email:
            raise ValueError("Name, leader name and leader email are required")
        if not is_valid_email(leader_email):
            raise ValueError("Invalid email address")

        if parent_id is not None:
            parent = self.get_organization(parent_id)
            if parent is None:
                raise ValueError("Parent organization not found")
            if not parent['is_active']:
                raise ValueError("Parent organization is inactive; cannot add a child organization")

        organization_id, _ = self._write("""
            INSERT INTO organizations (name, description, parent_id, leader_name, leader_email,
                                       leader_phone, created_by)
            VALUES (?, ?, ?, ?, ?, ?, ?)
        """, (name, description or None, parent_id, leader_name, leader_email,
              leader_phone or None, created_by))

        logger.info("Created organization %s (%s)", organization_id, name)
        return organization_id

    def get_organization(self, organization_id):
        """Get a specific organization by ID."""
        return self._fetchone("SELECT * FROM organizations WHERE id = ?", (organization_id,))

    def get_all_organizations(self, include_inactive=False):
        """Flat organization list with assessment and child counts, newest first."""
        query = """
            SELECT
                o.*,
                (SELECT COUNT(*) FROM assessments a WHERE a.organization_id = o.id) as assessment_count,
                (SELECT COUNT(*) FROM assessments a
                 JOIN team_reports tr ON tr.assessment_id = a.id
                 WHERE a.organization_id = o.id) as completed_assessment_count,
                (SELECT COUNT(*) FROM organizations c WHERE c.parent_id = o.id) as children_count
            FROM organizations o
        """
        if not include_inactive:
            query += " WHERE o.is_active = 1"
        query += " ORDER BY o.created_at DESC, o.id DESC"
        return self._fetchall(query)

    def get_organization_tree(self, include_inactive=False):
        return build_organization_tree(self.get_all_organizations(include_inactive))

    def get_organization_details(self, organization_id):
        """Organization with parent, children, assessments and summary statistics."""
        organization = self.get_organization(organization_id)
        if organization is None:
            return None

        parent_id = organization['parent_id']
        organization['parent'] = self.get_organization(parent_id) if parent_id is not None else None
        organization['children'] = self._fetchall(
            "SELECT * FROM organizations WHERE parent_id = ? ORDER BY name", (organization_id,)
        )
        assessments = self.get_all_assessments(organization_id)
        organization['assessments'] = assessments

        completed = [a for a in assessments if a['team_score'] is not None]
        organization['stats'] = {
            'total_assessments': len(assessments),
            'completed_assessments': len(completed),
            'pending_assessments': len(assessments) - len(completed),
            'total_participants': sum(a['member_count'] for a in assessments),
            'completed_participants': sum(a['submitted_count'] for a in assessments),
            'children_count': len(organization['children']),
            'has_latest_report': self.get_summary_report(organization_id) is not None,
        }
        return organization

    def _active_children_count(self, organization_id):
        row = self._fetchone(
            "SELECT COUNT(*) as n FROM organizations WHERE parent_id = ? AND is_active = 1",
            (organization_id,),
        )
        return row['n']

    def update_organization(self, organization_id, **kwargs):
        """Update organization details, enforcing the tree rules."""
        organization = self.get_organization(organization_id)
        if organization is None:
            raise ValueError("Organization not found")

        valid_fields = ['name', 'description', 'parent_id', 'leader_name', 'leader_email',
                        'leader_phone', 'is_active']
        updates = {k: v for k, v in kwargs.items() if k in valid_fields}

        if 'leader_email' in updates and not is_valid_email(updates['leader_email']):
            raise ValueError("Invalid email address")

        if updates.get('parent_id') is not None:
            parent_id = updates['parent_id']
            if parent_id == organization_id:
                raise ValueError("An organization cannot be its own parent")
            parent = self.get_organization(parent_id)
            if parent is None:
                raise ValueError("New parent organization not found")
            # Walk up from the new parent; meeting this organization means a cycle
            while parent['parent_id'] is not None:
                if parent['parent_id'] == organization_id:
                    raise ValueError("This change would create a cycle in the organization tree")
                parent = self.get_organization(parent['parent_id'])
                if parent is None:
                    break

        if 'is_active' in updates:
            updates['is_active'] = 1 if updates['is_active'] else 0
            if not updates['is_active'] and organization['is_active']:
                active_children = self._active_children_count(organization_id)
                if active_children > 0:
                    raise ValueError(
                        f"Cannot deactivate: deactivate or move {active_children} active child organization(s) first"
                    )

        if updates:
            updates['updated_at'] = _now()
            set_clause = ", ".join([f"{k} = ?" for k in updates.keys()])
            values = tuple(list(updates.values()) + [organization_id])
            self._write(f"UPDATE organizations SET {set_clause} WHERE id = ?", values)

        return self.get_organization(organization_id)

    def delete_organization(self, organization_id, hard_delete=False):
        """
        Soft delete (deactivate) an organization, or remove it for good.

        Returns:
            'soft' or 'hard'.
        """
        organization = self.get_organization(organization_id)
        if organization is None:
            raise ValueError("Organization not found")

        active_children = self._active_children_count(organization_id)
        if active_children > 0:
            raise ValueError(
                f"Cannot delete: remove or move {active_children} child organization(s) first"
            )

        if not hard_delete:
            self._write(
                "UPDATE organizations SET is_active = 0, updated_at = ? WHERE id = ?",
                (_now(), organization_id),
            )
            logger.info("Organization %s deactivated", organization_id)
            return 'soft'

        assessment_count = self._fetchone(
            "SELECT COUNT(*) as n FROM assessments WHERE organization_id = ?", (organization_id,)
        )['n']
        if assessment_count > 0:
            raise ValueError(
                f"Cannot permanently delete: the organization has {assessment_count} assessment(s). "
                "Move them or use a soft delete."
            )
        child_count = self._fetchone(
            "SELECT COUNT(*) as n FROM organizations WHERE parent_id = ?", (organization_id,)
        )['n']
        if child_count > 0:
            raise ValueError(
                f"Cannot permanently delete: {child_count} inactive child organization(s) still reference it"
            )

        with self._transaction() as cursor:
            cursor.execute("DELETE FROM summary_reports WHERE organization_id = ?", (organization_id,))
            cursor.execute("DELETE FROM organizations WHERE id = ?", (organization_id,))

        logger.info("Organization %s permanently deleted", organization_id)
        return 'hard'

    def get_organization_ancestors(self, organization_id):
        """The organization and its ancestors, root first (for breadcrumbs)."""
        ancestors = []
        current_id = organization_id
        while current_id is not None:
            org = self._fetchone(
                "SELECT id, name, parent_id FROM organizations WHERE id = ?", (current_id,)
            )
            if org is None:
                break
            ancestors.insert(0, org)
            current_id = org['parent_id']
        return ancestors

    # ==========================================
    # SUMMARY REPORTS
    # ==========================================

    def get_assessments_for_summary(self, organization_id):
        """Assessments under an organization with participation and team report."""
        assessments = self._fetchall("""
            SELECT
                a.id, a.team_name, a.member_count, a.status, a.created_at,
                (SELECT COUNT(*) FROM participant_codes c
                 WHERE c.assessment_id = a.id AND c.is_used = 1) as participation_count
            FROM assessments a
            WHERE a.organization_id = ?
            ORDER BY a.created_at, a.id
        """, (organization_id,))

        for assessment in assessments:
            assessment['team_report'] = self.get_team_report(assessment['id'])
        return assessments

    def save_summary_report(self, organization_id, leader_name, leader_email, report, generated_by='admin'):
        """Insert or replace the organization's summary; resets the email-sent flag."""
        self._write("""
            INSERT INTO summary_reports (
                organization_id, leader_name, leader_email, total_teams, completed_teams,
                pending_teams, average_team_score, highest_score, lowest_score, score_std_dev,
                dimension_averages, team_comparisons, insights, generated_by,
                email_sent, email_sent_at, updated_at
            ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, 0, NULL, ?)
            ON CONFLICT(organization_id) DO UPDATE SET
                leader_name = excluded.leader_name,
                leader_email = excluded.leader_email,
                total_teams = excluded.total_teams,
                completed_teams = excluded.completed_teams,
                pending_teams = excluded.pending_teams,
                average_team_score = excluded.average_team_score,
                highest_score = excluded.highest_score,
                lowest_score = excluded.lowest_score,
                score_std_dev = excluded.score_std_dev,
                dimension_averages = excluded.dimension_averages,
                team_comparisons = excluded.team_comparisons,
                insights = excluded.insights,
                generated_by = excluded.generated_by,
                email_sent = 0,
                email_sent_at = NULL,
                updated_at = excluded.updated_at
        """, (
            organization_id, leader_name, leader_email,
            report['total_teams'], report['completed_teams'], report['pending_teams'],
            report['average_team_score'], report['highest_score'], report['lowest_score'],
            report['score_std_dev'], json.dumps(report['dimension_averages']),
            json.dumps(report['team_comparisons']), json.dumps(report['insights']),
            generated_by, _now(),
        ))

    def get_summary_report(self, organization_id):
        """Stored summary with its JSON fields parsed, or None."""
        row = self._fetchone(
            "SELECT * FROM summary_reports WHERE organization_id = ?", (organization_id,)
        )
        if row is None:
            return None
        for field in ('dimension_averages', 'team_comparisons', 'insights'):
            row[field] = _loads(row[field])
        row['email_sent'] = bool(row['email_sent'])
        return row

    def delete_summary_report(self, organization_id):
        """Returns True when a summary existed."""
        _, rowcount = self._write(
            "DELETE FROM summary_reports WHERE organization_id = ?", (organization_id,)
        )
        return rowcount > 0

    def mark_summary_email_sent(self, organization_id):
        self._write("""
            UPDATE summary_reports SET email_sent = 1, email_sent_at = ?
            WHERE organization_id = ?
        """, (_now(), organization_id))

    # ==========================================
    # EMAIL LOG
    # ==========================================

    def log_email(self, email_type, to_email, success, message,
                  assessment_id=None, organization_id=None, code=None):
        """Record one send attempt."""
        self._write("""
            INSERT INTO email_log (email_type, to_email, assessment_id, organization_id, code,
                                   success, message)
            VALUES (?, ?, ?, ?, ?, ?, ?)
        """, (email_type, to_email, assessment_id, organization_id, code,
              1 if success else 0, message))

    def get_email_log(self, limit=100):
        return self._fetchall(
            "SELECT * FROM email_log ORDER BY sent_at DESC, id DESC LIMIT ?", (limit,)
        )

    # ==========================================
    # STATISTICS
    # ==========================================

    def get_dashboard_stats(self):
        """Get overall statistics for the admin dashboard."""
        return self._fetchone("""
            SELECT
                (SELECT COUNT(*) FROM assessments) as total_assessments,
                (SELECT COUNT(*) FROM assessments WHERE status = 'ACTIVE') as active_assessments,
                (SELECT COUNT(*) FROM participant_codes) as total_codes,
                (SELECT COUNT(*) FROM participant_codes WHERE is_used = 1) as completed_responses,
                (SELECT COUNT(*) FROM team_reports) as team_reports,
                (SELECT COUNT(*) FROM organizations WHERE is_active = 1) as active_organizations
        """)

    def get_connection_info(self):
        """Return info about the current database connection."""
        return {
            'type': 'Local SQLite',
            'path': self.db_path,
            'status': 'Connected',
        }
