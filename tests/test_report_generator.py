"""Tests for Word documents, charts and table exports."""
import io
import json
import os

import pandas as pd
import pytest
from docx import Document

from framework import ALL_DIMENSIONS, DIMENSION_NAMES, ROLLUP_DIMENSIONS
from personalization import determine_team_position
from report_generator import (
    create_radar_chart,
    create_team_comparison_chart,
    create_trust_matrix_chart,
    export_participants_csv,
    export_summary_csv,
    export_summary_json,
    generate_summary_report_document,
    generate_team_report,
    participants_to_dataframe,
    summary_to_dataframe,
)
from summary_report import generate_summary_report


def _document_text(path):
    return '\n'.join(p.text for p in Document(path).paragraphs)


@pytest.fixture
def team(db, organization_id, responses):
    assessment_id, codes = db.create_assessment("Product & Design", 3, organization_id=organization_id)
    db.submit_assessment(codes[0], "Pat Doe", "pat@example.com", responses(4, Q22=2))
    db.submit_assessment(codes[1], "Sam Roe", "sam@example.com", responses(5, Q22=1))
    db.calculate_team_report(assessment_id)
    return assessment_id, codes


@pytest.fixture
def summary(db, organization_id, team):
    generate_summary_report(db, organization_id)
    return db.get_summary_report(organization_id)


class TestCharts:
    def test_radar_chart(self, tmp_path):
        path = tmp_path / 'radar.png'
        create_radar_chart({d: 70 for d in ALL_DIMENSIONS}, path,
                           comparison_scores={d: 85 for d in ALL_DIMENSIONS})
        assert path.exists()
        assert path.stat().st_size > 0

    def test_trust_matrix_chart(self, tmp_path):
        path = tmp_path / 'matrix.png'
        create_trust_matrix_chart(determine_team_position({d: 65 for d in ALL_DIMENSIONS}), path)
        assert path.exists()

    def test_team_comparison_chart(self, tmp_path, summary):
        path = tmp_path / 'teams.png'
        create_team_comparison_chart(summary['team_comparisons'], path)
        assert path.exists()


class TestTeamReportDocument:
    def test_writes_docx(self, db, team, tmp_path):
        assessment_id, _ = team
        path = generate_team_report(db, assessment_id, output_dir=tmp_path / 'out')

        assert os.path.exists(path)
        assert os.path.basename(path).startswith("Product___Design_Team_Report_")
        assert path.endswith('.docx')
        text = _document_text(path)
        assert "Product & Design" in text
        assert "2 of 3 members responded" in text

    def test_requires_team_report(self, db, tmp_path):
        assessment_id, _ = db.create_assessment("Empty", 2)
        with pytest.raises(ValueError, match="Team report not generated yet"):
            generate_team_report(db, assessment_id, output_dir=tmp_path)

    def test_unknown_assessment(self, db, tmp_path):
        with pytest.raises(ValueError, match="Assessment not found"):
            generate_team_report(db, 404, output_dir=tmp_path)


class TestSummaryDocument:
    def test_writes_docx(self, db, organization_id, summary, tmp_path):
        path = generate_summary_report_document(db, organization_id, output_dir=tmp_path)
        text = _document_text(path)
        assert "Acme Corp" in text
        assert "Prepared for Jane Leader" in text

    def test_requires_summary(self, db, organization_id, tmp_path):
        with pytest.raises(ValueError, match="No summary report yet"):
            generate_summary_report_document(db, organization_id, output_dir=tmp_path)


class TestSummaryExports:
    def test_dataframe_columns(self, summary):
        frame = summary_to_dataframe(summary)
        assert list(frame.columns) == [
            'Rank', 'Team', 'Score', 'Grade', 'Participation Count', 'Members', 'Participation %',
        ] + [DIMENSION_NAMES[d] for d in ROLLUP_DIMENSIONS]
        assert DIMENSION_NAMES['warning_signs'] not in frame.columns

        row = frame.iloc[0]
        assert row['Rank'] == 1
        assert row['Team'] == "Product & Design"
        assert row['Participation Count'] == 2
        assert row['Members'] == 3
        assert row['Participation %'] == 67

    def test_csv(self, summary):
        frame = pd.read_csv(io.StringIO(export_summary_csv(summary)))
        assert len(frame) == 1
        assert frame.loc[0, 'Team'] == "Product & Design"

    def test_json(self, summary):
        data = json.loads(export_summary_json(summary))
        assert data['completed_teams'] == 1
        assert data['team_comparisons'][0]['team_name'] == "Product & Design"


class TestParticipantExports:
    def test_submitted_and_pending_rows(self, db, team):
        assessment_id, codes = team
        frame = participants_to_dataframe(db.get_codes_for_assessment(assessment_id))

        assert list(frame['Code']) == codes
        assert list(frame['Status']) == ['Submitted', 'Submitted', 'Pending']
        assert frame.loc[0, 'Name'] == "Pat Doe"
        assert frame.loc[0, DIMENSION_NAMES['appreciation']] == 80.0
        assert frame.loc[1, 'Personal Score'] == 100.0
        assert frame.loc[2, 'Name'] == ''
        assert pd.isna(frame.loc[2, 'Personal Score'])

    def test_csv_header(self, db, team):
        assessment_id, _ = team
        header = export_participants_csv(db.get_codes_for_assessment(assessment_id)).splitlines()[0]
        assert header.startswith("Code,Status,Name,Email,Submitted At,Personal Score,Grade,")
