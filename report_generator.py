#!/usr/bin/env python3
"""
Report generator for the Team Effectiveness Assessment.

Word documents (team report, organization summary) with matplotlib charts,
and CSV/JSON exports of summaries and participant results.
"""

import json
import logging
import os
import tempfile
from datetime import datetime
from pathlib import Path

import numpy as np
import pandas as pd
from docx import Document
from docx.shared import Inches, Pt, RGBColor
from docx.enum.text import WD_ALIGN_PARAGRAPH
from docx.oxml.ns import qn, nsdecls
from docx.oxml import OxmlElement, parse_xml
import matplotlib
matplotlib.use('Agg')
import matplotlib.pyplot as plt

from framework import (
    ALL_DIMENSIONS, ROLLUP_DIMENSIONS, DIMENSION_NAMES, DIMENSION_DESCRIPTIONS,
    COLOURS, QUADRANT_COLOURS, TRUST_MATRIX_THRESHOLD,
)
from personalization import (
    THRIVING_TEAM, SOLID_FOUNDATION, TRUST_EROSION, GRIDLOCK,
    generate_personalization_data, get_quadrant_display_name, get_quadrant_emoji,
)
from scoring import round_half_up

logger = logging.getLogger(__name__)


REPORTS_DIR = Path("reports")

HEADER_FILL = '1F4E79'
GREY = RGBColor(0x99, 0x99, 0x99)
BRAND = RGBColor(0x1F, 0x4E, 0x79)

DOCX_MIME = "application/vnd.openxmlformats-officedocument.wordprocessingml.document"


def set_cell_shading(cell, color):
    """Set background colour of a table cell."""
    shading = OxmlElement('w:shd')
    shading.set(qn('w:fill'), color)
    cell._tc.get_or_add_tcPr().append(shading)


def add_section_heading(doc, text, font_size=18):
    """Add a major section heading with larger font."""
    heading = doc.add_heading(text, level=1)
    for run in heading.runs:
        run.font.size = Pt(font_size)
    return heading


def _add_thin_rule(doc, colour='CCCCCC'):
    """Add a thin horizontal rule (bottom border on an empty paragraph)."""
    p = doc.add_paragraph()
    p.paragraph_format.space_before = Pt(2)
    p.paragraph_format.space_after = Pt(2)
    pPr = p._element.get_or_add_pPr()
    pBdr = parse_xml(
        f'<w:pBdr {nsdecls("w")}>'
        f'  <w:bottom w:val="single" w:sz="4" w:space="1" w:color="{colour}"/>'
        f'</w:pBdr>'
    )
    pPr.append(pBdr)


def _add_field(para, instruction):
    """Append a Word field (PAGE, NUMPAGES...) to a paragraph."""
    for kind, text in (('begin', None), ('instr', instruction), ('separate', None), ('end', None)):
        run = para.add_run()
        if kind == 'instr':
            element = OxmlElement('w:instrText')
            element.set(qn('xml:space'), 'preserve')
            element.text = f' {text} '
        else:
            element = OxmlElement('w:fldChar')
            element.set(qn('w:fldCharType'), kind)
        run._r.append(element)
        if kind == 'separate':
            placeholder = para.add_run("1")
            placeholder.font.size = Pt(8)
            placeholder.font.color.rgb = GREY


def _add_page_number_footer(section):
    """Add 'Page X of Y' footer to a document section, centre-aligned."""
    footer = section.footer
    footer.is_linked_to_previous = False
    para = footer.paragraphs[0]
    para.alignment = WD_ALIGN_PARAGRAPH.CENTER

    for label, field in (("Page ", 'PAGE'), (" of ", 'NUMPAGES')):
        run = para.add_run(label)
        run.font.size = Pt(8)
        run.font.color.rgb = GREY
        _add_field(para, field)


def _add_header_row(table, headers, widths=None):
    cells = table.rows[0].cells
    for i, text in enumerate(headers):
        cells[i].text = text
        if widths:
            cells[i].width = widths[i]
        set_cell_shading(cells[i], HEADER_FILL)
        run = cells[i].paragraphs[0].runs[0]
        run.font.color.rgb = RGBColor(255, 255, 255)
        run.bold = True
        run.font.size = Pt(10)


def _add_row(table, values, widths=None, centre_from=1):
    row = table.add_row().cells
    for i, value in enumerate(values):
        row[i].text = str(value)
        if widths:
            row[i].width = widths[i]
        if i >= centre_from:
            row[i].paragraphs[0].alignment = WD_ALIGN_PARAGRAPH.CENTER
    return row


def _add_bullets(doc, items):
    for item in items:
        doc.add_paragraph(item, style='List Bullet')


def _add_picture(doc, draw, width):
    """Render a chart with draw(path) and embed it centred."""
    with tempfile.NamedTemporaryFile(suffix='.png', delete=False) as tmp:
        path = tmp.name
    try:
        draw(path)
        para = doc.add_paragraph()
        para.alignment = WD_ALIGN_PARAGRAPH.CENTER
        para.add_run().add_picture(path, width=width)
    finally:
        os.unlink(path)


# ============================================
# CHARTS
# ============================================

def create_radar_chart(scores, output_path, comparison_scores=None,
                       label='Team', comparison_label='Personal'):
    """Radar chart of the seven dimensions on a 0-100 scale, clockwise from the top."""
    labels = [DIMENSION_NAMES[d] for d in ALL_DIMENSIONS]
    num_vars = len(labels)

    angles = np.linspace(0, 2 * np.pi, num_vars, endpoint=False).tolist()
    angles += angles[:1]

    fig, ax = plt.subplots(figsize=(10, 10), subplot_kw=dict(polar=True))
    ax.set_theta_offset(np.pi / 2)
    ax.set_theta_direction(-1)

    ax.set_facecolor('white')
    ax.spines['polar'].set_color('#999999')
    ax.spines['polar'].set_linewidth(1.5)
    ax.grid(color='#999999', linestyle='-', linewidth=1, alpha=0.8)

    values = [scores.get(d, 0) or 0 for d in ALL_DIMENSIONS]
    values += values[:1]
    ax.plot(angles, values, 'o-', linewidth=3, label=label,
            color=COLOURS['primary_blue'], markersize=9)
    ax.fill(angles, values, alpha=0.25, color=COLOURS['primary_blue'])

    if comparison_scores:
        other = [comparison_scores.get(d, 0) or 0 for d in ALL_DIMENSIONS]
        other += other[:1]
        ax.plot(angles, other, 'o-', linewidth=3, label=comparison_label,
                color=COLOURS['orange'], markersize=9)
        ax.fill(angles, other, alpha=0.2, color=COLOURS['orange'])

    ax.set_ylim(0, 100)
    ax.set_yticks([20, 40, 60, 80, 100])
    ax.set_yticklabels(['20', '40', '60', '80', '100'], size=12, color='#333333')
    ax.set_rlabel_position(30)

    ax.set_xticks(angles[:-1])
    ax.set_xticklabels(labels, size=13, fontweight='bold', color='#333333')
    ax.tick_params(axis='x', pad=30)

    if comparison_scores:
        ax.legend(loc='lower center', bbox_to_anchor=(0.5, -0.15),
                  ncol=2, fontsize=13, frameon=False)

    plt.tight_layout()
    plt.savefig(output_path, dpi=150, bbox_inches='tight', facecolor='white', pad_inches=0.3)
    plt.close(fig)


# (quadrant, x range, y range) with Bids on x and EBA on y
_QUADRANT_AREAS = [
    (GRIDLOCK, (0, TRUST_MATRIX_THRESHOLD), (0, TRUST_MATRIX_THRESHOLD)),
    (TRUST_EROSION, (TRUST_MATRIX_THRESHOLD, 100), (0, TRUST_MATRIX_THRESHOLD)),
    (SOLID_FOUNDATION, (0, TRUST_MATRIX_THRESHOLD), (TRUST_MATRIX_THRESHOLD, 100)),
    (THRIVING_TEAM, (TRUST_MATRIX_THRESHOLD, 100), (TRUST_MATRIX_THRESHOLD, 100)),
]


def create_trust_matrix_chart(team_position, output_path):
    """Trust Matrix with the team plotted at (Bids, EBA)."""
    fig, ax = plt.subplots(figsize=(8, 8))

    for quadrant, (x0, x1), (y0, y1) in _QUADRANT_AREAS:
        colour = QUADRANT_COLOURS[quadrant]
        ax.fill_between([x0, x1], y0, y1, color=colour, alpha=0.12)
        ax.text((x0 + x1) / 2, y1 - 4, get_quadrant_display_name(quadrant),
                ha='center', va='top', fontsize=13, fontweight='bold', color=colour)

    ax.axhline(TRUST_MATRIX_THRESHOLD, color='#666666', linewidth=1.2, linestyle='--')
    ax.axvline(TRUST_MATRIX_THRESHOLD, color='#666666', linewidth=1.2, linestyle='--')

    bids = team_position['bids_score']
    eba = team_position['eba_score']
    ax.scatter([bids], [eba], s=260, color=QUADRANT_COLOURS[team_position['quadrant']],
               edgecolors='black', linewidths=1.5, zorder=5)
    ax.annotate(f"EBA {eba:.1f} / Bids {bids:.1f}", (bids, eba),
                textcoords='offset points', xytext=(0, -22), ha='center', fontsize=11)

    ax.set_xlim(0, 100)
    ax.set_ylim(0, 100)
    ax.set_xlabel("Bids for Connection", fontsize=13, fontweight='bold')
    ax.set_ylabel("Emotional Bank Account", fontsize=13, fontweight='bold')
    for spine in ('top', 'right'):
        ax.spines[spine].set_visible(False)

    plt.tight_layout()
    plt.savefig(output_path, dpi=150, bbox_inches='tight', facecolor='white')
    plt.close(fig)


def create_team_comparison_chart(team_comparisons, output_path):
    """Horizontal bar chart of team scores, best team on top."""
    teams = list(reversed(team_comparisons))
    names = [t['team_name'] for t in teams]
    scores = [t['team_score'] for t in teams]

    fig, ax = plt.subplots(figsize=(8, max(2.0, len(teams) * 0.5)))
    bars = ax.barh(names, scores, color=COLOURS['primary_blue'], height=0.6)
    for bar, score in zip(bars, scores):
        ax.text(bar.get_width() + 1, bar.get_y() + bar.get_height() / 2,
                f"{score:.1f}", va='center', fontsize=10)

    ax.set_xlim(0, 105)
    ax.set_xlabel("Team score")
    for spine in ('top', 'right'):
        ax.spines[spine].set_visible(False)

    plt.tight_layout()
    plt.savefig(output_path, dpi=150, bbox_inches='tight', facecolor='white')
    plt.close(fig)


# ============================================
# DOCUMENT SECTIONS
# ============================================

def create_cover_page(doc, title_text, subject, detail=None):
    """Create the cover page, then start a new section with page numbers."""
    for _ in range(6):
        doc.add_paragraph()

    title = doc.add_paragraph()
    title.alignment = WD_ALIGN_PARAGRAPH.CENTER
    run = title.add_run("TEAM EFFECTIVENESS ASSESSMENT")
    run.bold = True
    run.font.size = Pt(26)
    run.font.color.rgb = BRAND

    subtitle = doc.add_paragraph()
    subtitle.alignment = WD_ALIGN_PARAGRAPH.CENTER
    run = subtitle.add_run(title_text)
    run.font.size = Pt(18)
    run.font.color.rgb = RGBColor(0x66, 0x66, 0x66)

    doc.add_paragraph()

    name_para = doc.add_paragraph()
    name_para.alignment = WD_ALIGN_PARAGRAPH.CENTER
    run = name_para.add_run(subject)
    run.bold = True
    run.font.size = Pt(24)
    run.font.color.rgb = BRAND

    if detail:
        detail_para = doc.add_paragraph()
        detail_para.alignment = WD_ALIGN_PARAGRAPH.CENTER
        run = detail_para.add_run(detail)
        run.font.size = Pt(13)
        run.font.color.rgb = GREY

    doc.add_paragraph()
    date_para = doc.add_paragraph()
    date_para.alignment = WD_ALIGN_PARAGRAPH.CENTER
    run = date_para.add_run(datetime.now().strftime("%B %Y"))
    run.font.size = Pt(12)
    run.font.color.rgb = GREY

    first_section = doc.sections[0]
    footer = first_section.footer
    footer.is_linked_to_previous = False
    for p in footer.paragraphs:
        p.text = ""

    new_section = doc.add_section()
    new_section.start_type = 2  # new page
    new_section.page_width = first_section.page_width
    new_section.page_height = first_section.page_height
    new_section.left_margin = first_section.left_margin
    new_section.right_margin = first_section.right_margin
    new_section.top_margin = first_section.top_margin
    new_section.bottom_margin = first_section.bottom_margin

    _add_page_number_footer(new_section)


def add_score_breakdown(doc, team_report):
    """Team score and the factors behind it."""
    add_section_heading(doc, "Team Score", font_size=16)

    doc.add_paragraph(
        "The team score starts from the average personal score. It is reduced when scores "
        "are spread widely across the team (consistency factor) and when more than 30% of "
        "members report frequent warning signs (penalty factor)."
    )

    widths = [Inches(4.1), Inches(2.0)]
    table = doc.add_table(rows=1, cols=2)
    table.style = 'Table Grid'
    table.autofit = False
    _add_header_row(table, ["Measure", "Value"], widths)

    rows = [
        ("Team score", f"{team_report['team_score']:.1f}"),
        ("Health grade", team_report['health_grade']),
        ("Average personal score", f"{team_report['base_score']:.1f}"),
        ("Standard deviation", f"{team_report['standard_deviation']:.1f}"),
        ("Consistency factor", f"{team_report['consistency_factor']:.2f}"),
        ("Penalty factor", f"{team_report['penalty_factor']:.2f}"),
        ("Responses", str(team_report['participation_count'])),
    ]
    for label, value in rows:
        _add_row(table, (label, value), widths)


def add_dimension_overview(doc, dimension_scores):
    """Dimension table plus radar chart."""
    heading = add_section_heading(doc, "Dimension Overview", font_size=16)
    heading.paragraph_format.page_break_before = True

    widths = [Inches(2.2), Inches(1.0), Inches(2.9)]
    table = doc.add_table(rows=1, cols=3)
    table.style = 'Table Grid'
    table.autofit = False
    _add_header_row(table, ["Dimension", "Score", "What it measures"], widths)

    for dimension in ALL_DIMENSIONS:
        row = _add_row(
            table,
            (DIMENSION_NAMES[dimension], f"{dimension_scores[dimension]:.1f}",
             DIMENSION_DESCRIPTIONS[dimension]),
            widths,
        )
        row[2].paragraphs[0].alignment = WD_ALIGN_PARAGRAPH.LEFT
        for run in row[2].paragraphs[0].runs:
            run.font.size = Pt(9)

    _add_thin_rule(doc)
    _add_picture(doc, lambda path: create_radar_chart(dimension_scores, path), Inches(4.5))


def add_trust_matrix_section(doc, personalization):
    """Team position, priority areas and the recommendation bundle."""
    position = personalization['team_position']
    quadrant = position['quadrant']

    heading = add_section_heading(doc, "Trust Matrix", font_size=16)
    heading.paragraph_format.page_break_before = True

    para = doc.add_paragraph()
    run = para.add_run(f"{get_quadrant_emoji(quadrant)} {get_quadrant_display_name(quadrant)}")
    run.bold = True
    run.font.size = Pt(14)
    run.font.color.rgb = RGBColor.from_string(QUADRANT_COLOURS[quadrant].lstrip('#'))

    doc.add_paragraph(position['interpretation'])
    next_step = doc.add_paragraph()
    next_step.add_run("Next step: ").bold = True
    next_step.add_run(position['next_step'])

    _add_picture(doc, lambda path: create_trust_matrix_chart(position, path), Inches(4.0))

    add_section_heading(doc, "Priority Areas", font_size=14)
    widths = [Inches(0.5), Inches(1.6), Inches(0.7), Inches(1.6), Inches(1.7)]
    table = doc.add_table(rows=1, cols=5)
    table.style = 'Table Grid'
    table.autofit = False
    _add_header_row(table, ["#", "Dimension", "Score", "Current issue", "Recommended action"], widths)
    for area in personalization['priority_areas']:
        row = _add_row(
            table,
            (area['rank'], area['display_name'], f"{area['score']:.1f}",
             area['current_issue'], area['recommended_action']),
            widths,
        )
        for cell in row[3:]:
            cell.paragraphs[0].alignment = WD_ALIGN_PARAGRAPH.LEFT

    recommendations = personalization['recommendations']
    sections = [
        ("Immediate actions", recommendations['immediate']),
        ("Next 1-3 months", recommendations['short_term']),
        ("Longer term", recommendations['long_term']),
        ("Keep doing", recommendations['maintenance_actions']),
    ]
    add_section_heading(doc, "Recommendations", font_size=14)
    for title, items in sections:
        if not items:
            continue
        sub = doc.add_paragraph()
        sub_run = sub.add_run(title)
        sub_run.bold = True
        sub_run.font.color.rgb = BRAND
        _add_bullets(doc, items)


def _output_path(output_dir, name, label):
    output_dir = Path(output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)
    safe_name = ''.join(c if c.isalnum() else '_' for c in name).strip('_') or 'report'
    filename = f"{safe_name}_{label}_{datetime.now().strftime('%Y%m%d')}.docx"
    return output_dir / filename


def generate_team_report_document(assessment, team_report, output_dir=REPORTS_DIR):
    """
    Build the Word team report.

    Args:
        assessment: Assessment dict (team_name, member_count)
        team_report: Team report dict as stored by Database.calculate_team_report()

    Returns:
        Path to generated report file
    """
    doc = Document()
    create_cover_page(
        doc, "Team Report", assessment['team_name'],
        f"{team_report['participation_count']} of {assessment['member_count']} members responded",
    )

    add_score_breakdown(doc, team_report)
    add_dimension_overview(doc, team_report['dimension_scores'])
    add_trust_matrix_section(doc, generate_personalization_data(team_report['dimension_scores']))

    output_path = _output_path(output_dir, assessment['team_name'], 'Team_Report')
    doc.save(output_path)
    logger.info("Team report written to %s", output_path)
    return str(output_path)


def generate_team_report(db, assessment_id, output_dir=REPORTS_DIR):
    """Load an assessment and its team report, then build the document."""
    assessment = db.get_assessment(assessment_id)
    if assessment is None:
        raise ValueError("Assessment not found")
    team_report = db.get_team_report(assessment_id)
    if team_report is None:
        raise ValueError("Team report not generated yet. Please calculate first.")
    return generate_team_report_document(assessment, team_report, output_dir)


def add_summary_statistics(doc, summary):
    add_section_heading(doc, "Overview", font_size=16)
    doc.add_paragraph(summary['insights'].get('summary', ''))

    widths = [Inches(4.1), Inches(2.0)]
    table = doc.add_table(rows=1, cols=2)
    table.style = 'Table Grid'
    table.autofit = False
    _add_header_row(table, ["Measure", "Value"], widths)
    rows = [
        ("Teams", summary['total_teams']),
        ("Completed", summary['completed_teams']),
        ("Pending", summary['pending_teams']),
        ("Average team score", f"{summary['average_team_score']:.2f}"),
        ("Highest score", f"{summary['highest_score']:.1f}"),
        ("Lowest score", f"{summary['lowest_score']:.1f}"),
        ("Standard deviation", f"{summary['score_std_dev']:.2f}"),
    ]
    for label, value in rows:
        _add_row(table, (label, value), widths)

    add_section_heading(doc, "Dimension Averages", font_size=14)
    table = doc.add_table(rows=1, cols=2)
    table.style = 'Table Grid'
    table.autofit = False
    _add_header_row(table, ["Dimension", "Average"], widths)
    for dimension in ROLLUP_DIMENSIONS:
        _add_row(table, (DIMENSION_NAMES[dimension],
                         f"{summary['dimension_averages'][dimension]:.2f}"), widths)


def add_team_comparison(doc, team_comparisons):
    heading = add_section_heading(doc, "Team Comparison", font_size=16)
    heading.paragraph_format.page_break_before = True

    widths = [Inches(0.5), Inches(2.3), Inches(0.9), Inches(1.4), Inches(1.0)]
    table = doc.add_table(rows=1, cols=5)
    table.style = 'Table Grid'
    table.autofit = False
    _add_header_row(table, ["#", "Team", "Score", "Grade", "Participation"], widths)
    for rank, team in enumerate(team_comparisons, 1):
        _add_row(table, (
            rank, team['team_name'], f"{team['team_score']:.1f}", team['health_grade'],
            f"{team['participation_count']}/{team['total_members']}",
        ), widths)

    _add_picture(doc, lambda path: create_team_comparison_chart(team_comparisons, path), Inches(5.5))


def add_insights(doc, insights):
    heading = add_section_heading(doc, "Insights", font_size=16)
    heading.paragraph_format.page_break_before = True

    for title, key in (("Strengths", 'strengths'), ("Concerns", 'concerns')):
        if insights.get(key):
            add_section_heading(doc, title, font_size=13)
            _add_bullets(doc, insights[key])

    top = insights.get('top_performer') or {}
    if top.get('team_name'):
        add_section_heading(doc, "Top Performer", font_size=13)
        text = f"{top['team_name']} ({top['score']:.1f})"
        if top.get('standout_dimensions'):
            text += f": standout in {', '.join(top['standout_dimensions'])}"
        doc.add_paragraph(text)

    if insights.get('needs_attention'):
        add_section_heading(doc, "Teams Needing Attention", font_size=13)
        for team in insights['needs_attention']:
            para = doc.add_paragraph(style='List Bullet')
            para.add_run(f"{team['team_name']} ({team['score']:.1f})").bold = True
            if team['issues']:
                para.add_run(f": {'; '.join(team['issues'])}")

    for title, key in (("Recommendations", 'recommendations'), ("Cross-Team Trends", 'cross_team_trends')):
        if insights.get(key):
            add_section_heading(doc, title, font_size=13)
            _add_bullets(doc, insights[key])


def generate_summary_document(organization, summary, output_dir=REPORTS_DIR):
    """Build the Word organization summary. Returns the file path."""
    doc = Document()
    create_cover_page(doc, "Organization Summary", organization['name'],
                      f"Prepared for {organization['leader_name']}")

    add_summary_statistics(doc, summary)
    add_team_comparison(doc, summary['team_comparisons'])
    add_insights(doc, summary['insights'])

    output_path = _output_path(output_dir, organization['name'], 'Summary')
    doc.save(output_path)
    logger.info("Summary report written to %s", output_path)
    return str(output_path)


def generate_summary_report_document(db, organization_id, output_dir=REPORTS_DIR):
    """Build the Word summary from the stored summary of an organization."""
    organization = db.get_organization(organization_id)
    if organization is None:
        raise ValueError("Organization not found")
    summary = db.get_summary_report(organization_id)
    if summary is None:
        raise ValueError("No summary report yet. Please generate one first.")
    return generate_summary_document(organization, summary, output_dir)


# ============================================
# EXPORTS
# ============================================

def summary_to_dataframe(summary):
    """Team comparison table: one row per team in rank order."""
    rows = []
    for rank, team in enumerate(summary['team_comparisons'], 1):
        row = {
            'Rank': rank,
            'Team': team['team_name'],
            'Score': team['team_score'],
            'Grade': team['health_grade'],
            'Participation Count': team['participation_count'],
            'Members': team['total_members'],
            'Participation %': int(round_half_up(team['participation_rate'] * 100, 0)),
        }
        for dimension in ROLLUP_DIMENSIONS:
            row[DIMENSION_NAMES[dimension]] = team['dimension_scores'].get(dimension)
        rows.append(row)

    columns = ['Rank', 'Team', 'Score', 'Grade', 'Participation Count', 'Members',
               'Participation %'] + [DIMENSION_NAMES[d] for d in ROLLUP_DIMENSIONS]
    return pd.DataFrame(rows, columns=columns)


def export_summary_csv(summary):
    return summary_to_dataframe(summary).to_csv(index=False)


def export_summary_json(summary):
    return json.dumps(summary, indent=2, ensure_ascii=False, default=str)


def participants_to_dataframe(codes):
    """One row per participant code; pending codes have empty result columns."""
    rows = []
    for code in codes:
        result = code.get('result') or {}
        dimension_scores = result.get('dimension_scores') or {}
        row = {
            'Code': code['code'],
            'Status': 'Submitted' if code['is_used'] else 'Pending',
            'Name': code.get('name') or '',
            'Email': code.get('email') or '',
            'Submitted At': code.get('submitted_at') or '',
            'Personal Score': result.get('personal_score'),
            'Grade': result.get('grade', ''),
        }
        for dimension in ALL_DIMENSIONS:
            score = dimension_scores.get(dimension)
            row[DIMENSION_NAMES[dimension]] = round_half_up(score, 1) if score is not None else None
        rows.append(row)

    columns = ['Code', 'Status', 'Name', 'Email', 'Submitted At', 'Personal Score', 'Grade'] + \
        [DIMENSION_NAMES[d] for d in ALL_DIMENSIONS]
    return pd.DataFrame(rows, columns=columns)


def export_participants_csv(codes):
    return participants_to_dataframe(codes).to_csv(index=False)
