#!/usr/bin/env python3
"""
Organization summary reports.

Rolls the team reports of every assessment under one organization up into
cross-team statistics, a ranked team comparison and rule-based insights.
The rollup itself (build_summary_report) is pure; generate_summary_report
loads from and saves to the database.
"""

import logging
from functools import reduce

import numpy as np

from framework import (
    ALL_DIMENSIONS, ROLLUP_DIMENSIONS, DIMENSION_NAMES,
    ORGANIZATION_GRADES, ORGANIZATION_GRADE_FLOOR,
    ROLLUP_STRENGTH_THRESHOLD, ROLLUP_CONCERN_THRESHOLD,
    HIGH_PARTICIPATION_RATE, LOW_TEAM_PARTICIPATION_RATE,
    CONSISTENT_STDDEV, HIGH_VARIANCE_STDDEV,
    STANDOUT_DIMENSION_THRESHOLD, NEEDS_ATTENTION_SCORE,
    TEAM_ISSUE_DIMENSION_THRESHOLD, SHARE_PRACTICES_SCORE,
    HIGH_TRUST_THRESHOLD, HIGH_TRUST_SCORE_MARGIN,
    MAX_NEEDS_ATTENTION_TEAMS, MAX_TEAM_ISSUES,
)
from scoring import round_half_up

logger = logging.getLogger(__name__)


NO_DATA_SUMMARY = "No completed assessments yet"

OVERALL_GRADE_WORDS = {
    'Exceptional': 'exceptional',
    'Strong': 'strong',
    'Developing': 'good',
    'Needs Attention': 'in need of attention',
}


class NothingToSummarizeError(ValueError):
    """No assessment under the organization has a team report yet."""

    def __init__(self, message="No completed assessments to summarize"):
        super().__init__(message)


# ============================================
# HELPERS
# ============================================

def calculate_standard_deviation(values):
    """Population standard deviation; 0 for an empty list."""
    if len(values) == 0:
        return 0.0
    return float(np.std(np.asarray(values, dtype=float)))


def get_organization_grade(score):
    """Comparison grade: Exceptional / Strong / Developing / Needs Attention."""
    for lower_bound, label in ORGANIZATION_GRADES:
        if score >= lower_bound:
            return label
    return ORGANIZATION_GRADE_FLOOR


def _fixed(value, places=1):
    return f"{round_half_up(value, places):.{places}f}"


def _percent(rate):
    return _fixed(rate * 100, 0)


def _is_completed(assessment):
    return assessment.get('team_report') is not None


def calculate_dimension_averages(completed_teams):
    """
    Mean of each rollup dimension across completed teams, 2 decimals.

    Only the six ROLLUP_DIMENSIONS are averaged.
    """
    averages = {d: 0.0 for d in ROLLUP_DIMENSIONS}
    if not completed_teams:
        return averages

    for assessment in completed_teams:
        scores = assessment['team_report'].get('dimension_scores') or {}
        for dimension in ROLLUP_DIMENSIONS:
            averages[dimension] += scores.get(dimension, 0)

    for dimension in ROLLUP_DIMENSIONS:
        averages[dimension] = round_half_up(averages[dimension] / len(completed_teams), 2)
    return averages


def build_team_comparisons(completed_teams):
    """One row per completed team, best team first."""
    comparisons = []
    for assessment in completed_teams:
        team_report = assessment['team_report']
        participation_count = assessment.get('participation_count', 0)
        member_count = assessment['member_count']
        participation_rate = participation_count / member_count if member_count else 0

        comparisons.append({
            'assessment_id': assessment['id'],
            'team_name': assessment['team_name'],
            'team_score': team_report['team_score'],
            'health_grade': get_organization_grade(team_report['team_score']),
            'participation_rate': round_half_up(participation_rate, 2),
            'participation_count': participation_count,
            'total_members': member_count,
            'completed_at': team_report.get('created_at'),
            'dimension_scores': dict(team_report.get('dimension_scores') or {}),
        })

    comparisons.sort(key=lambda t: t['team_score'], reverse=True)
    return comparisons


# ============================================
# INSIGHTS
# ============================================

def _summary_sentence(team_comparisons, average_score):
    word = OVERALL_GRADE_WORDS[get_organization_grade(average_score)]
    summary = f"Overall performance is {word}, with an average team score of {_fixed(average_score, 1)}."
    exceptional = sum(1 for t in team_comparisons if t['team_score'] >= 90)
    if exceptional > 0:
        summary += f" {exceptional} team(s) are performing exceptionally."
    return summary


def _strengths(dimension_entries, stats):
    strengths = []
    for dimension, value in dimension_entries[:2]:
        if value >= ROLLUP_STRENGTH_THRESHOLD:
            strengths.append(f"{DIMENSION_NAMES[dimension]} is a standout (average {_fixed(value, 1)})")

    if stats['average_participation'] >= HIGH_PARTICIPATION_RATE:
        strengths.append(f"High assessment participation (average {_percent(stats['average_participation'])}%)")

    if stats['std_dev'] < CONSISTENT_STDDEV:
        strengths.append("Teams perform consistently")
    return strengths


def _concerns(team_comparisons, dimension_entries, stats):
    concerns = []
    for dimension, value in dimension_entries[-2:]:
        if value < ROLLUP_CONCERN_THRESHOLD:
            concerns.append(f"{DIMENSION_NAMES[dimension]} needs improvement (average {_fixed(value, 1)})")

    if stats['average_participation'] < HIGH_PARTICIPATION_RATE:
        concerns.append(f"Average participation is below 90% ({_percent(stats['average_participation'])}%)")

    low_participation = [t for t in team_comparisons if t['participation_rate'] < LOW_TEAM_PARTICIPATION_RATE]
    if low_participation:
        concerns.append(f"{len(low_participation)} team(s) have low participation (<85%)")

    if stats['std_dev'] > HIGH_VARIANCE_STDDEV:
        concerns.append("Results vary widely between teams; consistency needs attention")
    return concerns


def _top_performer(team_comparisons):
    # Single pass: a later team replaces the current best unless the
    # current best is strictly higher.
    top_team = reduce(
        lambda prev, current: prev if prev['team_score'] > current['team_score'] else current,
        team_comparisons,
    )

    top_performer = {'team_name': top_team['team_name'], 'score': top_team['team_score']}

    scores = top_team['dimension_scores']
    standout = [d for d in ALL_DIMENSIONS if scores.get(d, 0) >= STANDOUT_DIMENSION_THRESHOLD]
    standout.sort(key=lambda d: scores[d], reverse=True)
    if standout:
        top_performer['standout_dimensions'] = [DIMENSION_NAMES[d] for d in standout[:2]]
    return top_team, top_performer


def _needs_attention(team_comparisons):
    bottom_teams = [t for t in team_comparisons if t['team_score'] < NEEDS_ATTENTION_SCORE]
    bottom_teams.sort(key=lambda t: t['team_score'])

    flagged = []
    for team in bottom_teams[:MAX_NEEDS_ATTENTION_TEAMS]:
        issues = []
        for dimension in ALL_DIMENSIONS:
            score = team['dimension_scores'].get(dimension)
            if score is not None and score < TEAM_ISSUE_DIMENSION_THRESHOLD:
                issues.append(f"{DIMENSION_NAMES[dimension]} is low ({_fixed(score, 1)})")

        if team['participation_rate'] < LOW_TEAM_PARTICIPATION_RATE:
            issues.append(f"Low participation ({_percent(team['participation_rate'])}%)")

        flagged.append({
            'team_name': team['team_name'],
            'score': team['team_score'],
            'issues': issues[:MAX_TEAM_ISSUES],
        })
    return flagged


def _recommendations(dimension_entries, top_team, needs_attention, stats):
    recommendations = []

    weakest_dimension, weakest_value = dimension_entries[-1]
    if weakest_value < ROLLUP_CONCERN_THRESHOLD:
        recommendations.append(f"Run a {DIMENSION_NAMES[weakest_dimension]} training session or workshop")

    if top_team['team_score'] >= SHARE_PRACTICES_SCORE:
        recommendations.append(f"Share {top_team['team_name']}'s best practices with other teams")

    if needs_attention:
        recommendations.append("Provide targeted support and coaching for lower-scoring teams")

    if stats['average_participation'] < HIGH_PARTICIPATION_RATE:
        recommendations.append("Raise assessment participation so the data is complete")

    if stats['std_dev'] > HIGH_VARIANCE_STDDEV:
        recommendations.append("Analyse why results differ between teams and encourage cross-team learning")
    return recommendations


def _cross_team_trends(team_comparisons, dimension_entries, average_score):
    trends = []

    strong = [DIMENSION_NAMES[d] for d, v in dimension_entries if v >= ROLLUP_STRENGTH_THRESHOLD]
    if strong:
        trends.append(f"Teams perform well across the board on {', '.join(strong)}")

    weak = [DIMENSION_NAMES[d] for d, v in dimension_entries if v < ROLLUP_CONCERN_THRESHOLD]
    if weak:
        trends.append(f"{', '.join(weak)}: a common growth area across teams")

    high_trust = [
        t for t in team_comparisons
        if t['dimension_scores'].get('trust_positivity', 0) >= HIGH_TRUST_THRESHOLD
    ]
    if len(high_trust) > len(team_comparisons) / 2:
        high_trust_average = sum(t['team_score'] for t in high_trust) / len(high_trust)
        if high_trust_average > average_score + HIGH_TRUST_SCORE_MARGIN:
            trends.append("Teams with high trust tend to perform better overall")
    return trends


def generate_insights(team_comparisons, dimension_averages, average_score):
    """
    Rule-based insights over the rollup.

    Sections are produced in a fixed order: summary, strengths, concerns,
    top performer, teams needing attention, recommendations, cross-team
    trends. Dimension rules walk the rollup dimensions sorted by average,
    highest first (ties keep the fixed dimension order).
    """
    insights = {
        'summary': '',
        'strengths': [],
        'concerns': [],
        'top_performer': {'team_name': '', 'score': 0},
        'needs_attention': [],
        'recommendations': [],
        'cross_team_trends': [],
    }

    if not team_comparisons:
        insights['summary'] = NO_DATA_SUMMARY
        return insights

    ordered = sorted(ROLLUP_DIMENSIONS, key=lambda d: dimension_averages[d], reverse=True)
    dimension_entries = [(d, dimension_averages[d]) for d in ordered]

    stats = {
        'average_participation': sum(t['participation_rate'] for t in team_comparisons) / len(team_comparisons),
        'std_dev': calculate_standard_deviation([t['team_score'] for t in team_comparisons]),
    }

    insights['summary'] = _summary_sentence(team_comparisons, average_score)
    insights['strengths'] = _strengths(dimension_entries, stats)
    insights['concerns'] = _concerns(team_comparisons, dimension_entries, stats)

    top_team, insights['top_performer'] = _top_performer(team_comparisons)
    insights['needs_attention'] = _needs_attention(team_comparisons)
    insights['recommendations'] = _recommendations(
        dimension_entries, top_team, insights['needs_attention'], stats
    )
    insights['cross_team_trends'] = _cross_team_trends(team_comparisons, dimension_entries, average_score)
    return insights


# ============================================
# ROLLUP
# ============================================

def build_summary_report(assessments):
    """
    Build the organization summary from its assessments.

    Args:
        assessments: List of dicts with id, team_name, member_count,
            participation_count and team_report (None while pending, else
            a dict with team_score, dimension_scores and created_at).

    Raises:
        NothingToSummarizeError: if no assessment has a team report.
    """
    completed = [a for a in assessments if _is_completed(a)]
    if not completed:
        raise NothingToSummarizeError()

    team_scores = [a['team_report']['team_score'] for a in completed]
    average_team_score = round_half_up(sum(team_scores) / len(team_scores), 2)

    dimension_averages = calculate_dimension_averages(completed)
    team_comparisons = build_team_comparisons(completed)

    return {
        'total_teams': len(assessments),
        'completed_teams': len(completed),
        'pending_teams': len(assessments) - len(completed),
        'average_team_score': average_team_score,
        'highest_score': max(team_scores),
        'lowest_score': min(team_scores),
        'score_std_dev': round_half_up(calculate_standard_deviation(team_scores), 2),
        'dimension_averages': dimension_averages,
        'team_comparisons': team_comparisons,
        'insights': generate_insights(team_comparisons, dimension_averages, average_team_score),
    }


def generate_summary_report(db, organization_id, generated_by='admin'):
    """
    Regenerate and store the summary for one organization.

    Replaces any earlier summary and resets its email-sent flag.

    Raises:
        ValueError: unknown organization.
        NothingToSummarizeError: no completed assessments.
    """
    organization = db.get_organization(organization_id)
    if organization is None:
        raise ValueError("Organization not found")

    assessments = db.get_assessments_for_summary(organization_id)
    report = build_summary_report(assessments)

    db.save_summary_report(
        organization_id,
        leader_name=organization['leader_name'],
        leader_email=organization['leader_email'],
        report=report,
        generated_by=generated_by,
    )
    logger.info(
        "Summary generated for organization %s: %d/%d teams completed",
        organization_id, report['completed_teams'], report['total_teams'],
    )
    return report


def get_summary_status(db, organization_id):
    """Whether a summary can be generated, and how far along the organization is."""
    organization = db.get_organization(organization_id)
    if organization is None:
        raise ValueError("Organization not found")

    assessments = db.get_assessments_for_summary(organization_id)
    total = len(assessments)
    completed = sum(1 for a in assessments if _is_completed(a))

    existing = db.get_summary_report(organization_id)
    can_generate = completed > 0
    has_existing_report = existing is not None

    if not can_generate:
        recommendation = "Please wait for at least one team to complete the assessment."
    elif has_existing_report:
        recommendation = "The summary report can be regenerated."
    else:
        recommendation = "A summary report can be generated."

    return {
        'can_generate': can_generate,
        'has_existing_report': has_existing_report,
        'total_assessments': total,
        'completed_assessments': completed,
        'pending_assessments': total - completed,
        'completion_rate': round_half_up(completed / total, 2) if total > 0 else 0,
        'last_report_date': existing['updated_at'] if has_existing_report else None,
        'recommendation': recommendation,
    }
