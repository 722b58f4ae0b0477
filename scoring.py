#!/usr/bin/env python3
"""
Scoring pipeline for the Team Effectiveness Assessment.

Raw answers -> seven dimension scores -> personal score, and personal
scores of a whole team -> team score.

All functions here are pure: they take plain dicts/lists and return new
dicts. Persistence lives in database.py.
"""

import math

import numpy as np

from framework import (
    ALL_DIMENSIONS, DIMENSION_QUESTIONS, DIMENSION_WEIGHTS, DIMENSION_NAMES,
    QUESTION_IDS, REVERSED_QUESTIONS, MIN_RATING, MAX_RATING,
    PERSONAL_GRADES, PERSONAL_GRADE_FLOOR,
    TEAM_HEALTH_GRADES, TEAM_HEALTH_GRADE_FLOOR,
    STRENGTH_THRESHOLD, GROWTH_THRESHOLD,
    CONSISTENCY_STDDEV_SCALE, DANGER_WARNING_SIGNS_THRESHOLD,
    DANGER_RATIO_THRESHOLD, DANGER_PENALTY_RATE,
)


DEFAULT_STRENGTH = "Maintain your current level"
DEFAULT_GROWTH_AREA = "All dimensions are performing well"

# (dimension, threshold, messages) evaluated in this order
PERSONAL_RECOMMENDATION_RULES = [
    ('warning_signs', 60, [
        'Watch your communication style: start with "I" to describe how you feel and avoid blaming language',
        "This week's goal: acknowledge the other person's effort before raising a criticism",
    ]),
    ('conflict_management', 65, [
        "Build your conflict skills: when you disagree, understand the other view before stating your own",
        'Recommended reading: "Crucial Conversations" for communicating well when the stakes are high',
    ]),
    ('appreciation', 70, [
        "Give more positive feedback: thank or recognise at least one colleague for something specific every day",
    ]),
    ('team_connection', 70, [
        "Get to know your team: have one non-work conversation with a colleague each week",
    ]),
]
DEFAULT_RECOMMENDATION = "Keep up the excellent work! Consider sharing your collaboration experience to help others"


class IncompleteResponsesError(ValueError):
    """A response set is missing answers or holds values outside 1-5."""

    def __init__(self, missing=None, invalid=None):
        self.missing = list(missing or [])
        self.invalid = list(invalid or [])
        parts = []
        if self.missing:
            parts.append(f"Missing answers for: {', '.join(self.missing)}")
        if self.invalid:
            parts.append(f"Invalid answers for: {', '.join(self.invalid)}")
        super().__init__("; ".join(parts) or "Invalid responses")


class NoSubmissionsError(ValueError):
    """A team report was requested before anyone submitted."""

    def __init__(self, message="No submissions yet"):
        super().__init__(message)


def round_half_up(value, places=1):
    """Round to `places` decimals with halves rounded up (12.25 -> 12.3)."""
    factor = 10 ** places
    return math.floor(value * factor + 0.5) / factor


# ============================================
# VALIDATION
# ============================================

def _is_valid_rating(value):
    if isinstance(value, bool) or not isinstance(value, int):
        return False
    return MIN_RATING <= value <= MAX_RATING


def validate_responses(responses):
    """
    Check that a response set answers all 27 questions with an integer 1-5.

    Raises:
        IncompleteResponsesError: listing missing and invalid question ids
            in Q1..Q27 order.
    """
    if not isinstance(responses, dict):
        raise IncompleteResponsesError(missing=QUESTION_IDS)

    missing = []
    invalid = []
    for qid in QUESTION_IDS:
        value = responses.get(qid)
        if value is None:
            missing.append(qid)
        elif not _is_valid_rating(value):
            invalid.append(qid)

    if missing or invalid:
        raise IncompleteResponsesError(missing, invalid)


# ============================================
# DIMENSION SCORER
# ============================================

def calculate_dimension_scores(responses):
    """
    Map raw 1-5 answers onto seven 0-100 dimension scores.

    Each dimension is the mean of its answered questions times 20. Q22 is
    reverse scored. Questions that are absent are skipped; a dimension
    with nothing answered scores 0.
    """
    scores = {}
    for dimension in ALL_DIMENSIONS:
        total = 0
        count = 0
        for qid in DIMENSION_QUESTIONS[dimension]:
            value = responses.get(qid)
            if value is None:
                continue
            if qid in REVERSED_QUESTIONS:
                total += 6 - value
            else:
                total += value
            count += 1

        scores[dimension] = (total / count) * 20 if count > 0 else 0
    return scores


# ============================================
# PERSONAL SCORE AGGREGATOR
# ============================================

def calculate_personal_score(dimension_scores):
    """Weighted sum of the seven dimensions, rounded to 1 decimal."""
    total = 0.0
    for dimension in ALL_DIMENSIONS:
        total += dimension_scores[dimension] * DIMENSION_WEIGHTS[dimension]
    return round_half_up(total, 1)


def _grade_for(score, bands, floor):
    for lower_bound, label in bands:
        if score >= lower_bound:
            return label
    return floor


def get_score_grade(score):
    """Personal grade: Excellent / Good / Needs improvement / Alert."""
    return _grade_for(score, PERSONAL_GRADES, PERSONAL_GRADE_FLOOR)


def identify_strengths(dimension_scores):
    strengths = [
        DIMENSION_NAMES[d] for d in ALL_DIMENSIONS
        if dimension_scores[d] >= STRENGTH_THRESHOLD
    ]
    return strengths if strengths else [DEFAULT_STRENGTH]


def identify_growth_areas(dimension_scores):
    growth_areas = [
        DIMENSION_NAMES[d] for d in ALL_DIMENSIONS
        if dimension_scores[d] < GROWTH_THRESHOLD
    ]
    return growth_areas if growth_areas else [DEFAULT_GROWTH_AREA]


def generate_recommendations(dimension_scores):
    """Rule-based suggestions in a fixed order: warning signs, conflict, appreciation, connection."""
    recommendations = []
    for dimension, threshold, messages in PERSONAL_RECOMMENDATION_RULES:
        if dimension_scores[dimension] < threshold:
            recommendations.extend(messages)

    if not recommendations:
        recommendations.append(DEFAULT_RECOMMENDATION)
    return recommendations


def score_responses(responses):
    """
    Validate a response set and compute the full personal result.

    Returns:
        Dict with dimension_scores, personal_score, grade, strengths,
        growth_areas and recommendations.
    """
    validate_responses(responses)

    dimension_scores = calculate_dimension_scores(responses)
    personal_score = calculate_personal_score(dimension_scores)

    return {
        'dimension_scores': dimension_scores,
        'personal_score': personal_score,
        'grade': get_score_grade(personal_score),
        'strengths': identify_strengths(dimension_scores),
        'growth_areas': identify_growth_areas(dimension_scores),
        'recommendations': generate_recommendations(dimension_scores),
    }


# ============================================
# TEAM SCORE AGGREGATOR
# ============================================

def calculate_team_score(personal_scores, warning_signs_scores):
    """
    Combine personal scores into a team score.

    team = mean x consistency x penalty, where consistency falls with the
    population standard deviation and penalty applies when more than 30%
    of members score below 50 on warning signs. The final score uses the
    unrounded factors; the returned factors are rounded for storage.

    Raises:
        NoSubmissionsError: if personal_scores is empty.
    """
    n = len(personal_scores)
    if n == 0:
        raise NoSubmissionsError()

    values = np.asarray(personal_scores, dtype=float)
    base_score = float(values.mean())
    std_dev = float(values.std())

    consistency_factor = max(0.0, 1 - std_dev / CONSISTENCY_STDDEV_SCALE)

    dangerous_members = sum(1 for s in warning_signs_scores if s < DANGER_WARNING_SIGNS_THRESHOLD)
    danger_ratio = dangerous_members / n
    penalty_factor = 1.0
    if danger_ratio > DANGER_RATIO_THRESHOLD:
        penalty_factor = 1 - (danger_ratio - DANGER_RATIO_THRESHOLD) * DANGER_PENALTY_RATE

    team_score = base_score * consistency_factor * penalty_factor

    return {
        'team_score': round_half_up(team_score, 1),
        'base_score': round_half_up(base_score, 1),
        'consistency_factor': round_half_up(consistency_factor, 2),
        'penalty_factor': round_half_up(penalty_factor, 2),
        'standard_deviation': round_half_up(std_dev, 1),
    }


def get_team_health_grade(score):
    """Team grade: Exceptional Team / Healthy Team / Risk Team / Error."""
    return _grade_for(score, TEAM_HEALTH_GRADES, TEAM_HEALTH_GRADE_FLOOR)


def calculate_team_report(score_records):
    """
    Build the team report from every submitted personal result.

    Args:
        score_records: List of dicts as returned by score_responses()
            (at least personal_score and dimension_scores).

    Returns:
        Dict with the team score breakdown, per-dimension team averages,
        participation_count and health_grade.
    """
    if not score_records:
        raise NoSubmissionsError()

    personal_scores = [r['personal_score'] for r in score_records]
    warning_signs_scores = [r['dimension_scores']['warning_signs'] for r in score_records]

    report = calculate_team_score(personal_scores, warning_signs_scores)

    count = len(score_records)
    averages = {}
    for dimension in ALL_DIMENSIONS:
        total = sum(r['dimension_scores'][dimension] for r in score_records)
        averages[dimension] = round_half_up(total / count, 1)

    report['dimension_scores'] = averages
    report['participation_count'] = count
    report['health_grade'] = get_team_health_grade(report['team_score'])
    return report


def compare_to_team(personal_result, team_report):
    """Personal vs team differences for the participant report."""
    team_dimensions = team_report['dimension_scores']
    comparison = {
        'score_difference': round_half_up(
            personal_result['personal_score'] - team_report['team_score'], 1
        ),
        'dimensions': {},
    }
    for dimension in ALL_DIMENSIONS:
        personal = personal_result['dimension_scores'][dimension]
        team = team_dimensions[dimension]
        comparison['dimensions'][dimension] = {
            'personal': personal,
            'team': team,
            'difference': round_half_up(personal - team, 1),
        }
    return comparison
