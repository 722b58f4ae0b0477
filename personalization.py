#!/usr/bin/env python3
"""
Trust Matrix personalisation for team reports.

A second lens on the same seven dimensions, independent of the team
health grade:

1. Weight the dimensions into two axes, the Emotional Bank Account (EBA)
   and Bids for Connection.
2. Place the team in one of four quadrants (threshold 60 on each axis).
3. Pick the three weakest dimensions as priority areas.
4. Select the recommendation bundle for the quadrant.
"""

from framework import ALL_DIMENSIONS, DIMENSION_NAMES, TRUST_MATRIX_THRESHOLD
from scoring import round_half_up


THRIVING_TEAM = 'THRIVING_TEAM'
SOLID_FOUNDATION = 'SOLID_FOUNDATION'
TRUST_EROSION = 'TRUST_EROSION'
GRIDLOCK = 'GRIDLOCK'

QUADRANTS = [THRIVING_TEAM, SOLID_FOUNDATION, TRUST_EROSION, GRIDLOCK]

EBA_WEIGHTS = {
    'trust_positivity': 0.35,
    'appreciation': 0.30,
    'goal_support': 0.20,
    'warning_signs': 0.15,
}

BIDS_WEIGHTS = {
    'responsiveness': 0.40,
    'team_connection': 0.35,
    'conflict_management': 0.25,
}

QUADRANT_DISPLAY_NAMES = {
    THRIVING_TEAM: 'Thriving Team',
    SOLID_FOUNDATION: 'Solid Foundation',
    TRUST_EROSION: 'Trust Erosion',
    GRIDLOCK: 'Gridlock',
}

QUADRANT_EMOJI = {
    THRIVING_TEAM: '🌿',
    SOLID_FOUNDATION: '🧱',
    TRUST_EROSION: '🌧️',
    GRIDLOCK: '🔒',
}

QUADRANT_TEXT = {
    THRIVING_TEAM: (
        "Your team has strong trust and high responsiveness. You demonstrate psychological safety, "
        "open collaboration, and creativity. Focus on maintaining these strengths.",
        "Maintain current practices and model behavior for other teams. Consider mentoring teams "
        "that need support.",
    ),
    SOLID_FOUNDATION: (
        "Your team has strong trust foundations (high EBA) but needs to improve responsiveness to "
        "connection attempts. Team members have reliable trust but miss opportunities for deeper "
        "engagement.",
        "Move toward Thriving Team 🌿 by improving Bids for Connection scores. Focus on noticing and "
        "responding to subtle connection attempts.",
    ),
    TRUST_EROSION: (
        "Your team is responsive to bids but trust reserves are depleting. There may be increasing "
        "defensiveness, miscommunication, or unaddressed issues. Rebuild the Emotional Bank Account.",
        "Rebuild trust through consistent positive interactions, keeping promises, and repairing "
        "small ruptures before they harden. Use gentle start-ups in difficult conversations.",
    ),
    GRIDLOCK: (
        "Your team faces challenges in both trust and responsiveness. Blame cycles, avoidance, or "
        "broken psychological safety may be present. This requires focused attention and "
        "systematic improvement.",
        "Pause execution for trust repair. Start with small trust-building actions, co-create a "
        "recovery plan, and gradually improve bid responsiveness through structured repair sessions.",
    ),
}

FRAMEWORK_ELEMENTS = {
    'team_connection': 'Mind Map (Team Awareness)',
    'appreciation': 'Emotional Bank Account (EBA)',
    'responsiveness': 'Bids for Connection',
    'trust_positivity': 'Emotional Bank Account (EBA)',
    'conflict_management': 'Emotion Coaching (Gottman)',
    'goal_support': 'How to Build Trust',
    'warning_signs': 'Team Signs',
}

# (dimension, quadrant) -> current issue
CURRENT_ISSUES = {
    'team_connection': {
        THRIVING_TEAM: 'Strong mutual understanding maintained',
        SOLID_FOUNDATION: 'Some gaps in shared understanding',
        TRUST_EROSION: 'Misalignment on team priorities',
        GRIDLOCK: 'Severe disconnection between members',
    },
    'appreciation': {
        THRIVING_TEAM: 'Gratitude culture established',
        SOLID_FOUNDATION: 'Appreciation expressed but could be more frequent',
        TRUST_EROSION: 'Contributions going unrecognized',
        GRIDLOCK: 'Lack of positive acknowledgment',
    },
    'responsiveness': {
        THRIVING_TEAM: 'Excellent bid awareness',
        SOLID_FOUNDATION: 'Team members miss or dismiss some bids',
        TRUST_EROSION: 'Defensive responses to connection attempts',
        GRIDLOCK: 'Bids met with resistance or avoidance',
    },
    'trust_positivity': {
        THRIVING_TEAM: 'High trust and optimism',
        SOLID_FOUNDATION: 'Trust present but cautious optimism',
        TRUST_EROSION: 'Trust reserves depleting',
        GRIDLOCK: 'Broken trust and cynicism',
    },
    'conflict_management': {
        THRIVING_TEAM: 'Conflicts handled constructively',
        SOLID_FOUNDATION: 'Some conflicts avoided or escalated',
        TRUST_EROSION: 'Increasing defensiveness in disagreements',
        GRIDLOCK: 'Blame cycles and unresolved conflicts',
    },
    'goal_support': {
        THRIVING_TEAM: 'Strong mutual support for goals',
        SOLID_FOUNDATION: 'Support available but not always proactive',
        TRUST_EROSION: 'Goals pursued independently',
        GRIDLOCK: 'Competitive or undermining behavior',
    },
    'warning_signs': {
        THRIVING_TEAM: 'Healthy communication patterns',
        SOLID_FOUNDATION: 'Occasional criticism or defensiveness',
        TRUST_EROSION: 'Frequent negative patterns emerging',
        GRIDLOCK: 'Destructive communication dominant',
    },
}

# (dimension, quadrant) -> recommended action
RECOMMENDED_ACTIONS = {
    'team_connection': {
        THRIVING_TEAM: 'Model inclusive behavior for other teams',
        SOLID_FOUNDATION: 'Hold regular team alignment sessions',
        TRUST_EROSION: 'Clarify shared goals and priorities',
        GRIDLOCK: 'Establish basic communication protocols',
    },
    'appreciation': {
        THRIVING_TEAM: 'Continue rituals of appreciation',
        SOLID_FOUNDATION: 'Implement weekly gratitude practice',
        TRUST_EROSION: 'Increase positive deposits to EBA',
        GRIDLOCK: 'Start with small, specific acknowledgments',
    },
    'responsiveness': {
        THRIVING_TEAM: 'Recognize and respond to subtle bids',
        SOLID_FOUNDATION: 'Practice noticing missed bids and follow up',
        TRUST_EROSION: 'Use gentle start-ups and validation',
        GRIDLOCK: 'Respond calmly to micro-bids; use repair attempts',
    },
    'trust_positivity': {
        THRIVING_TEAM: 'Maintain 5:1 positive-to-negative ratio',
        SOLID_FOUNDATION: 'Add transparency deposits; share context',
        TRUST_EROSION: 'Repair withdrawals directly',
        GRIDLOCK: 'Pause for structured trust repair sessions',
    },
    'conflict_management': {
        THRIVING_TEAM: 'Continue using constructive conflict tools',
        SOLID_FOUNDATION: 'Practice "softened start-ups" in disagreements',
        TRUST_EROSION: 'Validate emotions before problem-solving',
        GRIDLOCK: 'Use facilitated repair sessions with neutral party',
    },
    'goal_support': {
        THRIVING_TEAM: 'Mentor other teams on support practices',
        SOLID_FOUNDATION: 'Create individual development check-ins',
        TRUST_EROSION: 'Reaffirm shared values and mutual benefit',
        GRIDLOCK: 'Rebuild reliability through small commitments',
    },
    'warning_signs': {
        THRIVING_TEAM: 'Model healthy communication',
        SOLID_FOUNDATION: 'Notice and address criticism patterns early',
        TRUST_EROSION: 'Replace criticism with "I feel" statements',
        GRIDLOCK: 'Commit to communication ground rules',
    },
}

PRIORITY_AREA_COUNT = 3


# ============================================
# AXES AND QUADRANT
# ============================================

def _weighted(dimensions, weights):
    total = 0.0
    for dimension, weight in weights.items():
        total += dimensions[dimension] * weight
    return round_half_up(total, 1)


def calculate_eba(dimensions):
    """Emotional Bank Account: trust 35%, appreciation 30%, goal support 20%, warning signs 15%."""
    return _weighted(dimensions, EBA_WEIGHTS)


def calculate_bids(dimensions):
    """Bids for Connection: responsiveness 40%, connection 35%, conflict 25%."""
    return _weighted(dimensions, BIDS_WEIGHTS)


def classify_quadrant(eba_score, bids_score, threshold=TRUST_MATRIX_THRESHOLD):
    high_eba = eba_score >= threshold
    high_bids = bids_score >= threshold
    if high_eba and high_bids:
        return THRIVING_TEAM
    if high_eba:
        return SOLID_FOUNDATION
    if high_bids:
        return TRUST_EROSION
    return GRIDLOCK


def determine_team_position(dimensions):
    """
    Place a team on the Trust Matrix.

    Returns:
        Dict with quadrant, eba_score, bids_score, interpretation and
        next_step.
    """
    eba_score = calculate_eba(dimensions)
    bids_score = calculate_bids(dimensions)
    quadrant = classify_quadrant(eba_score, bids_score)
    interpretation, next_step = QUADRANT_TEXT[quadrant]

    return {
        'quadrant': quadrant,
        'eba_score': eba_score,
        'bids_score': bids_score,
        'interpretation': interpretation,
        'next_step': next_step,
    }


# ============================================
# PRIORITY AREAS
# ============================================

def get_current_issue(dimension, quadrant):
    return CURRENT_ISSUES.get(dimension, {}).get(quadrant, 'Needs improvement')


def get_recommended_action(dimension, quadrant):
    return RECOMMENDED_ACTIONS.get(dimension, {}).get(quadrant, 'Focus on improvement')


def identify_priority_areas(dimensions, team_position):
    """
    The three weakest dimensions, ranked 1-3.

    Sorting is stable, so equal scores keep the fixed dimension order.
    """
    ranked = sorted(ALL_DIMENSIONS, key=lambda d: dimensions[d])
    quadrant = team_position['quadrant']

    areas = []
    for rank, dimension in enumerate(ranked[:PRIORITY_AREA_COUNT], 1):
        areas.append({
            'dimension': dimension,
            'display_name': DIMENSION_NAMES[dimension],
            'score': round_half_up(dimensions[dimension], 1),
            'rank': rank,
            'current_issue': get_current_issue(dimension, quadrant),
            'recommended_action': get_recommended_action(dimension, quadrant),
            'framework_element': FRAMEWORK_ELEMENTS.get(dimension, 'Trust Framework'),
        })
    return areas


# ============================================
# RECOMMENDATIONS
# ============================================

def generate_personalized_recommendations(team_position, priority_areas):
    """
    Select the recommendation bundle for the team's quadrant.

    The bundle is fixed per quadrant; some entries name the weakest
    dimensions from priority_areas.
    """
    quadrant = team_position['quadrant']
    first, second, third = (priority_areas + [None, None, None])[:3]

    recommendations = {
        'immediate': [],
        'short_term': [],
        'long_term': [],
        'maintenance_actions': [],
    }

    if quadrant == THRIVING_TEAM:
        recommendations['immediate'] = [
            'Continue your 5:1 positive-to-negative interaction ratio',
            'Share your successful practices with other teams',
            'Maintain your gratitude rituals and team connection practices',
        ]
        recommendations['short_term'] = [
            "Document your team's collaboration best practices",
            'Offer to mentor teams that are struggling',
        ]
        recommendations['long_term'] = [
            'Explore advanced collaboration techniques',
            'Set stretch goals for team innovation',
        ]
        recommendations['maintenance_actions'] = [
            'Schedule regular "trust tune-ups" every 2 months',
            'Keep tracking team health metrics',
            'Celebrate team successes together',
        ]

    elif quadrant == SOLID_FOUNDATION:
        recommendations['immediate'] = [
            f"Focus on {first['display_name']}: {first['recommended_action']}",
            'Set up weekly "bid awareness" check-ins (15 minutes)',
            'Practice noticing when team members make connection attempts',
        ]
        recommendations['short_term'] = [
            'Create team norm: "No bid left behind" - acknowledge all connection attempts',
            f"Address {second['display_name']}: {second['recommended_action']}",
            'Increase transparency in decision-making processes',
        ]
        recommendations['long_term'] = [
            'Deepen vulnerability and psychological safety',
            'Develop more sophisticated conflict resolution skills',
            'Move toward Thriving Team status',
        ]

    elif quadrant == TRUST_EROSION:
        recommendations['immediate'] = [
            'Repair small ruptures before they harden - address issues within 24 hours',
            f"Priority repair: {first['display_name']}",
            'Use gentle start-ups: "I feel..." instead of "You always..."',
        ]
        recommendations['short_term'] = [
            'Rebuild Emotional Bank Account through consistent positive interactions',
            'Hold a team "trust repair" session to address underlying issues',
            f"Work on {second['display_name']} and {third['display_name']}",
        ]
        recommendations['long_term'] = [
            'Establish rituals of appreciation and recognition',
            'Develop shared understanding of team goals and values',
            'Build back to Solid Foundation level',
        ]

    else:
        recommendations['immediate'] = [
            'PAUSE execution for trust repair - this is critical',
            'Bring in a neutral facilitator for structured repair sessions',
            'Commit to basic communication ground rules as a team',
        ]
        recommendations['short_term'] = [
            'Co-create a trust recovery plan with all team members',
            'Start with small, achievable trust-building commitments',
            f"Focus intensively on {first['display_name']}",
        ]
        recommendations['long_term'] = [
            'Rebuild reliability through consistent follow-through on commitments',
            'Gradually improve bid responsiveness',
            'Work systematically through all priority areas',
            'Consider team coaching or professional facilitation',
        ]

    return recommendations


def generate_personalization_data(dimensions):
    """Team position, priority areas and recommendations for one team."""
    team_position = determine_team_position(dimensions)
    priority_areas = identify_priority_areas(dimensions, team_position)
    recommendations = generate_personalized_recommendations(team_position, priority_areas)

    return {
        'team_position': team_position,
        'priority_areas': priority_areas,
        'recommendations': recommendations,
    }


def get_quadrant_display_name(quadrant):
    return QUADRANT_DISPLAY_NAMES[quadrant]


def get_quadrant_emoji(quadrant):
    return QUADRANT_EMOJI[quadrant]
