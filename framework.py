#!/usr/bin/env python3
"""
Framework configuration for the Team Effectiveness Assessment.

Contains the 27-question instrument, the seven dimensions, weights,
grade bands, thresholds and display configuration.
"""

# ============================================
# DIMENSION STRUCTURE
# ============================================

# Fixed order; every aggregation iterates one of these two lists.
ALL_DIMENSIONS = [
    'team_connection',
    'appreciation',
    'responsiveness',
    'trust_positivity',
    'conflict_management',
    'goal_support',
    'warning_signs',
]

# The organization rollup averages six dimensions only; warning_signs is
# left out of that rollup.
ROLLUP_DIMENSIONS = [d for d in ALL_DIMENSIONS if d != 'warning_signs']

DIMENSION_QUESTIONS = {
    'team_connection': ['Q1', 'Q2', 'Q3'],
    'appreciation': ['Q4', 'Q5', 'Q6'],
    'responsiveness': ['Q7', 'Q8', 'Q9'],
    'trust_positivity': ['Q10', 'Q11', 'Q12', 'Q13'],
    'conflict_management': ['Q14', 'Q15', 'Q16'],
    'goal_support': ['Q17', 'Q18', 'Q19', 'Q20'],
    'warning_signs': ['Q21', 'Q22', 'Q23', 'Q24', 'Q25', 'Q26', 'Q27'],
}

QUESTION_IDS = [f"Q{i}" for i in range(1, 28)]

# Scored as 6 - value before averaging
REVERSED_QUESTIONS = {'Q22'}

# warning_signs carries 40%; weights sum to 1.0
DIMENSION_WEIGHTS = {
    'team_connection': 0.10,
    'appreciation': 0.10,
    'responsiveness': 0.10,
    'trust_positivity': 0.10,
    'conflict_management': 0.10,
    'goal_support': 0.10,
    'warning_signs': 0.40,
}

DIMENSION_NAMES = {
    'team_connection': 'Team Connection',
    'appreciation': 'Appreciation',
    'responsiveness': 'Responsiveness',
    'trust_positivity': 'Trust & Positivity',
    'conflict_management': 'Conflict Management',
    'goal_support': 'Goal Support',
    'warning_signs': 'Healthy Communication',
}

# ============================================
# ALL 27 QUESTIONS
# ============================================

QUESTIONS = {
    # Team Connection (Q1-Q3)
    'Q1': "I know what's important to my teammates in their work",
    'Q2': "I understand my teammates' working styles and preferences",
    'Q3': "My teammates know what matters most to me professionally",

    # Appreciation (Q4-Q6)
    'Q4': "I regularly express appreciation for my teammates' contributions",
    'Q5': "I feel valued and appreciated by my team",
    'Q6': "When I do good work, my teammates notice and acknowledge it",

    # Responsiveness (Q7-Q9)
    'Q7': "When I share ideas or concerns, my teammates listen actively",
    'Q8': "My teammates respond constructively to my requests for help",
    'Q9': "I make time to engage with my teammates' ideas and concerns",

    # Trust & Positivity (Q10-Q13)
    'Q10': "I trust my teammates to follow through on their commitments",
    'Q11': "I believe my team can overcome challenges together",
    'Q12': "Our team maintains a generally positive atmosphere",
    'Q13': "I feel safe being vulnerable and admitting mistakes to my team",

    # Conflict Management (Q14-Q16)
    'Q14': "I feel safe expressing disagreement with my team",
    'Q15': "My team handles conflicts constructively",
    'Q16': "When disagreements arise, we work toward solutions together",

    # Goal Support (Q17-Q20)
    'Q17': "I understand my teammates' professional goals",
    'Q18': "My teammates actively support my professional development",
    'Q19': "I help my teammates achieve their goals",
    'Q20': "Our team goals align with individual career aspirations",

    # Warning Signs (Q21-Q27)
    'Q21': "Feedback in my team focuses on specific behaviors rather than personal attacks",
    'Q22': "I observe disrespectful communication (sarcasm, eye-rolling, mockery) in my team",
    'Q23': "Team members avoid stonewalling or giving the silent treatment",
    'Q24': "When stressed, we avoid blaming each other",
    'Q25': "Criticism in our team is delivered constructively",
    'Q26': "When tensions arise, my team can de-escalate and move forward",
    'Q27': "We repair relationships after conflicts or misunderstandings",
}

# ============================================
# DIMENSION DESCRIPTIONS
# ============================================

DIMENSION_DESCRIPTIONS = {
    'team_connection': "How well team members know what matters to each other: priorities, working styles and professional motivations.",

    'appreciation': "How often contributions are noticed, acknowledged and valued. Appreciation is the main deposit into the team's trust reserves.",

    'responsiveness': "How the team responds when someone shares an idea, raises a concern or asks for help.",

    'trust_positivity': "Confidence that teammates follow through, a generally positive atmosphere, and safety to admit mistakes.",

    'conflict_management': "Whether disagreement is safe to voice and conflicts end in shared solutions rather than stalemate.",

    'goal_support': "Understanding of and active support for each other's professional goals and development.",

    'warning_signs': "Absence of destructive patterns: personal criticism, contempt, stonewalling and blame. Weighted most heavily in the personal score.",
}

# ============================================
# RATING SCALES
# ============================================

RATING_SCALES = {
    'agreement': {
        1: "Strongly Disagree",
        2: "Disagree",
        3: "Neutral",
        4: "Agree",
        5: "Strongly Agree",
    },
    'frequency': {
        1: "Never",
        2: "Rarely",
        3: "Sometimes",
        4: "Often",
        5: "Always",
    },
    'frequency_very_often': {
        1: "Never",
        2: "Rarely",
        3: "Sometimes",
        4: "Often",
        5: "Very Often",
    },
    # Q22: a high raw value means the behaviour is rare
    'reverse_frequency': {
        1: "Very Often",
        2: "Often",
        3: "Sometimes",
        4: "Rarely",
        5: "Never",
    },
}

_AGREEMENT_QUESTIONS = {'Q1', 'Q2', 'Q3', 'Q5', 'Q10', 'Q11', 'Q13', 'Q14', 'Q17', 'Q20'}

QUESTION_SCALES = {}
for _qid in QUESTION_IDS:
    if _qid in _AGREEMENT_QUESTIONS:
        QUESTION_SCALES[_qid] = 'agreement'
    elif _qid == 'Q4':
        QUESTION_SCALES[_qid] = 'frequency_very_often'
    elif _qid in REVERSED_QUESTIONS:
        QUESTION_SCALES[_qid] = 'reverse_frequency'
    else:
        QUESTION_SCALES[_qid] = 'frequency'

MIN_RATING = 1
MAX_RATING = 5

# ============================================
# GRADE BANDS
# ============================================

# Personal score grades (lower bound inclusive)
PERSONAL_GRADES = [
    (85, 'Excellent'),
    (70, 'Good'),
    (55, 'Needs improvement'),
]
PERSONAL_GRADE_FLOOR = 'Alert'

# Team health grades
TEAM_HEALTH_GRADES = [
    (80, 'Exceptional Team'),
    (65, 'Healthy Team'),
    (50, 'Risk Team'),
]
# Lowest band keeps the label the dashboard has always shown
TEAM_HEALTH_GRADE_FLOOR = 'Error'

# Organization-level grades used for team comparisons
ORGANIZATION_GRADES = [
    (90, 'Exceptional'),
    (75, 'Strong'),
    (50, 'Developing'),
]
ORGANIZATION_GRADE_FLOOR = 'Needs Attention'

# ============================================
# THRESHOLDS
# ============================================

# Personal report
STRENGTH_THRESHOLD = 80
GROWTH_THRESHOLD = 70

# Team score
CONSISTENCY_STDDEV_SCALE = 30
DANGER_WARNING_SIGNS_THRESHOLD = 50
DANGER_RATIO_THRESHOLD = 0.3
DANGER_PENALTY_RATE = 0.5

# Organization rollup
ROLLUP_STRENGTH_THRESHOLD = 80
ROLLUP_CONCERN_THRESHOLD = 75
HIGH_PARTICIPATION_RATE = 0.9
LOW_TEAM_PARTICIPATION_RATE = 0.85
CONSISTENT_STDDEV = 8
HIGH_VARIANCE_STDDEV = 12
STANDOUT_DIMENSION_THRESHOLD = 85
NEEDS_ATTENTION_SCORE = 75
TEAM_ISSUE_DIMENSION_THRESHOLD = 70
SHARE_PRACTICES_SCORE = 85
HIGH_TRUST_THRESHOLD = 85
HIGH_TRUST_SCORE_MARGIN = 5
MAX_NEEDS_ATTENTION_TEAMS = 3
MAX_TEAM_ISSUES = 3

# Trust matrix
TRUST_MATRIX_THRESHOLD = 60

# ============================================
# ASSESSMENTS
# ============================================

MIN_TEAM_MEMBERS = 1
MAX_TEAM_MEMBERS = 100
CODE_LENGTH = 8
# No 0/O or 1/I to keep codes readable
CODE_ALPHABET = 'ABCDEFGHJKLMNPQRSTUVWXYZ23456789'

# ============================================
# COLOURS
# ============================================

COLOURS = {
    'primary_blue': '#2F5496',
    'orange': '#C65911',
    'green': '#548235',
    'dark_green': '#375623',
    'purple': '#7030A0',
    'gold': '#BF9000',
    'grey': '#808080',
    'light_grey': '#B0B0B0',
    'brand': '#1F4E79',
    'red': '#C00000',
}

QUADRANT_COLOURS = {
    'THRIVING_TEAM': COLOURS['green'],
    'SOLID_FOUNDATION': COLOURS['primary_blue'],
    'TRUST_EROSION': COLOURS['gold'],
    'GRIDLOCK': COLOURS['red'],
}


# Helper to get dimension for a question
def get_dimension_for_question(question_id):
    """Return the dimension identifier for a question id such as 'Q7'."""
    for dimension in ALL_DIMENSIONS:
        if question_id in DIMENSION_QUESTIONS[dimension]:
            return dimension
    return None
