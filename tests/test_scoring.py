"""Tests for the dimension scorer and the personal and team aggregators."""
import pytest

from framework import ALL_DIMENSIONS, DIMENSION_NAMES, DIMENSION_WEIGHTS, QUESTION_IDS
from scoring import (
    DEFAULT_GROWTH_AREA,
    DEFAULT_RECOMMENDATION,
    DEFAULT_STRENGTH,
    IncompleteResponsesError,
    NoSubmissionsError,
    calculate_dimension_scores,
    calculate_personal_score,
    calculate_team_report,
    calculate_team_score,
    compare_to_team,
    generate_recommendations,
    get_score_grade,
    get_team_health_grade,
    identify_growth_areas,
    identify_strengths,
    round_half_up,
    score_responses,
    validate_responses,
)


def _dims(value=100, **overrides):
    scores = {d: value for d in ALL_DIMENSIONS}
    scores.update(overrides)
    return scores


class TestRoundHalfUp:
    def test_half_rounds_up(self):
        assert round_half_up(2.25, 1) == 2.3
        assert round_half_up(0.125, 2) == 0.13

    def test_places_zero(self):
        assert round_half_up(84.5, 0) == 85


class TestValidation:
    def test_complete_set_passes(self, responses):
        validate_responses(responses(3))

    def test_missing_questions_listed_in_order(self, responses):
        answers = responses(3)
        del answers['Q27']
        del answers['Q3']
        with pytest.raises(IncompleteResponsesError) as exc:
            validate_responses(answers)
        assert exc.value.missing == ['Q3', 'Q27']
        assert 'Q3' in str(exc.value)

    @pytest.mark.parametrize('bad', [0, 6, 3.5, '4', True])
    def test_out_of_range_or_wrong_type(self, responses, bad):
        with pytest.raises(IncompleteResponsesError) as exc:
            validate_responses(responses(3, Q10=bad))
        assert exc.value.invalid == ['Q10']

    def test_not_a_dict(self):
        with pytest.raises(IncompleteResponsesError) as exc:
            validate_responses(None)
        assert exc.value.missing == QUESTION_IDS

    def test_is_a_value_error(self):
        assert issubclass(IncompleteResponsesError, ValueError)


class TestDimensionScorer:
    def test_all_fives_with_q22_best(self, perfect_responses):
        scores = calculate_dimension_scores(perfect_responses)
        assert scores == {d: 100 for d in ALL_DIMENSIONS}

    def test_reverse_scored_q22(self, responses):
        best = calculate_dimension_scores(responses(3, Q22=1))['warning_signs']
        worst = calculate_dimension_scores(responses(3, Q22=5))['warning_signs']
        assert best > worst
        # six answers of 3 and one reversed answer (6 - 1 = 5)
        assert best == pytest.approx((3 * 6 + 5) / 7 * 20)

    def test_only_q22_is_reversed(self, responses):
        scores = calculate_dimension_scores(responses(1, Q22=5))
        assert all(scores[d] == 20 for d in ALL_DIMENSIONS)

    @pytest.mark.parametrize('value', [1, 2, 3, 4, 5])
    def test_scores_within_range(self, responses, value):
        for q22 in (1, 5):
            scores = calculate_dimension_scores(responses(value, Q22=q22))
            assert all(0 <= s <= 100 for s in scores.values())
            assert 0 <= calculate_personal_score(scores) <= 100

    def test_partial_dimension_uses_answered_questions(self, responses):
        answers = responses(5)
        answers['Q1'] = 1
        del answers['Q2']
        scores = calculate_dimension_scores(answers)
        assert scores['team_connection'] == pytest.approx((1 + 5) / 2 * 20)

    def test_empty_dimension_scores_zero(self, responses):
        answers = {q: v for q, v in responses(4).items() if q not in ('Q4', 'Q5', 'Q6')}
        assert calculate_dimension_scores(answers)['appreciation'] == 0


class TestPersonalScore:
    def test_weights_sum_to_one(self):
        assert sum(DIMENSION_WEIGHTS.values()) == pytest.approx(1.0)

    def test_all_hundred_gives_hundred(self):
        assert calculate_personal_score(_dims(100)) == 100.0

    def test_warning_signs_weighs_forty_percent(self):
        assert calculate_personal_score(_dims(0, warning_signs=100)) == 40.0
        assert calculate_personal_score(_dims(0, appreciation=100)) == 10.0

    def test_rounded_to_one_decimal(self):
        # 0.1 * 6 * 73.33 + 0.4 * 66.67 = 70.66...
        score = calculate_personal_score(_dims(220 / 3, warning_signs=200 / 3))
        assert score == 70.7

    @pytest.mark.parametrize('score, grade', [
        (100, 'Excellent'),
        (85.0, 'Excellent'),
        (84.9, 'Good'),
        (70.0, 'Good'),
        (69.9, 'Needs improvement'),
        (55.0, 'Needs improvement'),
        (54.9, 'Alert'),
        (0, 'Alert'),
    ])
    def test_grade_boundaries(self, score, grade):
        assert get_score_grade(score) == grade


class TestStrengthsAndGrowth:
    def test_strengths_at_threshold(self):
        strengths = identify_strengths(_dims(50, appreciation=80, goal_support=79.9))
        assert strengths == [DIMENSION_NAMES['appreciation']]

    def test_default_strength(self):
        assert identify_strengths(_dims(60)) == [DEFAULT_STRENGTH]

    def test_growth_areas_below_seventy(self):
        growth = identify_growth_areas(_dims(90, responsiveness=69.9, trust_positivity=70))
        assert growth == [DIMENSION_NAMES['responsiveness']]

    def test_default_growth_area(self):
        assert identify_growth_areas(_dims(70)) == [DEFAULT_GROWTH_AREA]


class TestRecommendations:
    def test_no_rule_triggered(self):
        assert generate_recommendations(_dims(90)) == [DEFAULT_RECOMMENDATION]

    def test_all_rules_in_fixed_order(self):
        recommendations = generate_recommendations(_dims(0))
        assert len(recommendations) == 6
        assert recommendations[0].startswith("Watch your communication style")
        assert recommendations[2].startswith("Build your conflict skills")
        assert recommendations[4].startswith("Give more positive feedback")
        assert recommendations[5].startswith("Get to know your team")

    def test_thresholds(self):
        # warning signs < 60 and conflict < 65 only
        recommendations = generate_recommendations(_dims(90, warning_signs=59.9, conflict_management=64.9))
        assert len(recommendations) == 4
        assert generate_recommendations(_dims(90, warning_signs=60, conflict_management=65)) == \
            [DEFAULT_RECOMMENDATION]

    def test_single_message_rules(self):
        recommendations = generate_recommendations(_dims(90, team_connection=69))
        assert len(recommendations) == 1
        assert recommendations[0].startswith("Get to know your team")


class TestScoreResponses:
    def test_perfect_scenario(self, perfect_responses):
        result = score_responses(perfect_responses)
        assert result['personal_score'] == 100.0
        assert result['grade'] == 'Excellent'
        assert result['strengths'] == [DIMENSION_NAMES[d] for d in ALL_DIMENSIONS]
        assert result['growth_areas'] == [DEFAULT_GROWTH_AREA]
        assert result['recommendations'] == [DEFAULT_RECOMMENDATION]

    def test_rejects_incomplete(self, responses):
        answers = responses(4)
        del answers['Q14']
        with pytest.raises(IncompleteResponsesError):
            score_responses(answers)


class TestTeamScore:
    def test_worked_example_rounding_chain(self):
        result = calculate_team_score([90, 90, 30], [90, 90, 20])
        assert result['base_score'] == 70.0
        assert result['standard_deviation'] == 28.3
        assert result['consistency_factor'] == 0.06
        assert result['penalty_factor'] == 0.98
        # 70.0 x 0.0572 x 0.9833 with unrounded factors
        assert result['team_score'] == 3.9

    def test_uniform_team_keeps_mean(self):
        result = calculate_team_score([80, 80, 80, 80], [90, 90, 90, 90])
        assert result == {
            'team_score': 80.0,
            'base_score': 80.0,
            'consistency_factor': 1.0,
            'penalty_factor': 1.0,
            'standard_deviation': 0.0,
        }

    def test_population_standard_deviation(self):
        result = calculate_team_score([60, 80], [90, 90])
        assert result['standard_deviation'] == 10.0
        assert result['team_score'] == round_half_up(70 * (1 - 10 / 30), 1)

    def test_consistency_floors_at_zero(self):
        result = calculate_team_score([100, 0], [90, 90])
        assert result['consistency_factor'] == 0.0
        assert result['team_score'] == 0.0

    def test_penalty_only_above_thirty_percent(self):
        # 3 of 10 in danger is exactly 0.3: no penalty
        exactly = calculate_team_score([70] * 10, [40] * 3 + [90] * 7)
        assert exactly['penalty_factor'] == 1.0
        above = calculate_team_score([70] * 4, [40, 40, 90, 90])
        assert above['penalty_factor'] == 0.9
        assert above['team_score'] == 63.0

    def test_warning_signs_at_fifty_is_safe(self):
        assert calculate_team_score([70, 70], [50, 50])['penalty_factor'] == 1.0

    def test_more_spread_never_increases_score(self):
        previous = None
        for spread in range(0, 35, 5):
            scores = [70 - spread, 70, 70 + spread]
            team_score = calculate_team_score(scores, [90, 90, 90])['team_score']
            if previous is not None:
                assert team_score <= previous
            previous = team_score

    def test_empty_team_raises(self):
        with pytest.raises(NoSubmissionsError):
            calculate_team_score([], [])

    @pytest.mark.parametrize('score, grade', [
        (80, 'Exceptional Team'),
        (79.9, 'Healthy Team'),
        (65, 'Healthy Team'),
        (64.9, 'Risk Team'),
        (50, 'Risk Team'),
        (49.9, 'Error'),
    ])
    def test_health_grades(self, score, grade):
        assert get_team_health_grade(score) == grade


class TestTeamReport:
    def _records(self, responses):
        return [
            score_responses(responses(5, Q22=1)),
            score_responses(responses(3)),
            score_responses(responses(4, Q22=2)),
        ]

    def test_dimension_averages_and_count(self, responses):
        report = calculate_team_report(self._records(responses))
        assert report['participation_count'] == 3
        assert set(report['dimension_scores']) == set(ALL_DIMENSIONS)
        assert report['dimension_scores']['appreciation'] == 80.0
        assert report['health_grade'] == get_team_health_grade(report['team_score'])

    def test_idempotent(self, responses):
        records = self._records(responses)
        assert calculate_team_report(records) == calculate_team_report(records)

    def test_no_records(self):
        with pytest.raises(NoSubmissionsError, match="No submissions yet"):
            calculate_team_report([])

    def test_compare_to_team(self, responses):
        records = self._records(responses)
        report = calculate_team_report(records)
        comparison = compare_to_team(records[0], report)
        assert comparison['score_difference'] == round_half_up(100.0 - report['team_score'], 1)
        entry = comparison['dimensions']['appreciation']
        assert entry == {'personal': 100, 'team': 80.0, 'difference': 20.0}
