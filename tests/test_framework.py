"""Tests for the instrument configuration."""
import pytest

from framework import (
    ALL_DIMENSIONS,
    DIMENSION_QUESTIONS,
    DIMENSION_WEIGHTS,
    QUESTION_IDS,
    ROLLUP_DIMENSIONS,
    get_dimension_for_question,
)


class TestQuestionMap:
    @pytest.mark.parametrize('question_id, dimension', [
        ('Q1', 'team_connection'),
        ('Q6', 'appreciation'),
        ('Q12', 'trust_positivity'),
        ('Q20', 'goal_support'),
        ('Q22', 'warning_signs'),
        ('Q27', 'warning_signs'),
    ])
    def test_dimension_for_question(self, question_id, dimension):
        assert get_dimension_for_question(question_id) == dimension

    def test_unknown_question(self):
        assert get_dimension_for_question('Q28') is None

    def test_every_question_belongs_to_one_dimension(self):
        assigned = [q for d in ALL_DIMENSIONS for q in DIMENSION_QUESTIONS[d]]
        assert sorted(assigned, key=lambda q: int(q[1:])) == QUESTION_IDS
        assert all(get_dimension_for_question(q) in ALL_DIMENSIONS for q in QUESTION_IDS)


class TestDimensionLists:
    def test_rollup_leaves_out_warning_signs(self):
        assert ROLLUP_DIMENSIONS == [d for d in ALL_DIMENSIONS if d != 'warning_signs']

    def test_weights_sum_to_one(self):
        assert sum(DIMENSION_WEIGHTS.values()) == pytest.approx(1.0)
