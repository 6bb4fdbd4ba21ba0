# src/apps/core/tests/test_scoring.py
"""
Scoring Tests

Tests for the pure scoring functions.
"""

from decimal import Decimal
from uuid import uuid4

import pytest

from apps.core.services.scoring_service import (
    ChoiceOption,
    ExamPaper,
    FreeTextQuestion,
    MultipleChoiceQuestion,
    Score,
    coerce_option_id,
    initial_answers,
    normalize_points,
    score_exam,
    unanswered_questions,
)


def mc(points=1, correct_index=0, option_count=3):
    options = [
        ChoiceOption(id=str(uuid4()), text=f'Option {i}', is_correct=(i == correct_index), order=i)
        for i in range(option_count)
    ]
    return MultipleChoiceQuestion(id=str(uuid4()), text='Pick one', points=points, options=options)


def correct_id(question):
    return next(o.id for o in question.options if o.is_correct)


def wrong_id(question):
    return next(o.id for o in question.options if not o.is_correct)


def paper(*questions, pass_percentage='70'):
    return ExamPaper(
        id=str(uuid4()),
        title='Quiz',
        questions=list(questions),
        pass_percentage=Decimal(pass_percentage),
    )


class TestScoringScenarios:
    """Reference scenarios."""

    def test_two_correct_answers(self):
        q1, q2 = mc(), mc()
        score = score_exam(paper(q1, q2), {q1.id: correct_id(q1), q2.id: correct_id(q2)})

        assert score == Score(points_total=2, points_earned=2, percentage=Decimal('100.00'), passed=True)

    def test_one_correct_one_blank(self):
        q1, q2 = mc(), mc()
        score = score_exam(paper(q1, q2), {q1.id: correct_id(q1), q2.id: None})

        assert score.points_total == 2
        assert score.points_earned == 1
        assert score.percentage == Decimal('50.00')
        assert score.passed is False

    def test_no_questions(self):
        score = score_exam(paper(), {})

        assert score == Score(points_total=0, points_earned=0, percentage=Decimal('0.00'), passed=False)


class TestMultipleChoice:

    def test_wrong_option_earns_nothing(self):
        q = mc(points=3)
        score = score_exam(paper(q), {q.id: wrong_id(q)})

        assert score.points_total == 3
        assert score.points_earned == 0

    def test_answer_whitespace_is_ignored(self):
        q = mc()
        score = score_exam(paper(q), {q.id: f'  {correct_id(q)}\n'})

        assert score.points_earned == 1

    def test_uppercase_option_id_matches(self):
        q = mc()
        score = score_exam(paper(q), {q.id: correct_id(q).upper()})

        assert score.points_earned == 1

    def test_unparsable_answer_counts_as_unanswered(self):
        q = mc()
        answers = {q.id: 'not-an-id'}

        assert score_exam(paper(q), answers).points_earned == 0
        assert unanswered_questions(paper(q), answers) == [q]

    def test_unknown_option_earns_nothing(self):
        q = mc()
        score = score_exam(paper(q), {q.id: str(uuid4())})

        assert score.points_earned == 0

    def test_question_without_correct_option(self):
        q = mc(correct_index=-1)
        score = score_exam(paper(q), {q.id: q.options[0].id})

        assert score.points_total == 1
        assert score.points_earned == 0

    def test_question_without_options(self):
        q = MultipleChoiceQuestion(id=str(uuid4()), text='Empty', options=[])
        score = score_exam(paper(q), {q.id: str(uuid4())})

        assert score.points_total == 1
        assert score.points_earned == 0


class TestFreeText:

    def test_non_empty_answer_gets_full_credit(self):
        q = FreeTextQuestion(id=str(uuid4()), text='Explain', points=4)
        score = score_exam(paper(q), {q.id: 'Because'})

        assert score.points_earned == 4

    @pytest.mark.parametrize('answer', ['', '   ', '\n\t', None])
    def test_blank_answer_gets_nothing(self, answer):
        q = FreeTextQuestion(id=str(uuid4()), text='Explain', points=4)
        score = score_exam(paper(q), {q.id: answer})

        assert score.points_earned == 0


class TestScoreProperties:

    def test_points_total_ignores_answers(self):
        q1, q2 = mc(points=2), mc(points=5)
        ft = FreeTextQuestion(id=str(uuid4()), text='Explain', points=3)
        exam = paper(q1, q2, ft)

        for answers in ({}, {q1.id: correct_id(q1)}, {q1.id: wrong_id(q1), ft.id: 'x'}):
            assert score_exam(exam, answers).points_total == 10

    def test_scoring_is_idempotent(self):
        q1, q2 = mc(), mc()
        exam = paper(q1, q2)
        answers = {q1.id: correct_id(q1), q2.id: wrong_id(q2)}

        assert score_exam(exam, answers) == score_exam(exam, answers)
        assert answers == {q1.id: correct_id(q1), q2.id: wrong_id(q2)}

    def test_pass_at_exact_threshold(self):
        q1, q2 = mc(), mc()
        score = score_exam(paper(q1, q2, pass_percentage='50'), {q1.id: correct_id(q1)})

        assert score.percentage == Decimal('50.00')
        assert score.passed is True

    def test_zero_threshold_passes_empty_exam(self):
        score = score_exam(paper(pass_percentage='0'), {})

        assert score.passed is True

    def test_percentage_rounds_half_up(self):
        q1, q2, q3 = mc(), mc(), mc()
        score = score_exam(paper(q1, q2, q3), {q1.id: correct_id(q1), q2.id: correct_id(q2)})

        assert score.percentage == Decimal('66.67')

    def test_threshold_compares_unrounded_ratio(self):
        questions = [mc() for _ in range(3)]
        answers = {q.id: correct_id(q) for q in questions[:2]}
        score = score_exam(paper(*questions, pass_percentage='66.67'), answers)

        assert score.percentage == Decimal('66.67')
        assert score.passed is False

    def test_rounding_up_to_threshold_does_not_pass(self):
        answered = FreeTextQuestion(id=str(uuid4()), text='Explain', points=Decimal('69996'))
        blank = FreeTextQuestion(id=str(uuid4()), text='Explain', points=Decimal('30004'))
        score = score_exam(paper(answered, blank, pass_percentage='70'), {answered.id: 'x'})

        assert score.percentage == Decimal('70.00')
        assert score.passed is False

    def test_fractional_weights(self):
        half = FreeTextQuestion(id=str(uuid4()), text='Explain', points=Decimal('2.5'))
        small = FreeTextQuestion(id=str(uuid4()), text='Name it', points=Decimal('0.5'))
        score = score_exam(paper(half, small), {half.id: 'x', small.id: ''})

        assert score.points_total == Decimal('3')
        assert score.points_earned == Decimal('2.5')
        assert score.percentage == Decimal('83.33')
        assert score.passed is True

    def test_weighted_points(self):
        heavy, light = mc(points=3), mc(points=1)
        score = score_exam(paper(heavy, light), {heavy.id: correct_id(heavy)})

        assert score.points_earned == 3
        assert score.percentage == Decimal('75.00')
        assert score.passed is True

    def test_answer_keys_may_be_uuid_objects(self):
        from uuid import UUID
        q = mc()
        score = score_exam(paper(q), {UUID(q.id): correct_id(q)})

        assert score.points_earned == 1


class TestHelpers:

    @pytest.mark.parametrize('value,expected', [
        (3, 3), ('2', 2), ('2.5', Decimal('2.5')), (0.5, Decimal('0.5')), (None, 1),
        (0, 1), (-4, 1), ('abc', 1), (True, 1), ('NaN', 1),
    ])
    def test_normalize_points(self, value, expected):
        assert normalize_points(value) == expected

    def test_coerce_option_id(self):
        option_id = uuid4()

        assert coerce_option_id(option_id) == str(option_id)
        assert coerce_option_id(f' {option_id} ') == str(option_id)
        assert coerce_option_id('') is None
        assert coerce_option_id(None) is None

    def test_initial_answers(self):
        q = mc()
        ft = FreeTextQuestion(id=str(uuid4()), text='Explain')

        assert initial_answers(paper(q, ft)) == {q.id: None, ft.id: ''}

    def test_score_to_dict(self):
        score = Score(points_total=3, points_earned=2, percentage=Decimal('66.67'), passed=False)

        assert score.to_dict() == {
            'points_total': 3,
            'points_earned': 2,
            'percentage': 66.67,
            'passed': False,
        }
        assert Score.from_dict(score.to_dict()) == score


class TestExamPaperFromPayload:

    def test_builds_tagged_questions_in_order(self):
        mc_id, ft_id = str(uuid4()), str(uuid4())
        right, wrong = str(uuid4()), str(uuid4())
        payload = {
            'id': str(uuid4()),
            'title': 'Quiz',
            'time_limit_minutes': 5,
            'pass_percentage': 80.0,
            'questions': [
                {'id': ft_id, 'text': 'Explain', 'type': 'free_text', 'points': 2, 'order': 1, 'options': []},
                {
                    'id': mc_id, 'text': 'Pick', 'type': 'multiple_choice', 'points': 0, 'order': 0,
                    'options': [
                        {'id': wrong, 'text': 'No', 'is_correct': False, 'order': 1},
                        {'id': right, 'text': 'Yes', 'is_correct': True, 'order': 0},
                    ],
                },
            ],
        }

        exam = ExamPaper.from_payload(payload)

        assert [q.id for q in exam.questions] == [mc_id, ft_id]
        assert isinstance(exam.questions[0], MultipleChoiceQuestion)
        assert isinstance(exam.questions[1], FreeTextQuestion)
        assert [o.id for o in exam.questions[0].options] == [right, wrong]
        assert exam.questions[0].points == 1
        assert exam.time_limit_seconds == 300
        assert exam.pass_percentage == Decimal('80.0')

    def test_defaults(self):
        exam = ExamPaper.from_payload({'id': 'x', 'title': 'Quiz'})

        assert exam.questions == []
        assert exam.time_limit_seconds is None
        assert exam.pass_percentage == Decimal('70')

    def test_fractional_points_survive_the_payload(self):
        payload = {
            'id': str(uuid4()),
            'title': 'Quiz',
            'questions': [
                {'id': 'q1', 'text': 'Explain', 'type': 'free_text', 'points': 2.5, 'order': 0},
                {'id': 'q2', 'text': 'Name it', 'type': 'free_text', 'points': 0.5, 'order': 1},
            ],
        }

        exam = ExamPaper.from_payload(payload)
        score = score_exam(exam, {'q1': 'x', 'q2': ''})

        assert [q.points for q in exam.questions] == [Decimal('2.5'), Decimal('0.5')]
        assert score.percentage == Decimal('83.33')
        assert score.passed is True
