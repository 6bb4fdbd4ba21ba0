# src/apps/core/services/scoring_service.py
"""
Scoring Service

Pure scoring of an exam paper against a mapping of answers. Nothing in this
module touches the database: the same functions grade a submission on the
server and inside a client-side ExamSession.
"""

import logging
from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Dict, Any, List, Optional, Union
from uuid import UUID

logger = logging.getLogger(__name__)

MULTIPLE_CHOICE = 'multiple_choice'
FREE_TEXT = 'free_text'

DEFAULT_PASS_PERCENTAGE = Decimal('70')
TWO_PLACES = Decimal('0.01')
DEFAULT_POINTS = Decimal('1')
ZERO = Decimal('0')


def normalize_points(value: Any) -> Decimal:
    """
    Weight of a question as a Decimal; fractional weights such as 0.5 are
    kept. Unset, invalid or non-positive counts as 1.
    """
    if value is None or isinstance(value, bool):
        return DEFAULT_POINTS
    try:
        points = Decimal(str(value).strip())
    except (InvalidOperation, ValueError):
        return DEFAULT_POINTS
    if not points.is_finite() or points <= 0:
        return DEFAULT_POINTS
    return points


def coerce_option_id(value: Any) -> Optional[str]:
    """
    Coerce a recorded answer to the canonical string form of an option id.

    Surrounding whitespace is ignored. Anything that is not a UUID is
    treated as no answer.
    """
    if value is None:
        return None
    if isinstance(value, UUID):
        return str(value)
    try:
        return str(UUID(str(value).strip()))
    except ValueError:
        return None


# =============================================================================
# EXAM PAPER
# =============================================================================

@dataclass(frozen=True)
class ChoiceOption:
    id: str
    text: str = ''
    is_correct: bool = False
    order: int = 0


@dataclass(frozen=True)
class MultipleChoiceQuestion:
    id: str
    text: str
    points: Decimal = DEFAULT_POINTS
    order: int = 0
    options: List[ChoiceOption] = field(default_factory=list)

    type = MULTIPLE_CHOICE

    def correct_option_ids(self) -> List[str]:
        return [
            option_id
            for option_id in (coerce_option_id(o.id) for o in self.options if o.is_correct)
            if option_id is not None
        ]

    def earned(self, answer: Any) -> Decimal:
        selected = coerce_option_id(answer)
        if selected is None:
            return ZERO
        return normalize_points(self.points) if selected in self.correct_option_ids() else ZERO

    def is_answered(self, answer: Any) -> bool:
        return coerce_option_id(answer) is not None


@dataclass(frozen=True)
class FreeTextQuestion:
    id: str
    text: str
    points: Decimal = DEFAULT_POINTS
    order: int = 0

    type = FREE_TEXT

    def earned(self, answer: Any) -> Decimal:
        # Presence check only; free text answers are graded by hand.
        return normalize_points(self.points) if self.is_answered(answer) else ZERO

    def is_answered(self, answer: Any) -> bool:
        return answer is not None and str(answer).strip() != ''


PaperQuestion = Union[MultipleChoiceQuestion, FreeTextQuestion]


@dataclass(frozen=True)
class ExamPaper:
    """Read-only view of an exam as delivered to a test-taker."""

    id: str
    title: str
    questions: List[PaperQuestion] = field(default_factory=list)
    description: str = ''
    time_limit_minutes: Optional[int] = None
    allowed_attempts: int = 1
    pass_percentage: Decimal = DEFAULT_PASS_PERCENTAGE

    @property
    def time_limit_seconds(self) -> Optional[int]:
        if not self.time_limit_minutes:
            return None
        return int(self.time_limit_minutes) * 60

    def get_question(self, question_id: Any) -> Optional[PaperQuestion]:
        key = str(question_id)
        return next((q for q in self.questions if q.id == key), None)

    @classmethod
    def from_payload(cls, payload: Dict[str, Any]) -> 'ExamPaper':
        """
        Build a paper from the exam payload returned by the API.

        Questions and options are sorted by their ``order`` key. Unknown
        question types are graded as free text.
        """
        questions = []
        for item in sorted(payload.get('questions') or [], key=lambda q: q.get('order') or 0):
            points = normalize_points(item.get('points'))
            if item.get('type') == MULTIPLE_CHOICE:
                options = [
                    ChoiceOption(
                        id=str(o.get('id')),
                        text=o.get('text') or '',
                        is_correct=bool(o.get('is_correct')),
                        order=o.get('order') or 0,
                    )
                    for o in sorted(item.get('options') or [], key=lambda o: o.get('order') or 0)
                ]
                questions.append(MultipleChoiceQuestion(
                    id=str(item['id']),
                    text=item.get('text') or '',
                    points=points,
                    order=item.get('order') or 0,
                    options=options,
                ))
            else:
                questions.append(FreeTextQuestion(
                    id=str(item['id']),
                    text=item.get('text') or '',
                    points=points,
                    order=item.get('order') or 0,
                ))

        pass_percentage = payload.get('pass_percentage')
        time_limit = payload.get('time_limit_minutes')

        return cls(
            id=str(payload['id']),
            title=payload.get('title') or '',
            description=payload.get('description') or '',
            questions=questions,
            time_limit_minutes=int(time_limit) if time_limit else None,
            allowed_attempts=payload.get('allowed_attempts') or 1,
            pass_percentage=(
                Decimal(str(pass_percentage))
                if pass_percentage is not None else DEFAULT_PASS_PERCENTAGE
            ),
        )


# =============================================================================
# SCORE
# =============================================================================

@dataclass(frozen=True)
class Score:
    points_total: Decimal
    points_earned: Decimal
    percentage: Decimal
    passed: bool

    def to_dict(self) -> Dict[str, Any]:
        return {
            'points_total': float(self.points_total),
            'points_earned': float(self.points_earned),
            'percentage': float(self.percentage),
            'passed': self.passed,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Score':
        return cls(
            points_total=Decimal(str(data['points_total'])),
            points_earned=Decimal(str(data['points_earned'])),
            percentage=Decimal(str(data['percentage'])).quantize(TWO_PLACES),
            passed=bool(data['passed']),
        )


# =============================================================================
# ANSWERS AND SCORING
# =============================================================================

def initial_answers(paper: ExamPaper) -> Dict[str, Any]:
    """Empty answer sheet: None per multiple choice, '' per free text."""
    return {
        q.id: None if q.type == MULTIPLE_CHOICE else ''
        for q in paper.questions
    }


def unanswered_questions(paper: ExamPaper, answers: Dict[str, Any]) -> List[PaperQuestion]:
    """Questions of the paper that have no usable answer yet."""
    return [
        q for q in paper.questions
        if not q.is_answered(answers.get(q.id))
    ]


def score_exam(paper: ExamPaper, answers: Dict[str, Any]) -> Score:
    """
    Score an answer mapping against a paper.

    Never raises for malformed content: an exam without questions scores 0%,
    a multiple choice question without a correct option can never be earned.

    Args:
        paper: Exam paper
        answers: Mapping of question id to the recorded answer

    Returns:
        Score with the percentage rounded half-up to two decimals
    """
    answers = {str(k): v for k, v in (answers or {}).items()}

    points_total = ZERO
    points_earned = ZERO
    for question in paper.questions:
        points_total += normalize_points(question.points)
        points_earned += question.earned(answers.get(question.id))

    if points_total > 0:
        percentage = (
            points_earned / points_total * 100
        ).quantize(TWO_PLACES, rounding=ROUND_HALF_UP)
    else:
        percentage = Decimal('0.00')

    # The threshold is compared against the exact ratio; rounding is for display.
    passed = points_earned * 100 >= Decimal(str(paper.pass_percentage)) * points_total

    score = Score(
        points_total=points_total,
        points_earned=points_earned,
        percentage=percentage,
        passed=passed,
    )

    logger.debug(
        f"Scored exam {paper.id}: {points_earned}/{points_total} ({percentage}%)"
    )

    return score
