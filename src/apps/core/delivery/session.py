# src/apps/core/delivery/session.py
"""
Exam Session

Timed attempt of a single exam paper:

    NOT_STARTED --start()--> IN_PROGRESS --submit() / timeout--> SUBMITTED

The countdown is an asyncio task on the running loop. Scoring happens
exactly once, on the first transition into SUBMITTED.
"""

import asyncio
import logging
from enum import Enum
from typing import Any, Callable, Dict, List, Optional

from ..services.scoring_service import (
    ExamPaper,
    PaperQuestion,
    Score,
    initial_answers,
    score_exam,
    unanswered_questions,
)

logger = logging.getLogger(__name__)


ConfirmCallback = Callable[[List[PaperQuestion]], bool]


class AttemptState(str, Enum):
    NOT_STARTED = 'not_started'
    IN_PROGRESS = 'in_progress'
    SUBMITTED = 'submitted'


class SessionStateError(RuntimeError):
    """Operation not allowed in the current state of the session"""
    pass


class ExamSession:
    """
    One attempt at an exam paper.

    Usage:
        async with ExamSession(paper) as session:
            session.set_answer(question_id, option_id)
            score = session.submit(confirm=ask_user)
            ...
            score = await session.wait_submitted()

    Args:
        paper: Exam paper to take
        tick_interval: Seconds between countdown ticks
        on_submit: Called with the Score once the attempt is submitted
    """

    def __init__(
        self,
        paper: ExamPaper,
        tick_interval: float = 1.0,
        on_submit: Optional[Callable[[Score], None]] = None
    ):
        self.paper = paper
        self.tick_interval = tick_interval
        self.on_submit = on_submit

        self.state = AttemptState.NOT_STARTED
        self.answers: Dict[str, Any] = {}
        self.remaining_seconds: Optional[int] = None
        self.forced = False

        self._score: Optional[Score] = None
        self._countdown: Optional[asyncio.Task] = None
        self._submitted = asyncio.Event()

    @property
    def score(self) -> Optional[Score]:
        return self._score

    @property
    def is_timed(self) -> bool:
        return self.paper.time_limit_seconds is not None

    # =========================================================================
    # TRANSITIONS
    # =========================================================================

    def start(self) -> None:
        """
        Begin the attempt.

        Without a running event loop no countdown task is scheduled and the
        caller drives ``tick()`` itself.
        """
        if self.state != AttemptState.NOT_STARTED:
            raise SessionStateError(f"Session already {self.state.value}")

        self.answers = initial_answers(self.paper)
        self.state = AttemptState.IN_PROGRESS

        if self.is_timed:
            self.remaining_seconds = self.paper.time_limit_seconds
            try:
                loop = asyncio.get_running_loop()
            except RuntimeError:
                loop = None
            if loop is not None:
                self._countdown = loop.create_task(self._run_countdown())

        limit = f"{self.remaining_seconds}s" if self.is_timed else "untimed"
        logger.info(f"Started exam session for {self.paper.id} ({limit})")

    def tick(self) -> Optional[int]:
        """
        Advance the countdown by one second.

        Reaching zero submits the attempt without confirmation. Outside of
        IN_PROGRESS this only reports the remaining time.
        """
        if self.state != AttemptState.IN_PROGRESS or self.remaining_seconds is None:
            return self.remaining_seconds

        self.remaining_seconds = max(self.remaining_seconds - 1, 0)
        if self.remaining_seconds == 0:
            logger.info(f"Time is up for exam {self.paper.id}, submitting")
            self.forced = True
            self._finish()

        return self.remaining_seconds

    def submit(self, confirm: Optional[ConfirmCallback] = None) -> Optional[Score]:
        """
        Submit the attempt.

        Args:
            confirm: Receives the unanswered questions when there are any;
                a falsy result keeps the attempt in progress

        Returns:
            The Score, or None when the confirmation was declined
        """
        if self.state == AttemptState.SUBMITTED:
            return self._score
        if self.state == AttemptState.NOT_STARTED:
            raise SessionStateError("Session has not been started")

        unanswered = unanswered_questions(self.paper, self.answers)
        if unanswered and confirm is not None and not confirm(unanswered):
            logger.debug(f"Submission of exam {self.paper.id} cancelled by the user")
            return None

        return self._finish()

    def set_answer(self, question_id: Any, value: Any) -> bool:
        """Record an answer; ignored unless the attempt is in progress."""
        if self.state != AttemptState.IN_PROGRESS:
            return False
        self.answers[str(question_id)] = value
        return True

    def unanswered(self) -> List[PaperQuestion]:
        return unanswered_questions(self.paper, self.answers)

    async def wait_submitted(self) -> Score:
        await self._submitted.wait()
        return self._score

    def close(self) -> None:
        """Stop the countdown. Safe to call in any state."""
        self._cancel_countdown()

    async def __aenter__(self) -> 'ExamSession':
        self.start()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        self.close()

    # =========================================================================
    # INTERNALS
    # =========================================================================

    def _finish(self) -> Score:
        if self._score is not None:
            return self._score

        self.state = AttemptState.SUBMITTED
        self._cancel_countdown()
        self._score = score_exam(self.paper, self.answers)
        self._submitted.set()

        logger.info(
            f"Submitted exam {self.paper.id}: "
            f"{self._score.points_earned}/{self._score.points_total} "
            f"({self._score.percentage}%) passed={self._score.passed} forced={self.forced}"
        )

        if self.on_submit is not None:
            # The attempt is already submitted; a failing listener must not undo that.
            try:
                self.on_submit(self._score)
            except Exception:
                logger.exception(f"on_submit callback failed for exam {self.paper.id}")

        return self._score

    async def _run_countdown(self) -> None:
        while self.state == AttemptState.IN_PROGRESS:
            await asyncio.sleep(self.tick_interval)
            self.tick()

    def _cancel_countdown(self) -> None:
        task, self._countdown = self._countdown, None
        if task is None or task.done():
            return
        try:
            current = asyncio.current_task()
        except RuntimeError:
            current = None
        # The countdown ends on its own when it is the one submitting.
        if task is not current:
            task.cancel()
