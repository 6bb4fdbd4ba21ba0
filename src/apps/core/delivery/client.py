# src/apps/core/delivery/client.py
"""
Exam Delivery Client

Fetches exam papers and grades answers over HTTP.
"""

import logging
from typing import Any, Dict

import httpx

from shared.common.clients import BaseServiceClient, SessionContext

from ..services.scoring_service import ExamPaper, Score
from .session import ExamSession

logger = logging.getLogger(__name__)


class ExamDeliveryClient(BaseServiceClient):
    """Client for the delivery endpoints of the course service"""

    def __init__(
        self,
        session: SessionContext,
        base_url: str = None,
        transport: httpx.AsyncBaseTransport = None
    ):
        super().__init__('course-service', session, base_url=base_url, transport=transport)

    async def fetch_exam(self, exam_id: str) -> ExamPaper:
        payload = await self.get(f'/api/v1/delivery/{exam_id}/')
        return ExamPaper.from_payload(payload)

    async def grade(self, exam_id: str, answers: Dict[str, Any]) -> Score:
        """Score answers on the server."""
        data = await self.post(f'/api/v1/delivery/{exam_id}/grade/', data={'answers': answers})
        return Score.from_dict(data)

    async def open_session(self, exam_id: str, **kwargs) -> ExamSession:
        """Fetch a paper and wrap it in an unstarted ExamSession."""
        paper = await self.fetch_exam(exam_id)
        logger.debug(f"Opened exam session for {paper.id} with {len(paper.questions)} questions")
        return ExamSession(paper, **kwargs)
