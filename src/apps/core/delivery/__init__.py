# src/apps/core/delivery/__init__.py
"""
Exam Delivery

Client-side exam taking: the timed session state machine and the HTTP
client that fetches exam papers.
"""

from .session import AttemptState, ExamSession, SessionStateError
from .client import ExamDeliveryClient

__all__ = [
    'AttemptState',
    'ExamSession',
    'SessionStateError',
    'ExamDeliveryClient',
]
