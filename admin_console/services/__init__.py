"""Workflow services used by the management screens."""

from .loader import LazyTabLoader
from .notices import Notice, confirm, describe
from .session import AdminSession, end_session, get_session, start_session
from .workflow import AdminWorkflowFacade

__all__ = [
    "AdminSession",
    "AdminWorkflowFacade",
    "LazyTabLoader",
    "Notice",
    "confirm",
    "describe",
    "end_session",
    "get_session",
    "start_session",
]
