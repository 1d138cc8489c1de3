"""Moderation rules and mutation guards."""

from .gate import MutationGate, MutationTicket
from .state_machine import Accepted, Rejected, RejectionReason, allowed_actions, decide

__all__ = [
    "Accepted",
    "MutationGate",
    "MutationTicket",
    "Rejected",
    "RejectionReason",
    "allowed_actions",
    "decide",
]
