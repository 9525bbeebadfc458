"""
Models module - internal domain types.

- Principal: authenticated actor for a request
- Role / VerificationStatus / ApplicationStatus: closed status sets
- Transition tables for the application lifecycle
"""

from app.models.principal import Principal
from app.models.status import (
    Role,
    VerificationStatus,
    ApplicationStatus,
    VERIFICATION_DECISIONS,
    TERMINAL_STATUSES,
    can_transition,
)

__all__ = [
    "Principal",
    "Role",
    "VerificationStatus",
    "ApplicationStatus",
    "VERIFICATION_DECISIONS",
    "TERMINAL_STATUSES",
    "can_transition",
]
