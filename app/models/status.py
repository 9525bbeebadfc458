"""
Status enums and transition tables.

Verification (achievements, projects):
    pending -> verified | rejected, verified <-> rejected, same status is a no-op

Applications:
    pending     -> shortlisted | rejected   (recruiter)
    shortlisted -> accepted | rejected      (recruiter)
    pending     -> withdrawn                (student)
    accepted, rejected, withdrawn are terminal
"""

from enum import Enum
from typing import Dict, FrozenSet


class Role(str, Enum):
    student = "student"
    college = "college"
    recruiter = "recruiter"


class VerificationStatus(str, Enum):
    pending = "pending"
    verified = "verified"
    rejected = "rejected"


# Statuses a college may set on an achievement/project
VERIFICATION_DECISIONS: FrozenSet[VerificationStatus] = frozenset({
    VerificationStatus.verified,
    VerificationStatus.rejected,
})


class ApplicationStatus(str, Enum):
    pending = "pending"
    shortlisted = "shortlisted"
    rejected = "rejected"
    accepted = "accepted"
    withdrawn = "withdrawn"


RECRUITER_TRANSITIONS: Dict[ApplicationStatus, FrozenSet[ApplicationStatus]] = {
    ApplicationStatus.pending: frozenset({ApplicationStatus.shortlisted, ApplicationStatus.rejected}),
    ApplicationStatus.shortlisted: frozenset({ApplicationStatus.accepted, ApplicationStatus.rejected}),
}

STUDENT_TRANSITIONS: Dict[ApplicationStatus, FrozenSet[ApplicationStatus]] = {
    ApplicationStatus.pending: frozenset({ApplicationStatus.withdrawn}),
}

TERMINAL_STATUSES: FrozenSet[ApplicationStatus] = frozenset({
    ApplicationStatus.accepted,
    ApplicationStatus.rejected,
    ApplicationStatus.withdrawn,
})


def can_transition(
    current: ApplicationStatus,
    new: ApplicationStatus,
    actor: Role = Role.recruiter
) -> bool:
    """Check `current -> new` against the actor's transition table."""
    if current in TERMINAL_STATUSES:
        return False
    table = STUDENT_TRANSITIONS if actor == Role.student else RECRUITER_TRANSITIONS
    return new in table.get(current, frozenset())
