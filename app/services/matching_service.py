"""
Matching Service

PURPOSE:
Produce the 0-100 matchScore stored on an application when it is created.

HOW IT WORKS:
Skill overlap between the student's skills and the opportunity's required
skills. Skills are referenced by id; names are compared case-insensitively
so two catalogue entries for "Python" still match.

The score is computed ONCE at application time and never recomputed when
the application's status changes.
"""

from typing import Callable, Iterable, Optional


# Signature of an injectable scorer: (student skills, required skills) -> score
MatchScorer = Callable[[Iterable, Iterable], Optional[int]]


def _normalize(skill) -> str:
    if isinstance(skill, dict):
        skill = skill.get("name") or skill.get("_id")
    return str(skill).strip().lower()


def compute_skill_match_percentage(student_skills: Iterable, required_skills: Iterable) -> float:
    """
    Compute percentage of required skills that student has.

    Accepts ids, names or populated skill documents.

    Returns:
        Float between 0 and 100
    """
    required = {_normalize(s) for s in required_skills}
    if not required:
        return 100.0  # No requirements = 100% match

    held = {_normalize(s) for s in student_skills}
    matches = held.intersection(required)

    return (len(matches) / len(required)) * 100


def compute_match_score(student_skills: Iterable, required_skills: Iterable) -> int:
    """Default scorer: skill match percentage rounded to an int."""
    return int(round(compute_skill_match_percentage(student_skills, required_skills)))
