"""
Principal - the authenticated actor behind a request.

Built from the JWT on every request and handed explicitly to the
ownership resolver; nothing about it is cached between requests.
"""

from dataclasses import dataclass

from app.models.status import Role


@dataclass(frozen=True)
class Principal:
    user_id: str
    role: Role
