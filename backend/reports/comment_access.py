"""
Internal comment authorization.

Rules, evaluated in order:

1. Report is RESOLVED → ``ReportResolved`` (writes only; reads stay open).
2. Actor is a citizen → ``RoleNotPermitted``.
3. Actor is municipality staff → allowed.
4. Actor is an external maintainer → allowed only when the report is
   delegated to them, otherwise ``NotAssigned``.
5. Any other actor type → ``InvalidAuthorType``.

An allowed write yields a ``CommentAuthor``; only ``as_comment_fields``
turns it into the two nullable author columns of ``Comment``.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from accounts.models import RoleType

from .exceptions import InvalidAuthorType, NotAssigned, ReportResolved, RoleNotPermitted
from .models import Report, ReportStatus

AUTHOR_TYPES: tuple[str, ...] = (RoleType.MUNICIPALITY, RoleType.EXTERNAL_MAINTAINER)


@dataclass(frozen=True)
class CommentAuthor:
    """Tagged comment author: ``MUNICIPALITY(id)`` or ``EXTERNAL_MAINTAINER(id)``."""

    author_type: str
    author_id: int

    def __post_init__(self):
        if self.author_type not in AUTHOR_TYPES:
            raise InvalidAuthorType(self.author_type)

    def as_comment_fields(self) -> dict[str, Any]:
        if self.author_type == RoleType.MUNICIPALITY:
            return {"municipality_user_id": self.author_id, "external_maintainer_id": None}
        return {"municipality_user_id": None, "external_maintainer_id": self.author_id}


class CommentAccessGate:
    """Decides whether an actor may read or write comments on a report."""

    @staticmethod
    def _check_actor(report: Report, actor_type: str, actor_id: int) -> CommentAuthor:
        if actor_type == RoleType.CITIZEN:
            raise RoleNotPermitted()
        if actor_type == RoleType.MUNICIPALITY:
            return CommentAuthor(RoleType.MUNICIPALITY, actor_id)
        if actor_type == RoleType.EXTERNAL_MAINTAINER:
            if report.external_maintainer_id is None or report.external_maintainer_id != actor_id:
                raise NotAssigned()
            return CommentAuthor(RoleType.EXTERNAL_MAINTAINER, actor_id)
        raise InvalidAuthorType(actor_type)

    @classmethod
    def check_write(cls, report: Report, actor_type: str, actor_id: int) -> CommentAuthor:
        """Raise the first failing rule, or return the author to record."""
        if report.status == ReportStatus.RESOLVED:
            raise ReportResolved()
        return cls._check_actor(report, actor_type, actor_id)

    @classmethod
    def check_read(cls, report: Report, actor_type: str, actor_id: int) -> None:
        """Same as ``check_write`` minus the resolution rule."""
        cls._check_actor(report, actor_type, actor_id)

    @classmethod
    def can_write(cls, report: Report, actor_type: str, actor_id: int) -> bool:
        try:
            cls.check_write(report, actor_type, actor_id)
        except (ReportResolved, RoleNotPermitted, NotAssigned, InvalidAuthorType):
            return False
        return True

    @classmethod
    def can_read(cls, report: Report, actor_type: str, actor_id: int) -> bool:
        try:
            cls.check_read(report, actor_type, actor_id)
        except (RoleNotPermitted, NotAssigned, InvalidAuthorType):
            return False
        return True
