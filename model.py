"""
Data models for xbar-pr-status.

A PullRequest is loaded once from the GraphQL response and never changes
afterwards. Its display Status is derived on demand from the other fields.
"""

from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from check_status import CheckStatus


class StatusKind(str, Enum):
    """What the menu bar shows for a pull request, one glyph per kind."""

    SUCCESS_AND_APPROVED = "success_and_approved"
    SUCCESS_AWAITING_APPROVAL = "success_awaiting_approval"
    DRAFT = "draft"
    SUCCESS = "success"
    PENDING = "pending"
    FAILURE = "failure"
    UNKNOWN = "unknown"
    NEEDS_ATTENTION = "needs_attention"
    ERROR = "error"
    QUEUED = "queued"

    @classmethod
    def for_check_status(cls, status: CheckStatus) -> "StatusKind":
        """
        Map a raw CI status to the kind shown for it.

        This is the table used for individual checks and for any rollup that
        is not SUCCESS. It ignores review, queue and draft state.
        """
        return _KIND_BY_CHECK_STATUS[status]


# EXPECTED is a required status that has not reported yet, so it waits like PENDING.
_KIND_BY_CHECK_STATUS = {
    CheckStatus.ERROR: StatusKind.ERROR,
    CheckStatus.EXPECTED: StatusKind.PENDING,
    CheckStatus.FAILURE: StatusKind.FAILURE,
    CheckStatus.PENDING: StatusKind.PENDING,
    CheckStatus.SUCCESS: StatusKind.SUCCESS,
    CheckStatus.ACTION_REQUIRED: StatusKind.NEEDS_ATTENTION,
    CheckStatus.TIMED_OUT: StatusKind.ERROR,
    CheckStatus.CANCELLED: StatusKind.ERROR,
    CheckStatus.NEUTRAL: StatusKind.SUCCESS,
    CheckStatus.SKIPPED: StatusKind.SUCCESS,
    CheckStatus.STARTUP_FAILURE: StatusKind.ERROR,
    CheckStatus.STALE: StatusKind.ERROR,
}


class Status(BaseModel):
    """
    The derived display status of a pull request.

    `reviewer` is only set for SUCCESS_AWAITING_APPROVAL, where it names the
    person the pull request is waiting on.
    """
    model_config = ConfigDict(frozen=True)

    kind: StatusKind
    reviewer: Optional[str] = None


class Check(BaseModel):
    """
    One CI signal on the latest commit.

    Loaded from either a commit status context or a check run; once loaded,
    the two look the same.
    """
    model_config = ConfigDict(frozen=True)

    name: str
    status: CheckStatus
    url: str


class PullRequest(BaseModel):
    """
    One of the viewer's open pull requests.

    overall_status is None when the latest commit has no statusCheckRollup at
    all, meaning the repository has no CI configured.
    """
    model_config = ConfigDict(frozen=True)

    number: int = Field(ge=0)
    title: str
    head_ref: str
    url: str
    updated_at: datetime
    is_draft: bool
    reviewer: Optional[str] = None  # Login of the first outstanding review request
    approved: bool = False
    queued: bool = False  # Auto-merge is enabled
    overall_status: Optional[CheckStatus] = None
    checks: tuple[Check, ...] = ()

    def status(self) -> Status:
        """
        Compute what the menu bar should show for this pull request.

        Green CI is necessary but not enough to merge, so a SUCCESS rollup is
        refined by queue, approval, reviewer and draft state, in that order.
        Every other rollup maps straight through the check status table.
        """
        if self.overall_status is None:
            return Status(kind=StatusKind.UNKNOWN)

        if self.overall_status == CheckStatus.SUCCESS:
            if self.queued:
                return Status(kind=StatusKind.QUEUED)
            if self.approved:
                return Status(kind=StatusKind.SUCCESS_AND_APPROVED)
            if self.reviewer is not None:
                return Status(
                    kind=StatusKind.SUCCESS_AWAITING_APPROVAL,
                    reviewer=self.reviewer,
                )
            if self.is_draft:
                return Status(kind=StatusKind.DRAFT)
            return Status(kind=StatusKind.SUCCESS)

        return Status(kind=StatusKind.for_check_status(self.overall_status))
