"""
Classification of the status strings GitHub reports for CI.

Commit status contexts send `state` and check runs send `conclusion`; the
rollup on a commit sends `state` too. Between them they use the codes below.
Anything else means GitHub's schema has moved on, so we fail loudly instead
of guessing.
"""

from enum import Enum
from typing import Any

from errors import ClassificationError


class CheckStatus(str, Enum):
    ERROR = "ERROR"
    EXPECTED = "EXPECTED"
    FAILURE = "FAILURE"
    PENDING = "PENDING"
    SUCCESS = "SUCCESS"
    ACTION_REQUIRED = "ACTION_REQUIRED"
    TIMED_OUT = "TIMED_OUT"
    CANCELLED = "CANCELLED"
    NEUTRAL = "NEUTRAL"
    SKIPPED = "SKIPPED"
    STARTUP_FAILURE = "STARTUP_FAILURE"
    STALE = "STALE"

    @classmethod
    def classify(cls, code: str) -> "CheckStatus":
        """
        Map an upstream status code to a CheckStatus.

        The match is exact: no case folding, no trimming.

        Raises:
            ClassificationError: if the code is not one GitHub is known to send
        """
        member = _BY_CODE.get(code) if isinstance(code, str) else None
        if member is None:
            raise ClassificationError(
                code, f"got unexpected value {code} as a CheckStatus"
            )
        return member

    @classmethod
    def classify_value(cls, value: Any) -> "CheckStatus":
        """Classify a decoded JSON value, which must be a string."""
        if not isinstance(value, str):
            raise ClassificationError(
                value, "value passed to CheckStatus was not a string"
            )
        return cls.classify(value)


_BY_CODE = {member.value: member for member in CheckStatus}
