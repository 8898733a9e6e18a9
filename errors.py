"""
Error types for xbar-pr-status.

Every failure raised while fetching or loading pull requests derives from
XbarPrStatusError so the entry point can catch them in one place. Loading
errors are chained with `raise ... from ...`, and format_error_chain() turns
that chain into the text shown in the menu bar.
"""

from typing import Any


class XbarPrStatusError(Exception):
    """Base exception for all xbar-pr-status errors."""


class NavigationError(XbarPrStatusError):
    """A required path was missing from a JSON document, or had the wrong type."""

    def __init__(self, path: str, message: str) -> None:
        self.path = path
        super().__init__(message)


class ClassificationError(XbarPrStatusError):
    """A status string was not one of the codes GitHub is known to send."""

    def __init__(self, value: Any, message: str) -> None:
        self.value = value
        super().__init__(message)


class LoadError(XbarPrStatusError):
    """A check, pull request or response could not be fully loaded."""


class FetchError(XbarPrStatusError):
    """The request to GitHub failed or returned something unusable."""


def format_error_chain(exc: BaseException) -> str:
    """
    Render an exception and everything it was raised from.

    Example:
        could not load pull request 2

        Caused by:
            0: could not load a check run in the check suites/runs array
            1: could not get /conclusion
    """
    lines = [str(exc)]

    causes = []
    cause = exc.__cause__
    while cause is not None:
        causes.append(cause)
        cause = cause.__cause__

    if causes:
        lines.append("")
        lines.append("Caused by:")
        for idx, cause in enumerate(causes):
            lines.append(f"    {idx}: {cause}")

    return "\n".join(lines)
