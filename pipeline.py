"""
Pipeline module for turning GitHub's response into the xbar menu.

1. Fetch open pull requests from the GitHub GraphQL API
2. Parse each one into a PullRequest model
3. Render them in xbar's plugin format

Parsing is strict: a pull request with any malformed required field fails to
load, and so does the whole run. Nothing is ever rendered with a placeholder.
"""

from datetime import datetime, timedelta, timezone
from typing import Any, Optional

from loguru import logger
from pydantic import BaseModel, Field

import navigate
from check_status import CheckStatus
from errors import LoadError, NavigationError, XbarPrStatusError
from github_api import fetch_pull_requests
from model import Check, PullRequest
from xbar import Emoji, render_menu

PULL_REQUESTS_PATH = "/data/viewer/pullRequests/nodes"
LAST_COMMIT_PATH = "/commits/nodes/0/commit"
REVIEWER_PATH = "/reviewRequests/nodes/0/requestedReviewer/login"
LATEST_REVIEW_STATE_PATH = "/latestOpinionatedReviews/nodes/0/state"
MAX_SINCE_DAYS = 36500


class Config(BaseModel):
    """Everything a run needs from the command line and environment."""

    github_api_token: str
    since: Optional[int] = Field(default=None, ge=0, le=MAX_SINCE_DAYS)  # Days
    emoji: Emoji = Emoji()

    def cutoff(self, now: datetime) -> Optional[datetime]:
        """Pull requests last updated before this are left out of the menu."""
        if self.since is None:
            return None
        return now - timedelta(days=self.since)


def parse_check_from_context(context: Any) -> Check:
    """
    Parse a commit status context into a Check.

    Contexts always report a state, so there is no in-progress special case.
    """
    try:
        return Check(
            name=navigate.get_str(context, "/context"),
            status=CheckStatus.classify(navigate.get_str(context, "/state")),
            url=navigate.get_str(context, "/targetUrl"),
        )
    except XbarPrStatusError as e:
        raise LoadError("could not load a status context") from e


def parse_check_from_run(run: Any) -> Check:
    """
    Parse a check run into a Check.

    A null conclusion means the run hasn't finished yet, which we show as
    PENDING. The key itself must still be there.
    """
    try:
        conclusion = navigate.get_nullable_str(run, "/conclusion")
        if conclusion is None:
            status = CheckStatus.PENDING
        else:
            status = CheckStatus.classify(conclusion)

        return Check(
            name=navigate.get_str(run, "/name"),
            status=status,
            url=navigate.get_str(run, "/url"),
        )
    except XbarPrStatusError as e:
        raise LoadError("could not load a check run") from e


def _overall_status_from_commit(commit: Any) -> Optional[CheckStatus]:
    if not navigate.has_path(commit, "/statusCheckRollup/state"):
        return None

    try:
        return CheckStatus.classify_value(
            navigate.lookup(commit, "/statusCheckRollup/state")
        )
    except XbarPrStatusError as e:
        raise LoadError("could not load status from overall state") from e


def _checks_from_commit(commit: Any) -> list[Check]:
    """
    Collect every check on a commit.

    Status contexts come first, then check runs suite by suite, each in the
    order GitHub returned them.
    """
    checks = []

    if navigate.has_path(commit, "/status/contexts"):
        for context in navigate.get_array(commit, "/status/contexts"):
            try:
                checks.append(parse_check_from_context(context))
            except LoadError as e:
                raise LoadError("could not load a context in the contexts array") from e

    if navigate.has_path(commit, "/checkSuites/nodes"):
        for suite in navigate.get_array(commit, "/checkSuites/nodes"):
            if not navigate.has_path(suite, "/checkRuns/nodes"):
                continue
            for run in navigate.get_array(suite, "/checkRuns/nodes"):
                try:
                    checks.append(parse_check_from_run(run))
                except LoadError as e:
                    raise LoadError(
                        "could not load a check run in the check suites/runs array"
                    ) from e

    return checks


def _parse_timestamp(node: Any, path: str) -> datetime:
    raw = navigate.get_str(node, path)
    try:
        # fromisoformat() only accepts a trailing Z from Python 3.11 on
        parsed = datetime.fromisoformat(raw.replace("Z", "+00:00"))
    except ValueError as e:
        raise LoadError(f"{path} was not an RFC 3339 timestamp: {raw}") from e

    if parsed.tzinfo is None:
        raise LoadError(f"{path} had no UTC offset: {raw}")
    return parsed


def parse_pull_request(pr: Any) -> PullRequest:
    """
    Parse one pull request node from the GraphQL response.

    Optional data (no pending reviewer, no reviews yet, no CI) is simply
    absent. Anything required that is missing or mistyped raises.

    Args:
        pr: One element of data.viewer.pullRequests.nodes

    Returns:
        The loaded PullRequest

    Raises:
        LoadError: if any required field is missing or malformed
    """
    commit = navigate.lookup(pr, LAST_COMMIT_PATH)
    if commit is None:
        raise LoadError("could not get the last commit")

    try:
        number = navigate.get_u64(pr, "/number")
        title = navigate.get_str(pr, "/title")
        url = navigate.get_str(pr, "/url")
        head_ref = navigate.get_str(pr, "/headRef/name")
        updated_at = _parse_timestamp(pr, "/updatedAt")
        is_draft = navigate.get_bool(pr, "/isDraft")

        reviewer = navigate.get_optional_str(pr, REVIEWER_PATH)
        approved = navigate.get_optional_str(pr, LATEST_REVIEW_STATE_PATH) == "APPROVED"

        # autoMergeRequest is always requested, so it must be there even when null
        if not navigate.has_path(pr, "/autoMergeRequest"):
            raise NavigationError("/autoMergeRequest", "could not get /autoMergeRequest")
        queued = navigate.lookup(pr, "/autoMergeRequest") is not None
    except XbarPrStatusError as e:
        raise LoadError("could not load pull request fields") from e

    try:
        checks = _checks_from_commit(commit)
    except XbarPrStatusError as e:
        raise LoadError("could not load checks") from e

    return PullRequest(
        number=number,
        title=title,
        head_ref=head_ref,
        url=url,
        updated_at=updated_at,
        is_draft=is_draft,
        reviewer=reviewer,
        approved=approved,
        queued=queued,
        overall_status=_overall_status_from_commit(commit),
        checks=checks,
    )


def parse_pull_requests(body: dict[str, Any]) -> list[PullRequest]:
    """
    Parse every pull request in a GraphQL response, keeping their order.

    Raises:
        LoadError: naming the index of the first pull request that failed
    """
    try:
        nodes = navigate.get_array(body, PULL_REQUESTS_PATH)
    except XbarPrStatusError as e:
        raise LoadError("could not find pull requests in the response") from e

    parsed_prs = []
    for idx, node in enumerate(nodes):
        try:
            parsed_prs.append(parse_pull_request(node))
        except XbarPrStatusError as e:
            logger.debug(f"Pull request {idx} failed to load: {node}")
            raise LoadError(f"could not load pull request {idx}") from e

    logger.debug(f"Parsed {len(parsed_prs)} pull requests")
    return parsed_prs


def filter_since(
    prs: list[PullRequest], cutoff: Optional[datetime]
) -> list[PullRequest]:
    """Drop pull requests last updated before the cutoff, if there is one."""
    if cutoff is None:
        return prs

    kept = []
    for pr in prs:
        if pr.updated_at < cutoff:
            logger.debug(f"Skipping #{pr.number}, last updated {pr.updated_at}")
            continue
        kept.append(pr)
    return kept


def run_pipeline(config: Config, now: Optional[datetime] = None) -> str:
    """
    Execute the full pipeline: fetch, parse, filter and render.

    Args:
        config: Token, cutoff and glyphs to use
        now: Current time, for computing the cutoff

    Returns:
        The complete xbar plugin output
    """
    now = now or datetime.now(timezone.utc)

    body = fetch_pull_requests(config.github_api_token)
    prs = parse_pull_requests(body)
    prs = filter_since(prs, config.cutoff(now))
    logger.info(f"Rendering {len(prs)} pull requests")

    return render_menu(prs, config.emoji)
