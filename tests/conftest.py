"""Shared fixtures for xbar-pr-status tests."""

import json
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

import pytest

from model import PullRequest

FIXTURES_DIR = Path(__file__).parent / "fixtures"


def load_fixture(name: str) -> dict[str, Any]:
    return json.loads((FIXTURES_DIR / name).read_text(encoding="utf-8"))


def make_pull_request(**overrides: Any) -> PullRequest:
    """A green, unreviewed, non-draft pull request unless told otherwise."""
    fields: dict[str, Any] = {
        "number": 1,
        "title": "A pull request",
        "head_ref": "a-branch",
        "url": "https://github.com/org/repo/pull/1",
        "updated_at": datetime(2024, 3, 1, tzinfo=timezone.utc),
        "is_draft": False,
        "reviewer": None,
        "approved": False,
        "queued": False,
        "overall_status": "SUCCESS",
        "checks": [],
    }
    fields.update(overrides)
    return PullRequest(**fields)


def make_response(*nodes: dict[str, Any]) -> dict[str, Any]:
    return {"data": {"viewer": {"pullRequests": {"nodes": list(nodes)}}}}


@pytest.fixture
def approved_node() -> dict[str, Any]:
    return load_fixture("pr_approved.json")


@pytest.fixture
def failing_node() -> dict[str, Any]:
    return load_fixture("pr_failing.json")


@pytest.fixture
def no_checks_node() -> dict[str, Any]:
    return load_fixture("pr_no_checks.json")


@pytest.fixture
def commit_of():
    """Reach into a pull request node's latest commit, for editing in place."""

    def _commit_of(node: dict[str, Any]) -> dict[str, Any]:
        return node["commits"]["nodes"][0]["commit"]

    return _commit_of
