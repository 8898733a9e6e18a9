"""
GitHub API client for fetching the viewer's open pull requests.

GitHub API uses:
- Endpoint: https://api.github.com/graphql (one fixed query, POSTed as JSON)
- Auth: Personal Access Token as Bearer token, with `repo` and `read:user` scopes
- Pagination: none, the query asks for a fixed number of pull requests
"""

from typing import Any

import requests
from loguru import logger

from errors import FetchError

GRAPHQL_URL = "https://api.github.com/graphql"
USER_AGENT = "xbar-pr-status/0.1.0"
TIMEOUT_SECONDS = 30

PULL_REQUESTS_QUERY = """
query {
  viewer {
    pullRequests(first: 50, states: [OPEN], orderBy: {field: UPDATED_AT, direction: DESC}) {
      nodes {
        number
        title
        url
        isDraft
        updatedAt
        headRef {
          name
        }
        autoMergeRequest {
          enabledAt
        }
        reviewRequests(first: 1) {
          nodes {
            requestedReviewer {
              ... on User {
                login
              }
            }
          }
        }
        latestOpinionatedReviews(first: 1) {
          nodes {
            state
          }
        }
        commits(last: 1) {
          nodes {
            commit {
              statusCheckRollup {
                state
              }
              status {
                contexts {
                  context
                  state
                  targetUrl
                }
              }
              checkSuites(first: 100) {
                nodes {
                  checkRuns(first: 100) {
                    nodes {
                      name
                      conclusion
                      url
                    }
                  }
                }
              }
            }
          }
        }
      }
    }
  }
}
"""


def _get_headers(token: str) -> dict:
    """Get headers with authentication."""
    if not token:
        raise FetchError("a GitHub API token must be set")

    return {
        "Accept": "application/json",
        "Authorization": f"Bearer {token}",
        "User-Agent": USER_AGENT,
    }


def fetch_pull_requests(token: str) -> dict[str, Any]:
    """
    Fetch the viewer's open pull requests along with their CI and review state.

    GraphQL reports problems in a top-level `errors` array while still
    returning whatever `data` it could resolve, so those are logged and the
    body is returned as-is.

    Args:
        token: GitHub access token

    Returns:
        The decoded GraphQL response body

    Raises:
        FetchError: if the request fails, the body is not JSON, or `errors`
            is neither an array nor null
    """
    headers = _get_headers(token)

    logger.debug(f"Fetching pull requests from {GRAPHQL_URL}")
    try:
        response = requests.post(
            GRAPHQL_URL,
            headers=headers,
            json={"query": PULL_REQUESTS_QUERY},
            timeout=TIMEOUT_SECONDS,
        )
        response.raise_for_status()
    except requests.RequestException as e:
        raise FetchError("could not request data from GitHub's API") from e

    try:
        body = response.json()
    except ValueError as e:
        raise FetchError("could not read JSON body") from e

    if not isinstance(body, dict):
        raise FetchError("response body was not an object")

    errors = body.get("errors")
    if errors is not None:
        if not isinstance(errors, list):
            raise FetchError("errors was not an array")
        for error in errors:
            logger.error(f"GitHub reported an error: {error}")

    return body
