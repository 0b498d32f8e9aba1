"""GitHub REST API client for listing and deleting repository subscriptions."""

import logging
from dataclasses import dataclass
from typing import List, Optional
from urllib.parse import parse_qs, urlparse

import requests

from unwatch.config import Settings
from unwatch.domain.subscription import Subscription

logger = logging.getLogger(__name__)


class GitHubAPIError(Exception):
    """Raised when a GitHub API call fails."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class RateLimitExceeded(GitHubAPIError):
    """Raised when GitHub API rate limit is exceeded."""
    pass


@dataclass(frozen=True)
class WatchedPage:
    """One page of watched repositories plus its pagination cursor.

    next_page is 0 when there are no more pages. last_page is 0 when GitHub
    did not report one (as on the final page).
    """

    subscriptions: List[Subscription]
    next_page: int
    last_page: int


class GitHubRESTClient:
    """Client for the GitHub REST activity endpoints. One attempt per call."""

    API_VERSION = "2022-11-28"

    def __init__(self, settings: Settings, session: Optional[requests.Session] = None):
        """
        Initialize GitHub REST client.

        Args:
            settings: Loaded settings carrying the token, API URL and timeout.
            session: Optional pre-built requests session (used by tests).
        """
        self.base_url = settings.api_url
        self.timeout = settings.http_timeout
        self.session = session if session is not None else requests.Session()
        self.session.headers.update({
            "Accept": "application/vnd.github+json",
            "Authorization": f"Bearer {settings.github_token}",
            "X-GitHub-Api-Version": self.API_VERSION,
        })

    def _request(self, method: str, path: str, **kwargs) -> requests.Response:
        """
        Send a request and map failures to GitHubAPIError.

        Raises:
            RateLimitExceeded: If the quota is exhausted
            GitHubAPIError: On transport failure or any non-2xx status
        """
        url = f"{self.base_url}{path}"
        logger.debug(f"{method} {url} {kwargs.get('params') or ''}")

        try:
            response = self.session.request(method, url, timeout=self.timeout, **kwargs)
        except requests.exceptions.RequestException as e:
            raise GitHubAPIError(f"{method} {path} failed: {e}") from e

        if response.ok:
            return response

        if response.status_code == 401:
            raise GitHubAPIError("Authentication failed. Check your GitHub token.", 401)
        if response.status_code in (403, 429) and response.headers.get("X-RateLimit-Remaining") == "0":
            raise RateLimitExceeded(
                f"Rate limit exceeded (resets at {response.headers.get('X-RateLimit-Reset', 'unknown')})",
                response.status_code,
            )

        raise GitHubAPIError(
            f"{method} {path}: {response.status_code} {_error_message(response)}",
            response.status_code,
        )

    def list_watched(self, page: int = 1, per_page: int = 100) -> WatchedPage:
        """
        Fetch one page of repositories watched by the authenticated user.

        Args:
            page: 1-indexed page number
            per_page: Page size (max 100)

        Returns:
            The page's subscriptions with next and last page numbers
        """
        response = self._request(
            "GET",
            "/user/subscriptions",
            params={"page": page, "per_page": min(per_page, 100)},
        )

        try:
            subscriptions = [
                Subscription(organization=repo["owner"]["login"], repository=repo["name"])
                for repo in response.json()
            ]
        except (ValueError, KeyError, TypeError) as e:
            raise GitHubAPIError(f"GET /user/subscriptions: malformed response: {e}") from e

        return WatchedPage(
            subscriptions=subscriptions,
            next_page=_link_page(response, "next"),
            last_page=_link_page(response, "last"),
        )

    def delete_subscription(self, organization: str, repository: str) -> None:
        """Stop watching organization/repository. GitHub answers 204 No Content."""
        path = f"/repos/{organization}/{repository}/subscription"
        response = self._request("DELETE", path)
        if response.status_code != 204:
            raise GitHubAPIError(
                f"DELETE {path}: unexpected status {response.status_code}",
                response.status_code,
            )


def _link_page(response: requests.Response, rel: str) -> int:
    """Return the page number of a Link header relation, or 0 if absent."""
    link = response.links.get(rel)
    if not link:
        return 0
    values = parse_qs(urlparse(link["url"]).query).get("page")
    if not values:
        return 0
    try:
        return int(values[0])
    except ValueError:
        return 0


def _error_message(response: requests.Response) -> str:
    try:
        data = response.json()
    except ValueError:
        return response.text
    if isinstance(data, dict) and "message" in data:
        return data["message"]
    return response.text
