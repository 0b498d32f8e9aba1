from __future__ import annotations

import json
from typing import Any, Dict, Iterable, List, Optional, Set
from unittest.mock import Mock

import pytest
import requests

from unwatch.config import Settings
from unwatch.domain.subscription import Subscription
from unwatch.infrastructure.github_client import GitHubAPIError, GitHubRESTClient, WatchedPage


def subs(*names: str) -> List[Subscription]:
    """Build subscriptions from "org/repo" strings."""
    result = []
    for name in names:
        org, repo = name.split("/", 1)
        result.append(Subscription(org, repo))
    return result


class FakeGitHubClient:
    """In-memory stand-in for GitHubRESTClient that records every call.

    Pages are served in the order `watched` is stored, so callers that need
    sorted output must sort it themselves.
    """

    def __init__(
        self,
        watched: Iterable[Subscription] = (),
        *,
        fail_page: Optional[int] = None,
        fail_delete: Optional[Set[Subscription]] = None,
        last_page_hint: Optional[int] = None,
    ) -> None:
        self.watched = list(watched)
        self.fail_page = fail_page
        self.fail_delete = fail_delete or set()
        self.last_page_hint = last_page_hint
        self.list_calls: List[int] = []
        self.deleted: List[Subscription] = []
        self.delete_attempts: List[Subscription] = []

    def list_watched(self, page: int = 1, per_page: int = 100) -> WatchedPage:
        self.list_calls.append(page)
        if page == self.fail_page:
            raise GitHubAPIError("502 Bad Gateway", 502)

        pages = max((len(self.watched) + per_page - 1) // per_page, 1)
        start = (page - 1) * per_page
        chunk = self.watched[start:start + per_page]
        next_page = page + 1 if page < pages else 0
        last_page = self.last_page_hint if self.last_page_hint is not None else (pages if next_page else 0)
        return WatchedPage(subscriptions=chunk, next_page=next_page, last_page=last_page)

    def delete_subscription(self, organization: str, repository: str) -> None:
        subscription = Subscription(organization, repository)
        self.delete_attempts.append(subscription)
        if subscription in self.fail_delete:
            raise GitHubAPIError("404 Not Found", 404)
        self.watched.remove(subscription)
        self.deleted.append(subscription)


@pytest.fixture
def scenario_subs() -> List[Subscription]:
    return subs("acme/widgets", "acme/gadgets", "zeta/tools")


def make_response(status: int, body: Any = None, headers: Optional[Dict[str, str]] = None) -> requests.Response:
    """Build a requests.Response. Bytes bodies are sent as-is, anything else as JSON."""
    response = requests.Response()
    response.status_code = status
    if body is None:
        response._content = b""
    elif isinstance(body, bytes):
        response._content = body
    else:
        response._content = json.dumps(body).encode()
    response.headers.update(headers or {})
    return response


def make_client(*responses, **settings_overrides):
    session = Mock()
    session.headers = {}
    session.request.side_effect = list(responses)
    settings = Settings(github_token="t0ken", **settings_overrides)
    return GitHubRESTClient(settings, session=session), session


def repo(owner: str, name: str) -> Dict[str, Any]:
    return {"name": name, "full_name": f"{owner}/{name}", "owner": {"login": owner}}


MALFORMED_BODIES = [
    b"<html>proxy</html>",
    {"message": "not a list"},
    [{"name": "x", "owner": None}],
    [{"name": "x"}],
    [{"name": "", "owner": {"login": "a"}}],
]
