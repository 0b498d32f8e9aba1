"""Application service for fetching and unwatching subscriptions."""

import logging
from typing import List, Sequence

from unwatch.domain.subscription import Snapshot, Subscription, make_snapshot
from unwatch.infrastructure.github_client import GitHubAPIError, GitHubRESTClient

logger = logging.getLogger(__name__)


class SubscriptionError(Exception):
    """Base class for failures surfaced to the session."""
    pass


class FetchError(SubscriptionError):
    """Raised when a page of watched repositories cannot be fetched."""

    def __init__(self, page: int, cause: Exception):
        super().__init__(f"fetching page {page} of watched repos: {cause}")
        self.page = page
        self.cause = cause


class UnwatchError(SubscriptionError):
    """Raised when deleting one subscription fails. Later ones are not attempted."""

    def __init__(self, subscription: Subscription, cause: Exception):
        super().__init__(f"unwatching {subscription.full_name}: {cause}")
        self.subscription = subscription
        self.cause = cause


class SubscriptionService:
    """Service for listing watched repositories and bulk-unwatching them."""

    def __init__(self, github_client: GitHubRESTClient, page_size: int = 100):
        """
        Initialize subscription service.

        Args:
            github_client: GitHub API client
            page_size: Repositories requested per page (max 100)
        """
        self.github_client = github_client
        self.page_size = page_size

    def fetch_subscriptions(self) -> Snapshot:
        """
        Fetch every watched repository, following pagination to the end.

        Returns:
            Snapshot sorted by organization, then repository

        Raises:
            FetchError: If any page fails. Pages fetched before it are discarded.
        """
        subscriptions: List[Subscription] = []
        page = 1

        while True:
            try:
                result = self.github_client.list_watched(page=page, per_page=self.page_size)
            except GitHubAPIError as e:
                logger.error(f"Failed to fetch page {page} of watched repos: {e}")
                raise FetchError(page, e) from e

            if page == 1 and result.last_page:
                # Estimate only; the last page is usually short.
                logger.info(f"Expecting up to {result.last_page * self.page_size} watched repos")

            subscriptions.extend(result.subscriptions)
            logger.info(f"Fetched page {page}: {len(subscriptions)} watched repos so far")

            if result.next_page == 0:
                break
            page = result.next_page

        snapshot = make_snapshot(subscriptions)
        logger.info(f"Fetch completed. Total watched repos: {len(snapshot)}")
        return snapshot

    def unwatch_and_refresh(self, selected: Sequence[Subscription]) -> Snapshot:
        """
        Unwatch each selected subscription in order, then refetch.

        Deletions are sequential and stop at the first failure, so everything
        before the failing subscription has been unwatched and nothing after it.

        Args:
            selected: Subscriptions to unwatch

        Returns:
            A fresh snapshot from fetch_subscriptions()

        Raises:
            UnwatchError: If a deletion fails
            FetchError: If the refresh fails
        """
        logger.info(f"Unwatching {len(selected)} repos")

        for subscription in selected:
            try:
                self.github_client.delete_subscription(
                    subscription.organization, subscription.repository
                )
            except GitHubAPIError as e:
                logger.error(f"Failed to unwatch {subscription.full_name}: {e}")
                raise UnwatchError(subscription, e) from e
            logger.info(f"Unwatched {subscription.full_name}")

        return self.fetch_subscriptions()
