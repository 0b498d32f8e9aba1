"""Process entry point for the interactive unwatch tool."""

import logging
import sys

from unwatch.application.subscription_service import SubscriptionService
from unwatch.config import ConfigurationError, Settings
from unwatch.infrastructure.github_client import GitHubRESTClient
from unwatch.logging_setup import configure_logging
from unwatch.presentation.app import UnwatchApp

logger = logging.getLogger(__name__)


def main() -> int:
    """List watched repositories and unwatch the ones the user marks."""
    try:
        settings = Settings.from_env()
    except ConfigurationError as e:
        print(e, file=sys.stderr)
        return 1

    configure_logging(settings)

    github_client = GitHubRESTClient(settings)
    service = SubscriptionService(github_client, page_size=settings.page_size)

    app = UnwatchApp(service)
    app.run()

    logger.info(f"Session ended with return code {app.return_code}")
    return app.return_code or 0


if __name__ == "__main__":
    sys.exit(main())
