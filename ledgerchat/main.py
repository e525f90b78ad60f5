"""ledgerchat server entry point."""

import logging
import sys

from aiohttp import web

from ledgerchat.config import settings
from ledgerchat.errors import ConfigurationError
from ledgerchat.llm.orchestrator import ChatOrchestrator
from ledgerchat.llm.providers import create_provider
from ledgerchat.ratelimit import RateLimiter
from ledgerchat.server import create_app

logging.basicConfig(
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
)
logger = logging.getLogger(__name__)


def build_app() -> web.Application:
    """Wire the provider, orchestrator and rate limiter into the web app."""
    provider = create_provider(settings)
    orchestrator = ChatOrchestrator(provider, settings=settings)
    rate_limiter = RateLimiter(
        max_requests=settings.rate_limit_max_requests,
        window_seconds=settings.rate_limit_window_seconds,
    )
    return create_app(orchestrator, rate_limiter)


def main() -> None:
    """Start the chat server."""
    try:
        app = build_app()
    except ConfigurationError as exc:
        logger.error("Cannot start: %s", exc)
        sys.exit(1)

    logger.info("Starting ledgerchat on %s:%d", settings.server_host, settings.server_port)
    web.run_app(app, host=settings.server_host, port=settings.server_port, print=None)


if __name__ == "__main__":
    main()
