"""aiohttp application exposing the chat endpoint.

Routes:
    POST /api/chat   run one chat turn
    GET  /health     liveness check

The session used for rate limiting comes from the ``X-Session-Id`` header.
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
from typing import TYPE_CHECKING, Any

from aiohttp import web
from pydantic import ValidationError

from ledgerchat.errors import (
    ConfigurationError,
    InvalidRequestError,
    LedgerChatError,
    RateLimitedError,
    UpstreamThrottledError,
)
from ledgerchat.llm.orchestrator import ChatOrchestrator
from ledgerchat.models import ChatRequest
from ledgerchat.ratelimit import RateLimiter

if TYPE_CHECKING:
    from collections.abc import AsyncIterator

logger = logging.getLogger(__name__)

SESSION_HEADER = "X-Session-Id"

ORCHESTRATOR = web.AppKey("orchestrator", ChatOrchestrator)
RATE_LIMITER = web.AppKey("rate_limiter", RateLimiter)


def _error_response(exc: LedgerChatError) -> web.Response:
    return web.json_response({"error": exc.user_message}, status=exc.status)


async def _handle_chat(request: web.Request) -> web.Response:
    """POST /api/chat: admit, validate, run the orchestrator."""
    session_id = request.headers.get(SESSION_HEADER) or None
    if not request.app[RATE_LIMITER].admit(session_id):
        return _error_response(RateLimitedError())

    try:
        payload: Any = await request.json()
    except ValueError:
        logger.warning("Chat bad request: invalid JSON")
        return _error_response(InvalidRequestError(user_message="Invalid JSON body."))

    try:
        chat_request = ChatRequest.model_validate(payload)
    except ValidationError as exc:
        logger.warning("Chat bad request: %d validation error(s)", exc.error_count())
        return _error_response(InvalidRequestError(user_message="Invalid request body."))

    orchestrator = request.app[ORCHESTRATOR]
    try:
        result = await orchestrator.run(
            chat_request.message,
            chat_request.context,
            chat_request.history,
        )
    except InvalidRequestError as exc:
        return _error_response(exc)
    except ConfigurationError as exc:
        logger.error("Completion provider configuration error: %s", exc)
        return _error_response(exc)
    except UpstreamThrottledError as exc:
        logger.warning("Completion provider throttled: %s", exc)
        return _error_response(exc)
    except LedgerChatError as exc:
        logger.error("Chat request aborted: %s", exc)
        return _error_response(exc)
    except Exception:
        logger.exception("Chat request failed")
        return _error_response(LedgerChatError())

    if result.created_expense is not None:
        logger.info("Returning proposed expense: %s", result.created_expense.description)
    return web.json_response(result.to_response().to_wire())


async def _health(request: web.Request) -> web.Response:
    """GET /health: basic liveness check."""
    return web.json_response({"status": "ok"})


async def _prune_rate_limits(app: web.Application) -> AsyncIterator[None]:
    """Background task dropping expired rate-limit entries once per window."""
    limiter = app[RATE_LIMITER]

    async def _loop() -> None:
        while True:
            await asyncio.sleep(limiter.window_seconds)
            removed = limiter.prune()
            if removed:
                logger.debug("Pruned %d expired rate-limit entries", removed)

    task = asyncio.create_task(_loop())
    yield
    task.cancel()
    with contextlib.suppress(asyncio.CancelledError):
        await task


def create_app(orchestrator: ChatOrchestrator, rate_limiter: RateLimiter) -> web.Application:
    """Build the aiohttp Application with routes and injected dependencies."""
    app = web.Application()
    app[ORCHESTRATOR] = orchestrator
    app[RATE_LIMITER] = rate_limiter
    app.router.add_get("/health", _health)
    app.router.add_post("/api/chat", _handle_chat)
    app.cleanup_ctx.append(_prune_rate_limits)
    return app
