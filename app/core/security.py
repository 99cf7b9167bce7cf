"""Security filter: user-agent blocklist and CORS header injection.

Runs before rate limiting, so blocked clients never spend tokens. Responses
that pass the filter (including 404 and 429) carry the CORS headers.
"""

from __future__ import annotations

import logging

from fastapi import Request, Response

from app.core.config import AppSettings
from app.core.errors import AccessDeniedAppError
from app.core.exception_handlers import render_app_error

logger = logging.getLogger(__name__)


def parse_user_agent_blocklist(value: str | None) -> tuple[str, ...]:
    """Parse comma-separated user-agent fragments.

    Examples:
        >>> parse_user_agent_blocklist("Python-urllib, curl")
        ('Python-urllib', 'curl')
        >>> parse_user_agent_blocklist("")
        ()
    """
    if not value:
        return ()
    return tuple(part.strip() for part in value.split(",") if part.strip())


def is_blocked_user_agent(user_agent: str | None, blocklist: tuple[str, ...]) -> bool:
    """Return True when the user agent contains any blocked fragment (case-sensitive)."""
    if not user_agent:
        return False
    return any(fragment in user_agent for fragment in blocklist)


async def security_middleware(request: Request, call_next) -> Response:
    """HTTP middleware rejecting automated clients and adding CORS headers.

    Args:
        request: The incoming HTTP request object.
        call_next: The next middleware/route handler in the stack.

    Returns:
        Response: 403 for blocked user agents, otherwise the downstream
            response with Access-Control-Allow-* headers set.
    """

    app_settings: AppSettings = request.app.state.settings.app
    user_agent = request.headers.get("User-Agent")
    blocklist = parse_user_agent_blocklist(app_settings.blocked_user_agents)

    if is_blocked_user_agent(user_agent, blocklist):
        logger.warning(
            "security.blocked_user_agent",
            extra={
                "user_agent": user_agent,
                "request_path": request.url.path,
            },
        )
        return render_app_error(AccessDeniedAppError(code="automated_access_denied"))

    response = await call_next(request)
    response.headers["Access-Control-Allow-Origin"] = app_settings.cors_allow_origin
    response.headers["Access-Control-Allow-Methods"] = app_settings.cors_allow_methods
    return response
