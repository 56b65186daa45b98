"""Premium request gate: credential headers, rate limit, session check."""

from fastapi import Request
from fastapi.responses import JSONResponse

from btcsignal.access.models import AuthResult
from btcsignal.access.rate_limit import check_rate_limit
from btcsignal.access.session import MISSING_CREDENTIALS, validate_auth
from btcsignal.logging import get_logger

logger = get_logger(__name__)

RECOVERY_CODE_HEADER = "X-Recovery-Code"
SESSION_TOKEN_HEADER = "X-Session-Token"
RATE_LIMITED_MESSAGE = "Too many requests. Please try again later."


def unauthorized_response(message: str = "Unauthorized") -> JSONResponse:
    return JSONResponse(content={"error": message, "unauthorized": True}, status_code=401)


def rate_limited_response(retry_after_seconds: int) -> JSONResponse:
    return JSONResponse(
        content={"error": RATE_LIMITED_MESSAGE, "rateLimited": True},
        status_code=429,
        headers={"Retry-After": str(retry_after_seconds)},
    )


async def premium_gate(request: Request) -> tuple[AuthResult | None, JSONResponse | None]:
    """Run the premium checks for ``request``.

    Returns ``(auth, None)`` when the request may proceed, otherwise
    ``(None, response)`` with the rejection to send. Checks run in order:
    missing headers (401), per-code rate limit (429), session validation (401).
    """
    recovery_code = request.headers.get(RECOVERY_CODE_HEADER)
    session_token = request.headers.get(SESSION_TOKEN_HEADER)
    if not recovery_code or not session_token:
        return None, unauthorized_response(MISSING_CREDENTIALS)

    settings = request.app.state.settings.rate_limit
    limit = check_rate_limit(
        request.app.state.rate_limit_state,
        f"premium:{recovery_code.upper()}",
        limit=settings.limit,
        window_ms=settings.window_ms,
    )
    if not limit.allowed:
        logger.info("premium_rate_limited", path=request.url.path)
        return None, rate_limited_response(settings.retry_after_seconds)

    auth = await validate_auth(request.app.state.access_store, recovery_code, session_token)
    if not auth.authenticated:
        logger.info("premium_auth_rejected", path=request.url.path, reason=auth.error)
        return None, unauthorized_response(auth.error or "Unauthorized")

    return auth, None
