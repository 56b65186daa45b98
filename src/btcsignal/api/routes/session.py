"""Session poll endpoint used by the client to detect a superseded device."""

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

from btcsignal.access.session import check_session


router = APIRouter()


@router.post("/validate-session")
async def validate_session(request: Request) -> JSONResponse:
    """Check that ``sessionToken`` is still the active token for ``recoveryCode``.

    Expects JSON body with: recoveryCode, sessionToken.

    Returns:
        JSON with ``valid`` plus ``expired`` / ``kicked`` detail. A store
        outage answers valid so clients are never logged out by it.
    """
    try:
        body = await request.json()
    except ValueError:
        return JSONResponse(
            content={"valid": False, "error": "Invalid JSON body"}, status_code=400
        )

    recovery_code = body.get("recoveryCode") if isinstance(body, dict) else None
    session_token = body.get("sessionToken") if isinstance(body, dict) else None
    if not recovery_code or not session_token:
        return JSONResponse(
            content={"valid": False, "error": "Missing recovery code or session token"},
            status_code=400,
        )

    status = await check_session(
        request.app.state.access_store, str(recovery_code), str(session_token)
    )

    if status.degraded:
        return JSONResponse(
            content={"valid": True, "message": "Unable to verify, assuming valid"}
        )

    if not status.found:
        return JSONResponse(
            content={"valid": False, "error": "Recovery code not found", "kicked": False},
            status_code=404,
        )

    if status.expired:
        return JSONResponse(
            content={
                "valid": False,
                "error": "Access has expired",
                "expired": True,
                "kicked": False,
            }
        )

    if status.kicked:
        return JSONResponse(
            content={
                "valid": False,
                "error": "Your access was recovered on another device",
                "kicked": True,
                "lastSessionUpdate": status.record.last_session_update,
            }
        )

    return JSONResponse(
        content={
            "valid": True,
            "tier": status.record.tier,
            "expiresAt": status.record.expires_at,
        }
    )
