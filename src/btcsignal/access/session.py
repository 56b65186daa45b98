"""Premium credential checks against the access-record store.

A purchase is identified by its recovery code; the device currently holding
access is identified by the record's active session token. Recovering access
on a new device rotates that token, so the old device fails validation.

When the store cannot be read, checks fail open: a transient store outage
must not lock paying users out. Every fail-open result is marked
``degraded`` and logged.
"""

from collections.abc import Iterable
from datetime import datetime, timezone

from btcsignal.access.models import AccessRecord, AuthResult, SessionStatus
from btcsignal.access.store import AccessRecordStore
from btcsignal.exceptions import AccessStoreUnavailable
from btcsignal.logging import get_logger

logger = get_logger(__name__)

MISSING_CREDENTIALS = "Missing credentials"
INVALID_RECOVERY_CODE = "Invalid recovery code"
ACCESS_EXPIRED = "Access expired"
SESSION_INVALIDATED = "Session invalidated - access recovered on another device"


def find_record(records: Iterable[AccessRecord], recovery_code: str) -> AccessRecord | None:
    """Case-insensitive lookup by recovery code."""
    wanted = recovery_code.upper()
    for record in records:
        if record.recovery_code.upper() == wanted:
            return record
    return None


def _parse_timestamp(value: str) -> datetime | None:
    try:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def is_expired(record: AccessRecord, now: datetime | None = None) -> bool:
    """True when ``expires_at`` is set and already in the past.

    An unparsable timestamp never expires.
    """
    if not record.expires_at:
        return False
    expiry = _parse_timestamp(record.expires_at)
    if expiry is None:
        logger.warning(
            "unparsable_expiry", recovery_code=record.recovery_code, expires_at=record.expires_at
        )
        return False
    now = now or datetime.now(timezone.utc)
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    return expiry < now


async def validate_auth(
    store: AccessRecordStore,
    recovery_code: str | None,
    session_token: str | None,
    now: datetime | None = None,
) -> AuthResult:
    """Check premium credentials.

    Checks run in order and the first failure wins: missing credentials,
    unknown recovery code, expiry, session token mismatch.
    """
    if not recovery_code or not session_token:
        return AuthResult(authenticated=False, error=MISSING_CREDENTIALS)

    try:
        records = await store.fetch_records()
    except AccessStoreUnavailable as e:
        logger.warning("auth_fail_open", reason=str(e))
        return AuthResult(authenticated=True, tier="unknown", degraded=True)

    record = find_record(records, recovery_code)
    if record is None:
        return AuthResult(authenticated=False, error=INVALID_RECOVERY_CODE)

    if is_expired(record, now):
        return AuthResult(authenticated=False, error=ACCESS_EXPIRED)

    if record.active_session_token != session_token:
        return AuthResult(authenticated=False, error=SESSION_INVALIDATED)

    return AuthResult(authenticated=True, tier=record.tier, expires_at=record.expires_at)


async def check_session(
    store: AccessRecordStore,
    recovery_code: str,
    session_token: str,
    now: datetime | None = None,
) -> SessionStatus:
    """Report whether this device still holds the active session.

    Same order as ``validate_auth`` but with the detail the client needs to
    tell "expired" apart from "kicked by another device".
    """
    try:
        records = await store.fetch_records()
    except AccessStoreUnavailable as e:
        logger.warning("session_check_fail_open", reason=str(e))
        return SessionStatus(valid=True, degraded=True)

    record = find_record(records, recovery_code)
    if record is None:
        return SessionStatus(valid=False, found=False)

    if is_expired(record, now):
        return SessionStatus(valid=False, expired=True, record=record)

    if record.active_session_token != session_token:
        logger.info("session_superseded", recovery_code=record.recovery_code)
        return SessionStatus(valid=False, kicked=True, record=record)

    return SessionStatus(valid=True, record=record)
