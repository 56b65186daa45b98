"""Access-record and auth result models."""

from dataclasses import dataclass
from typing import Any


@dataclass
class AccessRecord:
    """One purchased access grant, as stored in ``access-records.json``.

    ``expires_at`` is None for lifetime access. ``active_session_token`` is
    rotated on every recovery, which invalidates the previous device.
    """

    recovery_code: str
    tier: str
    active_session_token: str
    expires_at: str | None = None
    payment_hash: str = ""
    amount_sats: int = 0
    purchase_date: str | None = None
    recovery_count: int = 0
    last_recovery: str | None = None
    last_session_update: str | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "AccessRecord":
        """Build from the camelCase JSON the store persists."""
        return cls(
            recovery_code=str(data.get("recoveryCode") or ""),
            tier=str(data.get("tier") or ""),
            active_session_token=str(data.get("activeSessionToken") or ""),
            expires_at=data.get("expiresAt"),
            payment_hash=str(data.get("paymentHash") or ""),
            amount_sats=int(data.get("amountSats") or 0),
            purchase_date=data.get("purchaseDate"),
            recovery_count=int(data.get("recoveryCount") or 0),
            last_recovery=data.get("lastRecovery"),
            last_session_update=data.get("lastSessionUpdate"),
        )


@dataclass
class AuthResult:
    """Outcome of a premium-request credential check.

    ``degraded`` marks a fail-open result: the record store was unreachable
    and the request was let through without verification.
    """

    authenticated: bool
    tier: str | None = None
    expires_at: str | None = None
    error: str | None = None
    degraded: bool = False


@dataclass
class SessionStatus:
    """Outcome of the client-side session poll (is this device still active?)."""

    valid: bool
    found: bool = True
    expired: bool = False
    kicked: bool = False
    degraded: bool = False
    record: AccessRecord | None = None


@dataclass
class RateLimitResult:
    """Whether a request fits in its window, and how many remain."""

    allowed: bool
    remaining: int
