"""Premium access: rate limiting, access records and session validation."""

from btcsignal.access.models import AccessRecord, AuthResult, RateLimitResult, SessionStatus
from btcsignal.access.rate_limit import RateLimitState, check_rate_limit
from btcsignal.access.session import check_session, find_record, is_expired, validate_auth
from btcsignal.access.store import (
    AccessRecordStore,
    GitHubAccessStore,
    StaticAccessStore,
    parse_records_file,
)

__all__ = [
    "AccessRecord",
    "AccessRecordStore",
    "AuthResult",
    "GitHubAccessStore",
    "RateLimitResult",
    "RateLimitState",
    "SessionStatus",
    "StaticAccessStore",
    "check_rate_limit",
    "check_session",
    "find_record",
    "is_expired",
    "parse_records_file",
    "validate_auth",
]
