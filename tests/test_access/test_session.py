"""Tests for premium credential validation and the session poll."""

from datetime import datetime, timezone
from unittest.mock import AsyncMock, MagicMock

import pytest

from btcsignal.access.models import AccessRecord
from btcsignal.access.session import (
    ACCESS_EXPIRED,
    INVALID_RECOVERY_CODE,
    MISSING_CREDENTIALS,
    SESSION_INVALIDATED,
    check_session,
    find_record,
    is_expired,
    validate_auth,
)
from btcsignal.access.store import StaticAccessStore
from btcsignal.exceptions import AccessStoreUnavailable


@pytest.fixture
def store(access_records) -> StaticAccessStore:
    return StaticAccessStore(access_records)


@pytest.fixture
def broken_store():
    """Store whose reads always fail."""
    failing = MagicMock()
    failing.fetch_records = AsyncMock(side_effect=AccessStoreUnavailable("GitHub returned 503"))
    return failing


class TestValidateAuth:
    """Tests for validate_auth."""

    @pytest.mark.asyncio
    async def test_active_session(self, store) -> None:
        """Matching code and token authenticate with the record's tier."""
        result = await validate_auth(store, "ABC123", "tok1")

        assert result.authenticated is True
        assert result.tier == "monthly"
        assert result.expires_at == "2099-01-01T00:00:00.000Z"
        assert result.degraded is False

    @pytest.mark.asyncio
    async def test_token_rotated_by_recovery(self, store) -> None:
        """A stale token from the previous device is rejected."""
        result = await validate_auth(store, "ABC123", "tok2")

        assert result.authenticated is False
        assert result.error == SESSION_INVALIDATED

    @pytest.mark.asyncio
    async def test_code_is_case_insensitive(self, store) -> None:
        """Lowercase input matches an uppercase stored code."""
        result = await validate_auth(store, "abc123", "tok1")
        assert result.authenticated is True

    @pytest.mark.asyncio
    @pytest.mark.parametrize("code,token", [(None, "tok1"), ("ABC123", None), ("", ""), ("ABC123", "")])
    async def test_missing_credentials(self, store, code, token) -> None:
        """Either header missing short-circuits before the store is read."""
        result = await validate_auth(store, code, token)

        assert result.authenticated is False
        assert result.error == MISSING_CREDENTIALS

    @pytest.mark.asyncio
    async def test_unknown_code(self, store) -> None:
        """Codes not in the store are rejected."""
        result = await validate_auth(store, "NOPE00", "tok1")
        assert result.error == INVALID_RECOVERY_CODE

    @pytest.mark.asyncio
    async def test_expired_before_token_check(self, store) -> None:
        """Expiry is checked before the session token."""
        result = await validate_auth(store, "OLD999", "wrong-token")
        assert result.error == ACCESS_EXPIRED

    @pytest.mark.asyncio
    async def test_lifetime_never_expires(self, store) -> None:
        """No expires_at means lifetime access."""
        far_future = datetime(2200, 1, 1, tzinfo=timezone.utc)
        result = await validate_auth(store, "LIFE42", "tok-life", now=far_future)
        assert result.authenticated is True

    @pytest.mark.asyncio
    async def test_fails_open_when_store_unavailable(self, broken_store) -> None:
        """Store outage lets the request through, flagged degraded."""
        result = await validate_auth(broken_store, "ABC123", "anything")

        assert result.authenticated is True
        assert result.tier == "unknown"
        assert result.degraded is True


class TestExpiry:
    """Tests for is_expired."""

    def test_past_and_future(self) -> None:
        """Compares against the supplied clock."""
        record = AccessRecord("X", "weekly", "t", expires_at="2024-06-01T00:00:00Z")

        assert is_expired(record, datetime(2024, 6, 2, tzinfo=timezone.utc)) is True
        assert is_expired(record, datetime(2024, 5, 31, tzinfo=timezone.utc)) is False

    def test_naive_timestamp_is_utc(self) -> None:
        """Offsetless timestamps are read as UTC."""
        record = AccessRecord("X", "weekly", "t", expires_at="2024-06-01T00:00:00")
        assert is_expired(record, datetime(2024, 6, 1, 0, 0, 1, tzinfo=timezone.utc)) is True

    def test_unparsable_never_expires(self) -> None:
        """Garbage in expires_at does not lock the user out."""
        record = AccessRecord("X", "weekly", "t", expires_at="next tuesday")
        assert is_expired(record) is False

    def test_find_record(self, access_records) -> None:
        """Lookup ignores case and returns None when absent."""
        assert find_record(access_records, "life42").tier == "lifetime"
        assert find_record(access_records, "missing") is None


class TestCheckSession:
    """Tests for the session poll used by validate-session."""

    @pytest.mark.asyncio
    async def test_valid(self, store) -> None:
        status = await check_session(store, "ABC123", "tok1")
        assert status.valid is True
        assert status.record.tier == "monthly"

    @pytest.mark.asyncio
    async def test_kicked(self, store) -> None:
        """Another device recovered the code."""
        status = await check_session(store, "ABC123", "tok2")

        assert status.valid is False
        assert status.kicked is True
        assert status.record.last_session_update == "2024-05-01T12:00:00.000Z"

    @pytest.mark.asyncio
    async def test_expired(self, store) -> None:
        status = await check_session(store, "OLD999", "tok-old")
        assert status.expired is True
        assert status.kicked is False

    @pytest.mark.asyncio
    async def test_not_found(self, store) -> None:
        status = await check_session(store, "NOPE00", "tok1")
        assert status.found is False

    @pytest.mark.asyncio
    async def test_degraded(self, broken_store) -> None:
        """Outage reports valid so the client keeps its session."""
        status = await check_session(broken_store, "ABC123", "tok1")
        assert status.valid is True
        assert status.degraded is True
