"""Access-record stores.

The production store reads ``data/access-records.json`` from a GitHub
repository through the contents API (base64-encoded JSON). Uses
urllib.request in a worker thread; results are cached in memory for a
short TTL so a burst of premium requests costs one upstream read.
"""

import asyncio
import base64
import json
import time
import urllib.error
import urllib.request
from abc import ABC, abstractmethod
from collections.abc import Iterable

from btcsignal.access.models import AccessRecord
from btcsignal.config import AccessSettings
from btcsignal.exceptions import AccessStoreUnavailable
from btcsignal.logging import get_logger

logger = get_logger(__name__)

GITHUB_API_URL = "https://api.github.com"


class AccessRecordStore(ABC):
    """Read-only source of access records."""

    @abstractmethod
    async def fetch_records(self) -> list[AccessRecord]:
        """Return every access record.

        Raises:
            AccessStoreUnavailable: when the backing store cannot be read.
        """
        ...


class StaticAccessStore(AccessRecordStore):
    """Fixed in-memory records. Used for local runs and tests."""

    def __init__(self, records: Iterable[AccessRecord] = ()) -> None:
        self._records = list(records)

    async def fetch_records(self) -> list[AccessRecord]:
        return list(self._records)


def parse_records_file(payload: bytes | str) -> list[AccessRecord]:
    """Parse ``{"records": [...]}`` into AccessRecords.

    Raises:
        ValueError: when the payload is not JSON of that shape.
    """
    data = json.loads(payload)
    if not isinstance(data, dict):
        raise ValueError(f"records file must be an object, got {type(data).__name__}")

    items = data.get("records", [])
    if not isinstance(items, list) or not all(isinstance(item, dict) for item in items):
        raise ValueError("records must be a list of objects")
    return [AccessRecord.from_dict(item) for item in items]


class GitHubAccessStore(AccessRecordStore):
    """Access records held in a GitHub repository file.

    Args:
        settings: Token, repository and path of the records file.
    """

    def __init__(self, settings: AccessSettings) -> None:
        self._settings = settings
        self._cache: list[AccessRecord] | None = None
        self._cache_time: float = 0

    @property
    def configured(self) -> bool:
        return bool(self._settings.github_token.get_secret_value() and self._settings.github_repo)

    def _is_cache_valid(self) -> bool:
        return (
            self._cache is not None
            and time.monotonic() - self._cache_time < self._settings.cache_ttl_seconds
        )

    def invalidate(self) -> None:
        self._cache = None
        self._cache_time = 0

    def _read_file(self) -> bytes:
        """GET the contents API entry and return the decoded file body."""
        url = (
            f"{GITHUB_API_URL}/repos/{self._settings.github_repo}"
            f"/contents/{self._settings.records_path}"
        )
        headers = {
            "Authorization": f"token {self._settings.github_token.get_secret_value()}",
            "Accept": "application/vnd.github.v3+json",
            "User-Agent": "btcsignal/0.1",
        }
        req = urllib.request.Request(url, headers=headers)
        with urllib.request.urlopen(
            req, timeout=self._settings.request_timeout_seconds
        ) as resp:
            data = json.loads(resp.read())
        return base64.b64decode(data["content"])

    async def fetch_records(self) -> list[AccessRecord]:
        if self._is_cache_valid():
            return list(self._cache)

        if not self.configured:
            raise AccessStoreUnavailable("GitHub credentials not configured")

        try:
            content = await asyncio.to_thread(self._read_file)
            records = parse_records_file(content)
        except urllib.error.HTTPError as e:
            logger.warning("access_records_http_error", status=e.code)
            raise AccessStoreUnavailable(f"GitHub returned {e.code}") from e
        except (urllib.error.URLError, TimeoutError) as e:
            logger.warning("access_records_fetch_error", error=str(e))
            raise AccessStoreUnavailable(str(e)) from e
        except (KeyError, ValueError, TypeError) as e:
            logger.warning("access_records_parse_error", error=str(e))
            raise AccessStoreUnavailable(f"malformed records file: {e}") from e

        self._cache = records
        self._cache_time = time.monotonic()
        logger.debug("access_records_loaded", count=len(records))
        return list(records)
