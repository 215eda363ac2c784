"""User directory adapters: who lives in which zone."""

import logging
from collections.abc import Mapping
from pathlib import Path
from typing import Any, Protocol

import aiohttp
import orjson

from core.exceptions import DirectoryError


class UserDirectory(Protocol):
    """Resolves the phone numbers registered under a zone."""

    async def lookup_phones_by_zone(self, zone: str) -> list[str]: ...


class StaticUserDirectory:
    """In-memory roster, mainly for development and tests."""

    def __init__(self, roster: Mapping[str, list[str]] | None = None) -> None:
        self._roster: dict[str, list[str]] = {zone: list(phones) for zone, phones in (roster or {}).items()}

    @classmethod
    def from_file(cls, path: Path | str) -> "StaticUserDirectory":
        """Load a roster file shaped like ``{"Acacia": ["09171234567", ...]}``.

        A list of user rows (``[{"phone": ..., "barangay": ...}]``) is also
        accepted, matching the CRUD service's user listing.
        """
        try:
            data = orjson.loads(Path(path).read_bytes())
        except (OSError, orjson.JSONDecodeError) as e:
            raise DirectoryError(f"Failed to load roster file {path}: {e}") from e
        if isinstance(data, list):
            return cls(_group_rows(data))
        if isinstance(data, dict):
            return cls({str(zone): [str(p) for p in phones] for zone, phones in data.items()})
        raise DirectoryError(f"Roster file {path} must hold an object or a list")

    def add(self, zone: str, phone: str) -> None:
        self._roster.setdefault(zone, []).append(phone)

    async def lookup_phones_by_zone(self, zone: str) -> list[str]:
        return list(self._roster.get(zone, []))


def _group_rows(rows: list[Any]) -> dict[str, list[str]]:
    grouped: dict[str, list[str]] = {}
    for row in rows:
        if not isinstance(row, dict):
            continue
        zone = row.get("barangay")
        phone = row.get("phone")
        if zone and phone:
            grouped.setdefault(str(zone), []).append(str(phone))
    return grouped


class HttpUserDirectory:
    """Reads the user listing exposed by the registration service.

    The service answers ``GET {base_url}/users`` with rows containing at least
    ``phone`` and ``barangay``.
    """

    def __init__(
        self,
        base_url: str,
        http_session: aiohttp.ClientSession | None = None,
        timeout_s: float = 10.0,
        logger: logging.Logger | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self._http = http_session
        self._owns_session = http_session is None
        self._timeout = aiohttp.ClientTimeout(total=timeout_s)
        self.logger = logger or logging.getLogger(__name__)

    def _session(self) -> aiohttp.ClientSession:
        if self._http is None or self._http.closed:
            self._http = aiohttp.ClientSession(timeout=self._timeout)
            self._owns_session = True
        return self._http

    async def close(self) -> None:
        if self._owns_session and self._http is not None and not self._http.closed:
            await self._http.close()

    async def lookup_phones_by_zone(self, zone: str) -> list[str]:
        url = f"{self.base_url}/users"
        self.logger.debug(f"GET {url} for zone {zone}")
        try:
            async with self._session().get(url) as resp:
                text = await resp.text()
                if resp.status != 200:
                    raise DirectoryError(f"HTTP {resp.status} from {url}: {text[:200]}", zone=zone)
        except DirectoryError:
            raise
        except aiohttp.ClientError as e:
            raise DirectoryError(f"Request to {url} failed: {e}", zone=zone) from e

        try:
            rows = orjson.loads(text)
        except orjson.JSONDecodeError as e:
            raise DirectoryError(f"Invalid JSON from {url}: {text[:200]}", zone=zone) from e
        if not isinstance(rows, list):
            raise DirectoryError(f"Expected a list of users from {url}", zone=zone)

        return _group_rows(rows).get(zone, [])
