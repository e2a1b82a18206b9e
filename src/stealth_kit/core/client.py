"""
StealthApiClient: HTTP client for the stealth_kit API.

Implements both collaborator protocols, so a remote service can be
injected wherever a KeyRegistry or AnnouncementLog is expected:

    with StealthApiClient("http://localhost:8000") as api:
        sender = StealthSender(registry=api, log=api)
        receiver = StealthReceiver(keys, log=api)
"""

from __future__ import annotations

import logging
from collections.abc import Iterator
from typing import Any

import httpx
from pydantic import ValidationError

from stealth_kit.core.models import Announcement, GeneratedStealthAddress
from stealth_kit.crypto.keys import StealthMetaAddress
from stealth_kit.errors import AuthorizationFailed, StealthApiError, UnknownRecipient

DEFAULT_API_URL = "http://127.0.0.1:8000"
DEFAULT_PAGE_SIZE = 100

logger = logging.getLogger("stealth_kit.client")


class StealthApiClient:
    """
    Synchronous client for the stealth address API.

    Usage:
        api = StealthApiClient()  # local server
        api = StealthApiClient("https://stealth.example.org", timeout=5.0)
        api = StealthApiClient(client=existing_httpx_client)
    """

    def __init__(
        self,
        base_url: str = DEFAULT_API_URL,
        timeout: float = 15.0,
        client: httpx.Client | None = None,
        page_size: int = DEFAULT_PAGE_SIZE,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.page_size = page_size
        self._client = client or httpx.Client(
            headers={"Content-Type": "application/json"}, timeout=timeout
        )

    # ------------------------------------------------------------------
    # KeyRegistry
    # ------------------------------------------------------------------

    def get_public_keys(self, identifier: str) -> tuple[bytes, bytes] | None:
        """Return (spending, viewing) public keys, or None if not registered."""
        response = self._client.get(self._url(f"/registry/{identifier}"))
        if response.status_code == 404:
            return None
        data = self._check(response)
        return bytes.fromhex(data["spending_public_key"]), bytes.fromhex(data["viewing_public_key"])

    def set_public_keys(
        self,
        identifier: str,
        spending_public_key: bytes,
        viewing_public_key: bytes,
        *,
        caller: str | None = None,
    ) -> None:
        """
        Publish keys for `identifier`.

        Raises:
            AuthorizationFailed: If the server rejects the caller.
            StealthApiError: On any other error.
        """
        payload = {
            "spending_public_key": _hex(spending_public_key),
            "viewing_public_key": _hex(viewing_public_key),
            "caller": caller,
        }
        self._check(self._client.put(self._url(f"/registry/{identifier}"), json=payload))

    def get_meta_address(self, identifier: str) -> StealthMetaAddress | None:
        """Return the published meta-address for `identifier`, if any."""
        keys = self.get_public_keys(identifier)
        if keys is None:
            return None
        return StealthMetaAddress(spending_public_key=keys[0], viewing_public_key=keys[1])

    # ------------------------------------------------------------------
    # AnnouncementLog
    # ------------------------------------------------------------------

    def append(
        self,
        ephemeral_public_key: bytes,
        stealth_address: bytes | str,
        view_tag: bytes,
        metadata: bytes = b"",
    ) -> int:
        """Append an announcement and return its offset."""
        payload = {
            "ephemeral_public_key": _hex(ephemeral_public_key),
            "stealth_address": stealth_address if isinstance(stealth_address, str) else "0x" + stealth_address.hex(),
            "view_tag": _hex(view_tag),
            "metadata": _hex(metadata),
        }
        data = self._check(self._client.post(self._url("/announcements"), json=payload))
        return int(data["offset"])

    def iterate(self, from_offset: int = 0) -> Iterator[Announcement]:
        """
        Lazily page through the log from `from_offset`.

        Stops at the first short page, so entries appended after the
        final page was fetched are left for the next call. Entries the
        server returns in an unreadable shape are logged and skipped.
        """
        offset = from_offset
        while True:
            page = self._check(self._client.get(
                self._url("/announcements"),
                params={"from_offset": offset, "limit": self.page_size},
            ))
            for item in page:
                try:
                    announcement = Announcement(**item)
                except ValidationError as e:
                    logger.warning(f"Skipping unreadable announcement at offset {item.get('offset')}: {e}")
                    continue
                yield announcement
            if len(page) < self.page_size:
                return
            offset += len(page)

    # ------------------------------------------------------------------
    # Generation & delegated scanning
    # ------------------------------------------------------------------

    def generate(
        self, identifier: str | None = None, meta_address: str | None = None
    ) -> GeneratedStealthAddress:
        """
        Ask the server to derive a stealth address.

        Raises:
            UnknownRecipient: If `identifier` is not registered.
        """
        payload = {"identifier": identifier, "meta_address": meta_address}
        response = self._client.post(self._url("/stealth/generate"), json=payload)
        if response.status_code == 404:
            raise UnknownRecipient(_detail(response))
        data = self._check(response)
        return GeneratedStealthAddress(
            stealth_address=data["stealth_address"],
            ephemeral_public_key=bytes.fromhex(data["ephemeral_public_key"]),
            view_tag=bytes.fromhex(data["view_tag"]),
            stealth_public_key=bytes.fromhex(data["stealth_public_key"]),
        )

    def scan_view_only(
        self, viewing_private: int, spending_public_key: bytes, from_offset: int = 0
    ) -> dict[str, Any]:
        """
        Run a delegated scan on the server with the viewing key only.

        Returns:
            dict with 'matches' (list of Announcement), 'skipped' and 'next_offset'.
        """
        payload = {
            "viewing_private_key": viewing_private.to_bytes(32, "big").hex(),
            "spending_public_key": _hex(spending_public_key),
            "from_offset": from_offset,
        }
        data = self._check(self._client.post(self._url("/stealth/scan"), json=payload))
        return {
            "matches": [Announcement(**m["announcement"]) for m in data["matches"]],
            "skipped": int(data["skipped"]),
            "next_offset": int(data["next_offset"]),
        }

    def health(self) -> bool:
        """Return True if the server reports ok."""
        try:
            return self._check(self._client.get(self._url("/health"))).get("status") == "ok"
        except (StealthApiError, httpx.HTTPError):
            return False

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _url(self, path: str) -> str:
        return f"{self.base_url}{path}"

    def _check(self, response: httpx.Response) -> Any:
        if response.status_code == 403:
            raise AuthorizationFailed(_detail(response))
        if response.status_code != 200:
            raise StealthApiError(
                f"API error {response.status_code} for {response.request.url}: {_detail(response)}"
            )
        return response.json()

    def close(self) -> None:
        """Close the underlying HTTP client."""
        self._client.close()

    def __enter__(self) -> StealthApiClient:
        return self

    def __exit__(self, *_: Any) -> None:
        self.close()


def _hex(value: bytes | str) -> str:
    return value if isinstance(value, str) else bytes(value).hex()


def _detail(response: httpx.Response) -> str:
    try:
        return str(response.json().get("detail", response.text))
    except ValueError:
        return response.text
