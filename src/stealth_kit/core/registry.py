"""
Key registry: identifier -> published (spending, viewing) public keys.

The registry itself is an external collaborator (typically an on-chain
contract). The core only needs the KeyRegistry protocol; it is passed
explicitly to StealthSender / StealthReceiver rather than held globally.

InMemoryKeyRegistry is a thread-safe reference implementation used by
the HTTP application and the tests. Authorisation rule: a write for
`identifier` is accepted when `caller` is None (trusted local write),
equals `identifier`, or is an operator approved by `identifier`.
Signature-based "register on behalf of" flows are out of scope.
"""

from __future__ import annotations

import logging
import threading
from typing import Protocol, runtime_checkable

from stealth_kit.crypto.curve import SECP256K1, CurveAdapter
from stealth_kit.crypto.keys import decode_public_key, encode_public_key
from stealth_kit.errors import AuthorizationFailed, StealthError

logger = logging.getLogger("stealth_kit.registry")


@runtime_checkable
class KeyRegistry(Protocol):
    """Read/write access to published recipient keys."""

    def get_public_keys(self, identifier: str) -> tuple[bytes, bytes] | None:
        """Return (spending_public_key, viewing_public_key), or None if unregistered."""
        ...

    def set_public_keys(
        self,
        identifier: str,
        spending_public_key: bytes,
        viewing_public_key: bytes,
        *,
        caller: str | None = None,
    ) -> None:
        """Publish keys for `identifier`; raises AuthorizationFailed if rejected."""
        ...


class InMemoryKeyRegistry:
    """
    Dictionary-backed KeyRegistry.

    Keys are validated (decoded) on write and stored in canonical
    compressed form, so reads always return decodable encodings.
    Absence is reported as None, never as zero bytes.
    """

    def __init__(self, curve: CurveAdapter = SECP256K1) -> None:
        self.curve = curve
        self._keys: dict[str, tuple[bytes, bytes]] = {}
        self._operators: dict[str, set[str]] = {}
        self._lock = threading.Lock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._keys)

    def __contains__(self, identifier: object) -> bool:
        with self._lock:
            return identifier in self._keys

    def get_public_keys(self, identifier: str) -> tuple[bytes, bytes] | None:
        with self._lock:
            return self._keys.get(identifier)

    def set_public_keys(
        self,
        identifier: str,
        spending_public_key: bytes | str,
        viewing_public_key: bytes | str,
        *,
        caller: str | None = None,
    ) -> None:
        """
        Publish (or replace) the keys for `identifier`.

        Raises:
            AuthorizationFailed: If `caller` may not write for `identifier`.
            MalformedKey: If either key cannot be decoded.
        """
        if not identifier:
            raise StealthError("identifier must be non-empty")
        spend = encode_public_key(decode_public_key(spending_public_key, self.curve), self.curve)
        view = encode_public_key(decode_public_key(viewing_public_key, self.curve), self.curve)

        with self._lock:
            if not self._is_authorized(identifier, caller):
                raise AuthorizationFailed(
                    f"Caller '{caller}' is not authorized to register keys for '{identifier}'"
                )
            self._keys[identifier] = (spend, view)
        logger.info(f"Registered stealth keys for {identifier}")

    def approve_operator(self, identifier: str, operator: str) -> None:
        """Allow `operator` to write keys on behalf of `identifier`."""
        with self._lock:
            self._operators.setdefault(identifier, set()).add(operator)

    def revoke_operator(self, identifier: str, operator: str) -> None:
        with self._lock:
            self._operators.get(identifier, set()).discard(operator)

    def _is_authorized(self, identifier: str, caller: str | None) -> bool:
        if caller is None or caller == identifier:
            return True
        return caller in self._operators.get(identifier, set())
