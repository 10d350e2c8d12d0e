"""
In-memory wallet for LedgerGate.

Identities are kept in a dictionary guarded by a lock. Nothing survives a
restart, so this backend is meant for tests and local development.
"""

import threading
from typing import Any

from ledgergate.core.models import Identity
from ledgergate.wallet.base import Wallet


class InMemoryWallet(Wallet):
    """Simple in-memory identity store"""

    def __init__(self):
        self.data: dict[str, dict[str, Any]] = {}
        self._lock = threading.Lock()

    def _get(self, label: str) -> Identity | None:
        with self._lock:
            record = self.data.get(label)
        if record is None:
            return None
        return Identity.from_dict(label, record)

    def _put(self, label: str, identity: Identity) -> None:
        record = identity.to_dict()
        with self._lock:
            self.data[label] = record

    def _remove(self, label: str) -> bool:
        with self._lock:
            return self.data.pop(label, None) is not None

    def _list(self) -> list[str]:
        with self._lock:
            return sorted(self.data.keys())
