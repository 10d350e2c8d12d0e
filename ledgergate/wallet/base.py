"""
Wallet base class for LedgerGate.

A wallet is the identity store of one organization: a durable mapping from
label to Identity. Labels are unique within a wallet and the presence of a
label implies a completed enrollment.

Backend failures (unreadable records, I/O errors, storage server errors) are
raised as WalletFailure, and backend timeouts as OperationTimeout.
"""

from __future__ import annotations

import re
import logging
from abc import ABC, abstractmethod
from typing import Any, Callable

from ledgergate.core.exceptions import OperationTimeout, WalletFailure
from ledgergate.core.models import Identity

logger = logging.getLogger(__name__)

_LABEL_PATTERN = re.compile(r"[A-Za-z0-9_@\-][A-Za-z0-9_.@\-]*")
MAX_LABEL_LENGTH = 255


def is_valid_label(label: object) -> bool:
    """Labels double as file names and storage keys, so they are restricted (CWE-22)"""
    return (
        isinstance(label, str)
        and 0 < len(label) <= MAX_LABEL_LENGTH
        and _LABEL_PATTERN.fullmatch(label) is not None
    )


def validate_label(label: object) -> str:
    """Validate label and return it, raising ValueError when it is malformed"""
    if not is_valid_label(label):
        raise ValueError(
            f"Security: Invalid identity label {label!r}. "
            f"Only alphanumeric, '_', '-', '.', '@' are allowed and it must not start with '.'")
    return label


class Wallet(ABC):
    """Abstract identity store"""

    # Checked in this order; timeouts first since TimeoutError is an OSError
    BACKEND_TIMEOUTS: tuple[type[BaseException], ...] = (TimeoutError,)
    # Decode errors are ValueError, incomplete records KeyError or TypeError
    BACKEND_ERRORS: tuple[type[BaseException], ...] = (OSError, ValueError, KeyError, TypeError)

    name = "wallet"

    def _guard(self, operation: str, label: str | None, func: Callable[..., Any], *args: Any) -> Any:
        """Run a backend call, mapping its failures into the LedgerGate taxonomy"""
        target = f"{self.name}.{operation}" + (f":{label}" if label else "")
        try:
            return func(*args)
        except self.BACKEND_TIMEOUTS as e:
            raise OperationTimeout(target, None) from e
        except self.BACKEND_ERRORS as e:
            logger.error(f"Wallet {operation} failed for {label or '*'}: {type(e).__name__}: {e}")
            raise WalletFailure(f"Wallet {operation} failed for {label or 'all labels'}: {e}",
                                operation=operation, label=label or "") from e

    def get(self, label: str) -> Identity | None:
        """Get identity by label; malformed labels are reported as absent"""
        if not is_valid_label(label):
            logger.debug("Lookup with malformed identity label treated as absent")
            return None
        return self._guard("get", label, self._get, label)

    def put(self, label: str, identity: Identity) -> None:
        """Insert or overwrite the identity stored under label"""
        validate_label(label)
        if identity.label != label:
            identity = Identity(label=label, certificate=identity.certificate,
                                private_key=identity.private_key, msp_id=identity.msp_id,
                                type=identity.type)
        self._guard("put", label, self._put, label, identity)

    def contains(self, label: str) -> bool:
        """Check if an identity exists under label"""
        return self.get(label) is not None

    def remove(self, label: str) -> bool:
        """Remove identity; returns False when nothing was stored"""
        if not is_valid_label(label):
            return False
        return self._guard("remove", label, self._remove, label)

    def list(self) -> list[str]:
        """List all labels in the wallet"""
        return self._guard("list", None, self._list)

    @abstractmethod
    def _get(self, label: str) -> Identity | None:
        ...

    @abstractmethod
    def _put(self, label: str, identity: Identity) -> None:
        ...

    @abstractmethod
    def _remove(self, label: str) -> bool:
        ...

    @abstractmethod
    def _list(self) -> list[str]:
        ...

    def __contains__(self, label: str) -> bool:
        return self.contains(label)
