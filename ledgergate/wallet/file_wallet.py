"""
File system wallet for LedgerGate

This module stores each identity as a JSON document named ``<label>.id`` in
the organization's wallet directory, the same layout used by Fabric SDK file
system wallets. Writes go to a temporary file in the same directory which is
flushed, fsynced and atomically renamed over the target, so readers see either
the previous record or the new one and never a partial write.
"""

import json
import os
import logging
import tempfile
from pathlib import Path

from ledgergate.core.models import Identity
from ledgergate.wallet.base import Wallet

logger = logging.getLogger(__name__)

ID_SUFFIX = ".id"


class FileSystemWallet(Wallet):
    """File-based identity store"""

    def __init__(self, wallet_path: str):
        """
        Initialize file system wallet

        Args:
            wallet_path: Directory holding the identity files
        """
        self.wallet_path = Path(wallet_path)
        self.wallet_path.mkdir(parents=True, exist_ok=True)
        logger.info(f"Wallet path: {self.wallet_path}")

    def _get_identity_file(self, label: str) -> Path:
        """Get file path for an identity"""
        return self.wallet_path / f"{label}{ID_SUFFIX}"

    def _get(self, label: str) -> Identity | None:
        identity_file = self._get_identity_file(label)
        try:
            with open(identity_file, "r", encoding="utf-8") as f:
                record = json.load(f)
        except FileNotFoundError:
            return None

        return Identity.from_dict(label, record)

    def _put(self, label: str, identity: Identity) -> None:
        identity_file = self._get_identity_file(label)
        fd, tmp_path = tempfile.mkstemp(dir=self.wallet_path, prefix=f".{label}.", suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(identity.to_dict(), f)
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmp_path, identity_file)
        except Exception as e:
            logger.error(f"Failed to store identity {label}: {e}")
            if os.path.exists(tmp_path):
                os.unlink(tmp_path)
            raise

        self._fsync_directory()
        logger.debug(f"Stored identity: {label}")

    def _fsync_directory(self) -> None:
        """Persist the rename itself; not supported on every platform"""
        if not hasattr(os, "O_DIRECTORY"):
            return
        dir_fd = os.open(self.wallet_path, os.O_RDONLY | os.O_DIRECTORY)
        try:
            os.fsync(dir_fd)
        finally:
            os.close(dir_fd)

    def _remove(self, label: str) -> bool:
        try:
            self._get_identity_file(label).unlink()
        except FileNotFoundError:
            return False
        return True

    def _list(self) -> list[str]:
        return sorted(
            path.name[:-len(ID_SUFFIX)]
            for path in self.wallet_path.glob(f"*{ID_SUFFIX}")
            if not path.name.startswith(".")
        )
