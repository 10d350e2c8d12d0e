"""
Wallet backends for LedgerGate.

One wallet per organization; the backend is chosen by configuration.
"""

from ledgergate.core.exceptions import ConfigurationError
from ledgergate.core.organization import ConnectionProfile
from ledgergate.wallet.base import Wallet, is_valid_label, validate_label
from ledgergate.wallet.memory_wallet import InMemoryWallet
from ledgergate.wallet.file_wallet import FileSystemWallet


def create_wallet(profile: ConnectionProfile, wallet_config: dict) -> Wallet:
    """
    Create the wallet for one organization.

    Args:
        profile: Organization's connection profile (provides the wallet location)
        wallet_config: Output of Settings.get_wallet_config()

    Returns:
        Wallet instance for the organization
    """
    backend = wallet_config.get("backend", "filesystem")

    if backend == "memory":
        return InMemoryWallet()
    if backend == "filesystem":
        return FileSystemWallet(profile.wallet_path)
    if backend == "redis":
        from ledgergate.wallet.redis_wallet import RedisWallet
        return RedisWallet(profile.organization, **wallet_config.get("redis", {}))

    raise ConfigurationError(f"Unsupported wallet backend: {backend}", backend=backend)


__all__ = [
    "Wallet",
    "InMemoryWallet",
    "FileSystemWallet",
    "create_wallet",
    "is_valid_label",
    "validate_label",
]
