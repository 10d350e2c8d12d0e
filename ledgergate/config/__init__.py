"""Configuration for LedgerGate"""

from ledgergate.config.settings import Settings, get_settings, configure_logging, settings

__all__ = ["Settings", "get_settings", "configure_logging", "settings"]
