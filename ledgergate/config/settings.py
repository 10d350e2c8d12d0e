"""
Configuration settings for LedgerGate.

This module provides the configuration management for the identity and
transaction gateway. It defines the organizations served by the process,
wallet storage backends, certificate authority bootstrap credentials,
deadlines for blocking operations and logging.

The configuration supports multiple environments (development, production, testing) and
provides validation mechanisms to ensure system integrity.
"""

import os
import logging
from typing import Dict, Any, List


def _optional_float(name: str, default: str) -> float | None:
    raw = os.getenv(name, default)
    if raw in ("", "none", "None"):
        return None
    return float(raw)


class Settings:
    """Gateway configuration settings"""

    FRAMEWORK_NAME = "ledgergate"

    # Organization settings
    CONFIG_DIR = os.getenv("LEDGERGATE_CONFIG_DIR", os.path.join(os.getcwd(), "config"))
    WALLET_ROOT = os.getenv("LEDGERGATE_WALLET_ROOT", os.getcwd())
    ORGANIZATIONS: Dict[str, Dict[str, str]] = {
        "Org1": {
            "connection_profile": "connection-org1.json",
            "ca_name": "ca.org1.example.com",
            "wallet": "org1-wallet",
            "msp_id": "Org1MSP",
            "affiliation": "org1.department1",
        },
        "Org2": {
            "connection_profile": "connection-org2.json",
            "ca_name": "ca.org2.example.com",
            "wallet": "org2-wallet",
            "msp_id": "Org2MSP",
            "affiliation": "org2.department1",
        },
    }

    # Certificate authority settings
    PRIVILEGED_AFFILIATION = "org1.department1"
    ADMIN_ENROLLMENT_ID = os.getenv("LEDGERGATE_ADMIN_ID", "admin")
    ADMIN_ENROLLMENT_SECRET = os.getenv("LEDGERGATE_ADMIN_SECRET", "adminpw")

    # Wallet settings
    WALLET_BACKEND = os.getenv("LEDGERGATE_WALLET_BACKEND", "filesystem")  # memory, filesystem, redis
    REDIS_HOST = os.getenv("REDIS_HOST", "localhost")
    REDIS_PORT = int(os.getenv("REDIS_PORT", "6379"))
    REDIS_DB = int(os.getenv("REDIS_DB", "0"))

    # Network settings
    DISCOVERY_ENABLED = True
    DISCOVERY_AS_LOCALHOST = os.getenv("LEDGERGATE_DISCOVERY_AS_LOCALHOST", "true").lower() == "true"

    # Deadlines in seconds (None disables the deadline)
    CA_TIMEOUT = _optional_float("LEDGERGATE_CA_TIMEOUT", "30")
    WALLET_TIMEOUT = _optional_float("LEDGERGATE_WALLET_TIMEOUT", "10")
    NETWORK_TIMEOUT = _optional_float("LEDGERGATE_NETWORK_TIMEOUT", "60")
    MAX_WORKER_THREADS = int(os.getenv("LEDGERGATE_MAX_WORKERS", "32"))

    # Logging settings
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
    LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

    @classmethod
    def get_organization_config(cls, org: str) -> Dict[str, str] | None:
        """Get raw configuration for one organization"""
        return cls.ORGANIZATIONS.get(org)

    @classmethod
    def get_wallet_config(cls) -> Dict[str, Any]:
        """Get wallet configuration"""
        return {
            "backend": cls.WALLET_BACKEND,
            "redis": {
                "host": cls.REDIS_HOST,
                "port": cls.REDIS_PORT,
                "db": cls.REDIS_DB
            }
        }

    @classmethod
    def get_timeout_config(cls) -> Dict[str, float | None]:
        """Get deadlines for blocking operations"""
        return {
            "ca": cls.CA_TIMEOUT,
            "wallet": cls.WALLET_TIMEOUT,
            "network": cls.NETWORK_TIMEOUT
        }

    @classmethod
    def get_discovery_options(cls) -> Dict[str, bool]:
        """Get service discovery options passed to the network connector"""
        return {
            "enabled": cls.DISCOVERY_ENABLED,
            "asLocalhost": cls.DISCOVERY_AS_LOCALHOST
        }

    @classmethod
    def validate_config(cls) -> List[str]:
        """Validate configuration and return list of errors"""
        errors = []

        if not cls.ORGANIZATIONS:
            errors.append("ORGANIZATIONS must define at least one organization")

        required = ("connection_profile", "ca_name", "wallet", "msp_id", "affiliation")
        for org, entry in cls.ORGANIZATIONS.items():
            missing = [key for key in required if not entry.get(key)]
            if missing:
                errors.append(f"Organization {org} is missing: {', '.join(missing)}")

        if cls.WALLET_BACKEND not in ["memory", "filesystem", "redis"]:
            errors.append("WALLET_BACKEND must be one of: memory, filesystem, redis")

        for name, value in cls.get_timeout_config().items():
            if value is not None and value <= 0:
                errors.append(f"{name.upper()}_TIMEOUT must be positive")

        if cls.MAX_WORKER_THREADS <= 0:
            errors.append("MAX_WORKER_THREADS must be positive")

        if not cls.ADMIN_ENROLLMENT_ID or not cls.ADMIN_ENROLLMENT_SECRET:
            errors.append("ADMIN_ENROLLMENT_ID and ADMIN_ENROLLMENT_SECRET must be set")

        return errors


# Environment-specific settings
class DevelopmentSettings(Settings):
    """Development environment settings"""
    LOG_LEVEL = "DEBUG"


class ProductionSettings(Settings):
    """Production environment settings"""
    LOG_LEVEL = "WARNING"
    WALLET_BACKEND = "redis"
    DISCOVERY_AS_LOCALHOST = False


class TestingSettings(Settings):
    """Testing environment settings"""
    LOG_LEVEL = "DEBUG"
    WALLET_BACKEND = "memory"
    CA_TIMEOUT = 5.0
    WALLET_TIMEOUT = 5.0
    NETWORK_TIMEOUT = 5.0


# Get settings based on environment
def get_settings() -> Settings:
    """Get settings based on environment variable"""
    env = os.getenv("LEDGERGATE_ENV", "development").lower()

    if env == "production":
        return ProductionSettings()
    elif env == "testing":
        return TestingSettings()
    else:
        return DevelopmentSettings()


def configure_logging(config: Settings) -> None:
    """Apply the configured level and format to the package logger"""
    logging.basicConfig(format=config.LOG_FORMAT)
    logging.getLogger("ledgergate").setLevel(config.LOG_LEVEL)


# Global settings instance
settings = get_settings()
