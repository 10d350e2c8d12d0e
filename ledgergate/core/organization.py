"""
Organization Registry Module

This module maps organization identifiers to their connection profiles,
certificate authority endpoints, wallet locations and MSP identifiers. The
registry is a closed mapping built once at startup: resolving an unknown
organization fails loudly and nothing is mutated afterwards, so it can be
shared across threads without locking.
"""

import os
import json
import logging
from types import MappingProxyType
from typing import Any, Mapping
from dataclasses import dataclass

from ledgergate.core.exceptions import ConfigurationError, UnknownOrganization

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ConnectionProfile:
    """Read-only connection details for one organization"""
    organization: str
    msp_id: str
    ca_name: str
    ca_url: str
    ca_tls_pem: str | None
    affiliation: str
    wallet_path: str
    document: Mapping[str, Any]

    def as_connection_document(self) -> dict[str, Any]:
        """Deep copy of the profile JSON for handing to the network connector"""
        return json.loads(json.dumps(_thaw(self.document)))


def _freeze(value: Any) -> Any:
    if isinstance(value, dict):
        return MappingProxyType({k: _freeze(v) for k, v in value.items()})
    if isinstance(value, list):
        return tuple(_freeze(v) for v in value)
    return value


def _thaw(value: Any) -> Any:
    if isinstance(value, Mapping):
        return {k: _thaw(v) for k, v in value.items()}
    if isinstance(value, tuple):
        return [_thaw(v) for v in value]
    return value


def parse_connection_profile(document: dict[str, Any], organization: str, ca_name: str,
                             msp_id: str, affiliation: str, wallet_path: str) -> ConnectionProfile:
    """
    Build a ConnectionProfile from a parsed connection profile document.

    Args:
        document: Parsed connection profile JSON
        organization: Organization identifier, e.g. "Org1"
        ca_name: Key of the organization's entry under certificateAuthorities
        msp_id: MSP identifier embedded in issued identities
        affiliation: Default CA affiliation for the organization's users
        wallet_path: Location of the organization's wallet

    Returns:
        Immutable ConnectionProfile
    """
    authorities = document.get("certificateAuthorities") or {}
    ca_info = authorities.get(ca_name)
    if not isinstance(ca_info, dict) or not ca_info.get("url"):
        raise ConfigurationError(
            f"Connection profile for {organization} has no certificate authority '{ca_name}'",
            org=organization, ca_name=ca_name)

    tls = ca_info.get("tlsCACerts") or {}
    return ConnectionProfile(
        organization=organization,
        msp_id=msp_id,
        ca_name=ca_info.get("caName", ca_name),
        ca_url=ca_info["url"],
        ca_tls_pem=tls.get("pem"),
        affiliation=affiliation,
        wallet_path=wallet_path,
        document=_freeze(document),
    )


def load_connection_profile(path: str, organization: str, ca_name: str, msp_id: str,
                            affiliation: str, wallet_path: str) -> ConnectionProfile:
    """Read a connection profile JSON file from disk"""
    try:
        with open(path, "r", encoding="utf-8") as f:
            document = json.load(f)
    except FileNotFoundError as e:
        raise ConfigurationError(f"Connection profile not found: {path}", org=organization) from e
    except json.JSONDecodeError as e:
        raise ConfigurationError(f"Connection profile is not valid JSON: {path}: {e}", org=organization) from e

    return parse_connection_profile(document, organization, ca_name, msp_id, affiliation, wallet_path)


class OrganizationRegistry:
    """Closed mapping from organization identifier to ConnectionProfile"""

    def __init__(self, profiles: Mapping[str, ConnectionProfile]):
        self._profiles = MappingProxyType(dict(profiles))

    @classmethod
    def from_settings(cls, config) -> "OrganizationRegistry":
        """Load every configured organization's connection profile"""
        profiles = {}
        for org, entry in config.ORGANIZATIONS.items():
            profile_path = entry["connection_profile"]
            if not os.path.isabs(profile_path):
                profile_path = os.path.join(config.CONFIG_DIR, profile_path)
            wallet_path = entry["wallet"]
            if not os.path.isabs(wallet_path):
                wallet_path = os.path.join(config.WALLET_ROOT, wallet_path)

            profiles[org] = load_connection_profile(
                profile_path, org, entry["ca_name"], entry["msp_id"], entry["affiliation"], wallet_path)
            logger.info(f"Loaded connection profile for {org} from {profile_path}")

        return cls(profiles)

    def resolve(self, org: str) -> ConnectionProfile:
        """Resolve an organization to its connection profile"""
        try:
            return self._profiles[org]
        except (KeyError, TypeError):
            raise UnknownOrganization(org) from None

    def organizations(self) -> list[str]:
        """List all configured organization IDs"""
        return list(self._profiles.keys())

    def __contains__(self, org: str) -> bool:
        return org in self._profiles
