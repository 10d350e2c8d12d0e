"""
Identity Management Module

This module provides the identity lifecycle for the gateway: organization
admin bootstrap, user registration with the certificate authority, enrollment
and caching of the resulting identities in the organization's wallet.

"Ensure identity exists" is idempotent. Admin bootstrap is single-flight per
organization and user registration is single-flight per (organization,
username), so concurrent first-time callers never enroll the same identity
twice. An identity is only written to the wallet after registration and
enrollment have both succeeded.
"""

import logging
from typing import Callable, Mapping

from ledgergate.core.concurrency import SingleFlight
from ledgergate.core.deadline import call_with_deadline
from ledgergate.core.exceptions import (
    LedgerGateError, AdminBootstrapFailed, EnrollmentFailed, InvalidArguments
)
from ledgergate.core.models import ADMIN_LABEL, Identity, RegistrationResult
from ledgergate.core.organization import ConnectionProfile, OrganizationRegistry
from ledgergate.security.ca_client import CertificateAuthorityClient
from ledgergate.security.secure_logging import get_identity_logger
from ledgergate.wallet.base import Wallet, is_valid_label

logger = logging.getLogger(__name__)
audit_logger = get_identity_logger()


def enrolled_message(username: str) -> str:
    return f"{username} enrolled Successfully"


class IdentityManager:
    """Admin bootstrap, registration and enrollment for every configured organization"""

    def __init__(self, registry: OrganizationRegistry,
                 wallet_factory: Callable[[ConnectionProfile], Wallet],
                 ca_client_factory: Callable[[ConnectionProfile], CertificateAuthorityClient],
                 admin_enrollment_id: str = "admin",
                 admin_enrollment_secret: str = "adminpw",
                 wallet_timeout: float | None = None):
        """
        Initialize the identity manager.

        Wallets and CA clients are created once per organization here and
        never replaced, so lookups need no locking.

        Args:
            registry: Organization registry
            wallet_factory: Builds the wallet of an organization
            ca_client_factory: Builds the CA client of an organization
            admin_enrollment_id: Well-known admin enrollment ID
            admin_enrollment_secret: Well-known admin enrollment secret
            wallet_timeout: Deadline in seconds for wallet reads and writes
        """
        self.registry = registry
        self.admin_enrollment_id = admin_enrollment_id
        self.admin_enrollment_secret = admin_enrollment_secret
        self.wallet_timeout = wallet_timeout

        self._wallets: Mapping[str, Wallet] = {
            org: wallet_factory(registry.resolve(org)) for org in registry.organizations()
        }
        self._ca_clients: Mapping[str, CertificateAuthorityClient] = {
            org: ca_client_factory(registry.resolve(org)) for org in registry.organizations()
        }

        self._admin_flight = SingleFlight("admin-bootstrap")
        self._user_flight = SingleFlight("user-registration")

    def wallet_for(self, org: str) -> Wallet:
        """Get the wallet of an organization"""
        self.registry.resolve(org)
        return self._wallets[org]

    def ca_client_for(self, org: str) -> CertificateAuthorityClient:
        """Get the certificate authority client of an organization"""
        self.registry.resolve(org)
        return self._ca_clients[org]

    def _read(self, org: str, label: str) -> Identity | None:
        return call_with_deadline(f"wallet.get:{org}", self.wallet_timeout,
                                  self.wallet_for(org).get, label)

    def _write(self, org: str, identity: Identity) -> None:
        call_with_deadline(f"wallet.put:{org}", self.wallet_timeout,
                           self.wallet_for(org).put, identity.label, identity)

    def get_identity(self, username: str, org: str) -> Identity | None:
        """Get a cached identity, or None when the user is not enrolled"""
        return self._read(org, username)

    def is_registered(self, username: str, org: str) -> bool:
        """Check whether an identity exists in the wallet; no CA interaction"""
        identity = self._read(org, username)
        if identity is not None:
            logger.info(f"An identity for the user {username} exists in the wallet")
        return identity is not None

    def ensure_admin(self, org: str) -> Identity:
        """
        Make sure the organization admin identity is present, enrolling it on first need.

        Returns:
            The admin identity

        Raises:
            AdminBootstrapFailed: The CA rejected the admin enrollment
            CAUnreachable: Transport failure
            OperationTimeout: A deadline passed
        """
        admin = self._read(org, ADMIN_LABEL)
        if admin is not None:
            return admin

        admin, _ = self._admin_flight.do(org, lambda: self._bootstrap_admin(org))
        return admin

    def _bootstrap_admin(self, org: str) -> Identity:
        admin = self._read(org, ADMIN_LABEL)
        if admin is not None:
            return admin

        profile = self.registry.resolve(org)
        logger.info(f'An identity for the admin user "{ADMIN_LABEL}" does not exist in the wallet of {org}')

        try:
            enrollment = self.ca_client_for(org).enroll(self.admin_enrollment_id, self.admin_enrollment_secret)
        except EnrollmentFailed as e:
            audit_logger.audit("enroll", "admin", user_id=ADMIN_LABEL, org_id=org, success=False, reason=e.message)
            raise AdminBootstrapFailed(f"Failed to enroll admin user for {org}: {e.message}", org=org) from e

        admin = Identity(label=ADMIN_LABEL, certificate=enrollment.certificate,
                         private_key=enrollment.private_key, msp_id=profile.msp_id)
        self._write(org, admin)

        audit_logger.audit("enroll", "admin", user_id=ADMIN_LABEL, org_id=org)
        logger.info(f'Successfully enrolled admin user "{ADMIN_LABEL}" for {org} and imported it into the wallet')
        return admin

    def ensure_identity(self, username: str, org: str, permission_tier: str | None = None,
                        user_attributes: dict[str, str] | None = None) -> RegistrationResult:
        """
        Ensure a user identity exists, registering and enrolling it if needed.

        Args:
            username: Enrollment ID and wallet label of the user
            org: Organization identifier
            permission_tier: "READ-WRITE" or any other value for the default tier
            user_attributes: Additional CA attributes registered with the user

        Returns:
            RegistrationResult; ``newly_enrolled`` and ``secret`` are only set
            for the caller that performed the enrollment

        Raises:
            UnknownOrganization, InvalidArguments, RegistrationFailed,
            EnrollmentFailed, AdminBootstrapFailed, CAUnreachable, WalletFailure,
            OperationTimeout
        """
        self.registry.resolve(org)
        if not is_valid_label(username):
            raise InvalidArguments(f"Invalid username {username!r}", username=username)

        if self._read(org, username) is not None:
            logger.info(f"An identity for the user {username} already exists in the wallet")
            return RegistrationResult(username=username, organization=org, message=enrolled_message(username))

        # The admin is enrolled with its bootstrap credentials, never registered
        if username == ADMIN_LABEL:
            self.ensure_admin(org)
            return RegistrationResult(username=username, organization=org, message=enrolled_message(username))

        result, shared = self._user_flight.do(
            (org, username),
            lambda: self._register_and_enroll(username, org, permission_tier, user_attributes))
        if shared:
            return RegistrationResult(username=username, organization=org, message=enrolled_message(username))
        return result

    def _register_and_enroll(self, username: str, org: str, permission_tier: str | None,
                             user_attributes: dict[str, str] | None) -> RegistrationResult:
        if self._read(org, username) is not None:
            return RegistrationResult(username=username, organization=org, message=enrolled_message(username))

        admin = self.ensure_admin(org)
        ca_client = self.ca_client_for(org)
        profile = self.registry.resolve(org)

        try:
            secret = ca_client.register_for_tier(username, permission_tier, admin, user_attributes)
            enrollment = ca_client.enroll(username, secret)
        except LedgerGateError as e:
            audit_logger.audit("register", "identity", user_id=username, org_id=org, success=False,
                               kind=e.kind, reason=e.message)
            raise

        identity = Identity(label=username, certificate=enrollment.certificate,
                            private_key=enrollment.private_key, msp_id=profile.msp_id)
        self._write(org, identity)

        audit_logger.audit("register", "identity", user_id=username, org_id=org,
                           tier=permission_tier or "default")
        logger.info(f"Successfully registered and enrolled user {username} and imported it into the wallet")
        return RegistrationResult(username=username, organization=org, message=enrolled_message(username),
                                  newly_enrolled=True, secret=secret)
