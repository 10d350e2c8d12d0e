"""
Certificate Authority Client Module

This module wraps the two operations a certificate authority exposes to the
gateway, registration and enrollment, and owns the mapping from permission
tier to CA-level authorization attributes. The CA itself is an external
service reached through the CAService protocol; this module never speaks its
wire protocol.
"""

import logging
from typing import Any, Callable, Protocol
from dataclasses import dataclass

import httpx

from ledgergate.core.deadline import call_with_deadline
from ledgergate.core.exceptions import (
    LedgerGateError, CAUnreachable, RegistrationFailed, EnrollmentFailed
)
from ledgergate.core.models import Enrollment, Identity, PermissionTier
from ledgergate.core.organization import ConnectionProfile
from ledgergate.security.certificate import (
    CertificateFormatError, certificate_to_pem, private_key_to_pem
)

logger = logging.getLogger(__name__)

CA_ROLE = "client"
ROLE_ATTRIBUTE = "role"

TRANSPORT_ERRORS = (ConnectionError, OSError, httpx.TransportError)


class CAService(Protocol):
    """Remote certificate authority as seen by the gateway"""

    def register(self, request: dict[str, Any], registrar: Identity) -> str:
        """Register an enrollment ID and return its one-time secret"""
        ...

    def enroll(self, request: dict[str, Any]) -> Any:
        """Exchange an enrollment secret for a certificate and key"""
        ...


CAServiceFactory = Callable[[ConnectionProfile], CAService]


@dataclass(frozen=True)
class RegistrationPolicy:
    """CA affiliation and role attribute applied to a registration"""
    affiliation: str
    role_attribute: str

    def attributes(self) -> list[dict[str, Any]]:
        """Attribute list embedded into the enrollment certificate"""
        return [{"name": ROLE_ATTRIBUTE, "value": self.role_attribute, "ecert": True}]


def policy_for_tier(tier: "str | PermissionTier | None", default_affiliation: str,
                    privileged_affiliation: str) -> RegistrationPolicy:
    """
    Map a permission tier to the CA registration policy.

    READ-WRITE callers are registered under the privileged affiliation with
    role attribute "approver", regardless of organization. Every other tier
    gets the organization's default affiliation and role attribute "client".
    """
    if PermissionTier.from_value(tier) is PermissionTier.READ_WRITE:
        return RegistrationPolicy(affiliation=privileged_affiliation, role_attribute="approver")
    return RegistrationPolicy(affiliation=default_affiliation, role_attribute="client")


def _field(result: Any, *names: str) -> Any:
    for name in names:
        if isinstance(result, dict) and name in result:
            return result[name]
        if hasattr(result, name):
            return getattr(result, name)
    return None


class CertificateAuthorityClient:
    """Registration and enrollment against one organization's certificate authority"""

    def __init__(self, profile: ConnectionProfile, service: CAService,
                 privileged_affiliation: str, timeout: float | None = None):
        """
        Initialize the client.

        Args:
            profile: Organization's connection profile
            service: Certificate authority collaborator for this organization
            privileged_affiliation: Affiliation used for the READ-WRITE tier
            timeout: Deadline in seconds for each CA call
        """
        self.profile = profile
        self.service = service
        self.privileged_affiliation = privileged_affiliation
        self.timeout = timeout

    def policy_for(self, tier: "str | PermissionTier | None") -> RegistrationPolicy:
        """Registration policy for a tier within this organization"""
        return policy_for_tier(tier, self.profile.affiliation, self.privileged_affiliation)

    def register(self, username: str, affiliation: str, role: str,
                 attributes: list[dict[str, Any]], acting_identity: Identity) -> str:
        """
        Register a user with the certificate authority.

        Args:
            username: Enrollment ID to register
            affiliation: CA affiliation for the user
            role: CA-level identity type
            attributes: Attributes to embed in the enrollment certificate
            acting_identity: Registrar identity, normally the organization admin

        Returns:
            One-time enrollment secret

        Raises:
            RegistrationFailed: The CA rejected the request
            CAUnreachable: Transport failure
            OperationTimeout: The CA did not answer in time
        """
        request = {
            "affiliation": affiliation,
            "enrollmentID": username,
            "role": role,
            "attrs": attributes,
        }
        try:
            secret = call_with_deadline(f"ca.register:{self.profile.organization}", self.timeout,
                                        self.service.register, request, acting_identity)
        except LedgerGateError:
            raise
        except TRANSPORT_ERRORS as e:
            raise CAUnreachable(f"Certificate authority {self.profile.ca_url} unreachable: {e}",
                                org=self.profile.organization) from e
        except Exception as e:
            raise RegistrationFailed(f"Failed to register user {username}: {e}",
                                     username=username, org=self.profile.organization) from e

        if not secret:
            raise RegistrationFailed(f"Certificate authority returned no secret for {username}",
                                     username=username, org=self.profile.organization)
        return str(secret)

    def register_for_tier(self, username: str, tier: "str | PermissionTier | None",
                          acting_identity: Identity,
                          extra_attributes: dict[str, str] | None = None) -> str:
        """
        Register a user applying the tier-to-attribute policy.

        Extra attributes are registered alongside the role attribute but are
        not embedded in the certificate, and cannot override the role.
        """
        policy = self.policy_for(tier)
        attributes = policy.attributes()
        for name, value in (extra_attributes or {}).items():
            if name == ROLE_ATTRIBUTE:
                continue
            attributes.append({"name": name, "value": str(value), "ecert": False})

        logger.debug(f"Registering {username} in {self.profile.organization} "
                     f"with affiliation {policy.affiliation}, role attribute {policy.role_attribute}")
        return self.register(username, policy.affiliation, CA_ROLE, attributes, acting_identity)

    def enroll(self, enrollment_id: str, secret: str) -> Enrollment:
        """
        Enroll an identity, exchanging its secret for a certificate and key.

        Raises:
            EnrollmentFailed: Bad secret or unusable CA response
            CAUnreachable: Transport failure
            OperationTimeout: The CA did not answer in time
        """
        request = {"enrollmentID": enrollment_id, "enrollmentSecret": secret}
        try:
            result = call_with_deadline(f"ca.enroll:{self.profile.organization}", self.timeout,
                                        self.service.enroll, request)
        except LedgerGateError:
            raise
        except TRANSPORT_ERRORS as e:
            raise CAUnreachable(f"Certificate authority {self.profile.ca_url} unreachable: {e}",
                                org=self.profile.organization) from e
        except Exception as e:
            raise EnrollmentFailed(f"Failed to enroll {enrollment_id}: {e}",
                                   username=enrollment_id, org=self.profile.organization) from e

        certificate = _field(result, "certificate")
        key = _field(result, "key", "private_key")
        if certificate is None or key is None:
            raise EnrollmentFailed(f"Enrollment response for {enrollment_id} is missing certificate or key",
                                   username=enrollment_id, org=self.profile.organization)
        try:
            return Enrollment(certificate=certificate_to_pem(certificate), private_key=private_key_to_pem(key))
        except CertificateFormatError as e:
            raise EnrollmentFailed(f"Unusable enrollment material for {enrollment_id}: {e}",
                                   username=enrollment_id, org=self.profile.organization) from e
