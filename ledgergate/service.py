"""
LedgerGate service entry point.

LedgerService wires the organization registry, wallets, certificate authority
clients, identity manager and transaction gateway together, and exposes the
operations an outer layer (for example an HTTP API) calls. Every LedgerGate
failure is returned as a structured response; nothing is reported as success
unless it succeeded.
"""

import json
import logging
from typing import Any, Callable, Sequence

from pydantic import ValidationError

from ledgergate.api.schemas import InvokeRequest, InvokeResponse, RegisterResponse, RegisterUserRequest
from ledgergate.config.settings import Settings
from ledgergate.core.deadline import configure_executor
from ledgergate.core.exceptions import LedgerGateError, ConfigurationError, InvalidArguments
from ledgergate.core.models import RegistrationRequest
from ledgergate.core.organization import ConnectionProfile, OrganizationRegistry
from ledgergate.network.gateway import TransactionGateway
from ledgergate.network.interfaces import NetworkConnector
from ledgergate.security.ca_client import CAServiceFactory, CertificateAuthorityClient
from ledgergate.security.identity_manager import IdentityManager
from ledgergate.wallet import Wallet, create_wallet

logger = logging.getLogger(__name__)

USER_CHANNEL = "mychannel"
USER_CHAINCODE = "fabcar"


def _validation_error(e: ValidationError) -> InvalidArguments:
    fields = ", ".join(".".join(str(p) for p in err["loc"]) for err in e.errors())
    return InvalidArguments(f"Invalid request fields: {fields}")


class LedgerService:
    """Invocation entry point consumed by an external caller"""

    def __init__(self, registry: OrganizationRegistry, identity_manager: IdentityManager,
                 gateway: TransactionGateway, user_channel: str = USER_CHANNEL,
                 user_chaincode: str = USER_CHAINCODE):
        self.registry = registry
        self.identity_manager = identity_manager
        self.gateway = gateway
        self.user_channel = user_channel
        self.user_chaincode = user_chaincode

    @classmethod
    def from_settings(cls, config: Settings, ca_factory: CAServiceFactory, connector: NetworkConnector,
                      registry: OrganizationRegistry | None = None,
                      wallet_factory: Callable[[ConnectionProfile], Wallet] | None = None) -> "LedgerService":
        """
        Build a service from configuration.

        Args:
            config: Settings instance
            ca_factory: Builds the certificate authority collaborator for a profile
            connector: Ledger network collaborator
            registry: Pre-built registry; loaded from the configured profiles when omitted
            wallet_factory: Builds an organization's wallet; defaults to the configured backend
        """
        errors = config.validate_config()
        if errors:
            raise ConfigurationError(f"Invalid configuration: {'; '.join(errors)}", errors=errors)

        configure_executor(config.MAX_WORKER_THREADS)
        registry = registry or OrganizationRegistry.from_settings(config)
        timeouts = config.get_timeout_config()
        wallet_config = config.get_wallet_config()

        identity_manager = IdentityManager(
            registry,
            wallet_factory or (lambda profile: create_wallet(profile, wallet_config)),
            lambda profile: CertificateAuthorityClient(profile, ca_factory(profile),
                                                       config.PRIVILEGED_AFFILIATION, timeouts["ca"]),
            admin_enrollment_id=config.ADMIN_ENROLLMENT_ID,
            admin_enrollment_secret=config.ADMIN_ENROLLMENT_SECRET,
            wallet_timeout=timeouts["wallet"],
        )
        gateway = TransactionGateway(registry, identity_manager, connector,
                                     discovery_options=config.get_discovery_options(),
                                     timeout=timeouts["network"])
        return cls(registry, identity_manager, gateway)

    def invoke_transaction(self, channel: str, chaincode: str, fcn: str, args: Sequence[Any],
                           username: str, org: str, permission_tier: str | None = None) -> InvokeResponse:
        """Submit a transaction and return {result, error, errorData}"""
        try:
            request = InvokeRequest(channel=channel, chaincode=chaincode, fcn=fcn, args=list(args),
                                    username=username, org=org, permission_tier=permission_tier)
        except ValidationError as e:
            return self._invoke_error(_validation_error(e))

        try:
            outcome = self.gateway.invoke(request.channel, request.chaincode, request.fcn, request.args,
                                          request.username, request.org, request.permission_tier)
        except LedgerGateError as e:
            return self._invoke_error(e)

        return InvokeResponse(result=outcome.to_dict())

    def get_registered_user(self, username: str, org: str, permission_tier: str | None = None,
                            user_attributes: dict[str, str] | None = None) -> RegisterResponse:
        """Ensure a user is registered and enrolled"""
        try:
            result = self.identity_manager.ensure_identity(username, org, permission_tier, user_attributes)
        except LedgerGateError as e:
            return self._register_error(e)
        return RegisterResponse(success=True, message=result.message)

    def is_user_registered(self, username: str, org: str) -> bool:
        """Check whether a user already has an identity in the organization's wallet"""
        return self.identity_manager.is_registered(username, org)

    def register_and_get_secret(self, request: RegisterUserRequest | dict[str, Any]) -> RegisterResponse:
        """
        Register a user, enroll it and record the user on the ledger.

        The secret is returned only when this call performed the enrollment. An
        already enrolled user is reported as success without touching the ledger.
        """
        try:
            if isinstance(request, dict):
                request = RegisterUserRequest.model_validate(request)
        except ValidationError as e:
            return self._register_error(_validation_error(e))

        registration = RegistrationRequest(
            username=request.username, organization=request.org, permission_tier=request.permission_tier,
            name=request.name, password=request.password, role=request.user_type)

        try:
            result = self.identity_manager.ensure_identity(registration.username, registration.organization,
                                                           registration.permission_tier)
            if not result.newly_enrolled:
                return RegisterResponse(success=True, message=result.message)

            self.gateway.invoke(self.user_channel, self.user_chaincode, "CreateUser",
                                [json.dumps(registration.to_user_record())],
                                registration.username, registration.organization,
                                registration.permission_tier)
        except LedgerGateError as e:
            return self._register_error(e)

        return RegisterResponse(success=True, message=result.message, secret=result.secret)

    @staticmethod
    def _invoke_error(error: LedgerGateError) -> InvokeResponse:
        logger.warning(f"Invocation failed: {error.kind}: {error.message}")
        return InvokeResponse(result=None, error=error.message, error_data=error.to_dict())

    @staticmethod
    def _register_error(error: LedgerGateError) -> RegisterResponse:
        logger.warning(f"Registration failed: {error.kind}: {error.message}")
        return RegisterResponse(success=False, message=error.message, error_data=error.to_dict())
