"""
Transaction Gateway Module

This module submits chaincode transactions on behalf of wallet identities. Each
invocation validates the requested function against the dispatch table, makes
sure the acting user is enrolled, opens a connection scoped to that single
call, submits, and always releases the connection before returning.
"""

import logging
from contextlib import contextmanager
from typing import Any, Iterator, Sequence

from ledgergate.core.deadline import call_with_deadline
from ledgergate.core.exceptions import LedgerGateError, ConnectionFailed, SubmissionFailed
from ledgergate.core.models import TransactionRequest, TransactionResult
from ledgergate.core.organization import ConnectionProfile, OrganizationRegistry
from ledgergate.network.dispatch import DEFAULT_DISPATCH_TABLE, ChaincodeFunction, DispatchTable
from ledgergate.network.interfaces import Gateway, NetworkConnector
from ledgergate.security.identity_manager import IdentityManager
from ledgergate.security.secure_logging import get_audit_logger

logger = logging.getLogger(__name__)
audit_logger = get_audit_logger()


class TransactionGateway:
    """Per-call connection setup, function dispatch and response normalization"""

    def __init__(self, registry: OrganizationRegistry, identity_manager: IdentityManager,
                 connector: NetworkConnector, dispatch_table: DispatchTable = DEFAULT_DISPATCH_TABLE,
                 discovery_options: dict[str, bool] | None = None, timeout: float | None = None):
        """
        Initialize the gateway.

        Args:
            registry: Organization registry
            identity_manager: Used to ensure the acting identity is enrolled
            connector: Ledger network collaborator
            dispatch_table: Functions that may be submitted
            discovery_options: Service discovery options passed on connect
            timeout: Deadline in seconds for connect, submit and disconnect
        """
        self.registry = registry
        self.identity_manager = identity_manager
        self.connector = connector
        self.dispatch_table = dispatch_table
        self.discovery_options = discovery_options or {"enabled": True, "asLocalhost": True}
        self.timeout = timeout

    def invoke(self, channel: str, chaincode: str, function_name: str, args: Sequence[Any],
               username: str, org: str, permission_tier: str | None = None) -> TransactionResult:
        """
        Submit a chaincode transaction as username.

        Args:
            channel: Channel name
            chaincode: Chaincode name
            function_name: Chaincode function, must be in the dispatch table
            args: Positional arguments matching the function's arity
            username: Acting identity label, enrolled on demand
            org: Organization of the acting identity
            permission_tier: Tier used if the user has to be registered

        Returns:
            TransactionResult with ``result == {"transactionId": ...}``

        Raises:
            UnknownOrganization, UnknownFunction, InvalidArguments,
            RegistrationFailed, EnrollmentFailed, CAUnreachable,
            ConnectionFailed, SubmissionFailed, WalletFailure, OperationTimeout
        """
        profile = self.registry.resolve(org)
        # Dispatch is checked before ensure_identity so a malformed call never reaches the CA
        function, bound_args = self.dispatch_table.bind(function_name, args)
        request = TransactionRequest(channel=channel, chaincode=chaincode, function_name=function.name,
                                     args=bound_args, username=username, organization=org,
                                     permission_tier=permission_tier)

        self.identity_manager.ensure_identity(username, org, permission_tier)

        try:
            with self._connection(profile, username) as gateway:
                raw = call_with_deadline(f"network.submit:{function.name}", self.timeout,
                                         self._submit, gateway, request, function)
        except LedgerGateError as e:
            audit_logger.audit("submit", "transaction", user_id=username, org_id=org, success=False,
                               function=function.name, channel=channel, chaincode=chaincode,
                               kind=e.kind, reason=e.message)
            raise

        result = function.shape_result(raw)
        audit_logger.audit("submit", "transaction", user_id=username, org_id=org,
                           function=function.name, channel=channel, chaincode=chaincode,
                           transaction_id=result.get("transactionId"))
        return TransactionResult(
            message=f"Transaction {function.name} has been submitted successfully",
            result=result,
        )

    @staticmethod
    def _submit(gateway: Gateway, request: TransactionRequest, function: ChaincodeFunction) -> Any:
        try:
            network = gateway.get_network(request.channel)
            contract = network.get_contract(request.chaincode)
            return contract.submit_transaction(function.name, *request.args)
        except LedgerGateError:
            raise
        except Exception as e:
            raise SubmissionFailed(f"Failed to submit transaction {function.name}: {e}",
                                   function=function.name, channel=request.channel,
                                   chaincode=request.chaincode) from e

    @contextmanager
    def _connection(self, profile: ConnectionProfile, username: str) -> Iterator[Gateway]:
        """Open a gateway for one call and disconnect it on every exit path"""
        options = {
            "wallet": self.identity_manager.wallet_for(profile.organization),
            "identity": username,
            "discovery": dict(self.discovery_options),
        }
        try:
            gateway = call_with_deadline(f"network.connect:{profile.organization}", self.timeout,
                                         self.connector.connect, profile.as_connection_document(), options,
                                         on_late_result=self._disconnect)
        except LedgerGateError:
            raise
        except Exception as e:
            raise ConnectionFailed(f"Failed to connect to the network for {profile.organization}: {e}",
                                   org=profile.organization) from e

        try:
            yield gateway
        finally:
            try:
                call_with_deadline(f"network.disconnect:{profile.organization}", self.timeout,
                                   self._disconnect, gateway)
            except LedgerGateError as e:
                logger.error(f"Gateway disconnect for {profile.organization} did not complete: {e}")

    @staticmethod
    def _disconnect(gateway: Gateway) -> None:
        try:
            gateway.disconnect()
        except Exception as e:
            logger.error(f"Gateway disconnect failed: {e}")
