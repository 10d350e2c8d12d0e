"""
Exception taxonomy for LedgerGate.

Every failure raised by the identity manager, the certificate authority client
and the transaction gateway derives from LedgerGateError. Each class carries a
stable ``kind`` string so that callers can turn an exception into a structured
response without inspecting the message.
"""

from typing import Any


class LedgerGateError(Exception):
    """Base class for all LedgerGate errors"""

    kind = "LedgerGateError"
    retriable = False

    def __init__(self, message: str, **details: Any):
        super().__init__(message)
        self.message = message
        self.details = details

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary"""
        return {
            "kind": self.kind,
            "message": self.message,
            "retriable": self.retriable,
            "details": {k: str(v) for k, v in self.details.items()},
        }


class ConfigurationError(LedgerGateError):
    """Invalid or missing configuration, e.g. an unreadable connection profile"""
    kind = "ConfigurationError"


class UnknownOrganization(LedgerGateError):
    """Organization identifier is not in the registry"""
    kind = "UnknownOrganization"

    def __init__(self, org: str):
        super().__init__(f"Organization '{org}' is not configured", org=org)
        self.org = org


class CAUnreachable(LedgerGateError):
    """Transport-level failure talking to the certificate authority"""
    kind = "CAUnreachable"
    retriable = True


class RegistrationFailed(LedgerGateError):
    """The certificate authority rejected a registration request"""
    kind = "RegistrationFailed"


class EnrollmentFailed(LedgerGateError):
    """The certificate authority rejected an enrollment request"""
    kind = "EnrollmentFailed"


class AdminBootstrapFailed(EnrollmentFailed):
    """The organization admin could not be enrolled"""
    kind = "AdminBootstrapFailed"


class WalletFailure(LedgerGateError):
    """The identity store could not be read or written, or holds an unreadable record"""
    kind = "WalletFailure"
    retriable = True


class UnknownFunction(LedgerGateError):
    """Requested chaincode function is not in the dispatch table"""
    kind = "UnknownFunction"

    def __init__(self, function_name: str):
        super().__init__(f"Function '{function_name}' is not supported", function=function_name)
        self.function_name = function_name


class InvalidArguments(LedgerGateError):
    """Positional arguments do not match the function's expected arity"""
    kind = "InvalidArguments"


class ConnectionFailed(LedgerGateError):
    """Could not open a connection to the ledger network"""
    kind = "ConnectionFailed"
    retriable = True


class SubmissionFailed(LedgerGateError):
    """Transaction submission was rejected or failed in flight"""
    kind = "SubmissionFailed"


class OperationTimeout(LedgerGateError):
    """An operation exceeded its deadline"""
    kind = "Timeout"
    retriable = True

    def __init__(self, operation: str, timeout: float | None):
        super().__init__(f"Operation '{operation}' exceeded its deadline of {timeout}s",
                         operation=operation, timeout=timeout)
        self.operation = operation
        self.timeout = timeout
