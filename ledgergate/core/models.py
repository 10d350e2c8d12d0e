"""
Domain models for LedgerGate.

Identities are immutable values: re-enrollment produces a new Identity rather
than mutating an existing one. Requests and results are ephemeral and live
only for the duration of a single call.
"""

from typing import Any
from dataclasses import dataclass, field
from enum import Enum


IDENTITY_TYPE_X509 = "X.509"
ADMIN_LABEL = "admin"


class PermissionTier(Enum):
    """Permission tiers understood by the registration policy"""
    READ_WRITE = "READ-WRITE"
    DEFAULT = "DEFAULT"

    @classmethod
    def from_value(cls, value: "str | PermissionTier | None") -> "PermissionTier":
        """Anything other than READ-WRITE falls back to the default tier"""
        if isinstance(value, PermissionTier):
            return value
        if value == cls.READ_WRITE.value:
            return cls.READ_WRITE
        return cls.DEFAULT


@dataclass(frozen=True)
class Identity:
    """X.509 identity stored in a wallet"""
    label: str
    certificate: str
    private_key: str
    msp_id: str
    type: str = IDENTITY_TYPE_X509

    def to_dict(self) -> dict[str, Any]:
        """Convert to the wallet record format"""
        return {
            "credentials": {
                "certificate": self.certificate,
                "privateKey": self.private_key,
            },
            "mspId": self.msp_id,
            "type": self.type,
            "version": 1,
        }

    @classmethod
    def from_dict(cls, label: str, data: dict[str, Any]) -> "Identity":
        """Create Identity from a wallet record"""
        credentials = data["credentials"]
        return cls(
            label=label,
            certificate=credentials["certificate"],
            private_key=credentials["privateKey"],
            msp_id=data["mspId"],
            type=data.get("type", IDENTITY_TYPE_X509),
        )

    def __repr__(self) -> str:
        return f"Identity(label={self.label!r}, msp_id={self.msp_id!r}, type={self.type!r})"


@dataclass(frozen=True)
class Enrollment:
    """Certificate and private key issued by the certificate authority"""
    certificate: str
    private_key: str

    def __repr__(self) -> str:
        return "Enrollment(certificate=<pem>, private_key=<redacted>)"


@dataclass
class RegistrationRequest:
    """Registration of a new user along with the domain record kept on the ledger"""
    username: str
    organization: str
    permission_tier: str | None = None
    name: str = ""
    password: str = field(default="", repr=False)
    role: str = ""

    def to_user_record(self) -> dict[str, str]:
        """User record as stored by the CreateUser chaincode function"""
        return {
            "id": self.username,
            "name": self.name,
            "password": self.password,
            "type": self.role,
            "access": self.permission_tier or "",
        }


@dataclass(frozen=True)
class RegistrationResult:
    """Outcome of ensure_identity"""
    username: str
    organization: str
    message: str
    newly_enrolled: bool = False
    secret: str | None = field(default=None, repr=False)

    @property
    def success(self) -> bool:
        return True


@dataclass(frozen=True)
class TransactionRequest:
    """A single chaincode invocation on behalf of a wallet identity"""
    channel: str
    chaincode: str
    function_name: str
    args: tuple[str, ...]
    username: str
    organization: str
    permission_tier: str | None = None


@dataclass(frozen=True)
class TransactionResult:
    """Normalized result of a submitted transaction"""
    message: str
    result: dict[str, Any]

    @property
    def transaction_id(self) -> str:
        return self.result["transactionId"]

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary"""
        return {"message": self.message, "result": dict(self.result)}
