"""
Certificate utilities for enrolled identities.

Normalises key material returned by the certificate authority into PEM text
and reads the details an operator cares about from an enrollment certificate:
subject, validity window and the Fabric CA attributes embedded in the
certificate extension.
"""

import json
import logging
from typing import Any
from dataclasses import dataclass
from datetime import datetime, timezone

from cryptography import x509
from cryptography.hazmat.primitives import serialization
from cryptography.x509.oid import NameOID, ObjectIdentifier

logger = logging.getLogger(__name__)

# Fabric CA stores registered attributes as JSON under this extension
FABRIC_ATTRS_OID = ObjectIdentifier("1.2.3.4.5.6.7.8.1")


class CertificateFormatError(ValueError):
    """Certificate or key material could not be parsed"""
    pass


def private_key_to_pem(key: Any) -> str:
    """
    Convert private key material to PKCS#8 PEM text.

    Args:
        key: PEM str, PEM bytes, a cryptography private key, or an object
             exposing ``to_bytes()`` / ``toBytes()`` like SDK key wrappers

    Returns:
        PEM encoded private key
    """
    if isinstance(key, str):
        return key
    if isinstance(key, (bytes, bytearray)):
        return bytes(key).decode("utf-8")
    if hasattr(key, "private_bytes"):
        return key.private_bytes(
            encoding=serialization.Encoding.PEM,
            format=serialization.PrivateFormat.PKCS8,
            encryption_algorithm=serialization.NoEncryption(),
        ).decode("utf-8")
    if not isinstance(key, (int, float)):
        for method in ("to_bytes", "toBytes"):
            if hasattr(key, method):
                return private_key_to_pem(getattr(key, method)())
    raise CertificateFormatError(f"Unsupported private key type: {type(key).__name__}")


def certificate_to_pem(certificate: Any) -> str:
    """Convert certificate material to PEM text"""
    if isinstance(certificate, str):
        return certificate
    if isinstance(certificate, (bytes, bytearray)):
        return bytes(certificate).decode("utf-8")
    if isinstance(certificate, x509.Certificate):
        return certificate.public_bytes(serialization.Encoding.PEM).decode("utf-8")
    raise CertificateFormatError(f"Unsupported certificate type: {type(certificate).__name__}")


@dataclass
class CertificateInfo:
    """Details read from an enrollment certificate"""
    subject: str
    common_name: str | None
    issuer: str
    serial_number: str
    valid_from: datetime
    valid_until: datetime
    attributes: dict[str, str]

    def is_expired(self) -> bool:
        """Check if certificate is expired"""
        return datetime.now(timezone.utc) > self.valid_until

    def days_until_expiry(self) -> int:
        """Get number of days until certificate expires"""
        if self.is_expired():
            return 0
        return (self.valid_until - datetime.now(timezone.utc)).days


def read_certificate(pem: str) -> CertificateInfo:
    """Parse a PEM certificate into CertificateInfo"""
    try:
        cert = x509.load_pem_x509_certificate(pem.encode("utf-8"))
    except ValueError as e:
        raise CertificateFormatError(f"Invalid PEM certificate: {e}") from e

    common_names = cert.subject.get_attributes_for_oid(NameOID.COMMON_NAME)

    return CertificateInfo(
        subject=cert.subject.rfc4514_string(),
        common_name=common_names[0].value if common_names else None,
        issuer=cert.issuer.rfc4514_string(),
        serial_number=format(cert.serial_number, "x"),
        valid_from=cert.not_valid_before_utc,
        valid_until=cert.not_valid_after_utc,
        attributes=_read_fabric_attributes(cert),
    )


def _read_fabric_attributes(cert: x509.Certificate) -> dict[str, str]:
    try:
        extension = cert.extensions.get_extension_for_oid(FABRIC_ATTRS_OID)
    except x509.ExtensionNotFound:
        return {}

    try:
        payload = json.loads(extension.value.value)
    except (ValueError, AttributeError) as e:
        logger.warning(f"Unreadable attribute extension in certificate: {e}")
        return {}

    return {str(k): str(v) for k, v in payload.get("attrs", {}).items()}
