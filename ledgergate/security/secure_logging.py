"""
Secure Logging Utilities for LedgerGate

This module provides secure logging functions that prevent log injection attacks
by sanitizing user input before logging, redact credential material such as
enrollment secrets and private keys, and emit structured JSON entries.
"""

import logging
import json
from typing import Any
from datetime import datetime, timezone


# Characters that can be used for log injection
LOG_INJECTION_CHARS = {
    "\n": "\\n",
    "\r": "\\r",
    "\x00": "\\x00",
    "\x1b": "\\x1b",  # ANSI escape
    "\t": "\\t",
}

# Field names whose values never reach the log
SENSITIVE_KEYS = {"secret", "enrollmentsecret", "password", "privatekey", "private_key", "key"}

REDACTED = "[redacted]"


def _is_sensitive(name: str) -> bool:
    return name.replace("-", "").lower() in SENSITIVE_KEYS


def sanitize_for_log(value: Any) -> str:
    """
    Sanitize a value before logging to prevent log injection.

    Args:
        value: Value to sanitize (string, dict, list, or other)

    Returns:
        Safe string representation
    """
    if value is None:
        return "null"

    if isinstance(value, (int, float, bool)):
        return str(value)

    if isinstance(value, str):
        if "PRIVATE KEY-----" in value:
            return REDACTED
        result = value
        for char, replacement in LOG_INJECTION_CHARS.items():
            result = result.replace(char, replacement)
        if len(result) > 500:
            result = result[:500] + "...[truncated]"
        return result

    if isinstance(value, dict):
        return json.dumps(
            {k: REDACTED if _is_sensitive(str(k)) else sanitize_for_log(v) for k, v in value.items()},
            ensure_ascii=True
        )

    if isinstance(value, (list, tuple)):
        return json.dumps([sanitize_for_log(item) for item in value])

    return sanitize_for_log(str(value))


class SecureLogger:
    """
    Secure logger wrapper that automatically sanitizes user input in log messages.
    Uses structured logging format for better security and parseability.
    """

    def __init__(self, name: str):
        self.logger = logging.getLogger(name)
        self.name = name

    def _format_structured(self, level: str, message: str, **kwargs: Any) -> str:
        """Create a structured log entry in JSON format."""
        log_entry = {
            "timestamp": datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
            "level": level,
            "logger": self.name,
            "message": sanitize_for_log(message),
        }

        if kwargs:
            log_entry["data"] = {
                k: REDACTED if _is_sensitive(k) else sanitize_for_log(v) for k, v in kwargs.items()
            }

        return json.dumps(log_entry, ensure_ascii=True)

    def info(self, message: str, **kwargs: Any):
        """Log info with sanitized data."""
        if self.logger.isEnabledFor(logging.INFO):
            self.logger.info(self._format_structured("INFO", message, **kwargs))

    def warning(self, message: str, **kwargs: Any):
        """Log warning with sanitized data."""
        if self.logger.isEnabledFor(logging.WARNING):
            self.logger.warning(self._format_structured("WARNING", message, **kwargs))

    def error(self, message: str, **kwargs: Any):
        """Log error with sanitized data."""
        if self.logger.isEnabledFor(logging.ERROR):
            self.logger.error(self._format_structured("ERROR", message, **kwargs))

    def debug(self, message: str, **kwargs: Any):
        """Log debug with sanitized data."""
        if self.logger.isEnabledFor(logging.DEBUG):
            self.logger.debug(self._format_structured("DEBUG", message, **kwargs))

    def audit(
        self,
        action: str,
        resource: str,
        user_id: str = None,
        org_id: str = None,
        success: bool = True,
        **kwargs: Any
    ):
        """
        Log an audit event for compliance and tracking.

        Args:
            action: Action performed (e.g., "register", "enroll", "submit")
            resource: Resource affected (e.g., "identity", "transaction")
            user_id: Optional user identifier
            org_id: Optional organization identifier
            success: Whether the action was successful
            **kwargs: Additional context
        """
        log_entry = {
            "timestamp": datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
            "type": "audit",
            "action": sanitize_for_log(action),
            "resource": sanitize_for_log(resource),
            "success": success,
            "logger": self.name,
        }

        if user_id:
            log_entry["user_id"] = sanitize_for_log(user_id)
        if org_id:
            log_entry["org_id"] = sanitize_for_log(org_id)

        if kwargs:
            log_entry["details"] = {
                k: REDACTED if _is_sensitive(k) else sanitize_for_log(v) for k, v in kwargs.items()
            }

        level = logging.INFO if success else logging.WARNING
        self.logger.log(level, json.dumps(log_entry, ensure_ascii=True))


def get_identity_logger() -> SecureLogger:
    """Get secure logger for identity lifecycle events."""
    return SecureLogger("ledgergate.identity")


def get_audit_logger() -> SecureLogger:
    """Get secure logger for audit events."""
    return SecureLogger("ledgergate.audit")
