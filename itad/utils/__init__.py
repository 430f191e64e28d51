"""ITAD utility modules."""

from .resilience import (
    CircuitBreaker,
    CircuitState,
    CircuitOpenError,
    retry_with_backoff,
    VerificationAuditEntry,
    VerificationAuditLog,
    audit_entry,
    sanitize_address_input,
)

__all__ = [
    "CircuitBreaker",
    "CircuitState",
    "CircuitOpenError",
    "retry_with_backoff",
    "VerificationAuditEntry",
    "VerificationAuditLog",
    "audit_entry",
    "sanitize_address_input",
]
