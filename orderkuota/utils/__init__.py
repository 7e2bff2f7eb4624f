"""Utilities module - Logging, secret masking, resilience, money parsing."""

from .pii import mask_pii, mask_secrets, mask_email, redact_for_logging
from .logging import get_logger, AuditLogger
from .resilience import with_retry, RateLimiter, RetryError, RateLimitExceeded
from .money import parse_rupiah, format_rupiah

__all__ = [
    "mask_pii",
    "mask_secrets",
    "mask_email",
    "redact_for_logging",
    "get_logger",
    "AuditLogger",
    "with_retry",
    "RateLimiter",
    "RetryError",
    "RateLimitExceeded",
    "parse_rupiah",
    "format_rupiah",
]
