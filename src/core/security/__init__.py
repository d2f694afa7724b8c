"""
Security helpers for log output.

Keeps tokens, keys and passwords that show up in exception text
out of diagnostic records.
"""

from core.security.sanitization import REDACTED, sanitize_error_message

__all__ = [
    "REDACTED",
    "sanitize_error_message",
]
