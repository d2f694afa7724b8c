"""
Redaction of secrets in exception text.

Broker and endpoint errors routinely echo the connection URL or request
they failed on. Credentials embedded there are replaced with [REDACTED]
before the text reaches a log record.
"""

import re

REDACTED = "[REDACTED]"
MAX_MESSAGE_LENGTH = 500

# user:password@ in amqp://, jms://, https:// ... endpoint URIs
_URI_CREDENTIALS = re.compile(r"(\b[a-z][a-z0-9+.\-]*://)[^/\s:@]+:[^/\s@]+@", re.IGNORECASE)

# key=value / key: value pairs in query strings, headers and property dumps
_SECRET_KEYS = (
    "access_token|api[_-]?key|auth|authorization|passwd|password|pwd"
    "|secret|sig|signature|token"
)
_SECRET_PAIR = re.compile(rf"\b({_SECRET_KEYS})(\s*[=:]\s*)[^\s&\"',;]+", re.IGNORECASE)

_BEARER = re.compile(r"\b(bearer)\s+[\w\-.~+/]+=*", re.IGNORECASE)


def sanitize_error_message(msg: str, max_length: int = MAX_MESSAGE_LENGTH) -> str:
    """
    Redact credentials in an error message and cap its length.

    Args:
        msg: Exception text
        max_length: Longest message returned; longer ones end in "..."

    Returns:
        Message safe to log
    """
    if not msg:
        return msg

    msg = _URI_CREDENTIALS.sub(lambda m: f"{m.group(1)}{REDACTED}@", msg)
    # Bearer first: "Authorization: Bearer x" would otherwise only lose "Bearer"
    msg = _BEARER.sub(lambda m: f"{m.group(1)} {REDACTED}", msg)
    msg = _SECRET_PAIR.sub(lambda m: f"{m.group(1)}{m.group(2)}{REDACTED}", msg)

    if len(msg) > max_length:
        msg = msg[: max_length - 3] + "..."

    return msg
