"""
Redaction of credentials and personal data before log lines are emitted.

The user_logs table keeps tokens and IP addresses verbatim for the audit
view; log sinks must never see them in clear.
"""
import re
from typing import Callable, List, Tuple, Union

Replacement = Union[str, Callable[[re.Match], str]]


def _mask_email(match: re.Match) -> str:
    local, domain = match.group().split("@", 1)
    return f"{local[0]}***@{domain}"


# Applied in order: bearer headers go before the bare JWT pattern
_RULES: List[Tuple[re.Pattern, Replacement]] = [
    (re.compile(r"[\w.-]+@[\w.-]+\.\w+"), _mask_email),
    (re.compile(r"\b(\d{1,3}\.\d{1,3}\.\d{1,3}\.)\d{1,3}\b"), r"\1***"),
    (re.compile(r"\bbearer\s+[A-Za-z0-9._~+/=-]+", re.IGNORECASE), "Bearer [TOKEN_REDACTED]"),
    (re.compile(r"eyJ[A-Za-z0-9_-]+\.eyJ[A-Za-z0-9_-]+\.[A-Za-z0-9_-]+"), "[JWT_REDACTED]"),
    (re.compile(r"\b[a-fA-F0-9]{32,}\b"), "[API_KEY_REDACTED]"),
    (
        re.compile(r'(password|passwd|pwd|secret)["\']?\s*[:=]\s*["\']?[^"\'&\s]+', re.IGNORECASE),
        r"\1=[REDACTED]",
    ),
]


def redact_pii(message: str) -> str:
    """Mask emails, IPv4 hosts, bearer tokens, JWTs, hex keys and passwords."""
    if not isinstance(message, str):
        return str(message)

    for pattern, replacement in _RULES:
        message = pattern.sub(replacement, message)
    return message
