"""Email and domain syntax validation (simplified RFC 5322 / RFC 1035).

Runs before any network call so malformed input never reaches the resolver.
"""

import re

from .errors import InvalidDomain, InvalidEmail

# Valid local-part characters (no quoted strings, no leading/trailing dot)
_LOCAL_PART_RE = re.compile(
    r"^[a-zA-Z0-9!#$%&'*+\-/=?^_`{|}~]"
    r"(?:[a-zA-Z0-9!#$%&'*+\-/=?^_`{|}~.]*[a-zA-Z0-9!#$%&'*+\-/=?^_`{|}~])?$"
)

# Domain label: 1-63 alphanumerics and hyphens, no leading/trailing hyphen
_DOMAIN_LABEL_RE = re.compile(r"^[a-zA-Z0-9](?:[a-zA-Z0-9-]{0,61}[a-zA-Z0-9])?$")

MAX_DOMAIN_LENGTH = 253
MAX_LABEL_LENGTH = 63
MAX_LOCAL_PART_LENGTH = 64


def _domain_error(domain: str):
    """Return the reason a domain is malformed, or None if it is fine."""
    if not domain:
        return "empty domain"
    if len(domain) > MAX_DOMAIN_LENGTH:
        return f"domain exceeds {MAX_DOMAIN_LENGTH} characters"
    if domain.startswith(".") or domain.endswith("."):
        return "leading or trailing dot in domain"

    for label in domain.split("."):
        if not label:
            return "empty domain label"
        if len(label) > MAX_LABEL_LENGTH:
            return f"domain label exceeds {MAX_LABEL_LENGTH} characters"
        if not _DOMAIN_LABEL_RE.fullmatch(label):
            return f"invalid domain label: {label}"
    return None


def validate_domain(domain: str) -> str:
    """Validate a domain name and return it lower-cased.

    Raises InvalidDomain with the original input on failure.
    """
    if not isinstance(domain, str):
        raise InvalidDomain(domain, "domain must be a string")

    reason = _domain_error(domain)
    if reason:
        raise InvalidDomain(domain, reason)
    return domain.lower()


def validate_email(email: str) -> tuple[str, str]:
    """Validate an email address.

    Returns (local_part, domain) with the domain lower-cased. Raises
    InvalidEmail with the original input on failure.
    """
    if not isinstance(email, str):
        raise InvalidEmail(email, "email must be a string")
    if not email:
        raise InvalidEmail(email, "empty email")

    # Must have exactly one @
    if email.count("@") != 1:
        raise InvalidEmail(email, "must contain exactly one @")

    local_part, domain = email.rsplit("@", 1)

    if not local_part:
        raise InvalidEmail(email, "empty local part")
    if len(local_part) > MAX_LOCAL_PART_LENGTH:
        raise InvalidEmail(email, f"local part exceeds {MAX_LOCAL_PART_LENGTH} characters")
    if ".." in local_part:
        raise InvalidEmail(email, "consecutive dots in local part")
    if not _LOCAL_PART_RE.fullmatch(local_part):
        raise InvalidEmail(email, "invalid characters in local part")

    reason = _domain_error(domain)
    if reason:
        raise InvalidEmail(email, reason)

    return local_part, domain.lower()
