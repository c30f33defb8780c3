"""MailGuard: temporary email and malicious domain detection over SURBL DNS queries."""

from .cache import NullCache, ResultCache, TTLLRUCache, build_cache
from .config import MailGuardConfig
from .detector import (
    MailGuard,
    check_domain,
    check_domains_batch,
    check_email,
    check_emails_batch,
)
from .dns import DnsPythonResolver, ReputationClient, Resolver
from .errors import (
    InvalidDomain,
    InvalidEmail,
    MailGuardError,
    NameNotFound,
    NetworkError,
    ResolveError,
    ResolveFailure,
)
from .models import (
    ClassificationOutcome,
    DomainStatus,
    EmailStatus,
    ThreatCategory,
    ThreatKind,
)
from .syntax import validate_domain, validate_email
from .threat import classify, most_severe

__version__ = "0.1.0"

__all__ = [
    "ClassificationOutcome",
    "DnsPythonResolver",
    "DomainStatus",
    "EmailStatus",
    "InvalidDomain",
    "InvalidEmail",
    "MailGuard",
    "MailGuardConfig",
    "MailGuardError",
    "NameNotFound",
    "NetworkError",
    "NullCache",
    "ReputationClient",
    "ResolveError",
    "ResolveFailure",
    "Resolver",
    "ResultCache",
    "ThreatCategory",
    "ThreatKind",
    "TTLLRUCache",
    "build_cache",
    "check_domain",
    "check_domains_batch",
    "check_email",
    "check_emails_batch",
    "classify",
    "most_severe",
    "validate_domain",
    "validate_email",
]
