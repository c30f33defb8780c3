"""Exception taxonomy for MailGuard.

MailGuardError is what callers see: bad input (InvalidEmail, InvalidDomain)
or a failed lookup (NetworkError). ResolveError is the contract between the
reputation client and a pluggable DNS resolver; it never reaches callers.
"""


class MailGuardError(Exception):
    """Base class for errors raised by a detector."""


class InvalidEmail(MailGuardError):
    """Email address failed syntax validation."""

    def __init__(self, email, reason: str = "invalid email format"):
        self.input = email
        self.reason = reason
        super().__init__(f"Invalid email format: {email!r} ({reason})")


class InvalidDomain(MailGuardError):
    """Domain name failed syntax validation."""

    def __init__(self, domain, reason: str = "invalid domain format"):
        self.input = domain
        self.reason = reason
        super().__init__(f"Invalid domain format: {domain!r} ({reason})")


class NetworkError(MailGuardError):
    """Reputation lookup failed with a timeout or transport error."""

    def __init__(self, domain: str, cause: BaseException):
        self.domain = domain
        self.cause = cause
        super().__init__(f"DNS query failed for {domain}: {str(cause) or type(cause).__name__}")


class ResolveError(Exception):
    """Raised by resolver implementations."""


class NameNotFound(ResolveError):
    """The queried name has no A records (NXDOMAIN or empty answer)."""


class ResolveFailure(ResolveError):
    """Timeout, unreachable nameservers, or another transport failure."""
