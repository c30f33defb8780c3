"""Data models for the MailGuard detection engine."""

from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, model_validator


class ThreatKind(str, Enum):
    """Threat categories published by the reputation list."""
    spam = "spam"
    phishing = "phishing"
    malware = "malware"
    botnet = "botnet"
    pup = "pup"
    unknown = "unknown"


# Severity reported for response codes the list has not documented.
UNKNOWN_SEVERITY = 0

_DESCRIPTIONS = {
    ThreatKind.spam: "Spam Source",
    ThreatKind.phishing: "Phishing Website",
    ThreatKind.malware: "Malware",
    ThreatKind.botnet: "Botnet",
    ThreatKind.pup: "Potentially Unwanted Program",
    ThreatKind.unknown: "Unknown Threat Type",
}

# 1-5, higher is worse
_SEVERITIES = {
    ThreatKind.spam: 2,
    ThreatKind.phishing: 4,
    ThreatKind.malware: 5,
    ThreatKind.botnet: 4,
    ThreatKind.pup: 1,
    ThreatKind.unknown: UNKNOWN_SEVERITY,
}


class ThreatCategory(BaseModel):
    """A classified listing.

    ``code`` is only carried by the unknown kind, where it keeps the raw
    response code so callers can still act on list additions.
    """
    model_config = ConfigDict(frozen=True)

    kind: ThreatKind
    code: Optional[int] = None

    @model_validator(mode="after")
    def _code_only_for_unknown(self) -> "ThreatCategory":
        if self.kind == ThreatKind.unknown and self.code is None:
            raise ValueError("unknown threat category requires a response code")
        if self.kind != ThreatKind.unknown and self.code is not None:
            raise ValueError(f"{self.kind.value} threat category does not carry a code")
        return self

    @classmethod
    def spam(cls) -> "ThreatCategory":
        return cls(kind=ThreatKind.spam)

    @classmethod
    def phishing(cls) -> "ThreatCategory":
        return cls(kind=ThreatKind.phishing)

    @classmethod
    def malware(cls) -> "ThreatCategory":
        return cls(kind=ThreatKind.malware)

    @classmethod
    def botnet(cls) -> "ThreatCategory":
        return cls(kind=ThreatKind.botnet)

    @classmethod
    def pup(cls) -> "ThreatCategory":
        return cls(kind=ThreatKind.pup)

    @classmethod
    def unknown(cls, code: int) -> "ThreatCategory":
        return cls(kind=ThreatKind.unknown, code=code)

    @property
    def description(self) -> str:
        return _DESCRIPTIONS[self.kind]

    @property
    def severity(self) -> int:
        return _SEVERITIES[self.kind]

    def __str__(self) -> str:
        if self.kind == ThreatKind.unknown:
            return f"{self.description} ({self.code})"
        return self.description


class ClassificationOutcome(BaseModel):
    """Result of one reputation lookup. A category is present iff listed."""
    model_config = ConfigDict(frozen=True)

    is_threat: bool = False
    category: Optional[ThreatCategory] = None

    @model_validator(mode="after")
    def _threat_matches_category(self) -> "ClassificationOutcome":
        if self.is_threat != (self.category is not None):
            raise ValueError("is_threat must be true exactly when a category is set")
        return self

    @classmethod
    def clean(cls) -> "ClassificationOutcome":
        return cls(is_threat=False, category=None)

    @classmethod
    def listed(cls, category: ThreatCategory) -> "ClassificationOutcome":
        return cls(is_threat=True, category=category)


class DomainStatus(BaseModel):
    """Detection status for a domain."""
    domain: str
    is_threat: bool = False
    category: Optional[ThreatCategory] = None
    from_cache: bool = False


class EmailStatus(BaseModel):
    """Detection status for an email address.

    ``email`` is the address as given; ``domain`` is the lower-cased part
    after the last ``@``.
    """
    email: str
    domain: str
    is_threat: bool = False
    category: Optional[ThreatCategory] = None
    from_cache: bool = False
