"""Response-code classification for SURBL-style answers.

A listed name resolves to 127.0.0.x; the last octet encodes the category.
"""

from typing import Iterable, Optional

from .models import ThreatCategory, ThreatKind

_CODE_TABLE: dict[int, ThreatKind] = {
    2: ThreatKind.spam,
    9: ThreatKind.spam,
    3: ThreatKind.phishing,
    4: ThreatKind.malware,
    6: ThreatKind.malware,
    7: ThreatKind.malware,
    11: ThreatKind.malware,
    5: ThreatKind.botnet,
    10: ThreatKind.pup,
}

# Tie-break order for equal severities
_KIND_ORDER = [
    ThreatKind.spam,
    ThreatKind.phishing,
    ThreatKind.malware,
    ThreatKind.botnet,
    ThreatKind.pup,
    ThreatKind.unknown,
]


def classify(code: int) -> ThreatCategory:
    """Map a response code (last octet of the answer) to its category.

    Total: codes missing from the table come back as unknown with the code
    preserved.
    """
    kind = _CODE_TABLE.get(code)
    if kind is None:
        return ThreatCategory.unknown(code)
    return ThreatCategory(kind=kind)


def most_severe(categories: Iterable[ThreatCategory]) -> Optional[ThreatCategory]:
    """Pick the worst category among several answers for one query.

    Highest severity wins; ties go to the category listed first in the code
    table, then to the earliest answer.
    """
    best: Optional[ThreatCategory] = None
    for category in categories:
        if best is None or _rank(category) < _rank(best):
            best = category
    return best


def _rank(category: ThreatCategory) -> tuple[int, int]:
    return (-category.severity, _KIND_ORDER.index(category.kind))
