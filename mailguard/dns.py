"""Async SURBL reputation lookups.

A domain is checked by resolving ``<domain>.<zone>`` for A records:
no record means the domain is not listed, an answer in 127.0.0.0/24
means it is listed and the last octet encodes the threat category.
"""

import asyncio
import ipaddress
import logging
from typing import Optional, Protocol

import dns.asyncresolver
import dns.exception
import dns.resolver

from .config import DEFAULT_LOOKUP_TIMEOUT, DEFAULT_ZONE
from .errors import InvalidDomain, NameNotFound, NetworkError, ResolveFailure
from .models import ClassificationOutcome, ThreatCategory
from .syntax import MAX_DOMAIN_LENGTH
from .threat import classify, most_severe

logger = logging.getLogger("mailguard.dns")

# Answers outside this range are not part of the list's contract
_LISTED_NETWORK = ipaddress.ip_network("127.0.0.0/24")


class Resolver(Protocol):
    """Network-facing collaborator of the reputation client.

    Implementations return the A records for ``fqdn`` as dotted-quad
    strings, raise NameNotFound when the name has none, and raise
    ResolveFailure on timeout or transport errors.
    """

    async def resolve_a_records(self, fqdn: str, timeout: float) -> list[str]:
        ...


class DnsPythonResolver:
    """Resolver backed by dnspython's asyncio resolver.

    The underlying resolver reads the system configuration, so it is built
    on first use rather than at construction.
    """

    def __init__(self, nameservers: Optional[list[str]] = None):
        self._nameservers = nameservers
        self._resolver: Optional[dns.asyncresolver.Resolver] = None

    def _get_resolver(self) -> dns.asyncresolver.Resolver:
        if self._resolver is None:
            if self._nameservers:
                resolver = dns.asyncresolver.Resolver(configure=False)
                resolver.nameservers = list(self._nameservers)
            else:
                resolver = dns.asyncresolver.Resolver()
            self._resolver = resolver
        return self._resolver

    async def resolve_a_records(self, fqdn: str, timeout: float) -> list[str]:
        try:
            resolver = self._get_resolver()
            resolver.timeout = timeout
            resolver.lifetime = timeout
            answer = await resolver.resolve(fqdn, "A", lifetime=timeout)
        except (dns.resolver.NXDOMAIN, dns.resolver.NoAnswer) as e:
            raise NameNotFound(fqdn) from e
        except dns.exception.DNSException as e:
            raise ResolveFailure(f"{fqdn}: {e}") from e
        return [rdata.to_text() for rdata in answer]


class ReputationClient:
    """Looks up a validated domain on the reputation list and classifies it."""

    def __init__(
        self,
        resolver: Optional[Resolver] = None,
        timeout: float = DEFAULT_LOOKUP_TIMEOUT,
        zone: str = DEFAULT_ZONE,
    ):
        self.resolver = resolver if resolver is not None else DnsPythonResolver()
        self.timeout = timeout
        self.zone = zone.strip(".")

    def query_name(self, domain: str) -> str:
        """Query format: domain.tempmail.so.multi.surbl.org"""
        return f"{domain}.{self.zone}"

    async def lookup(self, domain: str) -> ClassificationOutcome:
        """Query the list for ``domain``.

        A missing record is a clean result, not an error. Timeouts and
        transport failures raise NetworkError; nothing is retried here.
        A domain too long to fit under the zone raises InvalidDomain.
        """
        query = self.query_name(domain)
        if len(query) > MAX_DOMAIN_LENGTH:
            raise InvalidDomain(
                domain,
                f"query name under {self.zone} exceeds {MAX_DOMAIN_LENGTH} characters",
            )
        logger.debug(f"Querying SURBL: {query}")

        try:
            addresses = await asyncio.wait_for(
                self.resolver.resolve_a_records(query, self.timeout),
                timeout=self.timeout,
            )
        except NameNotFound:
            logger.debug(f"Domain {domain} not listed")
            return ClassificationOutcome.clean()
        except (ResolveFailure, asyncio.TimeoutError) as e:
            logger.warning(f"DNS query failed: {query} - {str(e) or type(e).__name__}")
            raise NetworkError(domain, e) from e

        return self._interpret(domain, addresses)

    def _interpret(self, domain: str, addresses: list[str]) -> ClassificationOutcome:
        categories: list[ThreatCategory] = []
        for address in addresses:
            try:
                ip = ipaddress.ip_address(address)
            except ValueError:
                logger.warning(f"Ignoring malformed answer for {domain}: {address!r}")
                continue
            if ip.version != 4 or ip not in _LISTED_NETWORK:
                logger.warning(f"Ignoring out-of-range answer for {domain}: {ip}")
                continue
            categories.append(classify(int(ip) & 0xFF))

        category = most_severe(categories)
        if category is None:
            logger.warning(f"No usable answer for {domain}, treating as not listed")
            return ClassificationOutcome.clean()

        logger.info(f"Detected threat domain: {domain} -> {category}")
        return ClassificationOutcome.listed(category)
