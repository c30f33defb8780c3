"""Main detection orchestrator.

Pipeline: syntax -> cache -> SURBL lookup -> classify -> cache -> status
"""

import asyncio
import logging
import threading
import weakref
from typing import Iterable, Optional, Union

from .cache import ResultCache, build_cache
from .config import MailGuardConfig
from .dns import ReputationClient, Resolver
from .errors import MailGuardError
from .models import DomainStatus, EmailStatus
from .syntax import validate_domain, validate_email

logger = logging.getLogger("mailguard.detector")

BatchResult = Union[EmailStatus, DomainStatus, MailGuardError]


class MailGuard:
    """Temporary-email and malicious-domain detector.

    Each instance owns its cache; two detectors never share results.

    Args:
        config: Detector settings. Defaults to MailGuardConfig().
        resolver: DNS collaborator. Defaults to a dnspython resolver.
        cache: Result cache. Defaults to the one selected by ``config``.
    """

    def __init__(
        self,
        config: Optional[MailGuardConfig] = None,
        resolver: Optional[Resolver] = None,
        cache: Optional[ResultCache] = None,
    ):
        self.config = config if config is not None else MailGuardConfig()
        self.client = ReputationClient(
            resolver=resolver,
            timeout=self.config.lookup_timeout,
            zone=self.config.zone,
        )
        self.cache = cache if cache is not None else build_cache(self.config)
        # Coalesces concurrent lookups of one domain within one event loop;
        # a lock lives only while some check is holding it.
        self._domain_locks: "weakref.WeakValueDictionary[tuple, asyncio.Lock]" = (
            weakref.WeakValueDictionary()
        )
        self._domain_locks_guard = threading.Lock()

    def _domain_lock(self, domain: str) -> asyncio.Lock:
        # asyncio locks are bound to one loop, so threads running their own
        # loops get separate locks and rely on the cache lock instead
        key = (asyncio.get_running_loop(), domain)
        with self._domain_locks_guard:
            lock = self._domain_locks.get(key)
            if lock is None:
                lock = asyncio.Lock()
                self._domain_locks[key] = lock
            return lock

    async def check_email(self, email: str) -> EmailStatus:
        """Check a single email address.

        Raises InvalidEmail for malformed input, InvalidDomain when the
        domain is too long to query, and NetworkError when the lookup fails.
        """
        _, domain = validate_email(email)
        status = await self._check_validated_domain(domain)
        return EmailStatus(
            email=email,
            domain=status.domain,
            is_threat=status.is_threat,
            category=status.category,
            from_cache=status.from_cache,
        )

    async def check_domain(self, domain: str) -> DomainStatus:
        """Check a domain name.

        Raises InvalidDomain for malformed input and NetworkError when the
        lookup fails.
        """
        return await self._check_validated_domain(validate_domain(domain))

    async def _check_validated_domain(self, domain: str) -> DomainStatus:
        async with self._domain_lock(domain):
            cached = self.cache.get(domain)
            if cached is not None:
                logger.debug(f"Cache hit for {domain}")
                return DomainStatus(
                    domain=domain,
                    is_threat=cached.is_threat,
                    category=cached.category,
                    from_cache=True,
                )

            # Errors propagate and are never cached
            outcome = await self.client.lookup(domain)
            self.cache.put(domain, outcome)

        return DomainStatus(
            domain=domain,
            is_threat=outcome.is_threat,
            category=outcome.category,
            from_cache=False,
        )

    async def check_many(self, items: Iterable[str], kind: str = "email") -> list[BatchResult]:
        """Check a batch of emails (``kind="email"``) or domains (``kind="domain"``).

        Items run concurrently, bounded by ``config.batch_concurrency``.
        Returns one entry per input in input order: the status, or the
        MailGuardError raised for that item. A failing item never aborts
        the batch.
        """
        if kind == "email":
            check = self.check_email
        elif kind == "domain":
            check = self.check_domain
        else:
            raise ValueError(f"kind must be 'email' or 'domain', got {kind!r}")

        semaphore = asyncio.Semaphore(self.config.batch_concurrency)

        async def _check_with_limit(item: str) -> BatchResult:
            async with semaphore:
                try:
                    return await check(item)
                except MailGuardError as e:
                    logger.debug(f"Check failed for {item!r}: {e}")
                    return e

        return list(await asyncio.gather(*[_check_with_limit(item) for item in items]))

    async def check_emails_batch(self, emails: Iterable[str]) -> list[Union[EmailStatus, MailGuardError]]:
        """Batch check emails; see check_many."""
        return await self.check_many(emails, kind="email")

    async def check_domains_batch(self, domains: Iterable[str]) -> list[Union[DomainStatus, MailGuardError]]:
        """Batch check domains; see check_many."""
        return await self.check_many(domains, kind="domain")

    def cache_stats(self) -> Optional[int]:
        """Number of cached entries, or None when caching is disabled."""
        return self.cache.stats()

    def cleanup_cache(self) -> int:
        """Remove expired cache entries. Returns count removed."""
        return self.cache.clear_expired()

    def clear_cache(self) -> None:
        self.cache.clear()


async def check_email(email: str) -> EmailStatus:
    """Check a single email address with a default detector."""
    return await MailGuard().check_email(email)


async def check_domain(domain: str) -> DomainStatus:
    """Check a domain with a default detector."""
    return await MailGuard().check_domain(domain)


async def check_emails_batch(emails: Iterable[str]) -> list[Union[EmailStatus, MailGuardError]]:
    """Batch check emails with a default detector (shared across the batch)."""
    return await MailGuard().check_emails_batch(emails)


async def check_domains_batch(domains: Iterable[str]) -> list[Union[DomainStatus, MailGuardError]]:
    """Batch check domains with a default detector (shared across the batch)."""
    return await MailGuard().check_domains_batch(domains)
