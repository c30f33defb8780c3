"""Detector configuration.

Defaults can be overridden from the environment (MAILGUARD_* variables);
a config object is immutable once built.
"""

import os
from typing import Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field

DEFAULT_ZONE = "tempmail.so.multi.surbl.org"
DEFAULT_LOOKUP_TIMEOUT = 5.0
DEFAULT_CACHE_TTL = 300.0  # 5 minutes
DEFAULT_CACHE_CAPACITY = 10_000
DEFAULT_BATCH_CONCURRENCY = 10

_ENV_PREFIX = "MAILGUARD_"


class MailGuardConfig(BaseModel):
    """Process-wide detector settings. Durations are in seconds."""
    model_config = ConfigDict(frozen=True)

    lookup_timeout: float = Field(default=DEFAULT_LOOKUP_TIMEOUT, gt=0)
    cache_enabled: bool = True
    cache_ttl: float = Field(default=DEFAULT_CACHE_TTL, gt=0)
    cache_capacity: int = Field(default=DEFAULT_CACHE_CAPACITY, ge=1)
    batch_concurrency: int = Field(default=DEFAULT_BATCH_CONCURRENCY, ge=1)
    zone: str = Field(default=DEFAULT_ZONE, min_length=1)

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None, **overrides) -> "MailGuardConfig":
        """Build a config from MAILGUARD_* variables.

        Unset variables keep their defaults; keyword overrides win over the
        environment. Bad values raise pydantic.ValidationError.
        """
        environ = os.environ if environ is None else environ
        values = {}
        for name in cls.model_fields:
            raw = environ.get(_ENV_PREFIX + name.upper())
            if raw is not None and raw.strip() != "":
                values[name] = raw.strip()
        values.update({k: v for k, v in overrides.items() if v is not None})
        return cls.model_validate(values)
