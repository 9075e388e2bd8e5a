"""
Routedoc faults.

Every failure that leaves the generator is a ``Fault``: a typed exception
carrying a stable code, the functional domain it came from, a severity and
structured metadata for logs. Domains decide the default severity and
whether retrying can help.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Dict, Optional


class Severity(str, Enum):
    """How bad a fault is; mapped onto log levels by callers."""
    INFO = "info"
    WARN = "warn"
    ERROR = "error"
    FATAL = "fatal"


class FaultDomain(str, Enum):
    """Functional area a fault belongs to."""
    CONFIG = "config"
    DISCOVERY = "discovery"
    SCHEMA = "schema"
    CACHE = "cache"

    @property
    def default_severity(self) -> Severity:
        return _DOMAIN_SEVERITY[self]

    @property
    def retryable(self) -> bool:
        # a cache can recover on the next request, the rest cannot
        return self is FaultDomain.CACHE


_DOMAIN_SEVERITY: Dict[FaultDomain, Severity] = {
    FaultDomain.CONFIG: Severity.FATAL,
    FaultDomain.DISCOVERY: Severity.FATAL,
    FaultDomain.SCHEMA: Severity.ERROR,
    FaultDomain.CACHE: Severity.WARN,
}


class Fault(Exception):
    """
    Structured routedoc error.

    Args:
        code: Machine-readable identifier, e.g. "CONTROLLER_IMPORT_FAILED"
        message: Human-readable summary
        domain: Where the fault occurred
        severity: Overrides the domain's default severity
        metadata: Extra context, included in ``to_dict()``
    """

    def __init__(
        self,
        code: str,
        message: str,
        *,
        domain: FaultDomain,
        severity: Optional[Severity] = None,
        metadata: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message)
        self.code = code
        self.message = message
        self.domain = domain
        self.severity = severity or domain.default_severity
        self.metadata = dict(metadata or {})

    @property
    def retryable(self) -> bool:
        return self.domain.retryable

    def __str__(self) -> str:
        return f"[{self.code}] {self.message}"

    def __repr__(self) -> str:
        return f"{type(self).__name__}(code={self.code!r}, domain={self.domain.value!r})"

    def to_dict(self) -> Dict[str, Any]:
        """Plain-dict form for JSON error bodies and structured logs."""
        return {
            "code": self.code,
            "message": self.message,
            "domain": self.domain.value,
            "severity": self.severity.value,
            "retryable": self.retryable,
            "metadata": self.metadata,
        }


# ============================================================================
# Config
# ============================================================================

class ConfigFault(Fault):
    """Invalid configuration value."""

    def __init__(self, key: str, value: Any, reason: str):
        super().__init__(
            code="INVALID_CONFIG",
            message=f"Invalid value {value!r} for '{key}': {reason}",
            domain=FaultDomain.CONFIG,
            metadata={"key": key, "value": value, "reason": reason},
        )


# ============================================================================
# Discovery
# ============================================================================

class DiscoveryFault(Fault):
    """A package or module could not be scanned for controllers."""

    def __init__(self, target: str, reason: str):
        super().__init__(
            code="DISCOVERY_FAILED",
            message=f"Cannot scan '{target}': {reason}",
            domain=FaultDomain.DISCOVERY,
            metadata={"target": target, "reason": reason},
        )


class ControllerImportFault(Fault):
    """A controller identifier does not resolve to a loadable class."""

    def __init__(self, identifier: str, reason: str):
        super().__init__(
            code="CONTROLLER_IMPORT_FAILED",
            message=f"Cannot load controller '{identifier}': {reason}",
            domain=FaultDomain.DISCOVERY,
            metadata={"identifier": identifier, "reason": reason},
        )


# ============================================================================
# Schema
# ============================================================================

class SchemaNameConflictFault(Fault):
    """Two distinct types share the short name used as schema key."""

    def __init__(self, name: str, registered: str, conflicting: str):
        super().__init__(
            code="SCHEMA_NAME_CONFLICT",
            message=(
                f"Schema name '{name}' is already taken by '{registered}', "
                f"cannot register '{conflicting}'"
            ),
            domain=FaultDomain.SCHEMA,
            metadata={"name": name, "registered": registered, "conflicting": conflicting},
        )


# ============================================================================
# Cache
# ============================================================================

class CacheReadFault(Fault):
    """Stored document could not be read back."""

    def __init__(self, location: str, reason: str):
        super().__init__(
            code="CACHE_READ_FAILED",
            message=f"Cannot read cached document from '{location}': {reason}",
            domain=FaultDomain.CACHE,
            metadata={"location": location, "reason": reason},
        )


class CacheWriteFault(Fault):
    """Document could not be written to the cache."""

    def __init__(self, location: str, reason: str):
        super().__init__(
            code="CACHE_WRITE_FAILED",
            message=f"Cannot write cached document to '{location}': {reason}",
            domain=FaultDomain.CACHE,
            severity=Severity.ERROR,
            metadata={"location": location, "reason": reason},
        )
