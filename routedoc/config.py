"""
Documentation configuration.

Typed settings for document generation and serving, loaded from a dict or
from the environment (``.env`` file values overridden by process variables).
"""

import os
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional

from dotenv import dotenv_values

from .faults import ConfigFault

DEFAULT_BASE_URL = "http://localhost:8000"

_TRUE_VALUES = ("1", "true", "yes", "on")


@dataclass
class DocsConfig:
    """
    Configuration for OpenAPI document generation.

    Passed to ``OpenAPIGenerator`` and ``DocsService``; nothing reads
    process-wide state after construction.
    """
    # Info
    title: str = "Routedoc API"
    version: str = "1.0.0"
    description: str = "Automatically generated documentation"
    openapi_version: str = "3.1.0"

    # Servers
    base_url: str = DEFAULT_BASE_URL
    server_description: str = "Current server"

    # Responses
    response_description: str = "Successful response"

    # Discovery
    controller_packages: List[str] = field(default_factory=list)

    # Behaviour
    debug: bool = False
    strict_schema_names: bool = False

    # Cache
    cache_path: Optional[str] = None
    cache_ttl: Optional[float] = None

    # Serving
    docs_path: str = "/docs"
    openapi_json_path: str = "/openapi.json"

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "DocsConfig":
        """Create config from a dict; unknown and private keys are ignored."""
        known = {f.name for f in fields(cls)}
        config = cls()
        for key, value in data.items():
            if key.startswith("_") or key not in known:
                continue
            setattr(config, key, value)
        return config

    @classmethod
    def from_env(
        cls,
        env_file: Optional[str] = None,
        environ: Optional[Mapping[str, str]] = None,
    ) -> "DocsConfig":
        """
        Load config from a ``.env`` file and the environment.

        Environment variables:
            APP_URL                       server base URL
            APP_ENV                       "dev" enables debug mode
            ROUTEDOC_TITLE / _VERSION / _DESCRIPTION
            ROUTEDOC_CONTROLLERS          comma separated packages
            ROUTEDOC_STRICT_SCHEMA_NAMES  fail on short-name collisions
            ROUTEDOC_CACHE_PATH           file cache location
            ROUTEDOC_CACHE_TTL            cache lifetime in seconds

        Raises:
            ConfigFault: a value cannot be parsed.
        """
        values: Dict[str, Optional[str]] = {}
        if env_file and Path(env_file).exists():
            values.update(dotenv_values(env_file))
        values.update(os.environ if environ is None else environ)

        data: Dict[str, Any] = {
            "base_url": values.get("APP_URL") or DEFAULT_BASE_URL,
            "debug": (values.get("APP_ENV") or "").lower() == "dev",
        }

        for key, attr in (
            ("ROUTEDOC_TITLE", "title"),
            ("ROUTEDOC_VERSION", "version"),
            ("ROUTEDOC_DESCRIPTION", "description"),
            ("ROUTEDOC_CACHE_PATH", "cache_path"),
        ):
            if values.get(key):
                data[attr] = values[key]

        packages = values.get("ROUTEDOC_CONTROLLERS")
        if packages:
            data["controller_packages"] = [p.strip() for p in packages.split(",") if p.strip()]

        strict = values.get("ROUTEDOC_STRICT_SCHEMA_NAMES")
        if strict:
            data["strict_schema_names"] = strict.lower() in _TRUE_VALUES

        ttl = values.get("ROUTEDOC_CACHE_TTL")
        if ttl:
            try:
                data["cache_ttl"] = float(ttl)
            except ValueError as exc:
                raise ConfigFault("ROUTEDOC_CACHE_TTL", ttl, "expected a number of seconds") from exc

        return cls.from_dict(data)

    def to_dict(self) -> Dict[str, Any]:
        return {f.name: getattr(self, f.name) for f in fields(self)}
