"""
Runtime configuration.

All settings come from environment variables (a .env file is loaded by the
app factory before this module reads anything). Tests and embedders pass
overrides to create_app(), keyed by field name.
"""

import os
from dataclasses import dataclass, fields
from typing import Any, Dict, Optional

from .providers.autocomplete import DEFAULT_ENDPOINT


PROVIDER_BROWSER = "browser"
PROVIDER_RELAY = "relay"


def _env_bool(name: str, default: str = 'false') -> bool:
    return os.environ.get(name, default).lower() in ('true', '1', 'yes', 'on')


def _env_int(name: str, default: int) -> int:
    value = os.environ.get(name)
    try:
        return int(value) if value else default
    except ValueError:
        return default


def _env_float(name: str, default: float) -> float:
    value = os.environ.get(name)
    try:
        return float(value) if value else default
    except ValueError:
        return default


@dataclass
class SpotlightConfig:
    debounce_ms: int = 150
    cache_ttl: float = 30
    max_results: int = 8
    autocomplete_url: str = DEFAULT_ENDPOINT
    autocomplete_timeout: float = 3.0
    collection_folder: str = "Arcify"
    history_days: int = 7
    history_max_results: int = 10
    provider: str = PROVIDER_BROWSER
    relay_url: Optional[str] = None
    profile_path: Optional[str] = None
    storage_path: Optional[str] = None
    redis_url: Optional[str] = None
    request_timeout: float = 5.0
    host: str = '127.0.0.1'
    port: int = 5000
    debug: bool = False

    @property
    def debounce_delay(self) -> float:
        """Debounce quiet period in seconds."""
        return self.debounce_ms / 1000

    @classmethod
    def from_env(cls, overrides: Optional[Dict[str, Any]] = None) -> 'SpotlightConfig':
        """
        Build configuration from the environment.

        Args:
            overrides: Field values that win over the environment

        Raises:
            ValueError: on unknown override keys or an unknown provider
        """
        config = cls(
            debounce_ms=_env_int('SPOTLIGHT_DEBOUNCE_MS', 150),
            cache_ttl=_env_float('SPOTLIGHT_CACHE_TTL', 30),
            max_results=_env_int('SPOTLIGHT_MAX_RESULTS', 8),
            autocomplete_url=os.environ.get('SPOTLIGHT_AUTOCOMPLETE_URL') or DEFAULT_ENDPOINT,
            autocomplete_timeout=_env_float('SPOTLIGHT_AUTOCOMPLETE_TIMEOUT', 3.0),
            collection_folder=os.environ.get('SPOTLIGHT_COLLECTION_FOLDER') or "Arcify",
            history_days=_env_int('SPOTLIGHT_HISTORY_DAYS', 7),
            history_max_results=_env_int('SPOTLIGHT_HISTORY_MAX', 10),
            provider=(os.environ.get('SPOTLIGHT_PROVIDER') or PROVIDER_BROWSER).lower(),
            relay_url=os.environ.get('SPOTLIGHT_RELAY_URL') or None,
            profile_path=os.environ.get('SPOTLIGHT_PROFILE') or None,
            storage_path=os.environ.get('SPOTLIGHT_STORAGE_PATH') or None,
            redis_url=os.environ.get('REDIS_URL') or None,
            request_timeout=_env_float('SPOTLIGHT_REQUEST_TIMEOUT', 5.0),
            host=os.environ.get('FLASK_HOST', '127.0.0.1'),
            port=_env_int('FLASK_PORT', 5000),
            debug=_env_bool('FLASK_DEBUG'),
        )

        if overrides:
            known = {f.name for f in fields(cls)}
            unknown = set(overrides) - known
            if unknown:
                raise ValueError(f"Unknown config keys: {', '.join(sorted(unknown))}")
            for key, value in overrides.items():
                setattr(config, key, value)

        if config.provider not in (PROVIDER_BROWSER, PROVIDER_RELAY):
            raise ValueError(f"Unknown provider: {config.provider}")
        if config.provider == PROVIDER_RELAY and not config.relay_url:
            raise ValueError("SPOTLIGHT_RELAY_URL is required for the relay provider")
        return config
