"""
================================================================================
Spotlight v1.0 - Application Services
================================================================================
Wires the suggestion pipeline together from a SpotlightConfig and keeps the
resulting singletons on the Flask app (app.extensions['spotlight']).

Provider selection:
  - browser  StaticBrowser (JSON profile, or empty) + BrowserDataProvider,
             with collection enrichment
  - relay    RelayDataProvider + RelayActionEnvironment over HTTP, with
             collection lookups relayed to the privileged side's cache
================================================================================
"""

import logging
from dataclasses import dataclass
from typing import Optional

from flask import current_app

from .config import SpotlightConfig, PROVIDER_RELAY
from .storage import KeyValueStore, create_store
from .actions import ActionDispatcher, ActionEnvironment
from .runner import AsyncRunner
from .providers.base import BaseDataProvider
from .providers.browser import StaticBrowser
from .providers.autocomplete import AutocompleteProvider
from .providers.background import BrowserDataProvider
from .providers.relay import RelayClient, RelayDataProvider, RelayActionEnvironment, RelaySpaceLookup
from .spaces.cache import SpaceCache, SpaceLookup, SPACES_KEY
from .spaces.locator import CollectionLocator
from .search.engine import SpotlightEngine
from .search.scheduler import SuggestionScheduler

logger = logging.getLogger(__name__)


EXTENSION_KEY = 'spotlight'


@dataclass
class SpotlightServices:
    config: SpotlightConfig
    store: KeyValueStore
    provider: BaseDataProvider
    environment: ActionEnvironment
    engine: SpotlightEngine
    scheduler: SuggestionScheduler
    dispatcher: ActionDispatcher
    runner: AsyncRunner
    spaces: Optional[SpaceLookup] = None
    space_cache: Optional[SpaceCache] = None
    browser: Optional[StaticBrowser] = None

    def close(self):
        """Release HTTP clients and stop the background loop."""
        if not self.runner.is_running:
            return
        try:
            self.runner.run(self.provider.close(), timeout=5)
        except Exception as e:
            logger.warning(f"Provider close failed: {e}")
        self.runner.stop()


def build_services(config: SpotlightConfig) -> SpotlightServices:
    """
    Construct every pipeline component for config.

    Args:
        config: Resolved configuration

    Returns:
        SpotlightServices with a running AsyncRunner
    """
    store = create_store(config.redis_url, config.storage_path)
    runner = AsyncRunner()

    browser = None
    space_cache = None
    if config.provider == PROVIDER_RELAY:
        client = RelayClient(config.relay_url, timeout=config.request_timeout)
        provider = RelayDataProvider(client)
        environment = RelayActionEnvironment(client)
        spaces = RelaySpaceLookup(client)
        logger.info(f"Using relay provider at {config.relay_url}")
    else:
        browser = StaticBrowser.from_file(config.profile_path) if config.profile_path else StaticBrowser()
        locator = CollectionLocator(browser, config.collection_folder)
        autocomplete = AutocompleteProvider(
            endpoint=config.autocomplete_url,
            timeout=config.autocomplete_timeout,
            cache_ttl=config.cache_ttl,
        )
        provider = BrowserDataProvider(
            browser,
            store,
            autocomplete=autocomplete,
            locator=locator,
            history_days=config.history_days,
            history_max_results=config.history_max_results,
        )
        environment = browser
        space_cache = SpaceCache(browser, store, locator=locator, folder_title=config.collection_folder)
        spaces = space_cache

        if browser.spaces:
            runner.run(store.set_json(SPACES_KEY, browser.spaces), timeout=config.request_timeout)
            logger.info(f"Seeded {len(browser.spaces)} collections from profile")

    engine = SpotlightEngine(provider, spaces, max_results=config.max_results)
    scheduler = SuggestionScheduler(engine, debounce_delay=config.debounce_delay, cache_ttl=config.cache_ttl)

    return SpotlightServices(
        config=config,
        store=store,
        provider=provider,
        environment=environment,
        engine=engine,
        scheduler=scheduler,
        dispatcher=ActionDispatcher(environment),
        runner=runner,
        spaces=spaces,
        space_cache=space_cache,
        browser=browser,
    )


def get_services() -> SpotlightServices:
    """Services of the current Flask app."""
    return current_app.extensions[EXTENSION_KEY]
