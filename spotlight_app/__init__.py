# Load environment variables FIRST before any other imports
from dotenv import load_dotenv
load_dotenv()

import os
import time
import uuid
from typing import Any, Dict, Optional

from flask import Flask, jsonify, request, g


def create_app(config_overrides: Optional[Dict[str, Any]] = None):
    """
    Create and configure an instance of the Flask application.

    Args:
        config_overrides: SpotlightConfig field values that win over the
            environment (tests use this)
    """
    app = Flask(__name__, instance_relative_config=True)

    # =============================================================================
    # CONFIGURATION
    # =============================================================================
    from .config import SpotlightConfig

    config = SpotlightConfig.from_env(config_overrides)
    app.config.from_mapping(
        JSON_SORT_KEYS=False,
        HOST=config.host,
        PORT=config.port,
        DEBUG=config.debug,
    )

    # Ensure instance folder exists
    os.makedirs(app.instance_path, exist_ok=True)

    # =============================================================================
    # LOGGING and SERVICES
    # =============================================================================
    from .log import log, debug_log_event
    from .extensions import build_services, EXTENSION_KEY

    services = build_services(config)
    app.extensions[EXTENSION_KEY] = services

    @app.before_request
    def assign_request_id():
        g.request_id = uuid.uuid4().hex[:12]
        g.request_start = time.time()

    @app.after_request
    def debug_request_log(response):
        duration_ms = None
        start_time = getattr(g, 'request_start', None)
        if start_time:
            duration_ms = int((time.time() - start_time) * 1000)
        payload = request.get_json(silent=True) if request.is_json else None
        debug_log_event({
            'event': 'request',
            'request_id': getattr(g, 'request_id', None),
            'method': request.method,
            'path': request.path,
            'action': payload.get('action') if isinstance(payload, dict) else None,
            'status': response.status_code,
            'duration_ms': duration_ms,
            'remote_addr': request.remote_addr,
        })
        if getattr(g, 'request_id', None):
            response.headers['X-Request-ID'] = g.request_id
        return response

    @app.errorhandler(404)
    def not_found(error):
        return jsonify({'success': False, 'error': 'Not found'}), 404

    @app.errorhandler(405)
    def method_not_allowed(error):
        return jsonify({'success': False, 'error': 'Method not allowed'}), 405

    # =============================================================================
    # BLUEPRINTS
    # =============================================================================
    from .routes.spotlight_api import spotlight_bp

    app.register_blueprint(spotlight_bp)

    log(f"Spotlight ready: provider={config.provider}, debounce={config.debounce_ms}ms, "
        f"cache_ttl={config.cache_ttl}s, max_results={config.max_results}")
    return app

# App instance should be created by the caller (run.py or WSGI entrypoint)
