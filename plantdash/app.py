"""Application factory for the plant production API."""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, Callable, Mapping, Optional, Union

from flask import Flask
from flask_cors import CORS

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger("plantdash")

from .config import Config
from .middleware.auth import API_KEY_HEADER
from .middleware.errors import register_error_handlers, register_request_logging
from .routes.api import bp as api_bp
from .services.labview import LabviewService
from .services.mock_data import MockDataGenerator


def create_app(
    config_object: Optional[Union[str, Mapping[str, Any], type]] = None,
    clock: Optional[Callable[[], datetime]] = None,
) -> Flask:
    """Create and configure the Flask application.

    ``clock`` returns "now" for every time-dependent payload; tests pass a
    frozen one.
    """
    app = Flask(__name__)

    if config_object is None:
        app.config.from_object(Config)
    elif isinstance(config_object, Mapping):
        app.config.from_object(Config)
        app.config.from_mapping(config_object)
    else:
        app.config.from_object(config_object)

    # Payload fields keep the order they are built in
    app.json.sort_keys = False

    logger.setLevel(app.config.get("LOG_LEVEL", "INFO"))

    CORS(
        app,
        origins=app.config.get("CORS_ORIGIN") or "*",
        supports_credentials=True,
        allow_headers=["Content-Type", "Authorization", API_KEY_HEADER],
    )

    app.extensions["clock"] = clock or datetime.now
    app.extensions["generator"] = MockDataGenerator()
    app.extensions["labview"] = LabviewService.from_config(app.config)

    app.register_blueprint(api_bp)
    register_error_handlers(app)
    register_request_logging(app)

    if not app.config.get("ALLOWED_API_KEYS") and not app.config.get("AUTH_DISABLED"):
        logger.warning("ALLOWED_API_KEYS is empty; every /api request will be rejected")
    logger.info(
        "Data source: %s",
        "mock generator" if app.config.get("USE_MOCK_DATA") else app.config.get("LABVIEW_API_URL"),
    )

    return app


__all__ = ["create_app"]
