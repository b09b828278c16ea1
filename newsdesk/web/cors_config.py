# CORS configuration
import logging

from flask import request
from flask_cors import CORS

logger = logging.getLogger(__name__)


def configure_cors(app, origins):
    CORS(app, resources={
        r"/api/*": {
            "origins": list(origins),
            "methods": ["GET", "POST", "OPTIONS"],
            "allow_headers": ["Content-Type", "Authorization", "X-Requested-With"],
        }
    })

    @app.after_request
    def log_cors(response):
        origin = request.headers.get('Origin')
        if origin:
            logger.debug(f"CORS - Origin: {origin} Method: {request.method} Response: {response.status_code}")
        return response

    return app
