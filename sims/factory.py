"""Application factory for the mock SIMS."""

import logging
from typing import Any, Mapping, Optional

from flask import Flask, Response, jsonify
from werkzeug.exceptions import HTTPException, Forbidden, Unauthorized, \
    BadRequest, MethodNotAllowed, InternalServerError, NotFound

from . import filters
from .app_logging import setup_logger
from .routes import api, oauth
from .services import datastore

logger = logging.getLogger(__name__)


def create_web_app(config: Optional[Mapping[str, Any]] = None) -> Flask:
    """
    Initialize and configure the SIMS application.

    Parameters
    ----------
    config : dict
        Overrides for the values in :mod:`sims.config`. These are applied
        before the database is bound, so ``SQLALCHEMY_DATABASE_URI`` can be
        set here.

    """
    app = Flask('sims')
    app.config.from_pyfile('config.py')
    if config:
        app.config.update(config)

    setup_logger(app.config['LOGLEVEL'], json=app.config['LOG_JSON'])

    datastore.init_app(app)
    app.register_blueprint(oauth.blueprint)
    app.register_blueprint(api.blueprint)

    app.jinja_env.filters['scope_label'] = filters.scope_label

    if app.config['CREATE_DB']:
        with app.app_context():
            datastore.create_all()

    register_error_handlers(app)
    logger.debug('Created app, version %s', app.config['APP_VERSION'])
    return app


def register_error_handlers(app: Flask) -> None:
    """Register error handlers for the Flask app."""
    app.errorhandler(Forbidden)(jsonify_exception)
    app.errorhandler(Unauthorized)(jsonify_exception)
    app.errorhandler(BadRequest)(jsonify_exception)
    app.errorhandler(InternalServerError)(jsonify_exception)
    app.errorhandler(NotFound)(jsonify_exception)
    app.errorhandler(MethodNotAllowed)(jsonify_exception)


def jsonify_exception(error: HTTPException) -> Response:
    """Render exceptions as JSON."""
    exc_resp = error.get_response()
    response: Response = jsonify(error=error.description)
    response.status_code = exc_resp.status_code
    return response
