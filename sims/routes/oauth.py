"""Provides Flask integration for the OAuth2 endpoints."""

import logging
from http import HTTPStatus

from flask import Blueprint, Response, current_app, jsonify, \
    make_response, redirect, render_template, request

from ..controllers import authorization, tokens

logger = logging.getLogger(__name__)

blueprint = Blueprint('oauth', __name__, url_prefix='/oauth')


@blueprint.after_request
def apply_response_headers(response: Response) -> Response:
    """Prevent UI redress attacks on the login page."""
    response.headers['Content-Security-Policy'] = "frame-ancestors 'none'"
    response.headers['X-Frame-Options'] = 'DENY'
    return response


@blueprint.route('/authorize', methods=['GET', 'POST'])
def authorize() -> Response:
    """User-facing endpoint for the authorization code workflow."""
    if request.method == 'GET':
        data, code, headers = authorization.begin_authorization(request.args)
    else:
        data, code, headers = authorization.complete_login(
            request.args,
            request.form,
            current_app.config['OAUTH_CODE_EXPIRY'],
            current_app.config['OAUTH_DEFAULT_SCOPE']
        )

    if code == HTTPStatus.FOUND:
        return redirect(headers['Location'], code=code)

    if 'form' not in data:      # The request itself is not valid.
        content = render_template('sims/authorize_error.html', **data)
    else:
        content = render_template('sims/login.html',
                                  pagetitle='Login', **data)
    return make_response(content, code, headers)


@blueprint.route('/token', methods=['POST'])
def issue_token() -> Response:
    """Token endpoint for the LMS backend."""
    data, code, headers = tokens.issue_token(
        request.form,
        current_app.config['OAUTH_TOKEN_EXPIRY'],
        current_app.config['OAUTH_REFRESH_TOKEN_EXPIRY']
    )
    response: Response = jsonify(data)
    response.status_code = code
    response.headers.extend(headers)
    return response
