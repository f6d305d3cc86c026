"""
Controllers for the user-facing half of the authorization code flow.

An LMS sends the user agent to ``/oauth/authorize`` with its ``client_id``,
one of its registered redirect URIs, ``response_type=code`` and an optional
opaque ``state``. The user is shown a login form; when they submit
valid credentials an authorization code is issued and the user agent is
redirected back to the LMS with the code and the unchanged ``state``.

If the request itself is bad (unknown client, unregistered redirect URI,
wrong response type) the user is never redirected: we cannot trust a
redirect URI that we could not verify.
"""

import logging
from datetime import timedelta
from http import HTTPStatus
from typing import Any, Dict, Mapping

from authlib.common.urls import add_params_to_uri
from authlib.oauth2.rfc6749.errors import OAuth2Error, InvalidRequestError, \
    InvalidClientError
from werkzeug.datastructures import MultiDict
from wtforms import Form, PasswordField, StringField
from wtforms.validators import DataRequired

from . import ResponseData
from .. import domain, tokens
from ..services import datastore
from ..services.authenticate import authenticate, AuthenticationFailed

logger = logging.getLogger(__name__)

LOGIN_FAILED = 'Invalid username or password.'


class LoginForm(Form):
    """Log in form."""

    username = StringField('Username', validators=[DataRequired()],
                           render_kw={'placeholder':
                                      'Registration Number or Email'})
    password = PasswordField('Password', validators=[DataRequired()],
                             render_kw={'placeholder': 'Password'})


def begin_authorization(params: Mapping[str, str]) -> ResponseData:
    """
    Provide the login form for a valid authorization request.

    Parameters
    ----------
    params : dict
        Query parameters of the request: ``client_id``, ``redirect_uri``,
        ``response_type`` and (optionally) ``state``.

    Returns
    -------
    dict
        Template data: the login form and the validated request parameters,
        or the OAuth2 error if the request is not valid.
    int
        200 OK, or 400 Bad Request.
    dict
        Headers to add to the response.

    """
    logger.debug('Request for login form')
    try:
        client = _validate_request(params)
    except OAuth2Error as e:
        return _request_error(e)
    return {'form': LoginForm(), 'client': client,
            'params': _passthrough(params)}, HTTPStatus.OK, {}


def complete_login(params: Mapping[str, str], form_data: MultiDict,
                   code_expires_in: int, scope: str) -> ResponseData:
    """
    Authenticate the user, and issue an authorization code to the client.

    Parameters
    ----------
    params : dict
        Query parameters of the request; validated exactly as in
        :func:`begin_authorization`.
    form_data : MultiDict
        Should include ``username`` and ``password``.
    code_expires_in : int
        Lifetime of the authorization code, in seconds.
    scope : str
        Scope granted by the authorization code.

    Returns
    -------
    dict
        Template data, if the login form is to be shown again.
    int
        302 Found if the user has been authenticated; otherwise 400.
    dict
        Headers to add to the response. On success, ``Location`` points
        to the client's redirect URI.

    """
    logger.debug('Login form submitted')
    try:
        client = _validate_request(params)
    except OAuth2Error as e:
        return _request_error(e)

    form = LoginForm(form_data)
    data: Dict[str, Any] = {'form': form, 'client': client,
                            'params': _passthrough(params)}
    if not form.validate():
        logger.debug('Form data is not valid')
        return data, HTTPStatus.BAD_REQUEST, {}

    try:
        user = authenticate(form.username.data, form.password.data)
    except AuthenticationFailed as e:
        logger.debug('Authentication failed: %s', e)
        data.update({'error': LOGIN_FAILED})
        return data, HTTPStatus.BAD_REQUEST, {}

    created = datastore.now()
    code = tokens.new_authorization_code()
    datastore.save_auth_code(domain.AuthorizationCode(
        code=code,
        client_id=client.client_id,
        user_id=user.user_id,
        redirect_uri=params['redirect_uri'],
        scope=scope,
        created=created,
        expires=created + timedelta(seconds=code_expires_in)
    ))
    logger.info('Issued auth code to client %s for user %s',
                client.client_id, user.user_id)

    redirect_params = [('code', code)]
    if params.get('state'):
        redirect_params.append(('state', params['state']))
    location = add_params_to_uri(params['redirect_uri'], redirect_params)
    return {}, HTTPStatus.FOUND, {'Location': location}


def _validate_request(params: Mapping[str, str]) -> domain.Client:
    client_id = params.get('client_id', '')
    redirect_uri = params.get('redirect_uri', '')
    if not client_id or not redirect_uri:
        raise InvalidRequestError('client_id and redirect_uri are required')
    if params.get('response_type') != 'code':
        raise InvalidRequestError('response_type must be code')

    try:
        client = datastore.load_client(client_id)
    except datastore.NoSuchClient as e:
        logger.debug('No such client: %s', e)
        raise InvalidClientError('Unknown client') from e

    if not client.allows_redirect_uri(redirect_uri):
        logger.debug('Redirect URI not registered for %s', client_id)
        raise InvalidRequestError('redirect_uri not allowed for this client')
    return client


def _passthrough(params: Mapping[str, str]) -> Dict[str, str]:
    """Request parameters to carry from the login form back to this flow."""
    passthrough = {
        'client_id': params['client_id'],
        'redirect_uri': params['redirect_uri'],
        'response_type': 'code',
    }
    if params.get('state'):
        passthrough['state'] = params['state']
    return passthrough


def _request_error(error: OAuth2Error) -> ResponseData:
    logger.debug('Invalid authorization request: %s', error.description)
    return {'error': error.error, 'error_description': error.description}, \
        HTTPStatus.BAD_REQUEST, {}
